from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from app.stream import router as stream_router
from logging_config import configure_logging
from services.dashboard import build_default_dashboard


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # Build (and seed) the dashboard before the first request arrives.
    build_default_dashboard()
    try:
        yield
    finally:
        # The broadcaster's condition is bound to this event loop.
        build_default_dashboard.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Crowd Temperature Dashboard",
        description="Live facility temperatures blended from crowd-submitted, vote-weighted readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(stream_router)
    return app

app = create_app()
