"""Server-Sent Events stream of live dashboard updates."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api import facilities_payload, get_dashboard, recent_feedbacks_payload
from models.events import DashboardEvent, EventType
from services.dashboard import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter()


def format_sse(event: DashboardEvent) -> str:
    data = json.dumps(event.model_dump(mode="json"))
    return f"event: {event.type.value}\ndata: {data}\n\n"


@router.get("/events/stream", summary="Stream live dashboard updates.")
async def stream_events(
    dashboard: DashboardService = Depends(get_dashboard),
) -> StreamingResponse:
    """
    Open a Server-Sent Events connection.

    The connection opens with a ``facilities_update`` snapshot and the
    ``recent_feedbacks`` feed, followed by every event published afterwards.
    """

    now = time.time()
    snapshots = [
        DashboardEvent(
            type=EventType.facilities_update,
            payload=facilities_payload(dashboard),
            timestamp=now,
        ),
        DashboardEvent(
            type=EventType.recent_feedbacks,
            payload=recent_feedbacks_payload(dashboard),
            timestamp=now,
        ),
    ]

    async def event_generator() -> AsyncGenerator[str, None]:
        async with dashboard.broadcaster.stream() as events:
            for snapshot in snapshots:
                yield format_sse(snapshot)
            try:
                async for event in events:
                    yield format_sse(event)
            except Exception as exc:
                logger.exception("Live update stream failed", extra={"reason": str(exc)})
                error_data = json.dumps({"error": str(exc)})
                yield f"event: error\ndata: {error_data}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
