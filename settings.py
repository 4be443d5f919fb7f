from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_PERSISTENCE_PATH_ENV = "DASHBOARD_PERSISTENCE_PATH"
_RECENT_LIMIT_ENV = "DASHBOARD_RECENT_READINGS_LIMIT"
_HISTORY_HOURS_ENV = "DASHBOARD_HISTORY_HOURS"
_SEED_FACILITIES_ENV = "DASHBOARD_SEED_FACILITIES"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    persistence_path: Optional[str]
    recent_readings_limit: int
    history_hours: int
    seed_facilities: bool
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        persistence_path=_read_optional_env(_PERSISTENCE_PATH_ENV, None),
        recent_readings_limit=_read_positive_int(_RECENT_LIMIT_ENV, 5),
        history_hours=_read_positive_int(_HISTORY_HOURS_ENV, 24),
        seed_facilities=_read_bool(_SEED_FACILITIES_ENV, True),
        log_level=_read_log_level("INFO"),
    )
