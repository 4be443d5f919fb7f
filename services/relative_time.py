"""Human readable "time since" labels for submitted readings."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_time_since(submitted_at: datetime, now: datetime) -> str:
    """Label the age of ``submitted_at`` relative to ``now``.

    Each unit is floored before moving to the next one, so 119 seconds is
    still ``"1m ago"`` and 47 hours is ``"1d ago"``. Timestamps in the future
    are treated as fresh.
    """
    minutes = int((now - submitted_at).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"

    days = hours // 24
    return f"{days}d ago"
