"""Live update events pushed to dashboard viewers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    facilities_update = "facilities_update"
    temperature_alert = "temperature_alert"
    reading_submitted = "reading_submitted"
    reading_voted = "reading_voted"
    recent_feedbacks = "recent_feedbacks"


class DashboardEvent(BaseModel):
    """A single broadcast message."""

    type: EventType
    payload: Any = Field(None, description="JSON-compatible event body")
    timestamp: float = Field(..., description="Unix timestamp when the event was published")
