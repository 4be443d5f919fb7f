"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import FeedbackRating, WeightedReading
from services.dashboard import FacilityStatus, RecentFeedback, TemperatureAlert
from services.units import TemperatureUnit


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class FacilityResponse(_FromAttributes):
    """Facility as displayed: ``current_temp`` carries the crowd estimate when one exists."""

    id: int
    name: str
    current_temp: float
    min_temp: float
    max_temp: float
    icon: str
    last_update: datetime


class FeedbackCountsResponse(_FromAttributes):
    too_cold: int = Field(..., ge=0)
    too_cold_percent: int = Field(..., ge=0, le=100)
    perfect: int = Field(..., ge=0)
    perfect_percent: int = Field(..., ge=0, le=100)
    too_hot: int = Field(..., ge=0)
    too_hot_percent: int = Field(..., ge=0, le=100)


class ReadingResponse(_FromAttributes):
    id: int
    facility_id: int
    submitted_by: str
    temperature_celsius: float
    upvote_count: int = Field(..., ge=0)
    downvote_count: int = Field(..., ge=0)
    submitted_at: datetime


class WeightedReadingResponse(ReadingResponse):
    weighted_score: float
    time_since_submission: str

    @classmethod
    def from_weighted(cls, item: WeightedReading) -> "WeightedReadingResponse":
        base = ReadingResponse.model_validate(item.reading)
        return cls(
            **base.model_dump(),
            weighted_score=item.weighted_score,
            time_since_submission=item.time_since_submission,
        )


class FacilityStatusResponse(FacilityResponse):
    """Full dashboard card for one facility."""

    raw_temp: float = Field(..., description="Last sensor value before crowd weighting.")
    weighted_temp: Optional[float] = None
    in_range: bool
    feedback: FeedbackCountsResponse
    total_votes: int = Field(..., ge=0)
    satisfaction_percent: int = Field(..., ge=0, le=100)
    recent_readings: List[WeightedReadingResponse] = Field(default_factory=list)

    @classmethod
    def from_status(cls, status: FacilityStatus) -> "FacilityStatusResponse":
        facility = FacilityResponse.model_validate(status.facility)
        return cls(
            **facility.model_dump(),
            raw_temp=status.raw_temp,
            weighted_temp=status.weighted_temp,
            in_range=status.in_range,
            feedback=FeedbackCountsResponse.model_validate(status.feedback),
            total_votes=status.total_votes,
            satisfaction_percent=status.satisfaction_percent,
            recent_readings=[
                WeightedReadingResponse.from_weighted(item) for item in status.recent_readings
            ],
        )


class ReadingSubmission(BaseModel):
    temperature: float = Field(..., description="Observed temperature in ``unit``.")
    unit: TemperatureUnit = TemperatureUnit.celsius
    submitted_by: Optional[str] = Field(None, max_length=64)


class VoteRequest(BaseModel):
    is_upvote: bool


class VoteResponse(_FromAttributes):
    id: int
    reading_id: int
    is_upvote: bool
    cast_at: datetime


class WeightedTemperatureResponse(BaseModel):
    facility_id: int
    weighted_temperature: Optional[float] = Field(
        None, description="Vote-weighted estimate, null when no readings exist."
    )


class HistoryPointResponse(_FromAttributes):
    id: int
    facility_id: int
    temperature: float
    recorded_at: datetime


class FeedbackRequest(BaseModel):
    rating: FeedbackRating
    submitted_by: Optional[str] = Field(None, max_length=64)


class FeedbackResponse(_FromAttributes):
    id: int
    facility_id: int
    rating: FeedbackRating
    submitted_by: Optional[str] = None
    submitted_at: datetime


class RecentFeedbackResponse(FeedbackResponse):
    facility_name: str
    username: str

    @classmethod
    def from_entry(cls, entry: RecentFeedback) -> "RecentFeedbackResponse":
        return cls(
            **FeedbackResponse.model_validate(entry.feedback).model_dump(),
            facility_name=entry.facility_name,
            username=entry.username,
        )


class TemperatureUpdate(BaseModel):
    temperature: float = Field(..., description="Raw sensor value in Celsius.")


class AlertResponse(_FromAttributes):
    facility_id: int
    facility_name: str
    temperature: float
    bound: float
    direction: str
    message: str

    @classmethod
    def from_alert(cls, alert: TemperatureAlert) -> "AlertResponse":
        return cls.model_validate(alert)


class TemperatureUpdateResponse(BaseModel):
    facility: FacilityResponse
    alert: Optional[AlertResponse] = None
