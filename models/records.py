"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(slots=True)
class Facility:
    """A monitored space with a raw sensor temperature and an acceptable range."""

    id: int
    name: str
    current_temp: float
    min_temp: float
    max_temp: float
    icon: str
    last_update: datetime

    def in_range(self, temperature: float) -> bool:
        return self.min_temp <= temperature <= self.max_temp


@dataclass(slots=True)
class TemperatureReading:
    """A crowd-submitted observation. Only the vote counters ever change."""

    id: int
    facility_id: int
    submitted_by: str
    temperature_celsius: float
    submitted_at: datetime
    upvote_count: int = 0
    downvote_count: int = 0

    @property
    def total_votes(self) -> int:
        return self.upvote_count + self.downvote_count


@dataclass(slots=True, frozen=True)
class TemperatureVote:
    id: int
    reading_id: int
    is_upvote: bool
    cast_at: datetime


@dataclass(slots=True, frozen=True)
class WeightedReading:
    """A reading snapshot decorated with its vote-adjusted score and age label."""

    reading: TemperatureReading
    weighted_score: float
    time_since_submission: str


@dataclass(slots=True, frozen=True)
class HistoryPoint:
    id: int
    facility_id: int
    temperature: float
    recorded_at: datetime


class FeedbackRating(str, Enum):
    too_cold = "too-cold"
    perfect = "perfect"
    too_hot = "too-hot"


@dataclass(slots=True, frozen=True)
class Feedback:
    id: int
    facility_id: int
    rating: FeedbackRating
    submitted_at: datetime
    submitted_by: Optional[str] = None
