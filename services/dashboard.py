"""Orchestration of facilities, crowd readings, feedback and live updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache
from typing import List, Optional, Union

from datastore.facilities import DEFAULT_FACILITIES, FacilityStore
from datastore.feedback import FeedbackStore
from datastore.history import TemperatureHistoryLog
from datastore.readings import ReadingRepository, build_default_reading_store
from models.records import (
    Facility,
    Feedback,
    FeedbackRating,
    HistoryPoint,
    TemperatureReading,
    TemperatureVote,
    WeightedReading,
)
from services.aggregator import Clock, TemperatureAggregator
from services.broadcaster import DashboardBroadcaster
from services.errors import FacilityNotFoundError, InvalidArgumentError, ReadingNotFoundError
from services.feedback import FeedbackCounts, summarize_feedback
from services.relative_time import utc_now
from services.units import TemperatureUnit, require_finite, to_celsius
from settings import get_settings

logger = logging.getLogger(__name__)

ANONYMOUS_SUBMITTER = "Anonymous"
UNKNOWN_FACILITY = "Unknown"
RECENT_FEEDBACKS_LIMIT = 5


@dataclass
class FacilityStatus:
    """Display-ready facility state with crowd data folded in."""

    facility: Facility
    raw_temp: float
    weighted_temp: Optional[float]
    feedback: FeedbackCounts
    recent_readings: List[WeightedReading] = field(default_factory=list)

    @property
    def total_votes(self) -> int:
        return self.feedback.total

    @property
    def satisfaction_percent(self) -> int:
        return self.feedback.satisfaction_percent

    @property
    def in_range(self) -> bool:
        return self.facility.in_range(self.facility.current_temp)


@dataclass(frozen=True)
class TemperatureAlert:
    facility_id: int
    facility_name: str
    temperature: float
    bound: float
    direction: str

    @property
    def message(self) -> str:
        return (
            f"{self.facility_name} is currently {self.direction} the recommended "
            f"temperature range ({self.bound:g}°)."
        )


@dataclass(frozen=True)
class RecentFeedback:
    """Feedback entry labelled for the live activity feed."""

    feedback: Feedback
    facility_name: str
    username: str


def check_range(facility: Facility, temperature: float) -> Optional[TemperatureAlert]:
    """Alert when ``temperature`` falls outside the facility's configured range."""
    if temperature > facility.max_temp:
        direction, bound = "above", facility.max_temp
    elif temperature < facility.min_temp:
        direction, bound = "below", facility.min_temp
    else:
        return None
    return TemperatureAlert(
        facility_id=facility.id,
        facility_name=facility.name,
        temperature=temperature,
        bound=bound,
        direction=direction,
    )


class DashboardService:
    """Coordinates the stores, the aggregator and the live event relay."""

    def __init__(
        self,
        facilities: FacilityStore,
        readings: ReadingRepository,
        history: TemperatureHistoryLog,
        feedback: FeedbackStore,
        broadcaster: DashboardBroadcaster,
        clock: Clock = utc_now,
        recent_readings_limit: int = 5,
        history_hours: int = 24,
    ) -> None:
        self.facilities = facilities
        self.history = history
        self.feedback = feedback
        self.broadcaster = broadcaster
        self.aggregator = TemperatureAggregator(readings=readings, history=history, clock=clock)
        self._clock = clock
        self.recent_readings_limit = recent_readings_limit
        self.history_hours = history_hours

    def seed_default_facilities(self) -> List[Facility]:
        if len(self.facilities):
            return []
        now = self._clock()
        created = [self.facilities.create(seed, created_at=now) for seed in DEFAULT_FACILITIES]
        logger.info("Seeded %d default facilities", len(created))
        return created

    def list_facilities(self) -> List[FacilityStatus]:
        return [self._status(facility) for facility in self.facilities.scan()]

    def get_facility_status(self, facility_id: int) -> FacilityStatus:
        return self._status(self._require_facility(facility_id))

    def submit_reading(
        self,
        facility_id: int,
        temperature: float,
        submitted_by: Optional[str] = None,
        unit: Union[TemperatureUnit, str] = TemperatureUnit.celsius,
    ) -> TemperatureReading:
        self._require_facility(facility_id)
        celsius = to_celsius(require_finite(temperature), unit)
        name = (submitted_by or "").strip() or ANONYMOUS_SUBMITTER
        reading = self.aggregator.submit_reading(facility_id, name, celsius)
        logger.info(
            "Accepted temperature reading",
            extra={
                "facility_id": facility_id,
                "reading_id": reading.id,
                "temperature_c": reading.temperature_celsius,
            },
        )
        return reading

    def cast_vote(self, reading_id: int, is_upvote: bool) -> TemperatureVote:
        try:
            vote = self.aggregator.cast_vote(reading_id, is_upvote)
        except ReadingNotFoundError:
            logger.warning(
                "Rejected vote", extra={"reading_id": reading_id, "reason": "unknown reading"}
            )
            raise
        logger.info(
            "Recorded vote",
            extra={"reading_id": reading_id, "vote_id": vote.id, "is_upvote": vote.is_upvote},
        )
        return vote

    def recent_readings(
        self, facility_id: int, limit: Optional[int] = None
    ) -> List[WeightedReading]:
        self._require_facility(facility_id)
        count = self.recent_readings_limit if limit is None else limit
        return list(self.aggregator.get_recent_readings(facility_id, count))

    def weighted_temperature(self, facility_id: int) -> Optional[float]:
        self._require_facility(facility_id)
        return self.aggregator.calculate_weighted_temperature(facility_id)

    def temperature_history(
        self, facility_id: int, hours: Optional[int] = None
    ) -> List[HistoryPoint]:
        self._require_facility(facility_id)
        window = self.history_hours if hours is None else hours
        if window <= 0:
            raise InvalidArgumentError("History window must be a positive number of hours.")
        cutoff = self._clock() - timedelta(hours=window)
        return self.history.series(facility_id, since=cutoff)

    def record_feedback(
        self,
        facility_id: int,
        rating: Union[FeedbackRating, str],
        submitted_by: Optional[str] = None,
    ) -> Feedback:
        self._require_facility(facility_id)
        try:
            parsed = FeedbackRating(rating)
        except ValueError as exc:
            raise InvalidArgumentError(f"Unsupported feedback rating {rating!r}.") from exc
        item = self.feedback.add(
            facility_id=facility_id,
            rating=parsed,
            submitted_at=self._clock(),
            submitted_by=submitted_by,
        )
        logger.info(
            "Recorded feedback",
            extra={"facility_id": facility_id, "rating": parsed.value},
        )
        return item

    def recent_feedbacks(self, limit: int = RECENT_FEEDBACKS_LIMIT) -> List[RecentFeedback]:
        """Newest feedback across all facilities, labelled with facility and submitter names."""
        names = {facility.id: facility.name for facility in self.facilities.scan()}
        return [
            RecentFeedback(
                feedback=item,
                facility_name=names.get(item.facility_id, UNKNOWN_FACILITY),
                username=item.submitted_by or ANONYMOUS_SUBMITTER,
            )
            for item in self.feedback.recent(limit)
        ]

    def update_facility_temperature(
        self, facility_id: int, temperature: float
    ) -> tuple[Facility, Optional[TemperatureAlert]]:
        """Store a new raw sensor value and report whether it left the facility's range."""
        value = require_finite(temperature)
        now = self._clock()
        facility = self.facilities.update_temperature(facility_id, value, updated_at=now)
        if facility is None:
            raise FacilityNotFoundError(facility_id)
        self.history.append(facility_id, value, now)

        logger.info(
            "Updated facility temperature",
            extra={"facility_id": facility_id, "temperature_c": value},
        )
        alert = check_range(facility, value)
        if alert is not None:
            logger.warning(
                alert.message,
                extra={"facility_id": facility_id, "temperature_c": value},
            )
        return facility, alert

    def _require_facility(self, facility_id: int) -> Facility:
        facility = self.facilities.get(facility_id)
        if facility is None:
            raise FacilityNotFoundError(facility_id)
        return facility

    def _status(self, facility: Facility) -> FacilityStatus:
        view, estimate = self.aggregator.estimate_view(facility)
        ratings = [item.rating for item in self.feedback.for_facility(facility.id)]
        return FacilityStatus(
            facility=view,
            raw_temp=facility.current_temp,
            weighted_temp=estimate,
            feedback=summarize_feedback(ratings),
            recent_readings=list(
                self.aggregator.get_recent_readings(facility.id, self.recent_readings_limit)
            ),
        )


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard with in-memory stores."""
    settings = get_settings()
    dashboard = DashboardService(
        facilities=FacilityStore(),
        readings=build_default_reading_store(),
        history=TemperatureHistoryLog(),
        feedback=FeedbackStore(),
        broadcaster=DashboardBroadcaster(),
        recent_readings_limit=settings.recent_readings_limit,
        history_hours=settings.history_hours,
    )
    if settings.seed_facilities:
        dashboard.seed_default_facilities()
    return dashboard
