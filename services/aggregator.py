"""Weighted aggregation of crowd-submitted temperature readings."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Iterator, Optional, Tuple

from datastore.history import TemperatureHistoryLog
from datastore.readings import ReadingRepository
from models.records import (
    Facility,
    TemperatureReading,
    TemperatureVote,
    WeightedReading,
)
from services.relative_time import format_time_since, utc_now
from services.units import require_finite

# Number of most recent readings blended into a facility estimate.
ESTIMATE_WINDOW = 10

Clock = Callable[[], datetime]
TimeWeight = Callable[[TemperatureReading, datetime], float]


def constant_time_weight(reading: TemperatureReading, now: datetime) -> float:
    """Recency weight of a reading. Every reading currently counts equally."""
    return 1.0


def weighted_score(reading: TemperatureReading) -> float:
    """Scale a reading by its net vote ratio.

    Unvoted readings keep their raw value. Otherwise the multiplier runs from
    0 (only downvotes) to 2 (only upvotes) and is deliberately not clamped.
    """
    total = reading.total_votes
    if total == 0:
        return reading.temperature_celsius
    net = reading.upvote_count - reading.downvote_count
    return reading.temperature_celsius * (1 + net / total)


def overlay_estimate(facility: Facility, estimate: Optional[float]) -> Facility:
    """Copy of ``facility`` showing ``estimate`` as its current temperature, when present."""
    if estimate is None:
        return replace(facility)
    return replace(facility, current_temp=estimate)


@dataclass(frozen=True)
class RecentReadings:
    """Newest-first weighted readings over one snapshot.

    Scores and labels are computed while iterating, and iterating again
    recomputes them from the same snapshot.
    """

    readings: Tuple[TemperatureReading, ...]
    now: datetime

    def __iter__(self) -> Iterator[WeightedReading]:
        for reading in self.readings:
            yield WeightedReading(
                reading=replace(reading),
                weighted_score=weighted_score(reading),
                time_since_submission=format_time_since(reading.submitted_at, self.now),
            )

    def __len__(self) -> int:
        return len(self.readings)


class TemperatureAggregator:
    """Owns crowd readings and votes and turns them into per-facility estimates."""

    def __init__(
        self,
        readings: ReadingRepository,
        history: TemperatureHistoryLog,
        clock: Clock = utc_now,
        time_weight: TimeWeight = constant_time_weight,
    ) -> None:
        self._readings = readings
        self._history = history
        self._clock = clock
        self._time_weight = time_weight

    def submit_reading(
        self, facility_id: int, submitter_name: str, temperature_celsius: float
    ) -> TemperatureReading:
        temperature = require_finite(temperature_celsius)
        reading = self._readings.add_reading(
            facility_id=facility_id,
            submitted_by=submitter_name,
            temperature_celsius=temperature,
            submitted_at=self._clock(),
        )
        self._history.append(facility_id, reading.temperature_celsius, reading.submitted_at)
        return reading

    def cast_vote(self, reading_id: int, is_upvote: bool) -> TemperatureVote:
        """Record a vote; raises ``ReadingNotFoundError`` for unknown readings."""
        return self._readings.record_vote(reading_id, bool(is_upvote), self._clock())

    def get_recent_readings(self, facility_id: int, limit: int) -> RecentReadings:
        snapshot = self._readings.recent_readings(facility_id, limit)
        return RecentReadings(readings=tuple(snapshot), now=self._clock())

    def calculate_weighted_temperature(self, facility_id: int) -> Optional[float]:
        readings = self._readings.recent_readings(facility_id, ESTIMATE_WINDOW)
        if not readings:
            return None

        now = self._clock()
        total_weight = 0.0
        weighted_sum = 0.0
        for reading in readings:
            weight = self._time_weight(reading, now) * (reading.upvote_count + 1)
            total_weight += weight
            weighted_sum += reading.temperature_celsius * weight

        if total_weight <= 0:
            return None
        return weighted_sum / total_weight

    def facility_view(self, facility: Facility) -> Facility:
        return self.estimate_view(facility)[0]

    def estimate_view(self, facility: Facility) -> Tuple[Facility, Optional[float]]:
        """Display copy of ``facility`` along with the estimate shown on it, if any."""
        estimate = self.calculate_weighted_temperature(facility.id)
        return overlay_estimate(facility, estimate), estimate
