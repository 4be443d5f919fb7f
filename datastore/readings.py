from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from datastore.ids import MonotonicIdGenerator
from models.records import TemperatureReading, TemperatureVote
from services.errors import ReadingNotFoundError
from settings import get_settings


class ReadingRepository(Protocol):
    """Storage contract for crowd readings and their votes.

    Implementations must apply ``record_vote`` (vote row plus counter
    increment) as one unit, and must hand out copies so that callers only
    ever see complete snapshots.
    """

    def add_reading(
        self,
        facility_id: int,
        submitted_by: str,
        temperature_celsius: float,
        submitted_at: datetime,
    ) -> TemperatureReading: ...

    def record_vote(
        self, reading_id: int, is_upvote: bool, cast_at: datetime
    ) -> TemperatureVote: ...

    def get_reading(self, reading_id: int) -> Optional[TemperatureReading]: ...

    def recent_readings(self, facility_id: int, limit: int) -> List[TemperatureReading]: ...


@dataclass
class _Snapshot:
    readings: List[TemperatureReading] = field(default_factory=list)
    votes: List[TemperatureVote] = field(default_factory=list)


_SNAPSHOT_ADAPTER = TypeAdapter(_Snapshot)


class InMemoryReadingStore:

    def __init__(
        self,
        persistence_path: Optional[Path] = None,
        reading_ids: Optional[MonotonicIdGenerator] = None,
        vote_ids: Optional[MonotonicIdGenerator] = None,
    ) -> None:
        self._readings: Dict[int, TemperatureReading] = {}
        self._by_facility: Dict[int, List[int]] = defaultdict(list)
        self._votes: List[TemperatureVote] = []
        self._reading_ids = reading_ids or MonotonicIdGenerator()
        self._vote_ids = vote_ids or MonotonicIdGenerator()
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def add_reading(
        self,
        facility_id: int,
        submitted_by: str,
        temperature_celsius: float,
        submitted_at: datetime,
    ) -> TemperatureReading:
        with self._lock:
            reading = TemperatureReading(
                id=self._reading_ids.next_id(),
                facility_id=facility_id,
                submitted_by=submitted_by,
                temperature_celsius=temperature_celsius,
                submitted_at=submitted_at,
            )
            self._readings[reading.id] = reading
            self._by_facility[facility_id].append(reading.id)
            self._persist()
            return replace(reading)

    def record_vote(
        self, reading_id: int, is_upvote: bool, cast_at: datetime
    ) -> TemperatureVote:
        with self._lock:
            reading = self._readings.get(reading_id)
            if reading is None:
                raise ReadingNotFoundError(reading_id)
            vote = TemperatureVote(
                id=self._vote_ids.next_id(),
                reading_id=reading_id,
                is_upvote=is_upvote,
                cast_at=cast_at,
            )
            self._votes.append(vote)
            if is_upvote:
                reading.upvote_count += 1
            else:
                reading.downvote_count += 1
            self._persist()
            return vote

    def get_reading(self, reading_id: int) -> Optional[TemperatureReading]:
        with self._lock:
            reading = self._readings.get(reading_id)
            if reading is None:
                return None
            return replace(reading)

    def recent_readings(self, facility_id: int, limit: int) -> List[TemperatureReading]:
        """Return copies of the newest ``limit`` readings of a facility, newest first."""

        if limit <= 0:
            return []
        with self._lock:
            readings = [self._readings[rid] for rid in self._by_facility.get(facility_id, ())]
            readings.sort(key=lambda r: (r.submitted_at, r.id), reverse=True)
            return [replace(reading) for reading in readings[:limit]]

    def votes_for(self, reading_id: int) -> List[TemperatureVote]:
        with self._lock:
            return [vote for vote in self._votes if vote.reading_id == reading_id]

    def vote_count(self) -> int:
        with self._lock:
            return len(self._votes)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        snapshot = _Snapshot(
            readings=list(self._readings.values()),
            votes=list(self._votes),
        )
        self.persistence_path.write_bytes(_SNAPSHOT_ADAPTER.dump_json(snapshot, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_bytes() or b"{}"
            snapshot = _SNAPSHOT_ADAPTER.validate_json(raw)
        except (OSError, ValidationError):
            snapshot = _Snapshot()

        for reading in snapshot.readings:
            self._readings[reading.id] = reading
            self._by_facility[reading.facility_id].append(reading.id)
            self._reading_ids.advance_past(reading.id)
        for vote in snapshot.votes:
            self._votes.append(vote)
            self._vote_ids.advance_past(vote.id)


@lru_cache
def build_default_reading_store(path: Optional[str] = None) -> InMemoryReadingStore:
    settings = get_settings()
    store_path = settings.persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return InMemoryReadingStore(persistence_path=persistence)
