from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from threading import Lock
from typing import Dict, List, NamedTuple, Optional

from datastore.ids import MonotonicIdGenerator
from models.records import Facility


class FacilitySeed(NamedTuple):
    name: str
    current_temp: float
    min_temp: float
    max_temp: float
    icon: str


DEFAULT_FACILITIES = (
    FacilitySeed("Sauna 1", 95.0, 80.0, 100.0, "ri-fire-line"),
    FacilitySeed("Sauna 2", 85.0, 75.0, 95.0, "ri-fire-line"),
    FacilitySeed("Steam Room", 45.0, 40.0, 50.0, "ri-cloud-line"),
    FacilitySeed("Cold Plunge", 7.0, 5.0, 10.0, "ri-snowy-line"),
)


class FacilityStore:

    def __init__(self, ids: Optional[MonotonicIdGenerator] = None) -> None:
        self._items: Dict[int, Facility] = {}
        self._ids = ids or MonotonicIdGenerator()
        self._lock = Lock()

    def create(self, seed: FacilitySeed, created_at: datetime) -> Facility:
        with self._lock:
            facility = Facility(
                id=self._ids.next_id(),
                name=seed.name,
                current_temp=seed.current_temp,
                min_temp=seed.min_temp,
                max_temp=seed.max_temp,
                icon=seed.icon,
                last_update=created_at,
            )
            self._items[facility.id] = facility
            return replace(facility)

    def get(self, facility_id: int) -> Optional[Facility]:
        with self._lock:
            facility = self._items.get(facility_id)
            if facility is None:
                return None
            return replace(facility)

    def scan(self) -> List[Facility]:
        """Return copies of all facilities ordered by id."""

        with self._lock:
            return [replace(self._items[key]) for key in sorted(self._items)]

    def update_temperature(
        self, facility_id: int, temperature: float, updated_at: datetime
    ) -> Optional[Facility]:
        with self._lock:
            facility = self._items.get(facility_id)
            if facility is None:
                return None
            facility.current_temp = temperature
            facility.last_update = updated_at
            return replace(facility)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
