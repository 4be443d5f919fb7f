from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Dict, List, Optional

from datastore.ids import MonotonicIdGenerator
from models.records import HistoryPoint


class TemperatureHistoryLog:
    """Append-only, unweighted temperature series per facility, used for charts."""

    def __init__(self, ids: Optional[MonotonicIdGenerator] = None) -> None:
        self._points: Dict[int, List[HistoryPoint]] = {}
        self._ids = ids or MonotonicIdGenerator()
        self._lock = Lock()

    def append(self, facility_id: int, temperature: float, recorded_at: datetime) -> HistoryPoint:
        point = HistoryPoint(
            id=self._ids.next_id(),
            facility_id=facility_id,
            temperature=temperature,
            recorded_at=recorded_at,
        )
        with self._lock:
            self._points.setdefault(facility_id, []).append(point)
        return point

    def series(self, facility_id: int, since: Optional[datetime] = None) -> List[HistoryPoint]:
        with self._lock:
            points = list(self._points.get(facility_id, ()))
        if since is not None:
            points = [point for point in points if point.recorded_at >= since]
        return sorted(points, key=lambda point: (point.recorded_at, point.id))
