from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import List, Optional

from datastore.ids import MonotonicIdGenerator
from models.records import Feedback, FeedbackRating


class FeedbackStore:

    def __init__(self, ids: Optional[MonotonicIdGenerator] = None) -> None:
        self._items: List[Feedback] = []
        self._ids = ids or MonotonicIdGenerator()
        self._lock = Lock()

    def add(
        self,
        facility_id: int,
        rating: FeedbackRating,
        submitted_at: datetime,
        submitted_by: Optional[str] = None,
    ) -> Feedback:
        with self._lock:
            feedback = Feedback(
                id=self._ids.next_id(),
                facility_id=facility_id,
                rating=rating,
                submitted_at=submitted_at,
                submitted_by=submitted_by,
            )
            self._items.append(feedback)
            return feedback

    def for_facility(self, facility_id: int) -> List[Feedback]:
        with self._lock:
            return [item for item in self._items if item.facility_id == facility_id]

    def recent(self, limit: int) -> List[Feedback]:
        """Newest feedback first, across every facility."""
        if limit <= 0:
            return []
        with self._lock:
            ordered = sorted(
                self._items, key=lambda item: (item.submitted_at, item.id), reverse=True
            )
        return ordered[:limit]
