"""Crowd comfort feedback summaries."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from models.records import FeedbackRating


@dataclass
class FeedbackCounts:
    """Per-rating counts with whole-number percentages of the total."""

    too_cold: int = 0
    too_cold_percent: int = 0
    perfect: int = 0
    perfect_percent: int = 0
    too_hot: int = 0
    too_hot_percent: int = 0

    @property
    def total(self) -> int:
        return self.too_cold + self.perfect + self.too_hot

    @property
    def satisfaction_percent(self) -> int:
        return self.perfect_percent if self.total else 0


def _percent(part: int, total: int) -> int:
    # half-up, so 12.5 -> 13
    if total == 0:
        return 0
    return math.floor(part * 100 / total + 0.5)


def summarize_feedback(ratings: Iterable[FeedbackRating]) -> FeedbackCounts:
    counts = FeedbackCounts()
    for raw in ratings:
        rating = FeedbackRating(raw)
        if rating is FeedbackRating.too_cold:
            counts.too_cold += 1
        elif rating is FeedbackRating.perfect:
            counts.perfect += 1
        elif rating is FeedbackRating.too_hot:
            counts.too_hot += 1

    total = counts.total
    counts.too_cold_percent = _percent(counts.too_cold, total)
    counts.perfect_percent = _percent(counts.perfect, total)
    counts.too_hot_percent = _percent(counts.too_hot, total)
    return counts
