"""
Leitner System

Discrete boxes 0..N. A right answer promotes the item one box (capped at N),
a wrong answer sends it back to box 0. Each box has a fixed review interval
that grows with the box index.
"""

from __future__ import annotations
from datetime import timedelta
from typing import Optional, Sequence

from recall.algorithms.base import Algorithm
from recall.constants import LEITNER_INTERVAL_DAYS


class LeitnerSystem(Algorithm):
    """
    Box-based scheduling.

    The interval table has one entry per box, so the number of boxes is
    len(interval_days) and the top box (the mastery box) is its last index.
    """

    name = "leitner"

    def __init__(self, interval_days: Optional[Sequence[float]] = None):
        days = tuple(interval_days) if interval_days is not None else LEITNER_INTERVAL_DAYS
        if len(days) < 2:
            raise ValueError("Leitner interval table needs at least two boxes")
        if days[0] < 0:
            raise ValueError("Leitner intervals must be non-negative")
        if any(later <= earlier for earlier, later in zip(days, days[1:])):
            raise ValueError(f"Leitner intervals must be strictly increasing, got {days}")

        self.interval_days = days
        self.floor = 0
        self.mastery_level = self.max_box

    @property
    def max_box(self) -> int:
        return len(self.interval_days) - 1

    def next_level(self, level: int) -> int:
        return min(level + 1, self.max_box)

    def interval(self, level: int) -> timedelta:
        # Levels above the top box (e.g. after shrinking the table) read as the top box
        box = min(max(level, 0), self.max_box)
        return timedelta(days=self.interval_days[box])

    def __repr__(self):
        return f"<LeitnerSystem(boxes=0..{self.max_box}, interval_days={self.interval_days})>"
