"""
Algorithm - Spaced Repetition Strategy Contract

Pure scheduling logic (no database calls). A strategy maps an item's current
progress state and an answer outcome to the next progress state.

Shared update rules:
- Correct answer: move to next_level(), schedule now + interval(new level)
- Wrong answer: drop to the floor level, due immediately

Subclasses only decide how levels progress and how long each level waits.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timedelta

from recall.constants import LastResult, Outcome
from recall.item import ProgressState


class Algorithm(ABC):
    """Base class for scheduling strategies."""

    name: str = "algorithm"

    # Level a wrong answer resets to
    floor: int = 0

    # Level at or above which a scheduled item counts as mastered
    mastery_level: int = 1

    @abstractmethod
    def next_level(self, level: int) -> int:
        """Level reached after a correct answer at `level`."""

    @abstractmethod
    def interval(self, level: int) -> timedelta:
        """Wait before an item at `level` is due again."""

    def advance(
        self,
        state: ProgressState,
        outcome: Outcome,
        now: datetime
    ) -> ProgressState:
        """
        Compute the progress state after an answer.

        A never-tested state (no due date) answered correctly yields the
        level-1 result whatever level it carries.

        Args:
            state: Current progress state
            outcome: Outcome.CORRECT or Outcome.INCORRECT
            now: Answer time

        Returns:
            New ProgressState (the input is not modified)

        Raises:
            ValueError: outcome is not a valid Outcome
        """
        outcome = Outcome(outcome)

        if outcome is Outcome.CORRECT:
            # Untested items start from level 0 regardless of any stored level
            start = state.progress_level if state.tested else 0
            level = self.next_level(start)
            return replace(
                state,
                progress_level=level,
                due_at=now + self.interval(level),
                consecutive_correct=state.consecutive_correct + 1,
                last_result=LastResult.CORRECT,
                times_right=state.times_right + 1,
                last_reviewed_at=now
            )

        return replace(
            state,
            progress_level=self.floor,
            due_at=now,
            consecutive_correct=0,
            last_result=LastResult.INCORRECT,
            times_wrong=state.times_wrong + 1,
            last_reviewed_at=now
        )

    def is_due(self, state: ProgressState, now: datetime) -> bool:
        """True if the item has been tested and its due date has been reached."""
        return state.due_at is not None and state.due_at <= now

    def is_mastered(self, state: ProgressState, now: datetime) -> bool:
        """True if the item is scheduled in the future at or above mastery level."""
        return (
            state.tested
            and not self.is_due(state, now)
            and state.progress_level >= self.mastery_level
        )

    def __repr__(self):
        return f"<{type(self).__name__}(floor={self.floor}, mastery_level={self.mastery_level})>"
