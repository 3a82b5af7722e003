"""
Item - Per-(learner, card) Progress Record

Defines the review state an algorithm mutates and the record-answer
workflow that ties an algorithm to a repository.

Main workflow:
1. Load the item (missing item -> NotFoundError)
2. Ask the algorithm for the next progress state (pure, no I/O)
3. Save the updated item in a single repository call
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from recall.constants import LastResult, Outcome
from recall.errors import NotFoundError

if TYPE_CHECKING:
    from recall.algorithms.base import Algorithm
    from recall.repository import Repository


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProgressState:
    """
    Scheduling state of a single item, detached from storage.

    This is all an algorithm ever reads or produces.
    """
    progress_level: int = 0
    due_at: Optional[datetime] = None  # None until the first answer
    consecutive_correct: int = 0
    last_result: LastResult = LastResult.NONE

    # Lifetime counters
    times_right: int = 0
    times_wrong: int = 0
    last_reviewed_at: Optional[datetime] = None

    def __post_init__(self):
        for name in ("progress_level", "consecutive_correct", "times_right", "times_wrong"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        # Accept plain strings from storage layers
        object.__setattr__(self, "last_result", LastResult(self.last_result))

    @property
    def tested(self) -> bool:
        return self.due_at is not None


@dataclass
class Item:
    """
    Review progress of one learner on one card.

    Identity is (learner_id, card_id). `position` is assigned by the
    repository on creation and gives the deck its insertion order.
    """
    learner_id: str
    card_id: str

    progress_level: int = 0
    due_at: Optional[datetime] = None
    consecutive_correct: int = 0
    last_result: LastResult = LastResult.NONE
    times_right: int = 0
    times_wrong: int = 0
    last_reviewed_at: Optional[datetime] = None

    # Storage metadata
    position: int = 0
    added_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        self.last_result = LastResult(self.last_result)

    @property
    def key(self) -> tuple[str, str]:
        return self.learner_id, self.card_id

    @property
    def tested(self) -> bool:
        return self.due_at is not None

    @property
    def progress(self) -> ProgressState:
        return ProgressState(
            progress_level=self.progress_level,
            due_at=self.due_at,
            consecutive_correct=self.consecutive_correct,
            last_result=self.last_result,
            times_right=self.times_right,
            times_wrong=self.times_wrong,
            last_reviewed_at=self.last_reviewed_at
        )

    def with_progress(self, state: ProgressState) -> Item:
        """Return a copy of this item carrying the given progress state."""
        return replace(
            self,
            progress_level=state.progress_level,
            due_at=state.due_at,
            consecutive_correct=state.consecutive_correct,
            last_result=state.last_result,
            times_right=state.times_right,
            times_wrong=state.times_wrong,
            last_reviewed_at=state.last_reviewed_at
        )

    def __repr__(self):
        return (
            f"<Item({self.learner_id}, {self.card_id}, level={self.progress_level}, "
            f"due_at={self.due_at}, last={self.last_result.value})>"
        )


def initialize_new_item(
    learner_id: str,
    card_id: str,
    now: Optional[datetime] = None
) -> Item:
    """
    Initialize an item for a card the learner has just added.

    New items are untested: level 0, no due date.

    Args:
        learner_id: Owning learner
        card_id: Card being studied
        now: Creation time (defaults to now)

    Returns:
        New untested Item (position is assigned by the repository)
    """
    return Item(
        learner_id=learner_id,
        card_id=card_id,
        added_at=now if now is not None else utcnow()
    )


def record_answer(
    repository: Repository,
    algorithm: Algorithm,
    learner_id: str,
    card_id: str,
    outcome: Outcome,
    now: Optional[datetime] = None
) -> None:
    """
    Record a right or wrong answer and persist the rescheduled item.

    Args:
        repository: Storage for items
        algorithm: Strategy computing the next progress state
        learner_id: Owning learner
        card_id: Card that was answered
        outcome: Outcome.CORRECT or Outcome.INCORRECT
        now: Answer time (defaults to now)

    Raises:
        ValueError: outcome is not a valid Outcome
        NotFoundError: the item does not exist, or was removed before the
            save; in that case nothing is written
    """
    outcome = Outcome(outcome)
    if now is None:
        now = utcnow()

    item = repository.find_item(learner_id, card_id)
    if item is None:
        raise NotFoundError(
            f"No item for card {card_id!r} in deck of learner {learner_id!r}",
            learner_id=learner_id,
            card_id=card_id
        )

    new_state = algorithm.advance(item.progress, outcome, now)
    repository.save_item(item.with_progress(new_state))

    logger.debug(
        "Recorded %s for %s/%s with %s: level %d -> %d, due %s",
        outcome.value, learner_id, card_id, algorithm.name,
        item.progress_level, new_state.progress_level, new_state.due_at
    )
