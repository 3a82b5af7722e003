"""
Error types raised by the scheduling core.
"""

from __future__ import annotations
from typing import Optional


class RecallError(Exception):
    """Base class for all scheduling errors."""


class DuplicateError(RecallError):
    """An entity with the same identity already exists."""

    def __init__(
        self,
        message: str,
        learner_id: Optional[str] = None,
        card_id: Optional[str] = None
    ):
        super().__init__(message)
        self.learner_id = learner_id
        self.card_id = card_id


class NotFoundError(RecallError):
    """The learner, card or item does not exist in the expected scope."""

    def __init__(
        self,
        message: str,
        learner_id: Optional[str] = None,
        card_id: Optional[str] = None
    ):
        super().__init__(message)
        self.learner_id = learner_id
        self.card_id = card_id
