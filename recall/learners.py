"""
Learner lifecycle helpers.
"""

from __future__ import annotations
import logging
import uuid
from typing import Optional

from recall.errors import NotFoundError
from recall.repository import Repository
from recall.schemas import Learner


logger = logging.getLogger(__name__)


def create_learner(
    repository: Repository,
    name: str = "",
    learner_id: Optional[str] = None
) -> Learner:
    """
    Register a new learner.

    Args:
        repository: Storage for learners
        name: Display name
        learner_id: Explicit id (defaults to a random uuid hex)

    Returns:
        The stored Learner

    Raises:
        DuplicateError: a learner with this id already exists
    """
    learner = Learner(id=learner_id or uuid.uuid4().hex, name=name)
    return repository.add_learner(learner)


def destroy_learner(repository: Repository, learner_id: str) -> int:
    """
    Delete a learner together with every item in their deck.

    Cards are shared content and are never deleted.

    Returns:
        Number of items removed

    Raises:
        NotFoundError: the learner does not exist
    """
    if repository.get_learner(learner_id) is None:
        raise NotFoundError(f"Learner {learner_id!r} does not exist", learner_id=learner_id)

    removed = repository.delete_all_items(learner_id)
    repository.delete_learner(learner_id)
    logger.info("Destroyed learner %s and %d items", learner_id, removed)
    return removed
