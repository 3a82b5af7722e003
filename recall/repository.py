"""
Repository - Storage Boundary for Learners, Cards and Items

The scheduling core reads and writes through this interface only.
InMemoryRepository is the reference implementation; database.SqlRepository
persists the same contract with SQLAlchemy.
"""

from __future__ import annotations
import itertools
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable, Optional

from recall.errors import DuplicateError, NotFoundError
from recall.item import Item, ProgressState, initialize_new_item
from recall.schemas import Card, Learner


class Repository(ABC):
    """Storage contract consumed by Deck and record_answer."""

    # ---- Items ----

    @abstractmethod
    def find_item(self, learner_id: str, card_id: str) -> Optional[Item]:
        """Return the item, or None if the learner has not added the card."""

    @abstractmethod
    def create_item(
        self,
        learner_id: str,
        card_id: str,
        initial_state: Optional[ProgressState] = None
    ) -> Item:
        """
        Create an item and assign its position.

        Raises:
            DuplicateError: an item already exists for (learner_id, card_id)
        """

    @abstractmethod
    def save_item(self, item: Item) -> None:
        """
        Persist every mutable field of an existing item atomically.

        Raises:
            NotFoundError: the item no longer exists
        """

    @abstractmethod
    def delete_item(self, learner_id: str, card_id: str) -> None:
        """Delete the item if present. Silent when absent."""

    @abstractmethod
    def list_items(self, learner_id: str) -> list[Item]:
        """All items of a learner, in no particular order."""

    @abstractmethod
    def delete_all_items(self, learner_id: str) -> int:
        """Delete every item of a learner. Returns how many were deleted."""

    # ---- Learners ----

    @abstractmethod
    def add_learner(self, learner: Learner) -> Learner:
        """Store a learner. Raises DuplicateError for an existing id."""

    @abstractmethod
    def get_learner(self, learner_id: str) -> Optional[Learner]:
        """Return the learner, or None."""

    @abstractmethod
    def delete_learner(self, learner_id: str) -> None:
        """Delete the learner if present. Items must be removed by the caller."""

    # ---- Cards ----

    @abstractmethod
    def add_card(self, card: Card) -> Card:
        """Store a card. Raises DuplicateError for an existing id."""

    @abstractmethod
    def get_card(self, card_id: str) -> Optional[Card]:
        """Return the card, or None."""

    @abstractmethod
    def get_cards(self, card_ids: Iterable[str]) -> dict[str, Card]:
        """Return the cards that exist among card_ids, keyed by id."""


class InMemoryRepository(Repository):
    """
    Dict-backed repository.

    Items are copied on the way in and out, so a caller holding an Item
    never sees (or causes) changes that were not saved.
    """

    def __init__(self):
        self._items: dict[tuple[str, str], Item] = {}
        self._learners: dict[str, Learner] = {}
        self._cards: dict[str, Card] = {}
        self._positions = itertools.count(1)

    def find_item(self, learner_id: str, card_id: str) -> Optional[Item]:
        item = self._items.get((learner_id, card_id))
        return replace(item) if item is not None else None

    def create_item(
        self,
        learner_id: str,
        card_id: str,
        initial_state: Optional[ProgressState] = None
    ) -> Item:
        key = (learner_id, card_id)
        if key in self._items:
            raise DuplicateError(
                f"Card {card_id!r} is already in the deck of learner {learner_id!r}",
                learner_id=learner_id,
                card_id=card_id
            )

        item = initialize_new_item(learner_id, card_id)
        if initial_state is not None:
            item = item.with_progress(initial_state)
        item.position = next(self._positions)

        self._items[key] = item
        return replace(item)

    def save_item(self, item: Item) -> None:
        stored = self._items.get(item.key)
        if stored is None:
            raise NotFoundError(
                f"Item {item.card_id!r} of learner {item.learner_id!r} no longer exists",
                learner_id=item.learner_id,
                card_id=item.card_id
            )
        # Identity and storage metadata are owned by the repository
        self._items[item.key] = replace(item, position=stored.position, added_at=stored.added_at)

    def delete_item(self, learner_id: str, card_id: str) -> None:
        self._items.pop((learner_id, card_id), None)

    def list_items(self, learner_id: str) -> list[Item]:
        return [replace(item) for key, item in self._items.items() if key[0] == learner_id]

    def delete_all_items(self, learner_id: str) -> int:
        keys = [key for key in self._items if key[0] == learner_id]
        for key in keys:
            del self._items[key]
        return len(keys)

    def add_learner(self, learner: Learner) -> Learner:
        if learner.id in self._learners:
            raise DuplicateError(f"Learner {learner.id!r} already exists", learner_id=learner.id)
        self._learners[learner.id] = learner
        return learner

    def get_learner(self, learner_id: str) -> Optional[Learner]:
        return self._learners.get(learner_id)

    def delete_learner(self, learner_id: str) -> None:
        self._learners.pop(learner_id, None)

    def add_card(self, card: Card) -> Card:
        if card.id in self._cards:
            raise DuplicateError(f"Card {card.id!r} already exists", card_id=card.id)
        self._cards[card.id] = card
        return card

    def get_card(self, card_id: str) -> Optional[Card]:
        return self._cards.get(card_id)

    def get_cards(self, card_ids: Iterable[str]) -> dict[str, Card]:
        return {card_id: self._cards[card_id] for card_id in card_ids if card_id in self._cards}
