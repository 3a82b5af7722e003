"""
Deck - A Learner's Queryable View over Their Items

The deck stores nothing itself. Every query reads the learner's items from
the repository, classifies them into buckets with the deck's algorithm and
resolves card ids back to cards.

Quick start:
    deck = Deck(repository, learner.id, RecallConfig(algorithm=FibonacciSequence()))
    deck.add(card)

    card = deck.next()              # None when nothing needs review
    deck.right_answer_for(card)

    deck.review().where(front="hond").count()
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Iterator, Optional, Union

from recall.algorithms.base import Algorithm
from recall.buckets import ALL_BUCKETS, REVIEW_BUCKETS, Bucket, classify
from recall.config import RecallConfig
from recall.constants import Outcome
from recall.errors import DuplicateError, NotFoundError
from recall.item import Item, record_answer, utcnow
from recall.repository import Repository
from recall.schemas import Card


logger = logging.getLogger(__name__)

CardRef = Union[Card, str]
CardPredicate = Callable[[Card], bool]
ItemPredicate = Callable[[Item, datetime], bool]

ORDER_INSERTION = "insertion"
ORDER_DUE = "due"
ORDER_ID = "id"


def _card_id(card: CardRef) -> str:
    return card if isinstance(card, str) else card.id


def _due_order_key(item: Item) -> tuple:
    # Untested first, then earliest due date, ties by insertion order
    if item.due_at is None:
        return (0, 0.0, item.position)
    return (1, item.due_at.timestamp(), item.position)


# ---- Results ----

@dataclass(frozen=True)
class AddResult:
    """Outcome of Deck.try_add: either the new item or the duplicate error."""
    item: Optional[Item] = None
    error: Optional[DuplicateError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Item:
        if self.error is not None:
            raise self.error
        return self.item


# ---- Query ----

class DeckQuery:
    """
    Lazy, chainable query over a deck.

    Holds a bucket set, a chain of predicates and an ordering. Nothing is
    read from the repository until the query is iterated, counted or tested
    for membership. Narrowing returns a new query; the original is unchanged.
    """

    def __init__(
        self,
        deck: Deck,
        buckets: frozenset = ALL_BUCKETS,
        card_predicates: tuple[CardPredicate, ...] = (),
        item_predicates: tuple[ItemPredicate, ...] = (),
        ordering: str = ORDER_INSERTION,
        now: Optional[datetime] = None
    ):
        self._deck = deck
        self._buckets = buckets
        self._card_predicates = card_predicates
        self._item_predicates = item_predicates
        self._ordering = ordering
        self._now = now

    def _derive(self, **changes) -> DeckQuery:
        params = {
            "buckets": self._buckets,
            "card_predicates": self._card_predicates,
            "item_predicates": self._item_predicates,
            "ordering": self._ordering,
            "now": self._now,
        }
        params.update(changes)
        return DeckQuery(self._deck, **params)

    # ---- Builders ----

    def where(self, **attributes) -> DeckQuery:
        """
        Narrow to cards whose attributes equal the given values.

        Raises:
            ValueError: an attribute name is not a Card field
        """
        unknown = sorted(set(attributes) - set(Card.model_fields))
        if unknown:
            raise ValueError(
                f"Unknown card attributes: {', '.join(unknown)}. "
                f"Available: {', '.join(Card.model_fields)}"
            )

        def matches(card: Card) -> bool:
            return all(getattr(card, name) == value for name, value in attributes.items())

        return self._derive(card_predicates=self._card_predicates + (matches,))

    def filter(self, predicate: CardPredicate) -> DeckQuery:
        """Narrow to cards for which predicate(card) is true."""
        return self._derive(card_predicates=self._card_predicates + (predicate,))

    def filter_items(self, predicate: ItemPredicate) -> DeckQuery:
        """Narrow by predicate(item, now) on the underlying progress records."""
        return self._derive(item_predicates=self._item_predicates + (predicate,))

    def at(self, now: datetime) -> DeckQuery:
        """Evaluate buckets at a fixed time instead of the deck clock."""
        return self._derive(now=now)

    def order_by_due(self) -> DeckQuery:
        return self._derive(ordering=ORDER_DUE)

    def order_by_id(self) -> DeckQuery:
        return self._derive(ordering=ORDER_ID)

    # ---- Materialization ----

    def entries(self) -> list[tuple[Item, Card]]:
        """Run the query and return (item, card) pairs in query order."""
        deck = self._deck
        now = self._now if self._now is not None else deck.now()
        algorithm = deck.algorithm

        items = sorted(deck.repository.list_items(deck.learner_id), key=lambda item: item.position)
        items = [
            item for item in items
            if classify(item, algorithm, now) in self._buckets
            and all(predicate(item, now) for predicate in self._item_predicates)
        ]

        cards = deck.repository.get_cards(item.card_id for item in items)
        pairs = []
        for item in items:
            card = cards.get(item.card_id)
            if card is None:
                logger.warning("Item %s/%s refers to a missing card", item.learner_id, item.card_id)
                continue
            if all(predicate(card) for predicate in self._card_predicates):
                pairs.append((item, card))

        if self._ordering == ORDER_DUE:
            pairs.sort(key=lambda pair: _due_order_key(pair[0]))
        elif self._ordering == ORDER_ID:
            pairs.sort(key=lambda pair: pair[1].id)

        logger.debug(
            "Deck query for %s (%s) matched %d items",
            deck.learner_id, ",".join(sorted(bucket.value for bucket in self._buckets)), len(pairs)
        )
        return pairs

    def cards(self) -> list[Card]:
        return [card for _, card in self.entries()]

    def items(self) -> list[Item]:
        return [item for item, _ in self.entries()]

    def first(self) -> Optional[Card]:
        cards = self.cards()
        return cards[0] if cards else None

    def last(self) -> Optional[Card]:
        cards = self.cards()
        return cards[-1] if cards else None

    def count(self) -> int:
        return len(self.entries())

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards())

    def __len__(self) -> int:
        return self.count()

    def __bool__(self) -> bool:
        return self.count() > 0

    def __contains__(self, card: CardRef) -> bool:
        card_id = _card_id(card)
        return any(item.card_id == card_id for item, _ in self.entries())

    def __repr__(self):
        buckets = ",".join(sorted(bucket.value for bucket in self._buckets))
        return f"<DeckQuery({self._deck.learner_id}, buckets={buckets}, order={self._ordering})>"


# ---- Deck ----

class Deck:
    """
    One learner's cards, partitioned into review buckets.

    The algorithm comes from the injected config; use with_algorithm() to
    study the same items under another strategy without touching other decks.
    """

    def __init__(
        self,
        repository: Repository,
        learner_id: str,
        config: Optional[RecallConfig] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.repository = repository
        self.learner_id = learner_id
        self.config = config if config is not None else RecallConfig()
        self.clock = clock if clock is not None else utcnow

    @property
    def algorithm(self) -> Algorithm:
        return self.config.algorithm

    def now(self) -> datetime:
        return self.clock()

    def with_algorithm(self, algorithm: Algorithm) -> Deck:
        """Return a view over the same items scheduled by another algorithm."""
        return Deck(self.repository, self.learner_id, self.config.with_algorithm(algorithm), self.clock)

    # ---- Membership ----

    def try_add(self, card: CardRef) -> AddResult:
        """
        Add a card without raising on duplicates.

        Returns:
            AddResult holding the new item, or the DuplicateError

        Raises:
            NotFoundError: the learner or the card does not exist
        """
        card_id = _card_id(card)
        if self.repository.get_learner(self.learner_id) is None:
            raise NotFoundError(f"Learner {self.learner_id!r} does not exist", learner_id=self.learner_id)
        if self.repository.get_card(card_id) is None:
            raise NotFoundError(f"Card {card_id!r} does not exist", card_id=card_id)

        if self.repository.find_item(self.learner_id, card_id) is not None:
            return AddResult(error=DuplicateError(
                f"Card {card_id!r} is already in the deck of learner {self.learner_id!r}",
                learner_id=self.learner_id,
                card_id=card_id
            ))

        try:
            item = self.repository.create_item(self.learner_id, card_id)
        except DuplicateError as exc:
            return AddResult(error=exc)

        logger.info("Added card %s to deck of %s", card_id, self.learner_id)
        return AddResult(item=item)

    def add(self, card: CardRef) -> Item:
        """
        Add a card to the deck as an untested item.

        Raises:
            DuplicateError: the card is already in this deck
            NotFoundError: the learner or the card does not exist
        """
        result = self.try_add(card)
        if not result.ok:
            logger.warning("Rejected duplicate card %s for %s", _card_id(card), self.learner_id)
        return result.unwrap()

    def remove(self, card: CardRef) -> None:
        """Remove a card's item from the deck. The card itself is kept. Silent if absent."""
        card_id = _card_id(card)
        self.repository.delete_item(self.learner_id, card_id)
        logger.info("Removed card %s from deck of %s", card_id, self.learner_id)

    def item_for(self, card: CardRef) -> Optional[Item]:
        return self.repository.find_item(self.learner_id, _card_id(card))

    def items(self) -> list[Item]:
        """All items in insertion order."""
        return sorted(self.repository.list_items(self.learner_id), key=lambda item: item.position)

    def last(self) -> Optional[Card]:
        """The most recently added card, or None for an empty deck."""
        return self.all().last()

    def count(self) -> int:
        """Items whose card still exists; the same set iteration and the buckets see."""
        return self.all().count()

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Card]:
        return iter(self.all())

    def __contains__(self, card: CardRef) -> bool:
        return card in self.all()

    # ---- Bucket Queries ----

    def _query(self, buckets: Iterable[Bucket], now: Optional[datetime]) -> DeckQuery:
        return DeckQuery(self, buckets=frozenset(buckets), now=now)

    def all(self, now: Optional[datetime] = None) -> DeckQuery:
        return self._query(ALL_BUCKETS, now)

    def untested(self, now: Optional[datetime] = None) -> DeckQuery:
        return self._query({Bucket.UNTESTED}, now)

    def known(self, now: Optional[datetime] = None) -> DeckQuery:
        return self._query({Bucket.KNOWN}, now)

    def failed(self, now: Optional[datetime] = None) -> DeckQuery:
        return self._query({Bucket.FAILED}, now)

    def expired(self, now: Optional[datetime] = None) -> DeckQuery:
        return self._query({Bucket.EXPIRED}, now)

    def review(self, now: Optional[datetime] = None) -> DeckQuery:
        """Everything that needs attention: untested, failed and expired."""
        return self._query(REVIEW_BUCKETS, now)

    def mastered(self, now: Optional[datetime] = None) -> DeckQuery:
        """Known items at or above the algorithm's mastery level."""
        algorithm = self.algorithm
        return self.known(now).filter_items(
            lambda item, at: algorithm.is_mastered(item.progress, at)
        )

    def next(self, now: Optional[datetime] = None) -> Optional[Card]:
        """The most urgent card to review, or None when nothing is due."""
        return self.review(now).order_by_due().first()

    # ---- Answers ----

    def record_answer(self, card: CardRef, outcome: Outcome, now: Optional[datetime] = None) -> None:
        """
        Reschedule a card after an answer.

        Raises:
            ValueError: invalid outcome
            NotFoundError: the card is not (or no longer) in this deck
        """
        record_answer(
            self.repository,
            self.algorithm,
            self.learner_id,
            _card_id(card),
            outcome,
            now if now is not None else self.now()
        )

    def right_answer_for(self, card: CardRef, now: Optional[datetime] = None) -> None:
        self.record_answer(card, Outcome.CORRECT, now)

    def wrong_answer_for(self, card: CardRef, now: Optional[datetime] = None) -> None:
        self.record_answer(card, Outcome.INCORRECT, now)

    def __repr__(self):
        return f"<Deck({self.learner_id}, algorithm={self.algorithm.name})>"
