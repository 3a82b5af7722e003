"""
Recall - Spaced Repetition Scheduling Core

Decides when a learner should see a card again, based on how they answered
it before.

This package provides:
- Pluggable scheduling algorithms (Leitner System, Fibonacci Sequence)
- Per-(learner, card) progress items and the record-answer workflow
- Decks that partition a learner's cards into untested / known / failed /
  expired buckets, with "review" as the needs-attention set
- In-memory and SQLAlchemy repositories behind one storage interface

Quick start:
    from recall import (
        Card, Deck, FibonacciSequence, InMemoryRepository, RecallConfig, create_learner
    )

    repository = InMemoryRepository()
    learner = create_learner(repository, "Robert")
    card = repository.add_card(Card(id="nihongo", front="日本語", back="Japanese language"))

    deck = Deck(repository, learner.id, RecallConfig(algorithm=FibonacciSequence()))
    deck.add(card)
    deck.right_answer_for(deck.next())
"""

# Algorithms
from recall.algorithms import (
    Algorithm,
    FibonacciSequence,
    LeitnerSystem,
    available_algorithms,
    fibonacci,
    get_algorithm,
)

# Buckets and decks
from recall.buckets import Bucket, REVIEW_BUCKETS, classify
from recall.deck import AddResult, Deck, DeckQuery

# Configuration
from recall.config import RecallConfig, load_config

# Constants and errors
from recall.constants import LastResult, Outcome
from recall.errors import DuplicateError, NotFoundError, RecallError

# Items
from recall.item import Item, ProgressState, initialize_new_item, record_answer

# Storage
from recall.database import SqlRepository, get_engine, init_db, reset_db
from recall.learners import create_learner, destroy_learner
from recall.repository import InMemoryRepository, Repository
from recall.schemas import Card, Learner


__all__ = [
    # Algorithms
    "Algorithm",
    "FibonacciSequence",
    "LeitnerSystem",
    "available_algorithms",
    "fibonacci",
    "get_algorithm",

    # Decks
    "AddResult",
    "Bucket",
    "Deck",
    "DeckQuery",
    "REVIEW_BUCKETS",
    "classify",

    # Configuration
    "RecallConfig",
    "load_config",

    # Enums
    "LastResult",
    "Outcome",

    # Errors
    "DuplicateError",
    "NotFoundError",
    "RecallError",

    # Items
    "Item",
    "ProgressState",
    "initialize_new_item",
    "record_answer",

    # Storage
    "Card",
    "InMemoryRepository",
    "Learner",
    "Repository",
    "SqlRepository",
    "create_learner",
    "destroy_learner",
    "get_engine",
    "init_db",
    "reset_db",
]
