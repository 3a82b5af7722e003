"""Pytest configuration and shared fixtures."""

import pytest

from recall import (
    Card,
    Deck,
    FibonacciSequence,
    InMemoryRepository,
    LeitnerSystem,
    RecallConfig,
    SqlRepository,
    create_learner,
    get_engine,
)
from tests.helpers import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "sql"])
def repository(request):
    """Every deck test runs against both repository implementations."""
    if request.param == "memory":
        yield InMemoryRepository()
    else:
        engine = get_engine("sqlite://")
        yield SqlRepository(engine)
        engine.dispose()


@pytest.fixture
def sql_repository():
    engine = get_engine("sqlite://")
    yield SqlRepository(engine)
    engine.dispose()


@pytest.fixture
def learner(repository):
    return create_learner(repository, "Robert", learner_id="robert")


@pytest.fixture
def word(repository) -> Card:
    return repository.add_card(Card(id="nihongo", front="日本語", back="Japanese language"))


@pytest.fixture
def other_word(repository) -> Card:
    return repository.add_card(Card(id="nihongo1", front="日本語1", back="Japanese language"))


@pytest.fixture
def leitner_deck(repository, learner, clock) -> Deck:
    return Deck(repository, learner.id, RecallConfig(algorithm=LeitnerSystem()), clock=clock)


@pytest.fixture
def fibonacci_deck(repository, learner, clock) -> Deck:
    return Deck(repository, learner.id, RecallConfig(algorithm=FibonacciSequence()), clock=clock)
