"""
Configuration for the scheduling core.

Algorithm selection is an explicit value handed to each Deck rather than
process-wide state. load_config() builds one from environment variables
(and a .env file, if present).

Environment:
    RECALL_ALGORITHM                   leitner (default) | fibonacci
    RECALL_FIBONACCI_KNOWN_THRESHOLD   int, default 3
    RECALL_FIBONACCI_FLOOR             int, default 0
    RECALL_DATABASE_URL                SQLAlchemy URL, default sqlite:///recall.db
    TEST_MODE                          "true" switches to in-memory SQLite
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from recall.algorithms import Algorithm, FibonacciSequence, LeitnerSystem, get_algorithm
from recall.constants import (
    DEFAULT_ALGORITHM,
    DEFAULT_DATABASE_URL,
    FIBONACCI_FLOOR,
    FIBONACCI_KNOWN_THRESHOLD,
)


logger = logging.getLogger(__name__)

IN_MEMORY_DATABASE_URL = "sqlite://"


@dataclass(frozen=True)
class RecallConfig:
    """Settings injected into a Deck at construction time."""
    algorithm: Algorithm = field(default_factory=LeitnerSystem)
    database_url: Optional[str] = None

    def with_algorithm(self, algorithm: Algorithm) -> RecallConfig:
        return RecallConfig(algorithm=algorithm, database_url=self.database_url)


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    In test mode the configured URL is ignored in favour of in-memory SQLite.

    Returns:
        SQLAlchemy database URL
    """
    if is_test_mode():
        return IN_MEMORY_DATABASE_URL
    return os.getenv("RECALL_DATABASE_URL", DEFAULT_DATABASE_URL)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_config() -> RecallConfig:
    """
    Build a RecallConfig from the environment.

    Returns:
        RecallConfig with the selected algorithm and database URL

    Raises:
        ValueError: unknown algorithm name or malformed integer setting
    """
    load_dotenv()

    name = os.getenv("RECALL_ALGORITHM", DEFAULT_ALGORITHM)
    options = {}
    if name.strip().lower() == FibonacciSequence.name:
        options = {
            "known_threshold": _int_env("RECALL_FIBONACCI_KNOWN_THRESHOLD", FIBONACCI_KNOWN_THRESHOLD),
            "floor": _int_env("RECALL_FIBONACCI_FLOOR", FIBONACCI_FLOOR),
        }

    algorithm = get_algorithm(name, **options)
    config = RecallConfig(algorithm=algorithm, database_url=get_database_url())
    logger.debug("Loaded config: %r", config)
    return config
