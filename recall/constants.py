"""
Recall Constants and Parameters

Answer outcomes plus the default policy parameters for the built-in
scheduling algorithms, kept in one place.
"""

from enum import Enum


# ---- Answer Outcomes ----

class Outcome(str, Enum):
    """Learner's answer to a single review."""
    CORRECT = "correct"
    INCORRECT = "incorrect"


class LastResult(str, Enum):
    """Outcome of the most recent review of an item."""
    NONE = "none"            # Never answered
    CORRECT = "correct"
    INCORRECT = "incorrect"


# ---- Leitner System ----

# Days until the next review, indexed by box (boxes 0..5). Box 0 is due immediately.
LEITNER_INTERVAL_DAYS = (0, 1, 3, 7, 14, 30)


# ---- Fibonacci Sequence ----

# Level at or above which a scheduled (not due) item counts as mastered
FIBONACCI_KNOWN_THRESHOLD = 3

# Level an item drops to after a wrong answer
FIBONACCI_FLOOR = 0


# ---- Shared ----

# Upper bound on any single interval, so date arithmetic cannot overflow
MAX_INTERVAL_DAYS = 36500

DEFAULT_ALGORITHM = "leitner"
DEFAULT_DATABASE_URL = "sqlite:///recall.db"
