"""
Review buckets.

Every item of a learner falls into exactly one bucket at a given time:

- untested: never answered (no due date)
- known:    answered and not yet due under the active algorithm
- failed:   due, last answer wrong
- expired:  due, last answer right (interval elapsed without a re-test)

The review set is untested + failed + expired.
"""

from __future__ import annotations
from datetime import datetime
from enum import Enum

from recall.algorithms.base import Algorithm
from recall.constants import LastResult
from recall.item import Item


class Bucket(str, Enum):
    UNTESTED = "untested"
    KNOWN = "known"
    FAILED = "failed"
    EXPIRED = "expired"


REVIEW_BUCKETS = frozenset({Bucket.UNTESTED, Bucket.FAILED, Bucket.EXPIRED})
ALL_BUCKETS = frozenset(Bucket)


def classify(item: Item, algorithm: Algorithm, now: datetime) -> Bucket:
    """Return the single bucket an item belongs to at `now`."""
    if not item.tested:
        return Bucket.UNTESTED
    if not algorithm.is_due(item.progress, now):
        return Bucket.KNOWN
    if item.last_result is LastResult.INCORRECT:
        return Bucket.FAILED
    return Bucket.EXPIRED
