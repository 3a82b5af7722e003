"""
Fibonacci Sequence

Each right answer moves the item one step along the Fibonacci sequence and
waits fib(step) days: 1, 1, 2, 3, 5, 8, ... A wrong answer drops the item to
the floor step, due immediately.
"""

from __future__ import annotations
from datetime import timedelta

from recall.algorithms.base import Algorithm
from recall.constants import FIBONACCI_FLOOR, FIBONACCI_KNOWN_THRESHOLD, MAX_INTERVAL_DAYS


def fibonacci(n: int) -> int:
    """
    Return the n-th Fibonacci number, with fib(0) = 0 and fib(1) = 1.

    Args:
        n: Non-negative index

    Returns:
        fib(n)
    """
    if n < 0:
        raise ValueError(f"Fibonacci index must be non-negative, got {n}")

    previous, current = 0, 1
    for _ in range(n):
        previous, current = current, previous + current
    return previous


class FibonacciSequence(Algorithm):
    """Unbounded step scheduling with Fibonacci-day intervals."""

    name = "fibonacci"

    def __init__(
        self,
        known_threshold: int = FIBONACCI_KNOWN_THRESHOLD,
        floor: int = FIBONACCI_FLOOR,
        max_interval_days: int = MAX_INTERVAL_DAYS
    ):
        if floor < 0:
            raise ValueError(f"Fibonacci floor must be non-negative, got {floor}")
        if known_threshold < 1:
            raise ValueError(f"Known threshold must be at least 1, got {known_threshold}")
        if max_interval_days < 1:
            raise ValueError(f"max_interval_days must be at least 1, got {max_interval_days}")

        self.floor = floor
        self.mastery_level = known_threshold
        self.max_interval_days = max_interval_days

    def next_level(self, level: int) -> int:
        return level + 1

    def interval(self, level: int) -> timedelta:
        # Stop walking the sequence once the cap is reached
        previous, current = 0, 1
        for _ in range(max(level, 0)):
            previous, current = current, previous + current
            if previous >= self.max_interval_days:
                break
        return timedelta(days=min(previous, self.max_interval_days))

    def __repr__(self):
        return (
            f"<FibonacciSequence(known_threshold={self.mastery_level}, floor={self.floor}, "
            f"max_interval_days={self.max_interval_days})>"
        )
