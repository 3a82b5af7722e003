"""
Scheduling algorithms and a name registry for building them from config.
"""

from __future__ import annotations

from recall.algorithms.base import Algorithm
from recall.algorithms.fibonacci import FibonacciSequence, fibonacci
from recall.algorithms.leitner import LeitnerSystem


ALGORITHMS: dict[str, type[Algorithm]] = {
    LeitnerSystem.name: LeitnerSystem,
    FibonacciSequence.name: FibonacciSequence,
}


def available_algorithms() -> list[str]:
    """Names accepted by get_algorithm()."""
    return sorted(ALGORITHMS)


def get_algorithm(name: str, **options) -> Algorithm:
    """
    Build a scheduling algorithm by name.

    Args:
        name: "leitner" or "fibonacci" (case-insensitive)
        **options: Keyword arguments for the algorithm's constructor

    Returns:
        Algorithm instance

    Raises:
        ValueError: unknown algorithm name
    """
    key = name.strip().lower()
    if key not in ALGORITHMS:
        raise ValueError(
            f"Unknown algorithm {name!r}. Available: {', '.join(available_algorithms())}"
        )
    return ALGORITHMS[key](**options)


__all__ = [
    "ALGORITHMS",
    "Algorithm",
    "FibonacciSequence",
    "LeitnerSystem",
    "available_algorithms",
    "fibonacci",
    "get_algorithm",
]
