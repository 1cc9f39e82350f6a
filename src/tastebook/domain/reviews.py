"""Tastebook - Rating aggregates."""

from collections.abc import Iterable


def rating_summary(ratings: Iterable[int]) -> tuple[float, int]:
    """Average and count of `ratings`; (0, 0) when there are none."""
    values = list(ratings)
    if not values:
        return 0.0, 0
    return sum(values) / len(values), len(values)
