"""Extra vote weight granted by reputation."""

from __future__ import annotations


def compute_extra_weight(reputation: int, extra_percentage: int, max_weight: int) -> int:
    """Return the extra weight a vote carries for the given reputation.

    The weight is ``extra_percentage`` percent of the reputation, rounded
    down and clamped to ``[0, max_weight]``.
    """
    weight = reputation * extra_percentage // 100
    if weight < 0:
        weight = 0
    if weight > max_weight:
        weight = max_weight
    return weight
