"""
Ranking of gear trains against a desired output multiplier.

Ordering:
- Closest output multiplier to the target first
- Ties broken by the lower relative tooth force
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from changegears.geartrain.train import GearTrain


def compare_gear_trains(a: GearTrain, b: GearTrain, target_multiplier: float = 1.0) -> float:
    """
    Compare two gear trains for sorting.

    Returns:
        Negative if ``a`` ranks first, positive if ``b`` does, 0 if equal on both keys
    """
    deviation_a = abs(a.output_multiplier - target_multiplier)
    deviation_b = abs(b.output_multiplier - target_multiplier)
    return (deviation_a - deviation_b) or (a.max_force - b.max_force)


def rank_gear_trains(trains: Iterable[GearTrain], target_multiplier: float = 1.0) -> list[GearTrain]:
    """Return the trains sorted best first. The sort is stable."""
    key = cmp_to_key(lambda a, b: compare_gear_trains(a, b, target_multiplier))
    return sorted(trains, key=key)


def match_percentage(train: GearTrain, target_multiplier: float) -> float:
    """Achieved multiplier as a percentage of the target (100 is exact)."""
    return train.output_multiplier / target_multiplier * 100
