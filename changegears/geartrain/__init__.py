"""
Gear train calculation engine.

Provides:
- Shaft and interference checks between adjacent shafts
- GearTrain snapshots with ratio, tooth force and shaft distance
- GearTrainPermutations, the resumable search over all arrangements
"""

from changegears.geartrain.shaft import (
    Shaft,
    shafts_interfere,
    meshing_distance,
    non_meshing_distance,
)
from changegears.geartrain.train import GearTrain
from changegears.geartrain.permutations import (
    GearTrainPermutations,
    SearchConfig,
    SearchFrame,
    permutation_count,
)

__all__ = [
    "Shaft",
    "shafts_interfere",
    "meshing_distance",
    "non_meshing_distance",
    "GearTrain",
    "GearTrainPermutations",
    "SearchConfig",
    "SearchFrame",
    "permutation_count",
]
