"""
Change Gear Calculator (changegears)

Finds lathe change gear trains that turn the leadscrew lead into a desired
thread lead. Every arrangement of one or two gears per shaft is enumerated,
trains with interfering gears or outside the shaft distance limits are
rejected, and the rest are ranked by how closely they match.

Usage:
    python -m changegears make-example
    python -m changegears calculate --input example_input.json
    python -m changegears link --input example_input.json
    python -m changegears serve --port 8000
"""

__version__ = "0.1.0"
__author__ = "Change Gear Calculator Project"

from changegears.geartrain import (
    Shaft,
    GearTrain,
    GearTrainPermutations,
    SearchConfig,
    shafts_interfere,
    permutation_count,
)
from changegears.models.inputs import CalculationInputs, LengthUnit, ModuleUnit
from changegears.models.outputs import (
    CalculationResult,
    SearchStatistics,
    ShaftResult,
    TrainResult,
)
from changegears.generator.calculator import ChangeGearCalculator

__all__ = [
    "Shaft",
    "GearTrain",
    "GearTrainPermutations",
    "SearchConfig",
    "shafts_interfere",
    "permutation_count",
    "CalculationInputs",
    "LengthUnit",
    "ModuleUnit",
    "CalculationResult",
    "SearchStatistics",
    "ShaftResult",
    "TrainResult",
    "ChangeGearCalculator",
]
