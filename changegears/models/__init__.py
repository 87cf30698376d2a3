"""
Pydantic models for change gear calculator inputs and outputs.
"""

from changegears.models.inputs import CalculationInputs, LengthUnit, ModuleUnit
from changegears.models.outputs import (
    ShaftResult,
    TrainResult,
    SearchStatistics,
    CalculationResult,
)

__all__ = [
    "CalculationInputs",
    "LengthUnit",
    "ModuleUnit",
    "ShaftResult",
    "TrainResult",
    "SearchStatistics",
    "CalculationResult",
]
