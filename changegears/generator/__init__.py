"""
Calculator driving the gear train search.

Runs the resumable search in time slices and ranks the valid trains.
"""

from changegears.generator.calculator import ChangeGearCalculator

__all__ = ["ChangeGearCalculator"]
