"""
Pytest configuration and shared fixtures.
"""

import pytest
from changegears.geartrain.permutations import GearTrainPermutations, SearchConfig
from changegears.models.inputs import CalculationInputs, LengthUnit, ModuleUnit


def run_to_completion(engine: GearTrainPermutations, max_steps: int = 1_000_000) -> int:
    """Advance an engine until it reports completion; returns the number of steps."""
    steps = 0
    while not engine.advance():
        steps += 1
        assert steps < max_steps, "search did not terminate"
    return steps


@pytest.fixture
def small_config() -> SearchConfig:
    """Three shafts over a shared four gear pool, target 1.0."""
    return SearchConfig(
        shaft_count=3,
        change_gears=(20, 30, 40, 50),
        input_set_shared=True,
        target_multiplier=1.0,
        spacer_size=0,
        input_adjacent_size=0,
        addendum=1.2,
    )


@pytest.fixture
def duplicate_config() -> SearchConfig:
    """Pool holding a repeated tooth count."""
    return SearchConfig(
        shaft_count=3,
        change_gears=(20, 20, 30, 40, 40),
        input_set_shared=True,
        target_multiplier=0.5,
        spacer_size=0,
        input_adjacent_size=0,
        addendum=1.2,
    )


@pytest.fixture
def metric_inputs() -> CalculationInputs:
    """Metric 3 mm leadscrew cutting a 1.25 mm thread."""
    return CalculationInputs(
        leadscrew_lead=3.0,
        leadscrew_unit=LengthUnit.MM,
        shaft_count=3,
        change_gears=[20, 25, 30, 35, 40, 45, 50, 55, 60],
        input_set_shared=True,
        desired_lead=1.25,
        desired_unit=LengthUnit.MM,
        module=1.0,
        module_unit=ModuleUnit.MODULE,
        spacer_size=10,
        input_adjacent_size=10,
    )


@pytest.fixture
def imperial_inputs() -> CalculationInputs:
    """Imperial 8 TPI leadscrew cutting 20 TPI with DP gears."""
    return CalculationInputs(
        leadscrew_lead=8,
        leadscrew_unit=LengthUnit.TPI,
        shaft_count=3,
        input_gears=[20, 40],
        change_gears=[20, 30, 40, 50, 60],
        input_set_shared=False,
        desired_lead=20,
        desired_unit=LengthUnit.TPI,
        module=24,
        module_unit=ModuleUnit.DIAMETRAL_PITCH,
    )


@pytest.fixture
def run_search():
    """Provide the helper that drives an engine to completion."""
    return run_to_completion
