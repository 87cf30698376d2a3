"""
Change gear calculator.

Drives the gear train search in time slices so that callers can report
progress, then ranks the valid trains and packs them into a result.
"""

import logging
import time
from typing import Callable, Optional

from changegears.geartrain.permutations import GearTrainPermutations
from changegears.geartrain.train import GearTrain
from changegears.models.inputs import CalculationInputs
from changegears.models.outputs import (
    CalculationResult,
    SearchStatistics,
    ShaftResult,
    TrainResult,
)
from changegears.physics.units import INCH_MM
from changegears.scoring.ranking import match_percentage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SearchStatistics], None]


class ChangeGearCalculator:
    """
    Calculator for lathe change gear trains.

    Owns one search engine; nothing is shared between calculators.
    """

    # Time slice between progress updates
    DEFAULT_BUDGET_MS = 100.0

    # Best match deviating more than this (in %) from the target gets a warning
    MATCH_WARNING_PERCENT = 1.0

    def __init__(self, inputs: CalculationInputs):
        """
        Initialize calculator with validated inputs.

        Args:
            inputs: Calculation parameters
        """
        self.inputs = inputs
        self.config = inputs.to_search_config()
        self.engine = GearTrainPermutations()
        self._set_up = False

    @property
    def target_multiplier(self) -> float:
        return self.config.target_multiplier

    def setup(self) -> None:
        """Start a new search. Earlier results are dropped."""
        self.engine.setup(self.config)
        self._set_up = True

    def iterate(self, budget_ms: float = DEFAULT_BUDGET_MS) -> bool:
        """
        Advance the search for roughly ``budget_ms`` milliseconds.

        At least one step is always taken.

        Returns:
            True when the search is complete
        """
        if not self._set_up:
            self.setup()
        deadline = time.monotonic() + budget_ms / 1000.0
        while True:
            if self.engine.advance():
                return True
            if time.monotonic() >= deadline:
                return False

    def statistics(self) -> SearchStatistics:
        """Current counters of the search."""
        return SearchStatistics(
            found=self.engine.found,
            skipped=self.engine.skipped,
            discarded=self.engine.discarded,
            total=self.engine.total,
            complete=self._set_up and self.engine.is_complete,
        )

    def status(self) -> str:
        if not self._set_up:
            return "Calculation status: Not started"
        return self.statistics().status_line()

    def run(
        self,
        progress: Optional[ProgressCallback] = None,
        budget_ms: float = DEFAULT_BUDGET_MS,
    ) -> list[GearTrain]:
        """
        Run the search to completion and rank the results.

        Args:
            progress: Called with the statistics after every time slice
            budget_ms: Length of a time slice

        Returns:
            Valid gear trains, best first
        """
        if not self._set_up:
            self.setup()
        while not self.iterate(budget_ms):
            if progress is not None:
                progress(self.statistics())
        trains = self.engine.finalize()
        if progress is not None:
            progress(self.statistics())
        return trains

    def _train_result(self, rank: int, train: GearTrain) -> TrainResult:
        lead_mm = train.output_multiplier * self.inputs.leadscrew_lead_mm
        return TrainResult(
            rank=rank,
            label=train.label(),
            shafts=[
                ShaftResult(
                    input_gear=shaft.input_gear,
                    output_gear=shaft.output_gear,
                    gear_count=shaft.gear_count,
                )
                for shaft in train.shafts
            ],
            output_multiplier=train.output_multiplier,
            numerator=train.numerator,
            denominator=train.denominator,
            match_percent=match_percentage(train, self.target_multiplier),
            lead_mm=lead_mm,
            tpi=INCH_MM / lead_mm,
            max_force=train.max_force,
            shaft_distance=train.shaft_distance(self.config.module),
        )

    def generate_result(self, progress: Optional[ProgressCallback] = None) -> CalculationResult:
        """
        Generate the complete calculation result.

        Runs the search first unless it has already completed.

        Returns:
            CalculationResult with the best trains and search statistics
        """
        if self._set_up and self.engine.is_complete:
            trains = self.engine.finalize()
        else:
            trains = self.run(progress)

        top = trains[: self.inputs.max_results]
        results = [self._train_result(rank, train) for rank, train in enumerate(top, 1)]

        input_summary = {
            "leadscrew_lead_mm": self.inputs.leadscrew_lead_mm,
            "desired_lead_mm": self.inputs.desired_lead_mm,
            "shaft_count": self.inputs.shaft_count,
            "change_gears": self.inputs.change_gears,
            "input_gears": self.inputs.change_gears if self.inputs.input_set_shared else self.inputs.input_gears,
            "module_mm": self.inputs.gear_module_mm,
        }

        warnings = []
        if not results:
            warnings.append(
                "No valid gear trains found; relax the distance limits or spacer sizes"
            )
        else:
            deviation = abs(results[0].match_percent - 100.0)
            if deviation > self.MATCH_WARNING_PERCENT:
                warnings.append(
                    f"Best gear train deviates {deviation:.2f}% from the desired lead"
                )

        logger.info("%s", self.status())
        return CalculationResult(
            input_summary=input_summary,
            target_multiplier=self.target_multiplier,
            statistics=self.statistics(),
            trains=results,
            query_string=self.inputs.to_query_string(),
            warnings=warnings,
        )
