"""
Output models for change gear calculations.

These models define the structure of the ranked gear trains and search
statistics returned by the calculator.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ShaftResult(BaseModel):
    """One shaft of a reported gear train."""
    input_gear: int = Field(..., gt=0, description="Gear driven by the previous shaft (teeth)")
    output_gear: int = Field(..., gt=0, description="Gear driving the next shaft (teeth)")
    gear_count: int = Field(..., ge=1, le=2, description="1 if input and output are the same gear")


class TrainResult(BaseModel):
    """
    A ranked gear train.

    Lead and TPI are what the leadscrew produces through this train.
    """
    rank: int = Field(..., ge=1, description="Position in the ranking (1 = best)")
    label: str = Field(..., description="Compact train description, e.g. '0.75: 30:40-20:20'")
    shafts: list[ShaftResult] = Field(..., min_length=2, description="Shafts, input first")
    output_multiplier: float = Field(..., gt=0, description="Overall transmission ratio")
    numerator: int = Field(..., gt=0, description="Product of driving gear tooth counts")
    denominator: int = Field(..., gt=0, description="Product of driven gear tooth counts")
    match_percent: float = Field(..., description="Output multiplier as % of the target")
    lead_mm: float = Field(..., description="Resulting lead in mm")
    tpi: float = Field(..., description="Resulting threads per inch")
    max_force: float = Field(..., ge=0, description="Relative worst-case tooth force")
    shaft_distance: float = Field(..., ge=0, description="Distance first to last shaft (mm)")


class SearchStatistics(BaseModel):
    """Progress counters of a search."""
    found: int = Field(default=0, ge=0, description="Valid trains found")
    skipped: int = Field(default=0, ge=0, description="Arrangements optimized out or outside distance limits")
    discarded: int = Field(default=0, ge=0, description="Arrangements rejected for interference")
    total: int = Field(default=0, ge=0, description="Possible arrangements")
    complete: bool = Field(default=False, description="Whether the search has finished")

    @property
    def tried(self) -> int:
        """Arrangements handled so far."""
        return self.found + self.skipped + self.discarded

    @property
    def progress(self) -> float:
        """Fraction of arrangements handled, 0.0 to 1.0."""
        if self.total == 0:
            return 1.0 if self.complete else 0.0
        return min(1.0, self.tried / self.total)

    def status_line(self) -> str:
        """Human readable progress, as shown while calculating."""
        return (
            f"Calculation status ({self.progress * 100:.0f}%): Found {self.found} valid "
            f"solutions out of {self.total} possible arrangements "
            f"({self.discarded} rejected and {self.skipped} optimized out)"
        )


class CalculationResult(BaseModel):
    """
    Complete output of a change gear calculation.
    """
    input_summary: dict = Field(..., description="Summary of key input parameters")
    target_multiplier: float = Field(..., gt=0, description="Desired output multiplier")
    statistics: SearchStatistics = Field(..., description="Search counters")
    trains: list[TrainResult] = Field(
        default_factory=list,
        description="Best gear trains, closest match first"
    )
    query_string: str = Field(default="", description="URL parameters to repeat this calculation")
    warnings: list[str] = Field(
        default_factory=list,
        description="Any warnings about inputs or results"
    )

    @property
    def best_train(self) -> Optional[TrainResult]:
        """Return the best ranked train, if any."""
        return self.trains[0] if self.trains else None
