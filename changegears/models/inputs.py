"""
Input models for change gear calculations.

These models validate the calculator form (leadscrew, desired lead, gear
sets and optional constraints) and convert it into the strongly typed
search configuration used by the engine.
"""

from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel, Field, field_validator, model_validator

from changegears.geartrain.permutations import SearchConfig
from changegears.physics.units import tpi_to_mm_lead, dp_to_module

# Spacer size used when none is given; large enough that nothing ever interferes
UNLIMITED_SPACER = -1e9

DEFAULT_ADDENDUM = 1.2
DEFAULT_MAX_RESULTS = 200


class LengthUnit(str, Enum):
    """How a lead is specified."""
    MM = "mm"
    TPI = "tpi"


class ModuleUnit(str, Enum):
    """How the gear tooth size is specified."""
    MODULE = "mod"
    DIAMETRAL_PITCH = "dp"


def _is_checked(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() == "true"


def _format_number(value: float) -> str:
    """Shortest text that parses back to the same float."""
    text = f"{value:g}"
    return text if float(text) == value else repr(float(value))


class CalculationInputs(BaseModel):
    """
    Parameters for a change gear calculation.

    Gear sets are comma-separated lists of tooth counts on the form; here they
    are lists of positive integers, sorted ascending on validation.
    """

    # Leadscrew
    leadscrew_lead: float = Field(..., gt=0, description="Leadscrew lead (mm) or threads per inch")
    leadscrew_unit: LengthUnit = Field(default=LengthUnit.MM, description="Unit of leadscrew_lead")

    # Gear train layout
    shaft_count: int = Field(..., ge=2, le=8, description="Number of shafts, input and output included")
    change_gears: list[int] = Field(..., min_length=1, description="Available change gears (teeth)")
    input_gears: Optional[list[int]] = Field(
        default=None,
        description="Gears available for the input shaft. Not used if input_set_shared is set"
    )
    input_set_shared: bool = Field(
        default=False,
        description="Draw the input gear from the change gears instead of input_gears"
    )

    # Target
    desired_lead: float = Field(..., gt=0, description="Desired lead (mm) or threads per inch")
    desired_unit: LengthUnit = Field(default=LengthUnit.MM, description="Unit of desired_lead")

    # Optional parameters
    module: float = Field(default=1.0, gt=0, description="Gear module (mm) or diametral pitch")
    module_unit: ModuleUnit = Field(default=ModuleUnit.MODULE, description="Unit of module")
    addendum: float = Field(
        default=DEFAULT_ADDENDUM,
        ge=0,
        description="Tooth height margin (teeth) for interference checks"
    )
    input_adjacent_size: Optional[float] = Field(
        default=None,
        description="Size (teeth) of whatever sits next to the input gear. None means no limit"
    )
    spacer_size: Optional[float] = Field(
        default=None,
        description="Size (teeth) of the spacer on single gear shafts. None means no limit"
    )
    min_shaft_distance: float = Field(
        default=0.0,
        ge=0,
        description="Minimum distance between first and last shaft (mm). 0 for no limit"
    )
    max_shaft_distance: float = Field(
        default=0.0,
        ge=0,
        description="Maximum distance between first and last shaft (mm). 0 for no limit"
    )
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1, description="Number of ranked trains to report")

    @field_validator("change_gears", "input_gears")
    @classmethod
    def validate_gear_set(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        """Gear sets hold positive tooth counts, sorted ascending."""
        if v is None:
            return v
        if any(teeth <= 0 for teeth in v):
            raise ValueError("Gear tooth counts must be positive integers")
        return sorted(v)

    @model_validator(mode="after")
    def validate_sets_and_bounds(self) -> "CalculationInputs":
        """Require input gears unless shared, and a consistent distance window."""
        if not self.input_set_shared and not self.input_gears:
            raise ValueError("input_gears is required unless input_set_shared is set")
        if (
            self.min_shaft_distance > 0
            and self.max_shaft_distance > 0
            and self.max_shaft_distance < self.min_shaft_distance
        ):
            raise ValueError("max_shaft_distance must be >= min_shaft_distance")
        return self

    @property
    def leadscrew_lead_mm(self) -> float:
        if self.leadscrew_unit == LengthUnit.TPI:
            return tpi_to_mm_lead(self.leadscrew_lead)
        return self.leadscrew_lead

    @property
    def desired_lead_mm(self) -> float:
        if self.desired_unit == LengthUnit.TPI:
            return tpi_to_mm_lead(self.desired_lead)
        return self.desired_lead

    @property
    def gear_module_mm(self) -> float:
        if self.module_unit == ModuleUnit.DIAMETRAL_PITCH:
            return dp_to_module(self.module)
        return self.module

    @property
    def target_multiplier(self) -> float:
        """Gear train ratio that turns the leadscrew lead into the desired lead."""
        return self.desired_lead_mm / self.leadscrew_lead_mm

    @property
    def arrangement_count(self) -> int:
        """Arrangements the search for these inputs has to cover."""
        return self.to_search_config().arrangement_count

    def to_search_config(self) -> SearchConfig:
        """Build the engine configuration."""
        return SearchConfig(
            shaft_count=self.shaft_count,
            change_gears=tuple(self.change_gears),
            input_gears=tuple(self.input_gears or ()),
            input_set_shared=self.input_set_shared,
            target_multiplier=self.target_multiplier,
            spacer_size=UNLIMITED_SPACER if self.spacer_size is None else self.spacer_size,
            input_adjacent_size=(
                UNLIMITED_SPACER if self.input_adjacent_size is None else self.input_adjacent_size
            ),
            addendum=self.addendum,
            module=self.gear_module_mm,
            min_shaft_distance=self.min_shaft_distance,
            max_shaft_distance=self.max_shaft_distance,
        )

    def to_query_params(self) -> dict[str, str]:
        """URL parameters that reproduce this calculation (for bookmark links)."""
        params = {
            "leadscrew-lead": _format_number(self.leadscrew_lead),
            f"leadscrew-{self.leadscrew_unit.value}": "true",
            "shaft-count": str(self.shaft_count),
        }
        if self.input_gears:
            params["input-gear-set"] = ",".join(str(g) for g in self.input_gears)
        if self.input_set_shared:
            params["input-set-shared"] = "true"
        params["change-gear-set"] = ",".join(str(g) for g in self.change_gears)
        params["desired-lead"] = _format_number(self.desired_lead)
        params[f"desired-{self.desired_unit.value}"] = "true"
        params["module"] = _format_number(self.module)
        params[f"module-{self.module_unit.value}"] = "true"
        if self.input_adjacent_size is not None:
            params["input-adjacent-size"] = _format_number(self.input_adjacent_size)
        if self.spacer_size is not None:
            params["spacer-size"] = _format_number(self.spacer_size)
        if self.min_shaft_distance > 0:
            params["min-shaft-distance"] = _format_number(self.min_shaft_distance)
        if self.max_shaft_distance > 0:
            params["max-shaft-distance"] = _format_number(self.max_shaft_distance)
        if self.addendum != DEFAULT_ADDENDUM:
            params["addendum"] = _format_number(self.addendum)
        if self.max_results != DEFAULT_MAX_RESULTS:
            params["max-results"] = str(self.max_results)
        return params

    def to_query_string(self) -> str:
        return urlencode(self.to_query_params())

    @classmethod
    def from_query_params(cls, params: dict[str, str]) -> "CalculationInputs":
        """
        Build inputs from bookmark URL parameters.

        Missing optional parameters fall back to the defaults. Invalid values
        raise a pydantic ValidationError.
        """
        def gear_list(name: str) -> Optional[list[str]]:
            text = params.get(name)
            if text is None or not text.strip():
                return None
            return [part.strip() for part in text.split(",")]

        data = {
            "leadscrew_lead": params.get("leadscrew-lead"),
            "leadscrew_unit": (
                LengthUnit.TPI if _is_checked(params.get("leadscrew-tpi")) else LengthUnit.MM
            ),
            "shaft_count": params.get("shaft-count"),
            "change_gears": gear_list("change-gear-set"),
            "input_gears": gear_list("input-gear-set"),
            "input_set_shared": _is_checked(params.get("input-set-shared")),
            "desired_lead": params.get("desired-lead"),
            "desired_unit": (
                LengthUnit.TPI if _is_checked(params.get("desired-tpi")) else LengthUnit.MM
            ),
            "module_unit": (
                ModuleUnit.DIAMETRAL_PITCH if _is_checked(params.get("module-dp"))
                else ModuleUnit.MODULE
            ),
        }
        optional = {
            "module": "module",
            "input_adjacent_size": "input-adjacent-size",
            "spacer_size": "spacer-size",
            "min_shaft_distance": "min-shaft-distance",
            "max_shaft_distance": "max-shaft-distance",
            "addendum": "addendum",
            "max_results": "max-results",
        }
        for field_name, param_name in optional.items():
            value = params.get(param_name)
            if value is not None and value.strip():
                data[field_name] = value.strip()
        return cls(**data)

    @classmethod
    def from_query_string(cls, query: str) -> "CalculationInputs":
        """Parse the query part of a bookmark URL (anything before ``?`` is ignored)."""
        if "?" in query:
            query = query.split("?", 1)[1]
        parsed = parse_qs(query, keep_blank_values=True)
        return cls.from_query_params({name: values[-1] for name, values in parsed.items()})

    model_config = {
        "json_schema_extra": {
            "example": {
                "leadscrew_lead": 3.0,
                "leadscrew_unit": "mm",
                "shaft_count": 3,
                "change_gears": [20, 25, 30, 35, 40, 45, 50, 55, 60],
                "input_gears": None,
                "input_set_shared": True,
                "desired_lead": 1.25,
                "desired_unit": "mm",
                "module": 1.0,
                "module_unit": "mod",
                "addendum": 1.2,
                "spacer_size": 10,
                "input_adjacent_size": 10,
                "min_shaft_distance": 0,
                "max_shaft_distance": 0,
                "max_results": 200
            }
        }
    }
