"""
Gear train snapshots and their derived quantities.

A GearTrain is built once from a complete (or partial) shaft sequence and
never changes afterwards; the search engine hands out copies, not views
into its own state.
"""

from fractions import Fraction
from typing import Iterable, Optional

from changegears.geartrain.shaft import Shaft


class GearTrain:
    """
    An ordered sequence of shafts with its ratio and load figures.

    All figures are computed once on construction and exposed read-only.

    Attributes:
        shafts: Tuple of shafts, input shaft first
        numerator: Product of driving (output) gear tooth counts
        denominator: Product of driven (input) gear tooth counts
        output_multiplier: numerator / denominator
        max_force: Relative worst-case tooth load (lower is better)
    """

    __slots__ = ("_shafts", "_numerator", "_denominator", "_output_multiplier", "_max_force")

    def __init__(self, shafts: Iterable[Shaft] = ()):
        self._shafts: tuple[Shaft, ...] = tuple(shafts)
        self._numerator = 1
        self._denominator = 1
        self._output_multiplier = -1.0
        self._max_force = 0.0
        if self._shafts:
            self._update_output_fraction()
            self._update_max_force()

    def _update_output_fraction(self) -> None:
        numerator = 1
        denominator = 1
        for previous, current in zip(self._shafts, self._shafts[1:]):
            numerator *= previous.output_gear
            denominator *= current.input_gear
        self._numerator = numerator
        self._denominator = denominator
        self._output_multiplier = numerator / denominator

    def _update_max_force(self) -> None:
        # Unit torque on the input shaft; each mesh scales it by the tooth ratio
        torque = 1.0
        max_force = torque / self._shafts[0].input_gear
        for previous, current in zip(self._shafts, self._shafts[1:]):
            torque *= current.input_gear / previous.output_gear
            max_force = max(max_force, torque / current.input_gear)
            max_force = max(max_force, torque / current.output_gear)
        self._max_force = max_force

    @property
    def shafts(self) -> tuple[Shaft, ...]:
        return self._shafts

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def output_multiplier(self) -> float:
        return self._output_multiplier

    @property
    def max_force(self) -> float:
        return self._max_force

    @property
    def fraction(self) -> Fraction:
        """Exact output multiplier, reduced."""
        return Fraction(self.numerator, self.denominator)

    @property
    def shaft_count(self) -> int:
        return len(self.shafts)

    def shaft_distance(
        self,
        module: float = 1.0,
        first_shaft: int = 0,
        last_shaft: Optional[int] = None,
    ) -> float:
        """
        Distance between the first and last shaft of a window, for a given module.

        Args:
            module: Gear module (pitch diameter per tooth)
            first_shaft: Index of the first shaft of the window
            last_shaft: Index one past the last shaft; None means all shafts

        Returns:
            Summed spacing, or 0 if the window holds fewer than two shafts
        """
        if first_shaft > len(self.shafts) - 2:
            return 0.0
        if last_shaft is None or last_shaft < 0:
            last_shaft = len(self.shafts)

        distance = 0.0
        for i in range(first_shaft + 1, last_shaft):
            output_diameter = self.shafts[i - 1].output_gear * module
            input_diameter = self.shafts[i - 1].input_gear * module
            distance += (output_diameter + input_diameter) / 2
        return distance

    def label(self) -> str:
        """Compact description, e.g. ``"0.75: 30:40-20:20"``."""
        if not self.shafts:
            return ""
        parts = [str(self.shafts[0].output_gear)]
        parts.extend(str(shaft) for shaft in self.shafts[1:])
        return f"{self.output_multiplier:.2f}: " + ":".join(parts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, GearTrain):
            return NotImplemented
        return self.shafts == other.shafts

    def __hash__(self) -> int:
        return hash(self.shafts)

    def __len__(self) -> int:
        return len(self.shafts)

    def __str__(self) -> str:
        return self.label()

    def __repr__(self) -> str:
        return f"GearTrain({self.label()!r}, max_force={self.max_force:.4f})"
