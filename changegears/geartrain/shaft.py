"""
Shafts and the interference check between adjacent shafts.

A shaft carries either one gear (used for both input and output) or two
co-rotating gears. Tooth counts double as pitch diameters in module units,
so clearances are expressed in teeth.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Shaft:
    """
    One axle stage of a gear train.

    Pass ``output_gear=0`` for a shaft with a single gear; the input gear
    then also drives the next shaft and ``spacer_size`` stands in for the
    missing second gear in interference calculations.
    """
    input_gear: int
    output_gear: int = 0
    spacer_size: float = 0.0
    gear_count: int = field(init=False)

    def __post_init__(self):
        if self.output_gear > 0:
            object.__setattr__(self, "gear_count", 2)
        else:
            object.__setattr__(self, "gear_count", 1)
            object.__setattr__(self, "output_gear", self.input_gear)

    @property
    def is_single(self) -> bool:
        return self.gear_count == 1

    def __str__(self) -> str:
        if self.is_single:
            return f"{self.input_gear}"
        return f"{self.input_gear}-{self.output_gear}"


def meshing_distance(input_shaft: Shaft, output_shaft: Shaft) -> float:
    """Center distance (in teeth) of the two gears that drive each other."""
    return input_shaft.output_gear + output_shaft.input_gear


def non_meshing_distance(
    input_shaft: Shaft,
    output_shaft: Shaft,
    addendum: float = 1.25,
) -> float:
    """
    Center distance (in teeth) needed by the two gears that must only clear each other.

    The upstream shaft contributes its input gear (or its spacer if it has a
    single gear), the downstream shaft its output gear (or spacer). The
    addendum is added once per gear for the tooth tips.
    """
    distance = 0.0
    if input_shaft.is_single:
        distance += input_shaft.spacer_size
    else:
        distance += input_shaft.input_gear
    if output_shaft.is_single:
        distance += output_shaft.spacer_size
    else:
        distance += output_shaft.output_gear
    return distance + 2 * addendum


def shafts_interfere(
    input_shaft: Shaft,
    output_shaft: Shaft,
    addendum: float = 1.25,
) -> bool:
    """
    Check whether the non-meshing gears of two adjacent shafts collide.

    Not symmetric: ``shafts_interfere(a, b)`` being False says nothing
    about ``shafts_interfere(b, a)``.

    Args:
        input_shaft: Upstream shaft
        output_shaft: Downstream shaft, driven by ``input_shaft``
        addendum: Tooth height margin added to each clearing gear

    Returns:
        True if the non-meshing gears need more room than the meshing pair provides
    """
    return (
        non_meshing_distance(input_shaft, output_shaft, addendum)
        > meshing_distance(input_shaft, output_shaft)
    )
