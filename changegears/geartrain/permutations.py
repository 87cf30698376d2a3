"""
Resumable enumeration of change-gear trains.

Every shaft gets one or two gears from the pool of available gears and all
resulting trains are checked against the shaft distance constraints and for
interference between the two last shafts. The backtracking is kept on an
explicit stack of frames so that the search can be advanced a small step
at a time by the caller:

    engine = GearTrainPermutations()
    engine.setup(config)
    while not engine.advance():
        ...  # redraw progress, check a deadline, etc.
    trains = engine.finalize()

Pool positions are enumerated as (input_index, output_index) pairs; equal
indices mean a single-gear shaft. The pools must be sorted ascending so that
equal tooth counts sit next to each other, which is what the duplicate
skipping relies on.
"""

import logging
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Optional

from changegears.geartrain.shaft import Shaft, shafts_interfere
from changegears.geartrain.train import GearTrain
from changegears.scoring.ranking import rank_gear_trains

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def permutation_count(shaft_count: int, gear_count: int) -> int:
    """
    Number of arrangements of ``shaft_count`` shafts drawn from ``gear_count`` gears.

    Every shaft but the last holds one gear or two distinct gears; the last
    shaft holds a single gear.

    Args:
        shaft_count: Shafts still to be populated
        gear_count: Gears available to them

    Returns:
        Arrangement count (0 if no gears are left)
    """
    if gear_count <= 0:
        return 0
    if shaft_count == 1:
        return gear_count

    # Single gear on this shaft
    total = gear_count * permutation_count(shaft_count - 1, gear_count - 1)
    # Separate input and output gears on this shaft
    total += gear_count * (gear_count - 1) * permutation_count(shaft_count - 1, gear_count - 2)
    return total


@dataclass(frozen=True)
class SearchConfig:
    """
    Strongly typed search parameters, fixed for the lifetime of a search.

    Gear sets must be sorted ascending. Spacer sizes are in teeth; distance
    bounds are in the units of ``module`` and 0 means unbounded.
    """
    shaft_count: int
    change_gears: tuple[int, ...]
    input_gears: tuple[int, ...] = ()
    input_set_shared: bool = True
    target_multiplier: float = 1.0
    spacer_size: float = 0.0
    input_adjacent_size: float = 0.0
    addendum: float = 1.2
    module: float = 1.0
    min_shaft_distance: float = 0.0
    max_shaft_distance: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "change_gears", tuple(self.change_gears))
        object.__setattr__(self, "input_gears", tuple(self.input_gears))

    @property
    def first_gear_set(self) -> tuple[int, ...]:
        """Gears to choose the input shaft gear from."""
        return self.change_gears if self.input_set_shared else self.input_gears

    @property
    def has_distance_constraints(self) -> bool:
        return self.min_shaft_distance > 0 or self.max_shaft_distance > 0

    @property
    def arrangement_count(self) -> int:
        """Arrangements a search over this configuration covers."""
        change_count = len(self.change_gears)
        remaining_shafts = self.shaft_count - 1
        if self.input_set_shared:
            return change_count * permutation_count(remaining_shafts, change_count - 1)
        return len(self.input_gears) * permutation_count(remaining_shafts, change_count)


@dataclass(frozen=True)
class SearchFrame:
    """
    Continuation of the gear selection for one shaft.

    ``shafts`` holds the shafts already fixed upstream of ``current_shaft``
    and is never modified once the frame exists.
    """
    shafts: tuple[Shaft, ...]
    available_gears: tuple[int, ...]
    current_shaft: int
    input_index: int = 0
    output_index: int = 0


def _is_redundant_choice(pool: tuple[int, ...], input_index: int, output_index: int) -> bool:
    """Whether an equal pool value at an earlier position already covers this choice."""
    if input_index > 0 and pool[input_index] == pool[input_index - 1]:
        return True
    if input_index == output_index:
        return False
    previous = output_index - 1
    if previous == input_index:
        previous -= 1
    return previous >= 0 and pool[previous] == pool[output_index]


@dataclass
class GearTrainPermutations:
    """
    Step-wise generator of valid gear trains.

    Counters:
        found: Trains accepted into ``gear_trains``
        skipped: Arrangements optimized out (duplicates) or outside the distance bounds
        discarded: Arrangements rejected for interference
        total: Arrangements the search covers, for progress reporting

    ``found + skipped + discarded`` reaches ``total`` when the search completes.
    """
    config: Optional[SearchConfig] = None
    gear_trains: list[GearTrain] = field(default_factory=list)
    found: int = 0
    skipped: int = 0
    discarded: int = 0
    total: int = 0
    _stack: list[SearchFrame] = field(default_factory=list, repr=False)
    _input_gear_index: int = field(default=0, repr=False)
    _ready: bool = field(default=False, repr=False)
    _finalized: bool = field(default=False, repr=False)

    def setup(self, config: Optional[SearchConfig] = None) -> None:
        """
        Reset the search. Must be called once before ``advance()``.

        Raises:
            ValueError: If the configuration breaks the caller contract
                (fewer than two shafts or no gears to draw from)
        """
        if config is not None:
            self.config = config
        if self.config is None:
            raise RuntimeError("No search configuration given")
        if self.config.shaft_count < 2:
            raise ValueError("A gear train needs at least two shafts")
        if not self.config.change_gears or not self.config.first_gear_set:
            raise ValueError("Gear sets must not be empty")

        self.gear_trains = []
        self.found = 0
        self.skipped = 0
        self.discarded = 0
        self._stack = []
        self._input_gear_index = 0
        self._finalized = False
        self._ready = True

        self.total = self.config.arrangement_count

    @property
    def is_complete(self) -> bool:
        if not self._ready:
            return False
        return self._input_gear_index >= len(self.config.first_gear_set) and not self._stack

    @property
    def tried(self) -> int:
        return self.found + self.skipped + self.discarded

    @property
    def progress(self) -> float:
        """Fraction of arrangements handled so far, 0.0 to 1.0."""
        if self.total <= 0:
            return 1.0 if self.is_complete else 0.0
        return min(1.0, self.tried / self.total)

    def advance(self) -> bool:
        """
        Perform one small step of the search.

        Returns:
            True once the whole search is complete (and on every call after that)
        """
        if not self._ready:
            raise RuntimeError("setup() must be called before advance()")
        if self.is_complete:
            return True

        if self._stack:
            frame = self._stack.pop()
            if frame.current_shaft == self.config.shaft_count - 1:
                self._complete_train(frame)
            else:
                self._expand_shaft(frame)
            return False

        self._seed_input_shaft()
        return False

    def _seed_input_shaft(self) -> None:
        first_gear_set = self.config.first_gear_set
        index = self._input_gear_index
        gear = first_gear_set[index]
        self._input_gear_index += 1

        available = list(self.config.change_gears)
        if self.config.input_set_shared and gear in available:
            # Only the first instance is used up by the input shaft
            available.remove(gear)

        if index > 0 and first_gear_set[index - 1] == gear:
            self.skipped += permutation_count(self.config.shaft_count - 1, len(available))
            return

        logger.debug("Starting calculation with input gear: %d", gear)
        seed = Shaft(gear, 0, self.config.input_adjacent_size)
        self._stack.append(SearchFrame((seed,), tuple(available), current_shaft=1))

    def _expand_shaft(self, frame: SearchFrame) -> None:
        pool = frame.available_gears
        input_index = frame.input_index
        output_index = frame.output_index
        if output_index >= len(pool):
            output_index = 0
            input_index += 1
        if input_index >= len(pool):
            return

        # Resume with the next output gear when we come back to this shaft
        self._stack.append(replace(frame, input_index=input_index, output_index=output_index + 1))

        remaining = list(pool)
        if input_index == output_index:
            output_gear = 0
            del remaining[input_index]
        else:
            output_gear = pool[output_index]
            del remaining[max(input_index, output_index)]
            del remaining[min(input_index, output_index)]

        if _is_redundant_choice(pool, input_index, output_index):
            shafts_left = self.config.shaft_count - frame.current_shaft - 1
            self.skipped += permutation_count(shafts_left, len(remaining))
            return

        shaft = Shaft(pool[input_index], output_gear, self.config.spacer_size)
        self._stack.append(
            SearchFrame(
                shafts=frame.shafts + (shaft,),
                available_gears=tuple(remaining),
                current_shaft=frame.current_shaft + 1,
            )
        )

    def _complete_train(self, frame: SearchFrame) -> None:
        pool = frame.available_gears
        for last_index, gear in enumerate(pool):
            # Equal gears would give the same train again
            if last_index > 0 and pool[last_index - 1] == gear:
                self.skipped += 1
                continue

            # Only one gear makes sense on the output shaft
            shafts = frame.shafts + (Shaft(gear, 0, self.config.spacer_size),)

            if self._constraints_violated(shafts):
                self.skipped += 1
                continue

            if shafts_interfere(shafts[-2], shafts[-1], self.config.addendum):
                self.discarded += 1
            else:
                self.gear_trains.append(GearTrain(shafts))
                self.found += 1

    def _constraints_violated(self, shafts: tuple[Shaft, ...]) -> bool:
        """Check the shaft distance bounds for the shafts chosen so far."""
        if len(shafts) < 2 or not self.config.has_distance_constraints:
            return False

        distance = GearTrain(shafts).shaft_distance(self.config.module)
        if self.config.min_shaft_distance > 0 and distance < self.config.min_shaft_distance:
            return True
        if self.config.max_shaft_distance > 0 and distance > self.config.max_shaft_distance:
            return True
        return False

    def results(self) -> list[GearTrain]:
        """Accepted trains; ranked once ``finalize()`` has run."""
        return list(self.gear_trains)

    def finalize(self) -> list[GearTrain]:
        """
        Rank the accepted trains against the target multiplier.

        Raises:
            RuntimeError: If the search has not completed yet
        """
        if not self.is_complete:
            raise RuntimeError("The search must complete before it is finalized")
        if not self._finalized:
            self.gear_trains = rank_gear_trains(self.gear_trains, self.config.target_multiplier)
            self._finalized = True
            logger.info(
                "From a total of %d permutations: %d valid, %d skipped (optimized out), "
                "%d rejected (interference)",
                self.total, self.found, self.skipped, self.discarded,
            )
        return self.results()
