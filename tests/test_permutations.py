"""
Tests for the resumable gear train search.

Covers the arrangement count, the counter bookkeeping, duplicate elimination
and the step-wise execution contract.
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from changegears.geartrain.permutations import (
    GearTrainPermutations,
    SearchConfig,
    SearchFrame,
    permutation_count,
)
from changegears.geartrain.shaft import Shaft, shafts_interfere


def brute_force_trains(config: SearchConfig) -> set:
    """Every distinct interference-free train, by plain recursion over pool positions."""
    trains = set()

    def extend(shafts, pool):
        if len(shafts) == config.shaft_count - 1:
            for gear in pool:
                candidate = shafts + (Shaft(gear, 0, config.spacer_size),)
                if not shafts_interfere(candidate[-2], candidate[-1], config.addendum):
                    trains.add(candidate)
            return
        for i in range(len(pool)):
            for o in range(len(pool)):
                if i == o:
                    shaft = Shaft(pool[i], 0, config.spacer_size)
                    rest = pool[:i] + pool[i + 1:]
                else:
                    shaft = Shaft(pool[i], pool[o], config.spacer_size)
                    rest = tuple(g for k, g in enumerate(pool) if k not in (i, o))
                extend(shafts + (shaft,), rest)

    for gear in config.first_gear_set:
        pool = list(config.change_gears)
        if config.input_set_shared:
            pool.remove(gear)
        extend((Shaft(gear, 0, config.input_adjacent_size),), tuple(pool))
    return trains


class TestPermutationCount:
    """Tests for the closed form arrangement count."""

    def test_last_shaft_takes_any_gear(self):
        assert permutation_count(1, 5) == 5

    def test_no_gears_left(self):
        assert permutation_count(1, 0) == 0
        assert permutation_count(3, 0) == 0

    def test_two_shafts_three_gears(self):
        """3 single choices with 2 left, 6 pairs with 1 left."""
        assert permutation_count(2, 3) == 12

    def test_three_shafts_four_gears(self):
        assert permutation_count(3, 4) == 4 * 12 + 12 * 2

    def test_too_few_gears(self):
        """Test that a pool smaller than the shafts allows no arrangement."""
        assert permutation_count(2, 1) == 0


class TestSetup:
    """Tests for engine setup."""

    def test_total_shared_pool(self, small_config):
        """Seed gear removed: 4 seeds times 2 stages over 3 remaining gears."""
        engine = GearTrainPermutations()
        engine.setup(small_config)

        assert engine.total == 4 * permutation_count(2, 3) == 48
        assert engine.found == engine.skipped == engine.discarded == 0

    def test_total_separate_input_pool(self):
        """Separate input gears leave the change gear pool untouched."""
        config = SearchConfig(shaft_count=3, change_gears=(20, 30, 40), input_gears=(24, 36),
                              input_set_shared=False)
        engine = GearTrainPermutations(config)
        engine.setup()

        assert engine.total == 2 * permutation_count(2, 3)

    def test_arrangement_count_matches_total(self, small_config, duplicate_config):
        for config in (small_config, duplicate_config):
            engine = GearTrainPermutations()
            engine.setup(config)

            assert engine.total == config.arrangement_count

    def test_config_cannot_change_during_search(self, small_config):
        """Test that the gear pools of a running search are fixed."""
        engine = GearTrainPermutations()
        engine.setup(small_config)
        engine.advance()

        with pytest.raises(FrozenInstanceError):
            small_config.change_gears = (20, 30)
        with pytest.raises(FrozenInstanceError):
            small_config.input_set_shared = False
        assert engine.config.first_gear_set == (20, 30, 40, 50)

    def test_gear_sets_stored_as_tuples(self):
        config = SearchConfig(shaft_count=2, change_gears=[20, 40], input_gears=[30])

        assert config.change_gears == (20, 40)
        assert config.input_gears == (30,)

    def test_advance_before_setup_raises(self, small_config):
        engine = GearTrainPermutations(small_config)

        with pytest.raises(RuntimeError):
            engine.advance()

    def test_setup_without_config_raises(self):
        with pytest.raises(RuntimeError):
            GearTrainPermutations().setup()

    def test_single_shaft_rejected(self):
        with pytest.raises(ValueError):
            GearTrainPermutations().setup(SearchConfig(shaft_count=1, change_gears=(20, 30)))

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError):
            GearTrainPermutations().setup(SearchConfig(shaft_count=2, change_gears=()))

    def test_setup_resets_previous_search(self, small_config, run_search):
        """Test that a second setup starts from scratch."""
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)
        first_found = engine.found

        engine.setup(small_config)

        assert engine.found == 0
        assert engine.results() == []
        assert not engine.is_complete
        run_search(engine)
        assert engine.found == first_found


class TestSearch:
    """Tests for a complete search run."""

    def test_counters_add_up_to_total(self, small_config, run_search):
        """Test that every arrangement is accounted for exactly once."""
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        assert engine.is_complete
        assert engine.found + engine.skipped + engine.discarded == engine.total
        assert engine.progress == 1.0

    def test_results_match_found(self, small_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        assert len(engine.results()) == engine.found
        assert engine.found > 0

    def test_interference_is_discarded(self, small_config, run_search):
        """Test that e.g. 50-20 followed by 30 is rejected."""
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        assert engine.discarded > 0
        for train in engine.results():
            assert not shafts_interfere(train.shafts[-2], train.shafts[-1], small_config.addendum)

    def test_matches_brute_force(self, small_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        assert {train.shafts for train in engine.results()} == brute_force_trains(small_config)

    def test_stored_multiplier_matches_shafts(self, small_config, run_search):
        """Test the multiplier against a product of per-mesh ratios."""
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        for train in engine.results():
            ratio = 1.0
            for previous, current in zip(train.shafts, train.shafts[1:]):
                ratio *= previous.output_gear / current.input_gear
            assert train.output_multiplier == pytest.approx(ratio)

    def test_every_train_has_all_shafts(self, small_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        for train in engine.results():
            assert train.shaft_count == 3
            assert train.shafts[-1].is_single
            assert train.shafts[0].spacer_size == small_config.input_adjacent_size

    def test_top_result_closest_to_target(self, small_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)
        ranked = engine.finalize()

        best = abs(ranked[0].output_multiplier - 1.0)
        assert all(best <= abs(t.output_multiplier - 1.0) for t in ranked)

    def test_two_shaft_search(self, run_search):
        """Two shafts: input gear meshing directly with the output gear."""
        config = SearchConfig(shaft_count=2, change_gears=(20, 40), input_set_shared=True,
                              target_multiplier=0.5)
        engine = GearTrainPermutations()
        engine.setup(config)
        run_search(engine)
        ranked = engine.finalize()

        assert engine.total == 2
        assert [t.label() for t in ranked] == ["0.50: 20:40", "2.00: 40:20"]


class TestDuplicates:
    """Tests for elimination of repeated tooth counts."""

    def test_no_duplicate_trains(self, duplicate_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(duplicate_config)
        run_search(engine)

        shafts = [train.shafts for train in engine.results()]
        assert len(shafts) == len(set(shafts))

    def test_duplicates_counted_as_skipped(self, duplicate_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(duplicate_config)
        run_search(engine)

        assert engine.skipped > 0
        assert engine.found + engine.skipped + engine.discarded == engine.total

    def test_duplicates_match_brute_force(self, duplicate_config, run_search):
        """Test that skipping duplicates never loses a distinct train."""
        engine = GearTrainPermutations()
        engine.setup(duplicate_config)
        run_search(engine)

        assert {train.shafts for train in engine.results()} == brute_force_trains(duplicate_config)

    def test_same_gear_twice_on_one_shaft(self, duplicate_config, run_search):
        """Two 40 tooth gears may share a shaft."""
        engine = GearTrainPermutations()
        engine.setup(duplicate_config)
        run_search(engine)

        assert any(train.shafts[1] == Shaft(40, 40, 0) for train in engine.results())

    def test_duplicate_seed_gears(self, run_search):
        """Repeated input gears give the same trains once."""
        config = SearchConfig(shaft_count=3, change_gears=(20, 30, 40), input_gears=(25, 25, 35),
                              input_set_shared=False, spacer_size=0, input_adjacent_size=0)
        engine = GearTrainPermutations()
        engine.setup(config)
        run_search(engine)

        shafts = [train.shafts for train in engine.results()]
        assert len(shafts) == len(set(shafts))
        assert set(shafts) == brute_force_trains(config)
        assert engine.found + engine.skipped + engine.discarded == engine.total


class TestDistanceConstraints:
    """Tests for the shaft distance bounds."""

    def test_unreachable_minimum(self, small_config, run_search):
        """Test that nothing passes when the minimum is out of reach."""
        config = replace(small_config, min_shaft_distance=1000)
        engine = GearTrainPermutations()
        engine.setup(config)
        run_search(engine)

        assert engine.found == 0
        assert engine.discarded == 0
        assert engine.skipped == engine.total

    def test_maximum_is_honored(self, small_config, run_search):
        config = replace(small_config, max_shaft_distance=70)
        engine = GearTrainPermutations()
        engine.setup(config)
        run_search(engine)

        assert engine.found > 0
        assert all(train.shaft_distance() <= 70 for train in engine.results())
        assert engine.found + engine.skipped + engine.discarded == engine.total

    def test_distance_uses_module(self, small_config, run_search):
        """Test that a larger module spreads the shafts further apart."""
        config = replace(small_config, max_shaft_distance=70, module=2.0)
        engine = GearTrainPermutations()
        engine.setup(config)
        run_search(engine)

        assert all(train.shaft_distance(2.0) <= 70 for train in engine.results())


class TestStepwiseExecution:
    """Tests for the advance/finalize contract."""

    def test_advance_after_completion_is_idempotent(self, small_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)
        counters = (engine.found, engine.skipped, engine.discarded)
        results = engine.results()

        assert engine.advance() is True
        assert engine.advance() is True
        assert (engine.found, engine.skipped, engine.discarded) == counters
        assert engine.results() == results

    def test_progress_is_monotonic(self, small_config):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        last = engine.progress
        while not engine.advance():
            assert engine.progress >= last
            last = engine.progress
        assert engine.progress == 1.0

    def test_finalize_before_completion_raises(self, small_config):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        engine.advance()

        with pytest.raises(RuntimeError):
            engine.finalize()

    def test_finalize_twice_gives_same_ranking(self, small_config, run_search):
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        assert engine.finalize() == engine.finalize()

    def test_results_are_copies(self, small_config, run_search):
        """Test that callers cannot change the engine's result list."""
        engine = GearTrainPermutations()
        engine.setup(small_config)
        run_search(engine)

        results = engine.results()
        results.clear()
        assert len(engine.results()) == engine.found

    def test_frames_are_immutable(self):
        frame = SearchFrame(shafts=(Shaft(20),), available_gears=(30, 40), current_shaft=1)

        with pytest.raises(FrozenInstanceError):
            frame.input_index = 1

    def test_interleaved_engines_are_independent(self, small_config, duplicate_config):
        """Test that two searches advanced alternately do not share state."""
        first = GearTrainPermutations()
        second = GearTrainPermutations()
        first.setup(small_config)
        second.setup(duplicate_config)

        done = [False, False]
        while not all(done):
            if not done[0]:
                done[0] = first.advance()
            if not done[1]:
                done[1] = second.advance()

        assert {t.shafts for t in first.results()} == brute_force_trains(small_config)
        assert {t.shafts for t in second.results()} == brute_force_trains(duplicate_config)
