"""Tests for tree growth, death and seeding."""

import random
from dataclasses import replace

import pytest

from ecosim.config import Config, ProducerConfig, WorldConfig
from ecosim.simulation import Ecosystem
from ecosim.traits import within_bounds


class FixedRandom(random.Random):
    """RNG whose random() and uniform() always return fixed values."""

    def __init__(self, value: float, uniform_value: float = 0.0):
        super().__init__(0)
        self.value = value
        self.uniform_value = uniform_value

    def random(self) -> float:
        return self.value

    def uniform(self, a: float, b: float) -> float:
        return self.uniform_value


def matched_traits(ecosystem, traits, x, y):
    """Traits whose optimal moisture equals the terrain at (x, y)."""
    return replace(traits, optimal_moisture=ecosystem.moisture_at(x, y))


class TestMoistureFitness:
    def test_perfect_match(self, empty_ecosystem, tree_traits):
        traits = matched_traits(empty_ecosystem, tree_traits, 0.3, 0.7)
        tree = empty_ecosystem.spawn_producer(0.3, 0.7, traits)
        assert empty_ecosystem.producer_pass.moisture_fitness(tree) == 1.0

    def test_linear_falloff(self, empty_ecosystem, tree_traits):
        moisture = empty_ecosystem.moisture_at(0.3, 0.7)
        optimal = moisture - 0.1 if moisture > 0.5 else moisture + 0.1
        tree = empty_ecosystem.spawn_producer(
            0.3, 0.7, replace(tree_traits, optimal_moisture=optimal)
        )
        assert empty_ecosystem.producer_pass.moisture_fitness(tree) == pytest.approx(0.8)

    def test_floor(self, tree_traits):
        config = Config(
            world=WorldConfig(
                initial_producer_count=0,
                initial_herbivore_count=0,
                initial_predator_count=0,
                seed=1,
            ),
            producer=ProducerConfig(moisture_fitness_slope=10.0),
        )
        ecosystem = Ecosystem(config)
        moisture = ecosystem.moisture_at(0.5, 0.5)
        optimal = 1.0 if moisture < 0.5 else 0.0
        tree = ecosystem.spawn_producer(0.5, 0.5, replace(tree_traits, optimal_moisture=optimal))
        assert ecosystem.producer_pass.moisture_fitness(tree) == 0.05


class TestGrowth:
    def test_isolated_tree_grows_by_fitness(self, empty_ecosystem, tree_traits):
        traits = matched_traits(empty_ecosystem, tree_traits, 0.5, 0.5)
        tree = empty_ecosystem.spawn_producer(0.5, 0.5, traits)
        empty_ecosystem.step()
        assert tree.size == pytest.approx(1.0)
        assert tree.age == 1

    def test_growth_stops_at_max_size(self, empty_ecosystem, tree_traits):
        traits = matched_traits(empty_ecosystem, tree_traits, 0.5, 0.5)
        tree = empty_ecosystem.spawn_producer(0.5, 0.5, traits, size=14.5)
        empty_ecosystem.step()
        assert tree.size == 15.0
        assert tree.is_mature

    def test_mature_tree_skips_density(self, empty_ecosystem, tree_traits, monkeypatch):
        tree = empty_ecosystem.spawn_producer(0.5, 0.5, tree_traits, size=15.0)

        def fail(*args):
            raise AssertionError("density evaluated for a mature tree")

        monkeypatch.setattr(empty_ecosystem.producer_pass, "density", fail)
        empty_ecosystem.step()
        assert tree.size == 15.0

    def test_crowding_slows_growth(self, empty_ecosystem, tree_traits):
        traits = matched_traits(empty_ecosystem, tree_traits, 0.5, 0.5)
        tree = empty_ecosystem.spawn_producer(0.5, 0.5, traits)
        empty_ecosystem.step(precomputed_density=[1.0])
        # Mid-range susceptibility loses 0.25 + 0.70 * (1.0 - 0.5) / 1.5 of its growth
        reduction = 0.25 + 0.70 * (1.0 / 3.0)
        assert tree.size == pytest.approx(1.0 - reduction)


class TestCrowdingCurves:
    def test_growth_reduction_range(self, empty_ecosystem, tree_traits):
        low = empty_ecosystem.spawn_producer(
            0.5, 0.5, replace(tree_traits, crowding_susceptibility=0.5)
        )
        high = empty_ecosystem.spawn_producer(
            0.5, 0.5, replace(tree_traits, crowding_susceptibility=2.0)
        )
        producer_pass = empty_ecosystem.producer_pass
        assert producer_pass.growth_reduction(low) == pytest.approx(0.25)
        assert producer_pass.growth_reduction(high) == pytest.approx(0.95)

    def test_death_multiplier_range(self, empty_ecosystem, tree_traits):
        low = empty_ecosystem.spawn_producer(
            0.5, 0.5, replace(tree_traits, crowding_susceptibility=0.5)
        )
        high = empty_ecosystem.spawn_producer(
            0.5, 0.5, replace(tree_traits, crowding_susceptibility=2.0)
        )
        producer_pass = empty_ecosystem.producer_pass
        assert producer_pass.crowded_death_chance(low, 1.0) == pytest.approx(0.5 * 0.40)
        assert producer_pass.crowded_death_chance(high, 1.0) == pytest.approx(0.5 * 1.0)
        assert producer_pass.crowded_death_chance(high, 0.0) == 0.0


class TestDeath:
    def test_last_tree_never_dies(self, empty_ecosystem, tree_traits):
        tree = empty_ecosystem.spawn_producer(
            0.5, 0.5, replace(tree_traits, death_chance=1.0, spread_chance=0.0)
        )
        for _ in range(20):
            empty_ecosystem.step(precomputed_density=[1.0])
        assert tree.alive
        assert empty_ecosystem.counts["producers"] == 1

    def test_certain_death_without_floor(self, make_ecosystem, tree_traits):
        ecosystem = make_ecosystem(extinction_floor_enabled=False)
        tree = ecosystem.spawn_producer(0.5, 0.5, replace(tree_traits, death_chance=1.0))
        ecosystem.step()
        assert not tree.alive
        assert tree not in ecosystem.grid
        assert len(ecosystem.producers) == 0
        assert ecosystem.stats.producer_deaths == 1

    def test_dead_tree_leaves_index(self, empty_ecosystem, tree_traits):
        doomed = empty_ecosystem.spawn_producer(0.2, 0.2, replace(tree_traits, death_chance=1.0))
        empty_ecosystem.spawn_producer(0.8, 0.8, replace(tree_traits, death_chance=0.0))
        empty_ecosystem.step()
        assert not doomed.alive
        assert doomed not in empty_ecosystem.grid
        assert len(empty_ecosystem.grid) == 1


class TestSeeding:
    def test_no_seeding_at_spread_age(self, empty_ecosystem, tree_traits):
        traits = matched_traits(empty_ecosystem, replace(tree_traits, spread_chance=1.0), 0.5, 0.5)
        tree = empty_ecosystem.spawn_producer(0.5, 0.5, traits)
        tree.age = 10
        assert empty_ecosystem.producer_pass.reproduce(tree) is None

    def test_seeding_past_spread_age(self, empty_ecosystem, tree_traits):
        traits = matched_traits(empty_ecosystem, replace(tree_traits, spread_chance=1.0), 0.5, 0.5)
        tree = empty_ecosystem.spawn_producer(0.5, 0.5, traits)
        tree.age = 11
        child = empty_ecosystem.producer_pass.reproduce(tree)
        assert child is not None
        assert child.get_distance_to(tree.x, tree.y) <= tree.traits.spread_distance + 1e-12
        assert child.size == 0.0
        assert child.traits == tree.traits
        assert child.id != tree.id

    def test_seed_off_plane_is_dropped(self, empty_ecosystem, tree_traits):
        tree = empty_ecosystem.spawn_producer(1.0, 1.0, replace(tree_traits, spread_chance=1.0))
        tree.age = 50
        # Angle 0 and full spread distance push the seed past x = 1
        empty_ecosystem.rng = FixedRandom(0.999, uniform_value=0.0)
        assert empty_ecosystem.producer_pass.seed_location(tree) is None

    def test_saplings_join_population_and_index(self, empty_ecosystem, tree_traits):
        traits = matched_traits(
            empty_ecosystem, replace(tree_traits, spread_chance=1.0, age_to_spread=0.0), 0.5, 0.5
        )
        empty_ecosystem.spawn_producer(0.5, 0.5, replace(traits, death_chance=0.0))
        empty_ecosystem.step()
        assert empty_ecosystem.stats.producer_births == 1
        assert len(empty_ecosystem.producers) == 2
        assert len(empty_ecosystem.grid) == 2

    def test_mutated_saplings_stay_in_bounds(self, make_ecosystem, tree_traits):
        ecosystem = make_ecosystem(mutation_enabled=True, mutation_range=0.5)
        traits = matched_traits(ecosystem, replace(tree_traits, spread_chance=1.0), 0.5, 0.5)
        tree = ecosystem.spawn_producer(0.5, 0.5, traits)
        tree.age = 50
        children = [ecosystem.producer_pass.reproduce(tree) for _ in range(100)]
        children = [child for child in children if child is not None]
        assert children
        for child in children:
            assert within_bounds(child.traits, ecosystem.producer_bounds)
