"""Tests for characteristic vectors and bound tables."""

import random
from dataclasses import replace

import pytest

from ecosim.traits import (
    Bounds,
    HerbivoreBounds,
    HerbivoreTraits,
    PredatorBounds,
    PredatorTraits,
    ProducerBounds,
    ProducerTraits,
    clamp_traits,
    inherit_traits,
    mutate_traits,
    random_traits,
    scale_bounds,
    within_bounds,
)


class TestBounds:
    def test_clamp(self):
        bounds = Bounds(1.0, 3.0)
        assert bounds.clamp(0.0) == 1.0
        assert bounds.clamp(2.0) == 2.0
        assert bounds.clamp(5.0) == 3.0

    def test_normalize(self):
        bounds = Bounds(2.0, 4.0)
        assert bounds.normalize(2.0) == 0.0
        assert bounds.normalize(3.0) == pytest.approx(0.5)
        assert bounds.normalize(4.0) == 1.0
        assert bounds.normalize(10.0) == 1.0

    def test_normalize_degenerate_interval(self):
        assert Bounds(1.0, 1.0).normalize(1.0) == 0.0

    def test_sample_within(self, seeded_rng):
        bounds = Bounds(0.2, 0.4)
        for _ in range(100):
            assert 0.2 <= bounds.sample(seeded_rng) <= 0.4


def test_scale_bounds_only_touches_distances():
    scaled = scale_bounds(PredatorBounds(), 0.5)
    assert scaled.speed == Bounds(0.004, 0.0125)
    assert scaled.hunt_radius == Bounds(0.06, 0.14)
    assert scaled.max_size == PredatorBounds().max_size
    assert scaled.reproduce_chance == PredatorBounds().reproduce_chance


def test_scale_bounds_producer_spread():
    scaled = scale_bounds(ProducerBounds(), 2.0)
    assert scaled.spread_distance == Bounds(0.06, 0.3)
    assert scaled.age_to_spread == ProducerBounds().age_to_spread


@pytest.mark.parametrize(
    "table,cls",
    [(ProducerBounds(), ProducerTraits), (PredatorBounds(), PredatorTraits)],
)
def test_random_traits_within_bounds(table, cls, seeded_rng):
    for _ in range(50):
        assert within_bounds(random_traits(cls, table, seeded_rng), table)


def test_clamp_traits():
    wild = ProducerTraits(
        max_size=100.0,
        age_to_spread=-5.0,
        spread_distance=0.05,
        death_chance=0.01,
        spread_chance=0.1,
        optimal_moisture=2.0,
        crowding_susceptibility=1.0,
    )
    clamped = clamp_traits(wild, ProducerBounds())
    assert clamped.max_size == 25.0
    assert clamped.age_to_spread == 3.0
    assert clamped.optimal_moisture == 1.0
    assert within_bounds(clamped, ProducerBounds())


def test_mutation_stays_within_bounds(seeded_rng):
    table = HerbivoreBounds()
    traits = random_traits(HerbivoreTraits, table, seeded_rng)
    for _ in range(200):
        traits = mutate_traits(traits, table, seeded_rng, 0.5)
        assert within_bounds(traits, table)


def test_mutation_delta_is_fraction_of_span(tree_traits):
    rng = random.Random(7)
    table = ProducerBounds()
    mutated = mutate_traits(tree_traits, table, rng, 0.05)
    assert abs(mutated.max_size - tree_traits.max_size) <= 0.05 * table.max_size.span
    assert abs(mutated.optimal_moisture - tree_traits.optimal_moisture) <= 0.05


def test_inherit_without_mutation_clones(tree_traits, seeded_rng):
    child = inherit_traits(tree_traits, ProducerBounds(), seeded_rng, False, 0.05)
    assert child == tree_traits
    assert child is not tree_traits


def test_inherit_with_mutation_changes_traits(tree_traits, seeded_rng):
    child = inherit_traits(tree_traits, ProducerBounds(), seeded_rng, True, 0.05)
    assert child != tree_traits
    assert within_bounds(child, ProducerBounds())


def test_mutation_far_outside_bounds_is_clamped(tree_traits, seeded_rng):
    table = ProducerBounds()
    wild = replace(tree_traits, max_size=1000.0, optimal_moisture=-5.0)
    mutated = mutate_traits(wild, table, seeded_rng, 0.05)
    assert mutated.max_size == table.max_size.max
    assert mutated.optimal_moisture == table.optimal_moisture.min
