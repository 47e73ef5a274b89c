"""Pytest configuration and fixtures for ecosystem tests."""

import random

import pytest

from ecosim.config import Config, WorldConfig
from ecosim.simulation import Ecosystem
from ecosim.traits import HerbivoreTraits, PredatorTraits, ProducerTraits


def empty_config(**world) -> Config:
    """Configuration with no initial organisms, overridable per test."""
    defaults = dict(
        initial_producer_count=0,
        initial_herbivore_count=0,
        initial_predator_count=0,
        seed=42,
    )
    defaults.update(world)
    return Config(world=WorldConfig(**defaults))


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def empty_ecosystem():
    """An initialized ecosystem with no organisms and the extinction floor on."""
    ecosystem = Ecosystem(empty_config())
    ecosystem.initialize()
    return ecosystem


@pytest.fixture
def tree_traits():
    """Mid-range tree characteristics with the default 0.5 scale applied."""
    return ProducerTraits(
        max_size=15.0,
        age_to_spread=10.0,
        spread_distance=0.05,
        death_chance=0.002,
        spread_chance=0.1,
        optimal_moisture=0.5,
        crowding_susceptibility=1.0,
    )


@pytest.fixture
def deer_traits():
    return HerbivoreTraits(
        max_size=3.0,
        speed=0.005,
        death_chance=0.00001,
        reproduce_chance=0.5,
        crowding_susceptibility=1.0,
        max_eatable_size=10.0,
        energy_needs=0.02,
    )


@pytest.fixture
def wolf_traits():
    return PredatorTraits(
        max_size=4.0,
        speed=0.008,
        death_chance=0.00001,
        reproduce_chance=0.1,
        crowding_susceptibility=1.0,
        hunt_radius=0.1,
        energy_needs=0.05,
    )


@pytest.fixture
def make_ecosystem():
    """Factory for initialized, empty ecosystems with world overrides."""

    def factory(**world) -> Ecosystem:
        ecosystem = Ecosystem(empty_config(**world))
        ecosystem.initialize()
        return ecosystem

    return factory


@pytest.fixture
def make_config():
    """Factory for empty configurations with world overrides."""
    return empty_config
