"""Characteristic vectors and the bound tables that constrain them."""

from __future__ import annotations

import random
from dataclasses import dataclass, fields, replace
from typing import Any, TypeVar


@dataclass(frozen=True)
class Bounds:
    """Closed interval a single trait must stay within."""

    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    def clamp(self, value: float) -> float:
        """Clamp a value into the interval."""
        return max(self.min, min(self.max, value))

    def normalize(self, value: float) -> float:
        """Map a value onto 0-1 relative to the interval (0 for a degenerate one)."""
        if self.span <= 0:
            return 0.0
        return max(0.0, min(1.0, (value - self.min) / self.span))

    def sample(self, rng: random.Random) -> float:
        """Draw a value uniformly from the interval."""
        return rng.uniform(self.min, self.max)

    def scaled(self, factor: float) -> Bounds:
        return Bounds(self.min * factor, self.max * factor)


@dataclass
class ProducerTraits:
    """Characteristics of a tree."""

    max_size: float
    age_to_spread: float
    spread_distance: float
    death_chance: float
    spread_chance: float
    optimal_moisture: float
    crowding_susceptibility: float


@dataclass
class HerbivoreTraits:
    """Characteristics of a deer."""

    max_size: float
    speed: float
    death_chance: float
    reproduce_chance: float
    crowding_susceptibility: float
    max_eatable_size: float
    energy_needs: float


@dataclass
class PredatorTraits:
    """Characteristics of a wolf."""

    max_size: float
    speed: float
    death_chance: float
    reproduce_chance: float
    crowding_susceptibility: float
    hunt_radius: float
    energy_needs: float


@dataclass(frozen=True)
class ProducerBounds:
    """Bound table for tree characteristics."""

    max_size: Bounds = Bounds(5.0, 25.0)
    age_to_spread: Bounds = Bounds(3.0, 20.0)
    spread_distance: Bounds = Bounds(0.03, 0.15)
    death_chance: Bounds = Bounds(0.002, 0.025)
    spread_chance: Bounds = Bounds(0.08, 0.25)
    optimal_moisture: Bounds = Bounds(0.0, 1.0)
    crowding_susceptibility: Bounds = Bounds(0.5, 2.0)

    # Distances on the unit plane, multiplied by the ecosystem scale
    distance_traits = ("spread_distance",)


@dataclass(frozen=True)
class HerbivoreBounds:
    """Bound table for deer characteristics."""

    max_size: Bounds = Bounds(2.0, 5.0)
    speed: Bounds = Bounds(0.003, 0.015)
    death_chance: Bounds = Bounds(0.00001, 0.0001)
    reproduce_chance: Bounds = Bounds(0.4, 0.98)
    crowding_susceptibility: Bounds = Bounds(0.5, 2.0)
    max_eatable_size: Bounds = Bounds(3.0, 15.0)
    energy_needs: Bounds = Bounds(0.01, 0.05)

    distance_traits = ("speed",)


@dataclass(frozen=True)
class PredatorBounds:
    """Bound table for wolf characteristics."""

    max_size: Bounds = Bounds(2.5, 6.0)
    speed: Bounds = Bounds(0.008, 0.025)
    death_chance: Bounds = Bounds(0.00001, 0.0003)
    reproduce_chance: Bounds = Bounds(0.05, 0.35)
    crowding_susceptibility: Bounds = Bounds(0.5, 2.0)
    hunt_radius: Bounds = Bounds(0.12, 0.28)
    energy_needs: Bounds = Bounds(0.025, 0.12)

    distance_traits = ("speed", "hunt_radius")


TraitsT = TypeVar("TraitsT", ProducerTraits, HerbivoreTraits, PredatorTraits)
BoundsT = TypeVar("BoundsT", ProducerBounds, HerbivoreBounds, PredatorBounds)


def iter_bounds(table: Any) -> list[tuple[str, Bounds]]:
    """List (trait name, bounds) pairs of a bound table."""
    return [(f.name, getattr(table, f.name)) for f in fields(table)]


def scale_bounds(table: BoundsT, scale: float) -> BoundsT:
    """Return the effective table with every distance trait multiplied by scale."""
    changes = {name: getattr(table, name).scaled(scale) for name in table.distance_traits}
    return replace(table, **changes)


def random_traits(traits_cls: type[TraitsT], table: Any, rng: random.Random) -> TraitsT:
    """Draw every trait uniformly within its bounds."""
    return traits_cls(**{name: bounds.sample(rng) for name, bounds in iter_bounds(table)})


def clamp_traits(traits: TraitsT, table: Any) -> TraitsT:
    """Return a copy with every trait clamped into the table."""
    return replace(
        traits,
        **{name: bounds.clamp(getattr(traits, name)) for name, bounds in iter_bounds(table)},
    )


def mutate_traits(
    traits: TraitsT, table: Any, rng: random.Random, mutation_range: float
) -> TraitsT:
    """
    Perturb each trait independently by a symmetric random delta.

    The delta is drawn from [-mutation_range, mutation_range] as a fraction of
    the trait's span, and the result is clamped back into the table.
    """
    mutated = {}
    for name, bounds in iter_bounds(table):
        delta = rng.uniform(-mutation_range, mutation_range) * bounds.span
        mutated[name] = getattr(traits, name) + delta
    return clamp_traits(replace(traits, **mutated), table)


def inherit_traits(
    parent: TraitsT,
    table: Any,
    rng: random.Random,
    mutation_enabled: bool,
    mutation_range: float,
) -> TraitsT:
    """Offspring traits: an exact clone, or a mutated copy when mutation is enabled."""
    if mutation_enabled:
        return mutate_traits(parent, table, rng, mutation_range)
    return replace(parent)


def within_bounds(traits: Any, table: Any) -> bool:
    """Check every trait lies inside its bounds."""
    return all(
        bounds.min <= getattr(traits, name) <= bounds.max
        for name, bounds in iter_bounds(table)
    )
