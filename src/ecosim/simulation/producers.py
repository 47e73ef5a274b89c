"""Tree lifecycle: growth under moisture and shading, crowding death, seeding."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..traits import inherit_traits
from .density import producer_density
from .entities import Population, Producer
from .lifecycle import LifecyclePass

if TYPE_CHECKING:
    from .ecosystem import Ecosystem


def _lerp(low: float, high: float, t: float) -> float:
    return low + (high - low) * t


class ProducerPass(LifecyclePass[Producer]):
    """Growth, density-dependent mortality and reproduction of trees."""

    def __init__(self, ecosystem: Ecosystem):
        super().__init__(ecosystem)
        self.config = ecosystem.config.producer
        self.bounds = ecosystem.producer_bounds
        # Densities for this tick, positionally matching the population snapshot
        self.densities: list[float] | None = None

    @property
    def population(self) -> Population[Producer]:
        return self.ecosystem.producers

    def moisture_fitness(self, producer: Producer) -> float:
        """
        How well local moisture suits the tree (0-1).

        1.0 on a perfect match, falling linearly with the mismatch but never
        below the configured floor, so a tree always grows a little.
        """
        moisture = self.ecosystem.moisture_at(producer.x, producer.y)
        distance = abs(moisture - producer.traits.optimal_moisture)
        fitness = 1.0 - self.config.moisture_fitness_slope * distance
        return max(self.config.moisture_fitness_floor, min(1.0, fitness))

    def growth_reduction(self, producer: Producer) -> float:
        """Fraction of growth lost at full crowding, from normalized susceptibility."""
        susceptibility = self.bounds.crowding_susceptibility.normalize(
            producer.traits.crowding_susceptibility
        )
        return _lerp(
            self.config.min_crowding_growth_reduction,
            self.config.max_crowding_growth_reduction,
            susceptibility,
        )

    def crowding_death_multiplier(self, producer: Producer) -> float:
        susceptibility = self.bounds.crowding_susceptibility.normalize(
            producer.traits.crowding_susceptibility
        )
        return _lerp(
            self.config.min_crowding_death_multiplier,
            self.config.max_crowding_death_multiplier,
            susceptibility,
        )

    def crowded_death_chance(self, producer: Producer, density: float) -> float:
        return self.config.crowded_death_base * density * self.crowding_death_multiplier(producer)

    def density(self, index: int, producer: Producer) -> float:
        """Crowdedness of a tree, precomputed when available."""
        if self.densities is not None:
            return self.densities[index]
        return producer_density(producer, self.ecosystem.grid, self.config)

    def growth(self, producer: Producer, density: float) -> float:
        fitness = self.moisture_fitness(producer)
        return self.config.base_growth * fitness * (1 - density * self.growth_reduction(producer))

    def act(self, index: int, organism: Producer) -> float:
        if organism.size >= organism.traits.max_size:
            return 0.0

        density = self.density(index, organism)
        growth = self.growth(organism, density)
        organism.size = min(organism.traits.max_size, organism.size + max(0.0, growth))
        return density

    def dies(self, organism: Producer, pressure: float) -> bool:
        if self.floor_enabled and self.is_last():
            return False

        if pressure > 0 and self.rng.random() < self.crowded_death_chance(organism, pressure):
            return True

        return self.rng.random() < organism.traits.death_chance

    def seed_location(self, producer: Producer) -> tuple[float, float] | None:
        """
        Pick a spot within the tree's spread distance.

        Returns None when the spot falls off the plane.
        """
        angle = self.rng.uniform(0, 2 * math.pi)
        distance = producer.traits.spread_distance * self.rng.random()
        x = producer.x + math.cos(angle) * distance
        y = producer.y + math.sin(angle) * distance
        if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
            return None
        return (x, y)

    def reproduce(self, organism: Producer) -> Producer | None:
        if organism.age <= organism.traits.age_to_spread:
            return None

        spread_chance = organism.traits.spread_chance * self.moisture_fitness(organism)
        if self.rng.random() >= spread_chance:
            return None

        location = self.seed_location(organism)
        if location is None:
            return None

        world = self.ecosystem.config.world
        traits = inherit_traits(
            organism.traits,
            self.bounds,
            self.rng,
            world.mutation_enabled,
            world.mutation_range,
        )
        return self.ecosystem.make_producer(location[0], location[1], traits)

    def kill(self, organism: Producer) -> None:
        self.ecosystem.remove_producer(organism)

    def spawn(self, organism: Producer) -> None:
        self.ecosystem.add_producer(organism)
