"""Deer lifecycle: foraging, fleeing, eating trees."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..traits import HerbivoreTraits
from .entities import Herbivore, Population, Producer
from .lifecycle import AnimalPass, move_away, move_randomly, move_towards, nearest

if TYPE_CHECKING:
    from .ecosystem import Ecosystem


class HerbivorePass(AnimalPass[Herbivore]):
    """
    Movement, feeding, energy, mortality and reproduction of deer.

    A deer eats at most one tree per tick.
    """

    def __init__(self, ecosystem: Ecosystem):
        super().__init__(ecosystem, ecosystem.config.herbivore, ecosystem.herbivore_bounds)
        scale = ecosystem.scale
        self.eating_radius = self.config.eating_radius * scale
        self.food_search_radius = self.config.food_search_radius * scale
        self.predator_sense_radius = self.config.predator_sense_radius * scale
        self.eaten = 0

    @property
    def population(self) -> Population[Herbivore]:
        return self.ecosystem.herbivores

    def begin(self) -> None:
        self.eaten = 0

    @staticmethod
    def can_eat(herbivore: Herbivore, producer: Producer) -> bool:
        return producer.size <= herbivore.traits.max_eatable_size

    def find_food(self, herbivore: Herbivore, radius: float) -> Producer | None:
        """Closest edible tree within radius, searched in the surrounding cells."""
        food, _ = nearest(
            self.ecosystem.grid.get_nearby(herbivore.x, herbivore.y, radius),
            herbivore.x,
            herbivore.y,
            radius,
            lambda producer: self.can_eat(herbivore, producer),
        )
        return food

    def move(self, animal: Herbivore) -> None:
        speed = animal.traits.speed

        if self.is_hungry(animal):
            food = self.find_food(animal, self.food_search_radius)
            if food is not None:
                move_towards(animal, food.x, food.y, speed, self.rng)
            else:
                move_randomly(animal, speed, self.rng)
            return

        if self.config.flee_predators:
            threat, _ = nearest(
                self.ecosystem.predators, animal.x, animal.y, self.predator_sense_radius
            )
            if threat is not None:
                move_away(animal, threat.x, threat.y, speed, self.rng)
                return

        move_randomly(animal, speed, self.rng)

    def feed(self, animal: Herbivore) -> None:
        # The last tree is left standing while the floor is on
        if self.floor_enabled and len(self.ecosystem.producers) <= 1:
            return

        food = self.find_food(animal, self.eating_radius)
        if food is None:
            return

        self.ecosystem.remove_producer(food)
        self.eaten += 1
        animal.energy = min(
            self.config.max_energy, animal.energy + food.size * self.config.energy_per_size
        )

    def make_offspring(self, x: float, y: float, traits: HerbivoreTraits) -> Herbivore:
        return self.ecosystem.make_herbivore(x, y, traits, energy=self.config.birth_energy)

    def kill(self, organism: Herbivore) -> None:
        self.ecosystem.remove_herbivore(organism)
