"""Wolf lifecycle: hunting and patrolling."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..traits import PredatorTraits
from .entities import Herbivore, Population, Predator
from .lifecycle import AnimalPass, move_randomly, move_towards, nearest

if TYPE_CHECKING:
    from .ecosystem import Ecosystem


class PredatorPass(AnimalPass[Predator]):
    """
    Movement, hunting, energy, mortality and reproduction of wolves.

    A wolf kills at most one deer per tick. Faster deer are harder to catch.
    """

    def __init__(self, ecosystem: Ecosystem):
        super().__init__(ecosystem, ecosystem.config.predator, ecosystem.predator_bounds)
        self.kill_radius = self.config.kill_radius * ecosystem.scale
        self.kills = 0

    @property
    def population(self) -> Population[Predator]:
        return self.ecosystem.predators

    def begin(self) -> None:
        self.kills = 0

    def move(self, animal: Predator) -> None:
        speed = animal.traits.speed

        if self.is_hungry(animal):
            prey, _ = nearest(
                self.ecosystem.herbivores, animal.x, animal.y, animal.traits.hunt_radius
            )
            if prey is not None:
                move_towards(animal, prey.x, prey.y, speed, self.rng)
                return

        # Patrol
        move_randomly(animal, speed, self.rng)

    def hunt_success(self, prey: Herbivore) -> float:
        """Chance of catching a deer, reduced by its speed."""
        evasion = self.config.prey_evasion * self.ecosystem.herbivore_bounds.speed.normalize(
            prey.traits.speed
        )
        return max(self.config.min_hunt_success, self.config.hunt_success_base - evasion)

    def prey_in_reach(self, predator: Predator) -> list[Herbivore]:
        """Live deer within kill radius, nearest first."""
        in_reach = [
            (predator.get_distance_to(prey.x, prey.y), prey)
            for prey in self.ecosystem.herbivores
        ]
        in_reach = [pair for pair in in_reach if pair[0] < self.kill_radius]
        in_reach.sort(key=lambda pair: pair[0])
        return [prey for _, prey in in_reach]

    def feed(self, animal: Predator) -> None:
        for prey in self.prey_in_reach(animal):
            # Wolves never drive deer to extinction while the floor is on
            if self.floor_enabled and len(self.ecosystem.herbivores) <= 1:
                return

            if self.rng.random() < self.hunt_success(prey):
                self.ecosystem.remove_herbivore(prey)
                self.kills += 1
                gain = prey.traits.max_size * self.config.energy_per_prey_size
                animal.energy = min(self.config.max_energy, animal.energy + gain)
                return

    def make_offspring(self, x: float, y: float, traits: PredatorTraits) -> Predator:
        return self.ecosystem.make_predator(x, y, traits, energy=self.config.birth_energy)

    def kill(self, organism: Predator) -> None:
        self.ecosystem.remove_predator(organism)
