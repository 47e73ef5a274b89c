"""Shared per-tick lifecycle loop and movement helpers for all species."""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from ..config import ForagerConfig
from ..traits import inherit_traits
from .entities import Animal, Organism, Population

if TYPE_CHECKING:
    from .ecosystem import Ecosystem

O = TypeVar("O", bound=Organism)
A = TypeVar("A", bound=Animal)


def wrap(value: float) -> float:
    """Wrap a coordinate onto [0, 1) (toroidal plane)."""
    value = value % 1.0
    # -1e-17 % 1.0 rounds to 1.0
    return 0.0 if value >= 1.0 else value


def nearest(
    candidates: Iterable[O],
    x: float,
    y: float,
    radius: float,
    predicate: Callable[[O], bool] | None = None,
) -> tuple[O | None, float]:
    """
    Find the closest live candidate strictly within radius of (x, y).

    Returns:
        (candidate, distance), or (None, inf) when nothing qualifies
    """
    best: O | None = None
    best_dist = math.inf
    for candidate in candidates:
        if not candidate.alive:
            continue
        if predicate is not None and not predicate(candidate):
            continue
        dist = candidate.get_distance_to(x, y)
        if dist < radius and dist < best_dist:
            best = candidate
            best_dist = dist
    return best, best_dist


def count_within(others: Iterable[Organism], subject: Organism, radius: float) -> int:
    """Count live organisms other than subject strictly within radius of it."""
    count = 0
    for other in others:
        if other is subject or not other.alive:
            continue
        if subject.get_distance_to(other.x, other.y) < radius:
            count += 1
    return count


def move_randomly(animal: Animal, max_step: float, rng: random.Random) -> None:
    """Step in a uniformly random direction by up to max_step."""
    angle = rng.uniform(0, 2 * math.pi)
    step = rng.uniform(0, max_step)
    animal.x = wrap(animal.x + math.cos(angle) * step)
    animal.y = wrap(animal.y + math.sin(angle) * step)


def move_towards(
    animal: Animal, target_x: float, target_y: float, max_step: float, rng: random.Random
) -> None:
    """Step towards a target by up to max_step, never past it."""
    dx = target_x - animal.x
    dy = target_y - animal.y
    dist = math.sqrt(dx * dx + dy * dy)
    if dist <= 0:
        return
    step = min(rng.uniform(0, max_step), dist)
    animal.x = wrap(animal.x + dx / dist * step)
    animal.y = wrap(animal.y + dy / dist * step)


def move_away(
    animal: Animal, threat_x: float, threat_y: float, max_step: float, rng: random.Random
) -> None:
    """Step directly away from a threat; random direction when on top of it."""
    dx = animal.x - threat_x
    dy = animal.y - threat_y
    dist = math.sqrt(dx * dx + dy * dy)
    if dist <= 0:
        move_randomly(animal, max_step, rng)
        return
    step = rng.uniform(0, max_step)
    animal.x = wrap(animal.x + dx / dist * step)
    animal.y = wrap(animal.y + dy / dist * step)


@dataclass
class PassResult:
    """What a lifecycle pass did this tick."""

    births: int = 0
    deaths: int = 0


class LifecyclePass(ABC, Generic[O]):
    """
    One species' turn within a tick.

    Every live organism in a snapshot of the population is aged, acts
    (grows, or moves and feeds), may die, and may reproduce. Offspring are
    collected and merged once the whole snapshot has been processed, so
    they do not act in the tick they are born.

    Subclasses provide the species rules:
    - `act` returns the crowding pressure the organism is under
    - `dies` resolves death given that pressure
    - `reproduce` returns an offspring or None
    - `kill` / `spawn` keep the ecosystem's collections consistent
    """

    def __init__(self, ecosystem: Ecosystem):
        self.ecosystem = ecosystem

    @property
    @abstractmethod
    def population(self) -> Population[O]: ...

    @property
    def rng(self) -> random.Random:
        return self.ecosystem.rng

    @property
    def floor_enabled(self) -> bool:
        return self.ecosystem.config.world.extinction_floor_enabled

    def is_last(self) -> bool:
        """Check if only one organism of this species is alive."""
        return len(self.population) == 1

    def begin(self) -> None:
        """Hook called before the snapshot is processed."""

    @abstractmethod
    def act(self, index: int, organism: O) -> float: ...

    @abstractmethod
    def dies(self, organism: O, pressure: float) -> bool: ...

    @abstractmethod
    def reproduce(self, organism: O) -> O | None: ...

    def kill(self, organism: O) -> None:
        self.population.kill(organism)

    def spawn(self, organism: O) -> None:
        self.population.add(organism)

    def run(self) -> PassResult:
        """Process the whole population once."""
        result = PassResult()
        offspring: list[O] = []

        self.begin()
        for index, organism in enumerate(self.population.snapshot()):
            # Eaten or killed earlier in this tick
            if not organism.alive:
                continue

            organism.age += 1
            pressure = self.act(index, organism)

            if self.dies(organism, pressure):
                self.kill(organism)
                result.deaths += 1
                continue

            child = self.reproduce(organism)
            if child is not None:
                offspring.append(child)

        for child in offspring:
            self.spawn(child)
        result.births = len(offspring)
        return result


class AnimalPass(LifecyclePass[A]):
    """
    Lifecycle shared by the mobile species.

    Per animal: move, feed while below max energy, pay the metabolic cost,
    then count same-species neighbors for the crowding penalty. Subclasses
    supply `move`, `feed` and `make_offspring`.
    """

    def __init__(self, ecosystem: Ecosystem, config: ForagerConfig, bounds: object):
        super().__init__(ecosystem)
        self.config = config
        self.bounds = bounds
        self.crowding_radius = config.crowding_radius * ecosystem.scale

    def is_hungry(self, animal: A) -> bool:
        return animal.energy < self.config.reproduce_threshold

    @abstractmethod
    def move(self, animal: A) -> None: ...

    @abstractmethod
    def feed(self, animal: A) -> None: ...

    @abstractmethod
    def make_offspring(self, x: float, y: float, traits: object) -> A: ...

    def act(self, index: int, organism: A) -> float:
        self.move(organism)

        if organism.energy < self.config.max_energy:
            self.feed(organism)

        organism.energy = max(0.0, organism.energy - organism.traits.energy_needs)
        return float(count_within(self.population, organism, self.crowding_radius))

    def death_chance(self, animal: A, crowding: float) -> float:
        """
        Per-tick death probability.

        Base chance plus a crowding penalty scaled by susceptibility, plus a
        starvation penalty growing as energy falls below the threshold.
        Zero for the last of its species while the extinction floor is on.
        """
        if self.floor_enabled and self.is_last():
            return 0.0

        chance = animal.traits.death_chance
        susceptibility = animal.traits.crowding_susceptibility
        chance += crowding * self.config.crowding_death_penalty * susceptibility

        if animal.energy < self.config.starvation_threshold:
            shortfall = self.config.starvation_threshold - animal.energy
            chance += shortfall * self.config.starvation_penalty

        return min(1.0, chance)

    def dies(self, organism: A, pressure: float) -> bool:
        chance = self.death_chance(organism, pressure)
        return chance > 0 and self.rng.random() < chance

    def can_reproduce(self, animal: A) -> bool:
        return (
            animal.age > self.config.reproduce_age
            and animal.energy >= self.config.reproduce_threshold
        )

    def reproduce(self, organism: A) -> A | None:
        if not self.can_reproduce(organism):
            return None
        if self.rng.random() >= organism.traits.reproduce_chance:
            return None

        spread = self.config.offspring_spread
        x = wrap(organism.x + (self.rng.random() - 0.5) * spread)
        y = wrap(organism.y + (self.rng.random() - 0.5) * spread)

        world = self.ecosystem.config.world
        traits = inherit_traits(
            organism.traits,
            self.bounds,
            self.rng,
            world.mutation_enabled,
            world.mutation_range,
        )
        child = self.make_offspring(x, y, traits)
        organism.energy = max(0.0, organism.energy - self.config.reproduction_cost)
        return child
