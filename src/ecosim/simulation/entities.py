"""Organisms living in the simulation and the collections that own them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Iterator, TypeVar

from ..traits import HerbivoreTraits, PredatorTraits, ProducerTraits


@dataclass(kw_only=True, eq=False)
class Organism:
    """
    Anything with an identity, a position on the unit plane and an age.

    Identity is a per-species counter value handed out by the ecosystem,
    so equality is based on type and id rather than on field values.
    """

    id: int
    x: float
    y: float
    age: int = 0
    alive: bool = field(default=True, repr=False)

    def __hash__(self) -> int:
        """Hash based on unique ID."""
        return hash((type(self).__name__, self.id))

    def __eq__(self, other: object) -> bool:
        """Equality based on species and unique ID."""
        if not isinstance(other, Organism):
            return NotImplemented
        return type(self) is type(other) and self.id == other.id

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def get_distance_to(self, target_x: float, target_y: float) -> float:
        """Get the distance from this organism to a target position."""
        dx = target_x - self.x
        dy = target_y - self.y
        return math.sqrt(dx * dx + dy * dy)


@dataclass(kw_only=True, eq=False)
class Producer(Organism):
    """A stationary tree. Grows towards its max size and spreads seeds."""

    traits: ProducerTraits
    size: float = 0.0

    @property
    def is_mature(self) -> bool:
        """Check if the tree has stopped growing."""
        return self.size >= self.traits.max_size


@dataclass(kw_only=True, eq=False)
class Animal(Organism):
    """A mobile organism with an energy budget."""

    energy: float = 1.0


@dataclass(kw_only=True, eq=False)
class Herbivore(Animal):
    """A deer. Eats small trees, flees wolves."""

    traits: HerbivoreTraits


@dataclass(kw_only=True, eq=False)
class Predator(Animal):
    """A wolf. Hunts deer."""

    traits: PredatorTraits


E = TypeVar("E", bound=Organism)


class Population(Generic[E]):
    """
    Ordered collection of one species with a live count.

    Deaths only flag the organism; the dead are filtered out by `compact`,
    so a pass can keep iterating over its snapshot while others die.
    """

    def __init__(self, members: list[E] | None = None):
        self._members: list[E] = []
        self._alive = 0
        for member in members or []:
            self.add(member)

    def add(self, entity: E) -> None:
        """Append a live organism."""
        entity.alive = True
        self._members.append(entity)
        self._alive += 1

    def kill(self, entity: E) -> bool:
        """Mark an organism dead. Returns False if it was already dead."""
        if not entity.alive:
            return False
        entity.alive = False
        self._alive -= 1
        return True

    def compact(self) -> None:
        """Drop dead organisms from storage."""
        self._members = [m for m in self._members if m.alive]

    def snapshot(self) -> list[E]:
        """Live organisms in population order, as an independent list."""
        return [m for m in self._members if m.alive]

    def __iter__(self) -> Iterator[E]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        """Number of live organisms."""
        return self._alive

    def __bool__(self) -> bool:
        return self._alive > 0
