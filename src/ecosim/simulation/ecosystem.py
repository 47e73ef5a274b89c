"""Ecosystem simulation - owns every population and runs the tick."""

from __future__ import annotations

import itertools
import logging
import random
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

from ..config import Config
from ..traits import (
    HerbivoreTraits,
    PredatorTraits,
    ProducerTraits,
    random_traits,
    scale_bounds,
)
from .density import DensityProvider, sanitize_densities
from .entities import Herbivore, Population, Predator, Producer
from .herbivores import HerbivorePass
from .predators import PredatorPass
from .producers import ProducerPass
from .spatial import SpatialGrid
from .terrain import TerrainField

logger = logging.getLogger(__name__)

SPECIES = ("producers", "herbivores", "predators")


@dataclass
class EcosystemStats:
    """Statistics about the current ecosystem state."""

    tick: int = 0
    producers: int = 0
    herbivores: int = 0
    predators: int = 0
    producer_births: int = 0
    producer_deaths: int = 0
    herbivore_births: int = 0
    herbivore_deaths: int = 0
    predator_births: int = 0
    predator_deaths: int = 0
    # Predation this tick (not included in the death counts above)
    producers_eaten: int = 0
    herbivores_killed: int = 0
    # Averages across each population
    avg_producer_size: float = 0.0
    avg_herbivore_energy: float = 0.0
    avg_predator_energy: float = 0.0


class StatsHistory:
    """Tracks population counts over time for charting."""

    def __init__(self, max_length: int = 1000):
        """
        Initialize stats history.

        Args:
            max_length: Maximum number of ticks to keep in history
        """
        self.max_length = max_length
        self.ticks: deque[int] = deque(maxlen=max_length)
        self.producers: deque[int] = deque(maxlen=max_length)
        self.herbivores: deque[int] = deque(maxlen=max_length)
        self.predators: deque[int] = deque(maxlen=max_length)

    def record(self, stats: EcosystemStats) -> None:
        """Record current stats to history."""
        self.ticks.append(stats.tick)
        self.producers.append(stats.producers)
        self.herbivores.append(stats.herbivores)
        self.predators.append(stats.predators)

    def extinctions(self) -> list[str]:
        """Species whose latest recorded count is zero."""
        return [name for name in SPECIES if getattr(self, name) and getattr(self, name)[-1] == 0]

    def __len__(self) -> int:
        return len(self.ticks)


class Ecosystem:
    """
    The simulated world: terrain, trees, deer, wolves.

    Manages:
    - Populations of each species and their id counters
    - The spatial index over trees
    - The tick: trees, then deer, then wolves
    - Statistics
    """

    def __init__(
        self,
        config: Config | None = None,
        rng: random.Random | None = None,
        density_provider: DensityProvider | None = None,
    ):
        """
        Initialize the ecosystem (empty until `initialize` is called).

        Args:
            config: Simulation configuration, defaults to `Config.default()`
            rng: Random source for every stochastic decision; overrides the seed
            density_provider: Optional accelerator for tree crowdedness
        """
        self.config = config or Config.default()
        world = self.config.world
        self.grid_size = world.grid_size
        self.scale = world.ecosystem_scale

        # Seeded random number generator for reproducibility
        if world.seed is not None:
            self.seed = world.seed
        else:
            self.seed = random.randint(0, 2**31 - 1)
        self.rng = rng if rng is not None else random.Random(self.seed)

        self.density_provider = density_provider

        # Effective bound tables with distances in plane units
        self.producer_bounds = scale_bounds(self.config.producer.bounds, self.scale)
        self.herbivore_bounds = scale_bounds(self.config.herbivore.bounds, self.scale)
        self.predator_bounds = scale_bounds(self.config.predator.bounds, self.scale)

        self.terrain = TerrainField(self.grid_size, self.config.terrain.waves)
        self.grid: SpatialGrid[Producer] = SpatialGrid(self.grid_size)

        self.producers: Population[Producer] = Population()
        self.herbivores: Population[Herbivore] = Population()
        self.predators: Population[Predator] = Population()

        self._producer_ids = itertools.count()
        self._herbivore_ids = itertools.count()
        self._predator_ids = itertools.count()

        self.producer_pass = ProducerPass(self)
        self.herbivore_pass = HerbivorePass(self)
        self.predator_pass = PredatorPass(self)

        self.stats = EcosystemStats()
        self.stats_history = StatsHistory()

    # Construction

    def make_producer(
        self, x: float, y: float, traits: ProducerTraits, size: float = 0.0
    ) -> Producer:
        """Create a tree with a fresh id without adding it to the world."""
        return Producer(id=next(self._producer_ids), x=x, y=y, traits=traits, size=size)

    def make_herbivore(
        self, x: float, y: float, traits: HerbivoreTraits, energy: float
    ) -> Herbivore:
        """Create a deer with a fresh id without adding it to the world."""
        return Herbivore(id=next(self._herbivore_ids), x=x, y=y, traits=traits, energy=energy)

    def make_predator(
        self, x: float, y: float, traits: PredatorTraits, energy: float
    ) -> Predator:
        """Create a wolf with a fresh id without adding it to the world."""
        return Predator(id=next(self._predator_ids), x=x, y=y, traits=traits, energy=energy)

    def add_producer(self, producer: Producer) -> None:
        self.producers.add(producer)
        self.grid.insert(producer)

    def remove_producer(self, producer: Producer) -> bool:
        """Kill a tree and detach it from the spatial index."""
        self.grid.remove(producer)
        return self.producers.kill(producer)

    def remove_herbivore(self, herbivore: Herbivore) -> bool:
        return self.herbivores.kill(herbivore)

    def remove_predator(self, predator: Predator) -> bool:
        return self.predators.kill(predator)

    def spawn_producer(
        self,
        x: float | None = None,
        y: float | None = None,
        traits: ProducerTraits | None = None,
        size: float = 0.0,
    ) -> Producer:
        """
        Spawn a tree at the given position (or random if not specified).

        Returns the spawned tree.
        """
        x = self.rng.random() if x is None else x
        y = self.rng.random() if y is None else y
        if traits is None:
            traits = random_traits(ProducerTraits, self.producer_bounds, self.rng)
        producer = self.make_producer(x, y, traits, size=size)
        self.add_producer(producer)
        return producer

    def spawn_herbivore(
        self,
        x: float | None = None,
        y: float | None = None,
        traits: HerbivoreTraits | None = None,
        energy: float | None = None,
    ) -> Herbivore:
        """Spawn a deer at the given position (or random if not specified)."""
        x = self.rng.random() if x is None else x
        y = self.rng.random() if y is None else y
        if traits is None:
            traits = random_traits(HerbivoreTraits, self.herbivore_bounds, self.rng)
        if energy is None:
            energy = self.config.herbivore.initial_energy
        herbivore = self.make_herbivore(x, y, traits, energy)
        self.herbivores.add(herbivore)
        return herbivore

    def spawn_predator(
        self,
        x: float | None = None,
        y: float | None = None,
        traits: PredatorTraits | None = None,
        energy: float | None = None,
    ) -> Predator:
        """Spawn a wolf at the given position (or random if not specified)."""
        x = self.rng.random() if x is None else x
        y = self.rng.random() if y is None else y
        if traits is None:
            traits = random_traits(PredatorTraits, self.predator_bounds, self.rng)
        if energy is None:
            energy = self.config.predator.initial_energy
        predator = self.make_predator(x, y, traits, energy)
        self.predators.add(predator)
        return predator

    def initialize(self) -> None:
        """Populate the world with the configured starting counts."""
        world = self.config.world

        for _ in range(world.initial_producer_count):
            self.spawn_producer()
        for _ in range(world.initial_herbivore_count):
            self.spawn_herbivore()
        for _ in range(world.initial_predator_count):
            self.spawn_predator()

        logger.info(
            "Initialized ecosystem: seed=%s grid=%d scale=%.2f moisture=%.2f "
            "trees=%d deer=%d wolves=%d",
            self.seed,
            self.grid_size,
            self.scale,
            self.terrain.mean_moisture,
            len(self.producers),
            len(self.herbivores),
            len(self.predators),
        )

        self._update_stats()
        self.stats_history.record(self.stats)

    # Queries

    def moisture_at(self, x: float, y: float) -> float:
        return self.terrain.moisture_at(x, y)

    @property
    def counts(self) -> dict[str, int]:
        """Live organisms per species."""
        return {name: len(getattr(self, name)) for name in SPECIES}

    @property
    def tick(self) -> int:
        return self.stats.tick

    # Simulation

    def _tick_densities(self, precomputed: Sequence[float] | None) -> list[float] | None:
        """
        Densities to use for this tick's trees, or None to compute in-pass.

        Explicit values win over the configured provider. Anything unusable
        falls back to the in-pass computation.
        """
        expected = len(self.producers)

        if precomputed is not None:
            return sanitize_densities(precomputed, expected)

        if self.density_provider is None:
            return None

        try:
            values = self.density_provider.compute(self)
        except Exception:
            logger.warning(
                "Density provider %s failed, computing densities in-pass",
                type(self.density_provider).__name__,
                exc_info=True,
            )
            return None
        return sanitize_densities(values, expected)

    def step(self, precomputed_density: Sequence[float] | None = None) -> None:
        """
        Advance the simulation by one tick.

        This:
        1. Runs the tree pass and merges saplings into the index
        2. Runs the deer pass against the updated trees
        3. Runs the wolf pass against the updated deer
        4. Drops the dead and updates statistics

        Args:
            precomputed_density: Optional crowdedness per live tree, in
                population order, replacing the in-pass computation
        """
        self.producer_pass.densities = self._tick_densities(precomputed_density)
        try:
            producer_result = self.producer_pass.run()
        finally:
            self.producer_pass.densities = None

        herbivore_result = self.herbivore_pass.run()
        predator_result = self.predator_pass.run()

        self.producers.compact()
        self.herbivores.compact()
        self.predators.compact()

        self.stats.tick += 1
        self.stats.producer_births = producer_result.births
        self.stats.producer_deaths = producer_result.deaths
        self.stats.herbivore_births = herbivore_result.births
        self.stats.herbivore_deaths = herbivore_result.deaths
        self.stats.predator_births = predator_result.births
        self.stats.predator_deaths = predator_result.deaths
        self.stats.producers_eaten = self.herbivore_pass.eaten
        self.stats.herbivores_killed = self.predator_pass.kills
        self._update_stats()
        self.stats_history.record(self.stats)

        logger.debug(
            "Tick %d: trees=%d deer=%d wolves=%d",
            self.stats.tick,
            self.stats.producers,
            self.stats.herbivores,
            self.stats.predators,
        )

    def run(self, ticks: int) -> EcosystemStats:
        """Advance several ticks and return the final statistics."""
        for _ in range(ticks):
            self.step()
        return self.stats

    def _update_stats(self) -> None:
        producers = self.producers.snapshot()
        herbivores = self.herbivores.snapshot()
        predators = self.predators.snapshot()

        self.stats.producers = len(producers)
        self.stats.herbivores = len(herbivores)
        self.stats.predators = len(predators)

        self.stats.avg_producer_size = (
            sum(p.size for p in producers) / len(producers) if producers else 0.0
        )
        self.stats.avg_herbivore_energy = (
            sum(h.energy for h in herbivores) / len(herbivores) if herbivores else 0.0
        )
        self.stats.avg_predator_energy = (
            sum(w.energy for w in predators) / len(predators) if predators else 0.0
        )


def initialize(
    config: Config | None = None,
    *,
    rng: random.Random | None = None,
    density_provider: DensityProvider | None = None,
) -> Ecosystem:
    """Create and populate an ecosystem."""
    ecosystem = Ecosystem(config, rng=rng, density_provider=density_provider)
    ecosystem.initialize()
    return ecosystem


def advance(ecosystem: Ecosystem, precomputed_density: Sequence[float] | None = None) -> None:
    """Advance an ecosystem by one tick in place."""
    ecosystem.step(precomputed_density)
