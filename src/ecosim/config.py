"""Centralized configuration for the simulation."""

from __future__ import annotations

from dataclasses import dataclass, field

from .traits import (
    HerbivoreBounds,
    PredatorBounds,
    ProducerBounds,
    iter_bounds,
)


class ConfigError(ValueError):
    """Raised when a configuration value is outside its valid domain."""


def _check_bounds(table: object, species: str) -> None:
    for name, bounds in iter_bounds(table):
        if bounds.min > bounds.max:
            raise ConfigError(
                f"{species} bounds for {name} are inverted: {bounds.min} > {bounds.max}"
            )


@dataclass(frozen=True)
class Wave:
    """
    One sinusoidal basis function of the moisture map.

    Evaluates to amplitude * fx(2*pi*freq_x*nx + phase_x) * fy(2*pi*freq_y*ny + phase_y)
    where fx/fy are "sin" or "cos".
    """

    amplitude: float
    freq_x: float
    freq_y: float
    phase_x: float = 0.0
    phase_y: float = 0.0
    shape_x: str = "sin"
    shape_y: str = "sin"


DEFAULT_WAVES: tuple[Wave, ...] = (
    Wave(amplitude=0.5, freq_x=1.3, freq_y=0.9, shape_y="cos"),
    Wave(amplitude=0.3, freq_x=2.7, freq_y=2.1, phase_x=1.2),
)


@dataclass
class WorldConfig:
    """Configuration for the world simulation."""

    initial_producer_count: int = 500
    initial_herbivore_count: int = 100
    initial_predator_count: int = 4
    # Cells per axis for the spatial index and the terrain grid
    grid_size: int = 20
    # Multiplies every interaction distance
    ecosystem_scale: float = 0.5
    # Offspring traits are perturbed instead of cloned
    mutation_enabled: bool = False
    # Max mutation delta as a fraction of each trait's span
    mutation_range: float = 0.05
    # The last living individual of a species never dies
    extinction_floor_enabled: bool = True
    # Random seed for reproducibility (None = random seed)
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.grid_size < 1:
            raise ConfigError(f"grid_size must be positive, got {self.grid_size}")
        if self.ecosystem_scale <= 0:
            raise ConfigError(f"ecosystem_scale must be positive, got {self.ecosystem_scale}")
        if not 0.0 <= self.mutation_range <= 1.0:
            raise ConfigError(f"mutation_range must be within [0, 1], got {self.mutation_range}")
        for name in ("initial_producer_count", "initial_herbivore_count", "initial_predator_count"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")


@dataclass
class TerrainConfig:
    """Configuration for the moisture map."""

    waves: tuple[Wave, ...] = DEFAULT_WAVES

    def __post_init__(self) -> None:
        for wave in self.waves:
            if wave.shape_x not in ("sin", "cos") or wave.shape_y not in ("sin", "cos"):
                raise ConfigError(f"wave shapes must be 'sin' or 'cos': {wave}")


@dataclass
class ProducerConfig:
    """Configuration for tree growth, crowding and death."""

    bounds: ProducerBounds = field(default_factory=ProducerBounds)

    base_growth: float = 1.0
    # Moisture fitness = 1 - slope * |moisture - optimal|, never below the floor
    moisture_fitness_slope: float = 2.0
    moisture_fitness_floor: float = 0.05

    # Shading from larger neighbours
    shading_weight: float = 0.6
    shading_size_scale: float = 5.0
    shading_cap: float = 2.0

    # Growth reduction at full crowding, by normalized susceptibility
    min_crowding_growth_reduction: float = 0.25
    max_crowding_growth_reduction: float = 0.95
    # Crowded death chance = base * density * multiplier
    crowded_death_base: float = 0.5
    min_crowding_death_multiplier: float = 0.40
    max_crowding_death_multiplier: float = 1.0

    def __post_init__(self) -> None:
        _check_bounds(self.bounds, "producer")
        if not 0.0 < self.moisture_fitness_floor <= 1.0:
            raise ConfigError("moisture_fitness_floor must be within (0, 1]")
        low, high = self.min_crowding_growth_reduction, self.max_crowding_growth_reduction
        if not 0.0 <= low <= high < 1.0:
            raise ConfigError("crowding growth reduction must satisfy 0 <= min <= max < 1")
        if not 0.0 < self.min_crowding_death_multiplier <= self.max_crowding_death_multiplier:
            raise ConfigError("crowding death multiplier must satisfy 0 < min <= max")


@dataclass
class ForagerConfig:
    """Settings shared by the mobile species. Radii are base values, scaled per run."""

    max_energy: float = 2.0
    initial_energy: float = 1.5
    birth_energy: float = 1.0
    # Below this an animal is hungry; at or above it may reproduce
    reproduce_threshold: float = 1.0
    reproduce_age: int = 10
    reproduction_cost: float = 0.5
    # Max per-axis offset of offspring from the parent
    offspring_spread: float = 0.05

    crowding_radius: float = 0.15
    crowding_death_penalty: float = 0.002

    starvation_threshold: float = 0.3
    starvation_penalty: float = 0.01

    def __post_init__(self) -> None:
        if self.max_energy <= 0:
            raise ConfigError("max_energy must be positive")
        if self.reproduce_age < 0:
            raise ConfigError("reproduce_age must not be negative")


@dataclass
class HerbivoreConfig(ForagerConfig):
    """Configuration for deer."""

    bounds: HerbivoreBounds = field(default_factory=HerbivoreBounds)

    eating_radius: float = 0.03
    food_search_radius: float = 0.08
    flee_predators: bool = True
    predator_sense_radius: float = 0.1
    # Energy gained per unit of eaten tree size
    energy_per_size: float = 0.1

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_bounds(self.bounds, "herbivore")


@dataclass
class PredatorConfig(ForagerConfig):
    """Configuration for wolves."""

    bounds: PredatorBounds = field(default_factory=PredatorBounds)

    max_energy: float = 2.5
    birth_energy: float = 1.5
    reproduce_age: int = 5
    reproduction_cost: float = 0.6
    crowding_radius: float = 0.3
    crowding_death_penalty: float = 0.006

    kill_radius: float = 0.035
    hunt_success_base: float = 0.7
    # Success lost against the fastest prey
    prey_evasion: float = 0.25
    min_hunt_success: float = 0.3
    # Energy gained per unit of prey max size
    energy_per_prey_size: float = 0.3

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_bounds(self.bounds, "predator")
        if not 0.0 <= self.min_hunt_success <= 1.0:
            raise ConfigError("min_hunt_success must be within [0, 1]")


@dataclass
class Config:
    """Main configuration container."""

    world: WorldConfig = field(default_factory=WorldConfig)
    terrain: TerrainConfig = field(default_factory=TerrainConfig)
    producer: ProducerConfig = field(default_factory=ProducerConfig)
    herbivore: HerbivoreConfig = field(default_factory=HerbivoreConfig)
    predator: PredatorConfig = field(default_factory=PredatorConfig)

    @classmethod
    def default(cls) -> "Config":
        """Create default configuration."""
        return cls(
            world=WorldConfig(),
            terrain=TerrainConfig(),
            producer=ProducerConfig(),
            herbivore=HerbivoreConfig(),
            predator=PredatorConfig(),
        )
