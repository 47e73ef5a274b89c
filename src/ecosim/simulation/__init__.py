"""Simulation module - pure logic, no rendering."""

from .density import (
    CpuDensityProvider,
    DensityProvider,
    VectorizedDensityProvider,
    producer_density,
)
from .ecosystem import Ecosystem, EcosystemStats, StatsHistory, advance, initialize
from .entities import Herbivore, Population, Predator, Producer
from .spatial import SpatialGrid
from .terrain import TerrainField, generate_moisture

__all__ = [
    "CpuDensityProvider",
    "DensityProvider",
    "Ecosystem",
    "EcosystemStats",
    "Herbivore",
    "Population",
    "Predator",
    "Producer",
    "SpatialGrid",
    "StatsHistory",
    "TerrainField",
    "VectorizedDensityProvider",
    "advance",
    "generate_moisture",
    "initialize",
    "producer_density",
]
