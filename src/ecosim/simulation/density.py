"""Crowdedness of trees: shading pressure from larger neighbors."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

import numpy as np

from ..config import ProducerConfig
from .entities import Producer
from .spatial import SpatialGrid

if TYPE_CHECKING:
    from .ecosystem import Ecosystem

logger = logging.getLogger(__name__)


def shading(big: Producer, small: Producer, config: ProducerConfig) -> float:
    """
    Shading contribution of a larger tree onto a smaller one.

    The large tree shades out to its spread distance scaled by how grown it
    is; inside that radius the effect falls off linearly with distance and
    grows with the size gap, up to the shading cap.
    """
    size_gap = big.size - small.size
    if size_gap <= 0:
        return 0.0

    radius = big.traits.spread_distance * (big.size / big.traits.max_size)
    if radius <= 0:
        return 0.0

    distance = small.get_distance_to(big.x, big.y)
    if distance >= radius:
        return 0.0

    proximity = (radius - distance) / radius
    intensity = min(config.shading_cap, size_gap / config.shading_size_scale)
    return config.shading_weight * proximity * intensity


def producer_density(
    producer: Producer, grid: SpatialGrid[Producer], config: ProducerConfig
) -> float:
    """Crowdedness (0-1) of a tree from the 3x3 block of cells around it."""
    total = 0.0
    for other in grid.neighbors(producer.x, producer.y):
        if other.id == producer.id:
            continue
        total += shading(other, producer, config)
    return min(1.0, total)


class DensityProvider(Protocol):
    """
    Source of per-tree crowdedness for a whole tick.

    Implementations return one value per live tree, in population order, or
    None when they cannot produce values.
    """

    def compute(self, ecosystem: Ecosystem) -> Sequence[float] | None: ...


class CpuDensityProvider:
    """Reference provider: evaluates `producer_density` tree by tree."""

    def compute(self, ecosystem: Ecosystem) -> list[float]:
        config = ecosystem.config.producer
        return [
            producer_density(producer, ecosystem.grid, config)
            for producer in ecosystem.producers
        ]


class VectorizedDensityProvider:
    """
    Batch provider computing every tree's crowdedness with numpy.

    Trees are processed one cell at a time: the trees of a cell are compared
    against all trees of its 3x3 block as a dense matrix, which gives the
    same result as `producer_density` evaluated on the start-of-tick state.
    """

    def compute(self, ecosystem: Ecosystem) -> np.ndarray | None:
        producers = ecosystem.producers.snapshot()
        if not producers:
            return np.zeros(0, dtype=np.float64)

        config = ecosystem.config.producer
        grid = ecosystem.grid

        index = {p.id: i for i, p in enumerate(producers)}
        xs = np.array([p.x for p in producers], dtype=np.float64)
        ys = np.array([p.y for p in producers], dtype=np.float64)
        sizes = np.array([p.size for p in producers], dtype=np.float64)
        max_sizes = np.array([p.traits.max_size for p in producers], dtype=np.float64)
        spreads = np.array([p.traits.spread_distance for p in producers], dtype=np.float64)
        radii = spreads * (sizes / max_sizes)

        density = np.zeros(len(producers), dtype=np.float64)

        for (col, row), bucket in list(grid.cells.items()):
            rows = np.array([index[i] for i in bucket if i in index], dtype=np.intp)
            if rows.size == 0:
                continue
            x0 = (col + 0.5) / grid.grid_size
            y0 = (row + 0.5) / grid.grid_size
            cols = np.array(
                [index[p.id] for p in grid.neighbors(x0, y0) if p.id in index],
                dtype=np.intp,
            )

            gap = sizes[cols][None, :] - sizes[rows][:, None]
            dx = xs[cols][None, :] - xs[rows][:, None]
            dy = ys[cols][None, :] - ys[rows][:, None]
            dist = np.sqrt(dx * dx + dy * dy)
            radius = np.broadcast_to(radii[cols][None, :], gap.shape)

            mask = (gap > 0) & (radius > 0) & (dist < radius)
            safe_radius = np.where(mask, radius, 1.0)
            proximity = np.where(mask, (safe_radius - dist) / safe_radius, 0.0)
            intensity = np.minimum(config.shading_cap, gap / config.shading_size_scale)
            contribution = config.shading_weight * proximity * intensity

            density[rows] = np.minimum(1.0, contribution.sum(axis=1))

        return density


def sanitize_densities(values: Sequence[float] | None, expected: int) -> list[float] | None:
    """
    Validate externally supplied densities.

    Returns values clamped to 0-1, or None when the sequence is missing,
    unsized, has the wrong length or holds non-numeric or non-finite values.
    """
    if values is None:
        return None
    try:
        count = len(values)
    except TypeError:
        logger.warning(
            "Ignoring precomputed densities: %s has no length", type(values).__name__
        )
        return None
    if count != expected:
        logger.warning(
            "Ignoring precomputed densities: got %d values for %d trees", count, expected
        )
        return None

    cleaned = []
    for value in values:
        try:
            value = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring precomputed densities: non-numeric value %r", value)
            return None
        if not math.isfinite(value):
            logger.warning("Ignoring precomputed densities: non-finite value %r", value)
            return None
        cleaned.append(max(0.0, min(1.0, value)))
    return cleaned
