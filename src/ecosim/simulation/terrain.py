"""Terrain system - the static moisture map."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from ..config import DEFAULT_WAVES, Wave

_SHAPES = {"sin": np.sin, "cos": np.cos}


def generate_moisture(grid_size: int, waves: Sequence[Wave] = DEFAULT_WAVES) -> np.ndarray:
    """
    Generate a grid_size x grid_size moisture map from sinusoidal waves.

    Each wave is evaluated at the grid-normalized coordinates (i / grid_size,
    j / grid_size); the sum is rescaled with (sum + 1) / 2 and clamped to 0-1.
    The map has no randomness: the same waves and size always give the same
    field.

    Returns:
        Read-only float64 array indexed [x, y]
    """
    coords = np.arange(grid_size, dtype=np.float64) / grid_size
    nx, ny = np.meshgrid(coords, coords, indexing="ij")

    total = np.zeros((grid_size, grid_size), dtype=np.float64)
    for wave in waves:
        fx = _SHAPES[wave.shape_x](nx * 2 * math.pi * wave.freq_x + wave.phase_x)
        fy = _SHAPES[wave.shape_y](ny * 2 * math.pi * wave.freq_y + wave.phase_y)
        total += wave.amplitude * fx * fy

    moisture = np.clip((total + 1) / 2, 0.0, 1.0)
    moisture.setflags(write=False)
    return moisture


class TerrainField:
    """Immutable moisture map sharing the spatial grid's discretization."""

    def __init__(self, grid_size: int, waves: Sequence[Wave] = DEFAULT_WAVES):
        """
        Initialize terrain.

        Args:
            grid_size: Cells along each axis
            waves: Basis functions summed into the map
        """
        self.grid_size = grid_size
        self.waves = tuple(waves)
        self.moisture = generate_moisture(grid_size, self.waves)

    def cell_index(self, x: float, y: float) -> tuple[int, int]:
        """Grid indices for a continuous position, clamped to the map."""
        gx = math.floor(x * self.grid_size)
        gy = math.floor(y * self.grid_size)
        gx = max(0, min(self.grid_size - 1, gx))
        gy = max(0, min(self.grid_size - 1, gy))
        return (gx, gy)

    def moisture_at(self, x: float, y: float) -> float:
        """
        Get moisture at a position on the unit plane.

        Returns:
            Moisture value (0-1)
        """
        gx, gy = self.cell_index(x, y)
        return float(self.moisture[gx, gy])

    @property
    def mean_moisture(self) -> float:
        return float(self.moisture.mean())
