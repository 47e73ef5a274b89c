"""Spatial hash grid for efficient neighbor queries."""

import math
from collections import defaultdict
from typing import Generic, Iterator, Protocol, TypeVar


class HasIdentity(Protocol):
    """Protocol for entities that have a position and an identity."""

    id: int
    x: float
    y: float


T = TypeVar("T", bound=HasIdentity)


class SpatialGrid(Generic[T]):
    """
    Spatial hash grid over the unit square.

    Divides the plane into grid_size x grid_size cells keyed by
    (floor(x * grid_size), floor(y * grid_size)) and tracks which entities
    sit in each cell. A neighbor query only visits the 3x3 block of cells
    around a position instead of every entity.

    Entities are assumed not to move while indexed: an entity is always
    looked up in the cell derived from its current position.
    """

    def __init__(self, grid_size: int):
        """
        Initialize the spatial grid.

        Args:
            grid_size: Number of cells along each axis
        """
        self.grid_size = grid_size
        # Buckets are insertion-ordered so neighbor iteration is reproducible
        self.cells: dict[tuple[int, int], dict[int, T]] = defaultdict(dict)
        self._count = 0

    def cell_of(self, x: float, y: float) -> tuple[int, int]:
        """Get the cell coordinates for a position."""
        return (math.floor(x * self.grid_size), math.floor(y * self.grid_size))

    def insert(self, entity: T) -> None:
        """Add an entity to the bucket of the cell containing it."""
        bucket = self.cells[self.cell_of(entity.x, entity.y)]
        if entity.id not in bucket:
            self._count += 1
        bucket[entity.id] = entity

    def remove(self, entity: T) -> None:
        """Remove an entity from the grid. Does nothing if it is not indexed."""
        cell = self.cell_of(entity.x, entity.y)
        bucket = self.cells.get(cell)
        if bucket is None or entity.id not in bucket:
            return
        del bucket[entity.id]
        self._count -= 1
        if not bucket:
            del self.cells[cell]

    def neighbors(self, x: float, y: float) -> Iterator[T]:
        """
        Get all entities in the cell containing (x, y) and its 8 neighbors.

        Cells outside the grid, or with nothing in them, contribute nothing.

        Yields:
            Entities from the 3x3 block of cells
        """
        col, row = self.cell_of(x, y)
        for dc in (-1, 0, 1):
            for dr in (-1, 0, 1):
                bucket = self.cells.get((col + dc, row + dr))
                if bucket:
                    yield from list(bucket.values())

    def get_nearby(self, x: float, y: float, radius: float) -> Iterator[T]:
        """
        Get neighbors within radius of the given position.

        Only the 3x3 block is searched, so radii beyond one cell are truncated.
        """
        radius_sq = radius * radius
        for entity in self.neighbors(x, y):
            dx = entity.x - x
            dy = entity.y - y
            if dx * dx + dy * dy <= radius_sq:
                yield entity

    def __contains__(self, entity: T) -> bool:
        bucket = self.cells.get(self.cell_of(entity.x, entity.y))
        return bucket is not None and entity.id in bucket

    def __iter__(self) -> Iterator[T]:
        for bucket in list(self.cells.values()):
            yield from list(bucket.values())

    def __len__(self) -> int:
        """Return the total number of entities in the grid."""
        return self._count
