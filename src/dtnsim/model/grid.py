"""Spatial grid index: buckets nodes by square cell for neighbor lookup.

The plane is cut into cells of side ``CELL_SIZE``. Because no node's
communication range may exceed the cell side, every node within range of a
given node sits in that node's cell or one of the eight cells around it, so a
proximity query only has to look at a 3x3 block of buckets.

The index is owned by the tick driver and rebuilt once per tick. All nodes
must be registered before anyone queries it.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

# Cell side length; also the largest communication range a node may have.
CELL_SIZE = 200.0

Cell = tuple[int, int]


class GridNotBuiltError(RuntimeError):
    """Raised when the grid is used before the driver has built it for the tick."""


def cell_for(x: float, y: float, cell_size: float = CELL_SIZE) -> Cell:
    """Return the cell containing (x, y).

    Negative coordinates collapse to row/column 0; there is no wraparound.
    """
    return (max(0, int(x // cell_size)), max(0, int(y // cell_size)))


class SpatialGridIndex:
    """Mapping of cell -> nodes registered there this tick."""

    def __init__(self, cell_size: float = CELL_SIZE) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self._buckets: dict[Cell, list[Any]] = {}
        self._count = 0

    def cell_at(self, x: float, y: float) -> Cell:
        return cell_for(x, y, self.cell_size)

    def register(self, node: Any, cell: Cell) -> None:
        """Append ``node`` to the bucket at ``cell``."""
        self._buckets.setdefault(cell, []).append(node)
        self._count += 1

    def occupants(self, cell: Cell) -> list[Any]:
        """Copy of the nodes registered at ``cell``."""
        return list(self._buckets.get(cell, ()))

    def neighborhood(self, cell: Cell) -> Iterator[Any]:
        """Yield every node in the 3x3 block of cells centred on ``cell``.

        Cells with a negative row or column are skipped.
        """
        i, j = cell
        for dj in (-1, 0, 1):
            if j + dj < 0:
                continue
            for di in (-1, 0, 1):
                if i + di < 0:
                    continue
                yield from self._buckets.get((i + di, j + dj), ())

    def cells(self) -> list[Cell]:
        """Occupied cells."""
        return list(self._buckets)

    def clear(self) -> None:
        self._buckets.clear()
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return (
            f"SpatialGridIndex(cell_size={self.cell_size}, "
            f"cells={len(self._buckets)}, nodes={self._count})"
        )
