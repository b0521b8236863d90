"""
Sparse Triangle Mesh

A Mesh maps triangles of the lattice to a MeshCell (depth, color, style).
Each triangle is either left- or right-facing and is identified by its
bottom corner:

- RIGHT: lower-left corner c, vertices c, c+(0,1), c+(1,0)
- LEFT:  lower-right corner c, vertices c, c+(-1,1), c+(0,1)

Absent entries mean "not painted yet". The mesh never removes entries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Tuple

from .lattice import LatticeCorner, Orientation


RGB = Tuple[float, float, float]
TriangleKey = Tuple[LatticeCorner, Orientation]


class Style(Enum):
    """Surface tag carried by a mesh cell."""
    FLAT = "flat"    # Plain filled triangle
    GRASS = "grass"  # Gets a tuft overlay on top of the fill

    @property
    def decorative(self) -> bool:
        return self is not Style.FLAT


@dataclass(frozen=True)
class MeshCell:
    """Per-triangle state: depth key, unclamped RGB and style tag."""
    depth: float
    color: RGB
    style: Style = Style.FLAT


def triangle_corners(
    c: LatticeCorner,
    orientation: Orientation
) -> Tuple[LatticeCorner, LatticeCorner, LatticeCorner]:
    """The three lattice corners of a triangle, starting at its key corner."""
    if orientation is Orientation.RIGHT:
        return (c, c.shift(0, 1), c.shift(1, 0))
    return (c, c.shift(-1, 1), c.shift(0, 1))


class Mesh:
    """
    Sparse store of triangle cells, keyed by (corner, orientation).
    """

    def __init__(self):
        self._cells: Dict[Orientation, Dict[LatticeCorner, MeshCell]] = {
            Orientation.LEFT: {},
            Orientation.RIGHT: {},
        }

    def get(self, c: LatticeCorner, orientation: Orientation) -> Optional[MeshCell]:
        """
        Get the cell stored at a triangle.

        Returns:
            MeshCell or None if the triangle has not been written
        """
        return self._cells[orientation].get(c)

    def set(self, c: LatticeCorner, orientation: Orientation, cell: MeshCell):
        """Replace the cell stored at a triangle."""
        self._cells[orientation][c] = cell

    def update(
        self,
        c: LatticeCorner,
        orientation: Orientation,
        change: Callable[[Optional[MeshCell]], MeshCell]
    ):
        """
        Read-modify-write one triangle.

        Args:
            c: Key corner
            orientation: Triangle orientation
            change: Receives the stored cell (None if absent) and returns
                the cell to store. Returning the old cell keeps it.
        """
        side = self._cells[orientation]
        cell = change(side.get(c))
        if cell is None:
            raise ValueError("Mesh.update change function must return a cell")
        side[c] = cell

    def iter_triangles(self) -> Iterator[Tuple[LatticeCorner, Orientation, MeshCell]]:
        """
        Iterate over all populated triangles.

        Order is unspecified; callers that need painter's order sort the
        result themselves. Each call starts a fresh iteration.

        Yields:
            Tuples of (corner, orientation, cell)
        """
        for orientation in (Orientation.LEFT, Orientation.RIGHT):
            for c, cell in self._cells[orientation].items():
                yield (c, orientation, cell)

    def map(self, func: Callable[[MeshCell], MeshCell]) -> "Mesh":
        """Copy the mesh, transforming every stored cell."""
        copy = Mesh()
        for orientation, side in self._cells.items():
            copy._cells[orientation] = {c: func(cell) for c, cell in side.items()}
        return copy

    def __contains__(self, key: TriangleKey) -> bool:
        c, orientation = key
        return c in self._cells[orientation]

    def __len__(self) -> int:
        return sum(len(side) for side in self._cells.values())

    @property
    def is_empty(self) -> bool:
        return len(self) == 0
