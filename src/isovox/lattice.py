"""
Triangle Lattice and Voxel Coordinates

This module defines the two integer coordinate systems used by the renderer:

- LatticeCorner: a vertex of the triangular screen lattice (tx, ty)
- VoxelCoord: an integer point in voxel space (cx, cy, cz)

Both are canonicalized through process-wide identity caches, so that
``corner(1, 2) is corner(1, 2)`` holds. Structural equality and hashing
are kept as well, which means a coordinate built directly from the class
constructor still works as a dict/set key; only identity differs.

Lattice axes:
- ty is vertical (up)
- tx is the up-right diagonal

Inputs are expected to be Python ints. Non-integral values are a caller
contract violation and are not checked.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generic, Hashable, Tuple, TypeVar

from .projection import DEFAULT_PROJECTION, ScreenPoint, TriangleProjection


T = TypeVar("T")


class Orientation(Enum):
    """Which of the two triangles hanging off a lattice corner."""
    LEFT = "left"
    RIGHT = "right"


class IdentityCache(Generic[T]):
    """
    Append-only table mapping an integer tuple to a single handle.

    Lookups on a hit never take the lock. A miss serializes on
    ``insert-if-absent`` so two threads racing on the same key still end
    up sharing one handle.
    """

    def __init__(self, factory: Callable[..., T]):
        self._factory = factory
        self._table: Dict[Hashable, T] = {}
        self._lock = threading.Lock()

    def get(self, *key) -> T:
        handle = self._table.get(key)
        if handle is not None:
            return handle

        with self._lock:
            handle = self._table.get(key)
            if handle is None:
                handle = self._factory(*key)
                self._table[key] = handle
            return handle

    def clear(self):
        with self._lock:
            self._table.clear()

    def __contains__(self, key) -> bool:
        return tuple(key) in self._table

    def __len__(self) -> int:
        return len(self._table)


@dataclass(frozen=True)
class LatticeCorner:
    """
    A corner in the triangle grid.

    Use ``corner(tx, ty)`` rather than the constructor to get the
    canonical instance.
    """

    tx: int
    ty: int

    def project(self, projection: TriangleProjection = DEFAULT_PROJECTION) -> ScreenPoint:
        """Screen position of this corner."""
        return projection.project(self.tx, self.ty)

    def shift(self, dx: int, dy: int) -> "LatticeCorner":
        return corner(self.tx + dx, self.ty + dy)

    def as_tuple(self) -> Tuple[int, int]:
        return (self.tx, self.ty)


@dataclass(frozen=True, order=True)
class VoxelCoord:
    """
    An integer point in voxel space.

    Use ``voxel(cx, cy, cz)`` rather than the constructor to get the
    canonical instance. Ordering is lexicographic on (cx, cy, cz) and is
    only used to give scene iteration a stable order.
    """

    cx: int
    cy: int
    cz: int

    def to_corner(self) -> LatticeCorner:
        """The lattice corner the voxel's center line projects through."""
        return corner(self.cx + self.cz, self.cy - self.cz)

    def depth_key(self, skew: float = 0.01) -> float:
        """
        Sortable screen depth of the voxel; smaller is nearer.

        The formula is a cheap approximation: it is only meaningful when
        comparing voxels that project to (or near) the same lattice corner.
        It is not a true 3D depth.

        Args:
            skew: Weight of the x/z axes against the vertical axis

        Returns:
            Depth key, ``-cy - cz * skew + cx * skew``
        """
        return -self.cy - self.cz * skew + self.cx * skew

    def shift(self, dx: int, dy: int, dz: int) -> "VoxelCoord":
        return voxel(self.cx + dx, self.cy + dy, self.cz + dz)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.cx, self.cy, self.cz)


_CORNERS: IdentityCache[LatticeCorner] = IdentityCache(LatticeCorner)
_VOXELS: IdentityCache[VoxelCoord] = IdentityCache(VoxelCoord)


def corner(tx: int, ty: int) -> LatticeCorner:
    """Canonical LatticeCorner for (tx, ty)."""
    return _CORNERS.get(tx, ty)


def voxel(cx: int, cy: int, cz: int) -> VoxelCoord:
    """Canonical VoxelCoord for (cx, cy, cz)."""
    return _VOXELS.get(cx, cy, cz)


def reset_caches():
    """
    Drop every cached corner and voxel.

    Only identity is affected: coordinates created before the reset still
    compare and hash equal to the ones created after it.
    """
    _CORNERS.clear()
    _VOXELS.clear()


def cache_sizes() -> Tuple[int, int]:
    """Number of cached (corners, voxels)."""
    return (len(_CORNERS), len(_VOXELS))
