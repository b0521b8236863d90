"""
Projection Mathematics for the Triangle Lattice

This module maps triangle-lattice corners to screen space.

The lattice is the classic isometric grid: the vertical axis (ty) is
drawn straight up, the diagonal axis (tx) is drawn up-right at 30 degrees
above the horizontal. With scale s and origin (X0, Y0):

    x = X0 + s * cos(30°) * tx
    y = Y0 - s * ty - s * sin(30°) * tx

Screen space is image space: +x right, +y down.
"""

from dataclasses import dataclass, replace
from typing import Iterable, NamedTuple, Tuple
import math
import numpy as np


# The six lattice neighbours of a voxel corner; together they bound the
# hexagonal silhouette of a unit cube.
HEXAGON_OFFSETS = np.array([
    [0, 1], [1, 0], [1, -1], [0, -1], [-1, 0], [-1, 1]
], dtype=np.int64)


class ScreenPoint(NamedTuple):
    """A point in screen space (x right, y down)."""
    x: float
    y: float


@dataclass(frozen=True)
class TriangleProjection:
    """
    Affine projection from lattice corners to screen points.

    The projection matrix is:
        | s*cos(30°)    0 |
        | -s*sin(30°)  -s |

    applied to (tx, ty), followed by a translation to (origin_x, origin_y).
    """

    scale: float = 25.0
    origin_x: float = 400.0
    origin_y: float = 400.0

    def __post_init__(self):
        """Validate and precompute the projection matrix."""
        if self.scale <= 0:
            raise ValueError(f"Projection scale must be positive, got {self.scale}")
        # Frozen dataclass: cached values go through object.__setattr__
        object.__setattr__(self, "matrix", self._build_matrix())

    def _build_matrix(self) -> np.ndarray:
        s = self.scale
        return np.array([
            [s * math.cos(math.pi / 6), 0.0],
            [-s * math.sin(math.pi / 6), -s]
        ], dtype=np.float64)

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.origin_x, self.origin_y)

    def project(self, tx: int, ty: int) -> ScreenPoint:
        """
        Project one lattice corner to screen space.

        Args:
            tx: Diagonal (up-right) lattice coordinate
            ty: Vertical lattice coordinate

        Returns:
            ScreenPoint
        """
        s = self.scale
        return ScreenPoint(
            self.origin_x + s * math.cos(math.pi / 6) * tx,
            self.origin_y - s * ty - s * math.sin(math.pi / 6) * tx,
        )

    def project_batch(self, corners: np.ndarray) -> np.ndarray:
        """
        Batch projection for many lattice corners.

        Args:
            corners: Array of shape (N, 2) with (tx, ty) rows

        Returns:
            Array of shape (N, 2) with (x, y) screen coordinates
        """
        corners = np.asarray(corners, dtype=np.float64).reshape(-1, 2)
        screen = (self.matrix @ corners.T).T
        return screen + np.array(self.origin, dtype=np.float64)

    def screen_bounds(self, voxels: Iterable) -> Tuple[np.ndarray, np.ndarray]:
        """
        Screen-space bounding box of a set of voxels.

        Args:
            voxels: Iterable of objects with integer cx, cy, cz attributes

        Returns:
            (min_xy, max_xy); both zero when there are no voxels
        """
        coords = np.array([(v.cx, v.cy, v.cz) for v in voxels], dtype=np.int64)
        if len(coords) == 0:
            return (np.zeros(2), np.zeros(2))

        centers = np.column_stack([
            coords[:, 0] + coords[:, 2],
            coords[:, 1] - coords[:, 2],
        ])
        # Every hexagon vertex of every cube
        outline = (centers[:, np.newaxis, :] + HEXAGON_OFFSETS[np.newaxis, :, :]).reshape(-1, 2)
        screen = self.project_batch(outline)
        return (screen.min(axis=0), screen.max(axis=0))

    def fit_to_canvas(
        self,
        width: int,
        height: int,
        voxels: Iterable
    ) -> "TriangleProjection":
        """
        Return a projection with the same scale, centered on a canvas.

        Args:
            width, height: Canvas size in pixels
            voxels: Scene voxels whose outline should be centered

        Returns:
            New TriangleProjection
        """
        voxels = list(voxels)
        if not voxels:
            return replace(self, origin_x=width / 2.0, origin_y=height / 2.0)

        lo, hi = self.screen_bounds(voxels)
        center = (lo + hi) / 2.0
        return replace(
            self,
            origin_x=self.origin_x + width / 2.0 - float(center[0]),
            origin_y=self.origin_y + height / 2.0 - float(center[1]),
        )


DEFAULT_PROJECTION = TriangleProjection()
