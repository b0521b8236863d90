"""
Cube Stamper

Projects the three visible faces of a voxel onto a Mesh. Each face covers
exactly two lattice triangles, found from a fixed offset table relative to
the voxel's own corner:

    face   triangle 1                triangle 2
    up     (corner, right)           (corner, left)
    right  (corner + (1,-1), left)   (corner + (0,-1), right)
    left   (corner + (0,-1), left)   (corner + (-1,0), right)

Writes are occlusion aware: a triangle only takes the new value when it is
empty or holds a strictly farther depth. Ties keep what is already there.
"""

from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple

from .lattice import Orientation, VoxelCoord
from .mesh import Mesh, MeshCell, RGB, Style, TriangleKey


class Face(Enum):
    """The three faces of a cube visible from the fixed camera."""
    UP = "up"
    LEFT = "left"
    RIGHT = "right"


# (dx, dy, orientation) per triangle, relative to VoxelCoord.to_corner()
FACE_TRIANGLES: Dict[Face, Tuple[Tuple[int, int, Orientation], ...]] = {
    Face.UP: ((0, 0, Orientation.RIGHT), (0, 0, Orientation.LEFT)),
    Face.RIGHT: ((1, -1, Orientation.LEFT), (0, -1, Orientation.RIGHT)),
    Face.LEFT: ((0, -1, Orientation.LEFT), (-1, 0, Orientation.RIGHT)),
}


def face_keys(p: VoxelCoord, face: Face) -> Tuple[TriangleKey, TriangleKey]:
    """The two triangle keys covered by one face of a voxel."""
    c = p.to_corner()
    first, second = (
        (c.shift(dx, dy), orientation)
        for dx, dy, orientation in FACE_TRIANGLES[face]
    )
    return (first, second)


def stamp_face(
    mesh: Mesh,
    p: VoxelCoord,
    face: Face,
    color_fn: Callable[[], RGB],
    style: Style = Style.FLAT,
    depth_skew: float = 0.01
) -> int:
    """
    Stamp one face of a voxel onto the mesh, nearest wins.

    Args:
        mesh: Target mesh
        p: Voxel being stamped
        face: Which face
        color_fn: Called once per triangle actually written, so per-triangle
            variation (jitter) is only drawn for visible triangles
        style: Style tag stored with the color
        depth_skew: Skew passed to VoxelCoord.depth_key

    Returns:
        Number of triangles written (0-2)
    """
    depth = p.depth_key(depth_skew)
    written = 0

    def change(old: Optional[MeshCell]) -> MeshCell:
        nonlocal written
        if old is None or old.depth > depth:
            written += 1
            return MeshCell(depth, color_fn(), style)
        return old

    for c, orientation in face_keys(p, face):
        mesh.update(c, orientation, change)

    return written


def stamp_cube(
    mesh: Mesh,
    p: VoxelCoord,
    colors: Mapping[Face, RGB],
    styles: Optional[Mapping[Face, Style]] = None,
    depth_skew: float = 0.01
) -> int:
    """
    Stamp all three visible faces of a voxel with fixed colors.

    Returns:
        Number of triangles written (0-6)
    """
    styles = styles or {}
    written = 0
    for face in (Face.UP, Face.RIGHT, Face.LEFT):
        color = colors[face]
        written += stamp_face(
            mesh, p, face,
            lambda color=color: color,
            styles.get(face, Style.FLAT),
            depth_skew
        )
    return written
