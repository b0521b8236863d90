"""
Scene Renderer

Renders a voxel set in one pass:

1. Shade: for every voxel compute a lightness per visible face from its
   position, a face offset and the sun-ray shadow test, then map it
   through the palette gradient of that face.
2. Stamp: write the three faces into a fresh Mesh, nearest wins.
3. Sort: gather every populated triangle (plus an overlay entry for
   decorative styles) and sort farthest-first.
4. Paint: emit one paint command per triangle and a few small shapes per
   overlay, then hand them to the drawing surface.

All commands are computed before the first one is painted, so an error
anywhere leaves the surface untouched.

Randomness (color jitter, overlay placement) comes from an injected
numpy Generator, so a fixed seed gives a fixed picture.
"""

import logging
import time
from collections.abc import Set
from typing import AbstractSet, Dict, Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from .color import RGB, perturb_color, scale_color
from .config import RenderConfig
from .lattice import LatticeCorner, Orientation, VoxelCoord
from .mesh import Mesh, MeshCell, triangle_corners
from .palette import Palette
from .projection import ScreenPoint, TriangleProjection
from .stamper import Face, stamp_face
from .sunray import cast_sun_ray
from .surfaces import PaintCommand, PaintKind, dispatch

logger = logging.getLogger(__name__)


class FaceLighting(NamedTuple):
    """How one face is lit."""
    normal: Optional[Tuple[int, int, int]]  # Sun ray starts one step along it; None means never sunlit
    axis: str                               # Voxel coordinate driving the positional bias
    divisor: float
    offset: float


# The LEFT face looks away from the sun and never gets the shadow bonus.
FACE_LIGHTING: Dict[Face, FaceLighting] = {
    Face.UP: FaceLighting((0, 1, 0), "cy", 20.0, 0.08),
    Face.RIGHT: FaceLighting((0, 0, 1), "cz", 20.0, 0.25),
    Face.LEFT: FaceLighting(None, "cx", 30.0, 0.0),
}

FACES = (Face.UP, Face.RIGHT, Face.LEFT)


class PaintEntry(NamedTuple):
    """A triangle (or its overlay) waiting to be painted."""
    depth: float
    corner: LatticeCorner
    orientation: Orientation
    cell: MeshCell
    effect: bool


class RenderStats(NamedTuple):
    voxel_count: int
    triangle_count: int
    effect_count: int
    command_count: int
    elapsed: float


class SceneRenderer:
    """
    Isometric voxel renderer.

    Attributes:
        config: RenderConfig in use
        rng: numpy Generator used for jitter and overlay placement
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the renderer.

        Args:
            config: Render configuration (defaults if omitted)
            rng: Random source; takes precedence over ``seed``
            seed: Seed for a fresh numpy Generator
        """
        self.config = config or RenderConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    # ------------------------------------------------------------------
    # Shading
    # ------------------------------------------------------------------

    def face_lightness(
        self,
        voxels: AbstractSet[VoxelCoord],
        p: VoxelCoord
    ) -> Dict[Face, float]:
        """
        Lightness score of each visible face of a voxel.

        Args:
            voxels: The whole scene (shadow casters)
            p: Voxel to shade

        Returns:
            Mapping face -> lightness
        """
        cfg = self.config
        result = {}
        for face in FACES:
            lighting = FACE_LIGHTING[face]
            if lighting.normal is None:
                bonus = 0.0
            else:
                origin = p.shift(*lighting.normal)
                shadowed = cast_sun_ray(voxels, origin, cfg.max_distance, cfg.step_size)
                bonus = 0.0 if shadowed else cfg.shadow_bonus
            result[face] = (
                bonus
                + getattr(p, lighting.axis) / lighting.divisor
                + lighting.offset
            )
        return result

    def face_colors(
        self,
        voxels: AbstractSet[VoxelCoord],
        p: VoxelCoord,
        palette: Palette
    ) -> Dict[Face, RGB]:
        """Unjittered color of each visible face of a voxel."""
        lightness = self.face_lightness(voxels, p)
        return {face: palette.gradient(face)(lightness[face]) for face in FACES}

    def _color_fn(self, base: RGB):
        jitter = self.config.jitter
        if jitter <= 0:
            return lambda: base
        return lambda: perturb_color(base, jitter, self.rng)

    # ------------------------------------------------------------------
    # Stamping
    # ------------------------------------------------------------------

    def build_mesh(self, voxels: Iterable[VoxelCoord], palette: Palette) -> Mesh:
        """
        Shade and stamp every voxel into a new mesh.

        Voxels are visited in sorted order so that the random stream is
        consumed the same way for equal scenes.

        Args:
            voxels: Scene voxels
            palette: Face gradients and styles

        Returns:
            Populated Mesh
        """
        voxels = _as_set(voxels)
        mesh = Mesh()
        skew = self.config.depth_skew

        for p in sorted(voxels):
            colors = self.face_colors(voxels, p, palette)
            for face in FACES:
                stamp_face(
                    mesh, p, face,
                    self._color_fn(colors[face]),
                    palette.style(face),
                    skew
                )

        logger.debug("Stamped %d voxels into %d triangles", len(voxels), len(mesh))
        return mesh

    # ------------------------------------------------------------------
    # Sorting and painting
    # ------------------------------------------------------------------

    def paint_list(self, mesh: Mesh) -> List[PaintEntry]:
        """
        All triangles and overlays of a mesh, farthest first.

        The sort is stable, so entries with equal depth keep mesh order.
        """
        cfg = self.config
        entries = []
        for c, orientation, cell in mesh.iter_triangles():
            entries.append(PaintEntry(cell.depth, c, orientation, cell, False))
            if cfg.effects and cfg.effect_count > 0 and cell.style.decorative:
                entries.append(PaintEntry(
                    cell.depth - cfg.effect_depth_bias, c, orientation, cell, True
                ))

        entries.sort(key=lambda e: e.depth, reverse=True)
        return entries

    def paint_commands(
        self,
        mesh: Mesh,
        projection: Optional[TriangleProjection] = None
    ) -> List[PaintCommand]:
        """
        Turn a mesh into an ordered list of paint commands.

        Args:
            mesh: Stamped mesh
            projection: Projection to use (config projection if omitted)

        Returns:
            Commands in painter's order
        """
        projection = projection or self.config.projection
        commands = []

        for entry in self.paint_list(mesh):
            points = tuple(
                projection.project(c.tx, c.ty)
                for c in triangle_corners(entry.corner, entry.orientation)
            )
            if entry.effect:
                commands.extend(self._effect_commands(points, entry.cell))
            else:
                commands.append(PaintCommand(PaintKind.POLYGON, points, entry.cell.color))

        return commands

    def _effect_commands(
        self,
        points: Tuple[ScreenPoint, ScreenPoint, ScreenPoint],
        cell: MeshCell
    ) -> List[PaintCommand]:
        """
        Grass blades along the two edges that meet at the key corner.

        Each blade sits on a random point of its edge, pushed a little
        toward the triangle centroid, and points up with a random lean.
        """
        cfg = self.config
        size = cfg.effect_size
        color = scale_color(cell.color, cfg.effect_shade)

        tri = np.array(points, dtype=np.float64)
        centroid = tri.mean(axis=0)
        edges = ((tri[0], tri[1]), (tri[0], tri[2]))

        commands = []
        for i in range(cfg.effect_count):
            start, end = edges[i % 2]
            along = self.rng.uniform(0.15, 0.85)
            lean = self.rng.uniform(-0.5, 0.5) * size

            direction = end - start
            length = float(np.hypot(direction[0], direction[1]))
            unit = direction / length
            normal = np.array([-unit[1], unit[0]])
            if np.dot(normal, centroid - start) < 0:
                normal = -normal

            base = start + direction * along + normal * (size * 0.25)
            half_width = unit * (size * 0.2)
            left = base - half_width
            right = base + half_width
            tip = base + np.array([lean, -size])

            commands.append(PaintCommand(
                PaintKind.SMALL_POLYGON,
                (
                    ScreenPoint(float(left[0]), float(left[1])),
                    ScreenPoint(float(right[0]), float(right[1])),
                    ScreenPoint(float(tip[0]), float(tip[1])),
                ),
                color
            ))
        return commands

    # ------------------------------------------------------------------
    # Full pass
    # ------------------------------------------------------------------

    def projection_for(self, voxels: Iterable[VoxelCoord]) -> TriangleProjection:
        """Projection for a scene, re-centered if ``fit_to_canvas`` is set."""
        cfg = self.config
        if cfg.fit_to_canvas:
            return cfg.projection.fit_to_canvas(cfg.width, cfg.height, voxels)
        return cfg.projection

    def render(self, surface, voxels: Iterable[VoxelCoord], palette: Palette) -> RenderStats:
        """
        Render a scene onto a drawing surface.

        Args:
            surface: Object with fill_polygon / fill_small_polygon
            voxels: Scene voxels; an empty scene paints nothing
            palette: Face gradients and styles

        Returns:
            RenderStats for the pass
        """
        start_time = time.time()
        voxels = _as_set(voxels)

        mesh = self.build_mesh(voxels, palette)
        commands = self.paint_commands(mesh, self.projection_for(voxels))

        for command in commands:
            dispatch(surface, command)

        effect_count = sum(1 for c in commands if c.kind is PaintKind.SMALL_POLYGON)
        stats = RenderStats(
            voxel_count=len(voxels),
            triangle_count=len(mesh),
            effect_count=effect_count,
            command_count=len(commands),
            elapsed=time.time() - start_time,
        )
        logger.info(
            "Rendered %d voxels: %d triangles, %d paint commands in %.2fs",
            stats.voxel_count, stats.triangle_count, stats.command_count, stats.elapsed,
        )
        return stats


def _as_set(voxels: Iterable[VoxelCoord]) -> AbstractSet[VoxelCoord]:
    if isinstance(voxels, Set):
        return voxels
    return frozenset(voxels)
