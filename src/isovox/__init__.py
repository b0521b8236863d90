"""
isovox
======

Isometric voxel scenes rendered as triangle art.

A scene is a set of unit cubes. Each cube shows three faces (up, left,
right) which land on six triangles of an isometric triangle lattice. The
renderer stamps every cube into a sparse triangle mesh where the nearest
cube wins each triangle, shades faces with a coarse sun-ray shadow test,
then paints the mesh back-to-front.

Key Features:
- Canonical lattice and voxel coordinates (identity-cached)
- Occlusion-aware sparse triangle mesh
- Sampled sun-ray shadows with Numba-compiled ray stepping
- Seedable color jitter and grass-tuft overlays
- Output through Pillow (PNG) or SVG, or as raw paint commands

Example Usage:
    from isovox import VoxelScene

    scene = VoxelScene(seed=7)
    scene.load_scene("canyon_city")
    scene.set_palette("desert_stone")
    scene.export_png("canyon.png")
"""

__version__ = "1.0.0"
__author__ = "isovox Team"

from .scene import VoxelScene
from .config import RenderConfig
from .lattice import LatticeCorner, VoxelCoord, Orientation, corner, voxel, reset_caches
from .projection import ScreenPoint, TriangleProjection
from .mesh import Mesh, MeshCell, Style
from .stamper import Face, stamp_face, stamp_cube
from .sunray import cast_sun_ray
from .renderer import SceneRenderer, RenderStats
from .palette import Palette, PALETTES, get_palette
from .color import Gradient, ConstantGradient, interpolate_rgb
from .surfaces import CommandRecorder, ImageSurface, SvgSurface, PaintCommand, PaintKind

__all__ = [
    "VoxelScene",
    "RenderConfig",
    "LatticeCorner",
    "VoxelCoord",
    "Orientation",
    "corner",
    "voxel",
    "reset_caches",
    "ScreenPoint",
    "TriangleProjection",
    "Mesh",
    "MeshCell",
    "Style",
    "Face",
    "stamp_face",
    "stamp_cube",
    "cast_sun_ray",
    "SceneRenderer",
    "RenderStats",
    "Palette",
    "PALETTES",
    "get_palette",
    "Gradient",
    "ConstantGradient",
    "interpolate_rgb",
    "CommandRecorder",
    "ImageSurface",
    "SvgSurface",
    "PaintCommand",
    "PaintKind",
]
