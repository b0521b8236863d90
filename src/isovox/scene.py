"""
Main VoxelScene Class

This is the primary interface for rendering. It orchestrates:
1. Scene building (named builder or caller-supplied voxels)
2. Palette selection
3. Rendering through SceneRenderer
4. Export to PNG and SVG

Example Usage:
    scene = VoxelScene(seed=7)
    scene.load_scene("canyon_city")
    scene.set_palette("desert_stone")
    scene.export_png("canyon.png")
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

import numpy as np

from .config import RenderConfig
from .lattice import VoxelCoord
from .palette import Palette, get_palette, DESERT_STONE
from .renderer import RenderStats, SceneRenderer
from .scenes import build_scene
from .surfaces import CommandRecorder, ImageSurface, SvgSurface, dispatch

logger = logging.getLogger(__name__)


class VoxelScene:
    """
    High-level interface for building and rendering a voxel scene.

    Attributes:
        config: Render configuration
        seed: Seed shared by scene building and rendering
        voxels: The current voxel set
        palette: The current palette
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the VoxelScene.

        Args:
            config: Render configuration (defaults if omitted)
            seed: Seed for scene building, jitter and overlays; None draws
                fresh entropy every time
        """
        self.config = config or RenderConfig()
        self.seed = seed

        self._voxels: Optional[frozenset] = None
        self._scene_name: Optional[str] = None
        self._palette: Palette = DESERT_STONE
        self._stats: Optional[RenderStats] = None
        self._recorder: Optional[CommandRecorder] = None

    def load_scene(self, name: str) -> "VoxelScene":
        """
        Build one of the named scenes.

        Args:
            name: Scene name (see isovox.scenes.SCENES)

        Returns:
            self for method chaining
        """
        self._voxels = build_scene(name, rng=np.random.default_rng(self.seed))
        self._scene_name = name
        self._invalidate()
        logger.info("Built scene %s with %d voxels", name, len(self._voxels))
        return self

    def load_voxels(self, voxels: Iterable[VoxelCoord]) -> "VoxelScene":
        """
        Use a caller-supplied voxel set.

        Returns:
            self for method chaining
        """
        self._voxels = frozenset(voxels)
        self._scene_name = None
        self._invalidate()
        return self

    def set_palette(self, palette: Union[str, Palette]) -> "VoxelScene":
        """
        Select the palette by name or instance.

        Returns:
            self for method chaining
        """
        if isinstance(palette, str):
            palette = get_palette(palette)
        self._palette = palette
        self._invalidate()
        return self

    def _invalidate(self):
        self._recorder = None
        self._stats = None

    def _renderer(self) -> SceneRenderer:
        if self._voxels is None:
            raise RuntimeError("No scene loaded. Call load_scene() or load_voxels() first.")
        # Offset the seed so jitter does not replay the scene builder's stream
        seed = None if self.seed is None else self.seed + 1
        return SceneRenderer(self.config, seed=seed)

    def _paint(self) -> CommandRecorder:
        """Run the render pass once per scene and palette."""
        if self._recorder is None:
            recorder = CommandRecorder()
            self._stats = self._renderer().render(recorder, self._voxels, self._palette)
            self._recorder = recorder
        return self._recorder

    def render(self, surface=None) -> RenderStats:
        """
        Render the scene, optionally onto a drawing surface.

        The paint commands are computed once and replayed onto every
        surface, so all exports of one scene show the same picture even
        without a seed.

        Args:
            surface: Object with fill_polygon / fill_small_polygon

        Returns:
            RenderStats for the pass
        """
        recorder = self._paint()
        if surface is not None:
            for command in recorder.commands:
                dispatch(surface, command)
        return self._stats

    def render_commands(self) -> CommandRecorder:
        """Render into a new CommandRecorder and return it."""
        recorder = CommandRecorder()
        self.render(recorder)
        return recorder

    def render_image(self) -> ImageSurface:
        """Render into a new Pillow-backed surface."""
        surface = ImageSurface(self.config.width, self.config.height, self.config.background)
        self.render(surface)
        return surface

    def render_svg(self) -> SvgSurface:
        """Render into a new SVG surface."""
        surface = SvgSurface(self.config.width, self.config.height, self.config.background)
        self.render(surface)
        return surface

    def export_png(self, output_path: Union[str, Path]):
        """Render and save a PNG image."""
        self.render_image().save(output_path)

    def export_svg(self, output_path: Union[str, Path]):
        """Render and save an SVG document."""
        self.render_svg().save(output_path)

    def export_all(
        self,
        base_path: Union[str, Path],
        formats: Optional[List[str]] = None
    ) -> List[Path]:
        """
        Export to multiple formats at once.

        Args:
            base_path: Base file path (without extension)
            formats: List of formats to export (default: png)

        Returns:
            Written file paths
        """
        base_path = Path(base_path)
        formats = formats or ["png"]
        written = []

        if "png" in formats:
            path = base_path.with_suffix(".png")
            self.export_png(path)
            written.append(path)

        if "svg" in formats:
            path = base_path.with_suffix(".svg")
            self.export_svg(path)
            written.append(path)

        return written

    @property
    def voxels(self) -> Optional[frozenset]:
        """Get the current voxel set."""
        return self._voxels

    @property
    def palette(self) -> Palette:
        return self._palette

    @property
    def voxel_count(self) -> int:
        if self._voxels is None:
            return 0
        return len(self._voxels)

    @property
    def triangle_count(self) -> int:
        if self._stats is None:
            return 0
        return self._stats.triangle_count

    @property
    def command_count(self) -> int:
        if self._stats is None:
            return 0
        return self._stats.command_count

    @property
    def stats(self) -> Optional[RenderStats]:
        """Statistics of the current render, if any."""
        return self._stats

    def preview(self) -> dict:
        """
        Get a preview of the current state.

        Returns:
            Dictionary with current state information
        """
        info = {
            "scene_loaded": self._voxels is not None,
            "scene": self._scene_name,
            "palette": self._palette.name,
            "seed": self.seed,
            "rendered": self._stats is not None,
        }

        if self._voxels is not None:
            info["voxel_count"] = len(self._voxels)

        if self._stats is not None:
            info["triangle_count"] = self._stats.triangle_count
            info["command_count"] = self._stats.command_count
            info["effect_count"] = self._stats.effect_count

        return info
