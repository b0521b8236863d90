"""
Drawing Surfaces

The renderer produces an ordered list of paint commands; a surface turns
them into output. Every surface implements:

    fill_polygon(points, color)        - a mesh triangle
    fill_small_polygon(points, color)  - an effect overlay shape

Colors arrive unclamped. Surfaces that produce pixels clamp them here and
nowhere earlier.

Supported surfaces:
- CommandRecorder: keeps the commands (tests, statistics)
- ImageSurface: Pillow raster, saved as PNG
- SvgSurface: plain-text SVG document
"""

from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Sequence, Tuple, Union

from PIL import Image, ImageDraw

from .color import RGB, to_hex, to_rgb8
from .projection import ScreenPoint


class PaintKind(Enum):
    POLYGON = "polygon"
    SMALL_POLYGON = "small_polygon"


class PaintCommand(NamedTuple):
    """One drawing instruction: three screen points and a raw color."""
    kind: PaintKind
    points: Tuple[ScreenPoint, ScreenPoint, ScreenPoint]
    color: RGB


def dispatch(surface, command: PaintCommand):
    """Send one command to the matching surface method."""
    if command.kind is PaintKind.POLYGON:
        surface.fill_polygon(command.points, command.color)
    else:
        surface.fill_small_polygon(command.points, command.color)


class CommandRecorder:
    """Surface that records paint commands verbatim."""

    def __init__(self):
        self.commands: List[PaintCommand] = []

    def fill_polygon(self, points: Sequence[ScreenPoint], color: RGB):
        self.commands.append(PaintCommand(PaintKind.POLYGON, tuple(points), color))

    def fill_small_polygon(self, points: Sequence[ScreenPoint], color: RGB):
        self.commands.append(PaintCommand(PaintKind.SMALL_POLYGON, tuple(points), color))

    @property
    def polygons(self) -> List[PaintCommand]:
        return [c for c in self.commands if c.kind is PaintKind.POLYGON]

    @property
    def small_polygons(self) -> List[PaintCommand]:
        return [c for c in self.commands if c.kind is PaintKind.SMALL_POLYGON]

    def __len__(self) -> int:
        return len(self.commands)


class ImageSurface:
    """
    Raster surface backed by a Pillow image.

    Triangles are filled and outlined in their own color: the outline
    closes the hairline seams between neighbouring triangles, at the cost
    of slightly overdrawn edges.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 800,
        background: RGB = (0.0, 0.0, 0.0)
    ):
        """
        Args:
            width, height: Image size in pixels
            background: Fill color of the empty canvas
        """
        self.width = width
        self.height = height
        self.image = Image.new("RGB", (width, height), to_rgb8(background))
        self._draw = ImageDraw.Draw(self.image)

    def fill_polygon(self, points: Sequence[ScreenPoint], color: RGB):
        rgb = to_rgb8(color)
        self._draw.polygon([(p[0], p[1]) for p in points], fill=rgb, outline=rgb)

    def fill_small_polygon(self, points: Sequence[ScreenPoint], color: RGB):
        self._draw.polygon([(p[0], p[1]) for p in points], fill=to_rgb8(color))

    def save(self, output_path: Union[str, Path]):
        """Save the image; the format follows the file extension."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.image.save(output_path)


class SvgSurface:
    """
    Vector surface that accumulates SVG <polygon> elements.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 800,
        background: RGB = (0.0, 0.0, 0.0)
    ):
        self.width = width
        self.height = height
        self._lines: List[str] = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
            f'viewBox="0 0 {width} {height}">',
            f'<rect width="{width}" height="{height}" fill="{to_hex(background)}"/>',
        ]
        self.polygon_count = 0

    @staticmethod
    def _points(points: Sequence[ScreenPoint]) -> str:
        return " ".join(f"{p[0]:.3f},{p[1]:.3f}" for p in points)

    def fill_polygon(self, points: Sequence[ScreenPoint], color: RGB):
        hex_color = to_hex(color)
        self._lines.append(
            f'<polygon points="{self._points(points)}" fill="{hex_color}" '
            f'stroke="{hex_color}" stroke-width="0.5"/>'
        )
        self.polygon_count += 1

    def fill_small_polygon(self, points: Sequence[ScreenPoint], color: RGB):
        self._lines.append(
            f'<polygon points="{self._points(points)}" fill="{to_hex(color)}"/>'
        )
        self.polygon_count += 1

    def to_string(self) -> str:
        return "\n".join(self._lines + ["</svg>"]) + "\n"

    def save(self, output_path: Union[str, Path]):
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.to_string(), encoding="utf-8")
