"""
Surface Palettes

A Palette holds one gradient per visible cube face. Each gradient maps a
lightness score to an RGB color; the renderer computes the score from the
voxel position and the shadow test.

Named presets live in PALETTES and are passed to the renderer explicitly.
"""

from dataclasses import dataclass
from typing import Callable, Dict

from .color import Gradient, RGB
from .mesh import Style
from .stamper import Face


GradientFn = Callable[[float], RGB]


@dataclass(frozen=True)
class Palette:
    """Face gradients plus the style tag stored with each face."""

    name: str
    top: GradientFn
    right: GradientFn
    left: GradientFn
    top_style: Style = Style.FLAT
    right_style: Style = Style.FLAT
    left_style: Style = Style.FLAT

    def gradient(self, face: Face) -> GradientFn:
        if face is Face.UP:
            return self.top
        if face is Face.RIGHT:
            return self.right
        return self.left

    def style(self, face: Face) -> Style:
        if face is Face.UP:
            return self.top_style
        if face is Face.RIGHT:
            return self.right_style
        return self.left_style


_PALE_STONE = Gradient([
    (0.55, 0.55, 0.6),
    (0.7, 0.7, 0.8),
    (0.8, 0.8, 0.85),
])

DESERT_STONE = Palette(
    name="desert_stone",
    top=Gradient([
        (176 / 255, 112 / 255, 0.0),
        (243 / 255, 166 / 255, 0.0),
        (254 / 255, 175 / 255, 0.0),
        (251 / 255, 225 / 255, 38 / 255),
    ]),
    right=_PALE_STONE,
    left=Gradient([
        (0.4, 0.3, 0.3),
        (0.5, 0.45, 0.3),
    ]),
)

BLOSSOMS = Palette(
    name="blossoms",
    top=Gradient([
        (100 / 255, 30 / 255 / 3, 76 / 255),
        (183 / 255, 55 / 255, 146 / 255),
        (190 / 255, 185 / 255, 220 / 255),
    ]),
    right=_PALE_STONE,
    left=Gradient([
        (0.6, 0.5, 0.6),
        (0.9, 0.7, 0.8),
        (0.95, 0.8, 0.85),
    ]),
)

MEADOW = Palette(
    name="meadow",
    top=Gradient([
        (0.12, 0.32, 0.1),
        (0.25, 0.55, 0.18),
        (0.45, 0.72, 0.25),
        (0.7, 0.85, 0.4),
    ]),
    right=Gradient([
        (0.35, 0.27, 0.2),
        (0.5, 0.4, 0.3),
        (0.6, 0.5, 0.38),
    ]),
    left=Gradient([
        (0.25, 0.2, 0.15),
        (0.38, 0.3, 0.22),
    ]),
    top_style=Style.GRASS,
)

PALETTES: Dict[str, Palette] = {
    p.name: p for p in (DESERT_STONE, BLOSSOMS, MEADOW)
}


def get_palette(name: str) -> Palette:
    """
    Look up a named palette.

    Raises:
        KeyError: If the name is unknown
    """
    try:
        return PALETTES[name]
    except KeyError:
        raise KeyError(
            f"Unknown palette: {name!r} (available: {', '.join(sorted(PALETTES))})"
        ) from None
