"""
Color Gradients and Paint-Boundary Conversion

Handles:
- Gradient interpolation over a list of RGB stops
- Random per-channel color jitter
- Clamping and 8-bit conversion at the paint boundary

Colors are float RGB triples nominally in [0, 1]. They are allowed to
overshoot while the scene is shaded and jittered; only the drawing
surfaces clamp them.
"""

from typing import Sequence, Tuple
import numpy as np
from numba import njit

RGB = Tuple[float, float, float]


@njit(cache=True)
def _interpolate(stops: np.ndarray, t: float) -> np.ndarray:
    """
    Piecewise-linear lookup into a (N, 3) stop array.

    ``t`` is scaled by the number of stops, so t = 1 already lands past the
    last stop. Values are clamped to the first and last stop.
    """
    n = stops.shape[0]
    t = t * n
    if t <= 0.0:
        return stops[0].copy()
    if t >= n - 1:
        return stops[n - 1].copy()

    index = int(np.floor(t))
    amount = t - index
    return stops[index] * (1.0 - amount) + stops[index + 1] * amount


@njit(cache=True)
def _channel_to_byte(c: float) -> int:
    """Scale a [0, 1] channel to 0-255, clamping out-of-range values."""
    v = c * 256.0
    if v < 0.0:
        v = 0.0
    elif v > 255.0:
        v = 255.0
    return int(np.floor(v))


def _as_stops(stops) -> np.ndarray:
    arr = np.asarray(stops, dtype=np.float64)
    if arr.size == 0:
        raise ValueError("Cannot interpolate an empty gradient")
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Gradient stops must have shape (N, 3), got {arr.shape}")
    return arr


def interpolate_rgb(stops: Sequence[RGB], t: float) -> RGB:
    """
    Interpolate a color along a gradient.

    Args:
        stops: Sequence of RGB stops
        t: Position, scaled by the stop count before lookup

    Returns:
        Interpolated RGB

    Raises:
        ValueError: If there are no stops
    """
    arr = _as_stops(stops)
    r, g, b = _interpolate(arr, float(t))
    return (float(r), float(g), float(b))


class Gradient:
    """
    A color gradient, callable as ``gradient(lightness) -> RGB``.
    """

    def __init__(self, stops: Sequence[RGB]):
        """
        Args:
            stops: RGB stops from dark to light (at least one)
        """
        self.stops = _as_stops(stops)

    def __call__(self, t: float) -> RGB:
        r, g, b = _interpolate(self.stops, float(t))
        return (float(r), float(g), float(b))

    def __len__(self) -> int:
        return len(self.stops)

    def __repr__(self) -> str:
        return f"Gradient({self.stops.tolist()})"


class ConstantGradient:
    """Gradient that ignores lightness and always returns one color."""

    def __init__(self, color: RGB):
        self.color = tuple(float(c) for c in color)

    def __call__(self, t: float) -> RGB:
        return self.color

    def __repr__(self) -> str:
        return f"ConstantGradient({self.color})"


def perturb_color(color: RGB, strength: float, rng: np.random.Generator) -> RGB:
    """
    Add independent uniform noise in [-strength, strength] to each channel.

    The result is not clamped.
    """
    noise = rng.uniform(-1.0, 1.0, 3) * strength
    return (
        color[0] + float(noise[0]),
        color[1] + float(noise[1]),
        color[2] + float(noise[2]),
    )


def scale_color(color: RGB, factor: float) -> RGB:
    """Multiply every channel by ``factor``."""
    return (color[0] * factor, color[1] * factor, color[2] * factor)


def clamp_rgb(color: RGB) -> RGB:
    """Clamp every channel to [0, 1]."""
    return tuple(min(1.0, max(0.0, float(c))) for c in color)


def to_rgb8(color: RGB) -> Tuple[int, int, int]:
    """
    Convert a float color to 8-bit channels.

    Out-of-range values are clamped, so jittered colors past 0 or 1 are
    safe to pass here.
    """
    return (
        _channel_to_byte(float(color[0])),
        _channel_to_byte(float(color[1])),
        _channel_to_byte(float(color[2])),
    )


def to_rgb8_array(colors: np.ndarray) -> np.ndarray:
    """
    Vectorized ``to_rgb8``.

    Args:
        colors: Array of shape (N, 3) with float colors

    Returns:
        uint8 array of shape (N, 3)
    """
    scaled = np.floor(np.clip(np.asarray(colors, dtype=np.float64) * 256.0, 0.0, 255.0))
    return scaled.astype(np.uint8)


def to_hex(color: RGB) -> str:
    """``#rrggbb`` form of a float color, clamped."""
    r, g, b = to_rgb8(color)
    return f"#{r:02x}{g:02x}{b:02x}"
