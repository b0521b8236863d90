"""
Render Configuration

All tunable constants of a render pass in one place. The defaults
reproduce the reference look: 25 px lattice steps on an 800x800 canvas,
a 20-unit sun ray sampled every 0.25 units, a 0.2 lightness bonus for
sunlit faces and a light ±0.015 color jitter.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union
import json

from .projection import TriangleProjection


@dataclass
class RenderConfig:
    """
    Configuration of a render pass.

    Attributes:
        scale: Projection scale, pixels per lattice step
        origin_x, origin_y: Screen position of lattice corner (0, 0)
        width, height: Canvas size for the drawing surfaces
        max_distance: Sun-ray length in parametric units
        step_size: Sun-ray sampling step
        depth_skew: Weight of the x/z axes in the voxel depth key
        shadow_bonus: Lightness added to faces the sun reaches
        jitter: Per-channel color noise strength (0 disables jitter)
        effects: Draw decorative overlays on styled triangles
        effect_count: Shapes per overlaid triangle
        effect_size: Shape length in pixels
        effect_depth_bias: How much nearer than its triangle an overlay sorts;
            must stay below depth_skew so overlays never cover nearer cubes
        effect_shade: Color multiplier for overlay shapes
        background: Canvas fill color
        fit_to_canvas: Re-center the origin on the scene's projected bounds
    """

    scale: float = 25.0
    origin_x: float = 400.0
    origin_y: float = 400.0
    width: int = 800
    height: int = 800
    max_distance: float = 20.0
    step_size: float = 0.25
    depth_skew: float = 0.01
    shadow_bonus: float = 0.2
    jitter: float = 0.015
    effects: bool = True
    effect_count: int = 3
    effect_size: float = 4.0
    effect_depth_bias: float = 0.001
    effect_shade: float = 0.8
    background: Tuple[float, float, float] = (0.07, 0.07, 0.09)
    fit_to_canvas: bool = False

    def __post_init__(self):
        """Validate values that would break a render."""
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if self.step_size <= 0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")
        if self.max_distance < 0:
            raise ValueError(f"max_distance must be non-negative, got {self.max_distance}")
        if self.jitter < 0:
            raise ValueError(f"jitter must be non-negative, got {self.jitter}")
        if self.depth_skew <= 0:
            raise ValueError(f"depth_skew must be positive, got {self.depth_skew}")
        if not 0 <= self.effect_depth_bias < self.depth_skew:
            raise ValueError(
                f"effect_depth_bias must be in [0, depth_skew={self.depth_skew}), "
                f"got {self.effect_depth_bias}"
            )
        if self.effect_count < 0:
            raise ValueError(f"effect_count must be non-negative, got {self.effect_count}")
        self.background = tuple(float(c) for c in self.background)

    @property
    def projection(self) -> TriangleProjection:
        """Projection built from scale and origin."""
        return TriangleProjection(self.scale, self.origin_x, self.origin_y)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["background"] = list(self.background)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RenderConfig":
        """
        Build a config from a mapping of field overrides.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown render config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "RenderConfig":
        """Load overrides from a JSON object file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config file must hold a JSON object: {path}")
        return cls.from_dict(data)
