"""
Sun-Ray Shadow Test

Casts a ray from a voxel toward the sun and reports whether any voxel of
the scene lies on it. The ray is sampled, not traversed: the parametric
position advances by a fixed step and is rounded to the nearest voxel at
every sample. Thin gaps can let a ray slip through and coarse steps can
test the same voxel twice; the scene shading is tuned to this behaviour.

The sun direction is fixed:

    x advances 1.0, y advances 0.95, z stays put

per unit of parametric distance.
"""

from typing import AbstractSet, Tuple

import numpy as np
from numba import njit

from .lattice import VoxelCoord, voxel


SUN_DIRECTION: Tuple[float, float, float] = (1.0, 0.95, 0.0)

DEFAULT_MAX_DISTANCE = 20.0
DEFAULT_STEP_SIZE = 0.25


@njit(cache=True)
def _round_half_up(x: float) -> int:
    """Round to nearest, .5 rounds toward +inf."""
    return int(np.floor(x + 0.5))


@njit(cache=True)
def _ray_samples(
    cx: float, cy: float, cz: float,
    dx: float, dy: float, dz: float,
    max_distance: float,
    step_size: float
) -> np.ndarray:
    """
    Rounded voxel positions along a ray, in order.

    Returns:
        Array of shape (N, 3) with int64 voxel coordinates
    """
    capacity = int(max_distance / step_size) + 2
    out = np.empty((capacity, 3), dtype=np.int64)

    n = 0
    t = 0.0
    while t < max_distance and n < capacity:
        out[n, 0] = _round_half_up(cx + t * dx)
        out[n, 1] = _round_half_up(cy + t * dy)
        out[n, 2] = _round_half_up(cz + t * dz)
        n += 1
        t += step_size

    return out[:n]


def _check_ray_args(max_distance: float, step_size: float):
    if step_size <= 0:
        raise ValueError(f"step_size must be positive, got {step_size}")
    if max_distance < 0:
        raise ValueError(f"max_distance must be non-negative, got {max_distance}")


def ray_samples(
    origin: VoxelCoord,
    max_distance: float = DEFAULT_MAX_DISTANCE,
    step_size: float = DEFAULT_STEP_SIZE
) -> np.ndarray:
    """
    Sample the sun ray starting at a voxel.

    Args:
        origin: Voxel the ray starts from (tested too, at t = 0)
        max_distance: Ray length in parametric units (exclusive)
        step_size: Parametric step between samples

    Returns:
        Array of shape (N, 3) of voxel coordinates, consecutive duplicates
        included
    """
    _check_ray_args(max_distance, step_size)
    dx, dy, dz = SUN_DIRECTION
    return _ray_samples(
        float(origin.cx), float(origin.cy), float(origin.cz),
        dx, dy, dz,
        float(max_distance), float(step_size)
    )


def cast_sun_ray(
    voxels: AbstractSet[VoxelCoord],
    origin: VoxelCoord,
    max_distance: float = DEFAULT_MAX_DISTANCE,
    step_size: float = DEFAULT_STEP_SIZE
) -> bool:
    """
    Check whether the sun ray from ``origin`` hits any voxel of the set.

    Args:
        voxels: Scene voxels
        origin: Start of the ray
        max_distance: Ray length in parametric units
        step_size: Parametric step between samples

    Returns:
        True if the ray is blocked (the origin is in shadow), False if it
        leaves ``max_distance`` without hitting anything
    """
    _check_ray_args(max_distance, step_size)
    if not voxels:
        return False

    for x, y, z in ray_samples(origin, max_distance, step_size).tolist():
        if voxel(x, y, z) in voxels:
            return True
    return False
