"""
Built-in Scene Builders

Each builder takes a numpy Generator and returns a frozenset of canonical
VoxelCoord. Builders only decide which voxels exist; colors and lighting
are the renderer's business.

Coordinate convention: y is up, +x recedes to the back-right, +z comes
toward the viewer on the left.
"""

from typing import Callable, Dict, Optional, Set

import numpy as np

from .lattice import VoxelCoord, voxel


SceneBuilder = Callable[[np.random.Generator], frozenset]


def _rand_between(rng: np.random.Generator, lo: int, hi: int) -> int:
    """Uniform integer in [lo, hi], both ends included."""
    return int(rng.integers(lo, hi + 1))


def canyon_city(rng: np.random.Generator) -> frozenset:
    """
    A city of hollow blocks on a plain, split by a deep canyon.

    - 61x61 ground plane at y = 0
    - 100 buildings of half-size 1 (mostly) or 3, with the ground floor
      opened along both center lines
    - canyon walls at x = -4 and x = 4 reaching down to y = -20
    - everything with |x| <= 3 carved away
    """
    cubes: Set[VoxelCoord] = set()

    for x in range(-30, 31):
        for z in range(-30, 31):
            cubes.add(voxel(x, 0, z))

    for _ in range(100):
        cx = _rand_between(rng, -30, 30)
        cz = _rand_between(rng, -30, 30)
        size = int(rng.choice([1, 1, 1, 1, 1, 3]))
        for x in range(cx - size, cx + size + 1):
            for z in range(cz - size, cz + size + 1):
                for y in range(1, 2 * size + 2):
                    # Arches through the lower half
                    if (x == cx or z == cz) and y < size + 1:
                        continue
                    cubes.add(voxel(x, y, z))

    for x in (-4, 4):
        for z in range(-40, 41):
            for y in range(-20, 1):
                cubes.add(voxel(x, y, z))

    for x in range(-3, 4):
        for z in range(-40, 41):
            for y in range(-20, 21):
                cubes.discard(voxel(x, y, z))

    return frozenset(cubes)


def island(rng: np.random.Generator) -> frozenset:
    """
    A square island with random pillars, on a wide sea floor.
    """
    cubes: Set[VoxelCoord] = set()

    for x in range(-40, 41):
        for z in range(-40, 41):
            cubes.add(voxel(x, -4, z))

    for x in range(-6, 7):
        for z in range(-6, 7):
            for y in range(-6, 1):
                cubes.add(voxel(x, y, z))

    for _ in range(20):
        x = _rand_between(rng, -6, 6)
        z = _rand_between(rng, -6, 6)
        r = _rand_between(rng, 1, 6)
        for y in range(1, r + 1):
            cubes.add(voxel(x, y, z))

    return frozenset(cubes)


def single_cube(rng: Optional[np.random.Generator] = None) -> frozenset:
    """One voxel at the origin."""
    return frozenset([voxel(0, 0, 0)])


SCENES: Dict[str, SceneBuilder] = {
    "canyon_city": canyon_city,
    "island": island,
    "single_cube": single_cube,
}


def build_scene(name: str, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None) -> frozenset:
    """
    Build a named scene.

    Args:
        name: Key of SCENES
        rng: Random source; takes precedence over ``seed``
        seed: Seed for a fresh numpy Generator

    Raises:
        KeyError: If the name is unknown
    """
    if name not in SCENES:
        raise KeyError(f"Unknown scene: {name!r} (available: {', '.join(sorted(SCENES))})")
    if rng is None:
        rng = np.random.default_rng(seed)
    return SCENES[name](rng)
