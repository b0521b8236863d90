#!/usr/bin/env python3
"""
isovox Demo Script

This script demonstrates the full rendering pipeline by:
1. Building every built-in scene with a fixed seed
2. Rendering each scene with every palette
3. Exporting PNG files
4. Printing timing and mesh statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from isovox import RenderConfig, VoxelScene, PALETTES
from isovox.lattice import cache_sizes
from isovox.scenes import SCENES


SEED = 7


def run_demo():
    """Run the demonstration."""
    print("=" * 60)
    print("isovox - Demo")
    print("=" * 60)
    print()

    # Create output directory
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    config = RenderConfig(scale=10.0, fit_to_canvas=True)

    for scene_name in sorted(SCENES):
        print(f"\n--- Scene: {scene_name} ---")

        scene = VoxelScene(config, seed=SEED)
        start = time.time()
        scene.load_scene(scene_name)
        print(f"  Built {scene.voxel_count} voxels in {(time.time() - start)*1000:.1f}ms")

        for palette_name in sorted(PALETTES):
            scene.set_palette(palette_name)

            start = time.time()
            output_path = output_dir / f"{scene_name}_{palette_name}.png"
            scene.export_png(output_path)
            elapsed = time.time() - start

            stats = scene.stats
            print(f"  {palette_name}:")
            print(f"    Render: {elapsed*1000:.1f}ms")
            print(f"    Triangles: {stats.triangle_count}")
            print(f"    Overlay shapes: {stats.effect_count}")
            print(f"    Saved: {output_path}")

    corners, voxels = cache_sizes()
    print()
    print(f"Identity caches: {corners} corners, {voxels} voxels")
    print("=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    run_demo()
