"""
Command-Line Interface for isovox

Usage:
    isovox --scene canyon_city -o canyon.png
    isovox --scene island --palette blossoms --seed 3 -o island --format png svg
    isovox --scene island --palette meadow --config render.json -o meadow.png

"""

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import RenderConfig
from .palette import PALETTES
from .scene import VoxelScene
from .scenes import SCENES


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="isovox",
        description="isovox - Render procedural voxel scenes as isometric triangle art",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  isovox --scene canyon_city -o canyon.png
      Render the canyon city with the desert palette

  isovox --scene island --palette blossoms --seed 3 -o island -f png svg
      Reproducible render, exported as PNG and SVG

  isovox --scene island --palette meadow --no-effects -o flat.png
      Grass palette without the tuft overlay

  isovox --list
      Show available scenes and palettes
        """
    )

    # Scene
    parser.add_argument(
        "-s", "--scene",
        choices=sorted(SCENES),
        default="canyon_city",
        help="Scene to build (default: canyon_city)"
    )

    parser.add_argument(
        "-p", "--palette",
        choices=sorted(PALETTES),
        default="desert_stone",
        help="Surface palette (default: desert_stone)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for scene, jitter and overlays"
    )

    # Render settings
    parser.add_argument(
        "--config",
        help="JSON file with render config overrides"
    )

    parser.add_argument(
        "--scale",
        type=float,
        help="Pixels per lattice step (default: 25)"
    )

    parser.add_argument(
        "--width",
        type=int,
        help="Canvas width in pixels (default: 800)"
    )

    parser.add_argument(
        "--height",
        type=int,
        help="Canvas height in pixels (default: 800)"
    )

    parser.add_argument(
        "--jitter",
        type=float,
        help="Color jitter strength, 0 disables (default: 0.015)"
    )

    parser.add_argument(
        "--no-effects",
        action="store_true",
        help="Disable decorative overlays"
    )

    parser.add_argument(
        "--fit",
        action="store_true",
        help="Center the scene on the canvas"
    )

    # Output settings
    parser.add_argument(
        "-o", "--output",
        default="scene",
        help="Output file path (extension is replaced per format)"
    )

    parser.add_argument(
        "-f", "--format",
        nargs="+",
        choices=["png", "svg"],
        default=["png"],
        help="Output format(s) (default: png)"
    )

    # Misc
    parser.add_argument(
        "--list",
        action="store_true",
        help="List scenes and palettes, then exit"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with statistics"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print render statistics"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_config(args) -> RenderConfig:
    """Merge the config file with command-line overrides."""
    config = RenderConfig.from_json(args.config) if args.config else RenderConfig()

    overrides = {}
    if args.scale is not None:
        overrides["scale"] = args.scale
    if args.width is not None:
        overrides["width"] = args.width
        overrides["origin_x"] = args.width / 2.0
    if args.height is not None:
        overrides["height"] = args.height
        overrides["origin_y"] = args.height / 2.0
    if args.jitter is not None:
        overrides["jitter"] = args.jitter
    if args.no_effects:
        overrides["effects"] = False
    if args.fit:
        overrides["fit_to_canvas"] = True

    return dataclasses.replace(config, **overrides)


def list_presets() -> int:
    print("Scenes:")
    for name in sorted(SCENES):
        print(f"  {name}")
    print("Palettes:")
    for name in sorted(PALETTES):
        print(f"  {name}")
    return 0


def process_render(args) -> int:
    """Build, render and export one scene."""
    output_base = Path(args.output)
    start_time = time.time()

    try:
        config = build_config(args)
        scene = VoxelScene(config, seed=args.seed)

        if args.verbose:
            print(f"Building scene: {args.scene}")

        scene.load_scene(args.scene)
        scene.set_palette(args.palette)

        if args.verbose:
            print(f"Rendering {scene.voxel_count} voxels with palette: {args.palette}")

        written = scene.export_all(output_base, args.format)

        if args.stats or args.verbose:
            stats = scene.stats
            print("\nRender Statistics:")
            print(f"  Voxels: {stats.voxel_count}")
            print(f"  Triangles: {stats.triangle_count}")
            print(f"  Overlay shapes: {stats.effect_count}")
            print(f"  Paint commands: {stats.command_count}")

        if args.verbose:
            for path in written:
                print(f"Exported: {path}")
            elapsed = time.time() - start_time
            print(f"\nCompleted in {elapsed:.2f}s")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.list:
        return list_presets()
    return process_render(args)


if __name__ == "__main__":
    sys.exit(main())
