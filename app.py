#!/usr/bin/env python3
"""
isovox Web Interface

A simple Gradio-based web UI for rendering the built-in voxel scenes.

Run with: python app.py
Then open http://localhost:7860 in your browser
"""

import sys
from pathlib import Path
import tempfile
from typing import Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import gradio as gr
from isovox import RenderConfig, VoxelScene, PALETTES
from isovox.scenes import SCENES


def render_scene(
    scene_name: str,
    palette_name: str,
    seed: Optional[float],
    jitter: float,
    effects: bool,
    scale: float,
    export_svg: bool
):
    """
    Render a scene and return the image, stats text and download paths.
    """
    if not scene_name:
        return None, "Pick a scene first.", None, None

    # An empty seed field draws a fresh picture
    seed = None if seed is None else int(seed)
    seed_text = "random" if seed is None else str(seed)

    config = RenderConfig(
        scale=scale,
        jitter=jitter,
        effects=effects,
        fit_to_canvas=True,
    )
    scene = VoxelScene(config, seed=seed)
    scene.load_scene(scene_name)
    scene.set_palette(palette_name)

    surface = scene.render_image()
    stats = scene.stats

    stats_text = f"""## Render Complete!

| Metric | Value |
|--------|-------|
| Voxels | {stats.voxel_count:,} |
| Triangles | {stats.triangle_count:,} |
| Overlay Shapes | {stats.effect_count:,} |
| Paint Commands | {stats.command_count:,} |
| Time | {stats.elapsed:.2f}s |

**Settings:** {scene_name}, {palette_name}, seed={seed_text}, jitter={jitter}
"""

    export_dir = tempfile.mkdtemp(prefix="isovox_")

    png_path = str(Path(export_dir) / f"{scene_name}.png")
    surface.save(png_path)

    svg_path = None
    if export_svg:
        svg_path = str(Path(export_dir) / f"{scene_name}.svg")
        scene.export_svg(svg_path)

    return surface.image, stats_text, png_path, svg_path


# Build the Gradio interface
with gr.Blocks(title="isovox") as app:

    gr.Markdown("""
    # isovox
    ### Isometric Voxel Scenes

    Pick a scene and a palette, then render. The same seed always gives the same picture.
    """)

    with gr.Row():
        # Left column - Settings
        with gr.Column(scale=1):
            gr.Markdown("### Scene")

            scene_dropdown = gr.Dropdown(
                choices=sorted(SCENES),
                value="canyon_city",
                label="Scene"
            )

            palette_dropdown = gr.Dropdown(
                choices=sorted(PALETTES),
                value="desert_stone",
                label="Palette"
            )

            seed = gr.Number(value=7, precision=0, label="Seed")

            gr.Markdown("### Settings")

            jitter = gr.Slider(
                minimum=0.0,
                maximum=0.1,
                value=0.015,
                step=0.005,
                label="Color Jitter"
            )

            scale = gr.Slider(
                minimum=5,
                maximum=40,
                value=12,
                step=1,
                label="Scale (pixels per lattice step)"
            )

            effects = gr.Checkbox(value=True, label="Grass overlays")
            export_svg = gr.Checkbox(value=False, label="Also export SVG")

            render_btn = gr.Button("Render", variant="primary")

        # Middle column - Preview
        with gr.Column(scale=2):
            gr.Markdown("### Preview")

            image_output = gr.Image(label="Render", type="pil")

            stats_output = gr.Markdown(
                value="Pick a scene and click 'Render' to see results."
            )

        # Right column - Downloads
        with gr.Column(scale=1):
            gr.Markdown("### Downloads")

            png_output = gr.File(label="PNG")
            svg_output = gr.File(label="SVG")

            gr.Markdown("""
            ---
            **Tips:**
            - **meadow** draws grass tufts on top faces
            - **Jitter 0** gives flat, banded faces
            - Smaller scale fits bigger scenes
            """)

    # Wire up events
    render_btn.click(
        fn=render_scene,
        inputs=[
            scene_dropdown,
            palette_dropdown,
            seed,
            jitter,
            effects,
            scale,
            export_svg
        ],
        outputs=[image_output, stats_output, png_output, svg_output]
    )


if __name__ == "__main__":
    print("\n" + "="*60)
    print("isovox Web Interface")
    print("="*60)
    print("\nStarting server...")
    print("Open http://localhost:7860 in your browser\n")

    app.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False
    )
