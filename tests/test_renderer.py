"""
Unit tests for the isovox rendering core.
"""

import sys
import threading
from pathlib import Path
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from isovox.lattice import (
    IdentityCache, LatticeCorner, Orientation, VoxelCoord, corner, voxel, reset_caches
)
from isovox.projection import TriangleProjection, DEFAULT_PROJECTION
from isovox.mesh import Mesh, MeshCell, Style, triangle_corners
from isovox.stamper import Face, face_keys, stamp_face, stamp_cube
from isovox.sunray import cast_sun_ray, ray_samples
from isovox.color import (
    ConstantGradient, Gradient, interpolate_rgb, perturb_color, to_hex, to_rgb8, to_rgb8_array
)
from isovox.palette import Palette, get_palette
from isovox.config import RenderConfig
from isovox.renderer import SceneRenderer
from isovox.surfaces import CommandRecorder, PaintKind


RED = (1.0, 0.0, 0.0)
GREEN = (0.0, 1.0, 0.0)
BLUE = (0.0, 0.0, 1.0)

CONSTANT_PALETTE = Palette(
    name="constant",
    top=ConstantGradient(RED),
    right=ConstantGradient(GREEN),
    left=ConstantGradient(BLUE),
)

PLAIN = RenderConfig(jitter=0.0, effects=False)


class TestIdentityCache(unittest.TestCase):
    """Tests for coordinate canonicalization."""

    def test_equal_corners_are_identical(self):
        """Test that equal corner coordinates share one handle."""
        assert corner(1, 2) is corner(1, 2)
        assert corner(1, 2) is not corner(2, 1)
        assert corner(-3, 0) is corner(-3, 0)

    def test_equal_voxels_are_identical(self):
        """Test that equal voxel coordinates share one handle."""
        assert voxel(1, 2, 3) is voxel(1, 2, 3)
        assert voxel(1, 2, 3) is not voxel(1, 2, 4)

    def test_structural_equality(self):
        """Test that directly constructed coordinates still work as keys."""
        assert VoxelCoord(1, 2, 3) == voxel(1, 2, 3)
        assert hash(VoxelCoord(1, 2, 3)) == hash(voxel(1, 2, 3))
        assert VoxelCoord(1, 2, 3) in {voxel(1, 2, 3)}
        assert LatticeCorner(4, 5) in {corner(4, 5): "x"}

    def test_shift_is_canonical(self):
        """Test that shifted coordinates come from the cache."""
        assert voxel(0, 0, 0).shift(1, 0, 0) is voxel(1, 0, 0)
        assert corner(0, 0).shift(1, -1) is corner(1, -1)

    def test_reset_keeps_values(self):
        """Test that resetting the caches only changes identity."""
        before = corner(50, 50)
        reset_caches()
        after = corner(50, 50)
        assert before == after
        assert before is not after
        assert after is corner(50, 50)

    def test_concurrent_inserts(self):
        """Test that racing inserts of one key agree on a single handle."""
        cache = IdentityCache(LatticeCorner)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(cache.get(7, 9))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(r is results[0] for r in results)
        assert len(cache) == 1
        assert (7, 9) in cache


class TestVoxelCoord(unittest.TestCase):
    """Tests for voxel-derived coordinates."""

    def test_to_corner(self):
        """Test the voxel center line projection."""
        assert voxel(0, 0, 0).to_corner() is corner(0, 0)
        assert voxel(1, 2, 3).to_corner() is corner(4, -1)

    def test_depth_key(self):
        """Test the approximate depth formula."""
        assert voxel(0, 0, 0).depth_key() == 0
        assert np.isclose(voxel(0, 0, 1).depth_key(), -0.01)
        assert np.isclose(voxel(1, 0, 0).depth_key(), 0.01)
        assert np.isclose(voxel(0, 2, 0).depth_key(), -2.0)
        assert np.isclose(voxel(0, 0, 1).depth_key(skew=1.01), -1.01)

    def test_nearer_voxel_has_smaller_depth(self):
        """Test that the voxel in front sorts nearer."""
        assert voxel(0, 0, 1).depth_key() < voxel(0, 0, 0).depth_key()


class TestProjection(unittest.TestCase):
    """Tests for lattice projection."""

    def test_origin(self):
        """Test that corner (0, 0) lands on the origin."""
        x, y = DEFAULT_PROJECTION.project(0, 0)
        assert x == 400
        assert y == 400

    def test_axes(self):
        """Test the vertical and diagonal lattice axes."""
        proj = TriangleProjection(scale=25, origin_x=400, origin_y=400)

        x, y = proj.project(0, 1)
        assert np.isclose(x, 400)
        assert np.isclose(y, 375)

        x, y = proj.project(1, 0)
        assert np.isclose(x, 400 + 25 * np.cos(np.pi / 6))
        assert np.isclose(y, 387.5)

    def test_deterministic(self):
        """Test that projection is referentially transparent."""
        c = corner(3, -7)
        assert c.project() == c.project()
        assert c.project() == DEFAULT_PROJECTION.project(3, -7)

    def test_batch_matches_scalar(self):
        """Test batch projection against the scalar form."""
        proj = TriangleProjection(scale=10, origin_x=50, origin_y=80)
        corners = np.array([[0, 0], [1, 0], [0, 1], [-4, 7]])
        batch = proj.project_batch(corners)
        for (tx, ty), (x, y) in zip(corners, batch):
            sx, sy = proj.project(int(tx), int(ty))
            assert np.isclose(sx, x)
            assert np.isclose(sy, y)

    def test_invalid_scale(self):
        """Test that a non-positive scale is rejected."""
        with self.assertRaises(ValueError):
            TriangleProjection(scale=0)

    def test_fit_to_canvas(self):
        """Test centering a single cube on a canvas."""
        proj = DEFAULT_PROJECTION.fit_to_canvas(200, 100, [voxel(0, 0, 0)])
        assert np.isclose(proj.origin_x, 100)
        assert np.isclose(proj.origin_y, 50)
        assert proj.scale == DEFAULT_PROJECTION.scale

        empty = DEFAULT_PROJECTION.fit_to_canvas(200, 100, [])
        assert empty.origin == (100.0, 50.0)


class TestMesh(unittest.TestCase):
    """Tests for the sparse triangle mesh."""

    def setUp(self):
        self.mesh = Mesh()
        self.cell = MeshCell(1.0, RED)

    def test_absent(self):
        """Test that unwritten triangles read as None."""
        assert self.mesh.get(corner(0, 0), Orientation.LEFT) is None
        assert self.mesh.is_empty

    def test_set_get(self):
        """Test unconditional writes."""
        self.mesh.set(corner(0, 0), Orientation.LEFT, self.cell)
        assert self.mesh.get(corner(0, 0), Orientation.LEFT) == self.cell
        assert self.mesh.get(corner(0, 0), Orientation.RIGHT) is None
        assert (corner(0, 0), Orientation.LEFT) in self.mesh
        assert len(self.mesh) == 1

    def test_update_receives_none(self):
        """Test that update passes None for an empty triangle."""
        seen = []

        def change(old):
            seen.append(old)
            return self.cell

        self.mesh.update(corner(1, 1), Orientation.RIGHT, change)
        self.mesh.update(corner(1, 1), Orientation.RIGHT, change)
        assert seen == [None, self.cell]

    def test_update_must_return_cell(self):
        """Test that update refuses to store None."""
        with self.assertRaises(ValueError):
            self.mesh.update(corner(0, 0), Orientation.LEFT, lambda old: None)

    def test_iteration_is_restartable(self):
        """Test that iterating twice yields the same triangles."""
        self.mesh.set(corner(0, 0), Orientation.LEFT, self.cell)
        self.mesh.set(corner(0, 0), Orientation.RIGHT, self.cell)
        self.mesh.set(corner(2, -1), Orientation.LEFT, self.cell)

        first = set((c, o) for c, o, _ in self.mesh.iter_triangles())
        second = set((c, o) for c, o, _ in self.mesh.iter_triangles())
        assert first == second
        assert len(first) == 3

    def test_map(self):
        """Test copying the mesh with transformed cells."""
        self.mesh.set(corner(0, 0), Orientation.LEFT, self.cell)
        copy = self.mesh.map(lambda cell: MeshCell(cell.depth, BLUE, cell.style))
        assert copy.get(corner(0, 0), Orientation.LEFT).color == BLUE
        assert self.mesh.get(corner(0, 0), Orientation.LEFT).color == RED

    def test_triangle_corners(self):
        """Test triangle vertices per orientation."""
        c = corner(0, 0)
        assert triangle_corners(c, Orientation.RIGHT) == (c, corner(0, 1), corner(1, 0))
        assert triangle_corners(c, Orientation.LEFT) == (c, corner(-1, 1), corner(0, 1))


class TestStamper(unittest.TestCase):
    """Tests for occlusion-aware face stamping."""

    def test_face_keys(self):
        """Test the face offset table for a voxel at the origin."""
        p = voxel(0, 0, 0)
        assert face_keys(p, Face.UP) == (
            (corner(0, 0), Orientation.RIGHT), (corner(0, 0), Orientation.LEFT)
        )
        assert face_keys(p, Face.RIGHT) == (
            (corner(1, -1), Orientation.LEFT), (corner(0, -1), Orientation.RIGHT)
        )
        assert face_keys(p, Face.LEFT) == (
            (corner(0, -1), Orientation.LEFT), (corner(-1, 0), Orientation.RIGHT)
        )

    def test_face_keys_follow_voxel_corner(self):
        """Test that keys are relative to the voxel's own corner."""
        p = voxel(1, 2, 3)
        c = p.to_corner()
        assert face_keys(p, Face.UP)[0] == (c, Orientation.RIGHT)
        assert face_keys(p, Face.LEFT)[1] == (c.shift(-1, 0), Orientation.RIGHT)

    def test_single_cube(self):
        """Test that one cube covers six triangles."""
        mesh = Mesh()
        written = stamp_cube(mesh, voxel(0, 0, 0), {Face.UP: RED, Face.RIGHT: GREEN, Face.LEFT: BLUE})
        assert written == 6
        assert len(mesh) == 6
        assert mesh.get(corner(0, 0), Orientation.RIGHT).color == RED
        assert mesh.get(corner(1, -1), Orientation.LEFT).color == GREEN
        assert mesh.get(corner(-1, 0), Orientation.RIGHT).color == BLUE

    def test_nearest_wins_in_either_order(self):
        """Test occlusion monotonicity for a shared triangle."""
        back = voxel(0, 0, 0)
        front = voxel(0, 0, 1)
        colors_back = {Face.UP: RED, Face.RIGHT: GREEN, Face.LEFT: BLUE}
        colors_front = {Face.UP: (1.0, 1.0, 0.0), Face.RIGHT: (0.0, 1.0, 1.0), Face.LEFT: (1.0, 0.0, 1.0)}

        for order in ((back, front), (front, back)):
            mesh = Mesh()
            for p in order:
                stamp_cube(mesh, p, colors_front if p is front else colors_back)

            # back's right face and front's up face share this triangle
            cell = mesh.get(corner(1, -1), Orientation.LEFT)
            assert cell.color == (1.0, 1.0, 0.0)
            assert np.isclose(cell.depth, front.depth_key())

            # back's right face and front's left face share this one
            cell = mesh.get(corner(0, -1), Orientation.RIGHT)
            assert cell.color == (1.0, 0.0, 1.0)

    def test_ties_keep_existing(self):
        """Test that an equal depth does not overwrite."""
        mesh = Mesh()
        p = voxel(2, 2, 2)
        calls = []

        def second_color():
            calls.append(1)
            return BLUE

        assert stamp_face(mesh, p, Face.UP, lambda: RED) == 2
        assert stamp_face(mesh, p, Face.UP, second_color) == 0
        assert calls == []
        c = p.to_corner()
        assert mesh.get(c, Orientation.RIGHT).color == RED

    def test_style_is_stored(self):
        """Test that the style tag lands in the cell."""
        mesh = Mesh()
        stamp_face(mesh, voxel(0, 0, 0), Face.UP, lambda: RED, Style.GRASS)
        assert mesh.get(corner(0, 0), Orientation.LEFT).style is Style.GRASS


class TestSunRay(unittest.TestCase):
    """Tests for the sampled shadow ray."""

    def test_empty_scene(self):
        """Test that nothing can shadow an empty scene."""
        for origin in (voxel(0, 0, 0), voxel(-5, 3, 9), voxel(100, -100, 0)):
            assert cast_sun_ray(set(), origin, max_distance=20, step_size=0.25) is False

    def test_samples(self):
        """Test the sample count and the first sample."""
        samples = ray_samples(voxel(3, 4, 5))
        assert samples.shape == (80, 3)
        assert list(samples[0]) == [3, 4, 5]
        # z never moves
        assert np.all(samples[:, 2] == 5)

    def test_hit(self):
        """Test a voxel sitting on the ray."""
        assert cast_sun_ray({voxel(2, 2, 0)}, voxel(0, 0, 0))

    def test_origin_is_tested(self):
        """Test that the starting voxel itself counts."""
        assert cast_sun_ray({voxel(0, 0, 0)}, voxel(0, 0, 0))

    def test_miss(self):
        """Test voxels off the ray."""
        scene = {voxel(0, 5, 0), voxel(3, 3, 1)}
        assert not cast_sun_ray(scene, voxel(0, 0, 0))

    def test_max_distance(self):
        """Test that hits past max_distance do not count."""
        scene = {voxel(25, 24, 0)}
        assert not cast_sun_ray(scene, voxel(0, 0, 0), max_distance=20)
        assert cast_sun_ray(scene, voxel(0, 0, 0), max_distance=30)

    def test_back_face_always_shadowed(self):
        """Test that a ray starting behind a voxel hits that voxel."""
        p = voxel(4, 1, -2)
        assert cast_sun_ray({p}, p.shift(-1, 0, 0))

    def test_invalid_step(self):
        """Test that a non-positive step is rejected."""
        with self.assertRaises(ValueError):
            cast_sun_ray({voxel(0, 0, 0)}, voxel(0, 0, 0), step_size=0)


class TestColor(unittest.TestCase):
    """Tests for gradients and color conversion."""

    def test_empty_gradient(self):
        """Test that an empty gradient fails fast."""
        with self.assertRaises(ValueError):
            interpolate_rgb([], 0.5)
        with self.assertRaises(ValueError):
            Gradient([])

    def test_interpolation(self):
        """Test clamping and linear blending."""
        stops = [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0)]
        assert interpolate_rgb(stops, -1.0) == (0.0, 0.0, 0.0)
        assert interpolate_rgb(stops, 5.0) == (1.0, 1.0, 1.0)
        assert np.allclose(interpolate_rgb(stops, 0.25), (0.5, 0.5, 0.5))
        # t is scaled by the stop count, so 0.5 already reaches the end
        assert interpolate_rgb(stops, 0.5) == (1.0, 1.0, 1.0)

    def test_gradient_callable(self):
        """Test the Gradient wrapper."""
        gradient = Gradient([RED, BLUE, GREEN])
        assert len(gradient) == 3
        assert gradient(0.0) == RED
        assert gradient(1.0) == GREEN

    def test_to_rgb8_clamps(self):
        """Test the paint-boundary conversion."""
        assert to_rgb8((1.2, -0.1, 0.5)) == (255, 0, 128)
        assert to_rgb8((1.0, 0.0, 0.0)) == (255, 0, 0)
        assert to_hex((1.0, 0.0, 0.0)) == "#ff0000"

        arr = to_rgb8_array(np.array([[1.2, -0.1, 0.5]]))
        assert arr.dtype == np.uint8
        assert list(arr[0]) == [255, 0, 128]

    def test_perturb_bounded(self):
        """Test that jitter stays within its strength."""
        rng = np.random.default_rng(0)
        for _ in range(100):
            r, g, b = perturb_color((0.5, 0.5, 0.5), 0.05, rng)
            assert abs(r - 0.5) <= 0.05
            assert abs(g - 0.5) <= 0.05
            assert abs(b - 0.5) <= 0.05

    def test_named_palettes(self):
        """Test palette lookup."""
        assert get_palette("desert_stone").name == "desert_stone"
        assert get_palette("meadow").style(Face.UP) is Style.GRASS
        with self.assertRaises(KeyError):
            get_palette("no_such_palette")


class TestSceneRenderer(unittest.TestCase):
    """Tests for the full render pass."""

    def test_single_cube(self):
        """Test one voxel with constant gradients."""
        renderer = SceneRenderer(PLAIN)
        mesh = renderer.build_mesh({voxel(0, 0, 0)}, CONSTANT_PALETTE)

        assert len(mesh) == 6
        assert mesh.get(corner(0, 0), Orientation.RIGHT).color == RED
        assert mesh.get(corner(0, 0), Orientation.LEFT).color == RED
        assert mesh.get(corner(1, -1), Orientation.LEFT).color == GREEN
        assert mesh.get(corner(0, -1), Orientation.RIGHT).color == GREEN
        assert mesh.get(corner(0, -1), Orientation.LEFT).color == BLUE
        assert mesh.get(corner(-1, 0), Orientation.RIGHT).color == BLUE

        recorder = CommandRecorder()
        stats = renderer.render(recorder, {voxel(0, 0, 0)}, CONSTANT_PALETTE)

        assert len(recorder) == 6
        assert all(c.kind is PaintKind.POLYGON for c in recorder.commands)
        colors = [c.color for c in recorder.commands]
        assert colors.count(RED) == 2
        assert colors.count(GREEN) == 2
        assert colors.count(BLUE) == 2
        assert stats.triangle_count == 6
        assert stats.command_count == 6

    def test_up_face_points(self):
        """Test that a painted triangle uses its three projected corners."""
        recorder = CommandRecorder()
        SceneRenderer(PLAIN).render(recorder, {voxel(0, 0, 0)}, CONSTANT_PALETTE)

        expected = tuple(
            c.project() for c in triangle_corners(corner(0, 0), Orientation.RIGHT)
        )
        assert any(c.points == expected for c in recorder.commands)

    def test_nearer_voxel_wins(self):
        """Test two stacked voxels regardless of set order."""
        renderer = SceneRenderer(PLAIN)
        for scene in ([voxel(0, 0, 0), voxel(0, 0, 1)], [voxel(0, 0, 1), voxel(0, 0, 0)]):
            mesh = renderer.build_mesh(scene, CONSTANT_PALETTE)
            assert mesh.get(corner(1, -1), Orientation.LEFT).color == RED
            assert mesh.get(corner(0, -1), Orientation.RIGHT).color == BLUE

    def test_empty_scene(self):
        """Test that an empty scene paints nothing."""
        recorder = CommandRecorder()
        stats = SceneRenderer().render(recorder, set(), CONSTANT_PALETTE)
        assert len(recorder) == 0
        assert stats.voxel_count == 0
        assert stats.triangle_count == 0

    def test_lightness_unshadowed(self):
        """Test the lightness of a lone voxel."""
        lightness = SceneRenderer(PLAIN).face_lightness({voxel(0, 0, 0)}, voxel(0, 0, 0))
        assert np.isclose(lightness[Face.UP], 0.28)
        assert np.isclose(lightness[Face.RIGHT], 0.45)
        assert np.isclose(lightness[Face.LEFT], 0.0)

    def test_lightness_shadowed(self):
        """Test that a blocker removes the sun bonus from the top face."""
        scene = {voxel(0, 0, 0), voxel(2, 3, 0)}
        lightness = SceneRenderer(PLAIN).face_lightness(scene, voxel(0, 0, 0))
        assert np.isclose(lightness[Face.UP], 0.08)

    def test_left_face_never_sunlit(self):
        """Test that left faces get no sun bonus for any ray sampling."""
        for step_size, max_distance in ((0.25, 20.0), (0.3, 20.0), (0.4, 20.0), (1.0, 20.0), (0.25, 0.25), (0.25, 0.0)):
            renderer = SceneRenderer(RenderConfig(step_size=step_size, max_distance=max_distance))
            lightness = renderer.face_lightness({voxel(0, 0, 0)}, voxel(0, 0, 0))
            assert lightness[Face.LEFT] == 0.0

            lightness = renderer.face_lightness({voxel(3, 0, 0)}, voxel(3, 0, 0))
            assert np.isclose(lightness[Face.LEFT], 0.1)

    def test_positional_bias(self):
        """Test that higher voxels get lighter tops."""
        renderer = SceneRenderer(PLAIN)
        low = renderer.face_lightness({voxel(0, 0, 0)}, voxel(0, 0, 0))
        high = renderer.face_lightness({voxel(0, 10, 0)}, voxel(0, 10, 0))
        assert np.isclose(high[Face.UP] - low[Face.UP], 0.5)

    def test_painter_order(self):
        """Test that entries are sorted farthest first."""
        renderer = SceneRenderer(PLAIN)
        scene = {voxel(x, y, z) for x in range(3) for y in range(2) for z in range(3)}
        depths = [e.depth for e in renderer.paint_list(renderer.build_mesh(scene, CONSTANT_PALETTE))]
        assert depths == sorted(depths, reverse=True)

    def test_same_seed_same_output(self):
        """Test reproducibility with jitter and overlays enabled."""
        scene = {voxel(x, 0, z) for x in range(-2, 3) for z in range(-2, 3)}
        palette = get_palette("meadow")

        first = CommandRecorder()
        second = CommandRecorder()
        SceneRenderer(seed=42).render(first, scene, palette)
        SceneRenderer(seed=42).render(second, scene, palette)

        assert len(first) > 0
        assert first.commands == second.commands

    def test_jitter_bounded(self):
        """Test that jittered colors stay near their base color."""
        config = RenderConfig(jitter=0.05, effects=False)
        recorder = CommandRecorder()
        SceneRenderer(config, seed=3).render(recorder, {voxel(0, 0, 0)}, CONSTANT_PALETTE)

        bases = (RED, GREEN, BLUE)
        for command in recorder.commands:
            assert any(
                np.all(np.abs(np.array(command.color) - np.array(base)) <= 0.05)
                for base in bases
            )

    def test_grass_overlay(self):
        """Test that grass tops get overlay shapes painted after them."""
        config = RenderConfig(jitter=0.0, effects=True, effect_count=3)
        palette = Palette(
            name="grass",
            top=ConstantGradient(GREEN),
            right=ConstantGradient(RED),
            left=ConstantGradient(BLUE),
            top_style=Style.GRASS,
        )
        recorder = CommandRecorder()
        stats = SceneRenderer(config, seed=1).render(recorder, {voxel(0, 0, 0)}, palette)

        assert len(recorder.polygons) == 6
        assert len(recorder.small_polygons) == 6
        assert stats.effect_count == 6
        # All triangles sit at depth 0; overlays sort just in front
        assert all(c.kind is PaintKind.POLYGON for c in recorder.commands[:6])
        assert all(c.kind is PaintKind.SMALL_POLYGON for c in recorder.commands[6:])
        for command in recorder.small_polygons:
            assert np.allclose(command.color, (0.0, 0.8, 0.0))

    def test_overlay_disabled(self):
        """Test that effects=False skips overlays."""
        recorder = CommandRecorder()
        SceneRenderer(PLAIN).render(recorder, {voxel(0, 0, 0)}, get_palette("meadow"))
        assert len(recorder.small_polygons) == 0

    def test_failure_paints_nothing(self):
        """Test that a broken gradient aborts before painting."""
        broken = Palette(
            name="broken",
            top=lambda v: interpolate_rgb([], v),
            right=ConstantGradient(GREEN),
            left=ConstantGradient(BLUE),
        )
        recorder = CommandRecorder()
        with self.assertRaises(ValueError):
            SceneRenderer(PLAIN).render(recorder, {voxel(0, 0, 0), voxel(1, 0, 0)}, broken)
        assert len(recorder) == 0


if __name__ == "__main__":
    unittest.main(verbosity=2)
