"""Tests for recursive Whitted shading.

Tests cover:
- Per-light Phong lighting with inverse-square falloff
- Shadowing by shadow-casting shapes
- Background on a miss and black past the maximum depth
- Reflection blending and recursion cut-off
- Refraction through a glass sphere and total internal reflection
- Batch tracing through trace_rays
"""

import math

import numpy as np
import pytest
import taichi as ti

BACKGROUND = (59.0 / 255.0, 172.0 / 255.0, 214.0 / 255.0)


def _lit_sphere_scene(light_origin=(0.0, 0.0, -10.0), intensity=100.0):
    """Unit matte sphere at the origin and one white point light."""
    from src.whitted.scene.manager import SceneManager

    scene = SceneManager()
    matte = scene.add_phong_material(k_diffuse=1.0, k_specular=0.0, specular_n=1)
    scene.add_sphere((0.0, 0.0, 0.0), 1.0, matte)
    scene.add_point_light(light_origin, (1.0, 1.0, 1.0), intensity)
    return scene, matte


class TestLighting:
    """Tests for get_lighting / shade_phong."""

    def test_get_lighting_unoccluded(self):
        from src.whitted.core.whitted import get_lighting
        from src.whitted.scene.intersection import SceneHitRecord, vec3
        from src.whitted.scene.lights import add_point_light

        # Intensity chosen so the falloff at distance 2 is exactly 1
        add_point_light((0.0, 2.0, 0.0), (1.0, 1.0, 1.0), 16.0 * math.pi)

        diffuse = ti.field(dtype=ti.math.vec3, shape=())
        specular = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            up = vec3(0.0, 1.0, 0.0)
            rec = SceneHitRecord(
                hit=1, t=1.0, point=vec3(0.0, 0.0, 0.0), normal=up, to_viewer=up,
                material_id=0, shape_kind=1, shape_index=0,
            )
            d, s = get_lighting(rec, 8, 0.5, 0)
            diffuse[None] = d
            specular[None] = s

        test_kernel()
        for c in range(3):
            assert abs(diffuse[None][c] - 0.5) < 1e-4
            assert abs(specular[None][c] - 1.0) < 1e-4

    def test_light_behind_surface_is_dark(self):
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.intersection import cast_ray

        _lit_sphere_scene(light_origin=(0.0, 10.0, 0.0))

        info = cast_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert info is not None
        assert abs(info.t - 4.0) < 1e-4
        assert abs(info.point[2] + 1.0) < 1e-4
        assert abs(info.normal[2] + 1.0) < 1e-4

        color = trace_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert all(abs(c) < 1e-6 for c in color)

    def test_inverse_square_falloff(self):
        from src.whitted.core.whitted import trace_ray

        _lit_sphere_scene(light_origin=(0.0, 0.0, -10.0), intensity=100.0)

        # Hit at (0, 0, -1), light 9 units away along the normal
        expected = 100.0 / (4.0 * math.pi * 81.0)
        color = trace_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        for c in color:
            assert abs(c - expected) < 1e-4

    def test_occluder_blocks_light(self):
        from src.whitted.core.whitted import trace_ray

        scene, matte = _lit_sphere_scene(light_origin=(0.0, 0.0, -10.0), intensity=100.0)
        # Sits between the hit point and the light, behind the ray origin
        blocker = scene.add_sphere((0.0, 0.0, -7.0), 0.5, matte)

        color = trace_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert all(abs(c) < 1e-6 for c in color)

        scene.move_sphere(blocker, (5.0, 0.0, 0.0))
        expected = 100.0 / (4.0 * math.pi * 81.0)
        color = trace_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert abs(color[0] - expected) < 1e-4

    def test_non_casting_shape_does_not_shadow(self):
        from src.whitted.core.whitted import trace_ray

        scene, matte = _lit_sphere_scene(light_origin=(0.0, 0.0, -10.0), intensity=100.0)
        scene.add_sphere((0.0, 0.0, -7.0), 0.5, matte, shadow_casting=False)

        expected = 100.0 / (4.0 * math.pi * 81.0)
        color = trace_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert abs(color[0] - expected) < 1e-4


class TestRecursion:
    """Tests for background, depth limits and reflection."""

    def test_miss_returns_background(self):
        from src.whitted.core.whitted import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        for got, want in zip(color, BACKGROUND):
            assert abs(got - want) < 1e-6

    def test_custom_background(self):
        from src.whitted.core.config import ShadingConfig
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.manager import SceneManager

        SceneManager(ShadingConfig(background_color=(1.0, 0.0, 0.5)))
        color = trace_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert abs(color[0] - 1.0) < 1e-6
        assert abs(color[2] - 0.5) < 1e-6

    def test_depth_past_limit_is_black(self):
        from src.whitted.core.whitted import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=11)
        assert color == (0.0, 0.0, 0.0)

    def test_mirror_blends_background(self):
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        mirror = scene.add_reflection_material(reflectivity=0.25, color=(1.0, 0.0, 0.0))
        scene.add_plane((0.0, 0.0, 1.0), (0.0, 0.0, -3.0), mirror)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert abs(color[0] - (0.75 + 0.25 * BACKGROUND[0])) < 1e-4
        assert abs(color[1] - 0.25 * BACKGROUND[1]) < 1e-4
        assert abs(color[2] - 0.25 * BACKGROUND[2]) < 1e-4

    def test_max_depth_zero_stops_reflection(self):
        from src.whitted.core.config import ShadingConfig
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager(ShadingConfig(max_depth=0))
        mirror = scene.add_reflection_material(reflectivity=0.25, color=(1.0, 0.0, 0.0))
        scene.add_plane((0.0, 0.0, 1.0), (0.0, 0.0, -3.0), mirror)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert abs(color[0] - 0.75) < 1e-5
        assert abs(color[1]) < 1e-6
        assert abs(color[2]) < 1e-6

    def test_facing_mirrors_terminate(self):
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        mirror = scene.add_reflection_material(reflectivity=1.0)
        scene.add_plane((0.0, 0.0, 1.0), (0.0, 0.0, -3.0), mirror)
        scene.add_plane((0.0, 0.0, -1.0), (0.0, 0.0, 3.0), mirror)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        # Perfect black mirrors: the bounce chain is cut at max_depth
        for c in color:
            assert math.isfinite(c)
            assert abs(c) < 1e-6


class TestRefraction:
    """Tests for transparent materials."""

    def test_glass_sphere_passes_background(self):
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        glass = scene.add_refraction_material(refractive_index=1.5)
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, glass)

        # Every path through the sphere ends in the background
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        for got, want in zip(color, BACKGROUND):
            assert abs(got - want) < 2e-2

    def test_total_internal_reflection_falls_back_to_reflected_ray(self):
        from src.whitted.core.whitted import get_reflected_ray, get_refracted_ray
        from src.whitted.scene.intersection import SceneHitRecord, vec3

        weights = ti.field(dtype=ti.f32, shape=2)
        rays = ti.Vector.field(3, dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            # Grazing ray leaving an ior 1.5 medium through a surface facing +y
            incident = ti.math.normalize(vec3(1.0, 0.2, 0.0))
            rec = SceneHitRecord(
                hit=1, t=1.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 1.0, 0.0),
                to_viewer=-incident, material_id=0, shape_kind=0, shape_index=0,
            )
            kr, kt, refracted = get_refracted_ray(rec, 1.5)
            reflected = get_reflected_ray(rec)
            weights[0] = kr
            weights[1] = kt
            rays[0] = refracted.origin
            rays[1] = refracted.direction
            rays[2] = reflected.origin
            rays[3] = reflected.direction

        test_kernel()
        assert weights[0] == 1.0
        assert weights[1] == 0.0
        for c in range(3):
            assert abs(rays[0][c] - rays[2][c]) < 1e-6
            assert abs(rays[1][c] - rays[3][c]) < 1e-6
        norm = math.sqrt(1.04)
        assert abs(rays[1][0] - 1.0 / norm) < 1e-5
        assert abs(rays[1][1] + 0.2 / norm) < 1e-5
        # Origin stays on the inner side of the surface
        assert rays[0][1] < 0.0

    def test_refracted_ray_crosses_surface(self):
        from src.whitted.core.whitted import get_refracted_ray
        from src.whitted.scene.intersection import SceneHitRecord, vec3

        weights = ti.field(dtype=ti.f32, shape=2)
        rays = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            up = vec3(0.0, 1.0, 0.0)
            rec = SceneHitRecord(
                hit=1, t=1.0, point=vec3(0.0, 0.0, 0.0), normal=up,
                to_viewer=up, material_id=0, shape_kind=0, shape_index=0,
            )
            kr, kt, refracted = get_refracted_ray(rec, 1.5)
            weights[0] = kr
            weights[1] = kt
            rays[0] = refracted.origin
            rays[1] = refracted.direction

        test_kernel()
        # Normal incidence from air: kr = ((1.5 - 1) / (1.5 + 1))^2
        assert abs(weights[0] - 0.04) < 1e-5
        assert abs(weights[0] + weights[1] - 1.0) < 1e-6
        assert abs(rays[1][1] + 1.0) < 1e-5
        assert rays[0][1] < 0.0

    def test_ray_trapped_by_total_internal_reflection_is_black(self):
        from src.whitted.core.whitted import trace_ray
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        glass = scene.add_refraction_material(refractive_index=1.5)
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, glass)

        # Chord 0.9 from the center: sin_i = 0.9 exceeds 1 / 1.5 at every
        # bounce, so no path ever leaves the sphere before max_depth
        trapped = trace_ray((0.0, 0.9, 0.0), (1.0, 0.0, 0.0))
        assert all(abs(c) < 1e-6 for c in trapped)

        # Near the center the ray escapes and mostly sees the background
        escaping = trace_ray((0.0, 0.1, 0.0), (1.0, 0.0, 0.0))
        assert escaping[2] > 0.5 * BACKGROUND[2]

    def test_glass_does_not_shadow_by_default(self):
        from src.whitted.core.whitted import trace_ray

        scene, _ = _lit_sphere_scene(light_origin=(0.0, 0.0, -10.0), intensity=100.0)
        glass = scene.add_refraction_material(refractive_index=1.5)
        scene.add_sphere((0.0, 0.0, -7.0), 0.5, glass)

        expected = 100.0 / (4.0 * math.pi * 81.0)
        color = trace_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert abs(color[0] - expected) < 1e-4


class TestBatchTracing:
    """Tests for trace_ray / trace_rays entry points."""

    def test_batch_matches_single_rays(self):
        from src.whitted.core.whitted import trace_ray, trace_rays

        _lit_sphere_scene(light_origin=(0.0, 0.0, -10.0), intensity=100.0)

        origins = [(0.0, 0.0, -5.0), (0.0, 0.0, -5.0), (0.0, 5.0, -5.0)]
        directions = [(0.0, 0.0, 1.0), (0.0, 0.0, -1.0), (0.0, 0.0, 2.0)]
        colors = trace_rays(origins, directions)

        assert colors.shape == (3, 3)
        assert colors.dtype == np.float32
        for i in range(3):
            single = trace_ray(origins[i], directions[i])
            np.testing.assert_allclose(colors[i], single, atol=1e-5)
        np.testing.assert_allclose(colors[1], BACKGROUND, atol=1e-6)

    def test_empty_batch(self):
        from src.whitted.core.whitted import trace_rays

        colors = trace_rays(np.zeros((0, 3)), np.zeros((0, 3)))
        assert colors.shape == (0, 3)

    def test_invalid_inputs_raise(self):
        from src.whitted.core.whitted import trace_ray, trace_rays

        with pytest.raises(ValueError):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        with pytest.raises(ValueError):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=-1)
        with pytest.raises(ValueError):
            trace_rays(np.zeros((2, 2)), np.zeros((2, 2)))
        with pytest.raises(ValueError):
            trace_rays(np.zeros((2, 3)), np.zeros((3, 3)))
