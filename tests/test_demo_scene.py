"""Tests for the demo scene."""

import numpy as np


def test_demo_scene_contents():
    from src.whitted.materials.material import MaterialType
    from src.whitted.scene.demo_scene import GLASS_REFRACTIVE_INDEX, create_demo_scene

    scene = create_demo_scene()
    assert scene.get_sphere_count() == 3
    assert scene.get_plane_count() == 1
    assert scene.get_light_count() == 2

    types = [info.material_type for info in scene.materials]
    assert types == [MaterialType.PHONG, MaterialType.PHONG, MaterialType.REFRACTION]
    assert scene.materials[2].material.kind.refractive_index == GLASS_REFRACTIVE_INDEX

    # Only the glass sphere lets light through
    assert [s.shadow_casting for s in scene.spheres] == [False, True, True]
    assert scene.planes[0].half_extents == (12.0, 10.0)


def test_demo_scene_uses_given_config():
    from src.whitted.core.config import ShadingConfig
    from src.whitted.scene.demo_scene import create_demo_scene

    scene = create_demo_scene(ShadingConfig(max_depth=2))
    assert scene.config.max_depth == 2


def test_demo_scene_renders_finite_colors():
    from src.whitted.core.whitted import trace_rays
    from src.whitted.scene.demo_scene import create_demo_scene

    create_demo_scene()

    # A small fan of camera rays through the glass, matte and shiny spheres,
    # the floor and the sky
    origins = np.tile(np.array([0.0, 1.0, 0.0], dtype=np.float32), (6, 1))
    directions = np.array(
        [
            [0.1, 0.0, -1.0],
            [-0.15, 0.0, -1.0],
            [0.25, 0.2, -1.0],
            [0.0, -0.3, -1.0],
            [0.0, 1.0, -0.2],
            [0.0, 0.0, -1.0],
        ],
        dtype=np.float32,
    )
    colors = trace_rays(origins, directions)

    assert colors.shape == (6, 3)
    assert np.all(np.isfinite(colors))
    assert np.all(colors >= 0.0)
    assert np.all(colors <= 1.0)
    # The upward ray sees nothing but sky
    np.testing.assert_allclose(colors[4], (59 / 255, 172 / 255, 214 / 255), atol=1e-6)
