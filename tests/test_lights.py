"""Unit tests for point light storage and falloff."""

import math

import pytest
import taichi as ti


class TestLightRegistry:
    """Tests for add_point_light / clear_lights."""

    def test_add_and_clear(self):
        from src.whitted.scene.lights import add_point_light, clear_lights, get_light_count

        assert add_point_light((0.0, 10.0, 0.0), (1.0, 1.0, 1.0), 100.0) == 0
        assert add_point_light((1.0, 2.0, 3.0), (0.0, 1.0, 1.0), 5.0) == 1
        assert get_light_count() == 2

        clear_lights()
        assert get_light_count() == 0

    def test_accessors_read_back(self):
        from src.whitted.scene.lights import (
            add_point_light,
            get_light_color,
            get_light_intensity,
            get_light_origin,
        )

        add_point_light((1.0, 2.0, 3.0), (0.5, 0.25, 0.0), 42.0)

        origin = ti.field(dtype=ti.math.vec3, shape=())
        color = ti.field(dtype=ti.math.vec3, shape=())
        intensity = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            origin[None] = get_light_origin(0)
            color[None] = get_light_color(0)
            intensity[None] = get_light_intensity(0)

        test_kernel()
        assert abs(origin[None][2] - 3.0) < 1e-6
        assert abs(color[None][1] - 0.25) < 1e-6
        assert abs(intensity[None] - 42.0) < 1e-5

    def test_validation(self):
        from src.whitted.scene.lights import add_point_light

        with pytest.raises(ValueError):
            add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), -1.0)
        with pytest.raises(ValueError):
            add_point_light((0.0, 0.0, 0.0), (1.0, -0.1, 1.0), 1.0)

    def test_capacity(self):
        from src.whitted.scene.lights import MAX_LIGHTS, add_point_light

        for i in range(MAX_LIGHTS):
            add_point_light((float(i), 0.0, 0.0), (1.0, 1.0, 1.0), 1.0)
        with pytest.raises(RuntimeError):
            add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 1.0)


class TestFalloff:
    """Tests for inverse-square falloff."""

    def test_intensity_at_distance(self):
        from src.whitted.scene.lights import intensity_at_distance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = intensity_at_distance(1000.0, 25.0)

        test_kernel()
        expected = 1000.0 / (4.0 * math.pi * 25.0)
        assert abs(result[None] - expected) < 1e-4
