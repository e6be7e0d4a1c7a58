"""Unit tests for reflect, refract and fresnel.

Tests cover:
- Reflection about a normal and its involution property
- Snell refraction, normal incidence and round trips through parallel interfaces
- Total internal reflection detection
- Fresnel energy split
"""

import math

import taichi as ti


class TestReflect:
    """Tests for reflect()."""

    def test_reflect_mirrors_about_normal(self):
        """reflect keeps the normal component and flips the tangential one."""
        from src.whitted.core.optics import reflect
        from src.whitted.core.ray import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] + 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_reflect_twice_is_identity(self):
        """reflect(reflect(v, n), n) == v."""
        from src.whitted.core.optics import reflect
        from src.whitted.core.ray import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            n = ti.math.normalize(vec3(0.2, 1.0, -0.4))
            v = vec3(0.3, -0.5, 0.8)
            result[None] = reflect(reflect(v, n), n)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.3) < 1e-5
        assert abs(r[1] + 0.5) < 1e-5
        assert abs(r[2] - 0.8) < 1e-5


class TestRefract:
    """Tests for refract()."""

    def test_normal_incidence_passes_straight(self):
        """A ray along the normal is not bent."""
        from src.whitted.core.optics import refract
        from src.whitted.core.ray import vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, o = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0, 1.5)
            direction[None] = d
            ok[None] = o

        test_kernel()
        d = direction[None]
        assert ok[None] == 1
        assert abs(d[0]) < 1e-6
        assert abs(d[1] + 1.0) < 1e-6

    def test_snell_law(self):
        """The transmitted sine is n_i / n_t times the incident sine."""
        from src.whitted.core.optics import refract
        from src.whitted.core.ray import vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        s = math.sin(math.radians(30.0))
        c = math.cos(math.radians(30.0))

        @ti.kernel
        def test_kernel():
            d, o = refract(vec3(s, -c, 0.0), vec3(0.0, 1.0, 0.0), 1.0, 1.5)
            direction[None] = d
            ok[None] = o

        test_kernel()
        d = direction[None]
        assert ok[None] == 1
        assert abs(d[0] - s / 1.5) < 1e-5
        assert d[1] < 0.0
        assert abs(d[0] ** 2 + d[1] ** 2 + d[2] ** 2 - 1.0) < 1e-5

    def test_round_trip_through_parallel_interfaces(self):
        """Air -> glass -> air through parallel faces restores the direction."""
        from src.whitted.core.optics import refract
        from src.whitted.core.ray import vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())

        s = math.sin(math.radians(40.0))
        c = math.cos(math.radians(40.0))

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            inside, _ = refract(vec3(s, -c, 0.0), n, 1.0, 1.5)
            out, _ = refract(inside, n, 1.5, 1.0)
            direction[None] = out

        test_kernel()
        d = direction[None]
        assert abs(d[0] - s) < 1e-5
        assert abs(d[1] + c) < 1e-5
        assert abs(d[2]) < 1e-5

    def test_total_internal_reflection(self):
        """Past the critical angle refract reports no result."""
        from src.whitted.core.optics import refract
        from src.whitted.core.ray import vec3

        ok = ti.field(dtype=ti.i32, shape=())

        s = math.sin(math.radians(60.0))
        c = math.cos(math.radians(60.0))

        @ti.kernel
        def test_kernel():
            _, o = refract(vec3(s, -c, 0.0), vec3(0.0, 1.0, 0.0), 1.5, 1.0)
            ok[None] = o

        test_kernel()
        assert ok[None] == 0


class TestFresnel:
    """Tests for fresnel()."""

    def test_normal_incidence_reflectance(self):
        """Air to glass at normal incidence reflects ((n-1)/(n+1))^2."""
        from src.whitted.core.optics import fresnel
        from src.whitted.core.ray import vec3

        kr = ti.field(dtype=ti.f32, shape=())
        kt = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            r, t = fresnel(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0, 1.5)
            kr[None] = r
            kt[None] = t

        test_kernel()
        assert abs(kr[None] - 0.04) < 1e-5
        assert abs(kt[None] - 0.96) < 1e-5

    def test_energy_is_conserved(self):
        """kr + kt == 1 at oblique incidence."""
        from src.whitted.core.optics import fresnel
        from src.whitted.core.ray import vec3

        kr = ti.field(dtype=ti.f32, shape=())
        kt = ti.field(dtype=ti.f32, shape=())

        s = math.sin(math.radians(45.0))

        @ti.kernel
        def test_kernel():
            r, t = fresnel(vec3(s, -s, 0.0), vec3(0.0, 1.0, 0.0), 1.0, 1.33)
            kr[None] = r
            kt[None] = t

        test_kernel()
        assert 0.0 < kr[None] < 1.0
        assert abs(kr[None] + kt[None] - 1.0) < 1e-6

    def test_past_critical_angle_reflects_everything(self):
        """Beyond the critical angle the split is exactly (1, 0)."""
        from src.whitted.core.optics import fresnel
        from src.whitted.core.ray import vec3

        kr = ti.field(dtype=ti.f32, shape=())
        kt = ti.field(dtype=ti.f32, shape=())

        s = math.sin(math.radians(70.0))
        c = math.cos(math.radians(70.0))

        @ti.kernel
        def test_kernel():
            r, t = fresnel(vec3(s, -c, 0.0), vec3(0.0, 1.0, 0.0), 1.5, 1.0)
            kr[None] = r
            kt[None] = t

        test_kernel()
        assert kr[None] == 1.0
        assert kt[None] == 0.0
