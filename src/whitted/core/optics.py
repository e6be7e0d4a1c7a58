"""Optics operations for specular transport.

Pure vector functions used by the Whitted tracer:
    - reflect: mirror a vector about a normal
    - refract: Snell's law refraction with total internal reflection detection
    - fresnel: unpolarized Fresnel reflectance/transmittance split

Conventions:
    reflect() takes a vector pointing AWAY from the surface (e.g. toward the
    viewer or the light) and returns its mirror image, also pointing away.
    refract() and fresnel() take the incident direction pointing TOWARD the
    surface, and a normal oriented against it (on the incident side). The
    caller picks n_i/n_t and flips the normal for rays leaving a medium.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a unit normal.

    Computes 2 * (n . v) * n - v. Never fails.

    Args:
        v: The vector to reflect, pointing away from the surface.
        n: The unit surface normal.

    Returns:
        The mirrored vector (same length as v).
    """
    return 2.0 * tm.dot(n, v) * n - v


@ti.func
def _incidence_terms(incident: vec3, normal: vec3, n_i: ti.f32, n_t: ti.f32):
    """Cosine/sine of the incidence angle and the Snell transmission sine."""
    cos_i = -tm.clamp(tm.dot(normal, incident), -1.0, 1.0)
    sin_i = tm.sqrt(tm.max(0.0, 1.0 - cos_i * cos_i))
    sin_t = (n_i / n_t) * sin_i
    return cos_i, sin_i, sin_t


@ti.func
def refract(incident: vec3, normal: vec3, n_i: ti.f32, n_t: ti.f32):
    """Refract a unit direction through an interface using Snell's law.

    The transmitted direction is built from its tangential and normal parts:
        tangent = (n * cos_i + i) / sin_i
        t = sin_t * tangent - cos_t * n

    Args:
        incident: Unit incident direction, pointing toward the surface.
        normal: Unit normal on the incident side (normal . incident <= 0).
        n_i: Refractive index of the medium the ray travels in.
        n_t: Refractive index of the medium the ray enters.

    Returns:
        A tuple of (direction, ok) where:
        - direction: The refracted unit direction (zero vector if not ok).
        - ok: 1 if refraction happened, 0 on total internal reflection.
    """
    cos_i, sin_i, sin_t = _incidence_terms(incident, normal, n_i, n_t)

    direction = vec3(0.0, 0.0, 0.0)
    ok = 0
    if sin_t <= 1.0:
        cos_t = tm.sqrt(tm.max(0.0, 1.0 - sin_t * sin_t))
        tangent = vec3(0.0, 0.0, 0.0)
        if sin_i > 0.0:
            tangent = (normal * cos_i + incident) / sin_i
        direction = sin_t * tangent - cos_t * normal
        ok = 1

    return direction, ok


@ti.func
def fresnel(incident: vec3, normal: vec3, n_i: ti.f32, n_t: ti.f32):
    """Split incident energy into reflected and transmitted fractions.

    Averages the s- and p-polarized reflectances of the Fresnel equations
    (unpolarized light). Past the critical angle the result is exactly
    (1, 0) and no inverse trigonometry is evaluated.

    Args:
        incident: Unit incident direction, pointing toward the surface.
        normal: Unit normal on the incident side.
        n_i: Refractive index of the incident medium.
        n_t: Refractive index of the transmitting medium.

    Returns:
        A tuple (kr, kt) with kr + kt == 1.
    """
    cos_i, sin_i, sin_t = _incidence_terms(incident, normal, n_i, n_t)

    kr = 1.0
    if sin_t < 1.0:
        cos_t = tm.sqrt(1.0 - sin_t * sin_t)
        rs = (n_t * cos_i - n_i * cos_t) / (n_t * cos_i + n_i * cos_t)
        rp = (n_i * cos_i - n_t * cos_t) / (n_i * cos_i + n_t * cos_t)
        kr = (rs * rs + rp * rp) / 2.0

    return kr, 1.0 - kr
