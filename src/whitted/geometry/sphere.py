"""Sphere primitive with object-space ray-sphere intersection.

The sphere stores its center and radius in object space. A world-space ray
is first mapped into object space with the inverse isometry, the quadratic

    |O + t*D - C|^2 = r^2

is solved there, and the resulting hit is mapped back to world space.

Root selection:
    - negative discriminant: no roots, no hit
    - both roots negative: the sphere is behind the ray, no hit
    - otherwise: the smaller non-negative root (the far root when the ray
      starts inside the sphere)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import Sphere, hit_sphere_local
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere_local / hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.geometry.hit_record import HitRecord, make_miss_record, record_to_world
from src.whitted.geometry.transform import iso_transform_point, iso_transform_vector

# Type aliases for 3D math
vec3 = tm.vec3
mat3 = tm.mat3


@ti.dataclass
class Sphere:
    """A sphere defined by an object-space center point and radius.

    Attributes:
        center: The center point of the sphere in object space (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def solve_quadratic(a: ti.f32, b: ti.f32, c: ti.f32):
    """Solve a*t^2 + b*t + c = 0 for real roots.

    Only two outcomes are distinguished: no real roots, or two roots. A
    tangent ray yields two equal roots.

    Args:
        a: Quadratic coefficient (non-zero).
        b: Linear coefficient.
        c: Constant term.

    Returns:
        A tuple of (has_roots, t0, t1) where has_roots is 1 if the
        discriminant is non-negative, and t0 <= t1 for a > 0.
    """
    discriminant = b * b - 4.0 * a * c
    has_roots = 0
    t0 = 0.0
    t1 = 0.0
    if discriminant >= 0.0:
        sq = tm.sqrt(discriminant)
        t0 = (-b - sq) / (2.0 * a)
        t1 = (-b + sq) / (2.0 * a)
        has_roots = 1
    return has_roots, t0, t1


@ti.func
def hit_sphere_local(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Intersect an object-space ray with a sphere.

    Args:
        ray_origin: The ray origin in object space.
        ray_direction: The unit ray direction in object space.
        sphere: The sphere to test.

    Returns:
        An object-space HitRecord. The normal always points outward from
        the center, also when the ray starts inside the sphere.
    """
    diff = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, diff)
    c = tm.dot(diff, diff) - sphere.radius * sphere.radius

    has_roots, t0, t1 = solve_quadratic(a, b, c)

    result = make_miss_record()
    if has_roots == 1:
        t = tm.min(t0, t1)
        valid = 1
        if t0 < 0.0:
            if t1 < 0.0:
                # Both roots behind the origin
                valid = 0
            else:
                t = t1

        if valid == 1:
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=tm.normalize(point - sphere.center),
                to_viewer=-tm.normalize(ray_direction),
            )
    return result


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    model_rotation: mat3,
    model_translation: vec3,
    inverse_rotation: mat3,
    inverse_translation: vec3,
) -> HitRecord:
    """Intersect a world-space ray with a transformed sphere.

    Args:
        ray_origin: The ray origin in world space.
        ray_direction: The unit ray direction in world space.
        sphere: The sphere in object space.
        model_rotation: Object-to-world rotation.
        model_translation: Object-to-world translation.
        inverse_rotation: World-to-object rotation.
        inverse_translation: World-to-object translation.

    Returns:
        A world-space HitRecord.
    """
    local_origin = iso_transform_point(inverse_rotation, inverse_translation, ray_origin)
    local_direction = iso_transform_vector(inverse_rotation, ray_direction)
    rec = hit_sphere_local(local_origin, local_direction, sphere)
    return record_to_world(rec, model_rotation, model_translation)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
