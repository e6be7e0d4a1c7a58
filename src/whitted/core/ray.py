"""Ray data structure and small vector helpers.

All functions here are Taichi functions meant to be called from kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = make_ray(origin, direction)  # Inside a Taichi function
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Expected to be unit
            length; use make_ray() to build one from an arbitrary vector.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a direction, normalizing the direction.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray whose direction is unit length.
    """
    return Ray(origin=origin, direction=tm.normalize(direction))


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3, bias: ti.f32) -> vec3:
    """Offset a secondary ray origin to avoid self-intersection.

    Pushes the point along the normal on the side the new ray travels to:
    above the surface when the direction leaves along the normal, below it
    when the direction crosses into the surface.

    Args:
        point: The intersection point.
        normal: The unit surface normal.
        direction: The direction of the secondary ray.
        bias: Offset distance.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + bias * offset_dir

