"""One-sided plane primitive with optional rectangular bounds.

The plane is defined in object space by a unit normal and a center point.
Intersection solves

    t = dot(center - O, n) / dot(D, n)

and is back-face culled: rays whose direction does not oppose the normal
(dot(D, n) >= 0) never hit. A plane may be bounded on the object-space x
and z axes by half extents measured from its center; an axis without a
bound is infinite.
"""

import taichi as ti
import taichi.math as tm

from src.whitted.geometry.hit_record import HitRecord, make_miss_record, record_to_world
from src.whitted.geometry.transform import iso_transform_point, iso_transform_vector

# Type aliases for 3D math
vec3 = tm.vec3
mat3 = tm.mat3


@ti.dataclass
class Plane:
    """A one-sided plane in object space.

    Attributes:
        normal: The unit normal; the visible side is the one it points to.
        center: A point on the plane, also the origin of the bounds.
        half_extent_x: Maximum |x| offset from the center (if bounded_x).
        half_extent_z: Maximum |z| offset from the center (if bounded_z).
        bounded_x: 1 if half_extent_x applies, 0 for an unbounded x axis.
        bounded_z: 1 if half_extent_z applies, 0 for an unbounded z axis.
    """

    normal: vec3
    center: vec3
    half_extent_x: ti.f32
    half_extent_z: ti.f32
    bounded_x: ti.i32
    bounded_z: ti.i32


@ti.func
def within_bounds(plane: Plane, point: vec3) -> ti.i32:
    """Return 1 if an object-space point on the plane lies inside its bounds."""
    offset = point - plane.center
    inside = 1
    if plane.bounded_x == 1 and ti.abs(offset.x) > plane.half_extent_x:
        inside = 0
    if plane.bounded_z == 1 and ti.abs(offset.z) > plane.half_extent_z:
        inside = 0
    return inside


@ti.func
def hit_plane_local(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Intersect an object-space ray with a plane.

    Args:
        ray_origin: The ray origin in object space.
        ray_direction: The unit ray direction in object space.
        plane: The plane to test.

    Returns:
        An object-space HitRecord whose normal is the plane normal.
    """
    result = make_miss_record()
    denominator = tm.dot(plane.normal, ray_direction)

    if denominator < 0.0:
        t = tm.dot(plane.center - ray_origin, plane.normal) / denominator
        if t >= 0.0:
            point = ray_origin + t * ray_direction
            if within_bounds(plane, point) == 1:
                result = HitRecord(
                    hit=1,
                    t=t,
                    point=point,
                    normal=plane.normal,
                    to_viewer=-tm.normalize(ray_direction),
                )
    return result


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    model_rotation: mat3,
    model_translation: vec3,
    inverse_rotation: mat3,
    inverse_translation: vec3,
) -> HitRecord:
    """Intersect a world-space ray with a transformed plane.

    Args:
        ray_origin: The ray origin in world space.
        ray_direction: The unit ray direction in world space.
        plane: The plane in object space.
        model_rotation: Object-to-world rotation.
        model_translation: Object-to-world translation.
        inverse_rotation: World-to-object rotation.
        inverse_translation: World-to-object translation.

    Returns:
        A world-space HitRecord.
    """
    local_origin = iso_transform_point(inverse_rotation, inverse_translation, ray_origin)
    local_direction = iso_transform_vector(inverse_rotation, ray_direction)
    rec = hit_plane_local(local_origin, local_direction, plane)
    return record_to_world(rec, model_rotation, model_translation)
