"""Canonical ray/shape intersection record and the nearest-hit policy.

Shape intersection routines solve in object space and return a HitRecord in
that space; record_to_world() maps it back with the shape's object-to-world
isometry. is_closer() is the comparison every nearest-hit fold uses.
"""

import taichi as ti
import taichi.math as tm

from src.whitted.geometry.transform import iso_transform_point, iso_transform_vector

# Type aliases for 3D math
vec3 = tm.vec3
mat3 = tm.mat3


@ti.dataclass
class HitRecord:
    """Record of a ray/shape intersection.

    Attributes:
        hit: 1 if the ray intersected the shape, 0 otherwise.
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal at the intersection, as defined by
            the shape (outward for spheres, the plane normal for planes).
            Only valid if hit == 1.
        to_viewer: Unit vector from the intersection back toward the ray
            origin. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    to_viewer: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        to_viewer=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def record_to_world(rec: HitRecord, rotation: mat3, translation: vec3) -> HitRecord:
    """Map an object-space hit record into world space.

    The point receives rotation and translation; the normal and viewer
    vector only the rotation. Distances are preserved by isometries, so t
    is unchanged.

    Args:
        rec: The object-space hit record.
        rotation: Object-to-world rotation.
        translation: Object-to-world translation.

    Returns:
        The world-space hit record (a miss stays a miss).
    """
    result = rec
    if rec.hit == 1:
        result = HitRecord(
            hit=1,
            t=rec.t,
            point=iso_transform_point(rotation, translation, rec.point),
            normal=iso_transform_vector(rotation, rec.normal),
            to_viewer=iso_transform_vector(rotation, rec.to_viewer),
        )
    return result


@ti.func
def is_closer(candidate_hit: ti.i32, candidate_t: ti.f32, best_hit: ti.i32, best_t: ti.f32) -> ti.i32:
    """Return 1 if a candidate hit should replace the current best.

    A miss never replaces anything; any hit replaces a miss; otherwise the
    strictly smaller distance wins, so on equal distances the earlier
    candidate is kept.
    """
    closer = 0
    if candidate_hit == 1:
        if best_hit == 0 or candidate_t < best_t:
            closer = 1
    return closer

