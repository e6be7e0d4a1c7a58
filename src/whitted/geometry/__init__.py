"""Geometry module for shape primitives and rigid transforms.

Components:
    transform: Isometry (rotation + translation) building and application
    hit_record: HitRecord structure and the nearest-hit policy
    sphere: Sphere primitive with ray-sphere intersection
    plane: One-sided, optionally bounded plane primitive

Every primitive intersects in object space. The world-space entry points
(hit_sphere, hit_plane) take the cached object-to-world isometry and its
inverse, transform the ray in, solve, and transform the record out:
    rec = hit_shape(ray_origin, ray_direction, shape, model_r, model_t, inv_r, inv_t)
"""

from .hit_record import HitRecord, is_closer, make_miss_record, record_to_world
from .plane import Plane, hit_plane, hit_plane_local, within_bounds
from .sphere import Sphere, hit_sphere, hit_sphere_local, make_sphere, solve_quadratic
from .transform import (
    Isometry,
    iso_transform_point,
    iso_transform_vector,
    rotation_from_scaled_axis,
)

__all__ = [
    "HitRecord",
    "make_miss_record",
    "record_to_world",
    "is_closer",
    "Sphere",
    "hit_sphere",
    "hit_sphere_local",
    "make_sphere",
    "solve_quadratic",
    "Plane",
    "hit_plane",
    "hit_plane_local",
    "within_bounds",
    "Isometry",
    "rotation_from_scaled_axis",
    "iso_transform_point",
    "iso_transform_vector",
]
