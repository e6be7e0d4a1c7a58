"""Scene-level shape storage and ray queries.

Shapes live in per-kind Taichi field arenas (Structure of Arrays) and are
referred to by (shape_kind, shape_index). Each shape stores its local
geometry, one material id, a shadow-casting flag and its cached
object-to-world isometry together with the inverse.

Two queries are provided for kernels:
    - cast_to_shapes: nearest hit over every shape
    - cast_to_shadow_casting_shapes: nearest hit over shadow casters only,
      used for light visibility

Candidates are visited spheres first, then planes, each by index. A
candidate only replaces the current best when strictly closer, so the
earlier shape wins exact ties.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.intersection import add_sphere, cast_ray, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)
    0
    >>> cast_ray((0.0, 0.0, -5.0), (0.0, 0.0, 1.0)).t
    4.0
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import make_ray
from src.whitted.geometry.plane import Plane, hit_plane
from src.whitted.geometry.sphere import hit_sphere, make_sphere
from src.whitted.geometry.hit_record import HitRecord, is_closer
from src.whitted.geometry.transform import Isometry

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class ShapeKind(IntEnum):
    """Which arena a shape lives in."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material and shape information.

    Attributes:
        hit: 1 if any shape was hit, 0 otherwise.
        t: Distance along the ray to the nearest hit.
        point: World-space hit point.
        normal: World-space unit normal as defined by the shape.
        to_viewer: Unit vector from the hit point back toward the ray origin.
        material_id: Unified material id of the shape hit; -1 on a miss.
        shape_kind: ShapeKind of the shape hit; -1 on a miss.
        shape_index: Index of the shape within its arena; -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    to_viewer: vec3
    material_id: ti.i32
    shape_kind: ti.i32
    shape_index: ti.i32


# Maximum number of shapes of each kind
MAX_SPHERES = 1024
MAX_PLANES = 1024

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_shadow_casting = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_model_rotations = ti.Matrix.field(3, 3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_model_translations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_inverse_rotations = ti.Matrix.field(3, 3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_inverse_translations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage; a half extent is only enforced when its bounded flag is 1
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_half_extent_x = ti.field(dtype=ti.f32, shape=MAX_PLANES)
plane_half_extent_z = ti.field(dtype=ti.f32, shape=MAX_PLANES)
plane_bounded_x = ti.field(dtype=ti.i32, shape=MAX_PLANES)
plane_bounded_z = ti.field(dtype=ti.i32, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
plane_shadow_casting = ti.field(dtype=ti.i32, shape=MAX_PLANES)
plane_model_rotations = ti.Matrix.field(3, 3, dtype=ti.f32, shape=MAX_PLANES)
plane_model_translations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_inverse_rotations = ti.Matrix.field(3, 3, dtype=ti.f32, shape=MAX_PLANES)
plane_inverse_translations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all shapes.

    Resets the shape counts to zero. Field data is overwritten when new
    shapes are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0


def _write_isometry(
    model_rotations,
    model_translations,
    inverse_rotations,
    inverse_translations,
    idx: int,
    isometry: Isometry,
) -> None:
    """Store an isometry and its inverse at one arena slot."""
    inverse = isometry.inverse()
    model_rotations[idx] = isometry.rotation.tolist()
    model_translations[idx] = isometry.translation.tolist()
    inverse_rotations[idx] = inverse.rotation.tolist()
    inverse_translations[idx] = inverse.translation.tolist()


def add_sphere(
    center: Sequence[float],
    radius: float,
    material_id: int = 0,
    isometry: Optional[Isometry] = None,
    shadow_casting: bool = True,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The object-space center as (x, y, z).
        radius: The radius; must be positive.
        material_id: The unified material id of the sphere.
        isometry: Object-to-world transform; identity when omitted.
        shadow_casting: Whether the sphere blocks light in shadow tests.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is not positive.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius = {radius} must be positive")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    sphere_shadow_casting[idx] = 1 if shadow_casting else 0
    _write_isometry(
        sphere_model_rotations,
        sphere_model_translations,
        sphere_inverse_rotations,
        sphere_inverse_translations,
        idx,
        isometry if isometry is not None else Isometry.identity(),
    )
    num_spheres[None] = idx + 1
    return idx


def add_plane(
    normal: Sequence[float],
    center: Sequence[float],
    material_id: int = 0,
    half_extents: tuple[Optional[float], Optional[float]] = (None, None),
    isometry: Optional[Isometry] = None,
    shadow_casting: bool = True,
) -> int:
    """Add a one-sided plane to the scene.

    Args:
        normal: The object-space normal; normalized on insertion.
        center: The object-space center point.
        material_id: The unified material id of the plane.
        half_extents: Optional half extents along the local x and z axes.
            None leaves that axis unbounded.
        isometry: Object-to-world transform; identity when omitted.
        shadow_casting: Whether the plane blocks light in shadow tests.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
        ValueError: If the normal is zero or a half extent is negative.
    """
    n = np.asarray(normal, dtype=np.float64).reshape(3)
    length = float(np.linalg.norm(n))
    if length == 0.0:
        raise ValueError("Plane normal must be non-zero")
    n = n / length

    half_x, half_z = half_extents
    for name, value in (("x", half_x), ("z", half_z)):
        if value is not None and value < 0.0:
            raise ValueError(f"Plane half extent along {name} = {value} must be non-negative")

    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")

    plane_normals[idx] = n.tolist()
    plane_centers[idx] = [center[0], center[1], center[2]]
    plane_half_extent_x[idx] = 0.0 if half_x is None else half_x
    plane_half_extent_z[idx] = 0.0 if half_z is None else half_z
    plane_bounded_x[idx] = 0 if half_x is None else 1
    plane_bounded_z[idx] = 0 if half_z is None else 1
    plane_material_ids[idx] = material_id
    plane_shadow_casting[idx] = 1 if shadow_casting else 0
    _write_isometry(
        plane_model_rotations,
        plane_model_translations,
        plane_inverse_rotations,
        plane_inverse_translations,
        idx,
        isometry if isometry is not None else Isometry.identity(),
    )
    num_planes[None] = idx + 1
    return idx


def set_sphere_isometry(sphere_index: int, isometry: Isometry) -> None:
    """Replace a sphere's object-to-world transform (and its cached inverse).

    Raises:
        ValueError: If sphere_index does not name an existing sphere.
    """
    if not 0 <= sphere_index < num_spheres[None]:
        raise ValueError(f"Invalid sphere_index: {sphere_index}")
    _write_isometry(
        sphere_model_rotations,
        sphere_model_translations,
        sphere_inverse_rotations,
        sphere_inverse_translations,
        sphere_index,
        isometry,
    )
    logger.debug("sphere %d transform updated", sphere_index)


def set_plane_isometry(plane_index: int, isometry: Isometry) -> None:
    """Replace a plane's object-to-world transform (and its cached inverse).

    Raises:
        ValueError: If plane_index does not name an existing plane.
    """
    if not 0 <= plane_index < num_planes[None]:
        raise ValueError(f"Invalid plane_index: {plane_index}")
    _write_isometry(
        plane_model_rotations,
        plane_model_translations,
        plane_inverse_rotations,
        plane_inverse_translations,
        plane_index,
        isometry,
    )
    logger.debug("plane %d transform updated", plane_index)


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        to_viewer=vec3(0.0, 0.0, 0.0),
        material_id=-1,
        shape_kind=-1,
        shape_index=-1,
    )


@ti.func
def _to_scene_hit_record(
    rec: HitRecord, material_id: ti.i32, shape_kind: ti.i32, shape_index: ti.i32
) -> SceneHitRecord:
    """Attach material and shape identity to a world-space shape hit."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        to_viewer=rec.to_viewer,
        material_id=material_id,
        shape_kind=shape_kind,
        shape_index=shape_index,
    )


@ti.func
def nearest_hit(best: SceneHitRecord, candidate: SceneHitRecord) -> SceneHitRecord:
    """Fold a candidate into the best hit so far.

    The candidate replaces the best only when it is a hit and strictly
    closer, so on equal distances the earlier record is kept.
    """
    result = best
    if is_closer(candidate.hit, candidate.t, best.hit, best.t) == 1:
        result = candidate
    return result


@ti.func
def _hit_sphere_at(i: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    sphere = make_sphere(sphere_centers[i], sphere_radii[i])
    return hit_sphere(
        ray_origin,
        ray_direction,
        sphere,
        sphere_model_rotations[i],
        sphere_model_translations[i],
        sphere_inverse_rotations[i],
        sphere_inverse_translations[i],
    )


@ti.func
def _hit_plane_at(i: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    plane = Plane(
        normal=plane_normals[i],
        center=plane_centers[i],
        half_extent_x=plane_half_extent_x[i],
        half_extent_z=plane_half_extent_z[i],
        bounded_x=plane_bounded_x[i],
        bounded_z=plane_bounded_z[i],
    )
    return hit_plane(
        ray_origin,
        ray_direction,
        plane,
        plane_model_rotations[i],
        plane_model_translations[i],
        plane_inverse_rotations[i],
        plane_inverse_translations[i],
    )


@ti.func
def _cast(ray_origin: vec3, ray_direction: vec3, shadow_only: ti.i32) -> SceneHitRecord:
    """Nearest hit over all shapes, optionally restricted to shadow casters."""
    result = _make_miss_record()

    # Serial so the running best is never raced when called at kernel top level
    ti.loop_config(serialize=True)
    for i in range(num_spheres[None]):
        if shadow_only == 0 or sphere_shadow_casting[i] == 1:
            rec = _hit_sphere_at(i, ray_origin, ray_direction)
            candidate = _to_scene_hit_record(rec, sphere_material_ids[i], int(ShapeKind.SPHERE), i)
            result = nearest_hit(result, candidate)

    ti.loop_config(serialize=True)
    for i in range(num_planes[None]):
        if shadow_only == 0 or plane_shadow_casting[i] == 1:
            rec = _hit_plane_at(i, ray_origin, ray_direction)
            candidate = _to_scene_hit_record(rec, plane_material_ids[i], int(ShapeKind.PLANE), i)
            result = nearest_hit(result, candidate)

    return result


@ti.func
def cast_to_shapes(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Nearest hit over every shape in the scene, or a miss record.

    Args:
        ray_origin: World-space ray origin.
        ray_direction: World-space unit ray direction.

    Returns:
        The SceneHitRecord of the closest shape with a non-negative hit
        distance; hit == 0 when nothing is hit.
    """
    return _cast(ray_origin, ray_direction, 0)


@ti.func
def cast_to_shadow_casting_shapes(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Nearest hit restricted to shapes flagged as shadow casting."""
    return _cast(ray_origin, ray_direction, 1)


# =============================================================================
# Python-side query
# =============================================================================


@dataclass
class HitInfo:
    """Result of a Python-side nearest-hit query.

    Attributes:
        t: Distance along the ray.
        point: World-space hit point.
        normal: World-space unit normal.
        to_viewer: Unit vector back toward the ray origin.
        material_id: Unified material id of the shape hit.
        shape_kind: Arena the shape lives in.
        shape_index: Index of the shape within its arena.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    to_viewer: tuple[float, float, float]
    material_id: int
    shape_kind: ShapeKind
    shape_index: int


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_to_viewer = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())
_query_shape_kind = ti.field(dtype=ti.i32, shape=())
_query_shape_index = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _cast_ray_kernel(
    ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, shadow_only: ti.i32
):
    ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
    rec = _cast(ray.origin, ray.direction, shadow_only)
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_to_viewer[None] = rec.to_viewer
    _query_material_id[None] = rec.material_id
    _query_shape_kind[None] = rec.shape_kind
    _query_shape_index[None] = rec.shape_index


def _as_tuple(value) -> tuple[float, float, float]:
    return (float(value[0]), float(value[1]), float(value[2]))


def cast_ray(
    origin: Sequence[float], direction: Sequence[float], shadow_only: bool = False
) -> Optional[HitInfo]:
    """Find the nearest shape along a ray from Python.

    Args:
        origin: World-space ray origin as (x, y, z).
        direction: World-space ray direction; normalized before casting.
        shadow_only: Restrict the query to shadow-casting shapes.

    Returns:
        A HitInfo for the nearest hit, or None when the ray hits nothing.
    """
    _cast_ray_kernel(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        1 if shadow_only else 0,
    )
    if _query_hit[None] == 0:
        return None
    return HitInfo(
        t=float(_query_t[None]),
        point=_as_tuple(_query_point[None]),
        normal=_as_tuple(_query_normal[None]),
        to_viewer=_as_tuple(_query_to_viewer[None]),
        material_id=int(_query_material_id[None]),
        shape_kind=ShapeKind(int(_query_shape_kind[None])),
        shape_index=int(_query_shape_index[None]),
    )
