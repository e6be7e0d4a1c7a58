"""Recursive Whitted-style shading.

For a ray at recursion depth `depth` the color is defined as:

    depth > max_depth        -> black (no contribution)
    no hit                   -> background color
    Phong hit                -> sum over lights of the shadowed diffuse and
                                specular terms, weighted by k_d and k_s
    Reflection{r} hit        -> reflected * r + color * (1 - r)
    Refraction{ior} hit      -> refracted * kt + reflected * kr

where reflected/refracted are the colors of the secondary rays at depth+1.

Taichi functions cannot recurse, so get_color_at_ray() walks the recursion
tree depth-first with a fixed-size local stack of (ray, weight, depth)
entries. Every blend above is linear in its child colors, so each visited
node adds `weight * local term` to the result and pushes its children with
their weights multiplied by the blend factors. The stack size is bounded by
MAX_DEPTH_LIMIT because each level keeps at most one pending sibling.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.demo_scene import create_demo_scene
    >>> from src.whitted.core.whitted import trace_ray
    >>> scene = create_demo_scene()
    >>> r, g, b = trace_ray((0.0, 1.0, 0.0), (0.0, 0.0, -1.0))
"""

from typing import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.config import (
    MAX_DEPTH_LIMIT,
    get_background_color,
    get_bias,
    get_max_depth,
)
from src.whitted.core.optics import fresnel, reflect, refract
from src.whitted.core.ray import Ray, make_ray, offset_ray_origin
from src.whitted.materials.material import MaterialType
from src.whitted.materials.phong import combine_phong, eval_phong_light, get_phong_material
from src.whitted.materials.reflection import blend_reflection, get_reflectivity
from src.whitted.materials.refraction import get_refractive_index, refraction_setup
from src.whitted.scene.intersection import (
    SceneHitRecord,
    cast_to_shadow_casting_shapes,
    cast_to_shapes,
)
from src.whitted.scene.lights import (
    get_light_color,
    get_light_intensity,
    get_light_origin,
    intensity_at_distance,
    num_lights,
)
from src.whitted.scene.manager import (
    get_material_albedo,
    get_material_color,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Capacity of the per-ray stack of pending secondary rays
STACK_SIZE = MAX_DEPTH_LIMIT + 4


# =============================================================================
# Local Illumination
# =============================================================================


@ti.func
def get_lighting(rec: SceneHitRecord, specular_n: ti.i32, albedo: ti.f32, light_idx: ti.i32):
    """Diffuse and specular contribution of one point light at a hit.

    A shadow ray is cast from the hit point, pushed off the surface along
    the normal by the configured bias, toward the light. If a shadow-casting
    shape is hit strictly closer than the light, both terms are zero.

    Args:
        rec: The hit being shaded.
        specular_n: Specular exponent of the hit material.
        albedo: Diffuse reflectance of the hit material.
        light_idx: Index of the light.

    Returns:
        A tuple of (diffuse, specular) RGB contributions.
    """
    to_light_vec = get_light_origin(light_idx) - rec.point
    distance_squared = tm.dot(to_light_vec, to_light_vec)
    distance = tm.sqrt(distance_squared)
    to_light = to_light_vec / distance

    shadow_origin = rec.point + rec.normal * get_bias()
    shadow = cast_to_shadow_casting_shapes(shadow_origin, to_light)

    in_shadow = 0
    if shadow.hit == 1 and shadow.t < distance:
        in_shadow = 1

    diffuse = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)
    if in_shadow == 0:
        intensity = intensity_at_distance(get_light_intensity(light_idx), distance_squared)
        diffuse, specular = eval_phong_light(
            rec.normal,
            rec.to_viewer,
            to_light,
            get_light_color(light_idx),
            intensity,
            albedo,
            specular_n,
        )
    return diffuse, specular


@ti.func
def shade_phong(rec: SceneHitRecord) -> vec3:
    """Phong color of a hit: lighting summed over all lights, then weighted."""
    params = get_phong_material(get_material_type_index(rec.material_id))
    albedo = get_material_albedo(rec.material_id)

    diffuse = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)
    ti.loop_config(serialize=True)
    for light_idx in range(num_lights[None]):
        d, s = get_lighting(rec, params.specular_n, albedo, light_idx)
        diffuse += d
        specular += s

    return combine_phong(diffuse, specular, params.k_diffuse, params.k_specular)


# =============================================================================
# Secondary Rays
# =============================================================================


@ti.func
def get_reflected_ray(rec: SceneHitRecord) -> Ray:
    """Mirror the viewer direction about the normal.

    The origin is pushed off the surface on the side the reflected ray
    leaves toward, which is the outward side for hits taken from outside.
    """
    direction = tm.normalize(reflect(rec.to_viewer, rec.normal))
    return make_ray(offset_ray_origin(rec.point, rec.normal, direction, get_bias()), direction)


@ti.func
def get_refracted_ray(rec: SceneHitRecord, refractive_index: ti.f32):
    """Fresnel split and transmitted ray at a refractive hit.

    Under total internal reflection the reflected ray is returned with
    (kr, kt) = (1, 0).

    Args:
        rec: The hit on a refraction material.
        refractive_index: The material's index of refraction.

    Returns:
        A tuple of (kr, kt, ray).
    """
    incident = -rec.to_viewer
    n_i, n_t, facing_normal, _ = refraction_setup(rec.normal, incident, refractive_index)
    kr, kt = fresnel(incident, facing_normal, n_i, n_t)
    direction, ok = refract(incident, facing_normal, n_i, n_t)

    ray = get_reflected_ray(rec)
    if ok == 0:
        kr = 1.0
        kt = 0.0
    else:
        ray = make_ray(rec.point - facing_normal * get_bias(), direction)

    return kr, kt, ray


# =============================================================================
# Recursive Color Evaluation
# =============================================================================


@ti.func
def get_color_at_ray(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Whitted color seen along a ray.

    Args:
        origin: World-space ray origin.
        direction: World-space unit ray direction.
        depth: Recursion depth of this ray (0 for primary rays).

    Returns:
        The unclamped RGB color.
    """
    max_depth = get_max_depth()
    color = vec3(0.0, 0.0, 0.0)

    stack_ox = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_oy = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_oz = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_dx = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_dy = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_dz = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_weight = ti.Vector.zero(ti.f32, STACK_SIZE)
    stack_depth = ti.Vector.zero(ti.i32, STACK_SIZE)

    top = 0
    if depth <= max_depth:
        stack_ox[0] = origin.x
        stack_oy[0] = origin.y
        stack_oz[0] = origin.z
        stack_dx[0] = direction.x
        stack_dy[0] = direction.y
        stack_dz[0] = direction.z
        stack_weight[0] = 1.0
        stack_depth[0] = depth
        top = 1

    while top > 0:
        top -= 1
        ray = Ray(
            origin=vec3(stack_ox[top], stack_oy[top], stack_oz[top]),
            direction=vec3(stack_dx[top], stack_dy[top], stack_dz[top]),
        )
        weight = stack_weight[top]
        ray_depth = stack_depth[top]

        # Up to two secondary rays per node; zero weight means none
        child_origins = ti.Matrix.zero(ti.f32, 2, 3)
        child_directions = ti.Matrix.zero(ti.f32, 2, 3)
        child_weights = ti.Vector.zero(ti.f32, 2)

        rec = cast_to_shapes(ray.origin, ray.direction)
        if rec.hit == 0:
            color += weight * get_background_color()
        else:
            mat_type = get_material_type(rec.material_id)
            type_index = get_material_type_index(rec.material_id)

            if mat_type == int(MaterialType.PHONG):
                color += weight * shade_phong(rec)

            elif mat_type == int(MaterialType.REFLECTION):
                reflectivity = get_reflectivity(type_index)
                base = blend_reflection(
                    vec3(0.0, 0.0, 0.0), get_material_color(rec.material_id), reflectivity
                )
                color += weight * base
                reflected = get_reflected_ray(rec)
                for c in ti.static(range(3)):
                    child_origins[0, c] = reflected.origin[c]
                    child_directions[0, c] = reflected.direction[c]
                child_weights[0] = weight * reflectivity

            elif mat_type == int(MaterialType.REFRACTION):
                refractive_index = get_refractive_index(type_index)
                kr, kt, refracted = get_refracted_ray(rec, refractive_index)
                reflected = get_reflected_ray(rec)
                for c in ti.static(range(3)):
                    child_origins[0, c] = reflected.origin[c]
                    child_directions[0, c] = reflected.direction[c]
                    child_origins[1, c] = refracted.origin[c]
                    child_directions[1, c] = refracted.direction[c]
                child_weights[0] = weight * kr
                child_weights[1] = weight * kt

        # Children deeper than max_depth contribute nothing, so never push them
        if ray_depth + 1 <= max_depth:
            for k in ti.static(range(2)):
                if child_weights[k] > 0.0 and top < STACK_SIZE:
                    stack_ox[top] = child_origins[k, 0]
                    stack_oy[top] = child_origins[k, 1]
                    stack_oz[top] = child_origins[k, 2]
                    stack_dx[top] = child_directions[k, 0]
                    stack_dy[top] = child_directions[k, 1]
                    stack_dz[top] = child_directions[k, 2]
                    stack_weight[top] = child_weights[k]
                    stack_depth[top] = ray_depth + 1
                    top += 1

    return color


@ti.func
def _finalize_color(color: vec3) -> vec3:
    """Replace NaN/Inf components with zero and clamp to [0, 1]."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return tm.clamp(result, 0.0, 1.0)


# =============================================================================
# Tracing Kernels
# =============================================================================


@ti.kernel
def _trace_single_ray(
    ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, depth: ti.i32
) -> vec3:
    ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
    return _finalize_color(get_color_at_ray(ray.origin, ray.direction, depth))


@ti.kernel
def _trace_ray_batch(
    origins: ti.types.ndarray(dtype=ti.f32, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f32, ndim=2),
    colors: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    """Trace one ray per row; the outer loop is parallel over rays."""
    for i in range(origins.shape[0]):
        ray = make_ray(
            vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
        )
        color = _finalize_color(get_color_at_ray(ray.origin, ray.direction, 0))
        for c in ti.static(range(3)):
            colors[i, c] = color[c]


# =============================================================================
# Public Tracing API
# =============================================================================


def trace_ray(
    origin: Sequence[float], direction: Sequence[float], depth: int = 0
) -> tuple[float, float, float]:
    """Trace a single ray against the current scene.

    This is a Python-callable function for testing and probing. For whole
    images use trace_rays(), which processes all rays in parallel.

    Args:
        origin: World-space ray origin as (x, y, z).
        direction: Ray direction; normalized before tracing.
        depth: Recursion depth to start at.

    Returns:
        Tuple of (R, G, B) values in [0, 1].

    Raises:
        ValueError: If the direction is the zero vector or depth is negative.
    """
    if depth < 0:
        raise ValueError(f"Ray depth = {depth} must be non-negative")
    if float(np.linalg.norm(np.asarray(direction, dtype=np.float64))) == 0.0:
        raise ValueError("Ray direction must be non-zero")

    color = _trace_single_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def _as_ray_array(name: str, values) -> np.ndarray:
    array = np.ascontiguousarray(values, dtype=np.float32)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"{name} must have shape (N, 3), got {array.shape}")
    return array


def trace_rays(origins, directions) -> np.ndarray:
    """Trace a batch of primary rays in one parallel kernel.

    Args:
        origins: Array-like of shape (N, 3) with world-space origins.
        directions: Array-like of shape (N, 3) with ray directions.

    Returns:
        A float32 array of shape (N, 3) with colors in [0, 1].

    Raises:
        ValueError: If the inputs are not (N, 3) or their lengths differ.
    """
    origins_arr = _as_ray_array("origins", origins)
    directions_arr = _as_ray_array("directions", directions)
    if origins_arr.shape[0] != directions_arr.shape[0]:
        raise ValueError(
            f"Got {origins_arr.shape[0]} origins but {directions_arr.shape[0]} directions"
        )

    colors = np.zeros_like(origins_arr)
    if origins_arr.shape[0] > 0:
        _trace_ray_batch(origins_arr, directions_arr, colors)
    return colors
