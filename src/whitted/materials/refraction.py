"""Refraction (transparent dielectric) material.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Fresnel equations split energy into reflected (kr) and transmitted (kt)
    - Total internal reflection when sin(theta_t) > 1

Unlike a path tracer, the Whitted tracer follows BOTH the reflected and the
refracted ray and blends them:

    color = refracted * kt + reflected * kr

Surface side is decided from the outward normal n and the incident
direction d: the ray is outside when dot(n, d) < 0. Outside, the ray goes
from air (1.0) into the material; inside, from the material back to air
and the normal is flipped so that it faces the incident ray.

Example:
    >>> # Use within a Taichi kernel:
    >>> # n_i, n_t, facing_normal, outside = refraction_setup(normal, direction, ior)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Refractive index of the medium surrounding every shape
AIR_REFRACTIVE_INDEX = 1.0


@ti.func
def refraction_setup(normal: vec3, incident_direction: vec3, refractive_index: ti.f32):
    """Pick index ordering and normal orientation for the side a ray arrives from.

    Args:
        normal: The outward unit surface normal.
        incident_direction: The unit direction of the arriving ray.
        refractive_index: The material's index of refraction.

    Returns:
        A tuple of (n_i, n_t, facing_normal, outside) where:
        - n_i: Index of the medium the ray travels in.
        - n_t: Index of the medium the ray would enter.
        - facing_normal: The normal oriented against the incident ray.
        - outside: 1 if the ray arrives from outside the surface.
    """
    n_i = AIR_REFRACTIVE_INDEX
    n_t = refractive_index
    facing_normal = normal
    outside = 1
    if tm.dot(normal, incident_direction) >= 0.0:
        n_i = refractive_index
        n_t = AIR_REFRACTIVE_INDEX
        facing_normal = -normal
        outside = 0
    return n_i, n_t, facing_normal, outside


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of refraction materials in the scene
MAX_REFRACTION_MATERIALS = 256

# Storage for refraction material properties
refraction_indices = ti.field(dtype=ti.f32, shape=MAX_REFRACTION_MATERIALS)
num_refraction_materials = ti.field(dtype=ti.i32, shape=())


def clear_refraction_materials() -> None:
    """Clear all refraction materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_refraction_materials[None] = 0


def add_refraction_material(refractive_index: float = 1.5) -> int:
    """Add a refraction material to the material registry.

    Args:
        refractive_index: Index of refraction relative to air. Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refractive index is not positive.
    """
    if refractive_index <= 0.0:
        raise ValueError(f"refractive_index = {refractive_index} must be positive")

    idx = num_refraction_materials[None]
    if idx >= MAX_REFRACTION_MATERIALS:
        raise RuntimeError(
            f"Maximum number of refraction materials ({MAX_REFRACTION_MATERIALS}) exceeded"
        )

    refraction_indices[idx] = refractive_index
    num_refraction_materials[None] = idx + 1
    return idx


def get_refraction_material_count() -> int:
    """Get the number of refraction materials in the registry."""
    return int(num_refraction_materials[None])


@ti.func
def get_refractive_index(material_idx: ti.i32) -> ti.f32:
    """Get the index of refraction for a refraction material by registry index."""
    return refraction_indices[material_idx]
