"""Reflection (mirror) material.

A reflective surface shows the radiance arriving along the mirror-reflected
ray, blended with its own base color:

    color = reflected * reflectivity + base_color * (1 - reflectivity)

A reflectivity of 1 is a perfect mirror; 0 shows only the base color.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def blend_reflection(reflected: vec3, base_color: vec3, reflectivity: ti.f32) -> vec3:
    """Blend reflected radiance with the surface base color."""
    return reflected * reflectivity + base_color * (1.0 - reflectivity)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of reflection materials in the scene
MAX_REFLECTION_MATERIALS = 256

# Storage for reflection material properties
reflection_reflectivities = ti.field(dtype=ti.f32, shape=MAX_REFLECTION_MATERIALS)
num_reflection_materials = ti.field(dtype=ti.i32, shape=())


def clear_reflection_materials() -> None:
    """Clear all reflection materials."""
    num_reflection_materials[None] = 0


def add_reflection_material(reflectivity: float = 1.0) -> int:
    """Add a reflection material to the material registry.

    Args:
        reflectivity: Weight of the reflected radiance, in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If reflectivity is outside [0, 1].
    """
    if reflectivity < 0.0 or reflectivity > 1.0:
        raise ValueError(f"reflectivity = {reflectivity} is outside [0, 1]")

    idx = num_reflection_materials[None]
    if idx >= MAX_REFLECTION_MATERIALS:
        raise RuntimeError(
            f"Maximum number of reflection materials ({MAX_REFLECTION_MATERIALS}) exceeded"
        )

    reflection_reflectivities[idx] = reflectivity
    num_reflection_materials[None] = idx + 1
    return idx


def get_reflection_material_count() -> int:
    """Get the number of reflection materials in the registry."""
    return int(num_reflection_materials[None])


@ti.func
def get_reflectivity(material_idx: ti.i32) -> ti.f32:
    """Get the reflectivity for a reflection material by registry index."""
    return reflection_reflectivities[material_idx]
