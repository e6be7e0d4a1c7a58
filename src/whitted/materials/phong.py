"""Phong material: diffuse plus specular local illumination.

For one point light reaching a surface point, with the light's intensity at
the point already attenuated by the inverse-square law:

    diffuse  = light_color * albedo * intensity_at_point * max(0, n . l)
    specular = light_color * intensity_at_point * max(0, v . reflect(l, n))^specular_n

where n is the surface normal, l the unit vector toward the light and v the
unit vector toward the viewer. The tracer sums both terms over all visible
lights and weights them with k_diffuse and k_specular. Phong surfaces do not
spawn secondary rays.

Example:
    >>> # Use within a Taichi kernel:
    >>> # diffuse, specular = eval_phong_light(
    >>> #     normal, to_viewer, to_light, light_color, intensity, albedo, specular_n
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.optics import reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class PhongMaterial:
    """Phong material parameters.

    Attributes:
        k_diffuse: Weight of the diffuse term.
        k_specular: Weight of the specular term.
        specular_n: Specular exponent.
    """

    k_diffuse: ti.f32
    k_specular: ti.f32
    specular_n: ti.i32


@ti.func
def eval_phong_light(
    normal: vec3,
    to_viewer: vec3,
    to_light: vec3,
    light_color: vec3,
    intensity_at_point: ti.f32,
    albedo: ti.f32,
    specular_n: ti.i32,
):
    """Evaluate the unshadowed diffuse and specular terms of one light.

    Args:
        normal: Unit surface normal.
        to_viewer: Unit vector from the surface toward the viewer.
        to_light: Unit vector from the surface toward the light.
        light_color: RGB color of the light.
        intensity_at_point: Light intensity after distance falloff.
        albedo: Diffuse reflectance of the surface.
        specular_n: Specular exponent.

    Returns:
        A tuple of (diffuse, specular) RGB contributions.
    """
    facing_ratio = tm.max(0.0, tm.dot(normal, to_light))
    diffuse = light_color * (albedo * intensity_at_point * facing_ratio)

    reflected_light = reflect(to_light, normal)
    highlight = tm.max(0.0, tm.dot(to_viewer, reflected_light))
    specular = light_color * (intensity_at_point * highlight ** ti.cast(specular_n, ti.f32))
    return diffuse, specular


@ti.func
def combine_phong(diffuse: vec3, specular: vec3, k_diffuse: ti.f32, k_specular: ti.f32) -> vec3:
    """Weight summed diffuse and specular lighting into the surface color."""
    return diffuse * k_diffuse + specular * k_specular


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Phong materials in the scene
MAX_PHONG_MATERIALS = 256

# Storage for Phong material properties
phong_k_diffuse = ti.field(dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_k_specular = ti.field(dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_specular_n = ti.field(dtype=ti.i32, shape=MAX_PHONG_MATERIALS)
num_phong_materials = ti.field(dtype=ti.i32, shape=())


def clear_phong_materials() -> None:
    """Clear all Phong materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_phong_materials[None] = 0


def add_phong_material(k_diffuse: float, k_specular: float, specular_n: int) -> int:
    """Add a Phong material to the material registry.

    Args:
        k_diffuse: Weight of the diffuse term (>= 0).
        k_specular: Weight of the specular term (>= 0).
        specular_n: Specular exponent (>= 0).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If a weight or the exponent is negative.
    """
    if k_diffuse < 0.0 or k_specular < 0.0:
        raise ValueError(
            f"Phong weights must be non-negative, got k_diffuse={k_diffuse}, k_specular={k_specular}"
        )
    if specular_n < 0:
        raise ValueError(f"specular_n = {specular_n} must be non-negative")

    idx = num_phong_materials[None]
    if idx >= MAX_PHONG_MATERIALS:
        raise RuntimeError(f"Maximum number of Phong materials ({MAX_PHONG_MATERIALS}) exceeded")

    phong_k_diffuse[idx] = k_diffuse
    phong_k_specular[idx] = k_specular
    phong_specular_n[idx] = specular_n
    num_phong_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of Phong materials in the registry."""
    return int(num_phong_materials[None])


@ti.func
def get_phong_material(material_idx: ti.i32) -> PhongMaterial:
    """Get the Phong parameters for a material by registry index."""
    return PhongMaterial(
        k_diffuse=phong_k_diffuse[material_idx],
        k_specular=phong_k_specular[material_idx],
        specular_n=phong_specular_n[material_idx],
    )
