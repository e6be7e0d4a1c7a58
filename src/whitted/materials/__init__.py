"""Materials module for the Whitted shading model.

Components:
    material: Python-side tagged union (Phong | Reflection | Refraction)
    phong: Diffuse + specular local illumination (terminal)
    reflection: Mirror reflection blended with a base color
    refraction: Fresnel-weighted reflection + Snell refraction

Each kernel-side material module provides:
    - A field registry (add_*_material, clear_*_materials, get_*_count)
    - Taichi accessors for the variant's parameters
    - The lighting, blend or surface-side function used by the tracer

The scene manager assigns unified material ids on top of the per-type
registries, see src.whitted.scene.manager.
"""

from .material import Material, MaterialKind, MaterialType, Phong, Reflection, Refraction
from .phong import (
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    combine_phong,
    eval_phong_light,
    get_phong_material,
    get_phong_material_count,
)
from .reflection import (
    add_reflection_material,
    blend_reflection,
    clear_reflection_materials,
    get_reflection_material_count,
    get_reflectivity,
)
from .refraction import (
    AIR_REFRACTIVE_INDEX,
    add_refraction_material,
    clear_refraction_materials,
    get_refraction_material_count,
    get_refractive_index,
    refraction_setup,
)

__all__ = [
    # Python-side model
    "Material",
    "MaterialKind",
    "MaterialType",
    "Phong",
    "Reflection",
    "Refraction",
    # Phong
    "PhongMaterial",
    "eval_phong_light",
    "combine_phong",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material_count",
    "get_phong_material",
    # Reflection
    "blend_reflection",
    "add_reflection_material",
    "clear_reflection_materials",
    "get_reflection_material_count",
    "get_reflectivity",
    # Refraction
    "AIR_REFRACTIVE_INDEX",
    "refraction_setup",
    "add_refraction_material",
    "clear_refraction_materials",
    "get_refraction_material_count",
    "get_refractive_index",
]
