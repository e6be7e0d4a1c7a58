"""Core tracing module.

Components:
    ray: Ray data structure and secondary-ray origin biasing
    optics: reflect, refract and fresnel
    config: ShadingConfig (background, max depth, bias) and its fields
    whitted: Recursive Whitted shading and the public trace entry points

All per-ray computation runs in Taichi functions and kernels.
"""

from .config import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_BIAS,
    DEFAULT_MAX_DEPTH,
    MAX_DEPTH_LIMIT,
    ShadingConfig,
    apply_shading_config,
    get_shading_config,
)
from .optics import fresnel, reflect, refract
from .ray import Ray, make_ray, offset_ray_origin, vec3

# Note: whitted is NOT imported here to avoid circular imports with the scene
# package. Import it directly from src.whitted.core.whitted.

__all__ = [
    "Ray",
    "make_ray",
    "offset_ray_origin",
    "vec3",
    "reflect",
    "refract",
    "fresnel",
    "ShadingConfig",
    "apply_shading_config",
    "get_shading_config",
    "MAX_DEPTH_LIMIT",
    "DEFAULT_BACKGROUND_COLOR",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_BIAS",
]
