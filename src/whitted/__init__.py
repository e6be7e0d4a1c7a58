"""Whitted-style ray tracing core built on Taichi.

This package evaluates one color per world-space ray against a scene of
transformed primitives, with support for:
- Sphere and (optionally bounded) plane primitives in object space
- Phong local illumination with hard shadows from point lights
- Recursive mirror reflection and Fresnel-weighted refraction
- A depth bound that guarantees termination

Subpackages:
    core: Rays, optics functions, shading configuration and the tracer
    geometry: Rigid transforms, hit records and shape intersection
    materials: Phong, reflection and refraction material registries
    scene: Shape/light storage, scene queries and the scene manager
"""

__version__ = "0.1.0"
