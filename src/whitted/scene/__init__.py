"""Scene module for shape storage, lights and scene management.

Components:
    intersection: Shape arenas and the nearest / shadow-casting ray queries
    lights: Point light storage
    manager: SceneManager with unified material ids and serialization
    demo_scene: Ready-made scene with spheres, a floor and two lights
"""

from .demo_scene import create_demo_scene
from .intersection import (
    HitInfo,
    SceneHitRecord,
    ShapeKind,
    cast_ray,
    cast_to_shadow_casting_shapes,
    cast_to_shapes,
    clear_scene,
    nearest_hit,
)
from .lights import PointLight, clear_lights
from .manager import MaterialInfo, PlaneInfo, SceneConfig, SceneManager, SphereInfo

__all__ = [
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "PointLight",
    "ShapeKind",
    "SceneHitRecord",
    "HitInfo",
    "cast_to_shapes",
    "cast_to_shadow_casting_shapes",
    "cast_ray",
    "nearest_hit",
    "clear_scene",
    "clear_lights",
    "create_demo_scene",
]
