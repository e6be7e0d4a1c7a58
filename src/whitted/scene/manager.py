"""Unified scene manager for coordinating shapes, materials and lights.

This module provides the high-level scene building API. It assigns every
material a unified material id that maps to (MaterialType, type-local
index), so the tracer can dispatch to the right shading branch and then
read only that variant's registry.

The SceneManager maintains:
- A unified material_id space across Phong, Reflection and Refraction
- Per-material base color and albedo fields shared by all variants
- Shapes with their object-to-world transforms and shadow-casting flags
- Point lights and the active ShadingConfig
- Scene serialization to SceneConfig / plain dictionaries

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> matte = scene.add_phong_material(k_diffuse=1.0, k_specular=0.0, specular_n=1)
    >>> scene.add_sphere(center=(0, 0, 0), radius=1.0, material_id=matte)
    0
    >>> scene.add_point_light(origin=(0, 10, 0), color=(1, 1, 1), intensity=100.0)
    0
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import taichi as ti
import taichi.math as tm

from src.whitted.core.config import ShadingConfig, apply_shading_config
from src.whitted.geometry.transform import Isometry
from src.whitted.materials.material import (
    Material,
    MaterialType,
    Phong,
    Reflection,
    Refraction,
)
from src.whitted.materials.phong import add_phong_material, clear_phong_materials
from src.whitted.materials.reflection import (
    add_reflection_material,
    clear_reflection_materials,
)
from src.whitted.materials.refraction import (
    add_refraction_material,
    clear_refraction_materials,
)
from src.whitted.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    set_plane_isometry,
    set_sphere_isometry,
)
from src.whitted.scene.lights import MAX_LIGHTS, PointLight, add_point_light, clear_lights

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]

# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# Taichi fields for kernel-side material lookup
# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_albedos = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Used to look up parameters in the type-specific registries (e.g.
    reflection_reflectivities[type_index]).

    Returns:
        The index into the type-specific registry, or -1 for invalid IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def get_material_color(material_id: ti.i32) -> vec3:
    return material_colors[material_id]


@ti.func
def get_material_albedo(material_id: ti.i32) -> ti.f32:
    return material_albedos[material_id]


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material: The material as provided during creation.
        type_index: The index within the type-specific registry.
    """

    material_id: int
    material: Material
    type_index: int

    @property
    def material_type(self) -> MaterialType:
        return self.material.material_type


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere arena.
        center: The object-space center.
        radius: The radius.
        material_id: The material ID assigned to the sphere.
        translation: World-space translation of the object frame.
        rotation: Scaled-axis rotation of the object frame.
        shadow_casting: Whether the sphere blocks light.
    """

    sphere_index: int
    center: Vec3Tuple
    radius: float
    material_id: int
    translation: Vec3Tuple
    rotation: Vec3Tuple
    shadow_casting: bool

    @property
    def isometry(self) -> Isometry:
        return Isometry.from_translation_rotation(self.translation, self.rotation)


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        plane_index: The index in the plane arena.
        normal: The object-space normal.
        center: The object-space center.
        material_id: The material ID assigned to the plane.
        half_extents: Optional half extents along local x and z.
        translation: World-space translation of the object frame.
        rotation: Scaled-axis rotation of the object frame.
        shadow_casting: Whether the plane blocks light.
    """

    plane_index: int
    normal: Vec3Tuple
    center: Vec3Tuple
    material_id: int
    half_extents: tuple[Optional[float], Optional[float]]
    translation: Vec3Tuple
    rotation: Vec3Tuple
    shadow_casting: bool

    @property
    def isometry(self) -> Isometry:
        return Isometry.from_translation_rotation(self.translation, self.rotation)


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        planes: List of plane configurations.
        lights: List of point light configurations.
        shading: Shading settings (background_color, max_depth, bias).
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    shading: dict[str, Any] = field(default_factory=dict)


def _vec3(values: Any) -> Vec3Tuple:
    return (float(values[0]), float(values[1]), float(values[2]))


def _shading_to_dict(config: ShadingConfig) -> dict[str, Any]:
    return {
        "background_color": list(config.background_color),
        "max_depth": config.max_depth,
        "bias": config.bias,
    }


def _shading_from_dict(data: dict[str, Any]) -> ShadingConfig:
    defaults = ShadingConfig()
    return ShadingConfig(
        background_color=_vec3(data.get("background_color", defaults.background_color)),
        max_depth=int(data.get("max_depth", defaults.max_depth)),
        bias=float(data.get("bias", defaults.bias)),
    )


class SceneManager:
    """Unified scene manager coordinating shapes, materials and lights.

    Attributes:
        materials: MaterialInfo for all registered materials.
        spheres: SphereInfo for all spheres in the scene.
        planes: PlaneInfo for all planes in the scene.
        lights: All point lights in insertion order.

    Example:
        >>> scene = SceneManager(ShadingConfig(max_depth=5))
        >>> mirror = scene.add_reflection_material(reflectivity=0.9)
        >>> glass = scene.add_refraction_material(refractive_index=1.5)
        >>> scene.add_sphere((0, 0, -6), 1.0, glass)
        0
        >>> scene.add_plane((0, 1, 0), (0, -1, 0), mirror, half_extents=(5.0, 5.0))
        0
    """

    def __init__(self, config: Optional[ShadingConfig] = None) -> None:
        """Initialize an empty scene using the given shading configuration."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.lights: list[PointLight] = []
        self._clear_all()
        self._config = config if config is not None else ShadingConfig()
        apply_shading_config(self._config)

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lights()
        clear_phong_materials()
        clear_reflection_materials()
        clear_refraction_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear shapes, materials and lights. The shading config is kept."""
        self._clear_all()
        logger.debug("scene cleared")

    # =========================================================================
    # Shading Configuration
    # =========================================================================

    @property
    def config(self) -> ShadingConfig:
        """The active shading configuration."""
        return self._config

    def set_config(self, config: ShadingConfig) -> None:
        """Replace the shading configuration used by subsequent traces."""
        self._config = config
        apply_shading_config(config)
        logger.debug("shading config set: %s", config)

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Register a material and assign it a unified material ID.

        Args:
            material: The material to register.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        kind = material.kind
        if isinstance(kind, Phong):
            type_index = add_phong_material(kind.k_diffuse, kind.k_specular, kind.specular_n)
        elif isinstance(kind, Reflection):
            type_index = add_reflection_material(kind.reflectivity)
        else:
            type_index = add_refraction_material(kind.refractive_index)

        material_types[material_id] = int(material.material_type)
        material_type_indices[material_id] = type_index
        material_colors[material_id] = list(material.color)
        material_albedos[material_id] = material.albedo
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(material_id=material_id, material=material, type_index=type_index)
        )
        logger.debug("material %d added: %s", material_id, material)
        return material_id

    def add_phong_material(
        self,
        k_diffuse: float = 1.0,
        k_specular: float = 0.0,
        specular_n: int = 1,
        color: Vec3Tuple = (0.0, 0.0, 0.0),
        albedo: float = 1.0,
    ) -> int:
        """Add a Phong (diffuse + specular, terminal) material.

        Raises:
            ValueError: If a weight, the exponent or the albedo is negative.
        """
        kind = Phong(k_diffuse=k_diffuse, k_specular=k_specular, specular_n=specular_n)
        return self.add_material(Material(kind=kind, color=color, albedo=albedo))

    def add_reflection_material(
        self,
        reflectivity: float = 1.0,
        color: Vec3Tuple = (0.0, 0.0, 0.0),
        albedo: float = 1.0,
    ) -> int:
        """Add a mirror material blending the reflected ray with `color`.

        Raises:
            ValueError: If reflectivity is outside [0, 1].
        """
        kind = Reflection(reflectivity=reflectivity)
        return self.add_material(Material(kind=kind, color=color, albedo=albedo))

    def add_refraction_material(
        self,
        refractive_index: float = 1.5,
        color: Vec3Tuple = (0.0, 0.0, 0.0),
        albedo: float = 1.0,
    ) -> int:
        """Add a transparent material.

        Common values: Water=1.33, Glass=1.5, Diamond=2.4.

        Raises:
            ValueError: If the refractive index is not positive.
        """
        kind = Refraction(refractive_index=refractive_index)
        return self.add_material(Material(kind=kind, color=color, albedo=albedo))

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> Optional[MaterialInfo]:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> Material:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")
        return self.materials[material_id].material

    # =========================================================================
    # Shape Management
    # =========================================================================

    def add_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        material_id: int,
        translation: Vec3Tuple = (0.0, 0.0, 0.0),
        rotation: Vec3Tuple = (0.0, 0.0, 0.0),
        shadow_casting: Optional[bool] = None,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The object-space center as (x, y, z).
            radius: The radius (must be positive).
            material_id: The unified material ID to assign.
            translation: Translation of the object frame into the world.
            rotation: Scaled-axis rotation of the object frame.
            shadow_casting: Whether the sphere blocks light. Defaults to
                True, except for refraction materials.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id or the radius is invalid.
        """
        material = self._check_material_id(material_id)
        if shadow_casting is None:
            shadow_casting = material.material_type != MaterialType.REFRACTION

        info = SphereInfo(
            sphere_index=len(self.spheres),
            center=_vec3(center),
            radius=float(radius),
            material_id=material_id,
            translation=_vec3(translation),
            rotation=_vec3(rotation),
            shadow_casting=bool(shadow_casting),
        )
        info.sphere_index = add_sphere(
            info.center,
            info.radius,
            material_id,
            isometry=info.isometry,
            shadow_casting=info.shadow_casting,
        )
        self.spheres.append(info)
        logger.debug("sphere %d added with material %d", info.sphere_index, material_id)
        return info.sphere_index

    def add_plane(
        self,
        normal: Vec3Tuple,
        center: Vec3Tuple,
        material_id: int,
        half_extents: tuple[Optional[float], Optional[float]] = (None, None),
        translation: Vec3Tuple = (0.0, 0.0, 0.0),
        rotation: Vec3Tuple = (0.0, 0.0, 0.0),
        shadow_casting: Optional[bool] = None,
    ) -> int:
        """Add a one-sided plane to the scene.

        Args:
            normal: The object-space normal; only the side it points to is visible.
            center: The object-space center.
            material_id: The unified material ID to assign.
            half_extents: Optional half extents along the local x and z axes;
                None on an axis leaves it unbounded.
            translation: Translation of the object frame into the world.
            rotation: Scaled-axis rotation of the object frame.
            shadow_casting: Whether the plane blocks light. Defaults to
                True, except for refraction materials.

        Returns:
            The index of the added plane.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If material_id, the normal or an extent is invalid.
        """
        material = self._check_material_id(material_id)
        if shadow_casting is None:
            shadow_casting = material.material_type != MaterialType.REFRACTION

        half_x, half_z = half_extents
        info = PlaneInfo(
            plane_index=len(self.planes),
            normal=_vec3(normal),
            center=_vec3(center),
            material_id=material_id,
            half_extents=(
                None if half_x is None else float(half_x),
                None if half_z is None else float(half_z),
            ),
            translation=_vec3(translation),
            rotation=_vec3(rotation),
            shadow_casting=bool(shadow_casting),
        )
        info.plane_index = add_plane(
            info.normal,
            info.center,
            material_id,
            half_extents=info.half_extents,
            isometry=info.isometry,
            shadow_casting=info.shadow_casting,
        )
        self.planes.append(info)
        logger.debug("plane %d added with material %d", info.plane_index, material_id)
        return info.plane_index

    def move_sphere(self, sphere_index: int, delta: Vec3Tuple) -> None:
        """Translate a sphere rigidly by `delta` in world space.

        Raises:
            ValueError: If sphere_index is invalid.
        """
        if not 0 <= sphere_index < len(self.spheres):
            raise ValueError(f"Invalid sphere_index: {sphere_index}")
        info = self.spheres[sphere_index]
        moved = info.isometry.translated(delta)
        info.translation = _vec3(moved.translation)
        set_sphere_isometry(sphere_index, moved)

    def move_plane(self, plane_index: int, delta: Vec3Tuple) -> None:
        """Translate a plane rigidly by `delta` in world space.

        Raises:
            ValueError: If plane_index is invalid.
        """
        if not 0 <= plane_index < len(self.planes):
            raise ValueError(f"Invalid plane_index: {plane_index}")
        info = self.planes[plane_index]
        moved = info.isometry.translated(delta)
        info.translation = _vec3(moved.translation)
        set_plane_isometry(plane_index, moved)

    # =========================================================================
    # Lights
    # =========================================================================

    def add_point_light(
        self,
        origin: Vec3Tuple,
        color: Vec3Tuple = (1.0, 1.0, 1.0),
        intensity: float = 1.0,
    ) -> int:
        """Add a point light.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If the intensity or a color component is negative.
        """
        light = PointLight(origin=_vec3(origin), color=_vec3(color), intensity=float(intensity))
        idx = add_point_light(light.origin, light.color, light.intensity)
        self.lights.append(light)
        logger.debug("light %d added at %s", idx, light.origin)
        return idx

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_shape_count(self) -> int:
        """Get the total number of shapes in the scene."""
        return self.get_sphere_count() + self.get_plane_count()

    def get_light_count(self) -> int:
        """Get the number of point lights in the scene."""
        return len(self.lights)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig(shading=_shading_to_dict(self._config))

        for mat in self.materials:
            config.materials.append(mat.material.to_dict())

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                    "translation": list(sphere.translation),
                    "rotation": list(sphere.rotation),
                    "shadow_casting": sphere.shadow_casting,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "normal": list(plane.normal),
                    "center": list(plane.center),
                    "material_id": plane.material_id,
                    "half_extents": list(plane.half_extents),
                    "translation": list(plane.translation),
                    "rotation": list(plane.rotation),
                    "shadow_casting": plane.shadow_casting,
                }
            )

        for light in self.lights:
            config.lights.append(
                {
                    "origin": list(light.origin),
                    "color": list(light.color),
                    "intensity": light.intensity,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene (shapes, materials, lights) and loads the
        configuration. When the configuration carries shading settings they
        replace the active ShadingConfig.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        if config.shading:
            self.set_config(_shading_from_dict(config.shading))

        # Materials first (shapes reference them by id)
        for mat_config in config.materials:
            self.add_material(Material.from_dict(mat_config))

        for sphere_config in config.spheres:
            self.add_sphere(
                center=_vec3(sphere_config.get("center", [0.0, 0.0, 0.0])),
                radius=sphere_config.get("radius", 1.0),
                material_id=sphere_config.get("material_id", 0),
                translation=_vec3(sphere_config.get("translation", [0.0, 0.0, 0.0])),
                rotation=_vec3(sphere_config.get("rotation", [0.0, 0.0, 0.0])),
                shadow_casting=sphere_config.get("shadow_casting"),
            )

        for plane_config in config.planes:
            half_x, half_z = plane_config.get("half_extents", [None, None])
            self.add_plane(
                normal=_vec3(plane_config.get("normal", [0.0, 1.0, 0.0])),
                center=_vec3(plane_config.get("center", [0.0, 0.0, 0.0])),
                material_id=plane_config.get("material_id", 0),
                half_extents=(half_x, half_z),
                translation=_vec3(plane_config.get("translation", [0.0, 0.0, 0.0])),
                rotation=_vec3(plane_config.get("rotation", [0.0, 0.0, 0.0])),
                shadow_casting=plane_config.get("shadow_casting"),
            )

        for light_config in config.lights:
            self.add_point_light(
                origin=_vec3(light_config.get("origin", [0.0, 0.0, 0.0])),
                color=_vec3(light_config.get("color", [1.0, 1.0, 1.0])),
                intensity=light_config.get("intensity", 1.0),
            )

        logger.info(
            "loaded scene: %d materials, %d spheres, %d planes, %d lights",
            len(self.materials),
            len(self.spheres),
            len(self.planes),
            len(self.lights),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "planes": config.planes,
            "lights": config.lights,
            "shading": config.shading,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
            lights=data.get("lights", []),
            shading=data.get("shading", {}),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
