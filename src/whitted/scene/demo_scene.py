"""Demo scene: three spheres over a shiny floor lit by two colored lights.

The scene consists of:
- A nearly clear refractive sphere (index 1.03) in front
- A large shiny Phong sphere in the back
- A small matte Phong sphere to the left
- A bounded shiny floor (12 x 10 half extents) at y = 0
- An orange point light up and to the left, and a cyan one above the back

The camera is expected at the origin looking down -Z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.demo_scene import create_demo_scene
    >>> scene = create_demo_scene()
    >>> scene.get_sphere_count(), scene.get_plane_count(), scene.get_light_count()
    (3, 1, 2)
"""

from dataclasses import dataclass
from typing import Optional

from src.whitted.core.config import ShadingConfig
from src.whitted.scene.manager import SceneManager

# =============================================================================
# Demo Scene Constants
# =============================================================================

GLASS_REFRACTIVE_INDEX = 1.03

# (specular_n, k_diffuse, k_specular)
SHINY_PHONG = (30, 0.7, 0.3)
MATTE_PHONG = (1, 1.0, 0.0)

FLOOR_HALF_EXTENTS = (12.0, 10.0)


@dataclass(frozen=True)
class DemoLight:
    origin: tuple[float, float, float]
    color: tuple[float, float, float]
    intensity: float


DEMO_LIGHTS = (
    DemoLight(origin=(-6.0, 10.0, 3.0), color=(200 / 255, 140 / 255, 0.0), intensity=1000.0),
    DemoLight(origin=(2.0, 10.0, -12.0), color=(0.0, 1.0, 1.0), intensity=500.0),
)


def create_demo_scene(config: Optional[ShadingConfig] = None) -> SceneManager:
    """Build the demo world.

    Args:
        config: Shading configuration; the default sky background, depth 10
            and bias 1e-3 when omitted.

    Returns:
        A SceneManager holding 3 spheres, 1 plane and 2 lights.
    """
    scene = SceneManager(config)

    specular_n, k_diffuse, k_specular = SHINY_PHONG
    shiny = scene.add_phong_material(
        k_diffuse=k_diffuse, k_specular=k_specular, specular_n=specular_n
    )
    specular_n, k_diffuse, k_specular = MATTE_PHONG
    matte = scene.add_phong_material(
        k_diffuse=k_diffuse, k_specular=k_specular, specular_n=specular_n
    )
    glass = scene.add_refraction_material(refractive_index=GLASS_REFRACTIVE_INDEX)

    scene.add_sphere(center=(0.6, 1.0, -6.0), radius=1.0, material_id=glass)
    scene.add_sphere(center=(3.0, 2.5, -12.0), radius=2.0, material_id=shiny)
    scene.add_sphere(center=(-1.0, 1.0, -6.5), radius=0.5, material_id=matte)

    scene.add_plane(
        normal=(0.0, 1.0, 0.0),
        center=(0.0, 0.0, -10.0),
        material_id=shiny,
        half_extents=FLOOR_HALF_EXTENTS,
    )

    for light in DEMO_LIGHTS:
        scene.add_point_light(origin=light.origin, color=light.color, intensity=light.intensity)

    return scene
