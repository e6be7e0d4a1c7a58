"""Point light storage.

A point light has an origin, an RGB color and a scalar intensity. Its
intensity reaching a point at distance d falls off with the inverse square
law over the full sphere:

    intensity_at_point = intensity / (4 * pi * d^2)

Lights are stored in Taichi fields, in insertion order, and are read by the
Phong shading loop.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Attributes:
        origin: World-space position of the light.
        color: RGB color of the light; components must be non-negative.
        intensity: Scalar emitted intensity (non-negative).
    """

    origin: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    intensity: float = 1.0


# Maximum number of lights in the scene
MAX_LIGHTS = 64

light_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_point_light(
    origin: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
) -> int:
    """Add a point light.

    Args:
        origin: World-space position as (x, y, z).
        color: RGB color; each component must be >= 0.
        intensity: Emitted intensity; must be >= 0.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If the intensity or a color component is negative.
    """
    if intensity < 0.0:
        raise ValueError(f"Light intensity = {intensity} must be non-negative")
    if any(c < 0.0 for c in color):
        raise ValueError(f"Light color components must be non-negative, got {color}")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_origins[idx] = [origin[0], origin[1], origin[2]]
    light_colors[idx] = [color[0], color[1], color[2]]
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light_origin(light_idx: ti.i32) -> vec3:
    return light_origins[light_idx]


@ti.func
def get_light_color(light_idx: ti.i32) -> vec3:
    return light_colors[light_idx]


@ti.func
def get_light_intensity(light_idx: ti.i32) -> ti.f32:
    return light_intensities[light_idx]


@ti.func
def intensity_at_distance(intensity: ti.f32, distance_squared: ti.f32) -> ti.f32:
    """Inverse-square falloff of a point light over the full sphere."""
    return intensity / (4.0 * tm.pi * distance_squared)
