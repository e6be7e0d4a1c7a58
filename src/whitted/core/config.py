"""Shading configuration for the Whitted tracer.

The background color, recursion depth bound and secondary-ray bias are
named settings passed in at scene construction rather than module
constants, so each scene (and each test) can choose its own. They are
uploaded into scalar Taichi fields that the shading functions read.

The tracer evaluates its recursion with a fixed-size stack, so max_depth is
capped at MAX_DEPTH_LIMIT.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Largest supported recursion depth (sizes the kernel-side ray stack)
MAX_DEPTH_LIMIT = 16

# Defaults
DEFAULT_BACKGROUND_COLOR = (59.0 / 255.0, 172.0 / 255.0, 214.0 / 255.0)
DEFAULT_MAX_DEPTH = 10
DEFAULT_BIAS = 1e-3


@dataclass(frozen=True)
class ShadingConfig:
    """Settings shared by every ray traced against a scene.

    Attributes:
        background_color: RGB color returned for rays that hit nothing.
        max_depth: Rays spawned deeper than this contribute nothing.
        bias: Distance secondary ray origins are pushed off the surface.
    """

    background_color: tuple[float, float, float] = DEFAULT_BACKGROUND_COLOR
    max_depth: int = DEFAULT_MAX_DEPTH
    bias: float = DEFAULT_BIAS

    def __post_init__(self) -> None:
        if len(self.background_color) != 3:
            raise ValueError(f"background_color must have 3 components, got {self.background_color}")
        if any(c < 0.0 for c in self.background_color):
            raise ValueError(f"background_color components must be >= 0, got {self.background_color}")
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth = {self.max_depth} must be in [0, {MAX_DEPTH_LIMIT}]")
        if self.bias <= 0.0:
            raise ValueError(f"bias = {self.bias} must be positive")


# =============================================================================
# Field Storage
# =============================================================================

_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())
_bias = ti.field(dtype=ti.f32, shape=())


def apply_shading_config(config: ShadingConfig) -> None:
    """Upload a shading configuration for use by the tracing kernels."""
    r, g, b = config.background_color
    _background_color[None] = [r, g, b]
    _max_depth[None] = config.max_depth
    _bias[None] = config.bias


def get_shading_config() -> ShadingConfig:
    """Read the active shading configuration back from the fields."""
    color = _background_color[None]
    return ShadingConfig(
        background_color=(float(color[0]), float(color[1]), float(color[2])),
        max_depth=int(_max_depth[None]),
        bias=float(_bias[None]),
    )


@ti.func
def get_background_color() -> vec3:
    """Background color for rays that escape the scene."""
    return _background_color[None]


@ti.func
def get_max_depth() -> ti.i32:
    """Deepest recursion level that still contributes radiance."""
    return _max_depth[None]


@ti.func
def get_bias() -> ti.f32:
    """Offset applied to secondary ray origins."""
    return _bias[None]
