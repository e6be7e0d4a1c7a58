"""Material model: a tagged union of Phong, Reflection and Refraction.

On the Python side a material is a frozen Material whose `kind` is exactly
one of the Phong, Reflection or Refraction dataclasses, so the parameters of
a variant only exist on that variant. Kernels see the same union as a
MaterialType tag plus an index into the per-type registry, and only read
the registry that matches the tag.

Every material also carries a base color and a diffuse albedo. The albedo
scales Phong diffuse lighting; the color is what a partially reflective
surface shows for the non-reflected fraction.

Example:
    >>> glass = Material(kind=Refraction(refractive_index=1.5))
    >>> glass.material_type
    <MaterialType.REFRACTION: 2>
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class MaterialType(IntEnum):
    """Enumeration of supported material variants.

    Used for material dispatch in the tracer to decide which shading branch
    runs for a hit.
    """

    PHONG = 0
    REFLECTION = 1
    REFRACTION = 2


def _validate_color(name: str, color: tuple[float, float, float]) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {color}")
    for i, c in enumerate(color):
        if c < 0.0 or c > 1.0:
            raise ValueError(
                f"{name} component {i} = {c} is outside [0, 1]. "
                "Colors must be in [0, 1] range."
            )


@dataclass(frozen=True)
class Phong:
    """Local illumination: diffuse plus specular highlight. Terminal.

    Attributes:
        k_diffuse: Weight of the summed diffuse lighting.
        k_specular: Weight of the summed specular lighting.
        specular_n: Specular exponent (shininess), >= 0.
    """

    k_diffuse: float = 1.0
    k_specular: float = 0.0
    specular_n: int = 1

    def __post_init__(self) -> None:
        if self.k_diffuse < 0.0 or self.k_specular < 0.0:
            raise ValueError(
                f"Phong weights must be non-negative, got k_diffuse={self.k_diffuse}, "
                f"k_specular={self.k_specular}"
            )
        if self.specular_n < 0:
            raise ValueError(f"specular_n = {self.specular_n} must be non-negative")


@dataclass(frozen=True)
class Reflection:
    """Mirror reflection blended with the base color.

    Attributes:
        reflectivity: Fraction of the reflected radiance in [0, 1]; the rest
            is the material's base color.
    """

    reflectivity: float = 1.0

    def __post_init__(self) -> None:
        if self.reflectivity < 0.0 or self.reflectivity > 1.0:
            raise ValueError(f"reflectivity = {self.reflectivity} is outside [0, 1]")


@dataclass(frozen=True)
class Refraction:
    """Transparent dielectric: Fresnel blend of reflection and refraction.

    Attributes:
        refractive_index: Index of refraction relative to the surrounding
            medium (air = 1.0). Common values: water 1.33, glass 1.5.
    """

    refractive_index: float = 1.5

    def __post_init__(self) -> None:
        if self.refractive_index <= 0.0:
            raise ValueError(f"refractive_index = {self.refractive_index} must be positive")


MaterialKind = Union[Phong, Reflection, Refraction]


@dataclass(frozen=True)
class Material:
    """A surface material: one variant plus shared color/albedo.

    Attributes:
        kind: Exactly one of Phong, Reflection or Refraction.
        color: Base RGB color in [0, 1].
        albedo: Diffuse reflectance used by Phong lighting.
    """

    kind: MaterialKind
    color: tuple[float, float, float] = (0.0, 0.0, 0.0)
    albedo: float = 1.0

    def __post_init__(self) -> None:
        if not isinstance(self.kind, (Phong, Reflection, Refraction)):
            raise ValueError(f"Unknown material kind: {self.kind!r}")
        _validate_color("color", self.color)
        if self.albedo < 0.0:
            raise ValueError(f"albedo = {self.albedo} must be non-negative")

    @property
    def material_type(self) -> MaterialType:
        """The tag of this material's variant."""
        if isinstance(self.kind, Phong):
            return MaterialType.PHONG
        if isinstance(self.kind, Reflection):
            return MaterialType.REFLECTION
        return MaterialType.REFRACTION

    def to_dict(self) -> dict:
        """Flatten to a serializable dictionary with a "type" key."""
        data: dict = {
            "type": self.material_type.name.lower(),
            "color": list(self.color),
            "albedo": self.albedo,
        }
        if isinstance(self.kind, Phong):
            data.update(
                k_diffuse=self.kind.k_diffuse,
                k_specular=self.kind.k_specular,
                specular_n=self.kind.specular_n,
            )
        elif isinstance(self.kind, Reflection):
            data.update(reflectivity=self.kind.reflectivity)
        else:
            data.update(refractive_index=self.kind.refractive_index)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Material":
        """Build a material from a dictionary produced by to_dict().

        Raises:
            ValueError: If the type is unknown or a parameter is invalid.
        """
        mat_type = data.get("type", "").lower()
        kind: MaterialKind
        if mat_type == "phong":
            kind = Phong(
                k_diffuse=data.get("k_diffuse", 1.0),
                k_specular=data.get("k_specular", 0.0),
                specular_n=data.get("specular_n", 1),
            )
        elif mat_type == "reflection":
            kind = Reflection(reflectivity=data.get("reflectivity", 1.0))
        elif mat_type == "refraction":
            kind = Refraction(refractive_index=data.get("refractive_index", 1.5))
        else:
            raise ValueError(f"Unknown material type: {mat_type}")

        color_list = data.get("color", [0.0, 0.0, 0.0])
        color: tuple[float, float, float] = (color_list[0], color_list[1], color_list[2])
        return cls(kind=kind, color=color, albedo=data.get("albedo", 1.0))
