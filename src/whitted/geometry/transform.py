"""Rigid transforms (isometries) between object space and world space.

Every shape keeps an object-to-world isometry and its inverse. The Python
side builds them with NumPy and SciPy rotations; kernels apply them with
the Taichi functions below using a (rotation, translation) pair stored in
fields.

An isometry maps a point p to R @ p + t and a direction v to R @ v. The
translation never applies to direction-like quantities (normals, ray
directions, viewer vectors).

Example:
    >>> iso = Isometry.from_translation_rotation((1.0, 0.0, 0.0), (0.0, np.pi / 2, 0.0))
    >>> np.allclose(iso.transform_point((0.0, 0.0, 1.0)), (2.0, 0.0, 0.0))
    True
"""

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm
from scipy.spatial.transform import Rotation as R

# Type aliases for kernel-side math
vec3 = tm.vec3
mat3 = tm.mat3


def rotation_from_scaled_axis(scaled_axis: Sequence[float]) -> np.ndarray:
    """Build a rotation matrix from a scaled-axis (rotation vector).

    The direction of the vector is the rotation axis and its norm is the
    angle in radians. A zero vector gives the identity.

    Args:
        scaled_axis: The rotation vector as (x, y, z).

    Returns:
        A 3x3 float64 rotation matrix.
    """
    rotvec = np.asarray(scaled_axis, dtype=np.float64).reshape(3)
    return R.from_rotvec(rotvec).as_matrix()


@dataclass(frozen=True, eq=False)
class Isometry:
    """A rotation followed by a translation.

    Attributes:
        rotation: 3x3 orthonormal rotation matrix.
        translation: Translation vector of length 3.
    """

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @classmethod
    def identity(cls) -> "Isometry":
        """Return the identity transform."""
        return cls()

    @classmethod
    def from_translation_rotation(
        cls,
        translation: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> "Isometry":
        """Create an isometry from a translation and a scaled-axis rotation.

        Args:
            translation: Translation as (x, y, z).
            rotation: Rotation vector as (x, y, z); its norm is the angle in radians.

        Returns:
            The isometry p -> R(rotation) @ p + translation.
        """
        return cls(
            rotation=rotation_from_scaled_axis(rotation),
            translation=np.asarray(translation, dtype=np.float64).reshape(3),
        )

    def inverse(self) -> "Isometry":
        """Return the inverse isometry (R^T, -R^T t)."""
        r_t = self.rotation.T
        return Isometry(rotation=r_t, translation=-(r_t @ self.translation))

    def compose(self, other: "Isometry") -> "Isometry":
        """Return the isometry applying `other` first, then `self`."""
        return Isometry(
            rotation=self.rotation @ other.rotation,
            translation=self.rotation @ other.translation + self.translation,
        )

    def translated(self, delta: Sequence[float]) -> "Isometry":
        """Return this isometry followed by a world-space translation."""
        return Isometry.from_translation_rotation(delta).compose(self)

    def transform_point(self, point: Sequence[float]) -> np.ndarray:
        """Apply rotation and translation to a point."""
        return self.rotation @ np.asarray(point, dtype=np.float64) + self.translation

    def transform_vector(self, vector: Sequence[float]) -> np.ndarray:
        """Apply only the rotation to a direction-like vector."""
        return self.rotation @ np.asarray(vector, dtype=np.float64)


# =============================================================================
# Kernel-side application
# =============================================================================


@ti.func
def iso_transform_point(rotation: mat3, translation: vec3, point: vec3) -> vec3:
    """Apply an isometry to a point (rotation then translation)."""
    return rotation @ point + translation


@ti.func
def iso_transform_vector(rotation: mat3, vector: vec3) -> vec3:
    """Apply an isometry to a direction. Translation is ignored."""
    return rotation @ vector
