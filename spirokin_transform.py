from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Tuple

Point = Tuple[float, float]


def _normalize(x: float, y: float) -> Tuple[float, float]:
    n = math.hypot(x, y)
    if n == 0:
        return (0.0, 0.0)
    return (x / n, y / n)


def _rotate(x: float, y: float, cos_a: float, sin_a: float) -> Tuple[float, float]:
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a)


def rotation_between(u: Point, v: Point) -> Tuple[float, float]:
    """
    Signed minimal rotation taking direction ``u`` onto direction ``v``.

    Returned as a ``(cos, sin)`` pair so that callers never go through an
    angle and never see the ±π wraparound. A zero vector on either side
    yields the identity rotation.
    """
    ux, uy = _normalize(*u)
    vx, vy = _normalize(*v)
    if (ux, uy) == (0.0, 0.0) or (vx, vy) == (0.0, 0.0):
        return 1.0, 0.0
    cos_a = ux * vx + uy * vy
    sin_a = ux * vy - uy * vx
    # renormalise against rounding drift
    n = math.hypot(cos_a, sin_a)
    return cos_a / n, sin_a / n


@dataclass(frozen=True)
class RigidTransform:
    """Rotation about the origin followed by a translation."""

    cos_a: float = 1.0
    sin_a: float = 0.0
    dx: float = 0.0
    dy: float = 0.0

    @classmethod
    def identity(cls) -> "RigidTransform":
        return cls()

    @classmethod
    def rotation(cls, angle: float) -> "RigidTransform":
        return cls(math.cos(angle), math.sin(angle), 0.0, 0.0)

    @classmethod
    def from_rotation(cls, cos_a: float, sin_a: float) -> "RigidTransform":
        return cls(cos_a, sin_a, 0.0, 0.0)

    @classmethod
    def translation(cls, dx: float, dy: float) -> "RigidTransform":
        return cls(1.0, 0.0, dx, dy)

    @property
    def angle(self) -> float:
        return math.atan2(self.sin_a, self.cos_a)

    @property
    def offset(self) -> Point:
        return (self.dx, self.dy)

    def apply(self, point: Point) -> Point:
        x, y = _rotate(point[0], point[1], self.cos_a, self.sin_a)
        return (x + self.dx, y + self.dy)

    def apply_vector(self, vector: Point) -> Point:
        return _rotate(vector[0], vector[1], self.cos_a, self.sin_a)

    def then(self, other: "RigidTransform") -> "RigidTransform":
        """Composition applying ``self`` first, then ``other``."""
        cos_a = other.cos_a * self.cos_a - other.sin_a * self.sin_a
        sin_a = other.sin_a * self.cos_a + other.cos_a * self.sin_a
        dx, dy = other.apply((self.dx, self.dy))
        return RigidTransform(cos_a, sin_a, dx, dy)

    def inverse(self) -> "RigidTransform":
        cos_a, sin_a = self.cos_a, -self.sin_a
        dx, dy = _rotate(-self.dx, -self.dy, cos_a, sin_a)
        return RigidTransform(cos_a, sin_a, dx, dy)


__all__ = [
    "Point",
    "RigidTransform",
    "rotation_between",
]
