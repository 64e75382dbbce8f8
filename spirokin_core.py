from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
import math
from typing import List, Tuple

import numpy as np

from spirokin_curves import (
    DEFAULT_RESOLUTION,
    OUTLINE_STEP,
    ParametricCurve,
    circle_curve,
    ellipse_curve,
    invert,
    normalize,
    oblong_curve,
    sample_outline,
)
from spirokin_transform import Point, RigidTransform, rotation_between

ORIGIN: Point = (0.0, 0.0)
MAX_TURNS = 50


@dataclass(frozen=True)
class Gear:
    """
    A unit-speed closed curve plus an anchor point in the curve's own frame.

    For the rotating gear ``point`` is the pen hole. For the fixed gear it is
    only a nominal origin.
    """

    curve: ParametricCurve
    point: Point = ORIGIN

    def outline(self, step: float = OUTLINE_STEP) -> List[Point]:
        return sample_outline(self.curve, step)


def circle_gear(radius: float, point: Point = ORIGIN) -> Gear:
    """
    Circle gear, unit speed without any sampling.

    A negative radius traverses the circle clockwise, which is the orientation
    a rotating gear needs to roll on the outside of a counter-clockwise one.
    """
    return Gear(circle_curve(radius), point)


def ellipse_gear(
    axis_a: float,
    axis_b: float,
    point: Point = ORIGIN,
    *,
    resolution: int = DEFAULT_RESOLUTION,
) -> Gear:
    return Gear(normalize(resolution, ellipse_curve(axis_a, axis_b)), point)


def ellipse_gear_rev(
    axis_a: float,
    axis_b: float,
    point: Point = ORIGIN,
    *,
    resolution: int = DEFAULT_RESOLUTION,
) -> Gear:
    """Clockwise ellipse gear, normalised on its own."""
    return Gear(normalize(resolution, ellipse_curve(axis_a, axis_b, reverse=True)), point)


def oblong_gear(radius: float, straight: float, point: Point = ORIGIN, *, reverse: bool = False) -> Gear:
    curve = oblong_curve(radius, straight)
    if reverse:
        curve = invert(curve)
    return Gear(curve, point)


@dataclass(frozen=True)
class Contact:
    fixed_point: Point
    fixed_tangent: Point
    rotating_point: Point
    rotating_tangent: Point


@dataclass(frozen=True)
class SpiroGraph:
    """
    A rotating gear rolling without slipping on a fixed gear.

    Both curves are unit speed, so the shared parameter ``t`` is the arc
    length travelled by each contact point; equal travel is the no-slip
    condition. Inner meshes pair two counter-clockwise curves, outer meshes
    pair a counter-clockwise fixed curve with a clockwise rotating one.
    """

    fixed_gear: Gear
    rotating_gear: Gear
    name: str = field(default="", compare=False)

    def contact(self, t: float) -> Contact:
        fixed = self.fixed_gear.curve
        rotating = self.rotating_gear.curve
        return Contact(fixed.point(t), fixed.tangent(t), rotating.point(t), rotating.tangent(t))

    def get_transform(self, t: float) -> RigidTransform:
        """
        Rigid motion taking the rotating gear's frame into the fixed frame at ``t``.

        The rotating gear is first turned so that its contact tangent points
        along the fixed contact tangent, then shifted so the contact points
        coincide.
        """
        c = self.contact(t)
        cos_a, sin_a = rotation_between(c.rotating_tangent, c.fixed_tangent)
        rotation = RigidTransform.from_rotation(cos_a, sin_a)
        qx, qy = rotation.apply(c.rotating_point)
        px, py = c.fixed_point
        return rotation.then(RigidTransform.translation(px - qx, py - qy))

    def get_transforms(self, ts) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Array version of :meth:`get_transform`: ``(cos_a, sin_a, dx, dy)``."""
        ts = np.atleast_1d(np.asarray(ts, dtype=np.float64))
        fixed = self.fixed_gear.curve
        rotating = self.rotating_gear.curve
        p = fixed.points(ts)
        v = fixed.tangents(ts)
        q = rotating.points(ts)
        w = rotating.tangents(ts)
        cos_a = w[:, 0] * v[:, 0] + w[:, 1] * v[:, 1]
        sin_a = w[:, 0] * v[:, 1] - w[:, 1] * v[:, 0]
        norm = np.hypot(cos_a, sin_a)
        degenerate = norm == 0.0
        norm[degenerate] = 1.0
        cos_a = np.where(degenerate, 1.0, cos_a / norm)
        sin_a = np.where(degenerate, 0.0, sin_a / norm)
        dx = p[:, 0] - (q[:, 0] * cos_a - q[:, 1] * sin_a)
        dy = p[:, 1] - (q[:, 0] * sin_a + q[:, 1] * cos_a)
        return cos_a, sin_a, dx, dy

    def pen_position(self, t: float) -> Point:
        return self.get_transform(t).apply(self.rotating_gear.point)

    def rotating_outline(self, t: float, step: float = OUTLINE_STEP) -> List[Point]:
        transform = self.get_transform(t)
        return [transform.apply(p) for p in self.rotating_gear.outline(step)]

    def fixed_turns(self, max_turns: int = MAX_TURNS) -> int:
        """Turns around the fixed gear before the pen trace closes on itself.

        The ratio of the two gear lengths is approximated by a fraction with
        denominator at most ``max_turns``. Circle meshes with small integer
        radii close exactly; measured ellipse lengths give an irrational ratio,
        so their trace closes only up to the approximation error and stops
        after at most ``max_turns`` turns.
        """
        if max_turns < 1:
            raise ValueError(f"max_turns must be at least 1, got {max_turns}")
        ratio = Fraction(self.fixed_gear.curve.length / self.rotating_gear.curve.length)
        return ratio.limit_denominator(max_turns).denominator

    def period(self, max_turns: int = MAX_TURNS) -> float:
        """Arc length after which the pen trace closes on itself."""
        return self.fixed_gear.curve.length * self.fixed_turns(max_turns)

    # -- constructors ------------------------------------------------------

    @classmethod
    def two_circles_outer(cls, r1: float, r2: float, pen: Point) -> "SpiroGraph":
        return cls(circle_gear(r1), circle_gear(-r2, pen), name="two_circles_outer")

    @classmethod
    def two_circles_inner(cls, r1: float, r2: float, pen: Point) -> "SpiroGraph":
        return cls(circle_gear(r1), circle_gear(r2, pen), name="two_circles_inner")

    @classmethod
    def circle_ellipse_outer(
        cls, r1: float, a: float, b: float, pen: Point, *, resolution: int = DEFAULT_RESOLUTION
    ) -> "SpiroGraph":
        return cls(
            circle_gear(r1),
            ellipse_gear_rev(a, b, pen, resolution=resolution),
            name="circle_ellipse_outer",
        )

    @classmethod
    def circle_ellipse_inner(
        cls, r1: float, a: float, b: float, pen: Point, *, resolution: int = DEFAULT_RESOLUTION
    ) -> "SpiroGraph":
        return cls(
            circle_gear(r1),
            ellipse_gear(a, b, pen, resolution=resolution),
            name="circle_ellipse_inner",
        )

    @classmethod
    def ellipse_circle_outer(
        cls, a: float, b: float, r2: float, pen: Point, *, resolution: int = DEFAULT_RESOLUTION
    ) -> "SpiroGraph":
        return cls(
            ellipse_gear(a, b, resolution=resolution),
            circle_gear(-r2, pen),
            name="ellipse_circle_outer",
        )

    @classmethod
    def ellipse_circle_inner(
        cls, a: float, b: float, r2: float, pen: Point, *, resolution: int = DEFAULT_RESOLUTION
    ) -> "SpiroGraph":
        # r2 must stay below min(a, b) ** 2 / max(a, b) or the circle leaves the ellipse
        return cls(
            ellipse_gear(a, b, resolution=resolution),
            circle_gear(r2, pen),
            name="ellipse_circle_inner",
        )

    @classmethod
    def oblong_circle_outer(cls, radius: float, straight: float, r2: float, pen: Point) -> "SpiroGraph":
        return cls(oblong_gear(radius, straight), circle_gear(-r2, pen), name="oblong_circle_outer")

    @classmethod
    def oblong_circle_inner(cls, radius: float, straight: float, r2: float, pen: Point) -> "SpiroGraph":
        return cls(oblong_gear(radius, straight), circle_gear(r2, pen), name="oblong_circle_inner")


def angle_between(u: Point, v: Point) -> float:
    """Signed angle in ``(-π, π]`` turning ``u`` onto ``v``."""
    cos_a, sin_a = rotation_between(u, v)
    return math.atan2(sin_a, cos_a)


__all__ = [
    "Contact",
    "Gear",
    "SpiroGraph",
    "angle_between",
    "circle_gear",
    "ellipse_gear",
    "ellipse_gear_rev",
    "oblong_gear",
    "MAX_TURNS",
]
