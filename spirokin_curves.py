from __future__ import annotations

from bisect import bisect_left
from functools import reduce
import logging
import math
from typing import List

import numpy as np

from spirokin_transform import Point, _normalize

_LOGGER = logging.getLogger(__name__)

DEFAULT_RESOLUTION = 10_000
OUTLINE_STEP = 5.0


class CurveError(ValueError):
    pass


def _check_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise CurveError(f"{name} must be finite, got {value!r}")
    return value


def _as_parameters(ts) -> np.ndarray:
    return np.atleast_1d(np.asarray(ts, dtype=np.float64))


def _unit_rows(vectors: np.ndarray) -> np.ndarray:
    norms = np.hypot(vectors[:, 0], vectors[:, 1])
    safe = np.where(norms == 0.0, 1.0, norms)
    out = vectors / safe[:, None]
    out[norms == 0.0] = 0.0
    return out


class ParametricCurve:
    """
    Closed curve over the parameter domain ``[0, length)``.

    ``point`` and ``tangent`` accept any real parameter and extend the curve
    periodically. ``points`` and ``tangents`` are the array versions and
    return ``(n, 2)`` arrays. Instances are never mutated once built.
    """

    def __init__(self, length: float) -> None:
        length = _check_finite("Curve length", length)
        if length <= 0.0:
            raise CurveError(f"Curve length must be positive, got {length!r}")
        self.length = length

    def point(self, t: float) -> Point:
        raise NotImplementedError

    def tangent(self, t: float) -> Point:
        raise NotImplementedError

    def points(self, ts) -> np.ndarray:
        return np.array([self.point(t) for t in _as_parameters(ts)], dtype=np.float64).reshape(-1, 2)

    def tangents(self, ts) -> np.ndarray:
        return np.array([self.tangent(t) for t in _as_parameters(ts)], dtype=np.float64).reshape(-1, 2)


class CircleCurve(ParametricCurve):
    """Circle centred on the origin, exactly unit speed.

    A negative radius walks the circle clockwise, starting from ``(radius, 0)``.
    """

    def __init__(self, radius: float) -> None:
        radius = _check_finite("Circle radius", radius)
        if radius == 0.0:
            raise CurveError("Circle radius must be non-zero")
        self.radius = radius
        super().__init__(2.0 * math.pi * abs(radius))

    def point(self, t: float) -> Point:
        theta = t / self.radius
        return (self.radius * math.cos(theta), self.radius * math.sin(theta))

    def tangent(self, t: float) -> Point:
        theta = t / self.radius
        return (-math.sin(theta), math.cos(theta))

    def points(self, ts) -> np.ndarray:
        theta = _as_parameters(ts) / self.radius
        return np.column_stack((self.radius * np.cos(theta), self.radius * np.sin(theta)))

    def tangents(self, ts) -> np.ndarray:
        theta = _as_parameters(ts) / self.radius
        return np.column_stack((-np.sin(theta), np.cos(theta)))


class EllipseCurve(ParametricCurve):
    """``(a cos t, b sin t)`` over ``[0, 2π)``; not unit speed."""

    def __init__(self, axis_a: float, axis_b: float, direction: int = 1) -> None:
        self.axis_a = _check_finite("Ellipse semi-axis", axis_a)
        self.axis_b = _check_finite("Ellipse semi-axis", axis_b)
        if self.axis_a == 0.0 or self.axis_b == 0.0:
            raise CurveError("Ellipse semi-axes must be non-zero")
        self.direction = 1 if direction >= 0 else -1
        super().__init__(2.0 * math.pi)

    def point(self, t: float) -> Point:
        s = self.direction * t
        return (self.axis_a * math.cos(s), self.axis_b * math.sin(s))

    def tangent(self, t: float) -> Point:
        s = self.direction * t
        return (
            -self.direction * self.axis_a * math.sin(s),
            self.direction * self.axis_b * math.cos(s),
        )

    def points(self, ts) -> np.ndarray:
        s = self.direction * _as_parameters(ts)
        return np.column_stack((self.axis_a * np.cos(s), self.axis_b * np.sin(s)))

    def tangents(self, ts) -> np.ndarray:
        s = self.direction * _as_parameters(ts)
        return np.column_stack(
            (
                -self.direction * self.axis_a * np.sin(s),
                self.direction * self.axis_b * np.cos(s),
            )
        )


class LineCurve(ParametricCurve):
    def __init__(self, start: Point, end: Point) -> None:
        self.start = (_check_finite("Line start", start[0]), _check_finite("Line start", start[1]))
        self.end = (_check_finite("Line end", end[0]), _check_finite("Line end", end[1]))
        self.direction = _normalize(self.end[0] - self.start[0], self.end[1] - self.start[1])
        super().__init__(math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1]))

    def point(self, t: float) -> Point:
        s = t % self.length
        return (self.start[0] + self.direction[0] * s, self.start[1] + self.direction[1] * s)

    def tangent(self, t: float) -> Point:
        return self.direction

    def points(self, ts) -> np.ndarray:
        s = _as_parameters(ts) % self.length
        return np.column_stack(
            (self.start[0] + self.direction[0] * s, self.start[1] + self.direction[1] * s)
        )

    def tangents(self, ts) -> np.ndarray:
        n = _as_parameters(ts).shape[0]
        return np.tile(np.asarray(self.direction, dtype=np.float64), (n, 1))


class ArcCurve(ParametricCurve):
    """Unit-speed circular arc; the sign of ``sweep`` gives the direction."""

    def __init__(self, center: Point, radius: float, angle_start: float, sweep: float) -> None:
        self.center = (_check_finite("Arc center", center[0]), _check_finite("Arc center", center[1]))
        self.radius = _check_finite("Arc radius", radius)
        self.angle_start = _check_finite("Arc start angle", angle_start)
        self.sweep = _check_finite("Arc sweep", sweep)
        if self.radius <= 0.0 or self.sweep == 0.0:
            raise CurveError("Arc needs a positive radius and a non-zero sweep")
        self.sign = 1.0 if self.sweep > 0 else -1.0
        super().__init__(self.radius * abs(self.sweep))

    def _angle(self, t):
        return self.angle_start + self.sign * (t % self.length) / self.radius

    def point(self, t: float) -> Point:
        angle = self._angle(t)
        return (
            self.center[0] + self.radius * math.cos(angle),
            self.center[1] + self.radius * math.sin(angle),
        )

    def tangent(self, t: float) -> Point:
        angle = self._angle(t)
        return (-self.sign * math.sin(angle), self.sign * math.cos(angle))

    def points(self, ts) -> np.ndarray:
        angle = self._angle(_as_parameters(ts))
        return np.column_stack(
            (
                self.center[0] + self.radius * np.cos(angle),
                self.center[1] + self.radius * np.sin(angle),
            )
        )

    def tangents(self, ts) -> np.ndarray:
        angle = self._angle(_as_parameters(ts))
        return np.column_stack((-self.sign * np.sin(angle), self.sign * np.cos(angle)))


class NormalizedCurve(ParametricCurve):
    """
    Arc-length reparametrisation of ``base`` through a sampled length table.

    The base domain is cut into ``resolution`` equal steps and the polyline
    length up to each sample is stored in ``cum_len``. Evaluating at arc
    length ``l`` finds the first sample whose cumulative length reaches ``l``
    and evaluates ``base`` at that sample's parameter. There is no
    interpolation inside a step, so positions are quantised to the sample
    grid; raise ``resolution`` for finer results.
    """

    def __init__(self, base: ParametricCurve, resolution: int) -> None:
        try:
            count = int(resolution)
        except (TypeError, ValueError, OverflowError) as exc:
            raise CurveError(f"Normalisation resolution must be an integer >= 2, got {resolution!r}") from exc
        if count != resolution or count < 2:
            raise CurveError(f"Normalisation resolution must be an integer >= 2, got {resolution!r}")
        self.base = base
        self.resolution = count
        self._step = base.length / self.resolution
        samples = base.points(np.arange(self.resolution, dtype=np.float64) * self._step)
        if not np.all(np.isfinite(samples)):
            raise CurveError("Curve produced non-finite samples")
        seg = np.hypot(np.diff(samples[:, 0]), np.diff(samples[:, 1]))
        cum_len = np.concatenate(([0.0], np.cumsum(seg)))
        total = float(cum_len[-1])
        if total <= 0.0:
            raise CurveError("Cannot normalise a zero-length curve")
        self._cum_len_array = cum_len
        self.cum_len: List[float] = cum_len.tolist()
        super().__init__(total)
        _LOGGER.debug(
            "Normalised curve with %d samples, measured length %.6f", self.resolution, total
        )

    def base_parameter(self, l: float) -> float:
        l = l % self.length
        idx = min(bisect_left(self.cum_len, l), self.resolution - 1)
        return self._step * idx

    def _base_parameters(self, ls: np.ndarray) -> np.ndarray:
        ls = _as_parameters(ls) % self.length
        idx = np.searchsorted(self._cum_len_array, ls, side="left")
        idx = np.minimum(idx, self.resolution - 1)
        return self._step * idx

    def point(self, t: float) -> Point:
        return self.base.point(self.base_parameter(t))

    def tangent(self, t: float) -> Point:
        return _normalize(*self.base.tangent(self.base_parameter(t)))

    def points(self, ts) -> np.ndarray:
        return self.base.points(self._base_parameters(ts))

    def tangents(self, ts) -> np.ndarray:
        return _unit_rows(self.base.tangents(self._base_parameters(ts)))


class ConcatenatedCurve(ParametricCurve):
    def __init__(self, first: ParametricCurve, second: ParametricCurve) -> None:
        self.first = first
        self.second = second
        super().__init__(first.length + second.length)

    def point(self, t: float) -> Point:
        t = t % self.length
        if t < self.first.length:
            return self.first.point(t)
        return self.second.point(t - self.first.length)

    def tangent(self, t: float) -> Point:
        t = t % self.length
        if t < self.first.length:
            return self.first.tangent(t)
        return self.second.tangent(t - self.first.length)

    def _split(self, ts, first_eval, second_eval) -> np.ndarray:
        ts = _as_parameters(ts) % self.length
        out = np.empty((ts.shape[0], 2), dtype=np.float64)
        head = ts < self.first.length
        if np.any(head):
            out[head] = first_eval(ts[head])
        if not np.all(head):
            out[~head] = second_eval(ts[~head] - self.first.length)
        return out

    def points(self, ts) -> np.ndarray:
        return self._split(ts, self.first.points, self.second.points)

    def tangents(self, ts) -> np.ndarray:
        return self._split(ts, self.first.tangents, self.second.tangents)


class InvertedCurve(ParametricCurve):
    def __init__(self, base: ParametricCurve) -> None:
        self.base = base
        super().__init__(base.length)

    def point(self, t: float) -> Point:
        return self.base.point(-t)

    def tangent(self, t: float) -> Point:
        tx, ty = self.base.tangent(-t)
        return (-tx, -ty)

    def points(self, ts) -> np.ndarray:
        return self.base.points(-_as_parameters(ts))

    def tangents(self, ts) -> np.ndarray:
        return -self.base.tangents(-_as_parameters(ts))


def normalize(resolution: int, curve: ParametricCurve) -> NormalizedCurve:
    return NormalizedCurve(curve, resolution)


def concatenate(first: ParametricCurve, second: ParametricCurve) -> ConcatenatedCurve:
    """
    Join two curves end to end.

    The end of ``first`` should meet the start of ``second`` in position and
    tangent direction for the result to be smooth; this is not checked.
    """
    return ConcatenatedCurve(first, second)


def invert(curve: ParametricCurve) -> InvertedCurve:
    return InvertedCurve(curve)


def circle_curve(radius: float) -> CircleCurve:
    return CircleCurve(radius)


def ellipse_curve(axis_a: float, axis_b: float, *, reverse: bool = False) -> EllipseCurve:
    return EllipseCurve(axis_a, axis_b, direction=-1 if reverse else 1)


def line_curve(start: Point, end: Point) -> LineCurve:
    return LineCurve(start, end)


def arc_curve(center: Point, radius: float, angle_start: float, sweep: float) -> ArcCurve:
    return ArcCurve(center, radius, angle_start, sweep)


def oblong_curve(radius: float, straight: float) -> ParametricCurve:
    """
    Stadium outline: two half-circle caps of ``radius`` joined by straights of
    length ``straight``, centred on the origin and walked counter-clockwise
    from the bottom of the right cap.
    """
    radius = _check_finite("Oblong radius", radius)
    straight = _check_finite("Oblong straight", straight)
    if radius <= 0.0 or straight < 0.0:
        raise CurveError("Oblong needs a positive radius and a non-negative straight")
    half = straight / 2.0
    pieces: List[ParametricCurve] = [arc_curve((half, 0.0), radius, -math.pi / 2.0, math.pi)]
    if straight > 0.0:
        pieces.append(line_curve((half, radius), (-half, radius)))
    pieces.append(arc_curve((-half, 0.0), radius, math.pi / 2.0, math.pi))
    if straight > 0.0:
        pieces.append(line_curve((-half, -radius), (half, -radius)))
    return reduce(concatenate, pieces)


def sample_outline(curve: ParametricCurve, step: float = OUTLINE_STEP) -> List[Point]:
    """Closed polyline through ``curve``, about one vertex every ``step`` units."""
    step = _check_finite("Outline step", step)
    if step <= 0.0:
        raise CurveError(f"Outline step must be positive, got {step!r}")
    count = max(8, int(math.ceil(curve.length / step)))
    ts = np.linspace(0.0, curve.length, count + 1)
    pts = [(float(x), float(y)) for x, y in curve.points(ts[:-1])]
    pts.append(pts[0])
    return pts


__all__ = [
    "ArcCurve",
    "CircleCurve",
    "ConcatenatedCurve",
    "CurveError",
    "DEFAULT_RESOLUTION",
    "EllipseCurve",
    "InvertedCurve",
    "LineCurve",
    "NormalizedCurve",
    "OUTLINE_STEP",
    "ParametricCurve",
    "arc_curve",
    "circle_curve",
    "concatenate",
    "ellipse_curve",
    "invert",
    "line_curve",
    "normalize",
    "oblong_curve",
    "sample_outline",
]
