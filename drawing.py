from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QPainter, QPen

from spirokin_core import Gear, SpiroGraph
from spirokin_curves import OUTLINE_STEP
from spirokin_transform import RigidTransform

Point = Tuple[float, float]


def _max_radius(points: Iterable[Point]) -> float:
    return max((math.hypot(x, y) for x, y in points), default=0.0)


def spirograph_view_scale(
    spirograph: SpiroGraph,
    width: int,
    height: int,
    margin_ratio: float = 0.45,
    *,
    step: float = OUTLINE_STEP,
) -> float:
    """
    Uniform scale keeping both gears and the pen on screen for every ``t``.

    The rotating gear always touches the fixed outline, so none of its points
    strays further from the origin than the fixed gear's radius plus twice
    the rotating gear's reach (outline or pen, measured from its own origin).
    The viewport is assumed centred on the fixed gear's origin.
    """

    fixed_radius = _max_radius(spirograph.fixed_gear.outline(step))
    rotating = spirograph.rotating_gear
    reach = max(_max_radius(rotating.outline(step)), math.hypot(*rotating.point))
    extent = fixed_radius + 2.0 * reach
    if extent <= 0.0:
        return 1.0
    return min(width, height) * margin_ratio / extent


def _to_qpoints(points: Iterable[Point], transform: Optional[RigidTransform]) -> List[QPointF]:
    if transform is None:
        return [QPointF(x, y) for (x, y) in points]
    return [QPointF(*transform.apply(p)) for p in points]


def _cosmetic_pen(color: str, width: float) -> QPen:
    pen = QPen(QColor(color))
    pen.setWidthF(width)
    return pen


def draw_polyline(
    painter: QPainter,
    points: Sequence[Point],
    *,
    color: str = "#606060",
    width: float = 0.0,
    transform: Optional[RigidTransform] = None,
) -> None:
    """Polyline through ``points``, cosmetic width by default."""

    if len(points) < 2:
        return
    painter.setPen(_cosmetic_pen(color, width))
    painter.drawPolyline(_to_qpoints(points, transform))


def draw_marker(
    painter: QPainter,
    point: Point,
    *,
    radius: float = 1.5,
    color: str = "#e62739",
) -> None:
    painter.setPen(_cosmetic_pen(color, 0.0))
    painter.drawEllipse(QPointF(point[0], point[1]), radius, radius)


def draw_gear(
    painter: QPainter,
    gear: Gear,
    transform: Optional[RigidTransform] = None,
    *,
    color: str = "#1f77b4",
    step: float = OUTLINE_STEP,
) -> None:
    """Gear outline, optionally moved from the gear's frame by ``transform``."""

    draw_polyline(painter, gear.outline(step), color=color, transform=transform)


def draw_spirograph_frame(
    painter: QPainter,
    spirograph: SpiroGraph,
    t: float,
    trail: Optional[Sequence[Point]] = None,
    *,
    fixed_color: str = "#808080",
    rotating_color: str = "#1f77b4",
    trail_color: str = "#e62739",
    pen_color: str = "#e62739",
) -> Point:
    """
    One animation frame: both gears, the trail so far and the pen marker.

    Returns the pen position so the caller can extend its trail.
    """

    transform = spirograph.get_transform(t)
    draw_gear(painter, spirograph.fixed_gear, color=fixed_color)
    draw_gear(painter, spirograph.rotating_gear, transform, color=rotating_color)
    if trail:
        draw_polyline(painter, trail, color=trail_color)
    pen_point = transform.apply(spirograph.rotating_gear.point)
    draw_marker(painter, pen_point, color=pen_color)
    return pen_point
