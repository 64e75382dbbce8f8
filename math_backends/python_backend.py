from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence, Tuple

if TYPE_CHECKING:
    from spirokin_core import SpiroGraph

Point = Tuple[float, float]


def generate_trace_points(spirograph: "SpiroGraph", t_values: Sequence[float]) -> List[Point]:
    """
    Pen positions in the fixed frame, one rigid transform per sample.

    The pen hole is given in the rotating gear's frame; each transform maps
    it onto the page at the matching arc length.
    """
    pen = spirograph.rotating_gear.point
    points = []
    for t in t_values:
        x, y = spirograph.get_transform(float(t)).apply(pen)
        points.append((x, y))
    return points
