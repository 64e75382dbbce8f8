from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence, Tuple

import numpy as np

if TYPE_CHECKING:
    from spirokin_core import SpiroGraph

Point = Tuple[float, float]


def trace_arrays(spirograph: "SpiroGraph", t_values: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    cos_a, sin_a, dx, dy = spirograph.get_transforms(t_values)
    px, py = spirograph.rotating_gear.point
    out_x = px * cos_a - py * sin_a + dx
    out_y = px * sin_a + py * cos_a + dy
    return out_x, out_y


def generate_trace_points(spirograph: "SpiroGraph", t_values: Sequence[float]) -> List[Point]:
    out_x, out_y = trace_arrays(spirograph, t_values)
    return list(zip(out_x.tolist(), out_y.tolist()))
