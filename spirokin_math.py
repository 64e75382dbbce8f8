from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, List, Optional, Tuple

import numpy as np

from math_backends import numpy_backend, python_backend
from spirokin_core import SpiroGraph

Point = Tuple[float, float]
_LOGGER = logging.getLogger(__name__)

DEFAULT_VELOCITY = 60.0


@dataclass(frozen=True)
class MathBackend:
    name: str
    label: str
    available: bool
    generator: Callable


_BACKENDS: dict[str, MathBackend] = {}
_ACTIVE_BACKEND = "python"


def register_backend(backend: MathBackend) -> None:
    _BACKENDS[backend.name] = backend


def list_backends(*, available_only: bool = False) -> list[MathBackend]:
    backends = list(_BACKENDS.values())
    if available_only:
        backends = [b for b in backends if b.available]
    return sorted(backends, key=lambda b: b.name)


def get_backend_name() -> str:
    return _ACTIVE_BACKEND


def set_backend(name: str) -> None:
    backend = _BACKENDS.get(name)
    if backend is None:
        raise ValueError(f"Unknown math backend: {name}")
    if not backend.available:
        raise ValueError(f"Math backend not available: {name}")
    global _ACTIVE_BACKEND
    if backend.name != _ACTIVE_BACKEND:
        _LOGGER.info("Switching math backend from %s to %s", _ACTIVE_BACKEND, backend.name)
    _ACTIVE_BACKEND = backend.name


def arc_length_at(elapsed: float, velocity: float = DEFAULT_VELOCITY) -> float:
    """Shared gear parameter after ``elapsed`` seconds at ``velocity`` units/s."""
    return float(elapsed) * float(velocity)


def trace_pen_points(
    spirograph: SpiroGraph,
    steps: int = 5000,
    t_max: Optional[float] = None,
) -> List[Point]:
    """
    Pen trajectory in the fixed frame for evenly spaced arc lengths over
    ``[0, t_max]``.

    With an explicit ``t_max`` the trace has exactly ``steps`` points. Without
    one it runs to the closing period and ``steps`` counts the points per turn
    around the fixed gear, so the spacing does not grow with the turn count.
    """
    if steps < 2:
        raise ValueError(f"steps must be at least 2, got {steps}")
    if t_max is None:
        turns = spirograph.fixed_turns()
        t_max = spirograph.fixed_gear.curve.length * turns
        steps = (steps - 1) * turns + 1
    if not math.isfinite(t_max) or t_max <= 0:
        raise ValueError(f"t_max must be positive and finite, got {t_max}")
    backend = _BACKENDS.get(_ACTIVE_BACKEND)
    if backend is None:
        raise ValueError(f"Unknown math backend: {_ACTIVE_BACKEND}")
    t_values = np.linspace(0.0, t_max, steps)
    return backend.generator(spirograph, t_values)


register_backend(
    MathBackend(
        name="python",
        label="Python",
        available=True,
        generator=python_backend.generate_trace_points,
    )
)
register_backend(
    MathBackend(
        name="numpy",
        label="NumPy",
        available=True,
        generator=numpy_backend.generate_trace_points,
    )
)


__all__ = [
    "DEFAULT_VELOCITY",
    "MathBackend",
    "arc_length_at",
    "get_backend_name",
    "list_backends",
    "register_backend",
    "set_backend",
    "trace_pen_points",
]
