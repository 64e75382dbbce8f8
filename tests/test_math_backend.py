import math

import pytest

import spirokin_math as sm
from spirokin_core import SpiroGraph


@pytest.fixture
def restore_backend():
    previous = sm.get_backend_name()
    yield
    sm.set_backend(previous)


def test_backend_availability():
    names = {backend.name for backend in sm.list_backends(available_only=True)}
    assert {"python", "numpy"} <= names


def test_set_backend_rejects_unknown_name(restore_backend):
    with pytest.raises(ValueError):
        sm.set_backend("fortran")


def test_unavailable_backend_is_rejected(restore_backend):
    sm.register_backend(sm.MathBackend("ghost", "Ghost", False, lambda *args: []))
    try:
        assert "ghost" not in {b.name for b in sm.list_backends(available_only=True)}
        with pytest.raises(ValueError):
            sm.set_backend("ghost")
    finally:
        sm._BACKENDS.pop("ghost", None)


@pytest.mark.parametrize(
    "spirograph",
    [
        SpiroGraph.two_circles_inner(100.0, 30.0, (20.0, 0.0)),
        SpiroGraph.circle_ellipse_inner(100.0, 30.0, 20.0, (10.0, 0.0), resolution=4_000),
        SpiroGraph.oblong_circle_outer(40.0, 60.0, 25.0, (12.0, 0.0)),
    ],
)
def test_backends_agree(spirograph, restore_backend):
    sm.set_backend("python")
    python_points = sm.trace_pen_points(spirograph, steps=700, t_max=2_000.0)
    sm.set_backend("numpy")
    numpy_points = sm.trace_pen_points(spirograph, steps=700, t_max=2_000.0)
    assert len(python_points) == len(numpy_points) == 700
    for (px, py), (nx, ny) in zip(python_points, numpy_points):
        assert math.isclose(px, nx, abs_tol=1e-7)
        assert math.isclose(py, ny, abs_tol=1e-7)


def test_trace_defaults_to_closing_period(restore_backend):
    sm.set_backend("numpy")
    spiro = SpiroGraph.two_circles_inner(100.0, 30.0, (20.0, 0.0))
    points = sm.trace_pen_points(spiro, steps=1_000)
    assert math.isclose(points[0][0], points[-1][0], abs_tol=1e-6)
    assert math.isclose(points[0][1], points[-1][1], abs_tol=1e-6)
    assert points[0] == pytest.approx(spiro.pen_position(0.0))


def test_trace_rejects_bad_arguments():
    spiro = SpiroGraph.two_circles_inner(100.0, 30.0, (20.0, 0.0))
    with pytest.raises(ValueError):
        sm.trace_pen_points(spiro, steps=1)
    with pytest.raises(ValueError):
        sm.trace_pen_points(spiro, steps=10, t_max=0.0)


def test_arc_length_at_scales_with_velocity():
    assert sm.arc_length_at(2.5, 40.0) == 100.0
    assert sm.arc_length_at(1.0) == sm.DEFAULT_VELOCITY


def test_default_ellipse_trace_keeps_points_close(restore_backend):
    sm.set_backend("numpy")
    spiro = SpiroGraph.circle_ellipse_inner(100.0, 30.0, 20.0, (10.0, 0.0))
    turns = spiro.fixed_turns()
    points = sm.trace_pen_points(spiro, steps=2_000)
    assert len(points) == 1_999 * turns + 1
    gaps = [math.hypot(x1 - x0, y1 - y0) for (x0, y0), (x1, y1) in zip(points, points[1:])]
    assert max(gaps) < 3.0


def test_explicit_t_max_keeps_step_count(restore_backend):
    sm.set_backend("numpy")
    spiro = SpiroGraph.circle_ellipse_inner(100.0, 30.0, 20.0, (10.0, 0.0))
    assert len(sm.trace_pen_points(spiro, steps=300, t_max=5_000.0)) == 300
