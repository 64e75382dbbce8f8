import math
import os

import pytest

pytest.importorskip("PySide6.QtGui")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtGui import QColor, QGuiApplication, QImage, QPainter  # noqa: E402

from drawing import draw_spirograph_frame, spirograph_view_scale  # noqa: E402
from spirokin_core import SpiroGraph  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    app = QGuiApplication.instance() or QGuiApplication([])
    yield app


def test_view_scale_fits_gears_and_pen():
    spiro = SpiroGraph.two_circles_outer(50.0, 20.0, (10.0, 0.0))
    scale = spirograph_view_scale(spiro, 400, 300, margin_ratio=0.5)
    assert scale == pytest.approx(150.0 / (50.0 + 2.0 * 20.0))
    length = spiro.fixed_gear.curve.length
    for i in range(40):
        t = length * i / 40
        for x, y in spiro.rotating_outline(t) + [spiro.pen_position(t)]:
            assert math.hypot(x, y) * scale <= 150.0 + 1e-9


def test_view_scale_counts_a_pen_outside_the_gear():
    near = SpiroGraph.two_circles_inner(100.0, 30.0, (20.0, 0.0))
    far = SpiroGraph.two_circles_inner(100.0, 30.0, (60.0, 0.0))
    assert spirograph_view_scale(near, 400, 400) == pytest.approx(180.0 / 160.0)
    assert spirograph_view_scale(far, 400, 400) == pytest.approx(180.0 / 220.0)


def test_draw_spirograph_frame_paints_and_returns_pen(qt_app):
    spiro = SpiroGraph.two_circles_inner(100.0, 30.0, (20.0, 0.0))
    image = QImage(240, 240, QImage.Format.Format_ARGB32)
    image.fill(QColor("white"))
    painter = QPainter(image)
    painter.translate(120, 120)
    pen_point = draw_spirograph_frame(painter, spiro, 0.0, trail=[(0.0, 0.0), (10.0, 10.0)])
    painter.end()

    assert pen_point == pytest.approx(spiro.pen_position(0.0))
    white = QColor("white").rgb()
    painted = sum(
        1 for x in range(240) for y in range(240) if image.pixel(x, y) != white
    )
    assert painted > 0
