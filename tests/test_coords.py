import math

import numpy as np
import pytest

from fractals.base import Viewport, ViewportError
from utils.coords import CoordinateConverter


VIEWPORTS = [
    CoordinateConverter(-2.0, 1.0, -1.0, 1.0, 300, 200),
    CoordinateConverter(-0.7454, -0.7452, 0.1129, 0.1131, 640, 480),
    CoordinateConverter(10.0, 250.0, -3e3, 7e3, 17, 913),
]


@pytest.mark.parametrize("conv", VIEWPORTS)
def test_round_trip_is_exact_within_tolerance(conv):
    for x_px in np.linspace(0, conv.width, 23):
        for y_px in np.linspace(0, conv.height, 19):
            x, y = conv.screen_to_plane(float(x_px), float(y_px))
            bx, by = conv.plane_to_screen(x, y)
            assert math.isclose(bx, x_px, rel_tol=1e-9, abs_tol=1e-9 * conv.width)
            assert math.isclose(by, y_px, rel_tol=1e-9, abs_tol=1e-9 * conv.height)


def test_screen_y_is_inverted():
    conv = CoordinateConverter(-2.0, 1.0, -1.0, 1.0, 300, 200)
    assert conv.screen_to_plane_y(0) == 1.0
    assert conv.screen_to_plane_y(200) == -1.0
    assert conv.screen_to_plane_x(0) == -2.0
    assert conv.screen_to_plane_x(300) == 1.0
    # plane up is screen up, in both directions
    assert conv.plane_to_screen_y(0.5) < conv.plane_to_screen_y(-0.5)


def test_vectorised_matches_scalar():
    conv = VIEWPORTS[1]
    xs = np.arange(conv.width, dtype=np.float64)
    vec = conv.screen_to_plane_x(xs)
    for x in (0, 1, 317, conv.width - 1):
        assert vec[x] == conv.screen_to_plane_x(float(x))


@pytest.mark.parametrize("bounds, size", [
    ((1.0, 1.0, -1.0, 1.0), (300, 200)),
    ((1.0, -2.0, -1.0, 1.0), (300, 200)),
    ((-2.0, 1.0, 1.0, -1.0), (300, 200)),
    ((-2.0, 1.0, -1.0, 1.0), (0, 200)),
    ((-2.0, 1.0, -1.0, 1.0), (300, -5)),
    ((-2.0, float("inf"), -1.0, 1.0), (300, 200)),
    ((float("nan"), 1.0, -1.0, 1.0), (300, 200)),
])
def test_degenerate_viewport_is_rejected(bounds, size):
    with pytest.raises(ViewportError):
        CoordinateConverter(*bounds, *size)


def test_viewport_validate_matches_converter():
    vp = Viewport(width=300, height=200)
    vp.validate()
    vp.max_x = vp.min_x
    with pytest.raises(ValueError):
        vp.validate()


def test_from_viewport_takes_a_copy():
    vp = Viewport(width=300, height=200)
    conv = CoordinateConverter.from_viewport(vp)
    vp.shift(5.0, 5.0)
    vp.resize(10, 10)
    assert (conv.min_x, conv.max_x, conv.width, conv.height) == (-2.0, 1.0, 300, 200)


def test_axis_densities():
    vp = Viewport(width=300, height=200)
    assert vp.x_den == pytest.approx(100.0)
    assert vp.y_den == pytest.approx(100.0)
