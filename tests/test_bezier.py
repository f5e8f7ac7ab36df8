import pytest

from paramesh.bezier import BezierCurve, BezierSurface
from paramesh.errors import InvalidConfigurationError


def _close(a, b, tol=1e-9):
    for x, y in zip(a, b):
        assert abs(x - y) <= tol


def test_linear_bezier_is_lerp():
    p0, p1 = (1.0, -2.0, 3.0), (5.0, 2.0, -1.0)
    curve = BezierCurve([p0, p1])
    assert curve.degree == 1
    for i in range(11):
        u = i / 10.0
        _close(curve.evaluate(u), [a + (b - a) * u for a, b in zip(p0, p1)])


def test_degree_follows_point_count():
    assert BezierCurve([(0, 0), (1, 1), (2, 0), (3, 1), (4, 0)]).degree == 4


def test_parameter_range():
    curve = BezierCurve([(0.0, 0.0), (4.0, 8.0)], 2.0, 4.0)
    _close(curve.evaluate(2.0), (0.0, 0.0))
    _close(curve.evaluate(3.0), (2.0, 4.0))
    _close(curve.evaluate(4.0), (4.0, 8.0))


def test_reversed_range():
    curve = BezierCurve([(0.0, 0.0), (1.0, 0.0)], 1.0, 0.0)
    _close(curve.evaluate(1.0), (0.0, 0.0))
    _close(curve.evaluate(0.0), (1.0, 0.0))


def test_equal_bounds_rejected():
    with pytest.raises(InvalidConfigurationError):
        BezierCurve([(0, 0), (1, 1)], 0.5, 0.5)
    with pytest.raises(InvalidConfigurationError):
        BezierSurface([[(0, 0, 0), (1, 0, 0)], [(0, 1, 0), (1, 1, 0)]], v1=2.0, v2=2.0)


def test_empty_rejected():
    with pytest.raises(InvalidConfigurationError):
        BezierCurve([])
    with pytest.raises(InvalidConfigurationError):
        BezierSurface([])


def test_surface_degrees_and_corners():
    grid = [[(u, v, u * v) for u in range(3)] for v in range(4)]
    surf = BezierSurface(grid)
    assert surf.bspline.order_u == 3
    assert surf.bspline.order_v == 4
    _close(surf.evaluate(0, 0), grid[0][0])
    _close(surf.evaluate(1, 1), grid[-1][-1])


def test_surface_domain():
    grid = [[(0.0, 0.0, 0.0), (2.0, 0.0, 0.0)],
            [(0.0, 2.0, 0.0), (2.0, 2.0, 0.0)]]
    surf = BezierSurface(grid, -1.0, 1.0, 10.0, 20.0)
    _close(surf.evaluate(0.0, 15.0), (1.0, 1.0, 0.0))
