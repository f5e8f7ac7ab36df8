import math

import pytest

from paramesh.bspline import BSplineCurve, BSplineFlags, BSplineSurface
from paramesh.errors import InvalidConfigurationError

CUBIC = [(0.0, 0.0), (1.0, 2.0), (3.0, 2.0), (4.0, 0.0)]
HALF_ROOT2 = math.sqrt(2.0) / 2.0


def _close(a, b, tol=1e-9):
    assert len(a) == len(b)
    for x, y in zip(a, b):
        assert abs(x - y) <= tol


class TestBSplineCurve:
    """B-spline curve evaluation"""

    def test_clamped_interpolates_endpoints(self):
        curve = BSplineCurve.clamped(CUBIC, 3)
        _close(curve.evaluate(0.0), CUBIC[0])
        _close(curve.evaluate(1.0), CUBIC[-1])

    def test_clamped_longer_curve_endpoints(self):
        cps = [(0, 0, 0), (1, 1, 0), (2, -1, 1), (3, 1, 2), (4, 0, 0), (5, 2, 1)]
        curve = BSplineCurve.clamped(cps, 3)
        _close(curve.evaluate(0.0), cps[0])
        _close(curve.evaluate(1.0), cps[-1])

    def test_cubic_bezier_midpoint(self):
        curve = BSplineCurve.clamped(CUBIC, 3)
        _close(curve.evaluate(0.5), (2.0, 1.5))

    def test_uniform_cubic_start(self):
        curve = BSplineCurve.uniform(CUBIC, 3)
        expected = [(CUBIC[0][i] + 4 * CUBIC[1][i] + CUBIC[2][i]) / 6.0 for i in range(2)]
        _close(curve.evaluate(0.0), expected)

    def test_properties(self):
        curve = BSplineCurve.clamped(CUBIC, 2)
        assert curve.degree == 2
        assert curve.order == 3
        assert curve.dimension == 2
        assert len(curve.knots) == len(CUBIC) + 3
        assert curve.control_points[1] == (1.0, 2.0)

    def test_default_degree_from_config(self):
        assert BSplineCurve.clamped(CUBIC).degree == 3

    def test_scratch_buffer(self):
        curve = BSplineCurve.clamped(CUBIC, 3)
        scratch = [0.0] * 4
        _close(curve.evaluate(0.3, scratch), curve.evaluate(0.3))
        assert sum(scratch) == pytest.approx(1.0)

    def test_too_few_points(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve.clamped([(0, 0), (1, 1)], 3)

    def test_bad_order(self):
        # 3 control points and 4 knots give order 1
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve([(0, 0), (1, 1), (2, 0)], [0, 1, 2, 3])

    def test_decreasing_knots(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve([(0, 0), (1, 1)], [0, 1, 0, 1])

    def test_mismatched_widths(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve.clamped([(0, 0), (1, 1, 1), (2, 0)], 2)

    def test_empty(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve([], [0, 1])


class TestRational:
    """weighted, homogeneous and divide modes"""

    def test_unit_weights_match_plain(self):
        plain = BSplineCurve.clamped(CUBIC, 3)
        weighted = BSplineCurve.clamped([cp + (1.0,) for cp in CUBIC], 3, BSplineFlags.WEIGHTED)
        assert weighted.dimension == 2
        for i in range(11):
            _close(weighted.evaluate(i / 10.0), plain.evaluate(i / 10.0))

    def test_quarter_circle(self):
        cps = [(1.0, 0.0, 1.0), (1.0, 1.0, HALF_ROOT2), (0.0, 1.0, 1.0)]
        curve = BSplineCurve.clamped(cps, 2, BSplineFlags.WEIGHTED)
        for i in range(11):
            x, y = curve.evaluate(i / 10.0)
            assert math.hypot(x, y) == pytest.approx(1.0)
        _close(curve.evaluate(0.5), (HALF_ROOT2, HALF_ROOT2))

    def test_homogeneous_quarter_circle(self):
        cps = [(1.0, 0.0, 1.0), (HALF_ROOT2, HALF_ROOT2, HALF_ROOT2), (0.0, 1.0, 1.0)]
        curve = BSplineCurve.clamped(cps, 2, BSplineFlags.HOMOGENEOUS)
        assert curve.flags & BSplineFlags.WEIGHTED
        _close(curve.evaluate(0.5), (HALF_ROOT2, HALF_ROOT2))

    def test_divide_quarter_circle(self):
        cps = [(1.0, 0.0, 1.0), (HALF_ROOT2, HALF_ROOT2, HALF_ROOT2), (0.0, 1.0, 1.0)]
        curve = BSplineCurve.clamped(cps, 2, BSplineFlags.DIVIDE)
        assert curve.dimension == 2
        _close(curve.evaluate(0.5), (HALF_ROOT2, HALF_ROOT2))
        _close(curve.evaluate(0.0), (1.0, 0.0))

    def test_zero_weight_left_undivided(self):
        cps = [(1.0, 2.0, 0.0), (3.0, 4.0, 0.0)]
        curve = BSplineCurve.clamped(cps, 1, BSplineFlags.WEIGHTED)
        _close(curve.evaluate(0.5), (0.0, 0.0))

    def test_weighted_needs_two_components(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve.clamped([(1.0,), (2.0,)], 1, BSplineFlags.WEIGHTED)

    def test_divide_needs_two_components(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineCurve.clamped([(1.0,), (2.0,)], 1, BSplineFlags.DIVIDE)

    def test_weighted_divide_keeps_rational_point(self):
        cps = [(1.0, 0.0, 2.0, 1.0), (1.0, 1.0, 2.0, HALF_ROOT2), (0.0, 1.0, 2.0, 1.0)]
        weighted = BSplineCurve.clamped(cps, 2, BSplineFlags.WEIGHTED)
        curve = BSplineCurve.clamped(cps, 2, BSplineFlags.WEIGHTED_DIVIDE)
        assert curve.dimension == 3
        _close(curve.evaluate(0.5), (HALF_ROOT2, HALF_ROOT2, 2.0))
        for i in range(11):
            _close(curve.evaluate(i / 10.0), weighted.evaluate(i / 10.0))

    def test_homogeneous_divide(self):
        cps = [(1.0, 0.0, 2.0, 1.0),
               (HALF_ROOT2, HALF_ROOT2, 2.0 * HALF_ROOT2, HALF_ROOT2),
               (0.0, 1.0, 2.0, 1.0)]
        curve = BSplineCurve.clamped(cps, 2, BSplineFlags.HOMOGENEOUS | BSplineFlags.DIVIDE)
        _close(curve.evaluate(0.5), (HALF_ROOT2, HALF_ROOT2, 2.0))

    def test_weighted_divide_two_components(self):
        curve = BSplineCurve.clamped([(1.0, 1.0), (3.0, 1.0)], 1, BSplineFlags.WEIGHTED_DIVIDE)
        _close(curve.evaluate(0.5), (2.0,))


class TestBSplineSurface:
    """tensor-product surfaces"""

    GRID = [[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)],
            [(0.0, 1.0, 0.0), (1.0, 1.0, 1.0)]]

    def test_bilinear(self):
        surf = BSplineSurface.clamped(self.GRID, 1, 1)
        _close(surf.evaluate(0.5, 0.5), (0.5, 0.5, 0.25))
        _close(surf.evaluate(1.0, 0.0), (1.0, 0.0, 0.0))
        _close(surf.evaluate(0.0, 1.0), (0.0, 1.0, 0.0))
        _close(surf.evaluate(1.0, 1.0), (1.0, 1.0, 1.0))

    def test_corners_of_cubic_patch(self):
        grid = [[(u, v, (u * v) % 3) for u in range(4)] for v in range(5)]
        surf = BSplineSurface.clamped(grid, 3, 2)
        assert surf.order_u == 4
        assert surf.order_v == 3
        _close(surf.evaluate(0.0, 0.0), grid[0][0])
        _close(surf.evaluate(1.0, 0.0), grid[0][-1])
        _close(surf.evaluate(0.0, 1.0), grid[-1][0])
        _close(surf.evaluate(1.0, 1.0), grid[-1][-1])

    def test_weighted_surface(self):
        grid = [[p + (2.0,) for p in row] for row in self.GRID]
        surf = BSplineSurface.clamped(grid, 1, 1, BSplineFlags.WEIGHTED)
        assert surf.dimension == 3
        _close(surf.evaluate(0.5, 0.5), (0.5, 0.5, 0.25))

    def test_scratch(self):
        surf = BSplineSurface.clamped(self.GRID, 1, 1)
        scratch = ([0.0, 0.0], [0.0, 0.0])
        _close(surf.evaluate(0.25, 0.75, scratch), surf.evaluate(0.25, 0.75))

    def test_ragged_rows(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineSurface.clamped([[(0, 0), (1, 0)], [(0, 1)]], 1, 1)

    def test_too_few_rows(self):
        with pytest.raises(InvalidConfigurationError):
            BSplineSurface.clamped(self.GRID, 1, 3)

    def test_uniform_surface(self):
        grid = [[(float(u), float(v), 0.0) for u in range(4)] for v in range(4)]
        surf = BSplineSurface.uniform(grid, 3, 3)
        assert surf.knots_u == (0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0)
        _close(surf.evaluate(0.0, 0.0), (1.0, 1.0, 0.0))
        _close(surf.evaluate(0.5, 0.5), (1.5, 1.5, 0.0))

    def test_homogeneous_surface(self):
        grid = [[(p[0] * 2.0, p[1] * 2.0, p[2] * 2.0, 2.0) for p in row] for row in self.GRID]
        surf = BSplineSurface.clamped(grid, 1, 1, BSplineFlags.HOMOGENEOUS)
        assert surf.dimension == 3
        _close(surf.evaluate(0.5, 0.5), (0.5, 0.5, 0.25))
        _close(surf.evaluate(1.0, 1.0), (1.0, 1.0, 1.0))

    def test_weighted_divide_surface(self):
        grid = [[p + (w,) for p, w in zip(row, weights)]
                for row, weights in zip(self.GRID, [(1.0, 2.0), (3.0, 1.0)])]
        weighted = BSplineSurface.clamped(grid, 1, 1, BSplineFlags.WEIGHTED)
        surf = BSplineSurface.clamped(grid, 1, 1, BSplineFlags.WEIGHTED_DIVIDE)
        assert surf.dimension == 3
        _close(surf.evaluate(1.0, 1.0), (1.0, 1.0, 1.0))
        _close(surf.evaluate(0.3, 0.6), weighted.evaluate(0.3, 0.6))

    def test_divide_surface(self):
        grid = [[(p[0] * 2.0, p[1] * 2.0, 2.0) for p in row] for row in self.GRID]
        surf = BSplineSurface.clamped(grid, 1, 1, BSplineFlags.DIVIDE)
        assert surf.dimension == 2
        _close(surf.evaluate(0.5, 0.5), (0.5, 0.5))


class TestParameterEnds:
    """parameters at and around the ends of the domain"""

    def test_rounding_past_end_snaps_to_end(self):
        curve = BSplineCurve.clamped(CUBIC, 3)
        _close(curve.evaluate(1.0 + 2e-16), CUBIC[-1])
        _close(curve.evaluate(-2e-16), CUBIC[0])

    def test_surface_rounding_past_end(self):
        grid = [[(0.0, 0.0), (1.0, 0.0)], [(0.0, 1.0), (1.0, 1.0)]]
        surf = BSplineSurface.clamped(grid, 1, 1)
        _close(surf.evaluate(1.0000000000000002, 1.0000000000000002), (1.0, 1.0))

    def test_well_outside_domain_is_zero(self):
        curve = BSplineCurve.clamped(CUBIC, 3)
        _close(curve.evaluate(1.5), (0.0, 0.0))
