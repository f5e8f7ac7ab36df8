"""Bezier curves and surfaces as clamped B-splines.

A Bezier curve with ``n`` control points is exactly a clamped B-spline of
degree ``n - 1``, so these classes only build the right knot vectors and
rescale an arbitrary parameter range onto ``[0, 1]``.
"""

from __future__ import annotations

from typing import List, Sequence

from paramesh.bspline import BSplineCurve, BSplineSurface
from paramesh.errors import InvalidConfigurationError


def _domain(lo: float, hi: float, axis: str):
    if lo == hi:
        raise InvalidConfigurationError(
            f"{axis}1 and {axis}2 can't be equal", {f'{axis}1': lo, f'{axis}2': hi})
    return float(lo), 1.0 / (hi - lo)


class BezierCurve:
    """Bezier curve whose parameter runs from ``u1`` (start) to ``u2`` (end)."""

    def __init__(self, control_points: Sequence[Sequence[float]],
                 u1: float = 0.0, u2: float = 1.0):
        if not control_points:
            raise InvalidConfigurationError("Bezier curve needs control points")
        self._uoffset, self._umul = _domain(u1, u2, 'u')
        self._evaluator = BSplineCurve.clamped(control_points, len(control_points) - 1)

    @property
    def degree(self) -> int:
        return self._evaluator.degree

    @property
    def bspline(self) -> BSplineCurve:
        return self._evaluator

    def evaluate(self, u: float) -> List[float]:
        return self._evaluator.evaluate((u - self._uoffset) * self._umul)


class BezierSurface:
    """Bezier surface over ``[u1, u2] x [v1, v2]``.

    ``control_points`` is a list of rows along ``u``, stacked along ``v``;
    the degrees follow from the grid shape.
    """

    def __init__(self, control_points: Sequence[Sequence[Sequence[float]]],
                 u1: float = 0.0, u2: float = 1.0, v1: float = 0.0, v2: float = 1.0):
        if not control_points or not control_points[0]:
            raise InvalidConfigurationError("Bezier surface needs control points")
        self._uoffset, self._umul = _domain(u1, u2, 'u')
        self._voffset, self._vmul = _domain(v1, v2, 'v')
        self._evaluator = BSplineSurface.clamped(
            control_points, len(control_points[0]) - 1, len(control_points) - 1)

    @property
    def bspline(self) -> BSplineSurface:
        return self._evaluator

    def evaluate(self, u: float, v: float) -> List[float]:
        return self._evaluator.evaluate((u - self._uoffset) * self._umul,
                                        (v - self._voffset) * self._vmul)


__all__ = ['BezierCurve', 'BezierSurface']
