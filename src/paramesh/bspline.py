"""B-spline and NURBS curve and surface evaluators.

A :class:`BSplineCurve` owns a knot vector and a list of control points; a
:class:`BSplineSurface` owns two knot vectors and a grid of control points
stored as rows (``control_points[v][u]``).  Both map the unit parameter
domain onto the active span of their knot vectors, so ``evaluate(0)`` and
``evaluate(1)`` always address the ends of the curve.

Control points are plain coordinate sequences of any length.  Flags select
how the last coordinate is treated:

``WEIGHTED``
    The last coordinate is a rational weight (NURBS).  It is consumed by the
    evaluation and not returned.
``HOMOGENEOUS``
    Like ``WEIGHTED``, but the other coordinates are already multiplied by
    the weight.
``DIVIDE``
    After evaluation, divide every returned coordinate except the last by
    the last one and drop it (homogeneous to Euclidean conversion).  With
    ``WEIGHTED`` the weight has already been divided out, so the rational
    result is returned as is.

Example::

    >>> quarter = BSplineCurve([[1, 0, 1], [1, 1, 0.7071067811865476], [0, 1, 1]],
    ...                        [0, 0, 0, 1, 1, 1], BSplineFlags.WEIGHTED)
    >>> x, y = quarter.evaluate(0.5)   # on the unit circle

Evaluators keep private scratch buffers for the basis weights, so a single
instance must not be evaluated from several threads at once.  Pass an
explicit ``scratch`` list to :meth:`BSplineCurve.evaluate` (or a pair of
lists to :meth:`BSplineSurface.evaluate`) for reentrant use.
"""

from __future__ import annotations

import logging
from enum import IntFlag
from typing import Iterable, List, MutableSequence, Optional, Sequence, Tuple

from paramesh.basis import (
    basis_factors,
    check_knots,
    clamped_knots,
    uniform_knots,
)
from paramesh.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


class BSplineFlags(IntFlag):
    NONE = 0
    WEIGHTED = 1
    DIVIDE = 2
    HOMOGENEOUS = 4
    WEIGHTED_DIVIDE = 3


def _normalize_flags(flags) -> BSplineFlags:
    flags = BSplineFlags(int(flags or 0))
    if flags & BSplineFlags.HOMOGENEOUS:
        flags |= BSplineFlags.WEIGHTED
    return flags


def _divides(flags: BSplineFlags) -> bool:
    return bool(flags & BSplineFlags.DIVIDE) and not flags & BSplineFlags.WEIGHTED


def _retained_width(width: int, flags: BSplineFlags) -> int:
    """Number of accumulated coordinates for control points of ``width``."""

    weighted = bool(flags & BSplineFlags.WEIGHTED)
    if weighted and width < 2:
        raise InvalidConfigurationError(
            "weighted control points need at least two components",
            {'width': width, 'flags': int(flags)},
        )
    retained = width - 1 if weighted else width
    needed = 2 if _divides(flags) else 1
    if retained < needed:
        raise InvalidConfigurationError(
            f"control points have too few components ({width}) for flags {flags!r}",
            {'width': width, 'flags': int(flags)},
        )
    return retained


def _as_point(cp, width: Optional[int]) -> Tuple[float, ...]:
    pt = tuple(float(c) for c in cp)
    if not pt:
        raise InvalidConfigurationError("control point has no components")
    if width is not None and len(pt) != width:
        raise InvalidConfigurationError(
            f"control point {pt!r} has {len(pt)} components, expected {width}",
            {'expected': width, 'got': len(pt)},
        )
    return pt


def _order_for(knots: Sequence[float], count: int, axis: str = '') -> int:
    order = len(knots) - count
    if order < 2 or order > count:
        raise InvalidConfigurationError(
            f"{axis}knot count {len(knots)} gives order {order} for {count} "
            f"control points; order must be in [2, {count}]",
            {'knots': len(knots), 'control_points': count, 'order': order},
        )
    return order


_ROUNDING = 1e-9


def _remap(u: float, lo: float, hi: float) -> float:
    # parameters within rounding of an end snap to that end
    if 1.0 <= u <= 1.0 + _ROUNDING:
        return hi
    if -_ROUNDING <= u <= 0.0:
        return lo
    return lo + u * (hi - lo)


def _accumulate(terms: Iterable[Tuple[Sequence[float], float]],
                retained: int, flags: BSplineFlags) -> List[float]:
    """Blend ``(control point, basis weight)`` pairs into a result point."""

    values = [0.0] * retained
    weight = 0.0
    if flags & BSplineFlags.WEIGHTED:
        homogeneous = bool(flags & BSplineFlags.HOMOGENEOUS)
        for cp, b in terms:
            w = cp[retained]
            weight += b * w
            factor = b if homogeneous else b * w
            for i in range(retained):
                values[i] += cp[i] * factor
        # a zero total weight leaves the sum undivided
        if weight != 0.0:
            values = [value / weight for value in values]
    else:
        for cp, b in terms:
            for i in range(retained):
                values[i] += cp[i] * b
        if flags & BSplineFlags.DIVIDE:
            last = values[-1]
            values = values[:-1]
            if last != 0.0:
                values = [value / last for value in values]
    return values


class BSplineCurve:
    """A B-spline curve evaluated over the unit interval."""

    uniform_knots = staticmethod(uniform_knots)
    clamped_knots = staticmethod(clamped_knots)

    def __init__(self, control_points: Sequence[Sequence[float]],
                 knots: Sequence[float], flags=0):
        if not control_points:
            raise InvalidConfigurationError("curve needs at least one control point")
        if not knots:
            raise InvalidConfigurationError("curve needs a knot vector")
        first = _as_point(control_points[0], None)
        width = len(first)
        self._control_points = tuple(_as_point(cp, width) for cp in control_points)
        self._knots = tuple(float(k) for k in knots)
        self._order = _order_for(self._knots, len(self._control_points))
        check_knots(self._knots)
        self._flags = _normalize_flags(flags)
        self._retained = _retained_width(width, self._flags)
        self._buffer: List[float] = [0.0] * len(self._control_points)
        logger.debug("BSplineCurve: %d control points, order %d, flags %r",
                     len(self._control_points), self._order, self._flags)

    @classmethod
    def uniform(cls, control_points, degree: Optional[int] = None, flags=0) -> "BSplineCurve":
        """Curve on a uniform knot vector (does not touch its end points)."""

        return cls(control_points, uniform_knots(len(control_points), degree), flags)

    @classmethod
    def clamped(cls, control_points, degree: Optional[int] = None, flags=0) -> "BSplineCurve":
        """Curve on a clamped knot vector (interpolates its end points)."""

        return cls(control_points, clamped_knots(len(control_points), degree), flags)

    @property
    def control_points(self) -> Tuple[Tuple[float, ...], ...]:
        return self._control_points

    @property
    def knots(self) -> Tuple[float, ...]:
        return self._knots

    @property
    def order(self) -> int:
        return self._order

    @property
    def degree(self) -> int:
        return self._order - 1

    @property
    def flags(self) -> BSplineFlags:
        return self._flags

    @property
    def dimension(self) -> int:
        """Length of the points returned by :meth:`evaluate`."""

        if _divides(self._flags):
            return self._retained - 1
        return self._retained

    def evaluate(self, u: float, scratch: Optional[MutableSequence[float]] = None) -> List[float]:
        """Return the curve point at ``u`` in ``[0, 1]``."""

        count = len(self._control_points)
        t = _remap(u, self._knots[self._order - 1], self._knots[count])
        weights = basis_factors(self._knots, t, self._order, count,
                                self._buffer if scratch is None else scratch)
        terms = ((cp, b) for cp, b in zip(self._control_points, weights) if b != 0.0)
        return _accumulate(terms, self._retained, self._flags)

    def __repr__(self) -> str:
        return (f"BSplineCurve({len(self._control_points)} control points, "
                f"order={self._order}, flags={self._flags!r})")


class BSplineSurface:
    """A tensor-product B-spline surface over the unit square.

    ``control_points`` is a list of rows; each row runs along ``u`` and the
    rows are stacked along ``v``.
    """

    def __init__(self, control_points: Sequence[Sequence[Sequence[float]]],
                 knots_u: Sequence[float], knots_v: Sequence[float], flags=0):
        if not control_points or not control_points[0]:
            raise InvalidConfigurationError("surface needs at least one control point")
        if not knots_u or not knots_v:
            raise InvalidConfigurationError("surface needs knot vectors in u and v")
        ucount = len(control_points[0])
        width = len(_as_point(control_points[0][0], None))
        rows = []
        for row in control_points:
            if len(row) != ucount:
                raise InvalidConfigurationError(
                    f"control point rows must all have {ucount} points, got {len(row)}",
                    {'expected': ucount, 'got': len(row)},
                )
            rows.append(tuple(_as_point(cp, width) for cp in row))
        self._control_points = tuple(rows)
        self._ucount = ucount
        self._vcount = len(rows)
        self._knots_u = tuple(float(k) for k in knots_u)
        self._knots_v = tuple(float(k) for k in knots_v)
        self._order_u = _order_for(self._knots_u, self._ucount, 'u ')
        self._order_v = _order_for(self._knots_v, self._vcount, 'v ')
        check_knots(self._knots_u)
        check_knots(self._knots_v)
        self._flags = _normalize_flags(flags)
        self._retained = _retained_width(width, self._flags)
        self._buffer_u: List[float] = [0.0] * self._ucount
        self._buffer_v: List[float] = [0.0] * self._vcount
        logger.debug("BSplineSurface: %dx%d control points, orders (%d, %d), flags %r",
                     self._ucount, self._vcount, self._order_u, self._order_v, self._flags)

    @classmethod
    def uniform(cls, control_points, degree_u: Optional[int] = None,
                degree_v: Optional[int] = None, flags=0) -> "BSplineSurface":
        return cls(control_points,
                   uniform_knots(len(control_points[0]), degree_u),
                   uniform_knots(len(control_points), degree_v), flags)

    @classmethod
    def clamped(cls, control_points, degree_u: Optional[int] = None,
                degree_v: Optional[int] = None, flags=0) -> "BSplineSurface":
        return cls(control_points,
                   clamped_knots(len(control_points[0]), degree_u),
                   clamped_knots(len(control_points), degree_v), flags)

    @property
    def control_points(self):
        return self._control_points

    @property
    def knots_u(self) -> Tuple[float, ...]:
        return self._knots_u

    @property
    def knots_v(self) -> Tuple[float, ...]:
        return self._knots_v

    @property
    def order_u(self) -> int:
        return self._order_u

    @property
    def order_v(self) -> int:
        return self._order_v

    @property
    def flags(self) -> BSplineFlags:
        return self._flags

    @property
    def dimension(self) -> int:
        if _divides(self._flags):
            return self._retained - 1
        return self._retained

    def evaluate(self, u: float, v: float,
                 scratch: Optional[Tuple[MutableSequence[float], MutableSequence[float]]] = None
                 ) -> List[float]:
        """Return the surface point at ``(u, v)`` in the unit square."""

        tu = _remap(u, self._knots_u[self._order_u - 1], self._knots_u[self._ucount])
        tv = _remap(v, self._knots_v[self._order_v - 1], self._knots_v[self._vcount])
        bu_out, bv_out = (self._buffer_u, self._buffer_v) if scratch is None else scratch
        bu = basis_factors(self._knots_u, tu, self._order_u, self._ucount, bu_out)
        bv = basis_factors(self._knots_v, tv, self._order_v, self._vcount, bv_out)

        def terms():
            for row, wv in zip(self._control_points, bv):
                if wv == 0.0:
                    continue
                for cp, wu in zip(row, bu):
                    if wu != 0.0:
                        yield cp, wu * wv

        return _accumulate(terms(), self._retained, self._flags)

    def __repr__(self) -> str:
        return (f"BSplineSurface({self._ucount}x{self._vcount} control points, "
                f"orders=({self._order_u}, {self._order_v}), flags={self._flags!r})")


__all__ = ['BSplineFlags', 'BSplineCurve', 'BSplineSurface']
