"""B-spline basis functions and knot-vector helpers.

The basis weights are computed with the Cox-de Boor recurrence, starting
from the single order-1 function that is nonzero on the knot span
containing ``t`` and raising the order one level at a time.  Only the
``order`` functions overlapping that span can be nonzero, so each call
costs O(order**2) regardless of the number of control points.
"""

from __future__ import annotations

import logging
from typing import List, MutableSequence, Optional, Sequence, Union

from paramesh.config import get_defaults
from paramesh.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)

PointsOrCount = Union[int, Sequence]


def check_knots(knots: Sequence[float]) -> None:
    """Raise :class:`InvalidConfigurationError` unless ``knots`` is usable.

    A usable knot vector is non-decreasing and does not collapse to a
    single value.
    """

    if len(knots) < 2:
        raise InvalidConfigurationError(
            "knot vector needs at least two knots", {'knots': list(knots)})
    for i in range(1, len(knots)):
        if knots[i] < knots[i - 1]:
            raise InvalidConfigurationError(
                f"knot vector is decreasing at index {i}",
                {'index': i, 'knots': list(knots)},
            )
    if knots[0] == knots[-1]:
        raise InvalidConfigurationError(
            "first and last knots are equal", {'knots': list(knots)})


def _count_and_degree(control_points: PointsOrCount, degree: Optional[int]):
    count = control_points if isinstance(control_points, int) else len(control_points)
    if degree is None:
        degree = get_defaults().degree
    if degree < 1:
        raise InvalidConfigurationError(
            f"degree must be at least 1, got {degree}", {'degree': degree})
    if count < degree + 1:
        raise InvalidConfigurationError(
            f"too few control points for degree {degree} curve",
            {'control_points': count, 'degree': degree},
        )
    return count, degree


def uniform_knots(control_points: PointsOrCount, degree: Optional[int] = None) -> List[float]:
    """Return the uniform knot vector ``0, 1, ..., n + degree``.

    ``control_points`` is either a control point count or the control points
    themselves.  Curves built on these knots do not, in general, pass
    through their end control points.
    """

    count, degree = _count_and_degree(control_points, degree)
    return [float(i) for i in range(count + degree + 1)]


def clamped_knots(control_points: PointsOrCount, degree: Optional[int] = None) -> List[float]:
    """Return a clamped knot vector with ``degree + 1`` repeated end knots.

    Curves built on these knots start at the first control point and end at
    the last one; with ``degree == count - 1`` the curve is a Bezier curve.
    """

    count, degree = _count_and_degree(control_points, degree)
    order = degree + 1
    extras = count - order
    ret = [0.0] * order
    ret.extend(float(i + 1) for i in range(extras))
    ret.extend([float(extras + 1)] * order)
    return ret


def find_span(knots: Sequence[float], t: float) -> int:
    """Return ``k`` with ``knots[k] <= t < knots[k + 1]``, or ``-1``."""

    for k in range(len(knots) - 1):
        if knots[k] <= t < knots[k + 1]:
            return k
    return -1


def basis_factors(knots: Sequence[float], t: float, order: int, num_points: int,
                  out: Optional[MutableSequence[float]] = None) -> MutableSequence[float]:
    """Return the ``num_points`` B-spline basis weights of ``order`` at ``t``.

    If ``out`` is given it is zeroed and filled in place (and grown if it is
    too short), which lets callers evaluate repeatedly without allocating
    an output list.

    When ``t`` falls outside every knot span the weights are all zero; the
    result then contributes nothing to a curve point.
    """

    if out is None:
        out = [0.0] * num_points
    else:
        if len(out) < num_points:
            out.extend([0.0] * (num_points - len(out)))
        for i in range(num_points):
            out[i] = 0.0

    if t == knots[0]:
        out[0] = 1.0
        return out
    if t == knots[-1]:
        out[num_points - 1] = 1.0
        return out

    k = find_span(knots, t)
    if k < 0:
        logger.debug("parameter %r lies outside knot range [%r, %r]",
                     t, knots[0], knots[-1])
        return out

    n_knots = len(knots)
    prev = [0.0] * n_knots
    prev[k] = 1.0
    for kk in range(2, order + 1):
        cur = [0.0] * n_knots
        for i in range(max(k - kk + 1, 0), k + 1):
            ret = 0.0
            prv = prev[i]
            if prv != 0.0 and i + kk - 1 < n_knots:
                divisor = knots[i + kk - 1] - knots[i]
                if divisor != 0.0:
                    ret += prv * (t - knots[i]) / divisor
            nxt = prev[i + 1] if i + 1 < n_knots else 0.0
            if nxt != 0.0 and i + kk < n_knots:
                ikk = knots[i + kk]
                divisor = ikk - knots[i + 1]
                if divisor != 0.0:
                    ret += nxt * (ikk - t) / divisor
            cur[i] = ret
        prev = cur

    for i in range(max(k - order + 1, 0), min(k + 1, num_points)):
        out[i] = prev[i]
    return out


__all__ = [
    'check_knots',
    'uniform_knots',
    'clamped_knots',
    'find_span',
    'basis_factors',
]
