"""Sine/cosine tables for evenly subdivided arcs.

Primitive generators walk the same circle many times (once per stack,
loop or ring), so the angular samples are computed once and shared.  A full
revolution is pinned so that the first and last samples are *identical*,
which keeps seams watertight.
"""

from __future__ import annotations

from math import cos, pi, sin, sqrt
from typing import Iterator, Tuple

from paramesh.errors import InvalidConfigurationError

TWO_PI = 2.0 * pi
DEG_TO_RAD = pi / 180.0


def sincos(angle: float) -> Tuple[float, float]:
    """Return ``(sin(angle), cos(angle))``.

    Inside ``[0, 2*pi)`` the sine is derived from the cosine so that the
    pair always lies on the unit circle; the radicand is clamped at zero to
    stay clear of rounding below ``0``.
    """

    c = cos(angle)
    if 0.0 <= angle < TWO_PI:
        s = sqrt(max(0.0, 1.0 - c * c))
        if angle > pi:
            s = -s
        return s, c
    return sin(angle), c


class TrigTable:
    """Sine/cosine pairs for ``slices`` equal subdivisions of an arc.

    The table holds ``slices + 1`` entries; entry ``i`` corresponds to the
    angle ``start + sweep * i / slices`` and to the parameter ``i / slices``
    (see :attr:`params`).  For a full revolution entry ``slices`` is a copy
    of entry ``0``, and a revolution starting at angle ``0`` starts exactly
    at ``(sin, cos) == (0, 1)``.
    """

    def __init__(self, slices: int, start: float = 0.0, sweep: float = TWO_PI):
        if slices < 1:
            raise InvalidConfigurationError(
                f"trig table needs at least one slice, got {slices}",
                {'slices': slices},
            )
        self._slices = int(slices)
        full = abs(sweep) >= TWO_PI
        sines = []
        cosines = []
        params = []
        for i in range(self._slices + 1):
            t = i / self._slices
            angle = start + sweep * t
            angle %= TWO_PI
            s, c = sincos(angle)
            sines.append(s)
            cosines.append(c)
            params.append(t)
        if full:
            if start == 0.0:
                sines[0], cosines[0] = 0.0, 1.0
            sines[-1], cosines[-1] = sines[0], cosines[0]
        params[-1] = 1.0
        self._sines = tuple(sines)
        self._cosines = tuple(cosines)
        self._params = tuple(params)

    @classmethod
    def from_degrees(cls, slices: int, start: float = 0.0, sweep: float = 360.0) -> "TrigTable":
        """Build a table from an angle and a sweep given in degrees."""

        return cls(slices, start * DEG_TO_RAD, sweep * DEG_TO_RAD)

    @property
    def slices(self) -> int:
        return self._slices

    @property
    def sines(self) -> Tuple[float, ...]:
        return self._sines

    @property
    def cosines(self) -> Tuple[float, ...]:
        return self._cosines

    @property
    def params(self) -> Tuple[float, ...]:
        return self._params

    def __len__(self) -> int:
        return self._slices + 1

    def __getitem__(self, index: int) -> Tuple[float, float]:
        return self._sines[index], self._cosines[index]

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(zip(self._sines, self._cosines))

    def __repr__(self) -> str:
        return f"TrigTable(slices={self._slices})"


__all__ = ['TWO_PI', 'DEG_TO_RAD', 'sincos', 'TrigTable']
