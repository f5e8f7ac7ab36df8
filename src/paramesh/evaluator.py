"""The evaluator capability shared by every parametric source.

Anything with an ``evaluate(u)`` method is a curve evaluator and anything
with ``evaluate(u, v)`` is a surface evaluator.  B-spline and Bezier
evaluators implement these directly; :class:`FunctionCurve` and
:class:`FunctionSurface` wrap plain callables so that lambdas can be fed to
the tessellation drivers as well.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence, runtime_checkable


@runtime_checkable
class CurveEvaluator(Protocol):
    def evaluate(self, u: float) -> Sequence[float]:
        ...


@runtime_checkable
class SurfaceEvaluator(Protocol):
    def evaluate(self, u: float, v: float) -> Sequence[float]:
        ...


class FunctionCurve:
    """Curve evaluator backed by a callable ``func(u) -> point``."""

    def __init__(self, func: Callable[[float], Sequence[float]]):
        if not callable(func):
            raise TypeError(f"expected a callable, got {func!r}")
        self._func = func

    def evaluate(self, u: float) -> Sequence[float]:
        return self._func(u)

    def __repr__(self) -> str:
        return f"FunctionCurve({self._func!r})"


class FunctionSurface:
    """Surface evaluator backed by a callable ``func(u, v) -> point``."""

    def __init__(self, func: Callable[[float, float], Sequence[float]]):
        if not callable(func):
            raise TypeError(f"expected a callable, got {func!r}")
        self._func = func

    def evaluate(self, u: float, v: float) -> Sequence[float]:
        return self._func(u, v)

    def __repr__(self) -> str:
        return f"FunctionSurface({self._func!r})"


def as_curve_evaluator(value):
    """Return ``value`` as a curve evaluator (``None`` passes through)."""

    if value is None or hasattr(value, 'evaluate'):
        return value
    if callable(value):
        return FunctionCurve(value)
    raise TypeError(f"not a curve evaluator: {value!r}")


def as_surface_evaluator(value):
    """Return ``value`` as a surface evaluator (``None`` passes through)."""

    if value is None or hasattr(value, 'evaluate'):
        return value
    if callable(value):
        return FunctionSurface(value)
    raise TypeError(f"not a surface evaluator: {value!r}")


__all__ = [
    'CurveEvaluator',
    'SurfaceEvaluator',
    'FunctionCurve',
    'FunctionSurface',
    'as_curve_evaluator',
    'as_surface_evaluator',
]
