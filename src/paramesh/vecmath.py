"""Small 3-vector helpers shared by the tessellators, mesh and exporters."""

from __future__ import annotations

from math import sqrt
from typing import Optional, Sequence, Tuple

Vec3 = Tuple[float, float, float]

epsilon = 0.000005

def to_vec3(value: Sequence[float]) -> Vec3:
    """Return the XYZ components of ``value``; a missing Z becomes ``0``."""

    if len(value) < 2:
        raise ValueError("value must have at least two components")
    z = float(value[2]) if len(value) > 2 else 0.0
    return float(value[0]), float(value[1]), z

def add3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return a[0] + b[0], a[1] + b[1], a[2] + b[2]

def sub3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return a[0] - b[0], a[1] - b[1], a[2] - b[2]

def scale3(a: Sequence[float], s: float) -> Vec3:
    return a[0] * s, a[1] * s, a[2] * s

def cross3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )

def length3(a: Sequence[float]) -> float:
    return sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])

def normalize3(a: Sequence[float]) -> Vec3:
    """Return ``a`` scaled to unit length; the zero vector is returned as is."""

    length = length3(a)
    if length == 0.0:
        return float(a[0]), float(a[1]), float(a[2])
    return a[0] / length, a[1] / length, a[2] / length

def is_zero3(a: Sequence[float]) -> bool:
    """``True`` only for an exact zero vector (no tolerance)."""

    return a[0] == 0 and a[1] == 0 and a[2] == 0

def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Optional[Vec3]:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    n = cross3(sub3(v1, v0), sub3(v2, v0))
    length = length3(n)
    if length <= epsilon * epsilon:
        return None
    return n[0] / length, n[1] / length, n[2] / length

__all__ = [
    'Vec3',
    'epsilon',
    'to_vec3',
    'add3',
    'sub3',
    'scale3',
    'cross3',
    'length3',
    'normalize3',
    'is_zero3',
    'triangle_normal',
]
