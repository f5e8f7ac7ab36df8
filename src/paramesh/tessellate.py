"""Tessellation drivers for parametric curves and surfaces.

:class:`CurveEval` and :class:`SurfaceEval` hold up to four independent
evaluators (vertex, normal, color and texture coordinate), sample them at
evenly spaced parameters and feed the results to a mesh builder such as
:class:`paramesh.mesh.Mesh`.  The builder only needs ``mode``, ``vertex3``,
``normal3``, ``color3``, ``tex_coord2`` and the readable ``normal``,
``color`` and ``tex_coord`` attributes.

Sampling never disturbs attribute values the caller latched on the builder
beforehand: every attribute a driver writes is put back once the driver's
vertices have been emitted.

Example::

    mesh = Mesh()
    surface = BezierSurface(control_grid)
    SurfaceEval().vertex(surface).set_auto_normal(True).eval_surface(
        mesh, Primitive.TRIANGLES, 16, 16)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from paramesh.config import get_defaults
from paramesh.errors import InvalidConfigurationError
from paramesh.evaluator import as_curve_evaluator, as_surface_evaluator
from paramesh.mesh import Primitive
from paramesh.vecmath import (
    Vec3,
    cross3,
    is_zero3,
    length3,
    normalize3,
    scale3,
    sub3,
    to_vec3,
)

logger = logging.getLogger(__name__)


def _check_count(value: int, name: str) -> int:
    if value <= 0:
        raise InvalidConfigurationError(f"invalid {name}: {value}", {name: value})
    return int(value)


def _param(lo: float, hi: float, i: int, n: int) -> float:
    """Parameter of sample ``i`` of ``n`` steps; the last one is exactly ``hi``."""

    if i == n:
        return hi
    return i * ((hi - lo) / n) + lo


def _tex2(tc: Sequence[float]) -> Tuple[float, float]:
    return float(tc[0]), (float(tc[1]) if len(tc) > 1 else 0.0)


# ---------------------------------------------------------------------------
# Curves
# ---------------------------------------------------------------------------

class CurveEval:
    """Samples curve evaluators into points or line strips."""

    def __init__(self):
        self.vertex_curve = None
        self.normal_curve = None
        self.color_curve = None
        self.tex_coord_curve = None

    def vertex(self, evaluator) -> "CurveEval":
        self.vertex_curve = as_curve_evaluator(evaluator)
        return self

    def normal(self, evaluator) -> "CurveEval":
        self.normal_curve = as_curve_evaluator(evaluator)
        return self

    def color(self, evaluator) -> "CurveEval":
        self.color_curve = as_curve_evaluator(evaluator)
        return self

    def tex_coord(self, evaluator) -> "CurveEval":
        self.tex_coord_curve = as_curve_evaluator(evaluator)
        return self

    def eval_one(self, mesh, u: float) -> "CurveEval":
        """Emit the single vertex at ``u`` using all configured evaluators."""

        if self.tex_coord_curve is None and self.normal_curve is None:
            return self._eval_one_simplified(mesh, u)
        if self.vertex_curve is None:
            return self
        color = self.color_curve.evaluate(u) if self.color_curve is not None else None
        texcoord = self.tex_coord_curve.evaluate(u) if self.tex_coord_curve is not None else None
        normal = self.normal_curve.evaluate(u) if self.normal_curve is not None else None

        old_color = mesh.color if color is not None else None
        old_normal = mesh.normal if normal is not None else None
        old_tex = mesh.tex_coord if texcoord is not None else None
        if color is not None:
            mesh.color3(color[0], color[1], color[2])
        if normal is not None:
            mesh.normal3(normal[0], normal[1], normal[2])
        if texcoord is not None:
            mesh.tex_coord2(*_tex2(texcoord))
        mesh.vertex3(*to_vec3(self.vertex_curve.evaluate(u)))
        if old_color is not None:
            mesh.color3(*old_color)
        if old_normal is not None:
            mesh.normal3(*old_normal)
        if old_tex is not None:
            mesh.tex_coord2(*old_tex)
        return self

    def _eval_one_simplified(self, mesh, u: float) -> "CurveEval":
        if self.vertex_curve is None:
            return self
        color = self.color_curve.evaluate(u) if self.color_curve is not None else None
        old_color = mesh.color if color is not None else None
        if color is not None:
            mesh.color3(color[0], color[1], color[2])
        mesh.vertex3(*to_vec3(self.vertex_curve.evaluate(u)))
        if old_color is not None:
            mesh.color3(*old_color)
        return self

    def eval_curve(self, mesh, mode=Primitive.LINES, n: Optional[int] = None,
                   u1: float = 0.0, u2: float = 1.0) -> "CurveEval":
        """Emit ``n + 1`` samples of ``[u1, u2]`` as points or a line strip."""

        if n is None:
            n = get_defaults().curve_subdivisions
        n = _check_count(n, 'n')
        if mode is None:
            mode = Primitive.LINES
        mode = Primitive(mode)
        if mode == Primitive.POINTS:
            mesh.mode(Primitive.POINTS)
        elif mode in (Primitive.LINES, Primitive.LINE_STRIP):
            mesh.mode(Primitive.LINE_STRIP)
        else:
            raise InvalidConfigurationError(
                f"curves can't be tessellated as {mode.name}", {'mode': int(mode)})
        logger.debug("eval_curve: %s, n=%d over [%r, %r]", mode.name, n, u1, u2)
        for i in range(n + 1):
            self.eval_one(mesh, _param(u1, u2, i, n))
        return self


# ---------------------------------------------------------------------------
# Automatic normals
# ---------------------------------------------------------------------------

class NormalRule(Enum):
    """Which branch of the finite-difference normal estimate applies."""

    CROSS = 'cross'                # both partials usable: normalized cross product
    REUSE_V = 'reuse_v'            # d/du degenerate: use d/dv as is
    CANONICAL_UP = 'canonical_up'  # d/dv degenerate and z unchanged: +Z
    REUSE_U = 'reuse_u'            # d/dv degenerate otherwise: use d/du as is


def classify_partials(du_vec: Vec3, dv_vec: Vec3, vertex: Vec3) -> NormalRule:
    """Pick the normal rule for normalized partial derivatives.

    The checks run in a fixed order; the first that matches wins.
    """

    if length3(du_vec) == 0:
        return NormalRule.REUSE_V
    if length3(dv_vec) == 0 and du_vec[2] == vertex[2]:
        return NormalRule.CANONICAL_UP
    if length3(dv_vec) != 0:
        return NormalRule.CROSS
    return NormalRule.REUSE_U


def _probe(func: Callable[[float, float], Sequence[float]], u: float, v: float,
           du: float, dv: float) -> Tuple[Vec3, float, float]:
    # a probe that lands exactly on the origin usually means it left the
    # evaluator's domain, so the step is reversed
    probe = to_vec3(func(u + du, v + dv))
    if is_zero3(probe):
        du, dv = -du, -dv
        probe = to_vec3(func(u + du, v + dv))
    return probe, du, dv


def estimate_normal(evaluator, u: float, v: float, vertex: Optional[Vec3] = None,
                    epsilon: Optional[float] = None) -> Tuple[Vec3, NormalRule]:
    """Approximate the surface normal of ``evaluator`` at ``(u, v)``.

    The tangents are forward differences of step ``epsilon`` (backward when
    the forward probe collapses to the zero vector).  This is a numerical
    estimate, not an analytic derivative, and the degenerate branches are
    heuristics; see :class:`NormalRule`.
    """

    if epsilon is None:
        epsilon = get_defaults().normal_epsilon
    if vertex is None:
        vertex = to_vec3(evaluator.evaluate(u, v))
    vu, du, _ = _probe(evaluator.evaluate, u, v, epsilon, 0.0)
    vv, _, dv = _probe(evaluator.evaluate, u, v, 0.0, epsilon)
    vu = normalize3(scale3(sub3(vu, vertex), 1.0 / du))
    vv = normalize3(scale3(sub3(vv, vertex), 1.0 / dv))

    rule = classify_partials(vu, vv, vertex)
    if rule is NormalRule.REUSE_V:
        normal = vv
    elif rule is NormalRule.CANONICAL_UP:
        normal = (0.0, 0.0, 1.0)
    elif rule is NormalRule.CROSS:
        normal = normalize3(cross3(vu, vv))
    else:
        normal = vu
    return normal, rule


# ---------------------------------------------------------------------------
# Surfaces
# ---------------------------------------------------------------------------

@dataclass
class _Sample:
    vertex: Optional[Vec3] = None
    normal: Optional[Vec3] = None
    color: Optional[Vec3] = None
    tex_coord: Optional[Tuple[float, float]] = None


@dataclass
class _Saved:
    normal: Optional[Vec3] = None
    color: Optional[Vec3] = None
    tex_coord: Optional[Tuple[float, float]] = None


class SurfaceEval:
    """Samples surface evaluators into triangle strips, line grids or points."""

    def __init__(self):
        self.vertex_surface = None
        self.normal_surface = None
        self.color_surface = None
        self.tex_coord_surface = None
        self.auto_normal = False

    def set_auto_normal(self, value: bool) -> "SurfaceEval":
        """Estimate normals numerically when no normal evaluator is set."""

        self.auto_normal = bool(value)
        return self

    def vertex(self, evaluator) -> "SurfaceEval":
        self.vertex_surface = as_surface_evaluator(evaluator)
        return self

    def normal(self, evaluator) -> "SurfaceEval":
        self.normal_surface = as_surface_evaluator(evaluator)
        return self

    def color(self, evaluator) -> "SurfaceEval":
        self.color_surface = as_surface_evaluator(evaluator)
        return self

    def tex_coord(self, evaluator) -> "SurfaceEval":
        self.tex_coord_surface = as_surface_evaluator(evaluator)
        return self

    @property
    def _writes_normals(self) -> bool:
        return self.normal_surface is not None or self.auto_normal

    def _save(self, mesh) -> _Saved:
        saved = _Saved()
        if self.color_surface is not None:
            saved.color = mesh.color
        if self._writes_normals:
            saved.normal = mesh.normal
        if self.tex_coord_surface is not None:
            saved.tex_coord = mesh.tex_coord
        return saved

    def _restore(self, mesh, saved: _Saved) -> None:
        if saved.color is not None:
            mesh.color3(*saved.color)
        if saved.normal is not None:
            mesh.normal3(*saved.normal)
        if saved.tex_coord is not None:
            mesh.tex_coord2(*saved.tex_coord)

    def _record(self, u: float, v: float) -> _Sample:
        sample = _Sample()
        if self.color_surface is not None:
            c = self.color_surface.evaluate(u, v)
            sample.color = (c[0], c[1], c[2])
        if self.tex_coord_surface is not None:
            sample.tex_coord = _tex2(self.tex_coord_surface.evaluate(u, v))
        if self.normal_surface is not None:
            n = self.normal_surface.evaluate(u, v)
            sample.normal = (n[0], n[1], n[2])
        if self.vertex_surface is not None:
            sample.vertex = to_vec3(self.vertex_surface.evaluate(u, v))
            if self.auto_normal and self.normal_surface is None:
                sample.normal, _ = estimate_normal(self.vertex_surface, u, v, sample.vertex)
        return sample

    def _play_back(self, mesh, sample: _Sample) -> None:
        if sample.vertex is None:
            return
        if sample.color is not None:
            mesh.color3(*sample.color)
        if sample.normal is not None:
            mesh.normal3(*sample.normal)
        if sample.tex_coord is not None:
            mesh.tex_coord2(*sample.tex_coord)
        mesh.vertex3(*sample.vertex)

    def eval_one(self, mesh, u: float, v: float) -> "SurfaceEval":
        """Emit the single vertex at ``(u, v)`` using all configured evaluators."""

        saved = self._save(mesh)
        self._play_back(mesh, self._record(u, v))
        self._restore(mesh, saved)
        return self

    def eval_surface(self, mesh, mode=Primitive.TRIANGLES, un: Optional[int] = None,
                     vn: Optional[int] = None, u1: float = 0.0, u2: float = 1.0,
                     v1: float = 0.0, v2: float = 1.0) -> "SurfaceEval":
        """Tessellate ``[u1, u2] x [v1, v2]`` into ``un x vn`` cells.

        ``TRIANGLES`` emits one triangle strip per row of cells, ``LINES``
        emits a line strip along every row and every column of the sample
        grid, and ``POINTS`` emits every grid sample.
        """

        defaults = get_defaults()
        un = _check_count(defaults.surface_subdivisions if un is None else un, 'un')
        vn = _check_count(defaults.surface_subdivisions if vn is None else vn, 'vn')
        if mode is None:
            mode = Primitive.TRIANGLES
        mode = Primitive(mode)
        logger.debug("eval_surface: %s, %dx%d over [%r, %r]x[%r, %r]",
                     mode.name, un, vn, u1, u2, v1, v2)

        if mode == Primitive.TRIANGLES:
            saved = self._save(mesh)
            # upper-edge samples of the previous row, indexed by column
            previous: List[Optional[_Sample]] = [None] * (un + 1)
            for i in range(vn):
                mesh.mode(Primitive.TRIANGLE_STRIP)
                for j in range(un + 1):
                    jx = _param(u1, u2, j, un)
                    if i == 0:
                        self._play_back(mesh, self._record(jx, v1))
                    else:
                        self._play_back(mesh, previous[j])
                    upper = self._record(jx, _param(v1, v2, i + 1, vn))
                    self._play_back(mesh, upper)
                    previous[j] = upper
            self._restore(mesh, saved)
        elif mode == Primitive.POINTS:
            mesh.mode(Primitive.POINTS)
            for i in range(vn + 1):
                for j in range(un + 1):
                    self.eval_one(mesh, _param(u1, u2, j, un), _param(v1, v2, i, vn))
        elif mode in (Primitive.LINES, Primitive.LINE_STRIP):
            for i in range(vn + 1):
                mesh.mode(Primitive.LINE_STRIP)
                for j in range(un + 1):
                    self.eval_one(mesh, _param(u1, u2, j, un), _param(v1, v2, i, vn))
            for i in range(un + 1):
                mesh.mode(Primitive.LINE_STRIP)
                for j in range(vn + 1):
                    self.eval_one(mesh, _param(u1, u2, i, un), _param(v1, v2, j, vn))
        else:
            raise InvalidConfigurationError(
                f"surfaces can't be tessellated as {mode.name}", {'mode': int(mode)})
        return self


__all__ = [
    'CurveEval',
    'SurfaceEval',
    'NormalRule',
    'classify_partials',
    'estimate_normal',
]
