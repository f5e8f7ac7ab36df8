"""Incremental mesh builder.

:class:`Mesh` follows the immediate-mode pattern used by the tessellation
drivers and primitive generators: select a primitive mode, latch the
current normal, color and texture coordinate, then emit vertices.  Every
vertex captures the attributes latched at the moment it is emitted.

Strips and fans are expanded on the fly into indexed triangles, and line
strips into line segments, so a finished mesh only ever contains three
index lists: :attr:`Mesh.faces` (triangles), :attr:`Mesh.lines` and
:attr:`Mesh.points`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, List, Tuple

from paramesh.vecmath import (
    Vec3,
    add3,
    cross3,
    length3,
    normalize3,
    sub3,
    triangle_normal,
)

Vec2 = Tuple[float, float]
TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]

_VERTEX_TOL = 1e-9


class Primitive(IntEnum):
    """Primitive assembly modes (numbered as in OpenGL)."""

    POINTS = 0
    LINES = 1
    LINE_STRIP = 3
    TRIANGLES = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN = 6


@dataclass(frozen=True)
class Vertex:
    """Immutable snapshot of one mesh vertex and its attributes."""

    position: Vec3
    normal: Vec3
    color: Vec3
    tex_coord: Vec2


def _vertex_key(v: Vec3, tol: float = _VERTEX_TOL) -> Tuple[int, int, int]:
    scale = 1.0 / tol
    return (int(round(v[0] * scale)), int(round(v[1] * scale)), int(round(v[2] * scale)))


class Mesh:
    """Append-only collection of vertices and indexed primitives."""

    def __init__(self):
        self._positions: List[Vec3] = []
        self._normals: List[Vec3] = []
        self._colors: List[Vec3] = []
        self._tex_coords: List[Vec2] = []
        self.faces: List[Tuple[int, int, int]] = []
        self.lines: List[Tuple[int, int]] = []
        self.points: List[int] = []

        self._normal: Vec3 = (0.0, 0.0, 0.0)
        self._color: Vec3 = (0.0, 0.0, 0.0)
        self._tex_coord: Vec2 = (0.0, 0.0)
        self.has_normals = False
        self.has_colors = False
        self.has_tex_coords = False

        self._mode = Primitive.TRIANGLES
        self._run: List[int] = []
        self._strip_count = 0

    def __repr__(self):
        return (f"Mesh({len(self._positions)} vertices, {len(self.faces)} triangles, "
                f"{len(self.lines)} lines, {len(self.points)} points)")

    # -- current attribute state -------------------------------------------

    @property
    def normal(self) -> Vec3:
        return self._normal

    @property
    def color(self) -> Vec3:
        return self._color

    @property
    def tex_coord(self) -> Vec2:
        return self._tex_coord

    @property
    def current_mode(self) -> Primitive:
        return self._mode

    def mode(self, kind) -> "Mesh":
        """Start a new primitive run of ``kind``."""

        self._mode = Primitive(kind)
        self._run = []
        self._strip_count = 0
        return self

    def normal3(self, x: float, y: float, z: float) -> "Mesh":
        self._normal = (float(x), float(y), float(z))
        self.has_normals = True
        return self

    def color3(self, r: float, g: float, b: float) -> "Mesh":
        self._color = (float(r), float(g), float(b))
        self.has_colors = True
        return self

    def tex_coord2(self, u: float, v: float) -> "Mesh":
        self._tex_coord = (float(u), float(v))
        self.has_tex_coords = True
        return self

    def vertex2(self, x: float, y: float) -> "Mesh":
        return self.vertex3(x, y, 0.0)

    def vertex3(self, x: float, y: float, z: float) -> "Mesh":
        """Append a vertex with the latched attributes and assemble it."""

        idx = len(self._positions)
        self._positions.append((float(x), float(y), float(z)))
        self._normals.append(self._normal)
        self._colors.append(self._color)
        self._tex_coords.append(self._tex_coord)
        self._assemble(idx)
        return self

    def _assemble(self, idx: int) -> None:
        mode = self._mode
        run = self._run
        if mode == Primitive.POINTS:
            self.points.append(idx)
        elif mode == Primitive.LINES:
            run.append(idx)
            if len(run) == 2:
                self.lines.append((run[0], run[1]))
                run.clear()
        elif mode == Primitive.LINE_STRIP:
            if run:
                self.lines.append((run[-1], idx))
            self._run = [idx]
        elif mode == Primitive.TRIANGLES:
            run.append(idx)
            if len(run) == 3:
                self.faces.append((run[0], run[1], run[2]))
                run.clear()
        elif mode == Primitive.TRIANGLE_STRIP:
            run.append(idx)
            if len(run) == 3:
                a, b, c = run
                # every other strip triangle is flipped to keep winding consistent
                if self._strip_count % 2 == 0:
                    self.faces.append((a, b, c))
                else:
                    self.faces.append((b, a, c))
                self._strip_count += 1
                del run[0]
        elif mode == Primitive.TRIANGLE_FAN:
            run.append(idx)
            if len(run) == 3:
                self.faces.append((run[0], run[1], run[2]))
                del run[1]

    # -- queries -------------------------------------------------------------

    @property
    def vertex_count(self) -> int:
        return len(self._positions)

    @property
    def primitive_count(self) -> int:
        return len(self.faces) + len(self.lines) + len(self.points)

    @property
    def positions(self) -> List[Vec3]:
        return list(self._positions)

    @property
    def normals(self) -> List[Vec3]:
        return list(self._normals)

    @property
    def colors(self) -> List[Vec3]:
        return list(self._colors)

    @property
    def tex_coords(self) -> List[Vec2]:
        return list(self._tex_coords)

    def vertex_at(self, index: int) -> Vertex:
        return Vertex(
            position=self._positions[index],
            normal=self._normals[index],
            color=self._colors[index],
            tex_coord=self._tex_coords[index],
        )

    def triangles(self) -> Iterator[TriTuple]:
        """Yield ``(normal, v0, v1, v2)`` for every non-degenerate triangle.

        The normal is the geometric face normal; stored vertex normals are
        not consulted.
        """

        for i0, i1, i2 in self.faces:
            v0 = self._positions[i0]
            v1 = self._positions[i1]
            v2 = self._positions[i2]
            n = triangle_normal(v0, v1, v2)
            if n is None:
                continue
            yield n, v0, v1, v2

    def as_arrays(self) -> Dict[str, "np.ndarray"]:
        """Return the mesh as numpy arrays keyed by attribute name."""

        import numpy as np

        return {
            'positions': np.asarray(self._positions, dtype=float).reshape(-1, 3),
            'normals': np.asarray(self._normals, dtype=float).reshape(-1, 3),
            'colors': np.asarray(self._colors, dtype=float).reshape(-1, 3),
            'tex_coords': np.asarray(self._tex_coords, dtype=float).reshape(-1, 2),
            'faces': np.asarray(self.faces, dtype=np.int64).reshape(-1, 3),
            'lines': np.asarray(self.lines, dtype=np.int64).reshape(-1, 2),
            'points': np.asarray(self.points, dtype=np.int64),
        }

    # -- whole-mesh operations ----------------------------------------------

    def recalc_normals(self, flat: bool = False, inward: bool = False) -> "Mesh":
        """Replace vertex normals with normals derived from the triangles.

        Smooth normals average the face normals of all triangles sharing a
        vertex position.  Flat normals give each triangle its own vertices
        carrying the face normal.
        """

        sign = -1.0 if inward else 1.0
        if flat:
            seen = set()
            for f, face in enumerate(self.faces):
                n = triangle_normal(*(self._positions[i] for i in face)) or (0.0, 0.0, 0.0)
                n = (n[0] * sign, n[1] * sign, n[2] * sign)
                new_face = []
                for idx in face:
                    if idx in seen:
                        idx = self._duplicate(idx)
                    seen.add(idx)
                    self._normals[idx] = n
                    new_face.append(idx)
                self.faces[f] = (new_face[0], new_face[1], new_face[2])
        else:
            sums: Dict[Tuple[int, int, int], Vec3] = {}
            for face in self.faces:
                v0, v1, v2 = (self._positions[i] for i in face)
                n = cross3(sub3(v1, v0), sub3(v2, v0))
                for v in (v0, v1, v2):
                    key = _vertex_key(v)
                    sums[key] = add3(sums.get(key, (0.0, 0.0, 0.0)), n)
            for face in self.faces:
                for idx in face:
                    n = normalize3(sums[_vertex_key(self._positions[idx])])
                    self._normals[idx] = (n[0] * sign, n[1] * sign, n[2] * sign)
        self.has_normals = True
        return self

    def _duplicate(self, idx: int) -> int:
        self._positions.append(self._positions[idx])
        self._normals.append(self._normals[idx])
        self._colors.append(self._colors[idx])
        self._tex_coords.append(self._tex_coords[idx])
        return len(self._positions) - 1

    def normalize_normals(self) -> "Mesh":
        self._normals = [normalize3(n) for n in self._normals]
        return self

    def reverse_winding(self) -> "Mesh":
        self.faces = [(a, c, b) for a, b, c in self.faces]
        return self

    def reverse_normals(self) -> "Mesh":
        self._normals = [(-n[0], -n[1], -n[2]) for n in self._normals]
        return self

    def merge(self, other: "Mesh") -> "Mesh":
        """Append the vertices and primitives of ``other`` to this mesh."""

        offset = len(self._positions)
        self._positions.extend(other._positions)
        self._normals.extend(other._normals)
        self._colors.extend(other._colors)
        self._tex_coords.extend(other._tex_coords)
        self.faces.extend((a + offset, b + offset, c + offset) for a, b, c in other.faces)
        self.lines.extend((a + offset, b + offset) for a, b in other.lines)
        self.points.extend(p + offset for p in other.points)
        self.has_normals = self.has_normals or other.has_normals
        self.has_colors = self.has_colors or other.has_colors
        self.has_tex_coords = self.has_tex_coords or other.has_tex_coords
        return self

    def transform(self, matrix) -> "Mesh":
        """Transform positions (and normals) by a :class:`paramesh.xform.Matrix`."""

        self._positions = [matrix.apply_point(p) for p in self._positions]
        self._normals = [n if length3(n) == 0.0 else matrix.apply_normal(n)
                         for n in self._normals]
        return self


__all__ = ['Primitive', 'Vertex', 'Mesh']
