"""Closed-form mesh primitives.

Every generator returns a new :class:`paramesh.mesh.Mesh` with positions,
normals and texture coordinates.  Round shapes walk a shared
:class:`paramesh.trig.TrigTable` so that the seam at angle ``0``/``2*pi``
closes exactly.

Conventions:

* cylinders, cones, capsules, spheres, lathes and tori are built around
  the Z axis with their base at the origin (capsules and spheres are
  centered on it);
* disks, planes and stars lie in the XY plane facing +Z;
* ``inward``/``inside`` flips normals so the shape can be viewed from
  within;
* ``flat`` replaces smooth normals with per-face normals.

Invalid arguments raise :class:`InvalidConfigurationError`; legal but empty
shapes (a zero radius or height) produce an empty mesh.
"""

from __future__ import annotations

import logging
from math import atan2
from typing import Optional, Sequence, Tuple

from paramesh.config import get_defaults
from paramesh.errors import InvalidConfigurationError
from paramesh.mesh import Mesh, Primitive
from paramesh.trig import DEG_TO_RAD, TWO_PI, TrigTable, sincos
from paramesh.xform import Translation

logger = logging.getLogger(__name__)


def _require(condition: bool, message: str, **details) -> None:
    if not condition:
        raise InvalidConfigurationError(message, details)


def _empty(name: str, reason: str) -> Mesh:
    logger.debug("%s: %s, returning empty mesh", name, reason)
    return Mesh()


# ---------------------------------------------------------------------------
# Box
# ---------------------------------------------------------------------------

# per face: normal, then four corners as (x, y, z, u, v) with signs on
# the half extents
_BOX_FACES = (
    ((-1.0, 0.0, 0.0), ((-1, -1, 1, 1, 0), (-1, 1, 1, 1, 1), (-1, 1, -1, 0, 1), (-1, -1, -1, 0, 0))),
    ((1.0, 0.0, 0.0), ((1, -1, -1, 1, 0), (1, 1, -1, 1, 1), (1, 1, 1, 0, 1), (1, -1, 1, 0, 0))),
    ((0.0, -1.0, 0.0), ((1, -1, -1, 1, 0), (1, -1, 1, 1, 1), (-1, -1, 1, 0, 1), (-1, -1, -1, 0, 0))),
    ((0.0, 1.0, 0.0), ((1, 1, 1, 1, 0), (1, 1, -1, 1, 1), (-1, 1, -1, 0, 1), (-1, 1, 1, 0, 0))),
    ((0.0, 0.0, -1.0), ((-1, -1, -1, 1, 0), (-1, 1, -1, 1, 1), (1, 1, -1, 0, 1), (1, -1, -1, 0, 0))),
    ((0.0, 0.0, 1.0), ((1, -1, 1, 1, 0), (1, 1, 1, 1, 1), (-1, 1, 1, 0, 1), (-1, -1, 1, 0, 0))),
)


def create_box(x_size: float, y_size: float, z_size: float, inward: bool = False) -> Mesh:
    """Axis-aligned box centered on the origin (two triangles per face)."""

    hx, hy, hz = x_size * 0.5, y_size * 0.5, z_size * 0.5
    sign = -1.0 if inward else 1.0
    mesh = Mesh()
    for normal, corners in _BOX_FACES:
        mesh.mode(Primitive.TRIANGLE_FAN)
        mesh.normal3(normal[0] * sign, normal[1] * sign, normal[2] * sign)
        for sx, sy, sz, u, v in corners:
            mesh.tex_coord2(u, v).vertex3(sx * hx, sy * hy, sz * hz)
    return mesh


# ---------------------------------------------------------------------------
# Cylinders, cones and lathes
# ---------------------------------------------------------------------------

def create_cylinder(base_rad: float, top_rad: float, height: float,
                    slices: Optional[int] = None, stacks: Optional[int] = None,
                    flat: bool = False, inside: bool = False) -> Mesh:
    """Open cylinder (or truncated cone) from z=0 to z=height."""

    defaults = get_defaults()
    slices = defaults.slices if slices is None else slices
    stacks = defaults.stacks if stacks is None else stacks
    _require(slices > 2, "too few slices", slices=slices)
    _require(stacks >= 1, "too few stacks", stacks=stacks)
    _require(height >= 0, "negative height", height=height)
    if (base_rad <= 0 and top_rad <= 0) or height == 0:
        return _empty('create_cylinder', 'no radius or height')

    mesh = Mesh()
    table = TrigTable(slices)
    norm_dir = -1.0 if inside else 1.0
    if base_rad == top_rad:
        sin_slope, cos_slope = 0.0, norm_dir
    else:
        sin_slope, cos_slope = sincos(atan2(base_rad - top_rad, height))
        sin_slope *= norm_dir
        cos_slope *= norm_dir

    last_z = 0.0
    last_rad = base_rad
    for i in range(stacks):
        z_start = last_z
        z_end = 1.0 if i + 1 == stacks else (i + 1) / stacks
        radius_start = last_rad
        radius_end = base_rad + (top_rad - base_rad) * z_end
        last_z, last_rad = z_end, radius_end
        mesh.mode(Primitive.TRIANGLE_STRIP)
        for (x, y), tx in zip(table, table.params):
            mesh.normal3(x * cos_slope, y * cos_slope, sin_slope)
            mesh.tex_coord2(1 - tx, z_start)
            mesh.vertex3(x * radius_start, y * radius_start, height * z_start)
            mesh.tex_coord2(1 - tx, z_end)
            mesh.vertex3(x * radius_end, y * radius_end, height * z_end)
    return mesh.recalc_normals(flat, inside) if flat else mesh


def create_cone(base_rad: float, height: float, slices: Optional[int] = None,
                stacks: Optional[int] = None, flat: bool = False,
                inside: bool = False) -> Mesh:
    """Open cone with its apex at z=height."""

    return create_cylinder(base_rad, 0.0, height, slices, stacks, flat, inside)


def create_closed_cylinder(base_rad: float, top_rad: float, height: float,
                           slices: Optional[int] = None, stacks: Optional[int] = None,
                           flat: bool = False, inside: bool = False) -> Mesh:
    """Cylinder capped by disks at both ends."""

    cylinder = create_cylinder(base_rad, top_rad, height, slices, stacks, flat, inside)
    base = create_disk(0.0, base_rad, slices, 2, not inside).reverse_winding()
    top = create_disk(0.0, top_rad, slices, 2, inside)
    top.transform(Translation((0.0, 0.0, height)))
    return cylinder.merge(base).merge(top)


def create_lathe(points: Sequence[Tuple[float, float]], slices: Optional[int] = None,
                 flat: bool = False, inside: bool = False) -> Mesh:
    """Surface of revolution of a ``(radius, z)`` profile about the Z axis."""

    slices = get_defaults().slices if slices is None else slices
    _require(len(points) >= 2, "too few points", points=len(points))
    _require(slices > 2, "too few slices", slices=slices)
    for radius, _ in points:
        _require(radius >= 0, "point's radius is less than 0", radius=radius)

    mesh = Mesh()
    table = TrigTable(slices)
    stacks = len(points) - 1
    last_z = 0.0
    for i in range(stacks):
        z_start = last_z
        z_end = 1.0 if i + 1 == stacks else (i + 1) / stacks
        last_z = z_end
        (radius_start, h_start), (radius_end, h_end) = points[i], points[i + 1]
        if h_start > h_end:
            radius_start, h_start, radius_end, h_end = radius_end, h_end, radius_start, h_start
        mesh.mode(Primitive.TRIANGLE_STRIP)
        for (x, y), tx in zip(table, table.params):
            mesh.tex_coord2(1 - tx, z_start)
            mesh.vertex3(x * radius_start, y * radius_start, h_start)
            mesh.tex_coord2(1 - tx, z_end)
            mesh.vertex3(x * radius_end, y * radius_end, h_end)
    return mesh.recalc_normals(flat, inside)


# ---------------------------------------------------------------------------
# Disks
# ---------------------------------------------------------------------------

def create_disk(inner: float, outer: float, slices: Optional[int] = None,
                loops: Optional[int] = None, inward: bool = False) -> Mesh:
    """Disk or annulus in the XY plane."""

    return create_partial_disk(inner, outer, slices, loops, 0.0, 360.0, inward)


def create_partial_disk(inner: float, outer: float, slices: Optional[int] = None,
                        loops: Optional[int] = None, start: float = 0.0,
                        sweep: float = 360.0, inward: bool = False) -> Mesh:
    """Disk sector; ``start`` and ``sweep`` are in degrees.

    Angles are measured from the +Y axis towards +X.  A negative sweep runs
    the other way.
    """

    slices = get_defaults().slices if slices is None else slices
    loops = 1 if loops is None else loops
    _require(slices > 2, "too few slices", slices=slices)
    _require(loops >= 1, "too few loops", loops=loops)
    _require(inner <= outer, "inner greater than outer", inner=inner, outer=outer)
    inner = max(inner, 0.0)
    outer = max(outer, 0.0)
    if outer == 0 or sweep == 0:
        return _empty('create_partial_disk', 'no radius or sweep')

    sweep_dir = -1.0 if sweep < 0 else 1.0
    sweep = abs(sweep) % 360.0
    if sweep == 0:
        sweep = 360.0
    arc = TWO_PI if sweep == 360.0 else sweep * DEG_TO_RAD
    table = TrigTable(slices, start * DEG_TO_RAD, arc * sweep_dir)

    mesh = Mesh()
    mesh.normal3(0.0, 0.0, -1.0 if inward else 1.0)
    height = outer - inner
    last_rad = inner
    for i in range(loops):
        radius_start = last_rad
        radius_end = inner + height * (i + 1) / loops
        last_rad = radius_end
        rso = radius_start / outer
        reo = radius_end / outer
        if i == 0 and inner == 0:
            mesh.mode(Primitive.TRIANGLE_FAN)
            mesh.tex_coord2(0.5, 0.5).vertex3(0.0, 0.0, 0.0)
            for j in range(slices, -1, -1):
                x, y = table[j]
                mesh.tex_coord2((1 + x * reo) * 0.5, (1 + y * reo) * 0.5)
                mesh.vertex3(x * radius_end, y * radius_end, 0.0)
        else:
            mesh.mode(Primitive.TRIANGLE_STRIP)
            for x, y in table:
                mesh.tex_coord2((1 + x * reo) * 0.5, (1 + y * reo) * 0.5)
                mesh.vertex3(x * radius_end, y * radius_end, 0.0)
                mesh.tex_coord2((1 + x * rso) * 0.5, (1 + y * rso) * 0.5)
                mesh.vertex3(x * radius_start, y * radius_start, 0.0)
    return mesh


# ---------------------------------------------------------------------------
# Torus and plane
# ---------------------------------------------------------------------------

def create_torus(inner: float, outer: float, lengthwise: Optional[int] = None,
                 crosswise: Optional[int] = None, flat: bool = False,
                 inward: bool = False) -> Mesh:
    """Torus with tube radius ``inner`` around a ring of radius ``outer``."""

    defaults = get_defaults()
    lengthwise = defaults.torus_segments if lengthwise is None else lengthwise
    crosswise = defaults.torus_segments if crosswise is None else crosswise
    _require(crosswise >= 3, "crosswise is less than 3", crosswise=crosswise)
    _require(lengthwise >= 3, "lengthwise is less than 3", lengthwise=lengthwise)
    _require(inner >= 0 and outer >= 0, "inner or outer is less than 0",
             inner=inner, outer=outer)
    if inner == 0 or outer == 0:
        return _empty('create_torus', 'zero radius')

    mesh = Mesh()
    ring = TrigTable(crosswise)
    tube = TrigTable(lengthwise)
    sign = -1.0 if inward else 1.0
    for j in range(lengthwise):
        v0 = tube.params[j]
        v1 = tube.params[j + 1]
        sinr0, cosr0 = tube[j]
        sinr1, cosr1 = tube[j + 1]
        mesh.mode(Primitive.TRIANGLE_STRIP)
        for (sint, cost), u in zip(ring, ring.params):
            for sinr, cosr, v in ((sinr1, cosr1, v1), (sinr0, cosr0, v0)):
                mesh.normal3(cosr * cost * sign, cosr * sint * sign, sinr * sign)
                mesh.tex_coord2(u, v)
                mesh.vertex3(cost * (outer + cosr * inner),
                             sint * (outer + cosr * inner),
                             sinr * inner)
    return mesh.recalc_normals(flat, inward) if flat else mesh


def create_plane(width: float = 1.0, height: float = 1.0, width_div: int = 1,
                 height_div: int = 1, inward: bool = False) -> Mesh:
    """Rectangle in the XY plane centered on the origin."""

    _require(width >= 0 and height >= 0, "width or height is less than 0",
             width=width, height=height)
    _require(width_div > 0 and height_div > 0, "width_div or height_div is 0 or less",
             width_div=width_div, height_div=height_div)
    if width == 0 or height == 0:
        return _empty('create_plane', 'zero width or height')

    mesh = Mesh()
    x_start = -width * 0.5
    y_start = -height * 0.5
    mesh.normal3(0.0, 0.0, -1.0 if inward else 1.0)
    for i in range(height_div):
        mesh.mode(Primitive.TRIANGLE_STRIP)
        i_start = i / height_div
        i_next = (i + 1) / height_div
        y = y_start + height * i_start
        y_next = y_start + height * i_next
        mesh.tex_coord2(0, i_next).vertex3(x_start, y_next, 0.0)
        mesh.tex_coord2(0, i_start).vertex3(x_start, y, 0.0)
        for j in range(width_div):
            jx = (j + 1) / width_div
            x = x_start + width * jx
            mesh.tex_coord2(jx, i_next).vertex3(x, y_next, 0.0)
            mesh.tex_coord2(jx, i_start).vertex3(x, y, 0.0)
    return mesh


# ---------------------------------------------------------------------------
# Spheres and capsules
# ---------------------------------------------------------------------------

def create_sphere(radius: float = 1.0, slices: Optional[int] = None,
                  stacks: Optional[int] = None, flat: bool = False,
                  inside: bool = False) -> Mesh:
    """Sphere centered on the origin, poles on the Z axis."""

    defaults = get_defaults()
    slices = defaults.sphere_slices if slices is None else slices
    stacks = defaults.sphere_stacks if stacks is None else stacks
    return _create_capsule(radius, 0.0, slices, stacks, 1, flat, inside)


def create_capsule(radius: float = 1.0, length: float = 1.0,
                   slices: Optional[int] = None, stacks: int = 8,
                   middle_stacks: int = 1, flat: bool = False,
                   inside: bool = False) -> Mesh:
    """Cylinder of ``length`` along Z capped by hemispheres.

    ``stacks`` is the number of stacks in each hemisphere.
    """

    _require(stacks >= 1, "too few stacks", stacks=stacks)
    slices = get_defaults().sphere_slices if slices is None else slices
    return _create_capsule(radius, length, slices, stacks * 2, middle_stacks, flat, inside)


def _create_capsule(radius, length, slices, stacks, middle_stacks, flat, inside) -> Mesh:
    _require(stacks >= 2, "too few stacks", stacks=stacks)
    _require(slices > 2, "too few slices", slices=slices)
    _require(middle_stacks >= 1 or length <= 0, "too few middle stacks",
             middle_stacks=middle_stacks)
    _require(length >= 0, "negative length", length=length)
    _require(radius >= 0, "negative radius", radius=radius)
    if radius == 0:
        return _empty('create_capsule', 'zero radius')

    mesh = Mesh()
    half_length = length * 0.5
    half_stacks = stacks / 2
    norm_dir = -1.0 if inside else 1.0
    ring = TrigTable(slices)
    # latitude samples from the -Z pole (index 0) to the +Z pole
    latitude = TrigTable(stacks, 0.0, TWO_PI / 2)
    sphere_ratio = radius * 2
    sphere_ratio /= sphere_ratio + length

    def norm_and_vertex(x, y, z, offset):
        mesh.normal3(x * norm_dir, y * norm_dir, z * norm_dir)
        mesh.vertex3(x, y, z + offset)

    last_ze = -1.0
    last_rad = 0.0
    last_tex = 0.0
    for i in range(stacks):
        zs_cen = last_ze
        ze_cen = -latitude.cosines[i + 1]
        tex_start = last_tex
        tex_end = latitude.params[i + 1]
        z_start = radius * zs_cen
        z_end = radius * ze_cen
        offset = -half_length if i < half_stacks else half_length
        radius_start = last_rad
        radius_end = radius * latitude.sines[i + 1]
        txs, txe = tex_start, tex_end
        if length > 0:
            if i < half_stacks:
                txs = tex_start * sphere_ratio
                txe = tex_end * sphere_ratio
            else:
                txs = 1.0 - (1.0 - tex_start) * sphere_ratio
                txe = 1.0 - (1.0 - tex_end) * sphere_ratio
        last_ze, last_tex, last_rad = ze_cen, tex_end, radius_end

        if i == stacks - 1 or i == 0:
            # pole caps are fans of individual triangles
            mesh.mode(Primitive.TRIANGLES)
        else:
            mesh.mode(Primitive.TRIANGLE_STRIP)
            mesh.tex_coord2(1, txs)
            norm_and_vertex(0, radius_start, z_start, offset)
            mesh.tex_coord2(1, txe)
            norm_and_vertex(0, radius_end, z_end, offset)

        last_tx, last_x, last_y = 0.0, 0.0, 1.0
        for j in range(1, slices + 1):
            tx = ring.params[j]
            x, y = ring[j]
            if i == stacks - 1:
                tx_middle = last_tx + (tx - last_tx) * 0.5
                mesh.tex_coord2(1 - last_tx, txs)
                norm_and_vertex(last_x * radius_start, last_y * radius_start, z_start, offset)
                mesh.tex_coord2(1 - tx_middle, txe)
                norm_and_vertex(0, radius_end, z_end, offset)
                mesh.tex_coord2(1 - tx, txs)
                norm_and_vertex(x * radius_start, y * radius_start, z_start, offset)
            elif i == 0:
                tx_middle = last_tx + (tx - last_tx) * 0.5
                mesh.tex_coord2(1 - tx_middle, txs)
                norm_and_vertex(0, radius_start, z_start, offset)
                mesh.tex_coord2(1 - last_tx, txe)
                norm_and_vertex(last_x * radius_end, last_y * radius_end, z_end, offset)
                mesh.tex_coord2(1 - tx, txe)
                norm_and_vertex(x * radius_end, y * radius_end, z_end, offset)
            else:
                mesh.tex_coord2(1 - tx, txs)
                norm_and_vertex(x * radius_start, y * radius_start, z_start, offset)
                mesh.tex_coord2(1 - tx, txe)
                norm_and_vertex(x * radius_end, y * radius_end, z_end, offset)
            last_x, last_y, last_tx = x, y, tx

        if length > 0 and i + 1 == half_stacks:
            _capsule_middle(mesh, ring, norm_and_vertex, radius_end, z_end,
                            half_length, sphere_ratio, middle_stacks)

    return mesh.recalc_normals(flat, inside) if flat else mesh.normalize_normals()


def _capsule_middle(mesh, ring, norm_and_vertex, radius, z, half_length,
                    sphere_ratio, middle_stacks):
    sr2 = sphere_ratio * 0.5
    hl = half_length * 2
    endr2 = 1.0 - sr2
    he = 1.0 - sphere_ratio
    for m in range(middle_stacks):
        s = -half_length + (0 if m == 0 else hl * m / middle_stacks)
        e = half_length if m == middle_stacks - 1 else -half_length + hl * (m + 1) / middle_stacks
        txs = sr2 + (0 if m == 0 else he * m / middle_stacks)
        txe = endr2 if m == middle_stacks - 1 else sr2 + he * (m + 1) / middle_stacks
        mesh.mode(Primitive.TRIANGLE_STRIP)
        for (x, y), tx in zip(ring, ring.params):
            mesh.tex_coord2(1 - tx, txs)
            norm_and_vertex(x * radius, y * radius, z, s)
            mesh.tex_coord2(1 - tx, txe)
            norm_and_vertex(x * radius, y * radius, z, e)


# ---------------------------------------------------------------------------
# Star
# ---------------------------------------------------------------------------

def create_pointed_star(points: int, first_radius: float, second_radius: float,
                        inward: bool = False) -> Mesh:
    """Flat star polygon alternating between two radii, first tip on +Y."""

    if points < 2 or first_radius < 0 or second_radius < 0:
        return _empty('create_pointed_star', 'fewer than two points or negative radius')
    if first_radius <= 0 and second_radius <= 0:
        return _empty('create_pointed_star', 'zero radii')

    mesh = Mesh()
    table = TrigTable(points * 2)
    recip_radius = 1.0 / max(first_radius, second_radius)
    mesh.mode(Primitive.TRIANGLE_FAN)
    mesh.normal3(0, 0, -1 if inward else 1).tex_coord2(0.5, 0.5).vertex2(0, 0)
    start = None
    for i in range(points * 2):
        s, c = table[i]
        radius = first_radius if i % 2 == 0 else second_radius
        x = -s * radius
        y = c * radius
        if start is None:
            start = (x, y)
        mesh.tex_coord2((1 + x * recip_radius) * 0.5, (1 + y * recip_radius) * 0.5)
        mesh.vertex2(x, y)
    x, y = start
    mesh.tex_coord2((1 + x * recip_radius) * 0.5, (1 + y * recip_radius) * 0.5)
    mesh.vertex2(x, y)
    return mesh


__all__ = [
    'create_box',
    'create_cylinder',
    'create_cone',
    'create_closed_cylinder',
    'create_lathe',
    'create_disk',
    'create_partial_disk',
    'create_torus',
    'create_plane',
    'create_sphere',
    'create_capsule',
    'create_pointed_star',
]
