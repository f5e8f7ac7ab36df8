"""Command line front end: generate a mesh and export it to STL or DXF.

Examples::

    paramesh primitive sphere -p radius=2 -p slices=24 -o ball.stl
    paramesh primitive lathe -p "points=[[0, 0], [1, 0.5], [0.5, 2]]"
    paramesh surface patch.yaml --format dxf
    paramesh curve path.yaml -o path.dxf

Surface and curve files are YAML mappings::

    type: bspline          # or bezier
    knots: clamped         # or uniform, or an explicit list (curves only)
    degree: 2              # degree_u / degree_v for surfaces
    flags: [weighted]      # any of weighted, divide, homogeneous
    control_points: [...]  # a list of points, or rows of points for surfaces
    subdivisions: 16       # subdivisions_u / subdivisions_v for surfaces
    mode: triangles        # triangles, lines or points
    auto_normal: true
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from paramesh import primitives
from paramesh.bezier import BezierCurve, BezierSurface
from paramesh.bspline import BSplineCurve, BSplineFlags, BSplineSurface
from paramesh.config import load_defaults
from paramesh.errors import InvalidConfigurationError
from paramesh.io import write_dxf, write_stl
from paramesh.mesh import Mesh, Primitive
from paramesh.tessellate import CurveEval, SurfaceEval

logger = logging.getLogger(__name__)

PRIMITIVES: Dict[str, Callable[..., Mesh]] = {
    'box': primitives.create_box,
    'cylinder': primitives.create_cylinder,
    'closed-cylinder': primitives.create_closed_cylinder,
    'cone': primitives.create_cone,
    'lathe': primitives.create_lathe,
    'disk': primitives.create_disk,
    'partial-disk': primitives.create_partial_disk,
    'torus': primitives.create_torus,
    'plane': primitives.create_plane,
    'sphere': primitives.create_sphere,
    'capsule': primitives.create_capsule,
    'star': primitives.create_pointed_star,
}

_MODES = {
    'triangles': Primitive.TRIANGLES,
    'lines': Primitive.LINES,
    'points': Primitive.POINTS,
}


def _parse_params(items: Optional[List[str]]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for item in items or []:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise InvalidConfigurationError(f"expected NAME=VALUE, got {item!r}", {'param': item})
        params[key.strip().replace('-', '_')] = yaml.safe_load(value)
    return params


def _parse_flags(names) -> BSplineFlags:
    flags = BSplineFlags.NONE
    for name in names or []:
        try:
            flags |= BSplineFlags[str(name).upper()]
        except KeyError:
            raise InvalidConfigurationError(f"unknown flag {name!r}", {'flag': name}) from None
    return flags


def _parse_mode(doc: Dict[str, Any], default: str) -> Primitive:
    name = str(doc.get('mode', default)).lower()
    if name not in _MODES:
        raise InvalidConfigurationError(f"unknown mode {name!r}", {'mode': name})
    return _MODES[name]


def _load_document(path: Path) -> Dict[str, Any]:
    with path.open('r', encoding='utf-8') as fh:
        doc = yaml.safe_load(fh)
    if not isinstance(doc, dict) or 'control_points' not in doc:
        raise InvalidConfigurationError(
            f"{path} must be a mapping with a control_points entry", {'path': str(path)})
    return doc


def build_curve(doc: Dict[str, Any]):
    """Build a curve evaluator from a parsed curve document."""

    points = doc['control_points']
    kind = str(doc.get('type', 'bspline')).lower()
    if kind == 'bezier':
        return BezierCurve(points, doc.get('u1', 0.0), doc.get('u2', 1.0))
    if kind != 'bspline':
        raise InvalidConfigurationError(f"unknown curve type {kind!r}", {'type': kind})
    flags = _parse_flags(doc.get('flags'))
    knots = doc.get('knots', 'clamped')
    if isinstance(knots, list):
        return BSplineCurve(points, knots, flags)
    if knots == 'uniform':
        return BSplineCurve.uniform(points, doc.get('degree'), flags)
    if knots == 'clamped':
        return BSplineCurve.clamped(points, doc.get('degree'), flags)
    raise InvalidConfigurationError(f"unknown knot layout {knots!r}", {'knots': knots})


def build_surface(doc: Dict[str, Any]):
    """Build a surface evaluator from a parsed surface document."""

    grid = doc['control_points']
    kind = str(doc.get('type', 'bspline')).lower()
    if kind == 'bezier':
        return BezierSurface(grid, doc.get('u1', 0.0), doc.get('u2', 1.0),
                             doc.get('v1', 0.0), doc.get('v2', 1.0))
    if kind != 'bspline':
        raise InvalidConfigurationError(f"unknown surface type {kind!r}", {'type': kind})
    flags = _parse_flags(doc.get('flags'))
    knots = doc.get('knots', 'clamped')
    degree_u = doc.get('degree_u', doc.get('degree'))
    degree_v = doc.get('degree_v', doc.get('degree'))
    if knots == 'uniform':
        return BSplineSurface.uniform(grid, degree_u, degree_v, flags)
    if knots == 'clamped':
        return BSplineSurface.clamped(grid, degree_u, degree_v, flags)
    raise InvalidConfigurationError(f"unknown knot layout {knots!r}", {'knots': knots})


def _primitive_mesh(args) -> Mesh:
    params = _parse_params(args.param)
    try:
        return PRIMITIVES[args.kind](**params)
    except TypeError as exc:
        raise InvalidConfigurationError(f"bad parameters for {args.kind}: {exc}",
                                        {'params': params}) from exc


def _surface_mesh(args) -> Mesh:
    doc = _load_document(args.source)
    surface = build_surface(doc)
    driver = SurfaceEval().vertex(surface).set_auto_normal(doc.get('auto_normal', True))
    mesh = Mesh()
    driver.eval_surface(mesh, _parse_mode(doc, 'triangles'),
                        doc.get('subdivisions_u', doc.get('subdivisions')),
                        doc.get('subdivisions_v', doc.get('subdivisions')))
    return mesh


def _curve_mesh(args) -> Mesh:
    doc = _load_document(args.source)
    curve = build_curve(doc)
    mesh = Mesh()
    CurveEval().vertex(curve).eval_curve(mesh, _parse_mode(doc, 'lines'),
                                         doc.get('subdivisions'))
    return mesh


def _export(mesh: Mesh, target: Path, fmt: str, ascii_stl: bool) -> Path:
    if fmt == 'dxf':
        return write_dxf(mesh, target)
    count = write_stl(mesh, target, binary=not ascii_stl, name=target.stem)
    if count == 0:
        logger.warning("%s contains no triangles", target)
    return target


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='paramesh',
        description="Generate parametric and primitive meshes and export them.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (repeat for debug output).")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML file overriding the tessellation defaults.")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-o", "--output", type=Path, default=None,
                        help="Output file (default: NAME.FORMAT in the current directory).")
    common.add_argument("--format", choices=["stl", "dxf"], default=None,
                        help="Export format (default: from the output suffix, else stl).")
    common.add_argument("--ascii", action="store_true",
                        help="Write ASCII instead of binary STL.")

    sub = parser.add_subparsers(dest="command", required=True)
    prim = sub.add_parser("primitive", parents=[common], help="Generate a closed-form primitive.")
    prim.add_argument("kind", choices=sorted(PRIMITIVES))
    prim.add_argument("-p", "--param", action="append", metavar="NAME=VALUE",
                      help="Generator argument; VALUE is parsed as YAML. Repeatable.")
    prim.set_defaults(build=_primitive_mesh)

    surf = sub.add_parser("surface", parents=[common], help="Tessellate a surface described in YAML.")
    surf.add_argument("source", type=Path)
    surf.set_defaults(build=_surface_mesh)

    curve = sub.add_parser("curve", parents=[common], help="Sample a curve described in YAML.")
    curve.add_argument("source", type=Path)
    curve.set_defaults(build=_curve_mesh)
    return parser


def _target(args) -> tuple:
    fmt = args.format
    if args.output is not None:
        if fmt is None:
            fmt = 'dxf' if args.output.suffix.lower() == '.dxf' else 'stl'
        return args.output, fmt
    fmt = fmt or 'stl'
    name = args.kind if args.command == 'primitive' else args.source.stem
    return Path(f"{name}.{fmt}"), fmt


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.config is not None:
            load_defaults(args.config)
        mesh = args.build(args)
        target, fmt = _target(args)
        written = _export(mesh, target, fmt, args.ascii)
    except (InvalidConfigurationError, OSError, yaml.YAMLError) as exc:
        print(f"paramesh: error: {exc}", file=sys.stderr)
        return 1

    logger.info("wrote %r to %s", mesh, written)
    print(written)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
