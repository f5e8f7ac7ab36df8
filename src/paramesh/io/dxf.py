"""DXF export of meshes using ezdxf.

Triangles become ``3DFACE`` entities, line segments ``LINE`` entities and
points ``POINT`` entities, each on its own layer so they can be toggled
independently in a viewer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import ezdxf

from paramesh.mesh import Mesh

logger = logging.getLogger(__name__)

FACE_LAYER = 'FACES'
LINE_LAYER = 'LINES'
POINT_LAYER = 'POINTS'


def build_document(mesh: Mesh):
    """Return an ezdxf document holding the primitives of ``mesh``."""

    # setup=False skips the default blocks, whose SOLID entities some CAD
    # programs refuse to import
    doc = ezdxf.new(dxfversion='R2010', setup=False)
    doc.header['$MEASUREMENT'] = 1  # metric
    doc.header['$INSUNITS'] = 4  # millimeters
    doc.layers.add(FACE_LAYER, color=7)  # white
    doc.layers.add(LINE_LAYER, color=4)  # aqua
    doc.layers.add(POINT_LAYER, color=2)  # yellow
    msp = doc.modelspace()

    positions = mesh.positions
    for i0, i1, i2 in mesh.faces:
        v0, v1, v2 = positions[i0], positions[i1], positions[i2]
        # a triangle is a 3DFACE whose fourth corner repeats the third
        msp.add_3dface([v0, v1, v2, v2], dxfattribs={'layer': FACE_LAYER})
    for i0, i1 in mesh.lines:
        msp.add_line(positions[i0], positions[i1], dxfattribs={'layer': LINE_LAYER})
    for i in mesh.points:
        msp.add_point(positions[i], dxfattribs={'layer': POINT_LAYER})
    return doc


def write_dxf(mesh: Mesh, output_path: Union[str, Path]) -> Path:
    """Write ``mesh`` to ``output_path``, adding a ``.dxf`` suffix if missing."""

    path = Path(output_path)
    if path.suffix.lower() != '.dxf':
        path = path.with_name(path.name + '.dxf')
    doc = build_document(mesh)
    doc.saveas(path)
    logger.debug("write_dxf: %d faces, %d lines, %d points to %s",
                 len(mesh.faces), len(mesh.lines), len(mesh.points), path)
    return path


__all__ = ['build_document', 'write_dxf']
