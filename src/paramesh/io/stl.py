"""STL import and export for :class:`paramesh.mesh.Mesh`.

Only triangles are written; line and point primitives have no STL
representation and are skipped.  Facet normals are the geometric face
normals, and degenerate (zero-area) triangles are dropped.
"""

from __future__ import annotations

import logging
import re
import struct
from contextlib import contextmanager
from typing import List, Tuple

from paramesh.mesh import Mesh, Primitive, TriTuple

logger = logging.getLogger(__name__)

_HEADER_SIZE = 80
_STRUCT_TRIANGLE = struct.Struct('<12fH')
_FLOAT = r'([eE\d.+-]+)'
_FACET = re.compile(
    r'facet\s+normal\s+' + r'\s+'.join([_FLOAT] * 3) + r'\s+'
    r'outer\s+loop\s+'
    + r'\s+'.join([r'vertex\s+' + r'\s+'.join([_FLOAT] * 3)] * 3) +
    r'\s+endloop\s+endfacet',
    re.IGNORECASE,
)


def write_stl(mesh: Mesh, path_or_file, *, binary: bool = True, name: str = 'paramesh') -> int:
    """Write the triangles of ``mesh`` to STL and return how many were written.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    """

    triangles = list(mesh.triangles())
    skipped = len(mesh.faces) - len(triangles)
    if skipped:
        logger.debug("write_stl: skipped %d degenerate triangles", skipped)

    if binary:
        _write_binary(triangles, path_or_file, name)
    else:
        _write_ascii(triangles, path_or_file, name)
    return len(triangles)


@contextmanager
def _output(path_or_file, mode: str):
    """Yield a writable stream, opening (and later closing) paths only."""

    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    encoding = None if 'b' in mode else 'ascii'
    with open(path_or_file, mode, encoding=encoding) as stream:
        yield stream


def _write_binary(triangles: List[TriTuple], path_or_file, name: str) -> None:
    header = name[:_HEADER_SIZE].encode('ascii', errors='replace').ljust(_HEADER_SIZE, b' ')
    with _output(path_or_file, 'wb') as stream:
        stream.write(header + struct.pack('<I', len(triangles)))
        stream.write(b''.join(_STRUCT_TRIANGLE.pack(*normal, *v0, *v1, *v2, 0)
                              for normal, v0, v1, v2 in triangles))


def _facet_lines(normal, vertices):
    yield "  facet normal {:.6e} {:.6e} {:.6e}".format(*normal)
    yield "    outer loop"
    for v in vertices:
        yield "      vertex {:.6e} {:.6e} {:.6e}".format(*v)
    yield "    endloop"
    yield "  endfacet"


def _write_ascii(triangles: List[TriTuple], path_or_file, name: str) -> None:
    with _output(path_or_file, 'w') as stream:
        stream.write(f"solid {name}\n")
        for normal, v0, v1, v2 in triangles:
            stream.writelines(line + "\n" for line in _facet_lines(normal, (v0, v1, v2)))
        stream.write(f"endsolid {name}\n")


# ---------------------------------------------------------------------------
# STL Import
# ---------------------------------------------------------------------------

def _is_binary_stl(data: bytes) -> bool:
    if len(data) < 84:
        return False
    if not data[:5].lower().startswith(b'solid'):
        return True
    # "solid" may still open a binary header; trust the size when it fits
    tri_count = struct.unpack('<I', data[80:84])[0]
    if len(data) != 84 + tri_count * 50:
        return False
    return b'facet' not in data[84:200] and b'vertex' not in data[84:200]


def _parse_binary(data: bytes) -> List[Tuple[Tuple[float, ...], ...]]:
    tri_count = struct.unpack('<I', data[80:84])[0]
    triangles = []
    offset = 84
    for _ in range(tri_count):
        if offset + 50 > len(data):
            raise ValueError("truncated binary STL: expected {} triangles, found {}"
                             .format(tri_count, len(triangles)))
        values = _STRUCT_TRIANGLE.unpack(data[offset:offset + 50])
        triangles.append((values[0:3], values[3:6], values[6:9], values[9:12]))
        offset += 50
    return triangles


def _parse_ascii(text: str) -> List[Tuple[Tuple[float, ...], ...]]:
    triangles = []
    for match in _FACET.finditer(text):
        values = [float(g) for g in match.groups()]
        triangles.append((tuple(values[0:3]), tuple(values[3:6]),
                          tuple(values[6:9]), tuple(values[9:12])))
    return triangles


def read_stl(path_or_file) -> Mesh:
    """Read an ASCII or binary STL file into a new :class:`Mesh`.

    Each facet becomes three vertices carrying the facet normal; vertices are
    not merged.
    """

    if hasattr(path_or_file, 'read'):
        data = path_or_file.read()
        if isinstance(data, str):
            data = data.encode('utf-8')
    else:
        with open(path_or_file, 'rb') as f:
            data = f.read()

    if _is_binary_stl(data):
        triangles = _parse_binary(data)
    else:
        triangles = _parse_ascii(data.decode('utf-8', errors='replace'))

    mesh = Mesh().mode(Primitive.TRIANGLES)
    for normal, v0, v1, v2 in triangles:
        mesh.normal3(*normal)
        for v in (v0, v1, v2):
            mesh.vertex3(*v)
    logger.debug("read_stl: %d triangles", len(triangles))
    return mesh


__all__ = ['write_stl', 'read_stl']
