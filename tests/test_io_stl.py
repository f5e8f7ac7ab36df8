import io
import struct

import pytest

from paramesh.io.stl import read_stl, write_stl
from paramesh.mesh import Mesh, Primitive
from paramesh.primitives import create_box


def _triangle_mesh():
    mesh = Mesh()
    mesh.vertex3(0, 0, 0).vertex3(1, 0, 0).vertex3(0, 1, 0)
    return mesh


def test_write_stl_binary(tmp_path):
    path = tmp_path / 'tri.stl'
    count = write_stl(_triangle_mesh(), path, binary=True, name='test')

    assert count == 1
    data = path.read_bytes()
    assert len(data) == 80 + 4 + 50  # header + count + one triangle
    assert data[0:4] == b'test'
    assert struct.unpack('<I', data[80:84])[0] == 1
    normal = struct.unpack('<3f', data[84:96])
    assert normal == pytest.approx((0.0, 0.0, 1.0))


def test_write_stl_box_size(tmp_path):
    path = tmp_path / 'box.stl'
    write_stl(create_box(1, 2, 3), path)
    assert path.stat().st_size == 84 + 12 * 50


def test_write_stl_ascii():
    buf = io.StringIO()
    write_stl(_triangle_mesh(), buf, binary=False, name='ascii_test')

    text = buf.getvalue()
    assert 'solid ascii_test' in text
    assert text.count('facet normal') == 1
    assert text.count('vertex') == 3
    assert text.strip().endswith('endsolid ascii_test')


def test_lines_and_degenerate_faces_skipped():
    mesh = _triangle_mesh()
    mesh.vertex3(0, 0, 0).vertex3(1, 1, 1).vertex3(2, 2, 2)
    mesh.mode(Primitive.LINES).vertex3(0, 0, 0).vertex3(1, 1, 1)
    buf = io.BytesIO()
    assert write_stl(mesh, buf) == 1
    assert len(buf.getvalue()) == 84 + 50


@pytest.mark.parametrize("binary", [True, False])
def test_write_stl_leaves_stream_open(binary):
    buf = io.BytesIO() if binary else io.StringIO()
    write_stl(_triangle_mesh(), buf, binary=binary)
    assert not buf.closed


def test_write_stl_ascii_file(tmp_path):
    path = tmp_path / "tri.stl"
    write_stl(_triangle_mesh(), path, binary=False)
    lines = path.read_text(encoding="ascii").splitlines()
    assert lines[0] == "solid paramesh"
    assert lines[1] == "  facet normal 0.000000e+00 0.000000e+00 1.000000e+00"
    assert lines[-1] == "endsolid paramesh"
    assert len(lines) == 2 + 7


@pytest.mark.parametrize("binary", [True, False])
def test_read_stl_roundtrip(tmp_path, binary):
    box = create_box(2, 2, 2)
    path = tmp_path / 'box.stl'
    write_stl(box, path, binary=binary)

    mesh = read_stl(path)
    assert len(mesh.faces) == 12
    assert mesh.vertex_count == 36
    original = sorted(tuple(round(c, 5) for c in p) for p in box.positions)
    imported = sorted(set(tuple(round(c, 5) for c in p) for p in mesh.positions))
    assert imported == sorted(set(original))
    for n, *_ in mesh.triangles():
        assert sum(c * c for c in n) == pytest.approx(1.0)


def test_read_stl_from_stream():
    buf = io.BytesIO()
    write_stl(_triangle_mesh(), buf)
    buf.seek(0)
    mesh = read_stl(buf)
    assert mesh.positions[1] == (1.0, 0.0, 0.0)
    assert mesh.normals[0] == (0.0, 0.0, 1.0)


def test_read_truncated_binary():
    buf = io.BytesIO()
    write_stl(create_box(1, 1, 1), buf)
    with pytest.raises(ValueError):
        read_stl(io.BytesIO(buf.getvalue()[:-20]))
