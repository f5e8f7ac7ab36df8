import struct

import ezdxf
import pytest

from paramesh.cli import build_curve, build_surface, main
from paramesh.config import get_defaults, reset_defaults
from paramesh.errors import InvalidConfigurationError

PATCH = """\
type: bezier
control_points:
  - [[0, 0, 0], [1, 0, 0], [2, 0, 0]]
  - [[0, 1, 0], [1, 1, 1], [2, 1, 0]]
  - [[0, 2, 0], [1, 2, 0], [2, 2, 0]]
subdivisions: 4
"""

PATH = """\
control_points: [[0, 0], [1, 2], [3, 2], [4, 0]]
degree: 3
subdivisions: 10
"""


@pytest.fixture(autouse=True)
def _restore_defaults():
    yield
    reset_defaults()


def _triangle_count(path):
    return struct.unpack('<I', path.read_bytes()[80:84])[0]


def test_primitive_stl(tmp_path, capsys):
    out = tmp_path / 'ball.stl'
    assert main(['primitive', 'sphere', '-p', 'radius=2', '-p', 'slices=8',
                 '-p', 'stacks=4', '-o', str(out)]) == 0
    assert capsys.readouterr().out.strip() == str(out)
    assert _triangle_count(out) == 2 * 8 + 2 * 16


def test_primitive_lathe_yaml_param(tmp_path):
    out = tmp_path / 'vase.stl'
    assert main(['primitive', 'lathe', '-p', 'points=[[1, 0], [1, 2]]',
                 '-p', 'slices=6', '-o', str(out)]) == 0
    assert _triangle_count(out) == 12


def test_primitive_dxf_from_suffix(tmp_path):
    out = tmp_path / 'box.dxf'
    assert main(['primitive', 'box', '-p', 'x_size=1', '-p', 'y_size=1',
                 '-p', 'z_size=1', '-o', str(out)]) == 0
    assert len(ezdxf.readfile(out).modelspace().query('3DFACE')) == 12


def test_primitive_ascii(tmp_path):
    out = tmp_path / 'plane.stl'
    assert main(['primitive', 'plane', '--ascii', '-o', str(out)]) == 0
    assert out.read_text().startswith('solid plane')


def test_bad_parameter(tmp_path, capsys):
    assert main(['primitive', 'sphere', '-p', 'wobble=3', '-o', str(tmp_path / 'x.stl')]) == 1
    assert 'bad parameters' in capsys.readouterr().err
    assert main(['primitive', 'sphere', '-p', 'radius', '-o', str(tmp_path / 'x.stl')]) == 1
    assert main(['primitive', 'disk', '-p', 'inner=2', '-p', 'outer=1',
                 '-o', str(tmp_path / 'x.stl')]) == 1


def test_surface(tmp_path):
    src = tmp_path / 'patch.yaml'
    src.write_text(PATCH, encoding='utf-8')
    out = tmp_path / 'patch.stl'
    assert main(['surface', str(src), '-o', str(out)]) == 0
    assert _triangle_count(out) == 4 * 4 * 2


def test_curve_dxf(tmp_path):
    src = tmp_path / 'path.yaml'
    src.write_text(PATH, encoding='utf-8')
    out = tmp_path / 'path.dxf'
    assert main(['curve', str(src), '--format', 'dxf', '-o', str(out)]) == 0
    assert len(ezdxf.readfile(out).modelspace().query('LINE')) == 10


def test_config_file(tmp_path):
    cfg = tmp_path / 'cfg.yaml'
    cfg.write_text("slices: 5\n", encoding='utf-8')
    out = tmp_path / 'cyl.stl'
    assert main(['--config', str(cfg), 'primitive', 'cylinder', '-p', 'base_rad=1',
                 '-p', 'top_rad=1', '-p', 'height=1', '-o', str(out)]) == 0
    assert get_defaults().slices == 5
    assert _triangle_count(out) == 10


def test_missing_source(tmp_path, capsys):
    assert main(['surface', str(tmp_path / 'nope.yaml')]) == 1
    assert 'error' in capsys.readouterr().err


def test_build_documents():
    curve = build_curve({'control_points': [[0, 0, 1], [1, 1, 1]], 'degree': 1,
                         'flags': ['weighted']})
    assert curve.evaluate(0.5) == pytest.approx([0.5, 0.5])
    surface = build_surface({'control_points': [[[0, 0], [1, 0]], [[0, 1], [1, 1]]],
                             'degree': 1, 'knots': 'clamped'})
    assert surface.evaluate(1.0, 1.0) == pytest.approx([1.0, 1.0])
    with pytest.raises(InvalidConfigurationError):
        build_curve({'control_points': [[0, 0], [1, 1]], 'flags': ['sideways']})
    with pytest.raises(InvalidConfigurationError):
        build_surface({'control_points': [[[0, 0]]], 'type': 'nurbs-ish'})
