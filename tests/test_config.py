import pytest

from paramesh.bspline import BSplineCurve
from paramesh.config import (
    Defaults,
    configure,
    get_defaults,
    load_defaults,
    reset_defaults,
)
from paramesh.errors import InvalidConfigurationError
from paramesh.mesh import Mesh
from paramesh.primitives import create_cylinder
from paramesh.tessellate import CurveEval


@pytest.fixture(autouse=True)
def _restore_defaults():
    reset_defaults()
    yield
    reset_defaults()


def test_builtin_defaults():
    d = get_defaults()
    assert d == Defaults()
    assert d.curve_subdivisions == 24
    assert d.surface_subdivisions == 24
    assert d.normal_epsilon == 1e-5
    assert d.degree == 3
    assert d.slices == 32
    assert d.as_dict()['torus_segments'] == 16


def test_configure_and_reset():
    configure(curve_subdivisions=8, normal_epsilon=1e-6)
    assert get_defaults().curve_subdivisions == 8
    assert get_defaults().normal_epsilon == 1e-6
    reset_defaults()
    assert get_defaults().curve_subdivisions == 24


def test_defaults_reach_callers():
    configure(curve_subdivisions=4, slices=6, degree=2)
    mesh = Mesh()
    CurveEval().vertex(lambda u: (u, 0)).eval_curve(mesh)
    assert mesh.vertex_count == 5
    assert create_cylinder(1, 1, 1).vertex_count == 14
    assert BSplineCurve.clamped([(0, 0), (1, 1), (2, 0)]).degree == 2


@pytest.mark.parametrize("overrides", [
    {'bogus': 1},
    {'slices': 0},
    {'slices': 2.5},
    {'slices': True},
    {'normal_epsilon': -1.0},
    {'degree': 'three'},
])
def test_configure_rejects(overrides):
    with pytest.raises(InvalidConfigurationError):
        configure(**overrides)
    assert get_defaults() == Defaults()


def test_load_defaults(tmp_path):
    path = tmp_path / 'paramesh.yaml'
    path.write_text("surface_subdivisions: 10\nnormal_epsilon: 1.0e-4\n", encoding='utf-8')
    loaded = load_defaults(path)
    assert loaded.surface_subdivisions == 10
    assert loaded.normal_epsilon == pytest.approx(1e-4)
    assert get_defaults() is loaded


def test_load_empty_file(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text("", encoding='utf-8')
    assert load_defaults(path) == Defaults()


def test_load_rejects_non_mapping(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text("- 1\n- 2\n", encoding='utf-8')
    with pytest.raises(InvalidConfigurationError) as excinfo:
        load_defaults(path)
    assert excinfo.value.details['path'] == str(path)
