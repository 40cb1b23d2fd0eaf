import logging

import pytest

from yapmesh.config import DEFAULT_SETTINGS, YAPMESH_SETTINGS
from yapmesh.errors import ConfigurationError, TopologyError
from yapmesh.mesh import Mesh
from yapmesh.scene import Scene, subdivide
from yapmesh.surfaces import Surface


def _make_cube(name='cube', level=1):
    pos = [[-1, -1, -1], [1, -1, -1], [1, 1, -1], [-1, 1, -1],
           [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1]]
    quad = [(0, 3, 2, 1), (4, 5, 6, 7), (0, 1, 5, 4),
            (2, 3, 7, 6), (0, 4, 7, 3), (1, 2, 6, 5)]
    return Mesh(name=name, pos=pos, quad=quad,
                subdivision_catmullclark_level=level,
                subdivision_catmullclark_smooth=True)


def _make_curve(name='curve', level=2):
    return Mesh(name=name, pos=[[0, 0, 0], [0, 1, 0], [1, 1, 0], [1, 0, 0]],
                spline=[(0, 1, 2, 3)], subdivision_bezier_level=level)


def _make_scene():
    return Scene(meshes=[_make_cube(), _make_curve()],
                 surfaces=[Surface(name='ball', shape='sphere', subdivision_level=1,
                                   subdivision_smooth=True)])


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.delenv(YAPMESH_SETTINGS, raising=False)
    monkeypatch.setenv('HOME', str(tmp_path))


def test_subdivide_scene():
    scene = _make_scene()
    report = subdivide(scene, DEFAULT_SETTINGS)
    assert report.ok
    assert report.processed == ['cube', 'curve', 'ball']

    cube, curve = scene.meshes
    assert len(cube.quad) == 24
    assert cube.subdivision_catmullclark_level == 0
    assert len(curve.pos) == 5
    assert len(curve.line) == 4
    assert curve.subdivision_bezier_level == 0
    ball = scene.surfaces[0].display_mesh
    assert len(ball.pos) == 26


def test_second_pass_leaves_meshes_alone():
    scene = _make_scene()
    subdivide(scene)
    cube = scene.meshes[0]
    pos = cube.pos
    first_ball = scene.surfaces[0].display_mesh

    report = subdivide(scene)
    assert report.ok
    assert cube.pos is pos
    assert len(cube.quad) == 24
    assert scene.surfaces[0].display_mesh is not first_ball


def test_float_levels_fail_only_their_entity():
    float_mesh = _make_cube(name='float-mesh', level=1.0)
    float_surface = Surface(name='float-surface', subdivision_level=1.0)
    scene = Scene(meshes=[float_mesh, _make_cube()], surfaces=[float_surface])

    report = subdivide(scene)

    assert report.processed == ['cube']
    assert [name for name, _ in report.failures] == ['float-mesh', 'float-surface']
    assert all(isinstance(exc, ConfigurationError) for _, exc in report.failures)
    assert len(scene.meshes[1].quad) == 24
    assert float_surface.display_mesh is None


def test_polygons_with_lines_fail_alone():
    mixed = _make_cube(name='mixed')
    mixed.line = [(0, 6)]
    scene = Scene(meshes=[mixed, _make_curve()])
    report = subdivide(scene)
    assert report.processed == ['curve']
    assert report.failures[0][0] == 'mixed'
    assert mixed.line == [(0, 6)]
    assert len(mixed.pos) == 8


def test_failure_is_isolated(caplog):
    bad = _make_cube(name='bad')
    bad.pos.append([9, 9, 9])
    scene = Scene(meshes=[bad, _make_cube()])

    with caplog.at_level(logging.WARNING, logger='yapmesh.scene'):
        report = subdivide(scene)

    assert not report
    assert report.processed == ['cube']
    [(name, exc)] = report.failures
    assert name == 'bad'
    assert isinstance(exc, TopologyError)
    assert exc.entity == 'bad'
    assert "'bad'" in caplog.text
    assert len(scene.meshes[1].quad) == 24


def test_bad_surface_does_not_stop_meshes():
    scene = Scene(meshes=[_make_cube()], surfaces=[Surface(name='odd', shape='cone')])
    report = subdivide(scene)
    assert report.processed == ['cube']
    assert isinstance(report.failures[0][1], ConfigurationError)


def test_settings_from_environment(tmp_path, monkeypatch):
    path = tmp_path / 'settings.yaml'
    path.write_text('max_level: 0\n')
    monkeypatch.setenv(YAPMESH_SETTINGS, str(path))

    scene = Scene(meshes=[_make_cube()])
    report = subdivide(scene)
    assert report.failures[0][0] == 'cube'
    assert 'max_level' in str(report.failures[0][1])


def test_renderables():
    scene = _make_scene()
    subdivide(scene)
    meshes = list(scene.renderables())
    assert meshes[:2] == scene.meshes
    assert meshes[2] is scene.surfaces[0].display_mesh
    assert [e.kind for e in scene.entities()] == ['mesh', 'mesh', 'surface']
