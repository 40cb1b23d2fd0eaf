import logging
import math

import numpy as np
import pytest

from yapmesh.checks import faces_oriented, mesh_watertight, normals_unit_length
from yapmesh.config import DEFAULT_SETTINGS
from yapmesh.errors import ConfigurationError
from yapmesh.geom import dot, mag
from yapmesh.surfaces import (
    Surface,
    displacement_sampler,
    subdivide_surface,
    tessellate_surface,
)
from yapmesh.xform import Translation


def test_quad_level_zero():
    mesh = tessellate_surface(Surface(name='floor', shape='quad', radius=2.0,
                                      subdivision_smooth=True))
    assert mesh.name == 'floor:display'
    assert len(mesh.pos) == 4
    assert mesh.quad == [(0, 1, 3, 2)]
    assert mesh.triangle == []
    assert mesh.pos[0] == pytest.approx([-2, -2, 0])
    assert mesh.pos[3] == pytest.approx([2, 2, 0])
    assert mesh.texcoord == [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
    for n in mesh.norm:
        assert n == pytest.approx([0, 0, 1])


def test_quad_level_counts():
    for level in range(4):
        n = 2 ** level
        mesh = tessellate_surface(Surface(subdivision_level=level, subdivision_smooth=True))
        assert len(mesh.pos) == (n + 1) ** 2
        assert len(mesh.quad) == n * n
        assert faces_oriented(mesh)


def test_quad_faceted():
    mesh = tessellate_surface(Surface(subdivision_level=1))
    assert len(mesh.pos) == 16
    assert len(mesh.texcoord) == 16
    for n in mesh.norm:
        assert n == pytest.approx([0, 0, 1])


def test_sphere_level_zero():
    mesh = tessellate_surface(Surface(shape='sphere', subdivision_smooth=True))
    assert len(mesh.pos) == 6
    assert len(mesh.triangle) == 8
    assert mesh.quad == []
    assert mesh.pos[0] == pytest.approx([0, 0, 1])
    assert mesh.pos[-1] == pytest.approx([0, 0, -1])
    assert mesh_watertight(mesh)
    assert faces_oriented(mesh)


def test_sphere_level_one():
    mesh = tessellate_surface(Surface(shape='sphere', radius=2.0, subdivision_level=1,
                                      subdivision_smooth=True))
    assert len(mesh.pos) == 26
    assert len(mesh.triangle) == 16
    assert len(mesh.quad) == 16
    assert mesh.texcoord == []
    assert mesh_watertight(mesh)
    assert faces_oriented(mesh)
    for p in mesh.pos:
        assert mag(p) == pytest.approx(2.0)


def test_sphere_smooth_normals_point_outward():
    mesh = tessellate_surface(Surface(shape='sphere', subdivision_level=2,
                                      subdivision_smooth=True))
    assert normals_unit_length(mesh)
    for p, n in zip(mesh.pos, mesh.norm):
        assert dot(n, p) / mag(p) > 0.95
    assert mesh.norm[0] == pytest.approx([0, 0, 1])


def test_sphere_facet_normals_point_outward():
    mesh = tessellate_surface(Surface(shape='sphere', subdivision_level=1))
    assert len(mesh.pos) == 3 * 16 + 4 * 16
    for p, n in zip(mesh.pos, mesh.norm):
        assert dot(n, p) > 0


def test_quad_displacement():
    surface = Surface(subdivision_smooth=True, displacement_depth=0.5,
                      displacement_map=np.array([[0.0, 1.0], [2.0, 3.0]]))
    mesh = tessellate_surface(surface)
    assert [p[2] for p in mesh.pos] == pytest.approx([0.0, 0.5, 1.0, 1.5])


def test_sphere_displacement_is_radial():
    surface = Surface(shape='sphere', subdivision_level=1, subdivision_smooth=True,
                      displacement_depth=0.5, displacement_map=np.full((4, 4), 1.0))
    mesh = tessellate_surface(surface)
    for p in mesh.pos:
        assert mag(p) == pytest.approx(1.5)


def test_displacement_sampler():
    assert displacement_sampler(None, 1.0) is None
    assert displacement_sampler(np.ones((2, 2)), 0.0) is None

    sample = displacement_sampler(np.ones((2, 2, 3)) * [1.0, 2.0, 3.0], 1.0)
    assert sample(0.3, 0.7) == pytest.approx(2.0)

    sample = displacement_sampler([[0.0, 1.0, 2.0]], 2.0)
    assert sample(0.0, 0.0) == 0.0
    assert sample(0.5, 0.0) == 2.0
    assert sample(1.0, 1.0) == 4.0

    with pytest.raises(ConfigurationError):
        displacement_sampler(np.ones(4), 1.0)


def test_depth_without_map_warns(caplog):
    with caplog.at_level(logging.WARNING, logger='yapmesh.surfaces'):
        mesh = tessellate_surface(Surface(name='bare', displacement_depth=1.0,
                                          subdivision_smooth=True))
    assert 'without a displacement map' in caplog.text
    assert all(p[2] == 0.0 for p in mesh.pos)


def test_frame_and_material_carried():
    material = {'color': [1, 0, 0]}
    surface = Surface(frame=Translation([1, 2, 3]), material=material)
    mesh = tessellate_surface(surface)
    assert mesh.frame == surface.frame
    assert mesh.frame is not surface.frame
    assert mesh.material is material


def test_surface_is_untouched_and_retessellatable():
    surface = Surface(name='s', subdivision_smooth=True)
    first = subdivide_surface(surface)
    assert surface.display_mesh is first
    assert len(first.pos) == 4

    surface.subdivision_level = 1
    second = subdivide_surface(surface)
    assert surface.display_mesh is second
    assert len(second.pos) == 9
    assert len(first.pos) == 4
    assert surface.shape == 'quad'
    assert surface.subdivision_level == 1


def test_renderable_tessellates_lazily():
    surface = Surface(shape='sphere', subdivision_smooth=True)
    assert surface.display_mesh is None
    mesh = surface.renderable()
    assert mesh is surface.display_mesh
    assert surface.renderable() is mesh


@pytest.mark.parametrize('kwargs', [
    {'shape': 'torus'},
    {'radius': 0.0},
    {'radius': -1.0},
    {'radius': math.inf},
    {'subdivision_level': -1},
    {'subdivision_level': 1.5},
    {'subdivision_level': 1.0},
    {'displacement_depth': math.nan},
])
def test_bad_surface_rejected(kwargs):
    surface = Surface(name='bad', **kwargs)
    with pytest.raises(ConfigurationError) as info:
        tessellate_surface(surface)
    assert info.value.entity == 'bad'


def test_level_above_max():
    with pytest.raises(ConfigurationError):
        tessellate_surface(Surface(subdivision_level=3),
                           DEFAULT_SETTINGS.with_overrides(max_level=2))
