"""Mesh buffers, subdivision parameters and render views.

A :class:`Mesh` is an arena of vertex data (``pos``, ``norm``,
``texcoord``) plus integer index topology (``triangle``, ``quad``,
``line``, ``spline``) into that arena.  Refinement replaces the buffers
wholesale at every level; nothing holds references into them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Sequence, Tuple

import numpy as np

from yapmesh.edgemap import EdgeMap
from yapmesh.errors import ConfigurationError, DegenerateGeometryError
from yapmesh.geom import normalize, cross, sub, tiny
from yapmesh.xform import Matrix

Vec3 = List[float]
TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]

_ARITY = {'triangle': 3, 'quad': 4, 'line': 2, 'spline': 4}


def is_level(value) -> bool:
    """True for a non-negative integer subdivision level (bools excluded)."""
    return (not isinstance(value, bool) and isinstance(value, (int, np.integer))
            and value >= 0)


@dataclass
class Mesh:
    """Polygon, polyline or spline mesh with its subdivision parameters.

    Only one primitive family (polygons, lines or splines) is expected
    per mesh while it is being refined.
    """

    name: str = 'mesh'
    pos: List[Vec3] = field(default_factory=list)
    norm: List[Vec3] = field(default_factory=list)
    texcoord: List[List[float]] = field(default_factory=list)
    triangle: List[Tuple[int, int, int]] = field(default_factory=list)
    quad: List[Tuple[int, int, int, int]] = field(default_factory=list)
    line: List[Tuple[int, int]] = field(default_factory=list)
    spline: List[Tuple[int, int, int, int]] = field(default_factory=list)
    subdivision_catmullclark_level: int = 0
    subdivision_catmullclark_smooth: bool = False
    subdivision_bezier_level: int = 0
    subdivision_bezier_uniform: bool = True
    frame: Matrix = field(default_factory=Matrix)
    material: Any = None

    kind = 'mesh'

    def copy(self) -> 'Mesh':
        """Return a mesh with freshly allocated buffers.

        Frame is copied, material is shared.
        """
        return Mesh(
            name=self.name,
            pos=[list(p) for p in self.pos],
            norm=[list(n) for n in self.norm],
            texcoord=[list(t) for t in self.texcoord],
            triangle=[tuple(f) for f in self.triangle],
            quad=[tuple(f) for f in self.quad],
            line=[tuple(f) for f in self.line],
            spline=[tuple(f) for f in self.spline],
            subdivision_catmullclark_level=self.subdivision_catmullclark_level,
            subdivision_catmullclark_smooth=self.subdivision_catmullclark_smooth,
            subdivision_bezier_level=self.subdivision_bezier_level,
            subdivision_bezier_uniform=self.subdivision_bezier_uniform,
            frame=Matrix(self.frame),
            material=self.material,
        )

    def assign(self, other: 'Mesh') -> None:
        """Take over the buffers and parameters of ``other``.

        Used to install the result of a refinement; ``other`` should not
        be used afterwards.
        """
        self.pos = other.pos
        self.norm = other.norm
        self.texcoord = other.texcoord
        self.triangle = other.triangle
        self.quad = other.quad
        self.line = other.line
        self.spline = other.spline
        self.subdivision_catmullclark_level = other.subdivision_catmullclark_level
        self.subdivision_catmullclark_smooth = other.subdivision_catmullclark_smooth
        self.subdivision_bezier_level = other.subdivision_bezier_level
        self.subdivision_bezier_uniform = other.subdivision_bezier_uniform

    def renderable(self) -> 'Mesh':
        return self

    def validate(self) -> None:
        """Check buffer lengths, index ranges and subdivision levels.

        Raises :class:`ConfigurationError` naming the first offending
        buffer element.
        """
        for attr in ('subdivision_catmullclark_level', 'subdivision_bezier_level'):
            level = getattr(self, attr)
            if not is_level(level):
                raise ConfigurationError(f'{attr} must be a non-negative integer, got {level!r}',
                                         entity=self.name)

        # catmull-clark rebuilds pos, so line and spline indices would dangle
        if self.subdivision_catmullclark_level and (self.line or self.spline):
            raise ConfigurationError(
                'catmull-clark refinement needs a pure polygon mesh, '
                f'found {len(self.line)} lines and {len(self.spline)} splines',
                entity=self.name)

        nv = len(self.pos)
        if self.norm and len(self.norm) != nv:
            raise ConfigurationError(f'norm has {len(self.norm)} entries for {nv} positions',
                                     entity=self.name)
        if self.texcoord and len(self.texcoord) != nv:
            raise ConfigurationError(f'texcoord has {len(self.texcoord)} entries for {nv} positions',
                                     entity=self.name)

        for attr, arity in _ARITY.items():
            for fi, face in enumerate(getattr(self, attr)):
                if len(face) != arity:
                    raise ConfigurationError(f'{attr} {fi} has {len(face)} indices, expected {arity}',
                                             entity=self.name)
                for idx in face:
                    if isinstance(idx, bool) or not isinstance(idx, (int, np.integer)) \
                       or idx < 0 or idx >= nv:
                        raise ConfigurationError(
                            f'{attr} {fi} references vertex {idx!r} outside [0, {nv})',
                            entity=self.name)


def mesh_view(mesh: Mesh, *, world: bool = True) -> Iterator[TriTuple]:
    """Yield triangles for a polygon mesh as ``(normal, v0, v1, v2)``.

    Quads are split along their ``0-2`` diagonal.  Vertices are mapped
    through the mesh frame when ``world`` is true.  Normals are unit
    vectors recomputed from the (transformed) vertices; faces with
    degenerate geometry (zero area) are skipped silently.
    """

    def _xf(p):
        return mesh.frame.transform_point(p) if world else list(p)

    def _tris():
        for f in mesh.triangle:
            yield f[0], f[1], f[2]
        for f in mesh.quad:
            yield f[0], f[1], f[2]
            yield f[0], f[2], f[3]

    for i0, i1, i2 in _tris():
        v0 = _xf(mesh.pos[i0])
        v1 = _xf(mesh.pos[i1])
        v2 = _xf(mesh.pos[i2])
        try:
            n = normalize(cross(sub(v1, v0), sub(v2, v0)), tiny)
        except DegenerateGeometryError:
            continue
        yield n, v0, v1, v2


@dataclass
class MeshBuffers:
    """Contiguous arrays ready for a draw call."""

    pos: np.ndarray
    norm: np.ndarray
    texcoord: np.ndarray
    triangle: np.ndarray
    quad: np.ndarray
    line: np.ndarray
    edges: np.ndarray

    @property
    def vertex_count(self) -> int:
        return int(self.pos.shape[0])


def _index_array(faces: Sequence[Sequence[int]], cols: int) -> np.ndarray:
    arr = np.asarray(faces, dtype=np.uint32)
    if arr.size == 0:
        arr = np.zeros((0, cols), dtype=np.uint32)
    return np.ascontiguousarray(arr.reshape(-1, cols))


def _vertex_array(data: Sequence[Sequence[float]], cols: int) -> np.ndarray:
    arr = np.asarray(data, dtype=np.float32)
    if arr.size == 0:
        arr = np.zeros((0, cols), dtype=np.float32)
    return np.ascontiguousarray(arr.reshape(-1, cols))


def spline_strips(mesh: Mesh) -> List[Tuple[int, int]]:
    """Control polygons of unrefined splines as line pairs."""
    strips: List[Tuple[int, int]] = []
    for p0, p1, p2, p3 in mesh.spline:
        strips.extend([(p0, p1), (p1, p2), (p2, p3)])
    return strips


def mesh_buffers(mesh: Mesh, *, wireframe: bool = True) -> MeshBuffers:
    """Pack a mesh into float32/uint32 arrays for the renderer.

    ``line`` holds the mesh lines followed by the control polygons of
    any splines that have not been refined.  ``edges`` holds the
    deduplicated polygon edges (empty when ``wireframe`` is false).
    """
    edges: List[Tuple[int, int]] = []
    if wireframe and (mesh.triangle or mesh.quad):
        edges = EdgeMap(mesh.triangle, mesh.quad).edges()

    return MeshBuffers(
        pos=_vertex_array(mesh.pos, 3),
        norm=_vertex_array(mesh.norm, 3),
        texcoord=_vertex_array(mesh.texcoord, 2),
        triangle=_index_array(mesh.triangle, 3),
        quad=_index_array(mesh.quad, 4),
        line=_index_array(list(mesh.line) + spline_strips(mesh), 2),
        edges=_index_array(edges, 2),
    )


__all__ = [
    'Mesh',
    'MeshBuffers',
    'mesh_view',
    'mesh_buffers',
    'spline_strips',
    'is_level',
]
