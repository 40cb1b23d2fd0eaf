"""Catmull-Clark subdivision of triangle/quad meshes.

One level turns ``T`` triangles and ``Q`` quads into ``3T + 4Q`` quads:

1. linear split - every face gets a face point (its centroid), every
   edge an edge point (its midpoint, one per :class:`EdgeMap` id);
2. averaging - each new quad adds its centroid to its four corners;
3. correction - every vertex moves to
   ``p + (avg - p) * (4 / count)``.

The new vertex buffer is laid out as
``[old vertices][edge points][triangle points][quad points]``.

Texture coordinates are not carried through subdivision.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from yapmesh.config import DEFAULT_SETTINGS, RefineSettings
from yapmesh.edgemap import EdgeMap
from yapmesh.errors import ConfigurationError, TopologyError
from yapmesh.geom import add, centroid, midpoint, scale3, sub, zero3
from yapmesh.mesh import Mesh, Vec3
from yapmesh.normals import apply_normals

logger = logging.getLogger(__name__)

Quad = Tuple[int, int, int, int]


def subdivide_level(pos: List[Vec3], triangle, quad, *, pin_boundary: bool = True
                    ) -> Tuple[List[Vec3], List[Quad]]:
    """Run one subdivision level and return the new ``(pos, quad)``.

    The input buffers are only read; the result is freshly allocated.
    """
    edge_map = EdgeMap(triangle, quad)
    edges = edge_map.edges()

    # linear subdivision - create vertices
    new_pos: List[Vec3] = [list(p) for p in pos]
    for a, b in edges:
        new_pos.append(midpoint(pos[a], pos[b]))
    for f in triangle:
        new_pos.append(centroid([pos[i] for i in f]))
    for f in quad:
        new_pos.append(centroid([pos[i] for i in f]))

    eoff = len(pos)
    toff = eoff + len(edges)
    qoff = toff + len(triangle)

    def ep(a, b):
        return eoff + edge_map.edge_index(a, b)

    # subdivision pass
    new_quad: List[Quad] = []
    for fi, (a, b, c) in enumerate(triangle):
        d = toff + fi
        ab, bc, ca = ep(a, b), ep(b, c), ep(c, a)
        new_quad.append((a, ab, d, ca))
        new_quad.append((ab, b, bc, d))
        new_quad.append((bc, c, ca, d))
    for fi, (a, b, c, d) in enumerate(quad):
        e = qoff + fi
        ab, bc, cd, da = ep(a, b), ep(b, c), ep(c, d), ep(d, a)
        new_quad.append((a, ab, e, da))
        new_quad.append((ab, b, bc, e))
        new_quad.append((e, bc, c, cd))
        new_quad.append((da, e, cd, d))

    # averaging pass
    avg_pos = [zero3() for _ in new_pos]
    avg_count = [0] * len(new_pos)
    for f in new_quad:
        c = centroid([new_pos[i] for i in f])
        for i in f:
            avg_pos[i] = add(avg_pos[i], c)
            avg_count[i] += 1

    pinned = EdgeMap((), new_quad).boundary_vertices() if pin_boundary else set()

    # correction pass
    for i, p in enumerate(new_pos):
        count = avg_count[i]
        if count == 0:
            raise TopologyError(f'vertex {i} is not used by any face')
        if i in pinned:
            continue
        avg = scale3(avg_pos[i], 1.0 / count)
        new_pos[i] = add(p, scale3(sub(avg, p), 4.0 / count))

    return new_pos, new_quad


def subdivide_catmullclark(subdiv: Mesh, settings: RefineSettings = DEFAULT_SETTINGS) -> None:
    """Apply ``subdiv.subdivision_catmullclark_level`` levels in place.

    Normals are rebuilt afterwards, smooth or faceted according to
    ``subdiv.subdivision_catmullclark_smooth``.  The mesh must hold only
    triangles and quads; texture coordinates are dropped.
    """
    subdiv.validate()
    levels = subdiv.subdivision_catmullclark_level
    if not levels:
        return
    if levels > settings.max_level:
        raise ConfigurationError(
            f'catmull-clark level {levels} exceeds max_level {settings.max_level}',
            entity=subdiv.name)

    mesh = subdiv.copy()
    for level in range(levels):
        try:
            mesh.pos, mesh.quad = subdivide_level(mesh.pos, mesh.triangle, mesh.quad,
                                                  pin_boundary=settings.pin_boundary)
        except TopologyError as exc:
            exc.message = f'level {level + 1}: {exc.message}'
            exc.entity = subdiv.name
            raise
        mesh.triangle = []
        logger.debug('%s: catmull-clark level %d -> %d vertices, %d quads',
                     subdiv.name, level + 1, len(mesh.pos), len(mesh.quad))

    mesh.norm = []
    mesh.texcoord = []
    mesh.subdivision_catmullclark_level = 0
    apply_normals(mesh, subdiv.subdivision_catmullclark_smooth, settings.degenerate_tol)

    subdiv.assign(mesh)


__all__ = ['subdivide_level', 'subdivide_catmullclark']
