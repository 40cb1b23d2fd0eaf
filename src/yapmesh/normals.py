"""Normal and tangent estimation for refined meshes.

Two policies for polygon meshes:

``facet_normals``
    every face gets its own copy of its vertices, each carrying the flat
    face normal.
``smooth_normals``
    vertices stay shared; each vertex normal is the renormalized sum of
    the normals of its incident faces.

Polylines get per-vertex tangents from ``smooth_tangents``.

All three modify the mesh in place and raise
:class:`~yapmesh.errors.DegenerateGeometryError` instead of writing a
zero-length or NaN vector into the buffer.
"""

from __future__ import annotations

from typing import List, Sequence

from yapmesh.errors import DegenerateGeometryError
from yapmesh.geom import add, cross, normalize, sub, tiny, zero3
from yapmesh.mesh import Mesh, Vec3


def triangle_normal(v0: Sequence[float], v1: Sequence[float], v2: Sequence[float],
                    tol: float = tiny) -> Vec3:
    """Unit normal of triangle ``v0 v1 v2`` (counter-clockwise is front)."""
    return normalize(cross(sub(v1, v0), sub(v2, v0)), tol)


def quad_normal(v0, v1, v2, v3, tol: float = tiny) -> Vec3:
    """Unit normal of a quad as the mean of its two ``0-2`` diagonal halves.

    Each half is normalized before averaging so a mildly non-planar quad
    still gets a sensible direction.
    """
    return normalize(add(triangle_normal(v0, v1, v2, tol),
                         triangle_normal(v0, v2, v3, tol)), tol)


def face_normal(pos: Sequence[Sequence[float]], face: Sequence[int],
                tol: float = tiny) -> Vec3:
    if len(face) == 3:
        return triangle_normal(pos[face[0]], pos[face[1]], pos[face[2]], tol)
    return quad_normal(pos[face[0]], pos[face[1]], pos[face[2]], pos[face[3]], tol)


def _checked_face_normal(mesh: Mesh, face: Sequence[int], kind: str, fi: int,
                         tol: float) -> Vec3:
    try:
        return face_normal(mesh.pos, face, tol)
    except DegenerateGeometryError:
        raise DegenerateGeometryError(
            f'degenerate {kind} {fi} {tuple(face)} has no normal',
            entity=mesh.name) from None


def facet_normals(mesh: Mesh, tol: float = tiny) -> None:
    """Give every face its own vertices carrying the flat face normal.

    Triangle, quad and texcoord arrays are rewritten to the expanded
    indexing; lines and splines are left alone.
    """
    has_uv = bool(mesh.texcoord)
    pos: List[Vec3] = []
    norm: List[Vec3] = []
    texcoord: List[List[float]] = []
    triangle = []
    quad = []

    for kind, faces, out in (('triangle', mesh.triangle, triangle),
                             ('quad', mesh.quad, quad)):
        for fi, f in enumerate(faces):
            fn = _checked_face_normal(mesh, f, kind, fi, tol)
            nv = len(pos)
            out.append(tuple(range(nv, nv + len(f))))
            for idx in f:
                pos.append(list(mesh.pos[idx]))
                norm.append(list(fn))
                if has_uv:
                    texcoord.append(list(mesh.texcoord[idx]))

    mesh.pos = pos
    mesh.norm = norm
    mesh.texcoord = texcoord
    mesh.triangle = triangle
    mesh.quad = quad


def smooth_normals(mesh: Mesh, tol: float = tiny) -> None:
    """Average incident face normals into shared vertex normals.

    Raises :class:`DegenerateGeometryError` for a vertex with no
    incident face (or whose incident normals cancel out).
    """
    norm = [zero3() for _ in mesh.pos]

    for kind, faces in (('triangle', mesh.triangle), ('quad', mesh.quad)):
        for fi, f in enumerate(faces):
            fn = _checked_face_normal(mesh, f, kind, fi, tol)
            for idx in f:
                norm[idx] = add(norm[idx], fn)

    for vi, n in enumerate(norm):
        try:
            norm[vi] = normalize(n, tol)
        except DegenerateGeometryError:
            raise DegenerateGeometryError(
                f'vertex {vi} has no usable incident face normal',
                entity=mesh.name) from None
    mesh.norm = norm


def smooth_tangents(polyline: Mesh, tol: float = tiny) -> None:
    """Per-vertex tangents from the directions of incident line segments."""
    norm = [zero3() for _ in polyline.pos]

    for li, (a, b) in enumerate(polyline.line):
        try:
            lt = normalize(sub(polyline.pos[b], polyline.pos[a]), tol)
        except DegenerateGeometryError:
            raise DegenerateGeometryError(
                f'line {li} ({a}, {b}) has zero length', entity=polyline.name) from None
        norm[a] = add(norm[a], lt)
        norm[b] = add(norm[b], lt)

    for vi, t in enumerate(norm):
        try:
            norm[vi] = normalize(t, tol)
        except DegenerateGeometryError:
            raise DegenerateGeometryError(
                f'vertex {vi} has no usable incident line', entity=polyline.name) from None
    polyline.norm = norm


def apply_normals(mesh: Mesh, smooth: bool, tol: float = tiny) -> None:
    """Dispatch to :func:`smooth_normals` or :func:`facet_normals`."""
    if smooth:
        smooth_normals(mesh, tol)
    else:
        facet_normals(mesh, tol)


__all__ = [
    'triangle_normal',
    'quad_normal',
    'face_normal',
    'facet_normals',
    'smooth_normals',
    'smooth_tangents',
    'apply_normals',
]
