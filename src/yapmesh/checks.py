"""Validation helpers for refined meshes."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

from yapmesh.edgemap import EdgeMap, face_edges
from yapmesh.geom import close, mag
from yapmesh.mesh import Mesh


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


def mesh_watertight(mesh: Mesh) -> CheckResult:
    """Every polygon edge must be shared by exactly two faces."""

    edge_map = EdgeMap(mesh.triangle, mesh.quad)
    boundary = edge_map.boundary_edges()
    invalid = edge_map.nonmanifold_edges()

    warnings: List[str] = []
    ok = True
    if not len(edge_map):
        warnings.append('no polygon faces')
    if boundary:
        ok = False
        warnings.append(f'{len(boundary)} boundary edges detected')
    if invalid:
        ok = False
        warnings.append(f'edges with multiplicity >2: {invalid}')
    return CheckResult(ok, warnings)


def faces_oriented(mesh: Mesh) -> CheckResult:
    """Neighbouring faces must traverse their shared edge in opposite directions."""

    directed = Counter()
    for face in list(mesh.triangle) + list(mesh.quad):
        for a, b in face_edges(face):
            directed[(a, b)] += 1

    repeated = sorted(edge for edge, count in directed.items() if count > 1)
    if repeated:
        return CheckResult(False, [f'inconsistent winding on directed edges: {repeated[:10]}'])
    return CheckResult(True, [])


def normals_unit_length(mesh: Mesh, tol: float = 1e-6) -> CheckResult:
    """``norm`` must hold one unit vector per position."""

    if len(mesh.norm) != len(mesh.pos):
        return CheckResult(False, [f'{len(mesh.norm)} normals for {len(mesh.pos)} positions'])
    bad = [i for i, n in enumerate(mesh.norm) if not close(mag(n), 1.0, tol)]
    if bad:
        return CheckResult(False, [f'non-unit normals at vertices {bad[:10]}'])
    return CheckResult(True, [])


def euler_characteristic(mesh: Mesh) -> int:
    """``V - E + F`` over the vertices referenced by polygon faces."""

    used = set()
    for face in list(mesh.triangle) + list(mesh.quad):
        used.update(face)
    edges = len(EdgeMap(mesh.triangle, mesh.quad))
    return len(used) - edges + len(mesh.triangle) + len(mesh.quad)


__all__ = [
    'CheckResult',
    'mesh_watertight',
    'faces_oriented',
    'normals_unit_length',
    'euler_characteristic',
]
