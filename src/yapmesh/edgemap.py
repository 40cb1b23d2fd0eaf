"""Undirected edge indexing for triangle/quad meshes.

:class:`EdgeMap` is the single mechanism that keeps Catmull-Clark from
creating two midpoints for the edge shared by neighbouring faces.  Each
unordered vertex pair gets one id, assigned in order of first sighting
while the faces are walked (triangles first, then quads, each in winding
order), so ``edge_index(a, b) == edge_index(b, a)`` whichever face
inserted the edge.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from yapmesh.errors import TopologyError

Edge = Tuple[int, int]


def _edge_key(a: int, b: int) -> Edge:
    return (a, b) if a < b else (b, a)


def face_edges(face: Sequence[int]) -> List[Edge]:
    """Boundary edges of a polygon in winding order."""
    n = len(face)
    return [(face[i], face[(i + 1) % n]) for i in range(n)]


class EdgeMap:
    """Map from unordered vertex pairs to sequential edge ids."""

    def __init__(self, triangle: Iterable[Sequence[int]] = (),
                 quad: Iterable[Sequence[int]] = ()):
        self._edge_map: Dict[Edge, int] = {}
        self._edge_list: List[Edge] = []
        self._face_count: List[int] = []
        for f in triangle:
            for a, b in face_edges(f[:3]):
                self._add_edge(a, b)
        for f in quad:
            for a, b in face_edges(f[:4]):
                self._add_edge(a, b)

    def _add_edge(self, a: int, b: int) -> None:
        key = _edge_key(a, b)
        idx = self._edge_map.get(key)
        if idx is None:
            self._edge_map[key] = len(self._edge_list)
            self._edge_list.append((a, b))
            self._face_count.append(1)
        else:
            self._face_count[idx] += 1

    def __len__(self) -> int:
        return len(self._edge_list)

    def __contains__(self, edge: Sequence[int]) -> bool:
        return _edge_key(edge[0], edge[1]) in self._edge_map

    def edges(self) -> List[Edge]:
        """Endpoint pairs, list index == edge id."""
        return list(self._edge_list)

    def edge_index(self, a: int, b: int) -> int:
        """Return the id of edge ``{a, b}``.

        Raises :class:`TopologyError` if no face inserted the edge.
        """
        try:
            return self._edge_map[_edge_key(a, b)]
        except KeyError:
            raise TopologyError(f'non existing edge ({a}, {b})') from None

    def face_count(self, edge_id: int) -> int:
        """Number of faces that use edge ``edge_id``."""
        return self._face_count[edge_id]

    def boundary_edges(self) -> List[Edge]:
        """Edges used by exactly one face."""
        return [e for e, c in zip(self._edge_list, self._face_count) if c == 1]

    def boundary_vertices(self) -> set:
        verts = set()
        for a, b in self.boundary_edges():
            verts.add(a)
            verts.add(b)
        return verts

    def nonmanifold_edges(self) -> List[Edge]:
        """Edges used by more than two faces."""
        return [e for e, c in zip(self._edge_list, self._face_count) if c > 2]


__all__ = ['Edge', 'EdgeMap', 'face_edges']
