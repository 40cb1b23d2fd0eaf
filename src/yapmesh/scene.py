"""Scene container and the subdivision orchestrator.

A scene holds two kinds of entity: :class:`~yapmesh.mesh.Mesh` (refined
in place) and :class:`~yapmesh.surfaces.Surface` (re-tessellated into a
display mesh).  Both expose ``renderable()``, which returns the mesh the
renderer should draw.

:func:`subdivide` processes each entity independently.  A refinement
error aborts only the entity that raised it; the entity is left in an
unspecified state, the failure is logged and recorded in the returned
:class:`SubdivisionReport`, and the remaining entities are processed as
usual.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from yapmesh.bezier import subdivide_bezier
from yapmesh.catmullclark import subdivide_catmullclark
from yapmesh.config import RefineSettings, load_settings
from yapmesh.errors import MeshRefineError
from yapmesh.mesh import Mesh
from yapmesh.surfaces import Surface, subdivide_surface

logger = logging.getLogger(__name__)

Entity = Union[Mesh, Surface]


@dataclass
class Scene:
    meshes: List[Mesh] = field(default_factory=list)
    surfaces: List[Surface] = field(default_factory=list)

    def entities(self) -> Iterator[Entity]:
        yield from self.meshes
        yield from self.surfaces

    def renderables(self) -> Iterator[Mesh]:
        """Meshes ready for drawing: every mesh, then every display mesh."""
        for entity in self.entities():
            yield entity.renderable()


@dataclass
class SubdivisionReport:
    """Outcome of one :func:`subdivide` call."""

    processed: List[str] = field(default_factory=list)
    failures: List[Tuple[str, MeshRefineError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def __bool__(self) -> bool:
        return self.ok


def subdivide_mesh(mesh: Mesh, settings: RefineSettings) -> None:
    """Catmull-Clark first, then Bezier flattening, each if its level is set."""
    if mesh.subdivision_catmullclark_level:
        subdivide_catmullclark(mesh, settings)
    if mesh.subdivision_bezier_level:
        subdivide_bezier(mesh, settings)


def subdivide(scene: Scene, settings: Optional[RefineSettings] = None) -> SubdivisionReport:
    """Refine every mesh and re-tessellate every surface of ``scene``.

    Mesh levels are zeroed once applied, so calling this twice leaves
    meshes alone the second time; surfaces are always re-tessellated.
    """
    if settings is None:
        settings = load_settings()

    report = SubdivisionReport()
    for entity in scene.entities():
        try:
            if isinstance(entity, Surface):
                subdivide_surface(entity, settings)
            else:
                subdivide_mesh(entity, settings)
        except MeshRefineError as exc:
            if exc.entity is None:
                exc.entity = entity.name
            logger.warning('subdivision of %s %r failed: %s', entity.kind, entity.name, exc)
            report.failures.append((entity.name, exc))
            continue
        report.processed.append(entity.name)

    logger.debug('subdivided %d entities, %d failed',
                 len(report.processed), len(report.failures))
    return report


__all__ = ['Scene', 'SubdivisionReport', 'subdivide', 'subdivide_mesh']
