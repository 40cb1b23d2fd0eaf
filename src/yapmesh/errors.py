"""
Exceptions raised by the refinement engine.

All of these are programmer or data errors, never transient conditions:
nothing in yapMesh retries.  A failure aborts the refinement of the
entity being processed; :func:`yapmesh.scene.subdivide` catches
:class:`MeshRefineError` per entity so the rest of a scene still gets
refined.

- TopologyError: malformed connectivity (unknown edge, orphan vertex)
- DegenerateGeometryError: zero-length vectors feeding a normalization,
  Bezier splitting that fails to converge
- ConfigurationError: bad levels, bad parameters, indices outside the
  position buffer
"""

from typing import Optional


class MeshRefineError(Exception):
    """Base class for refinement failures.

    ``entity`` names the mesh or surface being processed when the error
    was raised, if known.  The orchestrator fills it in when an error
    escapes a per-entity refinement step.
    """

    def __init__(self, message: str, *, entity: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity = entity

    def __str__(self) -> str:
        if self.entity:
            return f"{self.entity}: {self.message}"
        return self.message


class TopologyError(MeshRefineError):
    """Connectivity does not describe the mesh it claims to."""


class DegenerateGeometryError(MeshRefineError):
    """Geometry collapses where a direction or a length is required."""


class ConfigurationError(MeshRefineError, ValueError):
    """Invalid refinement parameters or out-of-range references."""


__all__ = [
    'MeshRefineError',
    'TopologyError',
    'DegenerateGeometryError',
    'ConfigurationError',
]
