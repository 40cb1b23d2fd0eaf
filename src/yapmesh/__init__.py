# -*- coding: utf-8 -*-
"""yapMesh, polygon and curve mesh refinement for rendering.

The public entry points live in the submodules: :mod:`yapmesh.scene`
drives subdivision for a whole scene, :mod:`yapmesh.catmullclark`,
:mod:`yapmesh.bezier` and :mod:`yapmesh.surfaces` refine individual
entities.
"""

from importlib.metadata import PackageNotFoundError, version


try:
    __version__ = version("yapMesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"
