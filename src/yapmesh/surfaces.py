"""Analytic surfaces and their tessellation into display meshes.

A :class:`Surface` stores a parametric description (shape, radius,
resolution level, optional displacement) and is never modified by
tessellation.  :func:`subdivide_surface` builds a brand-new
:class:`~yapmesh.mesh.Mesh` and stores it as ``surface.display_mesh``,
so the surface can be re-tessellated at another level at any time.

Shapes:
- quad: square of side ``2*radius`` in the local XY plane, normal +Z
- sphere: latitude/longitude sphere of the given radius about the origin

Displacement maps are 2D arrays of samples (``(H, W)`` scalars or
``(H, W, C)`` vectors, averaged over channels), looked up by nearest
sample at the grid position of each vertex and scaled by
``displacement_depth``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from math import cos, isfinite, pi, sin
from typing import Any, Callable, Optional

import numpy as np

from yapmesh.config import DEFAULT_SETTINGS, RefineSettings
from yapmesh.errors import ConfigurationError
from yapmesh.geom import isgoodnum, pi2, vect2
from yapmesh.mesh import Mesh, Vec3, is_level
from yapmesh.normals import apply_normals
from yapmesh.xform import Matrix

logger = logging.getLogger(__name__)

SHAPES = ('quad', 'sphere')

Sampler = Callable[[float, float], float]


@dataclass
class Surface:
    """Analytic surface description plus its cached display mesh."""

    name: str = 'surface'
    shape: str = 'quad'
    radius: float = 1.0
    subdivision_level: int = 0
    subdivision_smooth: bool = False
    displacement_depth: float = 0.0
    displacement_map: Optional[Any] = field(default=None, repr=False)
    frame: Matrix = field(default_factory=Matrix)
    material: Any = None
    display_mesh: Optional[Mesh] = field(default=None, repr=False)

    kind = 'surface'

    @property
    def isquad(self) -> bool:
        return self.shape == 'quad'

    def renderable(self) -> Mesh:
        """The display mesh, tessellating first if there is none yet."""
        if self.display_mesh is None:
            subdivide_surface(self)
        return self.display_mesh

    def validate(self, settings: RefineSettings = DEFAULT_SETTINGS) -> None:
        if self.shape not in SHAPES:
            raise ConfigurationError(
                f"unknown surface shape {self.shape!r}, expected one of {SHAPES}",
                entity=self.name)
        if not isgoodnum(self.radius) or not isfinite(self.radius) or self.radius <= 0:
            raise ConfigurationError(f'radius must be positive, got {self.radius!r}',
                                     entity=self.name)
        level = self.subdivision_level
        if not is_level(level):
            raise ConfigurationError(
                f'subdivision_level must be a non-negative integer, got {level!r}',
                entity=self.name)
        if level > settings.max_level:
            raise ConfigurationError(
                f'subdivision_level {level} exceeds max_level {settings.max_level}',
                entity=self.name)
        if not isgoodnum(self.displacement_depth) or not isfinite(self.displacement_depth):
            raise ConfigurationError(
                f'displacement_depth must be a finite number, got {self.displacement_depth!r}',
                entity=self.name)


def displacement_sampler(displacement_map, depth: float) -> Optional[Sampler]:
    """Return ``f(u, v) -> offset`` for a displacement map, or ``None``.

    ``u`` and ``v`` are grid positions in ``[0, 1]``; ``v`` selects the
    row and ``u`` the column of the nearest sample.
    """
    if displacement_map is None or depth == 0:
        return None
    arr = np.asarray(displacement_map, dtype=np.float64)
    if arr.ndim == 3:
        arr = arr.mean(axis=2)
    if arr.ndim != 2 or arr.size == 0:
        raise ConfigurationError(
            f'displacement map must be a non-empty (H, W) or (H, W, C) array, '
            f'got shape {arr.shape}')
    rows, cols = arr.shape

    def sample(u: float, v: float) -> float:
        r = min(max(int(round(v * (rows - 1))), 0), rows - 1)
        c = min(max(int(round(u * (cols - 1))), 0), cols - 1)
        return depth * float(arr[r, c])

    return sample


def _tessellate_quad(mesh: Mesh, radius: float, level: int,
                     displace: Optional[Sampler]) -> None:
    n = 1 << level

    # corners of the square, counter-clockwise seen from +Z
    p00 = (-radius, -radius)
    p10 = (radius, -radius)
    p11 = (radius, radius)
    p01 = (-radius, radius)

    for j in range(n + 1):
        v = j / n
        for i in range(n + 1):
            u = i / n
            x = (p00[0]*(1-u)*(1-v) + p10[0]*u*(1-v) + p11[0]*u*v + p01[0]*(1-u)*v)
            y = (p00[1]*(1-u)*(1-v) + p10[1]*u*(1-v) + p11[1]*u*v + p01[1]*(1-u)*v)
            z = displace(u, v) if displace else 0.0
            mesh.pos.append([x, y, z])
            mesh.texcoord.append(vect2(u, v))

    def vid(i, j):
        return j * (n + 1) + i

    for j in range(n):
        for i in range(n):
            mesh.quad.append((vid(i, j), vid(i + 1, j), vid(i + 1, j + 1), vid(i, j + 1)))


def _sphere_point(radius: float, phi: float, theta: float) -> Vec3:
    return [radius * cos(phi) * sin(theta),
            radius * sin(phi) * sin(theta),
            radius * cos(theta)]


def _tessellate_sphere(mesh: Mesh, radius: float, level: int,
                       displace: Optional[Sampler]) -> None:
    ci = 1 << (level + 2)   # longitude steps
    cj = 1 << (level + 1)   # latitude bands

    def rad(u, v):
        return radius + displace(u, v) if displace else radius

    north = 0
    mesh.pos.append(_sphere_point(rad(0.0, 0.0), 0.0, 0.0))
    for r in range(1, cj):
        theta = r / cj * pi
        for c in range(ci):
            phi = c / ci * pi2
            mesh.pos.append(_sphere_point(rad(c / ci, r / cj), phi, theta))
    south = len(mesh.pos)
    mesh.pos.append(_sphere_point(rad(0.0, 1.0), 0.0, pi))

    # ring vertex (c, r) for 1 <= r < cj; longitude wraps at ci
    def vid(c, r):
        return 1 + (r - 1) * ci + (c % ci)

    # faces are wound so theta-then-phi gives the outward normal
    for c in range(ci):
        mesh.triangle.append((north, vid(c, 1), vid(c + 1, 1)))
    for r in range(1, cj - 1):
        for c in range(ci):
            mesh.quad.append((vid(c, r), vid(c, r + 1), vid(c + 1, r + 1), vid(c + 1, r)))
    for c in range(ci):
        mesh.triangle.append((vid(c, cj - 1), south, vid(c + 1, cj - 1)))


def tessellate_surface(surface: Surface, settings: RefineSettings = DEFAULT_SETTINGS) -> Mesh:
    """Build a display mesh for ``surface`` without modifying it."""
    surface.validate(settings)
    if surface.displacement_depth and surface.displacement_map is None:
        logger.warning('%s: displacement_depth set without a displacement map, ignoring',
                       surface.name)
    try:
        displace = displacement_sampler(surface.displacement_map, surface.displacement_depth)
    except ConfigurationError as exc:
        exc.entity = surface.name
        raise

    mesh = Mesh(name=f'{surface.name}:display',
                frame=Matrix(surface.frame),
                material=surface.material)
    if surface.isquad:
        _tessellate_quad(mesh, float(surface.radius), surface.subdivision_level, displace)
    else:
        _tessellate_sphere(mesh, float(surface.radius), surface.subdivision_level, displace)

    logger.debug('%s: tessellated %s level %d -> %d vertices, %d triangles, %d quads',
                 surface.name, surface.shape, surface.subdivision_level,
                 len(mesh.pos), len(mesh.triangle), len(mesh.quad))

    apply_normals(mesh, surface.subdivision_smooth, settings.degenerate_tol)
    return mesh


def subdivide_surface(surface: Surface, settings: RefineSettings = DEFAULT_SETTINGS) -> Mesh:
    """(Re)tessellate ``surface`` and store the result as its display mesh."""
    surface.display_mesh = tessellate_surface(surface, settings)
    return surface.display_mesh


__all__ = [
    'SHAPES',
    'Surface',
    'displacement_sampler',
    'tessellate_surface',
    'subdivide_surface',
]
