"""Cubic Bezier spline flattening.

A mesh holding ``spline`` segments (four control indices ``p0 p1 p2 p3``
into ``pos``; ``p0`` and ``p3`` lie on the curve, ``p1`` and ``p2`` do
not) is turned into a polyline by one of two strategies:

uniform
    ``2**level`` equal parameter steps per segment, each sample
    evaluated with the cubic Bernstein blend.
adaptive
    de Casteljau halving of every segment that fails a flatness test,
    repeated over the whole working set until nothing splits.

Either way the spline list is cleared, the Bezier level is zeroed, and
tangents are estimated for the resulting polyline.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from yapmesh.config import DEFAULT_SETTINGS, RefineSettings
from yapmesh.errors import ConfigurationError, DegenerateGeometryError
from yapmesh.geom import dist, midpoint
from yapmesh.mesh import Mesh, Vec3
from yapmesh.normals import smooth_tangents

logger = logging.getLogger(__name__)

Segment = Tuple[int, int, int, int]


def bernstein(t: float, i: int) -> float:
    """Cubic Bernstein basis polynomial ``B_i(t)``, ``i`` in ``0..3``."""
    s = 1.0 - t
    if i == 0:
        return s * s * s
    if i == 1:
        return 3.0 * t * s * s
    if i == 2:
        return 3.0 * t * t * s
    if i == 3:
        return t * t * t
    raise ValueError(f'cubic Bernstein index must be in 0..3, got {i}')


def bezier_point(p0, p1, p2, p3, t: float) -> Vec3:
    """Evaluate a cubic Bezier segment at ``t``.

    At ``t=0`` and ``t=1`` the weights are exactly ``(1,0,0,0)`` and
    ``(0,0,0,1)``, so the endpoints are reproduced bit for bit.
    """
    b0 = bernstein(t, 0)
    b1 = bernstein(t, 1)
    b2 = bernstein(t, 2)
    b3 = bernstein(t, 3)
    return [b0*p0[k] + b1*p1[k] + b2*p2[k] + b3*p3[k] for k in range(3)]


def control_length(p0, p1, p2, p3) -> float:
    """Length of the control polygon ``p0 p1 p2 p3``."""
    return dist(p0, p1) + dist(p1, p2) + dist(p2, p3)


def flatness(p0, p1, p2, p3, tol: float = 1e-12) -> float:
    """Control polygon length over chord length.

    1.0 for a straight, monotone segment; grows as the curve bends.  A
    segment collapsed to a point counts as flat (1.0); a closed loop
    (zero chord, non-zero control polygon) is infinitely non-flat.
    """
    polygon = control_length(p0, p1, p2, p3)
    chord = dist(p0, p3)
    if chord <= tol:
        return 1.0 if polygon <= tol else float('inf')
    return polygon / chord


def split_segment(pos: List[Vec3], seg: Sequence[int]) -> Tuple[Segment, Segment]:
    """Split a segment at ``t = 0.5``, appending the new points to ``pos``.

    Returns the index tuples of the two halves ``(p0, Q0, R0, S)`` and
    ``(S, R1, Q2, p3)``.
    """
    i0, i1, i2, i3 = seg
    p0, p1, p2, p3 = pos[i0], pos[i1], pos[i2], pos[i3]
    q0 = midpoint(p0, p1)
    q1 = midpoint(p1, p2)
    q2 = midpoint(p2, p3)
    r0 = midpoint(q0, q1)
    r1 = midpoint(q1, q2)
    s = midpoint(r0, r1)

    base = len(pos)
    pos.extend([q0, r0, s, r1, q2])
    iq0, ir0, i_s, ir1, iq2 = range(base, base + 5)
    return (i0, iq0, ir0, i_s), (i_s, ir1, iq2, i3)


def _compact(pos: Sequence[Vec3], line: Sequence[Tuple[int, int]]
             ) -> Tuple[List[Vec3], List[Tuple[int, int]]]:
    # keep only on-curve points, numbered in order of first use
    remap: Dict[int, int] = {}
    out_pos: List[Vec3] = []
    out_line: List[Tuple[int, int]] = []
    for a, b in line:
        for idx in (a, b):
            if idx not in remap:
                remap[idx] = len(out_pos)
                out_pos.append(list(pos[idx]))
        out_line.append((remap[a], remap[b]))
    return out_pos, out_line


def _finish(bezier: Mesh, pos: List[Vec3], line: List[Tuple[int, int]],
            settings: RefineSettings) -> None:
    bezier.pos = pos
    bezier.line = line
    bezier.norm = []
    bezier.texcoord = []
    bezier.spline = []
    bezier.subdivision_bezier_level = 0
    smooth_tangents(bezier, settings.degenerate_tol)


def _uniform(bezier: Mesh, settings: RefineSettings) -> None:
    level = bezier.subdivision_bezier_level
    if level > settings.max_level:
        raise ConfigurationError(
            f'bezier level {level} exceeds max_level {settings.max_level}', entity=bezier.name)
    steps = 1 << level

    pos: List[Vec3] = []
    line: List[Tuple[int, int]] = []
    for i0, i1, i2, i3 in bezier.spline:
        p0, p1, p2, p3 = bezier.pos[i0], bezier.pos[i1], bezier.pos[i2], bezier.pos[i3]
        start = len(pos)
        for i in range(steps + 1):
            pos.append(bezier_point(p0, p1, p2, p3, i / steps))
            if i:
                line.append((start + i - 1, start + i))

    logger.debug('%s: uniform bezier, %d segments x %d steps',
                 bezier.name, len(bezier.spline), steps)
    _finish(bezier, pos, line, settings)


def _decasteljau(bezier: Mesh, settings: RefineSettings) -> None:
    pos = [list(p) for p in bezier.pos]
    threshold = settings.flatness_threshold
    tol = settings.degenerate_tol

    # each working segment carries the size floor of the spline it came from
    working: List[Tuple[Segment, float]] = []
    for seg in bezier.spline:
        floor = settings.split_floor * control_length(*(pos[i] for i in seg))
        working.append((tuple(seg), floor))

    for npass in range(1, settings.max_bezier_passes + 1):
        following: List[Tuple[Segment, float]] = []
        splits = 0
        for seg, floor in working:
            p0, p1, p2, p3 = (pos[i] for i in seg)
            if (control_length(p0, p1, p2, p3) <= floor
                    or flatness(p0, p1, p2, p3, tol) < threshold):
                following.append((seg, floor))
            else:
                following.extend((half, floor) for half in split_segment(pos, seg))
                splits += 1
        working = following
        logger.debug('%s: de Casteljau pass %d split %d segments',
                     bezier.name, npass, splits)
        if not splits:
            break
    else:
        raise DegenerateGeometryError(
            f'de Casteljau splitting did not converge in {settings.max_bezier_passes} passes '
            f'({len(working)} segments)', entity=bezier.name)

    line = [(seg[0], seg[3]) for seg, _ in working]
    pos, line = _compact(pos, line)
    _finish(bezier, pos, line, settings)


def subdivide_bezier_uniform(bezier: Mesh, settings: RefineSettings = DEFAULT_SETTINGS) -> None:
    """Flatten every spline segment with ``2**level`` uniform steps.

    Samples of different segments are never joined, even when the
    segments share a control point.
    """
    bezier.validate()
    _uniform(bezier, settings)


def subdivide_bezier_decasteljau(bezier: Mesh,
                                 settings: RefineSettings = DEFAULT_SETTINGS) -> None:
    """Flatten splines by recursive de Casteljau halving.

    Each pass maps the working segment list to a new one in which every
    segment failing the flatness test is replaced by its two halves.
    Pieces whose control polygon has shrunk below ``settings.split_floor``
    times that of their source segment are accepted as they are.
    Iteration stops at the first pass with no split; if
    ``settings.max_bezier_passes`` passes all split,
    the curve is treated as degenerate.
    """
    bezier.validate()
    _decasteljau(bezier, settings)


def subdivide_bezier(bezier: Mesh, settings: RefineSettings = DEFAULT_SETTINGS) -> None:
    """Flatten the splines of ``bezier`` if its Bezier level is set."""
    bezier.validate()
    if not bezier.subdivision_bezier_level:
        return
    if bezier.subdivision_bezier_uniform:
        _uniform(bezier, settings)
    else:
        _decasteljau(bezier, settings)


__all__ = [
    'bernstein',
    'bezier_point',
    'control_length',
    'flatness',
    'split_segment',
    'subdivide_bezier_uniform',
    'subdivide_bezier_decasteljau',
    'subdivide_bezier',
]
