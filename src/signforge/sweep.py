"""Sweeping cross-sections along planar paths.

Two families of sweeps live here:

* ring sweeps (:func:`round_tube`, :func:`swept_tube`) place circular rings
  in the plane spanned by a parallel-transported normal and binormal;
* profile sweeps (:func:`sweep_profile` and the duct helpers built on it)
  carry a 2D polygon in the vertical plane across the path, keeping its
  ``z`` axis aligned with the print bed normal.

Ring quads are wound so the outer surface faces away from the path and the
inner surface of a hollow tube faces towards it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import List, Sequence, Tuple

from signforge.geometry_utils import (
    X_AXIS,
    Z_AXIS,
    Triangle,
    Vec3,
    add,
    cross,
    dot,
    epsilon,
    length,
    normalize,
    orient_triangle,
    scale,
    sub,
)
from signforge.errors import GeometryError
from signforge.paths import Path
from signforge.profiles import Profile, rectangle_profile, u_channel_profile
from signforge.triangulator import ensure_ccw, triangulate_polygon

logger = logging.getLogger(__name__)

Ring = List[Vec3]


@dataclass(frozen=True)
class Frame:
    """Position and orthonormal basis of one cross-section."""
    position: Vec3
    tangent: Vec3
    normal: Vec3
    binormal: Vec3


def _as3(p: Sequence[float], z: float = 0.0) -> Vec3:
    if len(p) > 2:
        return (float(p[0]), float(p[1]), float(p[2]))
    return (float(p[0]), float(p[1]), float(z))


def path_tangents(points: Sequence[Sequence[float]], closed: bool = False) -> List[Vec3]:
    """Unit tangent at every point.

    Interior points average the normalised directions to their neighbours;
    open ends use a one-sided difference.  Closed paths wrap around.
    Degenerate tangents fall back to ``+X``.
    """

    pts = [_as3(p) for p in points]
    n = len(pts)
    if n < 2:
        return [X_AXIS] * n
    tangents = []
    for i, p in enumerate(pts):
        has_prev = closed or i > 0
        has_next = closed or i < n - 1
        prev_p = pts[(i - 1) % n]
        next_p = pts[(i + 1) % n]
        if has_prev and has_next:
            t = add(normalize(sub(p, prev_p), (0.0, 0.0, 0.0)),
                    normalize(sub(next_p, p), (0.0, 0.0, 0.0)))
        elif has_next:
            t = sub(next_p, p)
        else:
            t = sub(p, prev_p)
        tangents.append(normalize(t, X_AXIS))
    return tangents


def _transport(state: Tuple[Vec3, List[Frame]], item: Tuple[Vec3, Vec3]):
    prev_normal, frames = state
    position, tangent = item
    n = sub(prev_normal, scale(tangent, dot(prev_normal, tangent)))
    if length(n) < epsilon:
        # tangent is parallel to the previous normal
        n = cross(tangent, Z_AXIS) if abs(tangent[2]) < 0.9 else cross(tangent, X_AXIS)
    n = normalize(n)
    frames.append(Frame(position, tangent, n, cross(tangent, n)))
    return n, frames


def transport_frames(points: Sequence[Vec3], tangents: Sequence[Vec3],
                     reference: Vec3 = Z_AXIS) -> List[Frame]:
    """Parallel-transport a normal along the path.

    The previous normal is threaded through the fold, projected onto the
    plane perpendicular to each tangent and renormalised.
    """

    _, frames = reduce(_transport, zip(points, tangents), (reference, []))
    return frames


def path_frames(path: Path, z: float = 0.0) -> List[Frame]:
    pts = [_as3(p, z) for p in path.points]
    return transport_frames(pts, path_tangents(pts, path.closed))


def circle_ring(frame: Frame, radius: float, segments: int) -> Ring:
    """``segments`` points on a circle in the frame's normal/binormal plane."""

    ring = []
    for j in range(segments):
        theta = 2.0 * math.pi * j / segments
        offset = add(scale(frame.normal, math.cos(theta)), scale(frame.binormal, math.sin(theta)))
        ring.append(add(frame.position, scale(offset, radius)))
    return ring


def tube_rings(path: Path, radius: float, segments: int = 16, z: float = 0.0) -> List[Ring]:
    """One ring per path point."""

    return [circle_ring(f, radius, segments) for f in path_frames(path, z)]


def _skin(a: Ring, b: Ring, inward: bool = False) -> List[Triangle]:
    """Connect two consecutive rings; faces point away from the axis unless ``inward``."""

    s = len(a)
    tris = []
    for j in range(s):
        k = (j + 1) % s
        if inward:
            tris.append(Triangle.from_vertices(a[j], b[j], a[k]))
            tris.append(Triangle.from_vertices(a[k], b[j], b[k]))
        else:
            tris.append(Triangle.from_vertices(a[j], a[k], b[j]))
            tris.append(Triangle.from_vertices(a[k], b[k], b[j]))
    return tris


def _annulus_cap(outer: Ring, inner: Ring, start: bool) -> List[Triangle]:
    s = len(outer)
    tris = []
    for j in range(s):
        k = (j + 1) % s
        if start:
            tris.append(Triangle.from_vertices(outer[j], inner[j], outer[k]))
            tris.append(Triangle.from_vertices(inner[j], inner[k], outer[k]))
        else:
            tris.append(Triangle.from_vertices(outer[j], outer[k], inner[j]))
            tris.append(Triangle.from_vertices(inner[j], outer[k], inner[k]))
    return tris


def _disc_cap(ring: Ring, center: Vec3, facing: Vec3) -> List[Triangle]:
    s = len(ring)
    return [orient_triangle(center, ring[j], ring[(j + 1) % s], facing) for j in range(s)]


def _pairs(count: int, closed: bool) -> List[Tuple[int, int]]:
    pairs = [(i, i + 1) for i in range(count - 1)]
    if closed and count > 2:
        pairs.append((count - 1, 0))
    return pairs


def round_tube(path: Path, outer_radius: float, inner_radius: float,
               segments: int = 16, z: float = 0.0) -> List[Triangle]:
    """Hollow circular tube along ``path``.

    Open paths get annular caps at both ends.  Closed paths wrap the last
    ring back to the first and get no caps, giving ``4 * segments * n``
    triangles for ``n`` points.
    """

    if path.is_degenerate:
        return []
    if inner_radius <= 0 or outer_radius <= inner_radius:
        raise GeometryError(f"invalid radii: inner {inner_radius}, outer {outer_radius}")
    frames = path_frames(path, z)
    outer = [circle_ring(f, outer_radius, segments) for f in frames]
    inner = [circle_ring(f, inner_radius, segments) for f in frames]

    tris: List[Triangle] = []
    for i, j in _pairs(len(frames), path.closed):
        tris.extend(_skin(outer[i], outer[j]))
        tris.extend(_skin(inner[i], inner[j], inward=True))
    if not path.closed:
        tris.extend(_annulus_cap(outer[0], inner[0], start=True))
        tris.extend(_annulus_cap(outer[-1], inner[-1], start=False))
    logger.debug("round tube: %d points, %d triangles", len(frames), len(tris))
    return tris


def swept_tube(path: Path, radius: float, segments: int = 12, z: float = 0.0) -> List[Triangle]:
    """Solid circular tube with flat disc caps on open ends."""

    if path.is_degenerate:
        return []
    if radius <= 0:
        raise GeometryError(f"radius must be positive, got {radius}")
    frames = path_frames(path, z)
    rings = [circle_ring(f, radius, segments) for f in frames]
    tris: List[Triangle] = []
    for i, j in _pairs(len(frames), path.closed):
        tris.extend(_skin(rings[i], rings[j]))
    if not path.closed:
        tris.extend(_disc_cap(rings[0], frames[0].position, scale(frames[0].tangent, -1.0)))
        tris.extend(_disc_cap(rings[-1], frames[-1].position, frames[-1].tangent))
    return tris


# ---------------------------------------------------------------------------
# Profile sweeps
# ---------------------------------------------------------------------------


def _place(position: Vec3, perpendicular: Vec3, q: Tuple[float, float]) -> Vec3:
    return (
        position[0] + q[0] * perpendicular[0],
        position[1] + q[0] * perpendicular[1],
        position[2] + q[1],
    )


def sweep_profile(path: Path, profile: Profile, z: float = 0.0) -> List[Triangle]:
    """Sweep a closed ``(u, z)`` polygon along a planar path.

    ``u`` maps onto the horizontal perpendicular ``(-ty, tx, 0)`` of each
    tangent and ``z`` stays vertical, so flat profile edges stay flat on the
    bed.  Open ends are capped with the earcut-triangulated profile.
    """

    if path.is_degenerate or len(profile) < 3:
        return []
    prof = ensure_ccw(profile)
    pts = [_as3(p, z) for p in path.points]
    tangents = path_tangents(pts, path.closed)
    perps = [normalize((-t[1], t[0], 0.0), (0.0, 1.0, 0.0)) for t in tangents]
    sections = [[_place(p, perp, q) for q in prof] for p, perp in zip(pts, perps)]

    m = len(prof)
    tris: List[Triangle] = []
    for a_idx, b_idx in _pairs(len(sections), path.closed):
        a, b = sections[a_idx], sections[b_idx]
        for i in range(m):
            k = (i + 1) % m
            tris.append(Triangle.from_vertices(a[i], a[k], b[i]))
            tris.append(Triangle.from_vertices(a[k], b[k], b[i]))

    if not path.closed:
        cap = triangulate_polygon(prof)
        ends = ((0, scale(tangents[0], -1.0)), (len(pts) - 1, tangents[-1]))
        for index, facing in ends:
            p, perp = pts[index], perps[index]
            for q0, q1, q2 in cap:
                tris.append(orient_triangle(_place(p, perp, q0), _place(p, perp, q1),
                                            _place(p, perp, q2), facing))
    return tris


def u_channel(path: Path, channel_width: float, wall_thickness: float, wall_height: float,
              base_thickness: float) -> List[Triangle]:
    """Open-top U-channel duct standing on the bed."""

    profile = u_channel_profile(channel_width, wall_thickness, wall_height, base_thickness)
    return sweep_profile(path, profile)


def rectangular_duct(path: Path, width: float, depth: float, wall_thickness: float,
                     base_thickness: float) -> List[Triangle]:
    """U-channel of outside ``width`` and total height ``depth``."""

    if depth <= base_thickness:
        raise GeometryError(f"depth {depth} must exceed base thickness {base_thickness}")
    return u_channel(path, width, wall_thickness, depth - base_thickness, base_thickness)


def diffuser_cap(path: Path, channel_width: float, wall_height: float, base_thickness: float,
                 cap_thickness: float, tolerance: float = 0.2) -> List[Triangle]:
    """Flat strip resting on the wall tops of a U-channel."""

    profile = rectangle_profile(channel_width + 2.0 * tolerance, cap_thickness,
                                z0=base_thickness + wall_height)
    return sweep_profile(path, profile)


__all__ = [
    'Frame',
    'Ring',
    'path_tangents',
    'transport_frames',
    'path_frames',
    'circle_ring',
    'tube_rings',
    'round_tube',
    'swept_tube',
    'sweep_profile',
    'u_channel',
    'rectangular_duct',
    'diffuser_cap',
]
