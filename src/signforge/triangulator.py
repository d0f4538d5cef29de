"""Triangulation helpers for profile end caps.

We delegate to ``mapbox-earcut`` (the ear clipping implementation used by
Mapbox GL).  The helpers here normalise signforge profiles into the format
earcut expects and turn the resulting indices back into point triples.
"""

from typing import List, Sequence, Tuple

import mapbox_earcut as _earcut
import numpy as np

from signforge.geometry_utils import epsilon

Point2D = Tuple[float, float]


def triangulate_polygon(outer: Sequence[Sequence[float]]) -> List[List[Point2D]]:
    """Return triangles covering the simple polygon ``outer``.

    Loops with fewer than three distinct points give no triangles.  The
    returned triangles are lists of three ``(x, y)`` pairs taken verbatim
    from the input, wound counter-clockwise.  Lifting into 3D and matching
    a target normal is up to the caller.
    """

    loop = _prepare_loop(outer)
    if len(loop) < 3:
        return []

    vertices = np.asarray(loop, dtype=np.float32)
    ring_ends = np.asarray([len(loop)], dtype=np.uint32)
    indices = _earcut.triangulate_float32(vertices, ring_ends)
    triangles: List[List[Point2D]] = []
    for i in range(0, len(indices), 3):
        triangles.append([loop[indices[i]], loop[indices[i + 1]], loop[indices[i + 2]]])
    return triangles


def signed_area(loop: Sequence[Sequence[float]]) -> float:
    """Shoelace area; positive for counter-clockwise loops."""

    total = 0.0
    n = len(loop)
    for i in range(n):
        x0, y0 = loop[i][0], loop[i][1]
        x1, y1 = loop[(i + 1) % n][0], loop[(i + 1) % n][1]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def ensure_ccw(loop: Sequence[Sequence[float]]) -> List[Point2D]:
    """Return ``loop`` as a list of tuples wound counter-clockwise."""

    pts = [(float(p[0]), float(p[1])) for p in loop]
    if signed_area(pts) < 0:
        pts.reverse()
    return pts


def _prepare_loop(points: Sequence[Sequence[float]]) -> List[Point2D]:
    loop: List[Point2D] = []
    for pt in points:
        x, y = float(pt[0]), float(pt[1])
        if loop and _near(loop[-1], (x, y)):
            continue
        loop.append((x, y))
    if loop and _near(loop[0], loop[-1]):
        loop.pop()
    if len(loop) < 3:
        return loop
    if signed_area(loop) < 0:
        loop.reverse()
    return loop


def _near(p1: Point2D, p2: Point2D) -> bool:
    return abs(p1[0] - p2[0]) <= epsilon and abs(p1[1] - p2[1]) <= epsilon


__all__ = ['triangulate_polygon', 'signed_area', 'ensure_ccw']
