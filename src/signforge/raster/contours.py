"""Boundary tracing and polyline simplification on raster fields."""

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Pixel = Tuple[int, int]

# Moore neighbourhood, clockwise in image coordinates (y grows downwards).
DIRECTIONS: Tuple[Pixel, ...] = (
    (1, 0),    # E
    (1, 1),    # SE
    (0, 1),    # S
    (-1, 1),   # SW
    (-1, 0),   # W
    (-1, -1),  # NW
    (0, -1),   # N
    (1, -1),   # NE
)

MIN_CONTOUR_LENGTH = 10


def boundary_mask(foreground: np.ndarray) -> np.ndarray:
    """Foreground pixels with at least one background or out-of-bounds 8-neighbour."""

    fg = np.asarray(foreground, dtype=bool)
    padded = np.pad(fg, 1, mode='constant', constant_values=False)
    rows, cols = fg.shape
    interior = np.ones_like(fg)
    for dx, dy in DIRECTIONS:
        interior &= padded[1 + dy:1 + dy + rows, 1 + dx:1 + dx + cols]
    return fg & ~interior


def _walk(boundary: np.ndarray, start: Pixel, max_steps: int) -> List[Pixel]:
    rows, cols = boundary.shape
    x, y = start
    direction = 0
    contour: List[Pixel] = []
    seen = set()
    while True:
        contour.append((x, y))
        seen.add((x, y))
        for i in range(8):
            d = (direction + i) % 8
            nx, ny = x + DIRECTIONS[d][0], y + DIRECTIONS[d][1]
            if 0 <= nx < cols and 0 <= ny < rows and boundary[ny, nx]:
                x, y = nx, ny
                direction = (d + 6) % 8
                break
        else:
            break
        # back at the start, or pinched through a one-pixel neck
        if (x, y) in seen or len(contour) >= max_steps:
            break
    return contour


def trace_contours(field, threshold: float, min_length: int = MIN_CONTOUR_LENGTH,
                   max_steps: Optional[int] = None) -> List[List[Pixel]]:
    """Trace the outlines of regions where ``field > threshold``.

    Returns contours as lists of ``(x, y)`` pixel coordinates.  Every
    boundary pixel not already on a traced contour starts a new walk; the
    walk takes the first boundary neighbour clockwise from its search
    direction, then turns left.  It ends at the first pixel it has already
    visited (normally the start), at a dead end, or after ``max_steps``
    pixels (``width * height`` by default), so no pixel appears twice.
    Contours of ``min_length`` pixels or fewer are dropped.
    """

    values = np.asarray(field, dtype=float)
    if values.ndim != 2 or values.size == 0:
        return []
    rows, cols = values.shape
    if max_steps is None:
        max_steps = rows * cols
    boundary = boundary_mask(values > threshold)
    consumed = np.zeros_like(boundary)
    worklist = np.argwhere(boundary)  # row-major (y, x)

    contours = []
    for y, x in worklist:
        if consumed[y, x]:
            continue
        contour = _walk(boundary, (int(x), int(y)), max_steps)
        for px, py in contour:
            consumed[py, px] = True
        if len(contour) > min_length:
            contours.append(contour)
    logger.debug("traced %d contours from %d boundary pixels", len(contours), len(worklist))
    return contours


def _segment_distance(p: Sequence[float], a: Sequence[float], b: Sequence[float]) -> float:
    dx, dy = b[0] - a[0], b[1] - a[1]
    mag2 = dx * dx + dy * dy
    if mag2 == 0:
        return math.hypot(p[0] - a[0], p[1] - a[1])
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / mag2
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (a[0] + t * dx), p[1] - (a[1] + t * dy))


def douglas_peucker(points: Sequence[Sequence[float]], tolerance: float) -> list:
    """Douglas-Peucker simplification.

    Splits at the point farthest from the chord between the first and last
    points while that distance exceeds ``tolerance``.  The end points are
    always kept.
    """

    pts = list(points)
    if len(pts) <= 2:
        return pts
    first, last = pts[0], pts[-1]
    max_dist, index = 0.0, 0
    for i in range(1, len(pts) - 1):
        dist = _segment_distance(pts[i], first, last)
        if dist > max_dist:
            max_dist, index = dist, i
    if max_dist > tolerance:
        left = douglas_peucker(pts[:index + 1], tolerance)
        right = douglas_peucker(pts[index:], tolerance)
        return left[:-1] + right
    return [first, last]


__all__ = [
    'DIRECTIONS',
    'MIN_CONTOUR_LENGTH',
    'boundary_mask',
    'trace_contours',
    'douglas_peucker',
]
