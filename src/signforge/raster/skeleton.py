"""Zhang-Suen thinning and centerline extraction for glyph masks."""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from signforge.paths import Path
from signforge.raster.contours import douglas_peucker

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000

# Cardinal neighbours first, then diagonals.
_FOLLOW_ORDER = (
    (0, -1), (1, 0), (0, 1), (-1, 0),
    (1, -1), (1, 1), (-1, 1), (-1, -1),
)


@dataclass
class SkeletonResult:
    """Outcome of a thinning run.

    Attributes:
        image: Boolean skeleton, same shape as the input mask
        iterations: Number of full iterations performed, including the
            final one that removed nothing
    """
    image: np.ndarray
    iterations: int

    @property
    def pixel_count(self) -> int:
        return int(self.image.sum())


def binarize(gray, threshold: float = 128) -> np.ndarray:
    """Dark pixels (below ``threshold``) become foreground.

    Colour images (``rows x cols x channels``) are averaged over their
    channels first.
    """

    arr = np.asarray(gray, dtype=float)
    if arr.ndim == 3:
        arr = arr[..., :3].mean(axis=2)
    return arr < threshold


def _neighbours(padded: np.ndarray):
    """P2..P9 of every interior pixel, clockwise from north."""

    return (
        padded[:-2, 1:-1],  # P2 N
        padded[:-2, 2:],    # P3 NE
        padded[1:-1, 2:],   # P4 E
        padded[2:, 2:],     # P5 SE
        padded[2:, 1:-1],   # P6 S
        padded[2:, :-2],    # P7 SW
        padded[1:-1, :-2],  # P8 W
        padded[:-2, :-2],   # P9 NW
    )


def _deletable(padded: np.ndarray, first: bool) -> np.ndarray:
    p2, p3, p4, p5, p6, p7, p8, p9 = _neighbours(padded)
    ring = (p2, p3, p4, p5, p6, p7, p8, p9, p2)
    count = sum(p.astype(np.int32) for p in ring[:-1])
    transitions = sum(((a == 0) & (b == 1)).astype(np.int32) for a, b in zip(ring, ring[1:]))
    if first:
        products = ((p2 * p4 * p6) == 0) & ((p4 * p6 * p8) == 0)
    else:
        products = ((p2 * p4 * p8) == 0) & ((p2 * p6 * p8) == 0)
    center = padded[1:-1, 1:-1] == 1
    return center & (count >= 2) & (count <= 6) & (transitions == 1) & products


def zhang_suen(mask, max_iterations: int = MAX_ITERATIONS) -> SkeletonResult:
    """Thin a binary mask to a one pixel wide skeleton.

    Each iteration runs the two Zhang-Suen sub-passes, deleting all marked
    pixels of a sub-pass at once.  Stops when an iteration removes nothing
    or after ``max_iterations``.
    """

    img = np.asarray(mask, dtype=bool)
    if img.ndim != 2:
        raise ValueError(f"mask must be 2D, got shape {img.shape}")
    padded = np.pad(img.astype(np.uint8), 1, mode='constant')
    iterations = 0
    while iterations < max_iterations:
        iterations += 1
        removed = 0
        for first in (True, False):
            marked = _deletable(padded, first)
            removed += int(marked.sum())
            padded[1:-1, 1:-1][marked] = 0
        if removed == 0:
            break
    else:
        logger.warning("thinning stopped after %d iterations", max_iterations)
    return SkeletonResult(image=padded[1:-1, 1:-1].astype(bool), iterations=iterations)


def _neighbour_count(skel: np.ndarray) -> np.ndarray:
    padded = np.pad(skel.astype(np.int32), 1, mode='constant')
    return sum(_neighbours(padded)) * skel


def _follow(skel: np.ndarray, visited: np.ndarray, start: Tuple[int, int]) -> List[Tuple[int, int]]:
    rows, cols = skel.shape
    path = [start]
    visited[start[1], start[0]] = True
    x, y = start
    while True:
        best = None
        best_score = math.inf
        for dx, dy in _FOLLOW_ORDER:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < cols and 0 <= ny < rows) or not skel[ny, nx] or visited[ny, nx]:
                continue
            if len(path) < 2:
                best = (nx, ny)
                break
            px, py = path[-2]
            heading = dx * (x - px) + dy * (y - py)
            score = math.sqrt(dx * dx + dy * dy) - 0.5 * heading
            if score < best_score:
                best, best_score = (nx, ny), score
        if best is None:
            return path
        path.append(best)
        visited[best[1], best[0]] = True
        x, y = best


def skeleton_paths(skeleton, min_length: int = 2) -> List[List[Tuple[int, int]]]:
    """Split a skeleton image into ordered pixel polylines.

    Walks start at endpoints and junctions (one or three-plus neighbours),
    then at any pixels left over, which belong to closed loops.  Each walk
    prefers to keep its heading.  Polylines shorter than ``min_length``
    pixels are dropped.
    """

    skel = np.asarray(skeleton, dtype=bool)
    visited = np.zeros_like(skel)
    counts = _neighbour_count(skel)
    starts = np.argwhere(skel & ((counts == 1) | (counts >= 3)))
    leftovers = np.argwhere(skel)

    paths = []
    for y, x in list(starts) + list(leftovers):
        if visited[y, x]:
            continue
        path = _follow(skel, visited, (int(x), int(y)))
        if len(path) >= min_length:
            paths.append(path)
    return paths


def glyph_centerlines(mask, tolerance: float = 1.0, scale: float = 1.0,
                      max_iterations: int = MAX_ITERATIONS) -> List[Path]:
    """Single-stroke paths through the middle of a filled glyph mask.

    Pixel rows grow downwards; the returned paths are flipped so ``y``
    grows upwards and scaled by ``scale``.
    """

    result = zhang_suen(mask, max_iterations)
    paths = []
    for pixels in skeleton_paths(result.image):
        simplified = douglas_peucker(pixels, tolerance)
        paths.append(Path.from_points([(x * scale, -y * scale) for x, y in simplified]))
    logger.debug("centerlines: %d skeleton pixels, %d paths", result.pixel_count, len(paths))
    return paths


__all__ = [
    'MAX_ITERATIONS',
    'SkeletonResult',
    'binarize',
    'zhang_suen',
    'skeleton_paths',
    'glyph_centerlines',
]
