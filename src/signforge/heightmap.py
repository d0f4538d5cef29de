"""Height fields to relief solids.

A height map is a 2D ``numpy`` array of elevations in millimetres, indexed
``[row, col]``.  Column ``c`` maps to ``x = c * width / (cols - 1)`` and row
``r`` to ``y = r * height / (rows - 1)``, so the outermost samples land
exactly on the relief border.
"""

import logging
from typing import List

import numpy as np

from signforge.geometry_utils import Triangle, orient_triangle, quad_prism

logger = logging.getLogger(__name__)


def grayscale_to_heightmap(gray, max_depth: float, invert: bool = False) -> np.ndarray:
    """Map 0..255 intensities onto ``0 .. max_depth``; white is high unless ``invert``."""

    arr = np.clip(np.asarray(gray, dtype=float), 0.0, 255.0)
    if invert:
        arr = 255.0 - arr
    return arr / 255.0 * max_depth


def box_blur(heights, iterations: int = 1) -> np.ndarray:
    """Apply ``iterations`` passes of a 3x3 box blur to the interior cells.

    Each pass reads from the previous pass's buffer only.  Border cells keep
    their values.  A new array is returned; the input is not modified.
    """

    src = np.array(heights, dtype=float)
    if src.ndim != 2:
        raise ValueError(f"height map must be 2D, got shape {src.shape}")
    rows, cols = src.shape
    if rows < 3 or cols < 3:
        return src
    for _ in range(max(0, iterations)):
        acc = np.zeros((rows - 2, cols - 2))
        for dr in (0, 1, 2):
            for dc in (0, 1, 2):
                acc += src[dr:rows - 2 + dr, dc:cols - 2 + dc]
        dst = src.copy()
        dst[1:-1, 1:-1] = acc / 9.0
        src = dst
    return src


def _wall(tris: List[Triangle], xs, ys, zs, outward) -> None:
    """Vertical strip from the surface samples ``zs`` down to ``z = 0``."""

    for i in range(len(xs) - 1):
        b0 = (xs[i], ys[i], 0.0)
        b1 = (xs[i + 1], ys[i + 1], 0.0)
        s0 = (xs[i], ys[i], zs[i])
        s1 = (xs[i + 1], ys[i + 1], zs[i + 1])
        tris.append(orient_triangle(b0, b1, s1, outward))
        tris.append(orient_triangle(b0, s1, s0, outward))


def heightmap_to_mesh(heights, width: float, height: float) -> List[Triangle]:
    """Closed solid between the height surface and ``z = 0``.

    Two surface triangles per 2x2 cell face up, a matching pair on the back
    faces down, and side walls close the four borders.
    """

    h = np.asarray(heights, dtype=float)
    if h.ndim != 2 or h.shape[0] < 2 or h.shape[1] < 2:
        return []
    rows, cols = h.shape
    xs = [float(x) for x in np.linspace(0.0, width, cols)]
    ys = [float(y) for y in np.linspace(0.0, height, rows)]

    tris: List[Triangle] = []
    for r in range(rows - 1):
        y0, y1 = ys[r], ys[r + 1]
        for c in range(cols - 1):
            x0, x1 = xs[c], xs[c + 1]
            v00 = (x0, y0, float(h[r, c]))
            v10 = (x1, y0, float(h[r, c + 1]))
            v01 = (x0, y1, float(h[r + 1, c]))
            v11 = (x1, y1, float(h[r + 1, c + 1]))
            tris.append(Triangle.from_vertices(v00, v10, v11))
            tris.append(Triangle.from_vertices(v00, v11, v01))
            b00, b10 = (x0, y0, 0.0), (x1, y0, 0.0)
            b01, b11 = (x0, y1, 0.0), (x1, y1, 0.0)
            tris.append(Triangle.from_vertices(b00, b11, b10))
            tris.append(Triangle.from_vertices(b00, b01, b11))

    top_y, bottom_y = ys[0], ys[-1]
    left_x, right_x = xs[0], xs[-1]
    _wall(tris, xs, [top_y] * cols, [float(v) for v in h[0, :]], (0.0, -1.0, 0.0))
    _wall(tris, xs, [bottom_y] * cols, [float(v) for v in h[-1, :]], (0.0, 1.0, 0.0))
    _wall(tris, [left_x] * rows, ys, [float(v) for v in h[:, 0]], (-1.0, 0.0, 0.0))
    _wall(tris, [right_x] * rows, ys, [float(v) for v in h[:, -1]], (1.0, 0.0, 0.0))
    logger.debug("height map %dx%d: %d triangles", rows, cols, len(tris))
    return tris


def base_plate(width: float, height: float, thickness: float, z_top: float = 0.0) -> List[Triangle]:
    """Rectangular slab from ``z_top - thickness`` to ``z_top`` (12 triangles)."""

    corners = [(0.0, 0.0), (width, 0.0), (width, height), (0.0, height)]
    return quad_prism(corners, z_top - thickness, z_top)


def relief_mesh(heights, width: float, height: float, base_thickness: float) -> List[Triangle]:
    """Height surface solid sitting on a base plate."""

    return heightmap_to_mesh(heights, width, height) + base_plate(width, height, base_thickness)


__all__ = [
    'grayscale_to_heightmap',
    'box_blur',
    'heightmap_to_mesh',
    'base_plate',
    'relief_mesh',
]
