"""Additive LED channel bars for reliefs.

Channels are plain rectangular bars hanging below ``z = 0`` into the base
plate region.  They are added to the relief mesh as separate closed boxes;
nothing is subtracted.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from signforge.config import ChannelPlacement
from signforge.geometry_utils import Triangle, quad_prism
from signforge.raster.contours import douglas_peucker, trace_contours

logger = logging.getLogger(__name__)

EDGE_INSET = 5.0
GRID_SPACING = 20.0
CONTOUR_THRESHOLD = 0.3
CONTOUR_TOLERANCE = 2.0


def channel_segment(start: Sequence[float], end: Sequence[float], width: float, depth: float,
                    z_top: float = 0.0) -> List[Triangle]:
    """Box ``width`` wide from ``start`` to ``end``, spanning ``z_top - depth .. z_top``.

    Zero-length segments produce no triangles.
    """

    dx, dy = end[0] - start[0], end[1] - start[1]
    seg = math.hypot(dx, dy)
    if seg < 1e-9:
        return []
    px, py = -dy / seg * width / 2.0, dx / seg * width / 2.0
    corners = [
        (start[0] - px, start[1] - py),
        (end[0] - px, end[1] - py),
        (end[0] + px, end[1] + py),
        (start[0] + px, start[1] + py),
    ]
    return quad_prism(corners, z_top - depth, z_top)


def polyline_channels(points: Sequence[Sequence[float]], width: float, depth: float) -> List[Triangle]:
    tris: List[Triangle] = []
    for a, b in zip(points, points[1:]):
        tris.extend(channel_segment(a, b, width, depth))
    return tris


def edge_channels(width: float, height: float, channel_width: float, channel_depth: float,
                  inset: float = EDGE_INSET) -> List[Triangle]:
    """Four bars around the perimeter, ``inset`` in from the border."""

    loop = [
        (inset, inset),
        (width - inset, inset),
        (width - inset, height - inset),
        (inset, height - inset),
        (inset, inset),
    ]
    return polyline_channels(loop, channel_width, channel_depth)


def grid_channels(width: float, height: float, channel_width: float, channel_depth: float,
                  spacing: float = GRID_SPACING, inset: float = EDGE_INSET) -> List[Triangle]:
    """Vertical and horizontal bars every ``spacing`` millimetres."""

    if spacing <= 0:
        raise ValueError(f"grid spacing must be positive, got {spacing}")
    tris: List[Triangle] = []
    x = spacing
    while x < width:
        tris.extend(channel_segment((x, inset), (x, height - inset), channel_width, channel_depth))
        x += spacing
    y = spacing
    while y < height:
        tris.extend(channel_segment((inset, y), (width - inset, y), channel_width, channel_depth))
        y += spacing
    return tris


def contour_channels(heights, width: float, height: float, channel_width: float,
                     channel_depth: float, threshold: float,
                     tolerance: float = CONTOUR_TOLERANCE) -> List[Triangle]:
    """Bars along the simplified outlines of regions higher than ``threshold``.

    Contours are traced in pixel space, simplified with ``tolerance`` pixels
    and scaled onto the relief with the same spacing as the mesh.  A contour
    that ends next to its start is closed with a bar back to the start.
    """

    h = np.asarray(heights, dtype=float)
    rows, cols = h.shape
    sx = width / (cols - 1) if cols > 1 else 1.0
    sy = height / (rows - 1) if rows > 1 else 1.0
    contours = trace_contours(h, threshold)
    logger.debug("found %d contours above %.3f", len(contours), threshold)
    tris: List[Triangle] = []
    for contour in contours:
        simplified = douglas_peucker(contour, tolerance)
        logger.debug("contour: %d points -> %d simplified", len(contour), len(simplified))
        first, last = contour[0], contour[-1]
        if len(simplified) > 2 and max(abs(first[0] - last[0]), abs(first[1] - last[1])) <= 1:
            simplified = simplified + [simplified[0]]
        scaled = [(x * sx, y * sy) for x, y in simplified]
        tris.extend(polyline_channels(scaled, channel_width, channel_depth))
    return tris


def place_channels(placement: ChannelPlacement, width: float, height: float,
                   channel_width: float, channel_depth: float, heights=None,
                   max_depth: Optional[float] = None, *, edge_inset: float = EDGE_INSET,
                   grid_spacing: float = GRID_SPACING,
                   contour_threshold: float = CONTOUR_THRESHOLD,
                   contour_tolerance: float = CONTOUR_TOLERANCE) -> List[Triangle]:
    """Lay out channels according to ``placement``.

    Contour placement needs ``heights``; its threshold is
    ``contour_threshold * max_depth`` (the field maximum when ``max_depth`` is
    not given).
    """

    if placement is ChannelPlacement.NONE:
        return []
    if placement is ChannelPlacement.EDGES:
        return edge_channels(width, height, channel_width, channel_depth, edge_inset)
    if placement is ChannelPlacement.GRID:
        return grid_channels(width, height, channel_width, channel_depth, grid_spacing, edge_inset)
    if placement is ChannelPlacement.CONTOURS:
        if heights is None:
            raise ValueError("contour channels need a height map")
        h = np.asarray(heights, dtype=float)
        if h.size == 0:
            return []
        depth = float(h.max()) if max_depth is None else max_depth
        return contour_channels(h, width, height, channel_width, channel_depth,
                                depth * contour_threshold, contour_tolerance)
    raise ValueError(f"unsupported channel placement {placement!r}")


__all__ = [
    'EDGE_INSET',
    'GRID_SPACING',
    'channel_segment',
    'polyline_channels',
    'edge_channels',
    'grid_channels',
    'contour_channels',
    'place_channels',
]
