"""End connectors, wire channels and tile tabs.

Split channels are printed in pieces and chained end to end: every open
path gets a male stub at its start and a female socket at its end, each
split into top and bottom halves that continue the channel's seam plane.
"""

import logging
import math
from typing import List, Sequence

from signforge.errors import GeometryError
from signforge.geometry_utils import Triangle, normalize, quad_prism
from signforge.manufacturing.data import ConnectorSpec
from signforge.paths import Path
from signforge.profiles import half_annulus_profile, half_disc_profile, u_channel_profile
from signforge.sweep import path_tangents, sweep_profile

logger = logging.getLogger(__name__)

DEFAULT_CONNECTOR_LENGTH = 5.0
DEFAULT_SOCKET_WALL = 1.0
WIRE_CHANNEL_WALL = 1.0


def split_connector(
    center: Sequence[float],
    tangent: Sequence[float],
    outer_radius: float,
    length: float,
    male: bool,
    tolerance: float,
    top: bool,
    segments: int = 8,
    wall_thickness: float = DEFAULT_SOCKET_WALL,
) -> List[Triangle]:
    """Half-arc connector stub starting at ``center`` and running along ``tangent``.

    ``center`` is the tube axis point ``(x, y, z)`` at the path end and
    ``tangent`` the outward direction.  A male stub is a solid half
    cylinder of radius ``outer_radius - tolerance``.  A female socket is a
    half sleeve whose cavity has radius ``outer_radius + tolerance``; only
    its annular lip is closed, so the cavity stays open.

    Raises:
        GeometryError: If the resulting radius is not positive
    """
    if length <= 0:
        return []
    direction = normalize((float(tangent[0]), float(tangent[1]), 0.0), (0.0, 0.0, 0.0))
    if direction == (0.0, 0.0, 0.0):
        return []
    x, y = float(center[0]), float(center[1])
    zc = float(center[2]) if len(center) > 2 else outer_radius
    if male:
        profile = half_disc_profile(outer_radius - tolerance, top, segments, center_z=zc)
    else:
        cavity = outer_radius + tolerance
        profile = half_annulus_profile(cavity, cavity + wall_thickness, top, segments, center_z=zc)
    stub = Path(((x, y), (x + direction[0] * length, y + direction[1] * length)), False)
    return sweep_profile(stub, profile)


def connector_specs(path: Path, outer_radius: float, length: float = DEFAULT_CONNECTOR_LENGTH,
                    tolerance: float = 0.2) -> List[ConnectorSpec]:
    """Male stub at the start and female socket at the end of an open path."""

    if path.closed or path.is_degenerate:
        return []
    tangents = path_tangents(path.points, closed=False)
    start, end = path.points[0], path.points[-1]
    t0, t1 = tangents[0], tangents[-1]
    return [
        ConnectorSpec("male", (start[0], start[1], outer_radius), (-t0[0], -t0[1], -t0[2]),
                      outer_radius, length, tolerance),
        ConnectorSpec("female", (end[0], end[1], outer_radius), t1,
                      outer_radius, length, tolerance),
    ]


def path_end_connectors(path: Path, outer_radius: float, top: bool,
                        length: float = DEFAULT_CONNECTOR_LENGTH, tolerance: float = 0.2,
                        segments: int = 8,
                        wall_thickness: float = DEFAULT_SOCKET_WALL) -> List[Triangle]:
    """Connector halves for both ends of an open path; closed paths get none."""

    tris: List[Triangle] = []
    for spec in connector_specs(path, outer_radius, length, tolerance):
        tris.extend(split_connector(spec.position, spec.direction, spec.radius, spec.length,
                                    spec.is_male, spec.tolerance, top, segments, wall_thickness))
    return tris


def wire_channel(path: Path, outer_radius: float, wire_diameter: float,
                 wall_thickness: float = WIRE_CHANNEL_WALL) -> List[Triangle]:
    """Open U-groove running beside the channel on its right-hand side.

    The groove is ``wire_diameter`` wide and deep and stands on the bed,
    touching the channel's outer wall.
    """
    if wire_diameter <= 0:
        raise GeometryError(f"wire_diameter must be positive, got {wire_diameter}")
    width = wire_diameter + 2.0 * wall_thickness
    offset = -(outer_radius + width / 2.0)
    profile = u_channel_profile(width, wall_thickness, wire_diameter, wall_thickness, u0=offset)
    return sweep_profile(path, profile)


def connector_tabs(polygon: Path, channel_width: float, tab_width: float, tab_depth: float,
                   thickness: float) -> List[Triangle]:
    """Flat tabs sticking out from the middle of every polygon edge.

    Each tab is a box ``tab_width`` along the edge and ``tab_depth`` beyond
    the channel's outer wall, ``thickness`` high from the bed.
    """
    pts = list(polygon.points)
    if len(pts) < 3:
        return []
    # outward side of each edge depends on the polygon winding
    area = sum(pts[i][0] * pts[(i + 1) % len(pts)][1] - pts[(i + 1) % len(pts)][0] * pts[i][1]
               for i in range(len(pts)))
    orientation = 1.0 if area >= 0 else -1.0
    tris: List[Triangle] = []
    for a, b in polygon.segments():
        dx, dy = b[0] - a[0], b[1] - a[1]
        edge = math.hypot(dx, dy)
        if edge < 1e-9:
            continue
        ux, uy = dx / edge, dy / edge
        nx, ny = uy * orientation, -ux * orientation
        mx, my = (a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0
        near = channel_width / 2.0
        far = near + tab_depth
        hw = tab_width / 2.0
        corners = [
            (mx - ux * hw + nx * near, my - uy * hw + ny * near),
            (mx + ux * hw + nx * near, my + uy * hw + ny * near),
            (mx + ux * hw + nx * far, my + uy * hw + ny * far),
            (mx - ux * hw + nx * far, my - uy * hw + ny * far),
        ]
        tris.extend(quad_prism(corners, 0.0, thickness))
    logger.debug("connector tabs: %d edges, %d triangles", len(pts), len(tris))
    return tris


__all__ = [
    'DEFAULT_CONNECTOR_LENGTH',
    'DEFAULT_SOCKET_WALL',
    'split_connector',
    'connector_specs',
    'path_end_connectors',
    'wire_channel',
    'connector_tabs',
]
