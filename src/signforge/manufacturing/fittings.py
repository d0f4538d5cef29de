"""Assembly fittings for neon-style channels.

Snap tabs and registration pins hold a diffuser cap on a U-channel, feed
holes let the LED strip's wires through the base plate, and bridges or
bezier connections join separate letter paths into one printable run.
"""

import logging
import math
from typing import List, Sequence, Tuple

from signforge.geometry_utils import Triangle, Vec2, quad_prism
from signforge.manufacturing.data import ConnectionResult
from signforge.paths import Path, path_length
from signforge.raster.contours import douglas_peucker

logger = logging.getLogger(__name__)

FEED_HOLE_OVERSHOOT = 0.5
PIN_WALL_GAP = 1.0


def cylinder(center: Sequence[float], radius: float, z_bottom: float, z_top: float,
             segments: int = 12) -> List[Triangle]:
    """Closed vertical cylinder with capped ends, faces pointing outward."""

    if radius <= 0 or z_top <= z_bottom or segments < 3:
        return []
    cx, cy = float(center[0]), float(center[1])
    ring = [(cx + radius * math.cos(2.0 * math.pi * j / segments),
             cy + radius * math.sin(2.0 * math.pi * j / segments)) for j in range(segments)]
    bottom_center = (cx, cy, z_bottom)
    top_center = (cx, cy, z_top)
    tris: List[Triangle] = []
    for j in range(segments):
        k = (j + 1) % segments
        b0, b1 = (*ring[j], z_bottom), (*ring[k], z_bottom)
        t0, t1 = (*ring[j], z_top), (*ring[k], z_top)
        tris.append(Triangle.from_vertices(b0, b1, t1))
        tris.append(Triangle.from_vertices(b0, t1, t0))
        tris.append(Triangle.from_vertices(top_center, t0, t1))
        tris.append(Triangle.from_vertices(bottom_center, b1, b0))
    return tris


def sample_along(path: Path, distances: Sequence[float]) -> List[Tuple[Vec2, Vec2]]:
    """Point and unit tangent of ``path`` at each arc-length distance.

    Distances are clamped to the path; zero-length segments are skipped.
    """

    segments = [(a, b, math.hypot(b[0] - a[0], b[1] - a[1])) for a, b in path.segments()]
    segments = [s for s in segments if s[2] > 1e-12]
    if not segments:
        return []
    samples = []
    for target in distances:
        travelled = 0.0
        for i, (a, b, seg_len) in enumerate(segments):
            if travelled + seg_len >= target or i == len(segments) - 1:
                t = min(1.0, max(0.0, (target - travelled) / seg_len))
                ux, uy = (b[0] - a[0]) / seg_len, (b[1] - a[1]) / seg_len
                samples.append(((a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t), (ux, uy)))
                break
            travelled += seg_len
    return samples


def snap_tabs(path: Path, channel_width: float, wall_thickness: float, wall_height: float,
              base_thickness: float, tab_height: float = 2.0, tab_width: float = 4.0,
              tab_spacing: float = 25.0, tab_depth: float = 1.5) -> List[Triangle]:
    """Tabs protruding inward from both inner wall faces, flush with the wall top.

    ``max(2, floor(L / tab_spacing))`` tab pairs are spread evenly over the
    path, none at the ends.
    """

    total = path_length(path)
    if total <= 0:
        return []
    count = max(2, int(total // tab_spacing))
    spacing = total / (count + 1)
    z_top = base_thickness + wall_height
    z_bottom = z_top - min(tab_height, wall_height)
    inner = channel_width / 2.0 - wall_thickness
    hw = tab_width / 2.0
    tris: List[Triangle] = []
    for (px, py), (tx, ty) in sample_along(path, [(k + 1) * spacing for k in range(count)]):
        nx, ny = -ty, tx
        for side in (-1.0, 1.0):
            wall = side * inner
            tip = wall - side * tab_depth
            corners = [
                (px - tx * hw + nx * wall, py - ty * hw + ny * wall),
                (px + tx * hw + nx * wall, py + ty * hw + ny * wall),
                (px + tx * hw + nx * tip, py + ty * hw + ny * tip),
                (px - tx * hw + nx * tip, py - ty * hw + ny * tip),
            ]
            tris.extend(quad_prism(corners, z_bottom, z_top))
    logger.debug("snap tabs: %d pairs over %.1f mm", count, total)
    return tris


def pin_positions(path: Path, spacing: float = 30.0) -> List[Tuple[Vec2, Vec2]]:
    """Evenly spaced pin stations from the start to the end of ``path``.

    Returns ``(point, tangent)`` pairs; at least the two ends are included.
    """

    total = path_length(path)
    if total <= 0:
        return []
    count = max(2, int(total // spacing) + 1)
    step = total / (count - 1)
    return sample_along(path, [k * step for k in range(count)])


def registration_pins(path: Path, channel_width: float, wall_height: float,
                      base_thickness: float, pin_diameter: float = 2.5, pin_height: float = 3.0,
                      pin_spacing: float = 30.0, segments: int = 12) -> List[Triangle]:
    """Alignment pins standing beside the right-hand wall.

    Each pin is a cylinder centred ``pin_diameter / 2 + 1`` outside the
    wall.  It rises from the bed to ``pin_height`` above the wall top so
    that it prints supported.
    """

    radius = pin_diameter / 2.0
    offset = -(channel_width / 2.0 + radius + PIN_WALL_GAP)
    z_top = base_thickness + wall_height + pin_height
    tris: List[Triangle] = []
    stations = pin_positions(path, pin_spacing)
    for (px, py), (tx, ty) in stations:
        center = (px - ty * offset, py + tx * offset)
        tris.extend(cylinder(center, radius, 0.0, z_top, segments))
    logger.debug("registration pins: %d", len(stations))
    return tris


def feed_hole(center: Sequence[float], diameter: float, base_thickness: float,
              segments: int = 16) -> List[Triangle]:
    """Cutter cylinder punching through the base plate at ``center``."""

    return cylinder(center, diameter / 2.0, -FEED_HOLE_OVERSHOOT,
                    base_thickness + FEED_HOLE_OVERSHOOT, segments)


def feed_holes(paths: Sequence[Path], diameter: float, base_thickness: float,
               segments: int = 16) -> List[Triangle]:
    """Feed holes at the start of the first path and the end of the last."""

    if not paths:
        return []
    first, last = paths[0].points[0], paths[-1].points[-1]
    return (feed_hole(first, diameter, base_thickness, segments)
            + feed_hole(last, diameter, base_thickness, segments))


def bridge_paths(paths: Sequence[Path], min_length: float) -> List[Path]:
    """Straight two-point paths from each path's end to the next path's start.

    Gaps shorter than ``min_length`` are left alone.
    """

    bridges = []
    for current, following in zip(paths, paths[1:]):
        a, b = current.points[-1], following.points[0]
        if math.hypot(b[0] - a[0], b[1] - a[1]) < min_length:
            continue
        bridges.append(Path((a, b), False))
    return bridges


def bezier_connection(a: Vec2, b: Vec2, segments: int = 10) -> List[Vec2]:
    """Cubic bezier from ``a`` to ``b`` with an S-bend across the chord."""

    dx, dy = b[0] - a[0], b[1] - a[1]
    px, py = -dy * 0.2, dx * 0.2
    c1 = (a[0] + dx * 0.33 + px, a[1] + dy * 0.33 + py)
    c2 = (a[0] + dx * 0.67 - px, a[1] + dy * 0.67 - py)
    points = []
    for i in range(segments + 1):
        t = i / segments
        mt = 1.0 - t
        w = (mt ** 3, 3 * mt * mt * t, 3 * mt * t * t, t ** 3)
        points.append((w[0] * a[0] + w[1] * c1[0] + w[2] * c2[0] + w[3] * b[0],
                       w[0] * a[1] + w[1] * c1[1] + w[2] * c2[1] + w[3] * b[1]))
    return points


def connect_paths(paths: Sequence[Path], max_distance: float = 50.0, tolerance: float = 0.5,
                  segments: int = 10) -> ConnectionResult:
    """Join consecutive open paths whose end-to-start gap is at most ``max_distance``.

    Joined paths are linked by a simplified :func:`bezier_connection`.
    Closed paths are never joined and end the current run.
    """

    connections = 0
    result: List[Path] = []
    current: List[Vec2] = []
    for path in paths:
        if path.closed:
            if current:
                result.append(Path(tuple(current), False))
                current = []
            result.append(path)
            continue
        pts = list(path.points)
        if current:
            a, b = current[-1], pts[0]
            if math.hypot(b[0] - a[0], b[1] - a[1]) <= max_distance:
                bridge = douglas_peucker(bezier_connection(a, b, segments), tolerance)
                current.extend(bridge[1:-1])
                current.extend(pts[1:] if pts[0] == current[-1] else pts)
                connections += 1
                continue
            result.append(Path(tuple(current), False))
        current = pts
    if current:
        result.append(Path(tuple(current), False))
    total = sum(path_length(p) for p in result)
    logger.debug("connected %d paths into %d with %d links", len(paths), len(result), connections)
    return ConnectionResult(result, connections, total, len(paths))


__all__ = [
    'cylinder',
    'sample_along',
    'snap_tabs',
    'pin_positions',
    'registration_pins',
    'feed_hole',
    'feed_holes',
    'bridge_paths',
    'bezier_connection',
    'connect_paths',
]
