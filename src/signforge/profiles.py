"""2D cross-sections swept along paths.

Profiles are closed polygons in the ``(u, z)`` plane, where ``u`` runs
across the path (positive to the left of the direction of travel) and ``z``
points up from the print bed.  Every builder returns the polygon wound
counter-clockwise without repeating the first point.
"""

from __future__ import annotations

import math
from typing import List, Tuple

from signforge.errors import GeometryError

Profile = List[Tuple[float, float]]


def rectangle_profile(width: float, height: float, z0: float = 0.0, u0: float = 0.0) -> Profile:
    """Rectangle centred on ``u0`` spanning ``z0 .. z0 + height``."""

    hw = width / 2.0
    return [
        (u0 - hw, z0),
        (u0 + hw, z0),
        (u0 + hw, z0 + height),
        (u0 - hw, z0 + height),
    ]


def u_channel_profile(channel_width: float, wall_thickness: float, wall_height: float,
                      base_thickness: float, u0: float = 0.0) -> Profile:
    """Open-top U: a base plate with two side walls.

    ``channel_width`` is the outside width.  The walls rise ``wall_height``
    above the top of the base plate.
    """

    hw = channel_width / 2.0
    inner = hw - wall_thickness
    if inner <= 0:
        raise GeometryError(
            f"wall_thickness {wall_thickness} leaves no channel in width {channel_width}"
        )
    top = base_thickness + wall_height
    return [
        (u0 - hw, 0.0),
        (u0 + hw, 0.0),
        (u0 + hw, top),
        (u0 + inner, top),
        (u0 + inner, base_thickness),
        (u0 - inner, base_thickness),
        (u0 - inner, top),
        (u0 - hw, top),
    ]


def _arc(radius: float, start: float, stop: float, segments: int, zc: float) -> Profile:
    step = (stop - start) / segments
    return [
        (radius * math.cos(start + k * step), zc + radius * math.sin(start + k * step))
        for k in range(segments + 1)
    ]


def _seam_feature(mid: float, width: float, depth: float, zc: float, sign: float,
                  outward: bool) -> Profile:
    """Four seam points of a rectangular tongue or groove hanging below ``zc``.

    ``sign`` selects the right (+1) or left (-1) seam; ``outward`` orders the
    points from the inner wall towards the outer wall.
    """

    near = sign * (mid - width / 2.0)
    far = sign * (mid + width / 2.0)
    pts = [(near, zc), (near, zc - depth), (far, zc - depth), (far, zc)]
    return pts if outward else pts[::-1]


def split_half_profile(inner_radius: float, outer_radius: float, top: bool,
                       segments: int = 8, tongue_width: float = 0.6,
                       tongue_depth: float = 1.0, snap_tolerance: float = 0.2,
                       center_z: float | None = None) -> Profile:
    """Half annulus with a tongue (``top``) or groove (bottom) on both seams.

    The tube axis sits at ``center_z`` (the outer radius by default, so the
    bottom half rests on ``z = 0``).  The seam plane is ``z = center_z``.
    The top half carries a ``tongue_width`` x ``tongue_depth`` tongue below
    the seam at the wall midpoint; the bottom half has a groove that is
    ``snap_tolerance`` wider and equally deep.
    """

    check_split_dimensions(inner_radius, outer_radius, tongue_width, tongue_depth,
                           snap_tolerance)
    zc = outer_radius if center_z is None else center_z
    mid = (inner_radius + outer_radius) / 2.0

    if top:
        # outer arc 0..pi, left seam inwards, inner arc pi..0, right seam outwards
        pts = _arc(outer_radius, 0.0, math.pi, segments, zc)
        pts += _seam_feature(mid, tongue_width, tongue_depth, zc, -1.0, outward=False)
        pts += _arc(inner_radius, math.pi, 0.0, segments, zc)
        pts += _seam_feature(mid, tongue_width, tongue_depth, zc, 1.0, outward=True)
    else:
        groove = tongue_width + snap_tolerance
        pts = _arc(outer_radius, math.pi, 2.0 * math.pi, segments, zc)
        pts += _seam_feature(mid, groove, tongue_depth, zc, 1.0, outward=False)
        pts += _arc(inner_radius, 2.0 * math.pi, math.pi, segments, zc)
        pts += _seam_feature(mid, groove, tongue_depth, zc, -1.0, outward=True)
    return pts


def check_split_dimensions(inner_radius: float, outer_radius: float, tongue_width: float,
                           tongue_depth: float, snap_tolerance: float) -> None:
    """Raise :class:`GeometryError` for seams that cannot be built."""

    if inner_radius <= 0 or outer_radius <= inner_radius:
        raise GeometryError(
            f"invalid radii: inner {inner_radius}, outer {outer_radius}"
        )
    if tongue_width <= 0 or tongue_depth <= 0:
        raise GeometryError("tongue width and depth must be positive")
    if snap_tolerance < 0:
        raise GeometryError("snap tolerance must not be negative")
    wall = outer_radius - inner_radius
    groove = tongue_width + snap_tolerance
    if groove >= wall:
        raise GeometryError(
            f"groove width {groove:.3f} does not fit in wall thickness {wall:.3f}"
        )
    mid = (inner_radius + outer_radius) / 2.0
    edge = mid + groove / 2.0
    floor = math.sqrt(outer_radius ** 2 - edge ** 2)
    if tongue_depth >= floor:
        raise GeometryError(
            f"tongue depth {tongue_depth:.3f} breaks through the outer wall ({floor:.3f} available)"
        )


def half_disc_profile(radius: float, top: bool, segments: int = 8,
                      center_z: float = 0.0) -> Profile:
    """Solid half disc split along ``z = center_z``."""

    if radius <= 0:
        raise GeometryError(f"radius must be positive, got {radius}")
    if top:
        return _arc(radius, 0.0, math.pi, segments, center_z)
    return _arc(radius, math.pi, 2.0 * math.pi, segments, center_z)


def half_annulus_profile(inner_radius: float, outer_radius: float, top: bool,
                         segments: int = 8, center_z: float = 0.0) -> Profile:
    """Half annulus with flat seam strips and no seam features."""

    if inner_radius <= 0 or outer_radius <= inner_radius:
        raise GeometryError(
            f"invalid radii: inner {inner_radius}, outer {outer_radius}"
        )
    if top:
        start, stop = 0.0, math.pi
    else:
        start, stop = math.pi, 2.0 * math.pi
    return (_arc(outer_radius, start, stop, segments, center_z)
            + _arc(inner_radius, stop, start, segments, center_z))


__all__ = [
    'Profile',
    'rectangle_profile',
    'u_channel_profile',
    'split_half_profile',
    'check_split_dimensions',
    'half_disc_profile',
    'half_annulus_profile',
]
