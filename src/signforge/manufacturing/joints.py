"""Split-half channels joined by a tongue-and-groove seam.

A channel is cut along its horizontal mid plane into a top half carrying a
tongue on each seam and a bottom half with matching grooves.  Both halves
share the same outer radius so the assembled tube is flush.
"""

import logging
from typing import List, Tuple

from signforge.geometry_utils import Triangle
from signforge.manufacturing.data import JointProfile
from signforge.paths import Path
from signforge.profiles import check_split_dimensions, split_half_profile
from signforge.sweep import sweep_profile

logger = logging.getLogger(__name__)

DEFAULT_TONGUE_WIDTH = 0.6
DEFAULT_TONGUE_DEPTH = 1.0
DEFAULT_SNAP_TOLERANCE = 0.2


def joint_profile(
    channel_depth: float,
    wall_thickness: float,
    snap_tolerance: float = DEFAULT_SNAP_TOLERANCE,
    tongue_width: float = DEFAULT_TONGUE_WIDTH,
    tongue_depth: float = DEFAULT_TONGUE_DEPTH,
) -> JointProfile:
    """Compute the seam dimensions for a split channel.

    Args:
        channel_depth: Inner bore diameter
        wall_thickness: Wall thickness around the bore
        snap_tolerance: Extra groove width over the tongue
        tongue_width: Width of the tongue
        tongue_depth: Height of the tongue below the seam plane

    Returns:
        JointProfile with tongue and groove dimensions

    Raises:
        GeometryError: If the groove does not fit inside the wall
    """
    inner = channel_depth / 2.0
    outer = inner + wall_thickness
    check_split_dimensions(inner, outer, tongue_width, tongue_depth, snap_tolerance)
    return JointProfile(
        tongue_width=tongue_width,
        tongue_depth=tongue_depth,
        groove_width=tongue_width + snap_tolerance,
        groove_depth=tongue_depth,
        seam_radius=(inner + outer) / 2.0,
    )


def split_half(
    path: Path,
    channel_depth: float,
    wall_thickness: float,
    top: bool,
    snap_tolerance: float = DEFAULT_SNAP_TOLERANCE,
    segments: int = 8,
    tongue_width: float = DEFAULT_TONGUE_WIDTH,
    tongue_depth: float = DEFAULT_TONGUE_DEPTH,
) -> List[Triangle]:
    """Sweep one half of a split channel along ``path``.

    The tube axis sits at ``z = outer radius`` so the bottom half rests on
    the bed.  Open paths are capped, seam lips included; closed paths wrap.
    """
    if path.is_degenerate:
        return []
    inner = channel_depth / 2.0
    outer = inner + wall_thickness
    profile = split_half_profile(
        inner, outer, top,
        segments=segments,
        tongue_width=tongue_width,
        tongue_depth=tongue_depth,
        snap_tolerance=snap_tolerance,
    )
    tris = sweep_profile(path, profile)
    logger.debug("%s half: %d points, %d triangles",
                 "top" if top else "bottom", len(path), len(tris))
    return tris


def split_halves(path: Path, channel_depth: float, wall_thickness: float,
                 **kwargs) -> Tuple[List[Triangle], List[Triangle]]:
    """Return ``(top, bottom)`` halves sharing the same seam settings."""
    top = split_half(path, channel_depth, wall_thickness, True, **kwargs)
    bottom = split_half(path, channel_depth, wall_thickness, False, **kwargs)
    return top, bottom


__all__ = [
    'DEFAULT_TONGUE_WIDTH',
    'DEFAULT_TONGUE_DEPTH',
    'DEFAULT_SNAP_TOLERANCE',
    'joint_profile',
    'split_half',
    'split_halves',
]
