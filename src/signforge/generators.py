"""Top-level generation operations.

Each generator takes already-extracted input (paths or a height map) plus a
settings record and returns a list of :class:`ExportedPart`.  A generator
with nothing to build returns an empty list.
"""

import logging
from typing import List, Sequence

import numpy as np

from signforge.channels import place_channels
from signforge.config import (
    Job,
    JobKind,
    Material,
    ModularShapeSettings,
    PartType,
    ReliefSettings,
    SplitChannelSettings,
    TubeSettings,
    TubeStyle,
)
from signforge.geometry_utils import Triangle, mirror_x
from signforge.heightmap import base_plate, box_blur, grayscale_to_heightmap, relief_mesh
from signforge.io.parts import ExportedPart, make_part
from signforge.manufacturing import path_end_connectors, split_halves, wire_channel
from signforge.manufacturing.connectors import connector_tabs
from signforge.manufacturing.fittings import (
    bridge_paths,
    connect_paths,
    feed_holes,
    registration_pins,
    snap_tabs,
)
from signforge.paths import Path, center_paths, interpolate_path, simplify_by_distance
from signforge.shapes import polygon_path
from signforge.sweep import diffuser_cap, round_tube, u_channel

logger = logging.getLogger(__name__)


def _part(triangles: List[Triangle], name: str, part_type: PartType,
          material: Material) -> ExportedPart:
    filename = f"{name}_{part_type.value}.stl"
    part = make_part(triangles, filename, part_type, material)
    logger.info("%s: %d triangles, %d bytes", filename, len(triangles), part.size)
    return part


def _usable(paths: Sequence[Path]) -> List[Path]:
    usable = []
    for i, path in enumerate(paths):
        if path.is_degenerate:
            logger.warning("skipping path %d: fewer than 2 points", i)
            continue
        usable.append(path)
    return usable


def _sweep_body(path: Path, settings: TubeSettings) -> List[Triangle]:
    if settings.style is TubeStyle.ROUND:
        outer = settings.channel_width / 2.0
        return round_tube(path, outer, outer - settings.wall_thickness, settings.segments, z=outer)
    return u_channel(path, settings.channel_width, settings.wall_thickness,
                     settings.wall_height, settings.base_thickness)


def generate_neon_sign(paths: Sequence[Path], settings: TubeSettings) -> List[ExportedPart]:
    """Sweep every path into a round neon tube or a U-channel with base plate.

    Optional fittings: joined or bridged letter paths, snap tabs and
    registration pins (U-channel only) merged into the body, and feed hole
    cutters exported as a separate negative-volume part.
    """

    paths = _usable(paths)
    if not paths:
        return []
    if settings.connect_paths:
        connected = connect_paths(paths, settings.connect_distance)
        logger.info("joined %d paths into %d runs", connected.original_count, len(connected.paths))
        paths = connected.paths
    spacing = settings.channel_width * settings.resample_factor
    paths = [interpolate_path(path, spacing) for path in paths]
    u_style = settings.style is TubeStyle.U_CHANNEL

    body: List[Triangle] = []
    cap: List[Triangle] = []
    for path in paths:
        logger.debug("sweeping %s path with %d points", "closed" if path.closed else "open", len(path))
        body.extend(_sweep_body(path, settings))
        if not u_style:
            continue
        if settings.diffuser_cap:
            cap.extend(diffuser_cap(path, settings.channel_width, settings.wall_height,
                                    settings.base_thickness, settings.cap_thickness,
                                    settings.cap_tolerance))
        if settings.snap_tabs:
            body.extend(snap_tabs(path, settings.channel_width, settings.wall_thickness,
                                  settings.wall_height, settings.base_thickness,
                                  settings.snap_tab_height, settings.snap_tab_width,
                                  settings.snap_tab_spacing))
        if settings.registration_pins:
            body.extend(registration_pins(path, settings.channel_width, settings.wall_height,
                                          settings.base_thickness, settings.pin_diameter,
                                          settings.pin_height, settings.pin_spacing))
    if settings.weld_paths:
        for bridge in bridge_paths(paths, settings.channel_width * 0.5):
            body.extend(_sweep_body(interpolate_path(bridge, spacing), settings))
    holes: List[Triangle] = []
    if settings.feed_holes:
        holes = feed_holes(paths, settings.feed_hole_diameter,
                           settings.base_thickness if u_style else settings.wall_thickness)
    if settings.mirror_x:
        body, cap, holes = mirror_x(body), mirror_x(cap), mirror_x(holes)

    body_type = PartType.NEON_TUBE if settings.style is TubeStyle.ROUND else PartType.BASE_CHANNEL
    parts = [_part(body, settings.name, body_type, Material.OPAQUE)]
    if cap:
        parts.append(_part(cap, settings.name, PartType.DIFFUSER_CAP, Material.DIFFUSER))
    if holes:
        parts.append(_part(holes, settings.name, PartType.FEED_HOLES, Material.NEGATIVE))
    return parts


def generate_split_channel(paths: Sequence[Path], settings: SplitChannelSettings) -> List[ExportedPart]:
    """Top and bottom halves of a split channel, with connectors and wire groove."""

    paths = _usable(paths)
    if not paths:
        return []
    if settings.center:
        paths = center_paths(paths)
    spacing = settings.min_point_spacing
    if spacing is None:
        spacing = settings.inner_radius * 0.3

    top: List[Triangle] = []
    bottom: List[Triangle] = []
    for path in paths:
        path = simplify_by_distance(path, spacing)
        upper, lower = split_halves(
            path, settings.channel_depth, settings.wall_thickness,
            snap_tolerance=settings.snap_tolerance,
            segments=settings.segments,
            tongue_width=settings.tongue_width,
            tongue_depth=settings.tongue_depth,
        )
        top.extend(upper)
        bottom.extend(lower)
        if settings.modular_connectors and not path.closed:
            for is_top, target in ((True, top), (False, bottom)):
                target.extend(path_end_connectors(
                    path, settings.outer_radius, is_top,
                    length=settings.connector_length,
                    tolerance=settings.snap_tolerance,
                    segments=settings.segments,
                ))
        if settings.wire_channel:
            bottom.extend(wire_channel(path, settings.outer_radius, settings.wire_channel_diameter))

    return [
        _part(top, settings.name, PartType.TOP_HALF, Material.TRANSLUCENT),
        _part(bottom, settings.name, PartType.BOTTOM_HALF, Material.TRANSLUCENT),
    ]


def generate_relief(heights, settings: ReliefSettings) -> List[ExportedPart]:
    """Relief solid with LED channels and an optional flat diffuser plate."""

    h = np.asarray(heights, dtype=float)
    if h.ndim != 2 or h.shape[0] < 2 or h.shape[1] < 2:
        logger.warning("height map of shape %s is too small to mesh", h.shape)
        return []
    h = box_blur(h, settings.smoothing)
    main = relief_mesh(h, settings.width, settings.height, settings.base_thickness)
    main.extend(place_channels(
        settings.channel_placement, settings.width, settings.height,
        settings.channel_width, settings.channel_depth,
        heights=h, max_depth=settings.max_depth,
        edge_inset=settings.edge_inset,
        grid_spacing=settings.grid_spacing,
        contour_threshold=settings.contour_threshold,
        contour_tolerance=settings.contour_tolerance,
    ))
    parts = [_part(main, settings.name, PartType.RELIEF_MAIN, Material.OPAQUE)]
    if settings.include_diffuser:
        plate = base_plate(settings.width, settings.height, settings.diffuser_thickness,
                           z_top=settings.diffuser_thickness)
        parts.append(_part(plate, settings.name, PartType.RELIEF_DIFFUSER, Material.DIFFUSER))
    return parts


def generate_relief_from_grayscale(gray, settings: ReliefSettings) -> List[ExportedPart]:
    """Like :func:`generate_relief`, starting from 0..255 intensities."""

    heights = grayscale_to_heightmap(gray, settings.max_depth, settings.invert)
    return generate_relief(heights, settings)


def generate_modular_shape(settings: ModularShapeSettings) -> List[ExportedPart]:
    """Polygon U-channel tile with connector tabs and a matching diffuser cap."""

    outline = polygon_path(settings.shape, settings.edge_length)
    base = u_channel(outline, settings.channel_width, settings.wall_thickness,
                     settings.wall_height, settings.base_thickness)
    if settings.connector_tabs:
        base.extend(connector_tabs(outline, settings.channel_width, settings.tab_width,
                                   settings.tab_depth, settings.base_thickness))
    cap = diffuser_cap(outline, settings.channel_width, settings.wall_height,
                       settings.base_thickness, settings.cap_thickness, settings.cap_tolerance)
    name = f"{settings.shape.short_name}_{settings.edge_length:g}mm"
    return [
        _part(base, name, PartType.MODULAR_BASE, Material.OPAQUE),
        _part(cap, name, PartType.MODULAR_CAP, Material.DIFFUSER),
    ]


def generate_job(job: Job) -> List[ExportedPart]:
    """Run the generator that matches ``job.kind``."""

    if job.kind is JobKind.NEON_SIGN:
        return generate_neon_sign(job.paths, job.settings)
    if job.kind is JobKind.SPLIT_CHANNEL:
        return generate_split_channel(job.paths, job.settings)
    if job.kind is JobKind.RELIEF:
        if job.heightmap is None:
            logger.warning("relief job %r has no height map", job.name)
            return []
        return generate_relief(job.heightmap, job.settings)
    if job.kind is JobKind.MODULAR_SHAPE:
        return generate_modular_shape(job.settings)
    raise ValueError(f"unsupported job kind {job.kind!r}")


__all__ = [
    'generate_neon_sign',
    'generate_split_channel',
    'generate_relief',
    'generate_relief_from_grayscale',
    'generate_modular_shape',
    'generate_job',
]
