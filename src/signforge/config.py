"""Settings records and job descriptions.

String identifiers coming from the outside world (shape names, materials,
channel placement, tube style) are resolved into enums here, once, so the
generators only ever see closed sets of values.

Settings are plain dataclasses with defaults.  ``from_mapping`` builds one
from a flat mapping (a parsed request body or a YAML document), rejecting
unknown keys and coercing values to the declared field types.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path as FsPath
from typing import Any, Dict, List, Mapping, Optional, Union, get_args, get_origin, get_type_hints

import numpy as np
import yaml

from signforge.errors import SettingsError, UnknownShapeError
from signforge.paths import Path

logger = logging.getLogger(__name__)


class Material(Enum):
    OPAQUE = "opaque"
    TRANSLUCENT = "translucent"
    DIFFUSER = "diffuser"
    NEGATIVE = "negative"  # slicer negative volume, subtracted from the part it overlaps


class PartType(Enum):
    TOP_HALF = "top_half"
    BOTTOM_HALF = "bottom_half"
    NEON_TUBE = "neon_tube"
    BASE_CHANNEL = "base_channel"
    DIFFUSER_CAP = "diffuser_cap"
    FEED_HOLES = "feed_holes"
    RELIEF_MAIN = "relief_main"
    RELIEF_DIFFUSER = "relief_diffuser"
    MODULAR_BASE = "modular_base"
    MODULAR_CAP = "modular_cap"


class TubeStyle(Enum):
    ROUND = "round"        # hollow round tube
    U_CHANNEL = "u_channel"  # rectangular duct on a base plate


class ShapeKind(Enum):
    TRIANGLE = "triangle"
    SQUARE = "square"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"

    @property
    def sides(self) -> int:
        return _SHAPE_SIDES[self]

    @property
    def short_name(self) -> str:
        return _SHAPE_SHORT_NAMES[self]


_SHAPE_SIDES = {
    ShapeKind.TRIANGLE: 3,
    ShapeKind.SQUARE: 4,
    ShapeKind.PENTAGON: 5,
    ShapeKind.HEXAGON: 6,
    ShapeKind.OCTAGON: 8,
}

_SHAPE_SHORT_NAMES = {
    ShapeKind.TRIANGLE: "tri",
    ShapeKind.SQUARE: "square",
    ShapeKind.PENTAGON: "pent",
    ShapeKind.HEXAGON: "hex",
    ShapeKind.OCTAGON: "oct",
}


class ChannelPlacement(Enum):
    NONE = "none"
    EDGES = "edges"
    GRID = "grid"
    CONTOURS = "contours"


class JobKind(Enum):
    NEON_SIGN = "neon_sign"
    SPLIT_CHANNEL = "split_channel"
    RELIEF = "relief"
    MODULAR_SHAPE = "modular_shape"


def parse_enum(enum_cls, value):
    """Resolve ``value`` (an enum member or its string value) into ``enum_cls``."""

    if isinstance(value, enum_cls):
        return value
    key = str(value).strip().lower().replace('-', '_')
    for member in enum_cls:
        if member.value == key:
            return member
    known = [m.value for m in enum_cls]
    if enum_cls is ShapeKind:
        raise UnknownShapeError(str(value), known)
    raise SettingsError(
        f"Unknown {enum_cls.__name__} identifier {value!r} (expected one of: {', '.join(known)})"
    )


def _coerce(name: str, expected, value):
    if get_origin(expected) is Union:
        if value is None:
            return None
        inner = [a for a in get_args(expected) if a is not type(None)]
        expected = inner[0] if len(inner) == 1 else Any
    if isinstance(expected, type) and issubclass(expected, Enum):
        return parse_enum(expected, value)
    if expected is bool:
        if isinstance(value, bool):
            return value
        raise SettingsError(f"Setting {name!r} must be true or false, got {value!r}")
    if expected in (int, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SettingsError(f"Setting {name!r} must be a number, got {value!r}")
        if expected is int:
            if float(value) != int(value):
                raise SettingsError(f"Setting {name!r} must be an integer, got {value!r}")
            return int(value)
        return float(value)
    if expected is str:
        return str(value)
    return value


class _SettingsMixin:

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]] = None):
        """Build settings from a flat mapping, filling in defaults."""

        data = dict(data or {})
        hints = get_type_hints(cls)
        names = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - names)
        if unknown:
            raise SettingsError(
                f"Unknown {cls.__name__} keys: {', '.join(unknown)}"
            )
        kwargs = {k: _coerce(k, hints[k], v) for k, v in data.items()}
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out

    def _require_positive(self, *names: str) -> None:
        for name in names:
            if getattr(self, name) <= 0:
                raise SettingsError(f"{type(self).__name__}.{name} must be positive")


@dataclass
class TubeSettings(_SettingsMixin):
    """Settings for swept neon-style signs.

    Attributes:
        style: ``round`` hollow tube or ``u_channel`` duct on a base plate
        channel_width: Outer diameter (round) or outer width (U-channel), mm
        wall_thickness: Wall thickness, mm
        wall_height: U-channel wall height above the base plate, mm
        base_thickness: U-channel base plate thickness, mm
        cap_thickness: Diffuser cap thickness, mm
        cap_tolerance: Extra half-width of the diffuser cap, mm
        segments: Ring resolution of round tubes
        resample_factor: Max point spacing as a fraction of channel_width
        diffuser_cap: Also emit a diffuser cap part
        mirror_x: Mirror all parts across the YZ plane
        connect_paths: Join consecutive paths into continuous runs
        connect_distance: Largest end-to-start gap joined by connect_paths, mm
        weld_paths: Bridge every path end to the next path start
        feed_holes: Emit feed hole cutters at the first and last path ends
        feed_hole_diameter: Feed hole diameter, mm
        snap_tabs: Add snap tabs inside the U-channel walls
        snap_tab_height / snap_tab_width: Snap tab size, mm
        snap_tab_spacing: Target distance between snap tabs, mm
        registration_pins: Add alignment pins beside the channel
        pin_diameter / pin_height: Pin size, mm
        pin_spacing: Target distance between pins, mm
        name: Slug used in file names
    """
    style: TubeStyle = TubeStyle.U_CHANNEL
    channel_width: float = 12.0
    wall_thickness: float = 2.0
    wall_height: float = 15.0
    base_thickness: float = 3.0
    cap_thickness: float = 2.0
    cap_tolerance: float = 0.2
    segments: int = 16
    resample_factor: float = 0.25
    diffuser_cap: bool = False
    mirror_x: bool = False
    connect_paths: bool = False
    connect_distance: float = 50.0
    weld_paths: bool = False
    feed_holes: bool = False
    feed_hole_diameter: float = 5.0
    snap_tabs: bool = False
    snap_tab_height: float = 2.0
    snap_tab_width: float = 4.0
    snap_tab_spacing: float = 25.0
    registration_pins: bool = False
    pin_diameter: float = 2.5
    pin_height: float = 3.0
    pin_spacing: float = 30.0
    name: str = "neon_sign"

    def __post_init__(self):
        self._require_positive("channel_width", "wall_thickness", "segments")
        self._require_positive("feed_hole_diameter", "snap_tab_spacing", "pin_spacing")
        if self.style is TubeStyle.ROUND and self.channel_width <= 2 * self.wall_thickness:
            raise SettingsError("wall_thickness leaves no bore in a round tube")


@dataclass
class SplitChannelSettings(_SettingsMixin):
    """Settings for split-half channels with tongue-and-groove seams.

    Attributes:
        channel_depth: Inner bore diameter, mm
        wall_thickness: Wall thickness around the bore, mm
        snap_tolerance: Extra groove width over the tongue, mm
        tongue_width: Tongue width, mm
        tongue_depth: Tongue height below the seam plane, mm
        segments: Arc segments per half
        modular_connectors: Add male/female end stubs on open paths
        connector_length: Connector stub length, mm
        wire_channel: Add a wire groove beside the bottom half
        wire_channel_diameter: Wire groove width, mm
        min_point_spacing: Decimation distance; defaults to 0.15 * channel_depth
        center: Centre all paths around the origin
        name: Slug used in file names
    """
    channel_depth: float = 8.0
    wall_thickness: float = 1.5
    snap_tolerance: float = 0.2
    tongue_width: float = 0.6
    tongue_depth: float = 1.0
    segments: int = 8
    modular_connectors: bool = True
    connector_length: float = 5.0
    wire_channel: bool = True
    wire_channel_diameter: float = 3.0
    min_point_spacing: Optional[float] = None
    center: bool = True
    name: str = "channel"

    def __post_init__(self):
        self._require_positive("channel_depth", "wall_thickness", "segments")
        if self.snap_tolerance < 0:
            raise SettingsError("snap_tolerance must not be negative")

    @property
    def inner_radius(self) -> float:
        return self.channel_depth / 2.0

    @property
    def outer_radius(self) -> float:
        return self.inner_radius + self.wall_thickness


@dataclass
class ReliefSettings(_SettingsMixin):
    """Settings for height-map reliefs.

    Attributes:
        max_depth: Elevation of a full-white pixel, mm
        smoothing: Box-blur passes
        width / height: Physical size of the relief, mm
        base_thickness: Base plate thickness under z = 0, mm
        invert: Dark pixels become high
        channel_placement: Where additive LED channels are laid out
        channel_width / channel_depth: Channel cross-section, mm
        edge_inset: Inset of edge channels from the border, mm
        grid_spacing: Grid channel pitch, mm
        contour_threshold: Contour threshold as a fraction of max_depth
        contour_tolerance: Douglas-Peucker tolerance, pixels
        include_diffuser: Also emit a flat diffuser plate
        diffuser_thickness: Diffuser plate thickness, mm
        name: Slug used in file names
    """
    max_depth: float = 10.0
    smoothing: int = 2
    width: float = 200.0
    height: float = 200.0
    base_thickness: float = 3.0
    invert: bool = False
    channel_placement: ChannelPlacement = ChannelPlacement.EDGES
    channel_width: float = 8.0
    channel_depth: float = 5.0
    edge_inset: float = 5.0
    grid_spacing: float = 20.0
    contour_threshold: float = 0.3
    contour_tolerance: float = 2.0
    include_diffuser: bool = True
    diffuser_thickness: float = 2.0
    name: str = "relief"

    def __post_init__(self):
        self._require_positive("max_depth", "width", "height", "base_thickness")
        if self.smoothing < 0:
            raise SettingsError("smoothing must not be negative")


@dataclass
class ModularShapeSettings(_SettingsMixin):
    """Settings for modular polygon light tiles."""
    shape: ShapeKind = ShapeKind.HEXAGON
    edge_length: float = 80.0
    channel_width: float = 12.0
    wall_thickness: float = 2.0
    wall_height: float = 15.0
    base_thickness: float = 3.0
    cap_thickness: float = 2.0
    cap_tolerance: float = 0.2
    connector_tabs: bool = True
    tab_width: float = 10.0
    tab_depth: float = 4.0

    def __post_init__(self):
        self.shape = parse_enum(ShapeKind, self.shape)
        self._require_positive("edge_length", "channel_width", "wall_height")


_SETTINGS_FOR_KIND = {
    JobKind.NEON_SIGN: TubeSettings,
    JobKind.SPLIT_CHANNEL: SplitChannelSettings,
    JobKind.RELIEF: ReliefSettings,
    JobKind.MODULAR_SHAPE: ModularShapeSettings,
}


def settings_for(kind: JobKind, data: Optional[Mapping[str, Any]] = None):
    """Build the settings record that goes with ``kind``."""

    return _SETTINGS_FOR_KIND[kind].from_mapping(data)


@dataclass
class Job:
    """One generation request from a job file."""
    kind: JobKind
    name: str
    settings: Any
    paths: List[Any] = field(default_factory=list)
    heightmap: Optional[np.ndarray] = None


def _parse_paths(raw) -> list:
    paths = []
    for i, entry in enumerate(raw or []):
        if isinstance(entry, Mapping):
            points = entry.get('points')
            closed = entry.get('closed')
        else:
            points, closed = entry, None
        if not isinstance(points, (list, tuple)):
            raise SettingsError(f"Path {i} has no point list")
        try:
            coords = [(float(p[0]), float(p[1])) for p in points]
        except (TypeError, ValueError, IndexError) as exc:
            raise SettingsError(f"Path {i} has malformed points") from exc
        paths.append(Path.from_points(coords, closed=closed))
    return paths


def _parse_heightmap(entry: Mapping[str, Any], base_dir: FsPath) -> Optional[np.ndarray]:
    if 'heightmap' in entry:
        arr = np.asarray(entry['heightmap'], dtype=float)
    elif 'heightmap_file' in entry:
        source = base_dir / entry['heightmap_file']
        try:
            arr = np.load(source)
        except (OSError, ValueError) as exc:
            raise SettingsError(f"Cannot read height map {source}: {exc}") from exc
    else:
        return None
    if arr.ndim != 2:
        raise SettingsError(f"Height map must be two-dimensional, got shape {arr.shape}")
    return np.asarray(arr, dtype=float)


def parse_job(entry: Mapping[str, Any], base_dir=".", index: int = 0) -> Job:
    """Turn one job mapping into a :class:`Job`."""

    if not isinstance(entry, Mapping):
        raise SettingsError(f"Job {index} must be a mapping")
    if 'kind' not in entry:
        raise SettingsError(f"Job {index} has no 'kind'")
    kind = parse_enum(JobKind, entry['kind'])
    name = str(entry.get('name', f"{kind.value}_{index}"))
    raw_settings = entry.get('settings') or {}
    if not isinstance(raw_settings, Mapping):
        raise SettingsError(f"Job {name!r}: settings must be a mapping")
    raw_settings = dict(raw_settings)
    settings_cls = _SETTINGS_FOR_KIND[kind]
    if 'name' in {f.name for f in dataclasses.fields(settings_cls)}:
        raw_settings.setdefault('name', name)
    settings = settings_cls.from_mapping(raw_settings)
    job = Job(kind=kind, name=name, settings=settings)
    job.paths = _parse_paths(entry.get('paths'))
    job.heightmap = _parse_heightmap(entry, FsPath(base_dir))
    return job


def read_job_file(path) -> List[Any]:
    """Read a YAML job file and return its raw job entries.

    The document is either a single job mapping or ``{jobs: [...]}``.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        SettingsError: If the file is not valid YAML or holds no job list
    """

    path = FsPath(path)
    with open(path, 'r', encoding='utf-8') as fp:
        try:
            data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise SettingsError(f"{path}: invalid YAML: {exc}") from exc
    entries = data.get('jobs', [data]) if isinstance(data, Mapping) else data
    if not isinstance(entries, list):
        raise SettingsError(f"{path}: expected a job mapping or a list of jobs")
    logger.debug("Read %d job(s) from %s", len(entries), path)
    return entries


def load_jobs(path) -> List[Job]:
    """Load and parse every job of a YAML job file.

    Relative ``heightmap_file`` entries resolve against the job file.  The
    first invalid job raises; use :func:`read_job_file` and
    :func:`parse_job` to handle jobs one at a time.
    """

    path = FsPath(path)
    return [parse_job(entry, path.parent, i) for i, entry in enumerate(read_job_file(path))]


__all__ = [
    'Material',
    'PartType',
    'TubeStyle',
    'ShapeKind',
    'ChannelPlacement',
    'JobKind',
    'parse_enum',
    'TubeSettings',
    'SplitChannelSettings',
    'ReliefSettings',
    'ModularShapeSettings',
    'settings_for',
    'Job',
    'parse_job',
    'read_job_file',
    'load_jobs',
]
