"""Planar polylines consumed by the sweep generators."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from signforge.geometry_utils import Vec2

CLOSE_TOLERANCE = 1.0


def _distance(a: Vec2, b: Vec2) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


@dataclass(frozen=True)
class Path:
    """Ordered 2D points with a ``closed`` flag.

    A closed path stores every distinct point once; the segment from the last
    point back to the first is implied.
    """

    points: Tuple[Vec2, ...]
    closed: bool = False

    def __post_init__(self):
        # a loop needs three points; fewer is swept and capped as an open path
        if self.closed and len(self.points) < 3:
            object.__setattr__(self, 'closed', False)

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], closed: Optional[bool] = None,
                    tol: float = CLOSE_TOLERANCE) -> "Path":
        """Build a path, detecting closure when the ends lie within ``tol``.

        A duplicated closing point is dropped.  Passing ``closed`` explicitly
        overrides detection but still drops a duplicated closing point.
        """

        pts = [(float(p[0]), float(p[1])) for p in points]
        ends_meet = len(pts) > 2 and _distance(pts[0], pts[-1]) < tol
        if closed is None:
            closed = ends_meet
        if closed and ends_meet:
            pts = pts[:-1]
        return cls(points=tuple(pts), closed=bool(closed))

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_degenerate(self) -> bool:
        return len(self.points) < 2

    def bounds(self) -> Tuple[float, float, float, float]:
        """Return ``(min_x, min_y, max_x, max_y)``."""

        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def translated(self, dx: float, dy: float) -> "Path":
        return Path(tuple((x + dx, y + dy) for x, y in self.points), self.closed)

    def scaled(self, sx: float, sy: Optional[float] = None) -> "Path":
        sy = sx if sy is None else sy
        return Path(tuple((x * sx, y * sy) for x, y in self.points), self.closed)

    def segments(self) -> List[Tuple[Vec2, Vec2]]:
        pts = list(self.points)
        pairs = list(zip(pts, pts[1:]))
        if self.closed and len(pts) > 2:
            pairs.append((pts[-1], pts[0]))
        return pairs


def paths_bounds(paths: Sequence[Path]) -> Tuple[float, float, float, float]:
    """Bounding box of all points of ``paths``."""

    pts = [p for path in paths for p in path.points]
    if not pts:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return (min(xs), min(ys), max(xs), max(ys))


def center_paths(paths: Sequence[Path]) -> List[Path]:
    """Translate ``paths`` together so their common bounding box is centred on the origin."""

    if not paths:
        return []
    min_x, min_y, max_x, max_y = paths_bounds(paths)
    cx = (min_x + max_x) / 2.0
    cy = (min_y + max_y) / 2.0
    return [p.translated(-cx, -cy) for p in paths]


def path_length(path: Path) -> float:
    return sum(_distance(a, b) for a, b in path.segments())


def interpolate_path(path: Path, max_spacing: float) -> Path:
    """Insert points so that no segment is longer than ``max_spacing``.

    Existing points are kept.  The closing segment of a closed path is
    subdivided too.
    """

    if path.is_degenerate or max_spacing <= 0:
        return path
    out: List[Vec2] = []
    for a, b in path.segments():
        out.append(a)
        steps = int(math.ceil(_distance(a, b) / max_spacing))
        for i in range(1, steps):
            t = i / steps
            out.append((a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t))
    if not path.closed:
        out.append(path.points[-1])
    return Path(tuple(out), path.closed)


def simplify_by_distance(path: Path, min_distance: float) -> Path:
    """Drop points closer than ``min_distance`` to the last kept point.

    The final point of an open path is always kept so its ends do not move.
    """

    if path.is_degenerate or min_distance <= 0:
        return path
    pts = path.points
    kept = [pts[0]]
    for p in pts[1:-1]:
        if _distance(kept[-1], p) >= min_distance:
            kept.append(p)
    last = pts[-1]
    if path.closed:
        if _distance(kept[-1], last) >= min_distance and _distance(last, kept[0]) >= min_distance:
            kept.append(last)
    else:
        if len(kept) > 1 and _distance(kept[-1], last) < min_distance:
            kept[-1] = last
        else:
            kept.append(last)
    return Path(tuple(kept), path.closed)


__all__ = [
    'CLOSE_TOLERANCE',
    'Path',
    'paths_bounds',
    'center_paths',
    'path_length',
    'interpolate_path',
    'simplify_by_distance',
]
