"""Opt-in validation helpers for generated meshes.

Nothing in the generators calls these; they are diagnostics for tests and
for callers who want to know whether a part is closed before slicing it.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from signforge.geometry_utils import Triangle, Vec3, triangle_normal
from signforge.paths import CLOSE_TOLERANCE

VertexKey = Tuple[float, float, float]


def is_closed_path(points: Sequence[Sequence[float]], tol: float = CLOSE_TOLERANCE) -> bool:
    """Return ``True`` if the first and last points lie within ``tol``."""

    if len(points) < 3:
        return False
    first, last = points[0], points[-1]
    return ((first[0] - last[0]) ** 2 + (first[1] - last[1]) ** 2) ** 0.5 < tol


def _key(v: Vec3, decimals: int) -> VertexKey:
    return (round(v[0], decimals) + 0.0, round(v[1], decimals) + 0.0, round(v[2], decimals) + 0.0)


def _directed_edges(triangles: Sequence[Triangle], decimals: int):
    for tri in triangles:
        a, b, c = (_key(v, decimals) for v in tri.vertices)
        if a == b or b == c or c == a:
            continue
        yield a, b
        yield b, c
        yield c, a


def mesh_watertight(triangles: Sequence[Triangle], decimals: int = 5) -> "CheckResult":
    """Edge-pairing check: every edge must be shared by exactly two faces.

    Vertices are welded by rounding to ``decimals`` places; triangles that
    collapse under welding are ignored.
    """

    edges: Counter = Counter()
    for a, b in _directed_edges(triangles, decimals):
        edges[(a, b) if a < b else (b, a)] += 1

    boundary = [edge for edge, count in edges.items() if count == 1]
    invalid = [edge for edge, count in edges.items() if count > 2]

    warnings: List[str] = []
    ok = True
    if boundary:
        ok = False
        warnings.append(f'{len(boundary)} boundary edges detected')
    if invalid:
        ok = False
        warnings.append(f'{len(invalid)} edges with multiplicity >2')
    return CheckResult(ok, warnings)


def faces_oriented(triangles: Sequence[Triangle], decimals: int = 5) -> "CheckResult":
    """Consistent winding: no directed edge may be used by two faces."""

    directed: Counter = Counter(_directed_edges(triangles, decimals))
    repeated = [edge for edge, count in directed.items() if count > 1]
    if repeated:
        return CheckResult(False, [f'{len(repeated)} edges traversed twice in the same direction'])
    return CheckResult(True, [])


def normals_match_winding(triangles: Sequence[Triangle], tol: float = 1e-3) -> "CheckResult":
    """Stored normals agree with the right-hand rule over each triangle."""

    bad = []
    for idx, tri in enumerate(triangles):
        fresh = triangle_normal(*tri.vertices)
        if fresh is None:
            continue
        if sum((p - q) ** 2 for p, q in zip(fresh, tri.normal)) > tol:
            bad.append(idx)
    if bad:
        return CheckResult(False, [f'{len(bad)} triangles with stale normals'])
    return CheckResult(True, [])


def mesh_bounds(triangles: Sequence[Triangle]) -> Tuple[Vec3, Vec3]:
    """Axis-aligned bounds ``(min, max)`` of all vertices."""

    if not triangles:
        return ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    verts = [v for t in triangles for v in t.vertices]
    lo = tuple(min(v[i] for v in verts) for i in range(3))
    hi = tuple(max(v[i] for v in verts) for i in range(3))
    return lo, hi


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


__all__ = [
    'CheckResult',
    'is_closed_path',
    'mesh_watertight',
    'faces_oriented',
    'normals_match_winding',
    'mesh_bounds',
]
