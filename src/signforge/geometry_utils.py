"""Common geometric helpers shared by the generators and exporters."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]

epsilon = 1e-4

X_AXIS: Vec3 = (1.0, 0.0, 0.0)
Z_AXIS: Vec3 = (0.0, 0.0, 1.0)


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(v: Vec3, s: float) -> Vec3:
    return (v[0] * s, v[1] * s, v[2] * s)


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(v: Vec3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def normalize(v: Vec3, default: Vec3 = Z_AXIS) -> Vec3:
    """Return ``v`` scaled to unit length, or ``default`` if it is too short."""

    n = length(v)
    if n < epsilon:
        return default
    return (v[0] / n, v[1] / n, v[2] / n)


def lift(p: Sequence[float], z: float = 0.0) -> Vec3:
    """Lift a 2D point onto the plane at height ``z``."""

    return (float(p[0]), float(p[1]), float(z))


@dataclass(frozen=True)
class Triangle:
    """Immutable triangle representation in XYZ space.

    The normal follows the right-hand rule over ``v0 -> v1 -> v2``.  Build
    triangles with :meth:`from_vertices` so the normal always matches the
    winding; a triangle is never edited in place.
    """

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3

    @classmethod
    def from_vertices(cls, v0: Vec3, v1: Vec3, v2: Vec3) -> "Triangle":
        n = triangle_normal(v0, v1, v2)
        return cls(normal=n if n is not None else Z_AXIS, v0=v0, v1=v1, v2=v2)

    @property
    def vertices(self) -> Tuple[Vec3, Vec3, Vec3]:
        return (self.v0, self.v1, self.v2)

    def flipped(self) -> "Triangle":
        """Return the triangle with reversed winding."""
        return Triangle.from_vertices(self.v0, self.v2, self.v1)


make_triangle = Triangle.from_vertices


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3 | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    n = cross(sub(v1, v0), sub(v2, v0))
    mag = length(n)
    if mag < epsilon * epsilon:
        return None
    return (n[0] / mag, n[1] / mag, n[2] / mag)


def triangle_area(v0: Vec3, v1: Vec3, v2: Vec3) -> float:
    """Return the area of a triangle."""

    return 0.5 * length(cross(sub(v1, v0), sub(v2, v0)))


def triangle_centroid(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3:
    """Return the centroid of a triangle."""

    return (
        (v0[0] + v1[0] + v2[0]) / 3.0,
        (v0[1] + v1[1] + v2[1]) / 3.0,
        (v0[2] + v1[2] + v2[2]) / 3.0,
    )


def orient_triangle(v0: Vec3, v1: Vec3, v2: Vec3, preferred_normal: Vec3) -> Triangle:
    """Build a triangle whose winding agrees with ``preferred_normal``."""

    current = triangle_normal(v0, v1, v2)
    if current is not None and dot(current, preferred_normal) < 0:
        return Triangle.from_vertices(v0, v2, v1)
    return Triangle.from_vertices(v0, v1, v2)


def add_quad(triangles: List[Triangle], a: Vec3, b: Vec3, c: Vec3, d: Vec3) -> None:
    """Append quad ``a b c d`` (counter-clockwise seen from its front) as two triangles."""

    triangles.append(Triangle.from_vertices(a, b, c))
    triangles.append(Triangle.from_vertices(a, c, d))


def translate(triangles: Iterable[Triangle], offset: Vec3) -> List[Triangle]:
    """Return copies of ``triangles`` moved by ``offset``."""

    return [
        Triangle(normal=t.normal, v0=add(t.v0, offset), v1=add(t.v1, offset), v2=add(t.v2, offset))
        for t in triangles
    ]


def mirror_x(triangles: Iterable[Triangle]) -> List[Triangle]:
    """Mirror triangles across the YZ plane.

    Mirroring inverts handedness, so the winding is reversed as well to keep
    every face pointing outward.
    """

    mirrored = []
    for t in triangles:
        v0 = (-t.v0[0], t.v0[1], t.v0[2])
        v1 = (-t.v1[0], t.v1[1], t.v1[2])
        v2 = (-t.v2[0], t.v2[1], t.v2[2])
        mirrored.append(Triangle.from_vertices(v0, v2, v1))
    return mirrored


def quad_prism(corners: Sequence[Sequence[float]], z_bottom: float, z_top: float) -> List[Triangle]:
    """Closed box over a planar quadrilateral footprint (12 triangles).

    ``corners`` may be given in either winding; faces always point outward.
    """

    pts = [(float(c[0]), float(c[1])) for c in corners]
    area = sum(pts[i][0] * pts[(i + 1) % 4][1] - pts[(i + 1) % 4][0] * pts[i][1] for i in range(4))
    if area < 0:
        pts.reverse()
    bottom = [lift(p, z_bottom) for p in pts]
    top = [lift(p, z_top) for p in pts]
    tris: List[Triangle] = []
    add_quad(tris, bottom[0], bottom[3], bottom[2], bottom[1])
    add_quad(tris, top[0], top[1], top[2], top[3])
    for i in range(4):
        k = (i + 1) % 4
        add_quad(tris, bottom[i], bottom[k], top[k], top[i])
    return tris


__all__ = [
    "Vec2",
    "Vec3",
    "epsilon",
    "X_AXIS",
    "Z_AXIS",
    "add",
    "sub",
    "scale",
    "dot",
    "cross",
    "length",
    "normalize",
    "lift",
    "Triangle",
    "make_triangle",
    "triangle_normal",
    "triangle_area",
    "triangle_centroid",
    "orient_triangle",
    "add_quad",
    "translate",
    "mirror_x",
    "quad_prism",
]
