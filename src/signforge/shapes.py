"""Regular polygon outlines for modular tiles."""

import math
from typing import Sequence

from signforge.config import ShapeKind, parse_enum
from signforge.errors import GeometryError
from signforge.paths import Path


def circumradius(sides: int, edge_length: float) -> float:
    return edge_length / (2.0 * math.sin(math.pi / sides))


def polygon_path(kind, edge_length: float, center: Sequence[float] = (0.0, 0.0)) -> Path:
    """Closed regular polygon with edges of ``edge_length``.

    ``kind`` is a :class:`ShapeKind` or its name.  Odd polygons point a
    vertex down; even polygons sit on a flat bottom edge.
    """

    kind = parse_enum(ShapeKind, kind)
    if edge_length <= 0:
        raise GeometryError(f"edge_length must be positive, got {edge_length}")
    n = kind.sides
    radius = circumradius(n, edge_length)
    offset = -math.pi / 2.0 + (math.pi / n if n % 2 == 0 else 0.0)
    points = [
        (center[0] + radius * math.cos(offset + 2.0 * math.pi * i / n),
         center[1] + radius * math.sin(offset + 2.0 * math.pi * i / n))
        for i in range(n)
    ]
    return Path(tuple(points), closed=True)


__all__ = ['circumradius', 'polygon_path']
