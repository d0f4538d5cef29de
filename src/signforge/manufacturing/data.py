"""Data records for joints, connectors and path connections.

These records describe manufacturing features independently of the mesh
that carries them, so callers can report fit dimensions without digging
through triangles.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

from signforge.geometry_utils import Vec3

if TYPE_CHECKING:
    from signforge.paths import Path


@dataclass(frozen=True)
class JointProfile:
    """Tongue-and-groove dimensions of a split-half seam.

    Attributes:
        tongue_width: Width of the tongue on the top half (mm)
        tongue_depth: Height of the tongue below the seam plane (mm)
        groove_width: Width of the groove cut into the bottom half (mm)
        groove_depth: Depth of the groove below the seam plane (mm)
        seam_radius: Distance from the tube axis to the tongue centre (mm)
    """
    tongue_width: float
    tongue_depth: float
    groove_width: float
    groove_depth: float
    seam_radius: float

    @property
    def clearance(self) -> float:
        """Total side play of the tongue inside the groove."""
        return self.groove_width - self.tongue_width


@dataclass
class ConnectorSpec:
    """Placement of a split end connector.

    Attributes:
        connector_type: "male" (insert) or "female" (socket)
        position: Path end point the stub starts from
        direction: Unit direction the stub extends in, pointing away from the path
        radius: Outer radius of the tube the connector continues (mm)
        length: Stub length (mm)
        tolerance: Radial fit clearance (mm)
    """
    connector_type: str
    position: Vec3
    direction: Vec3
    radius: float
    length: float
    tolerance: float = 0.2

    def __post_init__(self):
        if self.connector_type not in ("male", "female"):
            raise ValueError(f"connector_type must be 'male' or 'female', got {self.connector_type!r}")
        if self.length <= 0:
            raise ValueError(f"Connector length must be positive, got {self.length}")

    @property
    def is_male(self) -> bool:
        return self.connector_type == "male"

    @property
    def far_end(self) -> Vec3:
        p, d = self.position, self.direction
        return (p[0] + d[0] * self.length, p[1] + d[1] * self.length, p[2] + d[2] * self.length)

    @property
    def span(self) -> Tuple[Vec3, Vec3]:
        return (self.position, self.far_end)


@dataclass
class ConnectionResult:
    """Outcome of joining letter paths into continuous runs.

    Attributes:
        paths: Joined paths, in input order
        connections: Number of bezier links inserted
        total_length: Summed length of ``paths`` (mm)
        original_count: Number of paths before joining
    """
    paths: List["Path"]
    connections: int
    total_length: float
    original_count: int

    @property
    def merged(self) -> int:
        """Paths absorbed into an earlier run."""
        return self.original_count - len(self.paths)
