"""Named binary output units handed to the archiving layer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

from signforge.config import Material, PartType
from signforge.geometry_utils import Triangle
from signforge.io.stl import triangles_to_stl


@dataclass(frozen=True)
class ExportedPart:
    """A generated part: STL bytes plus the tags the archiver needs.

    Attributes:
        filename: Suggested file name inside the download archive
        content: Binary STL buffer
        part_type: Role of the part in the assembly
        material: Printing material hint
    """
    filename: str
    content: bytes
    part_type: PartType
    material: Material

    @property
    def size(self) -> int:
        return len(self.content)


def make_part(triangles: Sequence[Triangle], filename: str, part_type: PartType,
              material: Material, name: str | None = None) -> ExportedPart:
    """Serialise ``triangles`` and wrap them in an :class:`ExportedPart`."""

    header = name if name is not None else filename.rsplit('.', 1)[0]
    return ExportedPart(
        filename=filename,
        content=triangles_to_stl(triangles, header),
        part_type=part_type,
        material=material,
    )


def write_parts(parts: Iterable[ExportedPart], directory) -> List[Path]:
    """Write every part into ``directory`` and return the written paths."""

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for part in parts:
        target = out_dir / part.filename
        target.write_bytes(part.content)
        written.append(target)
    return written


__all__ = ['ExportedPart', 'make_part', 'write_parts']
