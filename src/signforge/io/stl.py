"""STL import and export for signforge triangle lists."""

from __future__ import annotations

import io
import re
import struct
from typing import Iterable, List, Sequence

from signforge.geometry_utils import Triangle

_HEADER_SIZE = 80
_STRUCT_COUNT = struct.Struct('<I')
_STRUCT_TRIANGLE = struct.Struct('<12fH')
RECORD_SIZE = _STRUCT_TRIANGLE.size  # 50 bytes
PREAMBLE_SIZE = _HEADER_SIZE + _STRUCT_COUNT.size  # 84 bytes


def _header(name: str) -> bytes:
    header = (name[:_HEADER_SIZE]).encode('ascii', errors='replace')
    return header.ljust(_HEADER_SIZE, b' ')


def triangles_to_stl(triangles: Sequence[Triangle], name: str = 'signforge') -> bytes:
    """Serialise ``triangles`` to a binary STL buffer.

    The buffer is always ``84 + 50 * len(triangles)`` bytes.  Coordinates are
    written as-is; NaN values are not filtered.
    """

    buf = io.BytesIO()
    _write_binary(triangles, buf, name)
    return buf.getvalue()


def write_stl(triangles: Sequence[Triangle], path_or_file, *, binary: bool = True,
              name: str = 'signforge') -> None:
    """Write ``triangles`` to STL.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    """

    triangles = list(triangles)
    if binary:
        _open_and_write(triangles, path_or_file, name, 'wb', _write_binary)
    else:
        _open_and_write(triangles, path_or_file, name, 'w', _write_ascii)


def _open_and_write(triangles, path_or_file, name, mode, writer) -> None:
    if hasattr(path_or_file, 'write'):
        writer(triangles, path_or_file, name)
        return
    kwargs = {} if 'b' in mode else {'encoding': 'ascii'}
    with open(path_or_file, mode, **kwargs) as stream:
        writer(triangles, stream, name)


def _write_binary(triangles: Sequence[Triangle], stream, name: str) -> None:
    stream.write(_header(name))
    stream.write(_STRUCT_COUNT.pack(len(triangles)))
    for tri in triangles:
        stream.write(_STRUCT_TRIANGLE.pack(
            *tri.normal,
            *tri.v0,
            *tri.v1,
            *tri.v2,
            0,
        ))


def _write_ascii(triangles: Iterable[Triangle], stream, name: str) -> None:
    print(f"solid {name}", file=stream)
    for tri in triangles:
        print(f"  facet normal {tri.normal[0]:.6e} {tri.normal[1]:.6e} {tri.normal[2]:.6e}", file=stream)
        print("    outer loop", file=stream)
        for v in (tri.v0, tri.v1, tri.v2):
            print(f"      vertex {v[0]:.6e} {v[1]:.6e} {v[2]:.6e}", file=stream)
        print("    endloop", file=stream)
        print("  endfacet", file=stream)
    print(f"endsolid {name}", file=stream)


# ---------------------------------------------------------------------------
# STL Import
# ---------------------------------------------------------------------------


def _is_binary_stl(data: bytes) -> bool:
    """Determine if STL data is binary format.

    Binary STL has an 80-byte header + 4-byte count, then 50 bytes per
    triangle.  ASCII STL starts with the 'solid' keyword, but binary headers
    may too, so the size is checked as well.
    """
    if len(data) < PREAMBLE_SIZE:
        return False

    header = data[:_HEADER_SIZE].decode('ascii', errors='ignore').strip().lower()
    if not header.startswith('solid'):
        return True
    tri_count = _STRUCT_COUNT.unpack(data[_HEADER_SIZE:PREAMBLE_SIZE])[0]
    if len(data) != PREAMBLE_SIZE + tri_count * RECORD_SIZE:
        return False
    rest = data[PREAMBLE_SIZE:min(200, len(data))]
    return not (b'facet' in rest or b'vertex' in rest)


def _parse_binary_stl(data: bytes) -> List[Triangle]:
    if len(data) < PREAMBLE_SIZE:
        raise ValueError("Invalid binary STL: file too small")

    tri_count = _STRUCT_COUNT.unpack(data[_HEADER_SIZE:PREAMBLE_SIZE])[0]
    triangles = []
    offset = PREAMBLE_SIZE
    for _ in range(tri_count):
        if offset + RECORD_SIZE > len(data):
            break
        values = _STRUCT_TRIANGLE.unpack(data[offset:offset + RECORD_SIZE])
        triangles.append(Triangle(
            normal=values[0:3],
            v0=values[3:6],
            v1=values[6:9],
            v2=values[9:12],
        ))
        offset += RECORD_SIZE
    return triangles


_NUM = r'([eE\d.+-]+|nan|NaN|inf|-inf)'
_FACET = re.compile(
    r'facet\s+normal\s+' + r'\s+'.join([_NUM] * 3) + r'\s+'
    r'outer\s+loop\s+'
    + r'\s+'.join([r'vertex\s+' + r'\s+'.join([_NUM] * 3)] * 3) +
    r'\s+endloop\s+endfacet',
    re.IGNORECASE,
)


def _parse_ascii_stl(text: str) -> List[Triangle]:
    triangles = []
    for match in _FACET.finditer(text):
        values = [float(g) for g in match.groups()]
        triangles.append(Triangle(
            normal=tuple(values[0:3]),
            v0=tuple(values[3:6]),
            v1=tuple(values[6:9]),
            v2=tuple(values[9:12]),
        ))
    return triangles


def read_stl(path_or_file) -> List[Triangle]:
    """Read a binary or ASCII STL file into a list of :class:`Triangle`.

    Stored normals are kept as written; they are not recomputed.
    """

    if hasattr(path_or_file, 'read'):
        data = path_or_file.read()
        if isinstance(data, str):
            data = data.encode('utf-8')
    else:
        with open(path_or_file, 'rb') as f:
            data = f.read()

    if _is_binary_stl(data):
        return _parse_binary_stl(data)
    return _parse_ascii_stl(data.decode('utf-8', errors='replace'))


def stl_triangle_count(data: bytes) -> int:
    """Return the triangle count stored in a binary STL buffer header."""

    if len(data) < PREAMBLE_SIZE:
        raise ValueError("Invalid binary STL: file too small")
    return _STRUCT_COUNT.unpack(data[_HEADER_SIZE:PREAMBLE_SIZE])[0]


__all__ = ['triangles_to_stl', 'write_stl', 'read_stl', 'stl_triangle_count',
           'RECORD_SIZE', 'PREAMBLE_SIZE']
