"""I/O utilities for signforge."""

from .stl import read_stl, triangles_to_stl, write_stl
from .parts import ExportedPart, make_part, write_parts

__all__ = ['triangles_to_stl', 'write_stl', 'read_stl',
           'ExportedPart', 'make_part', 'write_parts']
