import io
import math
import struct

import pytest

from signforge.geometry_utils import make_triangle, quad_prism
from signforge.io.stl import (
    PREAMBLE_SIZE,
    RECORD_SIZE,
    read_stl,
    stl_triangle_count,
    triangles_to_stl,
    write_stl,
)


def _one_triangle():
    return [make_triangle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))]


def test_buffer_layout():
    data = triangles_to_stl(_one_triangle(), 'test')
    assert len(data) == 80 + 4 + 50
    assert data[0:4] == b'test'
    assert data[4:80] == b' ' * 76
    assert struct.unpack('<I', data[80:84])[0] == 1
    values = struct.unpack('<12fH', data[84:134])
    assert values[0:3] == (0.0, 0.0, 1.0)
    assert values[3:12] == (0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
    assert values[12] == 0


def test_size_always_matches_count():
    for tris in ([], _one_triangle(), quad_prism([(0, 0), (1, 0), (1, 1), (0, 1)], 0, 1)):
        data = triangles_to_stl(tris)
        assert len(data) == PREAMBLE_SIZE + RECORD_SIZE * len(tris)
        assert stl_triangle_count(data) == len(tris)


def test_long_name_is_truncated():
    data = triangles_to_stl([], 'x' * 200)
    assert len(data) == 84
    assert data[:80] == b'x' * 80


def test_nan_passes_through():
    tri = make_triangle((math.nan, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    data = triangles_to_stl([tri])
    values = struct.unpack('<12fH', data[84:134])
    assert math.isnan(values[3])


def test_stl_triangle_count_rejects_short_buffer():
    with pytest.raises(ValueError):
        stl_triangle_count(b'short')


def test_write_and_read_binary(tmp_path):
    box = quad_prism([(0, 0), (2, 0), (2, 2), (0, 2)], 0.0, 2.0)
    path = tmp_path / 'box.stl'
    write_stl(box, path, binary=True, name='box')

    assert path.stat().st_size == 84 + 50 * 12
    imported = read_stl(path)
    assert len(imported) == 12
    for original, loaded in zip(box, imported):
        for a, b in zip(original.vertices, loaded.vertices):
            assert a == pytest.approx(b)


def test_write_stl_ascii():
    buf = io.StringIO()
    write_stl(_one_triangle(), buf, binary=False, name='ascii_test')

    text = buf.getvalue()
    assert 'solid ascii_test' in text
    assert 'facet normal' in text
    assert 'vertex' in text
    assert text.strip().endswith('endsolid ascii_test')


def test_read_stl_ascii_roundtrip(tmp_path):
    box = quad_prism([(0, 0), (1, 0), (1, 1), (0, 1)], 0.0, 1.0)
    path = tmp_path / 'box_ascii.stl'
    write_stl(box, path, binary=False)

    imported = read_stl(path)
    assert len(imported) == 12
    assert imported[0].normal == pytest.approx(box[0].normal)


def test_read_binary_from_stream():
    data = triangles_to_stl(_one_triangle(), 'solid but binary')
    imported = read_stl(io.BytesIO(data))
    assert len(imported) == 1
