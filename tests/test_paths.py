import math

import pytest

from signforge.paths import (
    Path,
    center_paths,
    interpolate_path,
    path_length,
    paths_bounds,
    simplify_by_distance,
)


def test_closure_detected_and_duplicate_dropped():
    path = Path.from_points([(0, 0), (10, 0), (10, 10), (0.5, 0.2)])
    assert path.closed
    assert len(path) == 3
    assert path.points[-1] == (10.0, 10.0)


def test_open_path_stays_open():
    path = Path.from_points([(0, 0), (10, 0), (10, 10)])
    assert not path.closed
    assert len(path) == 3


def test_explicit_open_flag_wins():
    path = Path.from_points([(0, 0), (10, 0), (10, 10), (0, 0)], closed=False)
    assert not path.closed
    assert len(path) == 4


def test_explicit_closed_without_duplicate():
    path = Path.from_points([(0, 0), (10, 0), (10, 10)], closed=True)
    assert path.closed
    assert len(path.segments()) == 3


def test_degenerate_path():
    assert Path.from_points([(1, 1)]).is_degenerate
    assert not Path.from_points([(1, 1), (2, 2)]).is_degenerate


def test_path_length_includes_closing_segment():
    square = Path.from_points([(0, 0), (1, 0), (1, 1), (0, 1)], closed=True)
    assert math.isclose(path_length(square), 4.0)
    assert math.isclose(path_length(Path.from_points([(0, 0), (3, 4)])), 5.0)


def test_interpolate_path_limits_spacing():
    path = Path.from_points([(0, 0), (10, 0), (10, 3)])
    dense = interpolate_path(path, 2.0)
    assert dense.points[0] == (0.0, 0.0)
    assert dense.points[-1] == (10.0, 3.0)
    assert (10.0, 0.0) in dense.points
    for a, b in dense.segments():
        assert math.hypot(b[0] - a[0], b[1] - a[1]) <= 2.0 + 1e-9
    assert math.isclose(path_length(dense), path_length(path))


def test_interpolate_closed_path_subdivides_closing_segment():
    square = Path.from_points([(0, 0), (4, 0), (4, 4), (0, 4)], closed=True)
    dense = interpolate_path(square, 1.0)
    assert dense.closed
    assert len(dense) == 16
    assert dense.points[-1] == (0.0, 1.0)


def test_simplify_by_distance_drops_close_points():
    path = Path.from_points([(0, 0), (0.1, 0), (0.2, 0), (1.0, 0), (1.05, 0), (2.0, 0)])
    simple = simplify_by_distance(path, 0.5)
    assert simple.points == ((0.0, 0.0), (1.0, 0.0), (2.0, 0.0))


def test_simplify_by_distance_keeps_open_end():
    path = Path.from_points([(0, 0), (1, 0), (1.1, 0)])
    simple = simplify_by_distance(path, 0.5)
    assert simple.points[-1] == (1.1, 0.0)
    assert len(simple) == 2


def test_center_paths_uses_common_bounds():
    a = Path.from_points([(10, 10), (20, 10)])
    b = Path.from_points([(10, 30), (20, 30)])
    centred = center_paths([a, b])
    assert paths_bounds(centred) == pytest.approx((-5.0, -10.0, 5.0, 10.0))
    assert center_paths([]) == []


def test_short_loop_is_open():
    assert not Path(((0.0, 0.0), (1.0, 0.0)), True).closed
    assert not Path.from_points([(0, 0), (5, 0)], closed=True).closed
    assert Path(((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)), True).closed


def test_simplify_small_loop_opens_it():
    loop = Path.from_points([(0, 0), (1, 0), (1, 1), (0, 1)], closed=True)
    simple = simplify_by_distance(loop, 1.2)
    assert len(simple) == 2
    assert not simple.closed
    assert len(simple.segments()) == 1
