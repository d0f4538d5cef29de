"""Tests for Zhang-Suen thinning and centerline extraction."""

import numpy as np
import pytest

from signforge.raster import binarize, glyph_centerlines, skeleton_paths, zhang_suen


def _bar():
    mask = np.zeros((7, 26), dtype=bool)
    mask[2:5, 3:23] = True
    return mask


def test_bar_thins_to_its_middle_row():
    result = zhang_suen(_bar())
    ys, xs = np.nonzero(result.image)
    assert set(ys.tolist()) == {3}
    assert result.pixel_count >= 10
    assert sorted(xs.tolist()) == list(range(xs.min(), xs.max() + 1))


def test_square_converges_inside_the_mask():
    mask = np.zeros((16, 16), dtype=bool)
    mask[3:13, 3:13] = True
    result = zhang_suen(mask)
    assert result.iterations <= 10 // 2 + 3
    assert result.pixel_count >= 1
    assert not (result.image & ~mask).any()


def test_thinning_leaves_input_alone():
    mask = _bar()
    zhang_suen(mask)
    assert mask.sum() == 60


def test_thinning_needs_2d_mask():
    with pytest.raises(ValueError):
        zhang_suen(np.ones(4, dtype=bool))


def test_binarize_gray_and_rgb():
    gray = np.array([[0, 127], [128, 255]])
    assert binarize(gray).tolist() == [[True, True], [False, False]]
    rgb = np.zeros((2, 2, 3))
    rgb[0, 0] = 255
    assert binarize(rgb).tolist() == [[False, True], [True, True]]


def test_skeleton_paths_line():
    skel = np.zeros((5, 10), dtype=bool)
    skel[2, 1:9] = True
    paths = skeleton_paths(skel)
    assert len(paths) == 1
    assert paths[0] == [(x, 2) for x in range(1, 9)]


def test_skeleton_paths_turns_corner():
    skel = np.zeros((8, 8), dtype=bool)
    skel[5, 0:6] = True
    skel[0:6, 5] = True
    paths = skeleton_paths(skel)
    assert len(paths) == 1
    assert len(paths[0]) == 11
    assert paths[0][0] == (5, 0)
    assert paths[0][-1] == (0, 5)


def test_skeleton_paths_drops_short():
    skel = np.zeros((3, 3), dtype=bool)
    skel[1, 1] = True
    assert skeleton_paths(skel) == []


@pytest.mark.parametrize('scale', [1.0, 2.5])
def test_glyph_centerlines_flip_and_scale(scale):
    paths = glyph_centerlines(_bar(), scale=scale)
    assert len(paths) == 1
    for x, y in paths[0].points:
        assert y == pytest.approx(-3.0 * scale)
    xs = [p[0] for p in paths[0].points]
    assert max(xs) - min(xs) >= 10 * scale


def _components(image):
    remaining = {(int(y), int(x)) for y, x in zip(*np.nonzero(image))}
    count = 0
    while remaining:
        count += 1
        stack = [remaining.pop()]
        while stack:
            y, x = stack.pop()
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if (y + dy, x + dx) in remaining:
                        remaining.remove((y + dy, x + dx))
                        stack.append((y + dy, x + dx))
    return count


@pytest.mark.parametrize("size", [4, 5, 10, 11, 20, 31])
def test_square_skeleton_stays_connected(size):
    mask = np.zeros((size + 4, size + 4), dtype=bool)
    mask[2:2 + size, 2:2 + size] = True
    result = zhang_suen(mask)
    assert _components(result.image) <= 1
    assert not (result.image & ~mask).any()
