"""End-to-end tests for the part generators."""

import io

import numpy as np
import pytest

from signforge.config import (
    ChannelPlacement,
    Job,
    JobKind,
    Material,
    ModularShapeSettings,
    PartType,
    ReliefSettings,
    ShapeKind,
    SplitChannelSettings,
    TubeSettings,
    TubeStyle,
)
from signforge.generators import (
    generate_job,
    generate_modular_shape,
    generate_neon_sign,
    generate_relief,
    generate_relief_from_grayscale,
    generate_split_channel,
)
from signforge.geometry_checks import mesh_bounds, mesh_watertight
from signforge.io.stl import PREAMBLE_SIZE, RECORD_SIZE, read_stl, stl_triangle_count
from signforge.paths import Path


@pytest.fixture
def bend():
    return [Path.from_points([(0.0, 0.0), (40.0, 0.0), (40.0, 30.0)])]


@pytest.fixture
def field():
    y, x = np.mgrid[0:20, 0:20]
    return np.where((x - 10) ** 2 + (y - 10) ** 2 < 36, 8.0, 1.0)


def _triangles(part):
    return read_stl(io.BytesIO(part.content))


def _check_sizes(parts):
    for part in parts:
        count = stl_triangle_count(part.content)
        assert count > 0
        assert part.size == PREAMBLE_SIZE + RECORD_SIZE * count


def test_neon_sign_u_channel(bend):
    parts = generate_neon_sign(bend, TubeSettings(name='demo'))
    assert [p.part_type for p in parts] == [PartType.BASE_CHANNEL]
    assert parts[0].material is Material.OPAQUE
    assert parts[0].filename == 'demo_base_channel.stl'
    _check_sizes(parts)


def test_neon_sign_with_cap(bend):
    parts = generate_neon_sign(bend, TubeSettings(diffuser_cap=True))
    assert [p.part_type for p in parts] == [PartType.BASE_CHANNEL, PartType.DIFFUSER_CAP]
    assert parts[1].material is Material.DIFFUSER
    cap_lo, _ = mesh_bounds(_triangles(parts[1]))
    assert cap_lo[2] == pytest.approx(18.0)


def test_neon_sign_round(bend):
    parts = generate_neon_sign(bend, TubeSettings(style=TubeStyle.ROUND))
    assert parts[0].part_type is PartType.NEON_TUBE
    lo, hi = mesh_bounds(_triangles(parts[0]))
    assert lo[2] == pytest.approx(0.0, abs=1e-4)
    assert hi[2] == pytest.approx(12.0, abs=1e-4)


def test_neon_sign_mirror(bend):
    parts = generate_neon_sign(bend, TubeSettings(mirror_x=True))
    lo, hi = mesh_bounds(_triangles(parts[0]))
    assert hi[0] == pytest.approx(0.0, abs=1e-4)
    assert lo[0] == pytest.approx(-46.0, abs=1e-4)


def test_neon_sign_skips_degenerate_paths():
    assert generate_neon_sign([Path.from_points([(1.0, 1.0)])], TubeSettings()) == []


def test_split_channel_parts(bend):
    parts = generate_split_channel(bend, SplitChannelSettings(name='arrow'))
    assert [p.part_type for p in parts] == [PartType.TOP_HALF, PartType.BOTTOM_HALF]
    assert all(p.material is Material.TRANSLUCENT for p in parts)
    assert [p.filename for p in parts] == ['arrow_top_half.stl', 'arrow_bottom_half.stl']
    _check_sizes(parts)


def test_split_channel_wire_groove_only_on_bottom(bend):
    with_wire = generate_split_channel(bend, SplitChannelSettings())
    without = generate_split_channel(bend, SplitChannelSettings(wire_channel=False))
    assert with_wire[0].size == without[0].size
    assert with_wire[1].size > without[1].size


def test_split_channel_connectors_extend_ends(bend):
    plain = generate_split_channel(bend, SplitChannelSettings(
        modular_connectors=False, wire_channel=False, center=False))
    linked = generate_split_channel(bend, SplitChannelSettings(wire_channel=False, center=False))
    lo_plain, _ = mesh_bounds(_triangles(plain[0]))
    lo_linked, _ = mesh_bounds(_triangles(linked[0]))
    assert lo_linked[0] == pytest.approx(lo_plain[0] - 5.0, abs=1e-4)


def test_split_channel_small_loop_stays_watertight():
    # decimation leaves two points of this loop; they must sweep as an open run
    loop = Path.from_points([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)])
    assert loop.closed
    parts = generate_split_channel([loop], SplitChannelSettings(
        wire_channel=False, modular_connectors=False))
    for part in parts:
        tris = _triangles(part)
        assert tris
        assert mesh_watertight(tris, decimals=4)


def test_split_channel_bad_tongue(bend):
    with pytest.raises(ValueError):
        generate_split_channel(bend, SplitChannelSettings(tongue_width=5.0))


def test_relief_parts(field):
    settings = ReliefSettings(width=50.0, height=50.0, name='logo')
    parts = generate_relief(field, settings)
    assert [p.part_type for p in parts] == [PartType.RELIEF_MAIN, PartType.RELIEF_DIFFUSER]
    assert [p.material for p in parts] == [Material.OPAQUE, Material.DIFFUSER]
    lo, hi = mesh_bounds(_triangles(parts[1]))
    assert (lo[2], hi[2]) == pytest.approx((0.0, 2.0))
    _check_sizes(parts)


@pytest.mark.parametrize('placement', list(ChannelPlacement))
def test_relief_channel_placements(field, placement):
    settings = ReliefSettings(width=50.0, height=50.0, channel_placement=placement,
                              include_diffuser=False)
    parts = generate_relief(field, settings)
    assert len(parts) == 1
    _check_sizes(parts)


def test_relief_too_small():
    assert generate_relief(np.ones((1, 8)), ReliefSettings()) == []


def test_relief_from_grayscale():
    gray = np.full((10, 10), 255)
    parts = generate_relief_from_grayscale(gray, ReliefSettings(width=20.0, height=20.0,
                                                                include_diffuser=False))
    _, hi = mesh_bounds(_triangles(parts[0]))
    assert hi[2] == pytest.approx(10.0)


def test_modular_shape():
    parts = generate_modular_shape(ModularShapeSettings())
    assert [p.filename for p in parts] == ['hex_80mm_modular_base.stl', 'hex_80mm_modular_cap.stl']
    assert [p.material for p in parts] == [Material.OPAQUE, Material.DIFFUSER]
    _check_sizes(parts)


def test_modular_tabs_add_geometry():
    with_tabs = generate_modular_shape(ModularShapeSettings(shape=ShapeKind.SQUARE))
    without = generate_modular_shape(ModularShapeSettings(shape=ShapeKind.SQUARE, connector_tabs=False))
    count = stl_triangle_count(with_tabs[0].content) - stl_triangle_count(without[0].content)
    assert count == 4 * 12


def test_generate_job_dispatch(bend):
    job = Job(kind=JobKind.NEON_SIGN, name='n', settings=TubeSettings(), paths=bend)
    assert len(generate_job(job)) == 1


def test_generate_job_relief_without_heightmap():
    job = Job(kind=JobKind.RELIEF, name='r', settings=ReliefSettings())
    assert generate_job(job) == []


def test_generate_job_without_paths():
    job = Job(kind=JobKind.SPLIT_CHANNEL, name='s', settings=SplitChannelSettings())
    assert generate_job(job) == []


def test_neon_sign_fittings_join_the_body(bend):
    plain = generate_neon_sign(bend, TubeSettings())
    fitted = generate_neon_sign(bend, TubeSettings(snap_tabs=True, registration_pins=True))
    assert [p.part_type for p in fitted] == [PartType.BASE_CHANNEL]
    assert fitted[0].size > plain[0].size
    _, hi = mesh_bounds(_triangles(fitted[0]))
    assert hi[2] == pytest.approx(3.0 + 15.0 + 3.0, abs=1e-4)


def test_neon_sign_feed_holes_part(bend):
    parts = generate_neon_sign(bend, TubeSettings(feed_holes=True, name='sign'))
    assert [p.part_type for p in parts] == [PartType.BASE_CHANNEL, PartType.FEED_HOLES]
    holes = parts[1]
    assert holes.material is Material.NEGATIVE
    assert holes.filename == 'sign_feed_holes.stl'
    tris = _triangles(holes)
    assert mesh_watertight(tris, decimals=4)
    lo, hi = mesh_bounds(tris)
    assert lo[2] == pytest.approx(-0.5)
    assert hi[2] == pytest.approx(3.5)
    assert lo[0] == pytest.approx(-2.5, abs=1e-4)
    assert hi[1] == pytest.approx(32.5, abs=1e-4)


def test_neon_sign_round_tube_has_no_cap_fittings(bend):
    plain = generate_neon_sign(bend, TubeSettings(style=TubeStyle.ROUND))
    fitted = generate_neon_sign(bend, TubeSettings(style=TubeStyle.ROUND, snap_tabs=True,
                                                   registration_pins=True))
    assert fitted[0].size == plain[0].size


def test_neon_sign_weld_bridges_gaps():
    letters = [Path.from_points([(0, 0), (10, 0)]), Path.from_points([(30, 0), (40, 0)])]
    plain = generate_neon_sign(letters, TubeSettings())
    welded = generate_neon_sign(letters, TubeSettings(weld_paths=True))
    assert welded[0].size > plain[0].size
    near = [Path.from_points([(0, 0), (10, 0)]), Path.from_points([(12, 0), (20, 0)])]
    assert (generate_neon_sign(near, TubeSettings(weld_paths=True))[0].size
            == generate_neon_sign(near, TubeSettings())[0].size)


def test_neon_sign_connect_paths():
    letters = [Path.from_points([(0, 0), (10, 0)]), Path.from_points([(30, 0), (40, 0)])]
    joined = generate_neon_sign(letters, TubeSettings(connect_paths=True))
    far = generate_neon_sign(letters, TubeSettings(connect_paths=True, connect_distance=5.0))
    # the joined run also sweeps the bezier link across the gap
    assert stl_triangle_count(joined[0].content) > stl_triangle_count(far[0].content)
    lo, hi = mesh_bounds(_triangles(joined[0]))
    assert lo[0] == pytest.approx(0.0, abs=1e-4)
    assert hi[0] == pytest.approx(40.0, abs=1e-4)
