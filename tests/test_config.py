"""Tests for settings records and YAML job files."""

import textwrap

import numpy as np
import pytest

from signforge.config import (
    ChannelPlacement,
    JobKind,
    ModularShapeSettings,
    ReliefSettings,
    ShapeKind,
    SplitChannelSettings,
    TubeSettings,
    TubeStyle,
    load_jobs,
    parse_enum,
    parse_job,
    read_job_file,
    settings_for,
)
from signforge.errors import SettingsError, UnknownShapeError


def _write(tmp_path, text, name='jobs.yaml'):
    path = tmp_path / name
    path.write_text(textwrap.dedent(text), encoding='utf-8')
    return path


def test_defaults():
    split = SplitChannelSettings()
    assert split.inner_radius == pytest.approx(4.0)
    assert split.outer_radius == pytest.approx(5.5)
    assert split.min_point_spacing is None
    assert TubeSettings().style is TubeStyle.U_CHANNEL
    assert ReliefSettings().channel_placement is ChannelPlacement.EDGES
    assert ModularShapeSettings().shape is ShapeKind.HEXAGON


def test_enum_strings_are_resolved():
    settings = TubeSettings.from_mapping({'style': 'Round', 'channel_width': 10})
    assert settings.style is TubeStyle.ROUND
    assert settings.channel_width == 10.0
    assert isinstance(settings.channel_width, float)
    assert parse_enum(ChannelPlacement, 'contours') is ChannelPlacement.CONTOURS
    assert parse_enum(JobKind, 'split-channel') is JobKind.SPLIT_CHANNEL


def test_unknown_keys_are_rejected():
    with pytest.raises(SettingsError, match='colour'):
        ReliefSettings.from_mapping({'colour': 'red'})


def test_wrong_types_are_rejected():
    with pytest.raises(SettingsError):
        ReliefSettings.from_mapping({'max_depth': 'deep'})
    with pytest.raises(SettingsError):
        ReliefSettings.from_mapping({'invert': 1})
    with pytest.raises(SettingsError):
        ReliefSettings.from_mapping({'smoothing': 1.5})


def test_unknown_shape():
    with pytest.raises(UnknownShapeError):
        ModularShapeSettings.from_mapping({'shape': 'heptagon'})


def test_unknown_placement_is_a_settings_error():
    with pytest.raises(SettingsError):
        ReliefSettings.from_mapping({'channel_placement': 'spiral'})


def test_optional_values():
    assert SplitChannelSettings.from_mapping({'min_point_spacing': None}).min_point_spacing is None
    assert SplitChannelSettings.from_mapping({'min_point_spacing': 2}).min_point_spacing == 2.0


def test_invalid_values():
    with pytest.raises(SettingsError):
        SplitChannelSettings(channel_depth=0)
    with pytest.raises(SettingsError):
        TubeSettings(style=TubeStyle.ROUND, channel_width=4.0, wall_thickness=2.0)


def test_to_dict_uses_enum_values():
    data = ModularShapeSettings(shape=ShapeKind.SQUARE).to_dict()
    assert data['shape'] == 'square'
    assert ModularShapeSettings.from_mapping(data) == ModularShapeSettings(shape=ShapeKind.SQUARE)


def test_settings_for_kind():
    assert isinstance(settings_for(JobKind.RELIEF), ReliefSettings)
    assert settings_for(JobKind.SPLIT_CHANNEL, {'channel_depth': 10}).channel_depth == 10.0


def test_parse_job_names_settings():
    job = parse_job({'kind': 'neon_sign', 'name': 'open'})
    assert job.kind is JobKind.NEON_SIGN
    assert job.settings.name == 'open'
    assert job.paths == []
    assert job.heightmap is None


def test_parse_job_keeps_explicit_setting_name():
    job = parse_job({'kind': 'relief', 'name': 'a', 'settings': {'name': 'b'}})
    assert job.settings.name == 'b'


def test_parse_job_errors():
    with pytest.raises(SettingsError):
        parse_job({'kind': 'lamp'})
    with pytest.raises(SettingsError):
        parse_job({'name': 'nothing'})
    with pytest.raises(SettingsError):
        parse_job({'kind': 'neon_sign', 'paths': [{'closed': True}]})
    with pytest.raises(SettingsError):
        parse_job({'kind': 'relief', 'heightmap': [1, 2, 3]})


def test_load_jobs_with_paths(tmp_path):
    path = _write(tmp_path, """
        jobs:
          - kind: split_channel
            name: arrow
            settings:
              channel_depth: 10
            paths:
              - points: [[0, 0], [60, 0], [60, 40]]
              - [[0, 0], [10, 0], [10, 10], [0, 0.5]]
          - kind: modular_shape
            settings: {shape: square, edge_length: 60}
    """)
    jobs = load_jobs(path)
    assert [j.kind for j in jobs] == [JobKind.SPLIT_CHANNEL, JobKind.MODULAR_SHAPE]
    arrow = jobs[0]
    assert arrow.settings.channel_depth == 10.0
    assert arrow.settings.name == 'arrow'
    assert not arrow.paths[0].closed
    assert arrow.paths[1].closed
    assert len(arrow.paths[1]) == 3
    assert jobs[1].name == 'modular_shape_1'
    assert jobs[1].settings.edge_length == 60.0


def test_load_single_job_with_inline_heightmap(tmp_path):
    path = _write(tmp_path, """
        kind: relief
        heightmap: [[0, 1], [2, 3]]
    """)
    (job,) = load_jobs(path)
    assert job.heightmap.shape == (2, 2)
    assert job.heightmap[1, 1] == 3.0


def test_load_heightmap_file_relative_to_job(tmp_path):
    np.save(tmp_path / 'field.npy', np.ones((4, 5)))
    path = _write(tmp_path, """
        - kind: relief
          heightmap_file: field.npy
    """)
    (job,) = load_jobs(path)
    assert job.heightmap.shape == (4, 5)


def test_load_jobs_rejects_scalars(tmp_path):
    path = _write(tmp_path, "42\n")
    with pytest.raises(SettingsError):
        load_jobs(path)


def test_shape_name_in_constructor():
    assert ModularShapeSettings(shape='octagon').shape is ShapeKind.OCTAGON


def test_read_job_file_keeps_entries_raw(tmp_path):
    path = _write(tmp_path, """
        jobs:
          - kind: modular_shape
            settings: {shape: star}
          - kind: neon_sign
    """)
    entries = read_job_file(path)
    assert [e['kind'] for e in entries] == ['modular_shape', 'neon_sign']
    with pytest.raises(UnknownShapeError):
        parse_job(entries[0], tmp_path, 0)
    assert parse_job(entries[1], tmp_path, 1).kind is JobKind.NEON_SIGN


def test_read_job_file_invalid_yaml(tmp_path):
    path = _write(tmp_path, "jobs:\n  - kind: [unclosed\n")
    with pytest.raises(SettingsError, match='invalid YAML'):
        read_job_file(path)


def test_missing_heightmap_file(tmp_path):
    with pytest.raises(SettingsError, match='missing.npy'):
        parse_job({'kind': 'relief', 'heightmap_file': 'missing.npy'}, tmp_path)


def test_fitting_options_default_off():
    settings = TubeSettings()
    assert not (settings.snap_tabs or settings.registration_pins or settings.feed_holes
                or settings.weld_paths or settings.connect_paths)
    assert settings.feed_hole_diameter == 5.0
    assert settings.pin_spacing == 30.0
    with pytest.raises(SettingsError):
        TubeSettings(pin_spacing=0)
