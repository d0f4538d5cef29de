"""Tests for the command line runner."""

import textwrap

from signforge.__main__ import main

GOOD = """
    - kind: modular_shape
      name: tile
      settings: {shape: triangle, edge_length: 50}
"""

BAD = """
    - kind: split_channel
      name: broken
      settings: {tongue_width: 5}
      paths:
        - [[0, 0], [40, 0]]
"""


def _jobs(tmp_path, text):
    path = tmp_path / 'jobs.yaml'
    path.write_text(textwrap.dedent(text), encoding='utf-8')
    return path


def test_all_jobs_succeed(tmp_path, capsys):
    out = tmp_path / 'out'
    assert main([str(_jobs(tmp_path, GOOD)), '-o', str(out)]) == 0
    written = sorted(p.name for p in out.iterdir())
    assert written == ['tri_50mm_modular_base.stl', 'tri_50mm_modular_cap.stl']
    assert 'tri_50mm_modular_base.stl' in capsys.readouterr().out


def test_failing_job_does_not_stop_others(tmp_path):
    out = tmp_path / 'out'
    text = textwrap.dedent(BAD) + textwrap.dedent(GOOD)
    assert main([str(_jobs(tmp_path, text)), '--output', str(out)]) == 1
    assert (out / 'tri_50mm_modular_base.stl').exists()
    assert not (out / 'broken_top_half.stl').exists()


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / 'nope.yaml')]) == 1
    assert 'File not found' in capsys.readouterr().err


def test_unknown_setting_fails_its_job(tmp_path, caplog):
    path = _jobs(tmp_path, """
        kind: neon_sign
        settings: {glow: true}
    """)
    assert main([str(path), '-o', str(tmp_path)]) == 1
    assert 'glow' in caplog.text


def test_unknown_shape_does_not_stop_others(tmp_path, caplog):
    out = tmp_path / 'out'
    text = textwrap.dedent(GOOD) + textwrap.dedent("""
        - kind: modular_shape
          name: starry
          settings: {shape: star}
    """)
    assert main([str(_jobs(tmp_path, text)), '-o', str(out)]) == 1
    assert (out / 'tri_50mm_modular_base.stl').exists()
    assert (out / 'tri_50mm_modular_cap.stl').exists()
    assert 'starry' in caplog.text
    assert 'star' in caplog.text


def test_missing_heightmap_file_fails_its_job(tmp_path, caplog):
    out = tmp_path / 'out'
    text = textwrap.dedent("""
        - kind: relief
          name: ghost
          heightmap_file: missing.npy
    """) + textwrap.dedent(GOOD)
    assert main([str(_jobs(tmp_path, text)), '-o', str(out)]) == 1
    assert (out / 'tri_50mm_modular_base.stl').exists()
    assert 'missing.npy' in caplog.text


def test_truncated_yaml(tmp_path, capsys):
    path = tmp_path / 'jobs.yaml'
    path.write_text("jobs:\n  - kind: [unclosed\n", encoding='utf-8')
    assert main([str(path), '-o', str(tmp_path)]) == 1
    err = capsys.readouterr().err
    assert err.startswith('Error:')
    assert 'invalid YAML' in err
