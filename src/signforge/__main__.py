#!/usr/bin/env python3
"""
Command line runner for signforge job files.

Usage:
    python -m signforge JOBS.yaml [--output DIR] [--verbose]

A job file holds either a single job or a ``jobs:`` list.  Each job names
its ``kind`` (neon_sign, split_channel, relief or modular_shape), optional
``settings`` and its input ``paths`` or ``heightmap``/``heightmap_file``::

    jobs:
      - kind: split_channel
        name: arrow
        settings: {channel_depth: 8, snap_tolerance: 0.15}
        paths:
          - points: [[0, 0], [60, 0], [60, 40]]
      - kind: modular_shape
        settings: {shape: hexagon, edge_length: 60}

Jobs run independently: a failing job is reported and the parts of the
other jobs are still written.  The exit status is 1 if any job failed.
"""

import argparse
import logging
import sys
from pathlib import Path

from signforge.config import parse_job, read_job_file
from signforge.errors import SignforgeError
from signforge.generators import generate_job
from signforge.io.parts import write_parts

logger = logging.getLogger('signforge')


def _job_label(entry, index):
    if isinstance(entry, dict) and 'name' in entry:
        return entry['name']
    return index


def run_jobs(entries, base_dir, output) -> int:
    """Parse, generate and write every job entry; return the number of failed jobs.

    Each entry is parsed on its own, so a bad entry only fails its own job.
    """
    failures = 0
    for index, entry in enumerate(entries):
        label = _job_label(entry, index)
        try:
            job = parse_job(entry, base_dir, index)
            parts = generate_job(job)
        except (SignforgeError, ValueError) as exc:
            failures += 1
            logger.error("job %r failed: %s", label, exc)
            continue
        if not parts:
            logger.warning("job %r produced no geometry", job.name)
            continue
        for path in write_parts(parts, output):
            print(path)
    return failures


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m signforge',
        description='Generate printable STL parts for light signs',
    )
    parser.add_argument('file', help='YAML job file')
    parser.add_argument('-o', '--output', metavar='DIR', default='.',
                        help='Directory for generated STL files')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log per-path detail')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        entries = read_job_file(args.file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1
    except SignforgeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    failures = run_jobs(entries, Path(args.file).parent, args.output)
    if failures:
        logger.error("%d of %d job(s) failed", failures, len(entries))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
