#!/usr/bin/env python3
"""Copy generated-data.json into the build output after the site build.

A missing source file is not an error: the dashboard falls back to its
placeholder baseline.

Usage:
  python -m clawdash.scripts.copy_snapshot
  python -m clawdash.scripts.copy_snapshot --source data/generated-data.json --dest build/generated-data.json
"""
from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path

from clawdash import config

logger = logging.getLogger("clawdash.copy")


def copy_snapshot(source: Path, dest: Path) -> bool:
    """Returns False when there is nothing to copy; raises OSError on a failed copy."""
    if not source.exists():
        logger.warning("Generated data file not found at %s; the dashboard will use fallback data", source)
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, dest)
    logger.info("Copied %s -> %s (%s bytes)", source, dest, dest.stat().st_size)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--source", default=str(config.GENERATED_SNAPSHOT_PATH))
    parser.add_argument("--dest", default=str(config.BUILD_SNAPSHOT_PATH))
    args = parser.parse_args(argv)

    try:
        copy_snapshot(Path(args.source), Path(args.dest))
    except OSError as exc:
        logger.error("Failed to copy generated data: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
