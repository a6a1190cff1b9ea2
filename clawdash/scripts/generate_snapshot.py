#!/usr/bin/env python3
"""Capture live openclaw data into generated-data.json at build time.

Usage:
  python -m clawdash.scripts.generate_snapshot
  python -m clawdash.scripts.generate_snapshot --output build/generated-data.json
  REQUIRE_LIVE_DATA=true python -m clawdash.scripts.generate_snapshot
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from clawdash import config
from clawdash.services.agent_reconciler import AgentReconciler
from clawdash.services.baseline import load_placeholder
from clawdash.services.snapshot_generator import SnapshotGenerationError, generate_snapshot, write_snapshot
from clawdash.sources.openclaw import OpenClawCli
from clawdash.sources.subagents import list_defined_subagents

logger = logging.getLogger("clawdash.generate")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--output", default=str(config.GENERATED_SNAPSHOT_PATH), help="Snapshot file to write")
    parser.add_argument("--openclaw-bin", default="", help="Override the openclaw binary path")
    parser.add_argument(
        "--require-live",
        action="store_true",
        default=config.REQUIRE_LIVE_DATA,
        help="Fail instead of writing a fallback snapshot (also REQUIRE_LIVE_DATA=true)",
    )
    args = parser.parse_args(argv)

    policy = config.load_policy()
    cli = OpenClawCli(binary=Path(args.openclaw_bin) if args.openclaw_bin else None)
    output = Path(args.output)

    logger.info("Generating dashboard snapshot -> %s", output)
    try:
        snapshot = generate_snapshot(
            cli,
            AgentReconciler(policy),
            load_placeholder(),
            known_subagents=list_defined_subagents(),
            require_live=args.require_live,
        )
    except SnapshotGenerationError as exc:
        logger.error("%s", exc)
        return 1

    try:
        size = write_snapshot(snapshot, output)
    except OSError as exc:
        logger.error("Failed to write %s: %s", output, exc)
        return 1

    meta = snapshot.metadata
    print(f"Snapshot written: {output} ({size} bytes)")
    if meta is not None:
        print(f"  source={meta.source} isFallback={str(meta.isFallback).lower()}")
        print(f"  details={meta.details}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
