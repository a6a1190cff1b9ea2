"""Known sub-agent identities, one folder per agent."""
from __future__ import annotations

import logging
from pathlib import Path

from clawdash import config

logger = logging.getLogger("clawdash.sources.subagents")


def list_defined_subagents(agents_dir: Path | None = None) -> list[str]:
    """Return sub-agent folder names sorted lexically; empty on any failure."""
    root = Path(agents_dir) if agents_dir is not None else config.AGENTS_DIR
    try:
        names = [entry.name for entry in root.iterdir() if entry.is_dir()]
    except OSError as exc:
        logger.warning("Could not list sub-agent folders in %s: %s", root, exc)
        return []
    return sorted(names)
