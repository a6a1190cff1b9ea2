"""Pull the JSON document out of noisy CLI stdout."""
from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("clawdash.parsers.cli_json")

_OPENERS = "[{"
_CLOSERS = "]}"


def extract_json_block(output: str) -> str:
    """Return the first balanced ``[...]``/``{...}`` block of lines, or "".

    The CLI may print log lines before its JSON. The block starts at the first
    line whose stripped text opens with ``[`` or ``{`` and ends on the line
    where bracket depth drops back to zero.

    Brackets are counted without tracking string literals, so a ``"]"`` inside
    a JSON string value shifts the depth. That is accepted for the known CLI
    output and is not a general-purpose scanner.
    """
    collected: list[str] = []
    depth = 0
    in_json = False

    for line in (output or "").strip().splitlines():
        stripped = line.strip()
        if not in_json and stripped and stripped[0] in _OPENERS:
            in_json = True
        if not in_json:
            continue
        collected.append(line)
        for char in line:
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth -= 1
        if depth == 0:
            break

    return "\n".join(collected).strip()


def parse_cli_json(output: str, label: str = "cli") -> Any | None:
    """Parse the JSON block from CLI output; ``None`` when absent or malformed."""
    block = extract_json_block(output)
    if not block:
        preview = (output or "").strip()[:80]
        logger.warning("%s: output did not contain JSON: %s", label, preview)
        return None
    try:
        return json.loads(block)
    except json.JSONDecodeError as exc:
        logger.error("%s: JSON parse failed: %s", label, exc)
        return None
