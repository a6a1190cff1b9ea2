"""openclaw CLI source: agents, sessions and cron jobs as JSON."""
from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Any

from clawdash import config
from clawdash.observability import record_source_fetch
from clawdash.parsers.cli_json import parse_cli_json

logger = logging.getLogger("clawdash.sources.openclaw")

AGENTS_LIST_ARGS = ["agents", "list", "--json"]
SESSIONS_LIST_ARGS = ["sessions", "list", "--json"]
CRON_LIST_ARGS = ["cron", "list", "--json"]


def extract_agents(payload: Any) -> list[dict[str, Any]]:
    """Agents come back either as a bare list or under ``agents``."""
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        rows = payload.get("agents") or []
    else:
        return []
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def _extract_list(payload: Any, key: str) -> list[dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    rows = payload.get(key)
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def extract_sessions(payload: Any) -> list[dict[str, Any]]:
    return _extract_list(payload, "sessions")


def extract_jobs(payload: Any) -> list[dict[str, Any]]:
    return _extract_list(payload, "jobs")


class OpenClawCli:
    """Runs ``openclaw <cmd> list --json`` and returns the parsed payload or ``None``."""

    def __init__(self, binary: Path | None = None, timeout_seconds: float | None = None):
        self.binary = Path(binary) if binary is not None else config.OPENCLAW_BIN
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else config.CLI_TIMEOUT_SECONDS

    def is_available(self) -> bool:
        return self.binary.exists()

    def run_json(self, args: list[str], label: str) -> Any | None:
        started = time.perf_counter()
        result = "error"
        try:
            payload = self._run(args, label)
            result = "ok" if payload is not None else "empty"
            return payload
        finally:
            record_source_fetch(f"openclaw:{label}", result, (time.perf_counter() - started) * 1000)

    def _run(self, args: list[str], label: str) -> Any | None:
        command = [str(self.binary), *args]
        logger.info("running %s: %s", label, " ".join(command))
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
                env=os.environ.copy(),
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", label, self.timeout_seconds)
            return None
        except (OSError, ValueError) as exc:
            logger.warning("%s execution failed: %s", label, exc)
            return None

        stderr = (completed.stderr or "").strip()
        if stderr:
            logger.debug("%s stderr: %s", label, stderr.replace("\n", " | "))
        if completed.returncode != 0:
            logger.warning("%s exited with status %s", label, completed.returncode)
            return None

        return parse_cli_json(completed.stdout or "", label)

    async def run_json_async(self, args: list[str], label: str) -> Any | None:
        return await asyncio.to_thread(self.run_json, args, label)

    async def list_agents(self) -> Any | None:
        return await self.run_json_async(AGENTS_LIST_ARGS, "agents list")

    async def list_sessions(self) -> Any | None:
        return await self.run_json_async(SESSIONS_LIST_ARGS, "sessions list")

    async def list_cron_jobs(self) -> Any | None:
        return await self.run_json_async(CRON_LIST_ARGS, "cron list")
