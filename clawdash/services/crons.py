"""Normalize openclaw cron jobs into the crons section."""
from __future__ import annotations

from typing import Any, Optional

from clawdash.date_utils import epoch_ms_to_iso
from clawdash.models import CronJob, CronSection

UNKNOWN_TIMESTAMP = "Unknown"


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def format_timestamp(value: Any) -> str:
    """Epoch millis -> ISO string, non-blank strings pass through, else ``Unknown``."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return epoch_ms_to_iso(value) or UNKNOWN_TIMESTAMP
    if isinstance(value, str) and value.strip():
        return value
    return UNKNOWN_TIMESTAMP


def normalize_cron_job(job: dict[str, Any]) -> CronJob:
    state = job.get("state") if isinstance(job.get("state"), dict) else {}
    payload = job.get("payload") if isinstance(job.get("payload"), dict) else {}
    name = _first_truthy(job.get("name"), payload.get("name"), payload.get("text"), job.get("id"))
    return CronJob(
        name=str(name or "Unnamed cron"),
        status=str(_first_truthy(state.get("lastStatus"), state.get("status")) or "unknown"),
        nextRun=format_timestamp(_first_present(state.get("nextRunAtMs"), state.get("next_run"))),
        lastRun=format_timestamp(
            _first_present(state.get("lastRunAtMs"), state.get("last_run"), state.get("lastRun"))
        ),
    )


def build_cron_section(jobs: list[dict[str, Any]]) -> Optional[CronSection]:
    """``None`` for an empty job list so callers keep their baseline crons."""
    if not jobs:
        return None
    return CronSection(status="available", jobs=[normalize_cron_job(job) for job in jobs])
