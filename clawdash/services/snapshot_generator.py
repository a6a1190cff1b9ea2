"""Build the ``generated-data.json`` snapshot written at build time."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from clawdash.date_utils import utc_now_iso
from clawdash.models import (
    CalendarSection,
    ContentSection,
    CronSection,
    DashboardSnapshot,
    FileActivitySection,
    ProjectsSection,
    SnapshotMetadata,
    TradingSection,
    TradingStatus,
)
from clawdash.services.agent_reconciler import AgentReconciler
from clawdash.services.crons import normalize_cron_job
from clawdash.sources.openclaw import (
    AGENTS_LIST_ARGS,
    CRON_LIST_ARGS,
    SESSIONS_LIST_ARGS,
    OpenClawCli,
    extract_agents,
    extract_sessions,
)

logger = logging.getLogger("clawdash.generate")

GENERATED_BY = "clawdash.scripts.generate_snapshot"


class SnapshotGenerationError(RuntimeError):
    """Live data was required but the snapshot would have been a fallback."""


def create_empty_snapshot(template: DashboardSnapshot) -> DashboardSnapshot:
    """Template with every live section emptied and marked unavailable."""
    snapshot = template.model_copy(deep=True)
    snapshot.agents = []
    snapshot.projects = ProjectsSection(status="unavailable")
    snapshot.content = ContentSection(status="unavailable")
    snapshot.trading = TradingSection(
        availability="unavailable",
        status=TradingStatus(
            dailyStatus="Unavailable",
            statusNote="Live trading data unavailable",
            completionStatus="No live data",
        ),
    )
    snapshot.crons = CronSection(status="unavailable")
    snapshot.calendar = CalendarSection(status="unavailable")
    snapshot.fileActivity = FileActivitySection(status="unavailable")
    snapshot.metadata = None
    return snapshot


def create_metadata(is_fallback: bool, source: str, details: str) -> SnapshotMetadata:
    return SnapshotMetadata(
        generatedAt=utc_now_iso(),
        generatedBy=GENERATED_BY,
        source=source,
        isFallback=is_fallback,
        details=details,
    )


def _capture(cli: OpenClawCli, args: list[str], label: str) -> Any:
    try:
        return cli.run_json(args, label)
    except Exception:
        logger.exception("%s failed, section left empty", label)
        return None


def generate_snapshot(
    cli: OpenClawCli,
    reconciler: AgentReconciler,
    template: DashboardSnapshot,
    known_subagents: Optional[list[str]] = None,
    require_live: bool = False,
) -> DashboardSnapshot:
    """Capture agents and crons from the CLI into a snapshot with a metadata envelope.

    Raises:
        SnapshotGenerationError: ``require_live`` is set and the CLI is missing
            or either section could not be captured.
    """
    logger.info("OpenClaw binary path: %s", cli.binary)

    if not cli.is_available():
        message = f"OpenClaw binary not found at {cli.binary}"
        if require_live:
            raise SnapshotGenerationError(f"{message}. REQUIRE_LIVE_DATA=true prevents fallback snapshots.")
        logger.warning("%s; writing fallback snapshot data", message)
        snapshot = create_empty_snapshot(template)
        snapshot.metadata = create_metadata(
            True,
            "empty-fallback",
            "openclaw binary unavailable; emitted empty snapshot",
        )
        return snapshot

    snapshot = create_empty_snapshot(template)

    agents_payload = _capture(cli, AGENTS_LIST_ARGS, "agents list")
    sessions_payload = _capture(cli, SESSIONS_LIST_ARGS, "sessions list")
    cron_payload = _capture(cli, CRON_LIST_ARGS, "cron list")

    agents = extract_agents(agents_payload)
    agents_ready = bool(agents)
    jobs = cron_payload.get("jobs") if isinstance(cron_payload, dict) else None
    crons_ready = isinstance(jobs, list)

    if agents_ready:
        snapshot.agents = reconciler.reconcile(agents, extract_sessions(sessions_payload), known_subagents) or []
        logger.info("Fetched %s agents", len(snapshot.agents))

    if crons_ready:
        snapshot.crons = CronSection(
            status="available",
            jobs=[normalize_cron_job(job) for job in jobs if isinstance(job, dict)],
        )
        logger.info("Fetched %s cron jobs", len(snapshot.crons.jobs))

    is_fallback = not (agents_ready and crons_ready)
    if is_fallback and require_live:
        raise SnapshotGenerationError(
            "Live snapshot incomplete (missing agents or crons). "
            "REQUIRE_LIVE_DATA=true prevents fallback snapshots."
        )

    snapshot.metadata = create_metadata(
        is_fallback,
        "mixed" if is_fallback else "openclaw-cli",
        "partial live data; unresolved sections are empty"
        if is_fallback
        else "live agents+sessions+cron captured from openclaw cli",
    )
    return snapshot


def write_snapshot(snapshot: DashboardSnapshot, path: Path) -> int:
    """Write the snapshot as pretty JSON; returns the file size in bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot.to_payload(), indent=2), encoding="utf-8")
    return path.stat().st_size
