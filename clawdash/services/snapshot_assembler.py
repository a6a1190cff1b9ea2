"""Assemble the live dashboard snapshot over a baseline."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from clawdash.config import DashboardPolicy
from clawdash.models import AgentRecord, CronSection, DashboardSnapshot, ProjectsSection, TradingSection
from clawdash.observability import record_snapshot_sections, start_span
from clawdash.services.agent_reconciler import AgentReconciler
from clawdash.services.crons import build_cron_section
from clawdash.sources.github_projects import GitHubProjectsSource
from clawdash.sources.openclaw import OpenClawCli, extract_agents, extract_jobs, extract_sessions
from clawdash.sources.racecards import RacecardReportSource
from clawdash.sources.subagents import list_defined_subagents

logger = logging.getLogger("clawdash.snapshot")


@dataclass(frozen=True)
class SectionFetcher:
    """One snapshot section: how to fetch it live and when the result may replace the baseline."""

    section: str
    fetch: Callable[[], Awaitable[Any]]
    accept: Callable[[Any], bool]


def _has_agents(result: list[AgentRecord]) -> bool:
    return bool(result)


def _has_active_projects(result: ProjectsSection) -> bool:
    return bool(result.active)


def _has_jobs(result: CronSection) -> bool:
    return bool(result.jobs)


def _has_trading(result: TradingSection) -> bool:
    return True


class SnapshotAssembler:
    """Fans out to every section fetcher at once and keeps baseline sections that come back empty."""

    def __init__(self, fetchers: list[SectionFetcher]):
        self.fetchers = list(fetchers)

    async def assemble(self, baseline: DashboardSnapshot) -> DashboardSnapshot:
        """Never raises; on an unexpected failure the untouched baseline comes back."""
        try:
            return await self._assemble(baseline)
        except Exception:
            logger.exception("Snapshot assembly failed, returning baseline")
            return baseline.model_copy(deep=True)

    async def _assemble(self, baseline: DashboardSnapshot) -> DashboardSnapshot:
        snapshot = baseline.model_copy(deep=True)
        with start_span("clawdash.snapshot.assemble", {"sections": len(self.fetchers)}):
            results = await asyncio.gather(*(self._run(fetcher) for fetcher in self.fetchers))

        live: list[str] = []
        kept: list[str] = []
        for fetcher, result in zip(self.fetchers, results):
            if result is not None and fetcher.accept(result):
                setattr(snapshot, fetcher.section, result)
                live.append(fetcher.section)
                logger.info("LIVE: %s section replaced with fetched data", fetcher.section)
            else:
                kept.append(fetcher.section)
                logger.warning("%s data unavailable, keeping baseline", fetcher.section)

        record_snapshot_sections(live, kept)
        logger.info("Snapshot assembled (live=%s baseline=%s)", live, kept)
        return snapshot

    async def _run(self, fetcher: SectionFetcher) -> Any:
        try:
            return await fetcher.fetch()
        except Exception:
            logger.exception("%s fetch raised", fetcher.section)
            return None


class AgentsFetcher:
    """Agents + sessions from the CLI, reconciled against the known sub-agent folders."""

    def __init__(self, cli: OpenClawCli, reconciler: AgentReconciler, agents_dir: Optional[Path] = None):
        self.cli = cli
        self.reconciler = reconciler
        self.agents_dir = agents_dir

    async def __call__(self) -> Optional[list[AgentRecord]]:
        agents_payload, sessions_payload, known = await asyncio.gather(
            self.cli.list_agents(),
            self.cli.list_sessions(),
            asyncio.to_thread(list_defined_subagents, self.agents_dir),
            return_exceptions=True,
        )
        if isinstance(agents_payload, BaseException):
            logger.error("Agent list failed: %s", agents_payload)
            return None
        if agents_payload is None:
            logger.warning("No agent payload returned")
            return None
        # Session or folder failures only cost usage data, not the agents themselves.
        if isinstance(sessions_payload, BaseException):
            logger.error("Session list failed, reconciling without usage: %s", sessions_payload)
            sessions_payload = None
        if isinstance(known, BaseException):
            logger.error("Sub-agent folder listing failed: %s", known)
            known = []
        return self.reconciler.reconcile(
            extract_agents(agents_payload),
            extract_sessions(sessions_payload),
            known,
        )


class CronsFetcher:
    def __init__(self, cli: OpenClawCli):
        self.cli = cli

    async def __call__(self) -> Optional[CronSection]:
        payload = await self.cli.list_cron_jobs()
        if payload is None:
            logger.warning("No cron payload returned")
            return None
        section = build_cron_section(extract_jobs(payload))
        if section is not None:
            logger.info("Normalized %s cron jobs", len(section.jobs))
        return section


def build_default_assembler(
    policy: DashboardPolicy,
    cli: Optional[OpenClawCli] = None,
    github: Optional[GitHubProjectsSource] = None,
    racecards: Optional[RacecardReportSource] = None,
    agents_dir: Optional[Path] = None,
) -> SnapshotAssembler:
    cli = cli or OpenClawCli()
    github = github or GitHubProjectsSource()
    racecards = racecards or RacecardReportSource(policy)
    return SnapshotAssembler(
        [
            SectionFetcher("agents", AgentsFetcher(cli, AgentReconciler(policy), agents_dir), _has_agents),
            SectionFetcher("projects", github.fetch_async, _has_active_projects),
            SectionFetcher("crons", CronsFetcher(cli), _has_jobs),
            SectionFetcher("trading", racecards.fetch_async, _has_trading),
        ]
    )
