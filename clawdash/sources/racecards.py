"""Back-to-Lay racecard report source: builds the trading section."""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from clawdash import config
from clawdash.config import DashboardPolicy
from clawdash.models import (
    PipelineStage,
    QualifiedHorse,
    TradingSection,
    TradingStats,
    TradingStatus,
)
from clawdash.observability import record_source_fetch
from clawdash.parsers.racecards import parse_racecard_report

logger = logging.getLogger("clawdash.sources.racecards")

# Daily race capacity used for the "unmatched" counter.
_DAILY_RACE_SLOTS = 10


def _daily_status(count: int) -> str:
    if count > 4:
        return "Green"
    if count > 0:
        return "Amber"
    return "Red"


def build_trading_section(horses: list[QualifiedHorse]) -> TradingSection:
    count = len(horses)
    return TradingSection(
        availability="available" if count else "unavailable",
        status=TradingStatus(
            dailyStatus=_daily_status(count),
            statusNote=(
                f"{count} horses extracted from B2L file"
                if count
                else "Waiting for the Back-to-Lay pipeline to output qualified runners"
            ),
            completionStatus="On track for processing" if count else "Awaiting shortlist",
        ),
        qualifiedHorses=horses,
        tradingStats=TradingStats(
            matchedRaces=count,
            unmatched=max(0, _DAILY_RACE_SLOTS - count),
            profit=0,
            liability=0,
        ),
        pipelineStages=[
            PipelineStage(name="Racecard", label="Racecard imported from Betfair Guru", completed=True, note="CSV downloaded"),
            PipelineStage(
                name="Analysis",
                label="Winning Warlock analysis (75%+ shortlist)",
                completed=True,
                note="Shortlist reviewed",
            ),
            PipelineStage(name="Bias", label="Draw bias captured", completed=True, note="Draw & pace metrics recorded"),
            PipelineStage(
                name="Sheet",
                label="Qualified horses appended to ClawdBotB2L sheet",
                completed=count > 0,
                note=f"✓ {count} appended" if count else "⏳ waiting for horses",
            ),
        ],
    )


class RacecardReportSource:
    """Reads ``<reports_dir>/<YYYY-MM>.md`` for the policy's window date."""

    def __init__(self, policy: DashboardPolicy, reports_dir: Path | None = None):
        self.policy = policy
        self.reports_dir = Path(reports_dir) if reports_dir is not None else config.REPORTS_DIR

    def report_path(self) -> Path:
        return self.reports_dir / f"{self.policy.report_period}.md"

    def fetch(self) -> TradingSection | None:
        started = time.perf_counter()
        section: TradingSection | None = None
        try:
            section = self._fetch()
            return section
        finally:
            result = "ok" if section is not None else "empty"
            record_source_fetch("racecards", result, (time.perf_counter() - started) * 1000)

    def _fetch(self) -> TradingSection | None:
        path = self.report_path()
        if not path.exists():
            logger.warning("B2L report missing: %s", path)
            return None
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read B2L report %s: %s", path, exc)
            return None

        horses = parse_racecard_report(
            content,
            self.policy.window_date,
            self.policy.max_qualified_records,
        )
        logger.info("Parsed %s qualified horses from %s", len(horses), path.name)
        if not horses:
            logger.warning("No qualifying horses for %s", self.policy.window_date.isoformat())
        return build_trading_section(horses)

    async def fetch_async(self) -> TradingSection | None:
        return await asyncio.to_thread(self.fetch)
