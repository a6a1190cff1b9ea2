import tempfile
import unittest
from datetime import date
from pathlib import Path

from clawdash.config import DashboardPolicy
from clawdash.sources.racecards import RacecardReportSource, build_trading_section
from clawdash.models import QualifiedHorse


class RacecardSourceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.reports_dir = Path(self.tmpdir.name)
        self.policy = DashboardPolicy(report_window_date=date(2026, 2, 10), max_qualified_records=2)

    def test_report_path_uses_month(self) -> None:
        source = RacecardReportSource(self.policy, self.reports_dir)
        self.assertEqual(source.report_path(), self.reports_dir / "2026-02.md")

    def test_missing_report_returns_none(self) -> None:
        self.assertIsNone(RacecardReportSource(self.policy, self.reports_dir).fetch())

    def test_fetch_builds_trading_section(self) -> None:
        (self.reports_dir / "2026-02.md").write_text(
            "\n".join(
                [
                    "## 2026-02-10",
                    "- **13:00 Ascot** - *First*: priced at 3.0",
                    "- **15:00 Ascot** - *Second*: priced at 4.0",
                    "- **17:00 Ascot** - *Third*: priced at 5.0",
                ]
            ),
            encoding="utf-8",
        )

        section = RacecardReportSource(self.policy, self.reports_dir).fetch()

        self.assertIsNotNone(section)
        self.assertEqual(section.availability, "available")
        self.assertEqual([h.name for h in section.qualifiedHorses], ["Third", "Second"])
        self.assertEqual(section.status.dailyStatus, "Amber")
        self.assertEqual(section.tradingStats.matchedRaces, 2)
        self.assertEqual(section.tradingStats.unmatched, 8)
        self.assertTrue(section.pipelineStages[-1].completed)
        self.assertEqual(section.pipelineStages[-1].note, "✓ 2 appended")

    def test_empty_report_still_returns_section(self) -> None:
        (self.reports_dir / "2026-02.md").write_text("## 2026-02-09\n", encoding="utf-8")

        section = RacecardReportSource(self.policy, self.reports_dir).fetch()

        self.assertEqual(section.availability, "unavailable")
        self.assertEqual(section.status.dailyStatus, "Red")
        self.assertEqual(section.tradingStats.unmatched, 10)
        self.assertFalse(section.pipelineStages[-1].completed)
        self.assertEqual(section.pipelineStages[-1].note, "⏳ waiting for horses")


class TradingSectionTests(unittest.TestCase):
    def test_green_above_four_horses(self) -> None:
        horses = [QualifiedHorse(name=f"H{i}") for i in range(5)]
        section = build_trading_section(horses)
        self.assertEqual(section.status.dailyStatus, "Green")
        self.assertEqual(section.status.statusNote, "5 horses extracted from B2L file")
        self.assertEqual([s.name for s in section.pipelineStages], ["Racecard", "Analysis", "Bias", "Sheet"])

    def test_unmatched_never_negative(self) -> None:
        section = build_trading_section([QualifiedHorse(name=f"H{i}") for i in range(12)])
        self.assertEqual(section.tradingStats.unmatched, 0)


if __name__ == "__main__":
    unittest.main()
