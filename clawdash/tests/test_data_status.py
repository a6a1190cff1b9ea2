import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from clawdash.date_utils import format_datetime_utc
from clawdash.routers import debug as debug_router
from clawdash.services.data_status import build_data_status

NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


class DataStatusTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.root = Path(self.tmpdir.name)
        self.binary = self.root / "openclaw"

    def _write(self, name: str, hours_old: float, is_fallback: bool = False) -> Path:
        path = self.root / name
        meta = {
            "generatedAt": format_datetime_utc(NOW - timedelta(hours=hours_old)),
            "generatedBy": "test",
            "source": "openclaw-cli",
            "isFallback": is_fallback,
            "details": "",
        }
        path.write_text(json.dumps({"agents": [], "metadata": meta, "__meta": meta}), encoding="utf-8")
        return path

    def test_stale_file_reports_age_and_rejection(self) -> None:
        path = self._write("generated-data.json", 30)

        report = build_data_status([("Local", path)], openclaw_bin=self.binary, max_age_hours=24, now=NOW)

        entry = report.dataFiles[0]
        self.assertTrue(entry.exists)
        self.assertTrue(entry.valid)
        self.assertTrue(entry.stale)
        self.assertEqual(entry.ageHours, 30.0)
        self.assertEqual(entry.rejectionReason, "snapshot is 30.0 hours old (max 24h)")
        self.assertTrue(any("Data is 30 hours old" in line for line in report.recommendations))
        self.assertEqual(report.timestamp, "2026-02-10T12:00:00.000Z")

    def test_no_valid_files_and_missing_cli(self) -> None:
        report = build_data_status(
            [("Production build", self.root / "missing.json")],
            openclaw_bin=self.binary,
            max_age_hours=24,
            now=NOW,
        )

        self.assertFalse(report.openClaw.available)
        self.assertEqual(report.openClaw.path, str(self.binary))
        self.assertFalse(report.dataFiles[0].exists)
        self.assertIn(
            "No valid data files found. The dashboard is showing placeholder data.",
            report.recommendations,
        )
        self.assertIn("OpenClaw binary not found. Live data fetching is not available.", report.recommendations)
        self.assertIn(f"  Expected location: {self.binary}", report.recommendations)

    def test_fresh_file_with_cli(self) -> None:
        self.binary.write_text("#!/bin/sh\n", encoding="utf-8")
        older = self._write("older.json", 20)
        newer = self._write("newer.json", 3, is_fallback=True)

        report = build_data_status(
            [("a", older), ("b", newer)],
            openclaw_bin=self.binary,
            max_age_hours=24,
            now=NOW,
        )

        self.assertTrue(report.openClaw.available)
        self.assertIn("Valid data file found. The dashboard should be showing real data.", report.recommendations)
        self.assertIn("OpenClaw binary is available. Can fetch live data if needed.", report.recommendations)
        self.assertIn("Data is fresh (3 hours old)", report.recommendations)
        self.assertIn("Newest snapshot is marked isFallback=true; some sections are empty.", report.recommendations)
        self.assertEqual(report.dataFiles[1].rejectionReason, "snapshot is marked as fallback data")


class DebugRouterTests(unittest.IsolatedAsyncioTestCase):
    async def test_data_status_endpoint_returns_report(self) -> None:
        report = await debug_router.get_data_status()
        self.assertEqual(len(report.dataFiles), 3)
        self.assertTrue(report.recommendations)


if __name__ == "__main__":
    unittest.main()
