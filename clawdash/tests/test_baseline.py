import json
import os
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from clawdash.date_utils import format_datetime_utc
from clawdash.models import AgentRecord, DashboardSnapshot, SnapshotMetadata
from clawdash.services.baseline import (
    FallbackTier,
    GeneratedSnapshotTier,
    inspect_snapshot_file,
    load_placeholder,
    resolve_baseline,
)

NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def _write_snapshot(path: Path, generated_at: datetime, is_fallback: bool = False, agent: str = "Gen") -> None:
    snapshot = DashboardSnapshot(
        agents=[AgentRecord(name=agent, state="Active")],
        metadata=SnapshotMetadata(
            generatedAt=format_datetime_utc(generated_at),
            generatedBy="test",
            source="openclaw-cli",
            isFallback=is_fallback,
        ),
    )
    path.write_text(json.dumps(snapshot.to_payload()), encoding="utf-8")


class PlaceholderTests(unittest.TestCase):
    def test_bundled_placeholder_is_complete(self) -> None:
        snapshot = load_placeholder()
        payload = snapshot.to_payload()

        for key in ("agents", "projects", "trading", "crons", "calendar", "content", "fileActivity"):
            self.assertIn(key, payload)
        self.assertTrue(snapshot.agents)

    def test_unreadable_placeholder_uses_schema_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            broken = Path(tmpdir) / "dashboard-data.json"
            broken.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_placeholder(broken), DashboardSnapshot())

    def test_legacy_meta_key_is_accepted(self) -> None:
        snapshot = DashboardSnapshot.model_validate({"__meta": {"source": "mixed", "isFallback": True}})
        self.assertEqual(snapshot.metadata.source, "mixed")
        payload = snapshot.to_payload()
        self.assertEqual(payload["metadata"], payload["__meta"])


class SnapshotFileInspectionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.root = Path(self.tmpdir.name)

    def test_missing_file(self) -> None:
        status, snapshot = inspect_snapshot_file("missing", self.root / "nope.json", 24, NOW)
        self.assertFalse(status.exists)
        self.assertEqual(status.rejectionReason, "file not found")
        self.assertIsNone(snapshot)

    def test_invalid_json(self) -> None:
        path = self.root / "bad.json"
        path.write_text("[1, 2", encoding="utf-8")
        status, snapshot = inspect_snapshot_file("bad", path, 24, NOW)
        self.assertTrue(status.exists)
        self.assertFalse(status.valid)
        self.assertTrue(status.error)
        self.assertIsNone(snapshot)

    def test_stale_snapshot_reports_age(self) -> None:
        path = self.root / "generated-data.json"
        _write_snapshot(path, NOW - timedelta(hours=30))

        status, snapshot = inspect_snapshot_file("old", path, 24, NOW)

        self.assertIsNone(snapshot)
        self.assertTrue(status.valid)
        self.assertTrue(status.stale)
        self.assertEqual(status.ageHours, 30.0)
        self.assertEqual(status.rejectionReason, "snapshot is 30.0 hours old (max 24h)")

    def test_fallback_snapshot_rejected(self) -> None:
        path = self.root / "generated-data.json"
        _write_snapshot(path, NOW - timedelta(hours=1), is_fallback=True)

        status, snapshot = inspect_snapshot_file("fallback", path, 24, NOW)

        self.assertIsNone(snapshot)
        self.assertTrue(status.isFallback)
        self.assertFalse(status.stale)
        self.assertEqual(status.rejectionReason, "snapshot is marked as fallback data")

    def test_unparseable_generated_at_uses_file_mtime(self) -> None:
        path = self.root / "generated-data.json"
        path.write_text(
            json.dumps({"agents": [], "metadata": {"generatedAt": "not-a-date", "isFallback": False}}),
            encoding="utf-8",
        )
        os.utime(path, (0, 0))

        status, snapshot = inspect_snapshot_file("garbled", path, 24, NOW)

        self.assertIsNone(snapshot)
        self.assertTrue(status.stale)
        self.assertGreater(status.ageHours, 24)
        self.assertTrue(status.rejectionReason.startswith("snapshot is "))

        recent = NOW.timestamp() - 3600
        os.utime(path, (recent, recent))
        status, snapshot = inspect_snapshot_file("garbled", path, 24, NOW)

        self.assertIsNotNone(snapshot)
        self.assertEqual(status.ageHours, 1.0)

    def test_fresh_snapshot_accepted(self) -> None:
        path = self.root / "generated-data.json"
        _write_snapshot(path, NOW - timedelta(hours=2))

        status, snapshot = inspect_snapshot_file("fresh", path, 24, NOW)

        self.assertIsNotNone(snapshot)
        self.assertIsNone(status.rejectionReason)
        self.assertEqual(status.ageHours, 2.0)
        self.assertEqual(snapshot.agents[0].name, "Gen")


class FallbackTierTests(unittest.TestCase):
    def test_generated_tier_picks_first_acceptable_candidate(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            stale = root / "build.json"
            fresh = root / "data.json"
            _write_snapshot(stale, NOW - timedelta(hours=48), agent="Stale")
            _write_snapshot(fresh, NOW - timedelta(hours=1), agent="Fresh")
            tier = GeneratedSnapshotTier(
                [("build", stale), ("missing", root / "x.json"), ("data", fresh)],
                max_age_hours=24,
                clock=lambda: NOW,
            )

            snapshot = tier()

        self.assertEqual(snapshot.agents[0].name, "Fresh")

    def test_generated_tier_returns_none_without_candidates(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tier = GeneratedSnapshotTier([("missing", Path(tmpdir) / "x.json")], clock=lambda: NOW)
            self.assertIsNone(tier())

    def test_resolve_baseline_walks_tiers_in_order(self) -> None:
        marker = DashboardSnapshot(agents=[AgentRecord(name="Second")])

        def _explode():
            raise RuntimeError("boom")

        name, snapshot = resolve_baseline(
            [
                FallbackTier("raises", _explode),
                FallbackTier("empty", lambda: None),
                FallbackTier("second", lambda: marker),
                FallbackTier("never", lambda: DashboardSnapshot()),
            ]
        )

        self.assertEqual(name, "second")
        self.assertIs(snapshot, marker)

    def test_resolve_baseline_defaults_to_placeholder(self) -> None:
        name, snapshot = resolve_baseline([FallbackTier("empty", lambda: None)])
        self.assertEqual(name, "placeholder")
        self.assertEqual(snapshot, load_placeholder())


if __name__ == "__main__":
    unittest.main()
