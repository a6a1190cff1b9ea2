"""Baseline snapshot resolution: ordered fallback tiers, first hit wins.

Tiers, in order:

1. ``generated-snapshot`` - the first candidate ``generated-data.json`` that
   exists, parses, validates, is not itself a fallback snapshot and is no
   older than the configured max age.
2. ``placeholder`` - the bundled ``dashboard-data.json``; never fails.

Live data from the sources is merged over whichever baseline wins.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from clawdash import config
from clawdash.date_utils import file_modified_iso, hours_since
from clawdash.models import DashboardSnapshot, DataFileStatus

logger = logging.getLogger("clawdash.baseline")


@dataclass(frozen=True)
class FallbackTier:
    name: str
    load: Callable[[], Optional[DashboardSnapshot]]


def load_placeholder(path: Path | None = None) -> DashboardSnapshot:
    source = Path(path) if path is not None else config.PLACEHOLDER_PATH
    try:
        return DashboardSnapshot.model_validate(json.loads(source.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.error("Placeholder snapshot %s unusable, using empty schema defaults: %s", source, exc)
        return DashboardSnapshot()


def inspect_snapshot_file(
    name: str,
    path: Path,
    max_age_hours: float,
    now: datetime | None = None,
) -> tuple[DataFileStatus, Optional[DashboardSnapshot]]:
    """Describe one candidate file; the snapshot is returned only when usable."""
    status = DataFileStatus(name=name, path=str(path))
    try:
        stats = path.stat()
    except OSError as exc:
        status.error = str(exc)
        status.rejectionReason = "file not found"
        return status, None

    status.exists = True
    status.size = stats.st_size
    status.modifiedAt = file_modified_iso(path)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        snapshot = DashboardSnapshot.model_validate(raw)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        status.valid = False
        status.error = str(exc)
        status.rejectionReason = "invalid snapshot file"
        return status, None
    status.valid = True

    metadata = snapshot.metadata
    if metadata is not None:
        status.isFallback = metadata.isFallback
        status.generatedAt = metadata.generatedAt or None

    reference = now or datetime.now(timezone.utc)
    age = hours_since(status.generatedAt, reference)
    if age is None:
        if status.generatedAt:
            logger.warning("Unparseable generatedAt %r in %s, using file mtime", status.generatedAt, path)
        age = hours_since(status.modifiedAt, reference)
    if age is None:
        status.rejectionReason = "snapshot age unknown"
        return status, None
    status.ageHours = round(age, 1)
    status.stale = age > max_age_hours

    if status.isFallback:
        status.rejectionReason = "snapshot is marked as fallback data"
        return status, None
    if status.stale:
        status.rejectionReason = f"snapshot is {status.ageHours} hours old (max {max_age_hours:g}h)"
        return status, None
    return status, snapshot


class GeneratedSnapshotTier:
    """Loads the first acceptable generated snapshot among the candidates."""

    def __init__(
        self,
        candidates: list[tuple[str, Path]] | None = None,
        max_age_hours: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.candidates = list(candidates if candidates is not None else config.SNAPSHOT_CANDIDATES)
        self.max_age_hours = max_age_hours if max_age_hours is not None else config.SNAPSHOT_MAX_AGE_HOURS
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def __call__(self) -> Optional[DashboardSnapshot]:
        now = self.clock()
        for name, path in self.candidates:
            status, snapshot = inspect_snapshot_file(name, path, self.max_age_hours, now)
            if snapshot is not None:
                logger.info("Using generated snapshot %s (%s)", path, name)
                return snapshot
            if status.exists:
                logger.warning("Skipping generated snapshot %s: %s", path, status.rejectionReason)
        return None


def default_tiers() -> list[FallbackTier]:
    tiers: list[FallbackTier] = []
    if config.USE_GENERATED_SNAPSHOT:
        tiers.append(FallbackTier("generated-snapshot", GeneratedSnapshotTier()))
    tiers.append(FallbackTier("placeholder", load_placeholder))
    return tiers


def resolve_baseline(tiers: list[FallbackTier]) -> tuple[str, DashboardSnapshot]:
    """Return ``(tier name, snapshot)`` for the first tier that yields a snapshot."""
    for tier in tiers:
        try:
            snapshot = tier.load()
        except Exception:
            logger.exception("Fallback tier %s failed", tier.name)
            continue
        if snapshot is not None:
            return tier.name, snapshot
        logger.info("Fallback tier %s produced nothing", tier.name)
    return "placeholder", load_placeholder()
