"""Operator report on snapshot files backing the dashboard."""
from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

from clawdash import config
from clawdash.date_utils import format_datetime_utc, parse_iso_datetime
from clawdash.models import CliStatus, DataFileStatus, DataStatusReport
from clawdash.services.baseline import inspect_snapshot_file

REGENERATE_HINT = "python -m clawdash.scripts.generate_snapshot"
COPY_HINT = "python -m clawdash.scripts.copy_snapshot"


def _newest_valid(files: list[DataFileStatus]) -> DataFileStatus | None:
    def stamp(status: DataFileStatus) -> float:
        parsed = parse_iso_datetime(status.generatedAt or status.modifiedAt)
        return parsed.timestamp() if parsed else 0.0

    valid = [f for f in files if f.exists and f.valid]
    if not valid:
        return None
    return max(valid, key=stamp)


def build_recommendations(
    files: list[DataFileStatus],
    cli: CliStatus,
    max_age_hours: float,
) -> list[str]:
    recommendations: list[str] = []

    if not any(f.exists and f.valid for f in files):
        recommendations.append("No valid data files found. The dashboard is showing placeholder data.")
        recommendations.append(f"To fix this, run: {REGENERATE_HINT} && {COPY_HINT}")
    else:
        recommendations.append("Valid data file found. The dashboard should be showing real data.")

    if not cli.available:
        recommendations.append("OpenClaw binary not found. Live data fetching is not available.")
        recommendations.append(f"  Expected location: {cli.path}")
        recommendations.append("  This is normal on hosted builds. Ensure pre-generated data is used instead.")
    else:
        recommendations.append("OpenClaw binary is available. Can fetch live data if needed.")

    newest = _newest_valid(files)
    if newest is not None and newest.ageHours is not None:
        if newest.ageHours > max_age_hours:
            recommendations.append(
                f"Data is {round(newest.ageHours)} hours old "
                f"(limit {max_age_hours:g}h). Consider regenerating with: {REGENERATE_HINT}"
            )
        else:
            recommendations.append(f"Data is fresh ({round(newest.ageHours)} hours old)")
        if newest.isFallback:
            recommendations.append("Newest snapshot is marked isFallback=true; some sections are empty.")

    return recommendations


def build_data_status(
    candidates: list[tuple[str, Path]] | None = None,
    openclaw_bin: Path | None = None,
    max_age_hours: float | None = None,
    now: datetime | None = None,
) -> DataStatusReport:
    """Inspect every candidate snapshot file; never touches the live sources."""
    reference = now or datetime.now(timezone.utc)
    limit = max_age_hours if max_age_hours is not None else config.SNAPSHOT_MAX_AGE_HOURS
    binary = openclaw_bin if openclaw_bin is not None else config.OPENCLAW_BIN

    files = [
        inspect_snapshot_file(name, path, limit, reference)[0]
        for name, path in (candidates if candidates is not None else config.SNAPSHOT_CANDIDATES)
    ]
    cli = CliStatus(available=Path(binary).exists(), path=str(binary))

    return DataStatusReport(
        timestamp=format_datetime_utc(reference),
        environment={
            "cwd": os.getcwd(),
            "homeDir": str(config.HOME_DIR),
            "dataDir": str(config.DATA_DIR),
            "buildDir": str(config.BUILD_DIR),
        },
        openClaw=cli,
        maxAgeHours=limit,
        dataFiles=files,
        recommendations=build_recommendations(files, cli, limit),
    )
