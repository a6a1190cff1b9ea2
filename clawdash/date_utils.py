"""Shared timestamp normalization helpers."""
from __future__ import annotations

import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def format_datetime_utc(value: datetime) -> str:
    """Render as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    return format_datetime_utc(datetime.now(timezone.utc))


def epoch_ms_to_iso(value: float) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    try:
        return format_datetime_utc(datetime.fromtimestamp(value / 1000.0, timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` accepted); naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def hours_since(value: Any, now: datetime | None = None) -> float | None:
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return None
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    return (reference - parsed).total_seconds() / 3600.0


def file_modified_iso(path: Path) -> str:
    try:
        stats = path.stat()
    except OSError:
        return ""
    return format_datetime_utc(datetime.fromtimestamp(float(stats.st_mtime), timezone.utc))
