"""Parse Back-to-Lay racecard reports into qualified-horse rows."""
from __future__ import annotations

import re
from datetime import date

from clawdash.models import QualifiedHorse

_DATE_HEADING_RE = re.compile(r"^##\s+(\d{4}-\d{2}-\d{2})")
_ENTRY_RE = re.compile(r"^- \*\*(.+?)\*\*\s+-\s+\*([^*]+)\*\s*[:\-–]*\s*(.*)$")
_RACE_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})\s+(.+)$")
_PRICE_RE = re.compile(r"priced(?:\s+at)?\s+([0-9]+(?:\.[0-9]+)?|n/a)", re.IGNORECASE)
_RACE_TIME_RE = re.compile(r"\d{2}:\d{2}")
_DASHES_RE = re.compile(r"[–—]")


def _race_time(horse: QualifiedHorse) -> str:
    match = _RACE_TIME_RE.search(horse.race)
    return match.group(0) if match else "00:00"


def parse_racecard_report(text: str, window_date: date, max_records: int) -> list[QualifiedHorse]:
    """Extract the window date's qualified horses, latest race first.

    Report layout::

        ## 2026-02-10
        - **14:30 Kempton** - *Horse Name*: priced at 4.5, drifted late

    A race field that starts with its own ``YYYY-MM-DD`` overrides the heading
    date. Rows are unique per (name, race, date), sorted by the race's
    ``HH:MM`` token descending and cut to ``max_records``.
    """
    window = window_date.isoformat()
    current_date = ""
    seen: set[str] = set()
    horses: list[QualifiedHorse] = []

    for raw_line in (text or "").splitlines():
        heading = _DATE_HEADING_RE.match(raw_line)
        if heading:
            current_date = heading.group(1)
            continue

        entry = _ENTRY_RE.match(_DASHES_RE.sub("-", raw_line))
        if not entry:
            continue

        race = entry.group(1)
        name = entry.group(2).strip()
        rest = entry.group(3)

        entry_date = current_date
        race_date = _RACE_DATE_RE.match(race)
        if race_date:
            entry_date = race_date.group(1)
            race = race_date.group(2)

        if entry_date != window:
            continue

        key = f"{name}|{race.strip()}|{entry_date}"
        if key in seen:
            continue
        seen.add(key)

        if not name:
            continue

        price = _PRICE_RE.search(rest)
        horses.append(
            QualifiedHorse(
                name=name,
                race=f"{entry_date} {race.strip()}".strip(),
                value=price.group(1) if price else "n/a",
                note=rest.strip(),
                date=entry_date or None,
            )
        )

    horses.sort(key=_race_time, reverse=True)
    return horses[: max(0, max_records)]
