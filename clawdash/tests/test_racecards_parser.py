import unittest
from datetime import date

from clawdash.parsers.racecards import parse_racecard_report


REPORT = """# Back-to-Lay report 2026-02

## 2026-02-09
- **15:10 Lingfield** - *Yesterday Runner*: priced at 3.2, drifted

## 2026-02-10
- **13:45 Kempton** - *Early Bird*: priced at 4.5, steady in the market
- **16:20 Wolverhampton** - *Late Show* - priced 7.0 after a drift
"""


class RacecardParserTests(unittest.TestCase):
    def test_only_window_date_entries_sorted_by_time_desc(self) -> None:
        horses = parse_racecard_report(REPORT, date(2026, 2, 10), max_records=5)

        self.assertEqual([h.name for h in horses], ["Late Show", "Early Bird"])
        self.assertEqual(horses[0].race, "2026-02-10 16:20 Wolverhampton")
        self.assertEqual(horses[0].value, "7.0")
        self.assertEqual(horses[0].date, "2026-02-10")
        self.assertEqual(horses[1].value, "4.5")
        self.assertEqual(horses[1].note, "priced at 4.5, steady in the market")

    def test_parsing_is_idempotent(self) -> None:
        first = parse_racecard_report(REPORT, date(2026, 2, 10), max_records=5)
        second = parse_racecard_report(REPORT, date(2026, 2, 10), max_records=5)
        self.assertEqual([h.model_dump() for h in first], [h.model_dump() for h in second])

    def test_duplicates_are_collapsed(self) -> None:
        text = "\n".join(
            [
                "## 2026-02-10",
                "- **14:00 Ascot** - *Twice Listed*: priced at 5",
                "- **14:00 Ascot** - *Twice Listed*: priced at 6",
                "- **14:30 Ascot** - *Twice Listed*: priced at 6",
            ]
        )
        horses = parse_racecard_report(text, date(2026, 2, 10), max_records=10)

        keys = [(h.name, h.race, h.date) for h in horses]
        self.assertEqual(len(keys), len(set(keys)))
        self.assertEqual(len(horses), 2)
        self.assertEqual(horses[1].value, "5")

    def test_race_date_overrides_heading(self) -> None:
        text = "\n".join(
            [
                "## 2026-02-09",
                "- **2026-02-10 18:05 Newcastle** - *Moved Over*: priced at n/a",
                "- **17:00 Newcastle** - *Stays Behind*: priced at 2.0",
            ]
        )
        horses = parse_racecard_report(text, date(2026, 2, 10), max_records=10)

        self.assertEqual(len(horses), 1)
        self.assertEqual(horses[0].name, "Moved Over")
        self.assertEqual(horses[0].race, "2026-02-10 18:05 Newcastle")
        self.assertEqual(horses[0].value, "n/a")

    def test_em_dash_separator_and_missing_price(self) -> None:
        text = "## 2026-02-10\n- **12:15 Ayr** — *No Price*: strong draw"
        horses = parse_racecard_report(text, date(2026, 2, 10), max_records=10)

        self.assertEqual(len(horses), 1)
        self.assertEqual(horses[0].value, "n/a")
        self.assertEqual(horses[0].note, "strong draw")

    def test_truncates_to_max_records(self) -> None:
        lines = ["## 2026-02-10"] + [f"- **1{i}:00 Ascot** - *Runner {i}*: priced at {i}" for i in range(5)]
        horses = parse_racecard_report("\n".join(lines), date(2026, 2, 10), max_records=2)

        self.assertEqual([h.name for h in horses], ["Runner 4", "Runner 3"])
        self.assertEqual(parse_racecard_report("\n".join(lines), date(2026, 2, 10), max_records=0), [])

    def test_empty_text(self) -> None:
        self.assertEqual(parse_racecard_report("", date(2026, 2, 10), max_records=2), [])


if __name__ == "__main__":
    unittest.main()
