#!/usr/bin/env python
"""Visual verification report for weekly-planner.

Run:  uv run python scripts/verify.py

Produces a formatted report showing:
  1. Reference data (day table, Sunday-first weekdays)
  2. Preference fixtures after normalization (day rules, wellness limits)
  3. Scheduling start scenarios  -- input/expected/actual table
  4. A sample plan  -- block table, unplaced tasks, ASCII week
"""

from __future__ import annotations

import json
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths and data loading
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
FIXTURES = ROOT / "data" / "fixtures"
SCENARIOS = FIXTURES / "scenarios"

sys.path.insert(0, str(ROOT / "src"))

from weekly_planner.calendar import scheduling_start
from weekly_planner.debug import show_schedule
from weekly_planner.planner import generate_weekly_schedule
from weekly_planner.preferences import normalize_preferences
from weekly_planner.types import BusyInterval, TaskAnalysis


def _load(path: Path):
    with open(path) as f:
        return json.load(f)


_ref = _load(FIXTURES / "reference.json")
_prefs = _load(FIXTURES / "preferences.json")

EPOCH = datetime.fromisoformat(_ref["epoch"])
WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------
WIDTH = 90


def banner(title: str):
    print()
    print("=" * WIDTH)
    print(f"  {title}")
    print("=" * WIDTH)


def heading(title: str):
    print()
    print(f"  {title}")
    print(f"  {'-' * (len(title) + 2)}")


def table(headers: list[str], rows: list[list[str]], indent: int = 4):
    """Print a formatted table with auto-sized columns."""
    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    pad = " " * indent
    fmt = pad + "  ".join(f"{{:<{w}}}" for w in col_widths)
    sep = pad + "  ".join("-" * w for w in col_widths)

    print(fmt.format(*headers))
    print(sep)
    for row in rows:
        padded = row + [""] * (len(headers) - len(row))
        print(fmt.format(*padded))


def _fmt_dt(value: datetime) -> str:
    """Format as 'Mon 06 Jan 09:00'."""
    return value.strftime("%a %d %b %H:%M")


def _at(day: str, hhmm: str) -> datetime:
    for d in _ref["days"]:
        if d["name"] == day:
            return datetime.fromisoformat(f"{d['date']}T{hhmm}:00")
    raise KeyError(day)


# ---------------------------------------------------------------------------
# Section 1: Reference Data
# ---------------------------------------------------------------------------
def section_reference():
    banner("REFERENCE DATA")
    print(f"\n    Epoch:          {EPOCH.strftime('%A %Y-%m-%d %H:%M')}")
    print("    Slot size:      30 min")

    heading("Day Table (weekday 0 = Sunday)")
    rows = [
        [d["name"], d["date"], WEEKDAY_NAMES[d["weekday"]], str(d["weekday"])]
        for d in _ref["days"]
    ]
    table(["Name", "Date", "Day", "Weekday"], rows)


# ---------------------------------------------------------------------------
# Section 2: Preferences
# ---------------------------------------------------------------------------
def section_preferences():
    banner("PREFERENCE FIXTURES (NORMALIZED)")

    for name, config in _prefs.items():
        prefs = normalize_preferences(config.get("payload", {}))
        heading(f"{name}: {config['description']}")
        rows = [
            [
                WEEKDAY_NAMES[rule.weekday],
                "yes" if rule.enabled else "no",
                f"{rule.start_hour:02d}:00-{rule.end_hour:02d}:00",
            ]
            for rule in prefs.day_rules
        ]
        table(["Day", "Enabled", "Window"], rows)
        print(
            f"\n    max work/day {prefs.max_work_minutes_per_day} min, "
            f"break after {prefs.break_trigger_minutes} min focus, "
            f"break length {prefs.short_break_minutes} min"
        )


# ---------------------------------------------------------------------------
# Section 3: Scheduling start
# ---------------------------------------------------------------------------
def section_scheduling_start():
    banner("SCHEDULING START")

    rows = []
    for case in _load(SCENARIOS / "scheduling_start.json"):
        prefs = normalize_preferences(_prefs[case["preferences"]].get("payload", {}))
        now = datetime.fromisoformat(case["now"])
        expected = datetime.fromisoformat(case["expected"])
        actual = scheduling_start(now, prefs)
        rows.append([
            case["id"], case["preferences"], _fmt_dt(now),
            _fmt_dt(expected), _fmt_dt(actual),
            "ok" if actual == expected else "MISMATCH",
        ])
    table(["Case", "Prefs", "Now", "Expected", "Actual", ""], rows)


# ---------------------------------------------------------------------------
# Section 4: Sample plan
# ---------------------------------------------------------------------------
def _sample_tasks() -> list[TaskAnalysis]:
    def task(task_id, hours, deadline, priority, **extra):
        return TaskAnalysis(
            id=task_id,
            title=f"Task {task_id}",
            details=f"Sample task {task_id}",
            deadline=deadline.isoformat(),
            estimated_hours=hours,
            urgency_score=50,
            priority_score=priority,
            **extra,
        )

    return [
        task("report", 3, _at("wed", "17:00"), 80),
        task("review", 1.5, _at("tue", "12:00"), 60, is_splittable=False),
        task("slides", 2, _at("fri", "17:00"), 90,
             not_before=_at("wed", "09:00").isoformat()),
        task("too-late", 4, _at("mon", "10:00"), 95, is_splittable=False),
    ]


def section_sample_plan():
    banner("SAMPLE PLAN (workweek, tight breaks)")

    payload = dict(_prefs["workweek"]["payload"])
    payload.update(_prefs["tight_breaks"]["payload"])
    busy = [
        BusyInterval(_at("mon", "10:00"), _at("mon", "11:00")),
        BusyInterval(_at("tue", "09:00"), _at("tue", "12:00")),
    ]
    now = _at("mon", "08:40")
    result = generate_weekly_schedule(_sample_tasks(), busy, payload, now=now)

    print(f"\n    Now:              {_fmt_dt(now)}")
    print(f"    Scheduling start: {_fmt_dt(result.scheduling_start)}")
    print(f"    Planning days:    {result.planning_days}")

    heading("Blocks")
    rows = [
        [b.task_id, _fmt_dt(b.start), _fmt_dt(b.end), str(b.minutes)]
        for b in result.blocks
    ]
    table(["Task", "Start", "End", "Minutes"], rows)

    heading("Unplaced / shortfall")
    rows = [
        [task_id, str(minutes), "yes" if task_id in result.unplaced_task_ids else "no"]
        for task_id, minutes in result.shortfall_minutes.items()
    ]
    table(["Task", "Short (min)", "Unplaced?"], rows)

    print()
    first_day: date = result.scheduling_start.date() - timedelta(days=1)
    show_schedule(result.blocks, first_day, days=7, breaks=result.breaks, busy=busy)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main():
    banner("WEEKLY-PLANNER   --  VISUAL VERIFICATION REPORT")
    print(f"    Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    print(f"    Fixture data: {FIXTURES.relative_to(ROOT)}/")

    section_reference()
    section_preferences()
    section_scheduling_start()
    section_sample_plan()

    banner("END OF REPORT")
    print()


if __name__ == "__main__":
    main()
