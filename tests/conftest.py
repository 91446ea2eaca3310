"""Shared test fixtures and data loading for weekly-planner.

All test data lives in data/fixtures/ as JSON files.  This module loads
that data and exposes helper functions + pytest fixtures for the tests.

Reference week: Sun 2025-01-05 through Tue 2025-01-14.
Weekdays are Sunday-first (0=Sun), matching stored preference rules.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
FIXTURES_DIR = Path(__file__).resolve().parent.parent / "data" / "fixtures"
SCENARIOS_DIR = FIXTURES_DIR / "scenarios"


# ---------------------------------------------------------------------------
# Data loaders
# ---------------------------------------------------------------------------
def _load_json(path: Path):
    with open(path) as f:
        return json.load(f)


_reference = _load_json(FIXTURES_DIR / "reference.json")
_preferences = _load_json(FIXTURES_DIR / "preferences.json")


# ---------------------------------------------------------------------------
# Reference constants derived from reference.json
# ---------------------------------------------------------------------------
EPOCH = datetime.fromisoformat(_reference["epoch"])

# Day lookup:  DAYS["mon"] → {"date": date(2025, 1, 6), "weekday": 1}
DAYS: dict[str, dict] = {
    d["name"]: {"date": date.fromisoformat(d["date"]), "weekday": d["weekday"]}
    for d in _reference["days"]
}


# ---------------------------------------------------------------------------
# Convenience helpers (importable by test modules)
# ---------------------------------------------------------------------------
def dt(day: str, time_label: str) -> datetime:
    """Datetime from day name and time label.

    >>> dt("mon", "09:30")
    datetime(2025, 1, 6, 9, 30)
    """
    return datetime.combine(DAYS[day]["date"], time.fromisoformat(time_label))


def iso(day: str, time_label: str) -> str:
    """Local ISO string, the way deadlines arrive from the inference service."""
    return dt(day, time_label).isoformat()


def day_date(day: str) -> date:
    return DAYS[day]["date"]


def make_prefs(name: str = "default"):
    """Normalized SchedulePreferences from preferences.json by name."""
    from weekly_planner.preferences import normalize_preferences

    return normalize_preferences(_preferences[name].get("payload", {}))


def prefs_payload(name: str) -> dict:
    return dict(_preferences[name].get("payload", {}))


def make_task(task_id: str = "T-1", **overrides):
    """TaskAnalysis with sensible defaults: 1h, splittable, due Friday 17:00."""
    from weekly_planner.types import TaskAnalysis

    fields = {
        "id": task_id,
        "title": f"Task {task_id}",
        "details": f"Details for {task_id}",
        "deadline": iso("fri", "17:00"),
        "estimated_hours": 1.0,
        "urgency_score": 50,
        "priority_score": 50,
        "priority_label": "Medium",
    }
    fields.update(overrides)
    return TaskAnalysis(**fields)


def make_busy(day: str, start: str, end: str, end_day: str | None = None):
    from weekly_planner.types import BusyInterval

    return BusyInterval(start=dt(day, start), end=dt(end_day or day, end))


def spans(blocks) -> list[tuple[str, str, str]]:
    """(task_id, start, end) triples with ISO times, for compact assertions."""
    return [(b.task_id, b.start_iso, b.end_iso) for b in blocks]


# ---------------------------------------------------------------------------
# Scenario loader
# ---------------------------------------------------------------------------
def load_scenarios(name: str):
    """Load a scenario file from data/fixtures/scenarios/{name}.json."""
    return _load_json(SCENARIOS_DIR / f"{name}.json")


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def monday_morning() -> datetime:
    """Mon 08:00, the start of the default window."""
    return dt("mon", "08:00")


@pytest.fixture
def default_prefs():
    return make_prefs("default")


@pytest.fixture
def workweek_prefs():
    return make_prefs("workweek")


@pytest.fixture
def tight_breaks_prefs():
    return make_prefs("tight_breaks")
