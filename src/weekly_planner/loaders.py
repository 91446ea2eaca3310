"""Data loading: task payloads, busy intervals and saved plan requests.

Provider payload adapters skip entries they cannot use rather than failing;
task payloads are validated and rejected as a whole.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from weekly_planner.resolution import parse_local, to_local
from weekly_planner.schema import validate_analysis
from weekly_planner.types import BusyInterval, PayloadError, TaskAnalysis


def load_analysis(items: Iterable[TaskAnalysis | Mapping[str, Any]]) -> list[TaskAnalysis]:
    """Return TaskAnalysis objects, building them from dicts where needed.

    Raises PayloadError listing every problem if any dict is invalid.
    """
    items = list(items)
    raw = [item for item in items if not isinstance(item, TaskAnalysis)]
    if raw:
        errors = validate_analysis(raw)
        if errors:
            raise PayloadError("analysis", errors)
    return [
        item if isinstance(item, TaskAnalysis) else TaskAnalysis.from_dict(item)
        for item in items
    ]


def _moment(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return to_local(value)
    return parse_local(value)


def _interval(start_raw: Any, end_raw: Any) -> BusyInterval | None:
    start = _moment(start_raw)
    end = _moment(end_raw)
    if start is None or end is None:
        return None
    return BusyInterval(start=start, end=end)


def load_busy_intervals(
    items: Iterable[BusyInterval | Mapping[str, Any]],
) -> list[BusyInterval]:
    """Normalize caller busy intervals. Unparseable entries are ignored.

    Dict entries use ``startISO``/``endISO`` (or ``start``/``end``) with ISO
    strings or datetimes.
    """
    intervals: list[BusyInterval] = []
    for item in items:
        if isinstance(item, BusyInterval):
            intervals.append(BusyInterval(start=to_local(item.start), end=to_local(item.end)))
            continue
        if not isinstance(item, Mapping):
            continue
        interval = _interval(
            item.get("startISO", item.get("start")),
            item.get("endISO", item.get("end")),
        )
        if interval is not None:
            intervals.append(interval)
    return intervals


def busy_from_freebusy(payload: Mapping[str, Any]) -> list[BusyInterval]:
    """Busy intervals from a FreeBusy query response.

    Expected shape::

        {"calendars": {"<id>": {"busy": [{"start": "...", "end": "..."}]}}}

    Entries with missing, unparseable or empty ranges are skipped.
    """
    intervals: list[BusyInterval] = []
    for data in (payload.get("calendars") or {}).values():
        if not isinstance(data, Mapping):
            continue
        for block in data.get("busy") or []:
            if not isinstance(block, Mapping):
                continue
            interval = _interval(block.get("start"), block.get("end"))
            if interval is not None and interval.end > interval.start:
                intervals.append(interval)
    return intervals


def _event_time(edge: Any) -> Any:
    if not isinstance(edge, Mapping):
        return None
    return edge.get("dateTime") or edge.get("date")


def busy_from_events(payloads: Iterable[Mapping[str, Any]]) -> list[BusyInterval]:
    """Busy intervals from calendar event list responses.

    Cancelled events are ignored. All-day events (``date`` only) block the
    whole local day range they cover.
    """
    intervals: list[BusyInterval] = []
    for payload in payloads:
        for event in payload.get("items") or []:
            if not isinstance(event, Mapping) or event.get("status") == "cancelled":
                continue
            interval = _interval(_event_time(event.get("start")), _event_time(event.get("end")))
            if interval is not None and interval.end > interval.start:
                intervals.append(interval)
    return intervals


def dedupe_intervals(intervals: Iterable[BusyInterval]) -> list[BusyInterval]:
    """Drop exact duplicates, keeping first-seen order."""
    seen: set[BusyInterval] = set()
    deduped: list[BusyInterval] = []
    for interval in intervals:
        if interval in seen:
            continue
        seen.add(interval)
        deduped.append(interval)
    return deduped


def load_plan_request(path: str | Path) -> dict[str, Any]:
    """Load a saved plan request from a JSON file.

    The file has the shape::

        {
            "analysis": [ {...task analysis...}, ... ],
            "busyIntervals": [ {"startISO": "...", "endISO": "..."}, ... ],
            "schedulePreferences": { ... },
            "now": "2025-01-06T09:00:00"
        }

    Returns keyword arguments for planner.generate_weekly_schedule.
    Raises PayloadError if the analysis or ``now`` is invalid.
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)

    errors = validate_analysis(data.get("analysis", []))
    now_raw = data.get("now")
    now = parse_local(now_raw) if now_raw is not None else None
    if now_raw is not None and now is None:
        errors.append(f"'now' is not an ISO datetime: {now_raw!r}")
    if errors:
        raise PayloadError(f"plan request {path.name}", errors)

    return {
        "analysis": [TaskAnalysis.from_dict(t) for t in data.get("analysis", [])],
        "busy": load_busy_intervals(data.get("busyIntervals", [])),
        "preferences": data.get("schedulePreferences"),
        "now": now,
    }
