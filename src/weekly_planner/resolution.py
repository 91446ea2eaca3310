"""Boundary: slot granularity and floating local time.

The planner works in fixed 30-minute slots over naive datetimes that represent
the planner's wall clock. Zoned values are converted to that clock here, once,
and never carried past this module.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

SLOT_MINUTES = 30
SLOT = timedelta(minutes=SLOT_MINUTES)

_LOCAL_FORMAT = "%Y-%m-%dT%H:%M:%S"


def to_local(dt: datetime) -> datetime:
    """Return dt as a naive local wall-clock datetime.

    Aware datetimes are converted to the system local zone first; naive
    datetimes are assumed to already be local and pass through unchanged.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def parse_local(value: str | None) -> datetime | None:
    """Parse an ISO-8601 string into local wall-clock time, or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return to_local(parsed)


def format_local(dt: datetime) -> str:
    """Format to second precision without an offset: 2025-01-06T09:30:00."""
    return to_local(dt).strftime(_LOCAL_FORMAT)


def rounded_effort_minutes(hours: float) -> int:
    """Effort in minutes rounded up to whole slots, never less than one slot.

    Returns 0 when there is no positive finite effort to schedule.
    """
    if isinstance(hours, bool) or not isinstance(hours, (int, float)):
        return 0
    if not math.isfinite(hours):
        return 0
    raw = hours * 60
    if raw <= 0:
        return 0
    return max(SLOT_MINUTES, math.ceil(raw / SLOT_MINUTES) * SLOT_MINUTES)


def ceil_to_slot(dt: datetime) -> datetime:
    """Round up to the next slot boundary.

    Any non-zero seconds or microseconds count as a partial minute and push
    the result a full slot forward from the current minute boundary.
    """
    partial = dt.second > 0 or dt.microsecond > 0
    remainder = dt.minute % SLOT_MINUTES
    floor = dt.replace(second=0, microsecond=0)
    if partial or remainder:
        return floor + timedelta(minutes=SLOT_MINUTES - remainder)
    return floor
