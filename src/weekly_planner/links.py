"""Calendar links and event bodies for scheduled blocks. Pure formatting."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any
from urllib.parse import urlencode

from weekly_planner.types import ScheduledBlock

GOOGLE_CALENDAR_RENDER_URL = "https://calendar.google.com/calendar/render"


def to_google_calendar_date(value: str | datetime, tz: tzinfo = timezone.utc) -> str:
    """Format as the provider's UTC date stamp, e.g. 20250106T090000Z.

    Naive values are wall-clock time in tz. With the default tz the local
    string is simply reinterpreted as UTC.
    """
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def create_google_calendar_link(block: ScheduledBlock, tz: tzinfo = timezone.utc) -> str:
    """Deep link that opens a pre-filled event for the block."""
    dates = f"{to_google_calendar_date(block.start, tz)}/{to_google_calendar_date(block.end, tz)}"
    query = urlencode({
        "action": "TEMPLATE",
        "text": block.task_title,
        "details": block.calendar_description,
        "dates": dates,
    })
    return f"{GOOGLE_CALENDAR_RENDER_URL}?{query}"


def to_event_body(block: ScheduledBlock, time_zone: str | None = None) -> dict[str, Any]:
    """Event insert body for the block.

    Block times are floating local time; pass an IANA time_zone name to pin
    them, otherwise the provider applies the calendar's own zone.
    """
    start: dict[str, str] = {"dateTime": block.start_iso}
    end: dict[str, str] = {"dateTime": block.end_iso}
    if time_zone:
        start["timeZone"] = time_zone
        end["timeZone"] = time_zone
    return {
        "summary": block.task_title,
        "description": block.calendar_description,
        "start": start,
        "end": end,
    }
