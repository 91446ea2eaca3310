"""Calendar day walk: first eligible scheduling instant and day enumeration.

All datetimes are naive (planner local time). Weekdays are Sunday-first to
match the stored preference rules.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from weekly_planner.preferences import DaySchedulePreference, SchedulePreferences
from weekly_planner.resolution import ceil_to_slot

# Upper bound on days inspected when looking for the next enabled day.
MAX_DAY_SEARCH = 14
FALLBACK_START_HOUR = 8


def weekday_of(d: date) -> int:
    """Sunday-first weekday: 0=Sun ... 6=Sat."""
    return d.isoweekday() % 7


def rule_for(prefs: SchedulePreferences, d: date) -> DaySchedulePreference:
    return prefs.rule_for(weekday_of(d))


def _at_hour(d: date, hour: int) -> datetime:
    """Datetime at a whole hour on d. Hour 24 is the following midnight."""
    return datetime.combine(d, time(0, 0)) + timedelta(hours=hour)


def day_window(rule: DaySchedulePreference, d: date) -> tuple[datetime, datetime]:
    """Working window [start, end) for date d under rule."""
    return _at_hour(d, rule.start_hour), _at_hour(d, rule.end_hour)


def next_eligible_day_start(d: date, prefs: SchedulePreferences) -> datetime:
    """Start of the first enabled day at or after d.

    The search stops after MAX_DAY_SEARCH days and falls back to 08:00 on the
    date reached; normalized preferences always have an enabled day, so the
    fallback only guards against hand-built preferences.
    """
    current = d
    for _ in range(MAX_DAY_SEARCH):
        rule = rule_for(prefs, current)
        if rule.enabled:
            return _at_hour(current, rule.start_hour)
        current += timedelta(days=1)
    return _at_hour(current, FALLBACK_START_HOUR)


def scheduling_start(now: datetime, prefs: SchedulePreferences) -> datetime:
    """First instant at which work may be scheduled, given now.

    - today disabled: start of the next enabled day
    - before today's window: window start
    - at or after window end: start of the next enabled day after today
    - inside the window: now rounded up to the next slot boundary, moved to
      the next enabled day if rounding reaches the window end
    """
    today = now.date()
    rule = rule_for(prefs, today)
    if not rule.enabled:
        return next_eligible_day_start(today, prefs)

    day_start, day_end = day_window(rule, today)
    if now < day_start:
        return day_start
    if now >= day_end:
        return next_eligible_day_start(today + timedelta(days=1), prefs)

    rounded = ceil_to_slot(now)
    if rounded >= day_end:
        return next_eligible_day_start(today + timedelta(days=1), prefs)
    return max(rounded, day_start)


def enumerate_days(start: datetime | date, count: int) -> list[date]:
    """count consecutive calendar dates beginning with start's date."""
    first = start.date() if isinstance(start, datetime) else start
    return [first + timedelta(days=i) for i in range(max(0, count))]
