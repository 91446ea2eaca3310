"""Schedule preferences: per-weekday working windows and wellness limits.

normalize_preferences() is total. Whatever the persistence layer hands back
(current shape, the older global-window shape, partial dicts, garbage) comes
out as exactly seven day rules with at least one enabled day.

Weekdays are Sunday-first: 0=Sun ... 6=Sat.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from weekly_planner.resolution import SLOT_MINUTES

WEEKDAYS = range(7)

DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 23


@dataclass(frozen=True)
class DaySchedulePreference:
    """Working window for one weekday. Half-open [start_hour, end_hour)."""

    weekday: int
    enabled: bool = True
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekday": self.weekday,
            "enabled": self.enabled,
            "startHour": self.start_hour,
            "endHour": self.end_hour,
        }


@dataclass(frozen=True)
class SchedulePreferences:
    """Normalized preferences. Immutable.

    Invariants:
        - day_rules has one entry per weekday 0-6, sorted by weekday
        - at least one day rule is enabled
        - start_hour < end_hour for every rule
    """

    day_rules: tuple[DaySchedulePreference, ...]
    max_work_minutes_per_day: int = 8 * 60
    break_every_focus_minutes: int = 90
    short_break_minutes: int = 10
    max_continuous_focus_minutes: int = 120

    def rule_for(self, weekday: int) -> DaySchedulePreference:
        for rule in self.day_rules:
            if rule.weekday == weekday:
                return rule
        return DEFAULT_DAY_RULES[weekday]

    @property
    def enabled_weekdays(self) -> frozenset[int]:
        return frozenset(r.weekday for r in self.day_rules if r.enabled)

    @property
    def break_trigger_minutes(self) -> int:
        """Focus minutes after which a short break is injected."""
        return min(self.break_every_focus_minutes, self.max_continuous_focus_minutes)

    def to_dict(self) -> dict[str, Any]:
        """camelCase shape stored by the persistence layer."""
        return {
            "dayRules": [r.to_dict() for r in self.day_rules],
            "maxWorkMinutesPerDay": self.max_work_minutes_per_day,
            "breakEveryFocusMinutes": self.break_every_focus_minutes,
            "shortBreakMinutes": self.short_break_minutes,
            "maxContinuousFocusMinutes": self.max_continuous_focus_minutes,
        }


DEFAULT_DAY_RULES: tuple[DaySchedulePreference, ...] = tuple(
    DaySchedulePreference(weekday=d) for d in WEEKDAYS
)
DEFAULT_PREFERENCES = SchedulePreferences(day_rules=DEFAULT_DAY_RULES)

# field -> (camelCase key, snake_case key, lower bound, upper bound)
_WELLNESS_LIMITS: dict[str, tuple[str, str, int, int]] = {
    "max_work_minutes_per_day": ("maxWorkMinutesPerDay", "max_work_minutes_per_day", 60, 16 * 60),
    "break_every_focus_minutes": ("breakEveryFocusMinutes", "break_every_focus_minutes", 30, 6 * 60),
    "short_break_minutes": ("shortBreakMinutes", "short_break_minutes", 5, 60),
    "max_continuous_focus_minutes": (
        "maxContinuousFocusMinutes", "max_continuous_focus_minutes", SLOT_MINUTES, 8 * 60,
    ),
}


def _number(value: Any) -> float | None:
    """Finite int/float, else None. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _integer(value: Any) -> int | None:
    num = _number(value)
    if num is None or num != int(num):
        return None
    return int(num)


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _hour(value: Any, default: int, lo: int, hi: int) -> int:
    num = _number(value)
    hour = math.floor(num) if num is not None else default
    return _clamp(hour, lo, hi)


def _window(raw: Mapping[str, Any]) -> tuple[int, int]:
    start = _hour(_pick(raw, "startHour", "start_hour"), DEFAULT_START_HOUR, 0, 23)
    end = _hour(_pick(raw, "endHour", "end_hour"), DEFAULT_END_HOUR, 1, 24)
    if start >= end:
        return DEFAULT_START_HOUR, DEFAULT_END_HOUR
    return start, end


def _parse_day_rule(item: Any) -> DaySchedulePreference | None:
    if isinstance(item, DaySchedulePreference):
        item = item.to_dict()
    if not isinstance(item, Mapping):
        return None
    weekday = _integer(item.get("weekday"))
    if weekday is None or weekday not in WEEKDAYS:
        return None
    enabled = item.get("enabled")
    start, end = _window(item)
    return DaySchedulePreference(
        weekday=weekday,
        enabled=enabled if isinstance(enabled, bool) else True,
        start_hour=start,
        end_hour=end,
    )


def _parse_legacy_rules(raw: Mapping[str, Any]) -> list[DaySchedulePreference]:
    """Expand the old single-window shape into seven day rules."""
    start, end = _window(raw)
    active = _pick(raw, "activeWeekdays", "active_weekdays")
    if isinstance(active, (list, tuple)):
        active_days = {d for d in map(_integer, active) if d is not None and d in WEEKDAYS}
    else:
        active_days = set(WEEKDAYS)
    return [
        DaySchedulePreference(
            weekday=d, enabled=d in active_days, start_hour=start, end_hour=end
        )
        for d in WEEKDAYS
    ]


def _wellness(raw: Mapping[str, Any], name: str) -> int:
    camel, snake, lo, hi = _WELLNESS_LIMITS[name]
    num = _number(_pick(raw, camel, snake))
    if num is None:
        return getattr(DEFAULT_PREFERENCES, name)
    # round half up
    value = num if isinstance(num, int) else math.floor(num + 0.5)
    return _clamp(value, lo, hi)


def normalize_preferences(raw: Any) -> SchedulePreferences:
    """Sanitize a loosely-typed preferences payload. Never raises.

    Accepts the current ``dayRules`` shape, the legacy
    ``startHour``/``endHour``/``activeWeekdays`` shape, an existing
    SchedulePreferences, or anything else (which yields the defaults).
    """
    if isinstance(raw, SchedulePreferences):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping) or not raw:
        return DEFAULT_PREFERENCES

    day_rules_raw = _pick(raw, "dayRules", "day_rules")
    if isinstance(day_rules_raw, (list, tuple)):
        parsed = [r for r in map(_parse_day_rule, day_rules_raw) if r is not None]
    else:
        parsed = _parse_legacy_rules(raw)

    by_weekday = {rule.weekday: rule for rule in DEFAULT_DAY_RULES}
    for rule in parsed:
        by_weekday[rule.weekday] = rule
    day_rules = tuple(by_weekday[d] for d in sorted(by_weekday))
    if not any(rule.enabled for rule in day_rules):
        day_rules = DEFAULT_DAY_RULES

    return SchedulePreferences(
        day_rules=day_rules,
        **{name: _wellness(raw, name) for name in _WELLNESS_LIMITS},
    )
