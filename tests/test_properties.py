"""Hypothesis property-based tests.

Properties that must hold for all inputs, verified by random generation.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import dt, make_prefs, make_task, prefs_payload

MONDAY = dt("mon", "08:00")


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

_json_scalars = (
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=True, allow_infinity=True)
    | st.text(max_size=8)
)

_json_values = st.recursive(
    _json_scalars,
    lambda children: st.lists(children, max_size=8)
    | st.dictionaries(st.text(max_size=8), children, max_size=6),
    max_leaves=30,
)

_pref_keys = st.sampled_from([
    "dayRules", "day_rules", "startHour", "endHour", "activeWeekdays",
    "maxWorkMinutesPerDay", "breakEveryFocusMinutes", "shortBreakMinutes",
    "maxContinuousFocusMinutes", "weekday", "enabled",
])

_day_rule = st.fixed_dictionaries({
    "weekday": st.integers(min_value=-2, max_value=9) | _json_scalars,
    "enabled": st.booleans() | _json_scalars,
    "startHour": st.integers(min_value=-5, max_value=30) | _json_scalars,
    "endHour": st.integers(min_value=-5, max_value=30) | _json_scalars,
})

_pref_payloads = (
    _json_values
    | st.dictionaries(_pref_keys, _json_values, max_size=6)
    | st.fixed_dictionaries({"dayRules": st.lists(_day_rule | _json_values, max_size=9)})
)

_hours_from_monday = st.integers(min_value=-12, max_value=200)


@st.composite
def _tasks(draw):
    count = draw(st.integers(min_value=1, max_value=5))
    tasks = []
    for i in range(count):
        deadline = MONDAY + timedelta(hours=draw(_hours_from_monday))
        not_before = draw(st.none() | st.integers(min_value=0, max_value=120))
        tasks.append(make_task(
            f"T-{i}",
            estimated_hours=draw(st.sampled_from([0.25, 0.5, 1, 1.5, 2, 2.5, 4, 6])),
            deadline=deadline.isoformat(),
            is_splittable=draw(st.sampled_from([None, True, False])),
            not_before=(
                (MONDAY + timedelta(hours=not_before)).isoformat()
                if not_before is not None else None
            ),
            priority_score=draw(st.integers(min_value=0, max_value=100)),
            urgency_score=draw(st.integers(min_value=0, max_value=100)),
        ))
    return tasks


@st.composite
def _busy(draw):
    from weekly_planner.types import BusyInterval

    intervals = []
    for _ in range(draw(st.integers(min_value=0, max_value=4))):
        start = MONDAY + timedelta(minutes=15 * draw(st.integers(min_value=0, max_value=7 * 96)))
        length = timedelta(minutes=15 * draw(st.integers(min_value=1, max_value=16)))
        intervals.append(BusyInterval(start=start, end=start + length))
    return intervals


_pref_names = st.sampled_from(["default", "workweek", "tight_breaks", "one_hour_days"])

_nows = st.sampled_from([
    dt("mon", "08:00"), dt("mon", "10:17"), dt("sun", "22:45"), dt("fri", "16:00"),
])


def _plan(tasks, busy, prefs_name, now):
    from weekly_planner.planner import generate_weekly_schedule

    return generate_weekly_schedule(tasks, busy, prefs_payload(prefs_name), now=now)


# ---------------------------------------------------------------------------
# Property: preference normalization is total
# ---------------------------------------------------------------------------
class TestNormalizeTotal:
    """normalize_preferences never raises and always yields a usable week."""

    @given(raw=_pref_payloads)
    @settings(max_examples=200, deadline=None)
    def test_always_seven_rules_one_enabled(self, raw):
        from weekly_planner.preferences import normalize_preferences

        prefs = normalize_preferences(raw)
        assert [r.weekday for r in prefs.day_rules] == list(range(7))
        assert prefs.enabled_weekdays
        for rule in prefs.day_rules:
            assert 0 <= rule.start_hour < rule.end_hour <= 24

    @given(raw=_pref_payloads)
    @settings(max_examples=200, deadline=None)
    def test_wellness_within_bounds(self, raw):
        from weekly_planner.preferences import normalize_preferences

        prefs = normalize_preferences(raw)
        assert 60 <= prefs.max_work_minutes_per_day <= 960
        assert 30 <= prefs.break_every_focus_minutes <= 360
        assert 5 <= prefs.short_break_minutes <= 60
        assert 30 <= prefs.max_continuous_focus_minutes <= 480

    @given(raw=_pref_payloads)
    @settings(max_examples=100, deadline=None)
    def test_idempotent(self, raw):
        from weekly_planner.preferences import normalize_preferences

        once = normalize_preferences(raw)
        assert normalize_preferences(once) == once
        assert normalize_preferences(once.to_dict()) == once


# ---------------------------------------------------------------------------
# Property: schedule invariants
# ---------------------------------------------------------------------------
class TestScheduleInvariants:
    """Whatever the input, a schedule never breaks its hard constraints."""

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_no_double_booking(self, tasks, busy, prefs_name, now):
        result = _plan(tasks, busy, prefs_name, now)
        ordered = sorted(result.blocks, key=lambda b: b.start)
        for prev, nxt in zip(ordered, ordered[1:]):
            assert prev.end <= nxt.start
        for block in result.blocks:
            for brk in result.breaks:
                assert not (block.start < brk.end and block.end > brk.start)

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_no_busy_overlap(self, tasks, busy, prefs_name, now):
        result = _plan(tasks, busy, prefs_name, now)
        for block in result.blocks:
            for iv in busy:
                assert not iv.overlaps(block.start, block.end)

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_task_windows_respected(self, tasks, busy, prefs_name, now):
        """Blocks start at or after not-before and end by the deadline."""
        by_id = {t.id: t for t in tasks}
        result = _plan(tasks, busy, prefs_name, now)
        for block in result.blocks:
            task = by_id[block.task_id]
            assert block.end <= task.deadline_at(now)
            not_before = task.not_before_at()
            if not_before is not None:
                assert block.start >= not_before
            assert block.start >= result.scheduling_start

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_blocks_inside_enabled_windows(self, tasks, busy, prefs_name, now):
        from weekly_planner.calendar import day_window, rule_for

        prefs = make_prefs(prefs_name)
        result = _plan(tasks, busy, prefs_name, now)
        for block in result.blocks:
            rule = rule_for(prefs, block.start.date())
            assert rule.enabled
            day_start, day_end = day_window(rule, block.start.date())
            assert day_start <= block.start and block.end <= day_end

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_daily_cap(self, tasks, busy, prefs_name, now):
        prefs = make_prefs(prefs_name)
        result = _plan(tasks, busy, prefs_name, now)
        per_day: dict = defaultdict(int)
        for block in result.blocks:
            per_day[block.start.date()] += block.minutes
        assert all(total <= prefs.max_work_minutes_per_day for total in per_day.values())

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_effort_accounting(self, tasks, busy, prefs_name, now):
        """Splittable work never exceeds its rounded effort; atomic work is all or nothing."""
        from weekly_planner.resolution import rounded_effort_minutes

        result = _plan(tasks, busy, prefs_name, now)
        for task in tasks:
            mine = [b for b in result.blocks if b.task_id == task.id]
            rounded = rounded_effort_minutes(task.estimated_hours)
            assert sum(b.minutes for b in mine) <= rounded
            if not task.splittable:
                assert len(mine) <= 1
                assert all(b.minutes == rounded for b in mine)
            for block in mine:
                assert block.minutes == (block.end - block.start) / timedelta(minutes=1)
                assert block.minutes % 30 == 0

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=60, deadline=None)
    def test_unplaced_and_shortfall_consistent(self, tasks, busy, prefs_name, now):
        from weekly_planner.resolution import rounded_effort_minutes

        result = _plan(tasks, busy, prefs_name, now)
        placed = {b.task_id for b in result.blocks}
        assert set(result.unplaced_task_ids) == {t.id for t in tasks} - placed
        for task in tasks:
            minutes = sum(b.minutes for b in result.blocks if b.task_id == task.id)
            expected = rounded_effort_minutes(task.estimated_hours) - minutes
            assert result.shortfall_minutes.get(task.id, 0) == max(0, expected)

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=30, deadline=None)
    def test_deterministic(self, tasks, busy, prefs_name, now):
        assert _plan(tasks, busy, prefs_name, now) == _plan(tasks, busy, prefs_name, now)

    @given(tasks=_tasks(), busy=_busy(), prefs_name=_pref_names, now=_nows)
    @settings(max_examples=30, deadline=None)
    def test_output_already_merged(self, tasks, busy, prefs_name, now):
        from weekly_planner.blocks import merge_sequential

        result = _plan(tasks, busy, prefs_name, now)
        assert merge_sequential(result.blocks) == list(result.blocks)
