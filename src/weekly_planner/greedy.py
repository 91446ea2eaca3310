"""Greedy slot allocator.

Walks enabled days in 30-minute slots. At each free slot it ranks the tasks
that may still be worked on and places the best one that fits: one slot of a
splittable task, or the whole of a non-splittable task when its full
duration fits contiguously. Rest breaks are injected after enough focus time.

This is a deterministic heuristic, not an optimal scheduler. Tasks that
cannot be placed are simply left with remaining minutes; the caller reports
them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import cmp_to_key

from weekly_planner.blocks import describe_task
from weekly_planner.calendar import day_window, enumerate_days, rule_for
from weekly_planner.occupancy import Occupancy, can_fit_contiguous
from weekly_planner.preferences import SchedulePreferences
from weekly_planner.resolution import SLOT, SLOT_MINUTES, rounded_effort_minutes
from weekly_planner.types import BusyInterval, ScheduledBlock, TaskAnalysis

logger = logging.getLogger(__name__)

MIN_PLANNING_DAYS = 7
MAX_PLANNING_DAYS = 60

DUE_SOON_HOURS = 72
DEADLINE_GAP_HOURS = 24
CRITICAL_PRIORITY = 85
CRITICAL_WINDOW_HOURS = 48

_HOUR_SECONDS = 3600.0


@dataclass
class QueueItem:
    """Allocator-owned work counter for one task."""

    task: TaskAnalysis
    deadline: datetime
    not_before: datetime | None
    splittable: bool
    total_minutes: int
    remaining_minutes: int

    @property
    def untouched(self) -> bool:
        return self.remaining_minutes == self.total_minutes

    def hours_to_deadline(self, at: datetime) -> float:
        return (self.deadline - at).total_seconds() / _HOUR_SECONDS

    def slack(self, at: datetime) -> timedelta:
        """Time to deadline minus the work still needed (at least one slot)."""
        needed = max(self.remaining_minutes, SLOT_MINUTES)
        return self.deadline - at - timedelta(minutes=needed)


@dataclass
class AllocationRun:
    """Raw output of one allocator pass, before post-processing."""

    start: datetime
    planning_days: int
    queue: list[QueueItem]
    blocks: list[ScheduledBlock] = field(default_factory=list)
    breaks: list[BusyInterval] = field(default_factory=list)


def build_queue(analysis: Iterable[TaskAnalysis], now: datetime) -> list[QueueItem]:
    """Wrap tasks with rounded effort. Tasks with no positive effort are dropped."""
    queue: list[QueueItem] = []
    for task in analysis:
        minutes = rounded_effort_minutes(task.estimated_hours)
        if minutes <= 0:
            logger.debug("Skipping task %r: no positive effort", task.id)
            continue
        queue.append(
            QueueItem(
                task=task,
                deadline=task.deadline_at(now),
                not_before=task.not_before_at(),
                splittable=task.splittable,
                total_minutes=minutes,
                remaining_minutes=minutes,
            )
        )
    return queue


def planning_days(
    analysis: Iterable[TaskAnalysis], start: datetime, now: datetime
) -> int:
    """Horizon in calendar days: covers the latest deadline, 7 to 60 days."""
    latest = start
    for task in analysis:
        latest = max(latest, task.deadline_at(now))
    days_to_latest = math.ceil((latest - start) / timedelta(days=1)) + 1
    return max(MIN_PLANNING_DAYS, min(MAX_PLANNING_DAYS, days_to_latest))


def compare_candidates(a: QueueItem, b: QueueItem, at: datetime) -> int:
    """Candidate ordering at slot start ``at``. Negative means a goes first.

    1. due within 72h before not due soon
    2. both due soon and deadlines 24h+ apart: nearer deadline first
    3. critical (priority >= 85, due within 48h) first
    4. higher priority score
    5. higher urgency score
    6. less slack
    7. earlier deadline
    """
    a_hours = a.hours_to_deadline(at)
    b_hours = b.hours_to_deadline(at)
    a_soon = a_hours <= DUE_SOON_HOURS
    b_soon = b_hours <= DUE_SOON_HOURS
    if a_soon != b_soon:
        return -1 if a_soon else 1
    if a_soon and abs(a_hours - b_hours) >= DEADLINE_GAP_HOURS:
        return -1 if a_hours < b_hours else 1

    a_critical = a.task.priority_score >= CRITICAL_PRIORITY and a_hours <= CRITICAL_WINDOW_HOURS
    b_critical = b.task.priority_score >= CRITICAL_PRIORITY and b_hours <= CRITICAL_WINDOW_HOURS
    if a_critical != b_critical:
        return -1 if a_critical else 1
    if a.task.priority_score != b.task.priority_score:
        return -1 if a.task.priority_score > b.task.priority_score else 1
    if a.task.urgency_score != b.task.urgency_score:
        return -1 if a.task.urgency_score > b.task.urgency_score else 1

    a_slack = a.slack(at)
    b_slack = b.slack(at)
    if a_slack != b_slack:
        return -1 if a_slack < b_slack else 1
    if a.deadline != b.deadline:
        return -1 if a.deadline < b.deadline else 1
    return 0


def _candidates(
    queue: Sequence[QueueItem],
    start: datetime,
    end: datetime,
    worked_today: int,
    max_work: int,
) -> list[QueueItem]:
    eligible = [
        item for item in queue
        if item.remaining_minutes > 0
        and item.deadline >= end
        and (item.not_before is None or start >= item.not_before)
        and worked_today + (SLOT_MINUTES if item.splittable else item.total_minutes) <= max_work
    ]
    return sorted(eligible, key=cmp_to_key(lambda a, b: compare_candidates(a, b, start)))


def _place(run: AllocationRun, occupancy: Occupancy, item: QueueItem,
           start: datetime, minutes: int) -> None:
    end = start + timedelta(minutes=minutes)
    run.blocks.append(
        ScheduledBlock(
            task_id=item.task.id,
            task_title=item.task.title,
            start=start,
            end=end,
            minutes=minutes,
            calendar_description=describe_task(item.task),
        )
    )
    occupancy.reserve(start, end)
    item.remaining_minutes -= minutes
    logger.debug("Placed %r %s-%s (%d min)", item.task.id, start, end, minutes)


def allocate_blocks(
    analysis: Sequence[TaskAnalysis],
    busy: Sequence[BusyInterval],
    prefs: SchedulePreferences,
    start: datetime,
    now: datetime | None = None,
) -> AllocationRun:
    """Greedy pass over the planning horizon. Never raises for bad task data.

    Args:
        analysis: Scored tasks. Read-only.
        busy: Caller busy intervals (local time). Read-only.
        prefs: Normalized preferences.
        start: First schedulable instant (see calendar.scheduling_start).
        now: Fallback instant for unparseable deadlines. Defaults to start.

    Returns:
        AllocationRun whose blocks are in chronological order, one block per
        slot for splittable tasks and one block per non-splittable task.
    """
    now = now if now is not None else start
    days = planning_days(analysis, start, now)
    queue = build_queue(analysis, now)
    run = AllocationRun(start=start, planning_days=days, queue=queue)
    occupancy = Occupancy(busy=tuple(busy))

    work_days = [
        d for d in enumerate_days(start, days) if rule_for(prefs, d).enabled
    ]
    logger.debug(
        "Allocating %d tasks over %d days (%d enabled) from %s",
        len(queue), days, len(work_days), start,
    )

    max_work = prefs.max_work_minutes_per_day
    break_trigger = prefs.break_trigger_minutes
    break_length = timedelta(minutes=min(SLOT_MINUTES, prefs.short_break_minutes))

    for day in work_days:
        day_start, day_end = day_window(rule_for(prefs, day), day)
        slot_start = max(start, day_start) if day == start.date() else day_start
        worked_today = 0
        focus_since_break = 0

        while slot_start < day_end:
            slot_end = slot_start + SLOT
            if slot_end > day_end or worked_today >= max_work:
                break
            current = slot_start
            slot_start = slot_end

            if occupancy.is_busy(current, slot_end):
                continue
            if occupancy.is_planned(current, slot_end):
                # cannot tell a placed block from a break here
                focus_since_break = 0
                continue
            if focus_since_break >= break_trigger:
                run.breaks.append(occupancy.reserve(current, current + break_length))
                logger.debug("Break at %s after %d focus minutes", current, focus_since_break)
                focus_since_break = 0
                continue

            chosen = next(
                (
                    item for item in _candidates(queue, current, slot_end, worked_today, max_work)
                    if item.splittable
                    or (
                        item.untouched
                        and can_fit_contiguous(
                            occupancy, current, item.total_minutes, day_end,
                            item.deadline, item.not_before,
                        )
                    )
                ),
                None,
            )
            if chosen is None:
                continue

            minutes = SLOT_MINUTES if chosen.splittable else chosen.total_minutes
            _place(run, occupancy, chosen, current, minutes)
            worked_today += minutes
            focus_since_break += minutes

    for item in queue:
        if item.remaining_minutes > 0:
            logger.debug(
                "Task %r left with %d of %d minutes unplaced",
                item.task.id, item.remaining_minutes, item.total_minutes,
            )
    return run
