"""Weekly planning: compose the normalizer, day walk, allocator and post-processing.

Re-planning with identical inputs (including ``now``) yields identical
output. Different ``now`` values legitimately move the schedule forward, so
tests and callers that need stability pin ``now``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from weekly_planner.blocks import final_overlap_filter, merge_sequential
from weekly_planner.calendar import scheduling_start
from weekly_planner.greedy import allocate_blocks
from weekly_planner.loaders import load_analysis, load_busy_intervals
from weekly_planner.preferences import normalize_preferences
from weekly_planner.resolution import rounded_effort_minutes, to_local
from weekly_planner.types import BusyInterval, ScheduleResult, TaskAnalysis

logger = logging.getLogger(__name__)


def _shortfalls(
    analysis: Iterable[TaskAnalysis], placed: Mapping[str, int]
) -> dict[str, int]:
    shortfall: dict[str, int] = {}
    for task in analysis:
        needed = rounded_effort_minutes(task.estimated_hours) - placed.get(task.id, 0)
        if needed > 0:
            shortfall[task.id] = needed
    return shortfall


def generate_weekly_schedule(
    analysis: Iterable[TaskAnalysis | Mapping[str, Any]],
    busy: Iterable[BusyInterval | Mapping[str, Any]] = (),
    preferences: Any = None,
    now: datetime | None = None,
) -> ScheduleResult:
    """Plan work blocks for the scored tasks around busy time.

    Args:
        analysis: TaskAnalysis objects or their camelCase dicts.
        busy: BusyInterval objects or ``{"startISO", "endISO"}`` dicts.
        preferences: Any preferences payload; normalized here.
        now: Current instant. Defaults to the local clock.

    Returns:
        ScheduleResult. Tasks that could not be placed are listed in
        ``unplaced_task_ids``; partly placed ones appear in
        ``shortfall_minutes``.

    Raises:
        PayloadError: If task dicts fail validation.
    """
    tasks = load_analysis(analysis)
    intervals = load_busy_intervals(busy)
    prefs = normalize_preferences(preferences)
    now = to_local(now) if now is not None else datetime.now()
    start = scheduling_start(now, prefs)

    run = allocate_blocks(tasks, intervals, prefs, start, now=now)
    blocks = final_overlap_filter(merge_sequential(run.blocks), intervals)

    placed: dict[str, int] = {}
    for block in blocks:
        placed[block.task_id] = placed.get(block.task_id, 0) + block.minutes
    unplaced = tuple(t.id for t in tasks if t.id not in placed)
    if unplaced:
        logger.info("%d of %d tasks could not be scheduled: %s",
                    len(unplaced), len(tasks), ", ".join(unplaced))

    return ScheduleResult(
        blocks=tuple(blocks),
        unplaced_task_ids=unplaced,
        shortfall_minutes=_shortfalls(tasks, placed),
        breaks=tuple(run.breaks),
        preferences=prefs,
        scheduling_start=start,
        planning_days=run.planning_days,
        busy=tuple(intervals),
    )
