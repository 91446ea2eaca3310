"""weekly-planner: Deterministic weekly time-block scheduling for one calendar."""

from weekly_planner.blocks import (
    describe_task,
    extract_task_id,
    final_overlap_filter,
    merge_sequential,
)
from weekly_planner.calendar import enumerate_days, scheduling_start
from weekly_planner.greedy import allocate_blocks
from weekly_planner.links import create_google_calendar_link, to_event_body, to_google_calendar_date
from weekly_planner.planner import generate_weekly_schedule
from weekly_planner.preferences import (
    DEFAULT_PREFERENCES,
    DaySchedulePreference,
    SchedulePreferences,
    normalize_preferences,
)
from weekly_planner.resolution import SLOT_MINUTES
from weekly_planner.types import (
    BusyInterval,
    PayloadError,
    ScheduledBlock,
    ScheduleResult,
    TaskAnalysis,
)

__all__ = [
    "BusyInterval",
    "DEFAULT_PREFERENCES",
    "DaySchedulePreference",
    "PayloadError",
    "SLOT_MINUTES",
    "ScheduleResult",
    "ScheduledBlock",
    "SchedulePreferences",
    "TaskAnalysis",
    "allocate_blocks",
    "create_google_calendar_link",
    "describe_task",
    "enumerate_days",
    "extract_task_id",
    "final_overlap_filter",
    "generate_weekly_schedule",
    "merge_sequential",
    "normalize_preferences",
    "scheduling_start",
    "to_event_body",
    "to_google_calendar_date",
]
