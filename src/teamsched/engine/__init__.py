# src/teamsched/engine/__init__.py
"""
Scheduling and consistency engine.

Pure functions over snapshots supplied by the caller; nothing here reads or
writes storage.

- calendar: workday capability + workday arithmetic
- intervals: half-day interval model
- graph: dependency cycle detection
- containment: project/requirement/task date nesting
- admission: per-person concurrency admission control
- pipeline: composes the checks for one write
"""

from .admission import (
    Accept,
    RejectPriorityCollision,
    RejectWithSuggestion,
    ScheduledTask,
    admit,
)
from .calendar import (
    ChineseWorkCalendar,
    TableWorkCalendar,
    WorkCalendar,
    add_workdays,
    load_calendar,
    workdays_between,
)
from .containment import DatedRecord
from .graph import DependencyEdge, would_create_cycle
from .intervals import DateRange, TaskInterval, overlaps

__all__ = [
    "Accept",
    "RejectPriorityCollision",
    "RejectWithSuggestion",
    "ScheduledTask",
    "admit",
    "ChineseWorkCalendar",
    "TableWorkCalendar",
    "WorkCalendar",
    "add_workdays",
    "load_calendar",
    "workdays_between",
    "DatedRecord",
    "DependencyEdge",
    "would_create_cycle",
    "DateRange",
    "TaskInterval",
    "overlaps",
]
