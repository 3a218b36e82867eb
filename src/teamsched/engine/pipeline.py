# src/teamsched/engine/pipeline.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from teamsched.domain.errors import (
    CapacityExceededError,
    ContainmentViolationError,
    InvalidPriorityError,
    PriorityCollisionError,
    SiblingOverlapError,
    TimeSlotConflictError,
    ValidationError,
)
from teamsched.domain.states import HalfDaySlot
from teamsched.logging import get_logger

from .admission import (
    RejectPriorityCollision,
    RejectWithSuggestion,
    ScheduledTask,
    admit,
)
from .calendar import WorkCalendar, add_workdays
from .containment import (
    DatedRecord,
    first_child_outside,
    first_overlapping_sibling,
    within_parent,
)
from .graph import DependencyEdge, validate_new_edge
from .intervals import DateRange, TaskInterval, slots_conflict

_LOG = get_logger(__name__)

MIN_PRIORITY = 0
MAX_PRIORITY = 5


@dataclass(frozen=True)
class TaskWriteRequest:
    """
    Scheduling-relevant fields of a task create/update.

    task_id is set for updates so the task does not collide with itself.
    """
    user_id: str
    priority: int
    plan_start_date: date
    duration_workdays: int
    start_slot: HalfDaySlot = HalfDaySlot.MORNING
    end_slot: HalfDaySlot = HalfDaySlot.AFTERNOON
    requirement_id: Optional[str] = None
    task_id: Optional[str] = None


@dataclass(frozen=True)
class TaskWriteSnapshot:
    """
    Persisted state read right before validating one task write.
    """
    requirement_range: Optional[DateRange] = None
    person_tasks: Sequence[ScheduledTask] = field(default_factory=tuple)


def check_priority(priority: int) -> None:
    if not (MIN_PRIORITY <= priority <= MAX_PRIORITY):
        raise InvalidPriorityError(
            f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}",
            details={"priority": priority},
        )


def resolve_task_interval(
    calendar: WorkCalendar,
    start_date: date,
    start_slot: HalfDaySlot,
    duration_workdays: int,
    end_slot: HalfDaySlot,
) -> TaskInterval:
    end_date = add_workdays(calendar, start_date, duration_workdays)
    interval = TaskInterval(start_date, start_slot, end_date, end_slot)
    if not interval.is_well_ordered():
        raise ValidationError(
            "Task ends before it starts",
            code="INVALID_INTERVAL",
            details=interval.as_dict(),
        )
    return interval


def _check_contained(child: DateRange, parent: Optional[DateRange], what: str) -> None:
    if parent is not None and not within_parent(child, parent):
        raise ContainmentViolationError(
            f"{what} ({child.start} to {child.end}) must lie within "
            f"its parent ({parent.start} to {parent.end})",
            details={"parent_range": parent.as_dict(), "child_range": child.as_dict()},
        )


def _check_children_inside(proposed: DateRange, children: Iterable[DatedRecord], what: str) -> None:
    child = first_child_outside(proposed, children)
    if child is not None and child.range is not None:
        raise ContainmentViolationError(
            f'Cannot change {what} dates: "{child.title}" '
            f"({child.range.start} to {child.range.end}) would fall outside the new range",
            details={
                "parent_range": proposed.as_dict(),
                "child_range": child.range.as_dict(),
                "child_id": child.id,
                "child_title": child.title,
            },
        )


def validate_task_write(
    calendar: WorkCalendar,
    request: TaskWriteRequest,
    snapshot: TaskWriteSnapshot,
) -> TaskInterval:
    """
    Runs every scheduling check for one task write and returns the resolved
    interval. The first failing check raises; nothing is partially applied.
    """
    check_priority(request.priority)

    interval = resolve_task_interval(
        calendar,
        request.plan_start_date,
        request.start_slot,
        request.duration_workdays,
        request.end_slot,
    )

    _check_contained(interval.dates, snapshot.requirement_range, "Task dates")

    others = [
        t
        for t in snapshot.person_tasks
        if t.user_id == request.user_id and t.id != request.task_id
    ]

    if request.requirement_id is not None:
        for other in others:
            if other.requirement_id == request.requirement_id and slots_conflict(
                other.interval, interval
            ):
                raise TimeSlotConflictError(
                    "Time conflict: this person already has a task in the same "
                    f"requirement from {other.interval.start_date} {other.interval.start_slot} "
                    f"to {other.interval.end_date} {other.interval.end_slot}",
                    details={"conflicting_id": other.id, "interval": other.interval.as_dict()},
                )

    verdict = admit(request.user_id, interval, request.priority, others)

    if isinstance(verdict, RejectWithSuggestion):
        raise CapacityExceededError(
            "This person already has 2 tasks in this period; a third concurrent "
            f"task is not allowed. Try starting from {verdict.suggested_date} "
            f"{verdict.suggested_slot}.",
            details={
                "suggested_date": verdict.suggested_date.isoformat(),
                "suggested_slot": verdict.suggested_slot.value,
                "conflicting_ids": list(verdict.conflicting_ids),
            },
        )
    if isinstance(verdict, RejectPriorityCollision):
        raise PriorityCollisionError(
            "Concurrent tasks must have different priorities; a task with "
            f"priority {verdict.priority} already runs in this period",
            details={"conflicting_id": verdict.conflicting_id, "priority": verdict.priority},
        )

    return interval


def validate_requirement_write(
    proposed: Optional[DateRange],
    priority: int,
    project_range: Optional[DateRange] = None,
    siblings: Iterable[DatedRecord] = (),
    child_tasks: Iterable[DatedRecord] = (),
) -> None:
    """
    siblings are the other requirements of the same project (the edited
    requirement excluded); child_tasks are its existing tasks.
    """
    check_priority(priority)
    if proposed is None:
        return

    _check_contained(proposed, project_range, "Requirement dates")

    sibling = first_overlapping_sibling(proposed, siblings)
    if sibling is not None and sibling.range is not None:
        raise SiblingOverlapError(
            f'Requirement dates overlap existing requirement "{sibling.title}" '
            f"({sibling.range.start} to {sibling.range.end}); requirements "
            "of one project must not overlap",
            details={
                "conflicting_id": sibling.id,
                "conflicting_title": sibling.title,
                "range": sibling.range.as_dict(),
            },
        )

    _check_children_inside(proposed, child_tasks, "requirement")


def validate_project_write(
    proposed: Optional[DateRange],
    priority: int,
    child_requirements: Iterable[DatedRecord] = (),
) -> None:
    check_priority(priority)
    if proposed is None:
        return
    _check_children_inside(proposed, child_requirements, "project")


def validate_dependency(
    edges: Iterable[DependencyEdge],
    predecessor_id: str,
    successor_id: str,
) -> None:
    validate_new_edge(edges, predecessor_id, successor_id)
    _LOG.debug("Dependency %s -> %s accepted", predecessor_id, successor_id)
