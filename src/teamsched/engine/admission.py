# src/teamsched/engine/admission.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from teamsched.domain.states import HalfDaySlot
from teamsched.logging import get_logger

from .intervals import TaskInterval, earliest_end, next_half_day, slots_conflict

_LOG = get_logger(__name__)

# Concurrent tasks one person may hold; with two, priorities must differ.
MAX_CONCURRENT_PER_PERSON = 2


@dataclass(frozen=True)
class ScheduledTask:
    """
    Engine view of an already persisted task.
    """
    id: str
    user_id: str
    priority: int
    interval: TaskInterval
    title: str = ""
    requirement_id: Optional[str] = None


@dataclass(frozen=True)
class Accept:
    overlapping_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class RejectWithSuggestion:
    """Person is at capacity; retry from suggested_date/suggested_slot."""
    suggested_date: date
    suggested_slot: HalfDaySlot
    conflicting_ids: tuple[str, ...]


@dataclass(frozen=True)
class RejectPriorityCollision:
    conflicting_id: str
    priority: int


AdmissionVerdict = Union[Accept, RejectWithSuggestion, RejectPriorityCollision]


def overlapping_tasks(
    person_id: str,
    proposed: TaskInterval,
    existing: Iterable[ScheduledTask],
    exclude_task_id: Optional[str] = None,
) -> list[ScheduledTask]:
    return [
        t
        for t in existing
        if t.user_id == person_id
        and t.id != exclude_task_id
        and slots_conflict(t.interval, proposed)
    ]


def admit(
    person_id: str,
    proposed: TaskInterval,
    proposed_priority: int,
    existing: Iterable[ScheduledTask],
    exclude_task_id: Optional[str] = None,
) -> AdmissionVerdict:
    """
    Decide whether `person_id` can take on a task over `proposed`.

    At most two overlapping tasks per person, and two only when their
    priorities differ. A capacity rejection carries the half-day right after
    the earliest moment one of the colliding tasks (or the proposal itself)
    ends, so the caller can offer a retry time.
    """
    overlapping = overlapping_tasks(person_id, proposed, existing, exclude_task_id)
    k = len(overlapping)

    if k >= MAX_CONCURRENT_PER_PERSON:
        first_two = sorted(overlapping, key=lambda t: t.interval.end_key)[:2]
        vacated = earliest_end(*(t.interval for t in first_two), proposed)
        suggested_date, suggested_slot = next_half_day(vacated.end_date, vacated.end_slot)
        _LOG.info(
            "Admission rejected for %s: %d overlapping task(s); suggest %s %s",
            person_id,
            k,
            suggested_date.isoformat(),
            suggested_slot.value,
        )
        return RejectWithSuggestion(
            suggested_date=suggested_date,
            suggested_slot=suggested_slot,
            conflicting_ids=tuple(t.id for t in overlapping),
        )

    if k == 1:
        other = overlapping[0]
        if other.priority == proposed_priority:
            _LOG.info(
                "Admission rejected for %s: priority %d already taken by task %s",
                person_id,
                proposed_priority,
                other.id,
            )
            return RejectPriorityCollision(conflicting_id=other.id, priority=proposed_priority)

    return Accept(overlapping_ids=tuple(t.id for t in overlapping))
