# src/teamsched/engine/intervals.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from teamsched.domain.states import HalfDaySlot

from .calendar import next_day

HalfDayKey = tuple[date, int]


def half_day_key(day: date, slot: HalfDaySlot) -> HalfDayKey:
    return (day, slot.ordinal)


@dataclass(frozen=True)
class DateRange:
    """
    Closed calendar-date range, used by requirements and projects.
    """
    start: date
    end: date

    def as_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class TaskInterval:
    """
    Half-day resolution interval occupied by a task.

    Expected invariant: start_key <= end_key. The boundary layer checks it
    (see `is_well_ordered`) before any interval reaches the engine.
    """
    start_date: date
    start_slot: HalfDaySlot
    end_date: date
    end_slot: HalfDaySlot

    @property
    def start_key(self) -> HalfDayKey:
        return half_day_key(self.start_date, self.start_slot)

    @property
    def end_key(self) -> HalfDayKey:
        return half_day_key(self.end_date, self.end_slot)

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    def is_well_ordered(self) -> bool:
        return self.start_key <= self.end_key

    def as_dict(self) -> dict[str, str]:
        return {
            "start_date": self.start_date.isoformat(),
            "start_slot": self.start_slot.value,
            "end_date": self.end_date.isoformat(),
            "end_slot": self.end_slot.value,
        }


class EndOrder(Enum):
    A_EARLIER = "A_EARLIER"
    B_EARLIER = "B_EARLIER"
    EQUAL = "EQUAL"


def overlaps(a: TaskInterval, b: TaskInterval) -> bool:
    """Closed-interval overlap on the (date, slot) order."""
    return not (a.end_key < b.start_key or b.end_key < a.start_key)


def compare_end(a: TaskInterval, b: TaskInterval) -> EndOrder:
    if a.end_key < b.end_key:
        return EndOrder.A_EARLIER
    if b.end_key < a.end_key:
        return EndOrder.B_EARLIER
    return EndOrder.EQUAL


def earliest_end(first: TaskInterval, *others: TaskInterval) -> TaskInterval:
    """The interval that ends first; the earliest listed wins a tie."""
    best = first
    for interval in others:
        if compare_end(interval, best) is EndOrder.A_EARLIER:
            best = interval
    return best


def slots_conflict(a: TaskInterval, b: TaskInterval) -> bool:
    """
    Half-day conflict rule used for per-person scheduling.

    - Disjoint date ranges never conflict.
    - Two single-day tasks on the same date conflict only when their slot
      ranges intersect: MORNING-only and AFTERNOON-only share the day
      peacefully, a full-day task collides with anything.
    - Any other date overlap is a conflict, even when a multi-day task only
      touches the other task's free half of a boundary day.
    """
    if a.end_date < b.start_date or b.end_date < a.start_date:
        return False

    if a.is_single_day and b.is_single_day and a.start_date == b.start_date:
        return not (
            a.end_slot.ordinal < b.start_slot.ordinal
            or b.end_slot.ordinal < a.start_slot.ordinal
        )

    return True


def next_half_day(day: date, slot: HalfDaySlot) -> tuple[date, HalfDaySlot]:
    if slot is HalfDaySlot.MORNING:
        return day, HalfDaySlot.AFTERNOON
    return next_day(day), HalfDaySlot.MORNING
