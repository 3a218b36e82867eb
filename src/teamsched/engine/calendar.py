# src/teamsched/engine/calendar.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Protocol

import chinese_calendar

from teamsched.domain.errors import CalendarRangeError

_ONE_DAY = timedelta(days=1)

# date.weekday(): Saturday=5, Sunday=6
_WEEKEND = frozenset({5, 6})


class WorkCalendar(Protocol):
    """
    Capability answering "is the organization staffed on this date?".

    Implementations must be deterministic and stateless between calls.
    """

    def is_workday(self, day: date) -> bool: ...


@dataclass(frozen=True)
class TableWorkCalendar:
    """
    Fixed rule table: weekends are off, `holidays` are off, `workdays`
    (make-up working weekends) are on. Empty tables give Monday-Friday.
    """
    holidays: frozenset[date] = field(default_factory=frozenset)
    workdays: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def from_dates(
        cls,
        holidays: Iterable[date] = (),
        workdays: Iterable[date] = (),
    ) -> "TableWorkCalendar":
        return cls(holidays=frozenset(holidays), workdays=frozenset(workdays))

    def is_workday(self, day: date) -> bool:
        if day in self.workdays:
            return True
        if day in self.holidays:
            return False
        return day.weekday() not in _WEEKEND


class ChineseWorkCalendar:
    """
    Mainland China statutory calendar (weekends, public holidays and the
    adjusted working weekends), as shipped by the `chinesecalendar` package.

    The package only carries data for the years it was released with; any
    other date is rejected with CalendarRangeError.
    """

    def is_workday(self, day: date) -> bool:
        try:
            return chinese_calendar.is_workday(day)
        except NotImplementedError as e:
            raise CalendarRangeError(
                f"No work calendar data for {day.isoformat()}",
                details={"date": day.isoformat()},
            ) from e


CALENDARS = {
    "chinese": ChineseWorkCalendar,
    "weekends": TableWorkCalendar,
}


def load_calendar(kind: str) -> WorkCalendar:
    try:
        factory = CALENDARS[kind.lower().strip()]
    except KeyError as e:
        raise ValueError(
            f"Unknown work calendar {kind!r}; expected one of {sorted(CALENDARS)}"
        ) from e
    return factory()


def next_day(day: date) -> date:
    try:
        return day + _ONE_DAY
    except OverflowError as e:
        raise CalendarRangeError(
            f"No date after {day.isoformat()}",
            details={"date": day.isoformat()},
        ) from e


def add_workdays(calendar: WorkCalendar, start: date, n: int) -> date:
    """
    Date on which the nth workday is consumed, counting from `start`.

    `start` itself is workday #1 when it is a workday. For n <= 0 the start
    date is returned unchanged. This is how a task's plan end date is derived
    from its start date and duration.
    """
    if n <= 0:
        return start

    current = start
    consumed = 1 if calendar.is_workday(current) else 0

    while consumed < n:
        current = next_day(current)
        if calendar.is_workday(current):
            consumed += 1

    return current


def workdays_between(calendar: WorkCalendar, start: date, end: date) -> int:
    """Workdays in the closed range [start, end]; 0 when start > end."""
    if start > end:
        return 0

    count = 0
    current = start
    while True:
        if calendar.is_workday(current):
            count += 1
        if current == end:
            return count
        current += _ONE_DAY


def calendar_days_between(start: date, end: date) -> int:
    return abs((end - start).days)
