# src/teamsched/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class TeamSchedError(Exception):
    """
    Base domain error.

    Every scheduling rejection is one of these. The API layer maps them to
    HTTP responses consistently; none of them is fatal to the process.
    """
    message: str
    code: str = "TEAMSCHED_ERROR"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationError(TeamSchedError):
    code: str = "VALIDATION_ERROR"


@dataclass
class NotFoundError(TeamSchedError):
    code: str = "NOT_FOUND"


@dataclass
class ConflictError(TeamSchedError):
    code: str = "CONFLICT"


@dataclass
class InvalidPriorityError(ValidationError):
    code: str = "INVALID_PRIORITY"


@dataclass
class ContainmentViolationError(ValidationError):
    """Child date range lies outside its parent's range."""
    code: str = "CONTAINMENT_VIOLATION"


@dataclass
class SiblingOverlapError(ValidationError):
    """Two requirements of one project overlap in time."""
    code: str = "SIBLING_OVERLAP"


@dataclass
class TimeSlotConflictError(ValidationError):
    """Same person already has a colliding task in the same requirement."""
    code: str = "TIME_SLOT_CONFLICT"


@dataclass
class CapacityExceededError(ValidationError):
    """
    A third concurrent task for one person.

    details carry suggested_date / suggested_slot: the earliest half-day at
    which one of the colliding tasks has vacated.
    """
    code: str = "CAPACITY_EXCEEDED"


@dataclass
class PriorityCollisionError(ValidationError):
    code: str = "PRIORITY_COLLISION"


@dataclass
class DependencyError(ValidationError):
    code: str = "DEPENDENCY_ERROR"


@dataclass
class SelfReferenceError(DependencyError):
    code: str = "SELF_REFERENCE"


@dataclass
class CycleDetectedError(DependencyError):
    code: str = "CYCLE_DETECTED"


@dataclass
class DuplicateEdgeError(DependencyError):
    code: str = "DUPLICATE_EDGE"


@dataclass
class CalendarRangeError(ValidationError):
    """A date the work calendar has no data for, or past the last representable date."""
    code: str = "CALENDAR_OUT_OF_RANGE"
