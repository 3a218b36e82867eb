"""
Domain layer for teamsched.

- states: slot / type / status / role enums
- models: Pydantic models for API input/output
- errors: scheduling rejections and other domain exceptions
"""

from .states import HalfDaySlot, TaskStatus, TaskType, UserRole
from .errors import (
    CalendarRangeError,
    CapacityExceededError,
    ConflictError,
    ContainmentViolationError,
    CycleDetectedError,
    DependencyError,
    DuplicateEdgeError,
    InvalidPriorityError,
    NotFoundError,
    PriorityCollisionError,
    SelfReferenceError,
    SiblingOverlapError,
    TeamSchedError,
    TimeSlotConflictError,
    ValidationError,
)

__all__ = [
    "HalfDaySlot",
    "TaskStatus",
    "TaskType",
    "UserRole",
    "CalendarRangeError",
    "CapacityExceededError",
    "ConflictError",
    "ContainmentViolationError",
    "CycleDetectedError",
    "DependencyError",
    "DuplicateEdgeError",
    "InvalidPriorityError",
    "NotFoundError",
    "PriorityCollisionError",
    "SelfReferenceError",
    "SiblingOverlapError",
    "TeamSchedError",
    "TimeSlotConflictError",
    "ValidationError",
]
