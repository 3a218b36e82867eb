# src/teamsched/domain/states.py
from __future__ import annotations

from enum import StrEnum


class HalfDaySlot(StrEnum):
    """
    Finest scheduling granularity: one half of a working day.

    Ordered MORNING < AFTERNOON; use `ordinal` when building sort keys.
    """

    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"

    @property
    def ordinal(self) -> int:
        return 0 if self is HalfDaySlot.MORNING else 1


class TaskType(StrEnum):
    """
    IN_REQUIREMENT tasks carry a requirement_id; STANDALONE tasks never do.
    """

    IN_REQUIREMENT = "IN_REQUIREMENT"
    STANDALONE = "STANDALONE"


class TaskStatus(StrEnum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class UserRole(StrEnum):
    MANAGEMENT = "MANAGEMENT"
    FRONTEND = "FRONTEND"
    BACKEND = "BACKEND"
    PRODUCT = "PRODUCT"
    OPERATIONS = "OPERATIONS"
    STRATEGY = "STRATEGY"
