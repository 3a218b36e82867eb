from __future__ import annotations

import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .states import HalfDaySlot, TaskStatus, TaskType, UserRole


RecordId = Annotated[str, Field(min_length=1, max_length=256)]
Title = Annotated[str, Field(min_length=1, max_length=512)]


class _DatedInput(BaseModel):
    """
    Shared start/end handling for projects and requirements: both dates or
    neither, and start on or before end.
    """
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @model_validator(mode="after")
    def _validate_dates(self):
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[RecordId] = None
    name: Title
    role: UserRole


class UserView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    role: UserRole
    created_at: int


class ProjectCreate(_DatedInput):
    """
    API input model for creating or replacing a project.
    """
    model_config = ConfigDict(extra="forbid")

    id: Optional[RecordId] = None
    title: Title
    description: Optional[str] = None
    priority: int = 0


class ProjectView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    description: Optional[str] = None
    priority: int
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    created_at: int
    updated_at: int


class RequirementCreate(_DatedInput):
    """
    API input model for creating or replacing a requirement.

    A requirement either belongs to a project (project_id set) or stands
    alone; only the former is subject to project containment and sibling
    overlap checks.
    """
    model_config = ConfigDict(extra="forbid")

    id: Optional[RecordId] = None
    title: Title
    priority: int
    project_id: Optional[RecordId] = None


class RequirementView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    priority: int
    project_id: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    created_at: int
    updated_at: int


class TaskCreate(BaseModel):
    """
    API input model for creating or replacing a task.

    plan_end_date is not accepted: it is derived from plan_start_date and
    duration_workdays over the work calendar.
    """
    model_config = ConfigDict(extra="forbid")

    id: Optional[RecordId] = None
    title: Title
    type: TaskType
    requirement_id: Optional[RecordId] = None
    user_id: RecordId
    priority: int
    plan_start_date: dt.date
    start_slot: HalfDaySlot = HalfDaySlot.MORNING
    duration_workdays: Annotated[int, Field(gt=0, le=3650)]
    end_slot: HalfDaySlot = HalfDaySlot.AFTERNOON
    forecast_end_date: Optional[dt.date] = None
    status: TaskStatus = TaskStatus.TODO

    @model_validator(mode="after")
    def _validate_task_type(self):
        if self.type is TaskType.IN_REQUIREMENT and not self.requirement_id:
            raise ValueError("requirement_id is required for IN_REQUIREMENT tasks")
        if self.type is TaskType.STANDALONE:
            self.requirement_id = None
        return self


class TaskView(BaseModel):
    """
    API output model for a single task.
    """
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    type: TaskType
    requirement_id: Optional[str] = None
    user_id: str
    priority: int

    plan_start_date: dt.date
    start_slot: HalfDaySlot
    duration_workdays: int
    plan_end_date: dt.date
    end_slot: HalfDaySlot
    forecast_end_date: Optional[dt.date] = None

    status: TaskStatus
    created_at: int
    updated_at: int

    # predecessor task ids
    dependencies: list[str] = Field(default_factory=list)


class TaskListResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tasks: list[TaskView]
    total: int


class DependencyCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    predecessor_id: RecordId


class DeleteResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: bool = True
    deleted: dict[str, int] = Field(default_factory=dict)


class WorkdayQueryResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: dt.date
    end: dt.date
    workdays: int
    calendar_days: int


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str
    code: str
    details: dict = Field(default_factory=dict)
