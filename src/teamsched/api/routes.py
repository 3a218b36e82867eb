# src/teamsched/api/routes.py
from __future__ import annotations

import datetime as dt
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from teamsched.domain.errors import (
    ConflictError,
    NotFoundError,
    TeamSchedError,
    ValidationError,
)
from teamsched.domain.models import (
    DeleteResponse,
    DependencyCreate,
    ErrorResponse,
    ProjectCreate,
    ProjectView,
    RequirementCreate,
    RequirementView,
    TaskCreate,
    TaskListResponse,
    TaskView,
    UserCreate,
    UserView,
    WorkdayQueryResponse,
)
from teamsched.engine.calendar import (
    WorkCalendar,
    add_workdays,
    calendar_days_between,
    workdays_between,
)
from teamsched.logging import get_logger, log_rejection
from teamsched.storage import PlanRepo

from .deps import get_calendar, get_repo

_LOG = get_logger(__name__)
router = APIRouter()


def now_ms() -> int:
    return int(time.time() * 1000)


def _status_for(err: TeamSchedError) -> int:
    if isinstance(err, NotFoundError):
        return 404
    if isinstance(err, ConflictError):
        return 409
    return 400


def _error_response(err: TeamSchedError, action: str) -> JSONResponse:
    log_rejection(_LOG, action, err.code, err.message)
    payload = ErrorResponse(
        error=err.message,
        code=err.code,
        details=err.details or {},
    ).model_dump()
    return JSONResponse(status_code=_status_for(err), content=payload)


@router.get("/healthz")
def healthz() -> dict:
    return {"ok": True}


# -------------------------
# Users
# -------------------------


@router.post("/users", response_model=UserView, status_code=201)
def create_user(user: UserCreate, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.create_user(user, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "create user")


@router.get("/users", response_model=list[UserView])
def list_users(repo: PlanRepo = Depends(get_repo)):
    return repo.list_users()


# -------------------------
# Projects
# -------------------------


@router.post("/projects", response_model=ProjectView, status_code=201)
def create_project(project: ProjectCreate, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.create_project(project, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "create project")


@router.get("/projects", response_model=list[ProjectView])
def list_projects(repo: PlanRepo = Depends(get_repo)):
    return repo.list_projects()


@router.get("/projects/{project_id}", response_model=ProjectView)
def get_project(project_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.get_project(project_id)
    except NotFoundError as e:
        return _error_response(e, "get project")


@router.put("/projects/{project_id}", response_model=ProjectView)
def update_project(project_id: str, project: ProjectCreate, repo: PlanRepo = Depends(get_repo)):
    """
    Replaces the project; new dates must still contain every requirement.
    """
    try:
        return repo.update_project(project_id, project, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "update project")


@router.delete("/projects/{project_id}", response_model=DeleteResponse)
def delete_project(project_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        return DeleteResponse(deleted=repo.delete_project(project_id))
    except NotFoundError as e:
        return _error_response(e, "delete project")


# -------------------------
# Requirements
# -------------------------


@router.post("/requirements", response_model=RequirementView, status_code=201)
def create_requirement(req: RequirementCreate, repo: PlanRepo = Depends(get_repo)):
    """
    Creates a requirement. Inside a project its dates must fall within the
    project's and must not overlap any sibling requirement.
    """
    try:
        return repo.create_requirement(req, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "create requirement")


@router.get("/requirements", response_model=list[RequirementView])
def list_requirements(
    project_id: Optional[str] = Query(default=None),
    repo: PlanRepo = Depends(get_repo),
):
    return repo.list_requirements(project_id=project_id)


@router.get("/requirements/{requirement_id}", response_model=RequirementView)
def get_requirement(requirement_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.get_requirement(requirement_id)
    except NotFoundError as e:
        return _error_response(e, "get requirement")


@router.put("/requirements/{requirement_id}", response_model=RequirementView)
def update_requirement(
    requirement_id: str,
    req: RequirementCreate,
    repo: PlanRepo = Depends(get_repo),
):
    try:
        return repo.update_requirement(requirement_id, req, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "update requirement")


@router.delete("/requirements/{requirement_id}", response_model=DeleteResponse)
def delete_requirement(requirement_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        return DeleteResponse(deleted=repo.delete_requirement(requirement_id))
    except NotFoundError as e:
        return _error_response(e, "delete requirement")


# -------------------------
# Tasks
# -------------------------


@router.post("/tasks", response_model=TaskView, status_code=201)
def create_task(task: TaskCreate, repo: PlanRepo = Depends(get_repo)):
    """
    Submit a task.

    plan_end_date is resolved from plan_start_date + duration_workdays, then
    the task must fit its requirement and its owner's concurrency limit
    (at most two overlapping tasks, with distinct priorities).
    """
    try:
        return repo.create_task(task, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "create task")


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user_id: Optional[str] = Query(default=None),
    requirement_id: Optional[str] = Query(default=None),
    repo: PlanRepo = Depends(get_repo),
):
    tasks, total = repo.list_tasks(
        limit=limit, offset=offset, user_id=user_id, requirement_id=requirement_id
    )
    return TaskListResponse(tasks=tasks, total=total)


@router.get("/tasks/{task_id}", response_model=TaskView)
def get_task(task_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.get_task(task_id)
    except NotFoundError as e:
        return _error_response(e, "get task")


@router.put("/tasks/{task_id}", response_model=TaskView)
def update_task(task_id: str, task: TaskCreate, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.update_task(task_id, task, now_ms=now_ms())
    except TeamSchedError as e:
        return _error_response(e, "update task")


@router.delete("/tasks/{task_id}", response_model=DeleteResponse)
def delete_task(task_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        repo.delete_task(task_id)
        return DeleteResponse()
    except NotFoundError as e:
        return _error_response(e, "delete task")


@router.get("/tasks/{task_id}/dependencies", response_model=list[TaskView])
def list_dependencies(task_id: str, repo: PlanRepo = Depends(get_repo)):
    try:
        return repo.list_predecessors(task_id)
    except NotFoundError as e:
        return _error_response(e, "list dependencies")


@router.post("/tasks/{task_id}/dependencies", response_model=TaskView, status_code=201)
def add_dependency(task_id: str, dep: DependencyCreate, repo: PlanRepo = Depends(get_repo)):
    """
    Make dep.predecessor_id a predecessor of task_id.

    Rejected when it would be a self reference, close a cycle, or already
    exists.
    """
    try:
        return repo.add_dependency(successor_id=task_id, predecessor_id=dep.predecessor_id)
    except TeamSchedError as e:
        return _error_response(e, "add dependency")


@router.delete("/tasks/{task_id}/dependencies", response_model=DeleteResponse)
def remove_dependency(
    task_id: str,
    predecessor_id: str = Query(min_length=1),
    repo: PlanRepo = Depends(get_repo),
):
    try:
        repo.remove_dependency(successor_id=task_id, predecessor_id=predecessor_id)
        return DeleteResponse()
    except NotFoundError as e:
        return _error_response(e, "remove dependency")


# -------------------------
# Calendar
# -------------------------


@router.get("/calendar/workdays", response_model=WorkdayQueryResponse)
def query_workdays(
    start: dt.date,
    end: Optional[dt.date] = Query(default=None),
    duration: Optional[int] = Query(default=None, ge=0, le=3650),
    calendar: WorkCalendar = Depends(get_calendar),
):
    """
    With `end`: count workdays in [start, end].
    With `duration`: the date the given number of workdays ends on.
    """
    try:
        if duration is not None and end is None:
            end = add_workdays(calendar, start, duration)
        elif end is None or duration is not None:
            raise ValidationError("Exactly one of end or duration is required")
        return WorkdayQueryResponse(
            start=start,
            end=end,
            workdays=workdays_between(calendar, start, end),
            calendar_days=calendar_days_between(start, end),
        )
    except TeamSchedError as e:
        return _error_response(e, "query workdays")
