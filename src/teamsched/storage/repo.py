# src/teamsched/storage/repo.py
from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional

from teamsched.domain.errors import ConflictError, NotFoundError
from teamsched.domain.models import (
    ProjectCreate,
    ProjectView,
    RequirementCreate,
    RequirementView,
    TaskCreate,
    TaskView,
    UserCreate,
    UserView,
)
from teamsched.domain.states import HalfDaySlot, TaskType
from teamsched.engine.admission import ScheduledTask
from teamsched.engine.calendar import WorkCalendar
from teamsched.engine.containment import DatedRecord
from teamsched.engine.graph import DependencyEdge
from teamsched.engine.intervals import DateRange, TaskInterval
from teamsched.engine.pipeline import (
    TaskWriteRequest,
    TaskWriteSnapshot,
    validate_dependency,
    validate_project_write,
    validate_requirement_write,
    validate_task_write,
)
from teamsched.logging import get_logger

from .db import write_transaction

_LOG = get_logger(__name__)

_TASK_COLUMNS = """
    id, title, type, requirement_id, user_id, priority,
    plan_start_date, start_slot, duration_workdays, plan_end_date, end_slot,
    forecast_end_date, status, created_at, updated_at
"""


def new_id() -> str:
    return uuid.uuid4().hex


def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def _range(start: Optional[str], end: Optional[str]) -> Optional[DateRange]:
    if not start or not end:
        return None
    return DateRange(date.fromisoformat(start), date.fromisoformat(end))


def _input_range(payload: ProjectCreate | RequirementCreate) -> Optional[DateRange]:
    if payload.start_date is None or payload.end_date is None:
        return None
    return DateRange(payload.start_date, payload.end_date)


@dataclass
class PlanRepo:
    """
    Repository encapsulating all SQL access.

    Every write follows the same shape inside one BEGIN IMMEDIATE
    transaction: read the current persisted state, hand it to the
    scheduling engine, persist only if the engine raised nothing.
    """
    conn: sqlite3.Connection
    calendar: WorkCalendar

    # -------------------------
    # Users
    # -------------------------

    def create_user(self, user: UserCreate, now_ms: int) -> UserView:
        user_id = user.id or new_id()
        with write_transaction(self.conn):
            if self._exists("users", user_id):
                raise ConflictError(f"User already exists: {user_id}", details={"id": user_id})
            self.conn.execute(
                "INSERT INTO users(id, name, role, created_at) VALUES (?, ?, ?, ?);",
                (user_id, user.name, user.role.value, now_ms),
            )
        return self.get_user(user_id)

    def get_user(self, user_id: str) -> UserView:
        row = self.conn.execute(
            "SELECT id, name, role, created_at FROM users WHERE id = ?;", (user_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"User not found: {user_id}", details={"id": user_id})
        return UserView(**dict(row))

    def list_users(self) -> list[UserView]:
        rows = self.conn.execute(
            "SELECT id, name, role, created_at FROM users ORDER BY created_at ASC, id ASC;"
        ).fetchall()
        return [UserView(**dict(r)) for r in rows]

    # -------------------------
    # Projects
    # -------------------------

    def create_project(self, project: ProjectCreate, now_ms: int) -> ProjectView:
        project_id = project.id or new_id()
        with write_transaction(self.conn):
            if self._exists("projects", project_id):
                raise ConflictError(f"Project already exists: {project_id}", details={"id": project_id})
            validate_project_write(_input_range(project), project.priority)
            self.conn.execute(
                """
                INSERT INTO projects(id, title, description, priority, start_date, end_date,
                                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    project_id,
                    project.title,
                    project.description,
                    project.priority,
                    _iso(project.start_date),
                    _iso(project.end_date),
                    now_ms,
                    now_ms,
                ),
            )
        return self.get_project(project_id)

    def update_project(self, project_id: str, project: ProjectCreate, now_ms: int) -> ProjectView:
        """
        Rejects new dates that would leave an existing requirement outside
        the project.
        """
        with write_transaction(self.conn):
            self._require("projects", project_id, "Project")
            validate_project_write(
                _input_range(project),
                project.priority,
                child_requirements=self._requirement_records(project_id),
            )
            self.conn.execute(
                """
                UPDATE projects
                SET title = ?, description = ?, priority = ?, start_date = ?, end_date = ?,
                    updated_at = ?
                WHERE id = ?;
                """,
                (
                    project.title,
                    project.description,
                    project.priority,
                    _iso(project.start_date),
                    _iso(project.end_date),
                    now_ms,
                    project_id,
                ),
            )
        return self.get_project(project_id)

    def get_project(self, project_id: str) -> ProjectView:
        row = self.conn.execute(
            """
            SELECT id, title, description, priority, start_date, end_date, created_at, updated_at
            FROM projects WHERE id = ?;
            """,
            (project_id,),
        ).fetchone()
        if not row:
            raise NotFoundError(f"Project not found: {project_id}", details={"id": project_id})
        return ProjectView(**dict(row))

    def list_projects(self) -> list[ProjectView]:
        rows = self.conn.execute(
            """
            SELECT id, title, description, priority, start_date, end_date, created_at, updated_at
            FROM projects ORDER BY priority ASC, created_at ASC;
            """
        ).fetchall()
        return [ProjectView(**dict(r)) for r in rows]

    def delete_project(self, project_id: str) -> dict[str, int]:
        """
        Deletes the project with its requirements and their tasks.
        Returns how many child rows went with it.
        """
        with write_transaction(self.conn):
            self._require("projects", project_id, "Project")
            requirements = self.conn.execute(
                "SELECT COUNT(*) AS c FROM requirements WHERE project_id = ?;", (project_id,)
            ).fetchone()["c"]
            tasks = self.conn.execute(
                """
                SELECT COUNT(*) AS c FROM tasks
                WHERE requirement_id IN (SELECT id FROM requirements WHERE project_id = ?);
                """,
                (project_id,),
            ).fetchone()["c"]
            self.conn.execute("DELETE FROM projects WHERE id = ?;", (project_id,))
        _LOG.info(
            "Deleted project %s with %d requirement(s), %d task(s)", project_id, requirements, tasks
        )
        return {"requirements": int(requirements), "tasks": int(tasks)}

    # -------------------------
    # Requirements
    # -------------------------

    def create_requirement(self, req: RequirementCreate, now_ms: int) -> RequirementView:
        requirement_id = req.id or new_id()
        with write_transaction(self.conn):
            if self._exists("requirements", requirement_id):
                raise ConflictError(
                    f"Requirement already exists: {requirement_id}", details={"id": requirement_id}
                )
            self._validate_requirement(requirement_id, req, is_update=False)
            self.conn.execute(
                """
                INSERT INTO requirements(id, title, priority, project_id, start_date, end_date,
                                         created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    requirement_id,
                    req.title,
                    req.priority,
                    req.project_id,
                    _iso(req.start_date),
                    _iso(req.end_date),
                    now_ms,
                    now_ms,
                ),
            )
        return self.get_requirement(requirement_id)

    def update_requirement(
        self, requirement_id: str, req: RequirementCreate, now_ms: int
    ) -> RequirementView:
        with write_transaction(self.conn):
            self._require("requirements", requirement_id, "Requirement")
            self._validate_requirement(requirement_id, req, is_update=True)
            self.conn.execute(
                """
                UPDATE requirements
                SET title = ?, priority = ?, project_id = ?, start_date = ?, end_date = ?,
                    updated_at = ?
                WHERE id = ?;
                """,
                (
                    req.title,
                    req.priority,
                    req.project_id,
                    _iso(req.start_date),
                    _iso(req.end_date),
                    now_ms,
                    requirement_id,
                ),
            )
        return self.get_requirement(requirement_id)

    def get_requirement(self, requirement_id: str) -> RequirementView:
        row = self.conn.execute(
            """
            SELECT id, title, priority, project_id, start_date, end_date, created_at, updated_at
            FROM requirements WHERE id = ?;
            """,
            (requirement_id,),
        ).fetchone()
        if not row:
            raise NotFoundError(
                f"Requirement not found: {requirement_id}", details={"id": requirement_id}
            )
        return RequirementView(**dict(row))

    def list_requirements(self, project_id: Optional[str] = None) -> list[RequirementView]:
        if project_id is None:
            rows = self.conn.execute(
                """
                SELECT id, title, priority, project_id, start_date, end_date, created_at, updated_at
                FROM requirements ORDER BY priority ASC, created_at ASC;
                """
            ).fetchall()
        else:
            rows = self.conn.execute(
                """
                SELECT id, title, priority, project_id, start_date, end_date, created_at, updated_at
                FROM requirements WHERE project_id = ? ORDER BY priority ASC, created_at ASC;
                """,
                (project_id,),
            ).fetchall()
        return [RequirementView(**dict(r)) for r in rows]

    def delete_requirement(self, requirement_id: str) -> dict[str, int]:
        with write_transaction(self.conn):
            self._require("requirements", requirement_id, "Requirement")
            tasks = self.conn.execute(
                "SELECT COUNT(*) AS c FROM tasks WHERE requirement_id = ?;", (requirement_id,)
            ).fetchone()["c"]
            self.conn.execute("DELETE FROM requirements WHERE id = ?;", (requirement_id,))
        _LOG.info("Deleted requirement %s with %d task(s)", requirement_id, tasks)
        return {"tasks": int(tasks)}

    # -------------------------
    # Tasks
    # -------------------------

    def create_task(self, task: TaskCreate, now_ms: int) -> TaskView:
        """
        Inserts a task after the full scheduling pipeline accepted it:
        priority, end date resolution, requirement containment, same
        requirement slot conflicts, then per-person admission control.
        """
        task_id = task.id or new_id()
        with write_transaction(self.conn):
            if self._exists("tasks", task_id):
                raise ConflictError(f"Task already exists: {task_id}", details={"id": task_id})
            interval = self._validate_task(task, task_id=None)
            self.conn.execute(
                f"""
                INSERT INTO tasks({_TASK_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    task_id,
                    task.title,
                    task.type.value,
                    task.requirement_id,
                    task.user_id,
                    task.priority,
                    interval.start_date.isoformat(),
                    interval.start_slot.value,
                    task.duration_workdays,
                    interval.end_date.isoformat(),
                    interval.end_slot.value,
                    _iso(task.forecast_end_date),
                    task.status.value,
                    now_ms,
                    now_ms,
                ),
            )
        _LOG.info("Created task %s for user %s (%s)", task_id, task.user_id, interval.as_dict())
        return self.get_task(task_id)

    def update_task(self, task_id: str, task: TaskCreate, now_ms: int) -> TaskView:
        with write_transaction(self.conn):
            self._require("tasks", task_id, "Task")
            interval = self._validate_task(task, task_id=task_id)
            self.conn.execute(
                """
                UPDATE tasks
                SET title = ?, type = ?, requirement_id = ?, user_id = ?, priority = ?,
                    plan_start_date = ?, start_slot = ?, duration_workdays = ?,
                    plan_end_date = ?, end_slot = ?, forecast_end_date = ?, status = ?,
                    updated_at = ?
                WHERE id = ?;
                """,
                (
                    task.title,
                    task.type.value,
                    task.requirement_id,
                    task.user_id,
                    task.priority,
                    interval.start_date.isoformat(),
                    interval.start_slot.value,
                    task.duration_workdays,
                    interval.end_date.isoformat(),
                    interval.end_slot.value,
                    _iso(task.forecast_end_date),
                    task.status.value,
                    now_ms,
                    task_id,
                ),
            )
        return self.get_task(task_id)

    def get_task(self, task_id: str) -> TaskView:
        row = self.conn.execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = ?;", (task_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Task not found: {task_id}", details={"id": task_id})
        return self._task_view(row)

    def list_tasks(
        self,
        limit: int = 200,
        offset: int = 0,
        user_id: Optional[str] = None,
        requirement_id: Optional[str] = None,
    ) -> tuple[list[TaskView], int]:
        where: list[str] = []
        params: list[object] = []
        if user_id is not None:
            where.append("user_id = ?")
            params.append(user_id)
        if requirement_id is not None:
            where.append("requirement_id = ?")
            params.append(requirement_id)
        clause = f"WHERE {' AND '.join(where)}" if where else ""

        total = self.conn.execute(
            f"SELECT COUNT(*) AS c FROM tasks {clause};", tuple(params)
        ).fetchone()["c"]
        rows = self.conn.execute(
            f"""
            SELECT {_TASK_COLUMNS}
            FROM tasks
            {clause}
            ORDER BY priority ASC, created_at ASC
            LIMIT ? OFFSET ?;
            """,
            (*params, limit, offset),
        ).fetchall()
        return [self._task_view(r) for r in rows], int(total)

    def delete_task(self, task_id: str) -> None:
        with write_transaction(self.conn):
            self._require("tasks", task_id, "Task")
            self.conn.execute("DELETE FROM tasks WHERE id = ?;", (task_id,))

    # -------------------------
    # Dependencies
    # -------------------------

    def list_predecessors(self, task_id: str) -> list[TaskView]:
        self._require("tasks", task_id, "Task")
        rows = self.conn.execute(
            f"""
            SELECT {_TASK_COLUMNS}
            FROM tasks
            WHERE id IN (SELECT predecessor_id FROM task_dependencies WHERE successor_id = ?)
            ORDER BY priority ASC, created_at ASC;
            """,
            (task_id,),
        ).fetchall()
        return [self._task_view(r) for r in rows]

    def add_dependency(self, successor_id: str, predecessor_id: str) -> TaskView:
        """
        Adds predecessor_id -> successor_id after checking the current edge
        set for self references, cycles and duplicates. Returns the
        predecessor.
        """
        with write_transaction(self.conn):
            self._require("tasks", successor_id, "Task")
            self._require("tasks", predecessor_id, "Predecessor task")
            validate_dependency(self._edges(), predecessor_id, successor_id)
            self.conn.execute(
                "INSERT INTO task_dependencies(predecessor_id, successor_id) VALUES (?, ?);",
                (predecessor_id, successor_id),
            )
        return self.get_task(predecessor_id)

    def remove_dependency(self, successor_id: str, predecessor_id: str) -> None:
        with write_transaction(self.conn):
            deleted = self.conn.execute(
                "DELETE FROM task_dependencies WHERE predecessor_id = ? AND successor_id = ?;",
                (predecessor_id, successor_id),
            ).rowcount
            if deleted == 0:
                raise NotFoundError(
                    "Dependency not found",
                    details={"predecessor_id": predecessor_id, "successor_id": successor_id},
                )

    # -------------------------
    # Snapshots + validation
    # -------------------------

    def _validate_task(self, task: TaskCreate, task_id: Optional[str]) -> TaskInterval:
        self._require("users", task.user_id, "User")

        requirement_range: Optional[DateRange] = None
        if task.type is TaskType.IN_REQUIREMENT and task.requirement_id:
            req = self.get_requirement(task.requirement_id)
            if req.start_date and req.end_date:
                requirement_range = DateRange(req.start_date, req.end_date)

        snapshot = TaskWriteSnapshot(
            requirement_range=requirement_range,
            person_tasks=self._scheduled_tasks_for(task.user_id),
        )
        request = TaskWriteRequest(
            user_id=task.user_id,
            priority=task.priority,
            plan_start_date=task.plan_start_date,
            duration_workdays=task.duration_workdays,
            start_slot=task.start_slot,
            end_slot=task.end_slot,
            requirement_id=task.requirement_id,
            task_id=task_id,
        )
        return validate_task_write(self.calendar, request, snapshot)

    def _validate_requirement(self, requirement_id: str, req: RequirementCreate, is_update: bool) -> None:
        project_range: Optional[DateRange] = None
        siblings: list[DatedRecord] = []
        if req.project_id is not None:
            project = self.get_project(req.project_id)
            if project.start_date and project.end_date:
                project_range = DateRange(project.start_date, project.end_date)
            siblings = [
                r for r in self._requirement_records(req.project_id) if r.id != requirement_id
            ]

        child_tasks = self._task_records(requirement_id) if is_update else []

        validate_requirement_write(
            _input_range(req),
            req.priority,
            project_range=project_range,
            siblings=siblings,
            child_tasks=child_tasks,
        )

    def _scheduled_tasks_for(self, user_id: str) -> list[ScheduledTask]:
        rows = self.conn.execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE user_id = ? ORDER BY priority ASC;",
            (user_id,),
        ).fetchall()
        return [
            ScheduledTask(
                id=r["id"],
                user_id=r["user_id"],
                priority=int(r["priority"]),
                interval=TaskInterval(
                    date.fromisoformat(r["plan_start_date"]),
                    HalfDaySlot(r["start_slot"]),
                    date.fromisoformat(r["plan_end_date"]),
                    HalfDaySlot(r["end_slot"]),
                ),
                title=r["title"],
                requirement_id=r["requirement_id"],
            )
            for r in rows
        ]

    def _requirement_records(self, project_id: str) -> list[DatedRecord]:
        rows = self.conn.execute(
            "SELECT id, title, start_date, end_date FROM requirements WHERE project_id = ?;",
            (project_id,),
        ).fetchall()
        return [
            DatedRecord(id=r["id"], title=r["title"], range=_range(r["start_date"], r["end_date"]))
            for r in rows
        ]

    def _task_records(self, requirement_id: str) -> list[DatedRecord]:
        rows = self.conn.execute(
            "SELECT id, title, plan_start_date, plan_end_date FROM tasks WHERE requirement_id = ?;",
            (requirement_id,),
        ).fetchall()
        return [
            DatedRecord(
                id=r["id"], title=r["title"], range=_range(r["plan_start_date"], r["plan_end_date"])
            )
            for r in rows
        ]

    def _edges(self) -> list[DependencyEdge]:
        rows = self.conn.execute(
            "SELECT predecessor_id, successor_id FROM task_dependencies;"
        ).fetchall()
        return [DependencyEdge(r["predecessor_id"], r["successor_id"]) for r in rows]

    # -------------------------
    # Helpers
    # -------------------------

    def _exists(self, table: str, record_id: str) -> bool:
        row = self.conn.execute(f"SELECT 1 FROM {table} WHERE id = ?;", (record_id,)).fetchone()
        return row is not None

    def _require(self, table: str, record_id: str, label: str) -> None:
        if not self._exists(table, record_id):
            raise NotFoundError(f"{label} not found: {record_id}", details={"id": record_id})

    def _get_dependencies(self, task_id: str) -> list[str]:
        rows = self.conn.execute(
            "SELECT predecessor_id FROM task_dependencies WHERE successor_id = ? "
            "ORDER BY predecessor_id ASC;",
            (task_id,),
        ).fetchall()
        return [r["predecessor_id"] for r in rows]

    def _task_view(self, row: sqlite3.Row) -> TaskView:
        return TaskView(**dict(row), dependencies=self._get_dependencies(row["id"]))

