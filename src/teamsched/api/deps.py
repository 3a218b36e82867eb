# src/teamsched/api/deps.py
from __future__ import annotations

import sqlite3
from typing import Generator

from fastapi import Depends, Request

from teamsched.engine.calendar import WorkCalendar
from teamsched.storage import PlanRepo, SQLiteDB


def get_db(request: Request) -> SQLiteDB:
    return request.app.state.db  # type: ignore[attr-defined]


def get_calendar(request: Request) -> WorkCalendar:
    """
    The work calendar chosen at startup; tests may swap app.state.calendar.
    """
    return request.app.state.calendar  # type: ignore[attr-defined]


def get_conn(
    db: SQLiteDB = Depends(get_db),
) -> Generator[sqlite3.Connection, None, None]:
    """
    Provides a per-request SQLite connection; every request reads fresh state.
    """
    conn = db.connect()
    try:
        yield conn
    finally:
        conn.close()


def get_repo(
    conn: sqlite3.Connection = Depends(get_conn),
    calendar: WorkCalendar = Depends(get_calendar),
) -> PlanRepo:
    return PlanRepo(conn, calendar)
