# src/teamsched/api/app.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from teamsched.config import load_settings
from teamsched.engine.calendar import load_calendar
from teamsched.logging import configure_logging, get_logger
from teamsched.storage import SQLiteDB, apply_migrations

from .routes import router

_LOG = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
    - load settings, configure logging
    - run DB migrations (idempotent)
    - build the work calendar used to resolve task end dates

    There is nothing to stop on shutdown; the service holds no background
    work and no cached scheduling state.
    """
    settings = load_settings()
    configure_logging(settings.log_level)

    db = SQLiteDB(settings.db_path)
    conn = db.connect()
    try:
        apply_migrations(conn, settings.migrations_dir)
    finally:
        conn.close()

    app.state.settings = settings
    app.state.db = db
    app.state.calendar = load_calendar(settings.calendar)

    _LOG.info("Startup complete (db=%s, calendar=%s).", settings.db_path, settings.calendar)
    yield
    _LOG.info("Shutdown complete.")


app = FastAPI(
    title="Team Scheduler",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(router)
