# src/teamsched/storage/__init__.py
"""
Storage layer for teamsched (SQLite).

- db: connection factory + pragmas + transaction helpers
- migrations: lightweight SQL migrations runner
- repo: reads the snapshot a write is validated against, then persists it
"""

from .db import SQLiteDB
from .migrations import apply_migrations
from .repo import PlanRepo

__all__ = ["SQLiteDB", "apply_migrations", "PlanRepo"]
