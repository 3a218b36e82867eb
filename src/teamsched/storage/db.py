# src/teamsched/storage/db.py
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


@dataclass(frozen=True)
class SQLiteDB:
    """
    SQLite connection factory.

    One connection per request (or per thread). Transactions are managed
    explicitly by the repository, hence isolation_level=None.
    """
    db_path: Path
    timeout_s: float = 5.0

    def connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.timeout_s,
            isolation_level=None,
            check_same_thread=False,  # FastAPI may resolve deps and run sync routes on different threads
        )
        conn.row_factory = sqlite3.Row
        self._apply_pragmas(conn)
        return conn

    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        cur = conn.cursor()
        cur.execute("PRAGMA journal_mode=WAL;")
        # ON DELETE CASCADE for requirements/tasks/edges relies on this
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA busy_timeout=5000;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        cur.close()


def begin_immediate(conn: sqlite3.Connection) -> None:
    """
    Takes the write lock up front, so the snapshot a write is validated
    against cannot change before the write commits.
    """
    conn.execute("BEGIN IMMEDIATE;")


def commit(conn: sqlite3.Connection) -> None:
    conn.execute("COMMIT;")


def rollback(conn: sqlite3.Connection) -> None:
    conn.execute("ROLLBACK;")


@contextmanager
def write_transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    BEGIN IMMEDIATE ... COMMIT, rolling back and re-raising on any error.
    """
    begin_immediate(conn)
    try:
        yield conn
    except Exception:
        rollback(conn)
        raise
    commit(conn)
