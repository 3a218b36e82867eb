#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from teamsched.config import load_settings
from teamsched.logging import configure_logging, get_logger
from teamsched.storage import SQLiteDB, apply_migrations


def main() -> int:
    settings = load_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    db = SQLiteDB(settings.db_path)
    conn = db.connect()
    try:
        applied = apply_migrations(conn, settings.migrations_dir)
    finally:
        conn.close()

    log.info("DB ready at %s (%d migration(s) applied now)", settings.db_path, len(applied))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
