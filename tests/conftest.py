# tests/conftest.py
import importlib
import itertools
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from teamsched.engine.calendar import TableWorkCalendar

_counter = itertools.count(1)

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"

DEFAULT_ENV = {
    # plain Monday-Friday, so expected end dates don't depend on holiday data
    "TEAMSCHED_CALENDAR": "weekends",
    "TEAMSCHED_MIGRATIONS_DIR": str(MIGRATIONS_DIR),
    "TEAMSCHED_LOG_LEVEL": "warning",
}


def _apply_env(monkeypatch: pytest.MonkeyPatch, db_path: Path, overrides: Optional[dict[str, str]] = None) -> None:
    monkeypatch.setenv("TEAMSCHED_DB_PATH", str(db_path))
    for k, v in DEFAULT_ENV.items():
        monkeypatch.setenv(k, v)
    if overrides:
        for k, v in overrides.items():
            monkeypatch.setenv(k, v)


@contextmanager
def _client_ctx(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, *, overrides: Optional[dict[str, str]] = None,
                db_path: Optional[Path] = None) -> Iterator[TestClient]:
    if db_path is None:
        n = next(_counter)
        db_path = tmp_path / f"teamsched_{n}.db"

    _apply_env(monkeypatch, db_path, overrides)

    # Import after env is set; reload to avoid cross-test state
    app_mod = importlib.import_module("teamsched.api.app")
    importlib.reload(app_mod)

    with TestClient(app_mod.app) as client:
        yield client


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """
    Default integration test client: weekends-only calendar, fresh sqlite db.
    """
    with _client_ctx(monkeypatch, tmp_path) as c:
        yield c


@pytest.fixture()
def client_factory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Factory for tests that need custom settings or a pre-populated DB.

    Usage:
      with client_factory(db_path=some_existing_db_path) as client:
          ...
    """

    def _make(*, overrides: Optional[dict[str, str]] = None, db_path: Optional[Path] = None):
        return _client_ctx(monkeypatch, tmp_path, overrides=overrides, db_path=db_path)

    return _make


@pytest.fixture()
def weekdays() -> TableWorkCalendar:
    return TableWorkCalendar()
