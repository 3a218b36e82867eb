from __future__ import annotations

from pathlib import Path

from teamsched.config import load_settings
from teamsched.logging import configure_logging, get_logger


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def main() -> int:
    """
    Programmatic entrypoint.

    Dev command:
      uvicorn teamsched.api.app:app --reload

    or:
      python -m teamsched.main
    """
    settings = load_settings()
    configure_logging(settings.log_level)
    log = get_logger(__name__)

    _ensure_parent_dir(settings.db_path)
    log.info("Starting teamsched with DB path: %s (calendar: %s)", settings.db_path, settings.calendar)

    import uvicorn

    uvicorn.run(
        "teamsched.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=False,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
