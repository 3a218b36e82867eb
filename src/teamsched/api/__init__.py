# src/teamsched/api/__init__.py
"""
API layer for teamsched (FastAPI).

- app: FastAPI instance + lifespan hook
- routes: REST endpoints
- deps: dependency injection helpers
"""

from .app import app

__all__ = ["app"]
