"""Async PostgreSQL access: engine, ORM models and repositories."""
from schemedesk.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "close_engine",
    "ensure_database_exists",
    "init_db",
]
