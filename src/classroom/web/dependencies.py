"""Shared stores for the Web API.

Routes reach the repositories through ``get_web_context()``; the app
factory configures it once at startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from classroom.core.repositories import LessonRepository, ProgressRepository, UserRepository
from classroom.core.quiz_session import DEFAULT_FEEDBACK_SECONDS
from classroom.db import (
    SqliteLessonRepository,
    SqliteProgressRepository,
    SqliteUserRepository,
    init_db,
)


@dataclass
class WebContext:
    """Repositories and settings used by request handlers."""

    lessons: LessonRepository
    progress: ProgressRepository
    users: UserRepository
    feedback_seconds: float = DEFAULT_FEEDBACK_SECONDS


_web_context: WebContext | None = None


def configure_web_context(db_path: Path, feedback_seconds: float) -> WebContext:
    """Create the database (if needed) and the SQLite-backed context."""
    global _web_context
    init_db(db_path)
    _web_context = WebContext(
        lessons=SqliteLessonRepository(db_path),
        progress=SqliteProgressRepository(db_path),
        users=SqliteUserRepository(db_path),
        feedback_seconds=feedback_seconds,
    )
    return _web_context


def get_web_context() -> WebContext:
    """Get the configured context."""
    if _web_context is None:
        raise RuntimeError("Web context not configured; use create_app()")
    return _web_context


def reset_web_context() -> None:
    """Reset the context (for testing)."""
    global _web_context
    _web_context = None
