"""SQLite database connection and schema management.

Provides connection management and schema initialization for the local
lesson, progress and user store.
"""

from __future__ import annotations

import asyncio
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Generator, TypeVar

import structlog

from classroom.core.repositories import RepositoryError

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/classroom.db")

# Current database path (module-level for simplicity in CLI context)
_db_path: Path | None = None

T = TypeVar("T")


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/classroom.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    with get_db(_db_path) as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    """Path used when no explicit path is given."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            cursor = conn.execute("SELECT * FROM lessons")
            rows = cursor.fetchall()
    """
    db_path = db_path or get_db_path()

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- lessons: questions stored as a JSON array
        CREATE TABLE IF NOT EXISTS lessons (
            lesson_id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            content TEXT NOT NULL,
            questions TEXT NOT NULL DEFAULT '[]',
            display_order INTEGER NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- users: role assigned on first sign-in
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            role TEXT NOT NULL CHECK(role IN ('teacher', 'student')),
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- progress: one row per student that has a record
        CREATE TABLE IF NOT EXISTS progress (
            student_id TEXT PRIMARY KEY,
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- completed_lessons: set membership, duplicates impossible
        CREATE TABLE IF NOT EXISTS completed_lessons (
            student_id TEXT NOT NULL REFERENCES progress(student_id) ON DELETE CASCADE,
            lesson_id TEXT NOT NULL,
            completed_at TEXT NOT NULL DEFAULT (datetime('now')),
            PRIMARY KEY (student_id, lesson_id)
        );

        CREATE INDEX IF NOT EXISTS idx_lessons_order ON lessons(display_order);
        """
    )


async def run_db(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking repository call in a worker thread.

    Raises:
        RepositoryError: If SQLite fails
    """
    try:
        return await asyncio.to_thread(func, *args)
    except sqlite3.Error as e:
        logger.error("database.error", operation=func.__name__, error=str(e))
        raise RepositoryError(f"Database error in {func.__name__}: {e}") from e
