"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Lesson, progress and user repositories
"""

from classroom.db.database import get_db, init_db
from classroom.db.lessons_repository import SqliteLessonRepository
from classroom.db.progress_repository import SqliteProgressRepository
from classroom.db.users_repository import SqliteUserRepository

__all__ = [
    "get_db",
    "init_db",
    "SqliteLessonRepository",
    "SqliteProgressRepository",
    "SqliteUserRepository",
]
