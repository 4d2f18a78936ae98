"""SQLite user role repository."""

from __future__ import annotations

from pathlib import Path

import structlog

from classroom.core.models import Role
from classroom.db.database import get_db, run_db

logger = structlog.get_logger(__name__)


class SqliteUserRepository:
    """User roles backed by the local database."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def _get_role(self, user_id: str) -> Role | None:
        with get_db(self.db_path) as conn:
            row = conn.execute("SELECT role FROM users WHERE user_id = ?", (user_id,)).fetchone()
        return Role(row["role"]) if row else None

    def _set_role(self, user_id: str, role: Role) -> None:
        with get_db(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO users (user_id, role) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET role = excluded.role
                """,
                (user_id, role.value),
            )
        logger.debug("users.role_set", user_id=user_id, role=role.value)

    async def get_role(self, user_id: str) -> Role | None:
        return await run_db(self._get_role, user_id)

    async def set_role(self, user_id: str, role: Role) -> None:
        await run_db(self._set_role, user_id, role)
