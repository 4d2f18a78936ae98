"""SQLite progress repository.

A student has a record once a ``progress`` row exists; completed lessons
are rows of ``completed_lessons`` keyed by (student, lesson), so adding a
lesson twice is a no-op.

``put_progress`` replaces the whole set. Two sessions of the same student
that both find no record can each create one, and the later write drops
the lesson added by the earlier one. This is the same kind of race as the
lesson order computation in ``classroom.core.ordering``; there is no
locking around either.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from classroom.core.models import ProgressRecord
from classroom.db.database import get_db, run_db

logger = structlog.get_logger(__name__)


class SqliteProgressRepository:
    """Progress repository backed by the local database."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def _get_progress(self, student_id: str) -> ProgressRecord | None:
        with get_db(self.db_path) as conn:
            exists = conn.execute(
                "SELECT 1 FROM progress WHERE student_id = ?", (student_id,)
            ).fetchone()
            if exists is None:
                return None
            rows = conn.execute(
                "SELECT lesson_id FROM completed_lessons WHERE student_id = ?",
                (student_id,),
            ).fetchall()
        return ProgressRecord(
            student_id=student_id,
            completed_lessons=frozenset(row["lesson_id"] for row in rows),
        )

    def _put_progress(self, record: ProgressRecord) -> None:
        with get_db(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO progress (student_id) VALUES (?)
                ON CONFLICT(student_id) DO UPDATE SET updated_at = datetime('now')
                """,
                (record.student_id,),
            )
            conn.execute(
                "DELETE FROM completed_lessons WHERE student_id = ?",
                (record.student_id,),
            )
            conn.executemany(
                "INSERT INTO completed_lessons (student_id, lesson_id) VALUES (?, ?)",
                [(record.student_id, lesson_id) for lesson_id in sorted(record.completed_lessons)],
            )
        logger.debug(
            "progress.replaced",
            student_id=record.student_id,
            completed=len(record.completed_lessons),
        )

    def _add_completed_lesson(self, student_id: str, lesson_id: str) -> None:
        with get_db(self.db_path) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO progress (student_id) VALUES (?)", (student_id,)
            )
            conn.execute(
                "INSERT OR IGNORE INTO completed_lessons (student_id, lesson_id) VALUES (?, ?)",
                (student_id, lesson_id),
            )
            conn.execute(
                "UPDATE progress SET updated_at = datetime('now') WHERE student_id = ?",
                (student_id,),
            )
        logger.debug("progress.lesson_added", student_id=student_id, lesson_id=lesson_id)

    async def get_progress(self, student_id: str) -> ProgressRecord | None:
        return await run_db(self._get_progress, student_id)

    async def put_progress(self, record: ProgressRecord) -> None:
        await run_db(self._put_progress, record)

    async def add_completed_lesson(self, student_id: str, lesson_id: str) -> None:
        await run_db(self._add_completed_lesson, student_id, lesson_id)
