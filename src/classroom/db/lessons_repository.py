"""SQLite lesson repository.

Lessons are stored with their questions as a JSON array and are listed by
``display_order``.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from pathlib import Path

import structlog

from classroom.core.models import Lesson, LessonDraft, QuestionFormatError, question_from_dict
from classroom.core.repositories import RepositoryError
from classroom.db.database import get_db, run_db

logger = structlog.get_logger(__name__)


def _row_to_lesson(row: sqlite3.Row) -> Lesson:
    try:
        questions = tuple(question_from_dict(q) for q in json.loads(row["questions"]))
    except (json.JSONDecodeError, QuestionFormatError) as e:
        raise RepositoryError(f"Stored lesson {row['lesson_id']} is malformed: {e}") from e
    return Lesson(
        id=row["lesson_id"],
        title=row["title"],
        content=row["content"],
        questions=questions,
        order=row["display_order"],
    )


class SqliteLessonRepository:
    """Lesson repository backed by the local database."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def _get_lesson(self, lesson_id: str) -> Lesson | None:
        with get_db(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM lessons WHERE lesson_id = ?", (lesson_id,)
            ).fetchone()
        return _row_to_lesson(row) if row else None

    def _list_lessons(self) -> list[Lesson]:
        with get_db(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM lessons ORDER BY display_order ASC, created_at ASC"
            ).fetchall()
        return [_row_to_lesson(row) for row in rows]

    def _max_order(self) -> int | None:
        with get_db(self.db_path) as conn:
            row = conn.execute("SELECT MAX(display_order) AS max_order FROM lessons").fetchone()
        return row["max_order"]

    def _create_lesson(self, draft: LessonDraft, order: int) -> str:
        lesson_id = uuid.uuid4().hex
        with get_db(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO lessons (lesson_id, title, content, questions, display_order)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    lesson_id,
                    draft.title,
                    draft.content,
                    json.dumps([q.to_dict() for q in draft.questions], ensure_ascii=False),
                    order,
                ),
            )
        logger.debug("lessons.inserted", lesson_id=lesson_id, order=order)
        return lesson_id

    async def get_lesson(self, lesson_id: str) -> Lesson | None:
        return await run_db(self._get_lesson, lesson_id)

    async def list_lessons(self) -> list[Lesson]:
        return await run_db(self._list_lessons)

    async def max_order(self) -> int | None:
        return await run_db(self._max_order)

    async def create_lesson(self, draft: LessonDraft, order: int) -> str:
        return await run_db(self._create_lesson, draft, order)
