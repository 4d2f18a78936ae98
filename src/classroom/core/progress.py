"""Progress tracking.

A student's progress is the set of lesson ids they finished. The completion
percentage is derived on read and never stored.
"""

from __future__ import annotations

import structlog

from classroom.core.models import ProgressRecord, SessionContext
from classroom.core.repositories import ProgressRepository

logger = structlog.get_logger(__name__)


def percent_complete(record: ProgressRecord | None, total_lessons: int) -> float:
    """Percentage of lessons completed, in [0, 100].

    Zero lessons (or no record) means 0%.
    """
    if record is None or total_lessons <= 0:
        return 0.0
    percent = 100.0 * len(record.completed_lessons) / total_lessons
    return min(100.0, percent)


class ProgressTracker:
    """Records finished lessons for the acting user."""

    def __init__(self, repository: ProgressRepository, context: SessionContext):
        self.repository = repository
        self.context = context

    async def mark_completed(self, student_id: str, lesson_id: str) -> None:
        """Add ``lesson_id`` to the student's completed set.

        Creates the record when the student has none. Calling it again for
        the same lesson leaves the set unchanged.

        Raises:
            RepositoryError: If the store fails
        """
        record = await self.repository.get_progress(student_id)
        if record is None:
            await self.repository.put_progress(
                ProgressRecord(student_id=student_id, completed_lessons=frozenset({lesson_id}))
            )
            logger.info("progress_created", student_id=student_id, lesson_id=lesson_id)
        else:
            await self.repository.add_completed_lesson(student_id, lesson_id)
            logger.info(
                "progress_updated",
                student_id=student_id,
                lesson_id=lesson_id,
                already_completed=record.has_completed(lesson_id),
            )

    async def complete_lesson(self, lesson_id: str) -> None:
        """Mark a lesson completed for the acting user."""
        await self.mark_completed(self.context.user_id, lesson_id)

    async def load_percent(self, total_lessons: int) -> float:
        """Completion percentage of the acting user."""
        record = await self.repository.get_progress(self.context.user_id)
        return percent_complete(record, total_lessons)
