"""Read-side views: dashboard and lesson page.

Repository failures are turned into a displayable ``error`` message here;
they never propagate to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from classroom.core.models import Lesson, SessionContext
from classroom.core.progress import percent_complete
from classroom.core.repositories import LessonRepository, ProgressRepository, RepositoryError

logger = structlog.get_logger(__name__)

LESSONS_ERROR_MESSAGE = "Error loading lessons"
LESSON_ERROR_MESSAGE = "Error fetching lesson"
LESSON_NOT_FOUND_MESSAGE = "Lesson not found"


@dataclass
class Dashboard:
    """What a signed-in user sees first."""

    context: SessionContext
    lessons: list[Lesson] = field(default_factory=list)
    progress_percent: float | None = None  # Students only
    error: str | None = None

    @property
    def can_create_lessons(self) -> bool:
        return self.context.is_teacher


@dataclass
class LessonPage:
    """Result of opening a lesson: the lesson or a message."""

    lesson: Lesson | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.lesson is not None


async def load_dashboard(
    context: SessionContext,
    lessons: LessonRepository,
    progress: ProgressRepository,
) -> Dashboard:
    """Load ordered lessons and, for students, their completion percentage."""
    dashboard = Dashboard(context=context)
    try:
        dashboard.lessons = await lessons.list_lessons()
        if context.is_student:
            record = await progress.get_progress(context.user_id)
            dashboard.progress_percent = percent_complete(record, len(dashboard.lessons))
    except RepositoryError as e:
        logger.error("dashboard_load_failed", user_id=context.user_id, error=str(e))
        dashboard.error = LESSONS_ERROR_MESSAGE
    return dashboard


async def load_lesson_page(lessons: LessonRepository, lesson_id: str) -> LessonPage:
    """Fetch a lesson for display."""
    try:
        lesson = await lessons.get_lesson(lesson_id)
    except RepositoryError as e:
        logger.error("lesson_fetch_failed", lesson_id=lesson_id, error=str(e))
        return LessonPage(error=LESSON_ERROR_MESSAGE)

    if lesson is None:
        return LessonPage(error=LESSON_NOT_FOUND_MESSAGE)
    return LessonPage(lesson=lesson)
