"""Lesson ordering and publishing.

New lessons are displayed after every existing one. The order is computed
from the current maximum, so two lessons published at the same time can
get the same order value. There is no locking around it.
"""

from __future__ import annotations

import structlog

from classroom.core.models import LessonDraft, LessonValidationError
from classroom.core.repositories import LessonRepository

logger = structlog.get_logger(__name__)


def next_order(existing_max: int | None) -> int:
    """Display order for a new lesson."""
    if existing_max is None:
        return 1
    return existing_max + 1


async def publish_lesson(repository: LessonRepository, draft: LessonDraft) -> str:
    """Validate and persist a draft as the last lesson.

    Returns:
        The new lesson id

    Raises:
        LessonValidationError: If the draft has problems
        RepositoryError: If the store fails
    """
    problems = draft.validate()
    if problems:
        raise LessonValidationError(problems)

    existing_max = await repository.max_order()
    order = next_order(existing_max)
    lesson_id = await repository.create_lesson(draft, order)

    logger.info(
        "lesson_published",
        lesson_id=lesson_id,
        order=order,
        questions=len(draft.questions),
    )
    return lesson_id
