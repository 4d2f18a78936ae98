"""Lesson endpoints."""

from fastapi import APIRouter, HTTPException, status

from classroom.core.dashboard import LESSON_NOT_FOUND_MESSAGE, load_lesson_page
from classroom.core.models import (
    LessonDraft,
    LessonValidationError,
    QuestionFormatError,
    Role,
    question_from_dict,
)
from classroom.core.ordering import publish_lesson
from classroom.core.quiz_session import public_question
from classroom.core.repositories import RepositoryError
from classroom.web.dependencies import get_web_context
from classroom.web.schemas import (
    LessonCreate,
    LessonCreated,
    LessonListResponse,
    LessonResponse,
    LessonSummary,
)

router = APIRouter(prefix="/api/lessons", tags=["lessons"])


@router.get("", response_model=LessonListResponse)
async def list_lessons() -> LessonListResponse:
    """List lessons in display order."""
    ctx = get_web_context()
    try:
        lessons = await ctx.lessons.list_lessons()
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    summaries = [
        LessonSummary(
            id=lesson.id,
            title=lesson.title,
            order=lesson.order,
            total_questions=lesson.total_questions,
        )
        for lesson in lessons
    ]
    return LessonListResponse(lessons=summaries, count=len(summaries))


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson(lesson_id: str) -> LessonResponse:
    """Get a lesson without revealing its answers."""
    page = await load_lesson_page(get_web_context().lessons, lesson_id)
    if page.lesson is None:
        code = (
            status.HTTP_404_NOT_FOUND
            if page.error == LESSON_NOT_FOUND_MESSAGE
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        raise HTTPException(status_code=code, detail=page.error)

    lesson = page.lesson
    return LessonResponse(
        id=lesson.id,
        title=lesson.title,
        content=lesson.content,
        order=lesson.order,
        questions=[public_question(q) for q in lesson.questions],
    )


@router.post("", response_model=LessonCreated, status_code=status.HTTP_201_CREATED)
async def create_lesson(lesson_data: LessonCreate) -> LessonCreated:
    """Publish a new lesson after all existing ones."""
    ctx = get_web_context()
    try:
        role = await ctx.users.get_role(lesson_data.user_id)
        if role is not Role.TEACHER:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only teachers can create lessons",
            )

        try:
            draft = LessonDraft(
                title=lesson_data.title,
                content=lesson_data.content,
                questions=tuple(question_from_dict(q) for q in lesson_data.questions),
            )
        except QuestionFormatError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        lesson_id = await publish_lesson(ctx.lessons, draft)
    except LessonValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.problems)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return LessonCreated(lesson_id=lesson_id)
