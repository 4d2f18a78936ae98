"""Progress endpoints."""

from fastapi import APIRouter, HTTPException, status

from classroom.core.progress import percent_complete
from classroom.core.repositories import RepositoryError
from classroom.web.dependencies import get_web_context
from classroom.web.schemas import ProgressResponse

router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get("/{student_id}", response_model=ProgressResponse)
async def get_progress(student_id: str) -> ProgressResponse:
    """Completed lessons and percentage of a student."""
    ctx = get_web_context()
    try:
        record = await ctx.progress.get_progress(student_id)
        lessons = await ctx.lessons.list_lessons()
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No progress for '{student_id}'",
        )

    return ProgressResponse(
        student_id=student_id,
        completed_lessons=sorted(record.completed_lessons),
        total_lessons=len(lessons),
        percent_complete=percent_complete(record, len(lessons)),
    )
