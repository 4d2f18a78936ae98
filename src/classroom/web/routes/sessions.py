"""Quiz session endpoints."""

from fastapi import APIRouter, HTTPException, status

from classroom.core.quiz_session import QuizEvent
from classroom.core.repositories import RepositoryError
from classroom.web.schemas import (
    AdvanceResponse,
    AnswerRequest,
    AnswerResponse,
    QuizEventResponse,
    SessionResponse,
    SessionStartRequest,
)
from classroom.web.sessions import (
    ManagedSession,
    UnknownLessonError,
    UnknownUserError,
    get_session_manager,
)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Session '{session_id}' not found",
    )


def _session_response(session: ManagedSession) -> SessionResponse:
    return SessionResponse(**session.to_dict())


def _event_response(event: QuizEvent) -> QuizEventResponse:
    return QuizEventResponse(**event.to_dict())


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(request: SessionStartRequest) -> SessionResponse:
    """Open a lesson's quiz."""
    manager = get_session_manager()
    try:
        session = await manager.start_session(request.user_id, request.lesson_id)
    except UnknownUserError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{request.user_id}' not found",
        )
    except UnknownLessonError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lesson not found",
        )
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    """Get session state."""
    session = await get_session_manager().get_session(session_id)
    if session is None:
        raise _not_found(session_id)
    return _session_response(session)


@router.post("/{session_id}/answer", response_model=AnswerResponse)
async def select_answer(session_id: str, request: AnswerRequest) -> AnswerResponse:
    """Store the pending answer for the current question."""
    manager = get_session_manager()
    accepted = await manager.select_answer(session_id, request.value)
    if accepted is None:
        raise _not_found(session_id)
    session = await manager.get_session(session_id)
    return AnswerResponse(accepted=accepted, session=_session_response(session))


@router.post("/{session_id}/advance", response_model=AdvanceResponse)
async def advance(session_id: str) -> AdvanceResponse:
    """Grade the pending answer. The session moves on after the feedback delay."""
    session, event = await get_session_manager().advance(session_id)
    if session is None:
        raise _not_found(session_id)
    return AdvanceResponse(
        event=_event_response(event) if event else None,
        session=_session_response(session),
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(session_id: str) -> None:
    """Discard a quiz session."""
    if not await get_session_manager().end_session(session_id):
        raise _not_found(session_id)
