"""Quiz session management for Web API.

Keeps the live quiz sessions of connected students. A session lives in
memory only; ending it (the student navigates away) closes it, which
cancels any pending auto-advance.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from classroom.core.models import SessionContext
from classroom.core.progress import ProgressTracker
from classroom.core.quiz_session import QuizEvent, QuizSession
from classroom.web.dependencies import WebContext, get_web_context

logger = structlog.get_logger(__name__)


class UnknownUserError(Exception):
    """User has no role yet."""

    pass


class UnknownLessonError(Exception):
    """Lesson does not exist."""

    pass


@dataclass
class ManagedSession:
    """A quiz session owned by the manager."""

    session_id: str
    quiz: QuizSession
    created_at: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "session_id": self.session_id,
            "user_id": self.quiz.context.user_id,
            "created_at": self.created_at,
            **self.quiz.snapshot(),
        }


class QuizSessionManager:
    """Manages active quiz sessions."""

    def __init__(self, web_context: WebContext | None = None):
        self._web_context = web_context
        self._sessions: dict[str, ManagedSession] = {}
        self._lock = asyncio.Lock()

    @property
    def web_context(self) -> WebContext:
        if self._web_context is None:
            self._web_context = get_web_context()
        return self._web_context

    async def start_session(self, user_id: str, lesson_id: str) -> ManagedSession:
        """Open a lesson's quiz for a user.

        Raises:
            UnknownUserError: If the user is not enrolled
            UnknownLessonError: If the lesson does not exist
            RepositoryError: If the store fails
        """
        ctx = self.web_context
        role = await ctx.users.get_role(user_id)
        if role is None:
            raise UnknownUserError(user_id)
        lesson = await ctx.lessons.get_lesson(lesson_id)
        if lesson is None:
            raise UnknownLessonError(lesson_id)

        context = SessionContext(user_id=user_id, role=role)
        quiz = QuizSession(
            lesson,
            context,
            ProgressTracker(ctx.progress, context),
            feedback_seconds=ctx.feedback_seconds,
        )
        session = ManagedSession(session_id=str(uuid.uuid4())[:8], quiz=quiz)

        async with self._lock:
            self._sessions[session.session_id] = session

        logger.info(
            "quiz_session_created",
            session_id=session.session_id,
            user_id=user_id,
            lesson_id=lesson_id,
        )
        return session

    async def get_session(self, session_id: str) -> ManagedSession | None:
        """Get a session by ID."""
        async with self._lock:
            return self._sessions.get(session_id)

    async def select_answer(self, session_id: str, value: Any) -> bool | None:
        """Store a pending answer. None if the session does not exist."""
        session = await self.get_session(session_id)
        if session is None:
            return None
        return session.quiz.select_answer(value)

    async def advance(self, session_id: str) -> tuple[ManagedSession | None, QuizEvent | None]:
        """Grade the pending answer of a session."""
        session = await self.get_session(session_id)
        if session is None:
            return None, None
        return session, session.quiz.advance()

    async def end_session(self, session_id: str) -> bool:
        """Discard a session.

        Returns:
            True if session was ended, False if not found
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False

        session.quiz.close()
        logger.info("quiz_session_ended", session_id=session_id)
        return True

    async def close_all(self) -> None:
        """Discard every session (shutdown)."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.quiz.close()

    async def get_session_count(self) -> int:
        """Get count of active sessions."""
        async with self._lock:
            return len(self._sessions)


# Global session manager instance
_session_manager: QuizSessionManager | None = None


def get_session_manager() -> QuizSessionManager:
    """Get the global session manager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = QuizSessionManager()
    return _session_manager


def reset_session_manager() -> None:
    """Reset the session manager (for testing)."""
    global _session_manager
    _session_manager = None
