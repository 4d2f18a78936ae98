"""Quiz session state machine.

Drives one student through the questions of one lesson:

    IN_PROGRESS --advance()--> SHOWING_FEEDBACK --(feedback delay)--> IN_PROGRESS
                                                                  \\-> COMPLETED

After each graded answer the session shows feedback for a short interval and
then moves on by itself. That transition is a task owned by the session;
``close()`` cancels it so a discarded session is never mutated.

Sessions are never persisted. Only the completion reaches the progress
tracker, exactly once per finished session.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable

import structlog

from classroom.core.grader import grade_answer
from classroom.core.models import Lesson, MultipleChoiceQuestion, Question, SessionContext
from classroom.core.progress import ProgressTracker
from classroom.core.repositories import RepositoryError

logger = structlog.get_logger(__name__)

DEFAULT_FEEDBACK_SECONDS = 2.0
PROGRESS_ERROR_MESSAGE = "Failed to update progress"


class QuizState(Enum):
    """States of a quiz session."""

    IN_PROGRESS = auto()  # Waiting for an answer to the current question
    SHOWING_FEEDBACK = auto()  # Answer graded, transition scheduled
    COMPLETED = auto()  # All questions answered
    CLOSED = auto()  # Discarded by its owner


class QuizEventType(Enum):
    """Events emitted by a quiz session."""

    FEEDBACK = auto()
    QUIZ_COMPLETED = auto()


@dataclass
class QuizEvent:
    """Event emitted by a session for the presentation layer."""

    event_type: QuizEventType
    event_id: str = ""
    title: str = ""
    markdown: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.name,
            "title": self.title,
            "markdown": self.markdown,
            "data": self.data,
        }


EventListener = Callable[[QuizEvent], None]


def public_question(question: Question) -> dict[str, Any]:
    """Question fields safe to show before it is answered."""
    data = question.to_dict()
    data.pop("correct_answer", None)
    data.pop("keyword", None)
    return data


def _is_empty_answer(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class QuizSession:
    """One attempt of one student at one lesson's quiz."""

    def __init__(
        self,
        lesson: Lesson,
        context: SessionContext,
        tracker: ProgressTracker | None = None,
        feedback_seconds: float = DEFAULT_FEEDBACK_SECONDS,
        listener: EventListener | None = None,
    ):
        self.lesson = lesson
        self.context = context
        self.tracker = tracker
        self.feedback_seconds = feedback_seconds
        self.listener = listener

        self.current_index = 0
        self.selected_answer: Any = None
        self.score = 0
        self.feedback: QuizEvent | None = None
        self.error: str | None = None
        self.events: list[QuizEvent] = []

        self._seq = 0
        self._pending: asyncio.Task[None] | None = None
        self._progress_notified = False

        if lesson.questions:
            self.state = QuizState.IN_PROGRESS
        else:
            self.state = QuizState.COMPLETED
            logger.warning("quiz_lesson_empty", lesson_id=lesson.id)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        return len(self.lesson.questions)

    @property
    def completed(self) -> bool:
        return self.state is QuizState.COMPLETED

    @property
    def current_question(self) -> Question | None:
        if self.state in (QuizState.IN_PROGRESS, QuizState.SHOWING_FEEDBACK):
            return self.lesson.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total_questions - 1

    def snapshot(self) -> dict[str, Any]:
        """Plain dict of the session state for rendering."""
        question = self.current_question
        return {
            "lesson_id": self.lesson.id,
            "lesson_title": self.lesson.title,
            "state": self.state.name,
            "current_index": self.current_index,
            "total_questions": self.total_questions,
            "question": public_question(question) if question is not None else None,
            "selected_answer": self.selected_answer,
            "score": self.score,
            "completed": self.completed,
            "feedback": self.feedback.to_dict() if self.feedback else None,
            "error": self.error,
        }

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def select_answer(self, value: Any) -> bool:
        """Store the pending answer for the current question.

        Returns:
            False (and changes nothing) outside IN_PROGRESS
        """
        if self.state is not QuizState.IN_PROGRESS:
            logger.debug("quiz_select_ignored", lesson_id=self.lesson.id, state=self.state.name)
            return False
        self.selected_answer = value
        return True

    def advance(self) -> QuizEvent | None:
        """Grade the pending answer and schedule the move to the next question.

        Ignored (returns None, no state change) unless the session is
        IN_PROGRESS with a non-empty selected answer. Must be called from a
        running event loop.

        Returns:
            The feedback event, or None if the call was ignored

        Raises:
            RuntimeError: If no event loop is running (session unchanged)
        """
        if self.state is not QuizState.IN_PROGRESS or _is_empty_answer(self.selected_answer):
            logger.debug(
                "quiz_advance_ignored",
                lesson_id=self.lesson.id,
                state=self.state.name,
                has_answer=not _is_empty_answer(self.selected_answer),
            )
            return None

        loop = asyncio.get_running_loop()

        question = self.lesson.questions[self.current_index]
        result = grade_answer(question, self.selected_answer)

        data: dict[str, Any] = {
            "correct": result.is_correct,
            "question_index": self.current_index,
        }
        if not result.is_correct:
            data["correct_answer"] = result.correct_answer
        if isinstance(question, MultipleChoiceQuestion) and not result.is_correct:
            data["correct_option"] = question.correct_answer

        event = self._record(
            QuizEventType.FEEDBACK,
            title=f"Question {self.current_index + 1}/{self.total_questions}",
            markdown=result.feedback,
            data=data,
        )
        if result.is_correct:
            self.score += 1
        self.feedback = event
        self.state = QuizState.SHOWING_FEEDBACK
        self._pending = loop.create_task(self._after_feedback())

        # Listener runs after the state is committed
        self._publish(event)
        return event

    async def wait_idle(self) -> None:
        """Wait until a scheduled transition (if any) has run."""
        task = self._pending
        if task is not None and not task.done():
            await asyncio.wait({task})

    def close(self) -> None:
        """Discard the session.

        Cancels a transition that has not fired yet. A progress update that
        is already running is left to finish.
        """
        if self.state is QuizState.CLOSED:
            return
        if self.state is QuizState.SHOWING_FEEDBACK and self._pending is not None:
            self._pending.cancel()
        logger.debug("quiz_closed", lesson_id=self.lesson.id, state=self.state.name)
        self.state = QuizState.CLOSED
        self.feedback = None

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _record(
        self,
        event_type: QuizEventType,
        title: str = "",
        markdown: str = "",
        data: dict[str, Any] | None = None,
    ) -> QuizEvent:
        self._seq += 1
        event = QuizEvent(
            event_type=event_type,
            event_id=f"{self.lesson.id}-e{self._seq:03d}",
            title=title,
            markdown=markdown,
            data=data or {},
        )
        self.events.append(event)
        return event

    def _publish(self, event: QuizEvent) -> None:
        if self.listener is not None:
            self.listener(event)

    async def _after_feedback(self) -> None:
        await asyncio.sleep(self.feedback_seconds)
        if self.state is not QuizState.SHOWING_FEEDBACK:
            return

        self.feedback = None
        if self.is_last_question:
            self.state = QuizState.COMPLETED
            completed = self._record(
                QuizEventType.QUIZ_COMPLETED,
                title="Quiz Results",
                markdown=f"You scored {self.score} out of {self.total_questions}.",
                data={"score": self.score, "total_questions": self.total_questions},
            )
            logger.info(
                "quiz_completed",
                lesson_id=self.lesson.id,
                user_id=self.context.user_id,
                score=self.score,
                total=self.total_questions,
            )
            await self._notify_completed()
            self._publish(completed)
        else:
            self.current_index += 1
            self.selected_answer = None
            self.state = QuizState.IN_PROGRESS

    async def _notify_completed(self) -> None:
        if self._progress_notified or self.tracker is None:
            return
        self._progress_notified = True
        try:
            await self.tracker.complete_lesson(self.lesson.id)
        except RepositoryError as e:
            logger.error("progress_update_failed", lesson_id=self.lesson.id, error=str(e))
            self.error = PROGRESS_ERROR_MESSAGE
