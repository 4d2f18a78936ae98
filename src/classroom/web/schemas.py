"""Pydantic schemas for Web API.

Serialization models for users, lessons, progress and quiz sessions.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt


# =============================================================================
# USER SCHEMAS
# =============================================================================


class EnrollRequest(BaseModel):
    """Request body for first sign-in."""

    user_id: str = Field(..., min_length=1, max_length=128)
    role: Literal["teacher", "student"] = "student"


class UserResponse(BaseModel):
    """Response for a user."""

    user_id: str
    role: str


# =============================================================================
# LESSON SCHEMAS
# =============================================================================


class LessonCreate(BaseModel):
    """Request body for creating a lesson."""

    user_id: str
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    questions: list[dict[str, Any]] = Field(default_factory=list)


class LessonCreated(BaseModel):
    """Response after creating a lesson."""

    lesson_id: str


class LessonSummary(BaseModel):
    """Lesson entry in the ordered list."""

    id: str
    title: str
    order: int
    total_questions: int


class LessonListResponse(BaseModel):
    """Response for list of lessons."""

    lessons: list[LessonSummary]
    count: int


class LessonResponse(BaseModel):
    """A lesson with its questions (answers hidden)."""

    id: str
    title: str
    content: str
    order: int
    questions: list[dict[str, Any]]


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class ProgressResponse(BaseModel):
    """Completion state of a student."""

    student_id: str
    completed_lessons: list[str]
    total_lessons: int
    percent_complete: float


# =============================================================================
# QUIZ SESSION SCHEMAS
# =============================================================================


class SessionStartRequest(BaseModel):
    """Request to open a lesson's quiz."""

    user_id: str
    lesson_id: str


class AnswerRequest(BaseModel):
    """Pending answer: option index or free text. Booleans are rejected."""

    value: StrictInt | str


class QuizEventResponse(BaseModel):
    """Event emitted by a quiz session."""

    event_id: str
    event_type: str
    title: str = ""
    markdown: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    """State of a quiz session."""

    session_id: str
    user_id: str
    created_at: str
    lesson_id: str
    lesson_title: str
    state: str
    current_index: int
    total_questions: int
    question: dict[str, Any] | None = None
    selected_answer: int | str | None = None
    score: int
    completed: bool
    feedback: QuizEventResponse | None = None
    error: str | None = None


class AnswerResponse(BaseModel):
    """Result of selecting an answer."""

    accepted: bool
    session: SessionResponse


class AdvanceResponse(BaseModel):
    """Result of advancing; ``event`` is null when the call was ignored."""

    event: QuizEventResponse | None = None
    session: SessionResponse


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
