"""Repository interfaces used by the core.

Lessons, progress records and user roles live in an external store. The
core only talks to these protocols; ``classroom.db`` provides a SQLite
implementation.

Not-found is a normal result (``None``). Backend failures raise
``RepositoryError`` and are handled at the call boundary.
"""

from __future__ import annotations

from typing import Protocol

from classroom.core.models import Lesson, LessonDraft, ProgressRecord, Role


class RepositoryError(Exception):
    """Backend failure while reading or writing."""

    pass


class LessonRepository(Protocol):
    """Stored lessons."""

    async def get_lesson(self, lesson_id: str) -> Lesson | None: ...

    async def list_lessons(self) -> list[Lesson]:
        """All lessons sorted by order ascending."""
        ...

    async def max_order(self) -> int | None:
        """Highest order among existing lessons, None when there are none."""
        ...

    async def create_lesson(self, draft: LessonDraft, order: int) -> str:
        """Persist a new lesson and return its id."""
        ...


class ProgressRepository(Protocol):
    """Per-student completed lesson sets."""

    async def get_progress(self, student_id: str) -> ProgressRecord | None: ...

    async def put_progress(self, record: ProgressRecord) -> None:
        """Replace the whole record."""
        ...

    async def add_completed_lesson(self, student_id: str, lesson_id: str) -> None:
        """Union ``lesson_id`` into an existing record."""
        ...


class UserRepository(Protocol):
    """User roles."""

    async def get_role(self, user_id: str) -> Role | None: ...

    async def set_role(self, user_id: str, role: Role) -> None: ...
