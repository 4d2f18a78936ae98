"""Shared fixtures: lessons, in-memory repositories and a temporary database."""

from pathlib import Path

import pytest

from classroom.config.app_config import clear_config_cache
from classroom.core.models import (
    Lesson,
    LessonDraft,
    MultipleChoiceQuestion,
    ProgressRecord,
    Role,
    SessionContext,
    ShortAnswerQuestion,
)
from classroom.core.repositories import RepositoryError
from classroom.db import init_db


class InMemoryLessonRepository:
    """Lesson store kept in a dict."""

    def __init__(self, lessons=None):
        self.lessons = {lesson.id: lesson for lesson in (lessons or [])}
        self.fail = False
        self._next_id = 1

    def _check(self):
        if self.fail:
            raise RepositoryError("lesson store unavailable")

    async def get_lesson(self, lesson_id):
        self._check()
        return self.lessons.get(lesson_id)

    async def list_lessons(self):
        self._check()
        return sorted(self.lessons.values(), key=lambda lesson: lesson.order)

    async def max_order(self):
        self._check()
        if not self.lessons:
            return None
        return max(lesson.order for lesson in self.lessons.values())

    async def create_lesson(self, draft: LessonDraft, order: int) -> str:
        self._check()
        lesson_id = f"lesson-{self._next_id}"
        self._next_id += 1
        self.lessons[lesson_id] = Lesson(
            id=lesson_id,
            title=draft.title,
            content=draft.content,
            questions=draft.questions,
            order=order,
        )
        return lesson_id


class InMemoryProgressRepository:
    """Progress store kept in a dict, with call counters."""

    def __init__(self):
        self.records: dict[str, ProgressRecord] = {}
        self.fail = False
        self.put_calls = 0
        self.add_calls = 0

    def _check(self):
        if self.fail:
            raise RepositoryError("progress store unavailable")

    async def get_progress(self, student_id):
        self._check()
        return self.records.get(student_id)

    async def put_progress(self, record):
        self._check()
        self.put_calls += 1
        self.records[record.student_id] = record

    async def add_completed_lesson(self, student_id, lesson_id):
        self._check()
        self.add_calls += 1
        record = self.records.get(student_id, ProgressRecord(student_id=student_id))
        self.records[student_id] = record.with_lesson(lesson_id)


class InMemoryUserRepository:
    """Role store kept in a dict."""

    def __init__(self):
        self.roles: dict[str, Role] = {}

    async def get_role(self, user_id):
        return self.roles.get(user_id)

    async def set_role(self, user_id, role):
        self.roles[user_id] = role


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test loads configuration from scratch."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def mcq_question() -> MultipleChoiceQuestion:
    return MultipleChoiceQuestion(
        text="What is the capital of France?",
        options=("Lyon", "Paris", "Nice", "Lille"),
        correct_answer=1,
    )


@pytest.fixture
def short_question() -> ShortAnswerQuestion:
    return ShortAnswerQuestion(
        text="Which planet is known as the red planet?",
        correct_answer="Mars",
        keyword="mars",
    )


@pytest.fixture
def two_mcq_lesson() -> Lesson:
    """Lesson with two multiple choice questions, both answered by option 0."""
    return Lesson(
        id="L1",
        title="Basics",
        content="Two questions.",
        questions=(
            MultipleChoiceQuestion(text="Q1", options=("a", "b"), correct_answer=0),
            MultipleChoiceQuestion(text="Q2", options=("a", "b"), correct_answer=0),
        ),
        order=1,
    )


@pytest.fixture
def student() -> SessionContext:
    return SessionContext(user_id="stu01", role=Role.STUDENT)


@pytest.fixture
def teacher() -> SessionContext:
    return SessionContext(user_id="tea01", role=Role.TEACHER)


@pytest.fixture
def lesson_repo(two_mcq_lesson) -> InMemoryLessonRepository:
    return InMemoryLessonRepository([two_mcq_lesson])


@pytest.fixture
def progress_repo() -> InMemoryProgressRepository:
    return InMemoryProgressRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Initialized SQLite database in a temporary directory."""
    path = tmp_path / "db" / "classroom.db"
    init_db(path)
    return path


@pytest.fixture
def empty_lesson_repo() -> InMemoryLessonRepository:
    return InMemoryLessonRepository()
