"""Tests for the SQLite repositories."""

import sqlite3

import pytest

from classroom.core.models import (
    LessonDraft,
    MultipleChoiceQuestion,
    ProgressRecord,
    Role,
    ShortAnswerQuestion,
)
from classroom.core.ordering import publish_lesson
from classroom.core.repositories import RepositoryError
from classroom.db import (
    SqliteLessonRepository,
    SqliteProgressRepository,
    SqliteUserRepository,
    get_db,
    init_db,
)


@pytest.fixture
def draft():
    return LessonDraft(
        title="Capitals",
        content="Paris is the capital of France.",
        questions=(
            MultipleChoiceQuestion(text="Capital?", options=("Lyon", "Paris"), correct_answer=1),
            ShortAnswerQuestion(text="Country?", correct_answer="France", keyword="franc"),
        ),
    )


class TestSchema:
    """Schema creation."""

    def test_init_is_idempotent(self, db_path):
        init_db(db_path)
        with get_db(db_path) as conn:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        assert {"lessons", "users", "progress", "completed_lessons"} <= tables

    def test_role_is_constrained(self, db_path):
        with pytest.raises(sqlite3.IntegrityError):
            with get_db(db_path) as conn:
                conn.execute("INSERT INTO users (user_id, role) VALUES ('x', 'admin')")


class TestLessonRepository:
    """Stored lessons."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, db_path, draft):
        repo = SqliteLessonRepository(db_path)
        lesson_id = await repo.create_lesson(draft, 1)

        lesson = await repo.get_lesson(lesson_id)
        assert lesson.title == "Capitals"
        assert lesson.order == 1
        assert lesson.questions == draft.questions

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, db_path):
        assert await SqliteLessonRepository(db_path).get_lesson("nope") is None

    @pytest.mark.asyncio
    async def test_max_order_empty(self, db_path):
        assert await SqliteLessonRepository(db_path).max_order() is None

    @pytest.mark.asyncio
    async def test_list_sorted_by_order(self, db_path, draft):
        repo = SqliteLessonRepository(db_path)
        await repo.create_lesson(draft.with_title("Third"), 3)
        await repo.create_lesson(draft.with_title("First"), 1)
        await repo.create_lesson(draft.with_title("Second"), 2)

        titles = [lesson.title for lesson in await repo.list_lessons()]
        assert titles == ["First", "Second", "Third"]
        assert await repo.max_order() == 3

    @pytest.mark.asyncio
    async def test_publish_assigns_increasing_order(self, db_path, draft):
        repo = SqliteLessonRepository(db_path)
        first = await publish_lesson(repo, draft)
        second = await publish_lesson(repo, draft.with_title("Next"))

        assert (await repo.get_lesson(first)).order == 1
        assert (await repo.get_lesson(second)).order == 2

    @pytest.mark.asyncio
    async def test_malformed_row_raises_repository_error(self, db_path):
        with get_db(db_path) as conn:
            conn.execute(
                "INSERT INTO lessons (lesson_id, title, content, questions, display_order) "
                "VALUES ('bad', 'T', 'C', 'not json', 1)"
            )
        with pytest.raises(RepositoryError):
            await SqliteLessonRepository(db_path).get_lesson("bad")

    @pytest.mark.asyncio
    async def test_sqlite_failure_raises_repository_error(self, tmp_path):
        """A path that is a directory cannot be opened as a database."""
        repo = SqliteLessonRepository(tmp_path)
        with pytest.raises(RepositoryError):
            await repo.list_lessons()


class TestProgressRepository:
    """Stored completion sets."""

    @pytest.mark.asyncio
    async def test_missing_record(self, db_path):
        assert await SqliteProgressRepository(db_path).get_progress("stu01") is None

    @pytest.mark.asyncio
    async def test_empty_record_exists(self, db_path):
        repo = SqliteProgressRepository(db_path)
        await repo.put_progress(ProgressRecord(student_id="stu01"))

        record = await repo.get_progress("stu01")
        assert record is not None
        assert record.completed_lessons == frozenset()

    @pytest.mark.asyncio
    async def test_put_replaces_set(self, db_path):
        repo = SqliteProgressRepository(db_path)
        await repo.put_progress(ProgressRecord("stu01", frozenset({"L1", "L2"})))
        await repo.put_progress(ProgressRecord("stu01", frozenset({"L3"})))

        record = await repo.get_progress("stu01")
        assert record.completed_lessons == frozenset({"L3"})

    @pytest.mark.asyncio
    async def test_stale_put_drops_lesson_added_in_between(self, db_path):
        """Whole-set writes are last-writer-wins; there is no merge."""
        repo = SqliteProgressRepository(db_path)
        await repo.put_progress(ProgressRecord("stu01", frozenset({"L1"})))
        await repo.add_completed_lesson("stu01", "L2")
        await repo.put_progress(ProgressRecord("stu01", frozenset({"L3"})))

        record = await repo.get_progress("stu01")
        assert record.completed_lessons == frozenset({"L3"})

    @pytest.mark.asyncio
    async def test_add_is_a_set_union(self, db_path):
        repo = SqliteProgressRepository(db_path)
        await repo.put_progress(ProgressRecord("stu01", frozenset({"L1"})))
        await repo.add_completed_lesson("stu01", "L2")
        await repo.add_completed_lesson("stu01", "L2")

        record = await repo.get_progress("stu01")
        assert record.completed_lessons == frozenset({"L1", "L2"})


class TestUserRepository:
    """Stored roles."""

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_path):
        assert await SqliteUserRepository(db_path).get_role("ghost") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, db_path):
        repo = SqliteUserRepository(db_path)
        await repo.set_role("tea01", Role.TEACHER)
        assert await repo.get_role("tea01") is Role.TEACHER
