"""Lesson and question model.

Responsibilities:
- Question sum type (multiple choice / short answer)
- Lesson aggregate and immutable authoring drafts
- Progress record and explicit session context

Storage format (dict):
- {"type": "multiple_choice", "text", "options", "correct_answer"}
- {"type": "short_answer", "text", "correct_answer", "keyword"}
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Union

# =============================================================================
# QUESTIONS
# =============================================================================

DEFAULT_OPTION_COUNT = 4


class QuestionFormatError(Exception):
    """Lesson or question data has the wrong shape."""

    pass


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    """Question answered by picking one of the options."""

    text: str
    options: tuple[str, ...]
    correct_answer: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": "multiple_choice",
            "text": self.text,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
        }


@dataclass(frozen=True)
class ShortAnswerQuestion:
    """Free-text question with an optional lenient keyword."""

    text: str
    correct_answer: str
    keyword: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "type": "short_answer",
            "text": self.text,
            "correct_answer": self.correct_answer,
        }
        if self.keyword is not None:
            result["keyword"] = self.keyword
        return result


Question = Union[MultipleChoiceQuestion, ShortAnswerQuestion]


def question_from_dict(data: dict[str, Any]) -> Question:
    """Parse a stored question.

    Dicts without a ``type`` key are multiple choice when they carry
    ``options`` (legacy lessons only had that shape).

    Raises:
        QuestionFormatError: If the type is unknown or fields are missing
    """
    if not isinstance(data, dict):
        raise QuestionFormatError(f"Question must be a mapping, got {type(data).__name__}")

    question_type = data.get("type")
    if question_type is None and "options" in data:
        question_type = "multiple_choice"

    try:
        if question_type == "multiple_choice":
            return MultipleChoiceQuestion(
                text=str(data.get("text", "")),
                options=tuple(str(o) for o in data["options"]),
                correct_answer=int(data["correct_answer"]),
            )
        if question_type == "short_answer":
            keyword = data.get("keyword")
            return ShortAnswerQuestion(
                text=str(data.get("text", "")),
                correct_answer=str(data["correct_answer"]),
                keyword=str(keyword) if keyword is not None else None,
            )
    except (KeyError, TypeError, ValueError) as e:
        raise QuestionFormatError(f"Malformed {question_type} question: {e}") from e

    raise QuestionFormatError(f"Unknown question type: {question_type!r}")


# =============================================================================
# LESSONS
# =============================================================================


@dataclass(frozen=True)
class Lesson:
    """A stored lesson: content plus an ordered quiz."""

    id: str
    title: str
    content: str
    questions: tuple[Question, ...]
    order: int

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "questions": [q.to_dict() for q in self.questions],
            "order": self.order,
        }


class LessonValidationError(Exception):
    """A lesson draft cannot be published."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


@dataclass(frozen=True)
class LessonDraft:
    """A lesson being authored.

    Drafts are values: every edit returns a new draft and leaves the
    receiver untouched.
    """

    title: str = ""
    content: str = ""
    questions: tuple[Question, ...] = ()

    def with_title(self, title: str) -> LessonDraft:
        return replace(self, title=title)

    def with_content(self, content: str) -> LessonDraft:
        return replace(self, content=content)

    def add_question(self, question: Question | None = None) -> LessonDraft:
        """Append a question (a blank four-option question by default)."""
        if question is None:
            question = MultipleChoiceQuestion(
                text="",
                options=("",) * DEFAULT_OPTION_COUNT,
                correct_answer=0,
            )
        return replace(self, questions=self.questions + (question,))

    def add_short_answer_question(self) -> LessonDraft:
        return self.add_question(ShortAnswerQuestion(text="", correct_answer=""))

    def update_question(self, index: int, **fields: Any) -> LessonDraft:
        """Replace fields of the question at ``index``.

        Raises:
            IndexError: If index is out of range
            TypeError: If a field does not exist on that question type
        """
        questions = list(self.questions)
        questions[index] = replace(questions[index], **fields)
        return replace(self, questions=tuple(questions))

    def update_option(
        self, question_index: int, option_index: int, value: str
    ) -> LessonDraft:
        """Replace one option text of a multiple-choice question."""
        question = self.questions[question_index]
        if not isinstance(question, MultipleChoiceQuestion):
            raise TypeError(f"Question {question_index} has no options")
        options = list(question.options)
        options[option_index] = value
        return self.update_question(question_index, options=tuple(options))

    def remove_question(self, index: int) -> LessonDraft:
        questions = list(self.questions)
        del questions[index]
        return replace(self, questions=tuple(questions))

    def validate(self) -> list[str]:
        """Return a list of problems; empty when the draft can be published."""
        problems: list[str] = []
        if not self.title.strip():
            problems.append("Title is required")
        if not self.content.strip():
            problems.append("Content is required")

        for num, question in enumerate(self.questions, start=1):
            if not question.text.strip():
                problems.append(f"Question {num}: text is required")
            if isinstance(question, MultipleChoiceQuestion):
                if len(question.options) < 2:
                    problems.append(f"Question {num}: needs at least 2 options")
                if not 0 <= question.correct_answer < len(question.options):
                    problems.append(
                        f"Question {num}: correct answer {question.correct_answer} "
                        f"is not a valid option"
                    )
                if any(not o.strip() for o in question.options):
                    problems.append(f"Question {num}: options cannot be empty")
            elif not question.correct_answer.strip():
                problems.append(f"Question {num}: correct answer is required")
        return problems

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LessonDraft:
        """Build a draft from authoring data (YAML/JSON).

        Raises:
            QuestionFormatError: If the data or one of its questions has the
                wrong shape
        """
        if not isinstance(data, dict):
            raise QuestionFormatError(f"Lesson must be a mapping, got {type(data).__name__}")
        questions = data.get("questions") or []
        if not isinstance(questions, list):
            raise QuestionFormatError("Lesson questions must be a list")
        return cls(
            title=str(data.get("title", "")),
            content=str(data.get("content", "")),
            questions=tuple(question_from_dict(q) for q in questions),
        )


# =============================================================================
# USERS AND PROGRESS
# =============================================================================


class Role(str, Enum):
    """Role of a signed-in user."""

    TEACHER = "teacher"
    STUDENT = "student"


@dataclass(frozen=True)
class SessionContext:
    """Who is acting. Passed explicitly to sessions and trackers."""

    user_id: str
    role: Role

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.role is Role.TEACHER


@dataclass(frozen=True)
class ProgressRecord:
    """Completed lesson ids of one student (membership only)."""

    student_id: str
    completed_lessons: frozenset[str] = field(default_factory=frozenset)

    def with_lesson(self, lesson_id: str) -> ProgressRecord:
        return replace(self, completed_lessons=self.completed_lessons | {lesson_id})

    def has_completed(self, lesson_id: str) -> bool:
        return lesson_id in self.completed_lessons
