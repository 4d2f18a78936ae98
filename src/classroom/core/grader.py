"""Grading module.

Responsibilities:
- Decide whether a candidate answer is correct for a question
- Build the feedback shown after each answer

Multiple choice answers are option indices. Short answers are compared
case-insensitively; when the question has a keyword, any answer containing
it is accepted too. The keyword fallback is lenient on purpose and accepts
answers like "not paris at all" for the keyword "paris". This is a known
precision tradeoff, not a bug.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from classroom.core.models import MultipleChoiceQuestion, Question, ShortAnswerQuestion

POSITIVE_FEEDBACK = "Correct!"
NEGATIVE_FEEDBACK = "Incorrect. The correct answer is: {answer}"


@dataclass(frozen=True)
class AnswerGrade:
    """Verdict and feedback for a single answer."""

    is_correct: bool
    feedback: str
    correct_answer: str
    given_answer: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_correct": self.is_correct,
            "feedback": self.feedback,
            "correct_answer": self.correct_answer,
            "given_answer": self.given_answer,
        }


def _normalize_text(value: str) -> str:
    return value.lower()


def _grade_multiple_choice(question: MultipleChoiceQuestion, answer: Any) -> bool:
    # bool is an int subclass; True must not select option 1
    if isinstance(answer, bool) or not isinstance(answer, int):
        return False
    return answer == question.correct_answer


def _grade_short_answer(question: ShortAnswerQuestion, answer: Any) -> bool:
    if not isinstance(answer, str):
        return False
    candidate = _normalize_text(answer)
    if candidate == _normalize_text(question.correct_answer):
        return True
    if question.keyword:
        return _normalize_text(question.keyword) in candidate
    return False


def grade(question: Question, answer: Any) -> bool:
    """Return True if ``answer`` is correct for ``question``.

    Never fails for any answer value: out-of-range indices, wrong types and
    empty strings are simply incorrect.

    Raises:
        TypeError: If ``question`` is not a known question type
    """
    if isinstance(question, MultipleChoiceQuestion):
        return _grade_multiple_choice(question, answer)
    if isinstance(question, ShortAnswerQuestion):
        return _grade_short_answer(question, answer)
    raise TypeError(f"Unsupported question type: {type(question).__name__}")


def correct_answer_text(question: Question) -> str:
    """Literal correct answer to reveal after a wrong answer.

    For short answers this is the canonical answer, never the keyword.
    """
    if isinstance(question, MultipleChoiceQuestion):
        if 0 <= question.correct_answer < len(question.options):
            return question.options[question.correct_answer]
        return str(question.correct_answer)
    if isinstance(question, ShortAnswerQuestion):
        return question.correct_answer
    raise TypeError(f"Unsupported question type: {type(question).__name__}")


def grade_answer(question: Question, answer: Any) -> AnswerGrade:
    """Grade an answer and build its feedback message."""
    is_correct = grade(question, answer)
    expected = correct_answer_text(question)
    if is_correct:
        feedback = POSITIVE_FEEDBACK
    else:
        feedback = NEGATIVE_FEEDBACK.format(answer=expected)
    return AnswerGrade(
        is_correct=is_correct,
        feedback=feedback,
        correct_answer=expected,
        given_answer=answer,
    )
