"""Tests for the lesson and question model."""

import pytest

from classroom.core.models import (
    LessonDraft,
    MultipleChoiceQuestion,
    ProgressRecord,
    QuestionFormatError,
    Role,
    SessionContext,
    ShortAnswerQuestion,
    question_from_dict,
)


class TestQuestionFromDict:
    """Parsing stored questions."""

    def test_multiple_choice(self):
        question = question_from_dict(
            {"type": "multiple_choice", "text": "Q", "options": ["a", "b"], "correct_answer": 1}
        )
        assert question == MultipleChoiceQuestion(text="Q", options=("a", "b"), correct_answer=1)

    def test_short_answer_with_keyword(self):
        question = question_from_dict(
            {"type": "short_answer", "text": "Q", "correct_answer": "Mars", "keyword": "mars"}
        )
        assert isinstance(question, ShortAnswerQuestion)
        assert question.keyword == "mars"

    def test_legacy_dict_without_type(self):
        """Old lessons only stored options-based questions."""
        question = question_from_dict({"text": "Q", "options": ["a", "b"], "correct_answer": 0})
        assert isinstance(question, MultipleChoiceQuestion)

    def test_unknown_type_raises(self):
        with pytest.raises(QuestionFormatError):
            question_from_dict({"type": "essay", "text": "Q"})

    def test_missing_field_raises(self):
        with pytest.raises(QuestionFormatError):
            question_from_dict({"type": "multiple_choice", "text": "Q"})

    def test_non_mapping_raises(self):
        with pytest.raises(QuestionFormatError):
            question_from_dict("just text")

    def test_to_dict_round_trip(self, mcq_question, short_question):
        assert question_from_dict(mcq_question.to_dict()) == mcq_question
        assert question_from_dict(short_question.to_dict()) == short_question


class TestLessonDraft:
    """Immutable authoring edits."""

    def test_edits_return_new_draft(self):
        draft = LessonDraft()
        edited = draft.with_title("Capitals").with_content("Paris...")
        assert draft.title == ""
        assert edited.title == "Capitals"
        assert edited.content == "Paris..."

    def test_add_question_defaults_to_four_blank_options(self):
        draft = LessonDraft().add_question()
        question = draft.questions[0]
        assert isinstance(question, MultipleChoiceQuestion)
        assert question.options == ("", "", "", "")
        assert question.correct_answer == 0

    def test_update_question_and_option(self):
        draft = (
            LessonDraft()
            .add_question()
            .update_question(0, text="Capital?", correct_answer=2)
            .update_option(0, 2, "Paris")
        )
        question = draft.questions[0]
        assert question.text == "Capital?"
        assert question.correct_answer == 2
        assert question.options[2] == "Paris"

    def test_update_option_on_short_answer_raises(self):
        draft = LessonDraft().add_short_answer_question()
        with pytest.raises(TypeError):
            draft.update_option(0, 0, "x")

    def test_remove_question(self):
        draft = LessonDraft().add_question().add_short_answer_question().remove_question(0)
        assert len(draft.questions) == 1
        assert isinstance(draft.questions[0], ShortAnswerQuestion)

    def test_validate_empty_draft(self):
        problems = LessonDraft().validate()
        assert "Title is required" in problems
        assert "Content is required" in problems

    def test_validate_reports_bad_questions(self):
        draft = LessonDraft(
            title="T",
            content="C",
            questions=(
                MultipleChoiceQuestion(text="Q", options=("a", "b"), correct_answer=5),
                ShortAnswerQuestion(text="", correct_answer=""),
            ),
        )
        problems = draft.validate()
        assert any("Question 1" in p and "valid option" in p for p in problems)
        assert "Question 2: text is required" in problems
        assert "Question 2: correct answer is required" in problems

    def test_validate_accepts_lesson_without_questions(self):
        assert LessonDraft(title="T", content="C").validate() == []

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(QuestionFormatError):
            LessonDraft.from_dict(["just", "a list"])

    def test_from_dict_rejects_questions_not_a_list(self):
        with pytest.raises(QuestionFormatError):
            LessonDraft.from_dict({"title": "T", "content": "C", "questions": "abc"})

    def test_from_dict(self):
        draft = LessonDraft.from_dict(
            {
                "title": "Capitals",
                "content": "Paris",
                "questions": [{"type": "short_answer", "text": "Q", "correct_answer": "A"}],
            }
        )
        assert draft.title == "Capitals"
        assert len(draft.questions) == 1


class TestProgressAndContext:
    """Progress record and session context."""

    def test_with_lesson_is_a_set_union(self):
        record = ProgressRecord(student_id="s").with_lesson("L1").with_lesson("L1")
        assert record.completed_lessons == frozenset({"L1"})
        assert record.has_completed("L1")

    def test_context_roles(self, student, teacher):
        assert student.is_student and not student.is_teacher
        assert teacher.is_teacher and not teacher.is_student

    def test_role_values(self):
        assert Role("teacher") is Role.TEACHER
        assert SessionContext(user_id="u", role=Role("student")).is_student
