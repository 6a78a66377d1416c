"""
Unit tests for the pydantic models and the import session state machine.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from lms_importer.core.errors import InvalidStateTransitionError
from lms_importer.core.models import (
    BatchEntry,
    CommitTally,
    CommitTarget,
    CourseItem,
    DuplicateWarning,
    ImportBatch,
    ImportSession,
    QuestionItem,
    RawRecord,
    Uploader,
    ValidationError,
)
from lms_importer.core.models.import_item import answer_letter


def make_question(**overrides) -> QuestionItem:
    fields = {
        "question_text": "2+2=?",
        "options": ["3", "4"],
        "correct_answer": 1,
        "question_type": "MCQ",
        "marks": 1,
        "difficulty": "Easy",
    }
    fields.update(overrides)
    return QuestionItem(**fields)


def make_session() -> ImportSession:
    return ImportSession(
        entity="question",
        target=CommitTarget(collection="quizzes/q1/questions"),
        uploader=Uploader(uid="u1"),
    )


@pytest.mark.unit
class TestRawRecord:
    """Tests for RawRecord"""

    def test_get_missing_column_returns_empty(self):
        record = RawRecord(row=1, line=2, values={"a": "1"})
        assert record.get("b") == ""

    def test_row_starts_at_one(self):
        with pytest.raises(PydanticValidationError):
            RawRecord(row=0, line=2, values={})


@pytest.mark.unit
class TestQuestionItem:
    """Tests for QuestionItem"""

    def test_answer_index_must_be_within_options(self):
        with pytest.raises(PydanticValidationError, match="outside"):
            make_question(correct_answer=2)

    def test_short_answer_needs_text(self):
        with pytest.raises(PydanticValidationError):
            make_question(question_type="Short Answer", options=[], correct_answer=0)

    def test_short_answer_cannot_have_options(self):
        with pytest.raises(PydanticValidationError):
            make_question(question_type="Short Answer", correct_answer="Four")

    def test_marks_bounds(self):
        with pytest.raises(PydanticValidationError):
            make_question(marks=11)

    def test_document_uses_camel_case(self):
        document = make_question(explanation="Add them").to_document()

        assert document["questionText"] == "2+2=?"
        assert document["correctAnswer"] == 1
        assert document["explanation"] == "Add them"

    def test_row_writes_answer_letter_and_pads_options(self):
        row = make_question().to_row()

        assert row["correctAnswer"] == "B"
        assert (row["optionA"], row["optionB"], row["optionC"], row["optionD"]) == ("3", "4", "", "")
        assert row["marks"] == "1"

    def test_answer_letter(self):
        assert [answer_letter(i) for i in range(4)] == ["A", "B", "C", "D"]


@pytest.mark.unit
class TestCourseItem:
    """Tests for CourseItem"""

    def test_category_must_be_canonical(self):
        with pytest.raises(PydanticValidationError):
            CourseItem(
                course_code="X1", course_name="X", subject_category="S",
                course_category="core", credits=3,
            )

    def test_row_renders_credits_as_text(self):
        item = CourseItem(
            course_code="CSA101", course_name="Intro", subject_category="CS",
            course_category="Core", credits=3,
        )
        assert item.to_row()["credits"] == "3"
        assert item.dedupe_key == "CSA101"


@pytest.mark.unit
class TestBatchAndTally:
    """Tests for ImportBatch, DuplicateWarning and CommitTally"""

    def test_invalid_rows_are_unique_and_sorted(self):
        batch = ImportBatch(
            entity="question",
            errors=[
                ValidationError(row=5, field="marks", message="bad"),
                ValidationError(row=2, field="marks", message="bad"),
                ValidationError(row=5, field="difficulty", message="bad"),
            ],
        )
        assert batch.invalid_rows == [2, 5]
        assert batch.has_errors

    def test_items_follow_entries(self):
        item = make_question()
        batch = ImportBatch(entity="question", entries=[BatchEntry(row=1, item=item)])
        assert batch.items == [item]

    def test_warning_messages(self):
        assert DuplicateWarning(count=2).message == "Found 2 duplicate item(s); they will be skipped"
        assert "store unavailable" in DuplicateWarning(store_error="timeout").message

    def test_tally_total_and_summary(self):
        tally = CommitTally(succeeded=3, failed=1, skipped_duplicates=2)
        assert tally.total == 6
        assert tally.summary() == "Uploaded 3, failed 1, skipped 2 duplicate(s)"

    def test_validation_error_str(self):
        error = ValidationError(row=4, field="correctAnswer", message="must be A or B")
        assert str(error) == "Row 4, correctAnswer: must be A or B"


@pytest.mark.unit
class TestImportSession:
    """Tests for the ImportSession state machine"""

    def test_happy_path(self):
        session = make_session()

        for state in ("validating", "awaiting_confirmation", "committing", "done"):
            session.transition(state)

        assert session.state == "done"
        assert session.finished

    def test_cannot_skip_confirmation(self):
        session = make_session()
        session.transition("validating")

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            session.transition("committing")

        assert exc_info.value.current == "validating"

    def test_cancel_closes_session_and_drops_batch(self):
        session = make_session()
        session.transition("validating")
        session.batch = ImportBatch(entity="question")
        session.transition("awaiting_confirmation")

        session.transition("idle")

        assert session.closed
        assert session.batch is None
        with pytest.raises(InvalidStateTransitionError):
            session.transition("validating")

    def test_cannot_cancel_while_committing(self):
        session = make_session()
        for state in ("validating", "awaiting_confirmation", "committing"):
            session.transition(state)

        with pytest.raises(InvalidStateTransitionError):
            session.transition("idle")

    def test_terminal_states_have_no_exit(self):
        session = make_session()
        for state in ("validating", "awaiting_confirmation", "committing", "partially_failed"):
            session.transition(state)

        with pytest.raises(InvalidStateTransitionError):
            session.transition("done")

    def test_count_target(self):
        assert not CommitTarget(collection="courses").tracks_count
        assert CommitTarget(
            collection="quizzes/q1/questions",
            count_collection="quizzes",
            count_document_id="q1",
            count_field="questionsCount",
        ).tracks_count
