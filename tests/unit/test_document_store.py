"""
Unit tests for the in-memory document store and DocumentWriter.
"""

from datetime import datetime, timezone

import pytest

from lms_importer.core.errors import CommitItemError
from lms_importer.core.models import BatchEntry, CommitTarget, CourseItem, QuestionItem, Uploader
from lms_importer.core.schema import COURSE_SCHEMA, QUESTION_SCHEMA
from lms_importer.importer.writers import DocumentWriter
from lms_importer.store import InMemoryDocumentStore
from lms_importer.utils.validation import InputValidationError

FIXED_NOW = datetime(2026, 5, 4, 10, 0, tzinfo=timezone.utc)


def question_entry(row: int = 1) -> BatchEntry:
    return BatchEntry(row=row, item=QuestionItem(
        question_text="2+2=?",
        options=["3", "4"],
        correct_answer=1,
        question_type="MCQ",
        marks=1,
        difficulty="Easy",
        category="Math",
    ))


@pytest.mark.unit
class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore"""

    def test_create_and_list(self):
        store = InMemoryDocumentStore()
        first = store.create("courses", {"courseCode": "CSA101"})
        second = store.create("courses", {"courseCode": "CSA102"})

        documents = store.list("courses")

        assert [d["id"] for d in documents] == [first, second]
        assert store.count("courses") == 2

    def test_list_with_filter(self):
        store = InMemoryDocumentStore()
        store.create("courses", {"courseCode": "CSA101", "isApproved": True})
        store.create("courses", {"courseCode": "CSA102", "isApproved": False})

        assert [d["courseCode"] for d in store.list("courses", {"isApproved": False})] == ["CSA102"]

    def test_documents_are_copied(self):
        store = InMemoryDocumentStore()
        document = {"options": ["a"]}
        document_id = store.create("c", document)
        document["options"].append("b")

        assert store.get("c", document_id)["options"] == ["a"]

    def test_update_merges_fields(self):
        store = InMemoryDocumentStore()
        store.put("quizzes", "q1", {"title": "Quiz"})

        store.update("quizzes", "q1", {"questionsCount": 3})

        assert store.get("quizzes", "q1") == {"id": "q1", "title": "Quiz", "questionsCount": 3}

    def test_update_missing_document_raises(self):
        with pytest.raises(KeyError):
            InMemoryDocumentStore().update("quizzes", "nope", {"questionsCount": 1})

    def test_nested_collection_paths(self):
        store = InMemoryDocumentStore()
        store.create("/quizzes/q1/questions/", {"questionText": "x"})

        assert store.count("quizzes/q1/questions") == 1

    def test_rejects_bad_collection_names(self):
        with pytest.raises(InputValidationError):
            InMemoryDocumentStore().create("quizzes/../admin", {})


@pytest.mark.unit
class TestDocumentWriter:
    """Tests for DocumentWriter"""

    def test_question_document_has_attribution(self, memory_store, uploader):
        writer = DocumentWriter(memory_store, QUESTION_SCHEMA, uploader, clock=lambda: FIXED_NOW)
        target = QUESTION_SCHEMA.target(quiz_id="quiz-1")

        document_id = writer.write(question_entry(), target)

        document = memory_store.get("quizzes/quiz-1/questions", document_id)
        assert document["questionText"] == "2+2=?"
        assert document["correctAnswer"] == 1
        assert document["createdBy"] == "faculty-7"
        assert document["facultyName"] == "Dr. Meera Iyer"
        assert document["createdAt"] == FIXED_NOW

    def test_course_document_starts_unapproved(self, uploader):
        store = InMemoryDocumentStore()
        writer = DocumentWriter(store, COURSE_SCHEMA, uploader, clock=lambda: FIXED_NOW)
        entry = BatchEntry(row=1, item=CourseItem(
            course_code="CSA101", course_name="Intro", subject_category="CS",
            course_category="Core", credits=3, prerequisites="None",
        ))

        writer.write(entry, COURSE_SCHEMA.target())

        document = store.list("courses")[0]
        assert document["facultyId"] == "faculty-7"
        assert document["isApproved"] is False
        assert document["enrolledStudents"] == 0

    def test_store_failure_becomes_commit_item_error(self, failing_store_factory, uploader):
        store = failing_store_factory({"2+2=?"})
        writer = DocumentWriter(store, QUESTION_SCHEMA, uploader)

        with pytest.raises(CommitItemError) as exc_info:
            writer.write(question_entry(row=7), QUESTION_SCHEMA.target(quiz_id="quiz-1"))

        assert exc_info.value.row == 7
        assert str(exc_info.value) == "Row 7: permission denied"

    def test_refresh_count_uses_collection_total(self, memory_store, uploader):
        memory_store.create("quizzes/quiz-1/questions", {"questionText": "older"})
        writer = DocumentWriter(memory_store, QUESTION_SCHEMA, uploader, clock=lambda: FIXED_NOW)
        target = QUESTION_SCHEMA.target(quiz_id="quiz-1")
        writer.write(question_entry(), target)

        assert writer.refresh_count(target) == 2
        quiz = memory_store.get("quizzes", "quiz-1")
        assert quiz["questionsCount"] == 2
        assert quiz["lastUpdated"] == FIXED_NOW

    def test_refresh_count_missing_parent_is_logged_not_raised(self, uploader):
        writer = DocumentWriter(InMemoryDocumentStore(), QUESTION_SCHEMA, uploader)

        assert writer.refresh_count(QUESTION_SCHEMA.target(quiz_id="ghost")) is None

    def test_refresh_count_swallows_any_store_error(self, broken_update_store, uploader):
        """Test a non-importer error from update is logged and reported as None"""
        writer = DocumentWriter(broken_update_store, QUESTION_SCHEMA, uploader)

        assert writer.refresh_count(QUESTION_SCHEMA.target(quiz_id="quiz-1")) is None

    def test_refresh_count_without_parent_target(self, uploader):
        writer = DocumentWriter(InMemoryDocumentStore(), COURSE_SCHEMA, uploader)

        assert writer.refresh_count(CommitTarget(collection="courses")) is None

    def test_question_target_requires_quiz(self):
        with pytest.raises(ValueError, match="quiz_id"):
            QUESTION_SCHEMA.target()

    def test_required_headers(self):
        assert QUESTION_SCHEMA.required_headers == ["questionText", "correctAnswer", "questionType", "marks", "difficulty"]
        assert COURSE_SCHEMA.required_headers == COURSE_SCHEMA.columns

    def test_uploader_requires_id(self):
        with pytest.raises(ValueError):
            Uploader(uid="")
