"""
Unit tests for the input validation utilities.
"""

import pytest

from lms_importer.utils.validation import (
    InputValidationError,
    validate_collection_path,
    validate_file_path,
)


@pytest.mark.unit
class TestValidateFilePath:
    """Test upload path validation."""

    def test_valid_paths(self):
        assert validate_file_path("/data/questions.csv") == "/data/questions.csv"
        assert validate_file_path("  uploads/COURSES.CSV  ") == "uploads/COURSES.CSV"

    def test_invalid_paths(self):
        with pytest.raises(InputValidationError, match="must be a non-empty string"):
            validate_file_path("")

        with pytest.raises(InputValidationError, match="cannot be empty"):
            validate_file_path("   ")

        with pytest.raises(InputValidationError, match="path traversal"):
            validate_file_path("../../etc/passwd.csv")

        with pytest.raises(InputValidationError, match="null bytes"):
            validate_file_path("questions\x00.csv")

    def test_extension_check(self):
        with pytest.raises(InputValidationError, match=r"\.csv"):
            validate_file_path("questions.xlsx")

        assert validate_file_path("notes.txt", extensions=(".txt",)) == "notes.txt"
        assert validate_file_path("anything", extensions=()) == "anything"

    def test_is_a_value_error(self):
        assert issubclass(InputValidationError, ValueError)


@pytest.mark.unit
class TestValidateCollectionPath:
    """Test collection path validation."""

    def test_valid_paths(self):
        assert validate_collection_path("courses") == "courses"
        assert validate_collection_path("quizzes/quiz_1/questions") == "quizzes/quiz_1/questions"
        assert validate_collection_path("/quizzes/q-1/questions/") == "quizzes/q-1/questions"

    @pytest.mark.parametrize("path", ["quizzes//questions", "quizzes/a b/questions", "courses;drop", "a/../b"])
    def test_invalid_segments(self, path):
        with pytest.raises(InputValidationError, match="invalid characters"):
            validate_collection_path(path)

    def test_length_limit(self):
        with pytest.raises(InputValidationError, match="maximum length"):
            validate_collection_path("a" * 513)
