"""
Guards for caller-supplied strings that end up as filesystem paths or
store collection names.
"""

import re

PATH_MAX = 4096
COLLECTION_MAX = 512
SEGMENT_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class InputValidationError(ValueError):
    """An upload path or collection name was refused."""


def _non_empty(value, field_name: str) -> str:
    if not value or not isinstance(value, str):
        raise InputValidationError(f"{field_name} must be a non-empty string")
    return value


def validate_file_path(file_path: str, field_name: str = "file_path", extensions: tuple[str, ...] = (".csv",)) -> str:
    """
    Check an upload path before it is opened.

    Surrounding whitespace is dropped. Paths that climb out with ``..``,
    embed NUL, exceed PATH_MAX or lack one of ``extensions`` (case
    insensitive; an empty tuple accepts anything) are refused.

    Raises:
        InputValidationError: With a message naming ``field_name``

    Examples:
        >>> validate_file_path(" uploads/questions.csv ")
        'uploads/questions.csv'
    """
    cleaned = _non_empty(file_path, field_name).strip()

    problems = [
        (not cleaned, "cannot be empty or whitespace-only"),
        (".." in cleaned, "contains path traversal characters (..)"),
        ("\x00" in cleaned, "contains null bytes"),
        (len(cleaned) > PATH_MAX, f"exceeds maximum length of {PATH_MAX} characters"),
    ]
    for failed, problem in problems:
        if failed:
            raise InputValidationError(f"{field_name} {problem}")

    if extensions and not cleaned.lower().endswith(extensions):
        raise InputValidationError(f"{field_name} must be a {' or '.join(extensions)} file")

    return cleaned


def validate_collection_path(path: str, field_name: str = "collection") -> str:
    """
    Normalize a slash separated collection path (``courses``,
    ``quizzes/quiz-1/questions``) and check every segment.

    Examples:
        >>> validate_collection_path("/quizzes/quiz-1/questions/")
        'quizzes/quiz-1/questions'
    """
    cleaned = _non_empty(path, field_name).strip().strip("/")

    if len(cleaned) > COLLECTION_MAX:
        raise InputValidationError(f"{field_name} exceeds maximum length of {COLLECTION_MAX} characters")

    bad = [segment for segment in cleaned.split("/") if not SEGMENT_PATTERN.fullmatch(segment)]
    if bad:
        raise InputValidationError(
            f"{field_name} segment '{bad[0]}' has invalid characters; use letters, digits, '-' or '_'"
        )

    return cleaned
