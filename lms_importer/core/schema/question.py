"""
Question bank schema.
"""

from datetime import datetime
from typing import Any

from lms_importer.core.models import CommitTarget, QuestionItem, Uploader
from lms_importer.core.models.import_item import DIFFICULTIES, OPTION_COLUMNS, QUESTION_TYPES
from lms_importer.core.rules.rule_config import RuleConfigBuilder

from .entity_schema import EntitySchema

QUESTION_COLUMNS = [
    "questionText",
    "optionA",
    "optionB",
    "optionC",
    "optionD",
    "correctAnswer",
    "questionType",
    "marks",
    "difficulty",
    "explanation",
    "category",
]

# Options, explanation and category may be left out of the header altogether
QUESTION_REQUIRED_COLUMNS = ["questionText", "correctAnswer", "questionType", "marks", "difficulty"]

QUESTION_RULES = (
    RuleConfigBuilder()
    .add_required_field("questionText", "correctAnswer", "questionType", "marks", "difficulty")
    .add_enum("questionType", QUESTION_TYPES)
    .add_enum("difficulty", DIFFICULTIES)
    .add_range("marks", min_value=1, max_value=10)
    .add_option_count("options", required_options=["optionA", "optionB"], applies_to=["MCQ"])
    .add_answer_key("correctAnswer", option_fields=list(OPTION_COLUMNS))
    .build()
)

QUESTION_FIELD_MAP = {
    "question_text": "questionText",
    "options": "options",
    "correct_answer": "correctAnswer",
    "question_type": "questionType",
    "marks": "marks",
    "difficulty": "difficulty",
    "explanation": "explanation",
    "category": "category",
}

QUESTION_EXAMPLES = [
    ["2+2=?", "3", "4", "5", "6", "B", "MCQ", "1", "Easy", "Basic arithmetic", "Math"],
    ["The earth orbits the sun.", "True", "False", "", "", "True", "True-False", "1", "Easy", "", "Science"],
    ["Define photosynthesis.", "", "", "", "", "Conversion of light energy into chemical energy",
     "Short Answer", "5", "Medium", "", "Biology"],
]


def build_question(values: dict[str, Any]) -> QuestionItem:
    question_type = values["questionType"]

    if question_type == "Short Answer":
        options: list[str] = []
    else:
        options = [values.get(column, "") for column in OPTION_COLUMNS if values.get(column, "")]
        if question_type == "True-False" and not options:
            options = ["True", "False"]

    return QuestionItem(
        question_text=values["questionText"],
        options=options,
        correct_answer=values["correctAnswer"],
        question_type=question_type,
        marks=values["marks"],
        difficulty=values["difficulty"],
        explanation=values.get("explanation", ""),
        category=values.get("category", ""),
    )


def question_attribution(uploader: Uploader, now: datetime) -> dict[str, Any]:
    return {
        "createdAt": now,
        "createdBy": uploader.uid,
        "facultyName": uploader.display_name,
    }


def question_target(quiz_id: str | None = None, **_ignored) -> CommitTarget:
    if not quiz_id:
        raise ValueError("Questions are imported into a quiz; quiz_id is required")
    return CommitTarget(
        collection=f"quizzes/{quiz_id}/questions",
        count_collection="quizzes",
        count_document_id=quiz_id,
        count_field="questionsCount",
    )


QUESTION_SCHEMA = EntitySchema(
    name="question",
    columns=QUESTION_COLUMNS,
    required_columns=QUESTION_REQUIRED_COLUMNS,
    rules=QUESTION_RULES,
    builder=build_question,
    field_map=QUESTION_FIELD_MAP,
    dedupe_column="questionText",
    dedupe_match="exact",
    attribution=question_attribution,
    target_factory=question_target,
    max_bytes=50 * 1024 * 1024,
    example_rows=QUESTION_EXAMPLES,
    default_error_field="correctAnswer",
)
