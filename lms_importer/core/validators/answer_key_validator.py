"""
Cross-field validators for question rows: answer key and option count.
"""

from typing import Any

from .base_validator import BaseValidator

DEFAULT_OPTION_FIELDS = ["optionA", "optionB", "optionC", "optionD"]

BOOLEAN_ANSWERS = {"A": 0, "TRUE": 0, "B": 1, "FALSE": 1}


class AnswerKeyValidator(BaseValidator):
    """
    Resolves the correct-answer cell against the row's options.

    Parameters:
    - type_field: Column holding the question type (default "questionType")
    - option_fields: Option columns in letter order (default optionA..optionD)
    - choice_types: Types answered by option letter (default ["MCQ"])
    - boolean_types: Types answered by A/B/True/False (default ["True-False"])
    - free_text_types: Types whose answer is kept as text (default ["Short Answer"])

    For choice types the uppercased letter maps to ord(letter) - ord('A'),
    which must be below the number of non-empty options and point at a
    non-empty option column. Returns the option index, or the answer text
    for free-text types.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.type_field = self.parameters.get("type_field", "questionType")
        self.option_fields = list(self.parameters.get("option_fields", DEFAULT_OPTION_FIELDS))
        self.choice_types = set(self.parameters.get("choice_types", ["MCQ"]))
        self.boolean_types = set(self.parameters.get("boolean_types", ["True-False"]))
        self.free_text_types = set(self.parameters.get("free_text_types", ["Short Answer"]))

    def validate(self, value: str, record: dict[str, str]) -> Any:
        answer = (value or "").strip()
        question_type = record.get(self.type_field, "").strip()

        # Blank answers and unknown types are reported by their own rules
        if not answer or question_type in self.free_text_types:
            return answer

        if question_type in self.boolean_types:
            index = BOOLEAN_ANSWERS.get(answer.upper())
            if index is None:
                raise self.fail(f"{question_type} correct answer must be A, B, True, or False")
            return index

        if question_type in self.choice_types:
            options = [record.get(column, "").strip() for column in self.option_fields]
            filled = sum(1 for option in options if option)
            letters = ", ".join(chr(ord("A") + i) for i in range(filled)) or "none"

            letter = answer.upper()
            if len(letter) != 1 or not "A" <= letter <= "Z":
                raise self.fail(f"{question_type} correct answer must be a single letter ({letters})")

            index = ord(letter) - ord("A")
            if index >= filled or not options[index]:
                raise self.fail(f"{question_type} correct answer must be one of: {letters}")
            return index

        return answer

    @property
    def rule_type(self) -> str:
        return "answer_key"


class OptionCountValidator(BaseValidator):
    """
    Requires specific option columns to be filled for some question types.

    Parameters:
    - required_options: Columns that must be non-empty (default optionA, optionB)
    - applies_to: Question types the rule applies to (default ["MCQ"])
    - type_field: Column holding the question type (default "questionType")
    """

    normalizes = False

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.required_options = list(self.parameters.get("required_options", ["optionA", "optionB"]))
        self.applies_to = set(self.parameters.get("applies_to", ["MCQ"]))
        self.type_field = self.parameters.get("type_field", "questionType")

    def validate(self, value: str, record: dict[str, str]) -> Any:
        question_type = record.get(self.type_field, "").strip()
        if question_type not in self.applies_to:
            return value

        missing = [column for column in self.required_options if not record.get(column, "").strip()]
        if missing:
            labels = " and ".join(column.removeprefix("option") for column in self.required_options)
            raise self.fail(f"{question_type} questions must have at least options {labels}")
        return value

    @property
    def rule_type(self) -> str:
        return "option_count"
