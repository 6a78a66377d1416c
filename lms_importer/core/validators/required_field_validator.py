"""
RequiredFieldValidator - ensures a cell is present and not blank.
"""

from typing import Any

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not empty.

    Fails if the column is missing from the row or the trimmed value is empty.
    """

    normalizes = False

    def validate(self, value: str, record: dict[str, str]) -> Any:
        if self.field_name not in record:
            raise self.fail(f"{self.field_name} is required")

        if value is None or value.strip() == "":
            raise self.fail(f"{self.field_name} is required")

        return value.strip()

    @property
    def rule_type(self) -> str:
        return "required_field"
