"""
RangeValidator - parses an integer cell and checks it is within a closed range.
"""

import re
from typing import Any

from .base_validator import BaseValidator

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class RangeValidator(BaseValidator):
    """
    Validates that a field is an integer within [min, max].

    Parameters:
    - min: Minimum value (inclusive)
    - max: Maximum value (inclusive)

    Only plain ASCII digits with an optional sign are accepted; a blank
    cell, "1_0" or "1.5" fails.
    On success the parsed int is returned so the item carries the number,
    not the text.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")

        if self.min_value is None and self.max_value is None:
            raise ValueError("RangeValidator requires at least one of: min, max")

    def validate(self, value: str, record: dict[str, str]) -> Any:
        text = (value or "").strip()
        if not INTEGER_PATTERN.fullmatch(text):
            raise self.fail(self._describe())
        number = int(text)

        if self.min_value is not None and number < self.min_value:
            raise self.fail(self._describe())

        if self.max_value is not None and number > self.max_value:
            raise self.fail(self._describe())

        return number

    def _describe(self) -> str:
        if self.min_value is not None and self.max_value is not None:
            return f"{self.field_name} must be a number between {self.min_value} and {self.max_value}"
        if self.min_value is not None:
            return f"{self.field_name} must be a number of at least {self.min_value}"
        return f"{self.field_name} must be a number of at most {self.max_value}"

    @property
    def rule_type(self) -> str:
        return "range"
