"""
EnumValidator - restricts a field to a fixed set of values.
"""

from typing import Any

from .base_validator import BaseValidator


class EnumValidator(BaseValidator):
    """
    Validates that a field's value is one of an allowed set.

    Parameters:
    - allowed: List of allowed values (required)
    - case_insensitive: Match ignoring case and return the canonical spelling
                        (default False, exact match)

    Empty values pass through untouched; pair with RequiredFieldValidator
    when the field must be set.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        allowed = self.parameters.get("allowed")
        if not allowed:
            raise ValueError("EnumValidator requires a non-empty 'allowed' parameter")

        self.allowed: list[str] = [str(v) for v in allowed]
        self.case_insensitive = bool(self.parameters.get("case_insensitive", False))
        self._folded = {v.casefold(): v for v in self.allowed}

    def validate(self, value: str, record: dict[str, str]) -> Any:
        value = (value or "").strip()
        if not value:
            return value

        if self.case_insensitive:
            canonical = self._folded.get(value.casefold())
            if canonical is not None:
                return canonical
        elif value in self.allowed:
            return value

        raise self.fail(f"{self.field_name} must be one of: {', '.join(self.allowed)}")

    @property
    def rule_type(self) -> str:
        return "enum"
