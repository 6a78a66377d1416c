"""
Contract shared by the per-field rule validators.
"""

from abc import ABC, abstractmethod
from typing import Any


class RuleViolation(Exception):
    """One rule rejected one field of one row."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    A single rule bound to one column.

    Subclasses set ``rule_type`` and implement validate(), which must not
    depend on anything but the row it is given. When ``normalizes`` is
    true the returned value replaces the cell before the item model is
    built (a range rule hands back the parsed integer, for instance).
    """

    normalizes = True

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: str, record: dict[str, str]) -> Any:
        """
        Args:
            value: Raw cell text, "" when the column is missing
            record: Every cell of the row, for rules that compare columns

        Raises:
            RuleViolation: Built with fail()
        """

    @property
    @abstractmethod
    def rule_type(self) -> str:
        ...

    def fail(self, message: str) -> RuleViolation:
        return RuleViolation(rule_name=self.rule_type, field_name=self.field_name, message=message)

    def __repr__(self) -> str:
        return f"<{self.rule_type} rule on {self.field_name!r} {self.parameters}>"
