"""
ValidationError model representing one per-row problem found during validation.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ValidationError(BaseModel):
    """
    A single reason a row cannot be imported.

    Many can exist per row; a row with at least one error-severity entry is
    excluded from the committable set.

    Attributes:
        row: 1-based data row number
        field: Offending column (or a logical group such as "options")
        message: Human-readable reason
        rule: Rule type that produced it (required_field, enum, range, ...)
        severity: "error" blocks the row, "warning" is advisory only
    """

    row: int = Field(..., ge=1)
    field: str = Field(..., min_length=1)
    message: str
    rule: str = "schema"
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        return f"Row {self.row}, {self.field}: {self.message}"
