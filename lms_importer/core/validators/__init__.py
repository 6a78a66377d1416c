"""
Validation rule implementations.

Provides validators for required fields, enumerations, integer ranges and
the cross-field answer-key checks used by question rows.
"""

from .answer_key_validator import AnswerKeyValidator, OptionCountValidator
from .base_validator import BaseValidator, RuleViolation
from .enum_validator import EnumValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "RuleViolation",
    "RequiredFieldValidator",
    "EnumValidator",
    "RangeValidator",
    "AnswerKeyValidator",
    "OptionCountValidator",
]
