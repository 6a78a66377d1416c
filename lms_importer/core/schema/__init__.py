"""
Entity schemas for question and course imports.
"""

from .course import COURSE_SCHEMA
from .entity_schema import EntitySchema
from .question import QUESTION_SCHEMA
from .registry import SchemaRegistry, default_registry, get_schema

__all__ = [
    "EntitySchema",
    "SchemaRegistry",
    "QUESTION_SCHEMA",
    "COURSE_SCHEMA",
    "default_registry",
    "get_schema",
]
