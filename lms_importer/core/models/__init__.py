"""
Core data models for the bulk importer.

All models use Pydantic for runtime validation and type safety.
"""

from .import_batch import BatchEntry, CommitTally, DuplicateReport, DuplicateWarning, ImportBatch
from .import_item import CourseItem, ImportItem, QuestionItem
from .import_session import CommitTarget, ImportSession, ImportState, Uploader
from .raw_record import RawRecord
from .validation_error import ValidationError

__all__ = [
    "RawRecord",
    "ValidationError",
    "ImportItem",
    "QuestionItem",
    "CourseItem",
    "BatchEntry",
    "ImportBatch",
    "DuplicateWarning",
    "DuplicateReport",
    "CommitTally",
    "CommitTarget",
    "ImportSession",
    "ImportState",
    "Uploader",
]
