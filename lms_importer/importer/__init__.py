"""
Bulk import flow: read, validate, check duplicates, commit, export.
"""

from .duplicates import DuplicateDetector
from .pipeline import ImportPipeline
from .readers import CSVReader
from .writers import CSVExporter, DocumentWriter

__all__ = [
    "CSVReader",
    "DuplicateDetector",
    "DocumentWriter",
    "CSVExporter",
    "ImportPipeline",
]
