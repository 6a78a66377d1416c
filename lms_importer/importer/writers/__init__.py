"""
Import output writers: document store persistence and CSV export.
"""

from .csv_exporter import REPORT_COLUMNS, CSVExporter
from .document_writer import DocumentWriter

__all__ = [
    "DocumentWriter",
    "CSVExporter",
    "REPORT_COLUMNS",
]
