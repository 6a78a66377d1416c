"""
Bulk CSV importer for the learning-management dashboard.

Parses question and course spreadsheets, validates each row against an
entity schema, flags duplicates and commits valid rows to a document store.
"""

__version__ = "0.1.0"
