"""
Document store backends the importer commits to.
"""

from .base import DocumentStore
from .memory import InMemoryDocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
]
