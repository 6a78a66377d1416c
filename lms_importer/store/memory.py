"""
In-memory document store for tests, dry runs and local use.
"""

import copy
import uuid
from typing import Any

from lms_importer.utils.validation import validate_collection_path

from .base import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """
    Keeps collections in dictionaries; documents are deep-copied in and out
    so callers cannot mutate stored state.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def create(self, collection: str, document: dict[str, Any]) -> str:
        collection = validate_collection_path(collection)
        document_id = uuid.uuid4().hex
        self._collections.setdefault(collection, {})[document_id] = copy.deepcopy(document)
        return document_id

    def put(self, collection: str, document_id: str, document: dict[str, Any]) -> None:
        """Insert or replace a document under a known id (seeding fixtures)."""
        collection = validate_collection_path(collection)
        self._collections.setdefault(collection, {})[document_id] = copy.deepcopy(document)

    def list(self, collection: str, filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        collection = validate_collection_path(collection)
        documents = []
        for document_id, data in self._collections.get(collection, {}).items():
            if filter and any(data.get(key) != value for key, value in filter.items()):
                continue
            documents.append({"id": document_id, **copy.deepcopy(data)})
        return documents

    def update(self, collection: str, document_id: str, partial: dict[str, Any]) -> None:
        collection = validate_collection_path(collection)
        try:
            document = self._collections[collection][document_id]
        except KeyError:
            raise KeyError(f"Document {collection}/{document_id} does not exist") from None
        document.update(copy.deepcopy(partial))

    def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Fetch one document, or None."""
        data = self._collections.get(validate_collection_path(collection), {}).get(document_id)
        return None if data is None else {"id": document_id, **copy.deepcopy(data)}
