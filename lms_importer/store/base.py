"""
Document store interface consumed by the importer.

Each call is atomic on its own; there is no multi-document transaction.
Implementations raise StoreUnavailableError when the backing service
cannot be reached and KeyError when updating a document that does not exist.
"""

from abc import ABC, abstractmethod
from typing import Any


class DocumentStore(ABC):
    """
    Minimal collection/document API: create, list, update.

    Collections are slash-separated paths such as ``courses`` or
    ``quizzes/<quiz id>/questions``.
    """

    @abstractmethod
    def create(self, collection: str, document: dict[str, Any]) -> str:
        """
        Insert a document with a generated id.

        Returns:
            The new document id
        """

    @abstractmethod
    def list(self, collection: str, filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        List documents in a collection.

        Args:
            collection: Collection path
            filter: Optional field -> value equality filter

        Returns:
            Documents (each including its "id"), in insertion order
        """

    @abstractmethod
    def update(self, collection: str, document_id: str, partial: dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            KeyError: If the document does not exist
        """

    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        return len(self.list(collection))
