"""
Writes validated items to the document store, one document per item.
"""

from datetime import datetime, timezone
from typing import Callable

from lms_importer.core.errors import CommitItemError
from lms_importer.core.models import BatchEntry, CommitTarget, Uploader
from lms_importer.core.schema import EntitySchema
from lms_importer.observability.logger import get_logger
from lms_importer.store import DocumentStore


logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentWriter:
    """
    Persists batch entries with uploader attribution and keeps the parent
    document's item count current.
    """

    def __init__(
        self,
        store: DocumentStore,
        schema: EntitySchema,
        uploader: Uploader,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize document writer.

        Args:
            store: Target document store
            schema: Entity schema (supplies attribution fields)
            uploader: Who the documents are attributed to
            clock: Time source for createdAt stamps
        """
        self.store = store
        self.schema = schema
        self.uploader = uploader
        self.clock = clock

    def write(self, entry: BatchEntry, target: CommitTarget) -> str:
        """
        Create one document for an entry.

        Returns:
            The new document id

        Raises:
            CommitItemError: If the store rejects the write for any reason
        """
        document = entry.item.to_document()
        document.update(self.schema.attribution(self.uploader, self.clock()))

        try:
            return self.store.create(target.collection, document)
        except Exception as e:
            raise CommitItemError(entry.row, e) from e

    def refresh_count(self, target: CommitTarget) -> int | None:
        """
        Set the parent document's count field to the collection's current size.

        Best effort: any store failure is logged and None is returned, so a
        commit that wrote its items always finishes with a tally.
        """
        if not target.tracks_count:
            return None

        try:
            total = self.store.count(target.collection)
            self.store.update(
                target.count_collection,
                target.count_document_id,
                {target.count_field: total, "lastUpdated": self.clock()},
            )
        except Exception as e:
            logger.error(
                "Failed to refresh item count",
                extra={
                    "collection": target.count_collection,
                    "document_id": target.count_document_id,
                    "error": str(e),
                }
            )
            return None

        logger.info(
            "Item count refreshed",
            extra={"collection": target.count_collection, "document_id": target.count_document_id, "count": total}
        )
        return total
