"""
Duplicate detection against the target collection.

Detection is advisory: it only reports which valid items already exist,
and when the store cannot be queried it fails open with a warning.
"""

from typing import Iterable

from lms_importer.core.errors import StoreUnavailableError
from lms_importer.core.models import BatchEntry, DuplicateReport, DuplicateWarning
from lms_importer.core.schema import EntitySchema
from lms_importer.observability.logger import get_logger
from lms_importer.observability.metrics import duplicate_check_failures_total
from lms_importer.store import DocumentStore


logger = get_logger(__name__)


def normalize_key(value: object) -> str:
    """Case-fold and trim a dedupe key; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip().casefold()


class DuplicateDetector:
    """
    Finds batch entries whose dedupe key already exists in the target collection.

    With ``match="exact"`` keys must be equal after normalization; with
    ``match="substring"`` an existing key containing the new key counts as a
    duplicate (course codes such as CSA101 vs CSA101-Intro).
    """

    def __init__(self, key_field: str, match: str = "exact"):
        """
        Args:
            key_field: Document field holding the key (e.g. questionText)
            match: "exact" or "substring"
        """
        if match not in ("exact", "substring"):
            raise ValueError(f"Unsupported match mode: {match}")
        self.key_field = key_field
        self.match = match

    @classmethod
    def for_schema(cls, schema: EntitySchema) -> "DuplicateDetector":
        return cls(schema.dedupe_column, schema.dedupe_match)

    def detect(self, entries: Iterable[BatchEntry], existing_keys: Iterable[object]) -> list[BatchEntry]:
        """
        Return the entries whose key matches an existing key.

        Args:
            entries: Valid batch entries, in row order
            existing_keys: Key field values of documents already in the collection

        Returns:
            Matching entries, in row order
        """
        existing = {key for key in (normalize_key(k) for k in existing_keys) if key}
        duplicates = []
        for entry in entries:
            key = normalize_key(entry.item.dedupe_key)
            if key and self._matches(key, existing):
                duplicates.append(entry)
        return duplicates

    def check_store(self, entries: list[BatchEntry], store: DocumentStore, collection: str) -> DuplicateReport:
        """
        Snapshot the collection's keys and detect duplicates.

        If the store cannot be queried, returns an empty duplicate set with
        a warning carrying the error rather than failing the import.
        """
        try:
            documents = store.list(collection)
        except StoreUnavailableError as e:
            duplicate_check_failures_total.labels(entity=entries[0].item.kind if entries else "unknown").inc()
            logger.warning(
                "Duplicate check failed, continuing without it",
                extra={"collection": collection, "error": str(e)}
            )
            return DuplicateReport(duplicates=[], warning=DuplicateWarning(count=0, store_error=str(e)))

        duplicates = self.detect(entries, (document.get(self.key_field) for document in documents))
        if not duplicates:
            return DuplicateReport()

        logger.info(
            "Duplicates found",
            extra={"collection": collection, "duplicate_count": len(duplicates)}
        )
        return DuplicateReport(
            duplicates=duplicates,
            warning=DuplicateWarning(
                count=len(duplicates),
                keys=[entry.item.dedupe_key for entry in duplicates],
            ),
        )

    def _matches(self, key: str, existing: set[str]) -> bool:
        if self.match == "exact":
            return key in existing
        return any(key in candidate for candidate in existing)
