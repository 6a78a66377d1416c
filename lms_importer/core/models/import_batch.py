"""
ImportBatch and commit outcome models (ephemeral, one per uploaded file).
"""

from pydantic import BaseModel, Field

from .import_item import ImportItem
from .validation_error import ValidationError


class BatchEntry(BaseModel):
    """A validated item together with the data row it came from."""

    row: int = Field(..., ge=1)
    item: ImportItem


class ImportBatch(BaseModel):
    """
    Everything produced from one uploaded file.

    Attributes:
        entity: Entity schema name (question, course)
        entries: Valid items in input row order
        errors: Error-severity problems, in row order
        warnings: Advisory problems that did not block their row
        total_rows: Data rows read from the file
    """

    entity: str
    entries: list[BatchEntry] = Field(default_factory=list)
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationError] = Field(default_factory=list)
    total_rows: int = Field(0, ge=0)

    @property
    def items(self) -> list[ImportItem]:
        return [entry.item for entry in self.entries]

    @property
    def invalid_rows(self) -> list[int]:
        """Row numbers excluded from commit, ascending."""
        return sorted({error.row for error in self.errors})

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class DuplicateWarning(BaseModel):
    """
    Advisory result of the duplicate check.

    Attributes:
        count: Number of valid items that already exist in the target collection
        keys: Their dedupe keys as written in the file
        store_error: Set when the existence check itself failed and the
                     detector failed open (count is then 0)
    """

    count: int = Field(0, ge=0)
    keys: list[str] = Field(default_factory=list)
    store_error: str | None = None

    @property
    def message(self) -> str:
        if self.store_error:
            return f"Duplicate check skipped, store unavailable: {self.store_error}"
        return f"Found {self.count} duplicate item(s); they will be skipped"


class DuplicateReport(BaseModel):
    """Entries flagged as duplicates plus the warning to show the user."""

    duplicates: list[BatchEntry] = Field(default_factory=list)
    warning: DuplicateWarning | None = None

    @property
    def rows(self) -> set[int]:
        return {entry.row for entry in self.duplicates}


class CommitTally(BaseModel):
    """
    Final outcome of a commit pass.

    Invariant: succeeded + failed + skipped_duplicates == total valid items.
    """

    succeeded: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    skipped_duplicates: int = Field(0, ge=0)
    failures: list[str] = Field(default_factory=list)
    created_ids: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.skipped_duplicates

    def summary(self) -> str:
        return (
            f"Uploaded {self.succeeded}, failed {self.failed}, "
            f"skipped {self.skipped_duplicates} duplicate(s)"
        )
