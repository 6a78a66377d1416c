"""
Exception taxonomy for the importer.

Fatal input errors (EmptyInputError, MissingColumnsError, FileTooLargeError)
stop an import before any row is produced. StoreUnavailableError and
CommitItemError are caught by the pipeline and reported, never raised to
the caller of a commit.
"""


class ImporterError(Exception):
    """Base class for all importer errors."""


class EmptyInputError(ImporterError):
    """Raised when a file has no header line or no data line."""

    def __init__(self, message: str = "File must contain a header row and at least one data row"):
        super().__init__(message)


class MissingColumnsError(ImporterError):
    """Raised when the header row lacks columns the entity schema requires."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class FileTooLargeError(ImporterError):
    """Raised when an upload exceeds the byte limit, before parsing starts."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"File size {size} bytes exceeds limit of {limit} bytes")


class StoreUnavailableError(ImporterError):
    """Raised by document stores when the backing service cannot be reached."""


class CommitItemError(ImporterError):
    """A single item failed to persist; the rest of the batch continues."""

    def __init__(self, row: int, cause: BaseException):
        self.row = row
        self.cause = cause
        super().__init__(f"Row {row}: {cause}")


class InvalidStateTransitionError(ImporterError):
    """Raised when an import session is driven out of order."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move import session from {current} to {target}")
