"""
ImportSession model: the explicit state carried through one upload flow.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from lms_importer.core.errors import InvalidStateTransitionError

from .import_batch import CommitTally, DuplicateReport, ImportBatch

ImportState = Literal[
    "idle",
    "validating",
    "awaiting_confirmation",
    "committing",
    "done",
    "partially_failed",
]

# Idle is only ever the starting state or the terminal state after a cancel
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "idle": {"validating"},
    "validating": {"awaiting_confirmation", "idle"},
    "awaiting_confirmation": {"committing", "idle"},
    "committing": {"done", "partially_failed"},
    "done": set(),
    "partially_failed": set(),
}


class Uploader(BaseModel):
    """The person an upload is attributed to."""

    uid: str = Field(..., min_length=1)
    display_name: str = ""


class CommitTarget(BaseModel):
    """
    Where committed items go and which document caches their count.

    Attributes:
        collection: Collection receiving one document per item
        count_collection: Collection of the parent document holding the count
        count_document_id: Parent document id
        count_field: Field on the parent refreshed to the post-commit total
    """

    collection: str = Field(..., min_length=1)
    count_collection: str | None = None
    count_document_id: str | None = None
    count_field: str | None = None

    @property
    def tracks_count(self) -> bool:
        return bool(self.count_collection and self.count_document_id and self.count_field)


class ImportSession(BaseModel):
    """
    Single-use upload flow:
    idle -> validating -> awaiting_confirmation -> committing -> done | partially_failed,
    with awaiting_confirmation -> idle as cancel. Once a session leaves idle
    it never returns to an earlier state; a session back in idle is closed.

    Attributes:
        entity: Entity schema name
        target: Commit destination
        uploader: Attribution for persisted documents
        state: Current state
        closed: True once cancelled or aborted
        batch: Parse/validation result, dropped on cancel
        duplicates: Result of the duplicate check, if run
        tally: Commit outcome once committing finished
    """

    entity: str
    target: CommitTarget
    uploader: Uploader
    state: ImportState = "idle"
    closed: bool = False
    batch: ImportBatch | None = None
    duplicates: DuplicateReport | None = None
    tally: CommitTally | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def transition(self, target: ImportState) -> None:
        """
        Move to the next state.

        Raises:
            InvalidStateTransitionError: If the move is not allowed or the
                session is already closed
        """
        if self.closed or target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(self.state, target)
        self.state = target
        if target == "idle":
            self.closed = True
            self.batch = None
            self.duplicates = None

    @property
    def finished(self) -> bool:
        return self.closed or self.state in ("done", "partially_failed")
