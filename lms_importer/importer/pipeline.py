"""
Import pipeline orchestration.

Drives one ImportSession through: load (parse + validate) -> duplicate
check -> commit or cancel. Commits run item by item in row order; a failed
item is counted and the rest continue.
"""

import time
from pathlib import Path
from typing import Any, Callable

from lms_importer.core.errors import CommitItemError, ImporterError, InvalidStateTransitionError
from lms_importer.core.models import CommitTally, DuplicateReport, ImportBatch, ImportSession, Uploader
from lms_importer.core.rules import RuleEngine
from lms_importer.core.schema import EntitySchema
from lms_importer.observability.logger import get_logger, log_operation
from lms_importer.observability.metrics import commit_duration_seconds, record_commit_tally, track_duration
from lms_importer.store import DocumentStore

from .duplicates import DuplicateDetector
from .readers import CSVReader
from .writers import DocumentWriter


logger = get_logger(__name__)

# progress(done, total, percent)
ProgressCallback = Callable[[int, int, int], None]


class ImportPipeline:
    """
    Orchestrates bulk imports for one entity schema.

    The pipeline itself is stateless between uploads; everything about an
    upload lives on the ImportSession passed to each step.
    """

    def __init__(
        self,
        schema: EntitySchema,
        store: DocumentStore,
        reader: CSVReader | None = None,
        rule_overrides: list[dict[str, Any]] | None = None,
        item_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize import pipeline.

        Args:
            schema: Entity schema for uploads handled by this pipeline
            store: Document store to check duplicates against and commit to
            reader: CSV reader (defaults to one capped at the schema's max_bytes)
            rule_overrides: Extra rule configurations for the rule engine
            item_delay: Pause in seconds between committed items
            sleep: Sleep function used for the pause
        """
        self.schema = schema
        self.store = store
        self.reader = reader or CSVReader(max_bytes=schema.max_bytes)
        self.rule_engine = RuleEngine(schema, rule_overrides)
        self.detector = DuplicateDetector.for_schema(schema)
        self.item_delay = item_delay
        self.sleep = sleep

    def start(self, uploader: Uploader, **target_options) -> ImportSession:
        """
        Open a new session.

        Args:
            uploader: Attribution for persisted documents
            **target_options: Passed to the schema's target factory (e.g. quiz_id)
        """
        return ImportSession(
            entity=self.schema.name,
            target=self.schema.target(**target_options),
            uploader=uploader,
        )

    def load(self, session: ImportSession, text: str) -> ImportBatch:
        """
        Parse and validate uploaded text.

        Fatal input errors close the session and propagate; per-row errors
        are collected on the returned batch.

        Raises:
            EmptyInputError, MissingColumnsError: On unusable input
        """
        return self._load(session, lambda: self.reader.read(text, self.schema.required_headers))

    def load_file(self, session: ImportSession, file_path: str | Path) -> ImportBatch:
        """Like load(), reading from disk with the size check first."""
        return self._load(session, lambda: self.reader.read_file(file_path, self.schema.required_headers))

    def _load(self, session: ImportSession, open_records: Callable) -> ImportBatch:
        session.transition("validating")
        try:
            with log_operation("Validating upload", logger=logger, entity=self.schema.name):
                batch = self.rule_engine.validate_batch(open_records())
        except (ImporterError, OSError, ValueError):
            session.transition("idle")
            raise

        session.batch = batch
        session.transition("awaiting_confirmation")
        return batch

    def check_duplicates(self, session: ImportSession) -> DuplicateReport:
        """
        Compare the batch's valid items against the target collection.

        Never blocks the commit: store failures produce a warning and an
        empty duplicate set.
        """
        self._require(session, "awaiting_confirmation")
        session.duplicates = self.detector.check_store(session.batch.entries, self.store, session.target.collection)
        return session.duplicates

    def cancel(self, session: ImportSession) -> bool:
        """
        Discard the batch before anything is written.

        Returns:
            True if cancelled; False if the session is committing or finished,
            in which case nothing is rolled back
        """
        if session.state != "awaiting_confirmation" or session.closed:
            logger.warning(
                "Cancel ignored",
                extra={"entity": session.entity, "state": session.state}
            )
            return False

        session.transition("idle")
        logger.info("Import cancelled", extra={"entity": session.entity})
        return True

    def commit(self, session: ImportSession, progress: ProgressCallback | None = None) -> CommitTally:
        """
        Persist every valid, non-duplicate item in row order.

        Runs the duplicate check first if the caller has not. Each item is
        written independently; failures are counted, not raised.

        Returns:
            CommitTally with succeeded + failed + skipped_duplicates equal to
            the number of valid items
        """
        self._require(session, "awaiting_confirmation")
        if session.duplicates is None:
            self.check_duplicates(session)

        session.transition("committing")
        writer = DocumentWriter(self.store, self.schema, session.uploader)
        entries = session.batch.entries
        duplicate_rows = session.duplicates.rows
        tally = CommitTally()
        total = len(entries)

        with log_operation("Committing import batch", logger=logger, entity=self.schema.name, items=total), \
                track_duration(commit_duration_seconds, entity=self.schema.name):
            for idx, entry in enumerate(entries):
                if entry.row in duplicate_rows:
                    tally.skipped_duplicates += 1
                else:
                    try:
                        tally.created_ids.append(writer.write(entry, session.target))
                        tally.succeeded += 1
                    except CommitItemError as e:
                        tally.failed += 1
                        tally.failures.append(str(e))
                        logger.warning(
                            "Item commit failed",
                            extra={"entity": self.schema.name, "row": e.row, "error": str(e.cause)}
                        )

                done = idx + 1
                if progress:
                    progress(done, total, int(done * 100 / total + 0.5))
                if self.item_delay and done < total:
                    self.sleep(self.item_delay)

            if tally.succeeded:
                writer.refresh_count(session.target)

        session.tally = tally
        session.transition("partially_failed" if tally.failed else "done")
        record_commit_tally(self.schema.name, tally.succeeded, tally.failed, tally.skipped_duplicates)
        logger.info(tally.summary(), extra={"entity": self.schema.name, "state": session.state})
        return tally

    def confirm(self, session: ImportSession, progress: ProgressCallback | None = None) -> CommitTally:
        """The user's go-ahead; same as commit()."""
        return self.commit(session, progress=progress)

    @staticmethod
    def _require(session: ImportSession, state: str) -> None:
        if session.closed or session.state != state:
            raise InvalidStateTransitionError(session.state, state)
