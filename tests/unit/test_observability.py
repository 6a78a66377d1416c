"""
Unit tests for structured logging and Prometheus metrics.
"""

import io
import json
import logging

import pytest

from lms_importer.observability.logger import (
    HANDLER_NAME,
    ImporterJsonFormatter,
    get_logger,
    log_operation,
    setup_logger,
)
from lms_importer.observability.metrics import (
    REGISTRY,
    commit_duration_seconds,
    generate_metrics,
    get_content_type,
    record_commit_tally,
    record_validation_failure,
    track_duration,
)


def capture(logger: logging.Logger) -> io.StringIO:
    """Swap the logger's handler for one writing JSON into a buffer."""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ImporterJsonFormatter(fmt="%(timestamp)s %(level)s %(logger)s %(message)s"))
    logger.handlers = [handler]
    return stream


@pytest.mark.unit
class TestLogger:
    """Tests for logger setup"""

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        logger = setup_logger("lms-importer.test.env")

        assert logger.level == logging.WARNING
        assert logger.propagate is False

    def test_text_format(self):
        logger = setup_logger("lms-importer.test.text", level="DEBUG", format_type="text")

        assert not isinstance(logger.handlers[0].formatter, ImporterJsonFormatter)

    def test_get_logger_configures_once(self):
        first = get_logger("lms-importer.test.once")
        second = get_logger("lms-importer.test.once")

        assert first is second
        assert [handler.get_name() for handler in second.handlers].count(HANDLER_NAME) == 1

    def test_module_loggers_share_package_handler(self):
        module_logger = get_logger("lms_importer.importer.pipeline")
        package_logger = logging.getLogger("lms_importer")

        assert module_logger.handlers == []
        assert module_logger.propagate is True
        own = [handler for handler in package_logger.handlers if handler.get_name() == HANDLER_NAME]
        assert len(own) == 1
        assert isinstance(own[0], logging.StreamHandler)

    def test_unknown_level_falls_back_to_info(self):
        assert setup_logger("lms-importer.test.level", level="LOUD").level == logging.INFO

    def test_json_output_includes_extra_fields(self):
        logger = setup_logger("lms-importer.test.json", level="INFO")
        stream = capture(logger)

        logger.warning("Item commit failed", extra={"row": 4, "error": "denied"})

        entry = json.loads(stream.getvalue())
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Item commit failed"
        assert entry["row"] == 4
        assert entry["logger"] == "lms-importer.test.json"

    def test_log_operation_records_duration(self):
        logger = setup_logger("lms-importer.test.operation", level="INFO")
        stream = capture(logger)

        with log_operation("Committing import batch", logger=logger, entity="question"):
            pass

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert entries[0]["message"] == "Starting: Committing import batch"
        assert entries[1]["status"] == "success"
        assert entries[1]["entity"] == "question"
        assert "duration_seconds" in entries[1]

    def test_log_operation_logs_failure_and_reraises(self):
        logger = setup_logger("lms-importer.test.failure", level="INFO")
        stream = capture(logger)

        with pytest.raises(RuntimeError):
            with log_operation("Validating upload", logger=logger):
                raise RuntimeError("boom")

        last = json.loads(stream.getvalue().splitlines()[-1])
        assert last["level"] == "ERROR"
        assert last["error_type"] == "RuntimeError"


@pytest.mark.unit
class TestMetrics:
    """Tests for metric helpers"""

    def test_commit_tally_counters(self):
        labels = {"entity": "metrics-test", "status": "succeeded"}
        before = REGISTRY.get_sample_value("importer_items_committed_total", labels) or 0

        record_commit_tally("metrics-test", succeeded=3, failed=0, skipped_duplicates=2)

        assert REGISTRY.get_sample_value("importer_items_committed_total", labels) == before + 3
        assert REGISTRY.get_sample_value(
            "importer_items_committed_total", {"entity": "metrics-test", "status": "failed"}
        ) is None

    def test_validation_failure_counter(self):
        labels = {"entity": "metrics-test", "rule_type": "range", "field_name": "marks"}
        before = REGISTRY.get_sample_value("importer_validation_failures_total", labels) or 0

        record_validation_failure("metrics-test", "range", "marks")

        assert REGISTRY.get_sample_value("importer_validation_failures_total", labels) == before + 1

    def test_track_duration_observes(self):
        with track_duration(commit_duration_seconds, entity="metrics-test"):
            pass

        assert REGISTRY.get_sample_value(
            "importer_commit_duration_seconds_count", {"entity": "metrics-test"}
        ) >= 1

    def test_exposition(self):
        record_validation_failure("metrics-test", "enum", "difficulty")

        output = generate_metrics().decode("utf-8")

        assert "importer_validation_failures_total" in output
        assert get_content_type().startswith("text/plain")

    def test_commit_tally_skips_zero_counts(self):
        from lms_importer.observability.metrics import record_commit_tally

        record_commit_tally("tally-test", succeeded=3, failed=0, skipped_duplicates=1)

        assert REGISTRY.get_sample_value(
            "importer_items_committed_total", {"entity": "tally-test", "status": "succeeded"}
        ) == 3
        assert REGISTRY.get_sample_value(
            "importer_items_committed_total", {"entity": "tally-test", "status": "failed"}
        ) is None
