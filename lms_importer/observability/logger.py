"""
Structured JSON logging for lms-importer

Module loggers (``get_logger(__name__)``) are children of the ``lms_importer``
package logger, which owns the only handler. An upload can then be followed
end to end (parse, validate, duplicate check, commit) in one JSON stream on
stderr, leaving stdout to CLI output.

Environment:
    LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR or CRITICAL
    LOG_FORMAT: json (default) or text
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "lms_importer"
HANDLER_NAME = "lms_importer.stderr"

JSON_FIELDS = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
TEXT_FIELDS = "%(asctime)s %(levelname)-8s %(name)s:%(funcName)s %(message)s"


class ImporterJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line with level, logger and call site filled in."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = log_record.get("timestamp") or self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName


def _formatter(format_type: str) -> logging.Formatter:
    if format_type == "text":
        return logging.Formatter(TEXT_FIELDS, datefmt="%H:%M:%S")
    return ImporterJsonFormatter(JSON_FIELDS, datefmt="%Y-%m-%dT%H:%M:%S")


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    (Re)configure a logger with a single stderr handler.

    Args:
        name: Logger to configure; the package logger by default
        level: Level name, defaults to LOG_LEVEL
        format_type: "json" or "text", defaults to LOG_FORMAT

    Returns:
        The configured logger
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(_formatter(format_type or os.getenv("LOG_FORMAT", "json")))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers = [handler]
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Logger for a module.

    Names inside the package share the package logger's handler; any
    other name gets its own handler the first time it is requested.
    """
    package = logging.getLogger(PACKAGE_LOGGER)
    if not any(handler.get_name() == HANDLER_NAME for handler in package.handlers):
        setup_logger(PACKAGE_LOGGER)

    logger = logging.getLogger(name)
    in_package = name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")
    if not in_package and not logger.handlers:
        return setup_logger(name)
    return logger


class log_operation:
    """
    Log the start and outcome of a step, with its duration.

    Usage:
        with log_operation("Committing import batch", logger=logger, entity="question"):
            ...

    Exceptions are logged with their type and re-raised.
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.started: float | None = None

    def _extra(self, **fields) -> dict:
        return {"operation": self.operation_name, **fields, **self.extra_fields}

    def __enter__(self):
        self.started = time.perf_counter()
        self.logger.info(f"Starting: {self.operation_name}", extra=self._extra())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = round(time.perf_counter() - self.started, 3)

        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}",
                extra=self._extra(duration_seconds=duration, status="success"),
            )
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra=self._extra(
                    duration_seconds=duration,
                    status="error",
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                ),
                exc_info=(exc_type, exc_val, exc_tb),
            )
        return False
