"""
Command-line interface for bulk imports.

Usage:
    lms-import template --entity <question|course> [--examples] [--output <path>]
    lms-import validate --entity <entity> --input <file_path> [options]
    lms-import import --entity <entity> --input <file_path> [options]
    lms-import export-results --input <results.json> [--output <path>]
"""

import argparse
import json
import os
import sys
from pathlib import Path

from lms_importer.core.errors import ImporterError
from lms_importer.core.models import Uploader
from lms_importer.core.rules import RuleConfigLoader
from lms_importer.core.schema import default_registry, get_schema
from lms_importer.importer import CSVExporter, ImportPipeline
from lms_importer.observability.logger import get_logger
from lms_importer.observability.metrics import start_metrics_server
from lms_importer.store import DocumentStore, InMemoryDocumentStore

logger = get_logger(__name__)

EXIT_ERROR = 1
EXIT_INVALID_ROWS = 2


def write_output(content: str, output: str | None) -> None:
    """Write to a file, or to stdout when no path is given."""
    if output:
        Path(output).write_text(content, encoding="utf-8")
        logger.info(f"Wrote {output}")
    else:
        sys.stdout.write(content)


def load_overrides(rules_path: str | None) -> list[dict] | None:
    if not rules_path:
        return None
    return RuleConfigLoader(rules_path).load_rules()


def open_store(args) -> tuple[DocumentStore, object | None]:
    """
    Build the document store for the chosen backend.

    Returns:
        Tuple of (store, connection pool or None)
    """
    if args.backend == "memory":
        return InMemoryDocumentStore(), None

    from lms_importer.store.connection import DatabaseConnectionPool
    from lms_importer.store.postgres import PostgresDocumentStore

    pool = DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )
    pool.open()
    store = PostgresDocumentStore(pool)
    store.ensure_schema()
    return store, pool


def print_errors(batch) -> None:
    for error in batch.errors:
        print(f"  Row {error.row}: {error.field}: {error.message}")
    for warning in batch.warnings:
        print(f"  Row {warning.row}: {warning.field}: {warning.message} (warning)")


def template_command(args) -> int:
    """
    Print or save the upload template for an entity.
    """
    schema = get_schema(args.entity)
    write_output(CSVExporter().template(schema, with_examples=args.examples), args.output)
    return 0


def validate_command(args) -> int:
    """
    Parse and validate a file without committing anything.

    Returns:
        0 when every row is valid, 2 otherwise
    """
    schema = get_schema(args.entity)
    pipeline = ImportPipeline(schema, InMemoryDocumentStore(), rule_overrides=load_overrides(args.rules))
    session = pipeline.start(Uploader(uid="validator"), quiz_id="validate")
    batch = pipeline.load_file(session, args.input)
    pipeline.cancel(session)

    print(f"Rows: {batch.total_rows}  valid: {len(batch.entries)}  invalid: {len(batch.invalid_rows)}")
    print_errors(batch)

    if args.errors_out:
        write_output(CSVExporter().validation_errors(batch), args.errors_out)

    return EXIT_INVALID_ROWS if batch.has_errors else 0


def import_command(args) -> int:
    """
    Validate a file, check duplicates, ask for confirmation and commit.

    Returns:
        0 on a clean commit, 1 if any item failed to persist or the user
        declined
    """
    schema = get_schema(args.entity)
    if args.metrics_port:
        start_metrics_server(args.metrics_port)
        logger.info(f"Serving metrics on port {args.metrics_port}")

    store, pool = open_store(args)

    try:
        if args.backend == "memory" and args.quiz_id:
            # Stand-in parent document so the question count has somewhere to go
            store.put("quizzes", args.quiz_id, {"title": args.quiz_id})

        pipeline = ImportPipeline(
            schema,
            store,
            rule_overrides=load_overrides(args.rules),
            item_delay=args.item_delay,
        )
        session = pipeline.start(
            Uploader(uid=args.uploader_id, display_name=args.uploader_name),
            quiz_id=args.quiz_id,
        )
        batch = pipeline.load_file(session, args.input)

        print(f"Rows: {batch.total_rows}  valid: {len(batch.entries)}  invalid: {len(batch.invalid_rows)}")
        print_errors(batch)

        report = pipeline.check_duplicates(session)
        if report.warning:
            print(f"Warning: {report.warning.message}")

        if not batch.entries:
            pipeline.cancel(session)
            print("Nothing to import.")
            return EXIT_INVALID_ROWS

        if not args.yes:
            answer = input(f"Import {len(batch.entries) - len(report.duplicates)} item(s) into "
                           f"{session.target.collection}? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                pipeline.cancel(session)
                print("Cancelled.")
                return EXIT_ERROR

        def show_progress(done: int, total: int, percent: int) -> None:
            print(f"\r  {done}/{total} ({percent}%)", end="", file=sys.stderr)

        tally = pipeline.commit(session, progress=show_progress)
        print(file=sys.stderr)
        print(tally.summary())
        for failure in tally.failures:
            print(f"  {failure}")

        if args.report:
            write_output(CSVExporter().commit_summary(batch, tally), args.report)

        return EXIT_ERROR if tally.failed else 0

    finally:
        if pool is not None:
            pool.close()


def export_results_command(args) -> int:
    """
    Convert a JSON array of quiz attempt documents into the results CSV.
    """
    with open(args.input, encoding="utf-8") as f:
        results = json.load(f)
    if not isinstance(results, list):
        raise ValueError("Results file must contain a JSON array of attempts")

    write_output(CSVExporter().quiz_results(results), args.output)
    return 0


COMMANDS = {
    "template": template_command,
    "validate": validate_command,
    "import": import_command,
    "export-results": export_results_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lms-import",
        description="Bulk CSV import of quiz questions and courses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Download a course template with sample rows
  lms-import template --entity course --examples --output courses.csv

  # Check a question file and save the row errors
  lms-import validate --entity question --input questions.csv --errors-out errors.csv

  # Import questions into a quiz without prompting
  lms-import import --entity question --input questions.csv --quiz-id quiz-1 \\
      --uploader-id u42 --uploader-name "Dr. Rao" --yes --backend postgres

  # Export quiz attempts
  lms-import export-results --input attempts.json --output results.csv
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    entities = default_registry.names()

    template_parser = subparsers.add_parser("template", help="Write the upload template")
    template_parser.add_argument("--entity", required=True, choices=entities, help="Entity to import")
    template_parser.add_argument("--examples", action="store_true", help="Include sample rows")
    template_parser.add_argument("--output", help="Output path (default: stdout)")

    validate_parser = subparsers.add_parser("validate", help="Validate a file without importing")
    import_parser = subparsers.add_parser("import", help="Validate and commit a file")

    for sub in (validate_parser, import_parser):
        sub.add_argument("--entity", required=True, choices=entities, help="Entity to import")
        sub.add_argument("--input", required=True, help="Path to the CSV file")
        sub.add_argument("--rules", help="YAML file with rule overrides")

    validate_parser.add_argument("--errors-out", help="Write row errors to this CSV file")

    import_parser.add_argument("--quiz-id", help="Quiz receiving the questions (required for questions)")
    import_parser.add_argument("--uploader-id", default="cli", help="Uploader id (default: cli)")
    import_parser.add_argument("--uploader-name", default="", help="Uploader display name")
    import_parser.add_argument("--yes", action="store_true", help="Commit without asking")
    import_parser.add_argument("--report", help="Write a commit summary CSV to this path")
    import_parser.add_argument(
        "--item-delay",
        type=float,
        default=0.0,
        help="Pause in seconds between committed items (default: 0)"
    )
    import_parser.add_argument(
        "--backend",
        default="memory",
        choices=["memory", "postgres"],
        help="Document store backend (default: memory)"
    )
    import_parser.add_argument(
        "--metrics-port",
        type=int,
        default=int(os.getenv("METRICS_PORT", "0")),
        help="Expose Prometheus metrics on this port while importing (default: METRICS_PORT or off)"
    )

    # Database connection arguments; unset values fall back to DB_* env vars
    import_parser.add_argument("--db-host", help="Database host")
    import_parser.add_argument("--db-port", type=int, help="Database port")
    import_parser.add_argument("--db-name", help="Database name")
    import_parser.add_argument("--db-user", help="Database user")
    import_parser.add_argument("--db-password", help="Database password")

    export_parser = subparsers.add_parser("export-results", help="Export quiz attempts as CSV")
    export_parser.add_argument("--input", required=True, help="JSON array of attempt documents")
    export_parser.add_argument("--output", help="Output path (default: stdout)")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    try:
        return COMMANDS[args.command](args)
    except ImporterError as e:
        logger.error(f"Import failed: {e}", extra={"error_type": type(e).__name__})
        print(f"\nError: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (OSError, ValueError) as e:
        logger.error(f"Invalid input: {e}", extra={"error_type": type(e).__name__})
        print(f"\nError: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
