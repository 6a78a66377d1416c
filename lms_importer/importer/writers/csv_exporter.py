"""
CSV export: blank/example templates, round-trippable item export and reports.
"""

import csv
import io
from datetime import datetime
from typing import Any, Iterable

from lms_importer.core.models import CommitTally, ImportBatch, ImportItem
from lms_importer.core.schema import EntitySchema

REPORT_COLUMNS: dict[str, list[str]] = {
    "commit_summary": [
        "Entity",
        "Total Rows",
        "Valid Rows",
        "Invalid Rows",
        "Succeeded",
        "Failed",
        "Skipped Duplicates",
    ],
    "validation_errors": ["Row", "Field", "Message"],
    "quiz_results": [
        "Student Email",
        "Quiz Title",
        "Score",
        "Total Questions",
        "Correct Answers",
        "Time Spent (min)",
        "Completed At",
        "Status",
    ],
}


class CSVExporter:
    """
    Writes CSV in the same comma-delimited, minimally quoted format the
    reader accepts.
    """

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def template(self, schema: EntitySchema, with_examples: bool = False) -> str:
        """Header row for an entity, optionally followed by its example rows."""
        rows = schema.example_rows if with_examples else []
        return self._render(schema.columns, rows)

    def items(self, schema: EntitySchema, items: Iterable[ImportItem]) -> str:
        """Items in template layout; parsing the output yields equal items."""
        rows = []
        for item in items:
            cells = item.to_row()
            rows.append([cells.get(column, "") for column in schema.columns])
        return self._render(schema.columns, rows)

    def report(self, report_type: str, rows: Iterable[dict[str, Any]]) -> str:
        """
        Render a report with its fixed column order.

        Args:
            report_type: One of REPORT_COLUMNS
            rows: Dicts keyed by column header; missing cells render empty

        Raises:
            ValueError: For an unknown report type
        """
        try:
            columns = REPORT_COLUMNS[report_type]
        except KeyError:
            raise ValueError(
                f"Unknown report type '{report_type}'. Available: {', '.join(REPORT_COLUMNS)}"
            ) from None
        return self._render(columns, [[_cell(row.get(column)) for column in columns] for row in rows])

    def commit_summary(self, batch: ImportBatch, tally: CommitTally) -> str:
        return self.report("commit_summary", [{
            "Entity": batch.entity,
            "Total Rows": batch.total_rows,
            "Valid Rows": len(batch.entries),
            "Invalid Rows": len(batch.invalid_rows),
            "Succeeded": tally.succeeded,
            "Failed": tally.failed,
            "Skipped Duplicates": tally.skipped_duplicates,
        }])

    def validation_errors(self, batch: ImportBatch) -> str:
        return self.report("validation_errors", [
            {"Row": error.row, "Field": error.field, "Message": error.message}
            for error in batch.errors
        ])

    def quiz_results(self, results: Iterable[dict[str, Any]]) -> str:
        """
        Export quiz attempt documents (studentEmail, quizTitle, score,
        totalQuestions, correctAnswers, timeSpent in seconds, completedAt, status).
        """
        rows = []
        for result in results:
            completed_at = result.get("completedAt")
            rows.append({
                "Student Email": result.get("studentEmail", ""),
                "Quiz Title": result.get("quizTitle", ""),
                "Score": result.get("score", ""),
                "Total Questions": result.get("totalQuestions", ""),
                "Correct Answers": result.get("correctAnswers", ""),
                "Time Spent (min)": round((result.get("timeSpent") or 0) / 60),
                "Completed At": completed_at if completed_at else "N/A",
                "Status": result.get("status", ""),
            })
        return self.report("quiz_results", rows)

    def _render(self, columns: list[str], rows: Iterable[list[Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=self.delimiter, lineterminator="\n")
        writer.writerow(columns)
        for row in rows:
            writer.writerow([_cell(value) for value in row])
        return buffer.getvalue()


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)
