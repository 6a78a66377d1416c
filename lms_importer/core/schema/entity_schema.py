"""
Entity schema: the column contract, rules and item mapping for one import type.
"""

from datetime import datetime
from typing import Any, Callable

from lms_importer.core.models import CommitTarget, ImportItem, Uploader


class EntitySchema:
    """
    Describes one importable entity (questions, courses).

    Attributes:
        name: Registry key, e.g. "question"
        columns: Header columns in template order
        required_columns: Columns the header must contain; all of them when omitted
        rules: Built-in rule configurations for RuleEngine
        field_map: Item attribute -> column, used to report model errors
        dedupe_column: Column whose normalized value identifies duplicates
        dedupe_match: "exact" or "substring"
        max_bytes: Upload size limit for this entity
        example_rows: Sample rows for the populated template
        default_error_field: Column blamed for whole-item model errors
    """

    def __init__(
        self,
        name: str,
        columns: list[str],
        rules: list[dict[str, Any]],
        builder: Callable[[dict[str, Any]], ImportItem],
        field_map: dict[str, str],
        dedupe_column: str,
        attribution: Callable[[Uploader, datetime], dict[str, Any]],
        target_factory: Callable[..., CommitTarget],
        dedupe_match: str = "exact",
        max_bytes: int = 10 * 1024 * 1024,
        example_rows: list[list[str]] | None = None,
        default_error_field: str | None = None,
        required_columns: list[str] | None = None,
    ):
        if dedupe_match not in ("exact", "substring"):
            raise ValueError(f"Unsupported dedupe_match: {dedupe_match}")
        if dedupe_column not in columns:
            raise ValueError(f"dedupe_column '{dedupe_column}' is not one of the schema columns")
        unknown = [column for column in required_columns or [] if column not in columns]
        if unknown:
            raise ValueError(f"required_columns not in the schema columns: {', '.join(unknown)}")

        self.name = name
        self.columns = list(columns)
        self.rules = list(rules)
        self._builder = builder
        self.field_map = dict(field_map)
        self.dedupe_column = dedupe_column
        self.dedupe_match = dedupe_match
        self._attribution = attribution
        self._target_factory = target_factory
        self.max_bytes = max_bytes
        self.example_rows = [list(row) for row in example_rows or []]
        self.default_error_field = default_error_field or columns[0]
        self.required_columns = list(required_columns) if required_columns is not None else list(columns)

    @property
    def required_headers(self) -> list[str]:
        return list(self.required_columns)

    def build_item(self, values: dict[str, Any]) -> ImportItem:
        """
        Build the typed item from a row's normalized values.

        Raises:
            pydantic.ValidationError: If the values violate the item model
        """
        return self._builder(values)

    def column_for(self, attribute: str | None) -> str:
        """Column name for an item attribute, for error reporting."""
        if attribute is None:
            return self.default_error_field
        return self.field_map.get(attribute, attribute)

    def attribution(self, uploader: Uploader, now: datetime) -> dict[str, Any]:
        """Extra fields stamped on each persisted document."""
        return self._attribution(uploader, now)

    def target(self, **kwargs) -> CommitTarget:
        """Commit destination, e.g. target(quiz_id="q1") for questions."""
        return self._target_factory(**kwargs)

    def __repr__(self) -> str:
        return f"EntitySchema(name={self.name}, columns={len(self.columns)}, rules={len(self.rules)})"
