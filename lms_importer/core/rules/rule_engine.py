"""
Rule engine for validating raw rows against an entity schema.

The engine runs every enabled rule on every row, collecting all failures
instead of stopping at the first one, and only materializes an ImportItem
for rows with no error-severity failures.
"""

from typing import TYPE_CHECKING, Any, Iterable

from pydantic import ValidationError as PydanticValidationError

from lms_importer.core.models import BatchEntry, ImportBatch, ImportItem, RawRecord, ValidationError
from lms_importer.core.validators import (
    AnswerKeyValidator,
    BaseValidator,
    EnumValidator,
    OptionCountValidator,
    RangeValidator,
    RequiredFieldValidator,
    RuleViolation,
)
from lms_importer.observability.logger import get_logger
from lms_importer.observability.metrics import record_validation_failure, rows_parsed_total

from .rule_config import merge_rules

if TYPE_CHECKING:
    from lms_importer.core.schema.entity_schema import EntitySchema


logger = get_logger(__name__)


class RuleEngine:
    """
    Applies an entity schema's rules to raw rows.

    Validation is a pure function of (RawRecord, schema): the engine never
    touches a document store.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "enum": EnumValidator,
        "range": RangeValidator,
        "answer_key": AnswerKeyValidator,
        "option_count": OptionCountValidator,
    }

    def __init__(self, schema: "EntitySchema", overrides: list[dict[str, Any]] | None = None):
        """
        Args:
            schema: Supplies the built-in rules and builds items from clean rows
            overrides: Rules (usually from RuleConfigLoader) that take over
                       every column they name
        """
        self.schema = schema
        self.rules = merge_rules(schema.rules, overrides or [])
        self.validators: list[tuple[str, str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]
            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Rule '{rule_name}' has unsupported type '{rule_type}'")

            try:
                validator = validator_class(rule["field_name"], rule.get("parameters", {}))
            except ValueError as e:
                raise ValueError(f"Rule '{rule_name}' is misconfigured: {e}") from e

            self.validators.append((rule_name, rule.get("severity", "error"), validator))

    def evaluate(self, record: RawRecord) -> tuple[ImportItem | None, list[ValidationError], list[ValidationError]]:
        """
        Run every rule on one row.

        Returns:
            Tuple of (item or None, errors, warnings)
        """
        raw = record.values
        values: dict[str, Any] = {key: value.strip() for key, value in raw.items()}
        errors: list[ValidationError] = []
        warnings: list[ValidationError] = []

        for _rule_name, severity, validator in self.validators:
            field_name = validator.field_name
            try:
                result = validator.validate(raw.get(field_name, ""), raw)
            except RuleViolation as violation:
                issue = ValidationError(
                    row=record.row,
                    field=violation.field_name,
                    message=violation.message,
                    rule=violation.rule_name,
                    severity=severity,
                )
                if severity == "error":
                    errors.append(issue)
                    record_validation_failure(self.schema.name, violation.rule_name, violation.field_name)
                else:
                    warnings.append(issue)
                continue

            if validator.normalizes and field_name in raw:
                values[field_name] = result

        if errors:
            return None, errors, warnings

        try:
            return self.schema.build_item(values), errors, warnings
        except PydanticValidationError as e:
            return None, self._convert_model_errors(record.row, e), warnings

    def validate_record(self, record: RawRecord) -> ImportItem | list[ValidationError]:
        """
        Validate one row.

        Returns:
            The ImportItem when the row is valid, otherwise its errors
        """
        item, errors, _warnings = self.evaluate(record)
        if item is None:
            return errors
        return item

    def validate_batch(self, records: Iterable[RawRecord]) -> ImportBatch:
        """
        Validate every row independently and gather the results.

        A failing row never stops later rows from being evaluated.
        """
        batch = ImportBatch(entity=self.schema.name)

        for record in records:
            batch.total_rows += 1
            item, errors, warnings = self.evaluate(record)
            batch.warnings.extend(warnings)
            if item is None:
                batch.errors.extend(errors)
            else:
                batch.entries.append(BatchEntry(row=record.row, item=item))

        rows_parsed_total.labels(entity=self.schema.name).inc(batch.total_rows)
        logger.info(
            "Validation complete",
            extra={
                "entity": self.schema.name,
                "total_rows": batch.total_rows,
                "valid_rows": len(batch.entries),
                "invalid_rows": len(batch.invalid_rows),
                "error_count": len(batch.errors),
            }
        )
        return batch

    def _convert_model_errors(self, row: int, error: PydanticValidationError) -> list[ValidationError]:
        """Turn item model errors into per-row errors keyed by column name."""
        converted = []
        for detail in error.errors():
            attribute = str(detail["loc"][0]) if detail["loc"] else None
            converted.append(ValidationError(
                row=row,
                field=self.schema.column_for(attribute),
                message=detail["msg"].removeprefix("Value error, "),
                rule="schema",
            ))
            record_validation_failure(self.schema.name, "schema", converted[-1].field)
        return converted

    def get_rule_summary(self) -> dict[str, Any]:
        """Active validator counts per rule type."""
        counts: dict[str, int] = {}
        for _, _, validator in self.validators:
            counts[validator.rule_type] = counts.get(validator.rule_type, 0) + 1
        return {
            "entity": self.schema.name,
            "total_rules": len(self.validators),
            "rules_by_type": counts,
        }
