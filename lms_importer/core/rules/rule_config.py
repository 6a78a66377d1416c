"""
Rule sets for the entity schemas.

Every rule is a plain dict (``rule_name``, ``rule_type``, ``field_name``,
``parameters``, ``severity``, ``enabled``) so the built-in sets, YAML
overrides and test fixtures all feed RuleEngine the same way.
"""

from pathlib import Path
from typing import Any

import yaml

RULE_TYPES = ("required_field", "enum", "range", "answer_key", "option_count")
SEVERITIES = ("error", "warning")


def rule_entry(
    field_name: str,
    rule_type: str,
    parameters: dict[str, Any] | None = None,
    severity: str = "error",
    rule_name: str | None = None,
    enabled: bool = True,
) -> dict[str, Any]:
    return {
        "rule_name": rule_name or f"{field_name}_{rule_type}",
        "rule_type": rule_type,
        "field_name": field_name,
        "parameters": parameters or {},
        "severity": severity,
        "enabled": enabled,
    }


def merge_rules(base: list[dict[str, Any]], overrides: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Replace the base rules of every field mentioned in overrides.

    Fields the overrides do not mention keep their base rules; base order is
    kept and override rules for new fields are appended.
    """
    overridden = {rule["field_name"] for rule in overrides}
    return [rule for rule in base if rule["field_name"] not in overridden] + list(overrides)


class RuleConfigLoader:
    """
    Reads per-field rule overrides from a YAML file.

    Rules are grouped by CSV column; each entry names a rule type and may
    carry ``params``, ``severity`` (error or warning), ``name`` and
    ``enabled``:

    ```yaml
    rules:
      marks:
        - type: range
          params: {min: 1, max: 5}
      category:
        - type: enum
          params:
            allowed: [Math, Science]
            case_insensitive: true
          severity: warning
    ```
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"No rule file at {config_path}")

    def load_rules(self) -> list[dict[str, Any]]:
        """
        Raises:
            ValueError: The file has no 'rules' mapping or an entry is malformed
        """
        document = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        if not isinstance(document, dict) or not isinstance(document.get("rules"), dict):
            raise ValueError(f"{self.config_path.name}: expected a top-level 'rules' section mapping columns to rules")

        loaded = []
        for field_name, entries in document["rules"].items():
            if not isinstance(entries, list):
                raise ValueError(f"{self.config_path.name}: rules for '{field_name}' must be a list")
            loaded.extend(self._entry(field_name, position, raw) for position, raw in enumerate(entries))
        return loaded

    def _entry(self, field_name: str, position: int, raw: Any) -> dict[str, Any]:
        rule_type = raw.get("type") if isinstance(raw, dict) else None
        if rule_type is None:
            raise ValueError(f"Rule #{position + 1} for '{field_name}' has no 'type'")
        if rule_type not in RULE_TYPES:
            raise ValueError(
                f"Unknown rule type '{rule_type}' for '{field_name}' (expected one of {', '.join(RULE_TYPES)})"
            )

        severity = raw.get("severity", "error")
        if severity not in SEVERITIES:
            raise ValueError(f"Severity of rule #{position + 1} for '{field_name}' must be error or warning")

        return rule_entry(
            field_name,
            rule_type,
            parameters=raw.get("params", raw.get("parameters")),
            severity=severity,
            rule_name=raw.get("name", f"{field_name}_{rule_type}_{position}"),
            enabled=bool(raw.get("enabled", True)),
        )


class RuleConfigBuilder:
    """Fluent construction of a rule set; used by the entity schemas."""

    def __init__(self):
        self.rules: list[dict[str, Any]] = []

    def _add(self, *args, **kwargs) -> "RuleConfigBuilder":
        self.rules.append(rule_entry(*args, **kwargs))
        return self

    def add_required_field(self, *field_names: str) -> "RuleConfigBuilder":
        for field_name in field_names:
            self._add(field_name, "required_field")
        return self

    def add_enum(
        self,
        field_name: str,
        allowed: list[str] | tuple[str, ...],
        case_insensitive: bool = False,
        severity: str = "error"
    ) -> "RuleConfigBuilder":
        return self._add(
            field_name,
            "enum",
            {"allowed": list(allowed), "case_insensitive": case_insensitive},
            severity,
        )

    def add_range(
        self,
        field_name: str,
        min_value: int | None = None,
        max_value: int | None = None
    ) -> "RuleConfigBuilder":
        """Integer bounds; either side may be left open."""
        bounds = {"min": min_value, "max": max_value}
        return self._add(field_name, "range", {k: v for k, v in bounds.items() if v is not None})

    def add_answer_key(self, field_name: str = "correctAnswer", **parameters) -> "RuleConfigBuilder":
        return self._add(field_name, "answer_key", parameters)

    def add_option_count(self, field_name: str = "options", **parameters) -> "RuleConfigBuilder":
        return self._add(field_name, "option_count", parameters)

    def build(self) -> list[dict[str, Any]]:
        return list(self.rules)
