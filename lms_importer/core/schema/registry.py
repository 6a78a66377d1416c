"""
Schema registry: looks up entity schemas by name.
"""

from .course import COURSE_SCHEMA
from .entity_schema import EntitySchema
from .question import QUESTION_SCHEMA


class SchemaRegistry:
    """
    Registry of importable entity schemas.
    """

    def __init__(self, schemas: list[EntitySchema] | None = None):
        self._schemas: dict[str, EntitySchema] = {}
        for schema in schemas or []:
            self.register(schema)

    def register(self, schema: EntitySchema) -> None:
        """
        Register a schema under its name.

        Raises:
            ValueError: If a schema with the same name is already registered
        """
        if schema.name in self._schemas:
            raise ValueError(f"Schema '{schema.name}' is already registered")
        self._schemas[schema.name] = schema

    def get(self, name: str) -> EntitySchema:
        """
        Get a schema by name.

        Raises:
            KeyError: If no schema has that name
        """
        try:
            return self._schemas[name]
        except KeyError:
            raise KeyError(f"Unknown entity '{name}'. Available: {', '.join(self.names())}") from None

    def names(self) -> list[str]:
        return sorted(self._schemas)


default_registry = SchemaRegistry([QUESTION_SCHEMA, COURSE_SCHEMA])


def get_schema(name: str) -> EntitySchema:
    """Look up a built-in schema by entity name."""
    return default_registry.get(name)
