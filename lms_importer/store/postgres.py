"""
PostgreSQL-backed document store.

Documents live as JSONB rows in a single ``documents`` table keyed by
(collection, id), so nested collections like ``quizzes/<id>/questions``
need no DDL of their own.
"""

import json
import uuid
from typing import Any

from psycopg import OperationalError

from lms_importer.core.errors import StoreUnavailableError
from lms_importer.utils.validation import validate_collection_path

from .base import DocumentStore
from .connection import DatabaseConnectionPool

CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS documents (
        collection TEXT NOT NULL,
        id TEXT NOT NULL,
        data JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
        PRIMARY KEY (collection, id)
    )
"""


def _dumps(document: dict[str, Any]) -> str:
    # datetimes are stored as ISO strings
    return json.dumps(document, default=lambda value: value.isoformat() if hasattr(value, "isoformat") else str(value))


class PostgresDocumentStore(DocumentStore):
    """
    Document store on top of a psycopg3 connection pool.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize the store.

        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    def ensure_schema(self) -> None:
        """Create the documents table if it does not exist."""
        self._execute(CREATE_TABLE, None)

    def create(self, collection: str, document: dict[str, Any]) -> str:
        collection = validate_collection_path(collection)
        document_id = uuid.uuid4().hex
        self._execute(
            "INSERT INTO documents (collection, id, data) VALUES (%s, %s, %s::jsonb)",
            (collection, document_id, _dumps(document)),
        )
        return document_id

    def list(self, collection: str, filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        collection = validate_collection_path(collection)
        query = "SELECT id, data FROM documents WHERE collection = %s"
        params: tuple = (collection,)
        if filter:
            query += " AND data @> %s::jsonb"
            params = (collection, _dumps(filter))
        query += " ORDER BY created_at, id"

        try:
            with self.pool.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    rows = cur.fetchall()
        except OperationalError as e:
            raise StoreUnavailableError(f"Could not list {collection}: {e}") from e

        return [{"id": row["id"], **row["data"]} for row in rows]

    def update(self, collection: str, document_id: str, partial: dict[str, Any]) -> None:
        collection = validate_collection_path(collection)
        updated = self._execute(
            "UPDATE documents SET data = data || %s::jsonb WHERE collection = %s AND id = %s",
            (_dumps(partial), collection, document_id),
        )
        if updated == 0:
            raise KeyError(f"Document {collection}/{document_id} does not exist")

    def put(self, collection: str, document_id: str, document: dict[str, Any]) -> None:
        """Insert or replace a document under a known id."""
        collection = validate_collection_path(collection)
        self._execute(
            """
            INSERT INTO documents (collection, id, data) VALUES (%s, %s, %s::jsonb)
            ON CONFLICT (collection, id) DO UPDATE SET data = EXCLUDED.data
            """,
            (collection, document_id, _dumps(document)),
        )

    def _execute(self, command: str, params: tuple | None) -> int:
        """Run one statement in its own transaction and return the row count."""
        try:
            with self.pool.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(command, params)
                    rowcount = cur.rowcount
                conn.commit()
                return rowcount
        except OperationalError as e:
            raise StoreUnavailableError(str(e)) from e
