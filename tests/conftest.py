"""
Pytest configuration and fixtures for lms-importer tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
from typing import Any, Generator

import pytest
from testcontainers.postgres import PostgresContainer

from lms_importer.core.errors import StoreUnavailableError
from lms_importer.core.models import Uploader
from lms_importer.core.schema import COURSE_SCHEMA, QUESTION_SCHEMA
from lms_importer.importer import ImportPipeline
from lms_importer.store import InMemoryDocumentStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise several components or Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that drive the CLI"
    )


# =======================
# CSV FIXTURES
# =======================

QUESTION_HEADER = (
    "questionText,optionA,optionB,optionC,optionD,correctAnswer,"
    "questionType,marks,difficulty,explanation,category"
)

COURSE_HEADER = "courseCode,courseName,subjectCategory,courseCategory,description,credits,prerequisites"


def build_question_csv(*rows: str) -> str:
    """Question CSV text with the standard header."""
    return "\n".join([QUESTION_HEADER, *rows]) + "\n"


def build_course_csv(*rows: str) -> str:
    """Course CSV text with the standard header."""
    return "\n".join([COURSE_HEADER, *rows]) + "\n"


@pytest.fixture
def question_csv():
    """Builder for question CSV text: question_csv(row, row, ...)"""
    return build_question_csv


@pytest.fixture
def course_csv():
    """Builder for course CSV text: course_csv(row, row, ...)"""
    return build_course_csv


@pytest.fixture
def mixed_question_csv() -> str:
    """
    Five question rows: three valid (MCQ, True-False, Short Answer) and two
    invalid (answer letter E, marks 15).
    """
    return build_question_csv(
        "2+2=?,3,4,5,6,B,MCQ,1,Easy,Basic arithmetic,Math",
        "The sun is a star.,,,,,True,True-False,1,Easy,,Science",
        "Define osmosis.,,,,,Movement of water across a membrane,Short Answer,5,Medium,,Biology",
        "Capital of France?,Paris,Rome,,,E,MCQ,2,Easy,,Geography",
        "Largest planet?,Mars,Jupiter,,,B,MCQ,15,Hard,,Science",
    )


# =======================
# STORE FIXTURES
# =======================

class UnavailableStore(InMemoryDocumentStore):
    """Store whose reads fail, as if the backing service were down."""

    def list(self, collection: str, filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        raise StoreUnavailableError("connection refused")


class FailingCreateStore(InMemoryDocumentStore):
    """Store that rejects creates for documents whose key is listed."""

    def __init__(self, reject: set[str], key_field: str = "questionText"):
        super().__init__()
        self.reject = reject
        self.key_field = key_field

    def create(self, collection: str, document: dict[str, Any]) -> str:
        if document.get(self.key_field) in self.reject:
            raise RuntimeError("permission denied")
        return super().create(collection, document)


class BrokenUpdateStore(InMemoryDocumentStore):
    """Store whose writes succeed but whose updates drop the connection."""

    def update(self, collection: str, document_id: str, partial: dict[str, Any]) -> None:
        raise ConnectionError("store went away")


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Empty in-memory store with a quiz document to hold the question count."""
    store = InMemoryDocumentStore()
    store.put("quizzes", "quiz-1", {"title": "Week 1 quiz"})
    return store


@pytest.fixture
def uploader() -> Uploader:
    return Uploader(uid="faculty-7", display_name="Dr. Meera Iyer")


@pytest.fixture
def question_pipeline(memory_store) -> ImportPipeline:
    return ImportPipeline(QUESTION_SCHEMA, memory_store)


@pytest.fixture
def course_pipeline() -> Generator[ImportPipeline, None, None]:
    yield ImportPipeline(COURSE_SCHEMA, InMemoryDocumentStore())


@pytest.fixture
def unavailable_store() -> UnavailableStore:
    store = UnavailableStore()
    store.put("quizzes", "quiz-1", {"title": "Week 1 quiz"})
    return store


@pytest.fixture
def failing_store_factory():
    """Factory for stores that reject specific keys: failing_store_factory({"2+2=?"})"""
    def factory(reject: set[str], key_field: str = "questionText") -> FailingCreateStore:
        store = FailingCreateStore(reject, key_field)
        store.put("quizzes", "quiz-1", {"title": "Week 1 quiz"})
        return store
    return factory


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Skips the requesting tests when Docker is not available.

    Yields:
        PostgresContainer instance
    """
    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_importer",
        password="test_password",
        dbname="test_lms",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture
def db_pool(postgres_container):
    """
    Open a connection pool to the test database with an empty documents table

    Yields:
        Open DatabaseConnectionPool
    """
    from lms_importer.store.connection import DatabaseConnectionPool
    from lms_importer.store.postgres import PostgresDocumentStore

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_lms",
        user="test_importer",
        password="test_password",
    )
    pool.open()
    PostgresDocumentStore(pool).ensure_schema()

    with pool.get_connection() as conn:
        conn.execute("TRUNCATE TABLE documents")

    yield pool
    pool.close()


@pytest.fixture
def broken_update_store() -> BrokenUpdateStore:
    store = BrokenUpdateStore()
    store.put("quizzes", "quiz-1", {"title": "Week 1 quiz"})
    return store
