"""
psycopg3 connection pool for the PostgreSQL document store.

Settings not passed explicitly are read from DB_HOST, DB_PORT, DB_NAME,
DB_USER and DB_PASSWORD.
"""
import os
import time
from contextlib import contextmanager

from psycopg import OperationalError
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from lms_importer.core.errors import StoreUnavailableError
from lms_importer.observability.logger import get_logger


logger = get_logger(__name__)


class DatabaseConnectionPool:
    """
    Lazily opened pool of dict-row connections.

    The importer writes one document per statement, so a small pool is
    enough; commit throughput is bound by the sequential commit loop.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 4,
        timeout: float = 10.0,
        conninfo: str | None = None,
    ) -> None:
        """
        Args:
            host: Server host (DB_HOST, default localhost)
            port: Server port (DB_PORT, default 5432)
            database: Database name (DB_NAME, default lms)
            user: Role to connect as (DB_USER, default lms_importer)
            password: Role password (DB_PASSWORD); required unless conninfo is given
            min_size: Connections kept open
            max_size: Upper bound on open connections
            timeout: Seconds to wait for a connection
            conninfo: Complete libpq connection string or URL, used as is
        """
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "lms")
        self.user = user or os.getenv("DB_USER", "lms_importer")
        self.password = password or os.getenv("DB_PASSWORD")

        if conninfo is None and not self.password:
            raise ValueError("No database password: pass password= or set DB_PASSWORD")

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self.conninfo = conninfo or " ".join([
            f"host={self.host}",
            f"port={self.port}",
            f"dbname={self.database}",
            f"user={self.user}",
            f"password={self.password}",
            f"connect_timeout={int(self.timeout)}",
        ])

        self._pool: ConnectionPool | None = None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, retrying while the server is unreachable.

        Raises:
            StoreUnavailableError: When every attempt fails
        """
        if self._pool is not None:
            return

        attempt = 0
        while True:
            attempt += 1
            pool = ConnectionPool(
                conninfo=self.conninfo,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.timeout,
                kwargs={"row_factory": dict_row},
                open=False,
            )
            try:
                pool.open(wait=True, timeout=self.timeout)
            except (OperationalError, TimeoutError) as e:
                pool.close()
                logger.warning(
                    "Database unreachable",
                    extra={"attempt": attempt, "max_retries": max_retries, "error": str(e)}
                )
                if attempt >= max_retries:
                    raise StoreUnavailableError(f"Database unreachable after {attempt} attempt(s): {e}") from e
                time.sleep(retry_delay)
                continue

            self._pool = pool
            logger.info("Database pool open", extra={"host": self.host, "database": self.database})
            return

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self):
        """
        Borrow a connection; it is returned to the pool (and its transaction
        committed or rolled back) when the block exits.

        Raises:
            RuntimeError: If open() has not been called
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open; call open() first")

        with self._pool.connection() as conn:
            yield conn
