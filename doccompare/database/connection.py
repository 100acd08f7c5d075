from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from doccompare.config.settings import Settings
from doccompare.logging.logger import Log

_SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


class Database:
    """Owns the PostgreSQL connection pool.

    The pool is created closed; call ``open()`` once at process start and
    ``close()`` on shutdown.
    """

    def __init__(self, settings: Settings) -> None:
        self._pool = ConnectionPool(
            build_conninfo(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            open=False,
        )
        self._opened = False

    def open(self) -> None:
        if not self._opened:
            self._pool.open()
            self._opened = True
            Log.info("Database connection pool opened")

    def close(self) -> None:
        if self._opened:
            self._pool.close()
            self._opened = False
            Log.info("Database connection pool closed")

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection from the pool. Caller manages commit/rollback."""
        if not self._opened:
            raise RuntimeError("Connection pool not opened. Call open() first.")
        with self._pool.connection() as conn:
            yield conn

    def init_schema(self) -> None:
        """Create tables and indexes when they do not exist yet."""
        schema = _SCHEMA_PATH.read_text(encoding="utf-8")
        with self.connection() as conn:
            conn.execute(schema)
            conn.commit()
        Log.info("Database schema applied")
