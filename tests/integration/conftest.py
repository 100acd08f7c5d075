import os
import uuid
from collections.abc import Generator

import psycopg
import pytest

from doccompare.config.settings import Settings
from doccompare.database.connection import Database, build_conninfo
from doccompare.database.repositories.factory import Repositories, RepositoryFactory


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "doccompare_test")
    return Settings(use_database=True)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[Database, None, None]:
    try:
        psycopg.connect(build_conninfo(test_settings), connect_timeout=3).close()
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    db = Database(test_settings)
    db.open()
    db.init_schema()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def pg_repos(database: Database) -> Generator[Repositories, None, None]:
    yield RepositoryFactory.postgres(database)
    with database.connection() as conn:
        conn.execute("DELETE FROM processing_queue WHERE user_id LIKE 'it-%'")
        conn.execute("DELETE FROM comparisons WHERE user_id LIKE 'it-%'")
        conn.execute("DELETE FROM documents WHERE user_id LIKE 'it-%'")
        conn.commit()


@pytest.fixture
def user_id() -> str:
    return f"it-{uuid.uuid4().hex[:12]}"
