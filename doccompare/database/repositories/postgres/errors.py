from collections.abc import Generator
from contextlib import contextmanager

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import PoolTimeout

from doccompare.database.exceptions import (
    BackendUnavailableError,
    ConstraintViolationError,
    RepositoryError,
)


@contextmanager
def translate_errors() -> Generator[None, None, None]:
    """Re-raise psycopg failures as repository exceptions."""
    try:
        yield
    except (
        pg_errors.UniqueViolation,
        pg_errors.ForeignKeyViolation,
        pg_errors.CheckViolation,
    ) as exc:
        raise ConstraintViolationError(str(exc)) from exc
    except (psycopg.OperationalError, PoolTimeout) as exc:
        raise BackendUnavailableError(f"Database unavailable: {exc}") from exc
    except psycopg.Error as exc:
        raise RepositoryError(f"Database error: {exc}") from exc
