from typing import Any

from psycopg.rows import dict_row

from doccompare.database.connection import Database
from doccompare.database.models import Comparison, ComparisonStatus, NewComparison
from doccompare.database.repositories.base import COMPARISON_COLUMNS, ComparisonRepository
from doccompare.database.repositories.postgres.errors import translate_errors
from doccompare.database.repositories.postgres.rows import row_to_comparison, to_db_value
from doccompare.database.repositories.postgres.sql import build_update

_NEWEST_FIRST = "ORDER BY created_at DESC, id DESC"


class PostgresComparisonRepository(ComparisonRepository):
    """Database operations for the comparisons table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, data: NewComparison) -> Comparison:
        """Insert a comparison.

        Raises:
            ConstraintViolationError: if the pair was already compared, in
                either order, or a document does not exist.
        """
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO comparisons (document1_id, document2_id, user_id, status, strategy)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (
                        data.document1_id,
                        data.document2_id,
                        data.user_id,
                        to_db_value("status", data.status),
                        data.strategy,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return row_to_comparison(row)

    def find_by_id(self, entity_id: int) -> Comparison | None:
        rows = self._fetch("SELECT * FROM comparisons WHERE id = %s", (entity_id,))
        return rows[0] if rows else None

    def find_by_user(self, user_id: str) -> list[Comparison]:
        return self._fetch(
            f"SELECT * FROM comparisons WHERE user_id = %s {_NEWEST_FIRST}", (user_id,)
        )

    def find_by_documents(self, document1_id: int, document2_id: int) -> Comparison | None:
        rows = self._fetch(
            """
            SELECT * FROM comparisons
            WHERE LEAST(document1_id, document2_id) = LEAST(%s, %s)
              AND GREATEST(document1_id, document2_id) = GREATEST(%s, %s)
            """,
            (document1_id, document2_id, document1_id, document2_id),
        )
        return rows[0] if rows else None

    def find_by_document(self, document_id: int) -> list[Comparison]:
        return self._fetch(
            f"SELECT * FROM comparisons WHERE document1_id = %s OR document2_id = %s {_NEWEST_FIRST}",
            (document_id, document_id),
        )

    def count_by_document(self, document_id: int) -> int:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM comparisons WHERE document1_id = %s OR document2_id = %s",
                    (document_id, document_id),
                )
                row = cur.fetchone()
        return int(row[0]) if row else 0

    def find_by_status(
        self, status: ComparisonStatus, user_id: str | None = None
    ) -> list[Comparison]:
        if user_id is None:
            return self._fetch(
                f"SELECT * FROM comparisons WHERE status = %s {_NEWEST_FIRST}",
                (to_db_value("status", status),),
            )
        return self._fetch(
            f"SELECT * FROM comparisons WHERE status = %s AND user_id = %s {_NEWEST_FIRST}",
            (to_db_value("status", status), user_id),
        )

    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        query, params = build_update("comparisons", entity_id, changes, COMPARISON_COLUMNS)
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def delete(self, entity_id: int) -> bool:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM comparisons WHERE id = %s", (entity_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def _fetch(self, query: str, params: tuple[Any, ...]) -> list[Comparison]:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [row_to_comparison(row) for row in rows]
