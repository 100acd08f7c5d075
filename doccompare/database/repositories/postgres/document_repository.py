from typing import Any

from psycopg.rows import dict_row

from doccompare.database.connection import Database
from doccompare.database.models import Document, DocumentStatus, NewDocument
from doccompare.database.repositories.base import DOCUMENT_COLUMNS, DocumentRepository
from doccompare.database.repositories.postgres.errors import translate_errors
from doccompare.database.repositories.postgres.rows import row_to_document, to_db_value
from doccompare.database.repositories.postgres.sql import build_update

_NEWEST_FIRST = "ORDER BY upload_date DESC, id DESC"


class PostgresDocumentRepository(DocumentRepository):
    """Database operations for the documents table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, data: NewDocument) -> Document:
        """Insert a document.

        Raises:
            ConstraintViolationError: if a document with the same hash exists.
        """
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO documents (
                        filename, original_name, file_hash, file_size, user_id,
                        status, is_standard, extracted_text, metadata, storage_url
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (
                        data.filename,
                        data.original_name,
                        data.file_hash,
                        data.file_size,
                        data.user_id,
                        to_db_value("status", data.status),
                        data.is_standard,
                        data.extracted_text,
                        to_db_value("metadata", data.metadata),
                        data.storage_url,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return row_to_document(row)

    def find_by_id(self, entity_id: int) -> Document | None:
        rows = self._fetch("SELECT * FROM documents WHERE id = %s", (entity_id,))
        return rows[0] if rows else None

    def find_by_user(self, user_id: str) -> list[Document]:
        return self._fetch(
            f"SELECT * FROM documents WHERE user_id = %s {_NEWEST_FIRST}", (user_id,)
        )

    def find_by_hash(self, file_hash: str) -> Document | None:
        rows = self._fetch("SELECT * FROM documents WHERE file_hash = %s", (file_hash,))
        return rows[0] if rows else None

    def find_standard_document(self, user_id: str) -> Document | None:
        rows = self._fetch(
            f"SELECT * FROM documents WHERE user_id = %s AND is_standard {_NEWEST_FIRST} LIMIT 1",
            (user_id,),
        )
        return rows[0] if rows else None

    def find_by_status(
        self, status: DocumentStatus, user_id: str | None = None
    ) -> list[Document]:
        if user_id is None:
            return self._fetch(
                f"SELECT * FROM documents WHERE status = %s {_NEWEST_FIRST}",
                (to_db_value("status", status),),
            )
        return self._fetch(
            f"SELECT * FROM documents WHERE status = %s AND user_id = %s {_NEWEST_FIRST}",
            (to_db_value("status", status), user_id),
        )

    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        query, params = build_update("documents", entity_id, changes, DOCUMENT_COLUMNS)
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def delete(self, entity_id: int) -> bool:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM documents WHERE id = %s", (entity_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def _fetch(self, query: str, params: tuple[Any, ...]) -> list[Document]:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [row_to_document(row) for row in rows]
