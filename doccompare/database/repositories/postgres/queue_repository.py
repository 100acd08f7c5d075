from typing import Any

from psycopg.rows import dict_row

from doccompare.database.connection import Database
from doccompare.database.models import NewQueueTask, QueueTask, TaskStatus
from doccompare.database.repositories.base import QUEUE_TASK_COLUMNS, QueueTaskRepository
from doccompare.database.repositories.postgres.errors import translate_errors
from doccompare.database.repositories.postgres.rows import row_to_task, to_db_value
from doccompare.database.repositories.postgres.sql import build_update

_DUE_PENDING = """
    WHERE status = 'pending'
      AND (scheduled_at IS NULL OR scheduled_at <= NOW())
    ORDER BY priority DESC, COALESCE(scheduled_at, created_at) ASC, id ASC
"""


class PostgresQueueTaskRepository(QueueTaskRepository):
    """Database operations for the processing_queue table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, data: NewQueueTask) -> QueueTask:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO processing_queue (
                        document_id, task_type, user_id, priority,
                        max_attempts, scheduled_at, metadata
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (
                        data.document_id,
                        to_db_value("task_type", data.task_type),
                        data.user_id,
                        data.priority,
                        data.max_attempts,
                        data.scheduled_at,
                        to_db_value("metadata", data.metadata),
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return row_to_task(row)

    def find_by_id(self, entity_id: int) -> QueueTask | None:
        rows = self._fetch("SELECT * FROM processing_queue WHERE id = %s", (entity_id,))
        return rows[0] if rows else None

    def find_by_user(self, user_id: str) -> list[QueueTask]:
        return self._fetch(
            "SELECT * FROM processing_queue WHERE user_id = %s ORDER BY created_at DESC, id DESC",
            (user_id,),
        )

    def find_pending_tasks(self, limit: int = 10) -> list[QueueTask]:
        return self._fetch(f"SELECT * FROM processing_queue {_DUE_PENDING} LIMIT %s", (limit,))

    def claim_next(self) -> QueueTask | None:
        """Claim the next due task in one statement using FOR UPDATE SKIP LOCKED."""
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE processing_queue
                    SET status = 'processing', started_at = NOW(), updated_at = NOW()
                    WHERE id = (
                        SELECT id FROM processing_queue
                        {_DUE_PENDING}
                        LIMIT 1
                        FOR UPDATE SKIP LOCKED
                    )
                    RETURNING *
                    """
                )
                row = cur.fetchone()
            conn.commit()
        return row_to_task(row) if row is not None else None

    def find_by_document(self, document_id: int) -> list[QueueTask]:
        return self._fetch(
            "SELECT * FROM processing_queue WHERE document_id = %s ORDER BY id", (document_id,)
        )

    def find_by_status(self, status: TaskStatus, user_id: str | None = None) -> list[QueueTask]:
        if user_id is None:
            return self._fetch(
                "SELECT * FROM processing_queue WHERE status = %s ORDER BY id",
                (to_db_value("status", status),),
            )
        return self._fetch(
            "SELECT * FROM processing_queue WHERE status = %s AND user_id = %s ORDER BY id",
            (to_db_value("status", status), user_id),
        )

    def find_all(self) -> list[QueueTask]:
        return self._fetch("SELECT * FROM processing_queue ORDER BY id", ())

    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        query, params = build_update(
            "processing_queue", entity_id, changes, QUEUE_TASK_COLUMNS
        )
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def increment_attempts(
        self, task_id: int, error_message: str | None = None, retry_delay_seconds: float = 0.0
    ) -> QueueTask | None:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    UPDATE processing_queue
                    SET attempts = attempts + 1,
                        error_message = %s,
                        status = CASE
                            WHEN attempts + 1 >= max_attempts THEN 'failed'
                            ELSE 'pending'
                        END,
                        completed_at = CASE
                            WHEN attempts + 1 >= max_attempts THEN NOW()
                            ELSE completed_at
                        END,
                        scheduled_at = CASE
                            WHEN attempts + 1 >= max_attempts THEN scheduled_at
                            ELSE NOW() + make_interval(secs => %s * power(2, attempts))
                        END,
                        updated_at = NOW()
                    WHERE id = %s
                      AND status IN ('pending', 'processing')
                    RETURNING *
                    """,
                    (error_message, retry_delay_seconds, task_id),
                )
                row = cur.fetchone()
            conn.commit()
        return row_to_task(row) if row is not None else None

    def cancel(self, task_id: int) -> bool:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_queue
                    SET status = 'cancelled', completed_at = NOW(), updated_at = NOW()
                    WHERE id = %s AND status = 'pending'
                    """,
                    (task_id,),
                )
                cancelled = cur.rowcount > 0
            conn.commit()
        return cancelled

    def delete(self, entity_id: int) -> bool:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM processing_queue WHERE id = %s", (entity_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def _fetch(self, query: str, params: tuple[Any, ...]) -> list[QueueTask]:
        with translate_errors(), self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [row_to_task(row) for row in rows]
