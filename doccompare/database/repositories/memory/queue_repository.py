from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any

from doccompare.database.exceptions import ConstraintViolationError
from doccompare.database.models import NewQueueTask, QueueTask, TaskStatus, TaskType
from doccompare.database.repositories.base import (
    QUEUE_TASK_COLUMNS,
    QueueTaskRepository,
    check_columns,
)
from doccompare.database.repositories.memory.store import MemoryStore, detached, utcnow


def _pending_order(task: QueueTask) -> tuple[int, datetime, int]:
    due = task.scheduled_at or task.created_at or utcnow()
    return (-task.priority, due, task.id)


class MemoryQueueTaskRepository(QueueTaskRepository):
    """Queue tasks kept in a MemoryStore. Claims happen under the store lock."""

    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._rows: dict[int, QueueTask] = store.table("processing_queue")

    def create(self, data: NewQueueTask) -> QueueTask:
        with self._store.lock:
            if data.document_id not in self._store.table("documents"):
                raise ConstraintViolationError(f"Document {data.document_id} does not exist")
            now = utcnow()
            task = QueueTask(
                id=self._store.next_id("processing_queue"),
                **detached(asdict(data)),
                created_at=now,
                updated_at=now,
            )
            task.task_type = TaskType(task.task_type)
            self._rows[task.id] = task
            return detached(task)

    def find_by_id(self, entity_id: int) -> QueueTask | None:
        with self._store.lock:
            row = self._rows.get(entity_id)
            return detached(row) if row is not None else None

    def find_by_user(self, user_id: str) -> list[QueueTask]:
        rows = self._select(lambda row: row.user_id == user_id)
        return list(reversed(rows))

    def find_pending_tasks(self, limit: int = 10) -> list[QueueTask]:
        with self._store.lock:
            return [detached(row) for row in self._due_pending()[:limit]]

    def claim_next(self) -> QueueTask | None:
        with self._store.lock:
            pending = self._due_pending()
            if not pending:
                return None
            task = pending[0]
            now = utcnow()
            task.status = TaskStatus.PROCESSING
            task.started_at = now
            task.updated_at = now
            return detached(task)

    def find_by_document(self, document_id: int) -> list[QueueTask]:
        return self._select(lambda row: row.document_id == document_id)

    def find_by_status(self, status: TaskStatus, user_id: str | None = None) -> list[QueueTask]:
        return self._select(
            lambda row: row.status == status
            and (user_id is None or row.user_id == user_id)
        )

    def find_all(self) -> list[QueueTask]:
        return self._select(lambda row: True)

    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        check_columns(changes, QUEUE_TASK_COLUMNS)
        with self._store.lock:
            row = self._rows.get(entity_id)
            if row is None:
                return False
            attempts = changes.get("attempts", row.attempts)
            max_attempts = changes.get("max_attempts", row.max_attempts)
            if attempts > max_attempts:
                raise ConstraintViolationError(
                    f"Task {entity_id}: attempts {attempts} exceeds max_attempts {max_attempts}"
                )
            for column, value in detached(changes).items():
                if column == "status":
                    value = TaskStatus(value)
                setattr(row, column, value)
            row.updated_at = utcnow()
            return True

    def increment_attempts(
        self, task_id: int, error_message: str | None = None, retry_delay_seconds: float = 0.0
    ) -> QueueTask | None:
        with self._store.lock:
            row = self._rows.get(task_id)
            if row is None or row.status.is_terminal:
                return None
            now = utcnow()
            row.attempts += 1
            row.error_message = error_message
            if row.attempts >= row.max_attempts:
                row.status = TaskStatus.FAILED
                row.completed_at = now
            else:
                row.status = TaskStatus.PENDING
                row.scheduled_at = now + timedelta(
                    seconds=retry_delay_seconds * 2 ** (row.attempts - 1)
                )
            row.updated_at = now
            return detached(row)

    def cancel(self, task_id: int) -> bool:
        with self._store.lock:
            row = self._rows.get(task_id)
            if row is None or row.status != TaskStatus.PENDING:
                return False
            now = utcnow()
            row.status = TaskStatus.CANCELLED
            row.completed_at = now
            row.updated_at = now
            return True

    def delete(self, entity_id: int) -> bool:
        with self._store.lock:
            return self._rows.pop(entity_id, None) is not None

    def _due_pending(self) -> list[QueueTask]:
        now = utcnow()
        rows = [
            row
            for row in self._rows.values()
            if row.status == TaskStatus.PENDING
            and (row.scheduled_at is None or row.scheduled_at <= now)
        ]
        rows.sort(key=_pending_order)
        return rows

    def _select(self, predicate: Any) -> list[QueueTask]:
        with self._store.lock:
            rows = [row for row in self._rows.values() if predicate(row)]
            rows.sort(key=lambda row: row.id)
            return [detached(row) for row in rows]
