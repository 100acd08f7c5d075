from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Generic, TypeVar

from doccompare.database.models import (
    Comparison,
    ComparisonStatus,
    Document,
    DocumentStatus,
    NewComparison,
    NewDocument,
    NewQueueTask,
    QueueTask,
    TaskStatus,
)

EntityT = TypeVar("EntityT")
CreateT = TypeVar("CreateT")

DOCUMENT_COLUMNS: frozenset[str] = frozenset(
    {
        "filename",
        "original_name",
        "file_hash",
        "file_size",
        "user_id",
        "status",
        "is_standard",
        "extracted_text",
        "metadata",
        "storage_url",
    }
)
COMPARISON_COLUMNS: frozenset[str] = frozenset(
    {
        "document1_id",
        "document2_id",
        "user_id",
        "status",
        "similarity_score",
        "comparison_summary",
        "key_differences",
        "ai_suggestions",
        "error_message",
        "processing_time_ms",
        "strategy",
        "details",
    }
)
QUEUE_TASK_COLUMNS: frozenset[str] = frozenset(
    {
        "status",
        "priority",
        "attempts",
        "max_attempts",
        "scheduled_at",
        "started_at",
        "completed_at",
        "error_message",
        "metadata",
    }
)


def check_columns(changes: dict[str, Any], allowed: Iterable[str]) -> None:
    """Reject update keys that are not writable columns."""
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown or read-only columns: {unknown}")


class BaseRepository(ABC, Generic[EntityT, CreateT]):
    """CRUD contract shared by every entity repository."""

    @abstractmethod
    def create(self, data: CreateT) -> EntityT:
        """Insert a row and return the stored entity with its new id."""

    @abstractmethod
    def find_by_id(self, entity_id: int) -> EntityT | None:
        """Return the entity, or None when no row has this id."""

    @abstractmethod
    def find_by_user(self, user_id: str) -> list[EntityT]:
        """Return every entity owned by user_id, newest first."""

    @abstractmethod
    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        """Apply a partial update. Returns False when no row has this id.

        Raises:
            ValueError: if changes names a column that cannot be written.
        """

    @abstractmethod
    def delete(self, entity_id: int) -> bool:
        """Delete a row. Returns False when no row has this id."""


class DocumentRepository(BaseRepository[Document, NewDocument]):
    @abstractmethod
    def find_by_hash(self, file_hash: str) -> Document | None:
        """Return the document with this content hash, if any."""

    @abstractmethod
    def find_standard_document(self, user_id: str) -> Document | None:
        """Return the user's baseline document, if one is marked."""

    @abstractmethod
    def find_by_status(
        self, status: DocumentStatus, user_id: str | None = None
    ) -> list[Document]:
        """Return documents in a status, optionally scoped to one user."""

    def update_status(
        self, document_id: int, status: DocumentStatus, metadata: dict[str, Any] | None = None
    ) -> bool:
        changes: dict[str, Any] = {"status": status}
        if metadata is not None:
            changes["metadata"] = metadata
        return self.update(document_id, changes)


class ComparisonRepository(BaseRepository[Comparison, NewComparison]):
    @abstractmethod
    def find_by_documents(self, document1_id: int, document2_id: int) -> Comparison | None:
        """Return the comparison of this pair in either order, if any."""

    @abstractmethod
    def find_by_document(self, document_id: int) -> list[Comparison]:
        """Return comparisons that reference the document on either side."""

    @abstractmethod
    def count_by_document(self, document_id: int) -> int:
        """Count comparisons that reference the document on either side."""

    @abstractmethod
    def find_by_status(
        self, status: ComparisonStatus, user_id: str | None = None
    ) -> list[Comparison]:
        """Return comparisons in a status, optionally scoped to one user."""

    def update_status(
        self, comparison_id: int, status: ComparisonStatus, error_message: str | None = None
    ) -> bool:
        return self.update(
            comparison_id, {"status": status, "error_message": error_message}
        )


class QueueTaskRepository(BaseRepository[QueueTask, NewQueueTask]):
    @abstractmethod
    def find_pending_tasks(self, limit: int = 10) -> list[QueueTask]:
        """Return due pending tasks.

        Ordered by priority descending, then scheduled (or created) time
        ascending, then id ascending.
        """

    @abstractmethod
    def claim_next(self) -> QueueTask | None:
        """Atomically pick the first due pending task and mark it processing.

        At most one caller receives any given task.
        """

    @abstractmethod
    def find_by_document(self, document_id: int) -> list[QueueTask]:
        """Return tasks targeting the document, oldest first."""

    @abstractmethod
    def find_by_status(self, status: TaskStatus, user_id: str | None = None) -> list[QueueTask]:
        """Return tasks in a status, optionally scoped to one user."""

    @abstractmethod
    def find_all(self) -> list[QueueTask]:
        """Return every task, oldest first."""

    @abstractmethod
    def increment_attempts(
        self, task_id: int, error_message: str | None = None, retry_delay_seconds: float = 0.0
    ) -> QueueTask | None:
        """Record one failed attempt.

        The task goes back to pending with scheduled_at pushed out by
        retry_delay_seconds * 2 ** (attempts - 1), or to failed with
        completed_at set once attempts reaches max_attempts. Terminal tasks
        are left untouched. Returns the updated task, or None when it does not
        exist or is already terminal.
        """

    @abstractmethod
    def cancel(self, task_id: int) -> bool:
        """Cancel a pending task. Returns False for any other status."""

    def update_status(
        self,
        task_id: int,
        status: TaskStatus,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
    ) -> bool:
        changes: dict[str, Any] = {"status": status}
        if started_at is not None:
            changes["started_at"] = started_at
        if completed_at is not None:
            changes["completed_at"] = completed_at
        return self.update(task_id, changes)
