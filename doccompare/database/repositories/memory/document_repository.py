from dataclasses import asdict
from typing import Any

from doccompare.database.exceptions import ConstraintViolationError
from doccompare.database.models import Document, DocumentStatus, NewDocument
from doccompare.database.repositories.base import (
    DOCUMENT_COLUMNS,
    DocumentRepository,
    check_columns,
)
from doccompare.database.repositories.memory.store import MemoryStore, detached, utcnow


class MemoryDocumentRepository(DocumentRepository):
    """Documents kept in a MemoryStore."""

    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._rows: dict[int, Document] = store.table("documents")

    def create(self, data: NewDocument) -> Document:
        with self._store.lock:
            if any(row.file_hash == data.file_hash for row in self._rows.values()):
                raise ConstraintViolationError(
                    f"Document with hash {data.file_hash} already exists"
                )
            now = utcnow()
            document = Document(
                id=self._store.next_id("documents"),
                **detached(asdict(data)),
                upload_date=now,
                created_at=now,
                updated_at=now,
            )
            document.status = DocumentStatus(document.status)
            self._rows[document.id] = document
            return detached(document)

    def find_by_id(self, entity_id: int) -> Document | None:
        with self._store.lock:
            row = self._rows.get(entity_id)
            return detached(row) if row is not None else None

    def find_by_user(self, user_id: str) -> list[Document]:
        return self._select(lambda row: row.user_id == user_id)

    def find_by_hash(self, file_hash: str) -> Document | None:
        rows = self._select(lambda row: row.file_hash == file_hash)
        return rows[0] if rows else None

    def find_standard_document(self, user_id: str) -> Document | None:
        rows = self._select(lambda row: row.user_id == user_id and row.is_standard)
        return rows[0] if rows else None

    def find_by_status(
        self, status: DocumentStatus, user_id: str | None = None
    ) -> list[Document]:
        return self._select(
            lambda row: row.status == status
            and (user_id is None or row.user_id == user_id)
        )

    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        check_columns(changes, DOCUMENT_COLUMNS)
        with self._store.lock:
            row = self._rows.get(entity_id)
            if row is None:
                return False
            new_hash = changes.get("file_hash")
            if new_hash is not None and any(
                other.file_hash == new_hash and other.id != entity_id
                for other in self._rows.values()
            ):
                raise ConstraintViolationError(
                    f"Document with hash {new_hash} already exists"
                )
            for column, value in detached(changes).items():
                if column == "status":
                    value = DocumentStatus(value)
                setattr(row, column, value)
            row.updated_at = utcnow()
            return True

    def delete(self, entity_id: int) -> bool:
        with self._store.lock:
            if self._rows.pop(entity_id, None) is None:
                return False
            # Mirror ON DELETE CASCADE.
            comparisons = self._store.table("comparisons")
            for comparison_id in [
                cid for cid, row in comparisons.items() if row.involves(entity_id)
            ]:
                del comparisons[comparison_id]
            tasks = self._store.table("processing_queue")
            for task_id in [
                tid for tid, row in tasks.items() if row.document_id == entity_id
            ]:
                del tasks[task_id]
            return True

    def _select(self, predicate: Any) -> list[Document]:
        with self._store.lock:
            rows = [row for row in self._rows.values() if predicate(row)]
            rows.sort(key=lambda row: (row.upload_date, row.id), reverse=True)
            return [detached(row) for row in rows]
