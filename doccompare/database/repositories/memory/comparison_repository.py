from dataclasses import asdict
from typing import Any

from doccompare.database.exceptions import ConstraintViolationError
from doccompare.database.models import Comparison, ComparisonStatus, NewComparison
from doccompare.database.repositories.base import (
    COMPARISON_COLUMNS,
    ComparisonRepository,
    check_columns,
)
from doccompare.database.repositories.memory.store import MemoryStore, detached, utcnow


def _pair(document1_id: int, document2_id: int) -> tuple[int, int]:
    return (min(document1_id, document2_id), max(document1_id, document2_id))


class MemoryComparisonRepository(ComparisonRepository):
    """Comparisons kept in a MemoryStore."""

    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._rows: dict[int, Comparison] = store.table("comparisons")

    def create(self, data: NewComparison) -> Comparison:
        with self._store.lock:
            documents = self._store.table("documents")
            for document_id in (data.document1_id, data.document2_id):
                if document_id not in documents:
                    raise ConstraintViolationError(f"Document {document_id} does not exist")
            pair = _pair(data.document1_id, data.document2_id)
            if any(
                _pair(row.document1_id, row.document2_id) == pair
                for row in self._rows.values()
            ):
                raise ConstraintViolationError(
                    f"Comparison of documents {pair[0]} and {pair[1]} already exists"
                )
            now = utcnow()
            comparison = Comparison(
                id=self._store.next_id("comparisons"),
                **asdict(data),
                created_at=now,
                updated_at=now,
            )
            comparison.status = ComparisonStatus(comparison.status)
            self._rows[comparison.id] = comparison
            return detached(comparison)

    def find_by_id(self, entity_id: int) -> Comparison | None:
        with self._store.lock:
            row = self._rows.get(entity_id)
            return detached(row) if row is not None else None

    def find_by_user(self, user_id: str) -> list[Comparison]:
        return self._select(lambda row: row.user_id == user_id)

    def find_by_documents(self, document1_id: int, document2_id: int) -> Comparison | None:
        pair = _pair(document1_id, document2_id)
        rows = self._select(lambda row: _pair(row.document1_id, row.document2_id) == pair)
        return rows[0] if rows else None

    def find_by_document(self, document_id: int) -> list[Comparison]:
        return self._select(lambda row: row.involves(document_id))

    def count_by_document(self, document_id: int) -> int:
        with self._store.lock:
            return sum(1 for row in self._rows.values() if row.involves(document_id))

    def find_by_status(
        self, status: ComparisonStatus, user_id: str | None = None
    ) -> list[Comparison]:
        return self._select(
            lambda row: row.status == status
            and (user_id is None or row.user_id == user_id)
        )

    def update(self, entity_id: int, changes: dict[str, Any]) -> bool:
        check_columns(changes, COMPARISON_COLUMNS)
        with self._store.lock:
            row = self._rows.get(entity_id)
            if row is None:
                return False
            for column, value in detached(changes).items():
                if column == "status":
                    value = ComparisonStatus(value)
                setattr(row, column, value)
            row.updated_at = utcnow()
            return True

    def delete(self, entity_id: int) -> bool:
        with self._store.lock:
            return self._rows.pop(entity_id, None) is not None

    def _select(self, predicate: Any) -> list[Comparison]:
        with self._store.lock:
            rows = [row for row in self._rows.values() if predicate(row)]
            rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
            return [detached(row) for row in rows]
