import threading
from datetime import datetime, timedelta, timezone

import pytest

from doccompare.database.exceptions import ConstraintViolationError
from doccompare.database.models import (
    ComparisonStatus,
    DocumentStatus,
    NewComparison,
    NewDocument,
    NewQueueTask,
    TaskStatus,
    TaskType,
)
from doccompare.database.repositories.factory import Repositories, RepositoryFactory
from doccompare.database.repositories.memory.store import MemoryStore


def _new_document(file_hash: str = "a" * 64, user_id: str = "u1", **kwargs: object) -> NewDocument:
    return NewDocument(
        filename=f"users/{user_id}/documents/{file_hash}/doc.txt",
        original_name="doc.txt",
        file_hash=file_hash,
        file_size=10,
        user_id=user_id,
        **kwargs,  # type: ignore[arg-type]
    )


def _new_task(document_id: int, priority: int = 5, **kwargs: object) -> NewQueueTask:
    return NewQueueTask(
        document_id=document_id,
        task_type=TaskType.EXTRACT_TEXT,
        user_id="u1",
        priority=priority,
        **kwargs,  # type: ignore[arg-type]
    )


class TestMemoryDocumentRepository:
    def test_create_assigns_id_and_timestamps(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        assert document.id == 1
        assert document.status == DocumentStatus.UPLOADED
        assert document.upload_date is not None

    def test_duplicate_hash_is_rejected(self, memory_repos: Repositories) -> None:
        memory_repos.documents.create(_new_document("b" * 64))
        with pytest.raises(ConstraintViolationError, match="already exists"):
            memory_repos.documents.create(_new_document("b" * 64, user_id="u2"))

    def test_find_by_hash(self, memory_repos: Repositories) -> None:
        created = memory_repos.documents.create(_new_document("c" * 64))
        found = memory_repos.documents.find_by_hash("c" * 64)
        assert found is not None and found.id == created.id
        assert memory_repos.documents.find_by_hash("d" * 64) is None

    def test_returned_rows_are_detached(self, memory_repos: Repositories) -> None:
        created = memory_repos.documents.create(_new_document())
        created.metadata["tampered"] = True
        stored = memory_repos.documents.find_by_id(created.id)
        assert stored is not None
        assert "tampered" not in stored.metadata

    def test_update_rejects_unknown_columns(self, memory_repos: Repositories) -> None:
        created = memory_repos.documents.create(_new_document())
        with pytest.raises(ValueError):
            memory_repos.documents.update(created.id, {"id": 99})

    def test_update_status_with_metadata(self, memory_repos: Repositories) -> None:
        created = memory_repos.documents.create(_new_document())
        assert memory_repos.documents.update_status(
            created.id, DocumentStatus.PROCESSED, {"pages": 2}
        )
        stored = memory_repos.documents.find_by_id(created.id)
        assert stored is not None
        assert stored.status == DocumentStatus.PROCESSED
        assert stored.metadata == {"pages": 2}

    def test_find_standard_document(self, memory_repos: Repositories) -> None:
        memory_repos.documents.create(_new_document("a" * 64))
        standard = memory_repos.documents.create(_new_document("b" * 64, is_standard=True))
        found = memory_repos.documents.find_standard_document("u1")
        assert found is not None and found.id == standard.id
        assert memory_repos.documents.find_standard_document("u2") is None

    def test_delete_cascades_to_comparisons_and_tasks(self, memory_repos: Repositories) -> None:
        first = memory_repos.documents.create(_new_document("a" * 64))
        second = memory_repos.documents.create(_new_document("b" * 64))
        comparison = memory_repos.comparisons.create(NewComparison(first.id, second.id, "u1"))
        task = memory_repos.tasks.create(_new_task(first.id))

        assert memory_repos.documents.delete(first.id) is True

        assert memory_repos.comparisons.find_by_id(comparison.id) is None
        assert memory_repos.tasks.find_by_id(task.id) is None
        assert memory_repos.documents.find_by_id(second.id) is not None

    def test_ids_are_not_reused_after_clear(self) -> None:
        store = MemoryStore()
        repos = RepositoryFactory.memory(store)
        repos.documents.create(_new_document("a" * 64))
        store.clear()
        assert repos.documents.create(_new_document("a" * 64)).id == 2


class TestMemoryComparisonRepository:
    def test_pair_is_unique_in_either_order(self, memory_repos: Repositories) -> None:
        first = memory_repos.documents.create(_new_document("a" * 64))
        second = memory_repos.documents.create(_new_document("b" * 64))
        memory_repos.comparisons.create(NewComparison(first.id, second.id, "u1"))

        with pytest.raises(ConstraintViolationError):
            memory_repos.comparisons.create(NewComparison(second.id, first.id, "u1"))

    def test_documents_must_exist(self, memory_repos: Repositories) -> None:
        first = memory_repos.documents.create(_new_document("a" * 64))
        with pytest.raises(ConstraintViolationError, match="does not exist"):
            memory_repos.comparisons.create(NewComparison(first.id, 999, "u1"))

    def test_find_by_documents_is_order_insensitive(self, memory_repos: Repositories) -> None:
        first = memory_repos.documents.create(_new_document("a" * 64))
        second = memory_repos.documents.create(_new_document("b" * 64))
        created = memory_repos.comparisons.create(NewComparison(first.id, second.id, "u1"))

        found = memory_repos.comparisons.find_by_documents(second.id, first.id)

        assert found is not None and found.id == created.id

    def test_count_by_document(self, memory_repos: Repositories) -> None:
        first = memory_repos.documents.create(_new_document("a" * 64))
        second = memory_repos.documents.create(_new_document("b" * 64))
        third = memory_repos.documents.create(_new_document("c" * 64))
        memory_repos.comparisons.create(NewComparison(first.id, second.id, "u1"))
        memory_repos.comparisons.create(NewComparison(third.id, first.id, "u1"))

        assert memory_repos.comparisons.count_by_document(first.id) == 2
        assert memory_repos.comparisons.count_by_document(second.id) == 1

    def test_update_status(self, memory_repos: Repositories) -> None:
        first = memory_repos.documents.create(_new_document("a" * 64))
        second = memory_repos.documents.create(_new_document("b" * 64))
        created = memory_repos.comparisons.create(NewComparison(first.id, second.id, "u1"))

        memory_repos.comparisons.update_status(created.id, ComparisonStatus.ERROR, "boom")

        stored = memory_repos.comparisons.find_by_id(created.id)
        assert stored is not None
        assert stored.status == ComparisonStatus.ERROR
        assert stored.error_message == "boom"
        assert memory_repos.comparisons.find_by_status(ComparisonStatus.ERROR, "u1")


class TestMemoryQueueTaskRepository:
    def test_task_requires_existing_document(self, memory_repos: Repositories) -> None:
        with pytest.raises(ConstraintViolationError):
            memory_repos.tasks.create(_new_task(999))

    def test_pending_tasks_ordered_by_priority(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        for priority in (1, 5, 3):
            memory_repos.tasks.create(_new_task(document.id, priority=priority))

        pending = memory_repos.tasks.find_pending_tasks()

        assert [task.priority for task in pending] == [5, 3, 1]

    def test_equal_priority_is_first_in_first_out(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        first = memory_repos.tasks.create(_new_task(document.id))
        second = memory_repos.tasks.create(_new_task(document.id))

        assert [task.id for task in memory_repos.tasks.find_pending_tasks()] == [
            first.id,
            second.id,
        ]

    def test_future_tasks_are_not_due(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        later = datetime.now(timezone.utc) + timedelta(hours=1)
        memory_repos.tasks.create(_new_task(document.id, scheduled_at=later))

        assert memory_repos.tasks.find_pending_tasks() == []
        assert memory_repos.tasks.claim_next() is None

    def test_claim_marks_processing(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        created = memory_repos.tasks.create(_new_task(document.id))

        claimed = memory_repos.tasks.claim_next()

        assert claimed is not None and claimed.id == created.id
        assert claimed.status == TaskStatus.PROCESSING
        assert claimed.started_at is not None
        assert memory_repos.tasks.claim_next() is None

    def test_concurrent_claims_never_share_a_task(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        for _ in range(20):
            memory_repos.tasks.create(_new_task(document.id))
        claimed: list[int] = []
        lock = threading.Lock()

        def claim_all() -> None:
            while (task := memory_repos.tasks.claim_next()) is not None:
                with lock:
                    claimed.append(task.id)

        threads = [threading.Thread(target=claim_all) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(claimed) == list(range(1, 21))

    def test_two_failures_keep_task_pending(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        task = memory_repos.tasks.create(_new_task(document.id, max_attempts=3))

        memory_repos.tasks.increment_attempts(task.id, "first")
        updated = memory_repos.tasks.increment_attempts(task.id, "second")

        assert updated is not None
        assert updated.status == TaskStatus.PENDING
        assert updated.attempts == 2
        assert updated.error_message == "second"

    def test_third_failure_marks_failed(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        task = memory_repos.tasks.create(_new_task(document.id, max_attempts=3))
        for message in ("one", "two"):
            memory_repos.tasks.increment_attempts(task.id, message)

        updated = memory_repos.tasks.increment_attempts(task.id, "three")

        assert updated is not None
        assert updated.status == TaskStatus.FAILED
        assert updated.attempts == 3
        assert updated.completed_at is not None
        assert memory_repos.tasks.increment_attempts(task.id, "four") is None

    def test_retry_is_scheduled_with_doubling_backoff(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        task = memory_repos.tasks.create(_new_task(document.id, max_attempts=3))
        before = datetime.now(timezone.utc)

        first = memory_repos.tasks.increment_attempts(task.id, "one", retry_delay_seconds=60)
        second = memory_repos.tasks.increment_attempts(task.id, "two", retry_delay_seconds=60)

        assert first is not None and first.scheduled_at is not None
        assert second is not None and second.scheduled_at is not None
        assert first.scheduled_at >= before + timedelta(seconds=60)
        assert second.scheduled_at >= before + timedelta(seconds=120)
        assert memory_repos.tasks.claim_next() is None

    def test_attempts_cannot_exceed_max(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        task = memory_repos.tasks.create(_new_task(document.id, max_attempts=3))
        with pytest.raises(ConstraintViolationError, match="exceeds"):
            memory_repos.tasks.update(task.id, {"attempts": 4})

    def test_cancel_only_pending(self, memory_repos: Repositories) -> None:
        document = memory_repos.documents.create(_new_document())
        pending = memory_repos.tasks.create(_new_task(document.id))
        memory_repos.tasks.create(_new_task(document.id, priority=9))
        running = memory_repos.tasks.claim_next()
        assert running is not None

        assert memory_repos.tasks.cancel(pending.id) is True
        assert memory_repos.tasks.cancel(running.id) is False
        cancelled = memory_repos.tasks.find_by_id(pending.id)
        assert cancelled is not None and cancelled.status == TaskStatus.CANCELLED
