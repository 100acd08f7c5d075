from datetime import datetime, timedelta, timezone

import pytest

from doccompare.config.settings import Settings
from doccompare.database.models import NewDocument, TaskStatus, TaskType
from doccompare.database.repositories.factory import Repositories
from doccompare.queue.queue import ProcessingQueue


def _make_queue(memory_repos: Repositories, settings: Settings) -> tuple[ProcessingQueue, int]:
    """Create a queue over memory repositories plus one document to queue against."""
    document = memory_repos.documents.create(
        NewDocument(
            filename="k", original_name="a.txt", file_hash="a" * 64, file_size=1, user_id="u1"
        )
    )
    return ProcessingQueue(memory_repos.tasks, settings), document.id


class TestEnqueue:
    def test_applies_default_priority_and_attempts(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)

        task = queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")

        assert task.priority == 5
        assert task.max_attempts == 3
        assert task.status == TaskStatus.PENDING
        assert task.attempts == 0

    def test_naive_schedule_is_treated_as_utc(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        naive = datetime(2030, 1, 1, 9, 0)

        task = queue.enqueue(document_id, TaskType.COMPARE, "u1", scheduled_at=naive)

        assert task.scheduled_at == naive.replace(tzinfo=timezone.utc)

    def test_enqueue_extraction_reuses_active_task(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)

        first, created_first = queue.enqueue_extraction(document_id, "u1")
        second, created_second = queue.enqueue_extraction(document_id, "u1")

        assert created_first is True
        assert created_second is False
        assert second.id == first.id

    def test_enqueue_extraction_after_failure_creates_new_task(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        first, _ = queue.enqueue_extraction(document_id, "u1")
        memory_repos.tasks.update(first.id, {"status": TaskStatus.FAILED})

        second, created = queue.enqueue_extraction(document_id, "u1")

        assert created is True
        assert second.id != first.id


class TestRetrySemantics:
    def test_fails_after_max_attempts(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        immediate = settings.model_copy(update={"task_retry_delay_seconds": 0.0})
        queue, document_id = _make_queue(memory_repos, immediate)
        task = queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")

        statuses = []
        for attempt in range(3):
            claimed = queue.claim_next()
            assert claimed is not None, f"attempt {attempt + 1} found nothing to claim"
            updated = queue.record_failure(claimed.id, "boom")
            assert updated is not None
            statuses.append((updated.status, updated.attempts))

        assert statuses == [
            (TaskStatus.PENDING, 1),
            (TaskStatus.PENDING, 2),
            (TaskStatus.FAILED, 3),
        ]
        assert queue.claim_next() is None
        assert queue.get(task.id).completed_at is not None  # type: ignore[union-attr]

    def test_failed_attempt_is_rescheduled_with_backoff(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")
        before = datetime.now(timezone.utc)

        claimed = queue.claim_next()
        assert claimed is not None
        updated = queue.record_failure(claimed.id, "connection reset")

        assert updated is not None
        assert updated.status == TaskStatus.PENDING
        assert updated.scheduled_at is not None
        assert updated.scheduled_at >= before + timedelta(seconds=60)
        assert queue.claim_next() is None

    def test_record_failure_on_completed_task_is_ignored(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        task = queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")
        queue.mark_completed(task.id)

        assert queue.record_failure(task.id, "late") is None
        assert queue.get(task.id).attempts == 0  # type: ignore[union-attr]


class TestClaimAndCancel:
    def test_claims_highest_priority_first(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        for priority in (1, 5, 3):
            queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1", priority=priority)

        claimed = [queue.claim_next() for _ in range(3)]

        assert [task.priority for task in claimed if task] == [5, 3, 1]

    def test_future_task_is_not_claimed(
        self, memory_repos: Repositories, settings: Settings
    ) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        queue.enqueue(
            document_id,
            TaskType.EXTRACT_TEXT,
            "u1",
            scheduled_at=datetime.now(timezone.utc) + timedelta(minutes=5),
        )
        assert queue.claim_next() is None

    def test_cancel_pending(self, memory_repos: Repositories, settings: Settings) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        task = queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")

        assert queue.cancel(task.id) is True
        assert queue.claim_next() is None


class TestStats:
    def test_counts_by_status(self, memory_repos: Repositories, settings: Settings) -> None:
        queue, document_id = _make_queue(memory_repos, settings)
        done = queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")
        queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1")
        failed = queue.enqueue(document_id, TaskType.EXTRACT_TEXT, "u1", max_attempts=1)
        queue.mark_completed(done.id)
        queue.record_failure(failed.id, "boom")

        stats = queue.get_stats()

        assert stats.total == 3
        assert stats.pending == 1
        assert stats.completed == 1
        assert stats.failed == 1
        assert [summary.id for summary in stats.failed_tasks] == [failed.id]
        assert stats.failed_tasks[0].error_message == "boom"


@pytest.mark.parametrize("status", list(TaskStatus))
def test_terminal_statuses(status: TaskStatus) -> None:
    expected = status in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)
    assert status.is_terminal is expected
