from datetime import datetime, timezone
from typing import Any

from doccompare.config.settings import Settings
from doccompare.database.models import NewQueueTask, QueueTask, TaskStatus, TaskType
from doccompare.database.repositories.base import QueueTaskRepository
from doccompare.logging.logger import Log
from doccompare.queue.models import QueueStats, TaskSummary

_ACTIVE_STATUSES = (TaskStatus.PENDING, TaskStatus.PROCESSING)


class ProcessingQueue:
    """Enqueue, claim and status transitions for queue tasks."""

    def __init__(self, tasks: QueueTaskRepository, settings: Settings) -> None:
        self._tasks = tasks
        self._default_priority = settings.default_task_priority
        self._max_attempts = settings.max_task_attempts
        self._retry_delay_seconds = settings.task_retry_delay_seconds

    def enqueue(
        self,
        document_id: int,
        task_type: TaskType,
        user_id: str,
        priority: int | None = None,
        scheduled_at: datetime | None = None,
        max_attempts: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> QueueTask:
        if scheduled_at is not None and scheduled_at.tzinfo is None:
            scheduled_at = scheduled_at.replace(tzinfo=timezone.utc)
        task = self._tasks.create(
            NewQueueTask(
                document_id=document_id,
                task_type=TaskType(task_type),
                user_id=user_id,
                priority=self._default_priority if priority is None else priority,
                max_attempts=self._max_attempts if max_attempts is None else max_attempts,
                scheduled_at=scheduled_at,
                metadata=dict(metadata or {}),
            )
        )
        Log.info(
            f"Queued {task.task_type.value} task {task.id} for document {document_id} "
            f"(priority {task.priority})"
        )
        return task

    def enqueue_extraction(
        self, document_id: int, user_id: str, priority: int | None = None
    ) -> tuple[QueueTask, bool]:
        """Queue text extraction unless one is already pending or processing.

        Returns the task and whether it was newly created.
        """
        for task in self._tasks.find_by_document(document_id):
            if task.task_type == TaskType.EXTRACT_TEXT and task.status in _ACTIVE_STATUSES:
                Log.warning(
                    f"Extraction already queued for document {document_id} "
                    f"(task {task.id}, {task.status.value})"
                )
                return task, False
        return self.enqueue(document_id, TaskType.EXTRACT_TEXT, user_id, priority), True

    def get(self, task_id: int) -> QueueTask | None:
        return self._tasks.find_by_id(task_id)

    def find_pending_tasks(self, limit: int = 10) -> list[QueueTask]:
        return self._tasks.find_pending_tasks(limit)

    def find_by_document(self, document_id: int) -> list[QueueTask]:
        return self._tasks.find_by_document(document_id)

    def claim_next(self) -> QueueTask | None:
        task = self._tasks.claim_next()
        if task is not None:
            Log.info(
                f"Claimed {task.task_type.value} task {task.id} for document {task.document_id} "
                f"(attempt {task.attempts + 1}/{task.max_attempts})"
            )
        return task

    def mark_completed(self, task_id: int) -> bool:
        return self._tasks.update_status(
            task_id, TaskStatus.COMPLETED, completed_at=datetime.now(timezone.utc)
        )

    def record_failure(self, task_id: int, error_message: str) -> QueueTask | None:
        """Count one failed attempt and schedule the retry with backoff.

        The task is failed once attempts reach the ceiling.
        """
        task = self._tasks.increment_attempts(task_id, error_message, self._retry_delay_seconds)
        if task is None:
            Log.warning(f"Task {task_id} is missing or already terminal; failure not recorded")
        elif task.status == TaskStatus.FAILED:
            Log.error(f"Task {task_id} permanently failed after {task.attempts} attempts")
        else:
            Log.warning(
                f"Task {task_id} will be retried at {task.scheduled_at} "
                f"(attempt {task.attempts}/{task.max_attempts})"
            )
        return task

    def cancel(self, task_id: int) -> bool:
        cancelled = self._tasks.cancel(task_id)
        if cancelled:
            Log.info(f"Task {task_id} cancelled")
        return cancelled

    def get_stats(self) -> QueueStats:
        stats = QueueStats()
        for task in self._tasks.find_all():
            stats.counts[task.status] += 1
            if task.status == TaskStatus.PENDING:
                stats.pending_tasks.append(TaskSummary.from_task(task))
            elif task.status == TaskStatus.FAILED:
                stats.failed_tasks.append(TaskSummary.from_task(task))
        return stats
