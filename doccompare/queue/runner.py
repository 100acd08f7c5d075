from datetime import datetime, timezone

from doccompare.database.models import QueueTask, TaskStatus, TaskType
from doccompare.logging.logger import Log
from doccompare.queue.base import BaseTaskHandler
from doccompare.queue.exceptions import (
    TaskExecutionError,
    TaskNotImplementedError,
    UnknownTaskTypeError,
)
from doccompare.queue.models import OutcomeStatus, TaskOutcome
from doccompare.queue.queue import ProcessingQueue


class TaskRunner:
    """Run one claimed task, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        queue: ProcessingQueue,
        handlers: dict[TaskType, BaseTaskHandler],
    ) -> None:
        self._queue = queue
        self._handlers = dict(handlers)

    def run(self, task: QueueTask) -> TaskOutcome:
        """Execute a single task.

        Raises:
            TaskExecutionError: after the failure has been recorded on the
                task; the handler's exception is its ``__cause__``.
        """
        Log.info(f"Running task {task.id} (attempt {task.attempts + 1})")
        try:
            self._handler_for(task).handle(task)
        except Exception as exc:
            outcome = self._handle_failure(task, exc)
            raise TaskExecutionError(outcome) from exc

        self._queue.mark_completed(task.id)
        Log.info(f"Task {task.id} completed successfully")
        return TaskOutcome(
            task_id=task.id,
            task_type=task.task_type,
            document_id=task.document_id,
            status=OutcomeStatus.COMPLETED,
            attempts=task.attempts,
            completed_at=datetime.now(timezone.utc),
        )

    def _handler_for(self, task: QueueTask) -> BaseTaskHandler:
        handler = self._handlers.get(task.task_type)
        if handler is not None:
            return handler
        if task.task_type in (TaskType.COMPARE, TaskType.EXPORT):
            raise TaskNotImplementedError(
                f"{task.task_type.value} processing is not implemented"
            )
        raise UnknownTaskTypeError(f"Unknown task type: {task.task_type}")

    def _handle_failure(self, task: QueueTask, exc: Exception) -> TaskOutcome:
        """Increment attempts; the repository decides pending vs failed."""
        error_message = str(exc) or exc.__class__.__name__
        Log.error(f"Task {task.id} failed: {error_message}")
        updated = self._queue.record_failure(task.id, error_message)
        attempts = updated.attempts if updated is not None else task.attempts + 1
        failed = updated is None or updated.status == TaskStatus.FAILED
        return TaskOutcome(
            task_id=task.id,
            task_type=task.task_type,
            document_id=task.document_id,
            status=OutcomeStatus.FAILED if failed else OutcomeStatus.RETRYING,
            attempts=attempts,
            error_message=error_message,
            completed_at=updated.completed_at if updated is not None else None,
        )
