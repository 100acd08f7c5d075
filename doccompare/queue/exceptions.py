from doccompare.exceptions import DocCompareError
from doccompare.queue.models import TaskOutcome


class QueueError(DocCompareError):
    """Base exception for queue processing."""


class UnknownTaskTypeError(QueueError):
    """Raised when a task type has no registered handler and is not a known type."""


class TaskNotImplementedError(QueueError):
    """Raised for known task types that have no handler yet (compare, export)."""


class TaskExecutionError(QueueError):
    """Raised by the runner after a task failure has been recorded.

    The original exception is chained as ``__cause__``; ``outcome`` tells
    whether the task will be retried or has failed for good.
    """

    def __init__(self, outcome: TaskOutcome) -> None:
        super().__init__(f"Task {outcome.task_id} failed: {outcome.error_message}")
        self.outcome = outcome
