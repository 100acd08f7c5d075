from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from doccompare.database.models import QueueTask, TaskStatus, TaskType


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    RETRYING = "retrying"
    FAILED = "failed"


@dataclass(frozen=True)
class TaskOutcome:
    """Result of running one claimed task."""

    task_id: int
    task_type: TaskType
    document_id: int
    status: OutcomeStatus
    attempts: int
    error_message: str | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class TaskSummary:
    id: int
    document_id: int
    task_type: TaskType
    status: TaskStatus
    attempts: int
    error_message: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_task(cls, task: QueueTask) -> "TaskSummary":
        return cls(
            id=task.id,
            document_id=task.document_id,
            task_type=task.task_type,
            status=task.status,
            attempts=task.attempts,
            error_message=task.error_message,
            created_at=task.created_at,
        )


@dataclass
class QueueStats:
    """Task counts per status plus the pending and failed tasks."""

    counts: dict[TaskStatus, int] = field(
        default_factory=lambda: {status: 0 for status in TaskStatus}
    )
    pending_tasks: list[TaskSummary] = field(default_factory=list)
    failed_tasks: list[TaskSummary] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def pending(self) -> int:
        return self.counts[TaskStatus.PENDING]

    @property
    def processing(self) -> int:
        return self.counts[TaskStatus.PROCESSING]

    @property
    def completed(self) -> int:
        return self.counts[TaskStatus.COMPLETED]

    @property
    def failed(self) -> int:
        return self.counts[TaskStatus.FAILED]


@dataclass
class DrainReport:
    """What one queue drain did."""

    outcomes: list[TaskOutcome] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)
