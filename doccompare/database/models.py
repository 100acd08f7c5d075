from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


class ComparisonStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class TaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)


class TaskType(str, Enum):
    EXTRACT_TEXT = "extract_text"
    COMPARE = "compare"
    EXPORT = "export"


@dataclass
class Document:
    """Represents a row from the documents table."""

    id: int
    filename: str
    original_name: str
    file_hash: str
    file_size: int
    user_id: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    is_standard: bool = False
    extracted_text: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    storage_url: str | None = None
    upload_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Comparison:
    """Represents a row from the comparisons table."""

    id: int
    document1_id: int
    document2_id: int
    user_id: str
    status: ComparisonStatus = ComparisonStatus.PENDING
    similarity_score: float | None = None
    comparison_summary: str | None = None
    key_differences: list[dict[str, Any]] = field(default_factory=list)
    ai_suggestions: list[Any] = field(default_factory=list)
    error_message: str | None = None
    processing_time_ms: int | None = None
    strategy: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def involves(self, document_id: int) -> bool:
        return document_id in (self.document1_id, self.document2_id)


@dataclass
class QueueTask:
    """Represents a row from the processing_queue table."""

    id: int
    document_id: int
    task_type: TaskType
    user_id: str
    status: TaskStatus = TaskStatus.PENDING
    priority: int = 5
    attempts: int = 0
    max_attempts: int = 3
    scheduled_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class NewDocument:
    filename: str
    original_name: str
    file_hash: str
    file_size: int
    user_id: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    is_standard: bool = False
    extracted_text: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    storage_url: str | None = None


@dataclass
class NewComparison:
    document1_id: int
    document2_id: int
    user_id: str
    status: ComparisonStatus = ComparisonStatus.PENDING
    strategy: str | None = None


@dataclass
class NewQueueTask:
    document_id: int
    task_type: TaskType
    user_id: str
    priority: int = 5
    max_attempts: int = 3
    scheduled_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
