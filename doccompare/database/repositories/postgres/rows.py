import json
from decimal import Decimal
from enum import Enum
from typing import Any

from psycopg.types.json import Jsonb

from doccompare.database.models import (
    Comparison,
    ComparisonStatus,
    Document,
    DocumentStatus,
    QueueTask,
    TaskStatus,
    TaskType,
)

JSON_COLUMNS: frozenset[str] = frozenset(
    {"metadata", "key_differences", "ai_suggestions", "details"}
)


def parse_json(value: Any, default: Any) -> Any:
    """Accept JSONB values already decoded by psycopg or raw JSON text."""
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value


def parse_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (Decimal, int, float)):
        return float(value)
    return float(str(value))


def to_db_value(column: str, value: Any) -> Any:
    """Convert a domain value into a query parameter."""
    if isinstance(value, Enum):
        return value.value
    if column in JSON_COLUMNS:
        return Jsonb(value)
    return value


def row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=row["id"],
        filename=row["filename"],
        original_name=row["original_name"],
        file_hash=row["file_hash"],
        file_size=int(row["file_size"]),
        user_id=row["user_id"],
        status=DocumentStatus(row["status"]),
        is_standard=bool(row["is_standard"]),
        extracted_text=row.get("extracted_text"),
        metadata=parse_json(row.get("metadata"), {}),
        storage_url=row.get("storage_url"),
        upload_date=row.get("upload_date"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def row_to_comparison(row: dict[str, Any]) -> Comparison:
    return Comparison(
        id=row["id"],
        document1_id=row["document1_id"],
        document2_id=row["document2_id"],
        user_id=row["user_id"],
        status=ComparisonStatus(row["status"]),
        similarity_score=parse_float(row.get("similarity_score")),
        comparison_summary=row.get("comparison_summary"),
        key_differences=parse_json(row.get("key_differences"), []),
        ai_suggestions=parse_json(row.get("ai_suggestions"), []),
        error_message=row.get("error_message"),
        processing_time_ms=row.get("processing_time_ms"),
        strategy=row.get("strategy"),
        details=parse_json(row.get("details"), {}),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def row_to_task(row: dict[str, Any]) -> QueueTask:
    return QueueTask(
        id=row["id"],
        document_id=row["document_id"],
        task_type=TaskType(row["task_type"]),
        user_id=row["user_id"],
        status=TaskStatus(row["status"]),
        priority=int(row["priority"]),
        attempts=int(row["attempts"]),
        max_attempts=int(row["max_attempts"]),
        scheduled_at=row.get("scheduled_at"),
        started_at=row.get("started_at"),
        completed_at=row.get("completed_at"),
        error_message=row.get("error_message"),
        metadata=parse_json(row.get("metadata"), {}),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
