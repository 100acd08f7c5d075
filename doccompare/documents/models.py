from dataclasses import dataclass, field
from typing import Literal

from doccompare.database.models import Document
from doccompare.storage.models import StoredObject

DocumentType = Literal["standard", "third_party"]


@dataclass(frozen=True)
class UploadResult:
    document: Document
    duplicate: bool
    queued: bool
    storage_key: str
    task_id: int | None = None


@dataclass(frozen=True)
class DocumentSummary:
    """A document plus the facts list views need."""

    document: Document
    file_type: str
    has_extracted_text: bool
    extracted_text_length: int
    related_comparisons: int


@dataclass(frozen=True)
class DocumentPage:
    documents: list[DocumentSummary]
    total: int
    pages: int
    page: int
    page_size: int


@dataclass(frozen=True)
class DocumentUrls:
    download_url: str | None
    storage_metadata: StoredObject | None
    exists: bool


@dataclass(frozen=True)
class EnhancedDocument:
    summary: DocumentSummary
    can_compare: bool
    can_set_as_standard: bool
    size_mb: str | None
    download_url: str | None
    storage_metadata: StoredObject | None

    @property
    def document(self) -> Document:
        return self.summary.document


@dataclass(frozen=True)
class DeletionCheck:
    can_delete: bool
    blockers: list[str]
    related_comparisons: int


@dataclass(frozen=True)
class DeletionResult:
    deleted: bool
    related_comparisons: int = 0
    error: str | None = None


@dataclass(frozen=True)
class ComparisonReadiness:
    """Whether two documents both have text and may be compared."""

    is_valid: bool
    document1: Document | None = None
    document2: Document | None = None
    missing_extraction: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractionRequest:
    task_id: int
    queued: bool
