import hashlib
import math
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any

from doccompare.config.settings import Settings
from doccompare.database.exceptions import ConstraintViolationError, EntityNotFoundError
from doccompare.database.models import Document, DocumentStatus, NewDocument
from doccompare.database.repositories.base import ComparisonRepository, DocumentRepository
from doccompare.documents.models import (
    ComparisonReadiness,
    DeletionCheck,
    DeletionResult,
    DocumentPage,
    DocumentSummary,
    DocumentType,
    DocumentUrls,
    EnhancedDocument,
    ExtractionRequest,
    UploadResult,
)
from doccompare.documents.validation import FileValidator
from doccompare.exceptions import ValidationError
from doccompare.logging.logger import Log
from doccompare.queue.queue import ProcessingQueue
from doccompare.storage.exceptions import StorageError
from doccompare.storage.models import DownloadResult
from doccompare.storage.paths import document_storage_key
from doccompare.storage.storage import Storage

DOCUMENT_TYPES: tuple[str, ...] = ("standard", "third_party")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def file_type_of(filename: str) -> str:
    suffix = PurePosixPath(filename.lower()).suffix
    return suffix.lstrip(".") or "unknown"


def _upload_order(document: Document) -> tuple[datetime, int]:
    return (document.upload_date or _EPOCH, document.id)


class DocumentService:
    """Document ingestion, lookup and lifecycle, scoped to the calling user.

    Ownership is checked on every user-facing read: a document owned by
    someone else is reported exactly like a missing one.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        comparisons: ComparisonRepository,
        queue: ProcessingQueue,
        storage: Storage,
        validator: FileValidator,
        settings: Settings,
    ) -> None:
        self._documents = documents
        self._comparisons = comparisons
        self._queue = queue
        self._storage = storage
        self._validator = validator
        self._settings = settings

    def upload_document(
        self,
        data: bytes,
        filename: str,
        user_id: str,
        content_type: str | None = None,
        is_standard: bool = False,
        doc_type: DocumentType = "third_party",
    ) -> UploadResult:
        """Validate, deduplicate, store and queue an uploaded file.

        A file whose SHA-256 is already known is not stored again; the
        existing document comes back with ``duplicate=True``.

        Raises:
            ValidationError: if the file is empty, too large or not an
                allowed type, or doc_type is unknown.
        """
        if doc_type not in DOCUMENT_TYPES:
            raise ValidationError(f"Unknown document type {doc_type!r}")
        resolved_type = self._validator.validate(data, filename, content_type)
        file_hash = hashlib.sha256(data).hexdigest()
        Log.info(f"Upload of {filename} by {user_id}: hash {file_hash}, {len(data)} bytes")

        existing = self._documents.find_by_hash(file_hash)
        if existing is not None:
            Log.info(f"Duplicate upload detected: {file_hash} is document {existing.id}")
            return UploadResult(
                document=existing, duplicate=True, queued=False, storage_key=existing.filename
            )

        key = document_storage_key(
            self._settings.storage_folder_prefix, user_id, file_hash, filename
        )
        stored = self._storage.put(
            key,
            data,
            resolved_type,
            metadata={
                "original_name": filename,
                "uploaded_by": user_id,
                "doc_type": doc_type,
                "file_hash": file_hash,
                "is_standard": str(is_standard).lower(),
                "upload_date": datetime.now(timezone.utc).isoformat(),
            },
        )
        Log.info(f"Stored {filename} at {key}")

        try:
            document = self._documents.create(
                NewDocument(
                    filename=key,
                    original_name=filename,
                    file_hash=file_hash,
                    file_size=len(data),
                    user_id=user_id,
                    is_standard=is_standard,
                    metadata={
                        "doc_type": doc_type,
                        "content_type": resolved_type,
                        "provider": self._storage.provider_name,
                    },
                    storage_url=f"{self._storage.provider_name}://{key}",
                )
            )
        except ConstraintViolationError:
            winner = self._documents.find_by_hash(file_hash)
            if winner is None:
                raise
            Log.info(f"Concurrent upload of {file_hash} won by document {winner.id}")
            if winner.filename != key:
                self._delete_blob(key)
            return UploadResult(
                document=winner, duplicate=True, queued=False, storage_key=winner.filename
            )

        task, queued = self._queue.enqueue_extraction(document.id, user_id)
        Log.info(f"Document {document.id} created, extraction task {task.id}")
        return UploadResult(
            document=document,
            duplicate=False,
            queued=queued,
            storage_key=stored.key,
            task_id=task.id,
        )

    def get_user_documents(self, user_id: str) -> list[Document]:
        documents = self._documents.find_by_user(user_id)
        Log.debug(f"Found {len(documents)} documents for {user_id}")
        return documents

    def get_user_document(self, user_id: str, document_id: int) -> Document:
        """Raises EntityNotFoundError when missing or owned by another user."""
        document = self._documents.find_by_id(document_id)
        if document is None or document.user_id != user_id:
            raise EntityNotFoundError("Document", document_id)
        return document

    def get_user_documents_by_ids(
        self, user_id: str, *document_ids: int
    ) -> tuple[list[Document], list[str]]:
        """Fetch several documents; ids that fail ownership land in the error list."""
        documents: list[Document] = []
        errors: list[str] = []
        for document_id in document_ids:
            document = self._documents.find_by_id(document_id)
            if document is None or document.user_id != user_id:
                errors.append(f"Document {document_id} not found or not accessible")
            else:
                documents.append(document)
        return documents, errors

    def get_user_documents_paginated(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 20,
        doc_type: DocumentType | None = None,
        search: str | None = None,
    ) -> DocumentPage:
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive")
        if doc_type is not None and doc_type not in DOCUMENT_TYPES:
            raise ValidationError(f"Unknown document type {doc_type!r}")

        documents = self._documents.find_by_user(user_id)
        if doc_type == "standard":
            documents = [doc for doc in documents if doc.is_standard]
        elif doc_type == "third_party":
            documents = [doc for doc in documents if not doc.is_standard]
        if search:
            needle = search.lower()
            documents = [
                doc
                for doc in documents
                if needle in doc.filename.lower() or needle in doc.original_name.lower()
            ]
        documents.sort(key=_upload_order, reverse=True)

        total = len(documents)
        offset = (page - 1) * page_size
        counts = self._comparison_counts(user_id)
        summaries = [
            self._summarize(doc, counts.get(doc.id, 0))
            for doc in documents[offset : offset + page_size]
        ]
        return DocumentPage(
            documents=summaries,
            total=total,
            pages=math.ceil(total / page_size),
            page=page,
            page_size=page_size,
        )

    def get_document_urls(self, document: Document) -> DocumentUrls:
        """Signed URL when the storage supports it, else the internal download path."""
        metadata = self._storage.head(document.filename)
        if metadata is None:
            Log.warning(f"Storage object missing for document {document.id}: {document.filename}")
            return DocumentUrls(download_url=None, storage_metadata=None, exists=False)
        if self._storage.supports_signed_urls():
            url = self._storage.signed_url(
                document.filename, "get", self._settings.signed_url_ttl_seconds
            )
        else:
            url = self._settings.download_path_template.format(document_id=document.id)
        return DocumentUrls(download_url=url, storage_metadata=metadata, exists=True)

    def get_enhanced_document(self, user_id: str, document_id: int) -> EnhancedDocument:
        document = self.get_user_document(user_id, document_id)
        try:
            urls = self.get_document_urls(document)
        except StorageError as exc:
            Log.warning(f"Could not resolve storage URLs for document {document.id}: {exc}")
            urls = DocumentUrls(download_url=None, storage_metadata=None, exists=False)
        summary = self._summarize(document, self._comparisons.count_by_document(document.id))
        return EnhancedDocument(
            summary=summary,
            can_compare=not document.is_standard,
            can_set_as_standard=not document.is_standard,
            size_mb=f"{document.file_size / 1024 / 1024:.2f}" if document.file_size else None,
            download_url=urls.download_url,
            storage_metadata=urls.storage_metadata,
        )

    def download_document(self, user_id: str, document_id: int) -> DownloadResult:
        document = self.get_user_document(user_id, document_id)
        return self._storage.get(document.filename)

    def validate_document_deletion(self, user_id: str, document_id: int) -> DeletionCheck:
        self.get_user_document(user_id, document_id)
        related = self._comparisons.count_by_document(document_id)
        blockers = [f"Document is used in {related} comparison(s)"] if related else []
        return DeletionCheck(can_delete=not blockers, blockers=blockers, related_comparisons=related)

    def delete_document(self, user_id: str, document_id: int) -> DeletionResult:
        """Delete a document nobody compares against.

        The blob goes first, best-effort; a storage failure is logged and
        does not keep the row alive.
        """
        document = self.get_user_document(user_id, document_id)
        check = self.validate_document_deletion(user_id, document_id)
        if not check.can_delete:
            Log.warning(f"Refusing to delete document {document_id}: {check.blockers}")
            return DeletionResult(
                deleted=False,
                related_comparisons=check.related_comparisons,
                error=f"Cannot delete document: {', '.join(check.blockers)}",
            )

        self._delete_blob(document.filename)
        if not self._documents.delete(document_id):
            return DeletionResult(deleted=False, error="Failed to delete document from database")
        Log.info(f"Document {document_id} deleted")
        return DeletionResult(deleted=True)

    def validate_documents_for_comparison(
        self, user_id: str, document1_id: int, document2_id: int
    ) -> ComparisonReadiness:
        documents, errors = self.get_user_documents_by_ids(user_id, document1_id, document2_id)
        if errors:
            return ComparisonReadiness(is_valid=False, errors=errors)

        first, second = documents
        missing: list[str] = []
        if not first.extracted_text:
            missing.append(f"Standard document (ID: {document1_id})")
        if not second.extracted_text:
            missing.append(f"Third-party document (ID: {document2_id})")
        return ComparisonReadiness(
            is_valid=not missing,
            document1=first,
            document2=second,
            missing_extraction=missing,
        )

    def get_standard_document(self, user_id: str) -> Document | None:
        return self._documents.find_standard_document(user_id)

    def set_standard_document(self, user_id: str, document_id: int) -> Document:
        """Mark a document as the user's baseline, unmarking any previous one."""
        document = self.get_user_document(user_id, document_id)
        for other in self._documents.find_by_user(user_id):
            if other.is_standard and other.id != document.id:
                self._documents.update(other.id, {"is_standard": False})
        self._documents.update(document.id, {"is_standard": True})
        Log.info(f"Document {document.id} set as standard for {user_id}")
        return self.get_user_document(user_id, document.id)

    def rename_document(self, user_id: str, document_id: int, new_name: str) -> Document:
        name = new_name.strip()
        if not name:
            raise ValidationError("Document name cannot be empty")
        document = self.get_user_document(user_id, document_id)
        self._documents.update(document.id, {"original_name": name})
        return self.get_user_document(user_id, document.id)

    def update_document_status(
        self, document_id: int, status: DocumentStatus, metadata: dict[str, Any] | None = None
    ) -> bool:
        """Set the status, merging metadata into what is already stored."""
        Log.info(f"Updating document {document_id} status to {DocumentStatus(status).value}")
        if metadata is None:
            return self._documents.update_status(document_id, status)
        document = self._documents.find_by_id(document_id)
        if document is None:
            return False
        merged = {
            **document.metadata,
            **metadata,
            "last_status_update": datetime.now(timezone.utc).isoformat(),
        }
        return self._documents.update_status(document_id, status, merged)

    def queue_extraction(
        self, user_id: str, document_id: int, priority: int | None = None
    ) -> ExtractionRequest:
        """Explicitly (re)trigger extraction; an active extraction task is reused."""
        document = self.get_user_document(user_id, document_id)
        task, queued = self._queue.enqueue_extraction(document.id, user_id, priority)
        return ExtractionRequest(task_id=task.id, queued=queued)

    def _summarize(self, document: Document, related_comparisons: int) -> DocumentSummary:
        text = document.extracted_text or ""
        return DocumentSummary(
            document=document,
            file_type=file_type_of(document.filename),
            has_extracted_text=bool(text),
            extracted_text_length=len(text),
            related_comparisons=related_comparisons,
        )

    def _comparison_counts(self, user_id: str) -> dict[int, int]:
        counts: dict[int, int] = {}
        for comparison in self._comparisons.find_by_user(user_id):
            for document_id in {comparison.document1_id, comparison.document2_id}:
                counts[document_id] = counts.get(document_id, 0) + 1
        return counts

    def _delete_blob(self, key: str) -> None:
        try:
            if self._storage.delete(key):
                Log.info(f"Storage object deleted: {key}")
        except StorageError as exc:
            Log.warning(f"Failed to delete storage object {key}: {exc}")
