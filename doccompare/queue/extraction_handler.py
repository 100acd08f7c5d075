from doccompare.database.exceptions import EntityNotFoundError
from doccompare.database.models import DocumentStatus, QueueTask
from doccompare.database.repositories.base import DocumentRepository
from doccompare.extraction.base import BaseTextExtractor
from doccompare.logging.logger import Log
from doccompare.queue.base import BaseTaskHandler
from doccompare.storage.storage import Storage


class ExtractionTaskHandler(BaseTaskHandler):
    """Download a document's blob, extract its text, and store the result.

    Any failure leaves the document in ``error`` before it propagates.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        storage: Storage,
        extractor: BaseTextExtractor,
    ) -> None:
        self._documents = documents
        self._storage = storage
        self._extractor = extractor

    def handle(self, task: QueueTask) -> None:
        document = self._documents.find_by_id(task.document_id)
        if document is None:
            raise EntityNotFoundError("Document", task.document_id)

        Log.info(f"Extracting text for document {document.id} ({document.original_name})")
        self._documents.update_status(document.id, DocumentStatus.PROCESSING)
        try:
            blob = self._storage.get(document.filename)
            result = self._extractor.extract(
                blob.data, document.original_name or document.filename, document.file_hash
            )
            metadata = {**document.metadata, "extraction": result.to_metadata()}
            self._documents.update(
                document.id,
                {
                    "extracted_text": result.text,
                    "status": DocumentStatus.PROCESSED,
                    "metadata": metadata,
                },
            )
        except Exception as exc:
            Log.error(f"Extraction failed for document {document.id}: {exc}")
            self._documents.update_status(document.id, DocumentStatus.ERROR)
            raise
        Log.info(
            f"Document {document.id} processed: {len(result.text)} characters, "
            f"{result.page_count} pages"
        )
