from dataclasses import dataclass

from doccompare.comparison.base import BaseComparator
from doccompare.comparison.factory import ComparatorFactory
from doccompare.comparison.service import ComparisonService
from doccompare.config.settings import Settings
from doccompare.database.models import TaskType
from doccompare.database.repositories.factory import Repositories, RepositoryFactory
from doccompare.documents.service import DocumentService
from doccompare.documents.validation import FileValidator
from doccompare.extraction.factory import TextExtractorFactory
from doccompare.logging.logger import Log
from doccompare.queue.extraction_handler import ExtractionTaskHandler
from doccompare.queue.queue import ProcessingQueue
from doccompare.queue.runner import TaskRunner
from doccompare.queue.worker import QueueWorker
from doccompare.storage.factory import StorageFactory
from doccompare.storage.storage import Storage


@dataclass
class Services:
    """Everything one process needs, built once from Settings."""

    repositories: Repositories
    storage: Storage
    queue: ProcessingQueue
    worker: QueueWorker
    documents: DocumentService
    comparisons: ComparisonService

    def close(self) -> None:
        self.storage.close()
        self.repositories.close()


def build_comparators(settings: Settings) -> dict[str, BaseComparator]:
    """Statistical is always available; AI only once a provider is usable."""
    comparators = {"statistical": ComparatorFactory.create("statistical", settings)}
    provider = settings.comparison_provider.lower()
    if provider == "example" or settings.comparison_openai_api_key:
        comparators["ai"] = ComparatorFactory.create("ai", settings)
    else:
        Log.warning("AI comparison disabled: no API key configured")
    return comparators


def build_services(settings: Settings) -> Services:
    """Wire repositories, storage, queue, worker and services together."""
    repositories = RepositoryFactory.create(settings)
    try:
        storage = StorageFactory.create(settings)
    except Exception:
        repositories.close()
        raise

    queue = ProcessingQueue(repositories.tasks, settings)
    extraction_handler = ExtractionTaskHandler(
        repositories.documents, storage, TextExtractorFactory.create(settings)
    )
    runner = TaskRunner(queue, {TaskType.EXTRACT_TEXT: extraction_handler})
    documents = DocumentService(
        repositories.documents,
        repositories.comparisons,
        queue,
        storage,
        FileValidator.from_settings(settings),
        settings,
    )
    comparisons = ComparisonService(
        documents, repositories.comparisons, build_comparators(settings)
    )
    Log.info(
        f"Services ready (database={settings.use_database}, "
        f"storage={storage.provider_name})"
    )
    return Services(
        repositories=repositories,
        storage=storage,
        queue=queue,
        worker=QueueWorker(queue, runner),
        documents=documents,
        comparisons=comparisons,
    )
