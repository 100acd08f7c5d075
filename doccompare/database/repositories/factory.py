from dataclasses import dataclass

from doccompare.config.settings import Settings
from doccompare.database.connection import Database
from doccompare.database.repositories.base import (
    ComparisonRepository,
    DocumentRepository,
    QueueTaskRepository,
)
from doccompare.database.repositories.memory.comparison_repository import (
    MemoryComparisonRepository,
)
from doccompare.database.repositories.memory.document_repository import (
    MemoryDocumentRepository,
)
from doccompare.database.repositories.memory.queue_repository import (
    MemoryQueueTaskRepository,
)
from doccompare.database.repositories.memory.store import MemoryStore
from doccompare.database.repositories.postgres.comparison_repository import (
    PostgresComparisonRepository,
)
from doccompare.database.repositories.postgres.document_repository import (
    PostgresDocumentRepository,
)
from doccompare.database.repositories.postgres.queue_repository import (
    PostgresQueueTaskRepository,
)
from doccompare.logging.logger import Log


@dataclass
class Repositories:
    """The three entity repositories plus whatever backs them."""

    documents: DocumentRepository
    comparisons: ComparisonRepository
    tasks: QueueTaskRepository
    database: Database | None = None
    store: MemoryStore | None = None

    def close(self) -> None:
        if self.database is not None:
            self.database.close()
        if self.store is not None:
            self.store.clear()


class RepositoryFactory:
    """Selects the persistence backend once, from ``Settings.use_database``."""

    @classmethod
    def create(cls, settings: Settings) -> Repositories:
        if settings.use_database:
            database = Database(settings)
            database.open()
            return cls.postgres(database)
        Log.warning(
            "Using in-memory repositories: data is process-local and lost on restart"
        )
        return cls.memory(MemoryStore())

    @staticmethod
    def postgres(database: Database) -> Repositories:
        return Repositories(
            documents=PostgresDocumentRepository(database),
            comparisons=PostgresComparisonRepository(database),
            tasks=PostgresQueueTaskRepository(database),
            database=database,
        )

    @staticmethod
    def memory(store: MemoryStore) -> Repositories:
        return Repositories(
            documents=MemoryDocumentRepository(store),
            comparisons=MemoryComparisonRepository(store),
            tasks=MemoryQueueTaskRepository(store),
            store=store,
        )
