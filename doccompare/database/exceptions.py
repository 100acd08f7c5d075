from doccompare.exceptions import (
    ConflictError,
    DocCompareError,
    NotFoundError,
    TransientBackendError,
)


class RepositoryError(DocCompareError):
    """Base exception for persistence failures."""


class EntityNotFoundError(RepositoryError, NotFoundError):
    """Raised when an id has no row."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConstraintViolationError(RepositoryError, ConflictError):
    """Raised when a write would break a uniqueness or foreign-key constraint."""


class BackendUnavailableError(RepositoryError, TransientBackendError):
    """Raised when the database cannot be reached or the pool is exhausted."""
