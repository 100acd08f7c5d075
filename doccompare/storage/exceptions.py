from doccompare.exceptions import (
    DocCompareError,
    NotFoundError,
    TransientBackendError,
    ValidationError,
)


class StorageError(DocCompareError):
    """Base exception for storage operations.

    ``attempts`` and ``duration_seconds`` are filled in by the retry policy
    once it gives up on an operation.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.attempts: int | None = None
        self.duration_seconds: float | None = None


class StorageNotFoundError(StorageError, NotFoundError):
    """Raised when no blob exists under a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Object not found: {key}", key=key)


class StorageAccessDeniedError(StorageError):
    """Raised when the backend rejects the credentials for an operation."""


class StorageRequestError(StorageError, ValidationError):
    """Raised for malformed keys or requests the backend refuses permanently."""


class StorageUnavailableError(StorageError, TransientBackendError):
    """Raised on network failures, timeouts and 5xx responses. Retryable."""
