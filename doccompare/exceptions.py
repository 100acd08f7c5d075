class DocCompareError(Exception):
    """Base exception for all doccompare errors."""


class ValidationError(DocCompareError):
    """Raised for bad input: oversized or unsupported files, missing fields."""


class NotFoundError(DocCompareError):
    """Raised when an id has no row or a key has no blob."""


class ConflictError(DocCompareError):
    """Raised when an entity with the same identity already exists."""


class TransientBackendError(DocCompareError):
    """Raised when a storage or database backend is temporarily unreachable."""


class UpstreamServiceError(DocCompareError):
    """Raised when the extraction or AI comparison collaborator fails."""
