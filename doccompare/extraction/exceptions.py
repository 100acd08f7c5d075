from doccompare.exceptions import UpstreamServiceError


class ExtractionError(UpstreamServiceError):
    """Raised when text cannot be extracted from a document."""


class UnsupportedFormatError(ExtractionError):
    """Raised for file extensions no extractor handles."""
