from abc import ABC, abstractmethod

from doccompare.extraction.models import ExtractionResult


class BaseTextExtractor(ABC):
    """Contract for turning stored document bytes into plain text."""

    @abstractmethod
    def extract(self, data: bytes, filename: str, content_hash: str) -> ExtractionResult:
        """Extract text from a document.

        Args:
            data: Raw file content.
            filename: Name used to pick the format, by extension.
            content_hash: SHA-256 of data, for logging.

        Returns:
            Non-empty text with page count, confidence and method.

        Raises:
            UnsupportedFormatError: if the extension has no extractor.
            ExtractionError: if the file cannot be read or has no text.
        """
