from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PdfText:
    """Text of a whole PDF plus its page count."""

    text: str
    page_count: int


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    engine: str = ""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> PdfText:
        """Extract plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Page texts joined by newlines, and the number of pages.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """
