from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ExtractionResult:
    """Extracted text plus what is known about how it was obtained."""

    text: str
    page_count: int
    confidence_score: float
    method: str
    extracted_at: datetime

    def to_metadata(self) -> dict[str, Any]:
        """Shape stored under ``Document.metadata["extraction"]``."""
        return {
            "pages": self.page_count,
            "confidence": self.confidence_score,
            "method": self.method,
            "extracted_at": self.extracted_at.isoformat(),
        }
