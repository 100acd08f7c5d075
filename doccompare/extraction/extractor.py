import math
import re
from datetime import datetime, timezone
from pathlib import PurePosixPath

from doccompare.extraction.base import BaseTextExtractor
from doccompare.extraction.docx_adapter import DocxAdapter
from doccompare.extraction.exceptions import ExtractionError, UnsupportedFormatError
from doccompare.extraction.models import ExtractionResult
from doccompare.logging.logger import Log
from doccompare.pdf.base import BasePdfExtractor
from doccompare.pdf.exceptions import PdfExtractionError

AVERAGE_WORDS_PER_PAGE = 500
AVERAGE_CHARS_PER_WORD = 6
PDF_CONFIDENCE = 0.95
DOCX_CONFIDENCE = 0.95
TXT_CONFIDENCE = 1.0

_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def estimate_page_count(text: str) -> int:
    """Pages for formats without real pagination, at least one."""
    chars_per_page = AVERAGE_WORDS_PER_PAGE * AVERAGE_CHARS_PER_WORD
    return max(1, math.ceil(len(text) / chars_per_page))


def clean_text(text: str) -> str:
    return _EXCESS_NEWLINES.sub("\n\n", text.replace("\r\n", "\n")).strip()


class TextExtractor(BaseTextExtractor):
    """Dispatches on file extension to the PDF, DOCX or plain-text reader."""

    def __init__(self, pdf_extractor: BasePdfExtractor, docx_adapter: DocxAdapter | None = None) -> None:
        self._pdf = pdf_extractor
        self._docx = docx_adapter or DocxAdapter()

    def extract(self, data: bytes, filename: str, content_hash: str) -> ExtractionResult:
        extension = PurePosixPath(filename.lower()).suffix
        Log.info(f"Extracting text from {filename} ({extension or 'no extension'}), hash {content_hash}")
        if extension == ".pdf":
            text, pages, confidence, method = self._extract_pdf(data)
        elif extension == ".docx":
            text = clean_text(self._docx.extract(data))
            pages, confidence, method = estimate_page_count(text), DOCX_CONFIDENCE, self._docx.method
        elif extension == ".txt":
            text = self._decode_text(data)
            pages, confidence, method = estimate_page_count(text), TXT_CONFIDENCE, "text"
        else:
            raise UnsupportedFormatError(
                f"Unsupported file type: {extension or filename}. Supported types: PDF, DOCX, TXT"
            )

        if not text:
            raise ExtractionError(f"No text could be extracted from {filename}")

        Log.info(f"Extracted {len(text)} characters ({pages} pages) from {filename} using {method}")
        return ExtractionResult(
            text=text,
            page_count=pages,
            confidence_score=confidence,
            method=method,
            extracted_at=datetime.now(timezone.utc),
        )

    def _extract_pdf(self, data: bytes) -> tuple[str, int, float, str]:
        try:
            result = self._pdf.extract(data)
        except PdfExtractionError as exc:
            raise ExtractionError(str(exc)) from exc
        return clean_text(result.text), max(1, result.page_count), PDF_CONFIDENCE, self._pdf.engine

    @staticmethod
    def _decode_text(data: bytes) -> str:
        try:
            return clean_text(data.decode("utf-8-sig"))
        except UnicodeDecodeError as exc:
            raise ExtractionError(f"Text file is not valid UTF-8: {exc}") from exc
