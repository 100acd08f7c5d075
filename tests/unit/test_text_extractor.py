from unittest.mock import MagicMock, patch

import pytest

from doccompare.extraction.docx_adapter import DocxAdapter
from doccompare.extraction.exceptions import ExtractionError, UnsupportedFormatError
from doccompare.extraction.extractor import (
    TextExtractor,
    clean_text,
    estimate_page_count,
)
from doccompare.extraction.factory import TextExtractorFactory
from doccompare.pdf.base import PdfText
from doccompare.pdf.exceptions import PdfExtractionError
from doccompare.pdf.pdfplumber_adapter import PdfPlumberAdapter
from doccompare.pdf.pymupdf_adapter import PyMuPdfAdapter


def _make_extractor() -> tuple[TextExtractor, MagicMock]:
    mock_pdf = MagicMock(engine="mock-pdf")
    return TextExtractor(mock_pdf), mock_pdf


def _make_settings(pdf_engine: str):  # type: ignore[no-untyped-def]
    """Create a minimal Settings-like object with only pdf_engine."""
    with patch("doccompare.config.settings.Settings") as mock_cls:
        settings = mock_cls.return_value
        settings.pdf_engine = pdf_engine
        return settings


class TestHelpers:
    def test_estimate_page_count_has_floor_of_one(self) -> None:
        assert estimate_page_count("") == 1

    def test_estimate_page_count_uses_3000_chars_per_page(self) -> None:
        assert estimate_page_count("x" * 3000) == 1
        assert estimate_page_count("x" * 3001) == 2

    def test_clean_text_collapses_blank_lines(self) -> None:
        assert clean_text("a\r\n\n\n\n\nb  \n") == "a\n\nb"


class TestPlainText:
    def test_extracts_utf8_text(self) -> None:
        extractor, _pdf = _make_extractor()

        result = extractor.extract("Hello world".encode(), "notes.txt", "h")

        assert result.text == "Hello world"
        assert result.page_count == 1
        assert result.confidence_score == 1.0
        assert result.method == "text"

    def test_strips_byte_order_mark(self) -> None:
        extractor, _pdf = _make_extractor()
        result = extractor.extract("\ufeffHello".encode(), "notes.txt", "h")
        assert result.text == "Hello"

    def test_invalid_utf8_raises(self) -> None:
        extractor, _pdf = _make_extractor()
        with pytest.raises(ExtractionError, match="UTF-8"):
            extractor.extract(b"\xff\xfe\xfa", "notes.txt", "h")

    def test_blank_text_raises(self) -> None:
        extractor, _pdf = _make_extractor()
        with pytest.raises(ExtractionError, match="No text"):
            extractor.extract(b"   \n\n ", "notes.txt", "h")


class TestPdf:
    def test_uses_pdf_engine_pages(self) -> None:
        extractor, mock_pdf = _make_extractor()
        mock_pdf.extract.return_value = PdfText(text="Page one\nPage two", page_count=2)

        result = extractor.extract(b"%PDF", "contract.PDF", "h")

        mock_pdf.extract.assert_called_once_with(b"%PDF")
        assert result.page_count == 2
        assert result.confidence_score == 0.95
        assert result.method == "mock-pdf"

    def test_pdf_failure_becomes_extraction_error(self) -> None:
        extractor, mock_pdf = _make_extractor()
        mock_pdf.extract.side_effect = PdfExtractionError("corrupt")
        with pytest.raises(ExtractionError, match="corrupt"):
            extractor.extract(b"%PDF", "contract.pdf", "h")

    def test_real_pdf(self, sample_pdf_bytes: bytes) -> None:
        extractor = TextExtractor(PdfPlumberAdapter())
        result = extractor.extract(sample_pdf_bytes, "hello.pdf", "h")
        assert "Hello PDF World" in result.text

    def test_image_only_pdf_raises(self) -> None:
        extractor, mock_pdf = _make_extractor()
        mock_pdf.extract.return_value = PdfText(text="", page_count=1)
        with pytest.raises(ExtractionError, match="No text"):
            extractor.extract(b"%PDF", "scan.pdf", "h")


class TestDocx:
    def test_extracts_paragraphs_and_tables(self, sample_docx_bytes: bytes) -> None:
        extractor, _pdf = _make_extractor()

        result = extractor.extract(sample_docx_bytes, "nda.docx", "h")

        assert "1. CONFIDENTIALITY" in result.text
        assert "keep all information secret" in result.text
        assert "Term\tTwo years" in result.text
        assert result.method == "python-docx"
        assert result.confidence_score == 0.95

    def test_rejects_non_zip_payload(self) -> None:
        with pytest.raises(ExtractionError, match="not a ZIP"):
            DocxAdapter().extract(b"plain text")

    def test_rejects_corrupt_archive(self) -> None:
        with pytest.raises(ExtractionError, match="DOCX extraction failed"):
            DocxAdapter().extract(b"PK\x03\x04garbage")


class TestUnsupported:
    @pytest.mark.parametrize("filename", ["image.png", "legacy.doc", "noextension"])
    def test_unsupported_extensions_raise(self, filename: str) -> None:
        extractor, _pdf = _make_extractor()
        with pytest.raises(UnsupportedFormatError, match="Unsupported file type"):
            extractor.extract(b"data", filename, "h")


class TestTextExtractorFactory:
    def test_creates_pdfplumber_adapter(self) -> None:
        adapter = TextExtractorFactory.create_pdf_extractor("pdfplumber")
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_creates_pymupdf_adapter(self) -> None:
        adapter = TextExtractorFactory.create_pdf_extractor("pymupdf")
        assert isinstance(adapter, PyMuPdfAdapter)

    def test_is_case_insensitive(self) -> None:
        adapter = TextExtractorFactory.create_pdf_extractor("PdfPlumber")
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_raises_for_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="Unknown PDF engine"):
            TextExtractorFactory.create_pdf_extractor("unknown")

    def test_create_builds_text_extractor(self) -> None:
        extractor = TextExtractorFactory.create(_make_settings("pymupdf"))
        assert isinstance(extractor, TextExtractor)
