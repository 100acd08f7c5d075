import pytest

from doccompare.pdf.base import BasePdfExtractor, PdfText
from doccompare.pdf.exceptions import PdfExtractionError
from doccompare.pdf.pdfplumber_adapter import PdfPlumberAdapter
from doccompare.pdf.pymupdf_adapter import PyMuPdfAdapter

ADAPTERS = [PdfPlumberAdapter, PyMuPdfAdapter]


@pytest.mark.parametrize("adapter_cls", ADAPTERS)
class TestPdfAdapters:
    def test_extract_returns_text_and_page_count(
        self, adapter_cls: type[BasePdfExtractor], sample_pdf_bytes: bytes
    ) -> None:
        result = adapter_cls().extract(sample_pdf_bytes)
        assert isinstance(result, PdfText)
        assert "Hello PDF World" in result.text
        assert result.page_count == 1

    def test_extract_multi_page(
        self, adapter_cls: type[BasePdfExtractor], multi_page_pdf_bytes: bytes
    ) -> None:
        result = adapter_cls().extract(multi_page_pdf_bytes)
        assert "Page one content" in result.text
        assert "Page two content" in result.text
        assert result.page_count == 2

    def test_extract_empty_pdf_returns_empty_text(
        self, adapter_cls: type[BasePdfExtractor], empty_pdf_bytes: bytes
    ) -> None:
        result = adapter_cls().extract(empty_pdf_bytes)
        assert result.text == ""
        assert result.page_count == 1

    def test_extract_raises_on_invalid_bytes(self, adapter_cls: type[BasePdfExtractor]) -> None:
        with pytest.raises(PdfExtractionError):
            adapter_cls().extract(b"not a pdf")

    def test_extract_result_is_stripped(
        self, adapter_cls: type[BasePdfExtractor], sample_pdf_bytes: bytes
    ) -> None:
        result = adapter_cls().extract(sample_pdf_bytes)
        assert result.text == result.text.strip()

    def test_engine_name(self, adapter_cls: type[BasePdfExtractor]) -> None:
        assert adapter_cls().engine in ("pdfplumber", "pymupdf")
