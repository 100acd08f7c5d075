from doccompare.config.settings import Settings
from doccompare.extraction.base import BaseTextExtractor
from doccompare.extraction.extractor import TextExtractor
from doccompare.pdf.base import BasePdfExtractor
from doccompare.pdf.pdfplumber_adapter import PdfPlumberAdapter
from doccompare.pdf.pymupdf_adapter import PyMuPdfAdapter


class TextExtractorFactory:
    """Creates the text extractor with the configured PDF engine."""

    PDF_ENGINES: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseTextExtractor:
        return TextExtractor(cls.create_pdf_extractor(settings.pdf_engine))

    @classmethod
    def create_pdf_extractor(cls, engine: str) -> BasePdfExtractor:
        engine = engine.lower()
        adapter_cls = cls.PDF_ENGINES.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ENGINES)}"
            )
        return adapter_cls()
