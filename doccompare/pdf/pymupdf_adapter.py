import pymupdf

from doccompare.pdf.base import BasePdfExtractor, PdfText
from doccompare.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts text from PDF using PyMuPDF."""

    engine = "pymupdf"

    def extract(self, pdf_bytes: bytes) -> PdfText:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return PdfText(text="\n".join(pages).strip(), page_count=len(pages))
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
