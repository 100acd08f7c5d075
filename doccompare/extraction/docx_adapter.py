import io
import zipfile

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError

from doccompare.extraction.exceptions import ExtractionError


class DocxAdapter:
    """Extracts text from DOCX using python-docx.

    Paragraph text comes first, then table cells row by row.
    """

    method = "python-docx"

    def extract(self, docx_bytes: bytes) -> str:
        if not docx_bytes.startswith(b"PK"):
            raise ExtractionError("Invalid DOCX file format: not a ZIP archive")
        try:
            document = DocxDocument(io.BytesIO(docx_bytes))
        except (zipfile.BadZipFile, PackageNotFoundError, KeyError, ValueError) as exc:
            raise ExtractionError(f"DOCX extraction failed: {exc}") from exc

        lines = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append("\t".join(cells))
        return "\n".join(lines)
