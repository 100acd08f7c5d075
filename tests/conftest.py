import io
from pathlib import Path

import pytest
from docx import Document as DocxDocument
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from doccompare.config.settings import Settings
from doccompare.database.repositories.factory import Repositories, RepositoryFactory
from doccompare.database.repositories.memory.store import MemoryStore
from doccompare.storage.local_provider import LocalStorageProvider
from doccompare.storage.retry import RetryPolicy
from doccompare.storage.storage import Storage


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_docx_bytes() -> bytes:
    """Generate a DOCX with two paragraphs and a one-row table."""
    document = DocxDocument()
    document.add_paragraph("1. CONFIDENTIALITY")
    document.add_paragraph("The receiving party shall keep all information secret.")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Term"
    table.rows[0].cells[1].text = "Two years"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        local_storage_path=str(tmp_path / "storage"),
        comparison_provider="example",
    )


@pytest.fixture()
def memory_repos() -> Repositories:
    return RepositoryFactory.memory(MemoryStore())


@pytest.fixture()
def local_storage(tmp_path: Path) -> Storage:
    return Storage(
        LocalStorageProvider(tmp_path / "blobs"),
        RetryPolicy(sleep=lambda _delay: None),
    )
