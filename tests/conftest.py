import io
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def build_pdf(pages: list[list[str]]) -> bytes:
    """Render one PDF page per entry, drawing each string on its own line."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 16
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page invoice PDF with known text content."""
    return build_pdf([["Acme Air Services LLC", "Invoice # 1001", "Total: $1,250.00"]])


@pytest.fixture()
def direct_invoice_pdf_bytes() -> bytes:
    """Three-page invoice that routes to the direct strategy."""
    return build_pdf(
        [
            ["Acme Air Services", "Invoice # 1001", "Date: 2024-03-15"],
            ["Replaced left brake assembly", "Labor 4 hrs 480.00"],
            ["Total: $1,250.00 - Acme Air Services"],
        ]
    )


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Two-page PDF with known text on each page."""
    return build_pdf([["Page one content"], ["Page two content"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def pdf_builder() -> Callable[[list[list[str]]], bytes]:
    """Expose the PDF renderer to tests that need custom pages."""
    return build_pdf
