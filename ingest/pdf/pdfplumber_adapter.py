import io
from collections.abc import Iterator

import pdfplumber

from ingest.pdf.base import BasePdfExtractor
from ingest.pdf.exceptions import PdfExtractionError
from ingest.pdf.models import DocumentMetadata, PageText


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts text from PDF using pdfplumber."""

    def inspect(self, pdf_bytes: bytes) -> DocumentMetadata:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                page_count = len(pdf.pages)
                has_text = any(page.chars for page in pdf.pages[: self.PROBE_PAGES])
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber inspection failed: {exc}") from exc
        return DocumentMetadata(
            page_count=page_count,
            size_bytes=len(pdf_bytes),
            has_extractable_text=has_text,
        )

    def iter_pages(self, pdf_bytes: bytes) -> Iterator[PageText]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                for number, page in enumerate(pdf.pages, start=1):
                    text = page.extract_text() or ""
                    page.close()
                    yield PageText(page_number=number, text=text)
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
