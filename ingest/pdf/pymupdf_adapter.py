from collections.abc import Iterator

import pymupdf

from ingest.pdf.base import BasePdfExtractor
from ingest.pdf.exceptions import PdfExtractionError
from ingest.pdf.models import DocumentMetadata, PageText


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def inspect(self, pdf_bytes: bytes) -> DocumentMetadata:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                page_count = doc.page_count
                probe = min(page_count, self.PROBE_PAGES)
                has_text = any(doc[i].get_text().strip() for i in range(probe))
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf inspection failed: {exc}") from exc
        return DocumentMetadata(
            page_count=page_count,
            size_bytes=len(pdf_bytes),
            has_extractable_text=has_text,
        )

    def iter_pages(self, pdf_bytes: bytes) -> Iterator[PageText]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                for number, page in enumerate(doc, start=1):
                    yield PageText(page_number=number, text=page.get_text())
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
