"""Fallback engine that reads the PDF byte stream without a parser.

Only useful for uncompressed PDFs; text comes out as the printable ASCII
found in each fixed-size window of the file.
"""

import re
from collections.abc import Iterator

from ingest.pdf.base import BasePdfExtractor
from ingest.pdf.models import DocumentMetadata, PageText

_PAGE_MARKER_RE = re.compile(rb"/Type\s*/Page(?!s)")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7e\n]+")
_FONT_MARKER = b"/Font"


class RawStreamAdapter(BasePdfExtractor):
    """Scans the raw byte stream in fixed-size windows."""

    def __init__(self, window_bytes: int = 8192) -> None:
        if window_bytes <= 0:
            raise ValueError("window_bytes must be positive")
        self._window_bytes = window_bytes

    def inspect(self, pdf_bytes: bytes) -> DocumentMetadata:
        page_count = len(_PAGE_MARKER_RE.findall(pdf_bytes))
        return DocumentMetadata(
            page_count=max(page_count, 1),
            size_bytes=len(pdf_bytes),
            has_extractable_text=_FONT_MARKER in pdf_bytes,
        )

    def iter_pages(self, pdf_bytes: bytes) -> Iterator[PageText]:
        view = memoryview(pdf_bytes)
        page_number = 1
        for start in range(0, len(view), self._window_bytes):
            window = bytes(view[start : start + self._window_bytes])
            text = _NON_PRINTABLE_RE.sub(" ", window.decode("latin-1"))
            if text.strip():
                yield PageText(page_number=page_number, text=text)
            page_number += len(_PAGE_MARKER_RE.findall(window))
