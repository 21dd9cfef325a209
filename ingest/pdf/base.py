from abc import ABC, abstractmethod
from collections.abc import Iterator

from ingest.pdf.models import DocumentMetadata, PageText


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    PROBE_PAGES = 3

    @abstractmethod
    def inspect(self, pdf_bytes: bytes) -> DocumentMetadata:
        """Collect page count, size and a text-layer signal without full extraction.

        Raises:
            PdfExtractionError: if the document cannot be opened.
        """

    @abstractmethod
    def iter_pages(self, pdf_bytes: bytes) -> Iterator[PageText]:
        """Yield page text lazily, in document order.

        Callers may stop iterating at any point; adapters release the
        document when the generator is closed.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """
