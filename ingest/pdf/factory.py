from ingest.config.settings import Settings
from ingest.pdf.base import BasePdfExtractor
from ingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from ingest.pdf.pymupdf_adapter import PyMuPdfAdapter
from ingest.pdf.raw_adapter import RawStreamAdapter


class PdfExtractorFactory:
    """Creates the correct PDF extractor based on settings."""

    ADAPTERS: tuple[str, ...] = ("pdfplumber", "pymupdf", "raw")

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        if engine == "pdfplumber":
            return PdfPlumberAdapter()
        if engine == "pymupdf":
            return PyMuPdfAdapter()
        if engine == "raw":
            return RawStreamAdapter(window_bytes=settings.raw_window_bytes)
        raise ValueError(
            f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
        )
