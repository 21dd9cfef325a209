"""Stage 1: bounded text extraction and section segmentation."""

from dataclasses import dataclass, field

from ingest.logging.logger import Log
from ingest.pdf.base import BasePdfExtractor
from ingest.pdf.models import PageText
from ingest.structure.classifiers import classify_line, section_confidence
from ingest.structure.models import (
    IMPORTANCE_RANK,
    SECTION_IMPORTANCE,
    ExtractedSection,
    Importance,
    SectionType,
    StructureResult,
)
from ingest.structure.tokens import estimate_tokens
from ingest.text.folding import fold
from ingest.viability.models import ProcessingStrategy


@dataclass
class _Run:
    type: SectionType
    first_page: int
    last_page: int
    lines: list[str] = field(default_factory=list)
    matched: int = 0


class StructureExtractor:
    """Pulls capped text from a PDF and segments it into typed sections."""

    def __init__(
        self,
        pdf_extractor: BasePdfExtractor,
        *,
        min_text_chars: int = 20,
        max_text_chars: int = 50_000,
        min_critical_confidence: float = 0.6,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._min_text_chars = min_text_chars
        self._max_text_chars = max_text_chars
        self._min_critical_confidence = min_critical_confidence

    def extract(
        self,
        pdf_bytes: bytes,
        strategy_hint: ProcessingStrategy,
    ) -> StructureResult:
        """Extract sections from a document.

        Raises:
            PdfExtractionError: if the PDF adapter fails mid-stream.
        """
        pages, truncated = self._collect_pages(pdf_bytes)
        text_length = sum(len(page.text.strip()) for page in pages)
        page_count = pages[-1].page_number if pages else 0

        if text_length < self._min_text_chars:
            Log.info(f"Structure extraction found only {text_length} chars")
            return StructureResult(
                text_length=text_length,
                truncated=truncated,
                page_count=page_count,
            )

        sections = segment_pages(pages)
        if not sections:
            return StructureResult(
                text_length=text_length,
                truncated=truncated,
                page_count=page_count,
            )
        semantic_success = any(
            section.importance is Importance.CRITICAL
            and section.confidence >= self._min_critical_confidence
            for section in sections
        )
        if strategy_hint is ProcessingStrategy.DIRECT:
            sections = [_collapse(sections, pages)]

        Log.info(
            f"Structure extraction: {text_length} chars, {len(sections)} sections, "
            f"semantic_success={semantic_success}, truncated={truncated}"
        )
        return StructureResult(
            sections=sections,
            text_extraction_success=True,
            semantic_analysis_success=semantic_success,
            text_length=text_length,
            truncated=truncated,
            page_count=page_count,
        )

    def _collect_pages(self, pdf_bytes: bytes) -> tuple[list[PageText], bool]:
        """Accumulate page text up to the character cap.

        Pieces reported for the same page are joined, so adapters that emit
        fixed-size windows still produce whole lines.
        """
        pages: list[PageText] = []
        remaining = self._max_text_chars
        truncated = False
        for piece in self._pdf_extractor.iter_pages(pdf_bytes):
            text = piece.text
            if len(text) > remaining:
                text = text[:remaining]
                truncated = True
            if pages and pages[-1].page_number == piece.page_number:
                pages[-1] = PageText(piece.page_number, pages[-1].text + text)
            else:
                pages.append(PageText(piece.page_number, text))
            remaining -= len(text)
            if truncated:
                break
        return pages, truncated


def segment_pages(pages: list[PageText]) -> list[ExtractedSection]:
    """Group classified lines into runs and turn each run into a section.

    An untyped line extends the current run; a typed line either extends a
    run of the same type or starts a new one. Runs continue across pages.
    """
    runs: list[_Run] = []
    for page in pages:
        line_index = 0
        for line in page.text.splitlines():
            folded = fold(line)
            if not folded:
                continue
            section_type = classify_line(
                line,
                folded,
                page_number=page.page_number,
                line_index=line_index,
            )
            line_index += 1
            current = runs[-1] if runs else None
            if section_type is None:
                if current is None:
                    current = _Run(SectionType.OTHER, page.page_number, page.page_number)
                    runs.append(current)
                current.lines.append(line.strip())
                current.last_page = page.page_number
                continue
            if current is None or current.type is not section_type:
                current = _Run(section_type, page.page_number, page.page_number)
                runs.append(current)
            current.lines.append(line.strip())
            current.matched += 1
            current.last_page = page.page_number

    return [_to_section(index, run) for index, run in enumerate(runs, start=1)]


def _to_section(index: int, run: _Run) -> ExtractedSection:
    content = "\n".join(run.lines)
    return ExtractedSection(
        id=f"section-{index}",
        title=_title(run.type, run.first_page, run.last_page),
        content=content,
        page_range=(run.first_page, run.last_page),
        type=run.type,
        confidence=section_confidence(run.type, run.matched, len(run.lines)),
        importance=SECTION_IMPORTANCE[run.type],
        estimated_tokens=estimate_tokens(content),
    )


def _title(section_type: SectionType, first_page: int, last_page: int) -> str:
    label = section_type.value.capitalize()
    if first_page == last_page:
        return f"{label} - Page {first_page}"
    return f"{label} - Pages {first_page}-{last_page}"


def _collapse(sections: list[ExtractedSection], pages: list[PageText]) -> ExtractedSection:
    """Merge everything into one section typed after the most important one."""
    lead = max(
        sections,
        key=lambda section: (IMPORTANCE_RANK[section.importance], section.confidence),
    )
    content = "\n".join(page.text.strip() for page in pages if page.text.strip())
    first_page = pages[0].page_number
    last_page = pages[-1].page_number
    return ExtractedSection(
        id="section-1",
        title=_title(lead.type, first_page, last_page),
        content=content,
        page_range=(first_page, last_page),
        type=lead.type,
        confidence=lead.confidence,
        importance=lead.importance,
        estimated_tokens=estimate_tokens(content),
    )
