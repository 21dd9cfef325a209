from dataclasses import dataclass, field
from enum import Enum


class SectionType(str, Enum):
    HEADER = "header"
    FINANCIAL_SUMMARY = "financial_summary"
    TOTALS = "totals"
    LINE_ITEMS = "line_items"
    METADATA = "metadata"
    OTHER = "other"


class Importance(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"


IMPORTANCE_RANK: dict[Importance, int] = {
    Importance.CRITICAL: 3,
    Importance.HIGH: 2,
    Importance.NORMAL: 1,
}

SECTION_IMPORTANCE: dict[SectionType, Importance] = {
    SectionType.FINANCIAL_SUMMARY: Importance.CRITICAL,
    SectionType.TOTALS: Importance.CRITICAL,
    SectionType.HEADER: Importance.HIGH,
    SectionType.LINE_ITEMS: Importance.HIGH,
    SectionType.METADATA: Importance.HIGH,
    SectionType.OTHER: Importance.NORMAL,
}


@dataclass(frozen=True)
class ExtractedSection:
    """A contiguous, typed region of document text."""

    id: str
    title: str
    content: str
    page_range: tuple[int, int]
    type: SectionType
    confidence: float
    importance: Importance
    estimated_tokens: int


@dataclass(frozen=True)
class StructureResult:
    """Output of Stage 1."""

    sections: list[ExtractedSection] = field(default_factory=list)
    text_extraction_success: bool = False
    semantic_analysis_success: bool = False
    text_length: int = 0
    truncated: bool = False
    page_count: int = 0
