"""Stage 0: decide whether and how a document should be processed."""

from ingest.pdf.models import DocumentMetadata
from ingest.viability.models import Complexity, ProcessingStrategy, ViabilityResult

_MB = 1024 * 1024

# (max pages, max bytes) per bucket, checked in order.
_COMPLEXITY_LIMITS: tuple[tuple[Complexity, int, int], ...] = (
    (Complexity.LOW, 5, 1 * _MB),
    (Complexity.MEDIUM, 20, 5 * _MB),
    (Complexity.HIGH, 50, 20 * _MB),
)

_MULTI_STAGE_CONFIDENCE = {
    Complexity.LOW: 0.9,
    Complexity.MEDIUM: 0.9,
    Complexity.HIGH: 0.8,
    Complexity.EXTREME: 0.7,
}

_DIRECT_CONFIDENCE = 0.95

# Per-page linear estimates: (base seconds, seconds per page, cost per page).
_ESTIMATES = {
    ProcessingStrategy.DIRECT: (10.0, 2.0, 0.003),
    ProcessingStrategy.MULTI_STAGE: (20.0, 4.0, 0.006),
}


class ViabilityClassifier:
    """Pure routing function over document metadata."""

    def __init__(self, direct_page_threshold: int = 10) -> None:
        if direct_page_threshold < 1:
            raise ValueError("direct_page_threshold must be at least 1")
        self._direct_page_threshold = direct_page_threshold

    def classify(self, metadata: DocumentMetadata) -> ViabilityResult:
        complexity = self.complexity_for(metadata)
        strategy = (
            ProcessingStrategy.DIRECT
            if metadata.page_count < self._direct_page_threshold
            else ProcessingStrategy.MULTI_STAGE
        )
        base_seconds, seconds_per_page, cost_per_page = _ESTIMATES[strategy]
        pages = max(metadata.page_count, 1)
        warnings: list[str] = []
        recommendations: list[str] = []

        if not metadata.has_extractable_text:
            warnings.append("No extractable text layer found")
            recommendations.append("Run OCR on the document before uploading it")
            return ViabilityResult(
                is_viable=False,
                strategy=strategy,
                confidence=0.0,
                complexity=complexity,
                estimated_time_seconds=0.0,
                estimated_cost=0.0,
                warnings=warnings,
                recommendations=recommendations,
            )

        if complexity is Complexity.EXTREME:
            warnings.append("Document exceeds 50 pages or 20 MB")
            recommendations.append("Split the document into smaller uploads")
        elif complexity is Complexity.HIGH:
            recommendations.append("Expect a longer processing time")

        if strategy is ProcessingStrategy.DIRECT:
            confidence = _DIRECT_CONFIDENCE
        else:
            confidence = _MULTI_STAGE_CONFIDENCE[complexity]

        return ViabilityResult(
            is_viable=True,
            strategy=strategy,
            confidence=confidence,
            complexity=complexity,
            estimated_time_seconds=base_seconds + seconds_per_page * pages,
            estimated_cost=round(cost_per_page * pages, 4),
            warnings=warnings,
            recommendations=recommendations,
        )

    @staticmethod
    def complexity_for(metadata: DocumentMetadata) -> Complexity:
        for complexity, max_pages, max_bytes in _COMPLEXITY_LIMITS:
            if metadata.page_count <= max_pages and metadata.size_bytes <= max_bytes:
                return complexity
        return Complexity.EXTREME
