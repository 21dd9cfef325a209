"""Stage 2: turn sections into bounded chunks and a processing plan."""

import math

from ingest.chunking.field_catalog import fields_for, instructions_for
from ingest.chunking.models import Chunk, ChunkingResult, PlanStrategy, ProcessingPlan
from ingest.logging.logger import Log
from ingest.structure.models import ExtractedSection, Importance, SectionType
from ingest.structure.tokens import CHARS_PER_TOKEN, estimate_tokens
from ingest.viability.models import ProcessingStrategy

PRIORITY_BANDS: dict[Importance, tuple[int, int]] = {
    Importance.CRITICAL: (9, 10),
    Importance.HIGH: (6, 8),
    Importance.NORMAL: (1, 5),
}
_FINANCIAL_TYPES = frozenset({SectionType.FINANCIAL_SUMMARY, SectionType.TOTALS})
_FINANCIAL_BIAS = 0.5

_BASE_CALL_SECONDS = 3.0
_TOKENS_PER_SECOND = 500


class IntelligentChunker:
    """Splits sections under a token budget and schedules the chunk calls."""

    def __init__(
        self,
        token_budget: int = 4000,
        sequential_chunk_limit: int = 3,
        max_concurrent_chunks: int = 3,
    ) -> None:
        if token_budget < 1:
            raise ValueError("token_budget must be at least 1")
        if max_concurrent_chunks < 1:
            raise ValueError("max_concurrent_chunks must be at least 1")
        self._token_budget = token_budget
        self._sequential_chunk_limit = sequential_chunk_limit
        self._max_concurrent_chunks = max_concurrent_chunks

    def plan(
        self,
        sections: list[ExtractedSection],
        strategy: ProcessingStrategy,
    ) -> ChunkingResult:
        direct = strategy is ProcessingStrategy.DIRECT
        chunks: list[Chunk] = []
        for section in sections:
            if not section.content.strip():
                continue
            chunks.extend(self._chunk_section(section, direct=direct))

        processing_plan = self._build_plan(chunks, direct=direct)
        efficiency = self.token_efficiency(chunks)
        Log.info(
            f"Chunking: {len(chunks)} chunks from {len(sections)} sections, "
            f"plan={processing_plan.strategy.value}, efficiency={efficiency:.1f}%"
        )
        return ChunkingResult(
            chunks=chunks,
            processing_plan=processing_plan,
            token_efficiency=efficiency,
        )

    def token_efficiency(self, chunks: list[Chunk]) -> float:
        if not chunks:
            return 0.0
        used = sum(chunk.token_count for chunk in chunks)
        return round(used / (len(chunks) * self._token_budget) * 100, 2)

    def _chunk_section(self, section: ExtractedSection, *, direct: bool) -> list[Chunk]:
        pieces = self._split(section)
        fields = fields_for(section.type, direct=direct)
        instructions = instructions_for(section.type, direct=direct)
        priority = chunk_priority(section.importance, section.type, section.confidence)
        total = len(pieces)
        chunks = []
        for number, piece in enumerate(pieces, start=1):
            title = section.title if total == 1 else f"{section.title} (part {number}/{total})"
            chunks.append(
                Chunk(
                    id=f"{section.id}-chunk-{number}",
                    source_section_id=section.id,
                    title=title,
                    content=piece,
                    token_count=estimate_tokens(piece),
                    importance=section.importance,
                    section_type=section.type,
                    confidence=section.confidence,
                    priority=priority,
                    processing_instructions=instructions,
                    expected_output_fields=fields,
                )
            )
        return chunks

    def _split(self, section: ExtractedSection) -> list[str]:
        content = section.content
        content_tokens = estimate_tokens(content)
        if max(section.estimated_tokens, content_tokens) <= self._token_budget:
            return [content]
        parts = math.ceil(content_tokens / self._token_budget)
        max_chars = min(
            self._token_budget * CHARS_PER_TOKEN,
            math.ceil(len(content) / max(parts, 1)),
        )
        return split_text(content, max_chars)

    def _build_plan(self, chunks: list[Chunk], *, direct: bool) -> ProcessingPlan:
        ordered = sorted(
            enumerate(chunks),
            key=lambda item: (-item[1].priority, item[0]),
        )
        ordered_chunks = [chunk for _, chunk in ordered]

        if direct or len(chunks) <= self._sequential_chunk_limit:
            return ProcessingPlan(
                strategy=PlanStrategy.SEQUENTIAL,
                estimated_total_time=sum(_call_seconds(c) for c in ordered_chunks),
                sequential_order=[chunk.id for chunk in ordered_chunks],
            )

        critical = [c for c in ordered_chunks if c.importance is Importance.CRITICAL]
        rest = [c for c in ordered_chunks if c.importance is not Importance.CRITICAL]
        if critical and rest:
            groups = self._batch(rest)
            return ProcessingPlan(
                strategy=PlanStrategy.HYBRID,
                estimated_total_time=(
                    sum(_call_seconds(c) for c in critical) + _batches_seconds(groups)
                ),
                sequential_order=[chunk.id for chunk in critical],
                batch_groups=[[chunk.id for chunk in group] for group in groups],
            )

        groups = self._batch(ordered_chunks)
        return ProcessingPlan(
            strategy=PlanStrategy.PARALLEL,
            estimated_total_time=_batches_seconds(groups),
            batch_groups=[[chunk.id for chunk in group] for group in groups],
        )

    def _batch(self, chunks: list[Chunk]) -> list[list[Chunk]]:
        size = self._max_concurrent_chunks
        return [chunks[i : i + size] for i in range(0, len(chunks), size)]


def chunk_priority(importance: Importance, section_type: SectionType, confidence: float) -> int:
    """Map importance and confidence onto a 1..10 priority inside the importance band."""
    low, high = PRIORITY_BANDS[importance]
    score = low + (high - low) * max(0.0, min(1.0, confidence))
    if section_type in _FINANCIAL_TYPES:
        score += _FINANCIAL_BIAS
    return max(low, min(high, math.floor(score + 0.5)))


def split_text(content: str, max_chars: int) -> list[str]:
    """Split text into ordered pieces of at most ``max_chars`` characters.

    Cuts fall after the last newline in the window, else after the last
    whitespace, else at the window edge. Separators stay attached to the
    preceding piece so ``"".join(pieces) == content``.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be at least 1")
    pieces: list[str] = []
    start = 0
    length = len(content)
    while start < length:
        end = start + max_chars
        if end >= length:
            pieces.append(content[start:])
            break
        window = content[start:end]
        cut = window.rfind("\n")
        if cut <= 0:
            cut = max(window.rfind(" "), window.rfind("\t"))
        cut = end if cut <= 0 else start + cut + 1
        pieces.append(content[start:cut])
        start = cut
    return pieces


def _call_seconds(chunk: Chunk) -> float:
    return _BASE_CALL_SECONDS + chunk.token_count / _TOKENS_PER_SECOND


def _batches_seconds(groups: list[list[Chunk]]) -> float:
    return sum(max(_call_seconds(chunk) for chunk in group) for group in groups)
