from dataclasses import dataclass, field
from enum import Enum

from ingest.structure.models import Importance, SectionType


class PlanStrategy(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class Chunk:
    """One LLM-sized unit of work cut from a section."""

    id: str
    source_section_id: str
    title: str
    content: str
    token_count: int
    importance: Importance
    section_type: SectionType
    confidence: float
    priority: int
    processing_instructions: str
    expected_output_fields: tuple[str, ...]
    openai_optimized: bool = True


@dataclass(frozen=True)
class ProcessingPlan:
    """How chunk calls are scheduled.

    ``sequential_order`` runs first, one call at a time; each entry of
    ``batch_groups`` then runs concurrently and completes before the next.
    """

    strategy: PlanStrategy
    estimated_total_time: float
    sequential_order: list[str] = field(default_factory=list)
    batch_groups: list[list[str]] = field(default_factory=list)


@dataclass(frozen=True)
class ChunkingResult:
    """Output of Stage 2."""

    chunks: list[Chunk]
    processing_plan: ProcessingPlan
    token_efficiency: float
