from dataclasses import dataclass, field
from enum import Enum


class ProcessingStrategy(str, Enum):
    DIRECT = "direct"
    MULTI_STAGE = "multi_stage"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


@dataclass(frozen=True)
class ViabilityResult:
    """Routing decision for one document."""

    is_viable: bool
    strategy: ProcessingStrategy
    confidence: float
    complexity: Complexity
    estimated_time_seconds: float
    estimated_cost: float
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
