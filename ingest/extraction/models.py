from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ChunkResult:
    """Outcome of one chunk call.

    ``sequence`` is the chunk's position in document order and breaks
    priority ties during consolidation.
    """

    chunk_id: str
    priority: int
    sequence: int
    confidence: float
    succeeded: bool
    fields: dict[str, Any] = field(default_factory=dict)
    failure_reason: str | None = None
    upstream_failure: bool = False
