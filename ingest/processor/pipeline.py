from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ingest.chunking.models import ChunkingResult
from ingest.consolidation.models import ExtractionCandidate, ValidatedRecord
from ingest.database.models import StoredRecord
from ingest.extraction.models import ChunkResult
from ingest.pdf.models import DocumentMetadata
from ingest.processor.models import UploadRequest
from ingest.structure.models import StructureResult
from ingest.viability.models import ViabilityResult


@dataclass(slots=True)
class PipelineContext:
    request: UploadRequest
    fingerprint: str = ""
    cached_record: StoredRecord | None = None
    metadata: DocumentMetadata | None = None
    viability: ViabilityResult | None = None
    blob_url: str = ""
    structure: StructureResult | None = None
    chunking: ChunkingResult | None = None
    chunk_results: list[ChunkResult] = field(default_factory=list)
    candidate: ExtractionCandidate | None = None
    record: ValidatedRecord | None = None
    record_id: int | None = None
    from_cache: bool = False
    halted: bool = False


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
