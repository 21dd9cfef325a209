from ingest.chunking.chunker import IntelligentChunker
from ingest.config.settings import Settings
from ingest.consolidation.consolidator import Consolidator
from ingest.database.repositories.record_repository import RecordRepository
from ingest.extraction.factory import ExtractorFactory
from ingest.extraction.plan_executor import PlanExecutor
from ingest.hashing.deduplicator import Deduplicator
from ingest.logging.logger import Log
from ingest.pdf.factory import PdfExtractorFactory
from ingest.processor.exceptions import PipelineError
from ingest.processor.models import IngestionOutcome, UploadRequest
from ingest.processor.pipeline import PipelineContext, PipelineStep
from ingest.processor.steps import (
    ChunkStep,
    ClassifyStep,
    ConsolidateStep,
    ExtractChunksStep,
    ExtractStructureStep,
    FingerprintStep,
    PersistStep,
    StoreBlobStep,
    ValidateStep,
)
from ingest.storage.factory import BlobStoreFactory
from ingest.structure.extractor import StructureExtractor
from ingest.viability.classifier import ViabilityClassifier


class Processor:
    """Runs one upload through the ordered pipeline steps.

    Pipeline: fingerprint -> classify -> store blob -> structure -> chunk ->
    extract -> consolidate -> validate -> persist. A cache hit halts after
    the fingerprint step.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    async def ingest(self, request: UploadRequest) -> IngestionOutcome:
        """Process one upload and report its outcome.

        Pipeline errors become failed outcomes; anything else propagates.
        Cancellation propagates too, and nothing is persisted when it
        happens before the final step.
        """
        Log.info(
            f"Ingesting '{request.file_name}' ({len(request.file_bytes)} bytes) "
            f"for owner {request.owner_id}"
        )
        context = PipelineContext(request=request)
        try:
            for step in self._steps:
                context = await step.run(context)
                if context.halted:
                    break
        except PipelineError as exc:
            reason = getattr(exc, "reason", None)
            Log.warning(f"Ingestion of '{request.file_name}' stopped: [{exc.code}] {exc}")
            return IngestionOutcome(
                success=False,
                record_family=request.record_family,
                fingerprint=context.fingerprint,
                error_code=exc.code,
                rejection_reason=reason.value if reason is not None else None,
                error_message=str(exc),
                retryable=exc.retryable,
            )

        record_family = request.record_family
        if context.cached_record is not None:
            record_family = context.cached_record.record_family
        return IngestionOutcome(
            success=True,
            record_family=record_family,
            fingerprint=context.fingerprint,
            record_id=context.record_id,
            from_cache=context.from_cache,
            flags=list(context.record.flags) if context.record is not None else [],
        )


def build_processor(settings: Settings) -> Processor:
    """Build a Processor with all required adapters."""
    pdf_extractor = PdfExtractorFactory.create(settings)
    record_repo = RecordRepository()
    steps: list[PipelineStep] = [
        FingerprintStep(Deduplicator(record_repo)),
        ClassifyStep(
            pdf_extractor,
            ViabilityClassifier(direct_page_threshold=settings.direct_page_threshold),
        ),
        StoreBlobStep(BlobStoreFactory.create(settings)),
        ExtractStructureStep(
            StructureExtractor(
                pdf_extractor,
                min_text_chars=settings.min_text_chars,
                max_text_chars=settings.max_text_chars,
                min_critical_confidence=settings.min_critical_confidence,
            )
        ),
        ChunkStep(
            IntelligentChunker(
                token_budget=settings.chunk_token_budget,
                sequential_chunk_limit=settings.sequential_chunk_limit,
                max_concurrent_chunks=settings.max_concurrent_chunks,
            )
        ),
        ExtractChunksStep(PlanExecutor(ExtractorFactory.create(settings))),
        ConsolidateStep(Consolidator()),
        ValidateStep(settings.reconciliation_tolerance),
        PersistStep(record_repo),
    ]
    return Processor(steps)
