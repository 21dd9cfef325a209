import psycopg
from psycopg_pool import PoolTimeout

from ingest.chunking.chunker import IntelligentChunker
from ingest.consolidation.consolidator import Consolidator
from ingest.consolidation.models import RejectionReason
from ingest.consolidation.validator import validate_and_build
from ingest.database.repositories.record_repository import AttachmentInfo, RecordRepository
from ingest.extraction.plan_executor import PlanExecutor
from ingest.hashing.deduplicator import Deduplicator
from ingest.logging.logger import Log
from ingest.pdf.base import BasePdfExtractor
from ingest.pdf.exceptions import PdfExtractionError
from ingest.processor.exceptions import (
    InsufficientTextError,
    NotViableError,
    UpstreamUnavailableError,
    ValidationRejectedError,
)
from ingest.processor.pipeline import PipelineContext, PipelineStep
from ingest.storage.base import BaseBlobStore, owner_scoped_path
from ingest.storage.exceptions import BlobStoreError
from ingest.structure.extractor import StructureExtractor
from ingest.viability.classifier import ViabilityClassifier

_DATABASE_ERRORS = (psycopg.OperationalError, PoolTimeout)


class FingerprintStep(PipelineStep):
    def __init__(self, deduplicator: Deduplicator) -> None:
        self._deduplicator = deduplicator

    async def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        try:
            result = await self._deduplicator.check_and_reserve(
                request.owner_id, request.file_bytes
            )
        except _DATABASE_ERRORS as exc:
            raise UpstreamUnavailableError(f"Record lookup failed: {exc}") from exc
        context.fingerprint = result.fingerprint
        if result.cached is not None:
            context.cached_record = result.cached
            context.record_id = result.cached.id
            context.from_cache = True
            context.halted = True
        return context


class ClassifyStep(PipelineStep):
    def __init__(
        self,
        pdf_extractor: BasePdfExtractor,
        classifier: ViabilityClassifier,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._classifier = classifier

    async def run(self, context: PipelineContext) -> PipelineContext:
        try:
            metadata = self._pdf_extractor.inspect(context.request.file_bytes)
        except PdfExtractionError as exc:
            raise NotViableError(f"Document cannot be opened: {exc}") from exc
        viability = self._classifier.classify(metadata)
        context.metadata = metadata
        context.viability = viability
        Log.info(
            f"Viability for {context.fingerprint[:12]}: {metadata.page_count} pages, "
            f"strategy={viability.strategy.value}, complexity={viability.complexity.value}, "
            f"confidence={viability.confidence}"
        )
        if not viability.is_viable:
            raise NotViableError("; ".join(viability.warnings) or "Document is not viable")
        return context


class StoreBlobStep(PipelineStep):
    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store

    async def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        path = owner_scoped_path(request.owner_id, context.fingerprint, request.file_name)
        try:
            context.blob_url = await self._blob_store.put(
                path, request.file_bytes, request.mime_type
            )
        except BlobStoreError as exc:
            raise UpstreamUnavailableError(str(exc)) from exc
        Log.info(f"Stored original for {context.fingerprint[:12]} at {context.blob_url}")
        return context


class ExtractStructureStep(PipelineStep):
    def __init__(self, structure_extractor: StructureExtractor) -> None:
        self._structure_extractor = structure_extractor

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.viability is None:
            raise ValueError("PipelineContext.viability must be set before structure extraction")
        try:
            structure = self._structure_extractor.extract(
                context.request.file_bytes,
                context.viability.strategy,
            )
        except PdfExtractionError as exc:
            raise InsufficientTextError(f"Text extraction failed: {exc}") from exc
        if not structure.text_extraction_success:
            raise InsufficientTextError(
                f"Only {structure.text_length} characters of text could be extracted"
            )
        context.structure = structure
        return context


class ChunkStep(PipelineStep):
    def __init__(self, chunker: IntelligentChunker) -> None:
        self._chunker = chunker

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.structure is None or context.viability is None:
            raise ValueError("PipelineContext.structure must be set before chunking")
        context.chunking = self._chunker.plan(
            context.structure.sections,
            context.viability.strategy,
        )
        return context


class ExtractChunksStep(PipelineStep):
    def __init__(self, plan_executor: PlanExecutor) -> None:
        self._plan_executor = plan_executor

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.chunking is None:
            raise ValueError("PipelineContext.chunking must be set before extraction")
        results = await self._plan_executor.execute(context.chunking)
        context.chunk_results = results
        if results and not any(result.succeeded for result in results):
            if all(result.upstream_failure for result in results):
                raise UpstreamUnavailableError(
                    f"All {len(results)} chunk calls failed to reach the AI provider"
                )
            raise ValidationRejectedError(
                RejectionReason.MALFORMED_LLM_RESPONSE,
                f"All {len(results)} chunk responses were unusable",
            )
        return context


class ConsolidateStep(PipelineStep):
    def __init__(self, consolidator: Consolidator) -> None:
        self._consolidator = consolidator

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.structure is None:
            raise ValueError("PipelineContext.structure must be set before consolidation")
        context.candidate = self._consolidator.consolidate(
            context.chunk_results,
            semantic_analysis_success=context.structure.semantic_analysis_success,
        )
        return context


class ValidateStep(PipelineStep):
    def __init__(self, reconciliation_tolerance: float) -> None:
        self._reconciliation_tolerance = reconciliation_tolerance

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.candidate is None:
            raise ValueError("PipelineContext.candidate must be set before validation")
        context.record = validate_and_build(
            context.candidate,
            context.fingerprint,
            context.request.record_family,
            reconciliation_tolerance=self._reconciliation_tolerance,
        )
        if context.record.flags:
            Log.warning(
                f"Record {context.fingerprint[:12]} flagged for review: "
                f"{', '.join(context.record.flags)}"
            )
        return context


class PersistStep(PipelineStep):
    def __init__(self, record_repo: RecordRepository) -> None:
        self._record_repo = record_repo

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.record is None:
            raise ValueError("PipelineContext.record must be set before persist")
        request = context.request
        attachment = AttachmentInfo(
            file_name=request.file_name,
            file_url=context.blob_url,
            mime_type=request.mime_type,
            file_size_bytes=len(request.file_bytes),
        )
        try:
            result = await self._record_repo.insert(request.owner_id, context.record, attachment)
        except _DATABASE_ERRORS as exc:
            raise UpstreamUnavailableError(f"Record insert failed: {exc}") from exc
        context.record_id = result.record_id
        context.from_cache = result.from_cache
        Log.info(
            f"Persisted {context.record.record_family.value} record {result.record_id} "
            f"for {context.fingerprint[:12]} (from_cache={result.from_cache})"
        )
        return context
