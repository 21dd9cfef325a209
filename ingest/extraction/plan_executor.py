import asyncio

from ingest.chunking.models import Chunk, ChunkingResult
from ingest.extraction.chunk_extractor import ChunkExtractor
from ingest.extraction.models import ChunkResult
from ingest.logging.logger import Log
from ingest.processor.exceptions import ChunkExtractionFailedError


class PlanExecutor:
    """Runs chunk extractions in the order a processing plan prescribes.

    The sequential part runs one chunk at a time, then each batch group runs
    concurrently. A failed chunk becomes a failed ChunkResult and does not
    stop its siblings.
    """

    def __init__(self, chunk_extractor: ChunkExtractor) -> None:
        self._chunk_extractor = chunk_extractor

    async def execute(self, chunking: ChunkingResult) -> list[ChunkResult]:
        chunks = {chunk.id: chunk for chunk in chunking.chunks}
        sequence = {chunk.id: index for index, chunk in enumerate(chunking.chunks)}
        plan = chunking.processing_plan

        results: list[ChunkResult] = []
        for chunk_id in plan.sequential_order:
            results.append(await self._run_one(chunks[chunk_id], sequence[chunk_id]))
        for group in plan.batch_groups:
            batch = [(chunks[chunk_id], sequence[chunk_id]) for chunk_id in group]
            results.extend(await self._run_batch(batch))

        failed = sum(1 for result in results if not result.succeeded)
        Log.info(
            f"Executed {plan.strategy.value} plan: {len(results) - failed} chunks "
            f"succeeded, {failed} failed"
        )
        return results

    async def _run_batch(self, batch: list[tuple[Chunk, int]]) -> list[ChunkResult]:
        """Run one batch group; an unexpected error cancels the rest of the group."""
        tasks = [asyncio.create_task(self._run_one(chunk, sequence)) for chunk, sequence in batch]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _run_one(self, chunk: Chunk, sequence: int) -> ChunkResult:
        try:
            fields = await self._chunk_extractor.extract(chunk)
        except ChunkExtractionFailedError as exc:
            Log.warning(str(exc))
            return ChunkResult(
                chunk_id=chunk.id,
                priority=chunk.priority,
                sequence=sequence,
                confidence=chunk.confidence,
                succeeded=False,
                failure_reason=str(exc),
                upstream_failure=exc.upstream,
            )
        return ChunkResult(
            chunk_id=chunk.id,
            priority=chunk.priority,
            sequence=sequence,
            confidence=chunk.confidence,
            succeeded=True,
            fields=fields,
        )
