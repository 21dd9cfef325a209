from ingest.extraction.chunk_extractor import ChunkExtractor
from ingest.extraction.factory import ExtractorFactory
from ingest.extraction.plan_executor import PlanExecutor

__all__ = ["ChunkExtractor", "ExtractorFactory", "PlanExecutor"]
