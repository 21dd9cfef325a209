from ingest.consolidation.models import RejectionReason


class PipelineError(Exception):
    """Base class for errors that end one document's pipeline run."""

    code = "pipeline_error"
    retryable = False


class NotViableError(PipelineError):
    """Stage 0 found nothing that can be processed."""

    code = "not_viable"


class InsufficientTextError(PipelineError):
    """Stage 1 could not pull enough text to work with."""

    code = "insufficient_text"
    reason = RejectionReason.INSUFFICIENT_TEXT


class ChunkExtractionFailedError(PipelineError):
    """One chunk failed after all retries. Absorbed by the plan executor."""

    code = "chunk_extraction_failed"

    def __init__(self, chunk_id: str, message: str, *, upstream: bool) -> None:
        super().__init__(f"Chunk {chunk_id} failed: {message}")
        self.chunk_id = chunk_id
        self.upstream = upstream


class ValidationRejectedError(PipelineError):
    """The consolidated candidate failed the no-fabrication checks."""

    code = "validation_rejected"

    def __init__(self, reason: RejectionReason, message: str = "") -> None:
        super().__init__(message or f"Record rejected: {reason.value}")
        self.reason = reason


class UpstreamUnavailableError(PipelineError):
    """A dependency (LLM, blob store, database) could not be reached."""

    code = "upstream_unavailable"
    retryable = True


class FileReadError(Exception):
    """Raised when an uploaded file cannot be read from disk."""
