from dataclasses import dataclass, field

from ingest.consolidation.models import RecordFamily


@dataclass(frozen=True)
class UploadRequest:
    """One uploaded document entering the pipeline."""

    owner_id: str
    record_family: RecordFamily
    file_name: str
    file_bytes: bytes
    mime_type: str = "application/pdf"


@dataclass(frozen=True)
class IngestionOutcome:
    """What the upload boundary reports back for one document."""

    success: bool
    record_family: RecordFamily
    fingerprint: str = ""
    record_id: int | None = None
    from_cache: bool = False
    error_code: str | None = None
    rejection_reason: str | None = None
    error_message: str | None = None
    retryable: bool = False
    flags: list[str] = field(default_factory=list)
