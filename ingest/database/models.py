from dataclasses import dataclass
from datetime import datetime

from ingest.consolidation.models import RecordFamily


@dataclass
class JobRecord:
    """Represents a row from the ingestion_jobs table."""

    id: int
    owner_id: str
    record_family: RecordFamily
    document_uuid: str
    file_name: str
    mime_type: str
    status: str
    attempts: int
    error_code: str | None = None
    error_message: str | None = None
    record_id: int | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class StoredRecord:
    """The fields of a persisted record needed to judge a cache hit."""

    id: int
    owner_id: str
    record_family: RecordFamily
    fingerprint: str
    vendor_name: str | None
    total_amount: float | None
    currency: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class PersistResult:
    record_id: int
    from_cache: bool = False
