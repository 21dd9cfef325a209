from dataclasses import dataclass

from ingest.consolidation.validator import check_record_fields
from ingest.database.models import StoredRecord
from ingest.database.repositories.record_repository import RecordRepository
from ingest.hashing.fingerprint import compute_fingerprint
from ingest.logging.logger import Log


@dataclass(frozen=True)
class DedupResult:
    fingerprint: str
    cached: StoredRecord | None = None


class Deduplicator:
    """Content-addressed lookup of earlier outcomes for the same bytes.

    No reservation is taken: two concurrent uploads of identical bytes both
    run the pipeline and the unique index settles which insert wins.
    """

    def __init__(self, record_repo: RecordRepository) -> None:
        self._record_repo = record_repo

    async def check_and_reserve(self, owner_id: str, file_bytes: bytes) -> DedupResult:
        """Return the fingerprint and, if one exists, a trustworthy cached record.

        Cached records that fail the record checks are deleted so the
        document is processed again.
        """
        fingerprint = compute_fingerprint(file_bytes)
        for record in await self._record_repo.find_by_fingerprint(owner_id, fingerprint):
            reason = check_record_fields(
                record.vendor_name,
                record.total_amount,
                record.currency,
            )
            if reason is None:
                Log.info(
                    f"Duplicate upload {fingerprint[:12]} for owner {owner_id}: "
                    f"returning {record.record_family.value} record {record.id}"
                )
                return DedupResult(fingerprint=fingerprint, cached=record)
            Log.warning(
                f"Deleting invalid cached {record.record_family.value} record "
                f"{record.id} ({reason.value}); reprocessing {fingerprint[:12]}"
            )
            await self._record_repo.delete(record)
        return DedupResult(fingerprint=fingerprint)
