"""No-fabrication checks that gate every record before persistence."""

import math

from ingest.consolidation.maintenance_category import classify_maintenance
from ingest.consolidation.models import (
    ExtractionCandidate,
    RecordFamily,
    RecordSource,
    RejectionReason,
    ValidatedRecord,
)
from ingest.processor.exceptions import ValidationRejectedError
from ingest.text.placeholders import is_placeholder_text, is_placeholder_vendor

FLAG_BREAKDOWN_MISMATCH = "breakdown_mismatch"
FLAG_PARTIAL_EXTRACTION = "partial_extraction"
FLAG_LOW_SEMANTIC_CONFIDENCE = "low_semantic_confidence"


def check_record_fields(
    vendor_name: str | None,
    total_amount: float | None,
    currency: str | None,
) -> RejectionReason | None:
    """Return why a record must not be trusted, or None if it passes.

    Shared by validation of new candidates and by the cache check on
    previously stored records.
    """
    if is_placeholder_vendor(vendor_name):
        return RejectionReason.PLACEHOLDER_VENDOR
    if total_amount is None or not math.isfinite(total_amount) or total_amount <= 0:
        return RejectionReason.NO_FINANCIAL_DATA
    if is_placeholder_text(currency):
        return RejectionReason.NO_FINANCIAL_DATA
    return None


def validate_and_build(
    candidate: ExtractionCandidate,
    fingerprint: str,
    record_family: RecordFamily,
    *,
    reconciliation_tolerance: float = 0.01,
) -> ValidatedRecord:
    """Validate a consolidated candidate and build the record to persist.

    Raises:
        ValidationRejectedError: if the candidate fails the record checks.
    """
    reason = check_record_fields(
        candidate.vendor_name,
        candidate.total_amount,
        candidate.currency,
    )
    if reason is not None:
        raise ValidationRejectedError(
            reason,
            f"Candidate rejected ({reason.value}): vendor={candidate.vendor_name!r}, "
            f"total={candidate.total_amount!r}, currency={candidate.currency!r}",
        )

    flags: list[str] = []
    if _breakdown_mismatch(candidate, reconciliation_tolerance):
        flags.append(FLAG_BREAKDOWN_MISMATCH)
    if candidate.failed_chunk_ids:
        flags.append(FLAG_PARTIAL_EXTRACTION)
    if not candidate.semantic_analysis_success:
        flags.append(FLAG_LOW_SEMANTIC_CONFIDENCE)

    maintenance = None
    if record_family is RecordFamily.MAINTENANCE:
        maintenance = classify_maintenance(candidate.technical.work_description)

    return ValidatedRecord(
        fingerprint=fingerprint,
        record_family=record_family,
        vendor_name=(candidate.vendor_name or "").strip(),
        total_amount=float(candidate.total_amount or 0.0),
        currency=candidate.currency or "",
        invoice_date=candidate.invoice_date,
        invoice_number=candidate.invoice_number,
        work_order_number=candidate.work_order_number,
        breakdown=candidate.breakdown,
        parts=list(candidate.parts),
        technical=candidate.technical,
        source=RecordSource(ocr_extracted=True, confidence=candidate.confidence),
        flags=flags,
        maintenance=maintenance,
    )


def _breakdown_mismatch(candidate: ExtractionCandidate, tolerance: float) -> bool:
    components = candidate.breakdown.component_sum()
    if components is None or candidate.total_amount is None:
        return False
    allowed = max(0.01, candidate.total_amount * tolerance)
    return abs(components - candidate.total_amount) > allowed
