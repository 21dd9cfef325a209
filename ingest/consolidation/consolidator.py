"""Merge per-chunk extraction results into one candidate record."""

from typing import Any

from ingest.consolidation.models import (
    ExtractionCandidate,
    FinancialBreakdown,
    PartLine,
    TechnicalMetadata,
)
from ingest.extraction.fields import BREAKDOWN_FIELDS
from ingest.extraction.models import ChunkResult
from ingest.logging.logger import Log

_SCALAR_FIELDS: tuple[str, ...] = (
    "vendor_name",
    "total_amount",
    "currency",
    "invoice_date",
    "invoice_number",
    "work_order_number",
    "subtotal",
    "tax_amount",
    "aircraft_registration",
    "serial_number",
    "technician_name",
    "compliance_reference",
    "work_description",
)


class Consolidator:
    """Priority merge of chunk results.

    Scalars come from the highest-priority chunk that reported them (ties go
    to the earlier chunk); lower-priority chunks only fill gaps. Category
    totals are summed and part lists concatenated in document order.
    """

    def consolidate(
        self,
        results: list[ChunkResult],
        *,
        semantic_analysis_success: bool = True,
    ) -> ExtractionCandidate:
        succeeded = [result for result in results if result.succeeded]
        by_priority = sorted(succeeded, key=lambda r: (-r.priority, r.sequence))
        in_document_order = sorted(succeeded, key=lambda r: r.sequence)

        scalars: dict[str, Any] = {}
        for result in by_priority:
            for name in _SCALAR_FIELDS:
                if scalars.get(name) is None and result.fields.get(name) is not None:
                    scalars[name] = result.fields[name]

        sums = {name: _sum_field(in_document_order, name) for name in BREAKDOWN_FIELDS}
        parts = _merge_parts(in_document_order)
        failed_ids = [result.chunk_id for result in results if not result.succeeded]

        candidate = ExtractionCandidate(
            vendor_name=scalars.get("vendor_name"),
            total_amount=scalars.get("total_amount"),
            currency=scalars.get("currency"),
            invoice_date=scalars.get("invoice_date"),
            invoice_number=scalars.get("invoice_number"),
            work_order_number=scalars.get("work_order_number"),
            breakdown=FinancialBreakdown(
                labor=sums["labor_total"],
                parts=sums["parts_total"],
                services=sums["services_total"],
                freight=sums["freight_total"],
                tax=scalars.get("tax_amount"),
                subtotal=scalars.get("subtotal"),
            ),
            parts=parts,
            technical=TechnicalMetadata(
                aircraft_registration=scalars.get("aircraft_registration"),
                serial_number=scalars.get("serial_number"),
                technician_name=scalars.get("technician_name"),
                compliance_reference=scalars.get("compliance_reference"),
                work_description=scalars.get("work_description"),
            ),
            failed_chunk_ids=failed_ids,
            semantic_analysis_success=semantic_analysis_success,
            confidence=_confidence(results, succeeded),
        )
        Log.info(
            f"Consolidated {len(succeeded)}/{len(results)} chunk results, "
            f"{len(parts)} parts, confidence={candidate.confidence:.2f}"
        )
        return candidate


def _sum_field(results: list[ChunkResult], name: str) -> float | None:
    values = [result.fields.get(name) for result in results]
    reported = [value for value in values if value is not None]
    if not reported:
        return None
    return round(sum(reported), 2)


def _merge_parts(results: list[ChunkResult]) -> list[PartLine]:
    parts: list[PartLine] = []
    seen: set[PartLine] = set()
    for result in results:
        for raw in result.fields.get("parts") or []:
            part = PartLine(**raw)
            if part in seen:
                continue
            seen.add(part)
            parts.append(part)
    return parts


def _confidence(results: list[ChunkResult], succeeded: list[ChunkResult]) -> float:
    """Mean section confidence of successful chunks scaled by the success ratio."""
    if not results or not succeeded:
        return 0.0
    mean = sum(result.confidence for result in succeeded) / len(succeeded)
    return round(mean * len(succeeded) / len(results), 4)
