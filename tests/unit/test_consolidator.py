from typing import Any

from ingest.consolidation.consolidator import Consolidator
from ingest.consolidation.models import PartLine
from ingest.extraction.models import ChunkResult


def _result(
    chunk_id: str,
    priority: int,
    sequence: int,
    fields: dict[str, Any] | None = None,
    *,
    succeeded: bool = True,
    confidence: float = 0.8,
) -> ChunkResult:
    return ChunkResult(
        chunk_id=chunk_id,
        priority=priority,
        sequence=sequence,
        confidence=confidence,
        succeeded=succeeded,
        fields=fields or {},
        failure_reason=None if succeeded else "bad json",
    )


class TestScalarMerge:
    def test_higher_priority_wins(self) -> None:
        candidate = Consolidator().consolidate(
            [
                _result("header", 7, 0, {"vendor_name": "Acme Header", "total_amount": 999.0}),
                _result("summary", 10, 1, {"vendor_name": "Acme Air Services", "total_amount": 1250.0}),
            ]
        )
        assert candidate.vendor_name == "Acme Air Services"
        assert candidate.total_amount == 1250.0

    def test_lower_priority_fills_gaps(self) -> None:
        candidate = Consolidator().consolidate(
            [
                _result("summary", 10, 1, {"total_amount": 1250.0, "invoice_number": None}),
                _result("meta", 7, 0, {"invoice_number": "1001", "work_order_number": "WO-7"}),
            ]
        )
        assert candidate.total_amount == 1250.0
        assert candidate.invoice_number == "1001"
        assert candidate.work_order_number == "WO-7"

    def test_tie_goes_to_earlier_chunk(self) -> None:
        candidate = Consolidator().consolidate(
            [
                _result("second", 9, 1, {"currency": "MXN"}),
                _result("first", 9, 0, {"currency": "USD"}),
            ]
        )
        assert candidate.currency == "USD"

    def test_technical_metadata(self) -> None:
        candidate = Consolidator().consolidate(
            [_result("meta", 7, 0, {"aircraft_registration": "N123AB", "technician_name": "J. Ruiz"})]
        )
        assert candidate.technical.aircraft_registration == "N123AB"
        assert candidate.technical.technician_name == "J. Ruiz"


class TestBreakdownAndParts:
    def test_category_totals_are_summed(self) -> None:
        candidate = Consolidator().consolidate(
            [
                _result("totals-1", 10, 0, {"labor_total": 480.0, "parts_total": 300.1}),
                _result("totals-2", 10, 1, {"labor_total": 120.0, "parts_total": None}),
            ]
        )
        assert candidate.breakdown.labor == 600.0
        assert candidate.breakdown.parts == 300.1
        assert candidate.breakdown.services is None

    def test_tax_and_subtotal_are_scalars(self) -> None:
        candidate = Consolidator().consolidate(
            [_result("totals", 10, 0, {"tax_amount": 80.0, "subtotal": 1000.0})]
        )
        assert candidate.breakdown.tax == 80.0
        assert candidate.breakdown.subtotal == 1000.0

    def test_parts_concatenated_in_document_order_without_duplicates(self) -> None:
        disc = {"part_number": "066-50000", "description": "Brake disc", "quantity": 2.0,
                "unit_price": 120.0, "total_price": 240.0}
        pad = {"part_number": "066-10500", "description": "Brake pad", "quantity": 4.0,
               "unit_price": 25.0, "total_price": 100.0}
        candidate = Consolidator().consolidate(
            [
                _result("items-2", 7, 1, {"parts": [pad, disc]}),
                _result("items-1", 7, 0, {"parts": [disc]}),
            ]
        )
        assert candidate.parts == [PartLine(**disc), PartLine(**pad)]


class TestFailuresAndConfidence:
    def test_failed_chunks_are_recorded_and_ignored(self) -> None:
        candidate = Consolidator().consolidate(
            [
                _result("summary", 10, 0, {"total_amount": 1250.0}),
                _result("items", 7, 1, {"total_amount": 5.0}, succeeded=False),
            ]
        )
        assert candidate.total_amount == 1250.0
        assert candidate.failed_chunk_ids == ["items"]

    def test_confidence_is_scaled_by_success_ratio(self) -> None:
        candidate = Consolidator().consolidate(
            [
                _result("a", 10, 0, confidence=0.8),
                _result("b", 7, 1, confidence=0.6),
                _result("c", 7, 2, succeeded=False, confidence=0.9),
                _result("d", 7, 3, succeeded=False, confidence=0.9),
            ]
        )
        assert candidate.confidence == 0.35

    def test_no_successes(self) -> None:
        candidate = Consolidator().consolidate([_result("a", 10, 0, succeeded=False)])
        assert candidate.confidence == 0.0
        assert candidate.vendor_name is None

    def test_semantic_flag_is_carried(self) -> None:
        candidate = Consolidator().consolidate([], semantic_analysis_success=False)
        assert candidate.semantic_analysis_success is False
