from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RecordFamily(str, Enum):
    MAINTENANCE = "maintenance"
    EXPENSE = "expense"


class RejectionReason(str, Enum):
    INSUFFICIENT_TEXT = "insufficient_text"
    NO_FINANCIAL_DATA = "no_financial_data"
    PLACEHOLDER_VENDOR = "placeholder_vendor"
    MALFORMED_LLM_RESPONSE = "malformed_llm_response"


@dataclass(frozen=True)
class FinancialBreakdown:
    labor: float | None = None
    parts: float | None = None
    services: float | None = None
    freight: float | None = None
    tax: float | None = None
    subtotal: float | None = None

    def category_amounts(self) -> dict[str, float]:
        """Reported category totals, keyed by breakdown category name."""
        amounts = {
            "Labor": self.labor,
            "Parts": self.parts,
            "Services": self.services,
            "Freight": self.freight,
        }
        return {name: value for name, value in amounts.items() if value is not None}

    def component_sum(self) -> float | None:
        """Sum of categories plus tax, or None when no category was reported."""
        amounts = self.category_amounts()
        if not amounts:
            return None
        return sum(amounts.values()) + (self.tax or 0.0)


@dataclass(frozen=True)
class PartLine:
    part_number: str | None = None
    description: str | None = None
    quantity: float | None = None
    unit_price: float | None = None
    total_price: float | None = None


@dataclass(frozen=True)
class TechnicalMetadata:
    aircraft_registration: str | None = None
    serial_number: str | None = None
    technician_name: str | None = None
    compliance_reference: str | None = None
    work_description: str | None = None


@dataclass(frozen=True)
class ExtractionCandidate:
    """Consolidated extraction output. Never persisted as-is."""

    vendor_name: str | None = None
    total_amount: float | None = None
    currency: str | None = None
    invoice_date: str | None = None
    invoice_number: str | None = None
    work_order_number: str | None = None
    breakdown: FinancialBreakdown = field(default_factory=FinancialBreakdown)
    parts: list[PartLine] = field(default_factory=list)
    technical: TechnicalMetadata = field(default_factory=TechnicalMetadata)
    failed_chunk_ids: list[str] = field(default_factory=list)
    semantic_analysis_success: bool = True
    confidence: float = 0.0


@dataclass(frozen=True)
class MaintenanceAssessment:
    category: str
    audit_category: str
    confidence: float
    matched_keywords: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RecordSource:
    ocr_extracted: bool = True
    confidence: float = 0.0


@dataclass(frozen=True)
class ValidatedRecord:
    """A record that passed the no-fabrication checks and may be persisted."""

    fingerprint: str
    record_family: RecordFamily
    vendor_name: str
    total_amount: float
    currency: str
    invoice_date: str | None = None
    invoice_number: str | None = None
    work_order_number: str | None = None
    breakdown: FinancialBreakdown = field(default_factory=FinancialBreakdown)
    parts: list[PartLine] = field(default_factory=list)
    technical: TechnicalMetadata = field(default_factory=TechnicalMetadata)
    source: RecordSource = field(default_factory=RecordSource)
    flags: list[str] = field(default_factory=list)
    maintenance: MaintenanceAssessment | None = None

    def review_payload(self) -> dict[str, Any]:
        return {
            "flags": list(self.flags),
            "confidence": self.source.confidence,
        }
