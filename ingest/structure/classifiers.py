"""Line classifiers used to segment invoice text into typed sections.

Patterns run against folded text (see ingest.text.folding) and cover English
and Spanish invoices. Order matters: the first classifier that matches wins.
"""

import re
from dataclasses import dataclass

from ingest.structure.models import SectionType

HEADER_LINE_LIMIT = 8

_AMOUNT = r"(usd|mxn|eur|us\$|[$€£])?\s*-?\d[\d,. ]*"

# Tail numbers (N123AB, XA-ABC, C-GABC) are matched on the original casing.
_REGISTRATION_RE = re.compile(r"\b(?:N\d{1,5}[A-Z]{0,2}|[A-Z]{1,2}-[A-Z0-9]{3,5})\b")


@dataclass(frozen=True)
class LineClassifier:
    section_type: SectionType
    base_confidence: float
    patterns: tuple[re.Pattern[str], ...]

    def matches(self, folded: str) -> bool:
        return any(pattern.search(folded) for pattern in self.patterns)


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern) for pattern in patterns)


FINANCIAL_SUMMARY = LineClassifier(
    section_type=SectionType.FINANCIAL_SUMMARY,
    base_confidence=0.85,
    patterns=_compile(
        r"\b(grand total|total due|amount due|balance due|total amount|invoice total"
        r"|amount payable|total to pay)\b",
        r"\b(total a pagar|importe total|monto total|total general|saldo a pagar)\b",
        rf"^total\s*[:=]?\s*{_AMOUNT}",
    ),
)

TOTALS = LineClassifier(
    section_type=SectionType.TOTALS,
    base_confidence=0.8,
    patterns=_compile(
        r"\b(sub-?total|sales tax|tax|vat|discount)\b",
        r"\b(labor|labour|parts|materials|services|freight|shipping)\s+(total|subtotal|charges?)\b",
        r"\btotal\s+(labor|labour|parts|materials|services|freight|shipping)\b",
        r"\b(iva|impuestos?|flete|envio|mano de obra total|total mano de obra"
        r"|total refacciones|total partes)\b",
    ),
)

LINE_ITEMS = LineClassifier(
    section_type=SectionType.LINE_ITEMS,
    base_confidence=0.7,
    patterns=_compile(
        r"\b(qty|quantity|part (no|number|#)|p/n|unit price|each|ext(ended)? price)(?!\w)",
        r"\b(hrs|hours|rate|labor|labour)\b.*\d",
        r"\b(cantidad|descripcion|precio unitario|numero de parte|horas|pieza|refaccion)\b",
        rf"^\d+(\.\d+)?\s+\S.*\s{_AMOUNT}$",
    ),
)

METADATA = LineClassifier(
    section_type=SectionType.METADATA,
    base_confidence=0.75,
    patterns=_compile(
        r"\b(invoice (no|number|#|date)|inv #|work order|w/o|wo #|po (no|number|#)"
        r"|purchase order|due date|date|terms)(?!\w)",
        r"\b(registration|tail (no|number)|serial (no|number)|s/n|technician|mechanic"
        r"|inspector|certificate|far\s*\d+|part 43|logbook)\b",
        r"\b(factura|fecha|orden de trabajo|matricula|numero de serie|tecnico|folio)\b",
    ),
)

HEADER = LineClassifier(
    section_type=SectionType.HEADER,
    base_confidence=0.65,
    patterns=_compile(
        r"\b(invoice|factura|inc|llc|ltd|corp|s\.?a\.? de c\.?v|gmbh)\b",
        r"\b(aviation|aero|aircraft|air|avionics|services|maintenance|hangar|mro)\b",
        r"\b(phone|tel|fax|email|www|street|avenue|ave|suite|blvd|calle|colonia)\b",
        r"@",
    ),
)

CLASSIFIERS: tuple[LineClassifier, ...] = (
    FINANCIAL_SUMMARY,
    TOTALS,
    LINE_ITEMS,
    METADATA,
    HEADER,
)

BASE_CONFIDENCE: dict[SectionType, float] = {
    classifier.section_type: classifier.base_confidence for classifier in CLASSIFIERS
}
OTHER_CONFIDENCE = 0.3


def classify_line(
    line: str,
    folded: str,
    *,
    page_number: int,
    line_index: int,
) -> SectionType | None:
    """Return the section type a line belongs to, or None if untyped.

    ``line_index`` is the position among non-empty lines of the page.
    """
    for classifier in CLASSIFIERS:
        if classifier.section_type is SectionType.HEADER:
            if page_number != 1 or line_index >= HEADER_LINE_LIMIT:
                continue
        if classifier.matches(folded):
            return classifier.section_type
    if _REGISTRATION_RE.search(line):
        return SectionType.METADATA
    return None


def section_confidence(section_type: SectionType, matched: int, total: int) -> float:
    """Heuristic confidence: pattern specificity diluted by match density."""
    if section_type is SectionType.OTHER or matched == 0 or total == 0:
        return OTHER_CONFIDENCE
    base = min(0.95, BASE_CONFIDENCE[section_type] + 0.05 * (matched - 1))
    density = 0.6 + 0.4 * (matched / total)
    return round(base * density, 4)
