"""Keyword classification of maintenance work for audit reporting."""

import re

from ingest.consolidation.models import MaintenanceAssessment
from ingest.text.folding import fold

CORROSION = "Corrosion"
COMPONENT_FAILURE = "Component Failure"
SCHEDULED_INSPECTION = "Scheduled Inspection"
UNSCHEDULED_DISCREPANCY = "Unscheduled Discrepancy"

# Checked in order; the first category with a trigger keyword wins.
_TRIGGERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        CORROSION,
        ("corrosion", "corrosive", "rust", "oxidation", "pitting", "oxido", "oxidacion"),
    ),
    (
        COMPONENT_FAILURE,
        ("failure", "failed", "broken", "malfunction", "inoperative", "emergency repair",
         "falla", "averia", "roto", "inoperativo"),
    ),
    (
        SCHEDULED_INSPECTION,
        ("scheduled", "inspection", "100 hour", "annual", "progressive", "calendar",
         "routine", "periodic", "preventive", "compliance", "inspeccion",
         "mantenimiento programado", "anual", "preventivo", "rutina"),
    ),
)

# Keywords counted towards confidence once the category is known.
_CONFIDENCE_KEYWORDS: dict[str, tuple[str, ...]] = {
    CORROSION: ("corrosion", "corrosive", "rust", "oxidation", "pitting", "oxidacion"),
    COMPONENT_FAILURE: ("failure", "failed", "broken", "malfunction", "inoperative",
                        "emergency", "falla", "averia"),
    SCHEDULED_INSPECTION: ("scheduled", "inspection", "annual", "progressive", "routine",
                           "preventive", "compliance", "inspeccion"),
    UNSCHEDULED_DISCREPANCY: ("unscheduled", "discrepancy", "unexpected", "ad hoc",
                              "troubleshooting", "discrepancia", "no programado"),
}

AUDIT_CATEGORIES: dict[str, str] = {
    CORROSION: "STRUCTURAL_INTEGRITY",
    COMPONENT_FAILURE: "SAFETY_CRITICAL",
    SCHEDULED_INSPECTION: "REGULATORY_COMPLIANCE",
    UNSCHEDULED_DISCREPANCY: "OPERATIONAL_ISSUE",
}


def _mentions(folded: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", folded) is not None


def classify_maintenance(description: str | None) -> MaintenanceAssessment | None:
    """Classify a work description, or return None when there is nothing to read."""
    folded = fold(description or "")
    if not folded:
        return None

    category = UNSCHEDULED_DISCREPANCY
    for candidate, keywords in _TRIGGERS:
        if any(_mentions(folded, keyword) for keyword in keywords):
            category = candidate
            break

    matched = [kw for kw in _CONFIDENCE_KEYWORDS[category] if _mentions(folded, kw)]
    if len(matched) >= 3:
        confidence = 0.95
    elif len(matched) == 2:
        confidence = 0.85
    elif len(matched) == 1:
        confidence = 0.75
    else:
        confidence = 0.5

    return MaintenanceAssessment(
        category=category,
        audit_category=AUDIT_CATEGORIES[category],
        confidence=confidence,
        matched_keywords=matched,
    )
