"""Detection of placeholder values that must never be stored as real data."""

import re

from ingest.text.folding import fold

NULL_TOKENS = frozenset(
    {
        "",
        "null",
        "none",
        "nil",
        "n/a",
        "na",
        "-",
        "--",
        "?",
        "unknown",
        "undefined",
        "not found",
        "not available",
        "not specified",
        "no disponible",
        "desconocido",
        "sin datos",
    }
)

PLACEHOLDER_VENDORS = frozenset(
    {
        "unknown vendor",
        "vendor",
        "vendor name",
        "proveedor",
        "proveedor desconocido",
        "sample vendor",
        "test vendor",
    }
)

_EXTRACTED_FROM_RE = re.compile(r"^extracted from\b")
_OCR_FAILED_MARKER = "(ocr failed)"


def is_placeholder_text(value: str | None) -> bool:
    """True for empty or generic null-ish strings."""
    if value is None:
        return True
    return fold(value) in NULL_TOKENS


def is_placeholder_vendor(vendor: str | None) -> bool:
    """True for vendor names that only stand in for a missing value.

    Covers generic null tokens, 'Unknown Vendor', 'Extracted from <file>'
    and any name carrying an '(OCR failed)' marker.
    """
    if is_placeholder_text(vendor):
        return True
    folded = fold(vendor or "")
    return (
        folded in PLACEHOLDER_VENDORS
        or bool(_EXTRACTED_FROM_RE.match(folded))
        or _OCR_FAILED_MARKER in folded
    )
