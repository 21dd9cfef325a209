"""Extraction field definitions, JSON schema building and value coercion."""

import math
import re
from datetime import date, datetime
from typing import Any

from ingest.text.placeholders import is_placeholder_text

MONEY_FIELDS: tuple[str, ...] = (
    "total_amount",
    "subtotal",
    "tax_amount",
    "labor_total",
    "parts_total",
    "services_total",
    "freight_total",
)
TEXT_FIELDS: tuple[str, ...] = (
    "vendor_name",
    "invoice_number",
    "work_order_number",
    "aircraft_registration",
    "serial_number",
    "technician_name",
    "compliance_reference",
    "work_description",
)
DATE_FIELDS: tuple[str, ...] = ("invoice_date",)
CURRENCY_FIELD = "currency"
PARTS_FIELD = "parts"

ALL_FIELDS: tuple[str, ...] = (
    "vendor_name",
    "total_amount",
    "currency",
    "invoice_date",
    "invoice_number",
    "work_order_number",
    "subtotal",
    "tax_amount",
    "labor_total",
    "parts_total",
    "services_total",
    "freight_total",
    "parts",
    "aircraft_registration",
    "serial_number",
    "technician_name",
    "compliance_reference",
    "work_description",
)

# Amounts summed across chunks instead of merged by priority.
BREAKDOWN_FIELDS: tuple[str, ...] = (
    "labor_total",
    "parts_total",
    "services_total",
    "freight_total",
)

PART_KEYS: tuple[str, ...] = (
    "part_number",
    "description",
    "quantity",
    "unit_price",
    "total_price",
)

_CURRENCY_ALIASES = {
    "$": "USD",
    "us$": "USD",
    "usd": "USD",
    "dollars": "USD",
    "€": "EUR",
    "eur": "EUR",
    "euro": "EUR",
    "euros": "EUR",
    "£": "GBP",
    "gbp": "GBP",
    "mxn": "MXN",
    "mx$": "MXN",
    "pesos": "MXN",
    "cad": "CAD",
    "c$": "CAD",
}
_ISO_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")
_NUMBER_CHARS_RE = re.compile(r"[^\d,.\-]")
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d",
)


def _nullable(json_type: str) -> dict[str, object]:
    return {"type": [json_type, "null"]}


def build_json_schema(fields: tuple[str, ...]) -> dict[str, object]:
    """Build a strict JSON schema where every requested field is nullable."""
    properties: dict[str, object] = {}
    for name in fields:
        if name in MONEY_FIELDS:
            properties[name] = _nullable("number")
        elif name == PARTS_FIELD:
            properties[name] = {
                "type": ["array", "null"],
                "items": {
                    "type": "object",
                    "properties": {
                        "part_number": _nullable("string"),
                        "description": _nullable("string"),
                        "quantity": _nullable("number"),
                        "unit_price": _nullable("number"),
                        "total_price": _nullable("number"),
                    },
                    "required": list(PART_KEYS),
                    "additionalProperties": False,
                },
            }
        else:
            properties[name] = _nullable("string")
    return {
        "type": "object",
        "properties": properties,
        "required": list(fields),
        "additionalProperties": False,
    }


def coerce_fields(data: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    """Keep requested fields only and normalise their values.

    Placeholders become None; nothing is invented for missing values.
    """
    result: dict[str, Any] = {}
    for name in fields:
        raw = data.get(name)
        if name in MONEY_FIELDS:
            result[name] = parse_amount(raw)
        elif name == CURRENCY_FIELD:
            result[name] = normalize_currency(raw)
        elif name in DATE_FIELDS:
            result[name] = normalize_date(raw)
        elif name == PARTS_FIELD:
            result[name] = _coerce_parts(raw)
        else:
            result[name] = _clean_text(raw)
    return result


def parse_amount(value: Any) -> float | None:
    """Parse '$1,250.00', '1.250,00', '1.5e3' or 1250 into a float.

    NaN and infinite amounts are treated as missing.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return _finite(float(value))
        except OverflowError:
            return None
    if not isinstance(value, str) or is_placeholder_text(value):
        return None
    try:
        return _finite(float(value.strip()))
    except ValueError:
        pass
    cleaned = _NUMBER_CHARS_RE.sub("", value)
    if not cleaned or not any(char.isdigit() for char in cleaned):
        return None
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        head, _, tail = cleaned.rpartition(",")
        if len(tail) == 2 and "," not in head:
            cleaned = f"{head}.{tail}"
        else:
            cleaned = cleaned.replace(",", "")
    try:
        return _finite(float(cleaned))
    except ValueError:
        return None


def _finite(number: float) -> float | None:
    return number if math.isfinite(number) else None


def normalize_currency(value: Any) -> str | None:
    if not isinstance(value, str) or is_placeholder_text(value):
        return None
    token = value.strip().lower()
    if token in _CURRENCY_ALIASES:
        return _CURRENCY_ALIASES[token]
    if _ISO_CURRENCY_RE.match(token):
        return token.upper()
    return None


def normalize_date(value: Any) -> str | None:
    """Return an ISO date string, or None when the value cannot be parsed."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    if not isinstance(value, str) or is_placeholder_text(value):
        return None
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def _clean_text(value: Any) -> str | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or is_placeholder_text(value):
        return None
    return value.strip()


def _coerce_parts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    parts: list[dict[str, Any]] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        part = {
            "part_number": _clean_text(item.get("part_number")),
            "description": _clean_text(item.get("description")),
            "quantity": parse_amount(item.get("quantity")),
            "unit_price": parse_amount(item.get("unit_price")),
            "total_price": parse_amount(item.get("total_price")),
        }
        if part["part_number"] is None and part["description"] is None:
            continue
        parts.append(part)
    return parts
