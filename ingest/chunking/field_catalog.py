"""Which fields each section type is asked for, and how."""

from ingest.extraction.fields import ALL_FIELDS
from ingest.structure.models import SectionType

SECTION_FIELDS: dict[SectionType, tuple[str, ...]] = {
    SectionType.HEADER: (
        "vendor_name",
        "invoice_number",
        "invoice_date",
        "aircraft_registration",
    ),
    SectionType.FINANCIAL_SUMMARY: (
        "total_amount",
        "currency",
        "subtotal",
        "tax_amount",
        "vendor_name",
        "invoice_date",
    ),
    SectionType.TOTALS: (
        "labor_total",
        "parts_total",
        "services_total",
        "freight_total",
        "subtotal",
        "tax_amount",
        "total_amount",
        "currency",
    ),
    SectionType.LINE_ITEMS: (
        "parts",
        "work_description",
    ),
    SectionType.METADATA: (
        "invoice_number",
        "invoice_date",
        "work_order_number",
        "aircraft_registration",
        "serial_number",
        "technician_name",
        "compliance_reference",
        "vendor_name",
    ),
    SectionType.OTHER: (
        "work_description",
        "vendor_name",
    ),
}

SECTION_INSTRUCTIONS: dict[SectionType, str] = {
    SectionType.HEADER: (
        "This is the invoice header. Identify the issuing vendor, the invoice "
        "number and date, and any aircraft registration mentioned."
    ),
    SectionType.FINANCIAL_SUMMARY: (
        "This is the financial summary. Report the final amount payable and its "
        "currency exactly as printed."
    ),
    SectionType.TOTALS: (
        "This block lists subtotals. Report each category total only if it is "
        "printed; do not compute missing ones."
    ),
    SectionType.LINE_ITEMS: (
        "These are line items. List every part with its number, description, "
        "quantity and prices, and summarise the work performed."
    ),
    SectionType.METADATA: (
        "This block holds reference data. Report identifiers such as work order, "
        "serial number, technician and compliance references."
    ),
    SectionType.OTHER: (
        "This text has no recognised structure. Report only values that are "
        "stated explicitly."
    ),
}

DIRECT_INSTRUCTIONS = (
    "This is the complete invoice. Report every requested field that is printed "
    "on it, using null for anything that is not."
)


def fields_for(section_type: SectionType, *, direct: bool) -> tuple[str, ...]:
    if direct:
        return ALL_FIELDS
    return SECTION_FIELDS[section_type]


def instructions_for(section_type: SectionType, *, direct: bool) -> str:
    if direct:
        return DIRECT_INSTRUCTIONS
    return SECTION_INSTRUCTIONS[section_type]
