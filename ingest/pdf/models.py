from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentMetadata:
    """Cheap document facts collected before any text is extracted."""

    page_count: int
    size_bytes: int
    has_extractable_text: bool


@dataclass(frozen=True)
class PageText:
    """Text produced for one page (or one raw window belonging to a page)."""

    page_number: int
    text: str
