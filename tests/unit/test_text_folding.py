from ingest.text.folding import fold
from ingest.text.placeholders import is_placeholder_text, is_placeholder_vendor


class TestFold:
    def test_lowercases_and_strips_accents(self) -> None:
        assert fold("Matrícula XA-ÁBC") == "matricula xa-abc"

    def test_collapses_whitespace(self) -> None:
        assert fold("  Total \t a   pagar \n") == "total a pagar"

    def test_empty_input(self) -> None:
        assert fold("") == ""


class TestPlaceholderText:
    def test_none_is_placeholder(self) -> None:
        assert is_placeholder_text(None)

    def test_null_tokens(self) -> None:
        for value in ("", "  ", "N/A", "null", "Unknown", "No disponible"):
            assert is_placeholder_text(value), value

    def test_real_value(self) -> None:
        assert not is_placeholder_text("INV-1001")


class TestPlaceholderVendor:
    def test_unknown_vendor(self) -> None:
        assert is_placeholder_vendor("Unknown Vendor")

    def test_extracted_from_filename(self) -> None:
        assert is_placeholder_vendor("Extracted from invoice_march.pdf")

    def test_ocr_failed_marker(self) -> None:
        assert is_placeholder_vendor("Acme (OCR failed)")

    def test_empty_vendor(self) -> None:
        assert is_placeholder_vendor("")
        assert is_placeholder_vendor(None)

    def test_real_vendor(self) -> None:
        assert not is_placeholder_vendor("Acme Air Services")

    def test_spanish_vendor_with_accents(self) -> None:
        assert not is_placeholder_vendor("Aviación del Pacífico S.A. de C.V.")
