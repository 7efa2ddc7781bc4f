"""Unit tests for domain exceptions."""

import pytest

from efattura.core.exceptions import (
    DatabaseError,
    EFatturaError,
    ExtractionError,
    FormatWarning,
    InvalidStatusError,
    InvoiceNotFoundError,
    ParserError,
    StorageError,
    ValidationError,
    XmlParseError,
)


class TestEFatturaError:
    """Tests for base EFatturaError exception."""

    def test_basic_initialization(self):
        error = EFatturaError("Something failed")
        assert error.message == "Something failed"
        assert error.code == "EFatturaError"
        assert error.details == {}
        assert str(error) == "Something failed"

    def test_to_dict(self):
        error = EFatturaError("Boom", code="BOOM", details={"k": "v"})
        assert error.to_dict() == {"error": "BOOM", "message": "Boom", "details": {"k": "v"}}


class TestParserErrors:
    def test_extraction_error_names_section(self):
        error = ExtractionError("header")
        assert isinstance(error, ParserError)
        assert error.section == "header"
        assert error.code == "EXTRACTION_ERROR"
        assert "header" in error.message

    def test_xml_parse_error(self):
        error = XmlParseError("unclosed tag", source="a.xml")
        assert error.code == "XML_PARSE_ERROR"
        assert error.details == {"reason": "unclosed tag", "source": "a.xml"}


class TestFormatWarning:
    def test_value_is_kept_in_details(self):
        warning = FormatWarning("abc")
        assert warning.code == "FORMAT_WARNING"
        assert warning.details["value"] == "abc"

    def test_none_value(self):
        assert FormatWarning(None).details["value"] is None


class TestStorageErrors:
    def test_invoice_not_found(self):
        error = InvoiceNotFoundError(12)
        assert isinstance(error, StorageError)
        assert error.details["invoice_id"] == 12

    def test_database_error(self):
        error = DatabaseError("store_invoice", "disk full")
        assert "store_invoice" in error.message
        assert error.details["error"] == "disk full"


class TestValidationErrors:
    def test_invalid_status_lists_allowed(self):
        error = InvalidStatusError("archived", ["pending", "approved", "rejected"])
        assert isinstance(error, ValidationError)
        assert error.details["field"] == "status"
        assert error.details["allowed"] == ["pending", "approved", "rejected"]

    def test_catchable_as_base(self):
        with pytest.raises(EFatturaError):
            raise InvalidStatusError("x", ["pending"])
