"""
Domain exceptions for the efattura application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class EFatturaError(Exception):
    """Base exception for all efattura errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Parser Exceptions
class ParserError(EFatturaError):
    """Base exception for parsing operations."""

    pass


class ExtractionError(ParserError):
    """A structural section of the invoice tree is missing.

    Fatal for the whole document: no partial Invoice is produced.
    """

    def __init__(self, section: str):
        super().__init__(
            f"Invoice extraction failed: missing {section}",
            code="EXTRACTION_ERROR",
            details={"section": section},
        )
        self.section = section


class XmlParseError(ParserError):
    """Raw XML could not be turned into a tree."""

    def __init__(self, reason: str, source: str | None = None):
        super().__init__(
            f"Invalid XML document: {reason}",
            code="XML_PARSE_ERROR",
            details={"reason": reason, "source": source},
        )


class FormatWarning(EFatturaError):
    """A numeric field could not be parsed.

    Never escapes the formatter: it is caught, logged and the field
    resolves to the sentinel value.
    """

    def __init__(self, value: Any):
        super().__init__(
            f"Value is not a number: {str(value)[:50]!r}",
            code="FORMAT_WARNING",
            details={"value": str(value)[:100] if value is not None else None},
        )


# Storage Exceptions
class StorageError(EFatturaError):
    """Base exception for storage operations."""

    pass


class InvoiceNotFoundError(StorageError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: int):
        super().__init__(
            f"Invoice not found: {invoice_id}",
            code="INVOICE_NOT_FOUND",
            details={"invoice_id": invoice_id},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Validation Exceptions
class ValidationError(EFatturaError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


class InvalidStatusError(ValidationError):
    """Requested workflow status is not one of the known states."""

    def __init__(self, status: str, allowed: list[str]):
        super().__init__(
            field="status",
            message=f"Invalid status '{status}'. Allowed: {', '.join(allowed)}",
            value=status,
        )
        self.details.update({"allowed": allowed})
