"""Core services."""

from efattura.core.services.field_formatter import FieldFormatter
from efattura.core.services.invoice_normalizer import InvoiceNormalizer
from efattura.core.services.invoice_pdf_service import (
    IInvoicePdfRenderer,
    InvoicePdfResult,
    InvoicePdfService,
)

__all__ = [
    "FieldFormatter",
    "InvoiceNormalizer",
    "IInvoicePdfRenderer",
    "InvoicePdfResult",
    "InvoicePdfService",
]
