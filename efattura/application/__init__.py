"""
Application layer - use cases and service factories.

Use cases are the only entry point for the command-line interface.
"""

from efattura.application.services import (
    get_field_formatter,
    get_invoice_normalizer,
    get_invoice_pdf_service,
    get_pdf_renderer,
    reset_services,
)
from efattura.application.use_cases import (
    GenerateInvoicePdfUseCase,
    IngestInvoiceUseCase,
    IngestResult,
    ListInvoicesUseCase,
    UpdateInvoiceStatusUseCase,
)

__all__ = [
    "get_field_formatter",
    "get_invoice_normalizer",
    "get_invoice_pdf_service",
    "get_pdf_renderer",
    "reset_services",
    "IngestInvoiceUseCase",
    "IngestResult",
    "GenerateInvoicePdfUseCase",
    "UpdateInvoiceStatusUseCase",
    "ListInvoicesUseCase",
]
