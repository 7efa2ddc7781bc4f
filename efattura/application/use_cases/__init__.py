"""Application use cases."""

from efattura.application.use_cases.generate_invoice_pdf import GenerateInvoicePdfUseCase
from efattura.application.use_cases.ingest_invoice import IngestInvoiceUseCase, IngestResult
from efattura.application.use_cases.list_invoices import ListInvoicesUseCase
from efattura.application.use_cases.update_invoice_status import (
    UpdateInvoiceStatusUseCase,
    parse_status,
)

__all__ = [
    "IngestInvoiceUseCase",
    "IngestResult",
    "GenerateInvoicePdfUseCase",
    "UpdateInvoiceStatusUseCase",
    "ListInvoicesUseCase",
    "parse_status",
]
