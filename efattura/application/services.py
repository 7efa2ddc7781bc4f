"""
Service factory functions for dependency injection.

Wires infrastructure implementations (lxml, fpdf2, SQLite) to the core
services. Use cases import from here.
"""

from typing import TYPE_CHECKING

from efattura.core.services import (
    FieldFormatter,
    IInvoicePdfRenderer,
    InvoiceNormalizer,
    InvoicePdfService,
)

if TYPE_CHECKING:
    from efattura.core.interfaces import IInvoiceStore


_field_formatter: FieldFormatter | None = None
_invoice_normalizer: InvoiceNormalizer | None = None
_invoice_pdf_service: InvoicePdfService | None = None


def get_field_formatter() -> FieldFormatter:
    """Formatter using the configured decimal style."""
    global _field_formatter
    if _field_formatter is None:
        _field_formatter = FieldFormatter()
    return _field_formatter


def get_invoice_normalizer() -> InvoiceNormalizer:
    global _invoice_normalizer
    if _invoice_normalizer is None:
        _invoice_normalizer = InvoiceNormalizer(formatter=get_field_formatter())
    return _invoice_normalizer


def get_pdf_renderer() -> IInvoicePdfRenderer:
    # Lazy import infrastructure
    from efattura.infrastructure.pdf import Fpdf2InvoiceRenderer

    return Fpdf2InvoiceRenderer(formatter=get_field_formatter())


async def get_invoice_pdf_service(
    renderer: IInvoicePdfRenderer | None = None,
    invoice_store: "IInvoiceStore | None" = None,
) -> InvoicePdfService:
    """
    Get or create InvoicePdfService instance.

    Overrides bypass the singleton, so tests can inject mocks.

    Args:
        renderer: Optional PDF renderer override
        invoice_store: Optional invoice store override

    Returns:
        Configured InvoicePdfService
    """
    global _invoice_pdf_service

    if _invoice_pdf_service is not None and renderer is None and invoice_store is None:
        return _invoice_pdf_service

    from efattura.infrastructure.storage import get_invoice_store

    service = InvoicePdfService(
        renderer=renderer or get_pdf_renderer(),
        invoice_store=invoice_store or await get_invoice_store(),
    )

    if renderer is None and invoice_store is None:
        _invoice_pdf_service = service

    return service


async def get_store() -> "IInvoiceStore":
    from efattura.infrastructure.storage import get_invoice_store

    return await get_invoice_store()


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _field_formatter
    global _invoice_normalizer
    global _invoice_pdf_service

    _field_formatter = None
    _invoice_normalizer = None
    _invoice_pdf_service = None
