"""
Invoice PDF generation service.

Pure service that loads a stored invoice and delegates rendering to an
injected IInvoicePdfRenderer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from efattura.config import get_logger
from efattura.core.entities.invoice import Invoice
from efattura.core.exceptions import InvoiceNotFoundError
from efattura.core.interfaces.storage import IInvoiceStore

logger = get_logger(__name__)


class IInvoicePdfRenderer(ABC):
    """Interface for PDF rendering implementations."""

    @abstractmethod
    def render(self, invoice: Invoice) -> bytes:
        """Render an invoice into PDF bytes."""
        pass


@dataclass
class InvoicePdfResult:
    """Result of invoice PDF generation."""

    pdf_bytes: bytes
    invoice_id: int
    file_name: str
    file_size: int


class InvoicePdfService:
    """
    Service for generating printable PDFs of stored invoices.

    Loads the record from the store, delegates rendering to
    IInvoicePdfRenderer and returns the generated bytes.
    """

    def __init__(
        self,
        renderer: IInvoicePdfRenderer,
        invoice_store: IInvoiceStore,
    ):
        self._renderer = renderer
        self._invoice_store = invoice_store

    async def generate_pdf(self, invoice_id: int) -> InvoicePdfResult:
        """
        Generate the PDF for the given invoice.

        Raises:
            InvoiceNotFoundError: If the invoice is not stored.
        """
        invoice = await self._invoice_store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        logger.info("generating_invoice_pdf", invoice_id=invoice_id)
        pdf_bytes = self.render(invoice)

        return InvoicePdfResult(
            pdf_bytes=pdf_bytes,
            invoice_id=invoice_id,
            file_name=pdf_file_name(invoice),
            file_size=len(pdf_bytes),
        )

    def render(self, invoice: Invoice) -> bytes:
        """Render an in-memory invoice without touching storage."""
        pdf_bytes = self._renderer.render(invoice)
        logger.info(
            "invoice_pdf_rendered",
            invoice_id=invoice.id,
            number=invoice.number,
            size_bytes=len(pdf_bytes),
        )
        return pdf_bytes


def pdf_file_name(invoice: Invoice) -> str:
    """File name for the printable copy, e.g. ``fattura-12-2024-001.pdf``."""
    number = "".join(c if c.isalnum() or c in "-_" else "-" for c in invoice.number)
    if invoice.id is not None:
        return f"fattura-{invoice.id}-{number}.pdf"
    return f"fattura-{number}.pdf"
