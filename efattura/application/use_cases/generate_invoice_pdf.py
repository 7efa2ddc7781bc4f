"""
Generate Invoice PDF Use Case.

Renders the courtesy copy of a stored invoice.
"""

from efattura.application.services import get_invoice_pdf_service
from efattura.config import get_logger
from efattura.core.entities import Invoice
from efattura.core.services import InvoicePdfResult, InvoicePdfService

logger = get_logger(__name__)


class GenerateInvoicePdfUseCase:
    """
    Use case for generating invoice PDFs.

    Flow:
    1. Load the stored invoice
    2. Render PDF via InvoicePdfService
    3. Return PDF bytes and metadata
    """

    def __init__(
        self,
        pdf_service: InvoicePdfService | None = None,
    ):
        self._pdf_service = pdf_service

    async def _get_pdf_service(self) -> InvoicePdfService:
        if self._pdf_service is None:
            self._pdf_service = await get_invoice_pdf_service()
        return self._pdf_service

    async def execute(self, invoice_id: int) -> InvoicePdfResult:
        """
        Generate the PDF for the given invoice.

        Raises:
            InvoiceNotFoundError: If the invoice is not stored.
        """
        logger.info("generate_invoice_pdf_started", invoice_id=invoice_id)
        service = await self._get_pdf_service()
        result = await service.generate_pdf(invoice_id)
        logger.info(
            "generate_invoice_pdf_complete",
            invoice_id=invoice_id,
            file_size=result.file_size,
        )
        return result

    async def render(self, invoice: Invoice) -> bytes:
        """Render an invoice that was never stored."""
        service = await self._get_pdf_service()
        return service.render(invoice)
