"""
Update Invoice Status Use Case.

Approval workflow: pending -> approved / rejected, with optional note
and approver.
"""

from efattura.application.services import get_store
from efattura.config import get_logger
from efattura.core.entities import Invoice, InvoiceStatus
from efattura.core.exceptions import InvalidStatusError
from efattura.core.interfaces import IInvoiceStore

logger = get_logger(__name__)


def parse_status(value: str | InvoiceStatus) -> InvoiceStatus:
    """
    Coerce user input to an ``InvoiceStatus``.

    Raises:
        InvalidStatusError: If *value* is not a known status.
    """
    if isinstance(value, InvoiceStatus):
        return value
    try:
        return InvoiceStatus(value.strip().lower())
    except ValueError:
        raise InvalidStatusError(value, [s.value for s in InvoiceStatus]) from None


class UpdateInvoiceStatusUseCase:
    """Use case for approving or rejecting stored invoices."""

    def __init__(self, invoice_store: IInvoiceStore | None = None):
        self._invoice_store = invoice_store

    async def _get_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            self._invoice_store = await get_store()
        return self._invoice_store

    async def execute(
        self,
        invoice_id: int,
        status: str | InvoiceStatus,
        note: str | None = None,
        approver: str | None = None,
    ) -> Invoice:
        """
        Move the invoice to *status* and return the updated record.

        Raises:
            InvalidStatusError: If *status* is not a known status.
            InvoiceNotFoundError: If the invoice is not stored.
        """
        new_status = parse_status(status)
        store = await self._get_store()
        invoice = await store.update_status(invoice_id, new_status, note=note, approver=approver)
        logger.info(
            "update_invoice_status_complete",
            invoice_id=invoice_id,
            status=new_status.value,
            approver=approver,
        )
        return invoice
