"""List Invoices Use Case."""

from efattura.application.services import get_store
from efattura.application.use_cases.update_invoice_status import parse_status
from efattura.core.entities import Invoice, InvoiceStatus
from efattura.core.interfaces import IInvoiceStore


class ListInvoicesUseCase:
    """Lists stored invoices, newest first, optionally filtered by status."""

    def __init__(self, invoice_store: IInvoiceStore | None = None):
        self._invoice_store = invoice_store

    async def _get_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            self._invoice_store = await get_store()
        return self._invoice_store

    async def execute(
        self,
        status: str | InvoiceStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        store = await self._get_store()
        if status is None:
            return await store.list_invoices(limit=limit, offset=offset)
        return await store.list_by_status(parse_status(status))
