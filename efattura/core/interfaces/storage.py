"""
Storage interfaces for invoice persistence.

The core never talks to a database directly; implementations live in
the infrastructure layer.
"""

from abc import ABC, abstractmethod

from efattura.core.entities.invoice import Invoice, InvoiceStatus


class IInvoiceStore(ABC):
    """
    Abstract interface for invoice storage.

    Identifiers are assigned by the store.
    """

    @abstractmethod
    async def store(self, invoice: Invoice) -> int:
        """Persist a new invoice and return its identifier."""
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        """Get invoice by ID."""
        pass

    @abstractmethod
    async def list_invoices(
        self,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        """List invoices, newest first."""
        pass

    @abstractmethod
    async def list_by_status(self, status: InvoiceStatus) -> list[Invoice]:
        """List invoices in a workflow status, newest first."""
        pass

    @abstractmethod
    async def update_status(
        self,
        invoice_id: int,
        status: InvoiceStatus,
        note: str | None = None,
        approver: str | None = None,
    ) -> Invoice:
        """Move an invoice to *status* and return the updated record."""
        pass
