"""SQLite storage implementations."""

from efattura.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from efattura.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore

_invoice_store: SQLiteInvoiceStore | None = None


async def get_invoice_store() -> SQLiteInvoiceStore:
    """Get singleton invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLiteInvoiceStore()
    return _invoice_store


__all__ = [
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "SQLiteInvoiceStore",
    "get_invoice_store",
]
