"""Core interfaces (ports) implemented by the infrastructure layer."""

from efattura.core.interfaces.storage import IInvoiceStore

__all__ = ["IInvoiceStore"]
