"""Core domain entities."""

from efattura.core.entities.invoice import (
    NOT_AVAILABLE,
    BusinessRegistration,
    Intermediary,
    Invoice,
    InvoiceStatus,
    LineItem,
    Party,
    PaymentInstallment,
)
from efattura.core.entities.xml_node import Element, Node, Scalar

__all__ = [
    # Invoice entities
    "NOT_AVAILABLE",
    "Invoice",
    "InvoiceStatus",
    "Party",
    "BusinessRegistration",
    "Intermediary",
    "LineItem",
    "PaymentInstallment",
    # XML tree
    "Element",
    "Node",
    "Scalar",
]
