"""
Invoice domain entities with Pydantic v2 validation.

Records are frozen: the normalizer builds them once and every later
change (status workflow) produces a new copy.  Required text fields hold
the ``NOT_AVAILABLE`` sentinel instead of None when the source document
does not carry them.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"


class InvoiceStatus(str, Enum):
    """Approval workflow status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class BusinessRegistration(_Record):
    """Company register entry (IscrizioneREA) of the seller."""

    office: str | None = None
    registration_number: str | None = None
    share_capital: str | None = None
    sole_shareholder: str | None = None
    liquidation_status: str | None = None


class Party(_Record):
    """Seller (cedente) or buyer (cessionario)."""

    name: str = NOT_AVAILABLE
    tax_id: str = NOT_AVAILABLE
    fiscal_code: str | None = None
    fiscal_regime: str | None = None
    address: str = NOT_AVAILABLE
    street_number: str | None = None
    postal_code: str = NOT_AVAILABLE
    municipality: str = NOT_AVAILABLE
    province: str = NOT_AVAILABLE
    country: str | None = None

    # Seller only
    email: str | None = None
    phone: str | None = None
    business_registration: BusinessRegistration | None = None

    @property
    def full_address(self) -> str:
        if self.street_number:
            return f"{self.address} {self.street_number}"
        return self.address


class Intermediary(_Record):
    """Third party issuing the document on behalf of the seller."""

    name: str | None = None
    tax_id: str | None = None
    fiscal_code: str | None = None


class LineItem(_Record):
    """
    Billed good or service row.

    Monetary and quantity fields hold already-formatted strings.
    """

    line_number: str | None = None
    article_code: str | None = None
    description: str = NOT_AVAILABLE
    quantity: str = NOT_AVAILABLE
    unit_of_measure: str | None = None
    unit_price: str = NOT_AVAILABLE
    discount_or_surcharge: str | None = None
    vat_rate: str | None = None
    line_total: str = NOT_AVAILABLE


class PaymentInstallment(_Record):
    """One scheduled payment tranche (DettaglioPagamento)."""

    payment_method_code: str = NOT_AVAILABLE
    payment_method_description: str = NOT_AVAILABLE
    reference_date: str | None = None
    term_days: str | None = None
    due_date: str | None = None
    amount: str | None = None
    beneficiary: str | None = None
    iban: str | None = None
    bic: str | None = None


class Invoice(_Record):
    """
    Canonical invoice record.

    ``id`` is assigned by storage; the normalizer always leaves it unset.
    ``date`` is kept as the source string (ISO-like, compared lexically).
    """

    id: int | None = None
    status: InvoiceStatus = InvoiceStatus.PENDING
    note: str = ""
    approver: str = ""

    # Document header
    number: str = NOT_AVAILABLE
    date: str = NOT_AVAILABLE
    document_type: str = NOT_AVAILABLE
    currency: str | None = None
    tax_regime_article: str = NOT_AVAILABLE
    reason_text: str = NOT_AVAILABLE
    recipient_code: str = NOT_AVAILABLE
    recipient_pec: str = NOT_AVAILABLE

    # Parties
    seller: Party = Field(default_factory=Party)
    buyer: Party = Field(default_factory=Party)

    # Lines
    line_items: tuple[LineItem, ...] = ()

    # Totals
    total: str = NOT_AVAILABLE
    taxable_amount: str = NOT_AVAILABLE
    tax_amount: str = NOT_AVAILABLE
    vat_rate: str = NOT_AVAILABLE
    vat_collection_mode: str | None = None

    # Payment
    payment_terms: str = NOT_AVAILABLE
    payment_installments: tuple[PaymentInstallment, ...] = ()

    intermediary: Intermediary | None = None
    issuer_role: str | None = None

    @property
    def has_payment_details(self) -> bool:
        return bool(self.payment_installments)

    def with_status(
        self,
        status: InvoiceStatus,
        note: str | None = None,
        approver: str | None = None,
    ) -> "Invoice":
        """Return a copy moved to *status*; note/approver kept unless given."""
        update: dict[str, object] = {"status": status}
        if note is not None:
            update["note"] = note
        if approver is not None:
            update["approver"] = approver
        return self.model_copy(update=update)

    def with_id(self, invoice_id: int) -> "Invoice":
        return self.model_copy(update={"id": invoice_id})
