"""
Invoice normalizer.

Turns the array-preserving tree of a FatturaPA document into a canonical
``Invoice`` record.  Only three structural problems are fatal (missing
root, header or body); any other missing field degrades to the
``NOT_AVAILABLE`` sentinel for required fields or ``None`` for optional
ones, so a record is always complete.
"""

from collections.abc import Mapping
from typing import Any

from efattura.config import get_logger
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
from efattura.core.entities.xml_node import (
    Element,
    Node,
    child,
    descend,
    extract_all,
    first_present,
    safe_extract,
)
from efattura.core.exceptions import ExtractionError
from efattura.core.services.field_formatter import FieldFormatter

logger = get_logger(__name__)

ROOT_MARKER = "FatturaElettronica"
HEADER_TAGS = ("FatturaElettronicaHeader", "p:FatturaElettronicaHeader")
BODY_TAGS = ("FatturaElettronicaBody", "p:FatturaElettronicaBody")


def _text(node: Node | None, *path: str) -> str:
    """Required field: sentinel when absent."""
    return safe_extract(descend(node, *path), NOT_AVAILABLE)


def _optional(node: Node | None, *path: str) -> str | None:
    """Optional field: None when absent."""
    return safe_extract(descend(node, *path), None)


class InvoiceNormalizer:
    """
    Extracts an ``Invoice`` from a parsed FatturaPA tree.

    Stateless apart from the injected formatter; a single instance can
    normalize any number of documents.
    """

    def __init__(self, formatter: FieldFormatter | None = None) -> None:
        self._formatter = formatter or FieldFormatter()

    def normalize(self, tree: Element | Mapping[str, Any]) -> Invoice:
        """
        Build the canonical record for one document.

        Args:
            tree: Typed tree, or a generic ``{tag: [children]}`` mapping.

        Returns:
            Invoice with ``id`` unset and status ``pending``.

        Raises:
            ExtractionError: If root, header or body is missing.
        """
        if not isinstance(tree, Element):
            tree = Element.from_mapping(tree)

        root_key = next((k for k in tree.tags() if ROOT_MARKER in k), None)
        if root_key is None:
            raise ExtractionError("root")
        root = child(tree, root_key)

        header = first_present(root, *HEADER_TAGS)
        body = first_present(root, *BODY_TAGS)
        if header is None:
            raise ExtractionError("header")
        if body is None:
            raise ExtractionError("body")

        general = child(body, "DatiGenerali", "DatiGeneraliDocumento")
        goods = child(body, "DatiBeniServizi")
        summary = child(goods, "DatiRiepilogo")
        payment = child(body, "DatiPagamento")

        # Resolved once so every amount in the document shares it
        currency = _optional(general, "Divisa")

        invoice = Invoice(
            status=InvoiceStatus.PENDING,
            number=_text(general, "Numero"),
            date=_text(general, "Data"),
            document_type=_text(general, "TipoDocumento"),
            currency=currency,
            tax_regime_article=_text(general, "Art73"),
            reason_text=self._reason_text(general),
            recipient_code=_text(header, "DatiTrasmissione", "CodiceDestinatario"),
            recipient_pec=_text(header, "DatiTrasmissione", "PECDestinatario"),
            seller=self._seller(child(header, "CedentePrestatore")),
            buyer=self._party(child(header, "CessionarioCommittente")),
            line_items=tuple(
                self._line_item(line, currency)
                for line in descend(goods, "DettaglioLinee")
            ),
            total=self._formatter.format_currency(
                self._document_total(general, summary), currency
            ),
            taxable_amount=self._formatter.format_currency(
                _text(summary, "ImponibileImporto"), currency
            ),
            tax_amount=self._formatter.format_currency(
                _text(summary, "Imposta"), currency
            ),
            vat_rate=self._formatter.format_amount(_text(summary, "AliquotaIVA")),
            vat_collection_mode=_optional(summary, "EsigibilitaIVA"),
            payment_terms=_text(payment, "CondizioniPagamento"),
            payment_installments=tuple(
                self._installment(detail, currency)
                for detail in descend(payment, "DettaglioPagamento")
            ),
            intermediary=self._intermediary(
                child(header, "TerzoIntermediarioOSoggettoEmittente", "DatiAnagrafici")
            ),
            issuer_role=_optional(header, "SoggettoEmittente"),
        )

        logger.debug(
            "invoice_normalized",
            number=invoice.number,
            lines=len(invoice.line_items),
            installments=len(invoice.payment_installments),
        )
        return invoice

    # ------------------------------------------------------------------
    # Header fields
    # ------------------------------------------------------------------

    @staticmethod
    def _reason_text(general: Node | None) -> str:
        # Causale is split in 200-character chunks when long
        chunks = extract_all(descend(general, "Causale"))
        return " ".join(chunks) if chunks else NOT_AVAILABLE

    @staticmethod
    def _document_total(general: Node | None, summary: Node | None) -> str:
        total = _optional(general, "ImportoTotaleDocumento")
        if total is None:
            total = _optional(summary, "ImportoTotaleDocumento")
        return total if total is not None else NOT_AVAILABLE

    # ------------------------------------------------------------------
    # Parties
    # ------------------------------------------------------------------

    @staticmethod
    def _name(registry: Node | None) -> str:
        name = _optional(registry, "Anagrafica", "Denominazione")
        if name is not None:
            return name
        # Natural person: Nome + Cognome
        parts = [
            p
            for p in (
                _optional(registry, "Anagrafica", "Nome"),
                _optional(registry, "Anagrafica", "Cognome"),
            )
            if p
        ]
        return " ".join(parts) if parts else NOT_AVAILABLE

    def _party(self, party: Node | None, **extra: Any) -> Party:
        registry = child(party, "DatiAnagrafici")
        office = child(party, "Sede")
        return Party(
            name=self._name(registry),
            tax_id=_text(registry, "IdFiscaleIVA", "IdCodice"),
            fiscal_code=_optional(registry, "CodiceFiscale"),
            address=_text(office, "Indirizzo"),
            street_number=_optional(office, "NumeroCivico"),
            postal_code=_text(office, "CAP"),
            municipality=_text(office, "Comune"),
            province=_text(office, "Provincia"),
            country=_optional(office, "Nazione"),
            **extra,
        )

    def _seller(self, seller: Node | None) -> Party:
        return self._party(
            seller,
            fiscal_regime=_optional(seller, "DatiAnagrafici", "RegimeFiscale"),
            email=_optional(seller, "Contatti", "Email"),
            phone=_optional(seller, "Contatti", "Telefono"),
            business_registration=self._business_registration(
                child(seller, "IscrizioneREA")
            ),
        )

    @staticmethod
    def _business_registration(rea: Node | None) -> BusinessRegistration | None:
        if rea is None:
            return None
        fields = {
            "office": _optional(rea, "Ufficio"),
            "registration_number": _optional(rea, "NumeroREA"),
            "share_capital": _optional(rea, "CapitaleSociale"),
            "sole_shareholder": _optional(rea, "SocioUnico"),
            "liquidation_status": _optional(rea, "StatoLiquidazione"),
        }
        if all(v is None for v in fields.values()):
            return None
        return BusinessRegistration(**fields)

    def _intermediary(self, registry: Node | None) -> Intermediary | None:
        if registry is None:
            return None
        name = self._name(registry)
        fields = {
            "name": name if name != NOT_AVAILABLE else None,
            "tax_id": _optional(registry, "IdFiscaleIVA", "IdCodice"),
            "fiscal_code": _optional(registry, "CodiceFiscale"),
        }
        if all(v is None for v in fields.values()):
            return None
        return Intermediary(**fields)

    # ------------------------------------------------------------------
    # Repeated groups
    # ------------------------------------------------------------------

    def _line_item(self, line: Node, currency: str | None) -> LineItem:
        fmt = self._formatter
        discount = _optional(line, "ScontoMaggiorazione", "Percentuale")
        vat_rate = _optional(line, "AliquotaIVA")
        return LineItem(
            line_number=_optional(line, "NumeroLinea"),
            article_code=_optional(line, "CodiceArticolo", "CodiceValore"),
            description=_text(line, "Descrizione"),
            quantity=fmt.format_amount(_text(line, "Quantita")),
            unit_of_measure=_optional(line, "UnitaMisura"),
            unit_price=fmt.format_currency(_text(line, "PrezzoUnitario"), currency),
            discount_or_surcharge=fmt.format_amount(discount) if discount else None,
            vat_rate=fmt.format_amount(vat_rate) if vat_rate else None,
            line_total=fmt.format_currency(
                _optional(line, "PrezzoTotale") or _text(line, "ImportoLinea"), currency
            ),
        )

    def _installment(self, detail: Node, currency: str | None) -> PaymentInstallment:
        code = _text(detail, "ModalitaPagamento")
        amount = _optional(detail, "ImportoPagamento")
        return PaymentInstallment(
            payment_method_code=code,
            payment_method_description=self._formatter.payment_method_description(code),
            reference_date=_optional(detail, "DataRiferimentoTerminiPagamento"),
            term_days=_optional(detail, "GiorniTerminiPagamento"),
            due_date=_optional(detail, "DataScadenzaPagamento"),
            amount=self._formatter.format_currency(amount, currency) if amount else None,
            beneficiary=_optional(detail, "Beneficiario"),
            iban=_optional(detail, "IBAN"),
            bic=_optional(detail, "BIC"),
        )
