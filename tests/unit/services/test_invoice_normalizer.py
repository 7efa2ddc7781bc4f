"""Tests for InvoiceNormalizer."""

import pytest

from efattura.core.entities import NOT_AVAILABLE, Element, InvoiceStatus
from efattura.core.exceptions import ExtractionError
from efattura.core.services import FieldFormatter, InvoiceNormalizer


@pytest.fixture
def normalizer() -> InvoiceNormalizer:
    return InvoiceNormalizer(formatter=FieldFormatter("comma"))


def _root(tree: dict) -> dict:
    return next(iter(tree.values()))[0]


class TestNormalizeHeader:
    """Document header and parties."""

    def test_end_to_end_fields(self, normalizer, fattura_tree):
        invoice = normalizer.normalize(fattura_tree)

        assert invoice.id is None
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.number == "2024/001"
        assert invoice.date == "2024-03-15"
        assert invoice.document_type == "TD01"
        assert invoice.currency == "EUR"
        assert invoice.reason_text == "Servizi di consulenza"
        assert invoice.recipient_code == "ABC1234"
        assert invoice.recipient_pec == "fatture@pec.example.it"

    def test_seller(self, normalizer, fattura_tree):
        seller = normalizer.normalize(fattura_tree).seller

        assert seller.name == "Acme Srl"
        assert seller.tax_id == "01234567890"
        assert seller.fiscal_regime == "RF01"
        assert seller.full_address == "Via Roma 10"
        assert seller.municipality == "Milano"
        assert seller.email == "info@acme.example.it"
        assert seller.phone is None

    def test_business_registration(self, normalizer, fattura_tree):
        rea = normalizer.normalize(fattura_tree).seller.business_registration

        assert rea is not None
        assert rea.office == "MI"
        assert rea.registration_number == "123456"
        assert rea.share_capital == "10000.00"

    def test_business_registration_absent(self, normalizer, fattura_tree):
        seller = _root(fattura_tree)["FatturaElettronicaHeader"][0]["CedentePrestatore"][0]
        del seller["IscrizioneREA"]
        assert normalizer.normalize(fattura_tree).seller.business_registration is None

    def test_buyer_natural_person_name(self, normalizer, fattura_tree):
        buyer = normalizer.normalize(fattura_tree).buyer
        assert buyer.name == "Mario Rossi"
        assert buyer.country is None

    def test_causale_chunks_joined(self, normalizer, build_fattura):
        tree = build_fattura()
        general = _root(tree)["FatturaElettronicaBody"][0]["DatiGenerali"][0][
            "DatiGeneraliDocumento"
        ][0]
        general["Causale"] = ["Prima parte", "seconda parte"]
        assert normalizer.normalize(tree).reason_text == "Prima parte seconda parte"

    def test_intermediary(self, normalizer, fattura_tree):
        header = _root(fattura_tree)["FatturaElettronicaHeader"][0]
        header["TerzoIntermediarioOSoggettoEmittente"] = [
            {
                "DatiAnagrafici": [
                    {
                        "IdFiscaleIVA": [{"IdCodice": ["11111111111"]}],
                        "Anagrafica": [{"Denominazione": ["Studio Bianchi"]}],
                    }
                ]
            }
        ]
        header["SoggettoEmittente"] = ["TZ"]

        invoice = normalizer.normalize(fattura_tree)

        assert invoice.intermediary is not None
        assert invoice.intermediary.name == "Studio Bianchi"
        assert invoice.intermediary.tax_id == "11111111111"
        assert invoice.intermediary.fiscal_code is None
        assert invoice.issuer_role == "TZ"

    def test_intermediary_absent(self, normalizer, fattura_tree):
        invoice = normalizer.normalize(fattura_tree)
        assert invoice.intermediary is None
        assert invoice.issuer_role is None


class TestNormalizeAmounts:
    """Totals, line items and payment."""

    def test_totals_formatted_with_currency(self, normalizer, fattura_tree):
        invoice = normalizer.normalize(fattura_tree)

        assert invoice.total == "€ 122,00"
        assert invoice.taxable_amount == "€ 100,00"
        assert invoice.tax_amount == "€ 22,00"
        assert invoice.vat_rate == "22,00"
        assert invoice.vat_collection_mode == "I"

    def test_total_falls_back_to_summary(self, normalizer, build_fattura):
        tree = build_fattura(total=None)
        summary = _root(tree)["FatturaElettronicaBody"][0]["DatiBeniServizi"][0][
            "DatiRiepilogo"
        ][0]
        summary["ImportoTotaleDocumento"] = ["99.90"]
        assert normalizer.normalize(tree).total == "€ 99,90"

    def test_missing_total_is_sentinel(self, normalizer, build_fattura):
        assert normalizer.normalize(build_fattura(total=None)).total == NOT_AVAILABLE

    def test_total_beyond_precision_is_sentinel(self, normalizer, build_fattura):
        invoice = normalizer.normalize(build_fattura(total="123456789012345678901234567.89"))
        assert invoice.total == NOT_AVAILABLE
        assert invoice.number == "2024/001"

    def test_unknown_currency_has_no_symbol(self, normalizer, build_fattura):
        invoice = normalizer.normalize(build_fattura(currency="XXX"))
        assert invoice.total == "122,00"

    def test_line_item(self, normalizer, fattura_tree):
        item = normalizer.normalize(fattura_tree).line_items[0]

        assert item.line_number == "1"
        assert item.description == "Consulting"
        assert item.quantity == "1,00"
        assert item.unit_price == "€ 100,00"
        assert item.vat_rate == "22,00"
        assert item.line_total == "€ 100,00"
        assert item.article_code is None

    def test_line_total_falls_back_to_importo_linea(self, normalizer, build_fattura, build_line):
        line = build_line(total=None, ImportoLinea="50.00")
        item = normalizer.normalize(build_fattura(lines=[line])).line_items[0]
        assert item.line_total == "€ 50,00"

    def test_unparsable_quantity_is_sentinel(self, normalizer, build_fattura, build_line):
        line = build_line(quantity="dieci")
        item = normalizer.normalize(build_fattura(lines=[line])).line_items[0]
        assert item.quantity == NOT_AVAILABLE

    def test_line_order_preserved(self, normalizer, build_fattura, build_line):
        lines = [build_line(number=str(n), description=f"Item {n}") for n in range(1, 6)]
        invoice = normalizer.normalize(build_fattura(lines=lines))
        assert [i.description for i in invoice.line_items] == [f"Item {n}" for n in range(1, 6)]

    def test_no_lines(self, normalizer, build_fattura):
        assert normalizer.normalize(build_fattura(lines=[])).line_items == ()

    def test_installment(self, normalizer, fattura_tree):
        invoice = normalizer.normalize(fattura_tree)
        installment = invoice.payment_installments[0]

        assert invoice.payment_terms == "TP02"
        assert installment.payment_method_code == "MP05"
        assert installment.payment_method_description == "Bonifico"
        assert installment.due_date == "2024-04-15"
        assert installment.amount == "€ 122,00"
        assert installment.iban == "IT60X0542811101000000123456"
        assert installment.bic is None

    def test_terms_without_installments(self, normalizer, build_fattura):
        invoice = normalizer.normalize(build_fattura(installments=[]))
        assert invoice.payment_terms == "TP02"
        assert invoice.payment_installments == ()
        assert not invoice.has_payment_details


class TestNormalizeStructure:
    """Root/header/body resolution and failure modes."""

    def test_unprefixed_root(self, normalizer, build_fattura):
        invoice = normalizer.normalize(build_fattura(prefix=""))
        assert invoice.seller.name == "Acme Srl"

    def test_prefixed_header_and_body(self, normalizer, fattura_tree):
        root = _root(fattura_tree)
        root["p:FatturaElettronicaHeader"] = root.pop("FatturaElettronicaHeader")
        root["p:FatturaElettronicaBody"] = root.pop("FatturaElettronicaBody")

        invoice = normalizer.normalize(fattura_tree)
        assert invoice.number == "2024/001"

    def test_accepts_typed_tree(self, normalizer, fattura_tree):
        typed = Element.from_mapping(fattura_tree)
        assert normalizer.normalize(typed) == normalizer.normalize(fattura_tree)

    def test_idempotent(self, normalizer, fattura_tree):
        assert normalizer.normalize(fattura_tree) == normalizer.normalize(fattura_tree)

    def test_missing_root(self, normalizer):
        with pytest.raises(ExtractionError) as exc:
            normalizer.normalize({"SomethingElse": [{}]})
        assert exc.value.section == "root"

    def test_missing_header(self, normalizer, fattura_tree):
        del _root(fattura_tree)["FatturaElettronicaHeader"]
        with pytest.raises(ExtractionError) as exc:
            normalizer.normalize(fattura_tree)
        assert exc.value.section == "header"

    def test_missing_body(self, normalizer, fattura_tree):
        del _root(fattura_tree)["FatturaElettronicaBody"]
        with pytest.raises(ExtractionError) as exc:
            normalizer.normalize(fattura_tree)
        assert exc.value.section == "body"

    def test_sparse_document_uses_sentinels(self, normalizer):
        tree = {
            "FatturaElettronica": [
                {"FatturaElettronicaHeader": [{}], "FatturaElettronicaBody": [{}]}
            ]
        }
        invoice = normalizer.normalize(tree)

        for field in (
            "number",
            "date",
            "document_type",
            "tax_regime_article",
            "reason_text",
            "recipient_code",
            "total",
            "taxable_amount",
            "payment_terms",
        ):
            assert getattr(invoice, field) == NOT_AVAILABLE
        assert invoice.seller.name == NOT_AVAILABLE
        assert invoice.currency is None
        assert invoice.line_items == ()
