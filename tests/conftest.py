"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from efattura.application import reset_services
from efattura.config import reset_settings
from efattura.core.entities import (
    BusinessRegistration,
    Invoice,
    LineItem,
    Party,
    PaymentInstallment,
)


@pytest.fixture(autouse=True)
def _fresh_singletons(monkeypatch, tmp_path):
    """Settings and service singletons never leak between tests."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


def make_line(
    number: str = "1",
    description: str = "Consulting",
    quantity: str = "1.00",
    unit_price: str = "100.00",
    total: str | None = "100.00",
    **extra: Any,
) -> dict[str, list[Any]]:
    """One DettaglioLinee group in array-preserving form."""
    line: dict[str, list[Any]] = {
        "NumeroLinea": [number],
        "Descrizione": [description],
        "Quantita": [quantity],
        "PrezzoUnitario": [unit_price],
        "AliquotaIVA": ["22.00"],
    }
    if total is not None:
        line["PrezzoTotale"] = [total]
    for tag, value in extra.items():
        line[tag] = [value]
    return line


def make_fattura(
    lines: list[dict[str, Any]] | None = None,
    *,
    prefix: str = "p:",
    total: str | None = "122.00",
    currency: str = "EUR",
    installments: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Generic ``{tag: [children]}`` tree of a FatturaPA document."""
    if lines is None:
        lines = [make_line()]
    general: dict[str, list[Any]] = {
        "TipoDocumento": ["TD01"],
        "Divisa": [currency],
        "Data": ["2024-03-15"],
        "Numero": ["2024/001"],
        "Causale": ["Servizi di consulenza"],
    }
    if total is not None:
        general["ImportoTotaleDocumento"] = [total]
    if installments is None:
        installments = [
            {
                "ModalitaPagamento": ["MP05"],
                "DataScadenzaPagamento": ["2024-04-15"],
                "ImportoPagamento": ["122.00"],
                "IBAN": ["IT60X0542811101000000123456"],
            }
        ]

    return {
        f"{prefix}FatturaElettronica": [
            {
                "$": {"versione": "FPR12"},
                "FatturaElettronicaHeader": [
                    {
                        "DatiTrasmissione": [
                            {
                                "CodiceDestinatario": ["ABC1234"],
                                "PECDestinatario": ["fatture@pec.example.it"],
                            }
                        ],
                        "CedentePrestatore": [
                            {
                                "DatiAnagrafici": [
                                    {
                                        "IdFiscaleIVA": [
                                            {"IdPaese": ["IT"], "IdCodice": ["01234567890"]}
                                        ],
                                        "Anagrafica": [{"Denominazione": ["Acme Srl"]}],
                                        "RegimeFiscale": ["RF01"],
                                    }
                                ],
                                "Sede": [
                                    {
                                        "Indirizzo": ["Via Roma"],
                                        "NumeroCivico": ["10"],
                                        "CAP": ["20100"],
                                        "Comune": ["Milano"],
                                        "Provincia": ["MI"],
                                        "Nazione": ["IT"],
                                    }
                                ],
                                "IscrizioneREA": [
                                    {
                                        "Ufficio": ["MI"],
                                        "NumeroREA": ["123456"],
                                        "CapitaleSociale": ["10000.00"],
                                        "SocioUnico": ["SU"],
                                        "StatoLiquidazione": ["LN"],
                                    }
                                ],
                                "Contatti": [{"Email": ["info@acme.example.it"]}],
                            }
                        ],
                        "CessionarioCommittente": [
                            {
                                "DatiAnagrafici": [
                                    {
                                        "IdFiscaleIVA": [
                                            {"IdPaese": ["IT"], "IdCodice": ["09876543210"]}
                                        ],
                                        "Anagrafica": [
                                            {"Nome": ["Mario"], "Cognome": ["Rossi"]}
                                        ],
                                    }
                                ],
                                "Sede": [
                                    {
                                        "Indirizzo": ["Corso Italia 5"],
                                        "CAP": ["00100"],
                                        "Comune": ["Roma"],
                                        "Provincia": ["RM"],
                                    }
                                ],
                            }
                        ],
                    }
                ],
                "FatturaElettronicaBody": [
                    {
                        "DatiGenerali": [{"DatiGeneraliDocumento": [general]}],
                        "DatiBeniServizi": [
                            {
                                "DettaglioLinee": lines,
                                "DatiRiepilogo": [
                                    {
                                        "AliquotaIVA": ["22.00"],
                                        "ImponibileImporto": ["100.00"],
                                        "Imposta": ["22.00"],
                                        "EsigibilitaIVA": ["I"],
                                    }
                                ],
                            }
                        ],
                        "DatiPagamento": [
                            {
                                "CondizioniPagamento": ["TP02"],
                                "DettaglioPagamento": installments,
                            }
                        ],
                    }
                ],
            }
        ]
    }


SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<p:FatturaElettronica versione="FPR12"
    xmlns:p="http://ivaservizi.agenziaentrate.gov.it/docs/xsd/fatture/v1.2">
  <FatturaElettronicaHeader>
    <DatiTrasmissione>
      <CodiceDestinatario>ABC1234</CodiceDestinatario>
    </DatiTrasmissione>
    <CedentePrestatore>
      <DatiAnagrafici>
        <IdFiscaleIVA><IdPaese>IT</IdPaese><IdCodice>01234567890</IdCodice></IdFiscaleIVA>
        <Anagrafica><Denominazione>Acme   Srl</Denominazione></Anagrafica>
      </DatiAnagrafici>
      <Sede>
        <Indirizzo>Via Roma</Indirizzo><CAP>20100</CAP>
        <Comune>Milano</Comune><Provincia>MI</Provincia>
      </Sede>
    </CedentePrestatore>
    <CessionarioCommittente>
      <DatiAnagrafici>
        <Anagrafica><Denominazione>Beta &amp; Figli Spa</Denominazione></Anagrafica>
      </DatiAnagrafici>
    </CessionarioCommittente>
  </FatturaElettronicaHeader>
  <FatturaElettronicaBody>
    <DatiGenerali>
      <DatiGeneraliDocumento>
        <TipoDocumento>TD01</TipoDocumento>
        <Divisa>EUR</Divisa>
        <Data>2024-03-15</Data>
        <Numero>42</Numero>
        <ImportoTotaleDocumento>100.00</ImportoTotaleDocumento>
      </DatiGeneraliDocumento>
    </DatiGenerali>
    <DatiBeniServizi>
      <DettaglioLinee>
        <NumeroLinea>1</NumeroLinea>
        <Descrizione>Consulting</Descrizione>
        <Quantita>1.00</Quantita>
        <PrezzoUnitario>100.00</PrezzoUnitario>
        <PrezzoTotale>100.00</PrezzoTotale>
        <AliquotaIVA>22.00</AliquotaIVA>
      </DettaglioLinee>
    </DatiBeniServizi>
  </FatturaElettronicaBody>
</p:FatturaElettronica>
"""


@pytest.fixture
def fattura_tree() -> dict[str, Any]:
    """Complete FatturaPA tree with one line and one installment."""
    return make_fattura()


@pytest.fixture
def sample_xml() -> str:
    return SAMPLE_XML


@pytest.fixture
def sample_invoice() -> Invoice:
    """Normalized invoice as the renderer and store receive it."""
    return Invoice(
        number="2024/001",
        date="2024-03-15",
        document_type="TD01",
        currency="EUR",
        reason_text="Servizi di consulenza",
        recipient_code="ABC1234",
        recipient_pec="fatture@pec.example.it",
        seller=Party(
            name="Acme Srl",
            tax_id="01234567890",
            address="Via Roma",
            street_number="10",
            postal_code="20100",
            municipality="Milano",
            province="MI",
            country="IT",
            fiscal_regime="RF01",
            email="info@acme.example.it",
            business_registration=BusinessRegistration(
                office="MI", registration_number="123456", share_capital="10000.00"
            ),
        ),
        buyer=Party(
            name="Mario Rossi",
            tax_id="09876543210",
            address="Corso Italia 5",
            postal_code="00100",
            municipality="Roma",
            province="RM",
        ),
        line_items=(
            LineItem(
                line_number="1",
                description="Consulting",
                quantity="1,00",
                unit_price="€ 100,00",
                vat_rate="22,00",
                line_total="€ 100,00",
            ),
        ),
        total="€ 122,00",
        taxable_amount="€ 100,00",
        tax_amount="€ 22,00",
        vat_rate="22,00",
        vat_collection_mode="I",
        payment_terms="TP02",
        payment_installments=(
            PaymentInstallment(
                payment_method_code="MP05",
                payment_method_description="Bonifico",
                due_date="2024-04-15",
                amount="€ 122,00",
                iban="IT60X0542811101000000123456",
            ),
        ),
    )


@pytest.fixture
def build_fattura():
    """Factory for FatturaPA trees: ``build_fattura(lines=[...], prefix="")``."""
    return make_fattura


@pytest.fixture
def build_line():
    """Factory for DettaglioLinee groups."""
    return make_line
