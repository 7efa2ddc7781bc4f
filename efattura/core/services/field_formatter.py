"""
Field formatting rules shared by the normalizer and the PDF renderer.

Amounts are formatted with exactly two decimals and grouped thousands
using one decimal style for the whole document.  Lookup tables map ISO
currency codes to display symbols and FatturaPA codes (payment method,
document type) to human descriptions.  Every lookup is total: unknown
codes come back unchanged.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Literal

from efattura.config import get_logger, get_settings
from efattura.core.entities.invoice import NOT_AVAILABLE
from efattura.core.exceptions import FormatWarning

logger = get_logger(__name__)

DecimalStyle = Literal["comma", "period"]

_TWO_PLACES = Decimal("0.01")

CURRENCY_SYMBOLS: dict[str, str] = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "CHF": "CHF",
    "JPY": "¥",
    "CNY": "CN¥",
    "CAD": "CA$",
    "AUD": "A$",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "PLN": "zł",
    "CZK": "Kč",
    "HUF": "Ft",
    "RON": "lei",
    "BGN": "лв",
    "HRK": "kn",
    "RUB": "₽",
    "INR": "₹",
    "BRL": "R$",
    "TRY": "₺",
    "ZAR": "R",
    "MXN": "MX$",
    "KRW": "₩",
}

PAYMENT_METHODS: dict[str, str] = {
    "MP01": "Contanti",
    "MP02": "Assegno",
    "MP03": "Assegno circolare",
    "MP04": "Contanti presso Tesoreria",
    "MP05": "Bonifico",
    "MP06": "Vaglia cambiario",
    "MP07": "Bollettino bancario",
    "MP08": "Carta di pagamento",
    "MP09": "RID",
    "MP10": "RID utenze",
    "MP11": "RID veloce",
    "MP12": "RIBA",
    "MP13": "MAV",
    "MP14": "Quietanza erario",
    "MP15": "Giroconto su conti di contabilità speciale",
    "MP16": "Domiciliazione bancaria",
    "MP17": "Domiciliazione postale",
    "MP18": "Bollettino di c/c postale",
    "MP19": "SEPA Direct Debit",
    "MP20": "SEPA Direct Debit CORE",
    "MP21": "SEPA Direct Debit B2B",
    "MP22": "Trattenuta su somme già riscosse",
    "MP23": "PagoPA",
}

PAYMENT_TERMS: dict[str, str] = {
    "TP01": "Pagamento a rate",
    "TP02": "Pagamento completo",
    "TP03": "Anticipo",
}

DOCUMENT_TYPES: dict[str, str] = {
    "TD01": "Fattura",
    "TD02": "Acconto/anticipo su fattura",
    "TD03": "Acconto/anticipo su parcella",
    "TD04": "Nota di credito",
    "TD05": "Nota di debito",
    "TD06": "Parcella",
    "TD07": "Fattura semplificata",
    "TD08": "Nota di credito semplificata",
    "TD09": "Nota di debito semplificata",
    "TD16": "Integrazione fattura reverse charge interno",
    "TD17": "Integrazione/autofattura per acquisto servizi dall'estero",
    "TD18": "Integrazione per acquisto di beni intracomunitari",
    "TD19": "Integrazione/autofattura per acquisto di beni ex art.17 c.2 DPR 633/72",
    "TD20": "Autofattura per regolarizzazione e integrazione delle fatture",
    "TD21": "Autofattura per splafonamento",
    "TD22": "Estrazione beni da Deposito IVA",
    "TD23": "Estrazione beni da Deposito IVA con versamento dell'IVA",
    "TD24": "Fattura differita di cui all'art. 21, comma 4, lett. a)",
    "TD25": "Fattura differita di cui all'art. 21, comma 4, terzo periodo lett. b)",
    "TD26": "Cessione di beni ammortizzabili e per passaggi interni",
    "TD27": "Fattura per autoconsumo o per cessioni gratuite senza rivalsa",
    "TD28": "Acquisti da San Marino con IVA (fattura cartacea)",
}


def parse_amount(value: Any) -> Decimal:
    """
    Parse a numeric value from a string or number.

    FatturaPA amounts always use a period as decimal separator, so
    strings are read as plain decimals after trimming.

    Raises:
        FormatWarning: If the value is empty or not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise FormatWarning(value)
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise FormatWarning(value)
        try:
            number = Decimal(text)
        except InvalidOperation as e:
            raise FormatWarning(value) from e
    if not number.is_finite():
        raise FormatWarning(value)
    return number


def format_amount(value: Any, style: DecimalStyle = "comma") -> str:
    """Format *value* with two decimals, or return the sentinel."""
    try:
        number = parse_amount(value)
        try:
            # beyond the context precision quantize cannot keep two places
            rounded = number.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
        except InvalidOperation as e:
            raise FormatWarning(value) from e
    except FormatWarning as w:
        if value is not None and value != NOT_AVAILABLE:
            logger.warning("amount_unparsable", **w.details)
        return NOT_AVAILABLE

    text = f"{rounded:,.2f}"
    if style == "comma":
        text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return text


def with_currency_symbol(formatted: str, currency_code: str | None) -> str:
    """Prefix the currency symbol; unknown codes and the sentinel pass through."""
    if formatted == NOT_AVAILABLE or not currency_code:
        return formatted
    symbol = CURRENCY_SYMBOLS.get(currency_code.strip().upper())
    if symbol is None:
        return formatted
    return f"{symbol} {formatted}"


def payment_method_description(code: str) -> str:
    return PAYMENT_METHODS.get(code, code)


def document_type_description(code: str) -> str:
    return DOCUMENT_TYPES.get(code, code)


def payment_terms_description(code: str) -> str:
    return PAYMENT_TERMS.get(code, code)


class FieldFormatter:
    """
    Formatter bound to a single decimal style.

    One instance is shared by everything that formats a given document
    so numbers never mix conventions.
    """

    def __init__(self, decimal_style: DecimalStyle | None = None) -> None:
        if decimal_style is None:
            decimal_style = get_settings().format.decimal_style
        self.decimal_style: DecimalStyle = decimal_style

    def format_amount(self, value: Any) -> str:
        return format_amount(value, self.decimal_style)

    def with_currency_symbol(self, formatted: str, currency_code: str | None) -> str:
        return with_currency_symbol(formatted, currency_code)

    def format_currency(self, value: Any, currency_code: str | None) -> str:
        """Format an amount and decorate it with the currency symbol."""
        return with_currency_symbol(self.format_amount(value), currency_code)

    def format_percent(self, formatted_rate: str | None) -> str:
        """Append the percent suffix to an already formatted rate."""
        if not formatted_rate or formatted_rate == NOT_AVAILABLE:
            return NOT_AVAILABLE
        return f"{formatted_rate}%"

    @staticmethod
    def payment_method_description(code: str) -> str:
        return payment_method_description(code)

    @staticmethod
    def document_type_description(code: str) -> str:
        return document_type_description(code)

    @staticmethod
    def payment_terms_description(code: str) -> str:
        return payment_terms_description(code)
