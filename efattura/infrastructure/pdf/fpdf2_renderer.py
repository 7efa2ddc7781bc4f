"""
Fpdf2 implementation of the invoice layout engine.

Draws a courtesy copy of a FatturaPA invoice on A4 pages: title block,
seller/buyer columns, the line-items table, totals and payment details.
Every section routine takes the current ``Cursor`` and returns the
advanced one.  The table computes each row height from the wrapped
description and breaks pages itself, so rows are never split and every
page holding rows starts with the column header.
"""

from fpdf import FPDF
from fpdf.enums import MethodReturnValue

from efattura.config import get_logger
from efattura.config.settings import PdfSettings, get_settings
from efattura.core.entities.invoice import (
    NOT_AVAILABLE,
    Invoice,
    LineItem,
    Party,
    PaymentInstallment,
)
from efattura.core.services.field_formatter import FieldFormatter
from efattura.core.services.invoice_pdf_service import IInvoicePdfRenderer
from efattura.infrastructure.pdf.layout import (
    TABLE_COLUMNS,
    Cursor,
    LayoutResult,
    MeasureFn,
    PageGeometry,
    RowPlacement,
    column,
    row_height,
)

logger = get_logger(__name__)

FONT = "Helvetica"
CORE_FONT_ENCODING = "windows-1252"
PLACEHOLDER = "-"

TITLE_BLOCK_HEIGHT = 56.0
HEADER_ROW_HEIGHT = 18.0
PARTY_TITLE_HEIGHT = 16.0
PARTY_LINE_HEIGHT = 11.0
PARTY_LABEL_WIDTH = 80.0
SECTION_TITLE_HEIGHT = 16.0
TOTALS_LINE_HEIGHT = 14.0
BLOCK_GAP = 12.0

ISSUER_ROLES = {
    "CC": "Cessionario/Committente",
    "TZ": "Terzo",
}


def _safe_text(text: str) -> str:
    """Replace characters the core fonts cannot encode with '?'.

    fpdf2's built-in fonts raise ``FPDFUnicodeEncodingException`` for
    code points outside their encoding.
    """
    return text.encode(CORE_FONT_ENCODING, errors="replace").decode(CORE_FONT_ENCODING)


def _present(value: str | None) -> bool:
    return value is not None and value != "" and value != NOT_AVAILABLE


# ---------------------------------------------------------------------------
# Custom FPDF subclass with page-number footer
# ---------------------------------------------------------------------------


class _InvoicePdf(FPDF):
    """A4 portrait document in points with a footer on every page."""

    def __init__(self, pdf_settings: PdfSettings, geometry: PageGeometry) -> None:
        super().__init__(orientation="P", unit="pt", format="A4")
        self._pdf_settings = pdf_settings
        self.core_fonts_encoding = CORE_FONT_ENCODING
        self.set_margins(geometry.left_margin, geometry.top_margin, geometry.right_margin)
        # Page breaks are decided by the renderer, never by fpdf2
        self.set_auto_page_break(auto=False, margin=geometry.bottom_margin)

    # fpdf2 calls this automatically at the bottom of each page.
    def footer(self) -> None:  # noqa: D401
        """Render footer with page numbers."""
        self.set_y(-25)
        self.set_font(FONT, "I", 7)
        self.set_text_color(120, 120, 120)
        self.cell(0, 10, _safe_text(self._pdf_settings.footer_text), align="L")
        self.set_x(-140)
        self.cell(100, 10, f"Pagina {self.page_no()} di {{nb}}", align="R")
        self.set_text_color(0, 0, 0)


class Fpdf2InvoiceRenderer(IInvoicePdfRenderer):
    """Renders invoice PDFs using fpdf2 with an explicit drawing cursor."""

    def __init__(
        self,
        pdf_settings: PdfSettings | None = None,
        formatter: FieldFormatter | None = None,
        measure: MeasureFn | None = None,
        geometry: PageGeometry | None = None,
    ) -> None:
        if pdf_settings is None:
            pdf_settings = get_settings().pdf
        self._settings = pdf_settings
        self._formatter = formatter or FieldFormatter()
        self._measure = measure
        self._geometry = geometry or PageGeometry()

    @property
    def line_height(self) -> float:
        return self._settings.font_size * 1.25

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, invoice: Invoice) -> bytes:
        """Render an invoice into PDF bytes."""
        return self.layout(invoice).pdf_bytes

    def layout(self, invoice: Invoice) -> LayoutResult:
        """Render an invoice and report where every table row landed."""
        pdf = _InvoicePdf(self._settings, self._geometry)
        pdf.alias_nb_pages()
        pdf.add_page()

        result = LayoutResult()
        measure = self._measure or self._fpdf_measure(pdf)

        cursor = Cursor.top_of(1, self._geometry)
        cursor = self._draw_title(pdf, cursor, invoice)
        cursor = self._draw_parties(pdf, cursor, invoice)
        cursor = self._draw_line_items(pdf, cursor, invoice, measure, result)
        cursor = self._draw_totals(pdf, cursor, invoice)
        cursor = self._draw_payment_details(pdf, cursor, invoice)

        result.pdf_bytes = bytes(pdf.output())
        result.page_count = cursor.page
        logger.debug(
            "invoice_layout_complete",
            number=invoice.number,
            pages=result.page_count,
            rows=len(result.item_rows),
        )
        return result

    # ------------------------------------------------------------------
    # Measurement and page handling
    # ------------------------------------------------------------------

    def _fpdf_measure(self, pdf: FPDF) -> MeasureFn:
        """Wrapped-text height measured with the table body font."""
        line_height = self.line_height
        font_size = self._settings.font_size

        def measure(text: str, width: float) -> float:
            pdf.set_font(FONT, "", font_size)
            lines = pdf.multi_cell(
                width,
                line_height,
                _safe_text(text),
                dry_run=True,
                output=MethodReturnValue.LINES,
            )
            return len(lines) * line_height

        return measure

    def _break_page(self, pdf: FPDF, cursor: Cursor) -> Cursor:
        pdf.add_page()
        return cursor.next_page(self._geometry)

    def _ensure_room(self, pdf: FPDF, cursor: Cursor, height: float) -> Cursor:
        if cursor.fits(height, self._geometry):
            return cursor
        return self._break_page(pdf, cursor)

    @staticmethod
    def _fit(pdf: FPDF, text: str, width: float) -> str:
        """Truncate *text* with an ellipsis so it fits *width* in the current font."""
        text = _safe_text(text)
        available = width - 2 * pdf.c_margin
        if pdf.get_string_width(text) <= available:
            return text
        while text and pdf.get_string_width(text + "...") > available:
            text = text[:-1]
        return text + "..."

    def _rule(self, pdf: FPDF, y: float, gray: int = 100) -> None:
        pdf.set_draw_color(gray, gray, gray)
        pdf.line(self._geometry.left_margin, y, self._geometry.right_edge, y)
        pdf.set_draw_color(0, 0, 0)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _draw_title(self, pdf: FPDF, cursor: Cursor, invoice: Invoice) -> Cursor:
        """Centered title, ``number | date`` subtitle and document type."""
        g = self._geometry
        y = cursor.y

        pdf.set_font(FONT, "B", 16)
        pdf.set_xy(g.left_margin, y)
        pdf.cell(g.content_width, 20, _safe_text(self._settings.title), align="C")

        pdf.set_font(FONT, "", 10)
        pdf.set_xy(g.left_margin, y + 22)
        pdf.cell(
            g.content_width,
            14,
            _safe_text(f"Numero: {invoice.number} | Data: {invoice.date}"),
            align="C",
        )

        code = invoice.document_type
        description = self._formatter.document_type_description(code)
        doc_type = f"{description} ({code})" if description != code else code
        subtitle = f"Tipo documento: {doc_type}"
        if invoice.currency:
            subtitle += f" | Divisa: {invoice.currency}"
        pdf.set_font(FONT, "", 8)
        pdf.set_xy(g.left_margin, y + 36)
        pdf.cell(g.content_width, 10, _safe_text(subtitle), align="C")

        self._rule(pdf, y + TITLE_BLOCK_HEIGHT - 6)
        return cursor.advance(TITLE_BLOCK_HEIGHT)

    def _draw_parties(self, pdf: FPDF, cursor: Cursor, invoice: Invoice) -> Cursor:
        """Seller and buyer side by side, then the optional intermediary."""
        g = self._geometry
        half = g.content_width / 2
        width = half - 10

        # Both columns start at the same y; the block ends below the taller one
        seller_end = self._draw_party_column(
            pdf,
            cursor.at(g.left_margin),
            width,
            "Cedente/Prestatore (fornitore)",
            self._seller_lines(invoice.seller, invoice.currency),
        )
        buyer_end = self._draw_party_column(
            pdf,
            cursor.at(g.left_margin + half),
            width,
            "Cessionario/Committente (cliente)",
            self._buyer_lines(invoice),
        )
        cursor = max(seller_end, buyer_end, key=lambda c: c.y).at(g.left_margin)

        intermediary_lines = self._intermediary_lines(invoice)
        if intermediary_lines:
            cursor = self._draw_party_column(
                pdf,
                cursor.advance(BLOCK_GAP / 2),
                g.content_width,
                "Terzo intermediario / Soggetto emittente",
                intermediary_lines,
            )

        self._rule(pdf, cursor.y + BLOCK_GAP / 2, gray=180)
        return cursor.at(g.left_margin).advance(BLOCK_GAP)

    def _draw_party_column(
        self,
        pdf: FPDF,
        cursor: Cursor,
        width: float,
        title: str,
        lines: list[tuple[str, str]],
    ) -> Cursor:
        pdf.set_font(FONT, "B", 10)
        pdf.set_text_color(51, 51, 51)
        pdf.set_xy(cursor.x, cursor.y)
        pdf.cell(width, 14, title)
        cursor = cursor.advance(PARTY_TITLE_HEIGHT)

        value_width = width - PARTY_LABEL_WIDTH
        for label, value in lines:
            pdf.set_font(FONT, "B", 8)
            pdf.set_xy(cursor.x, cursor.y)
            pdf.cell(PARTY_LABEL_WIDTH, PARTY_LINE_HEIGHT, f"{label}:")
            pdf.set_font(FONT, "", 8)
            pdf.set_xy(cursor.x + PARTY_LABEL_WIDTH, cursor.y)
            pdf.cell(value_width, PARTY_LINE_HEIGHT, self._fit(pdf, value, value_width))
            cursor = cursor.advance(PARTY_LINE_HEIGHT)

        pdf.set_text_color(0, 0, 0)
        return cursor

    @staticmethod
    def _address_lines(party: Party) -> list[tuple[str, str]]:
        lines = [
            ("Indirizzo", party.full_address),
            ("Comune", f"{party.postal_code} {party.municipality} ({party.province})"),
        ]
        if party.country:
            lines.append(("Nazione", party.country))
        return lines

    def _seller_lines(self, seller: Party, currency: str | None) -> list[tuple[str, str]]:
        lines = [("Denominazione", seller.name), ("Partita IVA", seller.tax_id)]
        if seller.fiscal_code:
            lines.append(("Codice fiscale", seller.fiscal_code))
        if seller.fiscal_regime:
            lines.append(("Regime fiscale", seller.fiscal_regime))
        lines.extend(self._address_lines(seller))
        if seller.phone:
            lines.append(("Telefono", seller.phone))
        if seller.email:
            lines.append(("Email", seller.email))

        rea = seller.business_registration
        if rea is not None:
            if rea.office or rea.registration_number:
                registration = "-".join(p for p in (rea.office, rea.registration_number) if p)
                lines.append(("Iscrizione REA", registration))
            if rea.share_capital:
                lines.append(
                    ("Capitale sociale", self._formatter.format_currency(rea.share_capital, currency))
                )
            if rea.sole_shareholder:
                lines.append(("Socio unico", rea.sole_shareholder))
            if rea.liquidation_status:
                lines.append(("Liquidazione", rea.liquidation_status))
        return lines

    def _buyer_lines(self, invoice: Invoice) -> list[tuple[str, str]]:
        buyer = invoice.buyer
        lines = [("Denominazione", buyer.name), ("Partita IVA", buyer.tax_id)]
        if buyer.fiscal_code:
            lines.append(("Codice fiscale", buyer.fiscal_code))
        lines.extend(self._address_lines(buyer))
        lines.append(("Cod. destinatario", invoice.recipient_code))
        if _present(invoice.recipient_pec):
            lines.append(("PEC", invoice.recipient_pec))
        return lines

    @staticmethod
    def _intermediary_lines(invoice: Invoice) -> list[tuple[str, str]]:
        lines: list[tuple[str, str]] = []
        intermediary = invoice.intermediary
        if intermediary is not None:
            if intermediary.name:
                lines.append(("Denominazione", intermediary.name))
            if intermediary.tax_id:
                lines.append(("Partita IVA", intermediary.tax_id))
            if intermediary.fiscal_code:
                lines.append(("Codice fiscale", intermediary.fiscal_code))
        if invoice.issuer_role:
            role = ISSUER_ROLES.get(invoice.issuer_role, invoice.issuer_role)
            lines.append(("Emesso da", role))
        return lines

    # ------------------------------------------------------------------
    # Line-items table
    # ------------------------------------------------------------------

    def _draw_line_items(
        self,
        pdf: FPDF,
        cursor: Cursor,
        invoice: Invoice,
        measure: MeasureFn,
        result: LayoutResult,
    ) -> Cursor:
        """Header row plus one row per item, breaking pages between rows."""
        settings = self._settings
        description_width = column("description").width
        # A clamped row always fits below the header of a fresh page
        max_height = min(
            settings.max_row_height,
            self._geometry.content_height - HEADER_ROW_HEIGHT,
        )

        heights = [
            row_height(
                measure(item.description, description_width),
                settings.base_row_height,
                settings.row_padding,
                max_height,
            )
            for item in invoice.line_items
        ]

        # The header never ends a page without the first row below it
        first_height = heights[0] if heights else settings.base_row_height
        cursor = self._ensure_room(pdf, cursor, HEADER_ROW_HEIGHT + first_height)
        cursor = self._draw_table_header(pdf, cursor, result)

        for index, (item, height) in enumerate(zip(invoice.line_items, heights)):
            if not cursor.fits(height, self._geometry):
                cursor = self._break_page(pdf, cursor)
                cursor = self._draw_table_header(pdf, cursor, result)

            self._draw_item_row(pdf, cursor, item, index, height)
            result.item_rows.append(
                RowPlacement(page=cursor.page, y=cursor.y, height=height, index=index)
            )
            cursor = cursor.advance(height)

        return cursor.advance(BLOCK_GAP)

    def _draw_table_header(
        self, pdf: FPDF, cursor: Cursor, result: LayoutResult
    ) -> Cursor:
        g = self._geometry
        pdf.set_fill_color(240, 240, 240)
        pdf.rect(g.left_margin, cursor.y, g.content_width, HEADER_ROW_HEIGHT, style="F")

        pdf.set_font(FONT, "B", self._settings.font_size)
        pdf.set_text_color(51, 51, 51)
        for col in TABLE_COLUMNS:
            pdf.set_xy(g.left_margin + col.offset, cursor.y)
            pdf.cell(col.width, HEADER_ROW_HEIGHT, col.label, align="L")
        pdf.set_text_color(0, 0, 0)

        result.header_rows.append(
            RowPlacement(page=cursor.page, y=cursor.y, height=HEADER_ROW_HEIGHT)
        )
        return cursor.advance(HEADER_ROW_HEIGHT)

    def _draw_item_row(
        self,
        pdf: FPDF,
        cursor: Cursor,
        item: LineItem,
        index: int,
        height: float,
    ) -> None:
        g = self._geometry
        line_height = self.line_height

        # zebra striping
        if index % 2 == 1:
            pdf.set_fill_color(250, 250, 250)
            pdf.rect(g.left_margin, cursor.y, g.content_width, height, style="F")

        pdf.set_font(FONT, "", self._settings.font_size)
        text_y = cursor.y + self._settings.row_padding / 2
        values = item.model_dump()

        for col in TABLE_COLUMNS:
            x = g.left_margin + col.offset
            if col.key == "description":
                max_lines = max(1, int((height - self._settings.row_padding) // line_height))
                self._draw_wrapped(pdf, x, text_y, col.width, item.description, max_lines, index)
                continue
            value = values[col.key]
            text = value if _present(value) else PLACEHOLDER
            pdf.set_xy(x, text_y)
            pdf.cell(col.width, line_height, self._fit(pdf, text, col.width), align="L")

        self._rule(pdf, cursor.y + height, gray=220)

    def _draw_wrapped(
        self,
        pdf: FPDF,
        x: float,
        y: float,
        width: float,
        text: str,
        max_lines: int,
        index: int,
    ) -> None:
        """Draw wrapped *text*, keeping only the lines that fit the row."""
        line_height = self.line_height
        lines = pdf.multi_cell(
            width,
            line_height,
            _safe_text(text),
            dry_run=True,
            output=MethodReturnValue.LINES,
        )
        if len(lines) > max_lines:
            logger.debug(
                "line_item_truncated",
                index=index,
                lines=len(lines),
                kept=max_lines,
            )
            lines = lines[:max_lines]
            lines[-1] = self._fit(pdf, lines[-1] + "...", width)
        for i, line in enumerate(lines):
            pdf.set_xy(x, y + i * line_height)
            pdf.cell(width, line_height, line, align="L")

    # ------------------------------------------------------------------
    # Totals and payment
    # ------------------------------------------------------------------

    def _draw_totals(self, pdf: FPDF, cursor: Cursor, invoice: Invoice) -> Cursor:
        """Taxable amount, tax with rate, grand total between two rules."""
        g = self._geometry
        label_x = g.left_margin + 215
        value_x = g.left_margin + 415

        rate = invoice.vat_rate
        tax_label = f"IVA ({self._formatter.format_percent(rate)})" if _present(rate) else "IVA"
        lines = [
            ("Totale imponibile", invoice.taxable_amount),
            (tax_label, invoice.tax_amount),
        ]
        if invoice.vat_collection_mode:
            lines.append(("Esigibilità IVA", invoice.vat_collection_mode))

        block_height = TOTALS_LINE_HEIGHT * (len(lines) + 1) + 8
        cursor = self._ensure_room(pdf, cursor, block_height)

        pdf.set_font(FONT, "", 9)
        for label, value in lines:
            pdf.set_xy(label_x, cursor.y)
            pdf.cell(200, TOTALS_LINE_HEIGHT, _safe_text(f"{label}:"), align="R")
            pdf.set_xy(value_x, cursor.y)
            pdf.cell(100, TOTALS_LINE_HEIGHT, _safe_text(value), align="R")
            cursor = cursor.advance(TOTALS_LINE_HEIGHT)

        cursor = cursor.advance(2)
        self._rule(pdf, cursor.y)
        cursor = cursor.advance(2)

        pdf.set_font(FONT, "B", 11)
        pdf.set_xy(label_x, cursor.y)
        pdf.cell(200, TOTALS_LINE_HEIGHT, "TOTALE DOCUMENTO:", align="R")
        pdf.set_xy(value_x, cursor.y)
        pdf.cell(100, TOTALS_LINE_HEIGHT, _safe_text(invoice.total), align="R")
        cursor = cursor.advance(TOTALS_LINE_HEIGHT + 2)
        self._rule(pdf, cursor.y)

        return cursor.advance(BLOCK_GAP)

    def _draw_payment_details(
        self, pdf: FPDF, cursor: Cursor, invoice: Invoice
    ) -> Cursor:
        """Payment terms and one sub-block per installment; omitted when none."""
        if not invoice.has_payment_details:
            return cursor
        installments = invoice.payment_installments

        g = self._geometry
        cursor = self._ensure_room(pdf, cursor, SECTION_TITLE_HEIGHT + PARTY_LINE_HEIGHT)
        pdf.set_font(FONT, "B", 10)
        pdf.set_xy(g.left_margin, cursor.y)
        pdf.cell(g.content_width, 14, "Dettagli pagamento")
        cursor = cursor.advance(SECTION_TITLE_HEIGHT)

        terms = invoice.payment_terms
        if _present(terms):
            description = self._formatter.payment_terms_description(terms)
            text = f"{description} ({terms})" if description != terms else terms
            cursor = self._draw_detail_line(pdf, cursor, "Condizioni", text)

        numbered = len(installments) > 1
        for number, installment in enumerate(installments, 1):
            if numbered:
                cursor = self._ensure_room(pdf, cursor, PARTY_LINE_HEIGHT * 2)
                pdf.set_font(FONT, "B", 9)
                pdf.set_xy(g.left_margin, cursor.y + 2)
                pdf.cell(g.content_width, PARTY_LINE_HEIGHT, f"Rata {number}")
                cursor = cursor.advance(PARTY_LINE_HEIGHT + 2)
            for label, value in self._installment_lines(installment):
                cursor = self._draw_detail_line(pdf, cursor, label, value)

        return cursor.advance(BLOCK_GAP)

    @staticmethod
    def _installment_lines(installment: PaymentInstallment) -> list[tuple[str, str]]:
        code = installment.payment_method_code
        description = installment.payment_method_description
        method = f"{description} ({code})" if description != code else code
        lines = [("Modalità", method)]
        if installment.amount:
            lines.append(("Importo", installment.amount))
        if installment.due_date:
            lines.append(("Scadenza", installment.due_date))
        if installment.iban:
            lines.append(("IBAN", installment.iban))
        if installment.beneficiary:
            lines.append(("Beneficiario", installment.beneficiary))
        return lines

    def _draw_detail_line(
        self, pdf: FPDF, cursor: Cursor, label: str, value: str
    ) -> Cursor:
        g = self._geometry
        cursor = self._ensure_room(pdf, cursor, PARTY_LINE_HEIGHT)
        value_width = g.content_width - PARTY_LABEL_WIDTH - 10
        pdf.set_font(FONT, "B", 8)
        pdf.set_xy(g.left_margin + 10, cursor.y)
        pdf.cell(PARTY_LABEL_WIDTH, PARTY_LINE_HEIGHT, _safe_text(f"{label}:"))
        pdf.set_font(FONT, "", 8)
        pdf.set_xy(g.left_margin + 10 + PARTY_LABEL_WIDTH, cursor.y)
        pdf.cell(value_width, PARTY_LINE_HEIGHT, self._fit(pdf, value, value_width))
        return cursor.advance(PARTY_LINE_HEIGHT)
