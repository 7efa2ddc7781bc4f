"""PDF rendering implementations."""

from efattura.infrastructure.pdf.fpdf2_renderer import Fpdf2InvoiceRenderer
from efattura.infrastructure.pdf.layout import (
    TABLE_COLUMNS,
    Column,
    Cursor,
    LayoutResult,
    MeasureFn,
    PageGeometry,
    RowPlacement,
    row_height,
)

__all__ = [
    "Fpdf2InvoiceRenderer",
    "TABLE_COLUMNS",
    "Column",
    "Cursor",
    "LayoutResult",
    "MeasureFn",
    "PageGeometry",
    "RowPlacement",
    "row_height",
]
