"""
Page geometry and drawing cursor for the invoice renderer.

The cursor is an immutable value: every drawing routine receives one and
returns the advanced position, so the current ``y`` is never hidden in
the PDF object.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace

# (text, width) -> height of the wrapped text
MeasureFn = Callable[[str, float], float]

# A4 portrait in points
A4_WIDTH = 595.28
A4_HEIGHT = 841.89
DEFAULT_MARGIN = 40.0


@dataclass(frozen=True)
class PageGeometry:
    """Fixed page size and margins, in points."""

    width: float = A4_WIDTH
    height: float = A4_HEIGHT
    top_margin: float = DEFAULT_MARGIN
    bottom_margin: float = DEFAULT_MARGIN
    left_margin: float = DEFAULT_MARGIN
    right_margin: float = DEFAULT_MARGIN

    @property
    def content_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def bottom_limit(self) -> float:
        """Lowest ``y`` content may reach."""
        return self.height - self.bottom_margin

    @property
    def content_height(self) -> float:
        return self.bottom_limit - self.top_margin

    @property
    def right_edge(self) -> float:
        return self.width - self.right_margin


@dataclass(frozen=True)
class Cursor:
    """Drawing position: 1-based page number and coordinates."""

    page: int
    x: float
    y: float

    @classmethod
    def top_of(cls, page: int, geometry: PageGeometry) -> "Cursor":
        return cls(page=page, x=geometry.left_margin, y=geometry.top_margin)

    def advance(self, dy: float) -> "Cursor":
        return replace(self, y=self.y + dy)

    def at(self, x: float) -> "Cursor":
        return replace(self, x=x)

    def fits(self, height: float, geometry: PageGeometry) -> bool:
        return self.y + height <= geometry.bottom_limit

    def next_page(self, geometry: PageGeometry) -> "Cursor":
        return Cursor.top_of(self.page + 1, geometry)


@dataclass(frozen=True)
class Column:
    """Line-items table column: header label, x offset from the left margin, width."""

    key: str
    label: str
    offset: float
    width: float


# Widths sum to the A4 content width (515 pt)
TABLE_COLUMNS: tuple[Column, ...] = (
    Column("line_number", "#", 0, 20),
    Column("article_code", "Codice", 20, 55),
    Column("description", "Descrizione", 75, 180),
    Column("quantity", "Quantità", 255, 45),
    Column("unit_of_measure", "U.M.", 300, 30),
    Column("unit_price", "Prezzo unit.", 330, 65),
    Column("vat_rate", "IVA %", 395, 40),
    Column("line_total", "Importo", 435, 80),
)


def column(key: str) -> Column:
    return next(c for c in TABLE_COLUMNS if c.key == key)


def row_height(measured: float, base: float, padding: float, maximum: float) -> float:
    """Height of a table row whose tallest cell measures *measured*.

    ``max(base, measured + padding)`` clamped to *maximum*.
    """
    return min(max(base, measured + padding), maximum)


@dataclass(frozen=True)
class RowPlacement:
    """Where a table row (header or item) was drawn."""

    page: int
    y: float
    height: float
    index: int | None = None  # item index, None for header rows


@dataclass
class LayoutResult:
    """Rendered document plus the placement of every table row."""

    pdf_bytes: bytes = b""
    page_count: int = 0
    header_rows: list[RowPlacement] = field(default_factory=list)
    item_rows: list[RowPlacement] = field(default_factory=list)

    def pages_with_items(self) -> list[int]:
        return sorted({r.page for r in self.item_rows})
