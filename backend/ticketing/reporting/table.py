"""Paginating table drawer for canvas-built reports.

Column widths and alignment are derived from the header text: dates get
18 % of the content width, numeric columns 15 %, names 30 %, and whatever
is left is shared by the remaining columns. Rows that would run past the
bottom margin continue on a new page under a repeated header row.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from reportlab.lib import colors
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from .formatting import ELLIPSIS
from .layout import FONT_BOLD, FONT_REGULAR, LayoutCursor, PageState

ROW_HEIGHT = 20
HEADER_HEIGHT = 25
BOTTOM_MARGIN = 70
FONT_SIZE = 9
CELL_PADDING = 5
TABLE_GAP = 30

C_HEADER_BG = colors.HexColor("#f0f0f0")
C_STRIPE_BG = colors.HexColor("#f9f9f9")
C_ROW_RULE = colors.HexColor("#dddddd")

DATE_KEYWORDS = ("date",)
NUMERIC_KEYWORDS = (
    "amount", "revenue", "percentage", "count", "tickets", "occupancy", "rate",
)
NAME_KEYWORDS = ("name", "event")

WIDTH_SHARE = {"date": 0.18, "numeric": 0.15, "name": 0.30}


class ColumnKind(str, Enum):
    DATE = "date"
    NUMERIC = "numeric"
    NAME = "name"
    OTHER = "other"


@dataclass(frozen=True)
class TableSpec:
    """Headers plus rows of already-formatted cell text."""

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        headers = tuple(str(h) for h in self.headers)
        if not headers:
            raise ValueError("A table needs at least one header")
        rows = []
        for index, row in enumerate(self.rows):
            cells = tuple("" if cell is None else str(cell) for cell in row)
            if len(cells) != len(headers):
                raise ValueError(
                    f"Row {index} has {len(cells)} cells, expected {len(headers)}"
                )
            rows.append(cells)
        object.__setattr__(self, "headers", headers)
        object.__setattr__(self, "rows", tuple(rows))


@dataclass(frozen=True)
class TableResult:
    final_y: float
    pages_spanned: int
    header_draws: int


def classify_header(header: str) -> ColumnKind:
    text = header.lower()
    if any(word in text for word in DATE_KEYWORDS):
        return ColumnKind.DATE
    if any(word in text for word in NUMERIC_KEYWORDS):
        return ColumnKind.NUMERIC
    if any(word in text for word in NAME_KEYWORDS):
        return ColumnKind.NAME
    return ColumnKind.OTHER


def column_widths(headers: Sequence[str], content_width: float) -> list[float]:
    """Widths for ``headers``, scaled to sum to ``content_width``."""
    if not headers:
        return []
    kinds = [classify_header(h) for h in headers]
    widths: list[float | None] = [
        content_width * WIDTH_SHARE[kind.value] if kind is not ColumnKind.OTHER else None
        for kind in kinds
    ]

    others = widths.count(None)
    if others:
        remainder = content_width - sum(w for w in widths if w is not None)
        share = remainder / others if remainder > 0 else content_width / len(headers)
        widths = [share if w is None else w for w in widths]

    total = sum(widths)
    scale = content_width / total
    return [w * scale for w in widths]


def column_alignment(headers: Sequence[str], index: int) -> str:
    """``"right"`` for numeric columns, ``"left"`` for the first, else ``"center"``."""
    if classify_header(headers[index]) is ColumnKind.NUMERIC:
        return "right"
    if index == 0:
        return "left"
    return "center"


def fit_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
    """Shorten ``text`` with an ellipsis until it fits ``max_width``."""
    if stringWidth(text, font_name, font_size) <= max_width:
        return text
    if stringWidth(ELLIPSIS, font_name, font_size) > max_width:
        return ""
    lo, hi = 0, len(text)
    best = ""
    while lo <= hi:
        mid = (lo + hi) // 2
        candidate = text[:mid].rstrip() + ELLIPSIS
        if stringWidth(candidate, font_name, font_size) <= max_width:
            best = candidate
            lo = mid + 1
        else:
            hi = mid - 1
    return best or ELLIPSIS


class _TableGeometry:
    def __init__(self, cursor: LayoutCursor, table: TableSpec) -> None:
        self.cursor = cursor
        self.table = table
        self.left = cursor.left
        self.width = cursor.content_width
        self.widths = column_widths(table.headers, self.width)
        self.xs = [self.left + sum(self.widths[:i]) for i in range(len(self.widths))]
        self.alignments = [column_alignment(table.headers, i) for i in range(len(self.widths))]

    def draw_cell(self, c: Canvas, text: str, index: int, baseline: float, font: str) -> None:
        x, width = self.xs[index], self.widths[index]
        fitted = fit_text(text, font, FONT_SIZE, width - 2 * CELL_PADDING)
        align = self.alignments[index]
        if align == "right":
            c.drawRightString(x + width - CELL_PADDING, baseline, fitted)
        elif align == "center":
            c.drawCentredString(x + width / 2, baseline, fitted)
        else:
            c.drawString(x + CELL_PADDING, baseline, fitted)

    def draw_header(self, y: float) -> None:
        c = self.cursor.canvas
        pdf_y = self.cursor.pdf_y
        c.saveState()
        c.setFillColor(C_HEADER_BG)
        c.rect(self.left, pdf_y(y + HEADER_HEIGHT), self.width, HEADER_HEIGHT, stroke=0, fill=1)
        c.setFillColor(colors.black)
        c.setFont(FONT_BOLD, FONT_SIZE)
        baseline = pdf_y(y + (HEADER_HEIGHT + FONT_SIZE * 0.7) / 2)
        for index, header in enumerate(self.table.headers):
            self.draw_cell(c, header, index, baseline, FONT_BOLD)
        c.setStrokeColor(colors.black)
        c.setLineWidth(1)
        c.line(self.left, pdf_y(y + HEADER_HEIGHT), self.left + self.width, pdf_y(y + HEADER_HEIGHT))
        c.restoreState()

    def draw_row(self, cells: tuple[str, ...], row_index: int, y: float) -> None:
        c = self.cursor.canvas
        pdf_y = self.cursor.pdf_y
        c.saveState()
        if row_index % 2 == 1:
            c.setFillColor(C_STRIPE_BG)
            c.rect(self.left, pdf_y(y + ROW_HEIGHT), self.width, ROW_HEIGHT, stroke=0, fill=1)
        c.setFillColor(colors.black)
        c.setFont(FONT_REGULAR, FONT_SIZE)
        baseline = pdf_y(y + (ROW_HEIGHT + FONT_SIZE * 0.7) / 2)
        for index, cell in enumerate(cells):
            self.draw_cell(c, cell, index, baseline, FONT_REGULAR)
        c.setStrokeColor(C_ROW_RULE)
        c.setLineWidth(0.5)
        c.line(self.left, pdf_y(y + ROW_HEIGHT), self.left + self.width, pdf_y(y + ROW_HEIGHT))
        c.restoreState()

    def draw_frame(self, top: float, bottom: float) -> None:
        """Outer box and column rules for the part of the table on this page."""
        c = self.cursor.canvas
        pdf_y = self.cursor.pdf_y
        c.saveState()
        c.setStrokeColor(colors.black)
        c.setLineWidth(1)
        c.rect(self.left, pdf_y(bottom), self.width, bottom - top, stroke=1, fill=0)
        c.setLineWidth(0.5)
        for x in self.xs[1:]:
            c.line(x, pdf_y(top), x, pdf_y(bottom))
        c.restoreState()


def draw_table(canvas: Canvas, cursor: LayoutCursor, table: TableSpec) -> TableResult:
    """Draw ``table`` at the cursor and leave the cursor below it.

    If the whole table does not fit on the current page it is started on a
    fresh one. The returned ``final_y`` is the bottom edge of the last row on
    the last page; the cursor itself sits ``TABLE_GAP`` below that.
    """
    if canvas is not cursor.canvas:
        raise ValueError("draw_table must draw on the cursor's canvas")

    geometry = _TableGeometry(cursor, table)
    page_bottom = cursor.page_height - BOTTOM_MARGIN

    needed = HEADER_HEIGHT + len(table.rows) * ROW_HEIGHT + TABLE_GAP
    if cursor.y + needed > page_bottom and not cursor.at_page_top:
        cursor.new_page()

    cursor.enter(PageState.WRITING_TABLE)
    start_page = cursor.page
    segment_top = y = cursor.y

    geometry.draw_header(y)
    header_draws = 1
    y += HEADER_HEIGHT

    for row_index, cells in enumerate(table.rows):
        if y + ROW_HEIGHT > page_bottom:
            geometry.draw_frame(segment_top, y)
            cursor.y = y
            cursor.new_page()
            segment_top = y = cursor.y
            geometry.draw_header(y)
            header_draws += 1
            y += HEADER_HEIGHT
        geometry.draw_row(cells, row_index, y)
        y += ROW_HEIGHT

    geometry.draw_frame(segment_top, y)
    cursor.y = y + TABLE_GAP
    cursor.enter(PageState.WRITING_SECTION)

    return TableResult(
        final_y=y,
        pages_spanned=cursor.page - start_page + 1,
        header_draws=header_draws,
    )
