"""Page geometry and the layout cursor used while drawing a report.

Y coordinates are measured from the top edge of the page, the way a reader
sees it; :meth:`LayoutCursor.pdf_y` converts them to reportlab's
bottom-left origin at draw time.
"""

from __future__ import annotations

import logging
from enum import Enum

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen.canvas import Canvas

logger = logging.getLogger(__name__)

# ══════════════════════════════════════════════════════════════════════
# Constants
# ══════════════════════════════════════════════════════════════════════

PAGE_SIZE = A4
PAGE_W, PAGE_H = A4
MARGIN = 40

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

TITLE_SIZE = 14
SUBTITLE_SIZE = 12
NORMAL_SIZE = 10
SMALL_SIZE = 8
LINE_SPACING = 1.2

C_TEXT = colors.black
C_MUTED = colors.HexColor("#666666")
C_RULE = colors.HexColor("#dddddd")


class PageState(str, Enum):
    WRITING_HEADER = "writing_header"
    WRITING_SECTION = "writing_section"
    WRITING_TABLE = "writing_table"
    NEEDS_NEW_PAGE = "needs_new_page"


class LayoutCursor:
    """Current page and vertical position of a document being drawn.

    One cursor belongs to one render call. Every block writer asks
    :meth:`ensure_space` before drawing; when the block does not fit the
    cursor passes through ``NEEDS_NEW_PAGE``, closes the page (footer),
    opens the next one (running header) and resumes the previous state at
    the top margin.
    """

    def __init__(
        self,
        canvas: Canvas,
        *,
        page_size: tuple[float, float] = PAGE_SIZE,
        margin: float = MARGIN,
        running_header: str | None = None,
    ) -> None:
        self.canvas = canvas
        self.page_width, self.page_height = page_size
        self.margin = margin
        self.running_header = running_header
        self.y = margin
        self.page = 1
        self.state = PageState.WRITING_HEADER

    # ── geometry ──

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def left(self) -> float:
        return self.margin

    @property
    def remaining(self) -> float:
        """Vertical space left above the bottom margin."""
        return self.page_height - self.y - self.margin

    @property
    def at_page_top(self) -> bool:
        return self.y <= self.margin

    def pdf_y(self, y: float) -> float:
        return self.page_height - y

    # ── state transitions ──

    def enter(self, state: PageState) -> None:
        self.state = state

    def move_down(self, amount: float) -> None:
        self.y += amount

    def move_down_lines(self, lines: float, font_size: float) -> None:
        self.y += lines * font_size * LINE_SPACING

    def ensure_space(self, height: float) -> bool:
        """Start a new page unless ``height`` fits; True if a page was added."""
        if self.remaining >= height or self.at_page_top:
            return False
        self.new_page()
        return True

    def new_page(self) -> None:
        resume = self.state
        self.state = PageState.NEEDS_NEW_PAGE
        self._draw_footer()
        self.canvas.showPage()
        self.page += 1
        self.y = self.margin
        logger.debug("Report layout moved to page %d", self.page)
        if self.running_header:
            self._draw_running_header()
        self.state = resume

    def finish(self) -> None:
        """Close the last page. The canvas still has to be saved by the caller."""
        self._draw_footer()
        self.canvas.showPage()

    # ── page furniture ──

    def _draw_running_header(self) -> None:
        c = self.canvas
        c.saveState()
        c.setFont(FONT_REGULAR, SMALL_SIZE - 1)
        c.setFillColor(C_MUTED)
        c.drawString(self.margin, self.pdf_y(self.margin * 0.55), self.running_header)
        c.setStrokeColor(C_RULE)
        c.setLineWidth(0.5)
        line_y = self.pdf_y(self.margin * 0.75)
        c.line(self.margin, line_y, self.page_width - self.margin, line_y)
        c.restoreState()

    def _draw_footer(self) -> None:
        c = self.canvas
        c.saveState()
        c.setFont(FONT_REGULAR, SMALL_SIZE - 1)
        c.setFillColor(C_MUTED)
        c.drawRightString(
            self.page_width - self.margin, self.margin * 0.5, f"Page {self.page}"
        )
        c.restoreState()
