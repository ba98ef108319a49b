"""
PDF Quote Generator.

The quote layout only talks to a small drawing capability (DocumentWriter):
draw text at a position, start a new page, measure how text wraps, save.
FpdfWriter provides it on top of fpdf2 (pure Python, no system dependencies).

Layout:
1. Header: calculator name, company, generation timestamp
2. Section / Item / Price table, header reprinted on every page it spans
3. Totals footer
4. Closing note
"""

from fpdf import FPDF
from fpdf.enums import MethodReturnValue

from .pricing import format_money

LINE_H = 5.5
ROW_GAP = 1.5
CELL_PAD = 2.0
FOOTER_RESERVE = 12.0

# (label, share of printable width, alignment)
TABLE_COLUMNS = [("Section", 0.32, "L"), ("Item", 0.46, "L"), ("Price", 0.22, "R")]


def _safe(text: str) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        text
        .replace("\u2022", "-")    # bullet
        .replace("\u2014", " - ")  # em dash
        .replace("\u2013", "-")    # en dash
        .replace("\u2026", "...")  # ellipsis
        .replace("\u201c", '"')    # left double quote
        .replace("\u201d", '"')    # right double quote
        .replace("\u2018", "'")    # left single quote
        .replace("\u2019", "'")    # right single quote
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


class DocumentWriter:
    """
    Drawing capability the quote layout is written against.
    Coordinates are in mm from the top-left corner of the page.
    """

    page_width = 0.0
    page_height = 0.0
    margin = 0.0

    def draw_text(self, x: float, y: float, text: str, width: float = 0,
                  size: float = 9, style: str = "", align: str = "L") -> None:
        raise NotImplementedError

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        raise NotImplementedError

    def new_page(self) -> None:
        raise NotImplementedError

    def measure_wrapped_lines(self, text: str, width: float,
                              size: float = 9, style: str = "") -> list[str]:
        raise NotImplementedError

    def save(self, filename) -> None:
        raise NotImplementedError


class QuotePDF(FPDF):
    """US-Letter page with a page-number footer."""

    MARGIN = 19.05  # 0.75in

    def __init__(self):
        super().__init__(orientation="P", unit="mm", format="Letter")
        self.set_margins(self.MARGIN, self.MARGIN, self.MARGIN)
        self.set_auto_page_break(auto=False)
        self.alias_nb_pages()

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="C")
        self.set_text_color(0, 0, 0)


class FpdfWriter(DocumentWriter):
    """DocumentWriter backed by fpdf2."""

    def __init__(self):
        self.pdf = QuotePDF()
        self.page_width = self.pdf.w
        self.page_height = self.pdf.h
        self.margin = QuotePDF.MARGIN

    def draw_text(self, x, y, text, width=0, size=9, style="", align="L"):
        self.pdf.set_font("Helvetica", style, size)
        self.pdf.set_xy(x, y)
        self.pdf.cell(width, LINE_H, _safe(text), align=align)

    def draw_line(self, x1, y1, x2, y2):
        self.pdf.set_draw_color(200, 200, 200)
        self.pdf.line(x1, y1, x2, y2)

    def new_page(self):
        self.pdf.add_page()

    def measure_wrapped_lines(self, text, width, size=9, style=""):
        self.pdf.set_font("Helvetica", style, size)
        lines = self.pdf.multi_cell(
            width, LINE_H, _safe(text),
            dry_run=True, output=MethodReturnValue.LINES,
        )
        return lines or [""]

    def save(self, filename):
        self.pdf.output(str(filename))


def _column_layout(writer: DocumentWriter):
    """Return [(label, x, width, align), ...] across the printable width."""
    printable = writer.page_width - 2 * writer.margin
    x = writer.margin
    columns = []
    for label, share, align in TABLE_COLUMNS:
        width = printable * share
        columns.append((label, x, width, align))
        x += width
    return columns


def _table_header(writer: DocumentWriter, y: float, columns) -> float:
    for label, x, width, align in columns:
        writer.draw_text(x, y, label, width - CELL_PAD, size=9, style="B", align=align)
    y += LINE_H + 0.5
    writer.draw_line(writer.margin, y, writer.page_width - writer.margin, y)
    return y + 1.5


def layout_quote(writer: DocumentWriter, title: str, line_items, total: float,
                 generated_at, company_name: str = "", closing_note: str = "") -> int:
    """
    Lay out an itemized quote on the writer.

    Args:
        writer: DocumentWriter to draw on (no page started yet)
        title: calculator name
        line_items: [LineItem, ...] in schema order
        total: running total shown in the footer
        generated_at: datetime printed in the header
        company_name: optional line under the title
        closing_note: text printed after the totals

    Returns:
        Number of pages started
    """
    top = writer.margin
    bottom = writer.page_height - writer.margin - FOOTER_RESERVE
    left = writer.margin
    right = writer.page_width - writer.margin
    columns = _column_layout(writer)
    pages = 1

    # --- Header ---
    writer.new_page()
    y = top
    writer.draw_text(left, y, title, size=18, style="B")
    y += 10
    if company_name:
        writer.draw_text(left, y, company_name, size=10)
        y += 6
    writer.draw_text(left, y, f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}", size=9)
    y += 10

    # --- Table ---
    y = _table_header(writer, y, columns)
    for item in line_items:
        section_col, item_col, price_col = columns
        section_lines = writer.measure_wrapped_lines(item.section, section_col[2] - CELL_PAD)
        item_lines = writer.measure_wrapped_lines(item.item, item_col[2] - CELL_PAD)
        row_height = max(len(section_lines), len(item_lines)) * LINE_H

        if y + row_height > bottom:
            writer.new_page()
            pages += 1
            y = _table_header(writer, top, columns)

        for i, line in enumerate(section_lines):
            writer.draw_text(section_col[1], y + i * LINE_H, line, section_col[2] - CELL_PAD)
        for i, line in enumerate(item_lines):
            writer.draw_text(item_col[1], y + i * LINE_H, line, item_col[2] - CELL_PAD)
        writer.draw_text(price_col[1], y, format_money(item.price), price_col[2], align="R")
        y += row_height + ROW_GAP

    # --- Totals footer ---
    if y + 2 * LINE_H + 4 > bottom:
        writer.new_page()
        pages += 1
        y = top
    writer.draw_line(left, y, right, y)
    y += 2
    writer.draw_text(left, y, "Total", size=12, style="B")
    writer.draw_text(left, y, format_money(total), right - left, size=12, style="B", align="R")
    y += LINE_H * 2 + 4

    # --- Closing note ---
    if closing_note:
        note_lines = writer.measure_wrapped_lines(closing_note, right - left, size=8, style="I")
        for line in note_lines:
            if y + LINE_H > bottom:
                writer.new_page()
                pages += 1
                y = top
            writer.draw_text(left, y, line, right - left, size=8, style="I")
            y += LINE_H

    return pages
