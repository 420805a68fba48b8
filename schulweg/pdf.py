from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from .compose import CellStyle, TableStyle
from .config import BOTTOM_MARGIN, HEADER_SIZE, LINE_STEP, PAGE_MARGIN, PALETTE, TITLE, TITLE_SIZE
from .errors import BackendUnavailable
from .rows import TableRow

if TYPE_CHECKING:
    from fpdf import FPDF


def _load_backend():
    """
    Import fpdf2 lazily so a missing install surfaces as a readable export
    error instead of breaking the form.
    """
    try:
        from fpdf import FPDF
        from fpdf.fonts import FontFace
    except ImportError as exc:
        raise BackendUnavailable("Die PDF-Bibliothek (fpdf2) konnte nicht geladen werden.") from exc
    if not hasattr(FPDF, "table"):
        raise BackendUnavailable("Die Tabellenfunktion von fpdf2 ist nicht verfügbar.")
    return FPDF, FontFace


def _pdf_safe_text(text: str) -> str:
    if text is None:
        return ""
    return str(text).encode("latin-1", "replace").decode("latin-1")


def _wrap_pdf_line(pdf: "FPDF", text: str, max_w: float) -> list[str]:
    safe_text = _pdf_safe_text(text)
    if max_w <= 0:
        return [safe_text]
    lines = []
    current = ""
    for word in safe_text.split(" "):
        if word == "":
            continue
        candidate = word if not current else f"{current} {word}"
        if pdf.get_string_width(candidate) <= max_w:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        if pdf.get_string_width(word) <= max_w:
            current = word
            continue
        # Hard-break a single word wider than the line.
        chunk = ""
        for ch in word:
            if not chunk or pdf.get_string_width(chunk + ch) <= max_w:
                chunk += ch
            else:
                lines.append(chunk)
                chunk = ch
        current = chunk
    if current:
        lines.append(current)
    return lines if lines else [safe_text]


class FpdfSurface:
    """
    DrawingSurface backed by an fpdf2 document (A4 portrait, mm).
    Tables go through FPDF.table(), which handles row spans and repeats
    the heading row when the table runs onto a new page.
    """

    def __init__(self, title: str = TITLE):
        fpdf_cls, font_face = _load_backend()
        self._font_face = font_face
        self.pdf = fpdf_cls(orientation="P", unit="mm", format="A4")
        self.pdf.set_margins(PAGE_MARGIN, PAGE_MARGIN, PAGE_MARGIN)
        self.pdf.set_auto_page_break(auto=True, margin=BOTTOM_MARGIN)
        self.pdf.set_title(_pdf_safe_text(title))
        self.pdf.set_author("Schulweg")
        self.pdf.add_page()
        self._table_bottom: Optional[float] = None

    def _set_font(self, bold: bool, size: float) -> None:
        self.pdf.set_font("Helvetica", "B" if bold else "", size)
        self.pdf.set_text_color(*PALETTE["ink"])

    def page_width(self) -> float:
        return self.pdf.w

    def page_height(self) -> float:
        return self.pdf.h

    def draw_title(self, text: str, y: float) -> None:
        self._set_font(True, TITLE_SIZE)
        safe = _pdf_safe_text(text)
        self.pdf.text((self.pdf.w - self.pdf.get_string_width(safe)) / 2, y, safe)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        bold: bool = False,
        size: float = HEADER_SIZE,
        align: str = "L",
        max_width: Optional[float] = None,
        line_height: float = LINE_STEP,
    ) -> int:
        self._set_font(bold, size)
        lines = _wrap_pdf_line(self.pdf, text, max_width) if max_width else [_pdf_safe_text(text)]
        for idx, line in enumerate(lines):
            line_x = x - self.pdf.get_string_width(line) if align == "R" else x
            self.pdf.text(line_x, y + idx * line_height, line)
        return len(lines)

    def draw_table(
        self,
        headers: Sequence[str],
        rows: Sequence[TableRow],
        row_style: Callable[[TableRow], CellStyle],
        start_y: float,
        style: TableStyle,
    ) -> None:
        pdf = self.pdf
        font_face = self._font_face
        pdf.set_y(start_y)
        self._set_font(False, style.font_size)
        headings_style = font_face(emphasis="BOLD", color=style.header_text, fill_color=style.header_fill)
        column_count = len(headers)

        with pdf.table(
            col_widths=style.col_widths,
            text_align=style.column_align,
            headings_style=headings_style,
            v_align="MIDDLE",
            padding=2,
            line_height=style.font_size * 0.5,
        ) as table:
            heading = table.row()
            for label in headers:
                heading.cell(_pdf_safe_text(label), align="CENTER")
            for row in rows:
                cell_style = row_style(row)
                # Rows below a spanning weekday cell start at column 1.
                offset = column_count - len(row.cells)
                out = table.row()
                for idx, cell in enumerate(row.cells):
                    first_column = offset + idx == 0
                    bold = cell_style.bold or cell.row_span > 1 or (style.first_column_bold and first_column)
                    face = font_face(
                        emphasis="BOLD" if bold else None,
                        size_pt=cell_style.size,
                        color=cell_style.color,
                    )
                    out.cell(_pdf_safe_text(cell.content), rowspan=cell.row_span, style=face)

        self._table_bottom = pdf.y

    def last_table_bottom(self) -> float:
        if self._table_bottom is None:
            return self.pdf.y
        return self._table_bottom

    def add_page(self) -> None:
        self.pdf.add_page()

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.pdf.set_line_width(0.2)
        self.pdf.set_draw_color(*PALETTE["ink"])
        self.pdf.line(x1, y1, x2, y2)

    def output(self) -> bytes:
        return bytes(self.pdf.output())


def save_pdf(pdf_bytes: bytes, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(pdf_bytes)
    return path
