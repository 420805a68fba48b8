from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple

from .config import (
    ADDRESS_LABEL,
    BOTTOM_MARGIN,
    GROUP_DAY_COLUMN_WIDTH,
    GROUP_LABEL,
    GUARDIAN_SIGNATURE,
    HEADCOUNT_LABEL,
    HEADER_SIZE,
    HEADER_START_Y,
    LINE_STEP,
    MISSING_LOCATION,
    MISSING_TIME,
    PAGE_MARGIN,
    PALETTE,
    RESPONSIBLE_LABEL,
    SCHOOL_SIGNATURE,
    SECONDARY_SIZE,
    SIGNATURE_BLOCK_HEIGHT,
    SIGNATURE_GAP,
    SIGNATURE_LINE_LENGTH,
    SIGNATURE_SIZE,
    SIGNATURE_TOP_Y,
    STUDENT_LABEL,
    TABLE_GAP,
    TABLE_SIZE,
    TITLE,
    TITLE_Y,
)
from .logging import get_logger
from .model import GroupInfo, RequestMode, Student, TransportRequest
from .rows import RowRole, RowSet, TableLayout, TableRow

log = get_logger(__name__)

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class CellStyle:
    bold: bool = False
    size: float = TABLE_SIZE
    color: Color = PALETTE["ink"]


@dataclass(frozen=True)
class TableStyle:
    column_align: Tuple[str, ...]
    col_widths: Optional[Tuple[float, ...]] = None
    first_column_bold: bool = False
    header_fill: Color = PALETTE["header_fill"]
    header_text: Color = PALETTE["header_text"]
    font_size: float = TABLE_SIZE


class DrawingSurface(Protocol):
    """Page-drawing capability the composer talks to. Coordinates are mm from the top-left."""

    def page_width(self) -> float: ...

    def page_height(self) -> float: ...

    def draw_title(self, text: str, y: float) -> None: ...

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
    ) -> int: ...

    def draw_table(
        self,
        headers: Sequence[str],
        rows: Sequence[TableRow],
        row_style: Callable[[TableRow], CellStyle],
        start_y: float,
        style: TableStyle,
    ) -> None: ...

    def last_table_bottom(self) -> float: ...

    def add_page(self) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...


def row_style_for(layout: TableLayout) -> Callable[[TableRow], CellStyle]:
    """
    Styling comes from the row role, never from the row index. Group rows
    hold multi-line text blocks, so their primary rows keep regular weight.
    """
    primary_bold = layout == TableLayout.SCHEDULE

    def row_style(row: TableRow) -> CellStyle:
        if row.role == RowRole.SECONDARY:
            return CellStyle(bold=False, size=SECONDARY_SIZE, color=PALETTE["muted"])
        return CellStyle(bold=primary_bold, size=TABLE_SIZE)

    return row_style


def table_style_for(layout: TableLayout, column_count: int, page_width: float) -> TableStyle:
    if layout == TableLayout.GROUP:
        usable = page_width - 2 * PAGE_MARGIN
        rest = (usable - GROUP_DAY_COLUMN_WIDTH) / max(1, column_count - 1)
        return TableStyle(
            column_align=("LEFT",) * column_count,
            col_widths=(GROUP_DAY_COLUMN_WIDTH,) + (rest,) * (column_count - 1),
            first_column_bold=True,
        )
    return TableStyle(column_align=("LEFT",) + ("CENTER",) * (column_count - 1))


def signature_position(table_bottom: float, page_height: float) -> Tuple[float, bool]:
    """
    Vertical position of the signature lines, plus whether a new page is
    needed first. Signatures move to the top of a fresh page when the table
    ends inside the bottom margin plus the signature block.
    """
    if table_bottom > page_height - (BOTTOM_MARGIN + SIGNATURE_BLOCK_HEIGHT):
        return SIGNATURE_TOP_Y, True
    return table_bottom + SIGNATURE_GAP, False


def _draw_student_header(students: Sequence[Student], surface: DrawingSurface, y: float) -> float:
    drawn = 0
    for student in students:
        if student.is_empty():
            continue
        if drawn:
            y += LINE_STEP
        surface.draw_text(f"{STUDENT_LABEL}: {student.display_name()}", PAGE_MARGIN, y, bold=True)
        y += LINE_STEP
        address = student.address_line()
        if address:
            surface.draw_text(f"{ADDRESS_LABEL}: {address}", PAGE_MARGIN, y)
            y += LINE_STEP
        drawn += 1
    return y


def _draw_group_header(group: GroupInfo, surface: DrawingSurface, y: float) -> float:
    names = ", ".join(group.clean_names()) or MISSING_LOCATION
    max_w = surface.page_width() - 2 * PAGE_MARGIN
    lines = surface.draw_text(f"{GROUP_LABEL}: {names}", PAGE_MARGIN, y, bold=True, max_width=max_w)
    y += LINE_STEP * lines
    headcount = str(group.headcount) if group.headcount is not None else MISSING_TIME
    surface.draw_text(f"{HEADCOUNT_LABEL}: {headcount}", PAGE_MARGIN, y)
    y += LINE_STEP
    responsible = group.responsible.strip() or MISSING_LOCATION
    surface.draw_text(f"{RESPONSIBLE_LABEL}: {responsible}", PAGE_MARGIN, y)
    y += LINE_STEP
    return y


def _draw_signatures(surface: DrawingSurface, y: float) -> None:
    surface.draw_line(PAGE_MARGIN, y, PAGE_MARGIN + SIGNATURE_LINE_LENGTH, y)
    surface.draw_text(GUARDIAN_SIGNATURE, PAGE_MARGIN, y + LINE_STEP, size=SIGNATURE_SIZE)

    right_x = surface.page_width() - PAGE_MARGIN
    surface.draw_line(right_x, y, right_x - SIGNATURE_LINE_LENGTH, y)
    surface.draw_text(SCHOOL_SIGNATURE, right_x, y + LINE_STEP, size=SIGNATURE_SIZE, align="R")


def compose(request: TransportRequest, row_set: RowSet, surface: DrawingSurface) -> None:
    """
    Issue the drawing calls for one request document: title, header block,
    schedule table and the two signature lines. No file I/O happens here.
    """
    surface.draw_title(TITLE, TITLE_Y)

    if request.mode == RequestMode.GROUP:
        cursor = _draw_group_header(request.group, surface, HEADER_START_Y)
    else:
        cursor = _draw_student_header(request.students, surface, HEADER_START_Y)

    style = table_style_for(row_set.layout, len(row_set.headers), surface.page_width())
    surface.draw_table(row_set.headers, row_set.rows, row_style_for(row_set.layout), cursor + TABLE_GAP, style)

    table_bottom = surface.last_table_bottom()
    signature_y, needs_page = signature_position(table_bottom, surface.page_height())
    if needs_page:
        log.info("signature_page_added", table_bottom=table_bottom)
        surface.add_page()
    _draw_signatures(surface, signature_y)
