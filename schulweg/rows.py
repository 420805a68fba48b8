from dataclasses import dataclass
from datetime import time
from enum import Enum
from typing import List, Optional, Tuple

from .config import (
    AFTERNOON_PLACEHOLDER,
    ARRIVE_LABEL,
    DEPART_LABEL,
    GROUP_HEADERS,
    MISSING_GROUP_TIME,
    MISSING_LOCATION,
    MISSING_TIME,
    MORNING_PLACEHOLDER,
    SINGLE_HEADERS,
)
from .errors import ProgrammingError
from .model import Entry, RequestMode, ScheduleEntry, SplitScheduleEntry, TransportRequest, TripLegs, format_time


class RowRole(str, Enum):
    """Emphasis of a table row: time rows are primary, location rows secondary."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class TableLayout(str, Enum):
    SCHEDULE = "schedule"
    GROUP = "group"


@dataclass(frozen=True)
class Cell:
    content: str
    row_span: int = 1


@dataclass(frozen=True)
class TableRow:
    cells: Tuple[Cell, ...]
    role: RowRole


@dataclass(frozen=True)
class RowSet:
    headers: Tuple[str, ...]
    rows: Tuple[TableRow, ...]
    layout: TableLayout


def _time_text(value: Optional[time]) -> str:
    return format_time(value) or MISSING_TIME


def _location_text(value: str, placeholder: str = MISSING_LOCATION) -> str:
    text = (value or "").strip()
    return f"({text or placeholder})"


def _time_cells(legs: TripLegs) -> Tuple[Cell, ...]:
    return tuple(Cell(_time_text(t)) for t in legs.times())


def _location_cells(legs: TripLegs, first_placeholder: str = MISSING_LOCATION) -> Tuple[Cell, ...]:
    cells = []
    for idx, loc in enumerate(legs.locations()):
        cells.append(Cell(_location_text(loc, first_placeholder if idx == 0 else MISSING_LOCATION)))
    return tuple(cells)


def _simple_rows(entry: ScheduleEntry) -> List[TableRow]:
    day = Cell(entry.day, row_span=2)
    return [
        TableRow((day,) + _time_cells(entry.legs), RowRole.PRIMARY),
        TableRow(_location_cells(entry.legs), RowRole.SECONDARY),
    ]


def _split_rows(entry: SplitScheduleEntry) -> List[TableRow]:
    # Only the first row carries the weekday; it spans the other three.
    day = Cell(entry.day, row_span=4)
    return [
        TableRow((day,) + _time_cells(entry.morning), RowRole.PRIMARY),
        TableRow(_location_cells(entry.morning, MORNING_PLACEHOLDER), RowRole.SECONDARY),
        TableRow(_time_cells(entry.afternoon), RowRole.PRIMARY),
        TableRow(_location_cells(entry.afternoon, AFTERNOON_PLACEHOLDER), RowRole.SECONDARY),
    ]


def _journey_text(depart: Optional[time], depart_loc: str, arrive: Optional[time], arrive_loc: str) -> str:
    def line(label: str, value, loc: str) -> str:
        return f"{label}: {format_time(value) or MISSING_GROUP_TIME} ({(loc or '').strip() or MISSING_LOCATION})"

    return "\n".join([line(DEPART_LABEL, depart, depart_loc), line(ARRIVE_LABEL, arrive, arrive_loc)])


def _group_row(entry: Entry) -> TableRow:
    if entry.split:
        outbound_legs, return_legs = entry.morning, entry.afternoon
    else:
        outbound_legs = return_legs = entry.legs
    outbound = _journey_text(
        outbound_legs.departure_stop,
        outbound_legs.departure_stop_location,
        outbound_legs.arrival_school,
        outbound_legs.arrival_school_location,
    )
    back = _journey_text(
        return_legs.departure_school,
        return_legs.departure_school_location,
        return_legs.arrival_stop,
        return_legs.arrival_stop_location,
    )
    return TableRow((Cell(entry.day), Cell(outbound), Cell(back)), RowRole.PRIMARY)


def build_rows(request: TransportRequest) -> RowSet:
    """
    Map a request to header labels plus ordered table rows.

    Entries keep the order they have in the request. Single requests expand
    each entry into time/location row pairs (two pairs for split entries),
    group requests into one row with outbound and return text blocks.
    """
    request.validate()

    if request.mode == RequestMode.GROUP:
        rows = [_group_row(entry) for entry in request.entries]
        return RowSet(headers=GROUP_HEADERS, rows=tuple(rows), layout=TableLayout.GROUP)

    if request.mode == RequestMode.SINGLE:
        rows = []
        for entry in request.entries:
            rows.extend(_split_rows(entry) if entry.split else _simple_rows(entry))
        return RowSet(headers=SINGLE_HEADERS, rows=tuple(rows), layout=TableLayout.SCHEDULE)

    raise ProgrammingError(f"Unknown request mode: {request.mode!r}")
