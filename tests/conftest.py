import textwrap

import pytest

from schulweg.model import (
    GroupInfo,
    RequestMode,
    ScheduleEntry,
    SplitScheduleEntry,
    Student,
    TransportRequest,
    TripLegs,
    parse_time,
)


class RecordingSurface:
    """Fake DrawingSurface that records every call instead of painting."""

    def __init__(self, width=210.0, height=297.0, table_height=40.0, chars_per_line=40):
        self.width = width
        self.height = height
        self.table_height = table_height
        self.chars_per_line = chars_per_line
        self.calls = []
        self.row_styles = []
        self.table_bottom = None

    def page_width(self):
        return self.width

    def page_height(self):
        return self.height

    def draw_title(self, text, y):
        self.calls.append(("title", text, y))

    def draw_text(self, text, x, y, *, bold=False, size=12, align="L", max_width=None, line_height=5):
        lines = [text] if max_width is None else textwrap.wrap(text, self.chars_per_line) or [""]
        self.calls.append(("text", text, x, y, bold, align))
        return len(lines)

    def draw_table(self, headers, rows, row_style, start_y, style):
        self.calls.append(("table", tuple(headers), tuple(rows), start_y, style))
        self.row_styles = [row_style(r) for r in rows]
        self.table_bottom = start_y + self.table_height

    def last_table_bottom(self):
        return self.table_bottom

    def add_page(self):
        self.calls.append(("add_page",))

    def draw_line(self, x1, y1, x2, y2):
        self.calls.append(("line", x1, y1, x2, y2))

    def output(self):
        return b"%PDF-1.3 recorded"

    def of_kind(self, kind):
        return [c for c in self.calls if c[0] == kind]


@pytest.fixture
def surface():
    return RecordingSurface()


def make_legs(*times, locations=("", "", "", "")):
    values = [parse_time(t) for t in times] if times else [None] * 4
    return TripLegs(
        departure_stop=values[0],
        departure_stop_location=locations[0],
        arrival_school=values[1],
        arrival_school_location=locations[1],
        departure_school=values[2],
        departure_school_location=locations[2],
        arrival_stop=values[3],
        arrival_stop_location=locations[3],
    )


@pytest.fixture
def single_request():
    return TransportRequest(
        mode=RequestMode.SINGLE,
        entries=(ScheduleEntry(day="Montag"),),
        students=(Student(first_name="Max", last_name="Mustermann"),),
    )


@pytest.fixture
def split_request():
    entries = tuple(
        SplitScheduleEntry(day=day, morning=make_legs(), afternoon=make_legs())
        for day in ("Montag", "Mittwoch", "Freitag")
    )
    return TransportRequest(
        mode=RequestMode.SINGLE,
        entries=entries,
        students=(Student(first_name="Erika", last_name="Musterfrau"),),
    )


@pytest.fixture
def group_request():
    return TransportRequest(
        mode=RequestMode.GROUP,
        entries=(ScheduleEntry(day="Montag"), ScheduleEntry(day="Dienstag")),
        group=GroupInfo(names=("3b",), headcount=24, responsible="Frau Schmidt"),
    )
