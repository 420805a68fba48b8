import pytest

from conftest import make_legs
from schulweg.errors import ProgrammingError
from schulweg.model import GroupInfo, RequestMode, ScheduleEntry, SplitScheduleEntry, TransportRequest
from schulweg.rows import RowRole, TableLayout, build_rows


def test_simple_entry_with_blank_fields(single_request):
    row_set = build_rows(single_request)

    assert row_set.headers == ("Tag", "Abfahrt Haltestelle", "Ankunft Schule", "Abfahrt Schule", "Ankunft Haltestelle")
    assert row_set.layout == TableLayout.SCHEDULE
    assert len(row_set.rows) == 2

    time_row, location_row = row_set.rows
    assert time_row.cells[0].content == "Montag"
    assert time_row.cells[0].row_span == 2
    assert [c.content for c in time_row.cells[1:]] == ["-"] * 4
    assert [c.content for c in location_row.cells] == ["(N/A)"] * 4
    assert (time_row.role, location_row.role) == (RowRole.PRIMARY, RowRole.SECONDARY)


def test_simple_entry_with_values():
    legs = make_legs("07:10", "07:45", "13:05", None, locations=("Markt", "GS Nord", " ", "Markt"))
    req = TransportRequest(mode=RequestMode.SINGLE, entries=(ScheduleEntry(day="Dienstag", legs=legs),))
    time_row, location_row = build_rows(req).rows
    assert [c.content for c in time_row.cells] == ["Dienstag", "07:10", "07:45", "13:05", "-"]
    assert [c.content for c in location_row.cells] == ["(Markt)", "(GS Nord)", "(N/A)", "(Markt)"]


def test_split_entries_expand_to_four_rows_each(split_request):
    rows = build_rows(split_request).rows
    n = len(split_request.entries)

    assert len(rows) == 4 * n
    spans = [i for i, row in enumerate(rows) if row.cells[0].row_span > 1]
    assert spans == [0, 4, 8]
    assert all(rows[i].cells[0].row_span == 4 for i in spans)
    # Only the first row of each group carries the weekday.
    assert [len(r.cells) for r in rows[:4]] == [5, 4, 4, 4]


def test_split_roles_alternate_within_each_group(split_request):
    roles = [row.role for row in build_rows(split_request).rows]
    group = [RowRole.PRIMARY, RowRole.SECONDARY, RowRole.PRIMARY, RowRole.SECONDARY]
    assert roles == group * len(split_request.entries)


def test_split_location_placeholders(split_request):
    rows = build_rows(split_request).rows
    morning_locations = [c.content for c in rows[1].cells]
    afternoon_locations = [c.content for c in rows[3].cells]
    assert morning_locations == ["(Vormittag)", "(N/A)", "(N/A)", "(N/A)"]
    assert afternoon_locations == ["(Nachmittag)", "(N/A)", "(N/A)", "(N/A)"]


def test_split_filled_first_location_wins_over_placeholder():
    entry = SplitScheduleEntry(
        day="Montag",
        morning=make_legs("07:00", "07:30", "12:00", "12:30", locations=("Markt", "", "", "")),
        afternoon=make_legs("13:00", None, None, "16:30"),
    )
    req = TransportRequest(mode=RequestMode.SINGLE, entries=(entry,))
    rows = build_rows(req).rows
    assert rows[1].cells[0].content == "(Markt)"
    assert [c.content for c in rows[2].cells] == ["13:00", "-", "-", "16:30"]


def test_mixed_shapes_keep_request_order():
    req = TransportRequest(
        mode=RequestMode.SINGLE,
        entries=(
            ScheduleEntry(day="Freitag"),
            SplitScheduleEntry(day="Montag"),
            ScheduleEntry(day="Mittwoch"),
        ),
    )
    rows = build_rows(req).rows
    assert len(rows) == 2 + 4 + 2
    days = [r.cells[0].content for r in rows if r.cells[0].row_span > 1]
    assert days == ["Freitag", "Montag", "Mittwoch"]


def test_group_rows(group_request):
    row_set = build_rows(group_request)
    assert row_set.headers == ("Tag", "Hinfahrt", "Rückfahrt")
    assert row_set.layout == TableLayout.GROUP
    assert len(row_set.rows) == len(group_request.entries)
    assert all(len(r.cells) == 3 for r in row_set.rows)

    day, outbound, back = row_set.rows[0].cells
    assert day.content == "Montag"
    assert day.row_span == 1
    assert outbound.content == "Abfahrt: --:-- (N/A)\nAnkunft: --:-- (N/A)"
    assert back.content == "Abfahrt: --:-- (N/A)\nAnkunft: --:-- (N/A)"


def test_group_rows_use_outbound_and_return_legs():
    legs = make_legs("07:10", "07:45", "13:05", "13:40", locations=("Markt", "GS Nord", "GS Nord", "Bahnhof"))
    req = TransportRequest(
        mode=RequestMode.GROUP,
        entries=(ScheduleEntry(day="Montag", legs=legs),),
        group=GroupInfo(names=("3b",)),
    )
    _, outbound, back = build_rows(req).rows[0].cells
    assert outbound.content == "Abfahrt: 07:10 (Markt)\nAnkunft: 07:45 (GS Nord)"
    assert back.content == "Abfahrt: 13:05 (GS Nord)\nAnkunft: 13:40 (Bahnhof)"


def test_group_split_entry_takes_morning_outbound_and_afternoon_return():
    entry = SplitScheduleEntry(
        day="Montag",
        morning=make_legs("07:10", "07:45", None, None),
        afternoon=make_legs(None, None, "15:00", "15:30"),
    )
    req = TransportRequest(mode=RequestMode.GROUP, entries=(entry,))
    _, outbound, back = build_rows(req).rows[0].cells
    assert outbound.content.startswith("Abfahrt: 07:10")
    assert back.content.startswith("Abfahrt: 15:00")


def test_builder_does_not_mutate_request(split_request):
    before = split_request.cache_key()
    build_rows(split_request)
    assert split_request.cache_key() == before


def test_unknown_mode_fails_loudly():
    req = TransportRequest(mode="bus", entries=(ScheduleEntry(day="Montag"),))
    with pytest.raises(ProgrammingError):
        build_rows(req)


def test_empty_schedule_fails_loudly():
    with pytest.raises(ProgrammingError):
        build_rows(TransportRequest(mode=RequestMode.SINGLE, entries=()))
