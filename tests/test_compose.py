from dataclasses import replace

from conftest import RecordingSurface
from schulweg.compose import compose, row_style_for, signature_position, table_style_for
from schulweg.model import GroupInfo, Student
from schulweg.rows import RowRole, TableLayout, build_rows


def _compose(request, surface):
    compose(request, build_rows(request), surface)
    return surface


def test_title_header_table_signatures_in_order(single_request, surface):
    _compose(single_request, surface)
    kinds = [c[0] for c in surface.calls]
    assert kinds == ["title", "text", "table", "line", "text", "line", "text"]

    assert surface.calls[0] == ("title", "Schülerbeförderungsantrag", 22)
    _, text, x, y, bold, _ = surface.calls[1]
    assert text == "Name des Schülers / der Schülerin: Max Mustermann"
    assert (x, y, bold) == (14, 40, True)
    # One header line -> table 5 below the cursor.
    assert surface.of_kind("table")[0][3] == 50


def test_students_are_separated_and_empty_ones_skipped(single_request, surface):
    students = (
        Student(first_name="Max", last_name="Mustermann", street="Hauptstr. 1", zip_code="50667", city="Köln"),
        Student(),
        Student(first_name="Moritz", last_name="Mustermann"),
    )
    _compose(replace(single_request, students=students), surface)
    header = [c for c in surface.of_kind("text") if c[3] < 60]
    assert [(c[1], c[3], c[4]) for c in header] == [
        ("Name des Schülers / der Schülerin: Max Mustermann", 40, True),
        ("Anschrift: Hauptstr. 1, 50667 Köln", 45, False),
        ("Name des Schülers / der Schülerin: Moritz Mustermann", 55, True),
    ]
    assert surface.of_kind("table")[0][3] == 65


def test_group_header_wraps_names(group_request):
    surface = RecordingSurface(chars_per_line=20)
    names = ("Klasse 3b", "Klasse 4a", "Klasse 4c", "Klasse 2d")
    request = replace(group_request, group=GroupInfo(names=names, headcount=48, responsible="Frau Schmidt"))
    _compose(request, surface)

    texts = surface.of_kind("text")
    assert texts[0][1] == "Gruppe(n): Klasse 3b, Klasse 4a, Klasse 4c, Klasse 2d"
    assert texts[0][4] is True
    # Names wrap onto three lines at 20 chars.
    assert (texts[1][1], texts[1][3]) == ("Anzahl Schüler/innen: 48", 55)
    assert (texts[2][1], texts[2][3]) == ("Verantwortliche Person: Frau Schmidt", 60)
    assert surface.of_kind("table")[0][3] == 70


def test_group_header_defaults(group_request, surface):
    _compose(replace(group_request, group=GroupInfo()), surface)
    texts = [c[1] for c in surface.of_kind("text")]
    assert texts[:3] == ["Gruppe(n): N/A", "Anzahl Schüler/innen: -", "Verantwortliche Person: N/A"]


def test_table_styles_by_layout():
    schedule = table_style_for(TableLayout.SCHEDULE, 5, 210)
    assert schedule.column_align == ("LEFT", "CENTER", "CENTER", "CENTER", "CENTER")
    assert schedule.col_widths is None
    assert not schedule.first_column_bold

    group = table_style_for(TableLayout.GROUP, 3, 210)
    assert group.column_align == ("LEFT", "LEFT", "LEFT")
    assert group.col_widths == (30, 76.0, 76.0)
    assert group.first_column_bold


def test_row_style_follows_role_not_index(split_request, surface):
    _compose(split_request, surface)
    rows = surface.of_kind("table")[0][2]
    for row, style in zip(rows, surface.row_styles):
        if row.role == RowRole.SECONDARY:
            assert (style.bold, style.size, style.color) == (False, 8, (100, 116, 139))
        else:
            assert (style.bold, style.size) == (True, 9)


def test_group_primary_rows_are_regular_weight(group_request):
    style = row_style_for(TableLayout.GROUP)
    row = build_rows(group_request).rows[0]
    assert not style(row).bold


def test_signature_position_rule():
    assert signature_position(100, 297) == (120, False)
    assert signature_position(257, 297) == (277, False)
    assert signature_position(257.5, 297) == (30, True)


def test_signatures_below_table(single_request):
    surface = RecordingSurface(table_height=30)
    _compose(single_request, surface)
    assert not surface.of_kind("add_page")
    lines = surface.of_kind("line")
    assert lines[0] == ("line", 14, 100, 99, 100)
    assert lines[1] == ("line", 196, 100, 111, 100)
    texts = surface.of_kind("text")
    assert texts[-2][1:4] == ("Datum, Unterschrift Erziehungsberechtigte/r", 14, 105)
    assert texts[-1][1:4] == ("Stempel und Unterschrift der Schule", 196, 105)
    assert texts[-1][5] == "R"


def test_signatures_move_to_new_page_when_table_is_too_long(single_request):
    surface = RecordingSurface(table_height=220)
    _compose(single_request, surface)
    kinds = [c[0] for c in surface.calls]
    assert kinds.index("add_page") == kinds.index("table") + 1
    assert surface.of_kind("line")[0][2] == 30
