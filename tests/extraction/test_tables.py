from docstruct.config import StructureConfig
from docstruct.constants import DEFAULT_PATTERNS, WARN_AMBIGUOUS
from docstruct.extraction.lines import assemble_lines
from docstruct.extraction.tables import (
    TableBlock,
    detect_headers,
    detect_table_type,
    detect_tables,
    detect_tables_with_result,
    split_row,
)
from docstruct.extraction.tokens import TextToken


def _lines(rows, start_y=700, step=15):
    tokens = [
        TextToken(text=text, x=72, y=start_y - step * i, font_size=10, page_number=1)
        for i, text in enumerate(rows)
    ]
    return assemble_lines(tokens)


def test_three_aligned_rows_form_one_table():
    lines = _lines([
        "Name   Age   City",
        "Alice   30   Paris",
        "Bob   25   Rome",
    ])

    tables = detect_tables(lines, page_number=1)

    assert len(tables) == 1
    table = tables[0]
    assert table.column_count == 3
    assert len(table.rows) == 3
    assert table.rows[1].segments == ("Alice", "30", "Paris")
    assert table.headers == ("Name", "Age", "City")
    assert table.type == "data"
    assert table.structure.is_regular is True
    assert table.page_number == 1
    assert table.y == 700


def test_rows_far_apart_do_not_join():
    lines = _lines(["a   b   c", "d   e   f"], step=40)

    assert detect_tables(lines) == []


def test_single_row_is_not_a_table():
    assert detect_tables(_lines(["a   b   c", "just prose"])) == []


def test_two_segment_lines_are_not_rows():
    assert detect_tables(_lines(["left   right", "one   two"])) == []


def test_width_change_of_more_than_one_splits_block():
    lines = _lines([
        "a   b   c",
        "d   e   f",
        "1   2   3   4   5",
        "6   7   8   9   10",
    ])

    tables = detect_tables(lines)

    assert [t.column_count for t in tables] == [3, 5]


def test_uppercase_header_warns():
    lines = _lines(["CODE   QTY   UNIT", "ab1   3   kg"])

    result = detect_tables_with_result(lines, page_number=2)

    assert result.tables[0].headers == ("CODE", "QTY", "UNIT")
    assert [(w.kind, w.page_number) for w in result.warnings] == [(WARN_AMBIGUOUS, 2)]


def test_no_header_row():
    headers, rule = detect_headers(["12", "34", "56"], DEFAULT_PATTERNS)

    assert headers is None
    assert rule is None


def test_split_row_trims_segments():
    assert split_row("  a   b\t\t\tc  ", DEFAULT_PATTERNS) == ["a", "b", "c"]


def test_table_type_rules():
    wide = detect_tables(_lines(["w   x   y   z   u   v", "1   2   3   4   5   6"]))[0]
    small = detect_tables(_lines(["a   b   c", "d   e   f"]))[0]

    assert wide.type == "complex"
    assert small.type == "simple"
    assert detect_table_type(wide.rows * 2, 4, DEFAULT_PATTERNS) == "generic"


def test_min_rows_is_configurable():
    lines = _lines(["a   b   c", "d   e   f"])

    assert len(detect_tables(lines, StructureConfig(min_table_rows=3))) == 0


def test_table_round_trip():
    table = detect_tables(_lines(["Name   Age   City", "Al   3   Oslo"]))[0]

    assert TableBlock.from_dict(table.to_dict()) == table
