import pytest

from docstruct.config import StructureConfig
from docstruct.constants import WARN_AMBIGUOUS
from docstruct.extraction.lines import assemble_lines
from docstruct.extraction.lists import (
    ListBlock,
    detect_list_style,
    item_level,
    match_list_marker,
    recognize_lists,
    recognize_lists_with_result,
)
from docstruct.extraction.paragraphs import segment_paragraphs
from docstruct.extraction.tokens import TextToken


def _paragraphs(texts, start_y=700, step=30):
    # step > paragraph gap so each text becomes its own paragraph
    tokens = [
        TextToken(text=text, x=72, y=start_y - step * i, font_size=10, page_number=1)
        for i, text in enumerate(texts)
    ]
    return segment_paragraphs(assemble_lines(tokens), page_number=1)


def test_bullet_lines_form_one_unordered_list():
    lists = recognize_lists(_paragraphs(["• Alpha", "• Beta", "• Gamma"]))

    assert len(lists) == 1
    block = lists[0]
    assert block.type == "unordered"
    assert block.style == "bullet"
    assert [item.text for item in block.items] == ["Alpha", "Beta", "Gamma"]
    assert [item.marker for item in block.items] == ["•", "•", "•"]
    assert block.y == 700


def test_numbered_items_form_ordered_numeric_list():
    block = recognize_lists(_paragraphs(["1. First", "2. Second", "3) Third"]))[0]

    assert block.type == "ordered"
    assert block.style == "numeric"
    assert [item.text for item in block.items] == ["First", "Second", "Third"]


def test_type_change_starts_new_block():
    lists = recognize_lists(_paragraphs(["- one", "- two", "1. first", "2. second"]))

    assert [(b.type, b.style, len(b.items)) for b in lists] == [
        ("unordered", "dash", 2),
        ("ordered", "numeric", 2),
    ]


def test_plain_paragraph_closes_block():
    lists = recognize_lists(_paragraphs(["• a", "Some prose", "• b"]))

    assert [len(b.items) for b in lists] == [1, 1]


def test_mixed_bullets_warn():
    result = recognize_lists_with_result(_paragraphs(["• a", "- b"]))

    assert result.lists[0].style == "mixed"
    assert [w.kind for w in result.warnings] == [WARN_AMBIGUOUS]


def test_closely_spaced_bullets_are_separate_items():
    paragraphs = _paragraphs(["• Alpha", "• Beta", "• Gamma"], step=14)
    assert len(paragraphs) == 1

    lists = recognize_lists(paragraphs)

    assert len(lists) == 1
    assert lists[0].style == "bullet"
    assert [item.text for item in lists[0].items] == ["Alpha", "Beta", "Gamma"]
    assert [item.y for item in lists[0].items] == [700, 686, 672]
    assert [item.line_index for item in lists[0].items] == [0, 1, 2]


def test_unmarked_line_continues_item():
    paragraphs = _paragraphs(["1. First item", "wraps onto a second line", "2. Second"], step=14)

    block = recognize_lists(paragraphs)[0]

    assert [item.text for item in block.items] == ["First item wraps onto a second line", "Second"]


def test_items_after_lead_in_line_of_same_paragraph():
    paragraphs = _paragraphs(["Ingredients:", "- flour", "- water"], step=14)

    block = recognize_lists(paragraphs)[0]

    assert block.style == "dash"
    assert [item.text for item in block.items] == ["flour", "water"]


def test_nesting_from_leading_whitespace():
    block = recognize_lists(_paragraphs(["- top", "    - nested", "        - deeper"]))[0]

    assert [item.level for item in block.items] == [1, 2, 3]
    assert block.nesting_info.has_nesting is True
    assert block.nesting_info.max_level == 3
    assert block.nesting_info.min_level == 1
    assert block.nesting_info.level_count == 3


def test_no_markers_no_lists():
    assert recognize_lists(_paragraphs(["Plain text", "More text"])) == []
    assert recognize_lists([]) == []


@pytest.mark.parametrize(
    "list_type,markers,expected",
    [
        ("unordered", ["•", "•"], "bullet"),
        ("unordered", ["*", "*"], "dash"),
        ("unordered", ["•", "-"], "mixed"),
        ("ordered", ["1.", "2."], "numeric"),
        ("ordered", ["a.", "b."], "alphabetic"),
        ("ordered", ["i.", "ii.", "iii."], "roman"),
        ("ordered", ["1.", "b."], "mixed"),
        ("ordered", [], "unknown"),
    ],
)
def test_list_style_rules(list_type, markers, expected):
    assert detect_list_style(list_type, markers) == expected


def test_marker_table_order():
    config = StructureConfig()

    assert match_list_marker("• Alpha", config)[:2] == ("bullet", "•")
    assert match_list_marker("12) Item", config)[:2] == ("numbered", "12)")
    assert match_list_marker("c. Item", config)[:2] == ("lettered", "c.")
    assert match_list_marker("iv) Item", config)[:2] == ("roman", "iv)")
    assert match_list_marker("Item", config) is None
    assert match_list_marker("-nospace", config) is None


def test_item_level_indent_units():
    assert item_level("- a") == 1
    assert item_level("   - a") == 1
    assert item_level("    - a") == 2


def test_list_round_trip():
    block = recognize_lists(_paragraphs(["• Alpha", "• Beta"]))[0]

    assert ListBlock.from_dict(block.to_dict()) == block
