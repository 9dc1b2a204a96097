import pytest

from docstruct.config import StructureConfig
from docstruct.constants import WARN_READING_ORDER_RANGE
from docstruct.extraction.headings import Heading, classify_headings
from docstruct.extraction.lines import Line, assemble_lines
from docstruct.extraction.lists import recognize_lists
from docstruct.extraction.paragraphs import Paragraph, segment_paragraphs
from docstruct.extraction.reading_order import (
    ReadingOrderElement,
    collect_page_elements,
    order_elements,
    reading_order_to_dataframe,
    reading_order_value,
)
from docstruct.extraction.tables import detect_tables
from docstruct.extraction.tokens import TextToken


def _paragraph(text, y, page=1, index=0):
    token = TextToken(text=text, x=72, y=y, font_size=10, page_number=page)
    return Paragraph(lines=(Line(tokens=(token,), y=y, index=index),), page_number=page, index=index)


def _page_elements(page, paragraphs, **records):
    return collect_page_elements(
        page,
        paragraphs,
        records.get("headings", []),
        records.get("lists", []),
        records.get("tables", []),
        records.get("code_blocks", []),
        records.get("config"),
    )


# =============================================================================
# ORDER VALUES
# =============================================================================

def test_order_value_formula():
    assert reading_order_value(1, 700) == 19300
    assert reading_order_value(3, 0) == 40000
    assert reading_order_value(3, 10000) == 30000


@pytest.mark.parametrize("y", [0, 10000])
def test_boundary_y_values_are_in_range(y):
    elements, warnings = _page_elements(2, [_paragraph("edge", y, page=2)])

    assert warnings == []
    assert elements[0].order == reading_order_value(2, y)


@pytest.mark.parametrize("y", [-5, 10005])
def test_out_of_range_y_is_flagged_not_clamped(y):
    elements, warnings = _page_elements(2, [_paragraph("odd", y, page=2)])

    assert elements[0].order == 2 * 10000 + (10000 - y)
    assert [(w.kind, w.page_number) for w in warnings] == [(WARN_READING_ORDER_RANGE, 2)]


def test_pages_never_interleave():
    page1, _ = _page_elements(1, [_paragraph("p1 low", 0, page=1)])
    page2, _ = _page_elements(2, [_paragraph("p2 high", 10000, page=2)])
    page3, _ = _page_elements(3, [_paragraph("p3 odd", 20000, page=3)])

    ordered = order_elements(page3 + page2 + page1)

    assert [e.page_number for e in ordered] == [1, 2, 3]


def test_out_of_range_y_breaks_ascending_order_only_across_pages():
    page1, _ = _page_elements(1, [_paragraph("p1 below page", -5, page=1)])
    page2, _ = _page_elements(2, [_paragraph("p2 top", 9999, page=2)])

    ordered = order_elements(page2 + page1)

    assert [e.page_number for e in ordered] == [1, 2]
    assert ordered[0].order > ordered[1].order


def test_within_page_top_to_bottom():
    paragraphs = [_paragraph("bottom", 100, index=0), _paragraph("top", 700, index=1)]

    elements, _ = _page_elements(1, paragraphs)

    assert [e.content.text for e in order_elements(elements)] == ["top", "bottom"]


def test_order_values_ascend():
    tokens = [
        TextToken(text=t, x=72, y=y, font_size=10, page_number=1)
        for t, y in [("a", 700), ("b", 640), ("c", 580), ("d", 520)]
    ]
    paragraphs = segment_paragraphs(assemble_lines(tokens), page_number=1)
    elements, _ = _page_elements(1, paragraphs)

    orders = [e.order for e in order_elements(elements)]
    assert orders == sorted(orders)


# =============================================================================
# PARAGRAPH WRAPPING
# =============================================================================

@pytest.fixture
def heading_list_page():
    tokens = [
        TextToken(text="1. Introduction", x=72, y=700, font_size=18, bold=True, page_number=1),
        TextToken(text="• Alpha", x=72, y=650, font_size=10, page_number=1),
        TextToken(text="• Beta", x=72, y=636, font_size=10, page_number=1),
        TextToken(text="Closing remarks.", x=72, y=560, font_size=10, page_number=1),
    ]
    paragraphs = segment_paragraphs(assemble_lines(tokens), page_number=1)
    headings = classify_headings(paragraphs)
    lists = recognize_lists(paragraphs)
    return paragraphs, headings, lists


def test_every_paragraph_is_wrapped_by_default(heading_list_page):
    paragraphs, headings, lists = heading_list_page

    elements, _ = _page_elements(1, paragraphs, headings=headings, lists=lists)
    ordered = order_elements(elements)

    assert [e.type for e in ordered] == [
        "heading", "paragraph", "list", "paragraph", "list", "paragraph",
    ]
    assert [e.content.text for e in ordered if e.type == "paragraph"] == [
        "1. Introduction", "• Alpha • Beta", "Closing remarks.",
    ]


def test_dedupe_leaves_out_represented_paragraphs(heading_list_page):
    paragraphs, headings, lists = heading_list_page
    config = StructureConfig(dedupe_reading_order=True)

    elements, _ = _page_elements(1, paragraphs, headings=headings, lists=lists, config=config)
    ordered = order_elements(elements)

    assert [e.type for e in ordered] == ["heading", "list", "list", "paragraph"]
    assert ordered[-1].content.text == "Closing remarks."


def test_table_paragraphs_are_wrapped_unless_deduped():
    tokens = [
        TextToken(text="Name   Age   City", x=72, y=700, font_size=10, page_number=1),
        TextToken(text="Alice   30   Paris", x=72, y=688, font_size=10, page_number=1),
    ]
    lines = assemble_lines(tokens)
    paragraphs = segment_paragraphs(lines, page_number=1)
    tables = detect_tables(lines, page_number=1)

    wrapped, _ = _page_elements(1, paragraphs, tables=tables)
    deduped, _ = _page_elements(1, paragraphs, tables=tables, config=StructureConfig(dedupe_reading_order=True))

    assert sorted(e.type for e in wrapped) == ["paragraph", "table"]
    assert [e.type for e in deduped] == ["table"]


def test_same_order_ties_break_by_type():
    heading = Heading(
        text="Title", level=1, type="subtitle", clean_text="Title", anchor="title",
        y=500, page_number=1, paragraph_index=0,
    )
    paragraphs = [_paragraph("Title", 500, index=0)]
    elements, _ = _page_elements(1, paragraphs, headings=[heading])

    ordered = order_elements(list(reversed(elements)))

    assert [e.type for e in ordered] == ["heading", "paragraph"]
    assert ordered[0].order == ordered[1].order


# =============================================================================
# EXPORT
# =============================================================================

def test_dataframe_export():
    elements, _ = _page_elements(1, [_paragraph("top", 700, index=0), _paragraph("low", 100, index=1)])

    df = reading_order_to_dataframe(order_elements(elements))

    assert list(df.columns) == ["position", "type", "page_number", "y", "order", "text"]
    assert list(df["text"]) == ["top", "low"]
    assert reading_order_to_dataframe([]).empty


def test_element_round_trip():
    elements, _ = _page_elements(1, [_paragraph("top", 700)])

    assert ReadingOrderElement.from_dict(elements[0].to_dict()) == elements[0]


def test_unknown_element_type_rejected():
    with pytest.raises(ValueError):
        ReadingOrderElement.from_dict({"type": "image", "content": {}, "pageNumber": 1, "y": 0, "order": 0})


def test_config_stride_is_used():
    config = StructureConfig(reading_order_page_stride=1000)

    elements, warnings = collect_page_elements(1, [_paragraph("x", 900)], [], [], [], [], config)

    assert elements[0].order == 1 * 1000 + (1000 - 900)
    assert warnings == []
