import math

import pandas as pd
import pytest

from docstruct.constants import WARN_MALFORMED_TOKEN
from docstruct.errors import MalformedTokenError
from docstruct.extraction.tokens import (
    PageTokens,
    TextToken,
    coerce_page_tokens,
    page_text,
    pages_from_dataframe,
    pages_from_records,
)


def test_from_dict_reads_camel_case_fields():
    token = TextToken.from_dict(
        {"text": "Hi", "x": 72, "y": "700", "fontName": "Helvetica-Bold", "fontSize": 12},
        page_number=3,
    )

    assert token.y == 700.0
    assert token.font_size == 12.0
    assert token.bold is True
    assert token.italic is False
    assert token.page_number == 3


def test_explicit_style_flags_win_over_font_name():
    token = TextToken.from_dict({"text": "x", "x": 0, "y": 0, "fontName": "Times-Bold", "bold": False})

    assert token.bold is False


@pytest.mark.parametrize(
    "record",
    [
        {"text": "no y", "x": 10},
        {"text": "nan x", "x": math.nan, "y": 5},
        {"text": "bad y", "x": 1, "y": "top"},
        {"text": "inf", "x": math.inf, "y": 1},
    ],
)
def test_malformed_geometry_raises(record):
    with pytest.raises(MalformedTokenError):
        TextToken.from_dict(record)


def test_coerce_drops_only_malformed_tokens():
    page = PageTokens(
        page_number=2,
        tokens=(
            {"text": "good", "x": 72, "y": 700},
            {"text": "bad", "x": 72},
            TextToken(text="ready", x=100, y=700, page_number=2),
        ),
    )

    tokens, warnings = coerce_page_tokens(page)

    assert [t.text for t in tokens] == ["good", "ready"]
    assert [(w.kind, w.page_number) for w in warnings] == [(WARN_MALFORMED_TOKEN, 2)]


def test_pages_from_records_sorts_and_reads_viewport():
    pages = pages_from_records([
        {"pageNumber": 2, "tokens": [], "error": "decode failed"},
        {"pageNumber": 1, "textItems": [{"text": "a", "x": 0, "y": 0}], "viewport": {"width": 612, "height": 792}},
    ])

    assert [p.page_number for p in pages] == [1, 2]
    assert pages[0].width == 612.0
    assert len(pages[0].tokens) == 1
    assert pages[1].error == "decode failed"


def test_pages_from_dataframe_fills_missing_pages():
    tokens_df = pd.DataFrame([
        {"text": "one", "x": 72.0, "y": 700.0, "font_size": 10.0, "page_number": 1},
        {"text": "three", "x": 72.0, "y": 700.0, "font_size": 10.0, "page_number": 3},
        {"text": "broken", "x": 72.0, "y": float("nan"), "font_size": 10.0, "page_number": 3},
    ])

    pages = pages_from_dataframe(tokens_df)

    assert [p.page_number for p in pages] == [1, 2, 3]
    assert pages[1].tokens == ()
    tokens, warnings = coerce_page_tokens(pages[2])
    assert [t.text for t in tokens] == ["three"]
    assert len(warnings) == 1


def test_pages_from_dataframe_requires_geometry_columns():
    with pytest.raises(ValueError):
        pages_from_dataframe(pd.DataFrame([{"text": "a", "page_number": 1}]))


def test_page_text_keeps_received_order():
    tokens = [TextToken("b", 100, 700), TextToken("a", 0, 700)]

    assert page_text(tokens) == "b a"


def test_token_round_trip():
    token = TextToken(text="Hi", x=1.0, y=2.0, font_name="Arial", font_size=9.0, page_number=1)

    assert TextToken.from_dict(token.to_dict()) == token


@pytest.mark.parametrize("record", [None, "text", 42, ["a", 1, 2]])
def test_non_mapping_record_is_malformed(record):
    with pytest.raises(MalformedTokenError):
        TextToken.from_dict(record)


@pytest.mark.parametrize("page_number", ["p1", 1.5, True])
def test_bad_page_number_is_malformed(page_number):
    with pytest.raises(MalformedTokenError):
        TextToken.from_dict({"text": "bad", "x": 72, "y": 650, "pageNumber": page_number})


def test_numeric_string_page_number_is_read():
    assert TextToken.from_dict({"text": "ok", "x": 0, "y": 0, "pageNumber": "4"}).page_number == 4


def test_coerce_drops_null_and_bad_page_records():
    page = PageTokens(
        page_number=1,
        tokens=(
            {"text": "ok", "x": 72, "y": 700},
            {"text": "bad", "x": 72, "y": 650, "pageNumber": "p1"},
            None,
        ),
    )

    tokens, warnings = coerce_page_tokens(page)

    assert [t.text for t in tokens] == ["ok"]
    assert [w.kind for w in warnings] == [WARN_MALFORMED_TOKEN, WARN_MALFORMED_TOKEN]


@pytest.mark.parametrize(
    "value,expected",
    [("false", False), ("False", False), ("0", False), ("true", True), ("1", True), (0, False), (1, True)],
)
def test_style_flags_from_text_records(value, expected):
    token = TextToken.from_dict({"text": "x", "x": 0, "y": 0, "bold": value, "italic": value})

    assert token.bold is expected
    assert token.italic is expected


def test_unrecognized_flag_text_falls_back_to_font_name():
    token = TextToken.from_dict({"text": "x", "x": 0, "y": 0, "fontName": "Arial-Bold", "bold": "maybe"})

    assert token.bold is True
