from docstruct.config import StructureConfig
from docstruct.extraction.lines import assemble_lines
from docstruct.extraction.paragraphs import Paragraph, segment_paragraphs
from docstruct.extraction.tokens import TextToken


def _token(text, y, size=10.0, x=72.0):
    return TextToken(text=text, x=x, y=y, font_size=size, page_number=1)


def _paragraphs(tokens, config=None):
    return segment_paragraphs(assemble_lines(tokens, config), config, page_number=1)


def test_close_lines_form_one_paragraph():
    paragraphs = _paragraphs([
        _token("First line of text", 700),
        _token("second line of text", 686),
        _token("third line", 672),
    ])

    assert len(paragraphs) == 1
    assert paragraphs[0].text == "First line of text second line of text third line"
    assert paragraphs[0].page_number == 1
    assert paragraphs[0].y == 700


def test_vertical_gap_splits_paragraphs():
    paragraphs = _paragraphs([
        _token("Para one", 700),
        _token("continues", 686),
        _token("Para two", 640),
    ])

    assert [p.text for p in paragraphs] == ["Para one continues", "Para two"]
    assert [p.index for p in paragraphs] == [0, 1]


def test_font_size_jump_splits_paragraphs():
    paragraphs = _paragraphs([
        _token("Heading", 700, size=16),
        _token("Body text", 686, size=10),
    ])

    assert [p.text for p in paragraphs] == ["Heading", "Body text"]


def test_small_font_change_stays_in_paragraph():
    paragraphs = _paragraphs([
        _token("Line one", 700, size=10),
        _token("line two", 686, size=11.5),
    ])

    assert len(paragraphs) == 1


def test_empty_lines_are_separators_not_content():
    paragraphs = _paragraphs([
        _token("Before", 700),
        _token("   ", 688),
        _token("After", 676),
    ])

    assert [p.text for p in paragraphs] == ["Before", "After"]
    assert all(line.text for p in paragraphs for line in p.lines)


def test_segmentation_is_idempotent():
    tokens = [
        _token("Alpha one", 700),
        _token("alpha two", 686),
        _token("Beta one", 640),
        _token("Gamma", 600, size=16),
        _token("gamma body", 586),
    ]
    config = StructureConfig()

    for paragraph in _paragraphs(tokens, config):
        again = segment_paragraphs(list(paragraph.lines), config, page_number=1)
        assert len(again) == 1
        assert again[0].lines == paragraph.lines
        assert again[0].text == paragraph.text


def test_no_lines_no_paragraphs():
    assert segment_paragraphs([]) == []


def test_paragraph_round_trip():
    paragraph = _paragraphs([_token("Some text", 700), _token("more", 686)])[0]

    assert Paragraph.from_dict(paragraph.to_dict()) == paragraph
