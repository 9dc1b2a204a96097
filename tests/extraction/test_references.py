from docstruct.config import StructureConfig
from docstruct.extraction.references import (
    CrossReference,
    extract_cross_references,
    extract_references_from_text,
    references_to_dataframe,
)


PAGE_TEXT = "See Figure 3 and Section 2.1 on page 14. Appendix B lists the sources."


def test_references_in_pattern_order():
    refs = extract_references_from_text(PAGE_TEXT, 1)

    assert [(r.type, r.reference) for r in refs] == [
        ("page", "14"),
        ("section", "2.1"),
        ("figure", "3"),
        ("appendix", "B"),
    ]
    assert refs[0].full_match == "page 14"
    assert all(r.page_number == 1 for r in refs)


def test_abbreviations_and_case():
    refs = extract_references_from_text("see fig. 2, TBL. 4 and ch.9 (p. 31)", 5)

    assert sorted((r.type, r.reference) for r in refs) == [
        ("chapter", "9"),
        ("figure", "2"),
        ("page", "31"),
        ("table", "4"),
    ]


def test_word_boundary_required():
    assert extract_references_from_text("the stable 4 and homepage 3", 1) == []


def test_context_window():
    text = "x" * 80 + " Table 7 " + "y" * 80
    ref = extract_references_from_text(text, 2, StructureConfig(reference_context_chars=10))[0]

    start = text.index("Table 7")
    assert ref.context == text[start - 10:start + 10].strip()


def test_references_follow_page_order():
    refs = extract_cross_references([(1, "see page 2"), (2, ""), (3, "see Figure 1 and page 9")])

    assert [(r.page_number, r.type) for r in refs] == [(1, "page"), (3, "page"), (3, "figure")]


def test_references_dataframe():
    refs = extract_references_from_text(PAGE_TEXT, 1)

    df = references_to_dataframe(refs)

    assert list(df["type"]) == ["page", "section", "figure", "appendix"]
    assert references_to_dataframe([]).empty


def test_reference_round_trip():
    ref = extract_references_from_text(PAGE_TEXT, 1)[0]

    assert CrossReference.from_dict(ref.to_dict()) == ref
