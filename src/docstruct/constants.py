"""
Shared constants and rule tables across docstruct modules.

This module is the single source of truth for:
- Element type constants (reading-order element types)
- Warning kind constants
- The PatternProfile rule tables consumed by every detector

Rule tables are frozen dataclasses so detectors stay pure functions of
(page input, config). Ordered tuples of PatternRule express the
predicate -> classification tables: the first matching rule wins.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple


# =============================================================================
# ELEMENT TYPE CONSTANTS
# =============================================================================

ELEMENT_HEADING = "heading"
ELEMENT_PARAGRAPH = "paragraph"
ELEMENT_LIST = "list"
ELEMENT_TABLE = "table"
ELEMENT_CODE = "code"

# Tie-break rank for elements sharing one order value
ELEMENT_TYPE_RANK = {
    ELEMENT_HEADING: 0,
    ELEMENT_PARAGRAPH: 1,
    ELEMENT_LIST: 2,
    ELEMENT_TABLE: 3,
    ELEMENT_CODE: 4,
}


# =============================================================================
# WARNING KINDS
# =============================================================================

WARN_MALFORMED_TOKEN = "malformed_token"
WARN_PAGE_FAILURE = "page_extraction_failure"
WARN_AMBIGUOUS = "ambiguous_structure"
WARN_READING_ORDER_RANGE = "reading_order_range"


# =============================================================================
# LIST / TABLE / STATUS VOCABULARY
# =============================================================================

LIST_UNORDERED = "unordered"
LIST_ORDERED = "ordered"

BULLET_MARKERS = frozenset({"•", "·", "▪"})
DASH_MARKERS = frozenset({"-", "*", "+"})

STATUS_COMPLETE = "complete"
STATUS_CANCELLED = "cancelled"


# =============================================================================
# RULE TABLES
# =============================================================================

@dataclass(frozen=True)
class PatternRule:
    """
    A single predicate -> classification rule.

    Attributes:
        label: Classification emitted when the pattern matches.
        pattern: Compiled regex tested with ``search``.
    """
    label: str
    pattern: Pattern[str]

    def search(self, text: str) -> Optional["re.Match[str]"]:
        """Return the first match in text, or None."""
        return self.pattern.search(text)


def _rule(label: str, pattern: str, flags: int = 0) -> PatternRule:
    return PatternRule(label=label, pattern=re.compile(pattern, flags))


def first_match(rules: Tuple[PatternRule, ...], text: str) -> Optional[Tuple[str, "re.Match[str]"]]:
    """
    Apply an ordered rule table and return the first (label, match) hit.

    Args:
        rules: Ordered rule table.
        text: Text to classify.

    Returns:
        Tuple of (label, match) for the first matching rule, or None.

    Example:
        >>> first_match(DEFAULT_PATTERNS.heading_types, "Chapter 2 Methods")[0]
        'chapter'
    """
    for rule in rules:
        match = rule.search(text)
        if match:
            return rule.label, match
    return None


@dataclass(frozen=True)
class PatternProfile:
    """
    Static pattern configuration for structure detection.

    Passed into each detector through StructureConfig rather than read
    from module globals, so alternative profiles can be swapped in per call.
    """
    heading_shape: Pattern[str]
    heading_types: Tuple[PatternRule, ...]
    heading_numbering: Tuple[PatternRule, ...]
    heading_prefixes: Tuple[Pattern[str], ...]
    list_markers: Tuple[PatternRule, ...]
    table_split: Pattern[str]
    table_header_words: Pattern[str]
    table_type_words: Pattern[str]
    code_font_hints: Tuple[str, ...]
    code_shape: Pattern[str]
    code_indent: Pattern[str]
    code_languages: Tuple[PatternRule, ...]
    cross_references: Tuple[PatternRule, ...]
    document_types: Tuple[PatternRule, ...]


DEFAULT_PATTERNS = PatternProfile(
    heading_shape=re.compile(r"^(Chapter|Section|\d+\.|\d+\.\d+)"),
    heading_types=(
        _rule("chapter", r"^(Chapter|Ch\.)\s+\d+", re.IGNORECASE),
        _rule("section", r"^(Section|Sec\.)\s+\d+", re.IGNORECASE),
        _rule("appendix", r"^(Appendix|App\.)\s+[A-Z]", re.IGNORECASE),
        _rule("numbered", r"^\d+(\.\d+)*\.?\s"),
        _rule("title", r"^[A-Z][A-Z\s]+$"),
        _rule("subtitle", r"^[A-Z][a-z\s]+$"),
    ),
    heading_numbering=(
        _rule("decimal", r"^(\d+(?:\.\d+)*)"),
        _rule("roman", r"^([IVXLCDM]+)(?=[.)])", re.IGNORECASE),
        _rule("letter", r"^([A-Za-z])(?=[.)])"),
        _rule("chapter", r"^(?:Chapter|Ch\.)\s+(\d+)", re.IGNORECASE),
    ),
    heading_prefixes=(
        re.compile(r"^\d+(\.\d+)*\.?\s*"),
        re.compile(r"^(Chapter|Section|Part|Appendix)\s+\d+\s*", re.IGNORECASE),
    ),
    # Order matters: a single-letter roman marker ("i.") reads as lettered
    list_markers=(
        _rule("bullet", r"^\s*([•·▪▫‣⁃\-*+])\s"),
        _rule("numbered", r"^\s*(\d+[.)])\s"),
        _rule("lettered", r"^\s*([a-zA-Z][.)])\s"),
        _rule("roman", r"^\s*([ivxlcdm]+[.)])\s", re.IGNORECASE),
    ),
    table_split=re.compile(r"\s{3,}"),
    table_header_words=re.compile(
        r"\b(name|title|type|date|value|amount|description|id|number)\b",
        re.IGNORECASE,
    ),
    table_type_words=re.compile(
        r"\b(name|title|description|value|amount|date|time)\b",
        re.IGNORECASE,
    ),
    code_font_hints=("mono", "courier", "consolas"),
    code_shape=re.compile(r"^[\s]*[{}();,\[\]<>]|^\s*[a-zA-Z_$][a-zA-Z0-9_$]*\s*[=:({]"),
    code_indent=re.compile(r"^\s{4,}"),
    code_languages=(
        _rule("javascript", r"\b(function|var|let|const|console\.log)\b|=>"),
        _rule("python", r"\b(def|import|from|print|if __name__)\b"),
        _rule("java", r"\b(public|private|class|import|System\.out)\b"),
        _rule("css", r"\{[^}]*:[^}]*\}|@media|@import"),
        _rule("html", r"<[^>]+>|&[a-zA-Z]+;"),
        _rule("sql", r"\b(SELECT|FROM|WHERE|INSERT|UPDATE|DELETE)\b", re.IGNORECASE),
        _rule("json", r"^\s*[\{\[].*[\}\]]\s*$", re.DOTALL),
        _rule("xml", r"<\?xml|<[a-zA-Z][^>]*>"),
    ),
    cross_references=(
        _rule("page", r"\b(?:page|p\.)\s*(\d+)", re.IGNORECASE),
        _rule("section", r"\b(?:section|sec\.)\s*(\d+(?:\.\d+)*)", re.IGNORECASE),
        _rule("figure", r"\b(?:figure|fig\.)\s*(\d+)", re.IGNORECASE),
        _rule("table", r"\b(?:table|tbl\.)\s*(\d+)", re.IGNORECASE),
        _rule("chapter", r"\b(?:chapter|ch\.)\s*(\d+)", re.IGNORECASE),
        _rule("appendix", r"\b(?:appendix|app\.)\s*([A-Z])\b", re.IGNORECASE),
    ),
    document_types=(
        _rule("academic", r"\b(abstract|introduction|methodology|results|conclusion|references|bibliography)\b"),
        _rule("technical", r"\b(api|function|class|method|parameter|return|example|code)\b"),
        _rule("legal", r"\b(whereas|therefore|hereby|pursuant|agreement|contract|terms)\b"),
        _rule("financial", r"\b(revenue|profit|loss|balance|assets|liabilities|income)\b"),
        _rule("manual", r"\b(step|procedure|instruction|guide|how to|tutorial)\b"),
        _rule("report", r"\b(summary|findings|recommendations|analysis|data|statistics)\b"),
    ),
)
