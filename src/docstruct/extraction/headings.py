"""
Heading classification from page paragraphs.

Statistics are page-local: the mean font size is computed over the page's
paragraphs with a positive font size. A paragraph becomes a heading when it
is short and at least one evidence rule fires:
- size: font size above ``heading_size_ratio`` x page mean
- bold: paragraph is bold
- pattern: text starts like a heading (Chapter/Section/numeric prefix)

Pattern evidence alone does not make a heading of a paragraph that opens
with a list marker ("1. Alpha"); those are left to list recognition.

Levels come from a fixed ratio ladder against the page mean. Type, clean
text, anchor and numbering are derived once, at construction, from the
ordered rule tables in the PatternProfile.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from docstruct.config import StructureConfig
from docstruct.constants import WARN_AMBIGUOUS, PatternProfile, first_match
from docstruct.errors import StructureWarning
from docstruct.extraction.paragraphs import Paragraph
from docstruct.utils.text import collapse_whitespace, generate_anchor


logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 6


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class HeadingNumbering:
    """Leading numbering token of a heading (e.g. decimal "2.1")."""
    type: str
    value: str
    full: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value, "full": self.full}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeadingNumbering":
        return cls(type=data["type"], value=data["value"], full=data["full"])


@dataclass(frozen=True)
class Heading:
    """
    A paragraph classified as a structural title.

    Attributes:
        text: Trimmed paragraph text.
        level: Hierarchy level in [1, 6].
        type: chapter/section/appendix/numbered/title/subtitle/generic.
        clean_text: Text with leading numbering/prefix removed.
        anchor: Lowercase hyphenated slug of clean_text.
        numbering: Leading numbering token, if any.
        font_size: Paragraph font size.
        bold: Paragraph bold flag.
        y: Paragraph y.
        page_number: Page number.
        paragraph_index: Index of the source paragraph within its page.
    """
    text: str
    level: int
    type: str
    clean_text: str
    anchor: str
    numbering: Optional[HeadingNumbering] = None
    font_size: float = 0.0
    bold: bool = False
    y: float = 0.0
    page_number: int = 0
    paragraph_index: int = 0

    def __post_init__(self):
        if not MIN_LEVEL <= self.level <= MAX_LEVEL:
            raise ValueError(f"Heading level must be in [1, 6], got {self.level}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "level": self.level,
            "type": self.type,
            "cleanText": self.clean_text,
            "anchor": self.anchor,
            "numbering": self.numbering.to_dict() if self.numbering else None,
            "fontSize": self.font_size,
            "bold": self.bold,
            "y": self.y,
            "pageNumber": self.page_number,
            "paragraphIndex": self.paragraph_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Heading":
        numbering = data.get("numbering")
        return cls(
            text=data["text"],
            level=data["level"],
            type=data["type"],
            clean_text=data["cleanText"],
            anchor=data["anchor"],
            numbering=HeadingNumbering.from_dict(numbering) if numbering else None,
            font_size=data.get("fontSize", 0.0),
            bold=data.get("bold", False),
            y=data.get("y", 0.0),
            page_number=data.get("pageNumber", 0),
            paragraph_index=data.get("paragraphIndex", 0),
        )


@dataclass
class HeadingClassificationResult:
    """
    Result of heading classification for one page.

    Attributes:
        headings: Headings in page order.
        mean_font_size: Page mean font size (0.0 if no sized paragraphs).
        warnings: Low-confidence heading decisions.
    """
    headings: List[Heading]
    mean_font_size: float = 0.0
    warnings: List[StructureWarning] = field(default_factory=list)


# =============================================================================
# EVIDENCE RULES
# =============================================================================

EvidenceRule = Tuple[str, Callable[[Paragraph, float, StructureConfig], bool]]

HEADING_EVIDENCE_RULES: Tuple[EvidenceRule, ...] = (
    ("size", lambda p, mean, cfg: mean > 0 and p.font_size > mean * cfg.heading_size_ratio),
    ("bold", lambda p, mean, cfg: p.bold),
    ("pattern", lambda p, mean, cfg: bool(cfg.patterns.heading_shape.match(p.text.strip()))),
)


def heading_evidence(paragraph: Paragraph, mean_font_size: float, config: StructureConfig) -> List[str]:
    """Names of the evidence rules that fire for a paragraph."""
    return [name for name, rule in HEADING_EVIDENCE_RULES if rule(paragraph, mean_font_size, config)]


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def page_mean_font_size(paragraphs: Sequence[Paragraph]) -> float:
    """Mean font size over paragraphs with a positive size (0.0 if none)."""
    sizes = np.array([p.font_size for p in paragraphs if p.font_size > 0], dtype=float)
    if sizes.size == 0:
        return 0.0
    return float(sizes.mean())


def heading_level(font_size: float, mean_font_size: float, level_ratios: Sequence[float]) -> int:
    """
    Map a font size to a heading level via the ratio ladder.

    Example:
        >>> heading_level(20, 10, (1.8, 1.5, 1.3, 1.1))
        1
        >>> heading_level(10, 10, (1.8, 1.5, 1.3, 1.1))
        5
    """
    if mean_font_size > 0:
        for level, ratio in enumerate(level_ratios, start=1):
            if font_size > mean_font_size * ratio:
                return level
    return len(level_ratios) + 1


def detect_heading_type(text: str, patterns: PatternProfile) -> str:
    hit = first_match(patterns.heading_types, text)
    return hit[0] if hit else "generic"


def clean_heading_text(text: str, patterns: PatternProfile) -> str:
    """
    Strip leading numbering and Chapter/Section/Part/Appendix prefixes.

    Example:
        >>> clean_heading_text("1. Introduction", DEFAULT_PATTERNS)
        'Introduction'
        >>> clean_heading_text("Chapter 3   Results", DEFAULT_PATTERNS)
        'Results'
    """
    cleaned = text.strip()
    for prefix in patterns.heading_prefixes:
        cleaned = prefix.sub("", cleaned, count=1)
    return collapse_whitespace(cleaned)


def extract_numbering(text: str, patterns: PatternProfile) -> Optional[HeadingNumbering]:
    """
    Extract the leading numbering token, if any.

    Example:
        >>> extract_numbering("2.1 Scope", DEFAULT_PATTERNS)
        HeadingNumbering(type='decimal', value='2.1', full='2.1')
        >>> extract_numbering("Overview", DEFAULT_PATTERNS) is None
        True
    """
    hit = first_match(patterns.heading_numbering, text.strip())
    if not hit:
        return None
    label, match = hit
    return HeadingNumbering(type=label, value=match.group(1), full=match.group(0))


def build_heading(paragraph: Paragraph, level: int, patterns: PatternProfile) -> Heading:
    """Construct the closed Heading record for a classified paragraph."""
    text = paragraph.text.strip()
    clean_text = clean_heading_text(text, patterns)
    return Heading(
        text=text,
        level=level,
        type=detect_heading_type(text, patterns),
        clean_text=clean_text,
        anchor=generate_anchor(clean_text),
        numbering=extract_numbering(text, patterns),
        font_size=paragraph.font_size,
        bold=paragraph.bold,
        y=paragraph.y,
        page_number=paragraph.page_number,
        paragraph_index=paragraph.index,
    )


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_headings_with_result(
    paragraphs: Sequence[Paragraph],
    config: Optional[StructureConfig] = None,
) -> HeadingClassificationResult:
    """
    Classify one page's paragraphs into headings.

    Args:
        paragraphs: The page's paragraphs in order.
        config: Thresholds and rule tables.

    Returns:
        HeadingClassificationResult with headings and warnings.
    """
    config = config or StructureConfig()
    if not paragraphs:
        return HeadingClassificationResult(headings=[])

    mean = page_mean_font_size(paragraphs)
    headings: List[Heading] = []
    warnings: List[StructureWarning] = []

    for paragraph in paragraphs:
        if len(paragraph.text.strip()) >= config.heading_max_length:
            continue
        evidence = heading_evidence(paragraph, mean, config)
        if not evidence:
            continue
        # "1. Alpha" at body size and weight is a list item
        if evidence == ["pattern"] and first_match(config.patterns.list_markers, paragraph.raw_first_line):
            continue

        level = heading_level(paragraph.font_size, mean, config.level_ratios)
        heading = build_heading(paragraph, level, config.patterns)
        headings.append(heading)

        if evidence == ["bold"]:
            warnings.append(
                StructureWarning(
                    WARN_AMBIGUOUS,
                    f"Heading {heading.text[:40]!r} classified on bold style alone",
                    paragraph.page_number,
                )
            )

    logger.debug(
        f"Headings: {len(headings)} of {len(paragraphs)} paragraphs "
        f"(mean font size {mean:.2f})"
    )
    return HeadingClassificationResult(headings=headings, mean_font_size=mean, warnings=warnings)


def classify_headings(
    paragraphs: Sequence[Paragraph],
    config: Optional[StructureConfig] = None,
) -> List[Heading]:
    """
    Classify one page's paragraphs into headings.

    Convenience wrapper over classify_headings_with_result.

    Example:
        >>> [h.clean_text for h in classify_headings(paragraphs)]
        ['Introduction']
    """
    return classify_headings_with_result(paragraphs, config).headings
