"""
List recognition from page paragraphs.

Every line of every paragraph is tested against the ordered marker table
(bullet, numbered, lettered, roman). Consecutive matches of the same broad
type (ordered vs unordered) extend the open ListBlock; a type change starts
a new block and a paragraph that opens without a marker closes it. Unmarked
lines after a marker line in the same paragraph continue that item.

Style is a best-effort classification over the markers observed in the
block. Mixed or empty marker sets degrade to "mixed"/"unknown" with an
ambiguity warning rather than failing.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from docstruct.config import StructureConfig
from docstruct.constants import (
    BULLET_MARKERS,
    DASH_MARKERS,
    LIST_ORDERED,
    LIST_UNORDERED,
    WARN_AMBIGUOUS,
    first_match,
)
from docstruct.errors import StructureWarning
from docstruct.extraction.paragraphs import Paragraph


logger = logging.getLogger(__name__)

ROMAN_RX = re.compile(r"^[ivxlcdm]+$", re.IGNORECASE)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ListItem:
    """A single list entry with its marker stripped from the text."""
    text: str
    marker: str
    level: int = 1
    y: float = 0.0
    paragraph_index: int = 0
    line_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "marker": self.marker,
            "level": self.level,
            "y": self.y,
            "paragraphIndex": self.paragraph_index,
            "lineIndex": self.line_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListItem":
        return cls(
            text=data["text"],
            marker=data["marker"],
            level=data.get("level", 1),
            y=data.get("y", 0.0),
            paragraph_index=data.get("paragraphIndex", 0),
            line_index=data.get("lineIndex", 0),
        )


@dataclass(frozen=True)
class ListNesting:
    """Indentation summary of a list block."""
    has_nesting: bool
    max_level: int
    min_level: int
    level_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasNesting": self.has_nesting,
            "maxLevel": self.max_level,
            "minLevel": self.min_level,
            "levelCount": self.level_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListNesting":
        return cls(
            has_nesting=data["hasNesting"],
            max_level=data["maxLevel"],
            min_level=data["minLevel"],
            level_count=data["levelCount"],
        )


@dataclass(frozen=True)
class ListBlock:
    """
    A run of consecutive list-item lines of one broad type.

    Attributes:
        type: "ordered" or "unordered".
        style: bullet/dash/mixed (unordered), numeric/alphabetic/roman/mixed
            (ordered), or unknown.
        items: Items in position order.
        nesting_info: Indentation summary.
        page_number: Page number.
        y: First item's y.
    """
    type: str
    style: str
    items: Tuple[ListItem, ...]
    nesting_info: ListNesting
    page_number: int = 0
    y: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "style": self.style,
            "items": [item.to_dict() for item in self.items],
            "nestingInfo": self.nesting_info.to_dict(),
            "pageNumber": self.page_number,
            "y": self.y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListBlock":
        return cls(
            type=data["type"],
            style=data["style"],
            items=tuple(ListItem.from_dict(i) for i in data.get("items", [])),
            nesting_info=ListNesting.from_dict(data["nestingInfo"]),
            page_number=data.get("pageNumber", 0),
            y=data.get("y", 0.0),
        )


@dataclass
class ListRecognitionResult:
    """Result of list recognition for one page."""
    lists: List[ListBlock]
    warnings: List[StructureWarning] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(len(block.items) for block in self.lists)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def match_list_marker(text: str, config: StructureConfig) -> Optional[Tuple[str, str, int]]:
    """
    Test text against the marker table.

    Args:
        text: Line text, unstripped.
        config: Rule tables.

    Returns:
        Tuple of (marker kind, marker, match end) or None.

    Example:
        >>> match_list_marker("• Alpha", StructureConfig())
        ('bullet', '•', 2)
        >>> match_list_marker("ii) Beta", StructureConfig())
        ('roman', 'ii)', 4)
    """
    hit = first_match(config.patterns.list_markers, text)
    if not hit:
        return None
    kind, match = hit
    return kind, match.group(1), match.end()


def broad_type(kind: str) -> str:
    return LIST_UNORDERED if kind == "bullet" else LIST_ORDERED


def item_level(raw_text: str, indent_width: int = 4) -> int:
    """
    Nesting level from leading whitespace (one level per indent unit).

    Example:
        >>> item_level("        - nested")
        3
    """
    leading = len(raw_text) - len(raw_text.lstrip())
    return leading // indent_width + 1


def strip_marker(text: str, marker: str) -> str:
    """Remove the leading marker (and following whitespace) from item text."""
    stripped = text.lstrip()
    if stripped.startswith(marker):
        stripped = stripped[len(marker):]
    return stripped.strip()


def analyze_nesting(items: Sequence[ListItem]) -> ListNesting:
    levels = [item.level for item in items] or [1]
    return ListNesting(
        has_nesting=max(levels) > min(levels),
        max_level=max(levels),
        min_level=min(levels),
        level_count=len(set(levels)),
    )


def _marker_body(marker: str) -> str:
    return marker.rstrip(".)")


def detect_list_style(list_type: str, markers: Sequence[str]) -> str:
    """
    Classify a block's style from the markers actually observed.

    Unordered: a single bullet glyph -> bullet, a single dash-like glyph ->
    dash, anything else -> mixed. Ordered: all digits -> numeric, all roman
    numerals with at least one multi-character numeral -> roman, all single
    letters -> alphabetic, otherwise mixed. No markers -> unknown.

    Example:
        >>> detect_list_style("ordered", ["i.", "ii.", "iii."])
        'roman'
        >>> detect_list_style("ordered", ["a)", "b)"])
        'alphabetic'
    """
    if not markers:
        return "unknown"

    if list_type == LIST_UNORDERED:
        unique: Set[str] = set(markers)
        if len(unique) == 1:
            marker = next(iter(unique))
            if marker in BULLET_MARKERS:
                return "bullet"
            if marker in DASH_MARKERS:
                return "dash"
        return "mixed"

    bodies = [_marker_body(m) for m in markers]
    if all(b.isdigit() for b in bodies):
        return "numeric"
    if all(ROMAN_RX.match(b) for b in bodies) and any(len(b) > 1 for b in bodies):
        return "roman"
    if all(len(b) == 1 and b.isalpha() for b in bodies):
        return "alphabetic"
    return "mixed"


# =============================================================================
# RECOGNITION
# =============================================================================

def _close_block(
    list_type: str,
    items: List[ListItem],
    page_number: int,
    warnings: List[StructureWarning],
) -> ListBlock:
    style = detect_list_style(list_type, [item.marker for item in items])
    if style in ("mixed", "unknown"):
        warnings.append(
            StructureWarning(
                WARN_AMBIGUOUS,
                f"List of {len(items)} items has {style} marker style",
                page_number,
            )
        )
    return ListBlock(
        type=list_type,
        style=style,
        items=tuple(items),
        nesting_info=analyze_nesting(items),
        page_number=page_number,
        y=items[0].y,
    )


def recognize_lists_with_result(
    paragraphs: Sequence[Paragraph],
    config: Optional[StructureConfig] = None,
) -> ListRecognitionResult:
    """
    Group marker-prefixed lines into list blocks.

    Every line of every paragraph is tested, so items set at normal line
    spacing (one paragraph holding several marker lines) still come out as
    separate items. A line without a marker continues the open item of its
    paragraph; on a paragraph's first line it closes the open block instead.

    Args:
        paragraphs: One page's paragraphs in order.
        config: Thresholds and rule tables.

    Returns:
        ListRecognitionResult with blocks and style warnings.
    """
    config = config or StructureConfig()
    blocks: List[ListBlock] = []
    warnings: List[StructureWarning] = []
    current_type: Optional[str] = None
    current_items: List[ListItem] = []
    page_number = paragraphs[0].page_number if paragraphs else 0

    def close_block():
        nonlocal current_type, current_items
        if current_items:
            blocks.append(_close_block(current_type, current_items, page_number, warnings))
        current_type, current_items = None, []

    for paragraph in paragraphs:
        open_in_paragraph = False
        for line in paragraph.lines:
            hit = match_list_marker(line.raw_text, config)
            if hit is None:
                if open_in_paragraph:
                    item = current_items[-1]
                    current_items[-1] = replace(item, text=f"{item.text} {line.text}".strip())
                else:
                    close_block()
                continue

            kind, marker, _ = hit
            list_type = broad_type(kind)
            if current_items and list_type != current_type:
                close_block()
            current_type = list_type
            current_items.append(
                ListItem(
                    text=strip_marker(line.text, marker),
                    marker=marker,
                    level=item_level(line.raw_text, config.list_indent_width),
                    y=line.y,
                    paragraph_index=paragraph.index,
                    line_index=line.index,
                )
            )
            open_in_paragraph = True

    close_block()

    result = ListRecognitionResult(lists=blocks, warnings=warnings)
    logger.debug(f"Page {page_number}: {len(blocks)} lists, {result.item_count} items")
    return result


def recognize_lists(
    paragraphs: Sequence[Paragraph],
    config: Optional[StructureConfig] = None,
) -> List[ListBlock]:
    """
    Group marker-prefixed lines into list blocks.

    Example:
        >>> block = recognize_lists(paragraphs)[0]
        >>> block.style, [item.text for item in block.items]
        ('bullet', ['Alpha', 'Beta', 'Gamma'])
    """
    return recognize_lists_with_result(paragraphs, config).lists
