"""
Paragraph segmentation from assembled lines.

A paragraph is a run of contiguous lines on one page. Boundaries are:
1. Vertical gap to the previous line above ``paragraph_gap``
2. An empty line (consumed as a separator, never content)
3. Font size differing from the paragraph's first line by more than
   ``font_size_jump``

Segmentation is deterministic and idempotent: running it over a
paragraph's own lines reproduces that paragraph.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docstruct.config import StructureConfig
from docstruct.extraction.lines import Line


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Paragraph:
    """
    Contiguous lines on one page.

    Style attributes come from the first line, as does ``y``.

    Attributes:
        lines: Member lines in top-to-bottom order (never empty).
        page_number: Page the paragraph sits on.
        index: Position of the paragraph within its page.
    """
    lines: Tuple[Line, ...]
    page_number: int = 0
    index: int = 0

    @property
    def text(self) -> str:
        return " ".join(line.text for line in self.lines).strip()

    @property
    def raw_first_line(self) -> str:
        """First line's unstripped text, used for indentation checks."""
        return self.lines[0].raw_text if self.lines else ""

    @property
    def font_size(self) -> float:
        return self.lines[0].font_size if self.lines else 0.0

    @property
    def bold(self) -> bool:
        return self.lines[0].bold if self.lines else False

    @property
    def italic(self) -> bool:
        return self.lines[0].italic if self.lines else False

    @property
    def y(self) -> float:
        return self.lines[0].y if self.lines else 0.0

    @property
    def line_indices(self) -> Tuple[int, ...]:
        return tuple(line.index for line in self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "fontSize": self.font_size,
            "bold": self.bold,
            "italic": self.italic,
            "y": self.y,
            "pageNumber": self.page_number,
            "index": self.index,
            "lines": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Paragraph":
        return cls(
            lines=tuple(Line.from_dict(line) for line in data.get("lines", [])),
            page_number=data.get("pageNumber", 0),
            index=data.get("index", 0),
        )


def starts_new_paragraph(
    line: Line,
    previous: Optional[Line],
    paragraph_first: Optional[Line],
    config: StructureConfig,
) -> bool:
    """
    Decide whether ``line`` opens a new paragraph.

    Args:
        line: Current line.
        previous: Line immediately before it (including empty lines), if any.
        paragraph_first: First line of the open paragraph, if any.
        config: Thresholds.

    Returns:
        True if a paragraph boundary falls before ``line``.
    """
    if not line.text:
        return True
    if previous is not None and abs(previous.y - line.y) > config.paragraph_gap:
        return True
    if paragraph_first is not None:
        return abs(line.font_size - paragraph_first.font_size) > config.font_size_jump
    return False


def segment_paragraphs(
    lines: Sequence[Line],
    config: Optional[StructureConfig] = None,
    page_number: int = 0,
) -> List[Paragraph]:
    """
    Group lines into paragraphs.

    Args:
        lines: Lines in top-to-bottom order.
        config: Thresholds; defaults to StructureConfig().
        page_number: Page number stamped on each paragraph.

    Returns:
        Paragraphs in page order.

    Example:
        >>> paragraphs = segment_paragraphs(assemble_lines(tokens), page_number=1)
        >>> [p.text for p in paragraphs]
        ['First paragraph text', 'Second paragraph']
    """
    config = config or StructureConfig()
    paragraphs: List[Paragraph] = []
    current: List[Line] = []
    previous: Optional[Line] = None

    for line in lines:
        first = current[0] if current else None
        if current and starts_new_paragraph(line, previous, first, config):
            paragraphs.append(Paragraph(tuple(current), page_number, len(paragraphs)))
            current = []

        if line.text:
            current.append(line)
        previous = line

    if current:
        paragraphs.append(Paragraph(tuple(current), page_number, len(paragraphs)))

    logger.debug(f"Page {page_number}: {len(paragraphs)} paragraphs from {len(lines)} lines")
    return paragraphs
