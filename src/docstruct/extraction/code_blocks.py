"""
Code block detection from page paragraphs.

A paragraph is code when any of its tokens uses a monospace font, or when
its text both looks like code and is indented by four or more spaces.
The language guess is the first hit in the ordered language rule table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set

from docstruct.config import StructureConfig
from docstruct.constants import PatternProfile, first_match
from docstruct.extraction.paragraphs import Paragraph


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeBlock:
    """A paragraph recognized as source code."""
    text: str
    language: str
    page_number: int = 0
    y: float = 0.0
    paragraph_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "language": self.language,
            "pageNumber": self.page_number,
            "y": self.y,
            "paragraphIndex": self.paragraph_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeBlock":
        return cls(
            text=data["text"],
            language=data["language"],
            page_number=data.get("pageNumber", 0),
            y=data.get("y", 0.0),
            paragraph_index=data.get("paragraphIndex", 0),
        )


def detect_code_language(text: str, patterns: PatternProfile) -> str:
    """
    Guess a programming language from code text.

    Example:
        >>> detect_code_language("def main():", DEFAULT_PATTERNS)
        'python'
        >>> detect_code_language("plain words", DEFAULT_PATTERNS)
        'text'
    """
    hit = first_match(patterns.code_languages, text)
    return hit[0] if hit else "text"


def has_monospace_font(paragraph: Paragraph, patterns: PatternProfile) -> bool:
    for line in paragraph.lines:
        for token in line.tokens:
            font = token.font_name.lower()
            if font and any(hint in font for hint in patterns.code_font_hints):
                return True
    return False


def is_code_paragraph(paragraph: Paragraph, patterns: PatternProfile) -> bool:
    if has_monospace_font(paragraph, patterns):
        return True
    raw = paragraph.raw_first_line
    return bool(patterns.code_shape.search(raw)) and bool(patterns.code_indent.match(raw))


def detect_code_blocks(
    paragraphs: Sequence[Paragraph],
    config: Optional[StructureConfig] = None,
    skip_indices: Optional[Set[int]] = None,
) -> List[CodeBlock]:
    """
    Detect code paragraphs on one page.

    Args:
        paragraphs: The page's paragraphs.
        config: Rule tables.
        skip_indices: Paragraph indices already claimed by other detectors.

    Returns:
        CodeBlocks in page order.
    """
    config = config or StructureConfig()
    skip_indices = skip_indices or set()
    blocks = [
        CodeBlock(
            text=p.text,
            language=detect_code_language(p.text, config.patterns),
            page_number=p.page_number,
            y=p.y,
            paragraph_index=p.index,
        )
        for p in paragraphs
        if p.index not in skip_indices and is_code_paragraph(p, config.patterns)
    ]
    if blocks:
        logger.debug(f"Page {blocks[0].page_number}: {len(blocks)} code blocks")
    return blocks
