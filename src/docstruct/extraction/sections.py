"""
Section materialization from headings and paragraphs.

A section is the text slice between a heading and the next heading at the
same or a shallower level. Sub-headings (and their bodies) fall inside the
slice, which is how ``has_subsections`` is determined.

Process Overview:
1. Flatten all pages' paragraphs into document order
2. Locate each heading's own paragraph
3. Collect paragraph text until the terminating heading
4. Compute word count and subsection flag
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docstruct.extraction.headings import Heading
from docstruct.extraction.outline import sort_headings
from docstruct.extraction.paragraphs import Paragraph
from docstruct.utils.text import word_count


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Section:
    """
    A materialized document section.

    Attributes:
        title: Heading text.
        level: Heading level.
        page_number: Page of the heading.
        start_y: Heading y.
        end_y: Terminating heading's y, or 0.0 at document end.
        content: Paragraph texts in the slice, blank-line separated.
        word_count: Words in content.
        has_subsections: Whether a deeper heading falls inside the slice.
    """
    title: str
    level: int
    page_number: int
    start_y: float
    end_y: float
    content: str
    word_count: int
    has_subsections: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "level": self.level,
            "pageNumber": self.page_number,
            "startY": self.start_y,
            "endY": self.end_y,
            "content": self.content,
            "wordCount": self.word_count,
            "hasSubsections": self.has_subsections,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Section":
        return cls(
            title=data["title"],
            level=data["level"],
            page_number=data["pageNumber"],
            start_y=data["startY"],
            end_y=data["endY"],
            content=data["content"],
            word_count=data["wordCount"],
            has_subsections=data["hasSubsections"],
        )


def build_sections(
    headings: Sequence[Heading],
    paragraphs: Sequence[Paragraph],
) -> List[Section]:
    """
    Slice document text into one section per heading.

    Args:
        headings: All headings of the document, any order.
        paragraphs: All paragraphs of the document in page order.

    Returns:
        Sections in heading document order.

    Example:
        >>> sections = build_sections(headings, paragraphs)
        >>> sections[0].title, sections[0].word_count
        ('1. Introduction', 12)
    """
    ordered = sort_headings(headings)
    heading_at: Dict[Tuple[int, int], Heading] = {
        (h.page_number, h.paragraph_index): h for h in ordered
    }
    position: Dict[Tuple[int, int], int] = {
        (p.page_number, p.index): i for i, p in enumerate(paragraphs)
    }

    sections: List[Section] = []
    for heading in ordered:
        start = position.get((heading.page_number, heading.paragraph_index))
        if start is None:
            logger.warning(
                f"Heading {heading.text[:40]!r} on page {heading.page_number} "
                f"has no source paragraph; section left empty"
            )
            sections.append(_section(heading, [], None, False))
            continue

        texts: List[str] = []
        terminator: Optional[Heading] = None
        has_subsections = False
        for paragraph in paragraphs[start + 1:]:
            inner = heading_at.get((paragraph.page_number, paragraph.index))
            if inner is not None:
                if inner.level <= heading.level:
                    terminator = inner
                    break
                has_subsections = True
            texts.append(paragraph.text)

        sections.append(_section(heading, texts, terminator, has_subsections))

    logger.debug(f"Built {len(sections)} sections")
    return sections


def _section(
    heading: Heading,
    texts: List[str],
    terminator: Optional[Heading],
    has_subsections: bool,
) -> Section:
    content = "\n\n".join(t for t in texts if t).strip()
    return Section(
        title=heading.text,
        level=heading.level,
        page_number=heading.page_number,
        start_y=heading.y,
        end_y=terminator.y if terminator else 0.0,
        content=content,
        word_count=word_count(content),
        has_subsections=has_subsections,
    )
