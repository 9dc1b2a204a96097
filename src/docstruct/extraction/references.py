"""
Cross-reference extraction from page text.

This module scans each page's raw concatenated text for in-text pointers:
- Page references: "page 12", "p. 4"
- Section references: "Section 2.3", "sec. 4"
- Figure references: "Figure 3", "fig. 1"
- Table references: "Table 2", "tbl. 5"
- Chapter references: "Chapter 7", "ch. 2"
- Appendix references: "Appendix B", "app. C"

Matching is case-insensitive. Each match is recorded with a fixed-width
context window around its start position.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from docstruct.config import StructureConfig
from docstruct.utils.text import extract_context


logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class CrossReference:
    """
    A single in-text reference.

    Attributes:
        type: page/section/figure/table/chapter/appendix.
        reference: Captured target (e.g. "2.3", "B").
        full_match: Whole matched text (e.g. "Section 2.3").
        page_number: Page where the reference appears.
        context: Text window around the match.
    """
    type: str
    reference: str
    full_match: str
    page_number: int
    context: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "reference": self.reference,
            "fullMatch": self.full_match,
            "pageNumber": self.page_number,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrossReference":
        return cls(
            type=data["type"],
            reference=data["reference"],
            full_match=data["fullMatch"],
            page_number=data["pageNumber"],
            context=data["context"],
        )


# =============================================================================
# EXTRACTION
# =============================================================================

def extract_references_from_text(
    text: str,
    page_number: int,
    config: Optional[StructureConfig] = None,
) -> List[CrossReference]:
    """
    Extract all cross-references from one page's text.

    Results are grouped by rule order (page, section, figure, table,
    chapter, appendix), then by position.

    Args:
        text: Page raw text.
        page_number: Page number.
        config: Rule tables and context width.

    Returns:
        List of CrossReference objects.

    Example:
        >>> refs = extract_references_from_text("See Figure 2 and page 14.", 3)
        >>> [(r.type, r.reference) for r in refs]
        [('page', '14'), ('figure', '2')]
    """
    config = config or StructureConfig()
    if not text or not text.strip():
        return []

    references: List[CrossReference] = []
    for rule in config.patterns.cross_references:
        for match in rule.pattern.finditer(text):
            references.append(
                CrossReference(
                    type=rule.label,
                    reference=match.group(1),
                    full_match=match.group(0),
                    page_number=page_number,
                    context=extract_context(text, match.start(), config.reference_context_chars),
                )
            )
    return references


def extract_cross_references(
    page_texts: Iterable[Tuple[int, str]],
    config: Optional[StructureConfig] = None,
) -> List[CrossReference]:
    """
    Extract cross-references across all pages.

    Args:
        page_texts: (page_number, raw text) pairs in page order.
        config: Rule tables and context width.

    Returns:
        References in page order.
    """
    config = config or StructureConfig()
    references: List[CrossReference] = []
    pages_with_refs = 0
    for page_number, text in page_texts:
        page_refs = extract_references_from_text(text, page_number, config)
        if page_refs:
            pages_with_refs += 1
            references.extend(page_refs)

    logger.info(f"Extracted {len(references)} cross-references ({pages_with_refs} pages with refs)")
    return references


# =============================================================================
# SUMMARY
# =============================================================================

def references_to_dataframe(references: Iterable[CrossReference]) -> pd.DataFrame:
    """Convert references to a DataFrame (one row per reference)."""
    rows = [r.to_dict() for r in references]
    if not rows:
        return pd.DataFrame(columns=["type", "reference", "fullMatch", "pageNumber", "context"])
    return pd.DataFrame(rows)
