"""
Document-level analysis over the reconstructed structure.

Provides the document metadata block:
- Document type from keyword counts over all page text
- Estimated reading time from page count
- Complexity band from page count
- Title from the first top-level heading

Also summarizes cross-references for reporting.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence

from docstruct.config import StructureConfig
from docstruct.extraction.headings import Heading
from docstruct.extraction.outline import sort_headings
from docstruct.extraction.references import CrossReference, references_to_dataframe


logger = logging.getLogger(__name__)

WORDS_PER_PAGE = 250
WORDS_PER_MINUTE = 200

# (upper bound exclusive, label); anything at or above the last bound is very-complex
COMPLEXITY_BANDS = (
    (5, "simple"),
    (20, "moderate"),
    (50, "complex"),
)


@dataclass(frozen=True)
class DocumentMetadata:
    """
    Document-level metadata derived from the structure.

    Attributes:
        document_type: academic/technical/legal/financial/manual/report/general.
        page_count: Total pages in the input.
        word_count: Words across all page text.
        estimated_reading_time: Minutes, from page count.
        complexity: simple/moderate/complex/very-complex.
        has_title: Whether a title was found.
        title: Title text or None.
    """
    document_type: str
    page_count: int
    word_count: int
    estimated_reading_time: int
    complexity: str
    has_title: bool
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentType": self.document_type,
            "pageCount": self.page_count,
            "wordCount": self.word_count,
            "estimatedReadingTime": self.estimated_reading_time,
            "complexity": self.complexity,
            "hasTitle": self.has_title,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentMetadata":
        return cls(
            document_type=data["documentType"],
            page_count=data["pageCount"],
            word_count=data["wordCount"],
            estimated_reading_time=data["estimatedReadingTime"],
            complexity=data["complexity"],
            has_title=data["hasTitle"],
            title=data.get("title"),
        )


def detect_document_type(text: str, config: Optional[StructureConfig] = None) -> str:
    """
    Detect the document type from keyword hit counts.

    The type with the most hits wins; ties keep the earlier type in the rule
    table, and zero hits yields "general".

    Example:
        >>> detect_document_type("Abstract. Introduction. Methodology and results.")
        'academic'
        >>> detect_document_type("")
        'general'
    """
    config = config or StructureConfig()
    lowered = text.lower()
    best_type, best_count = "general", 0
    for rule in config.patterns.document_types:
        count = sum(1 for _ in rule.pattern.finditer(lowered))
        if count > best_count:
            best_type, best_count = rule.label, count
    return best_type


def estimate_reading_time(page_count: int) -> int:
    """
    Estimate reading time in minutes (250 words/page at 200 words/minute).

    Example:
        >>> estimate_reading_time(4)
        5
    """
    return math.ceil(page_count * WORDS_PER_PAGE / WORDS_PER_MINUTE)


def assess_complexity(page_count: int) -> str:
    """Band a document by page count."""
    for bound, label in COMPLEXITY_BANDS:
        if page_count < bound:
            return label
    return "very-complex"


def find_title(headings: Sequence[Heading]) -> Optional[str]:
    """Clean text of the shallowest heading that appears first in the document."""
    if not headings:
        return None
    ordered = sort_headings(headings)
    top_level = min(h.level for h in ordered)
    first = next(h for h in ordered if h.level == top_level)
    return first.clean_text or first.text or None


def analyze_metadata(
    page_texts: Iterable[str],
    page_count: int,
    headings: Sequence[Heading],
    config: Optional[StructureConfig] = None,
) -> DocumentMetadata:
    """
    Build the document metadata block.

    Args:
        page_texts: Raw text of each processed page.
        page_count: Total pages in the input (processed or not).
        headings: All document headings.
        config: Supplies the document type rule table.

    Returns:
        DocumentMetadata.
    """
    all_text = " ".join(page_texts)
    title = find_title(headings)
    metadata = DocumentMetadata(
        document_type=detect_document_type(all_text, config),
        page_count=page_count,
        word_count=len(all_text.split()),
        estimated_reading_time=estimate_reading_time(page_count),
        complexity=assess_complexity(page_count),
        has_title=title is not None,
        title=title,
    )
    logger.info(
        f"Document type {metadata.document_type!r}, {metadata.complexity}, "
        f"~{metadata.estimated_reading_time} min read"
    )
    return metadata


def summarize_references(references: Iterable[CrossReference]) -> Dict[str, Any]:
    """
    Generate summary statistics for cross-references.

    Args:
        references: Extracted references.

    Returns:
        Dictionary with total, counts by type, unique targets and pages.

    Example:
        >>> summarize_references(structure.cross_references)["by_type"]
        {'figure': 2, 'section': 1}
    """
    refs_df = references_to_dataframe(references)
    if refs_df.empty:
        return {"total": 0, "by_type": {}, "unique_targets": 0, "pages": 0}

    by_type = {str(k): int(v) for k, v in refs_df["type"].value_counts().items()}
    unique_targets = int(refs_df[["type", "reference"]].drop_duplicates().shape[0])

    return {
        "total": int(len(refs_df)),
        "by_type": by_type,
        "unique_targets": unique_targets,
        "pages": int(refs_df["pageNumber"].nunique()),
    }
