"""
Root aggregate of a structure reconstruction run.

DocumentStructure is immutable once composed. ``to_dict`` produces the
JSON-compatible output record; field names, nesting and array order of that
record are stable. ``docstruct.utils.serialize.document_from_dict`` rebuilds
an equal structure from it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from docstruct.analysis import DocumentMetadata
from docstruct.constants import STATUS_CANCELLED, STATUS_COMPLETE
from docstruct.errors import StructureWarning
from docstruct.extraction.code_blocks import CodeBlock
from docstruct.extraction.headings import Heading
from docstruct.extraction.lists import ListBlock
from docstruct.extraction.outline import OutlineNode
from docstruct.extraction.reading_order import ReadingOrderElement
from docstruct.extraction.references import CrossReference
from docstruct.extraction.sections import Section
from docstruct.extraction.tables import TableBlock


# =============================================================================
# STATISTICS
# =============================================================================

@dataclass(frozen=True)
class DocumentStatistics:
    """Counts over a run, including recovered failures."""
    page_count: int = 0
    pages_processed: int = 0
    errored_pages: int = 0
    warning_count: int = 0
    warnings_by_kind: Dict[str, int] = field(default_factory=dict)
    token_count: int = 0
    line_count: int = 0
    paragraph_count: int = 0
    heading_count: int = 0
    list_count: int = 0
    table_count: int = 0
    code_block_count: int = 0
    cross_reference_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageCount": self.page_count,
            "pagesProcessed": self.pages_processed,
            "erroredPages": self.errored_pages,
            "warningCount": self.warning_count,
            "warningsByKind": dict(self.warnings_by_kind),
            "tokenCount": self.token_count,
            "lineCount": self.line_count,
            "paragraphCount": self.paragraph_count,
            "headingCount": self.heading_count,
            "listCount": self.list_count,
            "tableCount": self.table_count,
            "codeBlockCount": self.code_block_count,
            "crossReferenceCount": self.cross_reference_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentStatistics":
        return cls(
            page_count=data.get("pageCount", 0),
            pages_processed=data.get("pagesProcessed", 0),
            errored_pages=data.get("erroredPages", 0),
            warning_count=data.get("warningCount", 0),
            warnings_by_kind=dict(data.get("warningsByKind", {})),
            token_count=data.get("tokenCount", 0),
            line_count=data.get("lineCount", 0),
            paragraph_count=data.get("paragraphCount", 0),
            heading_count=data.get("headingCount", 0),
            list_count=data.get("listCount", 0),
            table_count=data.get("tableCount", 0),
            code_block_count=data.get("codeBlockCount", 0),
            cross_reference_count=data.get("crossReferenceCount", 0),
        )


# =============================================================================
# DOCUMENT STRUCTURE
# =============================================================================

@dataclass(frozen=True)
class DocumentStructure:
    """
    The reconstructed structure of one document.

    Attributes:
        outline: Heading hierarchy roots.
        sections: One section per heading, in document order.
        headings: All headings in document order.
        lists: All lists, page order.
        tables: All tables, page order.
        code_blocks: All code blocks, page order.
        cross_references: All references, page order.
        reading_order: Linear reading order.
        metadata: Document-level metadata.
        statistics: Run counts.
        warnings: Recorded warnings, page order.
        status: "complete" or "cancelled".
    """
    outline: Tuple[OutlineNode, ...] = ()
    sections: Tuple[Section, ...] = ()
    headings: Tuple[Heading, ...] = ()
    lists: Tuple[ListBlock, ...] = ()
    tables: Tuple[TableBlock, ...] = ()
    code_blocks: Tuple[CodeBlock, ...] = ()
    cross_references: Tuple[CrossReference, ...] = ()
    reading_order: Tuple[ReadingOrderElement, ...] = ()
    metadata: Optional[DocumentMetadata] = None
    statistics: DocumentStatistics = field(default_factory=DocumentStatistics)
    warnings: Tuple[StructureWarning, ...] = ()
    status: str = STATUS_COMPLETE

    @property
    def cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outline": [node.to_dict() for node in self.outline],
            "sections": [s.to_dict() for s in self.sections],
            "headings": [h.to_dict() for h in self.headings],
            "lists": [block.to_dict() for block in self.lists],
            "tables": [t.to_dict() for t in self.tables],
            "crossReferences": [r.to_dict() for r in self.cross_references],
            "readingOrder": [e.to_dict() for e in self.reading_order],
            "codeBlocks": [c.to_dict() for c in self.code_blocks],
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "statistics": self.statistics.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
            "status": self.status,
        }
