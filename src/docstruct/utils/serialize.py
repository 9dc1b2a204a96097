"""
Serialization utilities for docstruct output records.

``DocumentStructure.to_dict`` produces plain JSON-compatible data; this
module rebuilds structures from those records and normalizes numpy scalars
that may leak in from DataFrame-sourced input before JSON encoding.
"""

import json
from typing import Any, Dict

import numpy as np

from docstruct.analysis import DocumentMetadata
from docstruct.constants import STATUS_COMPLETE
from docstruct.document import DocumentStatistics, DocumentStructure
from docstruct.errors import StructureWarning
from docstruct.extraction.code_blocks import CodeBlock
from docstruct.extraction.headings import Heading
from docstruct.extraction.lists import ListBlock
from docstruct.extraction.outline import OutlineNode
from docstruct.extraction.reading_order import ReadingOrderElement
from docstruct.extraction.references import CrossReference
from docstruct.extraction.sections import Section
from docstruct.extraction.tables import TableBlock


def to_builtin(value: Any) -> Any:
    """
    Recursively convert numpy scalars and arrays to plain Python values.

    Example:
        >>> to_builtin({"y": np.float64(700.0), "rows": np.array([1, 2])})
        {'y': 700.0, 'rows': [1, 2]}
    """
    if isinstance(value, dict):
        return {k: to_builtin(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_builtin(v) for v in value]
    if isinstance(value, np.ndarray):
        return [to_builtin(v) for v in value.tolist()]
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    return value


def document_from_dict(record: Dict[str, Any]) -> DocumentStructure:
    """
    Rebuild a DocumentStructure from its ``to_dict`` record.

    Args:
        record: Output of ``DocumentStructure.to_dict()`` (or its JSON decode).

    Returns:
        A DocumentStructure equal to the one that produced the record.
    """
    metadata = record.get("metadata")
    return DocumentStructure(
        outline=tuple(OutlineNode.from_dict(n) for n in record.get("outline", [])),
        sections=tuple(Section.from_dict(s) for s in record.get("sections", [])),
        headings=tuple(Heading.from_dict(h) for h in record.get("headings", [])),
        lists=tuple(ListBlock.from_dict(b) for b in record.get("lists", [])),
        tables=tuple(TableBlock.from_dict(t) for t in record.get("tables", [])),
        code_blocks=tuple(CodeBlock.from_dict(c) for c in record.get("codeBlocks", [])),
        cross_references=tuple(CrossReference.from_dict(r) for r in record.get("crossReferences", [])),
        reading_order=tuple(ReadingOrderElement.from_dict(e) for e in record.get("readingOrder", [])),
        metadata=DocumentMetadata.from_dict(metadata) if metadata else None,
        statistics=DocumentStatistics.from_dict(record.get("statistics", {})),
        warnings=tuple(StructureWarning.from_dict(w) for w in record.get("warnings", [])),
        status=record.get("status", STATUS_COMPLETE),
    )


def document_to_json(structure: DocumentStructure, indent: int = 2) -> str:
    """Encode a DocumentStructure as JSON text."""
    return json.dumps(to_builtin(structure.to_dict()), indent=indent, ensure_ascii=False)


def document_from_json(text: str) -> DocumentStructure:
    """Decode JSON text produced by ``document_to_json``."""
    return document_from_dict(json.loads(text))
