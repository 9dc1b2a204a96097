"""
docstruct: document structure reconstruction from positioned text tokens.

Pipeline:
    TextTokens -> Lines -> Paragraphs -> {Headings, Lists, Tables, Code}
    per page (parallel), then Outline, Sections, Reading Order,
    Cross-References and Metadata over the whole document.

Usage:
    from docstruct import StructureConfig, pages_from_records, structure_document

    structure = structure_document(pages_from_records(records), StructureConfig(max_workers=4))
    record = structure.to_dict()
"""

from docstruct.config import StructureConfig
from docstruct.document import DocumentStatistics, DocumentStructure
from docstruct.errors import (
    CancellationSignal,
    DocstructError,
    MalformedTokenError,
    PageExtractionFailure,
    StructureWarning,
)
from docstruct.extraction.tokens import PageTokens, TextToken, pages_from_dataframe, pages_from_records
from docstruct.pipeline import PageResult, compose_document, process_page, structure_document
from docstruct.utils.serialize import document_from_dict

__version__ = "0.1.0"

__all__ = [
    "StructureConfig",
    "DocumentStatistics",
    "DocumentStructure",
    "CancellationSignal",
    "DocstructError",
    "MalformedTokenError",
    "PageExtractionFailure",
    "StructureWarning",
    "PageTokens",
    "TextToken",
    "pages_from_dataframe",
    "pages_from_records",
    "PageResult",
    "compose_document",
    "process_page",
    "structure_document",
    "document_from_dict",
]
