"""Per-page structure extraction and document-level composition modules."""

from .tokens import (
    TextToken,
    PageTokens,
    coerce_page_tokens,
    pages_from_records,
    pages_from_dataframe,
    page_text,
)

from .lines import (
    Line,
    assemble_lines,
)

from .paragraphs import (
    Paragraph,
    starts_new_paragraph,
    segment_paragraphs,
)

from .headings import (
    Heading,
    HeadingNumbering,
    HeadingClassificationResult,
    classify_headings,
    classify_headings_with_result,
    heading_level,
    detect_heading_type,
    clean_heading_text,
    extract_numbering,
)

from .outline import (
    OutlineNode,
    build_outline,
    build_outline_index,
    flatten_outline,
    sort_headings,
)

from .sections import (
    Section,
    build_sections,
)

from .lists import (
    ListItem,
    ListNesting,
    ListBlock,
    ListRecognitionResult,
    recognize_lists,
    recognize_lists_with_result,
    detect_list_style,
)

from .tables import (
    TableRow,
    TableStructure,
    TableBlock,
    TableDetectionResult,
    detect_tables,
    detect_tables_with_result,
)

from .code_blocks import (
    CodeBlock,
    detect_code_blocks,
    detect_code_language,
)

from .reading_order import (
    ReadingOrderElement,
    reading_order_value,
    collect_page_elements,
    order_elements,
    reading_order_to_dataframe,
)

from .references import (
    CrossReference,
    extract_cross_references,
    extract_references_from_text,
    references_to_dataframe,
)

__all__ = [
    # Tokens
    "TextToken",
    "PageTokens",
    "coerce_page_tokens",
    "pages_from_records",
    "pages_from_dataframe",
    "page_text",
    # Lines and paragraphs
    "Line",
    "assemble_lines",
    "Paragraph",
    "starts_new_paragraph",
    "segment_paragraphs",
    # Headings and outline
    "Heading",
    "HeadingNumbering",
    "HeadingClassificationResult",
    "classify_headings",
    "classify_headings_with_result",
    "heading_level",
    "detect_heading_type",
    "clean_heading_text",
    "extract_numbering",
    "OutlineNode",
    "build_outline",
    "build_outline_index",
    "flatten_outline",
    "sort_headings",
    "Section",
    "build_sections",
    # Lists
    "ListItem",
    "ListNesting",
    "ListBlock",
    "ListRecognitionResult",
    "recognize_lists",
    "recognize_lists_with_result",
    "detect_list_style",
    # Tables
    "TableRow",
    "TableStructure",
    "TableBlock",
    "TableDetectionResult",
    "detect_tables",
    "detect_tables_with_result",
    # Code blocks
    "CodeBlock",
    "detect_code_blocks",
    "detect_code_language",
    # Reading order
    "ReadingOrderElement",
    "reading_order_value",
    "collect_page_elements",
    "order_elements",
    "reading_order_to_dataframe",
    # Cross-references
    "CrossReference",
    "extract_cross_references",
    "extract_references_from_text",
    "references_to_dataframe",
]
