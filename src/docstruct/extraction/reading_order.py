"""
Reading-order composition.

Every structural element on a page (heading, paragraph, list, table, code
block) is wrapped into a ReadingOrderElement carrying a numeric order
value:

    order = page_number * stride + (stride - y)

With the default stride of 10000 and page coordinates in [0, stride] this
places every element of page N before every element of page N+1, top to
bottom within a page. Coordinates outside that range are NOT clamped: the
formula is applied unchanged and a reading_order_range warning is recorded,
since such an element may sort onto a neighbouring page.

Every paragraph is wrapped, including those that also back a heading, a
list, a table or a code block. With ``dedupe_reading_order`` set, paragraphs
already represented by one of those records are left out instead.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import pandas as pd

from docstruct.config import StructureConfig
from docstruct.constants import (
    ELEMENT_CODE,
    ELEMENT_HEADING,
    ELEMENT_LIST,
    ELEMENT_PARAGRAPH,
    ELEMENT_TABLE,
    ELEMENT_TYPE_RANK,
    WARN_READING_ORDER_RANGE,
)
from docstruct.errors import StructureWarning
from docstruct.extraction.code_blocks import CodeBlock
from docstruct.extraction.headings import Heading
from docstruct.extraction.lists import ListBlock
from docstruct.extraction.paragraphs import Paragraph
from docstruct.extraction.tables import TableBlock


logger = logging.getLogger(__name__)

ElementContent = Union[Heading, Paragraph, ListBlock, TableBlock, CodeBlock]

CONTENT_TYPES = {
    ELEMENT_HEADING: Heading,
    ELEMENT_PARAGRAPH: Paragraph,
    ELEMENT_LIST: ListBlock,
    ELEMENT_TABLE: TableBlock,
    ELEMENT_CODE: CodeBlock,
}


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ReadingOrderElement:
    """
    One element of the linear reading order.

    Attributes:
        type: heading/paragraph/list/table/code.
        content: The wrapped record.
        page_number: Page number.
        y: Element's top y.
        order: Numeric order value.
    """
    type: str
    content: ElementContent
    page_number: int
    y: float
    order: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "content": self.content.to_dict(),
            "pageNumber": self.page_number,
            "y": self.y,
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReadingOrderElement":
        element_type = data["type"]
        content_cls = CONTENT_TYPES.get(element_type)
        if content_cls is None:
            raise ValueError(f"Unknown reading-order element type: {element_type!r}")
        return cls(
            type=element_type,
            content=content_cls.from_dict(data["content"]),
            page_number=data["pageNumber"],
            y=data["y"],
            order=data["order"],
        )


# =============================================================================
# ORDER VALUES
# =============================================================================

def reading_order_value(page_number: int, y: float, stride: int = 10000) -> float:
    """
    Compute the numeric reading-order value of an element.

    Example:
        >>> reading_order_value(1, 700)
        19300
        >>> reading_order_value(2, 10000)
        20000
    """
    return page_number * stride + (stride - y)


def in_order_range(y: float, stride: int = 10000) -> bool:
    """Whether y lies in the range where the order formula keeps pages apart."""
    return 0 <= y <= stride


def element_text(element: ReadingOrderElement) -> str:
    """Plain text of an element's content (list items and table rows newline-joined)."""
    content = element.content
    if isinstance(content, ListBlock):
        return "\n".join(item.text for item in content.items)
    if isinstance(content, TableBlock):
        return "\n".join(row.text for row in content.rows)
    return content.text


# =============================================================================
# COMPOSITION
# =============================================================================

def claimed_paragraph_indices(
    paragraphs: Sequence[Paragraph],
    headings: Sequence[Heading],
    lists: Sequence[ListBlock],
    tables: Sequence[TableBlock],
    code_blocks: Sequence[CodeBlock],
) -> Set[int]:
    """
    Indices of paragraphs represented by another element on the same page.

    Args:
        paragraphs: The page's paragraphs.
        headings: Headings found on the page.
        lists: Lists found on the page.
        tables: Tables found on the page.
        code_blocks: Code blocks found on the page.

    Returns:
        Set of paragraph indices.
    """
    claimed: Set[int] = {h.paragraph_index for h in headings}
    claimed.update(c.paragraph_index for c in code_blocks)

    # A paragraph opening on an item line holds only items and their continuations
    item_lines: Set[int] = {item.line_index for block in lists for item in block.items}
    claimed.update(p.index for p in paragraphs if p.line_indices and p.line_indices[0] in item_lines)

    table_lines: Set[int] = {i for table in tables for i in table.line_indices}
    if table_lines:
        claimed.update(
            p.index for p in paragraphs
            if p.line_indices and set(p.line_indices) <= table_lines
        )
    return claimed


def collect_page_elements(
    page_number: int,
    paragraphs: Sequence[Paragraph],
    headings: Sequence[Heading],
    lists: Sequence[ListBlock],
    tables: Sequence[TableBlock],
    code_blocks: Sequence[CodeBlock],
    config: Optional[StructureConfig] = None,
) -> Tuple[List[ReadingOrderElement], List[StructureWarning]]:
    """
    Wrap one page's records into reading-order elements.

    Args:
        page_number: Page number.
        paragraphs: The page's paragraphs.
        headings: Headings found on the page.
        lists: Lists found on the page.
        tables: Tables found on the page.
        code_blocks: Code blocks found on the page.
        config: Supplies the page stride and the dedupe switch.

    Returns:
        Tuple of (elements in collection order, range warnings).
    """
    config = config or StructureConfig()
    stride = config.reading_order_page_stride
    claimed: Set[int] = set()
    if config.dedupe_reading_order:
        claimed = claimed_paragraph_indices(paragraphs, headings, lists, tables, code_blocks)

    wrapped: List[Tuple[str, ElementContent]] = []
    wrapped.extend((ELEMENT_HEADING, h) for h in headings)
    wrapped.extend((ELEMENT_PARAGRAPH, p) for p in paragraphs if p.index not in claimed)
    wrapped.extend((ELEMENT_LIST, block) for block in lists)
    wrapped.extend((ELEMENT_TABLE, table) for table in tables)
    wrapped.extend((ELEMENT_CODE, code) for code in code_blocks)

    elements: List[ReadingOrderElement] = []
    warnings: List[StructureWarning] = []
    for element_type, content in wrapped:
        y = content.y
        if not in_order_range(y, stride):
            logger.warning(f"Page {page_number}: {element_type} at y={y} is outside [0, {stride}]")
            warnings.append(
                StructureWarning(
                    WARN_READING_ORDER_RANGE,
                    f"{element_type} at y={y} is outside [0, {stride}]; order may cross pages",
                    page_number,
                )
            )
        elements.append(
            ReadingOrderElement(
                type=element_type,
                content=content,
                page_number=page_number,
                y=y,
                order=reading_order_value(page_number, y, stride),
            )
        )
    return elements, warnings


def order_elements(elements: Iterable[ReadingOrderElement]) -> List[ReadingOrderElement]:
    """
    Sort elements into the final reading order.

    Sort key is (page_number, order, type rank, collection sequence), so
    pages never interleave even when a y value is out of range. For y in
    [0, stride] the result is in ascending ``order``. An element with y
    outside that range stays on its own page, so the sequence is then NOT
    ascending by ``order``; such elements carry a reading_order_range
    warning.
    """
    indexed = list(enumerate(elements))
    indexed.sort(
        key=lambda pair: (
            pair[1].page_number,
            pair[1].order,
            ELEMENT_TYPE_RANK.get(pair[1].type, len(ELEMENT_TYPE_RANK)),
            pair[0],
        )
    )
    return [element for _, element in indexed]


# =============================================================================
# EXPORT
# =============================================================================

def reading_order_to_dataframe(elements: Sequence[ReadingOrderElement]) -> pd.DataFrame:
    """
    Export the reading order as a DataFrame.

    Args:
        elements: Ordered reading-order elements.

    Returns:
        DataFrame with columns position, type, page_number, y, order, text.

    Example:
        >>> df = reading_order_to_dataframe(structure.reading_order)
        >>> df[["type", "page_number"]].head(2).values.tolist()
        [['heading', 1], ['paragraph', 1]]
    """
    columns = ["position", "type", "page_number", "y", "order", "text"]
    rows = [
        {
            "position": position,
            "type": element.type,
            "page_number": element.page_number,
            "y": element.y,
            "order": element.order,
            "text": element_text(element),
        }
        for position, element in enumerate(elements)
    ]
    return pd.DataFrame(rows, columns=columns)
