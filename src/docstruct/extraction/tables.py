"""
Table detection from aligned multi-column lines.

Works on Lines rather than Paragraphs so tables survive the gap-based
paragraph splitting. A line is a row candidate when its text splits on runs
of 3+ whitespace characters into at least ``table_min_segments`` segments.
Consecutive candidates form a block while they stay within
``table_row_gap`` of the previous row and within one segment of the
block's first row.

Header detection is a best-effort heuristic (header keywords, or an all
upper-case first row) and is never treated as authoritative.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docstruct.config import StructureConfig
from docstruct.constants import WARN_AMBIGUOUS, PatternProfile
from docstruct.errors import StructureWarning
from docstruct.extraction.lines import Line


logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class TableRow:
    """One table row: trimmed cell segments, the line text and its y."""
    segments: Tuple[str, ...]
    text: str
    y: float
    line_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segments": list(self.segments),
            "text": self.text,
            "y": self.y,
            "lineIndex": self.line_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableRow":
        return cls(
            segments=tuple(data["segments"]),
            text=data["text"],
            y=data["y"],
            line_index=data.get("lineIndex", 0),
        )


@dataclass(frozen=True)
class TableStructure:
    """Shape summary of a table block."""
    row_count: int
    column_count: int
    has_headers: bool
    is_empty: bool
    is_regular: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "hasHeaders": self.has_headers,
            "isEmpty": self.is_empty,
            "isRegular": self.is_regular,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableStructure":
        return cls(
            row_count=data["rowCount"],
            column_count=data["columnCount"],
            has_headers=data["hasHeaders"],
            is_empty=data["isEmpty"],
            is_regular=data["isRegular"],
        )


@dataclass(frozen=True)
class TableBlock:
    """
    A group of vertically contiguous aligned rows.

    Attributes:
        rows: Rows top to bottom.
        column_count: First row's segment count.
        headers: First row's segments when it looks like a header row, else None.
        type: data/simple/complex/generic.
        structure: Shape summary.
        page_number: Page number.
        y: First row's y.
    """
    rows: Tuple[TableRow, ...]
    column_count: int
    headers: Optional[Tuple[str, ...]]
    type: str
    structure: TableStructure
    page_number: int = 0
    y: float = 0.0

    @property
    def line_indices(self) -> Tuple[int, ...]:
        return tuple(row.line_index for row in self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "columnCount": self.column_count,
            "headers": list(self.headers) if self.headers is not None else None,
            "type": self.type,
            "structure": self.structure.to_dict(),
            "pageNumber": self.page_number,
            "y": self.y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableBlock":
        headers = data.get("headers")
        return cls(
            rows=tuple(TableRow.from_dict(r) for r in data.get("rows", [])),
            column_count=data["columnCount"],
            headers=tuple(headers) if headers is not None else None,
            type=data["type"],
            structure=TableStructure.from_dict(data["structure"]),
            page_number=data.get("pageNumber", 0),
            y=data.get("y", 0.0),
        )


@dataclass
class TableDetectionResult:
    """Result of table detection for one page."""
    tables: List[TableBlock]
    candidate_rows: int = 0
    warnings: List[StructureWarning] = field(default_factory=list)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def split_row(text: str, patterns: PatternProfile) -> List[str]:
    """
    Split line text on runs of 3+ whitespace characters.

    Example:
        >>> split_row("Name   Age   City", DEFAULT_PATTERNS)
        ['Name', 'Age', 'City']
    """
    return [segment.strip() for segment in patterns.table_split.split(text.strip())]


def detect_headers(
    segments: Sequence[str],
    patterns: PatternProfile,
) -> Tuple[Optional[Tuple[str, ...]], Optional[str]]:
    """
    Decide whether a first row is a header row.

    Args:
        segments: First row's segments.
        patterns: Rule tables.

    Returns:
        Tuple of (headers or None, rule that fired or None).
    """
    if not segments:
        return None, None
    if any(patterns.table_header_words.search(s) for s in segments):
        return tuple(segments), "keyword"
    if all(s.isupper() and len(s) > 1 for s in segments):
        return tuple(segments), "uppercase"
    return None, None


def detect_table_type(rows: Sequence[TableRow], column_count: int, patterns: PatternProfile) -> str:
    """Classify a table as data, simple, complex or generic."""
    first_text = rows[0].text if rows else ""
    if patterns.table_type_words.search(first_text):
        return "data"
    if len(rows) <= 3 and column_count <= 3:
        return "simple"
    if column_count > 5:
        return "complex"
    return "generic"


def _build_table(
    rows: List[TableRow],
    page_number: int,
    patterns: PatternProfile,
    warnings: List[StructureWarning],
) -> TableBlock:
    column_count = len(rows[0].segments)
    headers, header_rule = detect_headers(rows[0].segments, patterns)
    if header_rule == "uppercase":
        warnings.append(
            StructureWarning(
                WARN_AMBIGUOUS,
                f"Table header inferred from upper-case first row {rows[0].text[:40]!r}",
                page_number,
            )
        )

    structure = TableStructure(
        row_count=len(rows),
        column_count=column_count,
        has_headers=headers is not None,
        is_empty=all(not row.text.strip() for row in rows),
        is_regular=all(len(row.segments) == column_count for row in rows),
    )
    return TableBlock(
        rows=tuple(rows),
        column_count=column_count,
        headers=headers,
        type=detect_table_type(rows, column_count, patterns),
        structure=structure,
        page_number=page_number,
        y=rows[0].y,
    )


# =============================================================================
# DETECTION
# =============================================================================

def detect_tables_with_result(
    lines: Sequence[Line],
    config: Optional[StructureConfig] = None,
    page_number: int = 0,
) -> TableDetectionResult:
    """
    Detect table blocks among a page's lines.

    Args:
        lines: Lines in top-to-bottom order.
        config: Thresholds and rule tables.
        page_number: Page number stamped on each block.

    Returns:
        TableDetectionResult with blocks and header warnings.
    """
    config = config or StructureConfig()
    patterns = config.patterns

    candidates: List[TableRow] = []
    for line in lines:
        segments = split_row(line.text, patterns)
        if len(segments) >= config.table_min_segments:
            candidates.append(
                TableRow(segments=tuple(segments), text=line.text, y=line.y, line_index=line.index)
            )

    tables: List[TableBlock] = []
    warnings: List[StructureWarning] = []
    current: List[TableRow] = []

    def close():
        if len(current) >= config.min_table_rows:
            tables.append(_build_table(current, page_number, patterns, warnings))

    for row in candidates:
        if current:
            gap = abs(row.y - current[-1].y)
            width_delta = abs(len(row.segments) - len(current[0].segments))
            if gap < config.table_row_gap and width_delta <= 1:
                current.append(row)
                continue
            close()
        current = [row]

    if current:
        close()

    logger.debug(f"Page {page_number}: {len(tables)} tables from {len(candidates)} candidate rows")
    return TableDetectionResult(tables=tables, candidate_rows=len(candidates), warnings=warnings)


def detect_tables(
    lines: Sequence[Line],
    config: Optional[StructureConfig] = None,
    page_number: int = 0,
) -> List[TableBlock]:
    """
    Detect table blocks among a page's lines.

    Example:
        >>> table = detect_tables(lines, page_number=1)[0]
        >>> table.column_count, len(table.rows)
        (3, 3)
    """
    return detect_tables_with_result(lines, config, page_number).tables
