"""
Document structure pipeline.

Per-page work (token intake, lines, paragraphs, headings, lists, tables,
code blocks, page reading-order elements) is a pure function of
(page, config) and runs on a bounded thread pool. Results are collected in
page order and reduced sequentially into one DocumentStructure (outline,
sections, reading order, cross-references, metadata, statistics).

Process Overview:
1. process_page: PageTokens -> PageResult (parallel map)
2. compose_document: List[PageResult] -> DocumentStructure (sequential reduce)

Failure handling:
- Malformed tokens are dropped with a malformed_token warning.
- Pages with an upstream error or no usable tokens contribute an empty
  slice and a page_extraction_failure warning.
- A set cancellation signal stops dispatch of further pages; the reduce
  runs over the pages already finished and the result is marked cancelled.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tqdm import tqdm

from docstruct.analysis import analyze_metadata
from docstruct.config import StructureConfig
from docstruct.constants import STATUS_CANCELLED, STATUS_COMPLETE, WARN_PAGE_FAILURE
from docstruct.document import DocumentStatistics, DocumentStructure
from docstruct.errors import CancellationSignal, PageExtractionFailure, StructureWarning
from docstruct.extraction.code_blocks import CodeBlock, detect_code_blocks
from docstruct.extraction.headings import Heading, classify_headings_with_result
from docstruct.extraction.lines import Line, assemble_lines
from docstruct.extraction.lists import ListBlock, recognize_lists_with_result
from docstruct.extraction.outline import build_outline, sort_headings
from docstruct.extraction.paragraphs import Paragraph, segment_paragraphs
from docstruct.extraction.reading_order import (
    ReadingOrderElement,
    collect_page_elements,
    order_elements,
)
from docstruct.extraction.references import extract_cross_references
from docstruct.extraction.sections import build_sections
from docstruct.extraction.tables import TableBlock, detect_tables_with_result
from docstruct.extraction.tokens import PageTokens, coerce_page_tokens, page_text, pages_from_records


logger = logging.getLogger(__name__)


# =============================================================================
# PAGE RESULT
# =============================================================================

@dataclass
class PageResult:
    """Everything reconstructed from one page."""
    page_number: int
    text: str = ""
    token_count: int = 0
    lines: List[Line] = field(default_factory=list)
    paragraphs: List[Paragraph] = field(default_factory=list)
    headings: List[Heading] = field(default_factory=list)
    lists: List[ListBlock] = field(default_factory=list)
    tables: List[TableBlock] = field(default_factory=list)
    code_blocks: List[CodeBlock] = field(default_factory=list)
    elements: List[ReadingOrderElement] = field(default_factory=list)
    warnings: List[StructureWarning] = field(default_factory=list)
    errored: bool = False


def _require_usable(page: PageTokens, token_count: int) -> None:
    if page.error:
        raise PageExtractionFailure(page.page_number, str(page.error))
    if token_count == 0:
        raise PageExtractionFailure(page.page_number, "no usable tokens")


def process_page(page: PageTokens, config: Optional[StructureConfig] = None) -> PageResult:
    """
    Reconstruct the structure of a single page.

    Args:
        page: One page of tokens.
        config: Thresholds and rule tables.

    Returns:
        PageResult. Failed pages come back with ``errored=True``, no
        structure and a page_extraction_failure warning.
    """
    config = config or StructureConfig()
    tokens, warnings = coerce_page_tokens(page)

    try:
        _require_usable(page, len(tokens))
    except PageExtractionFailure as exc:
        logger.warning(f"Page {page.page_number} skipped: {exc.reason}")
        warnings.append(StructureWarning(WARN_PAGE_FAILURE, exc.reason, page.page_number))
        return PageResult(
            page_number=page.page_number,
            token_count=len(tokens),
            warnings=warnings,
            errored=True,
        )

    page_number = page.page_number
    lines = assemble_lines(tokens, config)
    paragraphs = segment_paragraphs(lines, config, page_number=page_number)

    heading_result = classify_headings_with_result(paragraphs, config)
    heading_indices = {h.paragraph_index for h in heading_result.headings}

    list_result = recognize_lists_with_result(paragraphs, config)
    list_indices = {item.paragraph_index for block in list_result.lists for item in block.items}

    table_result = detect_tables_with_result(lines, config, page_number=page_number)
    code_blocks = detect_code_blocks(paragraphs, config, skip_indices=heading_indices | list_indices)

    elements, order_warnings = collect_page_elements(
        page_number,
        paragraphs,
        heading_result.headings,
        list_result.lists,
        table_result.tables,
        code_blocks,
        config,
    )

    warnings.extend(heading_result.warnings)
    warnings.extend(list_result.warnings)
    warnings.extend(table_result.warnings)
    warnings.extend(order_warnings)

    logger.debug(
        f"Page {page_number}: {len(tokens)} tokens, {len(lines)} lines, "
        f"{len(paragraphs)} paragraphs, {len(heading_result.headings)} headings"
    )
    return PageResult(
        page_number=page_number,
        text=page_text(tokens),
        token_count=len(tokens),
        lines=lines,
        paragraphs=paragraphs,
        headings=heading_result.headings,
        lists=list_result.lists,
        tables=table_result.tables,
        code_blocks=code_blocks,
        elements=elements,
        warnings=warnings,
    )


# =============================================================================
# PARALLEL MAP
# =============================================================================

def _check_cancelled(cancel_event: Any) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancellationSignal("Cancellation requested")


def _process_unless_cancelled(
    page: PageTokens,
    config: StructureConfig,
    cancel_event: Any,
) -> PageResult:
    _check_cancelled(cancel_event)
    return process_page(page, config)


def _run_inline(
    pages: Sequence[PageTokens],
    config: StructureConfig,
    cancel_event: Any,
    results: Dict[int, PageResult],
    progress: tqdm,
) -> None:
    for position, page in enumerate(pages):
        _check_cancelled(cancel_event)
        results[position] = process_page(page, config)
        progress.update(1)


def _run_parallel(
    pages: Sequence[PageTokens],
    config: StructureConfig,
    cancel_event: Any,
    results: Dict[int, PageResult],
    progress: tqdm,
) -> None:
    cancelled = False
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        futures = {
            executor.submit(_process_unless_cancelled, page, config, cancel_event): position
            for position, page in enumerate(pages)
        }
        for future in as_completed(futures):
            try:
                results[futures[future]] = future.result()
            except CancellationSignal:
                cancelled = True
                continue
            progress.update(1)
    if cancelled:
        raise CancellationSignal("Cancellation requested")


def _as_pages(pages: Iterable[Union[PageTokens, Mapping[str, Any]]]) -> List[PageTokens]:
    pages = list(pages)
    if pages and not all(isinstance(p, PageTokens) for p in pages):
        records = [p for p in pages if not isinstance(p, PageTokens)]
        ready = [p for p in pages if isinstance(p, PageTokens)]
        pages = ready + pages_from_records(records)
    return sorted(pages, key=lambda p: p.page_number)


def structure_document(
    pages: Iterable[Union[PageTokens, Mapping[str, Any]]],
    config: Optional[StructureConfig] = None,
    cancel_event: Any = None,
) -> DocumentStructure:
    """
    Reconstruct a document's structure from its page token streams.

    Args:
        pages: PageTokens (or plain page records) in any order.
        config: Thresholds, rule tables and worker bound.
        cancel_event: Optional object with ``is_set()`` (e.g.
            threading.Event), checked before each page is processed.

    Returns:
        DocumentStructure with status "complete", or "cancelled" when the
        signal was set before every page finished.

    Example:
        >>> structure = structure_document(pages_from_records(records))
        >>> structure.status, len(structure.headings)
        ('complete', 3)
    """
    config = config or StructureConfig()
    pages = _as_pages(pages)
    results: Dict[int, PageResult] = {}
    cancelled = False

    logger.info(f"Structuring {len(pages)} pages with {config.max_workers} workers")
    runner = _run_inline if config.max_workers == 1 else _run_parallel
    with tqdm(total=len(pages), desc="Pages", unit="page", disable=not config.show_progress) as progress:
        try:
            runner(pages, config, cancel_event, results, progress)
        except CancellationSignal:
            cancelled = True
            logger.warning(f"Cancelled after {len(results)} of {len(pages)} pages")

    ordered = [results[position] for position in sorted(results)]
    return compose_document(ordered, config, total_pages=len(pages), cancelled=cancelled)


# =============================================================================
# SEQUENTIAL REDUCE
# =============================================================================

def compose_document(
    results: Sequence[PageResult],
    config: Optional[StructureConfig] = None,
    total_pages: Optional[int] = None,
    cancelled: bool = False,
) -> DocumentStructure:
    """
    Reduce page results (in page order) into a DocumentStructure.

    Args:
        results: Page results sorted by page number.
        config: Thresholds and rule tables.
        total_pages: Page count of the input; defaults to len(results).
        cancelled: Whether the run was cancelled.

    Returns:
        DocumentStructure.
    """
    config = config or StructureConfig()
    total_pages = len(results) if total_pages is None else total_pages

    headings = sort_headings([h for r in results for h in r.headings])
    paragraphs = [p for r in results for p in r.paragraphs]
    processed = [r for r in results if not r.errored]

    outline = build_outline(headings)
    sections = build_sections(headings, paragraphs)
    reading_order = order_elements(e for r in results for e in r.elements)
    cross_references = extract_cross_references(
        ((r.page_number, r.text) for r in processed), config
    )
    metadata = analyze_metadata([r.text for r in processed], total_pages, headings, config)

    warnings = [w for r in results for w in r.warnings]
    lists = [block for r in results for block in r.lists]
    tables = [t for r in results for t in r.tables]
    code_blocks = [c for r in results for c in r.code_blocks]

    statistics = DocumentStatistics(
        page_count=total_pages,
        pages_processed=len(processed),
        errored_pages=len(results) - len(processed),
        warning_count=len(warnings),
        warnings_by_kind=dict(Counter(w.kind for w in warnings)),
        token_count=sum(r.token_count for r in results),
        line_count=sum(len(r.lines) for r in results),
        paragraph_count=len(paragraphs),
        heading_count=len(headings),
        list_count=len(lists),
        table_count=len(tables),
        code_block_count=len(code_blocks),
        cross_reference_count=len(cross_references),
    )

    structure = DocumentStructure(
        outline=tuple(outline),
        sections=tuple(sections),
        headings=tuple(headings),
        lists=tuple(lists),
        tables=tuple(tables),
        code_blocks=tuple(code_blocks),
        cross_references=tuple(cross_references),
        reading_order=tuple(reading_order),
        metadata=metadata,
        statistics=statistics,
        warnings=tuple(warnings),
        status=STATUS_CANCELLED if cancelled else STATUS_COMPLETE,
    )
    logger.info(
        f"Structured {statistics.pages_processed}/{total_pages} pages: "
        f"{statistics.heading_count} headings, {statistics.list_count} lists, "
        f"{statistics.table_count} tables, {statistics.warning_count} warnings"
    )
    return structure
