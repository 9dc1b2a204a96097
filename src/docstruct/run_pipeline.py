#!/usr/bin/env python3
"""
Run the docstruct pipeline on a JSON file of page token records.

INPUT is a JSON list of page records, each with ``pageNumber``, ``tokens``
(token records with text/x/y/fontName/fontSize/...) and optional
``width``/``height``/``error``.

Usage:
    docstruct INPUT.json [--output OUT.json] [--workers N] [--progress]
                         [--reading-order-csv PATH] [--verbose]
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Dict

from docstruct.analysis import summarize_references
from docstruct.config import StructureConfig
from docstruct.document import DocumentStructure
from docstruct.extraction.reading_order import reading_order_to_dataframe
from docstruct.extraction.tokens import pages_from_records
from docstruct.pipeline import structure_document
from docstruct.utils.serialize import document_to_json


logger = logging.getLogger(__name__)


def load_page_records(path: Path):
    with open(path, encoding="utf-8") as f:
        records = json.load(f)
    if isinstance(records, dict):
        records = records.get("pages", [])
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a JSON list of page records")
    return records


def summarize(structure: DocumentStructure) -> Dict:
    stats = structure.statistics
    results = {
        "status": structure.status,
        "pages": f"{stats.pages_processed}/{stats.page_count}",
        "errored_pages": stats.errored_pages,
        "lines": stats.line_count,
        "paragraphs": stats.paragraph_count,
        "headings": stats.heading_count,
        "lists": stats.list_count,
        "tables": stats.table_count,
        "code_blocks": stats.code_block_count,
        "cross_references": stats.cross_reference_count,
        "reading_order": len(structure.reading_order),
        "warnings": stats.warning_count,
    }
    if structure.metadata:
        results["document_type"] = structure.metadata.document_type
        results["title"] = structure.metadata.title
    return results


# =============================================================================
# CLI
# =============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Reconstruct document structure from positioned text tokens"
    )
    parser.add_argument(
        "input",
        help="Path to JSON page records",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write the structure JSON here (default: INPUT stem + .structure.json)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for per-page processing",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar",
    )
    parser.add_argument(
        "--reading-order-csv",
        default=None,
        help="Also export the reading order as CSV",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.progress:
        overrides["show_progress"] = True
    config = StructureConfig.from_env(**overrides)

    input_path = Path(args.input)
    pages = pages_from_records(load_page_records(input_path))
    structure = structure_document(pages, config)

    output_path = Path(args.output) if args.output else input_path.with_suffix(".structure.json")
    output_path.write_text(document_to_json(structure), encoding="utf-8")
    logger.info(f"Wrote {output_path}")

    if args.reading_order_csv:
        reading_order_to_dataframe(structure.reading_order).to_csv(args.reading_order_csv, index=False)
        logger.info(f"Wrote {args.reading_order_csv}")

    print("\n--- Structure Summary ---")
    for key, value in summarize(structure).items():
        print(f"  {key}: {value}")

    ref_summary = summarize_references(structure.cross_references)
    if ref_summary["by_type"]:
        print(f"  reference_types: {ref_summary['by_type']}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
