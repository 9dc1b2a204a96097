"""
Structure-reconstruction configuration for docstruct.

This module defines the StructureConfig dataclass that captures every
threshold used by the per-page detectors and the document-level reducers,
replacing hardcoded values scattered across the extraction modules.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from docstruct.constants import DEFAULT_PATTERNS, PatternProfile


logger = logging.getLogger(__name__)


@dataclass
class StructureConfig:
    """
    Configuration for the structure reconstruction pipeline.

    Attributes:
        line_tolerance: Max vertical distance (layout units) between a token
            and its line's y for the token to join that line.
        paragraph_gap: Vertical gap between consecutive lines that starts a
            new paragraph.
        font_size_jump: Font-size difference (pt) from the paragraph's first
            line that starts a new paragraph.

        heading_max_length: Paragraphs at least this long are never headings.
        heading_size_ratio: Font size ratio over the page mean that marks a
            heading candidate.
        level_ratios: Descending ratio ladder for heading levels 1-4; anything
            below the last rung is level 5.

        list_indent_width: Spaces per list nesting level.

        table_min_segments: Minimum whitespace-delimited segments per row.
        table_row_gap: Max vertical gap between consecutive table rows.
        min_table_rows: Minimum rows for a table block to be reported.

        reference_context_chars: Characters of context on each side of a
            cross-reference match start.
        reading_order_page_stride: Page multiplier in the reading-order formula;
            also the upper bound of the expected y range.
        dedupe_reading_order: Leave out paragraph elements already represented
            by a heading, list item, table or code block.

        max_workers: Worker pool size for per-page processing (1 = inline).
        show_progress: Show a tqdm progress bar over pages.

        patterns: Rule tables consumed by the detectors.
    """

    # Line assembly
    line_tolerance: float = 5.0

    # Paragraph segmentation
    paragraph_gap: float = 20.0
    font_size_jump: float = 2.0

    # Heading classification
    heading_max_length: int = 100
    heading_size_ratio: float = 1.2
    level_ratios: Tuple[float, ...] = (1.8, 1.5, 1.3, 1.1)

    # List recognition
    list_indent_width: int = 4

    # Table detection
    table_min_segments: int = 3
    table_row_gap: float = 30.0
    min_table_rows: int = 2

    # Cross-references
    reference_context_chars: int = 50

    # Reading order
    reading_order_page_stride: int = 10000
    dedupe_reading_order: bool = False

    # Execution
    max_workers: int = 4
    show_progress: bool = False

    patterns: PatternProfile = field(default=DEFAULT_PATTERNS, repr=False)

    def __post_init__(self):
        """Normalize sequence fields and validate worker count."""
        if not isinstance(self.level_ratios, tuple):
            self.level_ratios = tuple(float(r) for r in self.level_ratios)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @classmethod
    def from_env(
        cls,
        prefix: str = "DOCSTRUCT_",
        dotenv_path: Optional[str] = None,
        **overrides,
    ) -> "StructureConfig":
        """
        Create configuration from environment variables.

        Loads a .env file first (python-dotenv), then reads
        ``<prefix><FIELD_NAME>`` for each scalar field, e.g.
        ``DOCSTRUCT_MAX_WORKERS=8``. Explicit keyword overrides win over the
        environment.

        Args:
            prefix: Environment variable prefix.
            dotenv_path: Optional path to a .env file.
            **overrides: Field values that take precedence.

        Returns:
            StructureConfig with environment settings applied.
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)

        values: Dict[str, object] = {}
        for f in fields(cls):
            if f.name in ("patterns", "level_ratios"):
                continue
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _coerce_env_value(f.name, raw, f.default)

        ratios = os.environ.get(f"{prefix}LEVEL_RATIOS")
        if ratios:
            values["level_ratios"] = tuple(float(r) for r in ratios.split(",") if r.strip())

        values.update(overrides)
        if values:
            logger.debug(f"Config overrides: {sorted(values)}")
        return cls(**values)


def _coerce_env_value(name: str, raw: str, default: object) -> object:
    """Convert an environment string to the type of the field default."""
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
    return raw
