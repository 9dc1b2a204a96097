"""
Token model: the immutable input unit and its page container.

Tokens are produced by an external extraction collaborator. This module
validates them, drops malformed ones with a recorded warning, and offers
intake helpers for plain records and pandas DataFrames.

Key concepts:
- Coordinates: larger y = higher on the page (inverted space)
- A token needs finite x and y to be placed; everything else has defaults
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from docstruct.constants import WARN_MALFORMED_TOKEN
from docstruct.errors import MalformedTokenError, StructureWarning


logger = logging.getLogger(__name__)


# DataFrame column name -> record key
DATAFRAME_COLUMNS = {
    "text": "text",
    "x": "x",
    "y": "y",
    "width": "width",
    "height": "height",
    "font_name": "fontName",
    "font_size": "fontSize",
    "bold": "bold",
    "italic": "italic",
    "page_number": "pageNumber",
}


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class TextToken:
    """
    A positioned fragment of text with font metadata.

    Attributes:
        text: Token text (may carry leading whitespace used for indentation).
        x: Left x-coordinate.
        y: Baseline y-coordinate; larger is higher on the page.
        width: Token width.
        height: Token height.
        font_name: Font name reported by the extractor.
        font_size: Font size in points.
        bold: Bold style flag.
        italic: Italic style flag.
        page_number: 1-based page number.
    """
    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    font_name: str = ""
    font_size: float = 0.0
    bold: bool = False
    italic: bool = False
    page_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "fontName": self.font_name,
            "fontSize": self.font_size,
            "bold": self.bold,
            "italic": self.italic,
            "pageNumber": self.page_number,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], page_number: int = 0) -> "TextToken":
        """
        Build a token from a record, validating geometry.

        Bold/italic default to font-name hints when the record omits them.

        Args:
            data: Token record with camelCase keys.
            page_number: Page number used when the record has none.

        Returns:
            Validated TextToken.

        Raises:
            MalformedTokenError: If the record is not a mapping, x or y is
                missing or not a finite number, or pageNumber is not an
                integer.

        Example:
            >>> TextToken.from_dict({"text": "Hi", "x": 72, "y": 700}).y
            700.0
        """
        if not isinstance(data, Mapping):
            raise MalformedTokenError(f"Token record must be a mapping, got {type(data).__name__}")

        x = _finite(data.get("x"))
        y = _finite(data.get("y"))
        if x is None or y is None:
            raise MalformedTokenError(
                f"Token {str(data.get('text', ''))[:40]!r} missing geometry "
                f"(x={data.get('x')!r}, y={data.get('y')!r})"
            )

        raw_page = data.get("pageNumber")
        token_page = _page_number(raw_page) if raw_page not in (None, "") else page_number
        if token_page is None:
            raise MalformedTokenError(
                f"Token {str(data.get('text', ''))[:40]!r} has invalid pageNumber {raw_page!r}"
            )

        font_name = str(data.get("fontName") or "")
        font_lower = font_name.lower()

        return cls(
            text=str(data.get("text") or ""),
            x=x,
            y=y,
            width=_finite(data.get("width")) or 0.0,
            height=_finite(data.get("height")) or 0.0,
            font_name=font_name,
            font_size=_finite(data.get("fontSize")) or 0.0,
            bold=_flag(data.get("bold"), "bold" in font_lower),
            italic=_flag(data.get("italic"), "italic" in font_lower),
            page_number=token_page,
        )


@dataclass(frozen=True)
class PageTokens:
    """
    One page of extractor output.

    Attributes:
        page_number: 1-based page number.
        tokens: Unordered tokens; TextToken instances or raw records.
        width: Viewport width (informational).
        height: Viewport height (informational).
        error: Upstream extraction failure message, if any.
    """
    page_number: int
    tokens: Tuple[Union[TextToken, Mapping[str, Any]], ...] = ()
    width: float = 0.0
    height: float = 0.0
    error: Optional[str] = None


# =============================================================================
# HELPERS
# =============================================================================

def _finite(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if missing/invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _page_number(value: Any) -> Optional[int]:
    """Return value as an int page number, or None if it is not integral."""
    number = _finite(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _flag(value: Any, default: bool) -> bool:
    """
    Read a style flag from record input (JSON, CSV or DataFrame cells).

    Example:
        >>> _flag("false", True), _flag("1", False), _flag(None, True)
        (False, True, True)
    """
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off", ""):
            return False
        return default
    return bool(value)


def coerce_page_tokens(page: PageTokens) -> Tuple[List[TextToken], List[StructureWarning]]:
    """
    Normalize a page's tokens, dropping malformed ones.

    Each malformed token yields one StructureWarning; sibling tokens are
    unaffected.

    Args:
        page: Page container with TextToken instances and/or records.

    Returns:
        Tuple of (valid tokens, warnings).
    """
    tokens: List[TextToken] = []
    warnings: List[StructureWarning] = []

    for raw in page.tokens:
        try:
            if isinstance(raw, TextToken):
                if _finite(raw.x) is None or _finite(raw.y) is None:
                    raise MalformedTokenError(f"Token {raw.text[:40]!r} has invalid geometry")
                token = raw
            else:
                token = TextToken.from_dict(raw, page_number=page.page_number)
        except MalformedTokenError as exc:
            logger.warning(f"Page {page.page_number}: dropping token: {exc}")
            warnings.append(StructureWarning(WARN_MALFORMED_TOKEN, str(exc), page.page_number))
            continue
        tokens.append(token)

    return tokens, warnings


# =============================================================================
# INTAKE
# =============================================================================

def pages_from_records(records: Iterable[Mapping[str, Any]]) -> List[PageTokens]:
    """
    Build PageTokens from plain page records.

    Each record holds ``pageNumber``, ``tokens`` (list of token records) and
    optional ``width``/``height``/``error``. Token validation is deferred to
    page processing so malformed tokens become page-scoped warnings.

    Args:
        records: Page records in document order.

    Returns:
        List of PageTokens sorted by page number.
    """
    pages = []
    for position, record in enumerate(records, start=1):
        viewport = record.get("viewport") or {}
        pages.append(
            PageTokens(
                page_number=int(record.get("pageNumber") or position),
                tokens=tuple(record.get("tokens") or record.get("textItems") or ()),
                width=float(record.get("width", viewport.get("width", 0.0)) or 0.0),
                height=float(record.get("height", viewport.get("height", 0.0)) or 0.0),
                error=record.get("error"),
            )
        )
    return sorted(pages, key=lambda p: p.page_number)


def pages_from_dataframe(
    tokens_df: pd.DataFrame,
    page_count: Optional[int] = None,
) -> List[PageTokens]:
    """
    Build PageTokens from a token DataFrame.

    Expects snake_case columns (text, x, y, width, height, font_name,
    font_size, bold, italic, page_number); only text/x/y/page_number are
    required. Pages in 1..page_count without rows are emitted empty so they
    are accounted for as failed pages downstream.

    Args:
        tokens_df: One row per token.
        page_count: Total page count, if known.

    Returns:
        List of PageTokens in page order.
    """
    missing = {"text", "x", "y", "page_number"} - set(tokens_df.columns)
    if missing:
        raise ValueError(f"Token DataFrame missing columns: {sorted(missing)}")

    df = tokens_df.rename(columns={k: v for k, v in DATAFRAME_COLUMNS.items() if k in tokens_df.columns})
    # NaN -> None so geometry validation sees missing values
    df = df.astype(object).where(pd.notna(df), None)

    by_page: Dict[int, List[Dict[str, Any]]] = {}
    for record in df.to_dict(orient="records"):
        page_number = int(record["pageNumber"])
        by_page.setdefault(page_number, []).append(
            {k: _to_builtin(v) for k, v in record.items()}
        )

    last_page = max([page_count or 0] + list(by_page))
    pages = [
        PageTokens(page_number=n, tokens=tuple(by_page.get(n, ())))
        for n in range(1, last_page + 1)
    ]
    logger.debug(f"Built {len(pages)} pages from {len(tokens_df)} token rows")
    return pages


def _to_builtin(value: Any) -> Any:
    """Convert numpy scalars to plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def page_text(tokens: Sequence[TextToken]) -> str:
    """Concatenate token texts in received order (the page's raw text)."""
    return " ".join(t.text for t in tokens)
