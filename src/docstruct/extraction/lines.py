"""
Line assembly from positioned tokens.

Clusters a page's tokens into Lines by vertical proximity, then orders each
line's tokens left to right. Pure function of the token list.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from docstruct.config import StructureConfig
from docstruct.extraction.tokens import TextToken


logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class Line:
    """
    Tokens sharing one y cluster.

    Attributes:
        tokens: Member tokens ordered by x.
        y: Cluster y (the first token's y in top-down order).
        index: Position of the line within its page.
    """
    tokens: Tuple[TextToken, ...]
    y: float
    index: int = 0

    @property
    def raw_text(self) -> str:
        """Space-joined token text with leading whitespace preserved."""
        return " ".join(t.text for t in self.tokens)

    @property
    def text(self) -> str:
        return self.raw_text.strip()

    @property
    def font_size(self) -> float:
        return max((t.font_size for t in self.tokens), default=0.0)

    @property
    def bold(self) -> bool:
        return any(t.bold for t in self.tokens)

    @property
    def italic(self) -> bool:
        return any(t.italic for t in self.tokens)

    @property
    def x(self) -> float:
        return min((t.x for t in self.tokens), default=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "y": self.y,
            "index": self.index,
            "fontSize": self.font_size,
            "bold": self.bold,
            "italic": self.italic,
            "tokens": [t.to_dict() for t in self.tokens],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Line":
        return cls(
            tokens=tuple(TextToken.from_dict(t) for t in data.get("tokens", [])),
            y=data["y"],
            index=data.get("index", 0),
        )


# =============================================================================
# CORE FUNCTIONS
# =============================================================================

def reading_sort_key(token: TextToken) -> Tuple[float, float]:
    """Top-to-bottom, left-to-right sort key (descending y, ascending x)."""
    return (-token.y, token.x)


def assemble_lines(
    tokens: Sequence[TextToken],
    config: Optional[StructureConfig] = None,
) -> List[Line]:
    """
    Cluster tokens into lines.

    Tokens are sorted top-to-bottom, left-to-right and walked with a
    current-line accumulator. A token joins the current line when its y is
    within ``config.line_tolerance`` of the line's y; otherwise the line is
    flushed and a new one starts.

    Args:
        tokens: One page's tokens, in any order.
        config: Thresholds; defaults to StructureConfig().

    Returns:
        Lines in top-to-bottom order. An empty token list yields [].

    Example:
        >>> lines = assemble_lines([
        ...     TextToken("world", x=120, y=699),
        ...     TextToken("Hello", x=72, y=700),
        ...     TextToken("Next", x=72, y=680),
        ... ])
        >>> [line.text for line in lines]
        ['Hello world', 'Next']
    """
    config = config or StructureConfig()
    if not tokens:
        return []

    tolerance = config.line_tolerance
    lines: List[Line] = []
    current: List[TextToken] = []
    current_y: Optional[float] = None

    for token in sorted(tokens, key=reading_sort_key):
        if current_y is None or abs(token.y - current_y) < tolerance:
            if current_y is None:
                current_y = token.y
            current.append(token)
            continue

        lines.append(_flush(current, current_y, len(lines)))
        current = [token]
        current_y = token.y

    if current:
        lines.append(_flush(current, current_y, len(lines)))

    logger.debug(f"Assembled {len(lines)} lines from {len(tokens)} tokens")
    return lines


def _flush(members: List[TextToken], y: float, index: int) -> Line:
    ordered = sorted(members, key=lambda t: t.x)
    return Line(tokens=tuple(ordered), y=y, index=index)
