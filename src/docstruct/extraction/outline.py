"""
Outline construction from the document's headings.

The outline is a forest of OutlineNodes. Construction works over a flat
array of nodes referenced by index: a level-aware stack of indices decides
each heading's parent, then the index array is materialized into immutable
nodes. No node ever holds a reference to its parent.

Invariant: every child has a level strictly greater than its parent, and a
node's subtree covers every heading up to the next heading at the same or a
shallower level.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from docstruct.extraction.headings import Heading


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutlineNode:
    """A heading and its nested sub-headings."""
    heading: Heading
    children: Tuple["OutlineNode", ...] = ()

    @property
    def level(self) -> int:
        return self.heading.level

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heading": self.heading.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutlineNode":
        return cls(
            heading=Heading.from_dict(data["heading"]),
            children=tuple(cls.from_dict(c) for c in data.get("children", [])),
        )


def document_order_key(heading: Heading) -> Tuple[int, float, int]:
    """Page, then top-to-bottom, then paragraph position."""
    return (heading.page_number, -heading.y, heading.paragraph_index)


def sort_headings(headings: Sequence[Heading]) -> List[Heading]:
    return sorted(headings, key=document_order_key)


def build_outline_index(headings: Sequence[Heading]) -> Tuple[List[int], List[List[int]]]:
    """
    Compute the outline as index lists.

    Args:
        headings: Headings in document order.

    Returns:
        Tuple of (root indices, children indices per heading).

    Example:
        >>> roots, children = build_outline_index([h1, h2, h2b, h1b])  # levels 1,2,2,1
        >>> roots, children
        ([0, 3], [[1, 2], [], [], []])
    """
    roots: List[int] = []
    children: List[List[int]] = [[] for _ in headings]
    stack: List[int] = []

    for idx, heading in enumerate(headings):
        while stack and headings[stack[-1]].level >= heading.level:
            stack.pop()
        if stack:
            children[stack[-1]].append(idx)
        else:
            roots.append(idx)
        stack.append(idx)

    return roots, children


def build_outline(headings: Sequence[Heading]) -> List[OutlineNode]:
    """
    Build the outline forest from headings.

    Headings are put in document order first (page, then descending y).

    Args:
        headings: All headings of the document, any order.

    Returns:
        Root OutlineNodes with children nested.
    """
    ordered = sort_headings(headings)
    roots, children = build_outline_index(ordered)

    # Materialize bottom-up: a child's index is always greater than its parent's
    nodes: List[OutlineNode] = [None] * len(ordered)  # type: ignore[list-item]
    for idx in range(len(ordered) - 1, -1, -1):
        nodes[idx] = OutlineNode(
            heading=ordered[idx],
            children=tuple(nodes[c] for c in children[idx]),
        )

    logger.debug(f"Outline: {len(roots)} roots over {len(ordered)} headings")
    return [nodes[r] for r in roots]


def flatten_outline(outline: Sequence[OutlineNode]) -> List[Heading]:
    """Pre-order headings of an outline forest (equals document order)."""
    flat: List[Heading] = []
    pending = list(reversed(outline))
    while pending:
        node = pending.pop()
        flat.append(node.heading)
        pending.extend(reversed(node.children))
    return flat
