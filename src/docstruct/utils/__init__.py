"""
Utility modules for docstruct.

Submodules:
    text: Text processing utilities (anchors, whitespace, context windows)
    serialize: Output record serialization and numpy normalization
"""

from docstruct.utils.text import collapse_whitespace, extract_context, generate_anchor, word_count

__all__ = [
    # Text utilities
    "collapse_whitespace",
    "extract_context",
    "generate_anchor",
    "word_count",
]
