"""
Text processing utilities for docstruct.

This module provides text manipulation functions used throughout the pipeline:
- Anchor slugs for headings
- Whitespace normalization and word counting
- Context windows around regex matches
"""

import re


def collapse_whitespace(text: str) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return " ".join(text.split())


def generate_anchor(text: str) -> str:
    """
    Convert heading text to a URL-friendly anchor.

    - Lowercases
    - Drops characters other than word characters, whitespace and hyphens
    - Replaces whitespace runs with hyphens and collapses repeated hyphens
    - Strips leading/trailing hyphens

    Args:
        text: Clean heading text.

    Returns:
        Anchor slug (may be empty).

    Example:
        >>> generate_anchor("Results & Discussion")
        'results-discussion'
        >>> generate_anchor("  -Intro-  ")
        'intro'
    """
    if not text:
        return ""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def word_count(text: str) -> int:
    """Count whitespace-separated words; empty text has zero words."""
    return len(text.split())


def extract_context(text: str, index: int, context_chars: int = 50) -> str:
    """
    Extract a fixed-width window of text around a match position.

    Takes ``context_chars`` characters on each side of ``index`` and trims
    the result.

    Args:
        text: Full text being searched.
        index: Match start position.
        context_chars: Characters of context on each side.

    Returns:
        Trimmed context window.

    Example:
        >>> extract_context("See Figure 3 for the layout.", 4, 4)
        'See Figu'
    """
    start = max(0, index - context_chars)
    end = min(len(text), index + context_chars)
    return text[start:end].strip()
