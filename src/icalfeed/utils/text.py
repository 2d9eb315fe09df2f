"""Plain-text helpers for descriptive event fields."""

import html
import re
from typing import Optional

TAG_PATTERN = re.compile(r"<[^>]*>")
BLOCK_BREAK_PATTERN = re.compile(r"<\s*(?:br\s*/?|/p|/div|/li)\s*>", re.IGNORECASE)
BLANK_LINES_PATTERN = re.compile(r"\n\s*\n+")


def strip_tags(value: Optional[str]) -> str:
    """Strip HTML markup, leaving readable plain text.

    Line breaks and closing block tags become newlines; entities are
    unescaped after the tags are gone so "&lt;b&gt;" survives as "<b>".

    Args:
        value: Text that may contain HTML.

    Returns:
        Plain text with surrounding whitespace removed.
    """
    if not value:
        return ""
    text = BLOCK_BREAK_PATTERN.sub("\n", value)
    text = TAG_PATTERN.sub("", text)
    text = html.unescape(text)
    text = BLANK_LINES_PATTERN.sub("\n\n", text)
    return text.strip()


def clean_text(value: Optional[str]) -> Optional[str]:
    """Return stripped text, or None when nothing is left."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
