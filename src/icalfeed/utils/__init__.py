"""Utility functions for icalfeed."""

from icalfeed.utils.text import clean_text, strip_tags

__all__ = [
    "clean_text",
    "strip_tags",
]
