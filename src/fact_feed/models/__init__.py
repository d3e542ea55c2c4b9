"""Data models for facts, filters and drafts."""

from .fact import (
    ALL_CATEGORIES,
    MAX_TEXT_LENGTH,
    VOTE_COUNTERS,
    Category,
    Fact,
    FactDraft,
    FilterState,
    ImageFile,
    category_color,
    counter_attribute,
    is_valid_http_url,
)

__all__ = [
    "ALL_CATEGORIES",
    "MAX_TEXT_LENGTH",
    "VOTE_COUNTERS",
    "Category",
    "Fact",
    "FactDraft",
    "FilterState",
    "ImageFile",
    "category_color",
    "counter_attribute",
    "is_valid_http_url",
]
