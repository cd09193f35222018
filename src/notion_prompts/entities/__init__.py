"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .handling import HandlingMode, HandlingResult
from .prompt import UNCATEGORIZED, Prompt, PromptInfo
from .query import CategoryMatch, MatchType, PromptPage, SearchMatch
from .snapshot import CacheSnapshot

__all__ = [
    "UNCATEGORIZED",
    "CacheSnapshot",
    "CategoryMatch",
    "HandlingMode",
    "HandlingResult",
    "MatchType",
    "Prompt",
    "PromptInfo",
    "PromptPage",
    "SearchMatch",
]
