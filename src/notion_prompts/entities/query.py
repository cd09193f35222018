"""Query result entities."""

from dataclasses import dataclass
from enum import Enum

from .prompt import PromptInfo


class MatchType(str, Enum):
    """Which field a search query matched, in priority order."""

    NAME = "name"
    DESCRIPTION = "description"
    CONTENT = "content"


class CategoryMatch(str, Enum):
    """How a category filter compares against a prompt's labels."""

    EXACT = "exact"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class SearchMatch:
    """A search hit classified by its highest-priority matching field."""

    prompt: PromptInfo
    match_type: MatchType


@dataclass(frozen=True)
class PromptPage:
    """One window of a paginated prompt listing."""

    items: tuple[PromptInfo, ...]
    total: int
    page: int
    page_size: int
    total_pages: int
