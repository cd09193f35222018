"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    CacheExpiryRequest,
    CategoryComposeRequest,
    ComposeRequest,
    HandlingModeRequest,
    ProcessPromptRequest,
)
from .responses import (
    CacheExpiryResponse,
    CategoriesResponse,
    CategoryComposeResponse,
    ComposeMetadata,
    ComposeResponse,
    ErrorResponse,
    HandlingModeResponse,
    HealthCheckResponse,
    PaginatedPromptsResponse,
    PromptContentResponse,
    PromptInfoItem,
    PromptItem,
    RefreshResponse,
    SearchResultItem,
    StatsResponse,
)

__all__ = [
    "ComposeRequest",
    "ProcessPromptRequest",
    "CategoryComposeRequest",
    "CacheExpiryRequest",
    "HandlingModeRequest",
    "PromptInfoItem",
    "PromptItem",
    "PromptContentResponse",
    "SearchResultItem",
    "PaginatedPromptsResponse",
    "CategoriesResponse",
    "ComposeMetadata",
    "ComposeResponse",
    "CategoryComposeResponse",
    "RefreshResponse",
    "CacheExpiryResponse",
    "HandlingModeResponse",
    "StatsResponse",
    "HealthCheckResponse",
    "ErrorResponse",
]
