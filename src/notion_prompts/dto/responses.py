"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field

from notion_prompts.entities import HandlingMode, MatchType


class PromptInfoItem(BaseModel):
    """Prompt listing item (no template content)."""

    id: str = Field(..., description="Upstream page id")
    name: str = Field(..., description="Prompt name")
    description: str = Field("", description="Prompt description")
    category: list[str] = Field(default_factory=list, description="Category labels")


class PromptItem(PromptInfoItem):
    """Full prompt including its template."""

    content: str = Field(..., description="Template text with {{PLACEHOLDER}} tokens")


class PromptContentResponse(BaseModel):
    """Raw template text of one prompt."""

    id: str = Field(..., description="Upstream page id")
    mime_type: str = Field("text/plain", description="Content type of the text")
    text: str = Field(..., description="Template text")


class SearchResultItem(PromptInfoItem):
    """Search hit classified by its highest-priority matching field."""

    match_type: MatchType = Field(..., description="Field that matched: name, description or content")


class PaginatedPromptsResponse(BaseModel):
    """One page of the prompt listing."""

    items: list[PromptInfoItem] = Field(default_factory=list, description="Prompts on this page")
    total: int = Field(..., description="Total number of prompts", ge=0)
    page: int = Field(..., description="1-based page number", ge=1)
    page_size: int = Field(..., description="Items per page", ge=1)
    total_pages: int = Field(..., description="ceil(total / page_size)", ge=0)


class CategoriesResponse(BaseModel):
    """Every category label, with the 'all' sentinel first."""

    categories: list[str] = Field(default_factory=list, description="Category labels")


class ComposeMetadata(BaseModel):
    """Processing hints attached to a composed prompt."""

    processing_instruction: str | None = Field(None, description="How the caller should treat the text")
    description: str | None = Field(None, description="Human-readable explanation")


class ComposeResponse(BaseModel):
    """Response DTO for compose operations."""

    prompt_name: str = Field(..., description="Name of the composed prompt")
    mode: HandlingMode = Field(..., description="Handling mode that was applied")
    text: str = Field(..., description="Composed text, or a placeholder for unimplemented modes")
    metadata: ComposeMetadata | None = Field(None, description="Processing hints, if any")


class CategoryComposeResponse(BaseModel):
    """Response DTO for composing a whole category."""

    category: str = Field(..., description="Requested category")
    count: int = Field(..., description="Number of prompts composed", ge=0)
    results: list[ComposeResponse] = Field(default_factory=list, description="One result per prompt")


class RefreshResponse(BaseModel):
    """Response DTO for a forced cache refresh."""

    success: bool = Field(..., description="Whether the refresh succeeded")
    count: int = Field(..., description="Number of prompts loaded", ge=0)
    message: str = Field(..., description="Human-readable status message")


class CacheExpiryResponse(BaseModel):
    """Current cache lifetime."""

    expiry_ms: int = Field(..., description="Snapshot lifetime in milliseconds", ge=1000)


class HandlingModeResponse(BaseModel):
    """Current default handling mode."""

    mode: HandlingMode = Field(..., description="Default handling mode")


class StatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    cached_prompts: int = Field(..., description="Prompts in the current snapshot", ge=0)
    snapshot_age_ms: float | None = Field(None, description="Age of the snapshot, None when cold")
    cache_expiry_ms: int = Field(..., description="Snapshot lifetime in milliseconds")
    handling_mode: HandlingMode = Field(..., description="Default handling mode")
    serve_stale_on_error: bool = Field(..., description="Whether stale data is served on refresh failure")
    fetch_count: int = Field(..., description="Upstream fetches since startup", ge=0)
    refresh_in_flight: bool = Field(..., description="Whether a refresh is running")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_warm: bool = Field(..., description="Whether a snapshot is loaded")
    upstream_healthy: bool = Field(..., description="Whether the last upstream check succeeded")


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str = Field(..., description="Error kind: not_found, upstream_unavailable, ...")
    message: str = Field(..., description="Human-readable explanation")
