"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from notion_prompts.entities import HandlingMode


class ComposeRequest(BaseModel):
    """Request DTO for composing a prompt.

    The handler will convert this to internal calls to the service layer.
    """

    prompt_name: str = Field(..., description="Exact name of the prompt template", min_length=1)
    user_input: str = Field(..., description="Text substituted for {{USER_INPUT}}", min_length=1)
    mode: HandlingMode | None = Field(
        None,
        description="Override the service's default handling mode for this call",
    )


class ProcessPromptRequest(BaseModel):
    """Request DTO for composing a prompt for local processing."""

    prompt_name: str = Field(..., description="Exact name of the prompt template", min_length=1)
    user_input: str = Field(..., description="Text substituted for {{USER_INPUT}}", min_length=1)


class CategoryComposeRequest(BaseModel):
    """Request DTO for composing every prompt of a category."""

    category: str = Field(..., description="Category label, or 'all'", min_length=1)
    user_input: str = Field(..., description="Text substituted for {{USER_INPUT}}", min_length=1)


class CacheExpiryRequest(BaseModel):
    """Request DTO for changing the cache lifetime."""

    expiry_ms: int = Field(
        ...,
        description="Snapshot lifetime in milliseconds (values under 1000 are raised to 1000)",
    )


class HandlingModeRequest(BaseModel):
    """Request DTO for changing the default handling mode."""

    mode: HandlingMode = Field(..., description="New default handling mode")
