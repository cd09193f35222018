from typing import Any

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from notion_prompts.api.dependencies import HandlerDep, build_lifespan, default_source
from notion_prompts.config import configure_logging, settings
from notion_prompts.dto import (
    CacheExpiryRequest,
    CacheExpiryResponse,
    CategoriesResponse,
    CategoryComposeRequest,
    CategoryComposeResponse,
    ComposeRequest,
    ComposeResponse,
    HandlingModeRequest,
    HandlingModeResponse,
    HealthCheckResponse,
    PaginatedPromptsResponse,
    ProcessPromptRequest,
    PromptContentResponse,
    PromptInfoItem,
    PromptItem,
    RefreshResponse,
    SearchResultItem,
    StatsResponse,
)
from notion_prompts.entities import CategoryMatch

API_TITLE = "Notion Prompts API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Cached query and composition API over prompt templates stored in Notion"


def create_app(source_factory=default_source) -> FastAPI:
    """Build the FastAPI application.

    Args:
        source_factory: Builds the storage connector at startup.

    Returns:
        The configured FastAPI app
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=build_lifespan(source_factory),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "prompts": "/prompts",
                "categories": "/categories",
                "search": "/search",
                "compose": "/compose",
                "cache": "/cache",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/prompts", response_model=list[PromptInfoItem])
    async def list_prompts(handler: HandlerDep) -> list[PromptInfoItem]:
        """List every prompt without its template content."""
        return await handler.list_prompts()

    @app.get("/prompts/page", response_model=PaginatedPromptsResponse)
    async def list_prompts_page(
        handler: HandlerDep,
        page: int = Query(1, description="1-based page number (values under 1 mean 1)"),
        page_size: int = Query(10, description="Items per page (values under 1 mean 1)"),
    ) -> PaginatedPromptsResponse:
        """List one page of prompts."""
        return await handler.get_page(page, page_size)

    @app.get("/prompts/by-name/{name:path}", response_model=PromptItem)
    async def get_prompt_by_name(name: str, handler: HandlerDep) -> PromptItem:
        """Get a full prompt by its exact name."""
        return await handler.get_prompt_by_name(name)

    @app.get("/prompts/{prompt_id}", response_model=PromptItem)
    async def get_prompt(prompt_id: str, handler: HandlerDep) -> PromptItem:
        """Get a full prompt by its upstream id."""
        return await handler.get_prompt_by_id(prompt_id)

    @app.get("/prompts/{prompt_id}/content", response_model=PromptContentResponse)
    async def get_prompt_content(prompt_id: str, handler: HandlerDep) -> PromptContentResponse:
        """Get the raw template text of a prompt."""
        return await handler.get_prompt_content(prompt_id)

    @app.get("/categories", response_model=CategoriesResponse)
    async def list_categories(handler: HandlerDep) -> CategoriesResponse:
        """List every category, with 'all' first."""
        return await handler.list_categories()

    @app.get("/categories/{category:path}/prompts", response_model=list[PromptInfoItem])
    async def get_prompts_by_category(
        category: str,
        handler: HandlerDep,
        match: CategoryMatch = Query(CategoryMatch.EXACT, description="exact or substring label matching"),
    ) -> list[PromptInfoItem]:
        """List prompts of a category ('all' returns every prompt)."""
        return await handler.get_prompts_by_category(category, match)

    @app.get("/search", response_model=list[SearchResultItem])
    async def search_prompts(
        handler: HandlerDep,
        q: str = Query(..., min_length=1, description="Text searched in name, description and content"),
    ) -> list[SearchResultItem]:
        """Search prompts."""
        return await handler.search(q)

    @app.post("/compose", response_model=ComposeResponse)
    async def compose(request: ComposeRequest, handler: HandlerDep) -> ComposeResponse:
        """Compose a prompt using the default or requested handling mode."""
        return await handler.compose(request)

    @app.post("/compose/process", response_model=ComposeResponse)
    async def compose_for_processing(request: ProcessPromptRequest, handler: HandlerDep) -> ComposeResponse:
        """Compose a prompt for processing by the caller's own model."""
        return await handler.process(request)

    @app.post("/compose/category", response_model=CategoryComposeResponse)
    async def compose_category(request: CategoryComposeRequest, handler: HandlerDep) -> CategoryComposeResponse:
        """Compose every prompt of a category against the same input."""
        return await handler.compose_category(request)

    @app.post("/cache/refresh", response_model=RefreshResponse)
    async def refresh_cache(handler: HandlerDep) -> RefreshResponse:
        """Reload prompts from Notion now."""
        return await handler.refresh()

    @app.delete("/cache", response_model=dict[str, Any])
    async def clear_cache(handler: HandlerDep) -> dict[str, Any]:
        """Drop the cached prompts without fetching."""
        return await handler.clear_cache()

    @app.get("/cache/expiry", response_model=CacheExpiryResponse)
    async def get_cache_expiry(handler: HandlerDep) -> CacheExpiryResponse:
        """Get the cache lifetime."""
        return await handler.get_cache_expiry()

    @app.put("/cache/expiry", response_model=CacheExpiryResponse)
    async def set_cache_expiry(request: CacheExpiryRequest, handler: HandlerDep) -> CacheExpiryResponse:
        """Set the cache lifetime."""
        return await handler.set_cache_expiry(request)

    @app.get("/handling-mode", response_model=HandlingModeResponse)
    async def get_handling_mode(handler: HandlerDep) -> HandlingModeResponse:
        """Get the default handling mode."""
        return await handler.get_handling_mode()

    @app.put("/handling-mode", response_model=HandlingModeResponse)
    async def set_handling_mode(request: HandlingModeRequest, handler: HandlerDep) -> HandlingModeResponse:
        """Set the default handling mode."""
        return await handler.set_handling_mode(request)

    @app.get("/stats", response_model=StatsResponse)
    async def get_stats(handler: HandlerDep) -> StatsResponse:
        """Get cache statistics."""
        return await handler.get_stats()

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    configure_logging()
    uvicorn.run(
        "notion_prompts.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
