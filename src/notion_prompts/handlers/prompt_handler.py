"""HTTP handlers for prompt operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and turn service failures
into structured error bodies.
"""

import logging

from fastapi import HTTPException, status

from notion_prompts.dto import (
    CacheExpiryRequest,
    CacheExpiryResponse,
    CategoriesResponse,
    CategoryComposeRequest,
    CategoryComposeResponse,
    ComposeMetadata,
    ComposeRequest,
    ComposeResponse,
    ErrorResponse,
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
from notion_prompts.entities import CategoryMatch, HandlingMode, HandlingResult, Prompt, PromptInfo
from notion_prompts.errors import UpstreamFetchError
from notion_prompts.services import PromptService
from notion_prompts.utils import truncate_text

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, message=message).model_dump(),
    )


def _not_found(message: str) -> HTTPException:
    return _error(status.HTTP_404_NOT_FOUND, "not_found", message)


def _upstream_unavailable(e: UpstreamFetchError) -> HTTPException:
    return _error(status.HTTP_502_BAD_GATEWAY, "upstream_unavailable", str(e))


def _info_item(info: PromptInfo) -> PromptInfoItem:
    return PromptInfoItem(
        id=info.id,
        name=info.name,
        description=info.description,
        category=list(info.category),
    )


def _prompt_item(prompt: Prompt) -> PromptItem:
    return PromptItem(
        id=prompt.id,
        name=prompt.name,
        content=prompt.content,
        description=prompt.description,
        category=list(prompt.category),
    )


def _compose_response(prompt_name: str, mode: HandlingMode, result: HandlingResult) -> ComposeResponse:
    return ComposeResponse(
        prompt_name=prompt_name,
        mode=mode,
        text=result.text,
        metadata=ComposeMetadata(**result.metadata) if result.metadata else None,
    )


class PromptHandler:
    """HTTP handlers for prompt operations.

    This handler delegates business logic to PromptService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Mapping not-found results to 404 and upstream failures to 502
    - Never leaking an unstructured failure to the caller

    Example:
        ```python
        handler = PromptHandler(prompt_service=service)

        @app.get("/prompts", response_model=list[PromptInfoItem])
        async def list_prompts():
            return await handler.list_prompts()
        ```
    """

    def __init__(self, prompt_service: PromptService) -> None:
        """Initialize the prompt handler.

        Args:
            prompt_service: The prompt service for business logic (required).
        """
        self._prompts = prompt_service

    async def list_prompts(self) -> list[PromptInfoItem]:
        """Handle GET /prompts requests."""
        try:
            prompts = await self._prompts.get_prompt_list()
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e
        return [_info_item(info) for info in prompts]

    async def get_page(self, page: int, page_size: int) -> PaginatedPromptsResponse:
        """Handle GET /prompts/page requests."""
        try:
            result = await self._prompts.get_paginated_prompts(page, page_size)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        return PaginatedPromptsResponse(
            items=[_info_item(info) for info in result.items],
            total=result.total,
            page=result.page,
            page_size=result.page_size,
            total_pages=result.total_pages,
        )

    async def get_prompt_by_name(self, name: str) -> PromptItem:
        """Handle GET /prompts/by-name/{name} requests.

        Raises:
            HTTPException: 404 if no prompt has that name
        """
        try:
            prompt = await self._prompts.find_prompt_by_name(name)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        if prompt is None:
            raise _not_found(f'No prompt named "{name}"')
        return _prompt_item(prompt)

    async def get_prompt_by_id(self, prompt_id: str) -> PromptItem:
        """Handle GET /prompts/{prompt_id} requests."""
        try:
            prompt = await self._prompts.find_prompt_by_id(prompt_id)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        if prompt is None:
            raise _not_found(f"No prompt with ID {prompt_id}")
        return _prompt_item(prompt)

    async def get_prompt_content(self, prompt_id: str) -> PromptContentResponse:
        """Handle GET /prompts/{prompt_id}/content requests."""
        prompt = await self.get_prompt_by_id(prompt_id)
        return PromptContentResponse(id=prompt.id, text=prompt.content)

    async def get_prompts_by_category(self, category: str, match: CategoryMatch) -> list[PromptInfoItem]:
        """Handle GET /categories/{category}/prompts requests.

        An unknown category is an empty list, not an error.
        """
        try:
            prompts = await self._prompts.get_prompts_by_category(category, match)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e
        return [_info_item(prompt.to_info()) for prompt in prompts]

    async def search(self, query: str) -> list[SearchResultItem]:
        """Handle GET /search requests."""
        try:
            matches = await self._prompts.search_prompts(query)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        return [
            SearchResultItem(
                id=match.prompt.id,
                name=match.prompt.name,
                description=match.prompt.description,
                category=list(match.prompt.category),
                match_type=match.match_type,
            )
            for match in matches
        ]

    async def list_categories(self) -> CategoriesResponse:
        """Handle GET /categories requests."""
        try:
            categories = await self._prompts.list_categories()
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e
        return CategoriesResponse(categories=categories)

    async def compose(self, request: ComposeRequest) -> ComposeResponse:
        """Handle POST /compose requests.

        Raises:
            HTTPException: 404 if the prompt does not exist
        """
        return await self._compose(request.prompt_name, request.user_input, request.mode)

    async def process(self, request: ProcessPromptRequest) -> ComposeResponse:
        """Handle POST /compose/process requests (always process_locally)."""
        return await self._compose(request.prompt_name, request.user_input, HandlingMode.PROCESS_LOCALLY)

    async def _compose(self, prompt_name: str, user_input: str, mode: HandlingMode | None) -> ComposeResponse:
        logger.info('Compose "%s", input: "%s"', prompt_name, truncate_text(user_input))
        effective = mode or self._prompts.handling_mode
        try:
            result = await self._prompts.compose_and_handle(prompt_name, user_input, effective)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        if result is None:
            raise _not_found(f'No prompt named "{prompt_name}"')
        return _compose_response(prompt_name, effective, result)

    async def compose_category(self, request: CategoryComposeRequest) -> CategoryComposeResponse:
        """Handle POST /compose/category requests.

        Raises:
            HTTPException: 404 if the category has no prompts
        """
        logger.info(
            'Compose category "%s", input: "%s"', request.category, truncate_text(request.user_input)
        )
        mode = HandlingMode.PROCESS_LOCALLY
        try:
            results = await self._prompts.compose_category(request.category, request.user_input, mode)
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        if not results:
            raise _not_found(f'No prompts in category "{request.category}"')

        return CategoryComposeResponse(
            category=request.category,
            count=len(results),
            results=[_compose_response(name, mode, result) for name, result in results],
        )

    async def refresh(self) -> RefreshResponse:
        """Handle POST /cache/refresh requests."""
        try:
            prompts = await self._prompts.refresh_cache()
        except UpstreamFetchError as e:
            raise _upstream_unavailable(e) from e

        return RefreshResponse(
            success=True,
            count=len(prompts),
            message=f"Prompt cache refreshed, {len(prompts)} prompts loaded",
        )

    async def clear_cache(self) -> dict:
        """Handle DELETE /cache requests."""
        self._prompts.clear_cache()
        return {
            "success": True,
            "message": "Prompt cache cleared",
        }

    async def get_cache_expiry(self) -> CacheExpiryResponse:
        """Handle GET /cache/expiry requests."""
        return CacheExpiryResponse(expiry_ms=self._prompts.get_cache_expiry_time())

    async def set_cache_expiry(self, request: CacheExpiryRequest) -> CacheExpiryResponse:
        """Handle PUT /cache/expiry requests. Short values are clamped, not rejected."""
        self._prompts.set_cache_expiry_time(request.expiry_ms)
        return await self.get_cache_expiry()

    async def get_handling_mode(self) -> HandlingModeResponse:
        """Handle GET /handling-mode requests."""
        return HandlingModeResponse(mode=self._prompts.handling_mode)

    async def set_handling_mode(self, request: HandlingModeRequest) -> HandlingModeResponse:
        """Handle PUT /handling-mode requests."""
        self._prompts.set_handling_mode(request.mode)
        return await self.get_handling_mode()

    async def get_stats(self) -> StatsResponse:
        """Handle GET /stats requests."""
        return StatsResponse(**self._prompts.get_stats())

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = await self._prompts.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_warm=self._prompts.is_warm,
            upstream_healthy=is_healthy,
        )
