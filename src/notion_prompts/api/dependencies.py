"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from notion_prompts.config import settings
from notion_prompts.errors import ConfigurationError, UpstreamFetchError
from notion_prompts.handlers import PromptHandler
from notion_prompts.protocols import PromptSource
from notion_prompts.repositories import NotionPromptSource
from notion_prompts.services import PromptService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> PromptHandler:
    """Dependency injection for PromptHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "prompt_handler", None)
    if handler is None:
        raise RuntimeError("PromptHandler not initialized. Check lifespan setup.")
    return handler


def default_source() -> PromptSource:
    """Build the Notion connector from settings.

    Raises:
        ConfigurationError: If Notion credentials are missing
    """
    settings.require_credentials()
    return NotionPromptSource.create()


def build_lifespan(source_factory: Callable[[], PromptSource] = default_source):
    """Create the lifespan context manager for the FastAPI app.

    Args:
        source_factory: Builds the storage connector. Tests pass a fake.

    Returns:
        An async context manager factory suitable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize all layers and store them in app.state.

        1. Source (data access) - fails fast on missing credentials
        2. Service (cache + queries) - stored in app.state.prompt_service
        3. Handler (HTTP endpoints) - stored in app.state.prompt_handler
        """
        try:
            source = source_factory()
        except ConfigurationError as e:
            logger.error("Service initialization failed: %s", e)
            raise

        prompt_service = PromptService.create(source=source)
        app.state.prompt_service = prompt_service
        app.state.prompt_handler = PromptHandler(prompt_service=prompt_service)

        # Warm the cache; a failure here is reported per request later on
        try:
            prompts = await prompt_service.get_prompts()
            logger.info("Cache warmed with %d prompts", len(prompts))
        except UpstreamFetchError as e:
            logger.warning("Initial cache warm-up failed: %s", e)

        logger.info(
            "Prompt service initialized (expiry %dms, mode %s)",
            prompt_service.get_cache_expiry_time(),
            prompt_service.handling_mode.value,
        )

        yield

        await source.close()
        del app.state.prompt_handler
        del app.state.prompt_service
        logger.info("Prompt service shut down")

    return lifespan


# Type alias for cleaner dependency injection
HandlerDep = Annotated[PromptHandler, Depends(get_handler)]