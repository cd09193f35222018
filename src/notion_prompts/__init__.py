"""Notion Prompts - cached query and composition API over Notion-hosted prompts.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (PromptSource)
    - repositories: Data access implementations (Notion REST API)
    - services: Cache policy, queries and composition
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from notion_prompts.repositories import NotionPromptSource
    from notion_prompts.services import PromptService

    service = PromptService.create(source=NotionPromptSource.create())
    result = await service.compose_and_handle("Translator", "Bonjour")
    ```

For HTTP API:
    ```python
    from notion_prompts.api.app import app
    ```
"""

from notion_prompts.config import configure_logging, settings
from notion_prompts.dto import ComposeRequest, ProcessPromptRequest
from notion_prompts.entities import CacheSnapshot, HandlingMode, HandlingResult, Prompt, PromptInfo
from notion_prompts.errors import ConfigurationError, UpstreamFetchError
from notion_prompts.handlers import PromptHandler
from notion_prompts.protocols import PromptSource
from notion_prompts.repositories import NotionPromptSource
from notion_prompts.services import PromptService

__all__ = [
    # Configuration
    "settings",
    "configure_logging",
    # Errors
    "ConfigurationError",
    "UpstreamFetchError",
    # Protocols (interfaces)
    "PromptSource",
    # Services (business logic)
    "PromptService",
    # Handlers (HTTP)
    "PromptHandler",
    # Repositories (data access)
    "NotionPromptSource",
    # Entities (domain models)
    "Prompt",
    "PromptInfo",
    "CacheSnapshot",
    "HandlingMode",
    "HandlingResult",
    # DTOs (API contracts)
    "ComposeRequest",
    "ProcessPromptRequest",
]
