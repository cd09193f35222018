"""Service layer for business logic.

This layer contains the cache policy, queries and composition.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from notion_prompts.services import PromptService

    service = PromptService.create(source=NotionPromptSource.create())
    service = PromptService(source=fake_source, expiry_ms=1000)
    ```
"""

from .composition import handle_composed, render_template
from .prompt_service import PromptService, is_all_category

__all__ = [
    "PromptService",
    "handle_composed",
    "is_all_category",
    "render_template",
]
