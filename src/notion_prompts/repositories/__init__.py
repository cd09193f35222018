"""Repository layer for data access.

This layer hides the upstream store behind the PromptSource protocol
(structural typing), so the service never talks HTTP directly.
"""

from notion_prompts.protocols import PromptSource

from .notion_repository import NotionPromptSource

__all__ = [
    "PromptSource",
    "NotionPromptSource",
]
