"""Prompt source protocol.

Defines the interface for the storage connector that fetches raw prompt
records from the upstream store.

Implementations can include:
- Notion database via the REST API (default)
- In-memory fixtures for tests
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PromptSource(Protocol):
    """Protocol for storage connectors.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from notion_prompts.protocols import PromptSource

        source: PromptSource = NotionPromptSource.create()
        source: PromptSource = StaticPromptSource([...])
        ```
    """

    async def fetch_all(self) -> list[dict[str, Any]]:
        """Fetch every record of the pre-configured collection.

        Pagination against the upstream store, if any, is handled here.

        Returns:
            Raw records in upstream order

        Raises:
            UpstreamFetchError: On connectivity or permission failures
        """
        ...

    async def close(self) -> None:
        """Release any network resources held by the connector."""
        ...
