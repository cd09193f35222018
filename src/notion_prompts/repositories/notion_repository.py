"""Notion implementation of PromptSource.

Queries a Notion database through the public REST API and returns the raw
page objects. Every refresh reads the whole database; the API's cursor
pagination is followed here so callers never see it.

Requirements:
    - An internal integration token (``NOTION_API_KEY``)
    - The database shared with that integration (``NOTION_DATABASE_ID``)
"""

import logging
from typing import Any

import httpx

from notion_prompts.config import settings
from notion_prompts.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


class NotionPromptSource:
    """Notion-based implementation of the PromptSource protocol.

    This class satisfies the PromptSource protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        source = NotionPromptSource.create()
        pages = await source.fetch_all()
        print(len(pages))
        await source.close()
        ```
    """

    PAGE_SIZE = 100

    def __init__(
        self,
        api_key: str,
        database_id: str,
        base_url: str | None = None,
        notion_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Notion source.

        Args:
            api_key: Notion integration token.
            database_id: Id of the database holding the prompts.
            base_url: Notion API base URL. Defaults to settings.notion_base_url.
            notion_version: Value of the Notion-Version header.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._database_id = database_id
        self._base_url = (base_url or settings.notion_base_url).rstrip("/")
        self._notion_version = notion_version or settings.notion_version
        self._timeout = timeout or settings.notion_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        database_id: str | None = None,
    ) -> "NotionPromptSource":
        """Factory method to create NotionPromptSource with defaults.

        Args:
            api_key: Integration token. If None, uses settings.
            database_id: Database id. If None, uses settings.

        Returns:
            Configured NotionPromptSource
        """
        return cls(
            api_key=api_key or settings.notion_api_key,
            database_id=database_id or settings.notion_database_id,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Notion-Version": self._notion_version,
                    "Content-Type": "application/json",
                },
            )
        return self._client

    @property
    def database_id(self) -> str:
        """Get the configured database id."""
        return self._database_id

    async def fetch_all(self) -> list[dict[str, Any]]:
        """Fetch every page of the configured database.

        Returns:
            Raw Notion page objects in query order

        Raises:
            UpstreamFetchError: If any request fails or returns a bad payload
        """
        url = f"/v1/databases/{self._database_id}/query"
        pages: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            payload: dict[str, Any] = {"page_size": self.PAGE_SIZE}
            if cursor:
                payload["start_cursor"] = cursor

            data = await self._post(url, payload)
            results = data.get("results")
            if not isinstance(results, list):
                raise UpstreamFetchError("Unable to retrieve prompts: unexpected response from Notion")
            pages.extend(results)

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        logger.debug("Fetched %d pages from Notion database %s", len(pages), self._database_id)
        return pages

    async def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            error_msg = f"Unable to retrieve prompts: Notion returned HTTP {status_code}"
            if status_code == 401:
                error_msg += " (check NOTION_API_KEY)"
            elif status_code == 404:
                error_msg += " (is the database shared with the integration?)"
            elif status_code == 429:
                error_msg += " (rate limited)"
            raise UpstreamFetchError(error_msg, status_code=status_code) from e

        except httpx.HTTPError as e:
            raise UpstreamFetchError(
                f"Unable to retrieve prompts: {type(e).__name__} contacting Notion"
            ) from e

        except ValueError as e:
            raise UpstreamFetchError("Unable to retrieve prompts: invalid JSON from Notion") from e

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
