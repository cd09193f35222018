"""Shared fixtures: Notion-shaped records and a fake prompt source."""

import asyncio
from typing import Any

import pytest

from notion_prompts.errors import UpstreamFetchError


def _rich_text(*segments: str) -> list[dict[str, Any]]:
    return [{"type": "text", "plain_text": segment} for segment in segments]


def _make_page(
    page_id: str,
    name: str | None,
    content: str | list[str] = "",
    description: str | list[str] | None = None,
    categories: list[str] | None = None,
) -> dict[str, Any]:
    """Build a page object shaped like a Notion database query result."""
    properties: dict[str, Any] = {}
    if name is not None:
        properties["Name"] = {"type": "title", "title": _rich_text(name) if name else []}
    contents = [content] if isinstance(content, str) else content
    properties["Content"] = {"type": "rich_text", "rich_text": _rich_text(*contents)}
    if description is not None:
        descriptions = [description] if isinstance(description, str) else description
        properties["Description"] = {"type": "rich_text", "rich_text": _rich_text(*descriptions)}
    properties["Category"] = {
        "type": "multi_select",
        "multi_select": [{"name": category} for category in categories or []],
    }
    return {"object": "page", "id": page_id, "properties": properties}


class FakePromptSource:
    """In-memory PromptSource that counts fetches and can block or fail."""

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records = list(records or [])
        self.error: Exception | None = None
        self.fetch_count = 0
        self.closed = False
        self._gate: asyncio.Event | None = None

    def hold(self) -> None:
        """Make subsequent fetches wait until release() is called."""
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    async def fetch_all(self) -> list[dict[str, Any]]:
        self.fetch_count += 1
        if self._gate is not None:
            await self._gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_page():
    """Factory for Notion page records."""
    return _make_page


@pytest.fixture
def records():
    """A small prompt database covering the interesting shapes."""
    return [
        _make_page(
            "p1",
            "Translator",
            content="translate this: {{USER_INPUT}}",
            description="helps translate",
            categories=["Language"],
        ),
        _make_page(
            "p2",
            "Summarizer",
            content=["Summarize ", "the following: ", "{{USER_INPUT}}"],
            description="Condense long text",
            categories=["Writing", "Language Tools"],
        ),
        _make_page("p3", "Daily Note", content="{{USER_INPUT}} on {{CURRENT_DATE}}"),
        _make_page("p4", None, content="orphan without a name"),
        _make_page(
            "p5",
            "Code Review",
            content="Review this code:\n{{USER_INPUT}}",
            description="Finds bugs",
            categories=["Engineering", "Writing"],
        ),
    ]


@pytest.fixture
def source(records):
    """Fake source loaded with the sample records."""
    return FakePromptSource(records)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream_error():
    return UpstreamFetchError("Unable to retrieve prompts: Notion returned HTTP 503", status_code=503)
