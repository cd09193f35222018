"""Tests for the Notion connector using httpx's mock transport."""

import json

import httpx
import pytest

from notion_prompts.errors import UpstreamFetchError
from notion_prompts.protocols import PromptSource
from notion_prompts.repositories import NotionPromptSource

BASE_URL = "https://api.notion.test"


def make_source(handler) -> NotionPromptSource:
    return NotionPromptSource(
        api_key="secret-token",
        database_id="db123",
        base_url=BASE_URL,
        notion_version="2022-06-28",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


def test_satisfies_protocol():
    assert isinstance(make_source(lambda request: httpx.Response(200)), PromptSource)


@pytest.mark.asyncio
async def test_fetch_all_follows_cursor_pagination(make_page):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append((request, body))
        if "start_cursor" not in body:
            return httpx.Response(
                200,
                json={"results": [make_page("a", "A")], "has_more": True, "next_cursor": "cur-2"},
            )
        return httpx.Response(
            200,
            json={"results": [make_page("b", "B"), make_page("c", "C")], "has_more": False, "next_cursor": None},
        )

    source = make_source(handler)
    pages = await source.fetch_all()
    await source.close()

    assert [page["id"] for page in pages] == ["a", "b", "c"]
    assert len(requests) == 2
    first, first_body = requests[0]
    assert first.method == "POST"
    assert first.url == f"{BASE_URL}/v1/databases/db123/query"
    assert first.headers["Authorization"] == "Bearer secret-token"
    assert first.headers["Notion-Version"] == "2022-06-28"
    assert first_body == {"page_size": 100}
    assert requests[1][1] == {"page_size": 100, "start_cursor": "cur-2"}


@pytest.mark.asyncio
async def test_empty_database():
    source = make_source(lambda request: httpx.Response(200, json={"results": [], "has_more": False}))

    assert await source.fetch_all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "hint"),
    [(401, "NOTION_API_KEY"), (404, "shared with the integration"), (429, "rate limited"), (500, "HTTP 500")],
)
async def test_http_errors_become_upstream_errors(status_code, hint):
    source = make_source(lambda request: httpx.Response(status_code, json={"message": "internal detail"}))

    with pytest.raises(UpstreamFetchError) as excinfo:
        await source.fetch_all()

    assert excinfo.value.status_code == status_code
    assert hint in str(excinfo.value)
    assert "internal detail" not in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_connection_errors_become_upstream_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamFetchError, match="ConnectError"):
        await make_source(handler).fetch_all()


@pytest.mark.asyncio
async def test_unexpected_payloads_are_rejected():
    not_json = make_source(lambda request: httpx.Response(200, content=b"<html>"))
    no_results = make_source(lambda request: httpx.Response(200, json={"object": "error"}))

    with pytest.raises(UpstreamFetchError, match="invalid JSON"):
        await not_json.fetch_all()
    with pytest.raises(UpstreamFetchError, match="unexpected response"):
        await no_results.fetch_all()


@pytest.mark.asyncio
async def test_close_is_idempotent():
    source = make_source(lambda request: httpx.Response(200, json={"results": []}))
    await source.fetch_all()

    await source.close()
    await source.close()


def test_create_prefers_explicit_arguments():
    source = NotionPromptSource.create(api_key="k", database_id="d")

    assert source.database_id == "d"
