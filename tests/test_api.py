"""
Tests for the prompt API.
"""

import pytest
from fastapi.testclient import TestClient

from notion_prompts.api.app import create_app
from notion_prompts.errors import ConfigurationError
from notion_prompts.services.composition import NOT_IMPLEMENTED_TEXT


@pytest.fixture
def client(source):
    """Create a test client backed by the fake source."""
    with TestClient(create_app(source_factory=lambda: source)) as test_client:
        yield test_client


@pytest.fixture
def failing_client(source, upstream_error):
    """Create a test client whose upstream always fails."""
    source.error = upstream_error
    with TestClient(create_app(source_factory=lambda: source)) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Notion Prompts API"


def test_startup_warms_cache(client, source):
    assert source.fetch_count == 1
    assert client.get("/stats").json()["cached_prompts"] == 4


def test_shutdown_closes_source(source):
    with TestClient(create_app(source_factory=lambda: source)):
        pass
    assert source.closed


def test_missing_credentials_abort_startup():
    def missing_credentials():
        raise ConfigurationError("NOTION_API_KEY must be set")

    with pytest.raises(ConfigurationError):
        with TestClient(create_app(source_factory=missing_credentials)):
            pass


def test_list_prompts(client):
    response = client.get("/prompts")
    assert response.status_code == 200
    data = response.json()
    assert [item["name"] for item in data] == ["Translator", "Summarizer", "Daily Note", "Code Review"]
    assert "content" not in data[0]
    assert data[2]["category"] == ["Uncategorized"]


def test_get_prompt_by_name(client):
    response = client.get("/prompts/by-name/Translator")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "p1"
    assert data["content"] == "translate this: {{USER_INPUT}}"


def test_get_prompt_by_name_not_found(client):
    response = client.get("/prompts/by-name/nonexistent")
    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error"] == "not_found"
    assert "nonexistent" in detail["message"]


def test_get_prompt_by_id_and_content(client):
    assert client.get("/prompts/p5").json()["name"] == "Code Review"

    response = client.get("/prompts/p5/content")
    assert response.status_code == 200
    assert response.json() == {"id": "p5", "mime_type": "text/plain", "text": "Review this code:\n{{USER_INPUT}}"}

    assert client.get("/prompts/missing").status_code == 404
    assert client.get("/prompts/missing/content").status_code == 404


def test_paginated_prompts(client):
    response = client.get("/prompts/page", params={"page": 100, "page_size": 10})
    assert response.status_code == 200
    assert response.json() == {"items": [], "total": 4, "page": 100, "page_size": 10, "total_pages": 1}

    clamped = client.get("/prompts/page", params={"page": 0, "page_size": 0}).json()
    assert clamped["page"] == 1
    assert clamped["page_size"] == 1
    assert [item["id"] for item in clamped["items"]] == ["p1"]


def test_list_categories(client):
    response = client.get("/categories")
    assert response.status_code == 200
    categories = response.json()["categories"]
    assert categories[0] == "all"
    assert len(categories) == len(set(categories))


def test_prompts_by_category(client):
    exact = client.get("/categories/Language/prompts").json()
    substring = client.get("/categories/Language/prompts", params={"match": "substring"}).json()
    everything = client.get("/categories/all/prompts").json()

    assert [item["name"] for item in exact] == ["Translator"]
    assert [item["name"] for item in substring] == ["Translator", "Summarizer"]
    assert len(everything) == 4
    assert client.get("/categories/Cooking/prompts").json() == []
    assert client.get("/categories/Language/prompts", params={"match": "fuzzy"}).status_code == 422


def test_search(client):
    response = client.get("/search", params={"q": "translate"})
    assert response.status_code == 200
    assert [(item["name"], item["match_type"]) for item in response.json()] == [("Translator", "description")]
    assert client.get("/search").status_code == 422


def test_compose_default_mode(client):
    response = client.post("/compose", json={"prompt_name": "Translator", "user_input": "bonjour"})
    assert response.status_code == 200
    data = response.json()
    assert data["text"] == "translate this: bonjour"
    assert data["mode"] == "return_only"
    assert data["metadata"]["processing_instruction"] == "NO_FURTHER_PROCESSING_REQUIRED"


def test_compose_with_mode_override(client):
    response = client.post(
        "/compose",
        json={"prompt_name": "Translator", "user_input": "bonjour", "mode": "call_external_api"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["text"] == NOT_IMPLEMENTED_TEXT
    assert data["metadata"] is None


def test_compose_not_found(client):
    response = client.post("/compose", json={"prompt_name": "nonexistent", "user_input": "x"})
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


def test_compose_validation(client):
    assert client.post("/compose", json={"prompt_name": "Translator", "user_input": ""}).status_code == 422
    assert client.post("/compose", json={"prompt_name": "Translator", "user_input": "x", "mode": "nope"}).status_code == 422


def test_compose_process_forces_local_processing(client):
    response = client.post("/compose/process", json={"prompt_name": "Translator", "user_input": "hi"})
    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "process_locally"
    assert data["metadata"]["processing_instruction"] == "PROCESS_WITH_CURRENT_LLM"


def test_compose_category(client):
    response = client.post("/compose/category", json={"category": "Writing", "user_input": "text"})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert [result["prompt_name"] for result in data["results"]] == ["Summarizer", "Code Review"]

    missing = client.post("/compose/category", json={"category": "Cooking", "user_input": "text"})
    assert missing.status_code == 404


def test_refresh_and_clear_cache(client, source):
    response = client.post("/cache/refresh")
    assert response.status_code == 200
    assert response.json()["count"] == 4
    assert source.fetch_count == 2

    assert client.delete("/cache").json()["success"] is True
    assert client.get("/stats").json()["cached_prompts"] == 0
    client.get("/prompts")
    assert source.fetch_count == 3


def test_cache_expiry(client):
    assert client.get("/cache/expiry").json() == {"expiry_ms": 300000}

    response = client.put("/cache/expiry", json={"expiry_ms": 500})
    assert response.status_code == 200
    assert response.json() == {"expiry_ms": 1000}


def test_handling_mode(client):
    assert client.get("/handling-mode").json() == {"mode": "return_only"}

    response = client.put("/handling-mode", json={"mode": "process_locally"})
    assert response.json() == {"mode": "process_locally"}

    composed = client.post("/compose", json={"prompt_name": "Translator", "user_input": "x"}).json()
    assert composed["mode"] == "process_locally"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "cache_warm": True, "upstream_healthy": True}


def test_upstream_failure_is_structured(failing_client):
    response = failing_client.get("/prompts")
    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error"] == "upstream_unavailable"
    assert detail["message"].startswith("Unable to retrieve prompts")

    assert failing_client.post("/cache/refresh").status_code == 502
    assert failing_client.post("/compose", json={"prompt_name": "Translator", "user_input": "x"}).status_code == 502
    assert failing_client.get("/health").json()["status"] == "unhealthy"


@pytest.fixture
def slash_client(source, make_page):
    """Create a test client whose data has '/' in a name and a category label."""
    source.records.append(make_page("p6", "Q&A / Review", "Review: {{USER_INPUT}}", categories=["Docs/Specs"]))
    with TestClient(create_app(source_factory=lambda: source)) as test_client:
        yield test_client


def test_prompt_name_containing_slash(slash_client):
    response = slash_client.get("/prompts/by-name/Q%26A%20%2F%20Review")
    assert response.status_code == 200
    assert response.json()["id"] == "p6"

    missing = slash_client.get("/prompts/by-name/No%2FSuch")
    assert missing.status_code == 404
    assert missing.json()["detail"]["error"] == "not_found"


def test_category_containing_slash(slash_client):
    encoded = slash_client.get("/categories/Docs%2FSpecs/prompts")
    raw = slash_client.get("/categories/Docs/Specs/prompts")

    assert [item["id"] for item in encoded.json()] == ["p6"]
    assert [item["id"] for item in raw.json()] == ["p6"]
    assert [item["id"] for item in slash_client.get("/categories/Docs/prompts", params={"match": "substring"}).json()] == ["p6"]
