"""Tests for turning Notion pages into Prompt entities."""

import logging

import pytest

from notion_prompts.entities import UNCATEGORIZED, Prompt
from notion_prompts.normalizer import normalize_record, normalize_records


def test_full_page(make_page):
    page = make_page("abc", "Translator", content="translate: {{USER_INPUT}}", description="helps", categories=["A", "B"])

    prompt = normalize_record(page)

    assert prompt == Prompt(
        id="abc",
        name="Translator",
        content="translate: {{USER_INPUT}}",
        description="helps",
        category=("A", "B"),
    )


def test_rich_text_segments_are_concatenated_without_separators(make_page):
    page = make_page("abc", "Multi", content=["one", " two", "three"], description=["de", "scr"])

    prompt = normalize_record(page)

    assert prompt.content == "one twothree"
    assert prompt.description == "descr"


def test_missing_optional_fields_get_defaults(make_page):
    page = make_page("abc", "Bare")
    del page["properties"]["Content"]

    prompt = normalize_record(page)

    assert prompt.content == ""
    assert prompt.description == ""
    assert prompt.category == (UNCATEGORIZED,)


def test_name_uses_first_title_segment(make_page):
    page = make_page("abc", "First")
    page["properties"]["Name"]["title"].append({"plain_text": " Second"})

    assert normalize_record(page).name == "First"


def test_nameless_pages_are_rejected(make_page, caplog):
    caplog.set_level(logging.WARNING, logger="notion_prompts")
    missing = make_page("no-name", None)
    empty_title = make_page("empty-title", "")
    empty_text = make_page("empty-text", "x")
    empty_text["properties"]["Name"]["title"][0]["plain_text"] = ""

    assert normalize_record(missing) is None
    assert normalize_record(empty_title) is None
    assert normalize_record(empty_text) is None
    assert "no-name" in caplog.text


def test_batch_skips_rejects_and_malformed_records(make_page, caplog):
    caplog.set_level(logging.WARNING, logger="notion_prompts")
    no_id = make_page("ignored", "No Id")
    del no_id["id"]
    bad_title = {"id": "bad", "properties": {"Name": {"title": "not a list of segments"}}}

    prompts = normalize_records(
        [
            make_page("1", "Keep One"),
            make_page("2", None),
            no_id,
            bad_title,
            make_page("3", "Keep Two"),
        ]
    )

    assert [p.id for p in prompts] == ["1", "3"]
    assert "bad" in caplog.text


def test_empty_batch():
    assert normalize_records([]) == []


def test_non_string_title_is_skipped_as_malformed(make_page, caplog):
    caplog.set_level(logging.WARNING, logger="notion_prompts")
    numeric = make_page("numeric", "x")
    numeric["properties"]["Name"]["title"][0]["plain_text"] = 42

    with pytest.raises(TypeError):
        normalize_record(numeric)
    assert [p.id for p in normalize_records([numeric, make_page("ok", "Fine")])] == ["ok"]
    assert "numeric" in caplog.text
