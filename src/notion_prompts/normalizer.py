"""Convert raw Notion pages into Prompt entities.

Normalization is pure and per-record: a page that cannot be turned into a
Prompt is logged and skipped, never allowed to fail the whole batch.
"""

import logging
from collections.abc import Iterable
from typing import Any

from notion_prompts.entities import UNCATEGORIZED, Prompt

logger = logging.getLogger(__name__)

# Notion property names and their property types
NAME_PROPERTY = ("Name", "title")
CONTENT_PROPERTY = ("Content", "rich_text")
DESCRIPTION_PROPERTY = ("Description", "rich_text")
CATEGORY_PROPERTY = ("Category", "multi_select")


def _property_value(properties: dict[str, Any], field: tuple[str, str]) -> list[Any] | None:
    name, kind = field
    prop = properties.get(name)
    if not prop:
        return None
    return prop.get(kind)


def _join_plain_text(segments: list[dict[str, Any]] | None) -> str:
    if not segments:
        return ""
    return "".join(segment.get("plain_text", "") for segment in segments)


def normalize_record(record: dict[str, Any]) -> Prompt | None:
    """Build a Prompt from one Notion page.

    Args:
        record: Raw page object as returned by the database query endpoint

    Returns:
        The Prompt, or None if the page has no name

    Raises:
        KeyError, TypeError, AttributeError: If the page is malformed
    """
    page_id = record["id"]
    properties = record.get("properties") or {}

    title = _property_value(properties, NAME_PROPERTY)
    name = title[0].get("plain_text", "") if title else ""
    if not isinstance(name, str):
        raise TypeError(f"title text must be a string, got {type(name).__name__}")
    if not name:
        logger.warning("Skipping prompt without a name (ID: %s)", page_id)
        return None

    options = _property_value(properties, CATEGORY_PROPERTY) or []
    categories = tuple(option["name"] for option in options)

    return Prompt(
        id=page_id,
        name=name,
        content=_join_plain_text(_property_value(properties, CONTENT_PROPERTY)),
        description=_join_plain_text(_property_value(properties, DESCRIPTION_PROPERTY)),
        category=categories or (UNCATEGORIZED,),
    )


def normalize_records(records: Iterable[dict[str, Any]]) -> list[Prompt]:
    """Normalize a batch of pages, dropping rejects.

    Args:
        records: Raw page objects in upstream order

    Returns:
        Prompts in the same order, without skipped pages
    """
    prompts = []
    for record in records:
        try:
            prompt = normalize_record(record)
        except (KeyError, TypeError, AttributeError, IndexError) as e:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.error("Error processing prompt (ID: %s): %r", record_id, e)
            continue
        if prompt is not None:
            prompts.append(prompt)
    return prompts
