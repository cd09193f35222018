#!/usr/bin/env python3
"""
Demo script for the Notion prompt service.

Lists, searches and composes prompts from the database configured through
NOTION_API_KEY / NOTION_DATABASE_ID, and shows the effect of the cache.
"""

import asyncio
import sys
import time

from notion_prompts import ConfigurationError, UpstreamFetchError, configure_logging, settings
from notion_prompts.entities import HandlingMode
from notion_prompts.repositories import NotionPromptSource
from notion_prompts.services import PromptService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_cache(service: PromptService) -> None:
    """Show that a second read is served from the snapshot."""
    print_section("Cache Behaviour")

    start = time.perf_counter()
    prompts = await service.get_prompts()
    cold_ms = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    await service.get_prompts()
    warm_ms = (time.perf_counter() - start) * 1000

    print(f"\n  Loaded {len(prompts)} prompts")
    print(f"  Cold read: {cold_ms:.1f}ms")
    print(f"  Warm read: {warm_ms:.3f}ms")
    print(f"  Upstream fetches: {service.get_stats()['fetch_count']}")


async def demo_queries(service: PromptService) -> None:
    """List categories, a page of prompts and a search."""
    print_section("Queries")

    categories = await service.list_categories()
    print(f"\n  Categories: {', '.join(categories)}")

    page = await service.get_paginated_prompts(page=1, page_size=5)
    print(f"\n  Page 1 of {page.total_pages} ({page.total} prompts):")
    for info in page.items:
        print(f"    - {info.name} [{', '.join(info.category)}]")

    if page.items:
        query = page.items[0].name.split()[0]
        print(f"\n  Search '{query}':")
        for match in await service.search_prompts(query):
            print(f"    - {match.prompt.name} (matched on {match.match_type.value})")


async def demo_compose(service: PromptService) -> None:
    """Compose the first prompt in every handling mode."""
    print_section("Composition")

    prompts = await service.get_prompts()
    if not prompts:
        print("\n  No prompts to compose")
        return

    name = prompts[0].name
    for mode in HandlingMode:
        result = await service.compose_and_handle(name, "Hello from the demo", mode)
        print(f"\n  [{mode.value}] {name}")
        print(f"  {result.text[:200]}")
        if result.metadata:
            print(f"  → {result.metadata['processing_instruction']}")


async def main() -> int:
    configure_logging("WARNING")

    try:
        settings.require_credentials()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1

    source = NotionPromptSource.create()
    service = PromptService.create(source=source)
    try:
        await demo_cache(service)
        await demo_queries(service)
        await demo_compose(service)
    except UpstreamFetchError as e:
        print(f"\n✗ {e}")
        return 1
    finally:
        await source.close()

    print_section("Done")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
