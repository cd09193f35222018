"""Prompt service: cache-backed queries and composition.

This service owns the in-memory snapshot of the upstream prompt database,
decides when to refresh it, and answers every query from a single snapshot
read so concurrent callers always see a complete, consistent list.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from datetime import datetime

from notion_prompts.config import settings
from notion_prompts.entities import (
    CacheSnapshot,
    CategoryMatch,
    HandlingMode,
    HandlingResult,
    MatchType,
    Prompt,
    PromptInfo,
    PromptPage,
    SearchMatch,
)
from notion_prompts.errors import UpstreamFetchError
from notion_prompts.normalizer import normalize_records
from notion_prompts.protocols import PromptSource
from notion_prompts.utils import truncate_text

from .composition import handle_composed, render_template

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_MS = 5 * 60 * 1000
MIN_EXPIRY_MS = 1000

ALL_CATEGORY = "all"
ALL_CATEGORY_ALIASES = frozenset({ALL_CATEGORY, "所有"})


class PromptService:
    """Core prompt cache and query service.

    This service depends on the PromptSource PROTOCOL, not on Notion, so
    tests and alternative stores plug in without changes here.

    Cache policy:
    - A cold or expired snapshot triggers a full refresh before answering.
    - At most one refresh is in flight; concurrent callers await it.
    - A failed refresh leaves the previous snapshot untouched and raises
      UpstreamFetchError, unless ``serve_stale_on_error`` is set and a
      snapshot exists, in which case the stale snapshot is served.

    Example:
        ```python
        from notion_prompts.repositories import NotionPromptSource
        from notion_prompts.services import PromptService

        service = PromptService.create(source=NotionPromptSource.create())
        prompts = await service.get_prompts()
        result = await service.compose_and_handle("Translator", "Bonjour")
        ```
    """

    def __init__(
        self,
        source: PromptSource,
        expiry_ms: int | None = None,
        handling_mode: HandlingMode | None = None,
        serve_stale_on_error: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the prompt service.

        Args:
            source: Storage connector (required).
            expiry_ms: Snapshot lifetime in milliseconds. Defaults to 5 minutes.
            handling_mode: Default handling mode for composed prompts.
            serve_stale_on_error: Serve an expired snapshot when refresh fails.
            clock: Monotonic clock in seconds, injectable for tests.
        """
        self._source = source
        self._clock = clock
        self._snapshot: CacheSnapshot | None = None
        self._refresh_task: asyncio.Task[CacheSnapshot] | None = None
        self._fetch_count = 0
        self._handling_mode = handling_mode or HandlingMode.RETURN_ONLY
        self._serve_stale_on_error = serve_stale_on_error
        self._expiry_ms = DEFAULT_EXPIRY_MS
        self.set_cache_expiry_time(DEFAULT_EXPIRY_MS if expiry_ms is None else expiry_ms)

    @classmethod
    def create(
        cls,
        source: PromptSource,
        expiry_ms: int | None = None,
        handling_mode: HandlingMode | None = None,
        serve_stale_on_error: bool | None = None,
    ) -> "PromptService":
        """Factory method to create PromptService with settings defaults.

        Args:
            source: Storage connector (required).
            expiry_ms: Cache expiry in ms. If None, uses settings.
            handling_mode: Default handling mode. If None, uses settings.
            serve_stale_on_error: Stale fallback policy. If None, uses settings.

        Returns:
            Configured PromptService instance
        """
        return cls(
            source=source,
            expiry_ms=settings.cache_expiry_time if expiry_ms is None else expiry_ms,
            handling_mode=handling_mode or settings.handling_mode,
            serve_stale_on_error=(
                settings.serve_stale_on_error if serve_stale_on_error is None else serve_stale_on_error
            ),
        )

    # ------------------------------------------------------------------
    # Cache lifecycle
    # ------------------------------------------------------------------

    async def get_prompts(self) -> tuple[Prompt, ...]:
        """Get all prompts, refreshing the snapshot if it is cold or expired.

        Returns:
            Prompts in upstream order

        Raises:
            UpstreamFetchError: If a needed refresh fails (see class docstring)
        """
        snapshot = self._snapshot
        if snapshot is not None and not snapshot.is_expired(self._expiry_ms, self._clock()):
            logger.debug("Using cached prompts (%d)", len(snapshot.prompts))
            return snapshot.prompts

        try:
            return (await self._refresh()).prompts
        except UpstreamFetchError:
            if self._serve_stale_on_error and snapshot is not None:
                logger.warning(
                    "Refresh failed, serving stale snapshot (%d prompts, %.0fms old)",
                    len(snapshot.prompts),
                    snapshot.age_ms(self._clock()),
                )
                return snapshot.prompts
            raise

    async def refresh_cache(self) -> tuple[Prompt, ...]:
        """Force a refresh regardless of expiry.

        Returns:
            The freshly fetched prompts

        Raises:
            UpstreamFetchError: If the fetch fails
        """
        logger.info("Refreshing prompt cache")
        return (await self._refresh()).prompts

    def clear_cache(self) -> None:
        """Drop the snapshot; the next query fetches again."""
        logger.info("Clearing prompt cache")
        self._snapshot = None

    async def _refresh(self) -> CacheSnapshot:
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._fetch_snapshot())
            task.add_done_callback(self._refresh_finished)
            self._refresh_task = task
        else:
            logger.debug("Joining in-flight refresh")
        # Shield so one cancelled caller does not cancel the fetch for everyone
        return await asyncio.shield(task)

    def _refresh_finished(self, task: asyncio.Task[CacheSnapshot]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Mark the failure as retrieved when every awaiting caller was cancelled
        if not task.cancelled():
            task.exception()

    async def _fetch_snapshot(self) -> CacheSnapshot:
        logger.info("Fetching prompts from upstream")
        self._fetch_count += 1
        try:
            records = await self._source.fetch_all()
        except UpstreamFetchError as e:
            logger.error("Fetching prompts failed: %s", e)
            raise
        except Exception as e:
            logger.exception("Prompt source raised an unexpected error")
            raise UpstreamFetchError(f"Unable to retrieve prompts: {type(e).__name__}") from e

        snapshot = CacheSnapshot(prompts=tuple(normalize_records(records)), captured_at=self._clock())
        self._snapshot = snapshot
        logger.info("Loaded %d prompts and updated cache", len(snapshot.prompts))
        return snapshot

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_prompt_by_name(self, name: str) -> Prompt | None:
        """Find the first prompt whose name equals ``name`` (case-sensitive).

        Args:
            name: Exact prompt name

        Returns:
            The Prompt, or None if absent
        """
        logger.info('Looking up prompt "%s"', name)
        prompt = next((p for p in await self.get_prompts() if p.name == name), None)
        if prompt is None:
            logger.warning('Prompt not found: "%s"', name)
        return prompt

    async def find_prompt_by_id(self, prompt_id: str) -> Prompt | None:
        """Find a prompt by its upstream id.

        Args:
            prompt_id: Exact page id

        Returns:
            The Prompt, or None if absent
        """
        logger.info("Looking up prompt ID %s", prompt_id)
        prompt = next((p for p in await self.get_prompts() if p.id == prompt_id), None)
        if prompt is None:
            logger.warning("No prompt with ID %s", prompt_id)
        return prompt

    async def get_prompt_list(self) -> list[PromptInfo]:
        """List every prompt without its content, in snapshot order."""
        return [prompt.to_info() for prompt in await self.get_prompts()]

    async def get_prompts_by_category(
        self,
        category: str,
        match: CategoryMatch = CategoryMatch.EXACT,
    ) -> list[Prompt]:
        """Filter prompts by category label.

        Args:
            category: Label to match; "all" (any case) returns every prompt
            match: EXACT compares labels for equality, SUBSTRING accepts any
                label containing ``category``

        Returns:
            Matching prompts in snapshot order
        """
        prompts = await self.get_prompts()
        if is_all_category(category):
            return list(prompts)

        if match is CategoryMatch.SUBSTRING:
            return [p for p in prompts if any(category in label for label in p.category)]
        return [p for p in prompts if category in p.category]

    async def search_prompts(self, query: str) -> list[SearchMatch]:
        """Case-insensitive substring search over name, description and content.

        Each hit is classified by the first field that matches, in that
        order, and appears once.

        Args:
            query: Text to look for

        Returns:
            Matches in snapshot order
        """
        needle = query.lower()
        results = []
        for prompt in await self.get_prompts():
            if needle in prompt.name.lower():
                match_type = MatchType.NAME
            elif needle in prompt.description.lower():
                match_type = MatchType.DESCRIPTION
            elif needle in prompt.content.lower():
                match_type = MatchType.CONTENT
            else:
                continue
            results.append(SearchMatch(prompt=prompt.to_info(), match_type=match_type))
        return results

    async def list_categories(self) -> list[str]:
        """List every category label, with the "all" sentinel first.

        Returns:
            Deduplicated labels in first-seen order, prefixed by "all"
        """
        categories = [ALL_CATEGORY]
        for prompt in await self.get_prompts():
            for label in prompt.category:
                if label not in categories:
                    categories.append(label)
        return categories

    async def get_paginated_prompts(self, page: int = 1, page_size: int = 10) -> PromptPage:
        """Return one page of the prompt listing.

        Args:
            page: 1-based page number, clamped to at least 1
            page_size: Items per page, clamped to at least 1

        Returns:
            PromptPage; pages past the end have no items
        """
        page = max(1, page)
        page_size = max(1, page_size)
        prompts = await self.get_prompts()

        start = (page - 1) * page_size
        window = prompts[start : start + page_size]
        return PromptPage(
            items=tuple(prompt.to_info() for prompt in window),
            total=len(prompts),
            page=page,
            page_size=page_size,
            total_pages=math.ceil(len(prompts) / page_size),
        )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    async def compose_prompt(
        self,
        prompt_name: str,
        user_input: str,
        now: datetime | None = None,
    ) -> str | None:
        """Fill a prompt template with the user's input and context values.

        Args:
            prompt_name: Exact name of the template
            user_input: Text for ``{{USER_INPUT}}``
            now: Clock reading for date/time placeholders

        Returns:
            The composed text, or None if the prompt does not exist
        """
        prompt = await self.find_prompt_by_name(prompt_name)
        if prompt is None:
            return None

        composed = render_template(prompt.content, user_input, prompt.name, now)
        logger.info(
            'Composed prompt "%s" with input "%s" (%d chars)',
            prompt.name,
            truncate_text(user_input),
            len(composed),
        )
        return composed

    async def compose_and_handle(
        self,
        prompt_name: str,
        user_input: str,
        mode: HandlingMode | None = None,
    ) -> HandlingResult | None:
        """Compose a prompt and wrap it per the handling mode.

        Args:
            prompt_name: Exact name of the template
            user_input: Text for ``{{USER_INPUT}}``
            mode: Override for this call; defaults to the service's mode

        Returns:
            HandlingResult, or None if the prompt does not exist
        """
        composed = await self.compose_prompt(prompt_name, user_input)
        if composed is None:
            return None

        effective = mode or self._handling_mode
        if effective is not HandlingMode.RETURN_ONLY:
            logger.info('Handling prompt "%s" in %s mode', prompt_name, effective.value)
        return handle_composed(composed, effective)

    async def compose_category(
        self,
        category: str,
        user_input: str,
        mode: HandlingMode = HandlingMode.PROCESS_LOCALLY,
    ) -> list[tuple[str, HandlingResult]]:
        """Compose every prompt in a category against the same input.

        Args:
            category: Exact category label, or "all"
            user_input: Text for ``{{USER_INPUT}}``
            mode: Handling mode applied to each result

        Returns:
            (prompt name, result) pairs in snapshot order; empty if the
            category has no prompts
        """
        results = []
        now = datetime.now()
        for prompt in await self.get_prompts_by_category(category):
            composed = render_template(prompt.content, user_input, prompt.name, now)
            results.append((prompt.name, handle_composed(composed, mode)))
        logger.info(
            'Composed %d prompts of category "%s" with input "%s"',
            len(results),
            category,
            truncate_text(user_input),
        )
        return results

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_cache_expiry_time(self, expiry_ms: int) -> None:
        """Set the snapshot lifetime.

        Args:
            expiry_ms: Lifetime in milliseconds; values under 1000 are raised to 1000
        """
        if expiry_ms < MIN_EXPIRY_MS:
            logger.warning(
                "Cache expiry %dms is too short, using minimum of %dms", expiry_ms, MIN_EXPIRY_MS
            )
            expiry_ms = MIN_EXPIRY_MS
        self._expiry_ms = expiry_ms
        logger.info("Cache expiry set to %dms", expiry_ms)

    def get_cache_expiry_time(self) -> int:
        """Get the snapshot lifetime in milliseconds."""
        return self._expiry_ms

    def set_handling_mode(self, mode: HandlingMode) -> None:
        """Change the default handling mode for composed prompts."""
        self._handling_mode = mode
        logger.info("Prompt handling mode set to %s", mode.value)

    @property
    def handling_mode(self) -> HandlingMode:
        """Get the default handling mode."""
        return self._handling_mode

    @property
    def serve_stale_on_error(self) -> bool:
        """Whether an expired snapshot is served when refresh fails."""
        return self._serve_stale_on_error

    async def is_healthy(self) -> bool:
        """Check that prompts can be served.

        Answers from the snapshot while it is fresh, so this does not add
        upstream traffic.

        Returns:
            True if get_prompts() succeeds, False otherwise
        """
        try:
            await self.get_prompts()
        except UpstreamFetchError:
            return False
        return True

    @property
    def is_warm(self) -> bool:
        """Whether a snapshot is loaded (fresh or not)."""
        return self._snapshot is not None

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        snapshot = self._snapshot
        return {
            "cached_prompts": len(snapshot.prompts) if snapshot else 0,
            "snapshot_age_ms": snapshot.age_ms(self._clock()) if snapshot else None,
            "cache_expiry_ms": self._expiry_ms,
            "handling_mode": self._handling_mode.value,
            "serve_stale_on_error": self.serve_stale_on_error,
            "fetch_count": self._fetch_count,
            "refresh_in_flight": self._refresh_task is not None and not self._refresh_task.done(),
        }


def is_all_category(category: str) -> bool:
    """Whether ``category`` is one of the "every prompt" aliases."""
    return category.lower() in ALL_CATEGORY_ALIASES
