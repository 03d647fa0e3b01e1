"""Aggregation engine: fan a query out to every provider and merge the results.

Pipeline for a search round::

    cache check -> concurrent provider.search() -> truncate each provider
    to its page size -> normalize -> filter -> dedupe (keep first) ->
    cap at max_results -> cache store

Provider order is significant: when two providers return the same icon id,
the one earlier in the list wins.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from icon_mcp.cache import ResultCache, cache_key
from icon_mcp.models import Icon, RawHit, SearchFilters, SearchQuery
from icon_mcp.normalizer import normalize_many
from icon_mcp.sources.iconify import (
    IconProvider,
    default_providers,
    fetch_library_icons,
)

MAX_RESULTS = 1000
_POPULAR_ACTION = "popular"


def dedupe(icons: Sequence[Icon]) -> list[Icon]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for icon in icons:
        if icon.id not in seen:
            seen.add(icon.id)
            unique.append(icon)
    return unique


class IconSearchEngine:
    """Searches all providers concurrently and caches merged results.

    The engine builds and owns its result cache; pass ``cache_enabled=False``
    to run uncached. Each call reports its own outcome through
    ``search_result``/``popular_result``, so concurrent calls never share an
    error.
    """

    def __init__(
        self,
        providers: Sequence[IconProvider] | None = None,
        max_results: int = MAX_RESULTS,
        cache_enabled: bool = True,
        cache_max_entries: int = 200,
        cache_evict_batch: int = 50,
        cache: ResultCache | None = None,
    ):
        self.providers: list[IconProvider] = (
            list(providers) if providers is not None else default_providers()
        )
        self.cache: ResultCache | None = None
        if cache_enabled:
            self.cache = (
                cache
                if cache is not None
                else ResultCache(
                    max_entries=cache_max_entries, evict_batch=cache_evict_batch
                )
            )
        self.max_results = max_results

    def _cache_get(self, key: str) -> list[Icon] | None:
        if self.cache is None:
            return None
        cached = self.cache.get(key)
        # Entries are stored as tuples; callers get their own list
        return list(cached) if cached is not None else None

    def _cache_set(self, key: str, icons: list[Icon]) -> None:
        if self.cache is not None:
            self.cache.set(key, tuple(icons))

    async def _gather(self, calls) -> list[list[RawHit]]:
        """Run provider calls concurrently; a failed call contributes nothing."""
        outcomes = await asyncio.gather(*calls, return_exceptions=True)
        batches = []
        for provider, outcome in zip(self.providers, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Provider {provider.provider_id} failed: {outcome}")
                batches.append([])
            else:
                batches.append(outcome)
        return batches

    async def search(
        self,
        text: str,
        filters: SearchFilters | None = None,
        page: int = 1,
    ) -> list[Icon]:
        """Search every provider for ``text`` and return merged icons."""
        icons, _error = await self.search_result(text, filters, page)
        return icons

    async def search_result(
        self,
        text: str,
        filters: SearchFilters | None = None,
        page: int = 1,
    ) -> tuple[list[Icon], str | None]:
        """Like ``search`` but also returns this call's error, if any.

        Blank text returns the popular set instead. On a total failure the
        icons are an empty list and the error describes the problem.
        """
        query = SearchQuery(text=text, filters=filters or SearchFilters(), page=page)
        if query.is_blank():
            return await self.popular_result()

        key = cache_key("search", query.cache_params())
        cached = self._cache_get(key)
        if cached is not None:
            return cached, None

        try:
            batches = await self._gather(
                [p.search(query.text, query.page) for p in self.providers]
            )
            icons: list[Icon] = []
            for provider, hits in zip(self.providers, batches):
                icons.extend(normalize_many(hits[: provider.page_size]))
        except Exception as e:
            logger.error(f"Icon search failed for {text!r}: {e}")
            return [], str(e)

        if not query.filters.is_empty():
            icons = [icon for icon in icons if query.filters.matches(icon)]
        icons = dedupe(icons)[: self.max_results]

        logger.info(f"Found {len(icons)} icons for {text!r} (page {page})")
        self._cache_set(key, icons)
        return icons, None

    async def get_popular(self) -> list[Icon]:
        """Popular icons from every provider, de-duplicated by id."""
        icons, _error = await self.popular_result()
        return icons

    async def popular_result(self) -> tuple[list[Icon], str | None]:
        key = cache_key(_POPULAR_ACTION, {})
        cached = self._cache_get(key)
        if cached is not None:
            return cached, None

        try:
            batches = await self._gather([p.get_popular() for p in self.providers])
            icons = dedupe(normalize_many(hit for hits in batches for hit in hits))
        except Exception as e:
            logger.error(f"Fetching popular icons failed: {e}")
            return [], str(e)

        self._cache_set(key, icons)
        return icons, None

    async def get_library_icons(self, prefix: str, limit: int = 200) -> list[Icon]:
        """Browse a single collection, attributed to the provider owning it."""
        key = cache_key("library", {"prefix": prefix, "limit": limit})
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        owner = next((p for p in self.providers if p.owns(prefix)), None)
        # Unowned prefixes are still served by the catch-all Iconify provider
        provider_id = owner.provider_id if owner else "iconify"
        hits = await fetch_library_icons(prefix, limit, provider_id=provider_id)
        icons = dedupe(normalize_many(hits))[:limit]

        self._cache_set(key, icons)
        return icons

    def paginate(
        self,
        text: str,
        filters: SearchFilters | None = None,
        page_size: int = 100,
    ) -> IconPaginator:
        return IconPaginator(self, text, filters or SearchFilters(), page_size)


@dataclass
class IconPage:
    icons: list[Icon]
    page: int
    has_more: bool
    total_fetched: int
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "icons": [icon.to_dict() for icon in self.icons],
            "page": self.page,
            "has_more": self.has_more,
            "total_fetched": self.total_fetched,
            "error": self.error,
        }


@dataclass
class IconPaginator:
    """Display-page state for one query.

    Page ``n`` is always ``results[(n-1)*page_size : n*page_size]``. Each query
    gets its own paginator, so a slow call for an old query can only ever
    update that query's paginator.
    """

    engine: IconSearchEngine
    text: str
    filters: SearchFilters
    page_size: int = 100
    page: int = 0
    has_more: bool = True
    results: list[Icon] = field(default_factory=list)
    rounds: int = 0  # provider pages fetched so far
    error: str | None = None

    async def first_page(self) -> IconPage:
        icons, self.error = await self.engine.search_result(
            self.text, self.filters, 1
        )
        self.results = list(icons)
        self.rounds = 1
        self.page = 1
        self.has_more = len(self.results) > self.page_size
        return self._page(1)

    async def load_more(self) -> IconPage:
        """Load the page after the current one."""
        if self.page == 0:
            return await self.first_page()

        next_page = self.page + 1
        end = next_page * self.page_size

        if len(self.results) >= end:
            self.page = next_page
            self.has_more = end < len(self.results)
            return self._page(next_page)

        # Not enough fetched yet: one more provider round for the next page only
        self.rounds += 1
        more, self.error = await self.engine.search_result(
            self.text, self.filters, self.rounds
        )
        known = {icon.id for icon in self.results}
        self.results.extend(icon for icon in more if icon.id not in known)
        self.page = next_page
        if self.text.strip():
            self.has_more = len(more) > 0
        else:
            # Popular icons are a fixed sample, never paginated upstream
            self.has_more = end < len(self.results)
        return self._page(next_page)

    async def load_page(self, page: int) -> IconPage:
        """Advance until ``page`` is loaded and return it.

        Pages already loaded are served from memory. A page past the end of
        the results comes back empty with ``has_more`` false.
        """
        if self.page == 0:
            await self.first_page()
        while self.page < page and self.has_more:
            await self.load_more()
        if page < 1 or page > self.page:
            return IconPage(
                icons=[],
                page=page,
                has_more=False,
                total_fetched=len(self.results),
                error=self.error,
            )
        return self._page(page)

    def _page(self, page: int) -> IconPage:
        start = (page - 1) * self.page_size
        return IconPage(
            icons=self.results[start : start + self.page_size],
            page=page,
            has_more=page < self.page or self.has_more,
            total_fetched=len(self.results),
            error=self.error,
        )
