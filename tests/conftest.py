"""Pytest configuration and fixtures."""

import pytest

from icon_mcp.cache import ResultCache
from icon_mcp.engine import IconSearchEngine
from icon_mcp.models import RawHit


class FakeProvider:
    """In-memory provider that records every call.

    ``pages`` maps a page number to the qualified names returned for any
    query on that page. Set ``fail`` to make every call raise.
    """

    def __init__(
        self,
        provider_id: str,
        pages: dict[int, list[str]] | None = None,
        popular: list[str] | None = None,
        page_size: int = 100,
        prefixes: tuple[str, ...] = (),
        fail: bool = False,
    ):
        self.provider_id = provider_id
        self.name = provider_id.title()
        self.page_size = page_size
        self.prefixes = prefixes
        self.pages = pages or {}
        self.popular = popular or []
        self.fail = fail
        self.search_calls: list[tuple[str, int]] = []
        self.popular_calls = 0

    def owns(self, prefix: str) -> bool:
        return not self.prefixes or prefix in self.prefixes

    def _hits(self, names: list[str]) -> list[RawHit]:
        return [RawHit(qualified_name=n, provider=self.provider_id) for n in names]

    async def search(self, query: str, page: int = 1) -> list[RawHit]:
        self.search_calls.append((query, page))
        if self.fail:
            raise RuntimeError(f"{self.provider_id} is down")
        return self._hits(self.pages.get(page, []))

    async def get_popular(self) -> list[RawHit]:
        self.popular_calls += 1
        if self.fail:
            raise RuntimeError(f"{self.provider_id} is down")
        return self._hits(self.popular)


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def cache():
    """Fresh result cache for each test."""
    return ResultCache(max_entries=200, evict_batch=50)


@pytest.fixture
def make_engine(cache):
    """Build an engine over the given providers with a fresh cache."""

    def _make(*providers, max_results: int = 1000, use_cache: bool = True):
        return IconSearchEngine(
            providers=list(providers),
            cache_enabled=use_cache,
            cache=cache,
            max_results=max_results,
        )

    return _make
