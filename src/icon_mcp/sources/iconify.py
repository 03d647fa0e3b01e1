"""Iconify API provider adapters.

Every provider talks to the same Iconify ``/search`` endpoint and differs only
in its routing rule (which collection prefixes it owns), its page size and how
it samples a "popular" set. Transport and upstream errors never escape an
adapter: they are logged and turned into an empty hit list so one outage
cannot fail a whole aggregation. There are no retries at this layer.
"""

from __future__ import annotations

import asyncio
from typing import Protocol
from urllib.parse import quote

import httpx
from loguru import logger

from icon_mcp.config import settings
from icon_mcp.models import RawHit

_DEFAULT_POPULAR_LIMIT = 50

_POPULAR_QUERIES = (
    "home",
    "user",
    "search",
    "settings",
    "arrow",
    "cart",
    "check",
    "star",
    "menu",
    "notification",
)


class SvgFetchError(Exception):
    """Raised when the upstream SVG endpoint cannot serve an icon."""


class IconProvider(Protocol):
    """Capability shared by all provider adapters."""

    provider_id: str
    name: str
    page_size: int

    async def search(self, query: str, page: int = 1) -> list[RawHit]:
        """Return one page of raw hits for ``query``."""
        ...

    async def get_popular(self) -> list[RawHit]:
        """Return a small fixed sample of popular icons."""
        ...

    def owns(self, prefix: str) -> bool:
        """Whether this provider's routing rule covers ``prefix``."""
        ...


def _parse_hits(data: dict, provider_id: str) -> list[RawHit]:
    """Turn an Iconify search response into raw hits."""
    if not isinstance(data, dict):
        return []
    names = data.get("icons") or []
    collections = data.get("collections") or {}
    hits = []
    for qualified_name in names:
        if not isinstance(qualified_name, str):
            continue
        prefix = qualified_name.split(":", 1)[0]
        hits.append(
            RawHit(
                qualified_name=qualified_name,
                provider=provider_id,
                collection=collections.get(prefix),
            )
        )
    return hits


async def _fetch_hits(params: dict, provider_id: str, label: str) -> list[RawHit]:
    """GET /search with ``params``; any failure yields an empty list."""
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            response = await client.get(settings.api_url("search"), params=params)
            response.raise_for_status()
            hits = _parse_hits(response.json(), provider_id)
    except httpx.HTTPStatusError as e:
        logger.warning(f"{label}: HTTP {e.response.status_code} from Iconify")
        return []
    except httpx.RequestError as e:
        logger.warning(f"{label}: request error: {e}")
        return []
    except Exception as e:
        logger.warning(f"{label}: unexpected error: {e}")
        return []

    logger.debug(f"{label}: {len(hits)} hits")
    return hits


class IconifyProvider:
    """One Iconify-backed icon source restricted to a set of prefixes."""

    def __init__(
        self,
        provider_id: str,
        name: str,
        prefixes: tuple[str, ...] = (),
        page_size: int = 100,
        popular_queries: tuple[str, ...] = (),
        popular_limit: int = _DEFAULT_POPULAR_LIMIT,
    ):
        self.provider_id = provider_id
        self.name = name
        self.prefixes = prefixes
        self.page_size = page_size
        self.popular_queries = popular_queries
        self.popular_limit = popular_limit

    def __repr__(self) -> str:
        return f"IconifyProvider({self.provider_id!r}, prefixes={self.prefixes!r})"

    def owns(self, prefix: str) -> bool:
        return not self.prefixes or prefix in self.prefixes

    def _base_params(self) -> dict:
        if self.prefixes:
            return {"prefixes": ",".join(self.prefixes)}
        return {}

    async def search(self, query: str, page: int = 1) -> list[RawHit]:
        offset = (max(page, 1) - 1) * self.page_size
        params = {
            "query": query,
            **self._base_params(),
            "limit": self.page_size,
            "start": offset,
        }
        logger.info(f"Searching {self.name}: {query!r} (page {page})")
        return await _fetch_hits(params, self.provider_id, f"{self.name} search")

    async def get_popular(self) -> list[RawHit]:
        if not self.popular_queries:
            params = {**self._base_params(), "limit": self.popular_limit}
            return await _fetch_hits(
                params, self.provider_id, f"{self.name} popular"
            )

        batches = await asyncio.gather(
            *(
                _fetch_hits(
                    {"query": q, **self._base_params(), "limit": self.popular_limit},
                    self.provider_id,
                    f"{self.name} popular '{q}'",
                )
                for q in self.popular_queries
            )
        )
        seen: set[str] = set()
        hits = []
        for batch in batches:
            for hit in batch:
                if hit.qualified_name not in seen:
                    seen.add(hit.qualified_name)
                    hits.append(hit)
        return hits


def default_providers() -> list[IconifyProvider]:
    """The ordered provider list. Order decides duplicate resolution."""
    return [
        IconifyProvider(
            "iconify",
            "Iconify",
            page_size=200,
            popular_queries=_POPULAR_QUERIES,
            popular_limit=10,
        ),
        IconifyProvider(
            "fontawesome",
            "Font Awesome",
            prefixes=("fa", "fa6-solid", "fa6-regular", "fa6-brands"),
        ),
        IconifyProvider(
            "material",
            "Material Design Icons",
            prefixes=("mdi", "material-symbols"),
            popular_limit=100,
        ),
        IconifyProvider("bootstrap", "Bootstrap Icons", prefixes=("bi",)),
        IconifyProvider("heroicons", "Heroicons", prefixes=("heroicons",)),
        IconifyProvider("remix", "Remix Icon", prefixes=("ri",)),
    ]


async def fetch_library_icons(
    prefix: str, limit: int = 200, provider_id: str = "iconify"
) -> list[RawHit]:
    """Browse one collection by prefix (no query)."""
    params = {"prefix": prefix, "limit": limit}
    return await _fetch_hits(params, provider_id, f"Library '{prefix}'")


def svg_url(
    qualified_name: str,
    size: int,
    stroke_width: float | None = None,
    color: str | None = None,
) -> str:
    """Build the upstream SVG URL for an icon handle.

    ``color`` may be given with or without a leading ``#``; ``currentColor``
    is the default and is not sent.
    """
    prefix, sep, name = qualified_name.replace("/", ":").partition(":")
    if not sep or not prefix or not name:
        raise ValueError(f"not a qualified icon name: {qualified_name!r}")

    url = settings.api_url(f"{quote(prefix)}/{quote(name)}.svg")
    url += f"?width={size}&height={size}"
    if stroke_width:
        url += f"&stroke-width={stroke_width:g}"
    if color and color != "currentColor":
        url += f"&color={quote(color.removeprefix('#'))}"
    return url


async def fetch_svg(
    qualified_name: str,
    size: int = 24,
    stroke_width: float | None = None,
    color: str | None = None,
) -> str:
    """Fetch the SVG document for an icon from the upstream endpoint."""
    url = svg_url(qualified_name, size, stroke_width, color)
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.error(f"SVG fetch failed for {qualified_name}: HTTP {status}")
        raise SvgFetchError(f"Failed to fetch SVG (Status: {status})") from e
    except httpx.RequestError as e:
        logger.error(f"SVG fetch failed for {qualified_name}: {e}")
        raise SvgFetchError(f"Failed to fetch SVG: {e}") from e
