"""Icon MCP Server - Main server definition."""

import asyncio
import json
import sys
from contextlib import asynccontextmanager

from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from icon_mcp.cache import ResultCache, cache_key
from icon_mcp.catalog import (
    estimate_total_icon_count,
    formatted_filename,
    get_category_catalog,
    get_icon_count_by_library,
    get_library_catalog,
    is_colored_icon,
    supports_stroke,
)
from icon_mcp.config import settings
from icon_mcp.engine import IconPaginator, IconSearchEngine
from icon_mcp.models import RawHit, SearchFilters
from icon_mcp.normalizer import normalize
from icon_mcp.sources.iconify import SvgFetchError, fetch_svg

# Configure logging
logger.remove()
logger.add(sys.stderr, level=settings.log_level)

# Paginators kept per query identity (text + filters), same bound as results
_MAX_PAGINATORS = 100

# Module-level state (set during lifespan, or lazily on first tool call)
_engine: IconSearchEngine | None = None
_paginators: ResultCache | None = None


def _build_engine() -> IconSearchEngine:
    return IconSearchEngine(
        max_results=settings.max_results,
        cache_enabled=settings.cache_enabled,
        cache_max_entries=settings.cache_max_entries,
        cache_evict_batch=settings.cache_evict_batch,
    )


def _get_engine() -> IconSearchEngine:
    global _engine
    if _engine is None:
        _engine = _build_engine()
    return _engine


def _get_paginators() -> ResultCache:
    global _paginators
    if _paginators is None:
        _paginators = ResultCache(max_entries=_MAX_PAGINATORS, evict_batch=10)
    return _paginators


@asynccontextmanager
async def _lifespan(_server: FastMCP):
    """Server lifespan: build the search engine, drop caches on shutdown."""
    global _engine, _paginators

    logger.info("Starting Icon MCP Server...")
    _engine = _build_engine()
    _paginators = None
    logger.info(
        f"Providers: {', '.join(p.provider_id for p in _engine.providers)}; "
        f"cache {'enabled' if _engine.cache is not None else 'disabled'}"
    )

    yield

    logger.info("Shutting down Icon MCP Server...")
    if _engine and _engine.cache is not None:
        _engine.cache.clear()
    _engine = None
    _paginators = None


# Initialize MCP server
mcp = FastMCP(
    name="icons",
    instructions=(
        "Icon search across Iconify-hosted libraries "
        "(Font Awesome, Material, Bootstrap, Heroicons, Remix and more). "
        "Use `icons` to search, browse popular icons or a single library. "
        "Use `catalog` for library/category metadata and `svg` to fetch an "
        "icon's SVG by its qualified name (prefix:name)."
    ),
    lifespan=_lifespan,
)

# Grace period (seconds) given to a cancelled task before it is abandoned.
_CANCEL_GRACE_PERIOD = 5.0


async def _with_timeout(coro, action: str) -> str:
    """Wrap coroutine with hard timeout.

    Uses ``asyncio.wait`` so the deadline holds even if the inner task is
    slow to honour cancellation. The cancelled task gets a brief grace
    period to close its HTTP connections.
    """
    timeout = settings.tool_timeout
    if timeout <= 0:
        return await coro

    task = asyncio.create_task(coro)
    done, _pending = await asyncio.wait({task}, timeout=timeout)

    if done:
        # Propagate any exception raised by the task
        return task.result()

    task.cancel()
    logger.warning(f"Tool '{action}' timed out after {timeout}s, cancelling...")

    try:
        await asyncio.wait_for(asyncio.shield(task), timeout=_CANCEL_GRACE_PERIOD)
    except (asyncio.CancelledError, TimeoutError, Exception):
        pass

    logger.error(f"Tool '{action}' timed out after {timeout}s")
    return (
        f"Error: '{action}' timed out after {timeout}s. "
        "Increase TOOL_TIMEOUT or try a narrower query."
    )


def _icons_json(icons, **extra) -> str:
    return json.dumps(
        {**extra, "icons": [icon.to_dict() for icon in icons], "total": len(icons)},
        ensure_ascii=False,
        indent=2,
    )


async def _search_page(query: str, filters: SearchFilters, page: int) -> str:
    """Serve one display page, reusing the query's paginator when it exists."""
    paginators = _get_paginators()
    key = cache_key("paginator", {"query": query, **filters.key_params()})
    paginator: IconPaginator | None = paginators.get(key)
    if paginator is None:
        paginator = _get_engine().paginate(query, filters, settings.page_size)
        paginators.set(key, paginator)

    result = await paginator.load_page(page)
    return json.dumps(
        {"query": query, **result.to_dict(), "total": len(result.icons)},
        ensure_ascii=False,
        indent=2,
    )


# ---------------------------------------------------------------------------
# icons tool: search, popular, library
# ---------------------------------------------------------------------------


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
async def icons(
    action: str,
    query: str | None = None,
    libraries: list[str] | None = None,
    styles: list[str] | None = None,
    categories: list[str] | None = None,
    page: int = 1,
    library: str | None = None,
    limit: int = 200,
) -> str:
    """Search and browse icons.
    - search: Search all providers (query; optional libraries/styles/categories filters, page)
    - popular: Curated popular icons from every provider
    - library: Browse one icon set by prefix (requires library, e.g. "mdi")
    """
    match action:
        case "search":
            if page < 1:
                return "Error: page must be 1 or greater"
            try:
                filters = SearchFilters(
                    libraries=libraries or [],
                    styles=styles or [],
                    categories=categories or [],
                )
            except ValidationError as e:
                return f"Error: invalid filters: {e.errors()[0]['msg']}"
            return await _with_timeout(
                _search_page(query or "", filters, page), "icons.search"
            )

        case "popular":
            engine = _get_engine()

            async def _popular() -> str:
                found, error = await engine.popular_result()
                return _icons_json(found, error=error)

            return await _with_timeout(_popular(), "icons.popular")

        case "library":
            if not library:
                return "Error: library is required for library action"
            engine = _get_engine()

            async def _library() -> str:
                found = await engine.get_library_icons(library, limit)
                return _icons_json(found, library=library)

            return await _with_timeout(_library(), "icons.library")

        case _:
            return (
                f"Error: Unknown action '{action}'. "
                "Valid actions: search, popular, library"
            )


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
        idempotentHint=True,
    ),
)
async def catalog(action: str) -> str:
    """Static icon metadata (no network).
    - libraries: Known icon libraries (id, name, url)
    - categories: Icon categories (id, name)
    - counts: Approximate icon count per library
    - total: Estimated total icon count
    """
    match action:
        case "libraries":
            data = get_library_catalog()
        case "categories":
            data = get_category_catalog()
        case "counts":
            data = get_icon_count_by_library()
        case "total":
            data = {"total": estimate_total_icon_count()}
        case _:
            return (
                f"Error: Unknown action '{action}'. "
                "Valid actions: libraries, categories, counts, total"
            )
    return json.dumps(data, ensure_ascii=False, indent=2)


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
async def svg(
    icon: str,
    size: int = 24,
    stroke_width: float | None = None,
    color: str | None = None,
) -> str:
    """Fetch an icon's SVG document by qualified name (e.g. "mdi:home").
    size sets width and height; stroke_width and color are passed to the
    upstream renderer unchanged. Returns {icon, filename, svg}.
    """
    if size < 1:
        return "Error: size must be positive"
    if stroke_width and not supports_stroke(icon):
        logger.debug(f"{icon} is not stroke-based; stroke_width may have no effect")
    if color and is_colored_icon(icon):
        logger.debug(f"{icon} is multi-colour; color may have no effect")

    async def _fetch() -> str:
        try:
            document = await fetch_svg(icon, size, stroke_width, color)
        except (SvgFetchError, ValueError) as e:
            return f"Error: {e}"
        parsed = normalize(
            RawHit(qualified_name=icon.replace("/", ":", 1), provider="iconify")
        )
        filename = formatted_filename(parsed, size, stroke_width) if parsed else None
        return json.dumps(
            {"icon": icon, "filename": filename, "svg": document},
            ensure_ascii=False,
            indent=2,
        )

    return await _with_timeout(_fetch(), "svg")


@mcp.tool(
    description=(
        "Server config and management. Actions: status|cache_clear."
    ),
    annotations=ToolAnnotations(
        title="Config",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
)
async def config(action: str) -> str:
    """Server configuration and management.

    Actions:
    - status: Show current config, providers and cache statistics
    - cache_clear: Drop all cached results and paginators
    """
    engine = _get_engine()
    match action:
        case "status":
            return json.dumps(
                {
                    "iconify_api_url": settings.iconify_api_url,
                    "providers": [p.provider_id for p in engine.providers],
                    "max_results": engine.max_results,
                    "page_size": settings.page_size,
                    "tool_timeout": settings.tool_timeout,
                    "cache": engine.cache.stats() if engine.cache else None,
                },
                indent=2,
            )

        case "cache_clear":
            removed = engine.cache.clear() if engine.cache else 0
            _get_paginators().clear()
            return json.dumps({"status": "cleared", "removed": removed})

        case _:
            return (
                f"Error: Unknown action '{action}'. Valid actions: status, cache_clear"
            )


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
