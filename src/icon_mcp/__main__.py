"""Icon MCP Server entry point."""

import asyncio
import json
import sys


def _search(query: str, page: int = 1) -> None:
    """One-off search from the command line, printed as JSON.

    Usage:
        icon-mcp search "arrow right" [page]
    """
    from icon_mcp.server import _get_engine

    engine = _get_engine()
    found, error = asyncio.run(engine.search_result(query, page=page))
    output = {
        "query": query,
        "page": page,
        "icons": [icon.to_dict() for icon in found],
        "total": len(found),
    }
    if error:
        output["error"] = error
    print(json.dumps(output, ensure_ascii=False, indent=2))


def _cli() -> None:
    """CLI dispatcher: server (default) or search subcommand."""
    if len(sys.argv) >= 2 and sys.argv[1] == "search":
        query = sys.argv[2] if len(sys.argv) >= 3 else ""
        page = int(sys.argv[3]) if len(sys.argv) >= 4 else 1
        _search(query, page)
    else:
        from icon_mcp.server import main

        main()


if __name__ == "__main__":
    _cli()
