"""Icon MCP Server - icon search aggregated across public icon libraries."""

from importlib.metadata import version

from icon_mcp.__main__ import _cli as main
from icon_mcp.server import mcp

__version__ = version("icon-mcp")
__all__ = ["mcp", "main", "__version__"]
