"""Configuration settings for Icon MCP Server."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Icon MCP Server configuration.

    Environment variables:
    - ICONIFY_API_URL: Iconify API base URL (default: https://api.iconify.design)
    - REQUEST_TIMEOUT: Per-request upstream timeout in seconds (default: 15)
    - CACHE_ENABLED: Enable the in-memory result cache (default: true)
    - CACHE_MAX_ENTRIES: Maximum cached result lists (default: 200)
    - CACHE_EVICT_BATCH: Oldest entries dropped when the cache is full (default: 50)
    - MAX_RESULTS: Cap on icons kept per aggregated search (default: 1000)
    - PAGE_SIZE: Icons returned per page by the search tool (default: 100)
    - TOOL_TIMEOUT: Hard timeout for a tool call in seconds (0 = no timeout)
    - LOG_LEVEL: Loguru level (default: INFO)
    """

    # Upstream
    iconify_api_url: str = "https://api.iconify.design"
    request_timeout: float = 15.0

    # Result cache
    cache_enabled: bool = True
    cache_max_entries: int = 200
    cache_evict_batch: int = 50

    # Aggregation
    max_results: int = 1000
    page_size: int = 100

    # Tool execution timeout (seconds, 0 = no timeout)
    tool_timeout: int = 60

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def api_url(self, path: str = "") -> str:
        """Join a path onto the Iconify base URL."""
        base = self.iconify_api_url.rstrip("/")
        if not path:
            return base
        return f"{base}/{path.lstrip('/')}"


settings = Settings()
