"""
Configuration for citation-graph.

Uses Pydantic Settings for environment variable support.
All settings can be overridden via environment variables with
the CITATION_GRAPH_ prefix.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Public Semantic Scholar graph API. Point S2_BASE_URL at a running
# citation-graph-proxy to share one API key between several users.
DEFAULT_S2_BASE_URL = "https://api.semanticscholar.org/graph/v1"

# Set by the proxy on the 504 it sends once upstream 429 retries are
# exhausted. A 504 without it is a real gateway timeout.
RATE_LIMIT_EXHAUSTED_HEADER = "x-s2-proxy-rate-limited"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are prefixed with CITATION_GRAPH_.
    Example: CITATION_GRAPH_CONNECTIVITY=2.5
    """

    model_config = SettingsConfigDict(
        env_prefix="CITATION_GRAPH_",
        extra="ignore",
    )

    # Application info
    APP_NAME: str = "citation-graph"
    APP_VERSION: str = "0.1.0"

    # Semantic Scholar API (or the rate-limiting proxy in front of it)
    S2_BASE_URL: str = DEFAULT_S2_BASE_URL
    S2_API_KEY: Optional[str] = None
    REQUEST_TIMEOUT: int = 60  # Seconds

    # Batch endpoint limits
    MAX_BATCH_SIZE: int = 500  # Upstream ceiling on ids per batch call
    MAX_ATTEMPTS: int = 5  # Attempts on "too many requests" before giving up
    RETRY_DELAY: float = 1.0  # Seconds before the first retry, doubled each time

    # Crawl
    MAX_DEPTH: int = 4  # Expansion rounds after the seed fetch
    CONNECTIVITY: float = 3.25  # Growth factor of the expansion threshold
    COMMIT_EXPANDED_PAPERS: bool = False

    # Pruning
    PRUNE_PASSES: int = 10
    PRUNE_TO_FIXED_POINT: bool = False

    LOG_LEVEL: str = "WARNING"
