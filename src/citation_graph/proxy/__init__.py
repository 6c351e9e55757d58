"""
Rate-limiting proxy for the Semantic Scholar batch endpoint.

A separate deployable: it keeps the shared API key secret and spaces
requests to the key's rate limit.
"""

from .app import create_app
from .config import ProxySettings
from .limiter import RateLimiter

__all__ = ["create_app", "ProxySettings", "RateLimiter", "main"]


def main():
    """Run the proxy with uvicorn (synchronous entry point)."""
    import logging
    import sys

    import uvicorn
    from pydantic import ValidationError

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    try:
        settings = ProxySettings()
    except ValidationError as e:
        sys.exit(f"Invalid proxy configuration: {e}")

    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)
