"""Network utilities for HTTP requests with retry logic."""

from .network import (
    fetch,
    fetch_bytes,
    fetch_json,
    RateLimiter,
    RetryConfig,
)

__all__ = [
    "fetch",
    "fetch_bytes",
    "fetch_json",
    "RateLimiter",
    "RetryConfig",
]
