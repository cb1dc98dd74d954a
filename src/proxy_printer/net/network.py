"""Centralized network utilities with retry logic and exponential backoff.

This module provides HTTP request handling with:
- Bounded timeouts on every request
- Automatic retries with capped exponential backoff and jitter
- Retry-After support for rate limiting (429)
- A polite minimum interval between API calls
- 404 reported as "no content" rather than as an error
"""

import random
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

from proxy_printer.config import settings as settings_module
from proxy_printer.core.logging import get_logger
from proxy_printer.errors import NetworkError

logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 0.5  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retry_on_429: bool = True  # Rate limit errors
    retry_on_5xx: bool = True  # Server errors
    timeout: int = 30  # seconds

    @classmethod
    def from_settings(cls) -> "RetryConfig":
        settings = settings_module.settings
        return cls(
            max_retries=settings.max_retry_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            timeout=settings.http_timeout,
        )

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt with exponential backoff and jitter."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

        if self.jitter:
            # Add random jitter (0-50% of delay)
            delay += random.uniform(0, delay * 0.5)

        return min(delay, self.max_delay)

    def should_retry(self, status: int) -> bool:
        if status == 429:
            return self.retry_on_429
        return 500 <= status < 600 and self.retry_on_5xx


class RateLimiter:
    """Spaces out calls so at most one starts per ``min_interval`` seconds."""

    def __init__(self, min_interval: float) -> None:
        self.min_interval = min_interval
        self._lock = threading.Lock()
        self._next_time = 0.0

    def wait(self) -> None:
        with self._lock:
            now = time.monotonic()
            wait_time = max(0.0, self._next_time - now)
            self._next_time = max(self._next_time, now) + self.min_interval
        if wait_time > 0:
            time.sleep(wait_time)


def _retry_after(response: requests.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def fetch(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    params: Optional[dict[str, str]] = None,
    headers: Optional[dict[str, str]] = None,
    config: Optional[RetryConfig] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> Optional[requests.Response]:
    """GET a URL with retry logic.

    Args:
        url: URL to fetch
        session: requests session to reuse connections (module-level call if None)
        params: Optional query parameters
        headers: Optional HTTP headers
        config: Retry configuration (built from settings if None)
        rate_limiter: Optional limiter consulted before every attempt

    Returns:
        The successful response, or None when the server answered 404

    Raises:
        NetworkError: If all retries fail or the server rejects the request
    """
    if config is None:
        config = RetryConfig.from_settings()

    request_headers = {"User-Agent": settings_module.settings.user_agent}
    if headers:
        request_headers.update(headers)

    http = session or requests
    last_error: Optional[str] = None
    last_status: Optional[int] = None

    for attempt in range(config.max_retries):
        if rate_limiter is not None:
            rate_limiter.wait()

        try:
            response = http.get(
                url, params=params, headers=request_headers, timeout=config.timeout
            )
        except (requests.ConnectionError, requests.Timeout) as error:
            last_error = str(error)
            if attempt < config.max_retries - 1:
                delay = config.get_delay(attempt)
                logger.debug(
                    "Request to {} failed ({}), retrying in {:.1f}s", url, error, delay
                )
                time.sleep(delay)
                continue
            break
        except requests.RequestException as error:
            raise NetworkError(f"Request to {url} failed: {error}", url=url) from error

        if response.status_code == 404:
            return None

        if response.ok:
            return response

        last_status = response.status_code
        last_error = f"HTTP {response.status_code} {response.reason}"

        if config.should_retry(response.status_code) and attempt < config.max_retries - 1:
            delay = _retry_after(response)
            if delay is None:
                delay = config.get_delay(attempt)
            delay = min(delay, config.max_delay)
            logger.debug("{} from {}, retrying in {:.1f}s", last_error, url, delay)
            time.sleep(delay)
            continue

        # Don't retry on client errors (4xx except 429)
        break

    raise NetworkError(
        f"Failed to fetch {url} after {config.max_retries} attempt(s): {last_error}",
        url=url,
        status=last_status,
    )


def fetch_json(url: str, **kwargs: Any) -> Optional[dict[str, Any]]:
    """Fetch URL content as JSON with retry logic.

    Returns:
        Parsed JSON object, or None when the server answered 404

    Raises:
        NetworkError: If all retries fail or the body is not valid JSON
    """
    response = fetch(url, **kwargs)
    if response is None:
        return None
    try:
        return response.json()
    except ValueError as error:
        raise NetworkError(f"Invalid JSON from {url}: {error}", url=url) from error


def fetch_bytes(url: str, **kwargs: Any) -> Optional[bytes]:
    """Fetch URL content as bytes with retry logic (None on 404)."""
    response = fetch(url, **kwargs)
    if response is None:
        return None
    return response.content
