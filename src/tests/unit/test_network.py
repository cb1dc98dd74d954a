"""Unit tests for net/network.py"""

import pytest
import requests

from proxy_printer.errors import NetworkError
from proxy_printer.net import network
from proxy_printer.net.network import RateLimiter, RetryConfig, fetch, fetch_bytes, fetch_json


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", headers=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.headers = headers or {}
        self.reason = "Reason"

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def sleeps(monkeypatch):
    delays = []
    monkeypatch.setattr(network.time, "sleep", delays.append)
    return delays


@pytest.fixture
def config():
    return RetryConfig(max_retries=3, base_delay=0.5, max_delay=5.0, jitter=False, timeout=7)


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_exponential_delays(self):
        """Delays double per attempt without jitter."""
        config = RetryConfig(base_delay=1.0, max_delay=100.0, jitter=False)

        assert [config.get_delay(attempt) for attempt in range(3)] == [1.0, 2.0, 4.0]

    def test_delay_is_capped(self):
        """Delays never exceed max_delay, even with jitter."""
        config = RetryConfig(base_delay=10.0, max_delay=15.0, jitter=True)

        assert all(config.get_delay(attempt) <= 15.0 for attempt in range(6))

    def test_retryable_statuses(self):
        """429 and 5xx are retried, other client errors aren't."""
        config = RetryConfig()

        assert config.should_retry(429)
        assert config.should_retry(503)
        assert not config.should_retry(400)
        assert not config.should_retry(404)

    def test_from_settings(self, monkeypatch):
        """Retry settings come from the environment."""
        from proxy_printer.config import settings as settings_module

        monkeypatch.setenv("PP_MAX_RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("PP_HTTP_TIMEOUT", "12")
        settings_module.reload_settings()
        try:
            config = RetryConfig.from_settings()
        finally:
            monkeypatch.undo()
            settings_module.reload_settings()

        assert config.max_retries == 5
        assert config.timeout == 12


class TestFetch:
    """Tests for fetch() and its JSON/bytes wrappers."""

    def test_success(self, config):
        """A 200 response is returned as is; timeout and user agent are sent."""
        session = FakeSession(FakeResponse(200))

        response = fetch("https://api.test/cards", session=session, config=config)

        assert response.status_code == 200
        assert session.requests[0]["timeout"] == 7
        assert "User-Agent" in session.requests[0]["headers"]

    def test_not_found_is_none(self, config):
        """404 means no content, not an error."""
        session = FakeSession(FakeResponse(404))

        assert fetch("https://api.test/cards/x", session=session, config=config) is None

    def test_retries_server_errors(self, config, sleeps):
        """5xx responses are retried with backoff."""
        session = FakeSession(FakeResponse(502), FakeResponse(503), FakeResponse(200))

        response = fetch("https://api.test/cards", session=session, config=config)

        assert response.status_code == 200
        assert sleeps == [0.5, 1.0]

    def test_honours_retry_after(self, config, sleeps):
        """429 waits as long as the server asks, capped at max_delay."""
        session = FakeSession(
            FakeResponse(429, headers={"Retry-After": "2"}),
            FakeResponse(429, headers={"Retry-After": "60"}),
            FakeResponse(200),
        )

        fetch("https://api.test/cards", session=session, config=config)

        assert sleeps == [2.0, 5.0]

    def test_retries_connection_errors(self, config, sleeps):
        """Connection failures are retried."""
        session = FakeSession(requests.ConnectionError("reset"), FakeResponse(200))

        assert fetch("https://api.test/cards", session=session, config=config).ok
        assert len(sleeps) == 1

    def test_exhausted_retries_raise(self, config, sleeps):
        """Giving up raises NetworkError with the last status."""
        session = FakeSession(*(FakeResponse(500) for _ in range(3)))

        with pytest.raises(NetworkError) as excinfo:
            fetch("https://api.test/cards", session=session, config=config)

        assert excinfo.value.status == 500
        assert len(session.requests) == 3

    def test_client_errors_are_not_retried(self, config, sleeps):
        """400 fails immediately."""
        session = FakeSession(FakeResponse(400))

        with pytest.raises(NetworkError):
            fetch("https://api.test/cards", session=session, config=config)

        assert sleeps == []

    def test_other_request_errors_raise(self, config):
        """Unexpected request errors become NetworkError at once."""
        session = FakeSession(requests.exceptions.InvalidURL("bad url"))

        with pytest.raises(NetworkError):
            fetch("https://api.test/cards", session=session, config=config)

    def test_fetch_json(self, config):
        """JSON bodies are decoded."""
        session = FakeSession(FakeResponse(200, payload={"name": "Opt"}))

        assert fetch_json("https://api.test/cards", session=session, config=config) == {
            "name": "Opt"
        }

    def test_fetch_json_invalid_body(self, config):
        """Undecodable bodies raise NetworkError."""
        session = FakeSession(FakeResponse(200, payload=None))

        with pytest.raises(NetworkError):
            fetch_json("https://api.test/cards", session=session, config=config)

    def test_fetch_bytes(self, config):
        """Binary bodies are returned raw."""
        session = FakeSession(FakeResponse(200, content=b"\x89PNG"))

        assert fetch_bytes("https://img.test/a.png", session=session, config=config) == b"\x89PNG"

    def test_rate_limiter_is_consulted(self, config):
        """Every attempt waits on the rate limiter."""

        class CountingLimiter(RateLimiter):
            def __init__(self):
                super().__init__(0.0)
                self.waits = 0

            def wait(self):
                self.waits += 1

        limiter = CountingLimiter()
        fetch(
            "https://api.test/cards",
            session=FakeSession(FakeResponse(200)),
            config=config,
            rate_limiter=limiter,
        )

        assert limiter.waits == 1


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_spaces_out_calls(self, monkeypatch, sleeps):
        """Back-to-back calls wait for the interval."""
        monkeypatch.setattr(network.time, "monotonic", lambda: 100.0)
        limiter = RateLimiter(0.25)

        limiter.wait()
        limiter.wait()

        assert sleeps == [0.25]
