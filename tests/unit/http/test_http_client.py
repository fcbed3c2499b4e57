"""Tests for blognow.http.client - transport, retries and error mapping."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable

import httpx
import pytest

from blognow.config import ClientConfig
from blognow.errors import BlogNowError, ErrorKind
from blognow.http.backoff import BackoffPolicy
from blognow.http.client import USER_AGENT, HttpClient
from blognow.models.common import PostStatus

BASE_URL = "https://api.test.com"
FAST_BACKOFF = BackoffPolicy(base_delay=0.05, max_delay=0.2)

# =============================================================================
# Helpers
# =============================================================================


def make_http(handler: Callable | None = None, **options) -> HttpClient:
    """Build a transport against a mock handler with fast pacing."""
    values = {"api_key": "test-key", "base_url": BASE_URL, "rate_limit": 1000.0}
    values.update(options)
    config = ClientConfig.create(**values)
    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(200)))
    return HttpClient(config, transport=transport, backoff=FAST_BACKOFF)


class Recorder:
    """Mock handler replaying scripted responses and recording requests."""

    def __init__(self, *responses: httpx.Response | Exception):
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []
        self.times: list[float] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.times.append(time.monotonic())
        outcome = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        # Fresh response per call; httpx binds a response to one request.
        return httpx.Response(
            outcome.status_code,
            headers=outcome.headers,
            content=outcome.content,
        )

    @property
    def calls(self) -> int:
        return len(self.requests)


def refused() -> httpx.ConnectError:
    return httpx.ConnectError("[Errno 111] Connection refused")


# =============================================================================
# URL Building
# =============================================================================


class TestBuildUrl:
    """Query-string construction."""

    def test_list_values_repeat_key(self) -> None:
        http = make_http()
        assert http.build_url("/posts", {"tags": ["a", "b"]}) == f"{BASE_URL}/posts?tags=a&tags=b"

    def test_scalar_values_in_order(self) -> None:
        http = make_http()
        assert http.build_url("/posts", {"page": 1, "size": 10}) == f"{BASE_URL}/posts?page=1&size=10"

    def test_none_values_omitted(self) -> None:
        http = make_http()
        url = http.build_url("/posts", {"page": None, "query": "x", "tags": None})
        assert url == f"{BASE_URL}/posts?query=x"

    def test_no_params(self) -> None:
        http = make_http()
        assert http.build_url("/api/v1/health") == f"{BASE_URL}/api/v1/health"
        assert http.build_url("/api/v1/health", {}) == f"{BASE_URL}/api/v1/health"

    def test_bool_and_enum_formatting(self) -> None:
        http = make_http()
        url = http.build_url("/posts", {"isFeatured": True, "status": PostStatus.DRAFT})
        assert url == f"{BASE_URL}/posts?isFeatured=true&status=draft"

    def test_values_are_encoded(self) -> None:
        http = make_http()
        url = httpx.URL(http.build_url("/search", {"query": "a b&c"}))
        assert url.params["query"] == "a b&c"


# =============================================================================
# Headers
# =============================================================================


class TestHeaders:
    """Header precedence and redaction."""

    def test_default_headers(self) -> None:
        headers = make_http().build_headers()
        assert headers["Content-Type"] == "application/json"
        assert headers["Authorization"] == "Bearer test-key"
        assert headers["User-Agent"] == USER_AGENT

    def test_later_sources_win(self) -> None:
        http = make_http(custom_headers={"X-Env": "config", "X-Team": "blog"})
        headers = http.build_headers({"x-env": "call"})
        assert headers["X-Env"] == "call"
        assert headers["X-Team"] == "blog"
        assert len(headers.get_list("x-env")) == 1

    def test_custom_header_can_override_user_agent(self) -> None:
        headers = make_http(custom_headers={"User-Agent": "my-app"}).build_headers()
        assert headers["User-Agent"] == "my-app"

    def test_sanitize_redacts_key(self) -> None:
        http = make_http(custom_headers={"X-Api-Key": "test-key"})
        sanitized = http.sanitize_headers(http.build_headers())
        assert sanitized["authorization"] == "Bearer [REDACTED]"
        assert sanitized["x-api-key"] == "[REDACTED]"
        assert "test-key" not in json.dumps(sanitized)

    def test_sanitize_matches_whole_tokens_only(self) -> None:
        http = make_http(
            api_key="ab",
            custom_headers={"X-Trace": "abc-ab-cab", "X-Token": "token ab"},
        )
        sanitized = http.sanitize_headers(http.build_headers())
        assert sanitized["x-trace"] == "abc-ab-cab"
        assert sanitized["x-token"] == "token [REDACTED]"
        assert sanitized["user-agent"] == USER_AGENT

    async def test_headers_sent_on_the_wire(self) -> None:
        recorder = Recorder(httpx.Response(200, json={}))
        async with make_http(recorder, custom_headers={"X-Env": "config"}) as http:
            await http.post("/posts", {"title": "t"}, headers={"X-Request-Id": "abc"})

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.headers["authorization"] == "Bearer test-key"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["x-env"] == "config"
        assert request.headers["x-request-id"] == "abc"
        assert json.loads(request.content) == {"title": "t"}


# =============================================================================
# Successful Responses
# =============================================================================


class TestSuccessParsing:
    """2xx body handling."""

    async def test_unwraps_data_envelope(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"data": {"id": "1"}, "message": "ok"}))
        async with make_http(recorder) as http:
            assert await http.get("/posts/1") == {"id": "1"}

    async def test_returns_body_without_envelope(self) -> None:
        page = {"items": [], "total": 0, "page": 1, "size": 20, "pages": 0}
        async with make_http(Recorder(httpx.Response(200, json=page))) as http:
            assert await http.get("/posts") == page

    async def test_null_data_returns_whole_body(self) -> None:
        body = {"data": None, "status": 200}
        async with make_http(Recorder(httpx.Response(200, json=body))) as http:
            assert await http.get("/posts") == body

    async def test_text_body(self) -> None:
        async with make_http(Recorder(httpx.Response(200, text="pong"))) as http:
            assert await http.get("/ping") == "pong"

    async def test_empty_json_body(self) -> None:
        response = httpx.Response(204, headers={"content-type": "application/json"})
        async with make_http(Recorder(response)) as http:
            assert await http.delete("/posts/1") is None

    async def test_invalid_json_falls_back_to_text(self) -> None:
        response = httpx.Response(
            200, content=b"not json", headers={"content-type": "application/json"}
        )
        async with make_http(Recorder(response)) as http:
            assert await http.get("/posts") == "not json"

    @pytest.mark.parametrize("method", ["put", "patch"])
    async def test_write_verbs(self, method: str) -> None:
        recorder = Recorder(httpx.Response(200, json={"data": {"ok": True}}))
        async with make_http(recorder) as http:
            result = await getattr(http, method)("/posts/1", {"title": "new"})
        assert result == {"ok": True}
        assert recorder.requests[0].method == method.upper()

    async def test_unsupported_method(self) -> None:
        async with make_http() as http:
            with pytest.raises(ValueError):
                await http.request("TRACE", "/posts")


# =============================================================================
# Retry Behaviour
# =============================================================================


class TestServerErrorRetry:
    """5xx responses retry with backoff."""

    async def test_500_then_200_succeeds_on_second_attempt(self) -> None:
        recorder = Recorder(
            httpx.Response(500, json={"message": "boom"}),
            httpx.Response(200, json={"data": "ok"}),
        )
        async with make_http(recorder) as http:
            assert await http.get("/posts") == "ok"

        assert recorder.calls == 2
        assert recorder.times[1] - recorder.times[0] >= FAST_BACKOFF.calculate_delay(1) * 0.9

    async def test_5xx_exhausts_retries(self) -> None:
        recorder = Recorder(httpx.Response(503, json={"message": "unavailable"}))
        async with make_http(recorder, max_retries=2) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")

        assert recorder.calls == 3
        err = exc_info.value
        assert err.kind is ErrorKind.SERVER_ERROR
        assert err.status == 503
        assert err.message == "unavailable"

    async def test_no_retries_when_disabled(self) -> None:
        recorder = Recorder(httpx.Response(502))
        async with make_http(recorder, max_retries=0) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")
        assert recorder.calls == 1
        assert exc_info.value.message == "Internal server error"

    async def test_retry_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="blognow.http")
        recorder = Recorder(httpx.Response(500), httpx.Response(200, json={}))
        async with make_http(recorder) as http:
            await http.get("/posts")
        assert "Attempt 1/4 failed: HTTP 500" in caplog.text


class TestNetworkErrorRetry:
    """Connection failures retry, then surface as NETWORK_ERROR."""

    async def test_two_failures_with_one_retry(self) -> None:
        recorder = Recorder(refused(), refused())
        async with make_http(recorder, max_retries=1) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")

        assert recorder.calls == 2
        err = exc_info.value
        assert err.kind is ErrorKind.NETWORK_ERROR
        assert isinstance(err.cause, httpx.ConnectError)
        assert isinstance(err.__cause__, httpx.ConnectError)

    async def test_recovers_after_failure(self) -> None:
        recorder = Recorder(refused(), httpx.Response(200, json={"data": [1, 2]}))
        async with make_http(recorder) as http:
            assert await http.get("/posts") == [1, 2]
        assert recorder.calls == 2


class TestRateLimitRetry:
    """429 handling."""

    async def test_retry_after_zero_then_success(self) -> None:
        recorder = Recorder(
            httpx.Response(429, headers={"retry-after": "0"}),
            httpx.Response(200, json={"data": "ok"}),
        )
        async with make_http(recorder) as http:
            assert await http.get("/posts") == "ok"
        assert recorder.calls == 2

    async def test_no_retry_without_retry_after(self) -> None:
        recorder = Recorder(httpx.Response(429, json={"message": "Too many"}))
        async with make_http(recorder) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")
        assert recorder.calls == 1
        assert exc_info.value.kind is ErrorKind.RATE_LIMIT_EXCEEDED
        assert exc_info.value.message == "Too many"

    async def test_exhausted_429_carries_hint(self) -> None:
        recorder = Recorder(httpx.Response(429, headers={"retry-after": "7"}))
        async with make_http(recorder, max_retries=0) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")
        assert recorder.calls == 1
        assert exc_info.value.retry_after == 7.0

    async def test_unparseable_retry_after_not_retried(self) -> None:
        recorder = Recorder(httpx.Response(429, headers={"retry-after": "later"}))
        async with make_http(recorder) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")
        assert recorder.calls == 1
        assert exc_info.value.retry_after is None


# =============================================================================
# Non-retryable Errors
# =============================================================================


class TestClientErrors:
    """4xx responses map straight to typed errors."""

    async def test_404_uses_body_message(self) -> None:
        recorder = Recorder(httpx.Response(404, json={"message": "Post not found"}))
        async with make_http(recorder) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts/missing")
        err = exc_info.value
        assert recorder.calls == 1
        assert err.kind is ErrorKind.NOT_FOUND
        assert err.message == "Post not found"
        assert err.details == {"message": "Post not found"}

    async def test_401_without_body_uses_default_message(self) -> None:
        async with make_http(Recorder(httpx.Response(401))) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")
        assert exc_info.value.kind is ErrorKind.INVALID_API_KEY
        assert exc_info.value.message == "Invalid or missing API key"

    async def test_422_uses_error_field(self) -> None:
        body = {"error": "title is required", "fields": ["title"]}
        async with make_http(Recorder(httpx.Response(422, json=body))) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.post("/posts", {})
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR
        assert exc_info.value.message == "title is required"
        assert exc_info.value.details == body

    async def test_unmapped_status_keeps_text(self) -> None:
        async with make_http(Recorder(httpx.Response(418, text="I'm a teapot"))) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/teapot")
        assert exc_info.value.kind is ErrorKind.HTTP_ERROR
        assert exc_info.value.status == 418
        assert exc_info.value.message == "I'm a teapot"

    async def test_unserializable_body_is_validation_error(self) -> None:
        recorder = Recorder(httpx.Response(200, json={}))
        async with make_http(recorder) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.post("/posts", {"title": object()})
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR
        assert isinstance(exc_info.value.cause, TypeError)
        assert recorder.calls == 0

    async def test_unmapped_status_without_body_uses_reason_phrase(self) -> None:
        async with make_http(Recorder(httpx.Response(409))) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.put("/posts/1", {"title": "t"})
        assert exc_info.value.kind is ErrorKind.HTTP_ERROR
        assert exc_info.value.status == 409
        assert exc_info.value.message == "Conflict"


# =============================================================================
# Timeouts
# =============================================================================


class TestTimeout:
    """Timeouts are terminal for the whole call."""

    async def test_slow_response_times_out_without_retry(self) -> None:
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.sleep(5)
            return httpx.Response(200)

        async with make_http(handler, timeout=0.1, max_retries=3) as http:
            start = time.monotonic()
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/slow")
            elapsed = time.monotonic() - start

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert "0.1" in exc_info.value.message
        assert calls == 1
        assert elapsed < 0.1 + 0.5

    async def test_httpx_timeout_is_classified(self) -> None:
        recorder = Recorder(httpx.ReadTimeout("read timed out"))
        async with make_http(recorder) as http:
            with pytest.raises(BlogNowError) as exc_info:
                await http.get("/posts")
        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert recorder.calls == 1


# =============================================================================
# Concurrency & Lifecycle
# =============================================================================


class TestSharedRateLimit:
    """Concurrent calls share one limiter."""

    async def test_concurrent_calls_are_paced(self) -> None:
        recorder = Recorder(httpx.Response(200, json={}))
        async with make_http(recorder, rate_limit=20.0) as http:
            await asyncio.gather(*(http.get(f"/posts/{i}") for i in range(4)))

        paths = [r.url.path for r in recorder.requests]
        assert paths == ["/posts/0", "/posts/1", "/posts/2", "/posts/3"]
        gaps = [b - a for a, b in zip(recorder.times, recorder.times[1:])]
        assert min(gaps) >= 0.05 * 0.8


class TestLifecycle:
    """close() semantics."""

    async def test_close_is_idempotent(self) -> None:
        http = make_http(Recorder(httpx.Response(200, json={})))
        await http.get("/posts")
        assert http.rate_limiter.is_running

        await http.close()
        await http.close()

        assert http.closed is True
        assert http.rate_limiter.is_running is False

    async def test_request_after_close_raises(self) -> None:
        recorder = Recorder(httpx.Response(200))
        http = make_http(recorder)
        await http.close()
        with pytest.raises(BlogNowError) as exc_info:
            await http.get("/posts")
        assert exc_info.value.kind is ErrorKind.CONFIGURATION_ERROR
        assert recorder.calls == 0


# =============================================================================
# Debug Logging
# =============================================================================


class TestDebugLogging:
    """Diagnostics only when enabled, never leaking the key."""

    async def test_debug_logs_redacted_request_and_response(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="blognow.http")
        recorder = Recorder(httpx.Response(200, json={}))
        async with make_http(recorder, debug=True) as http:
            await http.get("/posts", {"page": 1})

        assert f"GET {BASE_URL}/posts?page=1" in caplog.text
        assert "Response 200" in caplog.text
        assert "[REDACTED]" in caplog.text
        assert "test-key" not in caplog.text

    async def test_no_debug_logs_by_default(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="blognow.http")
        async with make_http(Recorder(httpx.Response(200, json={}))) as http:
            await http.get("/posts")
        assert "GET " not in caplog.text
