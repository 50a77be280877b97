"""Tests for error classification and API error mapping."""

import asyncio

import httpx
import pytest

from plantfit.errors import (
    DEFAULT_RETRY_AFTER,
    ErrorKind,
    OpenRouterError,
    classify_exception,
    classify_response,
    classify_status,
    parse_retry_after,
    to_api_error,
)


class TestRetryable:
    @pytest.mark.parametrize(
        "error",
        [
            OpenRouterError.timeout(10),
            OpenRouterError.rate_limited(5),
            OpenRouterError.network("ConnectError"),
            OpenRouterError.upstream_unavailable(503),
        ],
    )
    def test_transient_kinds_are_retryable(self, error: OpenRouterError) -> None:
        assert error.retryable is True

    @pytest.mark.parametrize(
        "error",
        [
            OpenRouterError.authentication(),
            OpenRouterError.validation("bad"),
            OpenRouterError.insufficient_credits(),
            OpenRouterError.upstream_error(400, "bad request"),
        ],
    )
    def test_permanent_kinds_are_not_retryable(self, error: OpenRouterError) -> None:
        assert error.retryable is False

    def test_code_is_kind_value(self) -> None:
        assert OpenRouterError.rate_limited().code == "RATE_LIMIT"
        assert OpenRouterError.validation("x").code == "VALIDATION"

    def test_messages(self) -> None:
        assert OpenRouterError.timeout(10).message == "Request timed out after 10s"
        assert OpenRouterError.rate_limited(30).message == "Too many requests. Try again in 30s"
        assert OpenRouterError.validation("candidates: too long").message == (
            "Invalid AI response: candidates: too long"
        )


class TestParseRetryAfter:
    def test_numeric(self) -> None:
        assert parse_retry_after("30") == 30

    def test_fractional_truncated(self) -> None:
        assert parse_retry_after("2.5") == 2
        assert parse_retry_after(" 0.9 ") == 0

    @pytest.mark.parametrize("value", [None, "", "soon", "Wed, 21 Oct 2026 07:28:00 GMT", "-5", "inf", "nan"])
    def test_fallback(self, value) -> None:
        assert parse_retry_after(value) == DEFAULT_RETRY_AFTER


class TestClassifyStatus:
    def test_401_authentication(self) -> None:
        assert classify_status(401).kind is ErrorKind.AUTHENTICATION

    def test_402_insufficient_credits(self) -> None:
        assert classify_status(402).kind is ErrorKind.INSUFFICIENT_CREDITS

    def test_429_reads_retry_after(self) -> None:
        err = classify_status(429, {"Retry-After": "12"})
        assert err.kind is ErrorKind.RATE_LIMITED
        assert err.retry_after == 12

    def test_429_without_header_defaults_to_60(self) -> None:
        assert classify_status(429).retry_after == 60

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_5xx_unavailable(self, status: int) -> None:
        err = classify_status(status)
        assert err.kind is ErrorKind.UPSTREAM_UNAVAILABLE
        assert err.status == status

    def test_other_status_carries_body(self) -> None:
        err = classify_status(400, body="model not found\n")
        assert err.kind is ErrorKind.UPSTREAM_ERROR
        assert err.status == 400
        assert err.message == "OpenRouter API error (400): model not found"
        assert err.retryable is False

    def test_other_status_without_body(self) -> None:
        assert classify_status(404).message == "OpenRouter API error (404)"

    def test_classify_response_uses_headers(self) -> None:
        response = httpx.Response(429, headers={"retry-after": "7"}, text="slow down")
        err = classify_response(response)
        assert err.kind is ErrorKind.RATE_LIMITED
        assert err.retry_after == 7


class TestClassifyException:
    def test_typed_error_passes_through(self) -> None:
        err = OpenRouterError.authentication()
        assert classify_exception(err) is err

    @pytest.mark.parametrize(
        "exc",
        [asyncio.TimeoutError(), TimeoutError(), httpx.ReadTimeout("read timed out")],
    )
    def test_timeouts(self, exc: BaseException) -> None:
        result = classify_exception(exc)
        assert isinstance(result, OpenRouterError)
        assert result.kind is ErrorKind.TIMEOUT

    def test_transport_error_is_network(self) -> None:
        result = classify_exception(httpx.ConnectError("connection refused"))
        assert isinstance(result, OpenRouterError)
        assert result.kind is ErrorKind.NETWORK
        assert "ConnectError" in result.message

    def test_unknown_exception_unchanged(self) -> None:
        exc = RuntimeError("boom")
        assert classify_exception(exc) is exc


class TestToApiError:
    def test_timeout_maps_to_504(self) -> None:
        api = to_api_error(OpenRouterError.timeout(10), "Could not score plant")
        assert api.status == 504
        assert api.code == "UpstreamTimeout"

    def test_rate_limit_maps_to_429_with_header(self) -> None:
        api = to_api_error(OpenRouterError.rate_limited(42), "Could not score plant")
        assert api.status == 429
        assert api.code == "RateLimited"
        assert api.headers == {"Retry-After": "42"}

    def test_validation_maps_to_502(self) -> None:
        api = to_api_error(OpenRouterError.validation("x"), "Could not score plant")
        assert api.status == 502
        assert api.code == "BadGateway"

    @pytest.mark.parametrize(
        "exc",
        [OpenRouterError.authentication(), OpenRouterError.upstream_unavailable(503), RuntimeError("boom")],
    )
    def test_everything_else_is_internal(self, exc: BaseException) -> None:
        api = to_api_error(exc, "Could not score plant")
        assert api.status == 500
        assert api.body() == {"error": {"code": "InternalError", "message": "Could not score plant"}}
