"""
Error taxonomy for the OpenRouter client.

One exception type, OpenRouterError, tagged with a closed ErrorKind. Retry
policy reads the ``retryable`` flag only; callers that need per-kind handling
switch on ``kind``. Kind-specific payloads (retry_after, detail, status, body)
are set only on the kinds that carry them.
"""

from __future__ import annotations

import asyncio
import math
from enum import Enum
from typing import Mapping, Optional

import httpx
from pydantic import BaseModel, Field

DEFAULT_RETRY_AFTER = 60


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    TIMEOUT = "TIMEOUT"
    RATE_LIMITED = "RATE_LIMIT"
    AUTHENTICATION = "AUTHENTICATION"
    VALIDATION = "VALIDATION"
    NETWORK = "NETWORK"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


_RETRYABLE_KINDS = frozenset({
    ErrorKind.TIMEOUT,
    ErrorKind.RATE_LIMITED,
    ErrorKind.NETWORK,
    ErrorKind.UPSTREAM_UNAVAILABLE,
})


class OpenRouterError(Exception):
    """Typed failure from the OpenRouter client."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        retry_after: Optional[int] = None,
        detail: Optional[str] = None,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.retryable = kind in _RETRYABLE_KINDS
        self.retry_after = retry_after
        self.detail = detail
        self.status = status
        self.body = body

    @property
    def code(self) -> str:
        """Stable error code for logs and API payloads."""
        return self.kind.value

    def __repr__(self) -> str:
        return f"OpenRouterError(kind={self.kind.name}, message={self.message!r})"

    @classmethod
    def timeout(cls, seconds: float) -> OpenRouterError:
        return cls(ErrorKind.TIMEOUT, f"Request timed out after {seconds:g}s")

    @classmethod
    def rate_limited(cls, retry_after: int = DEFAULT_RETRY_AFTER) -> OpenRouterError:
        return cls(
            ErrorKind.RATE_LIMITED,
            f"Too many requests. Try again in {retry_after}s",
            retry_after=retry_after,
        )

    @classmethod
    def authentication(cls) -> OpenRouterError:
        return cls(ErrorKind.AUTHENTICATION, "OpenRouter API key is invalid or has expired")

    @classmethod
    def validation(cls, detail: str) -> OpenRouterError:
        return cls(ErrorKind.VALIDATION, f"Invalid AI response: {detail}", detail=detail)

    @classmethod
    def network(cls, reason: str = "") -> OpenRouterError:
        msg = "Connection to OpenRouter failed"
        return cls(ErrorKind.NETWORK, f"{msg}: {reason}" if reason else msg)

    @classmethod
    def insufficient_credits(cls) -> OpenRouterError:
        return cls(ErrorKind.INSUFFICIENT_CREDITS, "OpenRouter account has insufficient credits")

    @classmethod
    def upstream_unavailable(cls, status: int) -> OpenRouterError:
        return cls(
            ErrorKind.UPSTREAM_UNAVAILABLE,
            f"OpenRouter API is unavailable ({status})",
            status=status,
        )

    @classmethod
    def upstream_error(cls, status: int, body: str = "") -> OpenRouterError:
        msg = f"OpenRouter API error ({status})"
        return cls(
            ErrorKind.UPSTREAM_ERROR,
            f"{msg}: {body}" if body else msg,
            status=status,
            body=body,
        )


# ── Classification ──


def parse_retry_after(value: Optional[str]) -> int:
    """Whole seconds from a Retry-After header; DEFAULT_RETRY_AFTER when absent or not numeric."""
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_RETRY_AFTER
    return int(seconds)


def classify_status(status: int, headers: Optional[Mapping[str, str]] = None, body: str = "") -> OpenRouterError:
    """Map a non-2xx HTTP status to a typed error."""
    if status == 401:
        return OpenRouterError.authentication()
    if status == 402:
        return OpenRouterError.insufficient_credits()
    if status == 429:
        return OpenRouterError.rate_limited(parse_retry_after((headers or {}).get("Retry-After")))
    if status >= 500:
        return OpenRouterError.upstream_unavailable(status)
    return OpenRouterError.upstream_error(status, body.strip())


def classify_response(response: httpx.Response) -> OpenRouterError:
    """Classify an httpx response whose status is not a success."""
    try:
        body = response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        body = ""
    return classify_status(response.status_code, response.headers, body)


def classify_exception(exc: BaseException) -> BaseException:
    """
    Map transport-level exceptions to typed errors.

    Typed errors pass through unchanged. Exceptions that are neither a timeout
    nor a transport failure are returned as-is; they are not upstream
    conditions and are never retried.
    """
    if isinstance(exc, OpenRouterError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return OpenRouterError(ErrorKind.TIMEOUT, "Request to OpenRouter timed out")
    if isinstance(exc, httpx.TransportError):
        return OpenRouterError.network(type(exc).__name__)
    return exc


# ── Mapping for the HTTP layer that fronts this client ──


class ApiError(BaseModel):
    """Status, error code and message an API route should answer with."""

    status: int
    code: str
    message: str
    headers: dict[str, str] = Field(default_factory=dict)

    def body(self) -> dict[str, dict[str, str]]:
        return {"error": {"code": self.code, "message": self.message}}


def to_api_error(exc: BaseException, default_message: str) -> ApiError:
    """Translate a client failure into the response an API route should return."""
    if isinstance(exc, OpenRouterError):
        if exc.kind is ErrorKind.TIMEOUT:
            return ApiError(
                status=504,
                code="UpstreamTimeout",
                message="AI is not responding. Try again or add the plant without AI scoring.",
            )
        if exc.kind is ErrorKind.RATE_LIMITED:
            retry_after = exc.retry_after if exc.retry_after is not None else DEFAULT_RETRY_AFTER
            return ApiError(
                status=429,
                code="RateLimited",
                message=exc.message,
                headers={"Retry-After": str(retry_after)},
            )
        if exc.kind is ErrorKind.VALIDATION:
            return ApiError(status=502, code="BadGateway", message="AI returned an invalid response")
    return ApiError(status=500, code="InternalError", message=default_message)
