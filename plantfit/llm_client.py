"""
OpenRouter client for plant search and plant-fit scoring.

One POST per attempt to an OpenAI-compatible chat-completion endpoint, with a
strict JSON-schema response format, a wall-clock timeout that cancels the
in-flight request, typed errors, and sequential retries for transient
failures.

Design decisions:
  - Structured output via json_schema response_format; the local validators
    stay authoritative
  - Retry only on retryable kinds (timeout, rate limit, 5xx, network)
  - Backoff is 2 ** attempt seconds (1s, 2s, 4s, ...), no jitter, no cap
  - No shared mutable state: an httpx.AsyncClient lives for one attempt
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, Optional, TypeVar

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from plantfit.config import ClientConfig
from plantfit.errors import OpenRouterError, classify_exception, classify_response
from plantfit.models import ConnectionStatus, FitContext, FitResult, PlantCandidate
from plantfit.observability import metrics as obs_metrics
from plantfit.prompts.builder import Message, build_fit_messages, build_search_messages
from plantfit.prompts.response_formats import Task, build_response_format
from plantfit.validation import sanitize_text, validate_response

logger = structlog.get_logger()
T = TypeVar("T")

MIN_QUERY_LENGTH = 2
CONNECTION_PROBE_QUERY = "test"

SleepFn = Callable[[float], Awaitable[None]]


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, OpenRouterError) and exc.retryable


def _strip_code_fence(text: str) -> str:
    """Drop a ```json ... ``` wrapper some providers add despite the response format."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        cleaned = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned
    return cleaned


def parse_completion(response: httpx.Response) -> Any:
    """
    Extract and JSON-decode the first choice's message content.

    Raises:
        OpenRouterError(VALIDATION): the envelope or its content is malformed.
    """
    try:
        envelope = response.json()
        content = envelope["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise OpenRouterError.validation(f"malformed completion envelope ({type(e).__name__})") from e
    if not isinstance(content, str):
        raise OpenRouterError.validation("completion content is not a string")
    try:
        return json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise OpenRouterError.validation(f"completion content is not valid JSON ({e.msg})") from e


class OpenRouterClient:
    """
    Plant search and plant-fit scoring over OpenRouter.

    - Construct once from a ClientConfig and pass it to callers.
    - ``transport`` swaps the httpx transport (tests use httpx.MockTransport).
    - ``sleep`` is awaited between attempts; defaults to asyncio.sleep.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._config = config
        self._transport = transport
        self._sleep = sleep
        logger.info(
            "openrouter_client_initialized",
            base_url=config.base_url,
            search_model=config.search_model,
            fit_model=config.fit_model,
            timeout=config.timeout,
            max_retries=config.max_retries,
            key_suffix=f"...{config.api_key[-4:]}",
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def search_plants(self, query: str) -> list[PlantCandidate]:
        """
        Resolve a free-text plant name into 1-5 candidates, best match first.

        Args:
            query: Plant name in Polish, English or Latin (e.g. "pomidor",
                "tomato", "Solanum lycopersicum").

        Raises:
            ValueError: the sanitized query is shorter than 2 characters
                (no request is made).
            OpenRouterError: the request failed after all allowed attempts.
        """
        sanitized = sanitize_text(query)
        if len(sanitized) < MIN_QUERY_LENGTH:
            raise ValueError(f"query must have at least {MIN_QUERY_LENGTH} characters")

        messages = build_search_messages(sanitized)

        async def _search() -> list[PlantCandidate]:
            return await self._run_task("search", self._config.search_model, messages)

        return await self._execute_with_retry("search", _search)

    async def check_plant_fit(self, context: FitContext) -> FitResult:
        """Score how well a plant suits a plot cell and its climate (1-5 per metric)."""
        messages = build_fit_messages(context)

        async def _fit() -> FitResult:
            return await self._run_task("fit", self._config.fit_model, messages)

        return await self._execute_with_retry("fit", _fit)

    async def test_connection(self) -> ConnectionStatus:
        """Liveness probe: a trivial search. Never raises."""
        try:
            await self.search_plants(CONNECTION_PROBE_QUERY)
        except Exception as e:
            return ConnectionStatus(success=False, error=str(e) or type(e).__name__)
        return ConnectionStatus(success=True, model=self._config.search_model)

    async def _run_task(self, task: Task, model: str, messages: list[Message]) -> Any:
        """One attempt: completion request, then validation of the decoded payload."""
        data = await self._create_completion(
            model=model,
            messages=messages,
            response_format=build_response_format(task),
            task=task,
        )
        return validate_response(data, task)

    # ── Retry orchestration ──

    async def _execute_with_retry(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run ``func`` up to max_retries + 1 times, sleeping 2 ** attempt seconds between tries."""
        max_retries = self._config.max_retries

        def _before_sleep(rs: RetryCallState) -> None:
            exc = rs.outcome.exception() if rs.outcome else None
            code = getattr(exc, "code", "UNKNOWN")
            logger.warning(
                "openrouter_retry",
                operation=operation,
                attempt=rs.attempt_number,
                max_retries=max_retries,
                delay_seconds=rs.next_action.sleep if rs.next_action else None,
                error_code=code,
                error=str(exc),
            )
            obs_metrics.record_llm_retry(task=operation, error_type=code)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_exponential(multiplier=1, exp_base=2),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_before_sleep,
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                try:
                    return await func()
                except Exception as e:
                    self._log_error(operation, e)
                    raise
        raise AssertionError("unreachable: tenacity either returns or re-raises")

    def _log_error(self, operation: str, exc: Exception) -> None:
        logger.error(
            "openrouter_request_failed",
            operation=operation,
            error_code=getattr(exc, "code", "UNKNOWN"),
            retryable=getattr(exc, "retryable", False),
            error=str(exc),
            exc_info=True,
        )

    # ── Transport ──

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        if self._config.site_url:
            headers["HTTP-Referer"] = self._config.site_url
        if self._config.app_name:
            headers["X-Title"] = self._config.app_name
        return headers

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self._config.timeout),
        ) as client:
            return await client.post(url, json=payload, headers=self._headers())

    async def _create_completion(
        self,
        model: str,
        messages: list[Message],
        response_format: dict[str, Any],
        task: str = "",
    ) -> Any:
        """
        One request/response exchange. Returns the decoded JSON content.

        Raises:
            OpenRouterError: timeout, HTTP error status, transport failure or
                malformed completion.
        """
        payload = {
            "model": model,
            "messages": messages,
            "response_format": response_format,
            "temperature": self._config.temperature,
            "top_p": self._config.top_p,
            "max_tokens": self._config.max_tokens,
        }
        url = f"{self._config.base_url}/chat/completions"

        async with obs_metrics.track_llm_call(model=model, task=task):
            try:
                # wait_for cancels the request task on expiry, closing the connection
                response = await asyncio.wait_for(self._post(url, payload), timeout=self._config.timeout)
            except asyncio.TimeoutError as e:
                raise OpenRouterError.timeout(self._config.timeout) from e
            except Exception as e:
                classified = classify_exception(e)
                if classified is e:
                    raise
                raise classified from e

            if not response.is_success:
                raise classify_response(response)

            data = parse_completion(response)

        logger.info("openrouter_completion_ok", task=task, model=model, status=response.status_code)
        return data
