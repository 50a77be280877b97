"""
Prometheus metrics for the plant advisor client.

All metrics are no-op when observability.metrics_enabled is False.
Exposes track_llm_call, record_llm_retry and start_server.
"""

from __future__ import annotations

import contextlib
import threading
import time
from typing import Any

from prometheus_client import (
    Counter,
    Histogram,
    start_http_server as prometheus_start_http_server,
)


def _enabled() -> bool:
    try:
        from plantfit.config import get_settings
        return bool(get_settings().observability.metrics_enabled)
    except Exception:
        return False


# Lazy registry: only create metrics when enabled and first used
_metrics_created = False


def _ensure_metrics() -> bool:
    global _metrics_created
    if _metrics_created or not _enabled():
        return _metrics_created
    _create_metrics()
    _metrics_created = True
    return True


def _create_metrics() -> None:
    """Create all Prometheus metrics (called once when enabled)."""
    _llm_duration = Histogram(
        "llm_call_duration_seconds",
        "LLM call latency per attempt",
        ["model", "task"],
        buckets=[0.5, 1, 2, 5, 10, 30],
    )
    _llm_errors = Counter(
        "llm_call_errors_total",
        "LLM call errors",
        ["model", "task", "error_type"],
    )
    _llm_retries = Counter(
        "llm_call_retries_total",
        "Retries scheduled after a retryable failure",
        ["task", "error_type"],
    )

    _registry = {
        "llm_duration": _llm_duration,
        "llm_errors": _llm_errors,
        "llm_retries": _llm_retries,
    }
    setattr(_MetricsCollector, "_registry", _registry)


class _MetricsCollector:
    """Collector that delegates to Prometheus when enabled, no-op otherwise."""

    _registry: dict[str, Any] = {}

    def _get(self, name: str) -> Any:
        _ensure_metrics()
        return self._registry.get(name)

    @contextlib.asynccontextmanager
    async def track_llm_call(self, model: str = "", task: str = ""):
        m = self._get("llm_duration")
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            err = self._get("llm_errors")
            if err:
                err.labels(
                    model=model or "unknown",
                    task=task or "unknown",
                    error_type=getattr(e, "code", type(e).__name__),
                ).inc()
            raise
        finally:
            if m:
                m.labels(model=model or "unknown", task=task or "unknown").observe(time.perf_counter() - start)

    def record_llm_retry(self, task: str = "", error_type: str = "") -> None:
        c = self._get("llm_retries")
        if c:
            c.labels(task=task or "unknown", error_type=error_type or "unknown").inc()

    def start_server(self, port: int = 8000) -> None:
        if not _enabled():
            return
        _ensure_metrics()

        def run() -> None:
            try:
                prometheus_start_http_server(port, addr="0.0.0.0")
            except OSError:
                pass

        t = threading.Thread(target=run, daemon=True)
        t.start()


metrics = _MetricsCollector()
