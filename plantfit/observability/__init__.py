"""Observability: Prometheus metrics for the plant advisor client."""

from plantfit.observability.metrics import metrics

__all__ = ["metrics"]
