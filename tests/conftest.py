"""Shared pytest fixtures for plant advisor tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from fakes import Step, Wire
from plantfit.config import ClientConfig
from plantfit.llm_client import OpenRouterClient
from plantfit.models import CellPosition, ClimateSummary, FitContext, Location, MonthlyWeather


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        api_key="test-api-key",
        search_model="test-search-model",
        fit_model="test-fit-model",
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Backoff delays requested by the retry loop (nothing actually sleeps)."""
    return []


@pytest.fixture
def make_client(client_config: ClientConfig, sleeps: list[float]) -> Callable[..., tuple[OpenRouterClient, Wire]]:
    """Build a client wired to a scripted MockTransport; keyword args override config fields."""

    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    def _make(*steps: Step, **overrides: Any) -> tuple[OpenRouterClient, Wire]:
        wire = Wire(steps)
        config = ClientConfig(**{**client_config.model_dump(), **overrides})
        client = OpenRouterClient(config, transport=httpx.MockTransport(wire.handler), sleep=_sleep)
        return client, wire

    return _make


@pytest.fixture
def fit_context() -> FitContext:
    """Warsaw plot, south-facing, with three spring/summer months of data."""
    return FitContext(
        plant_name="Tomato",
        location=Location(lat=52.2297, lon=21.0122),
        orientation=180,
        climate=ClimateSummary(annual_temp_avg=8.5, annual_precip=550),
        cell=CellPosition(x=5, y=10),
        weather_monthly=[
            MonthlyWeather(month=4, temperature=50, sunlight=60, humidity=70, precip=40),
            MonthlyWeather(month=5, temperature=55, sunlight=70, humidity=65, precip=55),
            MonthlyWeather(month=6, temperature=60, sunlight=75, humidity=65, precip=60),
        ],
    )
