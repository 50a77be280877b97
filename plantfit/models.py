"""
Core data models for the plant advisor client.

Inputs (FitContext and its parts) describe a plot cell and its climate;
outputs (PlantCandidate, FitResult) are what the model is allowed to return
once it has passed validation. Nothing here is persisted.

Monthly weather figures are normalized to 0-100. Temperature maps linearly
onto -30..+50 °C.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TEMPERATURE_MIN_C = -30.0
TEMPERATURE_SPAN_C = 80.0

SCORE_FIELDS = (
    "sunlight_score",
    "humidity_score",
    "precip_score",
    "temperature_score",
    "overall_score",
)
MIN_SCORE = 1
MAX_SCORE = 5
MIN_EXPLANATION_LENGTH = 50


def denormalize_temperature(normalized: float) -> float:
    """Convert a 0-100 normalized temperature back to °C."""
    return (normalized / 100) * TEMPERATURE_SPAN_C + TEMPERATURE_MIN_C


# ═══════════════════════════════════════════════════════════
# Fit context (input)
# ═══════════════════════════════════════════════════════════


class Location(BaseModel):
    """Geographic position of the plan."""

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    address: Optional[str] = None


class MonthlyWeather(BaseModel):
    """One month of normalized (0-100) weather observations."""

    month: int = Field(ge=1, le=12)
    temperature: float = Field(ge=0, le=100)
    sunlight: float = Field(ge=0, le=100)
    humidity: float = Field(ge=0, le=100)
    precip: float = Field(ge=0, le=100)


class ClimateSummary(BaseModel):
    """Annual climate figures for the plan location."""

    annual_temp_avg: float
    annual_precip: float
    frost_free_days: Optional[int] = Field(default=None, ge=0, le=366)
    zone: Optional[str] = None

    @classmethod
    def from_monthly(
        cls,
        weather: list[MonthlyWeather],
        zone: Optional[str] = None,
        frost_free_days: Optional[int] = None,
    ) -> ClimateSummary:
        """Mean of denormalized monthly temperatures and sum of monthly precipitation."""
        if not weather:
            return cls(annual_temp_avg=0.0, annual_precip=0.0, zone=zone, frost_free_days=frost_free_days)
        temp_avg = sum(denormalize_temperature(m.temperature) for m in weather) / len(weather)
        return cls(
            annual_temp_avg=temp_avg,
            annual_precip=sum(m.precip for m in weather),
            zone=zone,
            frost_free_days=frost_free_days,
        )


class CellPosition(BaseModel):
    """Zero-based grid cell the plant would occupy."""

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    sunlight_hours: Optional[float] = Field(default=None, ge=0, le=24)


class FitContext(BaseModel):
    """Everything the fit-scoring prompt needs about a plant and its site."""

    plant_name: str = Field(min_length=1, max_length=200)
    location: Location
    orientation: int = Field(ge=0, le=359, description="Plot orientation in degrees, 0 = north.")
    climate: ClimateSummary
    cell: CellPosition
    weather_monthly: list[MonthlyWeather] = Field(default_factory=list)

    @field_validator("plant_name", mode="before")
    @classmethod
    def _strip_plant_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


# ═══════════════════════════════════════════════════════════
# Results (output)
# ═══════════════════════════════════════════════════════════


class PlantCandidate(BaseModel):
    """One plant proposed by the model for a search query."""

    model_config = ConfigDict(frozen=True)

    name: str
    latin_name: Optional[str] = None
    source: Literal["ai"] = "ai"


class FitResult(BaseModel):
    """Per-metric and overall 1-5 fit scores with a written explanation."""

    model_config = ConfigDict(frozen=True)

    sunlight_score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    humidity_score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    precip_score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    temperature_score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    overall_score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    explanation: str = Field(min_length=MIN_EXPLANATION_LENGTH)

    @field_validator(*SCORE_FIELDS, mode="before")
    @classmethod
    def _json_integer(cls, v: Any) -> Any:
        # JSON integers only: 4 and 4.0 pass, true and "4" do not; 4.5 fails int parsing
        if isinstance(v, (bool, str)):
            raise ValueError("score must be a JSON integer")
        return v


class ConnectionStatus(BaseModel):
    """Outcome of a liveness probe against the provider."""

    success: bool
    model: Optional[str] = None
    error: Optional[str] = None
