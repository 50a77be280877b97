"""
Centralized configuration for the plant advisor client.

Environment settings are loaded with Pydantic Settings (and .env via dotenv);
ClientConfig is the validated, frozen view the OpenRouter client runs on.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

_repo_root = Path(__file__).resolve().parent.parent
load_dotenv(_repo_root / ".env")

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_APP_NAME = "PlantsPlanner"


class OpenRouterSettings(BaseSettings):
    """OpenRouter credentials, model identifiers and sampling parameters."""

    api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="OPENROUTER_BASE_URL")

    # One model per task; both may point at the same identifier.
    search_model: str = Field(default=DEFAULT_MODEL, alias="OPENROUTER_SEARCH_MODEL")
    fit_model: str = Field(default=DEFAULT_MODEL, alias="OPENROUTER_FIT_MODEL")

    timeout: float = Field(default=10.0, alias="OPENROUTER_TIMEOUT", description="Seconds per attempt.")
    max_retries: int = Field(default=1, alias="OPENROUTER_MAX_RETRIES")
    temperature: float = Field(default=0.7, alias="OPENROUTER_TEMPERATURE")
    top_p: float = Field(default=1.0, alias="OPENROUTER_TOP_P")
    max_tokens: int = Field(default=1000, alias="OPENROUTER_MAX_TOKENS")

    # Sent as HTTP-Referer / X-Title so the provider can attribute traffic
    app_name: str = Field(default=DEFAULT_APP_NAME, alias="OPENROUTER_APP_NAME")
    site_url: str = Field(default="", alias="OPENROUTER_SITE_URL")


class ObservabilityConfig(BaseSettings):
    """Logging and Prometheus metrics."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    metrics_enabled: bool = Field(default=False, alias="PROMETHEUS_METRICS_ENABLED")
    metrics_port: int = Field(default=8000, alias="PROMETHEUS_METRICS_PORT")


class Settings(BaseSettings):
    """Root settings container; access all config from one object."""

    openrouter: OpenRouterSettings = Field(default_factory=OpenRouterSettings)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton settings instance. Cached after first call."""
    return Settings()


class ClientConfig(BaseModel):
    """
    Fully populated, validated OpenRouter client configuration.

    Defaults are applied for everything except the credential and the two
    model identifiers. Every invariant is checked at construction; the
    instance is frozen afterwards.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    api_key: str
    search_model: str
    fit_model: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    max_retries: int = 1
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1000
    app_name: str = DEFAULT_APP_NAME
    site_url: str = ""

    @field_validator("base_url", mode="before")
    @classmethod
    def _default_base_url(cls, v: Optional[str]) -> str:
        if not v or not str(v).strip():
            return DEFAULT_BASE_URL
        return str(v).strip().rstrip("/")

    @field_validator("app_name", mode="before")
    @classmethod
    def _default_app_name(cls, v: Optional[str]) -> str:
        return v or DEFAULT_APP_NAME

    @field_validator("site_url", mode="before")
    @classmethod
    def _default_site_url(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("api_key", "search_model", "fit_model")
    @classmethod
    def _not_empty(cls, v: str, info: ValidationInfo) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be > 0")
        return v

    @field_validator("max_retries")
    @classmethod
    def _non_negative_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_retries must be >= 0")
        return v

    @field_validator("temperature")
    @classmethod
    def _temperature_range(cls, v: float) -> float:
        if v < 0 or v > 2:
            raise ValueError("temperature must be between 0 and 2")
        return v

    @field_validator("top_p")
    @classmethod
    def _top_p_range(cls, v: float) -> float:
        if v < 0 or v > 1:
            raise ValueError("top_p must be between 0 and 1")
        return v

    @field_validator("max_tokens")
    @classmethod
    def _positive_max_tokens(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_tokens must be > 0")
        return v

    @classmethod
    def from_settings(cls, settings: Optional[OpenRouterSettings] = None) -> ClientConfig:
        """Build a client config from environment settings (get_settings() when omitted)."""
        s = settings if settings is not None else get_settings().openrouter
        return cls(
            api_key=s.api_key,
            base_url=s.base_url,
            search_model=s.search_model,
            fit_model=s.fit_model,
            timeout=s.timeout,
            max_retries=s.max_retries,
            temperature=s.temperature,
            top_p=s.top_p,
            max_tokens=s.max_tokens,
            app_name=s.app_name,
            site_url=s.site_url,
        )
