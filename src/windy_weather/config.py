"""Typed settings loader for the Windy weather client."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    windy_api_key: str = Field(alias="WINDY_API_KEY", repr=False)
    windy_api_base_url: AnyUrl = Field(
        default="https://api.windy.com",
        validate_default=True,
        alias="WINDY_API_BASE_URL",
    )
    windy_forecast_endpoint: str = Field(
        default="/api/point-forecast/v2",
        alias="WINDY_FORECAST_ENDPOINT",
    )
    weather_timeout_seconds: float = Field(default=15.0, alias="WEATHER_TIMEOUT_SECONDS")
    weather_default_lat: float | None = Field(default=None, alias="WEATHER_DEFAULT_LAT")
    weather_default_lon: float | None = Field(default=None, alias="WEATHER_DEFAULT_LON")

    geocoder_enabled: bool = Field(default=True, alias="GEOCODER_ENABLED")
    geocoder_base_url: AnyUrl = Field(
        default="https://nominatim.openstreetmap.org",
        validate_default=True,
        alias="GEOCODER_BASE_URL",
    )
    geocoder_user_agent: str = Field(
        default="windy-weather/0.1 (contact: weather@example.com)",
        alias="GEOCODER_USER_AGENT",
    )
    geocoder_timeout_seconds: float = Field(default=5.0, alias="GEOCODER_TIMEOUT_SECONDS")

    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")
    weather_raw_payload_dir: Path = Field(
        default=Path("./data/raw/weather"),
        alias="WEATHER_RAW_PAYLOAD_DIR",
    )
    weather_journal_raw_payloads: bool = Field(default=True, alias="WEATHER_JOURNAL_RAW_PAYLOADS")

    @field_validator("weather_default_lat", "weather_default_lon", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset optional coordinates."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @model_validator(mode="after")
    def validate_settings(self) -> Settings:
        """Cross-field checks that individual field types cannot express."""
        if not self.windy_api_key.strip():
            raise ValueError("WINDY_API_KEY must not be empty.")
        if not self.windy_forecast_endpoint.startswith("/"):
            raise ValueError("WINDY_FORECAST_ENDPOINT must start with '/'.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.geocoder_timeout_seconds <= 0:
            raise ValueError("GEOCODER_TIMEOUT_SECONDS must be > 0.")
        if self.geocoder_enabled and not self.geocoder_user_agent.strip():
            raise ValueError("GEOCODER_USER_AGENT must not be empty when geocoding is enabled.")

        has_default_lat = self.weather_default_lat is not None
        has_default_lon = self.weather_default_lon is not None
        if has_default_lat != has_default_lon:
            raise ValueError("WEATHER_DEFAULT_LAT and WEATHER_DEFAULT_LON must be set together.")
        if has_default_lat and not (
            math.isfinite(self.weather_default_lat) and -90 <= self.weather_default_lat <= 90
        ):
            raise ValueError("WEATHER_DEFAULT_LAT must be between -90 and 90.")
        if has_default_lon and not (
            math.isfinite(self.weather_default_lon) and -180 <= self.weather_default_lon <= 180
        ):
            raise ValueError("WEATHER_DEFAULT_LON must be between -180 and 180.")
        return self

    @property
    def forecast_url(self) -> str:
        return str(self.windy_api_base_url).rstrip("/") + self.windy_forecast_endpoint

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling (no credentials)."""
        return {
            "app_env": self.app_env,
            "forecast_url": self.forecast_url,
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "geocoder_enabled": self.geocoder_enabled,
            "geocoder_base_url": str(self.geocoder_base_url),
            "weather_raw_journaling": self.weather_journal_raw_payloads,
            "has_default_location": self.weather_default_lat is not None,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    settings.journal_dir.mkdir(parents=True, exist_ok=True)
    settings.weather_raw_payload_dir.mkdir(parents=True, exist_ok=True)
    return settings
