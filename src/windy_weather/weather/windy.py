"""Windy point-forecast API provider."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from ..config import Settings
from ..exceptions import (
    ForecastAPIError,
    ForecastParseError,
    ForecastTransportError,
    WeatherProviderError,
)
from ..redaction import sanitize_text
from .base import ForecastProvider
from .models import Coordinate

WINDY_MODEL = "gfs"
WINDY_PARAMETERS = ("temp", "rh", "wind", "ptype", "lclouds", "mclouds", "hclouds")
WINDY_LEVELS = ("surface",)

_ERROR_BODY_LIMIT = 300


class WindyRequest(BaseModel):
    """JSON body accepted by the point-forecast endpoint."""

    lat: float
    lon: float
    model: str = WINDY_MODEL
    parameters: list[str] = Field(default_factory=lambda: list(WINDY_PARAMETERS))
    levels: list[str] = Field(default_factory=lambda: list(WINDY_LEVELS))
    key: str = Field(repr=False)


class WindyForecastProvider(ForecastProvider):
    """Posts point-forecast requests to api.windy.com and returns the raw payload."""

    provider_name = "windy"

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self.settings = settings
        self.logger = logger
        self._url = settings.forecast_url
        self._client = httpx.Client(
            timeout=settings.weather_timeout_seconds,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> WindyForecastProvider:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch_point_forecast(self, coordinate: Coordinate, api_key: str) -> dict[str, Any]:
        """POST one forecast request; no retries and no caching."""
        if not api_key:
            raise WeatherProviderError("Missing Windy API key.")

        body = WindyRequest(lat=coordinate.latitude, lon=coordinate.longitude, key=api_key)
        self.logger.info(
            "Requesting %s point forecast for %s",
            WINDY_MODEL,
            coordinate.label(),
            extra={"provider": self.provider_name},
        )
        try:
            response = self._client.post(self._url, json=body.model_dump())
        except httpx.HTTPError as exc:
            raise ForecastTransportError(
                f"Windy forecast request failed: {sanitize_text(str(exc)) or type(exc).__name__}"
            ) from exc

        if not response.is_success:
            raise ForecastAPIError(
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=sanitize_text(response.text[:_ERROR_BODY_LIMIT]),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ForecastParseError("Windy forecast returned a non-JSON response.") from exc

        if not isinstance(payload, dict):
            raise ForecastParseError(
                f"Windy forecast returned unexpected payload type {type(payload).__name__}."
            )
        self.logger.debug("Windy forecast returned %d fields", len(payload))
        return payload
