"""Reverse geocoders used to label forecast locations."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import GeocodingError
from .base import ReverseGeocoder
from .models import Coordinate

# Most to least specific; the first non-empty one wins.
_LOCALITY_FIELDS = ("city", "town", "village", "municipality", "county")


class NullReverseGeocoder(ReverseGeocoder):
    """Geocoder used when lookups are disabled; never knows a name."""

    def locality(self, coordinate: Coordinate) -> str | None:
        return None


class NominatimReverseGeocoder(ReverseGeocoder):
    """Looks up locality names through the OpenStreetMap Nominatim API."""

    def __init__(self, settings: Settings, logger: logging.Logger) -> None:
        self.logger = logger
        self._client = httpx.Client(
            base_url=str(settings.geocoder_base_url),
            timeout=settings.geocoder_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.geocoder_user_agent,
            },
        )

    def __enter__(self) -> NominatimReverseGeocoder:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def locality(self, coordinate: Coordinate) -> str | None:
        params = {
            "format": "jsonv2",
            "lat": f"{coordinate.latitude:.6f}",
            "lon": f"{coordinate.longitude:.6f}",
            "zoom": "10",
        }
        try:
            response = self._client.get("/reverse", params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise GeocodingError(
                f"Reverse geocoding failed with status {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Reverse geocoding request failed: {exc}") from exc
        except ValueError as exc:
            raise GeocodingError("Reverse geocoding returned a non-JSON response.") from exc

        if not isinstance(payload, dict):
            return None
        address = payload.get("address")
        if not isinstance(address, dict):
            return None
        for field in _LOCALITY_FIELDS:
            value = address.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None


def build_geocoder(settings: Settings, logger: logging.Logger) -> ReverseGeocoder:
    """Return the configured geocoder implementation."""
    if not settings.geocoder_enabled:
        return NullReverseGeocoder()
    return NominatimReverseGeocoder(settings=settings, logger=logger)
