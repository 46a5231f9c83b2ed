"""Provider-agnostic forecast and geocoding interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import Coordinate


class ForecastProvider(ABC):
    """Contract for point-forecast sources feeding the aggregator."""

    @abstractmethod
    def fetch_point_forecast(self, coordinate: Coordinate, api_key: str) -> dict[str, Any]:
        """Issue one forecast request and return the raw JSON payload."""

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""


class ReverseGeocoder(ABC):
    """Best-effort lookup of a human-readable place name."""

    @abstractmethod
    def locality(self, coordinate: Coordinate) -> str | None:
        """Return the locality name for a coordinate, or None when unknown."""

    def close(self) -> None:
        """Release geocoder resources; stateless geocoders have nothing to release."""
