"""Point-forecast provider, geocoding and aggregation."""

from .aggregator import ForecastAggregator
from .base import ForecastProvider, ReverseGeocoder
from .geocoding import NominatimReverseGeocoder, NullReverseGeocoder, build_geocoder
from .models import (
    Condition,
    Coordinate,
    DailyForecast,
    ForecastSummary,
    HourlyForecast,
    Temperature,
    TempUnit,
)
from .windy import WindyForecastProvider

__all__ = [
    "Condition",
    "Coordinate",
    "DailyForecast",
    "ForecastAggregator",
    "ForecastProvider",
    "ForecastSummary",
    "HourlyForecast",
    "NominatimReverseGeocoder",
    "NullReverseGeocoder",
    "ReverseGeocoder",
    "Temperature",
    "TempUnit",
    "WindyForecastProvider",
    "build_geocoder",
]
