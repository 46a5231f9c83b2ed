"""Typed models for point-forecast summaries."""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .units import celsius_to_fahrenheit, kelvin_to_celsius, kelvin_to_fahrenheit


class TempUnit(str, Enum):
    """Temperature unit preference for display."""

    C = "C"
    F = "F"

    def toggled(self) -> TempUnit:
        return TempUnit.F if self is TempUnit.C else TempUnit.C


class Condition(str, Enum):
    """Coarse sky condition derived from precipitation type and cloud cover."""

    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"

    @property
    def icon(self) -> str:
        return _CONDITION_ICONS[self]


_CONDITION_ICONS = {
    Condition.CLEAR: "☀️",
    Condition.CLOUDY: "☁️",
    Condition.RAIN: "\U0001f327️",
}


class Coordinate(BaseModel):
    """Geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, value: float) -> float:
        if not math.isfinite(value) or not (-90 <= value <= 90):
            raise ValueError(f"Invalid latitude {value}; expected between -90 and 90.")
        return value

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, value: float) -> float:
        if not math.isfinite(value) or not (-180 <= value <= 180):
            raise ValueError(f"Invalid longitude {value}; expected between -180 and 180.")
        return value

    def label(self) -> str:
        """Fallback location label used when no locality name is known."""
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


class Temperature(BaseModel):
    """A temperature carried in both display units."""

    model_config = ConfigDict(frozen=True)

    celsius: float
    fahrenheit: float

    @classmethod
    def from_celsius(cls, celsius: float) -> Temperature:
        return cls(celsius=celsius, fahrenheit=celsius_to_fahrenheit(celsius))

    @classmethod
    def from_kelvin(cls, kelvin: float) -> Temperature:
        return cls(celsius=kelvin_to_celsius(kelvin), fahrenheit=kelvin_to_fahrenheit(kelvin))

    def in_unit(self, unit: TempUnit) -> float:
        return self.celsius if unit is TempUnit.C else self.fahrenheit


class HourlyForecast(BaseModel):
    """One forecast sample rendered for an hourly strip."""

    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    time: str
    temp: Temperature
    humidity: str
    condition: Condition


class DailyForecast(BaseModel):
    """Aggregate of all hourly samples falling on one local calendar day."""

    model_config = ConfigDict(frozen=True)

    day: str
    high_temp: Temperature
    low_temp: Temperature
    condition: Condition


class ForecastSummary(BaseModel):
    """Display-ready forecast handed to the presentation layer."""

    model_config = ConfigDict(frozen=True)

    location: str
    current_temp: Temperature
    current_humidity: str
    current_wind_speed: int
    hourly_forecast: tuple[HourlyForecast, ...] = Field(default_factory=tuple)
    daily_forecast: tuple[DailyForecast, ...] = Field(default_factory=tuple)

    @property
    def wind_speed_display(self) -> str:
        return f"{self.current_wind_speed} m/s"
