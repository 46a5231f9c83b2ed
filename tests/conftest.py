"""Shared fixtures for forecast tests."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from windy_weather.weather.base import ReverseGeocoder
from windy_weather.weather.models import Coordinate

HOUR_MS = 3_600_000


class StaticGeocoder(ReverseGeocoder):
    def __init__(self, name: str | None) -> None:
        self.name = name
        self.calls: list[Coordinate] = []

    def locality(self, coordinate: Coordinate) -> str | None:
        self.calls.append(coordinate)
        return self.name


class FailingGeocoder(ReverseGeocoder):
    def locality(self, coordinate: Coordinate) -> str | None:
        raise OSError("geocoder offline")


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def make_payload(
    kelvins: list[float],
    *,
    start: datetime = datetime(2026, 2, 24, 0, 0, tzinfo=UTC),
    step: timedelta = timedelta(hours=1),
    **overrides: list[Any],
) -> dict[str, Any]:
    """Build an aligned Windy-style payload with neutral defaults."""
    count = len(kelvins)
    payload: dict[str, Any] = {
        "ts": [epoch_ms(start + step * index) for index in range(count)],
        "temp-surface": list(kelvins),
        "rh-surface": [60.0] * count,
        "wind_u-surface": [3.0] * count,
        "wind_v-surface": [4.0] * count,
        "ptype-surface": [0] * count,
        "lclouds-surface": [0.0] * count,
        "mclouds-surface": [0.0] * count,
        "hclouds-surface": [0.0] * count,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("test_windy_weather")


@pytest.fixture
def coordinate() -> Coordinate:
    return Coordinate(latitude=40.7128, longitude=-74.006)
