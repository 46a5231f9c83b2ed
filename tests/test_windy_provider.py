"""Tests for the Windy point-forecast requester."""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
import respx

from windy_weather.exceptions import (
    ForecastAPIError,
    ForecastParseError,
    ForecastTransportError,
    WeatherProviderError,
)
from windy_weather.weather.models import Coordinate
from windy_weather.weather.windy import WINDY_PARAMETERS, WindyForecastProvider

FORECAST_URL = "https://api.windy.com/api/point-forecast/v2"


def _make_settings(**overrides: Any) -> Any:
    defaults = {
        "forecast_url": FORECAST_URL,
        "weather_timeout_seconds": 5.0,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _make_provider(**settings_overrides: Any) -> WindyForecastProvider:
    return WindyForecastProvider(
        settings=_make_settings(**settings_overrides),
        logger=logging.getLogger("test_windy_provider"),
    )


@respx.mock
def test_posts_fixed_request_body(coordinate: Coordinate) -> None:
    payload = {"ts": [1700000000000], "temp-surface": [290.15]}
    route = respx.post(FORECAST_URL).mock(return_value=httpx.Response(200, json=payload))

    with _make_provider() as provider:
        result = provider.fetch_point_forecast(coordinate, "opaque-Key/123")

    assert result == payload
    assert route.call_count == 1
    body = json.loads(route.calls[0].request.content)
    assert body == {
        "lat": 40.7128,
        "lon": -74.006,
        "model": "gfs",
        "parameters": list(WINDY_PARAMETERS),
        "levels": ["surface"],
        "key": "opaque-Key/123",
    }
    assert body["parameters"] == ["temp", "rh", "wind", "ptype", "lclouds", "mclouds", "hclouds"]


@respx.mock
def test_non_2xx_raises_api_error_with_status_and_body(coordinate: Coordinate) -> None:
    respx.post(FORECAST_URL).mock(
        return_value=httpx.Response(400, text='{"message": "Invalid parameters"}')
    )
    with _make_provider() as provider:
        with pytest.raises(ForecastAPIError) as exc_info:
            provider.fetch_point_forecast(coordinate, "abc")

    assert exc_info.value.status_code == 400
    assert "Invalid parameters" in exc_info.value.body
    assert str(exc_info.value).startswith("HTTP 400: Bad Request - ")


@respx.mock
def test_api_error_body_is_redacted(coordinate: Coordinate) -> None:
    respx.post(FORECAST_URL).mock(
        return_value=httpx.Response(401, text='{"error": "unauthorized", "key": "leaked-secret"}')
    )
    with _make_provider() as provider:
        with pytest.raises(ForecastAPIError) as exc_info:
            provider.fetch_point_forecast(coordinate, "leaked-secret")
    assert "leaked-secret" not in str(exc_info.value)
    assert exc_info.value.status_code == 401


@respx.mock
def test_does_not_retry_server_errors(coordinate: Coordinate) -> None:
    route = respx.post(FORECAST_URL).mock(return_value=httpx.Response(503, text="busy"))
    with _make_provider() as provider:
        with pytest.raises(ForecastAPIError):
            provider.fetch_point_forecast(coordinate, "abc")
    assert route.call_count == 1


@pytest.mark.parametrize(
    "transport_error",
    [httpx.ConnectError, httpx.ReadTimeout],
)
def test_transport_errors_are_wrapped(
    coordinate: Coordinate, transport_error: type[httpx.HTTPError]
) -> None:
    with respx.mock:
        respx.post(FORECAST_URL).mock(side_effect=transport_error)
        with _make_provider() as provider:
            with pytest.raises(ForecastTransportError) as exc_info:
                provider.fetch_point_forecast(coordinate, "abc")
    assert isinstance(exc_info.value.__cause__, httpx.HTTPError)


@respx.mock
def test_non_json_response_raises_parse_error(coordinate: Coordinate) -> None:
    respx.post(FORECAST_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))
    with _make_provider() as provider:
        with pytest.raises(ForecastParseError, match="non-JSON"):
            provider.fetch_point_forecast(coordinate, "abc")


@respx.mock
def test_non_object_json_raises_parse_error(coordinate: Coordinate) -> None:
    respx.post(FORECAST_URL).mock(return_value=httpx.Response(200, json=[1, 2, 3]))
    with _make_provider() as provider:
        with pytest.raises(ForecastParseError, match="unexpected payload type list"):
            provider.fetch_point_forecast(coordinate, "abc")


def test_empty_api_key_rejected_before_request(coordinate: Coordinate) -> None:
    with _make_provider() as provider:
        with pytest.raises(WeatherProviderError, match="API key"):
            provider.fetch_point_forecast(coordinate, "")


@pytest.mark.parametrize(
    ("lat", "lon"),
    [(91.0, 0.0), (0.0, -181.0), (float("nan"), 0.0), (0.0, float("inf"))],
)
def test_coordinate_rejects_out_of_range_or_non_finite(lat: float, lon: float) -> None:
    with pytest.raises(ValueError):
        Coordinate(latitude=lat, longitude=lon)
