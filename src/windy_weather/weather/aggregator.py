"""Turn raw point-forecast time series into current, hourly and daily summaries."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime, tzinfo
from typing import Any

from ..exceptions import ForecastParseError
from .base import ReverseGeocoder
from .models import (
    Condition,
    Coordinate,
    DailyForecast,
    ForecastSummary,
    HourlyForecast,
    Temperature,
)
from .units import round_half_up

HOURLY_FORECAST_LIMIT = 9  # current hour plus the next 8
DAILY_FORECAST_LIMIT = 6
CLOUD_COVER_THRESHOLD = 50.0

TIMESTAMP_FIELD = "ts"
TEMPERATURE_FIELD = "temp-surface"
HUMIDITY_FIELD = "rh-surface"
WIND_U_FIELD = "wind_u-surface"
WIND_V_FIELD = "wind_v-surface"
PRECIP_TYPE_FIELD = "ptype-surface"
CLOUD_FIELDS = ("lclouds-surface", "mclouds-surface", "hclouds-surface")

REQUIRED_FIELDS = (TIMESTAMP_FIELD, TEMPERATURE_FIELD, HUMIDITY_FIELD, WIND_U_FIELD, WIND_V_FIELD)
OPTIONAL_FIELDS = (PRECIP_TYPE_FIELD, *CLOUD_FIELDS)


def classify_condition(
    ptype: float,
    low_clouds: float,
    mid_clouds: float,
    high_clouds: float,
) -> Condition:
    """Precipitation wins over cloud cover, cloud cover over clear sky."""
    if ptype > 0:
        return Condition.RAIN
    if max(low_clouds, mid_clouds, high_clouds) > CLOUD_COVER_THRESHOLD:
        return Condition.CLOUDY
    return Condition.CLEAR


def hour_label(moment: datetime) -> str:
    """Render an hour as ``3pm`` / ``12am``."""
    hour = moment.hour % 12 or 12
    suffix = "am" if moment.hour < 12 else "pm"
    return f"{hour}{suffix}"


def most_common_condition(conditions: Sequence[Condition]) -> Condition:
    """Most frequent condition; ties go to whichever appeared first."""
    counts = Counter(conditions)
    # Counter preserves insertion order and max() keeps the first maximal item.
    return max(counts, key=lambda condition: counts[condition])


class ForecastAggregator:
    """Builds a ForecastSummary from a Windy point-forecast payload.

    ``tz`` selects the time zone used for hour labels and day grouping; it
    defaults to the machine's local zone.
    """

    def __init__(
        self,
        geocoder: ReverseGeocoder,
        logger: logging.Logger,
        *,
        tz: tzinfo | None = None,
        hourly_limit: int = HOURLY_FORECAST_LIMIT,
        daily_limit: int = DAILY_FORECAST_LIMIT,
    ) -> None:
        self.geocoder = geocoder
        self.logger = logger
        self.tz = tz
        self.hourly_limit = hourly_limit
        self.daily_limit = daily_limit

    def aggregate(self, payload: dict[str, Any], coordinate: Coordinate) -> ForecastSummary:
        series = self._extract_series(payload)
        timestamps = [int(value) for value in series[TIMESTAMP_FIELD]]
        moments = self._local_moments(timestamps)
        location = self._resolve_location(coordinate)

        hourly = [
            self._hourly_entry(series, index, timestamps[index], moments[index])
            for index in range(len(timestamps))
        ]

        wind_speed = math.hypot(series[WIND_U_FIELD][0], series[WIND_V_FIELD][0])
        return ForecastSummary(
            location=location,
            current_temp=hourly[0].temp,
            current_humidity=hourly[0].humidity,
            current_wind_speed=round_half_up(wind_speed),
            hourly_forecast=tuple(hourly[: self.hourly_limit]),
            daily_forecast=tuple(self._group_by_day(hourly, moments)[: self.daily_limit]),
        )

    def _resolve_location(self, coordinate: Coordinate) -> str:
        try:
            locality = self.geocoder.locality(coordinate)
        except Exception as exc:  # best-effort collaborator; never fails the fetch
            self.logger.warning(
                "Reverse geocoding failed for %s: %s", coordinate.label(), exc
            )
            return coordinate.label()
        if not locality:
            return coordinate.label()
        return locality

    def _extract_series(self, payload: dict[str, Any]) -> dict[str, list[float]]:
        missing = [name for name in REQUIRED_FIELDS if name not in payload]
        if missing:
            raise ForecastParseError(
                f"Forecast payload missing required series: {', '.join(missing)}."
            )

        series: dict[str, list[float]] = {}
        for name in (*REQUIRED_FIELDS, *OPTIONAL_FIELDS):
            if name not in payload:
                continue
            series[name] = self._numeric_series(name, payload[name])

        expected = len(series[TIMESTAMP_FIELD])
        if expected == 0:
            raise ForecastParseError("Forecast payload contained no samples.")
        misaligned = {name: len(values) for name, values in series.items() if len(values) != expected}
        if misaligned:
            detail = ", ".join(f"{name}={length}" for name, length in misaligned.items())
            raise ForecastParseError(
                f"Forecast series lengths do not match {TIMESTAMP_FIELD}={expected}: {detail}."
            )

        for name in OPTIONAL_FIELDS:
            series.setdefault(name, [0.0] * expected)
        return series

    @staticmethod
    def _numeric_series(name: str, values: Any) -> list[float]:
        if not isinstance(values, list):
            raise ForecastParseError(
                f"Forecast series '{name}' is {type(values).__name__}, expected a list."
            )
        parsed: list[float] = []
        for index, value in enumerate(values):
            # bool is an int subclass but never a valid sample.
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ForecastParseError(
                    f"Forecast series '{name}' has non-numeric value at index {index}."
                )
            try:
                finite = math.isfinite(value)
            except OverflowError:
                finite = False
            if not finite:
                raise ForecastParseError(
                    f"Forecast series '{name}' has non-finite value at index {index}."
                )
            parsed.append(float(value))
        return parsed

    def _local_moments(self, timestamps: Sequence[int]) -> list[datetime]:
        moments: list[datetime] = []
        for index, timestamp_ms in enumerate(timestamps):
            try:
                moments.append(self._to_local(timestamp_ms))
            except (OverflowError, OSError, ValueError) as exc:
                raise ForecastParseError(
                    f"Forecast series '{TIMESTAMP_FIELD}' has out-of-range timestamp "
                    f"at index {index}."
                ) from exc
        return moments

    def _to_local(self, timestamp_ms: int) -> datetime:
        moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=self.tz)
        if self.tz is None:
            return moment.astimezone()
        return moment

    def _hourly_entry(
        self,
        series: dict[str, list[float]],
        index: int,
        timestamp_ms: int,
        moment: datetime,
    ) -> HourlyForecast:
        low, mid, high = (series[name][index] for name in CLOUD_FIELDS)
        return HourlyForecast(
            timestamp_ms=timestamp_ms,
            time=hour_label(moment),
            temp=Temperature.from_kelvin(series[TEMPERATURE_FIELD][index]),
            humidity=f"{round_half_up(series[HUMIDITY_FIELD][index])}%",
            condition=classify_condition(series[PRECIP_TYPE_FIELD][index], low, mid, high),
        )

    @staticmethod
    def _group_by_day(
        hourly: Sequence[HourlyForecast],
        moments: Sequence[datetime],
    ) -> list[DailyForecast]:
        groups: dict[date, list[HourlyForecast]] = {}
        day_names: dict[date, str] = {}
        for entry, moment in zip(hourly, moments, strict=True):
            day = moment.date()
            groups.setdefault(day, []).append(entry)
            day_names.setdefault(day, moment.strftime("%A"))

        daily: list[DailyForecast] = []
        for day, entries in groups.items():
            celsius = [entry.temp.celsius for entry in entries]
            daily.append(
                DailyForecast(
                    day=day_names[day],
                    high_temp=Temperature.from_celsius(max(celsius)),
                    low_temp=Temperature.from_celsius(min(celsius)),
                    condition=most_common_condition([entry.condition for entry in entries]),
                )
            )
        return daily
