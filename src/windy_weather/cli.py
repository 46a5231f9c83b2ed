"""CLI: fetch a Windy point forecast, journal the run, and render it."""

from __future__ import annotations

import argparse
import sys
import uuid
from typing import Any, assert_never

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import Settings, load_settings
from .exceptions import ConfigError, JournalError, WeatherProviderError
from .journal import ForecastEvent, JournalWriter
from .log_setup import setup_logger
from .state import DisplayState, Empty, Error, Loading, Success, WeatherStateController
from .weather.aggregator import DAILY_FORECAST_LIMIT, HOURLY_FORECAST_LIMIT, ForecastAggregator
from .weather.base import ForecastProvider
from .weather.geocoding import build_geocoder
from .weather.models import Coordinate, Temperature, TempUnit
from .weather.windy import WindyForecastProvider


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse weather CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch and display a Windy point forecast for a location."
    )
    parser.add_argument("--lat", type=float, default=None, help="Latitude in decimal degrees.")
    parser.add_argument("--lon", type=float, default=None, help="Longitude in decimal degrees.")
    parser.add_argument(
        "--unit",
        choices=[unit.value for unit in TempUnit],
        default=TempUnit.C.value,
        help="Temperature unit to display.",
    )
    parser.add_argument(
        "--hours",
        type=int,
        default=None,
        help=f"Number of hourly entries to print (max {HOURLY_FORECAST_LIMIT}).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help=f"Number of daily entries to print (max {DAILY_FORECAST_LIMIT}).",
    )
    return parser.parse_args(argv)


def _validate_cli_input(args: argparse.Namespace, settings: Settings) -> Coordinate:
    for flag, value in (("--hours", args.hours), ("--days", args.days)):
        if value is not None and value <= 0:
            raise WeatherProviderError(f"{flag} must be > 0 when provided.")

    lat = args.lat if args.lat is not None else settings.weather_default_lat
    lon = args.lon if args.lon is not None else settings.weather_default_lon
    if lat is None or lon is None:
        raise WeatherProviderError(
            "Missing location input: pass --lat and --lon, or set WEATHER_DEFAULT_LAT/LON."
        )
    try:
        return Coordinate(latitude=lat, longitude=lon)
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        raise WeatherProviderError(messages) from exc


def _format_temp(temp: Temperature, unit: TempUnit) -> str:
    return f"{temp.in_unit(unit):.0f}°{unit.value}"


def render_state(
    console: Console,
    state: DisplayState,
    *,
    max_hours: int = HOURLY_FORECAST_LIMIT,
    max_days: int = DAILY_FORECAST_LIMIT,
) -> None:
    """Render whichever display state the controller currently holds."""
    if isinstance(state, Empty):
        console.print("No forecast requested yet.")
    elif isinstance(state, Loading):
        console.print("Loading forecast...")
    elif isinstance(state, Error):
        console.print(Panel(Text(state.message), title="Forecast error", border_style="red"))
    elif isinstance(state, Success):
        _render_summary(console, state, max_hours=max_hours, max_days=max_days)
    else:
        assert_never(state)


def _render_summary(console: Console, state: Success, *, max_hours: int, max_days: int) -> None:
    summary = state.summary
    unit = state.unit
    console.print(
        Panel(
            f"[bold]{_format_temp(summary.current_temp, unit)}[/bold]\n"
            f"Humidity {summary.current_humidity} | Wind {summary.wind_speed_display}",
            title=escape(summary.location),
        )
    )

    if summary.hourly_forecast:
        hourly = Table(title="Hourly")
        hourly.add_column("Time")
        hourly.add_column("")
        hourly.add_column("Temp", justify="right")
        hourly.add_column("Humidity", justify="right")
        for entry in summary.hourly_forecast[:max_hours]:
            hourly.add_row(
                entry.time,
                entry.condition.icon,
                _format_temp(entry.temp, unit),
                entry.humidity,
            )
        console.print(hourly)

    if summary.daily_forecast:
        daily = Table(title="Daily")
        daily.add_column("Day")
        daily.add_column("")
        daily.add_column("High", justify="right")
        daily.add_column("Low", justify="right")
        for day in summary.daily_forecast[:max_days]:
            daily.add_row(
                day.day,
                day.condition.icon,
                _format_temp(day.high_temp, unit),
                _format_temp(day.low_temp, unit),
            )
        console.print(daily)


class _JournalingProvider(ForecastProvider):
    """Snapshots every raw payload to the journal before it reaches the aggregator."""

    def __init__(self, inner: ForecastProvider, journal: JournalWriter) -> None:
        self._inner = inner
        self._journal = journal

    def fetch_point_forecast(self, coordinate: Coordinate, api_key: str) -> dict[str, Any]:
        payload = self._inner.fetch_point_forecast(coordinate, api_key)
        self._journal.write_raw_snapshot("point_forecast", payload)
        return payload

    def close(self) -> None:
        self._inner.close()


def main(argv: list[str] | None = None) -> int:
    """Run the forecast fetch flow."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()
    session_id = uuid.uuid4().hex[:12]
    journal: JournalWriter | None = None

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger = setup_logger(level=settings.log_level)
    logger.info("Forecast run starting", extra={"session_id": session_id})

    try:
        journal = JournalWriter(
            journal_dir=settings.journal_dir,
            raw_payload_dir=settings.weather_raw_payload_dir,
            session_id=session_id,
        )
        journal.write_event(
            ForecastEvent.STARTUP,
            payload={"settings": settings.safe_summary(), "unit": args.unit},
        )
    except JournalError as exc:
        logger.error("Failed to initialize forecast journal: %s", exc)
        return 3

    exit_code = 0
    try:
        coordinate = _validate_cli_input(args, settings)
        journal.write_event(
            ForecastEvent.REQUEST_START,
            payload=coordinate.model_dump(mode="json"),
        )

        geocoder = build_geocoder(settings, logger)
        try:
            with WindyForecastProvider(settings=settings, logger=logger) as windy:
                provider: ForecastProvider = windy
                if settings.weather_journal_raw_payloads:
                    provider = _JournalingProvider(windy, journal)
                controller = WeatherStateController(
                    provider=provider,
                    aggregator=ForecastAggregator(geocoder=geocoder, logger=logger),
                    logger=logger,
                )
                state = controller.request_fetch(coordinate, settings.windy_api_key)
                if TempUnit(args.unit) is not TempUnit.C:
                    state = controller.toggle_unit()
        finally:
            geocoder.close()

        if isinstance(state, Success):
            journal.write_event(
                ForecastEvent.SUMMARY,
                payload=state.summary.model_dump(mode="json"),
            )
        elif isinstance(state, Error):
            exit_code = 4
            journal.write_failure(state.message)

        render_state(
            console,
            state,
            max_hours=args.hours or HOURLY_FORECAST_LIMIT,
            max_days=args.days or DAILY_FORECAST_LIMIT,
        )
    except (WeatherProviderError, JournalError) as exc:
        exit_code = 4
        logger.error("Forecast run failure: %s", exc)
        try:
            journal.write_failure(exc)
        except JournalError:
            logger.error("Failed to write forecast_request_failure event.")
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        exit_code = 99
        logger.exception("Unexpected forecast CLI failure: %s", exc)
        try:
            journal.write_failure(exc, unhandled=True)
        except JournalError:
            logger.error("Failed to write forecast_request_failure_unhandled event.")
    finally:
        if journal is not None:
            try:
                journal.write_event(
                    ForecastEvent.SHUTDOWN,
                    payload={"exit_code": exit_code},
                )
            except JournalError:
                logger.error("Failed to write forecast_shutdown event.")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
