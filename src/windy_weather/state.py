"""Display state machine driving the forecast presentation layer."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TypeAlias

from .exceptions import WeatherProviderError
from .weather.aggregator import ForecastAggregator
from .weather.base import ForecastProvider
from .weather.models import Coordinate, ForecastSummary, TempUnit


@dataclass(frozen=True, slots=True)
class Empty:
    """Nothing has been fetched yet."""


@dataclass(frozen=True, slots=True)
class Loading:
    """A fetch is in flight."""


@dataclass(frozen=True, slots=True)
class Success:
    summary: ForecastSummary
    unit: TempUnit = TempUnit.C


@dataclass(frozen=True, slots=True)
class Error:
    message: str


DisplayState: TypeAlias = Empty | Loading | Success | Error
StateListener = Callable[[DisplayState], None]


class WeatherStateController:
    """Owns the single current DisplayState and runs the fetch pipeline.

    State changes are whole-value replacements under a lock, so readers never
    see a partially updated state. Overlapping fetches are not fenced: the
    last one to finish wins.
    """

    def __init__(
        self,
        provider: ForecastProvider,
        aggregator: ForecastAggregator,
        logger: logging.Logger,
    ) -> None:
        self.provider = provider
        self.aggregator = aggregator
        self.logger = logger
        self._lock = threading.Lock()
        self._state: DisplayState = Empty()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> DisplayState:
        with self._lock:
            return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state transitions; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def request_fetch(self, coordinate: Coordinate, api_key: str) -> DisplayState:
        """Run requester then aggregator, ending in Success or Error."""
        self._set_state(Loading())
        try:
            payload = self.provider.fetch_point_forecast(coordinate, api_key)
            summary = self.aggregator.aggregate(payload, coordinate)
        except WeatherProviderError as exc:
            self.logger.error("Forecast fetch failed: %s", exc)
            return self._set_state(Error(message=str(exc) or type(exc).__name__))
        self.logger.info(
            "Forecast ready for %s: %d hourly, %d daily entries",
            summary.location,
            len(summary.hourly_forecast),
            len(summary.daily_forecast),
            extra={"location": summary.location},
        )
        return self._set_state(Success(summary=summary, unit=TempUnit.C))

    def toggle_unit(self) -> DisplayState:
        """Flip the unit preference when showing a forecast; otherwise a no-op."""
        with self._lock:
            current = self._state
            if not isinstance(current, Success):
                return current
            new_state = replace(current, unit=current.unit.toggled())
            self._state = new_state
            listeners = list(self._listeners)
        self._notify(listeners, new_state)
        return new_state

    def _set_state(self, new_state: DisplayState) -> DisplayState:
        with self._lock:
            self._state = new_state
            listeners = list(self._listeners)
        self._notify(listeners, new_state)
        return new_state

    def _notify(self, listeners: list[StateListener], new_state: DisplayState) -> None:
        for listener in listeners:
            listener(new_state)
