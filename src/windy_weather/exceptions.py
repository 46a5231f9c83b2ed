"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""


class WeatherProviderError(Exception):
    """Raised when weather provider input or requests are invalid."""


class ForecastError(WeatherProviderError):
    """Base class for failures that end a forecast fetch in the error state."""


class ForecastTransportError(ForecastError):
    """Raised when the forecast request never got a response (DNS, timeout, reset)."""


class ForecastAPIError(ForecastError):
    """Raised when the forecast provider rejects the request with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"HTTP {status_code}: {reason} - {body}")


class ForecastParseError(ForecastError):
    """Raised when a forecast payload is missing fields or has misaligned arrays."""


class GeocodingError(Exception):
    """Raised when a reverse-geocoding lookup fails."""
