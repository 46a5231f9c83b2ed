"""Terminal client for Windy point forecasts."""

__version__ = "0.1.0"
