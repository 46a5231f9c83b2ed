"""Temperature conversions and display rounding."""

from __future__ import annotations

import math

KELVIN_OFFSET = 273.15


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - KELVIN_OFFSET


def kelvin_to_fahrenheit(kelvin: float) -> float:
    return kelvin * 9 / 5 - 459.67


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def round_half_up(value: float) -> int:
    """Round to the nearest whole number, halves away from zero.

    Built-in ``round`` uses banker's rounding, which would render a 50.5%
    humidity reading as 50%.
    """
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
