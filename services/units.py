"""Temperature validation and unit conversion onto canonical Celsius."""

from __future__ import annotations

import math
from enum import Enum
from numbers import Real
from typing import Any, Union

from services.errors import InvalidArgumentError


class TemperatureUnit(str, Enum):
    celsius = "celsius"
    fahrenheit = "fahrenheit"

    @classmethod
    def parse(cls, value: Union["TemperatureUnit", str]) -> "TemperatureUnit":
        if isinstance(value, cls):
            return value
        candidate = str(value).strip().lower()
        aliases = {"c": cls.celsius, "f": cls.fahrenheit}
        if candidate in aliases:
            return aliases[candidate]
        try:
            return cls(candidate)
        except ValueError as exc:
            raise InvalidArgumentError(f"Unsupported temperature unit {value!r}.") from exc


def require_finite(value: Any) -> float:
    """Return ``value`` as a float, rejecting missing, boolean and non-finite input."""
    if value is None:
        raise InvalidArgumentError("Temperature is required.")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgumentError(f"Temperature must be a number, got {value!r}.")
    result = float(value)
    if not math.isfinite(result):
        raise InvalidArgumentError(f"Temperature must be finite, got {value!r}.")
    return result


def to_celsius(value: float, unit: Union[TemperatureUnit, str] = TemperatureUnit.celsius) -> float:
    """Convert ``value`` into Celsius. Finite input always maps to a finite result."""
    if TemperatureUnit.parse(unit) is TemperatureUnit.fahrenheit:
        return (value - 32.0) * (5.0 / 9.0)
    return value


def to_fahrenheit(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0
