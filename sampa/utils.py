"""Angle normalization and polynomial helpers shared by every pipeline stage."""

from __future__ import annotations

import math
from typing import Sequence

__all__ = [
    "SUN_RADIUS",
    "limit_degrees",
    "limit_degrees180",
    "limit_degrees180pm",
    "limit_minutes",
    "limit_zero2one",
    "polynomial",
]

SUN_RADIUS = 0.26667  # Apparent solar semidiameter at the horizon, degrees.


def limit_degrees(degrees: float) -> float:
    """Wrap an angle into ``[0, 360)``."""

    fraction = degrees / 360.0
    limited = 360.0 * (fraction - math.floor(fraction))
    if limited < 0:
        limited += 360.0
    elif limited >= 360.0:
        limited -= 360.0
    return limited


def limit_degrees180pm(degrees: float) -> float:
    """Wrap an angle into ``(-180, 180]``."""

    fraction = degrees / 360.0
    limited = 360.0 * (fraction - math.floor(fraction))
    if limited < -180.0:
        limited += 360.0
    elif limited > 180.0:
        limited -= 360.0
    return limited


def limit_degrees180(degrees: float) -> float:
    fraction = degrees / 180.0
    limited = 180.0 * (fraction - math.floor(fraction))
    if limited < 0:
        limited += 180.0
    return limited


def limit_zero2one(value: float) -> float:
    """Return the fractional part of *value* in ``[0, 1)``."""

    limited = value - math.floor(value)
    if limited < 0:
        limited += 1.0
    return limited


def limit_minutes(minutes: float) -> float:
    """Fold a time difference in minutes back into roughly ``[-20, 20]``."""

    if minutes < -20.0:
        return minutes + 1440.0
    if minutes > 20.0:
        return minutes - 1440.0
    return minutes


def polynomial(coefficients: Sequence[float], x: float) -> float:
    """Evaluate a polynomial by Horner's rule, highest order coefficient first."""

    result = 0.0
    for coefficient in coefficients:
        result = result * x + coefficient
    return result
