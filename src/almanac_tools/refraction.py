"""Atmospheric refraction near the horizon (Bennett and Saemundsson formulae).

Not applied by the apparent-place pipeline; callers correct altitudes
themselves.
"""

from __future__ import annotations

import math

STANDARD_TEMPERATURE_C = 10.0
STANDARD_PRESSURE_MBAR = 1010.0


def _scale(temperature: float, pressure: float) -> float:
    """Density correction relative to 10 C and 1010 mbar."""
    return 0.28 * pressure / (temperature + 273.0)


def apparent_refraction(
    altitude: float,
    temperature: float = STANDARD_TEMPERATURE_C,
    pressure: float = STANDARD_PRESSURE_MBAR,
) -> float:
    """Refraction to subtract from an apparent (observed) altitude.

    Parameters:
        altitude: Apparent altitude in radians.
        temperature: Air temperature in degrees C.
        pressure: Air pressure in mbar.

    Returns:
        Refraction in radians.
    """
    a = math.degrees(altitude)
    arcmin = 1.0 / math.tan(math.radians(a + 7.31 / (a + 4.4)))
    return math.radians(arcmin * _scale(temperature, pressure) / 60.0)


def geometric_refraction(
    altitude: float,
    temperature: float = STANDARD_TEMPERATURE_C,
    pressure: float = STANDARD_PRESSURE_MBAR,
) -> float:
    """Refraction to add to a true (geometric) altitude.

    Parameters:
        altitude: True altitude in radians.
        temperature: Air temperature in degrees C.
        pressure: Air pressure in mbar.

    Returns:
        Refraction in radians.
    """
    a = math.degrees(altitude)
    arcmin = 1.02 / math.tan(math.radians(a + 10.3 / (a + 5.11)))
    return math.radians(arcmin * _scale(temperature, pressure) / 60.0)


refraction = geometric_refraction
