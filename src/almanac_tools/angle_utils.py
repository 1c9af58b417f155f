"""Sexagesimal angle parsing and formatting for right ascension and declination."""

from __future__ import annotations

import math
import re

from almanac_tools.constants import DEGREES_PER_HOUR_RA

_FIELD_SCALE = (1.0, 60.0, 3600.0)


def parse_angle(string: str) -> float | None:
    """Parse an angle given as one to three whitespace- or colon-separated fields.

    "12 30 45", "12:30:45", "-5 30" and "7.25" are accepted. Minutes and
    seconds must be non-negative; a leading minus applies to the whole angle.
    The result is in the units of the first field (hours or degrees).

    Parameters:
        string: Text to parse.

    Returns:
        Angle, or None if the text is not an angle.
    """
    s = string.strip()
    if not s:
        return None
    parts = [p for p in re.split(r'[\s:]+', s) if p]
    if not 1 <= len(parts) <= 3:
        return None
    try:
        values = [float(p) for p in parts]
    except ValueError:
        return None
    if any(v < 0.0 for v in values[1:]):
        return None
    angle = sum(abs(v) / scale for v, scale in zip(values, _FIELD_SCALE))
    return -angle if s.startswith('-') else angle


def dms_string(value: float, separator: str = '   ', ndecimal: int = 3) -> str:
    """Format an angle as degrees (or hours), minutes and seconds.

    Parameters:
        value: Angle in degrees, or hours for right ascension.
        separator: Three characters written after each field (e.g. 'hms', 'dms');
            shorter strings give blanks.
        ndecimal: Decimal places on the seconds.

    Returns:
        Text such as " 12h 30m 45.123s".
    """
    if len(separator) < 3:
        sep1 = sep2 = sep3 = ' '
    else:
        sep1, sep2, sep3 = separator[0], separator[1], separator[2]
    negative = value < 0
    ntens = 10**ndecimal
    units = round(abs(value) * 3600.0 * ntens)
    whole_sec, frac = divmod(units, ntens)
    whole_min, sec = divmod(whole_sec, 60)
    deg, minutes = divmod(whole_min, 60)
    lead = f'-{deg}' if negative else f'{deg}'
    frac_text = f'.{frac:0{ndecimal}d}' if ndecimal > 0 else ''
    return f'{lead:>3}{sep1} {minutes:02d}{sep2} {sec:02d}{frac_text}{sep3}'.rstrip()


def format_ra(ra: float, ndecimal: int = 3) -> str:
    """Right ascension (radians) as "hh mm ss.sss", reduced to [0, 24h)."""
    units_per_hour = 3600 * 10**ndecimal
    units = round(math.degrees(ra) / DEGREES_PER_HOUR_RA * units_per_hour)
    # Wrap after rounding so 23h 59m 59.9999s prints as 00h
    hours = (units % (24 * units_per_hour)) / units_per_hour
    return dms_string(hours, 'hms', ndecimal)


def format_dec(dec: float, ndecimal: int = 2) -> str:
    """Declination (radians) as signed "dd mm ss.ss"."""
    text = dms_string(math.degrees(dec), 'd\'"', ndecimal)
    if dec >= 0.0:
        text = '+' + text.lstrip()
    return text
