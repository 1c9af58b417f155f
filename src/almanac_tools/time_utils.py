"""Time conversion wrappers around rms-julian: UTC strings to JD (TDB) and back."""

from __future__ import annotations

import logging
import re

import julian

from almanac_tools.config import get_leapsecs_path
from almanac_tools.constants import (
    J2000,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
)

logger = logging.getLogger(__name__)

# Leap seconds loaded once at first use.
_leapsecs_loaded = False


def _ensure_leapsecs() -> None:
    """Load the leap seconds kernel if not already loaded.

    Uses the configured NAIF LSK when there is one; a missing or unreadable
    file falls back to the kernel bundled with rms-julian.
    """
    global _leapsecs_loaded
    if _leapsecs_loaded:
        return
    julian.set_ut_model('SPICE')
    path = get_leapsecs_path()
    if path is None:
        julian.load_lsk()
        _leapsecs_loaded = True
        return
    try:
        julian.load_lsk(path)
    except (OSError, KeyError, ValueError) as e:
        logger.info('Leap seconds from %s not used (%s); using rms-julian bundled LSK.', path, e)
        julian.load_lsk()
    _leapsecs_loaded = True


def parse_datetime(string: str) -> tuple[int, float] | None:
    """Parse a UTC date/time string.

    Parameters:
        string: Date/time in any format rms-julian accepts; a trailing ``Z``
            is allowed.

    Returns:
        (day, sec): days since 2000-01-01 and seconds into that day; None if
        the string cannot be parsed.
    """
    _ensure_leapsecs()
    candidates = [string]
    stripped = string.strip()
    if stripped.endswith(('Z', 'z')):
        candidates.append(stripped[:-1])
    year_hms = re.fullmatch(r'(\d{4})\s+(\d{1,2}:\d{2}:\d{2})', stripped)
    if year_hms is not None:
        year, hms = year_hms.groups()
        candidates.append(f'{year}-01-01 {hms}')
    for candidate in candidates:
        try:
            day, sec = julian.day_sec_from_string(candidate)[:2]
            return (int(day), float(sec))
        except (ValueError, TypeError, LookupError, OSError):
            continue
    return None


def tai_from_day_sec(day: int, sec: float) -> float:
    """UTC (day, sec) to TAI seconds."""
    _ensure_leapsecs()
    return float(julian.tai_from_day_sec(day, sec))


def tdb_from_tai(tai: float) -> float:
    """TAI seconds to TDB seconds past J2000."""
    return float(julian.tdb_from_tai(tai))


def tai_from_tdb(tdb: float) -> float:
    """TDB seconds past J2000 to TAI seconds."""
    return float(julian.tai_from_tdb(tdb))


def jd_tdb_from_tai(tai: float) -> float:
    """TAI seconds to Julian Date in TDB, the time argument of the ephemeris.

    Parameters:
        tai: TAI in seconds.

    Returns:
        JD (TDB).
    """
    return J2000 + tdb_from_tai(tai) / SECONDS_PER_DAY


def tai_from_jd_tdb(jd: float) -> float:
    """Julian Date in TDB to TAI seconds."""
    return tai_from_tdb((jd - J2000) * SECONDS_PER_DAY)


def jd_tdb_from_string(string: str) -> float:
    """Parse a UTC date/time string to JD (TDB).

    Raises:
        ValueError: The string is not a recognizable date/time.
    """
    parsed = parse_datetime(string)
    if parsed is None:
        raise ValueError(f'Invalid date/time {string!r}')
    day, sec = parsed
    return jd_tdb_from_tai(tai_from_day_sec(day, sec))


def format_utc(tai: float, fmt: str | None = None) -> str:
    """Format TAI seconds as a UTC string.

    Parameters:
        tai: TAI in seconds.
        fmt: Optional rms-julian format code; None for the default.
    """
    _ensure_leapsecs()
    if fmt is not None:
        return julian.format_tai(tai, fmt)
    return julian.format_tai(tai)


def format_jd_tdb(jd: float, fmt: str | None = None) -> str:
    """Format a JD (TDB) as a UTC string."""
    return format_utc(tai_from_jd_tdb(jd), fmt)


def interval_days(interval: float, time_unit: str) -> float:
    """Convert a step size in sec, min, hour or day to days.

    Parameters:
        interval: Step size (sign ignored).
        time_unit: 'sec', 'min', 'hour' or 'day' (case-insensitive prefix).

    Returns:
        Step in days.

    Raises:
        ValueError: Unknown unit or zero interval.
    """
    u = time_unit.strip().lower()
    if u.startswith('sec'):
        dsec = abs(interval)
    elif u.startswith('min'):
        dsec = abs(interval) * SECONDS_PER_MINUTE
    elif u.startswith('hour'):
        dsec = abs(interval) * SECONDS_PER_HOUR
    elif u.startswith('day'):
        dsec = abs(interval) * SECONDS_PER_DAY
    else:
        raise ValueError(f'Invalid time_unit {time_unit!r}; expected one of sec, min, hour, day')
    if dsec == 0.0:
        raise ValueError('Interval must be non-zero')
    return dsec / SECONDS_PER_DAY
