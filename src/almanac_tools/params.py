"""Request parameters for apparent-place tables (CLI, environment, API)."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import TextIO

from almanac_tools.config import get_ephemeris_path
from almanac_tools.constants import BODY_NAME_TO_CODE, EARTH, SUN, body_name
from almanac_tools.observer import Place
from almanac_tools.time_utils import jd_tdb_from_string

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1.0
DEFAULT_TIME_UNIT = 'day'

_GEOCENTRE_NAMES = {'earth', 'geocentre', 'geocenter', "earth's center", 'earths center'}


@dataclass
class ObserverLocation:
    """Where the observer stands: the geocentre, or a geodetic position.

    Latitude and longitude are in degrees (east positive), altitude in metres.
    """

    latitude_deg: float | None = None
    longitude_deg: float | None = None
    altitude_m: float = 0.0

    @property
    def is_geocentric(self) -> bool:
        return self.latitude_deg is None or self.longitude_deg is None

    def to_place(self) -> Place | None:
        """Place for a terrestrial observer; None at the geocentre."""
        lat, lon = self.latitude_deg, self.longitude_deg
        if lat is None or lon is None:
            return None
        return Place.from_degrees(lat, lon, self.altitude_m)


@dataclass
class ApparentPlaceParams:
    """One apparent-place request: a body over a range of times."""

    body: int
    start_time: str
    stop_time: str | None = None
    interval: float = DEFAULT_INTERVAL
    time_unit: str = DEFAULT_TIME_UNIT
    ephemeris_path: str = field(default_factory=get_ephemeris_path)
    observer: ObserverLocation = field(default_factory=ObserverLocation)
    of_date: bool = True
    output: TextIO | None = None


def parse_body(value: str) -> int:
    """Parse a body specifier: a name (mercury..sun, earth, emb) or component index 0-10.

    Parameters:
        value: Body name (case-insensitive) or integer index.

    Returns:
        Body code (EARTH for the geocentre).

    Raises:
        ValueError: Unknown body.
    """
    v = value.strip()
    try:
        num = int(v)
    except ValueError:
        num = None
    if num is not None:
        if 0 <= num <= SUN:
            return num
        raise ValueError(f'body index must be 0-{SUN}, got {num}')
    key = v.lower()
    if key in BODY_NAME_TO_CODE:
        return BODY_NAME_TO_CODE[key]
    raise ValueError(f'Unknown body {value!r}; use 0-{SUN} or a name: ' + ', '.join(BODY_NAME_TO_CODE))


def parse_observer(tokens: list[str]) -> ObserverLocation:
    """Parse observer tokens: empty or ``earth`` for the geocentre, else ``lat lon alt``.

    Parameters:
        tokens: CLI tokens. A numeric triplet gives latitude and east longitude
            in degrees and altitude in metres.

    Returns:
        ObserverLocation.

    Raises:
        ValueError: Tokens are neither a geocentre name nor a valid triplet.
    """
    normalized = [tok.strip() for tok in tokens if tok.strip()]
    if not normalized:
        return ObserverLocation()
    if ' '.join(normalized).lower() in _GEOCENTRE_NAMES:
        return ObserverLocation()
    if len(normalized) != 3:
        raise ValueError('Observer requires three numeric tokens: lat lon alt')
    try:
        lat, lon, alt = (float(tok) for tok in normalized)
    except ValueError as e:
        raise ValueError(f'Observer tokens must be numeric: {normalized!r}') from e
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f'Observer latitude must be in [-90, 90], got {lat}')
    return ObserverLocation(latitude_deg=lat, longitude_deg=lon, altitude_m=alt)


def parse_time(value: str) -> float:
    """Parse a time as a JD (TDB) number, optionally prefixed ``JD``, or a UTC string.

    Raises:
        ValueError: Not a finite number and not a recognizable date/time.
    """
    v = value.strip()
    number = v[2:].strip() if v.upper().startswith('JD') else v
    try:
        jd = float(number)
    except ValueError:
        return jd_tdb_from_string(v)
    if not math.isfinite(jd):
        raise ValueError(f'Time must be a finite Julian Date, got {value!r}')
    return jd


def _get_env(key: str, default: str = '') -> str:
    """Get environment variable, stripped."""
    return os.environ.get(key, default).strip()


def _optional_float(key: str) -> float | None:
    text = _get_env(key)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        logger.error('Invalid %s %r: must be numeric', key, text)
        return None


def apparent_place_params_from_env() -> ApparentPlaceParams | None:
    """Build ApparentPlaceParams from CGI-style environment variables.

    Reads body, start, stop, interval, time_unit, latitude, longitude,
    altitude and ephemeris.

    Returns:
        ApparentPlaceParams, or None if body or start is missing or invalid.
    """
    body_s = _get_env('body')
    start = _get_env('start')
    if not body_s or not start:
        return None
    try:
        body = parse_body(body_s)
    except ValueError as e:
        logger.error('Invalid body %r: %s', body_s, e)
        return None
    if body == EARTH:
        logger.info('Body %s requested; positions will be of the geocentre', body_name(body))

    interval_s = _get_env('interval', str(DEFAULT_INTERVAL))
    try:
        interval = float(interval_s)
    except ValueError as e:
        logger.error('Invalid interval %r (must be number): %s; using %s', interval_s, e, DEFAULT_INTERVAL)
        interval = DEFAULT_INTERVAL

    lat = _optional_float('latitude')
    lon = _optional_float('longitude')
    alt = _optional_float('altitude')
    observer = ObserverLocation(latitude_deg=lat, longitude_deg=lon, altitude_m=alt or 0.0)

    return ApparentPlaceParams(
        body=body,
        start_time=start,
        stop_time=_get_env('stop') or None,
        interval=interval,
        time_unit=_get_env('time_unit', DEFAULT_TIME_UNIT) or DEFAULT_TIME_UNIT,
        ephemeris_path=_get_env('ephemeris') or get_ephemeris_path(),
        observer=observer,
        of_date=_get_env('frame', 'date').lower() != 'j2000',
    )
