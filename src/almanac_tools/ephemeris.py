"""Apparent-place table generator: one row per time step for a body."""

from __future__ import annotations

import logging
import math
from typing import TextIO

from almanac_tools.angle_utils import format_dec, format_ra
from almanac_tools.apparent import ApparentPlace
from almanac_tools.constants import SUN
from almanac_tools.earth_rotation import IAUEarthRotationModel
from almanac_tools.jpl.header import read_header
from almanac_tools.jpl.store import EphemerisStore
from almanac_tools.observer import Observer, geocentric_observer, terrestrial_observer
from almanac_tools.params import ApparentPlaceParams, parse_time
from almanac_tools.points import PlanetCentre, moving_point
from almanac_tools.time_utils import interval_days

logger = logging.getLogger(__name__)

MAX_TIME_STEPS = 100000

# Days of margin loaded before the first time for the light-time solution
LIGHT_TIME_MARGIN_DAYS = 1.0

HEADER = (
    '     JD (TDB)       RA (h m s)      Dec (d m s)     RA (deg)    Dec (deg)'
    '   Distance (AU)  Light time (min)'
)


def load_store(path: str, start: float, stop: float) -> EphemerisStore:
    """Open an ephemeris covering [start - margin, stop], clipped to the file's limits."""
    with open(path, 'rb') as fh:
        header = read_header(fh)
    lo = max(start - LIGHT_TIME_MARGIN_DAYS, header.start_jd)
    hi = min(stop, header.end_jd)
    if hi < lo:
        hi = lo
    return EphemerisStore(path, lo, hi)


def build_pipeline(store: EphemerisStore, params: ApparentPlaceParams) -> ApparentPlace:
    """Wire observer, target, Sun and Earth rotation model for a request."""
    erm = IAUEarthRotationModel()
    place = params.observer.to_place()
    observer: Observer
    if place is None:
        observer = geocentric_observer(store)
    else:
        observer = terrestrial_observer(store, erm, place)
    target = moving_point(store, params.body)
    sun = PlanetCentre(store, SUN)
    return ApparentPlace(observer, target, sun, erm if params.of_date else None)


def format_row(jd: float, ap: ApparentPlace) -> str:
    """Format one table row from the most recent result of ``ap``."""
    res = ap.result
    return (
        f'{jd:15.6f}  {format_ra(res.right_ascension):>15}  {format_dec(res.declination):>15}'
        f'  {math.degrees(res.right_ascension):11.6f}  {math.degrees(res.declination):11.6f}'
        f'  {res.geometric_distance:14.9f}  {res.light_time * 1440.0:16.6f}'
    )


def generate_apparent_places(params: ApparentPlaceParams, output: TextIO | None = None) -> int:
    """Write an apparent-place table for the requested body and times.

    If output is None, uses params.output. If both are None, rows are
    computed but nothing is written.

    Parameters:
        params: Request parameters.
        output: Text stream for the table.

    Returns:
        Number of rows computed.

    Raises:
        ValueError: Invalid times or interval, or too many steps.
        AlmanacError: Ephemeris file or range errors.
    """
    out = output or params.output
    start = parse_time(params.start_time)
    stop = parse_time(params.stop_time) if params.stop_time else start
    if stop < start:
        raise ValueError(f'Stop time {params.stop_time!r} is before start time {params.start_time!r}')
    step = interval_days(params.interval, params.time_unit)
    ntimes = int((stop - start) / step + 1.0e-9) + 1
    if ntimes > MAX_TIME_STEPS:
        raise ValueError(f'Number of time steps {ntimes} exceeds limit of {MAX_TIME_STEPS}')

    store = load_store(params.ephemeris_path, start, stop)
    ap = build_pipeline(store, params)
    logger.info('Computing %d apparent places from JD %.6f', ntimes, start)

    if out is not None:
        out.write(HEADER + '\n')
    for i in range(ntimes):
        jd = start + i * step
        ap.calculate_apparent_place(jd)
        if out is not None:
            out.write(format_row(jd, ap) + '\n')
    return ntimes
