"""Checks against a real JPL DE file; skipped unless ALMANAC_EPHEMERIS names one."""

from __future__ import annotations

import math
import os

import pytest

from almanac_tools.constants import EMB, SUN, VENUS
from almanac_tools.ephemeris import build_pipeline, load_store
from almanac_tools.params import ApparentPlaceParams

EPHEMERIS = os.environ.get('ALMANAC_EPHEMERIS', '')

pytestmark = pytest.mark.skipif(
    not EPHEMERIS or not os.path.exists(EPHEMERIS), reason='ALMANAC_EPHEMERIS not set to a DE file'
)

# 1992 December 20, 0h TD (Meeus, Astronomical Algorithms, example 33.a)
JD = 2448976.5


def test_sun_is_one_au_from_the_barycentre_of_earth_and_moon() -> None:
    store = load_store(EPHEMERIS, JD, JD)
    d = store.position(JD, EMB) - store.position(JD, SUN)
    assert math.sqrt(float(d @ d)) / store.au == pytest.approx(1.0, abs=0.02)


def test_venus_apparent_place() -> None:
    """Apparent RA 21h04m41.454s, Dec -18d53'16.84" of date."""
    params = ApparentPlaceParams(body=VENUS, start_time=str(JD), ephemeris_path=EPHEMERIS)
    store = load_store(EPHEMERIS, JD, JD)
    res = build_pipeline(store, params).calculate_apparent_place(JD)
    ra_s = math.degrees(res.right_ascension) / 15.0 * 3600.0
    dec_arcsec = math.degrees(res.declination) * 3600.0
    assert ra_s == pytest.approx(21 * 3600 + 4 * 60 + 41.454, abs=0.05)
    assert dec_arcsec == pytest.approx(-(18 * 3600 + 53 * 60 + 16.84), abs=0.5)
    assert res.geometric_distance == pytest.approx(0.9109, abs=5e-4)


def test_sun_distance_at_j2000() -> None:
    """The Sun is within a few percent of 1 AU from the geocentre at J2000.0."""
    jd = 2451545.0
    params = ApparentPlaceParams(body=SUN, start_time=str(jd), ephemeris_path=EPHEMERIS)
    store = load_store(EPHEMERIS, jd, jd)
    res = build_pipeline(store, params).calculate_apparent_place(jd)
    assert res.geometric_distance == pytest.approx(0.9833, abs=0.001)
    assert res.iterations <= 20
