"""Tests for the apparent-place table generator."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from almanac_tools.constants import EARTH_EQUATORIAL_RADIUS_KM, SUN, VENUS
from almanac_tools.ephemeris import (
    HEADER,
    build_pipeline,
    generate_apparent_places,
    load_store,
)
from almanac_tools.errors import AlmanacError, RangeError
from almanac_tools.observer import Observer
from almanac_tools.params import ApparentPlaceParams, ObserverLocation
from tests.synthetic_de import AU_KM, SPAN, START_JD, write_ephemeris


@pytest.fixture
def de_path(tmp_path: Path) -> str:
    return str(write_ephemeris(tmp_path / 'de406.bin'))


def test_table_rows(de_path: str) -> None:
    """Two days at 12-hour steps give five rows after the header."""
    params = ApparentPlaceParams(
        body=VENUS,
        start_time='2451545.0',
        stop_time='2451547.0',
        interval=12.0,
        time_unit='hour',
        ephemeris_path=de_path,
    )
    buf = io.StringIO()
    n = generate_apparent_places(params, buf)
    assert n == 5
    lines = buf.getvalue().splitlines()
    assert lines[0] == HEADER
    assert len(lines) == 6
    assert lines[1].split()[0] == '2451545.000000'
    assert lines[-1].split()[0] == '2451547.000000'
    # RA h m s, Dec d m s, RA deg, Dec deg, distance, light time
    assert len(lines[1].split()) == 1 + 3 + 3 + 4


def test_table_single_time_without_output(de_path: str) -> None:
    params = ApparentPlaceParams(body=SUN, start_time='JD 2451600.5', ephemeris_path=de_path)
    assert generate_apparent_places(params) == 1


def test_table_uses_params_output(de_path: str) -> None:
    buf = io.StringIO()
    params = ApparentPlaceParams(
        body=VENUS, start_time='2451545.0', ephemeris_path=de_path, output=buf
    )
    generate_apparent_places(params)
    assert buf.getvalue().startswith(HEADER)


def test_table_for_terrestrial_observer(de_path: str) -> None:
    base = ApparentPlaceParams(body=VENUS, start_time='2451545.0', ephemeris_path=de_path)
    topo = ApparentPlaceParams(
        body=VENUS,
        start_time='2451545.0',
        ephemeris_path=de_path,
        observer=ObserverLocation(19.82, -155.47, 4205.0),
    )
    store = load_store(de_path, 2451545.0, 2451545.0)
    geo = build_pipeline(store, base).calculate_apparent_place(2451545.0)
    pipeline = build_pipeline(store, topo)
    assert isinstance(pipeline.observer, Observer)
    assert pipeline.observer.place is not None
    top = pipeline.calculate_apparent_place(2451545.0)
    # Diurnal parallax is at most one Earth radius over the distance.
    max_parallax = EARTH_EQUATORIAL_RADIUS_KM / AU_KM / geo.geometric_distance
    shift = (top.direction_cosines - geo.direction_cosines).magnitude()
    assert 0.0 < shift < 1.05 * max_parallax + 2e-6


def test_load_store_clips_to_file(de_path: str) -> None:
    store = load_store(de_path, START_JD, START_JD + 1000.0)
    assert store.earliest_date == START_JD
    assert store.latest_date == START_JD + 8 * SPAN


def test_stop_before_start_raises(de_path: str) -> None:
    params = ApparentPlaceParams(
        body=VENUS, start_time='2451546.0', stop_time='2451545.0', ephemeris_path=de_path
    )
    with pytest.raises(ValueError):
        generate_apparent_places(params, io.StringIO())


def test_too_many_steps_raises(de_path: str) -> None:
    params = ApparentPlaceParams(
        body=VENUS,
        start_time='2451545.0',
        stop_time='2451547.0',
        interval=1.0,
        time_unit='sec',
        ephemeris_path=de_path,
    )
    with pytest.raises(ValueError, match='exceeds limit'):
        generate_apparent_places(params, io.StringIO())


def test_time_outside_file_raises_range_error(de_path: str) -> None:
    params = ApparentPlaceParams(
        body=VENUS, start_time=str(START_JD - 10.0), ephemeris_path=de_path
    )
    with pytest.raises(RangeError):
        generate_apparent_places(params, io.StringIO())


def test_missing_ephemeris_file(tmp_path: Path) -> None:
    params = ApparentPlaceParams(
        body=VENUS, start_time='2451545.0', ephemeris_path=str(tmp_path / 'none.bin')
    )
    with pytest.raises(OSError):
        generate_apparent_places(params, io.StringIO())


def test_bad_file_is_almanac_error(tmp_path: Path) -> None:
    bad = tmp_path / 'bad.bin'
    bad.write_bytes(b'\0' * 8000)
    params = ApparentPlaceParams(body=VENUS, start_time='2451545.0', ephemeris_path=str(bad))
    with pytest.raises(AlmanacError):
        generate_apparent_places(params, io.StringIO())
