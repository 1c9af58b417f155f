"""Tests for julian time utility initialization and JD (TDB) conversions."""

from __future__ import annotations

import pytest

from almanac_tools import time_utils


def test_ensure_leapsecs_sets_spice_ut_model(monkeypatch: pytest.MonkeyPatch) -> None:
    """Leap-second init selects the SPICE-compatible UT model before loading the LSK."""

    calls: list[tuple[str, tuple[object, ...]]] = []

    def _set_ut_model(model: str, future: object = None) -> None:
        del future
        calls.append(('set_ut_model', (model,)))

    def _load_lsk(path: str | None = None) -> None:
        calls.append(('load_lsk', (path,) if path is not None else ()))

    monkeypatch.setattr('julian.set_ut_model', _set_ut_model)
    monkeypatch.setattr('julian.load_lsk', _load_lsk)
    monkeypatch.setattr('almanac_tools.time_utils.get_leapsecs_path', lambda: 'dummy.tls')
    monkeypatch.setattr(time_utils, '_leapsecs_loaded', False)

    time_utils._ensure_leapsecs()

    assert calls[0] == ('set_ut_model', ('SPICE',))
    assert calls[1] == ('load_lsk', ('dummy.tls',))
    assert time_utils._leapsecs_loaded


def test_ensure_leapsecs_falls_back_to_bundled_lsk(monkeypatch: pytest.MonkeyPatch) -> None:
    """An unreadable configured LSK falls back to the rms-julian default."""

    loaded: list[str | None] = []

    def _load_lsk(path: str | None = None) -> None:
        if path is not None:
            raise OSError('no such file')
        loaded.append(path)

    monkeypatch.setattr('julian.set_ut_model', lambda model, future=None: None)
    monkeypatch.setattr('julian.load_lsk', _load_lsk)
    monkeypatch.setattr('almanac_tools.time_utils.get_leapsecs_path', lambda: '/missing.tls')
    monkeypatch.setattr(time_utils, '_leapsecs_loaded', False)

    time_utils._ensure_leapsecs()

    assert loaded == [None]
    assert time_utils._leapsecs_loaded


def test_parse_datetime_accepts_iso_z_suffix() -> None:
    """ISO-8601 trailing Z parses as UTC like the same timestamp without Z."""

    with_z = time_utils.parse_datetime('2022-08-18T00:01:47Z')
    without_z = time_utils.parse_datetime('2022-08-18T00:01:47')

    assert with_z is not None
    assert without_z is not None
    assert with_z == without_z


def test_parse_datetime_accepts_year_hms_form() -> None:
    """'YYYY HH:MM:SS' parses as Jan 1 at the given time."""

    compact = time_utils.parse_datetime('1700 01:01:01')
    explicit = time_utils.parse_datetime('1700-01-01 01:01:01')

    assert compact is not None
    assert explicit is not None
    assert compact == explicit


def test_parse_datetime_rejects_garbage() -> None:
    assert time_utils.parse_datetime('not a date') is None
    with pytest.raises(ValueError):
        time_utils.jd_tdb_from_string('not a date')


def test_jd_tdb_from_string_at_j2000() -> None:
    """2000-01-01 12:00 UTC is J2000 plus TT - UTC (64.184 s); TDB - TT is under 2 ms."""
    jd = time_utils.jd_tdb_from_string('2000-01-01 12:00:00')
    assert jd == pytest.approx(2451545.0 + 64.184 / 86400.0, abs=3e-8)


def test_jd_tai_round_trip() -> None:
    tai = time_utils.tai_from_jd_tdb(2451600.25)
    assert time_utils.jd_tdb_from_tai(tai) == pytest.approx(2451600.25, abs=1e-9)


@pytest.mark.parametrize(
    ('interval', 'unit', 'days'),
    [
        (1.0, 'day', 1.0),
        (2.0, 'days', 2.0),
        (6.0, 'hour', 0.25),
        (30.0, 'min', 30.0 / 1440.0),
        (-86400.0, 'sec', 1.0),
        (90.0, 'SECONDS', 90.0 / 86400.0),
    ],
)
def test_interval_days(interval: float, unit: str, days: float) -> None:
    assert time_utils.interval_days(interval, unit) == pytest.approx(days)


def test_interval_days_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        time_utils.interval_days(1.0, 'fortnight')
    with pytest.raises(ValueError):
        time_utils.interval_days(0.0, 'day')
