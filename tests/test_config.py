"""Tests for environment configuration and the error hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from almanac_tools.config import (
    DEFAULT_EPHEMERIS_PATH,
    get_ephemeris_path,
    get_leapsecs_path,
    get_log_level,
)
from almanac_tools.errors import (
    AlmanacError,
    ConfigError,
    ConvergenceError,
    RangeError,
    StateError,
    date_out_of_range,
)


def test_ephemeris_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv('ALMANAC_EPHEMERIS', raising=False)
    assert get_ephemeris_path() == DEFAULT_EPHEMERIS_PATH
    monkeypatch.setenv('ALMANAC_EPHEMERIS', '/x/de406.bin')
    assert get_ephemeris_path() == '/x/de406.bin'


@pytest.mark.parametrize(('value', 'level'), [('', 'WARNING'), ('debug', 'DEBUG'), ('loud', 'WARNING')])
def test_log_level(monkeypatch: pytest.MonkeyPatch, value: str, level: str) -> None:
    monkeypatch.setenv('ALMANAC_LOG', value)
    assert get_log_level() == level


def test_leapsecs_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv('JULIAN_LEAPSECS', '/lsk/naif0012.tls')
    assert get_leapsecs_path() == '/lsk/naif0012.tls'

    monkeypatch.delenv('JULIAN_LEAPSECS')
    monkeypatch.setenv('ALMANAC_EPHEMERIS', str(tmp_path / 'de405.bin'))
    assert get_leapsecs_path() is None
    (tmp_path / 'naif0012.tls').write_text('')
    assert get_leapsecs_path() == str(tmp_path / 'naif0012.tls')


def test_error_suggestions_are_listed() -> None:
    err = ConfigError('Start after end', ['Swap the dates'])
    assert isinstance(err, AlmanacError)
    assert err.message == 'Start after end'
    assert str(err) == 'Start after end\n\nSuggestions:\n  - Swap the dates'


def test_error_types() -> None:
    err = date_out_of_range(1.0, 2.0, 3.0)
    assert isinstance(err, RangeError)
    assert isinstance(err, ValueError)
    assert '1.0' in err.message
    assert issubclass(StateError, RuntimeError)
    conv = ConvergenceError(50, 1e-6)
    assert conv.iterations == 50
    assert 'after 50 iterations' in str(conv)
