"""Tests for almanac-tools CLI argument parsing and output."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

from almanac_tools.cli import main as cli_main
from almanac_tools.constants import MARS, VENUS
from tests.synthetic_de import START_JD, write_ephemeris


@pytest.fixture
def de_path(tmp_path: Path) -> str:
    return str(write_ephemeris(tmp_path / 'de406.bin'))


def test_cli_place(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], de_path: str) -> None:
    monkeypatch.setattr(
        sys,
        'argv',
        ['almanac-tools', 'place', '--ephemeris', de_path, '--body', 'venus', '--jd', '2451545.0'],
    )
    rc = cli_main.main()
    assert rc == 0
    out = capsys.readouterr().out
    assert 'Body:              Venus' in out
    assert 'Frame:             true equator and equinox of date' in out
    assert 'Right ascension:' in out
    assert 'Light time (min):' in out


def test_cli_place_j2000_and_observer(capsys: pytest.CaptureFixture[str], de_path: str) -> None:
    rc = cli_main.main(
        [
            'place',
            '--ephemeris',
            de_path,
            '--body',
            '3',
            '--jd',
            '2451600.5',
            '--observer',
            '51.48',
            '0',
            '45',
            '--j2000',
        ]
    )
    assert rc == 0
    out = capsys.readouterr().out
    assert 'Body:              Mars' in out
    assert 'Frame:             J2000' in out


def test_cli_place_date_out_of_range(
    capsys: pytest.CaptureFixture[str], de_path: str
) -> None:
    rc = cli_main.main(
        ['place', '--ephemeris', de_path, '--body', 'sun', '--jd', str(START_JD - 30.0)]
    )
    assert rc == 1
    assert 'Error: Date' in capsys.readouterr().err


def test_cli_place_missing_file(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    rc = cli_main.main(
        ['place', '--ephemeris', str(tmp_path / 'none.bin'), '--body', 'sun', '--jd', '2451545']
    )
    assert rc == 1
    assert capsys.readouterr().err.startswith('Error:')


def test_cli_place_requires_time(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli_main.main(['place', '--body', 'sun'])
    assert exc.value.code == 2


def test_cli_rejects_unknown_body(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        cli_main.main(['place', '--body', 'vulcan', '--jd', '2451545'])


def test_cli_table_params(monkeypatch: pytest.MonkeyPatch) -> None:
    """Table CLI options map onto ApparentPlaceParams."""
    captured: dict[str, Any] = {}

    def _fake_generate(params, *_args, **_kwargs):  # type: ignore[no-untyped-def]
        captured['value'] = params
        return 0

    monkeypatch.setattr('almanac_tools.cli.main.generate_apparent_places', _fake_generate)
    monkeypatch.setattr(
        sys,
        'argv',
        [
            'almanac-tools',
            'table',
            '--body',
            'mars',
            '--start',
            '2000-01-01 00:00',
            '--stop',
            '2000-01-10 00:00',
            '--interval',
            '6',
            '--time-unit',
            'hour',
            '--observer',
            '19.82',
            '-155.47',
            '4205',
            '--ephemeris',
            '/data/de405.bin',
            '--j2000',
        ],
    )
    rc = cli_main.main()
    assert rc == 0
    params = captured['value']
    assert params.body == MARS
    assert params.start_time == '2000-01-01 00:00'
    assert params.stop_time == '2000-01-10 00:00'
    assert params.interval == 6.0
    assert params.time_unit == 'hour'
    assert params.observer.latitude_deg == 19.82
    assert params.ephemeris_path == '/data/de405.bin'
    assert not params.of_date


def test_cli_table_to_file(tmp_path: Path, de_path: str) -> None:
    out = tmp_path / 'venus.txt'
    rc = cli_main.main(
        [
            'table',
            '--ephemeris',
            de_path,
            '--body',
            'venus',
            '--start',
            '2451545',
            '--stop',
            '2451548',
            '-o',
            str(out),
        ]
    )
    assert rc == 0
    lines = out.read_text().splitlines()
    assert len(lines) == 5
    assert lines[1].split()[0] == '2451545.000000'


def test_cli_table_cgi(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], de_path: str
) -> None:
    monkeypatch.setenv('body', str(VENUS))
    monkeypatch.setenv('start', '2451545.0')
    monkeypatch.setenv('stop', '2451545.5')
    monkeypatch.setenv('interval', '6')
    monkeypatch.setenv('time_unit', 'hour')
    monkeypatch.setenv('ephemeris', de_path)
    rc = cli_main.main(['table', '--cgi'])
    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1 + 3


def test_cli_table_cgi_missing_params(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv('body', raising=False)
    monkeypatch.delenv('start', raising=False)
    rc = cli_main.main(['table', '--cgi'])
    assert rc == 1
    assert 'Invalid or missing CGI parameters' in capsys.readouterr().err


def test_cli_table_requires_body_and_start() -> None:
    with pytest.raises(SystemExit) as exc:
        cli_main.main(['table', '--body', 'venus'])
    assert exc.value.code == 2


@pytest.mark.parametrize('stop', ['inf', 'nan', 'JDinf'])
def test_cli_table_non_finite_stop(capsys: pytest.CaptureFixture[str], de_path: str, stop: str) -> None:
    rc = cli_main.main(
        ['table', '--ephemeris', de_path, '--body', 'venus', '--start', str(START_JD + 10.0), '--stop', stop]
    )
    assert rc == 1
    assert 'Error: Time must be a finite Julian Date' in capsys.readouterr().err


def test_cli_place_non_finite_jd(capsys: pytest.CaptureFixture[str], de_path: str) -> None:
    rc = cli_main.main(['place', '--ephemeris', de_path, '--body', 'venus', '--jd', 'inf'])
    assert rc == 1
    assert 'finite' in capsys.readouterr().err


def test_cli_table_bad_observer(capsys: pytest.CaptureFixture[str], de_path: str) -> None:
    rc = cli_main.main(
        ['table', '--ephemeris', de_path, '--body', 'venus', '--start', '2451545', '--observer', '95', '0', '0']
    )
    assert rc == 1
    assert 'latitude' in capsys.readouterr().err
