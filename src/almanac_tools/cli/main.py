"""CLI entry point: almanac-tools place|table subcommands."""

from __future__ import annotations

import argparse
import logging
import math
import os
import sys
from typing import NoReturn, TextIO, cast

from almanac_tools.angle_utils import format_dec, format_ra
from almanac_tools.config import get_ephemeris_path, get_log_level
from almanac_tools.constants import body_name
from almanac_tools.ephemeris import build_pipeline, generate_apparent_places, load_store
from almanac_tools.errors import AlmanacError
from almanac_tools.params import (
    DEFAULT_INTERVAL,
    DEFAULT_TIME_UNIT,
    ApparentPlaceParams,
    apparent_place_params_from_env,
    parse_body,
    parse_observer,
    parse_time,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI (stderr, level from --verbose or ALMANAC_LOG)."""
    level = logging.INFO if verbose else logging.WARNING
    if os.environ.get('ALMANAC_LOG', '').strip():
        level = getattr(logging, get_log_level())
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _report_error(e: Exception) -> int:
    print(f'Error: {e}', file=sys.stderr)
    return 1


def _place_cmd(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    """Print the apparent place of one body at one time (place subcommand).

    Returns:
        Exit code 0 on success, 1 on error.
    """
    try:
        jd = parse_time(repr(args.jd)) if args.jd is not None else parse_time(args.time)
        params = ApparentPlaceParams(
            body=args.body,
            start_time=repr(jd),
            ephemeris_path=args.ephemeris,
            observer=parse_observer(args.observer or []),
            of_date=not args.j2000,
        )
        store = load_store(params.ephemeris_path, jd, jd)
        ap = build_pipeline(store, params)
        res = ap.calculate_apparent_place(jd)
    except (AlmanacError, ValueError, OSError) as e:
        return _report_error(e)

    frame = 'true equator and equinox of date' if res.of_date else 'J2000'
    out: TextIO = sys.stdout
    out.write(f'Body:              {body_name(args.body)}\n')
    out.write(f'JD (TDB):          {jd:.6f}\n')
    out.write(f'Frame:             {frame}\n')
    out.write(f'Right ascension:   {format_ra(res.right_ascension)}\n')
    out.write(f'Declination:       {format_dec(res.declination)}\n')
    out.write(f'RA, Dec (deg):     {math.degrees(res.right_ascension):.6f} '
              f'{math.degrees(res.declination):.6f}\n')
    out.write(f'Distance (AU):     {res.geometric_distance:.9f}\n')
    out.write(f'Light path (AU):   {res.light_path_distance:.9f}\n')
    out.write(f'Sun distance (AU): {res.heliocentric_distance:.9f}\n')
    out.write(f'Light time (min):  {res.light_time * 1440.0:.6f}\n')
    return 0


def _table_cmd(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    """Write an apparent-place table (table subcommand).

    Returns:
        Exit code 0 on success, 1 on error.
    """
    if args.cgi:
        params = apparent_place_params_from_env()
        if params is None:
            print('Invalid or missing CGI parameters (e.g. body, start).', file=sys.stderr)
            return 1
    else:
        if args.body is None or not args.start:
            parser.error('table requires --body and --start (or --cgi)')
        try:
            observer = parse_observer(args.observer or [])
        except ValueError as e:
            return _report_error(e)
        params = ApparentPlaceParams(
            body=args.body,
            start_time=args.start,
            stop_time=args.stop or None,
            interval=args.interval,
            time_unit=args.time_unit,
            ephemeris_path=args.ephemeris,
            observer=observer,
            of_date=not args.j2000,
        )
    try:
        if args.output is not None:
            with open(args.output, 'w') as f:
                generate_apparent_places(params, f)
        else:
            generate_apparent_places(params, sys.stdout)
    except (AlmanacError, ValueError, OSError) as e:
        return _report_error(e)
    return 0


def _add_common_arguments(sub: argparse.ArgumentParser) -> None:
    sub.add_argument(
        '--ephemeris',
        type=str,
        default=get_ephemeris_path(),
        help='JPL DE binary file; env: ALMANAC_EPHEMERIS',
    )
    sub.add_argument(
        '--observer',
        type=str,
        nargs='+',
        default=None,
        help='"earth" (default) or "lat lon alt" (deg, deg east, m)',
    )
    sub.add_argument(
        '--j2000', action='store_true', help='Report J2000 coordinates instead of of-date'
    )
    sub.add_argument('-v', '--verbose', action='store_true', help='Show INFO logs')


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog='almanac-tools',
        description='Apparent places of solar-system bodies from JPL DE ephemerides.',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    place_parser = subparsers.add_parser('place', help='Apparent place at one time')
    place_parser.add_argument(
        '--body', type=parse_body, required=True, help='Body name or index (0=mercury..10=sun)'
    )
    when = place_parser.add_mutually_exclusive_group(required=True)
    when.add_argument('--time', type=str, help='UTC date/time (e.g. "2000-01-01 12:00")')
    when.add_argument('--jd', type=float, help='Julian Date (TDB)')
    _add_common_arguments(place_parser)
    place_parser.set_defaults(func=_place_cmd)

    table_parser = subparsers.add_parser('table', help='Apparent-place table')
    table_parser.add_argument(
        '--cgi', action='store_true', help='Read parameters from environment (CGI)'
    )
    table_parser.add_argument(
        '--body', type=parse_body, default=None, help='Body name or index; env: body'
    )
    table_parser.add_argument(
        '--start', type=str, default='', help='Start time (UTC or JD); env: start'
    )
    table_parser.add_argument('--stop', type=str, default='', help='Stop time; env: stop')
    table_parser.add_argument(
        '--interval', type=float, default=DEFAULT_INTERVAL, help='Time step; env: interval'
    )
    table_parser.add_argument(
        '--time-unit',
        type=str,
        default=DEFAULT_TIME_UNIT,
        choices=['sec', 'min', 'hour', 'day'],
        help='env: time_unit',
    )
    table_parser.add_argument('-o', '--output', type=str, default=None, help='Output file')
    _add_common_arguments(table_parser)
    table_parser.set_defaults(func=_table_cmd)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the almanac-tools CLI (place | table).

    Returns:
        Exit code 0 on success, 1 on failure.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(verbose=args.verbose)
    logger.debug('Running %s subcommand', args.command)
    return cast(int, args.func(parser, args))


def cli_main() -> NoReturn:
    """Entry point for console_scripts; calls main() and exits with its return code."""
    sys.exit(main())


if __name__ == '__main__':
    sys.exit(main())
