"""Configuration: ephemeris file, log level and leap-second paths from environment."""

import os
from pathlib import Path

# Env var overrides with sensible defaults.
DEFAULT_EPHEMERIS_PATH = '/usr/local/share/jpl/unxp2000.405'
DEFAULT_LOG_LEVEL = 'WARNING'
_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def get_ephemeris_path() -> str:
    """Return the default JPL binary ephemeris file (ALMANAC_EPHEMERIS or default).

    Returns:
        Path string.
    """
    return os.environ.get('ALMANAC_EPHEMERIS', DEFAULT_EPHEMERIS_PATH)


def get_log_level() -> str:
    """Return the CLI log level name (ALMANAC_LOG env var or WARNING).

    Unknown level names fall back to the default.

    Returns:
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    """
    level = os.environ.get('ALMANAC_LOG', '').strip().upper()
    if level in _LOG_LEVELS:
        return level
    return DEFAULT_LOG_LEVEL


def get_leapsecs_path() -> str | None:
    """Return path to a NAIF LSK leap seconds file for rms-julian, if configured.

    Prefers JULIAN_LEAPSECS, then a .tls file next to the default ephemeris.
    None means the rms-julian bundled LSK should be used.

    Returns:
        Path string to an LSK file, or None.
    """
    path = os.environ.get('JULIAN_LEAPSECS', '').strip()
    if path:
        return path
    base = Path(get_ephemeris_path()).parent
    for name in ('naif0012.tls', 'naif0011.tls', 'leapseconds.tls'):
        p = base / name
        if p.exists():
            return str(p)
    return None
