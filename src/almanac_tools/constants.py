"""Fixed constants: JPL body codes, time epochs, physical and unit constants.

Body codes are the component indices of the JPL DE binary files.
"""

import math

# JPL ephemeris component indices
MERCURY = 0
VENUS = 1
EMB = 2  # Earth-Moon barycentre
MARS = 3
JUPITER = 4
SATURN = 5
URANUS = 6
NEPTUNE = 7
PLUTO = 8
MOON = 9  # geocentric Moon
SUN = 10
NUTATIONS = 11
LIBRATIONS = 12
NUM_COMPONENTS = 13

# Pseudo-code for the geocentre, which has no component of its own.
EARTH = -1

BODY_NAMES: dict[int, str] = {
    MERCURY: 'Mercury',
    VENUS: 'Venus',
    EMB: 'Earth-Moon barycentre',
    MARS: 'Mars',
    JUPITER: 'Jupiter',
    SATURN: 'Saturn',
    URANUS: 'Uranus',
    NEPTUNE: 'Neptune',
    PLUTO: 'Pluto',
    MOON: 'Moon',
    SUN: 'Sun',
    NUTATIONS: 'Nutations',
    LIBRATIONS: 'Librations',
    EARTH: 'Earth',
}

# Case-insensitive body name -> body code for --body
BODY_NAME_TO_CODE: dict[str, int] = {
    'mercury': MERCURY,
    'venus': VENUS,
    'emb': EMB,
    'earth': EARTH,
    'mars': MARS,
    'jupiter': JUPITER,
    'saturn': SATURN,
    'uranus': URANUS,
    'neptune': NEPTUNE,
    'pluto': PLUTO,
    'moon': MOON,
    'sun': SUN,
}

# Time
J2000 = 2451545.0
DAYS_PER_JULIAN_CENTURY = 36525.0
SECONDS_PER_DAY = 86400.0
SECONDS_PER_HOUR = 3600.0
SECONDS_PER_MINUTE = 60.0

# Angle
TWOPI = 2.0 * math.pi
ARCSEC_TO_RADIANS = math.pi / (180.0 * 3600.0)
HOURS_TO_RADIANS = math.pi / 12.0
ARCSEC_PER_REVOLUTION = 360.0 * 3600.0
DEGREES_PER_HOUR_RA = 15.0

# Light: speed in AU/day and 2GM_sun/c^2 in AU (deflection and Shapiro delay)
SPEED_OF_LIGHT_AU_PER_DAY = 173.1446
SOLAR_GRAVITATIONAL_FACTOR = 2.0 * 9.87e-9
LIGHT_TIME_TOLERANCE_DAYS = 1.0e-9
DEFAULT_MAX_LIGHT_TIME_ITERATIONS = 50

# Earth figure and rotation for topocentric corrections
EARTH_FLATTENING = 1.0 / 298.257
EARTH_EQUATORIAL_RADIUS_KM = 6378.14
EARTH_ROTATION_RATE_RAD_S = 7.2921151467e-5
# Flattening used for the geocentric latitude of a Place
PLACE_FLATTENING = 1.0 / 298.25

# Stellar apparent place: radial velocity km/s -> AU/century, velocity AU/day -> units of c
KM_PER_S_TO_AU_PER_CENTURY = 21.095
AU_PER_DAY_TO_C = 0.005775
MAS_TO_RADIANS = ARCSEC_TO_RADIANS / 1000.0


def body_name(code: int) -> str:
    """Return display name for a body code, or ``body <code>`` if unknown.

    Parameters:
        code: JPL component index (or EARTH).

    Returns:
        Human-readable name.
    """
    return BODY_NAMES.get(code, f'body {code}')
