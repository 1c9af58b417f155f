"""Earth orientation: obliquity, Delta-T, sidereal time, precession and nutation.

IAUEarthRotationModel implements the IAU 1976 precession angles, the IAU 1980
nutation series and the 1982 GMST polynomial. Angles are in radians and
times are Julian Dates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from almanac_tools.constants import (
    ARCSEC_PER_REVOLUTION,
    ARCSEC_TO_RADIANS,
    DAYS_PER_JULIAN_CENTURY,
    HOURS_TO_RADIANS,
    J2000,
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    TWOPI,
)
from almanac_tools.vectors import Matrix

logger = logging.getLogger(__name__)

# Delta-T: (upper bound in Julian centuries from J2000, a0, a1, a2, a3) with
# Delta-T = a0 + a1 T + a2 T^2 + a3 T^3 seconds for T below the bound.
DELTA_T_TABLE: tuple[tuple[float, float, float, float, float], ...] = (
    (-25.0, 184.4, 111.6, 31.0, 0.0),
    (-17.0, -31527.7, -4773.29, -212.0889, -3.93731),
    (-10.0, 6833.0, 1996.25, 186.1189, 3.87068),
    (-3.5, -116.0, -88.45, -22.3509, -3.07831),
    (-3.0, -4586.4, -4715.24, -1615.08, -184.71),
    (-2.0, -427.3, -556.12, -228.71, -30.67),
    (-1.5, 150.7, 310.8, 204.8, 41.6),
    (-1.0, -150.5, -291.7, -196.9, -47.7),
    (-0.7, 486.0, 1896.4, 2606.9, 1204.6),
    (0.2, 65.9, 96.0, 35.0, -20.2),
    (2.0, 63.4, 111.6, 31.0, 0.0),
)

# IAU 1976 precession (arcsec): for each of zeta, z, theta the coefficients
# (d0, d1, d2, d3, d4, d5) of
# (d0 + d1 T + d2 T^2) t + (d3 + d4 T) t^2 + d5 t^3.
PRECESSION_COEFFICIENTS: tuple[tuple[float, ...], ...] = (
    (2306.2181, 1.39656, -0.000139, 0.30188, -0.000344, 0.017998),
    (2306.2181, 1.39656, -0.000139, 1.09468, 0.000066, 0.018203),
    (2004.3109, -0.85330, -0.000217, -0.42665, -0.000217, -0.041833),
)

# IAU 1980 nutation series. Columns: multipliers of l, l', F, D, Omega; then
# longitude sine coefficient and its rate, obliquity cosine coefficient and
# its rate, in units of 0.0001 arcsec (rates per Julian century).
# fmt: off
NUTATION_TERMS = np.array([
    (  0,  0,  0,  0,  1, -171996, -174.2,  92025,  8.9),
    (  0,  0,  2, -2,  2,  -13187,   -1.6,   5736, -3.1),
    (  0,  0,  2,  0,  2,   -2274,   -0.2,    977, -0.5),
    (  0,  0,  0,  0,  2,    2062,    0.2,   -895,  0.5),
    (  0,  1,  0,  0,  0,    1426,   -3.4,     54, -0.1),
    (  1,  0,  0,  0,  0,     712,    0.1,     -7,  0),
    (  0,  1,  2, -2,  2,    -517,    1.2,    224, -0.6),
    (  0,  0,  2,  0,  1,    -386,   -0.4,    200,  0),
    (  1,  0,  2,  0,  2,    -301,    0,    129, -0.1),
    (  0, -1,  2, -2,  2,     217,   -0.5,    -95,  0.3),
    (  1,  0,  0, -2,  0,    -158,    0,     -1,  0),
    (  0,  0,  2, -2,  1,     129,    0.1,    -70,  0),
    ( -1,  0,  2,  0,  2,     123,    0,    -53,  0),
    (  1,  0,  0,  0,  1,      63,    0.1,    -33,  0),
    (  0,  0,  0,  2,  0,      63,    0,     -2,  0),
    ( -1,  0,  2,  2,  2,     -59,    0,     26,  0),
    ( -1,  0,  0,  0,  1,     -58,   -0.1,     32,  0),
    (  1,  0,  2,  0,  1,     -51,    0,     27,  0),
    (  2,  0,  0, -2,  0,      48,    0,      1,  0),
    ( -2,  0,  2,  0,  1,      46,    0,    -24,  0),
    (  0,  0,  2,  2,  2,     -38,    0,     16,  0),
    (  2,  0,  2,  0,  2,     -31,    0,     13,  0),
    (  2,  0,  0,  0,  0,      29,    0,     -1,  0),
    (  1,  0,  2, -2,  2,      29,    0,    -12,  0),
    (  0,  0,  2,  0,  0,      26,    0,     -1,  0),
    (  0,  0,  2, -2,  0,     -22,    0,      0,  0),
    ( -1,  0,  2,  0,  1,      21,    0,    -10,  0),
    (  0,  2,  0,  0,  0,      17,   -0.1,      0,  0),
    (  0,  2,  2, -2,  2,     -16,    0.1,      7,  0),
    ( -1,  0,  0,  2,  1,      16,    0,     -8,  0),
    (  0,  1,  0,  0,  1,     -15,    0,      9,  0),
    (  1,  0,  0, -2,  1,     -13,    0,      7,  0),
    (  0, -1,  0,  0,  1,     -12,    0,      6,  0),
    (  2,  0, -2,  0,  0,      11,    0,      0,  0),
    ( -1,  0,  2,  2,  1,     -10,    0,      5,  0),
    (  1,  0,  2,  2,  2,      -8,    0,      3,  0),
    (  0, -1,  2,  0,  2,      -7,    0,      3,  0),
    (  0,  0,  2,  2,  1,      -7,    0,      3,  0),
    (  1,  1,  0, -2,  0,      -7,    0,      0,  0),
    (  0,  1,  2,  0,  2,       7,    0,     -3,  0),
    ( -2,  0,  0,  2,  1,      -6,    0,      3,  0),
    (  0,  0,  0,  2,  1,      -6,    0,      3,  0),
    (  2,  0,  2, -2,  2,       6,    0,     -3,  0),
    (  1,  0,  0,  2,  0,       6,    0,      0,  0),
    (  1,  0,  2, -2,  1,       6,    0,     -3,  0),
    (  0,  0,  0, -2,  1,      -5,    0,      3,  0),
    (  0, -1,  2, -2,  1,      -5,    0,      3,  0),
    (  2,  0,  2,  0,  1,      -5,    0,      3,  0),
    (  1, -1,  0,  0,  0,       5,    0,      0,  0),
    (  1,  0,  0, -1,  0,      -4,    0,      0,  0),
    (  0,  0,  0,  1,  0,      -4,    0,      0,  0),
    (  0,  1,  0, -2,  0,      -4,    0,      0,  0),
    (  1,  0, -2,  0,  0,       4,    0,      0,  0),
    (  2,  0,  0, -2,  1,       4,    0,     -2,  0),
    (  0,  1,  2, -2,  1,       4,    0,     -2,  0),
    (  1,  1,  0,  0,  0,      -3,    0,      0,  0),
    (  1, -1,  0, -1,  0,      -3,    0,      0,  0),
    ( -1, -1,  2,  2,  2,      -3,    0,      1,  0),
    (  0, -1,  2,  2,  2,      -3,    0,      1,  0),
    (  1, -1,  2,  0,  2,      -3,    0,      1,  0),
    (  3,  0,  2,  0,  2,      -3,    0,      1,  0),
    ( -2,  0,  2,  0,  2,      -3,    0,      1,  0),
    (  1,  0,  2,  0,  0,       3,    0,      0,  0),
    ( -1,  0,  2,  4,  2,      -2,    0,      1,  0),
    (  1,  0,  0,  0,  2,      -2,    0,      1,  0),
    ( -1,  0,  2, -2,  1,      -2,    0,      1,  0),
    (  0, -2,  2, -2,  1,      -2,    0,      1,  0),
    ( -2,  0,  0,  0,  1,      -2,    0,      1,  0),
    (  2,  0,  0,  0,  1,       2,    0,     -1,  0),
    (  3,  0,  0,  0,  0,       2,    0,      0,  0),
    (  1,  1,  2,  0,  2,       2,    0,     -1,  0),
    (  0,  0,  2,  1,  2,       2,    0,     -1,  0),
    (  1,  0,  0,  2,  1,      -1,    0,      0,  0),
    (  1,  0,  2,  2,  1,      -1,    0,      1,  0),
    (  1,  1,  0, -2,  1,      -1,    0,      0,  0),
    (  0,  1,  0,  2,  0,      -1,    0,      0,  0),
    (  0,  1,  2, -2,  0,      -1,    0,      0,  0),
    (  0,  1, -2,  2,  0,      -1,    0,      0,  0),
    (  1,  0, -2,  2,  0,      -1,    0,      0,  0),
    (  1,  0, -2, -2,  0,      -1,    0,      0,  0),
    (  1,  0,  2, -2,  0,      -1,    0,      0,  0),
    (  1,  0,  0, -4,  0,      -1,    0,      0,  0),
    (  2,  0,  0, -4,  0,      -1,    0,      0,  0),
    (  0,  0,  2,  4,  2,      -1,    0,      0,  0),
    (  0,  0,  2, -1,  2,      -1,    0,      0,  0),
    ( -2,  0,  2,  4,  2,      -1,    0,      1,  0),
    (  2,  0,  2,  2,  2,      -1,    0,      0,  0),
    (  0, -1,  2,  0,  1,      -1,    0,      0,  0),
    (  0,  0, -2,  0,  1,      -1,    0,      0,  0),
    (  0,  0,  4, -2,  2,       1,    0,      0,  0),
    (  0,  1,  0,  0,  2,       1,    0,      0,  0),
    (  1,  1,  2, -2,  2,       1,    0,     -1,  0),
    (  3,  0,  2, -2,  2,       1,    0,      0,  0),
    ( -2,  0,  2,  2,  2,       1,    0,     -1,  0),
    ( -1,  0,  0,  0,  2,       1,    0,     -1,  0),
    (  0,  0, -2,  2,  1,       1,    0,      0,  0),
    (  0,  1,  2,  0,  1,       1,    0,      0,  0),
    ( -1,  0,  4,  0,  2,       1,    0,      0,  0),
    (  2,  1,  0, -2,  0,       1,    0,      0,  0),
    (  2,  0,  0,  2,  0,       1,    0,      0,  0),
    (  2,  0,  2, -2,  1,       1,    0,     -1,  0),
    (  2,  0, -2,  0,  1,       1,    0,      0,  0),
    (  1, -1,  0, -2,  0,       1,    0,      0,  0),
    ( -1,  0,  0,  1,  1,       1,    0,      0,  0),
    ( -1, -1,  0,  2,  1,       1,    0,      0,  0),
    (  0,  1,  0,  1,  0,       1,    0,      0,  0),
], dtype=np.float64)
# fmt: on
NUTATION_TERMS.flags.writeable = False


@dataclass(frozen=True)
class PrecessionAngles:
    """IAU 1976 equatorial precession angles (radians)."""

    zeta: float
    z: float
    theta: float


@dataclass(frozen=True)
class NutationAngles:
    """Nutation in longitude and obliquity (radians)."""

    dpsi: float
    deps: float


class EarthRotationModel(Protocol):
    """Orientation of the Earth's axis and its rotation angle."""

    def mean_obliquity(self, jd: float) -> float: ...

    def delta_t(self, jd: float) -> float: ...

    def greenwich_mean_sidereal_time(self, jd_ut: float) -> float: ...

    def greenwich_apparent_sidereal_time(self, jd_ut: float) -> float: ...

    def precession_angles(self, jd_fixed: float, jd_date: float) -> PrecessionAngles: ...

    def precession_matrix(self, jd_fixed: float, jd_date: float) -> Matrix: ...

    def nutation_angles(self, jd: float) -> NutationAngles: ...

    def nutation_matrix(self, jd: float) -> Matrix: ...


def _centuries(jd: float) -> float:
    return (jd - J2000) / DAYS_PER_JULIAN_CENTURY


def _frac(x: float) -> float:
    return x - math.floor(x)


def fundamental_arguments(T: float) -> np.ndarray:
    """Delaunay arguments l, l', F, D, Omega in arcseconds for T centuries from J2000."""
    srev = ARCSEC_PER_REVOLUTION
    el = ((0.064 * T + 31.310) * T + 715922.633) * T + 485866.733 + _frac(1325.0 * T) * srev
    elp = ((-0.012 * T - 0.577) * T + 1292581.224) * T + 1287099.804 + _frac(99.0 * T) * srev
    f = ((0.011 * T - 13.257) * T + 295263.137) * T + 335778.877 + _frac(1342.0 * T) * srev
    d = ((0.019 * T - 6.891) * T + 1105601.328) * T + 1072261.307 + _frac(1236.0 * T) * srev
    om = ((0.008 * T + 7.455) * T - 482890.539) * T + 450160.280 - _frac(5.0 * T) * srev
    return np.array([el, elp, f, d, om], dtype=np.float64) % srev


def delta_t_covers(jd: float) -> bool:
    """True if the Delta-T table has an entry for this date."""
    return _centuries(jd) < DELTA_T_TABLE[-1][0]


class IAUEarthRotationModel:
    """IAU 1976/1980 Earth orientation (precession, nutation, sidereal time).

    Stateless; one instance may be shared between threads.
    """

    def mean_obliquity(self, jd: float) -> float:
        """Mean obliquity of the ecliptic (radians)."""
        T = _centuries(jd)
        return (84381.448 - 46.8150 * T - 0.00059 * T * T + 0.001813 * T * T * T) * ARCSEC_TO_RADIANS

    def delta_t(self, jd: float) -> float:
        """TT - UT in days.

        Dates past the end of the table (2200 onward) return 0.0; use
        delta_t_covers to detect them.
        """
        T = _centuries(jd)
        for bound, a0, a1, a2, a3 in DELTA_T_TABLE:
            if T < bound:
                return (a0 + T * (a1 + T * (a2 + T * a3))) / SECONDS_PER_DAY
        logger.debug('Delta-T table does not cover JD %s; using 0', jd)
        return 0.0

    def greenwich_mean_sidereal_time(self, jd_ut: float) -> float:
        """GMST (radians, in [0, 2 pi)) for a UT Julian Date."""
        T = _centuries(jd_ut)
        gmst = 67310.54841 + 8640184.812866 * T + 0.093104 * T * T - 0.0000062 * T * T * T
        hours = math.fmod(gmst, SECONDS_PER_DAY) / SECONDS_PER_HOUR
        hours = math.fmod(hours + 876600.0 * T, 24.0)
        if hours < 0.0:
            hours += 24.0
        return HOURS_TO_RADIANS * hours

    def greenwich_apparent_sidereal_time(self, jd_ut: float) -> float:
        """GAST: GMST plus the equation of the equinoxes, in [0, 2 pi)."""
        nut = self.nutation_angles(jd_ut)
        eps = self.mean_obliquity(jd_ut) + nut.deps
        gast = self.greenwich_mean_sidereal_time(jd_ut) + nut.dpsi * math.cos(eps)
        return gast % TWOPI

    def precession_angles(self, jd_fixed: float, jd_date: float) -> PrecessionAngles:
        """Precession angles from the equinox of jd_fixed to that of jd_date."""
        T = _centuries(jd_fixed)
        t = (jd_date - jd_fixed) / DAYS_PER_JULIAN_CENTURY
        angles = [
            ((d0 + d1 * T + d2 * T * T) * t + (d3 + d4 * T) * t * t + d5 * t * t * t)
            * ARCSEC_TO_RADIANS
            for d0, d1, d2, d3, d4, d5 in PRECESSION_COEFFICIENTS
        ]
        return PrecessionAngles(zeta=angles[0], z=angles[1], theta=angles[2])

    def precession_matrix(self, jd_fixed: float, jd_date: float) -> Matrix:
        """Rotation taking mean-equator coordinates of jd_fixed to those of jd_date."""
        pa = self.precession_angles(jd_fixed, jd_date)
        czeta, szeta = math.cos(pa.zeta), math.sin(pa.zeta)
        cz, sz = math.cos(pa.z), math.sin(pa.z)
        ct, st = math.cos(pa.theta), math.sin(pa.theta)
        return Matrix(
            (
                (cz * ct * czeta - sz * szeta, -cz * ct * szeta - sz * czeta, -cz * st),
                (sz * ct * czeta + cz * szeta, -sz * ct * szeta + cz * czeta, -sz * st),
                (st * czeta, -st * szeta, ct),
            )
        )

    def nutation_angles(self, jd: float) -> NutationAngles:
        """IAU 1980 nutation in longitude and obliquity."""
        T = _centuries(jd)
        args = fundamental_arguments(T)
        multipliers = NUTATION_TERMS[:, :5]
        theta = ((multipliers @ args) % ARCSEC_PER_REVOLUTION) * ARCSEC_TO_RADIANS
        dpsi = np.sum((NUTATION_TERMS[:, 5] + NUTATION_TERMS[:, 6] * T) * np.sin(theta))
        deps = np.sum((NUTATION_TERMS[:, 7] + NUTATION_TERMS[:, 8] * T) * np.cos(theta))
        scale = 1.0e-4 * ARCSEC_TO_RADIANS
        return NutationAngles(dpsi=float(dpsi) * scale, deps=float(deps) * scale)

    def nutation_matrix(self, jd: float) -> Matrix:
        """Rotation from the mean equator and equinox of date to the true ones."""
        nut = self.nutation_angles(jd)
        eps0 = self.mean_obliquity(jd)
        eps = eps0 + nut.deps
        ce0, se0 = math.cos(eps0), math.sin(eps0)
        ce, se = math.cos(eps), math.sin(eps)
        cdpsi, sdpsi = math.cos(nut.dpsi), math.sin(nut.dpsi)
        return Matrix(
            (
                (cdpsi, -sdpsi * ce0, -sdpsi * se0),
                (sdpsi * ce, cdpsi * ce * ce0 + se * se0, cdpsi * ce * se0 - se * ce0),
                (sdpsi * se, cdpsi * se * ce0 - ce * se0, cdpsi * se * se0 + ce * ce0),
            )
        )
