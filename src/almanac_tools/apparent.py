"""Apparent place of a solar-system body.

The pipeline solves for light time (with the Shapiro delay), deflects the
direction for the Sun's gravity, applies relativistic aberration for the
observer's velocity and, given an Earth rotation model, rotates the result
to the true equator and equinox of date.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from almanac_tools.constants import (
    DEFAULT_MAX_LIGHT_TIME_ITERATIONS,
    LIGHT_TIME_TOLERANCE_DAYS,
    SOLAR_GRAVITATIONAL_FACTOR,
    SPEED_OF_LIGHT_AU_PER_DAY,
    SUN,
    TWOPI,
)
from almanac_tools.earth_rotation import EarthRotationModel
from almanac_tools.errors import ConvergenceError, StateError
from almanac_tools.points import MovingPoint
from almanac_tools.vectors import Vector

logger = logging.getLogger(__name__)

_NOT_CALCULATED = 'The apparent place has not yet been calculated'


def ra_dec(dc: Vector) -> tuple[float, float]:
    """Right ascension in [0, 2 pi) and declination of a direction (radians)."""
    x, y, z = dc.x, dc.y, dc.z
    ra = math.atan2(y, x)
    if ra < 0.0:
        ra += TWOPI
    return ra, math.atan2(z, math.hypot(x, y))


@dataclass(frozen=True)
class ApparentPlaceResult:
    """One apparent-place solution.

    Directions are unit vectors; distances are in AU and light_time in days.
    Without an Earth rotation model the "of date" fields repeat the J2000 ones.
    """

    t: float
    direction_cosines_j2000: Vector
    direction_cosines: Vector
    right_ascension_j2000: float
    declination_j2000: float
    right_ascension: float
    declination: float
    light_path_distance: float
    geometric_distance: float
    heliocentric_distance: float
    light_time: float
    iterations: int
    of_date: bool


class ApparentPlace:
    """Apparent place of ``target`` as seen by ``observer``.

    Starts uncalculated; each successful calculate_apparent_place replaces
    the stored result. A failed calculation keeps the previous result.
    Instances hold mutable state and are not meant to be shared between
    threads.

    Parameters:
        observer: Observer (usually geocentric or terrestrial).
        target: Body being observed.
        sun: Barycentric Sun, for deflection and the Shapiro delay.
        erm: Earth rotation model; None keeps the result in J2000.
        max_iterations: Light-time iteration limit.
    """

    def __init__(
        self,
        observer: MovingPoint,
        target: MovingPoint,
        sun: MovingPoint,
        erm: EarthRotationModel | None = None,
        max_iterations: int = DEFAULT_MAX_LIGHT_TIME_ITERATIONS,
    ) -> None:
        if max_iterations < 1:
            raise ValueError(f'max_iterations must be positive, got {max_iterations}')
        self.observer = observer
        self.target = target
        self.sun = sun
        self.erm = erm
        self.max_iterations = max_iterations
        self._result: ApparentPlaceResult | None = None

    @property
    def target_is_sun(self) -> bool:
        return self.target is self.sun or self.target.body_code == SUN

    @property
    def is_valid(self) -> bool:
        """True once a calculation has succeeded."""
        return self._result is not None

    def calculate_apparent_place(self, t: float) -> ApparentPlaceResult:
        """Compute the apparent place at JD (TDB) ``t`` and store it.

        Raises:
            RangeError: A position lookup fell outside the ephemeris.
            ConvergenceError: The light-time iteration did not settle.
        """
        c = SPEED_OF_LIGHT_AU_PER_DAY
        g = SOLAR_GRAVITATIONAL_FACTOR
        target_is_sun = self.target_is_sun

        sv_observer = self.observer.state_vector(t)
        eb = sv_observer.position
        e = eb - self.sun.position(t)
        ee = e.magnitude()

        tau = 0.0
        gd = 0.0
        iterations = 0
        while True:
            iterations += 1
            qb = self.target.position(t - tau)
            sb = self.sun.position(t - tau)
            p = qb - eb
            q = qb - sb
            pp = p.magnitude()
            qq = q.magnitude()
            if iterations == 1:
                gd = pp
            pl = pp
            if not target_is_sun:
                pl += g * math.log((ee + pp + qq) / (ee - pp + qq))
            new_tau = pl / c
            dtau = new_tau - tau
            tau = new_tau
            if abs(dtau) < LIGHT_TIME_TOLERANCE_DAYS:
                break
            if iterations >= self.max_iterations:
                raise ConvergenceError(iterations, abs(dtau))
        logger.debug('Light time %.9f d after %d iterations at JD %s', tau, iterations, t)

        p = p.normalize()
        q = q.normalize()
        e = e.normalize()

        if not target_is_sun:
            pa = Vector.linear_combination(e, p.dot(q), q, -e.dot(p))
            p = p + pa * ((g / ee) / (1.0 + q.dot(e)))

        v = sv_observer.velocity * (1.0 / c)
        vv = v.magnitude()
        beta = math.sqrt(1.0 - vv * vv)
        pdotv = p.dot(v)
        denominator = 1.0 + pdotv
        p = Vector.linear_combination(
            p, beta / denominator, v, (1.0 + pdotv / (1.0 + beta)) / denominator
        ).normalize()

        dc_j2000 = p
        ra_j2000, dec_j2000 = ra_dec(dc_j2000)
        if self.erm is not None:
            ut = t - self.erm.delta_t(t)
            precess = self.erm.precession_matrix(self.target.epoch, ut)
            nutate = self.erm.nutation_matrix(ut)
            dc_date = dc_j2000.transform(precess).transform(nutate)
            ra_date, dec_date = ra_dec(dc_date)
        else:
            dc_date, ra_date, dec_date = dc_j2000, ra_j2000, dec_j2000

        self._result = ApparentPlaceResult(
            t=t,
            direction_cosines_j2000=dc_j2000,
            direction_cosines=dc_date,
            right_ascension_j2000=ra_j2000,
            declination_j2000=dec_j2000,
            right_ascension=ra_date,
            declination=dec_date,
            light_path_distance=pl,
            geometric_distance=gd,
            heliocentric_distance=qq,
            light_time=gd / c,
            iterations=iterations,
            of_date=self.erm is not None,
        )
        return self._result

    @property
    def result(self) -> ApparentPlaceResult:
        """Most recent result.

        Raises:
            StateError: No calculation has succeeded yet.
        """
        if self._result is None:
            raise StateError(_NOT_CALCULATED, ['Call calculate_apparent_place(t) first'])
        return self._result

    @property
    def direction_cosines(self) -> Vector:
        return self.result.direction_cosines

    @property
    def direction_cosines_j2000(self) -> Vector:
        return self.result.direction_cosines_j2000

    @property
    def right_ascension(self) -> float:
        return self.result.right_ascension

    @property
    def declination(self) -> float:
        return self.result.declination

    @property
    def right_ascension_j2000(self) -> float:
        return self.result.right_ascension_j2000

    @property
    def declination_j2000(self) -> float:
        return self.result.declination_j2000

    @property
    def light_path_distance(self) -> float:
        return self.result.light_path_distance

    @property
    def geometric_distance(self) -> float:
        return self.result.geometric_distance

    @property
    def heliocentric_distance(self) -> float:
        return self.result.heliocentric_distance

    @property
    def light_time(self) -> float:
        return self.result.light_time
