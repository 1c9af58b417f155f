"""Apparent places of catalogue stars (space motion, parallax, deflection, aberration)."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from almanac_tools.constants import (
    AU_PER_DAY_TO_C,
    DAYS_PER_JULIAN_CENTURY,
    KM_PER_S_TO_AU_PER_CENTURY,
    MAS_TO_RADIANS,
    SOLAR_GRAVITATIONAL_FACTOR,
)
from almanac_tools.earth_rotation import EarthRotationModel
from almanac_tools.points import MovingPoint
from almanac_tools.vectors import Vector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Star:
    """A catalogue star.

    ra and dec are in radians at the catalogue epoch; proper motions are in
    mas/yr (pm_ra already multiplied by cos dec), parallax in mas and radial
    velocity in km/s.
    """

    catalogue_number: int
    hd_number: int
    ra: float
    dec: float
    pm_ra: float = 0.0
    pm_dec: float = 0.0
    parallax: float = 0.0
    magnitude: float = 0.0
    radial_velocity: float = 0.0


class StarApparentPlace:
    """Apparent direction of stars for one observer.

    Parameters:
        observer: Observer whose barycentric state sets parallax and aberration.
        sun: Barycentric Sun, for light deflection.
        erm: Earth rotation model; None leaves the result in the catalogue frame.
    """

    def __init__(
        self, observer: MovingPoint, sun: MovingPoint, erm: EarthRotationModel | None = None
    ) -> None:
        self.observer = observer
        self.sun = sun
        self.erm = erm

    def calculate_apparent_place(
        self, star: Star, position_epoch: float, fixed_epoch: float, jd: float
    ) -> Vector:
        """Unit vector towards the star at JD ``jd``.

        Parameters:
            star: Catalogue entry.
            position_epoch: JD of the catalogue position (for proper motion).
            fixed_epoch: JD of the catalogue equinox (start of precession).
            jd: JD (TDB) of observation.

        Returns:
            Direction cosines, of date when an Earth rotation model is set.
        """
        ra, dec = star.ra, star.dec
        cra, sra = math.cos(ra), math.sin(ra)
        cdec, sdec = math.cos(dec), math.sin(dec)
        q = Vector(cdec * cra, cdec * sra, sdec)

        T = (jd - position_epoch) / DAYS_PER_JULIAN_CENTURY
        # mas/yr -> rad/century, mas -> rad, km/s -> AU/century
        pm_ra = star.pm_ra * MAS_TO_RADIANS * 100.0
        pm_dec = star.pm_dec * MAS_TO_RADIANS * 100.0
        parallax = star.parallax * MAS_TO_RADIANS
        rv = star.radial_velocity * KM_PER_S_TO_AU_PER_CENTURY

        radial = rv * parallax
        m = Vector(
            -pm_ra * sra - pm_dec * sdec * cra + radial * q.x,
            pm_ra * cra - pm_dec * sdec * sra + radial * q.y,
            pm_dec * cdec + radial * q.z,
        )

        sv = self.observer.state_vector(jd)
        p_earth = sv.position
        p_sun = self.sun.position(jd)

        p = (q + m * T - p_earth * parallax).normalize()
        e = p_earth - p_sun
        emag = e.magnitude()
        e = e.normalize()

        pdote = p.dot(e)
        dp = Vector.linear_combination(e, 1.0, p, -pdote)
        p1 = p + dp * (SOLAR_GRAVITATIONAL_FACTOR / emag / (1.0 + pdote))

        v = sv.velocity * AU_PER_DAY_TO_C
        vmag = v.magnitude()
        inv_beta = math.sqrt(1.0 - vmag * vmag)
        p1dotv = p1.dot(v)
        p2 = Vector.linear_combination(p1, inv_beta, v, 1.0 + p1dotv / (1.0 + inv_beta))
        p2 = p2 * (1.0 / (1.0 + p1dotv))

        if self.erm is not None:
            precession = self.erm.precession_matrix(fixed_epoch, jd)
            nutation = self.erm.nutation_matrix(jd)
            p2 = p2.transform(nutation.right_multiply(precession))
        logger.debug('Star %d apparent direction at JD %s: %r', star.catalogue_number, jd, p2)
        return p2.normalize()
