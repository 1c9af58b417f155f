"""Observers: the geocentre, optionally displaced to a place on the Earth's surface."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from almanac_tools.constants import (
    EARTH_EQUATORIAL_RADIUS_KM,
    EARTH_FLATTENING,
    EARTH_ROTATION_RATE_RAD_S,
    PLACE_FLATTENING,
    SECONDS_PER_DAY,
)
from almanac_tools.earth_rotation import EarthRotationModel
from almanac_tools.jpl.store import EphemerisStore
from almanac_tools.points import EarthCentre, MovingPoint, StateVector
from almanac_tools.vectors import Vector


@dataclass(frozen=True)
class Place:
    """Geodetic position on the Earth.

    Parameters:
        latitude: Geodetic latitude in radians (north positive).
        longitude: Longitude in radians (east positive).
        height: Height above the reference spheroid in metres.
        timezone: Offset of local civil time from UT in hours.
    """

    latitude: float
    longitude: float
    height: float = 0.0
    timezone: float = 0.0
    geocentric_latitude: float = field(init=False)
    geocentric_distance: float = field(init=False)

    def __post_init__(self) -> None:
        sphi = math.sin(self.latitude)
        cphi = math.cos(self.latitude)
        q = (1.0 - PLACE_FLATTENING) ** 2
        c = 1.0 / math.sqrt(cphi * cphi + q * sphi * sphi)
        s = q * c
        x = c * cphi
        y = s * sphi
        # Frozen dataclass: derived fields are set through object.__setattr__.
        object.__setattr__(self, 'geocentric_latitude', math.atan2(y, x))
        object.__setattr__(self, 'geocentric_distance', math.hypot(x, y))

    @classmethod
    def from_degrees(
        cls, latitude_deg: float, longitude_deg: float, height: float = 0.0, timezone: float = 0.0
    ) -> Place:
        """Build a Place from latitude and east longitude in degrees."""
        return cls(math.radians(latitude_deg), math.radians(longitude_deg), height, timezone)


class TopocentricOffset:
    """Vector from the geocentre to a place, in the J2000 frame.

    The place is rotated by local apparent sidereal time, then carried from
    the true equator of date back to J2000 by the inverse nutation and
    precession. Its velocity is the Earth's rotation carrying the place.

    Parameters:
        erm: Earth rotation model.
        place: Observer's geodetic position.
        au: Astronomical unit in km.
        epoch: JD of the ephemeris reference frame.
    """

    def __init__(self, erm: EarthRotationModel, place: Place, au: float, epoch: float) -> None:
        self.erm = erm
        self.place = place
        self._epoch = epoch
        f2 = (1.0 - EARTH_FLATTENING) ** 2
        cphi = math.cos(place.latitude)
        sphi = math.sin(place.latitude)
        c = 1.0 / math.sqrt(cphi * cphi + f2 * sphi * sphi)
        s = f2 * c
        height_km = place.height * 0.001
        # rho cos(phi') and rho sin(phi') in AU
        self._pcospd = (EARTH_EQUATORIAL_RADIUS_KM * c + height_km) * cphi / au
        self._psinpd = (EARTH_EQUATORIAL_RADIUS_KM * s + height_km) * sphi / au

    def _offset(self, t: float, want_velocity: bool) -> tuple[Vector, Vector | None]:
        lst = self.erm.greenwich_apparent_sidereal_time(t) + self.place.longitude
        clst = math.cos(lst)
        slst = math.sin(lst)
        pcospd = self._pcospd
        pos = Vector(pcospd * clst, pcospd * slst, self._psinpd)

        # True equator of date -> mean equator of date -> J2000
        nt = self.erm.nutation_matrix(t).transpose()
        pt = self.erm.precession_matrix(self._epoch, t).transpose()
        pos = pos.transform(nt).transform(pt)
        if not want_velocity:
            return pos, None

        rate = EARTH_ROTATION_RATE_RAD_S * SECONDS_PER_DAY
        vel = Vector(-rate * pcospd * slst, rate * pcospd * clst, 0.0)
        return pos, vel.transform(nt).transform(pt)

    def position(self, t: float) -> Vector:
        """Offset position in AU at JD t."""
        pos, _ = self._offset(t, False)
        return pos

    def state_vector(self, t: float) -> StateVector:
        """Offset position (AU) and velocity (AU/day) at JD t."""
        pos, vel = self._offset(t, True)
        return StateVector(pos, vel if vel is not None else Vector())


class Observer:
    """The Earth's centre, optionally displaced to a place on its surface.

    Satisfies the MovingPoint protocol, so it can stand wherever a target
    can (for example as a geocentric target of a different observer).

    Parameters:
        earth: Barycentric geocentre.
        offset: Topocentric displacement, or None for a geocentric observer.
    """

    def __init__(self, earth: MovingPoint, offset: TopocentricOffset | None = None) -> None:
        self.earth = earth
        self.offset = offset

    @property
    def body_code(self) -> int:
        return self.earth.body_code

    @property
    def ephemeris(self) -> EphemerisStore:
        return self.earth.ephemeris

    @property
    def earliest_date(self) -> float:
        return self.earth.earliest_date

    @property
    def latest_date(self) -> float:
        return self.earth.latest_date

    @property
    def epoch(self) -> float:
        return self.earth.epoch

    @property
    def place(self) -> Place | None:
        return self.offset.place if self.offset is not None else None

    def is_valid_date(self, t: float) -> bool:
        return self.earth.is_valid_date(t)

    def position(self, t: float) -> Vector:
        pos = self.earth.position(t)
        if self.offset is None:
            return pos
        return pos + self.offset.position(t)

    def state_vector(self, t: float) -> StateVector:
        sv = self.earth.state_vector(t)
        if self.offset is None:
            return sv
        off = self.offset.state_vector(t)
        return StateVector(sv.position + off.position, sv.velocity + off.velocity)

    def __repr__(self) -> str:
        if self.offset is None:
            return 'Observer(geocentre)'
        p = self.offset.place
        return (
            f'Observer(lat={math.degrees(p.latitude):.4f}, '
            f'lon={math.degrees(p.longitude):.4f}, h={p.height:g} m)'
        )


def geocentric_observer(store: EphemerisStore) -> Observer:
    """Observer at the Earth's centre."""
    return Observer(EarthCentre(store))


def terrestrial_observer(store: EphemerisStore, erm: EarthRotationModel, place: Place) -> Observer:
    """Observer at a place on the Earth's surface."""
    offset = TopocentricOffset(erm, place, store.au, store.epoch)
    return Observer(EarthCentre(store), offset)
