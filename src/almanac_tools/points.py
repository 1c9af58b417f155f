"""Moving points: barycentric positions of planets, the Earth and the Moon in AU.

All positions and velocities are barycentric, referred to the mean equator
and equinox of J2000, in AU and AU/day.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol, cast, runtime_checkable

import numpy as np

from almanac_tools.constants import EARTH, EMB, MOON, SUN, body_name
from almanac_tools.errors import RangeError
from almanac_tools.jpl.store import EphemerisStore
from almanac_tools.vectors import Vector


@dataclass(frozen=True)
class StateVector:
    """Position (AU) and velocity (AU/day) at one instant."""

    position: Vector
    velocity: Vector


@runtime_checkable
class MovingPoint(Protocol):
    """Anything whose barycentric position can be asked for at a JD (TDB)."""

    @property
    def body_code(self) -> int: ...

    @property
    def ephemeris(self) -> EphemerisStore: ...

    @property
    def earliest_date(self) -> float: ...

    @property
    def latest_date(self) -> float: ...

    @property
    def epoch(self) -> float: ...

    def is_valid_date(self, t: float) -> bool: ...

    def position(self, t: float) -> Vector: ...

    def state_vector(self, t: float) -> StateVector: ...


class _EphemerisPoint(ABC):
    """Shared plumbing for points backed by one EphemerisStore."""

    def __init__(self, store: EphemerisStore, body_code: int) -> None:
        self._store = store
        self._body_code = body_code

    @property
    def body_code(self) -> int:
        return self._body_code

    @property
    def ephemeris(self) -> EphemerisStore:
        return self._store

    @property
    def earliest_date(self) -> float:
        return self._store.earliest_date

    @property
    def latest_date(self) -> float:
        return self._store.latest_date

    @property
    def epoch(self) -> float:
        return self._store.epoch

    def is_valid_date(self, t: float) -> bool:
        return self._store.is_valid_date(t)

    @abstractmethod
    def _raw(self, t: float, want_velocity: bool) -> tuple[np.ndarray, np.ndarray | None]:
        """Barycentric position and optional velocity in km and km/day."""

    def position(self, t: float) -> Vector:
        pos, _ = self._raw(t, False)
        return Vector.from_array(pos / self._store.au)

    def state_vector(self, t: float) -> StateVector:
        pos, vel = self._raw(t, True)
        au = self._store.au
        return StateVector(
            Vector.from_array(pos / au), Vector.from_array(cast(np.ndarray, vel) / au)
        )

    def __repr__(self) -> str:
        return f'{type(self).__name__}({body_name(self._body_code)})'


class PlanetCentre(_EphemerisPoint):
    """Centre of a planet, the Sun, the Earth-Moon barycentre, or the geocentric Moon.

    Parameters:
        store: Loaded ephemeris.
        body: Component index, MERCURY through SUN.

    Raises:
        RangeError: Body is not a position component of the file.
    """

    def __init__(self, store: EphemerisStore, body: int) -> None:
        if body < 0 or body > SUN or not store.has_component(body):
            raise RangeError(
                f'{body_name(body)} is not a body in ephemeris DE{store.ephemeris_number}'
            )
        super().__init__(store, body)

    def _raw(self, t: float, want_velocity: bool) -> tuple[np.ndarray, np.ndarray | None]:
        return self._store.evaluate(t, self._body_code, want_velocity)


class EarthCentre(_EphemerisPoint):
    """Geocentre: the barycentre minus the Moon's share of the geocentric Moon vector."""

    def __init__(self, store: EphemerisStore) -> None:
        super().__init__(store, EARTH)
        self._moon_factor = 1.0 / (1.0 + store.emrat)

    def _raw(self, t: float, want_velocity: bool) -> tuple[np.ndarray, np.ndarray | None]:
        emb_p, emb_v = self._store.evaluate(t, EMB, want_velocity)
        moon_p, moon_v = self._store.evaluate(t, MOON, want_velocity)
        pos = emb_p - moon_p * self._moon_factor
        if not want_velocity:
            return pos, None
        return pos, cast(np.ndarray, emb_v) - cast(np.ndarray, moon_v) * self._moon_factor


class MoonCentre(_EphemerisPoint):
    """Barycentric Moon: the barycentre plus the Earth's share of the geocentric Moon vector."""

    def __init__(self, store: EphemerisStore) -> None:
        super().__init__(store, MOON)
        self._moon_factor = store.emrat / (1.0 + store.emrat)

    def _raw(self, t: float, want_velocity: bool) -> tuple[np.ndarray, np.ndarray | None]:
        emb_p, emb_v = self._store.evaluate(t, EMB, want_velocity)
        moon_p, moon_v = self._store.evaluate(t, MOON, want_velocity)
        pos = emb_p + moon_p * self._moon_factor
        if not want_velocity:
            return pos, None
        return pos, cast(np.ndarray, emb_v) + cast(np.ndarray, moon_v) * self._moon_factor


def moving_point(store: EphemerisStore, body: int) -> MovingPoint:
    """Return the barycentric point for a body code.

    EARTH gives the geocentre and MOON the barycentric Moon; every other body
    code is evaluated directly from its component.
    """
    if body == EARTH:
        return EarthCentre(store)
    if body == MOON:
        return MoonCentre(store)
    return PlanetCentre(store, body)
