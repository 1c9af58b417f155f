"""In-memory JPL DE ephemeris: load a date range of records and evaluate bodies."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, cast

import numpy as np

from almanac_tools.constants import J2000, LIBRATIONS, body_name
from almanac_tools.errors import ConfigError, FormatError, RangeError, date_out_of_range
from almanac_tools.jpl.chebyshev import ChebyshevScratch, evaluate_block
from almanac_tools.jpl.header import EphemerisHeader, coordinate_count, read_header

logger = logging.getLogger(__name__)

# Records 0 and 1 are the header and the constant values.
_FIRST_DATA_RECORD = 2


class EphemerisStore:
    """Chebyshev coefficients for a span of a JPL DE binary file.

    Only the records that intersect ``[start, end]`` are read. After loading,
    ``earliest_date`` and ``latest_date`` are the bounds of the loaded
    records, which may be wider than the requested span.

    Parameters:
        path: JPL DE binary file.
        start: Earliest JD (TDB) needed; 0 means the start of the file.
        end: Latest JD (TDB) needed; 0 means the end of the file less one record.

    Raises:
        ConfigError: start is after end.
        FormatError: Unknown ephemeris number or truncated file.
        RangeError: start or end outside the limits of the file.
        OSError: The file cannot be read.
    """

    def __init__(self, path: str | os.PathLike[str], start: float = 0.0, end: float = 0.0) -> None:
        if start > end:
            raise ConfigError(
                f'Start date {start!r} is after end date {end!r}',
                ['Pass start <= end, or 0 for either to use the file limits'],
            )
        self._path = Path(path)
        with self._path.open('rb') as fh:
            header = read_header(fh)
            file_size = os.fstat(fh.fileno()).st_size
            reclen = header.record_length
            l0, l1, span = header.start_jd, header.end_jd, header.span

            if start == 0.0:
                start = l0
            if end == 0.0:
                end = l1 - span
            if start < l0 or start > l1:
                raise RangeError(
                    f'Start date {start!r} is outside the file limits [{l0!r}, {l1!r}]',
                    [f'{self._path.name} covers JD {l0} to {l1}'],
                )
            if end < l0 or end > l1:
                raise RangeError(
                    f'End date {end!r} is outside the file limits [{l0!r}, {l1!r}]',
                    [f'{self._path.name} covers JD {l0} to {l1}'],
                )

            constants = self._read_constants(fh, header)

            records_in_file = file_size // reclen - _FIRST_DATA_RECORD
            if records_in_file < 1:
                raise FormatError(
                    f'Ephemeris file {self._path} holds no data records',
                    ['Check that the file was transferred completely and in binary mode'],
                )
            firstrec = int((start - l0) / span)
            lastrec = int((end - l0) / span)
            if lastrec > records_in_file - 1:
                logger.debug(
                    'Last record %d clamped to %d records in file', lastrec, records_in_file
                )
                lastrec = records_in_file - 1
            firstrec = min(firstrec, lastrec)
            nrecs = lastrec - firstrec + 1

            fh.seek((firstrec + _FIRST_DATA_RECORD) * reclen)
            raw = fh.read(nrecs * reclen)
            if len(raw) < nrecs * reclen:
                raise FormatError(
                    f'Ephemeris file {self._path} truncated: expected {nrecs} records '
                    f'from record {firstrec}'
                )

        data = np.frombuffer(raw, dtype=f'{header.byte_order}f8').reshape(nrecs, header.ncoeff)
        data = data.astype(np.float64)
        data.flags.writeable = False

        self._header = header
        self._data = data
        self._constants: Mapping[str, float] = MappingProxyType(constants)
        self._earliest = float(data[0, 0])
        self._latest = float(data[-1, 1])
        self._scratch = ChebyshevScratch(header.max_coefficients)
        logger.info(
            'Loaded DE%d (%s) from %s: %d records, JD %.1f to %.1f',
            header.ephemeris_number,
            header.byte_order_name,
            self._path,
            nrecs,
            self._earliest,
            self._latest,
        )

    @staticmethod
    def _read_constants(fh, header: EphemerisHeader) -> dict[str, float]:
        """Read record 2: one float64 per constant name."""
        fh.seek(header.record_length)
        raw = fh.read(8 * header.ncon)
        if len(raw) < 8 * header.ncon:
            raise FormatError(
                f'Ephemeris file truncated in the constants record ({len(raw)} bytes)'
            )
        values = np.frombuffer(raw, dtype=f'{header.byte_order}f8', count=header.ncon)
        return {name: float(v) for name, v in zip(header.constant_names, values)}

    @property
    def path(self) -> Path:
        return self._path

    @property
    def header(self) -> EphemerisHeader:
        return self._header

    @property
    def earliest_date(self) -> float:
        """Start JD of the first loaded record."""
        return self._earliest

    @property
    def latest_date(self) -> float:
        """End JD of the last loaded record."""
        return self._latest

    @property
    def epoch(self) -> float:
        """Epoch of the reference frame (J2000)."""
        return J2000

    @property
    def au(self) -> float:
        """Astronomical unit in km."""
        return self._header.au

    @property
    def emrat(self) -> float:
        """Earth/Moon mass ratio."""
        return self._header.emrat

    @property
    def ephemeris_number(self) -> int:
        return self._header.ephemeris_number

    @property
    def byte_order(self) -> str:
        """``'>'`` or ``'<'``."""
        return self._header.byte_order

    @property
    def constants(self) -> Mapping[str, float]:
        """Read-only map of constant name to value."""
        return self._constants

    def constant(self, name: str) -> float | None:
        """Return the named constant, or None if the file does not define it."""
        return self._constants.get(name)

    @property
    def number_of_records(self) -> int:
        """Number of loaded data records."""
        return int(self._data.shape[0])

    @property
    def record_length(self) -> int:
        """Number of float64 values in each data record."""
        return int(self._data.shape[1])

    @property
    def records(self) -> np.ndarray:
        """Loaded coefficient records (read-only), one row per record."""
        return self._data

    def has_component(self, body: int) -> bool:
        """True if the file carries coefficients for this component index."""
        if body < 0 or body > LIBRATIONS:
            return False
        return self._header.descriptors[body].ncoeff > 0

    def is_valid_date(self, t: float) -> bool:
        """True if ``t`` lies within ``[earliest_date, latest_date]``."""
        return self._earliest <= t <= self._latest

    def evaluate(
        self, t: float, body: int, want_velocity: bool = False
    ) -> tuple[np.ndarray, np.ndarray | None]:
        """Evaluate one component at time ``t``.

        Parameters:
            t: Julian Date (TDB).
            body: Component index (MERCURY .. LIBRATIONS).
            want_velocity: Also compute the rate.

        Returns:
            (position, velocity or None). Arrays of length 3 for bodies (km,
            km/day) and 2 for nutations and librations (rad, rad/day).

        Raises:
            RangeError: Component absent or t outside the loaded span.
        """
        if not self.has_component(body):
            raise RangeError(
                f'Ephemeris DE{self.ephemeris_number} does not have component {body} '
                f'({body_name(body)})'
            )
        if not self.is_valid_date(t):
            raise date_out_of_range(t, self._earliest, self._latest)

        desc = self._header.descriptors[body]
        ncoords = coordinate_count(body)
        span = self._header.span
        nrecs = self._data.shape[0]

        irec = min(int((t - self._earliest) / span), nrecs - 1)
        row = self._data[irec]
        dx = (t - row[0]) * desc.nsub / span
        ix = min(int(dx), desc.nsub - 1)
        x = 2.0 * (dx - ix) - 1.0

        ioff = desc.offset - 1 + ix * desc.ncoeff * ncoords
        return evaluate_block(
            row[ioff : ioff + desc.ncoeff * ncoords],
            desc.ncoeff,
            ncoords,
            x,
            self._scratch,
            want_velocity=want_velocity,
            velocity_scale=2.0 * desc.nsub / span,
        )

    def position(self, t: float, body: int) -> np.ndarray:
        """Position only; see evaluate."""
        pos, _ = self.evaluate(t, body)
        return pos

    def state(self, t: float, body: int) -> tuple[np.ndarray, np.ndarray]:
        """Position and velocity; see evaluate."""
        pos, vel = self.evaluate(t, body, want_velocity=True)
        return pos, cast(np.ndarray, vel)

    def __repr__(self) -> str:
        return (
            f'EphemerisStore({str(self._path)!r}, DE{self.ephemeris_number}, '
            f'{self._earliest}..{self._latest})'
        )
