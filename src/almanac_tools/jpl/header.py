"""JPL DE binary header: layout, byte-order detection and parsing.

The first record of a DE binary file holds the title lines, constant names,
time limits, AU, Earth/Moon mass ratio and one descriptor per component
(start offset, coefficients per sub-interval, sub-intervals per record).
The second record holds the constant values; records from the third on hold
Chebyshev coefficients.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO

from almanac_tools.constants import LIBRATIONS, SUN
from almanac_tools.errors import FormatError

logger = logging.getLogger(__name__)

# Byte offsets within the header record
TITLE_LENGTH = 84
NUM_TITLES = 3
CNAME_OFFSET = 252
CNAME_LENGTH = 6
NUM_CNAMES = 400
LIMITS_OFFSET = 2652
NCON_OFFSET = 2676
AU_OFFSET = 2680
EMRAT_OFFSET = 2688
DESCRIPTORS_OFFSET = 2696
EPHEMERIS_NUMBER_OFFSET = 2840
LIBRATION_DESCRIPTOR_OFFSET = 2844
EXTRA_CNAME_OFFSET = 2856

# Smallest prefix that holds every fixed header field
MIN_HEADER_BYTES = EXTRA_CNAME_OFFSET

# Plausible ephemeris numbers lie strictly inside this range
_EPHEMERIS_NUMBER_RANGE = (0, 2000)

# Ephemeris number -> float64 values per record
COEFFICIENTS_PER_RECORD: dict[int, int] = {
    102: 773,
    200: 826,
    202: 826,
    403: 1018,
    405: 1018,
    406: 728,
    410: 1018,
    413: 1018,
    414: 1018,
    418: 1018,
    421: 1018,
    422: 1018,
    423: 1018,
    430: 1018,
    431: 1018,
    440: 1018,
    441: 1018,
}


@dataclass(frozen=True)
class BodyDescriptor:
    """Where a component's coefficients sit inside each record.

    ``offset`` is 1-based into the record (the record's time bounds occupy
    positions 1 and 2). ``ncoeff == 0`` means the component is absent.
    """

    offset: int
    ncoeff: int
    nsub: int

    @property
    def present(self) -> bool:
        return self.ncoeff > 0 and self.nsub > 0


@dataclass(frozen=True)
class EphemerisHeader:
    """Decoded header record of a JPL DE binary file."""

    titles: tuple[str, ...]
    start_jd: float
    end_jd: float
    span: float
    ncon: int
    au: float
    emrat: float
    descriptors: tuple[BodyDescriptor, ...]
    ephemeris_number: int
    byte_order: str
    ncoeff: int
    constant_names: tuple[str, ...]

    @property
    def record_length(self) -> int:
        """Record length in bytes."""
        return 8 * self.ncoeff

    @property
    def max_coefficients(self) -> int:
        """Largest per-sub-interval coefficient count over all components."""
        return max((d.ncoeff for d in self.descriptors), default=0)

    @property
    def byte_order_name(self) -> str:
        return 'big-endian' if self.byte_order == '>' else 'little-endian'


def coordinate_count(body: int) -> int:
    """Number of coordinates stored per coefficient set for a component.

    Nutations and librations (every index above SUN) carry 2; all bodies 3.
    """
    return 3 if body <= SUN else 2


def coefficients_per_record(ephemeris_number: int) -> int:
    """Return the number of float64 values per record for an ephemeris number.

    Raises:
        FormatError: If the ephemeris number is not a known DE release.
    """
    try:
        return COEFFICIENTS_PER_RECORD[ephemeris_number]
    except KeyError:
        known = ', '.join(str(n) for n in sorted(COEFFICIENTS_PER_RECORD))
        raise FormatError(
            f'Unknown ephemeris number {ephemeris_number}',
            [f'Supported DE numbers: {known}'],
        ) from None


def detect_byte_order(raw: bytes) -> str:
    """Choose the file byte order from the ephemeris number field.

    The number is read big-endian first; if that value is not a plausible
    ephemeris number the file is taken to be little-endian.

    Returns:
        ``'>'`` or ``'<'`` (struct/numpy byte-order prefix).
    """
    (big,) = struct.unpack_from('>i', raw, EPHEMERIS_NUMBER_OFFSET)
    lo, hi = _EPHEMERIS_NUMBER_RANGE
    if lo < big < hi:
        logger.debug('Ephemeris number %d read big-endian', big)
        return '>'
    (little,) = struct.unpack_from('<i', raw, EPHEMERIS_NUMBER_OFFSET)
    logger.debug(
        'Ephemeris number %d implausible big-endian; using little-endian (%d)', big, little
    )
    return '<'


def _decode_name(raw: bytes) -> str:
    return raw.decode('ascii', errors='replace').strip()


def parse_header(raw: bytes) -> EphemerisHeader:
    """Decode the header record.

    Parameters:
        raw: Leading bytes of the file; at least MIN_HEADER_BYTES, plus the
            extra constant names when NCON > 400.

    Returns:
        EphemerisHeader.

    Raises:
        FormatError: Short header or unknown ephemeris number.
    """
    if len(raw) < MIN_HEADER_BYTES:
        raise FormatError(
            f'Ephemeris header too short: {len(raw)} bytes (need {MIN_HEADER_BYTES})',
            ['Check that the file is a JPL DE binary ephemeris, not ASCII'],
        )
    bo = detect_byte_order(raw)
    (denum,) = struct.unpack_from(f'{bo}i', raw, EPHEMERIS_NUMBER_OFFSET)
    ncoeff = coefficients_per_record(denum)

    titles = tuple(
        _decode_name(raw[i * TITLE_LENGTH : (i + 1) * TITLE_LENGTH]) for i in range(NUM_TITLES)
    )
    start_jd, end_jd, span = struct.unpack_from(f'{bo}3d', raw, LIMITS_OFFSET)
    (ncon,) = struct.unpack_from(f'{bo}i', raw, NCON_OFFSET)
    (au,) = struct.unpack_from(f'{bo}d', raw, AU_OFFSET)
    (emrat,) = struct.unpack_from(f'{bo}d', raw, EMRAT_OFFSET)
    if ncon < 0:
        raise FormatError(f'Negative constant count {ncon} in ephemeris header')
    if span <= 0.0:
        raise FormatError(f'Non-positive record span {span!r} in ephemeris header')

    ipt = struct.unpack_from(f'{bo}{3 * LIBRATIONS}i', raw, DESCRIPTORS_OFFSET)
    descriptors = [BodyDescriptor(*ipt[3 * i : 3 * i + 3]) for i in range(LIBRATIONS)]
    descriptors.append(
        BodyDescriptor(*struct.unpack_from(f'{bo}3i', raw, LIBRATION_DESCRIPTOR_OFFSET))
    )

    names: list[str] = []
    for i in range(min(ncon, NUM_CNAMES)):
        start = CNAME_OFFSET + i * CNAME_LENGTH
        names.append(_decode_name(raw[start : start + CNAME_LENGTH]))
    extra = ncon - NUM_CNAMES
    if extra > 0:
        end = EXTRA_CNAME_OFFSET + extra * CNAME_LENGTH
        if len(raw) < end:
            raise FormatError(
                f'Ephemeris header truncated: {extra} constant names beyond {NUM_CNAMES} '
                f'need {end} bytes, got {len(raw)}'
            )
        for i in range(extra):
            start = EXTRA_CNAME_OFFSET + i * CNAME_LENGTH
            names.append(_decode_name(raw[start : start + CNAME_LENGTH]))

    return EphemerisHeader(
        titles=titles,
        start_jd=start_jd,
        end_jd=end_jd,
        span=span,
        ncon=ncon,
        au=au,
        emrat=emrat,
        descriptors=tuple(descriptors),
        ephemeris_number=denum,
        byte_order=bo,
        ncoeff=ncoeff,
        constant_names=tuple(names),
    )


def read_header(fh: BinaryIO) -> EphemerisHeader:
    """Read and decode the header record from an open binary file.

    The whole first record is read so that a file shorter than one record is
    rejected.

    Raises:
        FormatError: Short file, unknown ephemeris number.
    """
    fh.seek(0)
    raw = fh.read(MIN_HEADER_BYTES)
    if len(raw) < MIN_HEADER_BYTES:
        raise FormatError(
            f'Ephemeris file too short: {len(raw)} bytes (need {MIN_HEADER_BYTES})',
            ['Check that the file is a complete JPL DE binary ephemeris'],
        )
    bo = detect_byte_order(raw)
    (denum,) = struct.unpack_from(f'{bo}i', raw, EPHEMERIS_NUMBER_OFFSET)
    reclen = 8 * coefficients_per_record(denum)
    rest = fh.read(reclen - len(raw)) if reclen > len(raw) else b''
    raw += rest
    if len(raw) < reclen:
        raise FormatError(
            f'Ephemeris file too short: header record needs {reclen} bytes, got {len(raw)}',
            ['Check that the file is a complete JPL DE binary ephemeris'],
        )
    return parse_header(raw)
