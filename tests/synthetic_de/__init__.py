"""Synthetic JPL DE binary files with straight-line motion, for tests without real ephemerides."""

from tests.synthetic_de.writer import (
    AU_KM,
    DEFAULT_MOTIONS,
    DE405_DESCRIPTORS,
    DE406_DESCRIPTORS,
    EMRAT,
    REFERENCE_JD,
    SPAN,
    START_JD,
    LinearMotion,
    aligned_motions,
    header_bytes,
    write_ephemeris,
)

__all__ = [
    "AU_KM",
    "DEFAULT_MOTIONS",
    "DE405_DESCRIPTORS",
    "DE406_DESCRIPTORS",
    "EMRAT",
    "REFERENCE_JD",
    "SPAN",
    "START_JD",
    "LinearMotion",
    "aligned_motions",
    "header_bytes",
    "write_ephemeris",
]
