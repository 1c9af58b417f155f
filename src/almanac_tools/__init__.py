"""Apparent places of solar-system bodies and stars from JPL DE ephemerides.

This package provides:
- A reader for JPL DE binary ephemeris files (Chebyshev coefficient records)
- IAU 1976/1980 precession, nutation and sidereal time
- An apparent-place pipeline (light time, deflection, aberration, frame rotation)
- A CLI that prints single apparent places or time-series tables

Time conversions use rms-julian; vector and polynomial work uses numpy.
"""

__all__: list[str] = []
