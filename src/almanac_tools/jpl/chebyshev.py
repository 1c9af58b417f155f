"""Chebyshev series evaluation for DE coefficient blocks."""

from __future__ import annotations

import threading

import numpy as np


class ChebyshevScratch(threading.local):
    """Per-thread work arrays for the polynomial recurrences.

    Each thread that touches an instance gets its own pair of arrays, sized
    once to the largest coefficient count of the ephemeris.

    Parameters:
        size: Maximum number of coefficients per coordinate.
    """

    def __init__(self, size: int) -> None:
        n = max(size, 2)
        self.size = n
        self.pc = np.zeros(n, dtype=np.float64)
        self.vc = np.zeros(n, dtype=np.float64)


def fill_polynomials(x: float, ncoeff: int, scratch: ChebyshevScratch, want_velocity: bool) -> None:
    """Fill scratch.pc with T_0..T_{n-1}(x) and, if asked, scratch.vc with their derivatives.

    T_0 = 1, T_1 = x, T_i = 2x T_{i-1} - T_{i-2};
    U_0 = 0, U_1 = 1, U_i = 2x U_{i-1} - U_{i-2} + 2 T_{i-1}.
    """
    pc = scratch.pc
    vc = scratch.vc
    twox = 2.0 * x
    pc[0] = 1.0
    pc[1] = x
    for i in range(2, ncoeff):
        pc[i] = twox * pc[i - 1] - pc[i - 2]
    if want_velocity:
        vc[0] = 0.0
        vc[1] = 1.0
        for i in range(2, ncoeff):
            vc[i] = twox * vc[i - 1] - vc[i - 2] + 2.0 * pc[i - 1]


def evaluate_block(
    coefficients: np.ndarray,
    ncoeff: int,
    ncoords: int,
    x: float,
    scratch: ChebyshevScratch,
    want_velocity: bool = False,
    velocity_scale: float = 1.0,
) -> tuple[np.ndarray, np.ndarray | None]:
    """Evaluate one sub-interval's coefficient block.

    Parameters:
        coefficients: ncoeff * ncoords values, one contiguous run per coordinate.
        ncoeff: Coefficients per coordinate.
        ncoords: Number of coordinates (2 or 3).
        x: Normalized time in [-1, 1].
        scratch: Per-thread work arrays (size >= ncoeff).
        want_velocity: Also return the time derivative.
        velocity_scale: d(x)/d(t) factor applied to the derivative.

    Returns:
        (position, velocity or None) as new arrays of length ncoords.
    """
    if ncoeff > scratch.size:
        raise ValueError(f'scratch holds {scratch.size} coefficients, block needs {ncoeff}')
    fill_polynomials(x, ncoeff, scratch, want_velocity)
    block = coefficients[: ncoeff * ncoords].reshape(ncoords, ncoeff)
    position = block @ scratch.pc[:ncoeff]
    if not want_velocity:
        return position, None
    velocity = (block @ scratch.vc[:ncoeff]) * velocity_scale
    return position, velocity
