"""Generic periodic-term summation shared by the Earth, nutation and Moon series.

Every series has the same shape: each row of a coefficient table contributes
``amplitude * kernel(multipliers . arguments)``, optionally scaled by a
per-row damping factor. Only the table, the argument vector, the kernel and
the damping rule differ between series.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .terms import NUTATION_COEFFICIENTS, NUTATION_MULTIPLIERS
from .utils import polynomial

__all__ = [
    "earth_series",
    "lunar_series",
    "nutation_series",
    "periodic_sum",
]

Kernel = Callable[[np.ndarray], np.ndarray]

EARTH_SCALE = 1.0e8
NUTATION_SCALE = 36_000_000.0  # 0.0001 arcsec -> degrees


def periodic_sum(
    multipliers: np.ndarray,
    arguments: Sequence[float],
    amplitudes: np.ndarray,
    kernel: Kernel,
    damping: Optional[np.ndarray] = None,
    degrees: bool = True,
) -> float:
    """Sum ``amplitude * kernel(multipliers . arguments)`` over all table rows.

    Parameters
    ----------
    multipliers:
        Array of shape ``(rows, k)``.
    arguments:
        The ``k`` fundamental arguments.
    amplitudes:
        One amplitude per row.
    kernel:
        ``np.sin`` or ``np.cos``.
    damping:
        Optional per-row factor applied to each term.
    degrees:
        Whether the phases are expressed in degrees (converted before the
        kernel) or already in radians.
    """

    phases = np.dot(multipliers, np.asarray(arguments, dtype=float))
    if degrees:
        phases = np.radians(phases)
    terms = amplitudes * kernel(phases)
    if damping is not None:
        terms = terms * damping
    return float(np.sum(terms))


def earth_series(orders: Sequence[np.ndarray], jme: float) -> float:
    """Combine the per-power Earth sums by Horner's rule in JME (radians or AU)."""

    arguments = (1.0, jme)
    sums = [
        periodic_sum(table[:, 1:], arguments, table[:, 0], np.cos, degrees=False)
        for table in orders
    ]
    return polynomial(sums[::-1], jme) / EARTH_SCALE


def nutation_series(arguments: Sequence[float], jce: float) -> Tuple[float, float]:
    """Nutation in longitude and obliquity ``(delta_psi, delta_epsilon)`` in degrees.

    *arguments* are the five fundamental arguments ``(D, M, M', F, Omega)``
    in degrees at Julian Ephemeris Century *jce*.
    """

    a, b, c, d = NUTATION_COEFFICIENTS.T
    delta_psi = periodic_sum(NUTATION_MULTIPLIERS, arguments, a + b * jce, np.sin)
    delta_epsilon = periodic_sum(NUTATION_MULTIPLIERS, arguments, c + d * jce, np.cos)
    return delta_psi / NUTATION_SCALE, delta_epsilon / NUTATION_SCALE


def lunar_series(table: np.ndarray, arguments: Sequence[float], jce: float) -> Tuple[float, float]:
    """Sine and cosine accumulators of a lunar table, in raw table units.

    *arguments* are ``(D, M, M', F)`` in degrees. Terms involving the Sun's
    mean anomaly are damped by ``E ** |m|`` where ``E`` tracks the decreasing
    eccentricity of the Earth's orbit.
    """

    eccentricity = 1.0 - jce * (0.002516 + jce * 0.0000074)
    damping = eccentricity ** np.abs(table[:, 1])
    multipliers = table[:, :4]
    sin_sum = periodic_sum(multipliers, arguments, table[:, 4], np.sin, damping)
    cos_sum = periodic_sum(multipliers, arguments, table[:, 5], np.cos, damping)
    return sin_sum, cos_sum
