# disc_world/noise.py

"""
================================================================================
PERIODIC FIELD UTILITIES
================================================================================
This module provides the fixed-octave sine/cosine sums used to roughen the
rim wall and the underside. They stand in for fractal noise: each extra term
doubles-ish the frequency and halves-ish the amplitude. It is designed to be a
pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - 1D NumPy arrays of per-vertex coordinates (x, z or theta, y).
    - A 2D float array of terms; see terms_to_array() for the column layout.
- Outputs:
    - A 1D NumPy array of field values, one per vertex.
- Side Effects: None.
- Invariants: The output length matches the input length. Fields of theta use
  integer theta frequencies only, so they are exactly 2*pi periodic.
================================================================================
"""

import numpy as np
from numba import njit

TERM_CROSS = 0.0
TERM_WAVE = 1.0
_TERM_KINDS = {"cross": TERM_CROSS, "wave": TERM_WAVE}


def terms_to_array(terms) -> np.ndarray:
    """
    Packs underside term tuples into a (T, 6) float array for the JIT kernels:
    [kind, x frequency, z frequency, phase, amplitude, z phase].
    """
    rows = []
    for term in terms:
        kind, fx, fz, phase, amplitude = term[:5]
        z_phase = term[5] if len(term) > 5 else 0.0
        if kind not in _TERM_KINDS:
            raise ValueError(f"Unknown term kind '{kind}', expected one of {sorted(_TERM_KINDS)}")
        rows.append((_TERM_KINDS[kind], fx, fz, phase, amplitude, z_phase))
    if not rows:
        raise ValueError("At least one term is required")
    return np.array(rows, dtype=np.float64)


@njit
def cross_terms_2d(x, z, terms):
    """
    Sums the underside terms at each (x, z):
      cross: amp * sin(fx*x + phase) * cos(fz*z + z_phase)
      wave:  amp * sin(fx*x + fz*z + phase)
    """
    n = x.shape[0]
    total = np.zeros(n)
    for i in range(n):
        value = 0.0
        for t in range(terms.shape[0]):
            fx = terms[t, 1]
            fz = terms[t, 2]
            phase = terms[t, 3]
            amplitude = terms[t, 4]
            if terms[t, 0] == 0.0:
                value += np.sin(x[i] * fx + phase) * np.cos(z[i] * fz + terms[t, 5]) * amplitude
            else:
                value += np.sin(x[i] * fx + z[i] * fz + phase) * amplitude
        total[i] = value
    return total


@njit
def strata(y, theta, terms):
    "Horizontal banding: sum of amp * sin(fy*y + ft*theta + phase)."
    n = y.shape[0]
    total = np.zeros(n)
    for i in range(n):
        value = 0.0
        for t in range(terms.shape[0]):
            value += terms[t, 0] * np.sin(y[i] * terms[t, 1] + theta[i] * terms[t, 2] + terms[t, 3])
        total[i] = value
    return total


@njit
def bulge(theta, terms):
    "Large-scale undulation around the rim: sum of amp * sin(ft*theta + phase)."
    n = theta.shape[0]
    total = np.zeros(n)
    for i in range(n):
        value = 0.0
        for t in range(terms.shape[0]):
            value += terms[t, 0] * np.sin(theta[i] * terms[t, 1] + terms[t, 2])
        total[i] = value
    return total


@njit
def vertical_jitter(theta, y, amplitude, theta_frequency, y_frequency):
    n = theta.shape[0]
    total = np.zeros(n)
    for i in range(n):
        total[i] = amplitude * np.sin(theta[i] * theta_frequency + y[i] * y_frequency)
    return total


def max_amplitude(terms: np.ndarray, amplitude_column: int) -> float:
    """The largest absolute value a sum of the given terms can reach."""
    return float(np.sum(np.abs(terms[:, amplitude_column])))
