"""
Real values of the Lambert W function on the principal branch.

Vectorised evaluation of ``W(x)`` for real ``x >= 0``, the solution of
``w * exp(w) = x``. Each argument is classified into a numeric range and
given a closed-form starting approximation for that range, which is then
polished with a Halley-type correction.

Ranges
~~~~~~
- ``x <= X_SMALL``: truncated continued fraction of the Taylor series.
  Exact to machine precision in this range, never refined.
- ``X_SMALL < x <= X_LARGE``: rational approximation in the branch-point
  variable ``sqrt(2 * (1 + e*x))``, which maps the singularity at
  ``x = -1/e`` to zero.
- ``x > X_LARGE``: logarithmic asymptotic expansion.

References
----------
- Barry D.A., Culligan-Hensley P.J., Barry S.J., "Real values of the
  W-function", ACM Transactions on Mathematical Software, 21(2):161-171,
  1995.
- Barry D.A., Barry S.J., Culligan-Hensley P.J., "Algorithm 743: WAPR:
  A FORTRAN routine for calculating real values of the W-function",
  ACM Transactions on Mathematical Software, 21(2):172-181, 1995.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputDomainError

# ---------------------------------------------------------------------------
# Range edges and approximation constants (IEEE double, 52-bit mantissa)
# ---------------------------------------------------------------------------
_NBITS: int = 52
_TB: float = 0.5 ** _NBITS

X_SMALL: float = _TB ** (1.0 / 6.0) / 2.0
X_LARGE: float = 20.0

HALLEY_ROUNDS: int = 2

_EM: float = -np.exp(-1.0)              # branch point -1/e
_AN2_SCALE: float = 4.612634277343749
_AN2_SHIFT: float = 1.09556884765625
_S2: float = np.sqrt(2.0)
_S21: float = 2.0 * _S2 - 3.0
_S22: float = 4.0 - 3.0 * _S2
_S23: float = _S2 - 2.0
_C23: float = 2.0 / 3.0


def _series_small(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return x / (1.0 + x / (1.0 + x / (2.0 + x / (0.6 + 0.34 * x))))


def _branch_point(x: NDArray[np.float64]) -> NDArray[np.float64]:
    reta = _S2 * np.sqrt(1.0 - x / _EM)
    an2 = _AN2_SCALE * np.sqrt(np.sqrt(reta + _AN2_SHIFT))
    return (
        reta
        / (1.0 + reta / (3.0 + (_S21 * an2 + _S22) * reta / (_S23 * (an2 + reta))))
        - 1.0
    )


def _asymptotic(x: NDArray[np.float64]) -> NDArray[np.float64]:
    zl = np.log(x)
    return np.log(
        x / np.log(x / zl ** np.exp(-1.124491989777808 / (0.4225028202459761 + zl)))
    )


def _halley_step(
    x: NDArray[np.float64], w: NDArray[np.float64]
) -> NDArray[np.float64]:
    """One Halley-type correction of *w* towards ``W(x)``."""
    zn = np.log(x / w) - w
    temp = 1.0 + w
    temp2 = 2.0 * temp * (temp + _C23 * zn)
    return w * (1.0 + (zn / temp) * (temp2 - zn) / (temp2 - 2.0 * zn))


def lambertw(x: ArrayLike) -> NDArray[np.float64]:
    """Principal branch of the Lambert W function for ``x >= 0``.

    Parameters
    ----------
    x : array_like
        Real, non-negative arguments. A scalar is treated as a length-1
        vector; n-d arrays keep their shape.

    Returns
    -------
    ndarray
        ``w`` with ``w * exp(w) == x`` to near machine precision. Non-finite
        arguments (``inf`` from an overflowed exponential, or ``NaN``) give
        ``NaN`` so the caller can detect them and fall back to a log-space
        solution.

    Raises
    ------
    InputDomainError
        If any element is complex with a non-zero imaginary part, or
        negative.
    """
    x = np.atleast_1d(np.asarray(x))

    if np.iscomplexobj(x):
        if np.any(x.imag != 0.0):
            raise InputDomainError(
                "lambertw: complex arguments are not supported"
            )
        x = x.real
    x = x.astype(np.float64)

    if np.any(x < 0.0):
        raise InputDomainError(
            "lambertw: negative arguments are not supported, only the "
            "upper branch for x >= 0 is evaluated"
        )

    finite = np.isfinite(x)
    small = finite & (x <= X_SMALL)
    moderate = finite & ~small & (x <= X_LARGE)
    large = finite & (x > X_LARGE)

    w = np.full(x.shape, np.nan, dtype=np.float64)
    w[small] = _series_small(x[small])
    w[moderate] = _branch_point(x[moderate])
    w[large] = _asymptotic(x[large])

    refine = moderate | large
    if np.any(refine):
        x_r = x[refine]
        w_r = w[refine]
        for _ in range(HALLEY_ROUNDS):
            w_r = _halley_step(x_r, w_r)
        w[refine] = w_r

    return w
