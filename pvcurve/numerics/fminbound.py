"""
Vectorised bounded scalar minimisation.

Runs Brent's method (golden-section search with successive parabolic
interpolation) independently for every element of a batch of problems.
Each element has its own interval ``[lower[i], upper[i]]`` and
tolerance, and stops on its own; the objective is called on the whole
vector at once, with finished elements held at their current best point.

References
----------
- Brent R.P., "Algorithms for Minimization Without Derivatives",
  Prentice-Hall, 1973.
- Forsythe G.E., Malcolm M.A., Moler C.B., "Computer Methods for
  Mathematical Computations", Prentice-Hall, 1976.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputDomainError, InputShapeError

# ---------------------------------------------------------------------------
# Exit flags (per element)
# ---------------------------------------------------------------------------
EXIT_CONVERGED: int = 1
EXIT_MAXITER: int = 0
EXIT_BAD_BOUNDS: int = -2

_SQRT_EPS: float = float(np.sqrt(np.finfo(np.float64).eps))
_GOLDEN: float = 0.5 * (3.0 - np.sqrt(5.0))


@dataclass(frozen=True)
class MinimizerOptions:
    """Termination settings for :func:`fminbound_vec`.

    ``xtol`` may be a scalar or a vector matching the batch length.
    """

    xtol: float | NDArray[np.float64] = 1e-4
    maxiter: int = 500
    maxfun: int = 500

    def __post_init__(self) -> None:
        if not np.all(np.asarray(self.xtol, dtype=np.float64) > 0.0):
            raise InputDomainError("xtol must be positive")
        if self.maxiter < 1 or self.maxfun < 1:
            raise InputDomainError("maxiter and maxfun must be at least 1")


@dataclass(frozen=True)
class BoundedMinimizeResult:
    """Per-element outcome of a vectorised bounded minimisation."""

    x: NDArray[np.float64]           # argmin
    fun: NDArray[np.float64]         # objective at x
    exit_flag: NDArray[np.int_]      # EXIT_CONVERGED / EXIT_MAXITER / EXIT_BAD_BOUNDS
    iterations: NDArray[np.int_]
    func_count: NDArray[np.int_]

    @property
    def converged(self) -> NDArray[np.bool_]:
        return self.exit_flag == EXIT_CONVERGED

    @property
    def success(self) -> bool:
        """True only when every element converged."""
        return bool(np.all(self.converged))

    @property
    def exit_status(self) -> int:
        """Worst exit flag over the batch."""
        if self.exit_flag.size == 0:
            return EXIT_CONVERGED
        return int(self.exit_flag.min())


def _evaluate(
    func: Callable[[NDArray[np.float64]], ArrayLike],
    x: NDArray[np.float64],
) -> NDArray[np.float64]:
    fx = np.asarray(func(x), dtype=np.float64)
    if fx.shape != x.shape:
        raise InputShapeError(
            f"Objective returned shape {fx.shape} for input of shape {x.shape}"
        )
    return fx


def fminbound_vec(
    func: Callable[[NDArray[np.float64]], ArrayLike],
    lower: ArrayLike,
    upper: ArrayLike,
    options: MinimizerOptions | None = None,
) -> BoundedMinimizeResult:
    """Minimise ``func`` elementwise over ``[lower, upper]``.

    Parameters
    ----------
    func : callable
        Maps a float64 vector ``x`` of length N to a vector of N objective
        values. Element ``i`` of the output may depend only on ``x[i]``.
    lower, upper : array_like
        Interval bounds, scalars or length-N vectors.
    options : MinimizerOptions, optional
        Tolerance and iteration budget. Defaults to ``MinimizerOptions()``.

    Returns
    -------
    BoundedMinimizeResult
        ``exit_flag`` is ``1`` where the interval shrank below tolerance,
        ``0`` where ``maxiter`` or ``maxfun`` ran out first (``x`` is then
        the best point found), and ``-2`` where the bounds were not a
        proper finite interval (``lower >= upper``); such elements are
        not searched and report ``x = lower``.
    """
    opts = options if options is not None else MinimizerOptions()

    try:
        a, b, xtol = np.broadcast_arrays(
            np.atleast_1d(np.asarray(lower, dtype=np.float64)),
            np.atleast_1d(np.asarray(upper, dtype=np.float64)),
            np.atleast_1d(np.asarray(opts.xtol, dtype=np.float64)),
        )
    except ValueError as exc:
        raise InputShapeError(
            f"lower {np.shape(lower)}, upper {np.shape(upper)} and xtol "
            f"{np.shape(opts.xtol)} could not be broadcast together"
        ) from exc
    if a.ndim != 1:
        raise InputShapeError(f"Bounds must be vectors, got shape {a.shape}")

    a = a.copy()
    b = b.copy()
    xtol = xtol.copy()
    n = a.size

    bad = ~(np.isfinite(a) & np.isfinite(b)) | (a >= b)

    # Initial point: golden-section point of each interval
    xf = np.where(bad, a, a + _GOLDEN * (b - a))
    v = xf.copy()
    w = xf.copy()
    d = np.zeros(n)
    e = np.zeros(n)

    fx = _evaluate(func, xf)
    fv = fx.copy()
    fw = fx.copy()

    func_count = np.ones(n, dtype=np.int_)
    iterations = np.zeros(n, dtype=np.int_)
    exit_flag = np.full(n, EXIT_CONVERGED, dtype=np.int_)
    exit_flag[bad] = EXIT_BAD_BOUNDS

    xm = 0.5 * (a + b)
    tol1 = _SQRT_EPS * np.abs(xf) + xtol / 3.0
    tol2 = 2.0 * tol1
    active = ~bad & (np.abs(xf - xm) > (tol2 - 0.5 * (b - a)))

    while np.any(active):
        # --- Trial parabola through (v, fv), (w, fw), (xf, fx) ---
        para = active & (np.abs(e) > tol1)
        r = (xf - w) * (fx - fv)
        q = (xf - v) * (fx - fw)
        p = (xf - v) * q - (xf - w) * r
        q = 2.0 * (q - r)
        p = np.where(q > 0.0, -p, p)
        q = np.abs(q)
        r = e
        e = np.where(para, d, e)

        accept = (
            para
            & (np.abs(p) < np.abs(0.5 * q * r))
            & (p > q * (a - xf))
            & (p < q * (b - xf))
        )
        golden = active & ~accept

        with np.errstate(divide="ignore", invalid="ignore"):
            d_para = p / q
        x_para = xf + d_para
        # f must not be evaluated too close to either bound
        too_close = ((x_para - a) < tol2) | ((b - x_para) < tol2)
        side = np.sign(xm - xf) + ((xm - xf) == 0)
        d_para = np.where(too_close, tol1 * side, d_para)

        # --- Golden-section step into the larger segment ---
        e = np.where(golden, np.where(xf >= xm, a - xf, b - xf), e)
        d = np.where(accept, d_para, np.where(golden, _GOLDEN * e, d))

        # f must not be evaluated too close to xf
        side = np.sign(d) + (d == 0)
        x = np.where(active, xf + side * np.maximum(np.abs(d), tol1), xf)

        fu = _evaluate(func, x)
        func_count[active] += 1
        iterations[active] += 1

        # --- Update bracket and the three best points ---
        better = active & (fu <= fx)
        worse = active & ~better

        a = np.where((better & (x >= xf)) | (worse & (x < xf)), np.where(better, xf, x), a)
        b = np.where((better & (x < xf)) | (worse & (x >= xf)), np.where(better, xf, x), b)

        w_is_next = worse & ((fu <= fw) | (w == xf))
        v_is_next = worse & ~w_is_next & ((fu <= fv) | (v == xf) | (v == w))
        shift = better | w_is_next

        v_new = np.where(shift, w, np.where(v_is_next, x, v))
        fv_new = np.where(shift, fw, np.where(v_is_next, fu, fv))
        w_new = np.where(better, xf, np.where(w_is_next, x, w))
        fw_new = np.where(better, fx, np.where(w_is_next, fu, fw))
        xf = np.where(better, x, xf)
        fx = np.where(better, fu, fx)
        v, fv, w, fw = v_new, fv_new, w_new, fw_new

        xm = 0.5 * (a + b)
        tol1 = _SQRT_EPS * np.abs(xf) + xtol / 3.0
        tol2 = 2.0 * tol1
        active &= np.abs(xf - xm) > (tol2 - 0.5 * (b - a))

        exhausted = active & ((func_count >= opts.maxfun) | (iterations >= opts.maxiter))
        exit_flag[exhausted] = EXIT_MAXITER
        active &= ~exhausted

    return BoundedMinimizeResult(
        x=xf,
        fun=fx,
        exit_flag=exit_flag,
        iterations=iterations,
        func_count=func_count,
    )
