"""
Single-diode PV cell/module model solved with the Lambert W function.

The five-parameter equivalent circuit relates terminal current and
voltage implicitly::

    I = I_L - I_o * [exp((V + I*R_s) / nNsVth) - 1] - (V + I*R_s) / R_sh

Jain & Kapoor (2004) give explicit solutions for ``I(V)`` and ``V(I)`` in
terms of the Lambert W function. :func:`singlediode` uses them to locate
the five I-V curve points of the Sandia Array Performance Model and,
optionally, to sample the whole curve.

References
----------
- Wenham S.R., Green M.A., Watt M.E., "Applied Photovoltaics",
  ISBN 0 86758 909 4.
- Jain A., Kapoor A., "Exact analytical solutions of the parameters of
  real solar cells using Lambert W-function", Solar Energy Materials
  and Solar Cells, 81(2):269-277, 2004.
- King D.L. et al., "Sandia Photovoltaic Array Performance Model",
  SAND2004-3535, Sandia National Laboratories, 2004.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputDomainError, InputShapeError
from pvcurve.core.validation import as_vector, broadcast_vectors, require
from pvcurve.numerics.fminbound import (
    EXIT_CONVERGED,
    MinimizerOptions,
    fminbound_vec,
)
from pvcurve.numerics.lambertw import lambertw

logger = logging.getLogger(__name__)

# Current tolerance for the maximum power point search (A)
MPP_XTOL: float = 1e-8

# Newton iterations on w + log(w) = log(argW); ~8 significant digits
LOGSPACE_ITERATIONS: int = 3


@dataclass(frozen=True)
class DiodeParams:
    """Five single-diode parameters at operating conditions."""

    I_L: NDArray[np.float64]      # photo-generated current (A)
    I_o: NDArray[np.float64]      # diode saturation current (A)
    R_s: NDArray[np.float64]      # series resistance (Ohm)
    R_sh: NDArray[np.float64]     # shunt resistance (Ohm)
    nNsVth: NDArray[np.float64]   # modified ideality factor * Ns * Vth (V)


@dataclass(frozen=True)
class SingleDiodeResult:
    """SAPM I-V curve points for each operating condition.

    ``V`` and ``I`` are only present when a sampled curve was requested;
    row ``n`` holds curve ``n`` from ``(0, I_sc)`` to ``(V_oc, 0)``.

    ``exit_flag`` reports the maximum power point search per condition
    (``1`` converged, ``0`` iteration budget exhausted, ``-2`` empty
    search interval, e.g. ``I_sc == 0``). ``I_mp``, ``V_mp`` and ``P_mp``
    are best-effort values where it is not ``1``.
    """

    I_sc: NDArray[np.float64]     # short-circuit current (A)
    V_oc: NDArray[np.float64]     # open-circuit voltage (V)
    I_mp: NDArray[np.float64]     # current at MPP (A)
    V_mp: NDArray[np.float64]     # voltage at MPP (V)
    P_mp: NDArray[np.float64]     # power at MPP (W)
    I_x: NDArray[np.float64]      # current at V = 0.5*V_oc (A)
    I_xx: NDArray[np.float64]     # current at V = 0.5*(V_oc + V_mp) (A)
    exit_flag: NDArray[np.int_]
    iterations: NDArray[np.int_]
    V: NDArray[np.float64] | None = None
    I: NDArray[np.float64] | None = None

    @property
    def converged(self) -> NDArray[np.bool_]:
        return self.exit_flag == EXIT_CONVERGED

    @property
    def success(self) -> bool:
        return bool(np.all(self.converged))


# ---------------------------------------------------------------------------
# Explicit I-V relationships
# ---------------------------------------------------------------------------

def _broadcast(**arrays: Any) -> list[NDArray[np.float64]]:
    """Broadcast the named inputs together as float64 arrays (at least 1-D)."""
    try:
        converted = [np.asarray(val, dtype=np.float64) for val in arrays.values()]
    except (TypeError, ValueError) as exc:
        raise InputShapeError(
            f"Inputs {', '.join(arrays)} must be numeric"
        ) from exc
    try:
        out = np.broadcast_arrays(*converted)
    except ValueError as exc:
        shapes = ", ".join(f"{k}={np.shape(v)}" for k, v in arrays.items())
        raise InputShapeError(
            f"Inputs could not be broadcast together: {shapes}"
        ) from exc
    return [np.atleast_1d(arr) for arr in out]


def _logspace_lambertw(log_argw: NDArray[np.float64]) -> NDArray[np.float64]:
    """Solve ``w + log(w) = log_argw`` for arguments whose exponential overflows."""
    w = log_argw
    for _ in range(LOGSPACE_ITERATIONS):
        w = w * (1.0 - np.log(w) + log_argw) / (1.0 + w)
    return w


def v_from_i(
    R_sh: ArrayLike,
    R_s: ArrayLike,
    nNsVth: ArrayLike,
    I: ArrayLike,
    I_o: ArrayLike,
    I_L: ArrayLike,
) -> NDArray[np.float64]:
    """Terminal voltage at current *I* (Jain & Kapoor 2004, Eq. 3).

    All arguments broadcast together. Where the Lambert W argument
    overflows, W is found from its logarithm instead.

    Returns
    -------
    ndarray
        Voltage (V), with the broadcast shape of the inputs (at least 1-D).
    """
    R_sh, R_s, nNsVth, I, I_o, I_L = _broadcast(
        R_sh=R_sh, R_s=R_s, nNsVth=nNsVth, I=I, I_o=I_o, I_L=I_L
    )

    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        argw = (I_o * R_sh / nNsVth) * np.exp(R_sh * (-I + I_L + I_o) / nNsVth)
    lambertwterm = lambertw(argw)
    # Without a diode W(0) = 0, even where exp() overflowed to 0 * inf
    no_diode = I_o == 0.0
    lambertwterm[no_diode] = 0.0

    overflow = np.isnan(lambertwterm) & ~no_diode
    if np.any(overflow):
        n_overflow = int(np.count_nonzero(overflow))
        logger.debug(
            "v_from_i: Lambert W argument overflowed for %d element(s), "
            "solving in log space",
            n_overflow,
            extra={"n_overflow": n_overflow},
        )
        rsh, io, a = R_sh[overflow], I_o[overflow], nNsVth[overflow]
        with np.errstate(divide="ignore", invalid="ignore"):
            log_argw = (
                np.log(io) + np.log(rsh)
                + rsh * (I_L[overflow] + io - I[overflow]) / a
                - np.log(a)
            )
            lambertwterm[overflow] = _logspace_lambertw(log_argw)

    with np.errstate(invalid="ignore"):
        return -I * (R_s + R_sh) + I_L * R_sh - nNsVth * lambertwterm + I_o * R_sh


def i_from_v(
    R_sh: ArrayLike,
    R_s: ArrayLike,
    nNsVth: ArrayLike,
    V: ArrayLike,
    I_o: ArrayLike,
    I_L: ArrayLike,
) -> NDArray[np.float64]:
    """Terminal current at voltage *V* (Jain & Kapoor 2004, Eq. 2).

    All arguments broadcast together. Elements with ``R_s == 0`` use the
    explicit ideal-series form ``I_L - I_o*(exp(V/nNsVth) - 1) - V/R_sh``.
    Where the Lambert W argument overflows, W is found from its
    logarithm, as in :func:`v_from_i`.

    Returns
    -------
    ndarray
        Current (A), with the broadcast shape of the inputs (at least 1-D).
    """
    R_sh, R_s, nNsVth, V, I_o, I_L = _broadcast(
        R_sh=R_sh, R_s=R_s, nNsVth=nNsVth, V=V, I_o=I_o, I_L=I_L
    )
    current = np.full(V.shape, np.nan, dtype=np.float64)

    explicit = R_s == 0.0
    if np.any(explicit):
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            v = V[explicit]
            current[explicit] = (
                I_L[explicit]
                - np.where(
                    I_o[explicit] == 0.0,
                    0.0,
                    I_o[explicit] * np.expm1(v / nNsVth[explicit]),
                )
                - v / R_sh[explicit]
            )

    implicit = ~explicit
    if np.any(implicit):
        rs, rsh, a = R_s[implicit], R_sh[implicit], nNsVth[implicit]
        v, io, il = V[implicit], I_o[implicit], I_L[implicit]

        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            exponent = rsh * (rs * (il + io) + v) / (a * (rs + rsh))
            argw = rs * io * rsh * np.exp(exponent) / (a * (rs + rsh))
        lambertwterm = lambertw(argw)
        no_diode = io == 0.0
        lambertwterm[no_diode] = 0.0

        overflow = np.isnan(lambertwterm) & ~no_diode
        if np.any(overflow):
            n_overflow = int(np.count_nonzero(overflow))
            logger.debug(
                "i_from_v: Lambert W argument overflowed for %d element(s), "
                "solving in log space",
                n_overflow,
                extra={"n_overflow": n_overflow},
            )
            with np.errstate(divide="ignore", invalid="ignore"):
                log_argw = (
                    np.log(rs) + np.log(io) + np.log(rsh) + exponent
                    - np.log(a) - np.log(rs + rsh)
                )[overflow]
                lambertwterm[overflow] = _logspace_lambertw(log_argw)

        with np.errstate(divide="ignore", invalid="ignore"):
            current[implicit] = (
                -v / (rs + rsh) - (a / rs) * lambertwterm + rsh * (il + io) / (rs + rsh)
            )

    return current


# ---------------------------------------------------------------------------
# I-V curve characterisation
# ---------------------------------------------------------------------------

def _ceil_num_points(num_points: Any) -> int:
    arr = np.asarray(num_points)
    if arr.size != 1 or arr.dtype.kind not in "iuf" or not np.isfinite(arr).all():
        raise InputDomainError(
            f"num_points must be a finite scalar, got {num_points!r}"
        )
    return int(np.ceil(arr.item()))


def singlediode(
    I_L: ArrayLike,
    I_o: ArrayLike,
    R_s: ArrayLike,
    R_sh: ArrayLike,
    nNsVth: ArrayLike,
    num_points: float = 0,
    options: MinimizerOptions | None = None,
) -> SingleDiodeResult:
    """Solve the single-diode model for the SAPM I-V curve points.

    Parameters
    ----------
    I_L : array_like
        Light-generated current (A).
    I_o : array_like
        Diode saturation current (A).
    R_s : array_like
        Series resistance (Ohm).
    R_sh : array_like
        Shunt resistance (Ohm).
    nNsVth : array_like
        Product of diode ideality factor, cells in series and cell
        thermal voltage ``k*T_cell/q`` (V).
    num_points : float
        Number of points of the sampled I-V curve. Rounded up; below 2 no
        curve is produced. Default 0.
    options : MinimizerOptions, optional
        Settings of the maximum power point search. Defaults to
        ``MinimizerOptions(xtol=MPP_XTOL)``.

    Each of the five parameters is a scalar or a vector; vectors must
    all have the same length N and scalars are broadcast to N. All values
    must be finite and non-negative.

    Returns
    -------
    SingleDiodeResult
        Curve points for each of the N operating conditions.

    Raises
    ------
    InputShapeError
        If an input is not a numeric scalar/vector, or vector lengths
        disagree.
    InputDomainError
        If an input holds negative or non-finite values, or *num_points*
        is not a finite scalar.

    Notes
    -----
    The maximum power point is found by minimising ``-I * V(I)`` over
    ``I`` in ``[0, I_sc]`` with a bounded Brent search per condition.
    Conditions where the search did not converge are logged and flagged
    in ``exit_flag``; they never abort the batch.
    """
    named = {
        "I_L": as_vector("I_L", I_L),
        "I_o": as_vector("I_o", I_o),
        "R_s": as_vector("R_s", R_s),
        "R_sh": as_vector("R_sh", R_sh),
        "nNsVth": as_vector("nNsVth", nNsVth),
    }
    for name, vec in named.items():
        require(name, np.isfinite(vec) & (vec >= 0.0), "finite and non-negative")
    I_L, I_o, R_s, R_sh, nNsVth = broadcast_vectors(**named)
    num_points = _ceil_num_points(num_points)

    if options is None:
        options = MinimizerOptions(xtol=MPP_XTOL)

    I_sc = i_from_v(R_sh, R_s, nNsVth, 0.0, I_o, I_L)
    V_oc = v_from_i(R_sh, R_s, nNsVth, 0.0, I_o, I_L)

    def neg_power(current: NDArray[np.float64]) -> NDArray[np.float64]:
        return -current * v_from_i(R_sh, R_s, nNsVth, current, I_o, I_L)

    mpp = fminbound_vec(neg_power, np.zeros_like(I_sc), I_sc, options)
    I_mp = mpp.x
    P_mp = -mpp.fun
    # Zero current gives no power to divide by; take V on the curve instead
    with np.errstate(divide="ignore", invalid="ignore"):
        V_mp = np.where(
            I_mp != 0.0,
            P_mp / I_mp,
            v_from_i(R_sh, R_s, nNsVth, I_mp, I_o, I_L),
        )

    I_x = i_from_v(R_sh, R_s, nNsVth, 0.5 * V_oc, I_o, I_L)
    I_xx = i_from_v(R_sh, R_s, nNsVth, 0.5 * (V_oc + V_mp), I_o, I_L)

    V = I = None
    if num_points >= 2:
        V = V_oc[:, np.newaxis] * np.linspace(0.0, 1.0, num_points)
        I = i_from_v(
            R_sh[:, np.newaxis],
            R_s[:, np.newaxis],
            nNsVth[:, np.newaxis],
            V,
            I_o[:, np.newaxis],
            I_L[:, np.newaxis],
        )
        I[:, 0] = I_sc
        I[:, -1] = 0.0

    n_nonconverged = int(np.count_nonzero(~mpp.converged))
    if n_nonconverged:
        logger.warning(
            "Maximum power point search did not converge for %d of %d "
            "operating condition(s)",
            n_nonconverged,
            I_sc.size,
            extra={"n_nonconverged": n_nonconverged, "n_elements": I_sc.size},
        )

    return SingleDiodeResult(
        I_sc=I_sc,
        V_oc=V_oc,
        I_mp=I_mp,
        V_mp=V_mp,
        P_mp=P_mp,
        I_x=I_x,
        I_xx=I_xx,
        exit_flag=mpp.exit_flag,
        iterations=mpp.iterations,
        V=V,
        I=I,
    )
