"""
De Soto translation of single-diode parameters to operating conditions.

Reference parameters (at irradiance ``Sref`` and cell temperature
``Tref``) are corrected for absorbed irradiance, cell temperature and
spectral air-mass effects. The result feeds :func:`singlediode`.

References
----------
- De Soto W., Klein S.A., Beckman W.A., "Improvement and validation of
  a model for photovoltaic array performance", Solar Energy,
  80(1):78-88, 2006.
- Dobos A., "An Improved Coefficient Calculator for the California
  Energy Commission 6 Parameter Photovoltaic Module Model", Journal of
  Solar Energy Engineering, 134, 2012.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputDomainError
from pvcurve.core.validation import as_vector, broadcast_vectors, require
from pvcurve.solar.single_diode import DiodeParams

# ---------------------------------------------------------------------------
# Physical / reference constants
# ---------------------------------------------------------------------------
K_BOLTZMANN_EV: float = 8.617332478e-5   # Boltzmann constant (eV/K)
S_REF: float = 1000.0                     # reference irradiance (W/m^2)
T_REF: float = 25.0                       # reference cell temperature (degC)
EG_REF_SI: float = 1.121                  # c-Si band gap at Tref (eV)
DEGDT_SI: float = -0.0002677              # c-Si band gap temperature dependence (1/K)

# Zero irradiance would divide R_sh by zero
_S_FLOOR: float = 1e-10

# Air-mass modifier polynomials, highest power first, in absolute air mass.
# The SAM CEC library uses EgRef/dEgdT of silicon for every technology.
AIRMASS_COEFFICIENTS: dict[str, tuple[float, ...]] = {
    "si": (-0.000126, 0.002816, -0.024459, 0.086257, 0.918093),
    "cdte": (-2.46e-5, 9.607e-4, -0.0134, 0.0716, 0.9196),
    "cis": (-3.74e-5, 0.00125, -0.01462, 0.0718, 0.9210),
    "cigs": (-9.07e-5, 0.0022, -0.0202, 0.0652, 0.9417),
}


@dataclass(frozen=True)
class ModuleParameters:
    """De Soto / CEC module parameters at reference conditions."""

    a_ref: float | NDArray[np.float64]     # modified ideality factor n*Ns*Vth at Tref (V)
    I_L_ref: float | NDArray[np.float64]   # photo-current (A)
    I_o_ref: float | NDArray[np.float64]   # diode saturation current (A)
    R_sh_ref: float | NDArray[np.float64]  # shunt resistance (Ohm)
    R_s: float | NDArray[np.float64]       # series resistance, condition independent (Ohm)


def airmass_modifier(
    airmass_absolute: ArrayLike,
    material: str = "si",
) -> NDArray[np.float64]:
    """Spectral modifier ``M`` for :func:`calcparams_desoto`.

    Parameters
    ----------
    airmass_absolute : array_like
        Pressure-corrected air mass.
    material : str
        Key of :data:`AIRMASS_COEFFICIENTS`.

    Returns
    -------
    ndarray
        Modifier relative to air mass 1.5, clipped at zero.
    """
    try:
        coeffs = AIRMASS_COEFFICIENTS[material.lower()]
    except KeyError:
        raise InputDomainError(
            f"Unknown material '{material}'. "
            f"Choose from: {sorted(AIRMASS_COEFFICIENTS)}"
        ) from None
    am = np.asarray(airmass_absolute, dtype=np.float64)
    return np.maximum(np.polyval(coeffs, am), 0.0)


def calcparams_desoto(
    S: ArrayLike,
    T_cell: ArrayLike,
    alpha_isc: ArrayLike,
    module: ModuleParameters,
    EgRef: ArrayLike = EG_REF_SI,
    dEgdT: ArrayLike = DEGDT_SI,
    M: ArrayLike = 1.0,
    Sref: ArrayLike = S_REF,
    Tref: ArrayLike = T_REF,
) -> DiodeParams:
    """Translate reference single-diode parameters to operating conditions.

    Parameters
    ----------
    S : array_like
        Irradiance absorbed by the module (W/m^2), ``>= 0``. Zeros are
        replaced by 1e-10 because ``R_sh`` scales with ``1/S``.
    T_cell : array_like
        Average cell temperature (degC), ``>= -273.15``.
    alpha_isc : array_like
        Short-circuit current temperature coefficient (A/K).
    module : ModuleParameters
        Reference parameters of the module.
    EgRef : array_like
        Band gap at ``Tref`` (eV), ``> 0``. Must match the value used to
        fit *module*; 1.121 for the SAM CEC library.
    dEgdT : array_like
        Band gap temperature dependence (1/K); -0.0002677 for the SAM
        CEC library.
    M : array_like
        Air-mass modifier (see :func:`airmass_modifier`). Negative
        values are clipped to 0. Default 1 (air mass 1.5).
    Sref : array_like
        Reference irradiance (W/m^2), ``> 0``.
    Tref : array_like
        Reference cell temperature (degC), ``> -273.15``.

    Every argument (including each field of *module*) is a scalar or a
    vector of the common length N.

    Returns
    -------
    DiodeParams
        ``I_L``, ``I_o``, ``R_s``, ``R_sh`` and ``nNsVth``, each of length N.

    Raises
    ------
    InputShapeError
        If vector lengths disagree or an input is not a numeric vector.
    InputDomainError
        If an input is outside its physical range.
    """
    named = {
        "S": as_vector("S", S),
        "M": as_vector("M", M),
        "T_cell": as_vector("T_cell", T_cell),
        "dEgdT": as_vector("dEgdT", dEgdT),
        "Sref": as_vector("Sref", Sref),
        "Tref": as_vector("Tref", Tref),
        "EgRef": as_vector("EgRef", EgRef),
        "a_ref": as_vector("a_ref", module.a_ref),
        "I_L_ref": as_vector("I_L_ref", module.I_L_ref),
        "I_o_ref": as_vector("I_o_ref", module.I_o_ref),
        "R_sh_ref": as_vector("R_sh_ref", module.R_sh_ref),
        "R_s": as_vector("R_s", module.R_s),
        "alpha_isc": as_vector("alpha_isc", alpha_isc),
    }
    require("S", named["S"] >= 0.0, ">= 0")
    require("T_cell", named["T_cell"] >= -273.15, ">= -273.15 degC")
    require("EgRef", named["EgRef"] > 0.0, "> 0")
    require("Sref", named["Sref"] > 0.0, "> 0")
    require("Tref", named["Tref"] > -273.15, "> -273.15 degC")

    (
        S, M, T_cell, dEgdT, Sref, Tref, EgRef,
        a_ref, I_L_ref, I_o_ref, R_sh_ref, R_s, alpha_isc,
    ) = broadcast_vectors(**named)

    M = np.maximum(M, 0.0)
    S = np.where(S == 0.0, _S_FLOOR, S)

    Tref_K = Tref + 273.15
    Tcell_K = T_cell + 273.15

    # Eq. 10: band gap follows cell temperature
    E_g = EgRef * (1.0 + dEgdT * (Tcell_K - Tref_K))

    # Eq. 8: modified ideality factor scales with absolute temperature
    nNsVth = a_ref * (Tcell_K / Tref_K)

    # Eq. 9
    I_L = S / Sref * M * (I_L_ref + alpha_isc * (Tcell_K - Tref_K))

    I_o = I_o_ref * (Tcell_K / Tref_K) ** 3 * np.exp(
        EgRef / (K_BOLTZMANN_EV * Tref_K) - E_g / (K_BOLTZMANN_EV * Tcell_K)
    )

    # Eq. 12: shunt resistance inversely proportional to irradiance
    R_sh = R_sh_ref * (Sref / S)

    return DiodeParams(I_L=I_L, I_o=I_o, R_s=R_s, R_sh=R_sh, nNsVth=nNsVth)
