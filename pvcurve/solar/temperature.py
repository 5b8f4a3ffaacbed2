"""
Sandia (SAPM) cell and module temperature model.

References
----------
- King D.L., Boyson W.E., Kratochvil J.A., "Photovoltaic Array
  Performance Model", SAND2004-3535, Sandia National Laboratories, 2004.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputShapeError
from pvcurve.core.validation import as_vector, require

# Empirical coefficients (a, b, deltaT) for common mounting configurations,
# SAND2004-3535 Table 1.
SAPM_TEMPERATURE_PARAMS: dict[str, dict[str, float]] = {
    "open_rack_glass_glass": {"a": -3.47, "b": -0.0594, "deltaT": 3.0},
    "close_mount_glass_glass": {"a": -2.98, "b": -0.0471, "deltaT": 1.0},
    "open_rack_glass_polymer": {"a": -3.56, "b": -0.0750, "deltaT": 3.0},
    "insulated_back_glass_polymer": {"a": -2.81, "b": -0.0455, "deltaT": 0.0},
}

E0_REF: float = 1000.0  # reference irradiance for deltaT (W/m^2)


def _scalar(name: str, value: ArrayLike) -> float:
    arr = np.asarray(value)
    if arr.size != 1 or arr.dtype.kind not in "iuf":
        raise InputShapeError(f"{name} must be a numeric scalar, got {value!r}")
    return float(arr.item())


def sapm_celltemp(
    E: ArrayLike,
    E0: float,
    a: float,
    b: float,
    wind_speed: ArrayLike,
    T_amb: ArrayLike,
    deltaT: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Estimate cell and module back-surface temperature per the SAPM.

    The model equations are::

        T_module = E * exp(a + b * wind_speed) + T_amb
        T_cell   = T_module + E / E0 * deltaT

    Parameters
    ----------
    E : array_like
        Total incident irradiance (W/m^2), ``>= 0`` (NaN allowed).
    E0 : float
        Reference irradiance for *deltaT* (W/m^2), ``>= 0``. Typically
        1000.
    a : float
        Upper limit of module temperature at low wind and high
        irradiance (SAPM Eq. 11).
    b : float
        Rate at which module temperature drops with wind speed (s/m).
    wind_speed : array_like
        Wind speed at 10 m height (m/s). Scalar or same length as *E*.
    T_amb : array_like
        Ambient dry-bulb temperature (degC), ``>= -273.15`` (NaN
        allowed). Scalar or same length as *E*.
    deltaT : float
        Cell-to-back-surface temperature difference at *E0* (degC),
        ``>= 0``.

    Returns
    -------
    T_cell : ndarray
        Cell temperature (degC).
    T_module : ndarray
        Module back-surface temperature (degC).
    """
    E = as_vector("E", E)
    wind_speed = as_vector("wind_speed", wind_speed)
    T_amb = as_vector("T_amb", T_amb)
    E0 = _scalar("E0", E0)
    a = _scalar("a", a)
    b = _scalar("b", b)
    deltaT = _scalar("deltaT", deltaT)

    require("E", (E >= 0.0) | np.isnan(E), ">= 0")
    require("E0", E0 >= 0.0 or np.isnan(E0), ">= 0")
    require("T_amb", (T_amb >= -273.15) | np.isnan(T_amb), ">= -273.15 degC")
    require("deltaT", deltaT >= 0.0 or np.isnan(deltaT), ">= 0")

    if wind_speed.size not in (1, E.size):
        raise InputShapeError(
            "Input wind_speed must be scalar or vectors of same length as E."
        )
    if T_amb.size not in (1, E.size):
        raise InputShapeError(
            "Input T_amb must be scalar or vectors of same length as E."
        )

    T_module = E * np.exp(a + b * wind_speed) + T_amb
    with np.errstate(divide="ignore", invalid="ignore"):
        T_cell = T_module + E / E0 * deltaT
    return T_cell, T_module
