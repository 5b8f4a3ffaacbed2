"""
Array-level steady-state PV simulation.

Chains the SAPM cell temperature model, De Soto parameter translation,
the single-diode I-V solver and the Sandia inverter model into DC and
AC output for an array of identical modules.

All intermediate arrays are vectors over the operating conditions
(e.g. the hours of a weather file) processed in a fully vectorised
manner (no Python-level loops).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputDomainError
from pvcurve.numerics.fminbound import MinimizerOptions
from pvcurve.solar.desoto import (
    DEGDT_SI,
    EG_REF_SI,
    ModuleParameters,
    calcparams_desoto,
)
from pvcurve.solar.inverter import SandiaInverterParams, snl_inverter
from pvcurve.solar.single_diode import DiodeParams, SingleDiodeResult, singlediode
from pvcurve.solar.temperature import E0_REF, SAPM_TEMPERATURE_PARAMS, sapm_celltemp

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# System configuration with sensible defaults
# ---------------------------------------------------------------------------

def _default_module() -> ModuleParameters:
    return ModuleParameters(
        a_ref=1.80,          # modified ideality voltage (V)
        I_L_ref=9.68,        # photo-current at STC (A)
        I_o_ref=2.30e-10,    # diode saturation current at STC (A)
        R_sh_ref=550.0,      # shunt resistance at STC (Ohm)
        R_s=0.37,            # series resistance (Ohm)
    )


def _default_inverter() -> SandiaInverterParams:
    return SandiaInverterParams(
        Paco=5000.0,
        Pdco=5250.0,
        Vdco=400.0,
        Pso=25.0,
        C0=-6.0e-6,
        C1=-2.0e-5,
        C2=1.0e-3,
        C3=-1.0e-3,
        Pnt=1.5,
    )


@dataclass
class PVSystemConfig:
    """Configuration of a PV array and its inverter.

    Default values represent a typical crystalline-silicon rooftop
    string of 12 modules on a 5 kW string inverter, open-rack mounted.
    """

    # --- Module (De Soto single-diode) ---
    module: ModuleParameters = field(default_factory=_default_module)
    alpha_sc: float = 0.004         # Isc temp coefficient (A/K)
    EgRef: float = EG_REF_SI        # band-gap energy (eV), c-Si
    dEgdT: float = DEGDT_SI         # band-gap temperature dependence (1/K)

    # --- Cell temperature (SAPM) ---
    mounting: str = "open_rack_glass_polymer"
    E0: float = E0_REF

    # --- Array layout ---
    modules_per_string: int = 12    # modules in series per string
    strings: int = 1                # parallel strings

    # --- Inverter (Sandia model) ---
    inverter: SandiaInverterParams = field(default_factory=_default_inverter)

    def __post_init__(self) -> None:
        if self.mounting not in SAPM_TEMPERATURE_PARAMS:
            raise InputDomainError(
                f"Unknown mounting '{self.mounting}'. "
                f"Choose from: {sorted(SAPM_TEMPERATURE_PARAMS)}"
            )
        if self.modules_per_string < 1 or self.strings < 1:
            raise InputDomainError("modules_per_string and strings must be >= 1")


@dataclass(frozen=True)
class PVSystemResult:
    """Intermediate and final quantities of :func:`simulate_pv_system`."""

    T_cell: NDArray[np.float64]       # cell temperature (degC)
    T_module: NDArray[np.float64]     # module back-surface temperature (degC)
    params: DiodeParams               # translated single-diode parameters
    module_curve: SingleDiodeResult   # per-module I-V curve points
    p_dc: NDArray[np.float64]         # array DC power at MPP (W)
    v_dc: NDArray[np.float64]         # array DC voltage at MPP (V)
    p_ac: NDArray[np.float64]         # inverter AC output (W)


# ---------------------------------------------------------------------------
# Main simulation entry point
# ---------------------------------------------------------------------------

def simulate_pv_system(
    poa_irradiance: ArrayLike,
    T_amb: ArrayLike,
    wind_speed: ArrayLike,
    config: PVSystemConfig | dict[str, Any] | None = None,
    num_points: float = 0,
    options: MinimizerOptions | None = None,
) -> PVSystemResult:
    """Run the steady-state module-to-grid chain for each condition.

    Processing chain
    ~~~~~~~~~~~~~~~~
    1. Cell temperature (SAPM) from irradiance, wind and ambient temperature.
    2. De Soto translation of the reference module parameters.
    3. Single-diode model -> per-module maximum power point.
    4. Scale to the array (series modules add voltage, strings add current).
    5. Sandia inverter model -> AC power.

    Parameters
    ----------
    poa_irradiance : array_like
        Plane-of-array irradiance absorbed by the modules (W/m^2).
    T_amb : array_like
        Ambient dry-bulb temperature (degC).
    wind_speed : array_like
        Wind speed at 10 m (m/s).
    config : PVSystemConfig or dict or None
        System configuration. If a ``dict``, it is unpacked into
        :class:`PVSystemConfig`. If ``None``, default values are used.
    num_points : float
        Forwarded to :func:`singlediode` to sample module I-V curves.
    options : MinimizerOptions, optional
        Forwarded to :func:`singlediode`.

    Returns
    -------
    PVSystemResult
    """
    if config is None:
        cfg = PVSystemConfig()
    elif isinstance(config, dict):
        cfg = PVSystemConfig(**config)
    else:
        cfg = config

    # ---- 1. Cell temperature ----
    coeffs = SAPM_TEMPERATURE_PARAMS[cfg.mounting]
    T_cell, T_module = sapm_celltemp(
        poa_irradiance,
        cfg.E0,
        coeffs["a"],
        coeffs["b"],
        wind_speed,
        T_amb,
        coeffs["deltaT"],
    )

    # ---- 2. Parameter translation ----
    params = calcparams_desoto(
        S=poa_irradiance,
        T_cell=T_cell,
        alpha_isc=cfg.alpha_sc,
        module=cfg.module,
        EgRef=cfg.EgRef,
        dEgdT=cfg.dEgdT,
    )

    # ---- 3. Single-diode model (per module) ----
    curve = singlediode(
        params.I_L,
        params.I_o,
        params.R_s,
        params.R_sh,
        params.nNsVth,
        num_points=num_points,
        options=options,
    )

    # ---- 4. Scale to array ----
    p_dc = curve.P_mp * cfg.modules_per_string * cfg.strings
    v_dc = curve.V_mp * cfg.modules_per_string

    # ---- 5. Inverter ----
    p_ac = snl_inverter(v_dc, p_dc, cfg.inverter)

    p_ac_total = float(np.nansum(p_ac))
    logger.info(
        "PV system simulation complete: %d condition(s), %.1f W AC total",
        p_ac.size,
        p_ac_total,
        extra={"n_elements": int(p_ac.size), "p_ac_total_w": p_ac_total},
    )

    return PVSystemResult(
        T_cell=T_cell,
        T_module=T_module,
        params=params,
        module_curve=curve,
        p_dc=p_dc,
        v_dc=v_dc,
        p_ac=p_ac,
    )
