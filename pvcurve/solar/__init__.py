"""
Solar PV engine module.

Provides the single-diode I-V curve solver (Lambert W, Jain & Kapoor
2004), De Soto parameter translation, the SAPM cell temperature model,
the Sandia inverter model, and an array-level simulation chaining them.
"""

from .single_diode import (
    DiodeParams,
    SingleDiodeResult,
    i_from_v,
    singlediode,
    v_from_i,
)
from .desoto import ModuleParameters, airmass_modifier, calcparams_desoto
from .temperature import SAPM_TEMPERATURE_PARAMS, sapm_celltemp
from .inverter import SandiaInverterParams, snl_inverter
from .pv_system import PVSystemConfig, PVSystemResult, simulate_pv_system

__all__ = [
    # single_diode
    "DiodeParams",
    "SingleDiodeResult",
    "i_from_v",
    "v_from_i",
    "singlediode",
    # desoto
    "ModuleParameters",
    "airmass_modifier",
    "calcparams_desoto",
    # temperature
    "SAPM_TEMPERATURE_PARAMS",
    "sapm_celltemp",
    # inverter
    "SandiaInverterParams",
    "snl_inverter",
    # pv_system
    "PVSystemConfig",
    "PVSystemResult",
    "simulate_pv_system",
]
