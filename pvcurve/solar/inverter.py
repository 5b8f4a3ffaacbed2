"""
Sandia inverter performance model.

Converts DC power and voltage from a PV array into AC power output,
accounting for self-consumption, voltage-dependent efficiency, AC
clipping at rated capacity and night-time tare loss.

References
----------
- King D.L., Gonzalez S., Galbraith G.M., Boyson W.E., "Performance
  Model for Grid-Connected Photovoltaic Inverters", Sandia National
  Laboratories, SAND2007-5036, 2007.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pvcurve.core.errors import InputShapeError


@dataclass(frozen=True)
class SandiaInverterParams:
    """Sandia grid-connected inverter model coefficients."""

    Paco: float   # rated AC output (W)
    Pdco: float   # DC power at which AC output reaches Paco (W)
    Vdco: float   # DC voltage at which Paco is reached (V)
    Pso: float    # DC power required to start inversion (W)
    C0: float     # curvature of Pac(Pdc) at Vdco (1/W)
    C1: float     # Pdco variation with DC voltage (1/V)
    C2: float     # Pso variation with DC voltage (1/V)
    C3: float     # C0 variation with DC voltage (1/V)
    Pnt: float = 0.0  # AC power consumed at night (W)


def snl_inverter(
    v_dc: ArrayLike,
    p_dc: ArrayLike,
    inverter: SandiaInverterParams,
) -> NDArray[np.float64]:
    """Compute AC power from DC voltage and power with the Sandia model.

    The model equation is::

        A = Pdco * (1 + C1 * (Vdc - Vdco))
        B = Pso  * (1 + C2 * (Vdc - Vdco))
        C = C0   * (1 + C3 * (Vdc - Vdco))
        Pac = (Paco / (A - B) - C * (A - B)) * (Pdc - B) + C * (Pdc - B)^2

    Parameters
    ----------
    v_dc : array_like
        DC voltage at the inverter input (V).
    p_dc : array_like
        DC power at the inverter input (W). Broadcast with *v_dc*.
    inverter : SandiaInverterParams
        Inverter coefficients.

    Returns
    -------
    p_ac : ndarray
        AC power output (W), at most ``Paco``. Where the modelled output
        falls below ``Pso`` the inverter is off and ``-|Pnt|`` is
        returned.
    """
    try:
        v_dc, p_dc = np.broadcast_arrays(
            np.atleast_1d(np.asarray(v_dc, dtype=np.float64)),
            np.atleast_1d(np.asarray(p_dc, dtype=np.float64)),
        )
    except ValueError as exc:
        raise InputShapeError(
            f"v_dc {np.shape(v_dc)} and p_dc {np.shape(p_dc)} could not be "
            "broadcast together"
        ) from exc

    inv = inverter
    dv = v_dc - inv.Vdco

    A = inv.Pdco * (1.0 + inv.C1 * dv)
    B = inv.Pso * (1.0 + inv.C2 * dv)
    C = inv.C0 * (1.0 + inv.C3 * dv)

    p_ac = (inv.Paco / (A - B) - C * (A - B)) * (p_dc - B) + C * (p_dc - B) ** 2

    # Clip to rated AC output
    p_ac = np.where(p_ac > inv.Paco, inv.Paco, p_ac)
    # Below start-up: night-time tare
    p_ac = np.where(p_ac < inv.Pso, -abs(inv.Pnt), p_ac)

    return p_ac
