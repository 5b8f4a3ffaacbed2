"""Shared test fixtures for pvcurve tests."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray
from scipy import constants

HOURS_PER_DAY = 24


# ======================================================================
# Single-diode parameter fixtures
# ======================================================================

@pytest.fixture
def module_210w() -> dict[str, float]:
    """Typical 72-cell 210 W c-Si module at 25 degC.

    Provides the five single-diode parameters as keyword arguments for
    :func:`pvcurve.solar.single_diode.singlediode`.
    """
    n = 1.0134       # diode ideality factor
    Ns = 72          # cells in series
    T_cell = 25.0    # degC
    nNsVth = n * Ns * constants.k * (T_cell + 273.15) / constants.e
    return {
        "I_L": 5.658,
        "I_o": 4.629e-11,
        "R_s": 0.386,
        "R_sh": 269.68,
        "nNsVth": nNsVth,
    }


@pytest.fixture
def diode_batch() -> dict[str, NDArray[np.float64]]:
    """Five operating conditions spanning dim to bright, cool to hot."""
    return {
        "I_L": np.array([0.5, 2.0, 5.658, 7.5, 9.7]),
        "I_o": np.array([1e-11, 4.629e-11, 4.629e-11, 2e-10, 1.5e-9]),
        "R_s": np.array([0.2, 0.3, 0.386, 0.4, 0.5]),
        "R_sh": np.array([2000.0, 800.0, 269.68, 300.0, 150.0]),
        "nNsVth": np.array([1.7, 1.8, 1.8747, 1.95, 2.05]),
    }


# ======================================================================
# Weather fixtures
# ======================================================================

@pytest.fixture
def sample_day() -> dict[str, NDArray[np.float64]]:
    """Synthetic clear day: hourly POA irradiance, temperature and wind.

    Irradiance follows a half-sine between 06:00 and 18:00 and is zero
    at night.
    """
    rng = np.random.default_rng(42)
    hour_of_day = np.arange(HOURS_PER_DAY, dtype=np.float64)

    solar_mask = (hour_of_day >= 6) & (hour_of_day <= 18)
    solar_shape = np.where(
        solar_mask,
        np.sin(np.pi * (hour_of_day - 6) / 12),
        0.0,
    )
    poa = np.clip(solar_shape * 950.0 + rng.normal(0, 10, HOURS_PER_DAY), 0, 1200)
    poa = np.where(solar_mask, poa, 0.0)

    temperature = 22.0 + 6.0 * np.sin(2 * np.pi * (hour_of_day - 9) / 24)
    wind_speed = 2.0 + rng.exponential(1.5, HOURS_PER_DAY)

    return {
        "poa": poa.astype(np.float64),
        "temperature": temperature.astype(np.float64),
        "wind_speed": wind_speed.astype(np.float64),
    }
