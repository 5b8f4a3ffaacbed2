"""Tests for pvcurve.solar.temperature -- SAPM cell temperature."""

from __future__ import annotations

import numpy as np
import pytest

from pvcurve.core.errors import InputDomainError, InputShapeError
from pvcurve.solar.temperature import E0_REF, SAPM_TEMPERATURE_PARAMS, sapm_celltemp

OPEN_RACK = SAPM_TEMPERATURE_PARAMS["open_rack_glass_polymer"]


def _celltemp(E, wind_speed=1.0, T_amb=25.0, coeffs=OPEN_RACK):
    return sapm_celltemp(
        E, E0_REF, coeffs["a"], coeffs["b"], wind_speed, T_amb, coeffs["deltaT"]
    )


class TestSapmCelltemp:
    def test_no_irradiance_no_heating(self):
        T_cell, T_module = _celltemp([0.0, 0.0], T_amb=[10.0, 30.0])
        np.testing.assert_array_equal(T_cell, [10.0, 30.0])
        np.testing.assert_array_equal(T_module, [10.0, 30.0])

    def test_reference_value(self):
        T_cell, T_module = _celltemp(1000.0, wind_speed=1.0, T_amb=25.0)
        expected_module = 1000.0 * np.exp(-3.56 - 0.075) + 25.0
        assert T_module[0] == pytest.approx(expected_module)
        assert T_module[0] == pytest.approx(51.4, abs=0.1)
        assert T_cell[0] == pytest.approx(expected_module + 3.0)

    def test_heating_increases_with_irradiance(self):
        T_cell, _ = _celltemp([200.0, 500.0, 1000.0])
        assert np.all(np.diff(T_cell) > 0.0)

    def test_wind_cools(self):
        T_cell, _ = _celltemp(np.full(3, 800.0), wind_speed=[0.0, 5.0, 10.0])
        assert np.all(np.diff(T_cell) < 0.0)

    def test_insulated_back_runs_hotter(self):
        open_rack, _ = _celltemp(800.0)
        insulated, _ = _celltemp(
            800.0, coeffs=SAPM_TEMPERATURE_PARAMS["insulated_back_glass_polymer"]
        )
        assert insulated[0] > open_rack[0]

    def test_nan_irradiance_propagates(self):
        T_cell, T_module = _celltemp([np.nan, 500.0])
        assert np.isnan(T_cell[0]) and np.isnan(T_module[0])
        assert np.isfinite(T_cell[1])

    def test_wind_length_mismatch(self):
        with pytest.raises(InputShapeError, match="wind_speed"):
            _celltemp([500.0, 600.0, 700.0], wind_speed=[1.0, 2.0])

    def test_temperature_length_mismatch(self):
        with pytest.raises(InputShapeError, match="T_amb"):
            _celltemp([500.0, 600.0], T_amb=[20.0, 21.0, 22.0])

    def test_non_scalar_coefficient(self):
        with pytest.raises(InputShapeError, match="E0"):
            sapm_celltemp(500.0, [1000.0, 1000.0], -3.56, -0.075, 1.0, 25.0, 3.0)

    @pytest.mark.parametrize(
        "kwargs, name",
        [({"E": -1.0}, "E"), ({"T_amb": -300.0}, "T_amb")],
    )
    def test_domain_errors(self, kwargs, name):
        args = {"E": 500.0, "T_amb": 25.0}
        args.update(kwargs)
        with pytest.raises(InputDomainError, match=name):
            _celltemp(**args)
