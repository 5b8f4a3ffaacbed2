"""Tests for pvcurve.solar.desoto -- parameter translation and air-mass modifier."""

from __future__ import annotations

import numpy as np
import pytest

from pvcurve.core.errors import InputDomainError, InputShapeError
from pvcurve.solar.desoto import (
    AIRMASS_COEFFICIENTS,
    ModuleParameters,
    airmass_modifier,
    calcparams_desoto,
)
from pvcurve.solar.pv_system import PVSystemConfig
from pvcurve.solar.single_diode import singlediode


@pytest.fixture
def module() -> ModuleParameters:
    return PVSystemConfig().module


def _pmp(params) -> float:
    res = singlediode(params.I_L, params.I_o, params.R_s, params.R_sh, params.nNsVth)
    return float(res.P_mp[0])


class TestCalcparamsDesoto:
    def test_reference_conditions_reproduce_reference_params(self, module):
        """At Sref and Tref the translated parameters equal the reference ones."""
        params = calcparams_desoto(S=1000.0, T_cell=25.0, alpha_isc=0.004, module=module)
        assert params.I_L[0] == pytest.approx(module.I_L_ref, rel=1e-12)
        assert params.I_o[0] == pytest.approx(module.I_o_ref, rel=1e-12)
        assert params.R_sh[0] == pytest.approx(module.R_sh_ref, rel=1e-12)
        assert params.nNsVth[0] == pytest.approx(module.a_ref, rel=1e-12)
        assert params.R_s[0] == module.R_s

    def test_mpp_at_stc(self, module):
        """MPP power at STC should be reasonable for a 60-cell module."""
        params = calcparams_desoto(S=1000.0, T_cell=25.0, alpha_isc=0.004, module=module)
        p_mp = _pmp(params)
        assert 250 < p_mp < 400, f"MPP power {p_mp:.1f} W outside expected range"

    def test_zero_irradiance(self, module):
        """Zero irradiance is floored, giving a huge shunt and no power."""
        params = calcparams_desoto(S=0.0, T_cell=25.0, alpha_isc=0.004, module=module)
        assert params.R_sh[0] == pytest.approx(module.R_sh_ref * 1e13)
        assert np.isfinite(params.R_sh[0])
        assert abs(_pmp(params)) < 1e-9

    def test_high_temp_reduces_power(self, module):
        """Higher cell temperature should reduce MPP power."""
        cool = calcparams_desoto(S=1000.0, T_cell=25.0, alpha_isc=0.004, module=module)
        hot = calcparams_desoto(S=1000.0, T_cell=50.0, alpha_isc=0.004, module=module)
        assert hot.I_o[0] > cool.I_o[0]
        assert hot.nNsVth[0] > cool.nNsVth[0]
        assert hot.I_L[0] > cool.I_L[0]
        assert _pmp(hot) < _pmp(cool)

    def test_photocurrent_scales_with_irradiance(self, module):
        params = calcparams_desoto(
            S=np.array([250.0, 500.0, 1000.0]), T_cell=25.0, alpha_isc=0.004, module=module
        )
        np.testing.assert_allclose(params.I_L, module.I_L_ref * np.array([0.25, 0.5, 1.0]))
        np.testing.assert_allclose(params.R_sh, module.R_sh_ref * np.array([4.0, 2.0, 1.0]))
        assert params.R_s.shape == (3,)

    def test_negative_airmass_modifier_clipped(self, module):
        params = calcparams_desoto(
            S=1000.0, T_cell=25.0, alpha_isc=0.004, module=module, M=-0.5
        )
        assert params.I_L[0] == 0.0

    def test_vector_module_parameters(self, module):
        vec_module = ModuleParameters(
            a_ref=np.array([1.8, 1.9]),
            I_L_ref=module.I_L_ref,
            I_o_ref=module.I_o_ref,
            R_sh_ref=module.R_sh_ref,
            R_s=module.R_s,
        )
        params = calcparams_desoto(S=800.0, T_cell=40.0, alpha_isc=0.004, module=vec_module)
        assert params.nNsVth.shape == (2,)
        assert params.nNsVth[1] > params.nNsVth[0]

    def test_length_mismatch(self, module):
        with pytest.raises(InputShapeError, match="same length"):
            calcparams_desoto(
                S=[800.0, 900.0, 1000.0], T_cell=[25.0, 30.0], alpha_isc=0.004, module=module
            )

    @pytest.mark.parametrize(
        "kwargs, name",
        [
            ({"S": -1.0}, "S"),
            ({"T_cell": -300.0}, "T_cell"),
            ({"EgRef": 0.0}, "EgRef"),
            ({"Sref": 0.0}, "Sref"),
        ],
    )
    def test_domain_errors(self, module, kwargs, name):
        args = {"S": 1000.0, "T_cell": 25.0, "alpha_isc": 0.004, "module": module}
        args.update(kwargs)
        with pytest.raises(InputDomainError, match=name):
            calcparams_desoto(**args)


class TestAirmassModifier:
    @pytest.mark.parametrize("material", sorted(AIRMASS_COEFFICIENTS))
    def test_unity_at_am15(self, material):
        """The polynomials are normalised to air mass 1.5."""
        assert float(airmass_modifier(1.5, material)) == pytest.approx(1.0, abs=0.01)

    def test_case_insensitive(self):
        assert airmass_modifier(2.0, "CdTe") == airmass_modifier(2.0, "cdte")

    def test_clipped_at_zero(self):
        m = airmass_modifier(np.array([1.0, 40.0]))
        assert m[0] > 0.0
        assert m[1] == 0.0

    def test_unknown_material(self):
        with pytest.raises(InputDomainError, match="Unknown material"):
            airmass_modifier(1.5, "perovskite")
