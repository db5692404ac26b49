"""Tests for the SDP4 lunar-solar and resonance stages."""

import jax.numpy as jnp
import numpy as np
import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from sgp4jax import Resonance, initialize, parse_tle, propagate
from sgp4jax._deep_space import _detect_resonance, lunar_solar_periodics, resonance_update
from sgp4jax.constants import RESONANCE_STEP

MOLNIYA_L1 = "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813"
MOLNIYA_L2 = "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656"

ITALSAT_L1 = "1 24208U 96044A   06177.04061740 -.00000094  00000-0  10000-3 0  1600"
ITALSAT_L2 = "2 24208   3.8536  80.0121 0026640 311.0977  48.3000  1.00778054 36119"

VELA_L1 = "1 04965U 69046F   06175.83186726  .00000094  00000-0  10000-3 0  4711"
VELA_L2 = "2 04965  32.9048 138.7680 6088834 148.5862 269.3268  2.47283741134637"

GEO_L1 = "1 28626U 05008A   06176.46683397 -.00000205  00000-0  10000-3 0  2190"
GEO_L2 = "2 28626   0.0019 286.9433 0000335  13.7918  55.6504  1.00270176  4891"


def _mean_state(bundle, t: float) -> dict:
    c = bundle.coefficients
    t = jnp.asarray(t)
    em, argpm, inclm, mm, nodem, nm = resonance_update(
        c,
        bundle.lunar_solar,
        bundle.resonance,
        bundle.resonance_kind,
        t,
        em=c.ecco,
        argpm=c.argpo + c.argpdot * t,
        inclm=c.inclo,
        mm=c.mo + c.mdot * t,
        nodem=c.nodeo + c.nodedot * t,
        nm=c.no_unkozai,
    )
    return dict(em=em, argpm=argpm, inclm=inclm, mm=mm, nodem=nodem, nm=nm)


class TestResonanceDetection:
    @pytest.mark.parametrize(
        "nm, em, kind",
        [
            (0.0043, 0.001, Resonance.SYNCHRONOUS),
            (0.0034906585, 0.001, Resonance.NONE),
            (0.0052359877, 0.001, Resonance.NONE),
            (0.0087, 0.7, Resonance.HALF_DAY),
            (8.26e-3, 0.5, Resonance.HALF_DAY),
            (9.24e-3, 0.5, Resonance.HALF_DAY),
            (0.0087, 0.49, Resonance.NONE),
            (0.0095, 0.7, Resonance.NONE),
        ],
    )
    def test_bounds(self, nm: float, em: float, kind: Resonance) -> None:
        assert _detect_resonance(nm, em) is kind


class TestResonanceIntegration:
    def test_non_resonant_applies_secular_rates_only(self) -> None:
        bundle = initialize(parse_tle(VELA_L1, VELA_L2))
        ls = bundle.lunar_solar
        state = _mean_state(bundle, 1000.0)
        c = bundle.coefficients
        assert float(state["nm"]) == c.no_unkozai
        assert float(state["em"]) == pytest.approx(c.ecco + ls.dedt * 1000.0, rel=1e-15)
        assert float(state["inclm"]) == pytest.approx(c.inclo + ls.didt * 1000.0, rel=1e-15)

    @pytest.mark.parametrize("line1, line2", [(MOLNIYA_L1, MOLNIYA_L2), (ITALSAT_L1, ITALSAT_L2)])
    def test_at_epoch_mean_motion_unchanged(self, line1: str, line2: str) -> None:
        bundle = initialize(parse_tle(line1, line2))
        state = _mean_state(bundle, 0.0)
        assert float(state["nm"]) == pytest.approx(bundle.coefficients.no_unkozai, rel=1e-15)

    @pytest.mark.parametrize("line1, line2", [(MOLNIYA_L1, MOLNIYA_L2), (ITALSAT_L1, ITALSAT_L2)])
    def test_resonance_changes_mean_motion(self, line1: str, line2: str) -> None:
        bundle = initialize(parse_tle(line1, line2))
        state = _mean_state(bundle, 10 * RESONANCE_STEP + 17.0)
        assert float(state["nm"]) != bundle.coefficients.no_unkozai

    def test_step_boundaries_are_continuous(self) -> None:
        """Crossing a whole integration step does not jump the mean motion."""
        bundle = initialize(parse_tle(ITALSAT_L1, ITALSAT_L2))
        below = float(_mean_state(bundle, RESONANCE_STEP - 1e-6)["nm"])
        above = float(_mean_state(bundle, RESONANCE_STEP + 1e-6)["nm"])
        assert above == pytest.approx(below, rel=1e-12)

    def test_long_integration_matches_reference(self) -> None:
        bundle = initialize(parse_tle(MOLNIYA_L1, MOLNIYA_L2))
        sat = Satrec.twoline2rv(MOLNIYA_L1, MOLNIYA_L2, SGP4_WGS72)
        for t in (-30000.0, 30000.0):
            e, r_ref, _ = sat.sgp4_tsince(t)
            assert e == 0
            np.testing.assert_allclose(np.asarray(propagate(bundle, t).position), r_ref, rtol=0, atol=1e-4)


class TestLunarSolarPeriodics:
    def test_lunar_solar_terms_match_reference(self) -> None:
        bundle = initialize(parse_tle(GEO_L1, GEO_L2))
        sat = Satrec.twoline2rv(GEO_L1, GEO_L2, SGP4_WGS72)
        for name in ("zmol", "zmos", "ee2", "se2", "xh2", "sh3", "dnodt", "domdt"):
            assert getattr(bundle.lunar_solar, name) == pytest.approx(getattr(sat, name), rel=1e-12)

    @pytest.mark.parametrize("opsmode", ["i", "a"])
    def test_low_inclination_uses_lyddane(self, opsmode: str) -> None:
        bundle = initialize(parse_tle(GEO_L1, GEO_L2), opsmode=opsmode)
        c = bundle.coefficients
        t = jnp.asarray(720.0)
        ep, inclp, nodep, argpp, mp = lunar_solar_periodics(
            bundle.lunar_solar,
            t,
            opsmode,
            ep=c.ecco,
            inclp=c.inclo,
            nodep=c.nodeo,
            argpp=c.argpo,
            mp=c.mo,
        )
        assert float(inclp) < 0.2
        for value in (ep, inclp, nodep, argpp, mp):
            assert np.isfinite(float(value))

    def test_afspc_node_is_non_negative(self) -> None:
        bundle = initialize(parse_tle(GEO_L1, GEO_L2), opsmode="a")
        c = bundle.coefficients
        _, _, nodep, _, _ = lunar_solar_periodics(
            bundle.lunar_solar,
            jnp.asarray(0.0),
            "a",
            ep=c.ecco,
            inclp=c.inclo,
            nodep=c.nodeo - 2.0 * np.pi,
            argpp=c.argpo,
            mp=c.mo,
        )
        assert float(nodep) >= 0.0

    def test_high_inclination_direct(self) -> None:
        bundle = initialize(parse_tle(MOLNIYA_L1, MOLNIYA_L2))
        c = bundle.coefficients
        args = dict(ep=c.ecco, inclp=c.inclo, nodep=c.nodeo, argpp=c.argpo, mp=c.mo)
        improved = lunar_solar_periodics(bundle.lunar_solar, jnp.asarray(360.0), "i", **args)
        afspc = lunar_solar_periodics(bundle.lunar_solar, jnp.asarray(360.0), "a", **args)
        for a, b in zip(improved, afspc):
            assert float(a) == float(b)
