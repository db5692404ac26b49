"""Tests for the high-level Satellite class."""

from datetime import datetime

import jax.numpy as jnp
import numpy as np
import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from sgp4jax import (
    WGS84,
    DecayedOrbitError,
    DeepSpaceBundle,
    OrbitClass,
    Resonance,
    Satellite,
    TLEFormatError,
    parse_tle,
)

# ISS TLE
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

# Molniya 2-14 (deep-space)
MOLNIYA_L1 = "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813"
MOLNIYA_L2 = "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656"

FAST_DECAY_L1 = "1 22312U 93002D   06094.46235912  .99999999  81888-5  49949-3 0  3953"
FAST_DECAY_L2 = "2 22312  62.1486  77.4698 0308723 267.9229  88.7392 15.95744531 98783"


def _get_reference(line1: str, line2: str, tsince_min: float) -> tuple:
    """Get reference position and velocity from python-sgp4."""
    sat = Satrec.twoline2rv(line1, line2, SGP4_WGS72)
    e, r, v = sat.sgp4_tsince(tsince_min)
    return e, r, v


class TestSatelliteInit:
    """Test Satellite construction."""

    def test_from_tle(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.satnum == "25544"
        assert sat.name == ""

    def test_from_tle_with_name(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2, name="ISS (ZARYA)")
        assert sat.name == "ISS (ZARYA)"

    def test_from_elements(self) -> None:
        elements = parse_tle(ISS_LINE1, ISS_LINE2)
        sat = Satellite(elements)
        assert sat.elements is elements

    def test_gravity_string(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2, gravity="wgs84")
        assert sat.bundle.gravity is WGS84

    def test_near_earth(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.orbit_class is OrbitClass.NEAR_EARTH
        assert sat.resonance is Resonance.NONE

    def test_deep_space(self) -> None:
        sat = Satellite.from_tle(MOLNIYA_L1, MOLNIYA_L2)
        assert sat.orbit_class is OrbitClass.DEEP_SPACE
        assert sat.resonance is Resonance.HALF_DAY
        assert isinstance(sat.bundle, DeepSpaceBundle)

    def test_invalid_tle_raises(self) -> None:
        with pytest.raises(TLEFormatError):
            Satellite.from_tle("bad line 1", ISS_LINE2)


class TestSatelliteProperties:
    """Test user-friendly orbital element properties."""

    def test_mean_motion_rev_per_day(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.n == pytest.approx(15.72125391, rel=1e-8)

    def test_eccentricity(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.e == pytest.approx(0.0006703, rel=1e-10)

    def test_angles_degrees(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.i == pytest.approx(51.6416, rel=1e-10)
        assert sat.raan == pytest.approx(247.4627, rel=1e-10)
        assert sat.argp == pytest.approx(130.5360, rel=1e-10)
        assert sat.M == pytest.approx(325.0288, rel=1e-10)

    def test_bstar(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.bstar == pytest.approx(-0.11606e-4, rel=1e-10)

    def test_epoch(self) -> None:
        """ISS epoch is 2008 day 264.51782528 (September 20)."""
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.epoch.date() == datetime(2008, 9, 20).date()
        assert sat.epoch.hour == 12
        assert sat.epoch.minute == 25

    def test_epoch_matches_reference(self) -> None:
        ref = Satrec.twoline2rv(ISS_LINE1, ISS_LINE2, SGP4_WGS72)
        elements = Satellite.from_tle(ISS_LINE1, ISS_LINE2).elements
        assert elements.epoch_jd == ref.jdsatepoch
        assert elements.epoch_jd_fraction == pytest.approx(ref.jdsatepochF, abs=1e-12)


class TestSatellitePropagate:
    """Test raw propagate methods (km, km/s)."""

    def test_at_epoch_matches_reference(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        result = sat.propagate(0.0)
        e_ref, r_ref, v_ref = _get_reference(ISS_LINE1, ISS_LINE2, 0.0)
        assert e_ref == 0
        assert jnp.allclose(result.position, jnp.array(r_ref), atol=1e-6)
        assert jnp.allclose(result.velocity, jnp.array(v_ref), atol=1e-9)

    def test_deep_space_matches_reference(self) -> None:
        sat = Satellite.from_tle(MOLNIYA_L1, MOLNIYA_L2)
        result = sat.propagate(360.0)
        e_ref, r_ref, v_ref = _get_reference(MOLNIYA_L1, MOLNIYA_L2, 360.0)
        assert e_ref == 0
        assert jnp.allclose(result.position, jnp.array(r_ref), atol=1e-5)

    def test_batch(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        batch = sat.propagate_batch(jnp.array([0.0, 60.0, 120.0]))
        assert batch.position.shape == (3, 3)
        assert jnp.all(batch.error_code == 0)

    def test_decay_raises(self) -> None:
        sat = Satellite.from_tle(FAST_DECAY_L1, FAST_DECAY_L2)
        times = np.arange(0.0, 4320.0 + 1.0, 120.0)
        codes = np.asarray(sat.propagate_batch(times).error_code)
        t_fail = float(times[np.argmax(codes != 0)])
        with pytest.raises(DecayedOrbitError):
            sat.propagate(t_fail)


class TestSatelliteStateTEME:
    """Test state_teme method (SI units)."""

    def test_state_teme_matches_propagate_scaled(self) -> None:
        """state_teme should be propagate * 1e3."""
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        result = sat.propagate(60.0)
        x_teme = sat.state_teme(60.0 * 60.0)  # 60 min = 3600 sec
        assert jnp.allclose(x_teme[:3], result.position * 1e3, atol=1e-3)
        assert jnp.allclose(x_teme[3:6], result.velocity * 1e3, atol=1e-6)

    def test_output_shape(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.state_teme(0.0).shape == (6,)
        assert sat.state_teme(jnp.array([0.0, 60.0, 120.0])).shape == (3, 6)

    def test_position_magnitude_leo(self) -> None:
        """LEO position should be ~6500-7000 km from Earth center."""
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        x = sat.state_teme(0.0)
        r_km = float(jnp.linalg.norm(x[:3])) / 1e3
        assert 6000.0 < r_km < 7200.0


class TestSatelliteRepr:
    """Test string representation."""

    def test_repr_contains_satnum(self) -> None:
        sat = Satellite.from_tle(ISS_LINE1, ISS_LINE2)
        assert "25544" in repr(sat)

    def test_repr_contains_orbit_class(self) -> None:
        sat = Satellite.from_tle(MOLNIYA_L1, MOLNIYA_L2)
        assert "DEEP_SPACE" in repr(sat)
