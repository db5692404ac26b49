"""Tests for the gravity models and model constants."""

from math import sqrt

import pytest

from sgp4jax import GRAVITY_MODELS, WGS72, WGS72OLD, WGS84
from sgp4jax.constants import (
    DEEP_SPACE_PERIOD,
    KEPLER_MAX_ITERATIONS,
    KEPLER_MAX_STEP,
    KEPLER_TOLERANCE,
    RESONANCE_STEP,
    resolve_gravity,
)


class TestEarthGravityConstants:
    """Gravity constant sets match the reference sgp4 library."""

    def test_wgs72old_values(self) -> None:
        assert WGS72OLD.mu == 398600.79964
        assert WGS72OLD.radiusearthkm == 6378.135
        assert WGS72OLD.xke == 0.0743669161
        assert WGS72OLD.j2 == 0.001082616
        assert WGS72OLD.j3 == -0.00000253881
        assert WGS72OLD.j4 == -0.00000165597

    def test_wgs72_values(self) -> None:
        assert WGS72.mu == 398600.8
        assert WGS72.radiusearthkm == 6378.135
        assert WGS72.j2 == 0.001082616
        assert WGS72.j3oj2 == pytest.approx(WGS72.j3 / WGS72.j2, rel=1e-12)

    def test_wgs84_values(self) -> None:
        assert WGS84.mu == 398600.5
        assert WGS84.radiusearthkm == 6378.137
        assert WGS84.j2 == 0.00108262998905
        assert WGS84.j3 == -0.00000253215306
        assert WGS84.j4 == -0.00000161098761

    def test_xke_derived(self) -> None:
        for grav in (WGS72, WGS84):
            expected = 60.0 / sqrt(grav.radiusearthkm**3 / grav.mu)
            assert grav.xke == pytest.approx(expected, rel=1e-12)

    def test_tumin_is_inverse_xke(self) -> None:
        for grav in (WGS72OLD, WGS72, WGS84):
            assert grav.tumin == pytest.approx(1.0 / grav.xke, rel=1e-12)

    def test_resolve_by_name(self) -> None:
        assert resolve_gravity("WGS84") is WGS84
        assert resolve_gravity(WGS72OLD) is WGS72OLD
        assert set(GRAVITY_MODELS) == {"wgs72old", "wgs72", "wgs84"}

    def test_resolve_unknown_raises(self) -> None:
        with pytest.raises(KeyError):
            resolve_gravity("egm96")


class TestModelConstants:
    """Tolerances follow the reference library's published values."""

    def test_kepler_settings(self) -> None:
        assert KEPLER_TOLERANCE == 1.0e-12
        assert KEPLER_MAX_ITERATIONS == 10
        assert KEPLER_MAX_STEP == 0.95

    def test_deep_space_threshold(self) -> None:
        assert DEEP_SPACE_PERIOD == 225.0

    def test_resonance_step(self) -> None:
        assert RESONANCE_STEP == 720.0
