"""Tests for ElementRecord construction and derived properties."""

from dataclasses import FrozenInstanceError, replace
from math import pi

import pytest

from sgp4jax import DegenerateOrbitError, ElementRecord
from sgp4jax.constants import XPDOTP


def _record(**overrides) -> ElementRecord:
    fields = dict(
        satnum="00005",
        epoch_jd=2451723.5,
        epoch_jd_fraction=0.28495062,
        mean_motion=10.82419157,
        eccentricity=0.1859667,
        inclination=34.2682 * pi / 180.0,
        raan=348.7242 * pi / 180.0,
        argp=331.7664 * pi / 180.0,
        mean_anomaly=19.3264 * pi / 180.0,
        bstar=0.28098e-4,
    )
    fields.update(overrides)
    return ElementRecord(**fields)


class TestElementRecordInvariants:
    def test_valid_record(self) -> None:
        rec = _record()
        assert rec.satnum == "00005"

    def test_zero_mean_motion_raises(self) -> None:
        with pytest.raises(DegenerateOrbitError, match="mean motion"):
            _record(mean_motion=0.0)

    def test_negative_mean_motion_raises(self) -> None:
        with pytest.raises(DegenerateOrbitError):
            _record(mean_motion=-1.0)

    def test_eccentricity_one_raises(self) -> None:
        with pytest.raises(DegenerateOrbitError, match="eccentricity"):
            _record(eccentricity=1.0)

    def test_negative_eccentricity_raises(self) -> None:
        with pytest.raises(DegenerateOrbitError):
            _record(eccentricity=-1e-3)

    def test_circular_allowed(self) -> None:
        assert _record(eccentricity=0.0).eccentricity == 0.0

    def test_inclination_above_pi_raises(self) -> None:
        with pytest.raises(DegenerateOrbitError, match="inclination"):
            _record(inclination=pi + 1e-6)

    def test_inclination_bounds_allowed(self) -> None:
        assert _record(inclination=0.0).inclination == 0.0
        assert _record(inclination=pi).inclination == pi

    def test_degenerate_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            _record(mean_motion=0.0)

    def test_error_carries_satnum(self) -> None:
        with pytest.raises(DegenerateOrbitError) as excinfo:
            _record(eccentricity=1.5)
        assert excinfo.value.satnum == "00005"
        assert excinfo.value.context["eccentricity"] == 1.5


class TestElementRecordProperties:
    def test_no_kozai(self) -> None:
        rec = _record()
        assert rec.no_kozai == pytest.approx(10.82419157 / XPDOTP, rel=1e-15)

    def test_epoch_days_since_1949(self) -> None:
        rec = _record()
        assert rec.epoch == pytest.approx(2451723.5 + 0.28495062 - 2433281.5, abs=1e-9)

    def test_period_minutes(self) -> None:
        rec = _record(mean_motion=16.0)
        assert rec.period == pytest.approx(90.0)

    def test_frozen(self) -> None:
        rec = _record()
        with pytest.raises(FrozenInstanceError):
            rec.eccentricity = 0.5

    def test_replace_revalidates(self) -> None:
        with pytest.raises(DegenerateOrbitError):
            replace(_record(), eccentricity=2.0)
