"""Tests for the error hierarchy and error codes."""

import pytest

from sgp4jax import (
    ConvergenceWarning,
    DecayedOrbitError,
    DegenerateOrbitError,
    ErrorCode,
    SGP4Error,
    SubOrbitalEpochError,
    TLEFormatError,
)


class TestErrorCode:
    def test_values_follow_reference_numbering(self) -> None:
        assert [int(code) for code in ErrorCode] == [0, 1, 2, 3, 4, 5, 6]

    @pytest.mark.parametrize("code", list(ErrorCode))
    def test_every_code_has_message(self, code: ErrorCode) -> None:
        assert isinstance(code.message, str)
        assert code.message

    def test_lookup_by_value(self) -> None:
        assert ErrorCode(6) is ErrorCode.DECAYED
        assert ErrorCode(1) is ErrorCode.MEAN_ECCENTRICITY


class TestHierarchy:
    def test_base_classes(self) -> None:
        assert issubclass(DegenerateOrbitError, SGP4Error)
        assert issubclass(DegenerateOrbitError, ValueError)
        assert issubclass(DecayedOrbitError, SGP4Error)
        assert issubclass(SubOrbitalEpochError, DegenerateOrbitError)
        assert issubclass(SubOrbitalEpochError, DecayedOrbitError)
        assert issubclass(TLEFormatError, ValueError)
        assert issubclass(ConvergenceWarning, RuntimeWarning)

    def test_decayed_default_code(self) -> None:
        err = DecayedOrbitError("decayed")
        assert err.code is ErrorCode.DECAYED

    def test_decayed_code_from_int(self) -> None:
        err = DecayedOrbitError("bad", code=4)
        assert err.code is ErrorCode.SEMI_LATUS_RECTUM

    def test_sub_orbital_code(self) -> None:
        err = SubOrbitalEpochError("below surface", satnum="00001", perigee_km=-12.5)
        assert err.code is ErrorCode.SUB_ORBITAL
        assert err.tsince is None
        assert err.context == {"perigee_km": -12.5}


class TestFormatting:
    def test_message_only(self) -> None:
        assert str(SGP4Error("boom")) == "boom"

    def test_context_in_str(self) -> None:
        err = DecayedOrbitError(
            "satellite has decayed",
            satnum="22312",
            tsince=1440.0,
            radius_km=6300.0,
        )
        text = str(err)
        assert text.startswith("satellite has decayed")
        assert "satnum='22312'" in text
        assert "tsince=1440.0 min" in text
        assert "radius_km=6300.0" in text

    def test_attributes(self) -> None:
        err = SGP4Error("boom", satnum="5", tsince=-10.0, eccentricity=1.2)
        assert err.message == "boom"
        assert err.satnum == "5"
        assert err.tsince == -10.0
        assert err.context["eccentricity"] == 1.2
