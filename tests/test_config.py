"""Tests for the sgp4jax.config module."""

import jax
import jax.numpy as jnp
import pytest

from sgp4jax import initialize, parse_tle, propagate, propagate_batch
from sgp4jax.config import get_dtype, set_dtype

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


@pytest.fixture(autouse=True)
def reset_dtype():
    """Restore the float64 default after each test."""
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_default_dtype(self) -> None:
        assert get_dtype() == jnp.float64

    def test_set_float32(self) -> None:
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_roundtrip(self) -> None:
        for dtype in (jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")

    def test_float16_not_supported(self) -> None:
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.float16)

    def test_import_enables_x64(self) -> None:
        assert jax.config.jax_enable_x64 is True


class TestDtypeSwitchingOutputs:
    """Propagation results follow the configured dtype."""

    def test_float64_result(self) -> None:
        bundle = initialize(parse_tle(ISS_LINE1, ISS_LINE2))
        result = propagate(bundle, 60.0)
        assert result.position.dtype == jnp.float64
        assert result.velocity.dtype == jnp.float64

    def test_float32_result_close_to_float64(self) -> None:
        bundle = initialize(parse_tle(ISS_LINE1, ISS_LINE2))
        r64 = propagate(bundle, 60.0).position

        set_dtype(jnp.float32)
        r32 = propagate(bundle, 60.0).position

        # Single precision loses meters to tens of meters over an hour
        assert jnp.allclose(r32, r64, atol=1e-1)

    def test_float32_batch(self) -> None:
        bundle = initialize(parse_tle(ISS_LINE1, ISS_LINE2))
        set_dtype(jnp.float32)
        batch = propagate_batch(bundle, [0.0, 30.0, 60.0])
        assert batch.position.shape == (3, 3)
        assert jnp.all(jnp.isfinite(batch.position))
