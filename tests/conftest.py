import jax.numpy as jnp
import pytest

from sgp4jax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Tests that exercise float32 (test_config.py) switch the dtype themselves
    and rely on this fixture to restore the package default afterwards.
    """
    set_dtype(jnp.float64)
