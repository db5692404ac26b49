"""Module-wide floating-point precision configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used for
propagation times and results throughout sgp4jax. The default is
``jnp.float64``: reproducing reference positions to sub-kilometer accuracy
needs double precision, so importing sgp4jax enables JAX's 64-bit mode
(``jax_enable_x64``).

``jnp.float32`` may be selected for large batched runs on accelerators,
where errors of a few meters to tens of meters are acceptable. Call
``set_dtype`` **before** any JIT compilation; under JIT, ``get_dtype()`` runs
during tracing and its result is baked into the compiled program.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float32, jnp.float64)

jax.config.update("jax_enable_x64", True)

_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for sgp4jax.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is (re-)enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: Either ``jnp.float32`` or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype
