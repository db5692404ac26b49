"""
Kepler's equation in equinoctial form and the TEME state vector.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from sgp4jax._periodic import ShortPeriodState
from sgp4jax.constants import KEPLER_MAX_ITERATIONS, KEPLER_MAX_STEP, KEPLER_TOLERANCE, TWOPI


def solve_kepler(
    xl: ArrayLike,
    nodep: ArrayLike,
    axnl: ArrayLike,
    aynl: ArrayLike,
) -> tuple[Array, Array, Array, Array]:
    """Solve Kepler's equation for the eccentric longitude.

    Solves ``U = E - aynl cos(E) + axnl sin(E)`` with ``U = (xl - nodep) mod
    2pi`` by Newton-Raphson, starting from ``E = U``. Each Newton step is
    clamped to ``[-0.95, 0.95]`` rad. Iteration stops once the step falls
    below ``1e-12`` (a few float32 ulps in single precision) or after 10
    steps, whichever comes first.

    Args:
        xl: Mean longitude [rad].
        nodep: RAAN [rad].
        axnl: ``e cos(w)`` after long-period periodics.
        aynl: ``e sin(w)`` after long-period periodics.

    Returns:
        Tuple ``(eo1, sineo1, coseo1, converged)``. ``converged`` is
        ``False`` if the last step taken was still above the tolerance.
    """
    u = jnp.mod(jnp.asarray(xl) - nodep, TWOPI)
    # single precision cannot resolve steps of 1e-12
    tol = max(KEPLER_TOLERANCE, 16.0 * float(jnp.finfo(u.dtype).eps))

    def cond(state):
        ktr, _, tem5 = state
        return (jnp.abs(tem5) >= tol) & (ktr < KEPLER_MAX_ITERATIONS)

    def step(state):
        ktr, eo1, _ = state
        sineo1 = jnp.sin(eo1)
        coseo1 = jnp.cos(eo1)
        tem5 = 1.0 - coseo1 * axnl - sineo1 * aynl
        tem5 = (u - aynl * coseo1 + axnl * sineo1 - eo1) / tem5
        tem5 = jnp.clip(tem5, -KEPLER_MAX_STEP, KEPLER_MAX_STEP)
        return ktr + 1, eo1 + tem5, tem5

    ktr, eo1, tem5 = jax.lax.while_loop(cond, step, (jnp.array(0), u, jnp.ones_like(u)))
    converged = jnp.abs(tem5) < tol
    return eo1, jnp.sin(eo1), jnp.cos(eo1), converged


def teme_state(sp: ShortPeriodState, radiusearthkm: float, vkmpersec: float) -> tuple[Array, Array]:
    """Rotate the osculating polar state into TEME position and velocity.

    Args:
        sp: Output of :func:`~sgp4jax._periodic.short_period_periodics`.
        radiusearthkm: Earth equatorial radius [km].
        vkmpersec: Velocity unit [km/s per earth_radii per SGP4 time unit].

    Returns:
        Tuple ``(r, v)`` in [km] and [km/s], each of shape ``(3,)``.
    """
    sinsu = jnp.sin(sp.su)
    cossu = jnp.cos(sp.su)
    snod = jnp.sin(sp.xnode)
    cnod = jnp.cos(sp.xnode)
    sini = jnp.sin(sp.xinc)
    cosi = jnp.cos(sp.xinc)
    xmx = -snod * cosi
    xmy = cnod * cosi

    # Unit vectors along the radius and the in-plane normal to it
    ux = xmx * sinsu + cnod * cossu
    uy = xmy * sinsu + snod * cossu
    uz = sini * sinsu
    vx = xmx * cossu - cnod * sinsu
    vy = xmy * cossu - snod * sinsu
    vz = sini * cossu

    mr = sp.mrt * radiusearthkm
    r = jnp.stack([mr * ux, mr * uy, mr * uz])
    v = jnp.stack(
        [
            (sp.mvt * ux + sp.rvdot * vx) * vkmpersec,
            (sp.mvt * uy + sp.rvdot * vy) * vkmpersec,
            (sp.mvt * uz + sp.rvdot * vz) * vkmpersec,
        ]
    )
    return r, v
