"""
Long- and short-period gravitational periodics.

The long-period step converts the (possibly lunar-solar perturbed) mean
elements into the equinoctial quantities ``axnl``, ``aynl`` and the mean
longitude ``xl`` that Kepler's equation is solved in. The short-period step
adds the J2 oscillations to radius, argument of latitude, node, inclination
and the radial velocities once the eccentric longitude is known.

Working in ``axnl = e cos(w)`` and ``aynl = e sin(w)`` keeps the equations
regular as the eccentricity goes to zero, so no separate small-eccentricity
branch is needed.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from sgp4jax.constants import COSIO_SINGULAR_DIVISOR


class InclinationTerms(NamedTuple):
    """Inclination-dependent coefficients of the periodic corrections."""

    aycof: Array
    xlcof: Array
    con41: Array
    x1mth2: Array
    x7thm1: Array


class ShortPeriodState(NamedTuple):
    """Osculating polar quantities after the short-period corrections.

    Attributes:
        mrt: Radius [earth_radii].
        su: Argument of latitude [rad].
        xnode: RAAN [rad].
        xinc: Inclination [rad].
        mvt: Radial velocity [earth_radii per SGP4 time unit].
        rvdot: Transverse velocity [earth_radii per SGP4 time unit].
        pl: Semi-latus rectum before the corrections [earth_radii].
    """

    mrt: Array
    su: Array
    xnode: Array
    xinc: Array
    mvt: Array
    rvdot: Array
    pl: Array


def inclination_terms(j3oj2: float, sinip: ArrayLike, cosip: ArrayLike) -> InclinationTerms:
    """Evaluate the J3 long-period and J2 short-period inclination factors.

    Deep-space orbits call this at every step because the lunar-solar
    periodics change the inclination; near-Earth orbits use the epoch values
    computed at initialization.

    The ``xlcof`` denominator ``1 + cos(i)`` vanishes for retrograde
    equatorial orbits and is replaced by ``1.5e-12`` there.
    """
    cosisq = cosip * cosip
    denom = 1.0 + cosip
    denom = jnp.where(jnp.abs(denom) > COSIO_SINGULAR_DIVISOR, denom, COSIO_SINGULAR_DIVISOR)
    return InclinationTerms(
        aycof=-0.5 * j3oj2 * sinip,
        xlcof=-0.25 * j3oj2 * sinip * (3.0 + 5.0 * cosip) / denom,
        con41=3.0 * cosisq - 1.0,
        x1mth2=1.0 - cosisq,
        x7thm1=7.0 * cosisq - 1.0,
    )


def long_period_periodics(
    am: ArrayLike,
    ep: ArrayLike,
    argpp: ArrayLike,
    nodep: ArrayLike,
    mp: ArrayLike,
    aycof: ArrayLike,
    xlcof: ArrayLike,
) -> tuple[Array, Array, Array]:
    """Apply the J3 long-period periodics.

    Args:
        am: Semi-major axis [earth_radii].
        ep: Eccentricity.
        argpp: Argument of perigee [rad].
        nodep: RAAN [rad].
        mp: Mean anomaly [rad].
        aycof: J3 ``ay`` coefficient.
        xlcof: J3 mean longitude coefficient.

    Returns:
        Tuple ``(axnl, aynl, xl)``.
    """
    axnl = ep * jnp.cos(argpp)
    temp = 1.0 / (am * (1.0 - ep * ep))
    aynl = ep * jnp.sin(argpp) + temp * aycof
    xl = mp + argpp + nodep + temp * xlcof * axnl
    return axnl, aynl, xl


def short_period_periodics(
    *,
    am: ArrayLike,
    nm: ArrayLike,
    axnl: ArrayLike,
    aynl: ArrayLike,
    sineo1: ArrayLike,
    coseo1: ArrayLike,
    nodep: ArrayLike,
    xincp: ArrayLike,
    sinip: ArrayLike,
    cosip: ArrayLike,
    terms: InclinationTerms,
    j2: float,
    xke: float,
) -> ShortPeriodState:
    """Apply the J2 short-period periodics.

    The returned ``pl`` is negative when the osculating orbit is no longer
    an ellipse; the other fields are then meaningless and the caller reports
    the failure.
    """
    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)

    rl = am * (1.0 - ecose)
    rdotl = jnp.sqrt(am) * esine / rl
    rvdotl = jnp.sqrt(pl) / rl
    betal = jnp.sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = jnp.arctan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * j2 * temp
    temp2 = temp1 * temp

    mrt = rl * (1.0 - 1.5 * temp2 * betal * terms.con41) + 0.5 * temp1 * terms.x1mth2 * cos2u
    su = su - 0.25 * temp2 * terms.x7thm1 * sin2u
    xnode = nodep + 1.5 * temp2 * cosip * sin2u
    xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - nm * temp1 * terms.x1mth2 * sin2u / xke
    rvdot = rvdotl + nm * temp1 * (terms.x1mth2 * cos2u + 1.5 * terms.con41) / xke

    return ShortPeriodState(mrt, su, xnode, xinc, mvt, rvdot, pl)
