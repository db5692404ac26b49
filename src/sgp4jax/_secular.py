"""
Secular gravity and atmospheric drag updates of the mean elements.

These are the first and last steps of every propagation: ``secular_drift``
advances the angles linearly with the J2/J4 rates and builds the drag decay
factors, ``apply_drag`` applies those factors to semi-major axis,
eccentricity and mean longitude once any deep-space corrections have been
made. Both are pure JAX functions, compiled as part of the propagation
kernels.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from sgp4jax._types import MeanElements, SecularCoefficients
from sgp4jax.constants import ECC_FLOOR, ECC_MAX, ECC_MIN, TWOPI

_X2O3 = 2.0 / 3.0


class SecularDrift(NamedTuple):
    """Linearly advanced angles and drag decay factors at time ``t``."""

    mm: Array
    argpm: Array
    nodem: Array
    tempa: Array
    tempe: Array
    templ: Array


def secular_drift(c: SecularCoefficients, t: ArrayLike, simplified: bool) -> SecularDrift:
    """Advance mean anomaly, perigee and node and build the drag factors.

    Args:
        c: Secular coefficients of the object.
        t: Time since epoch [min].
        simplified: If ``True`` (perigee below 220 km or deep space), only
            the C1/C4 drag terms are used. Static under JIT.

    Returns:
        The drifted angles and the decay factors ``tempa`` (semi-major
        axis), ``tempe`` (eccentricity) and ``templ`` (mean longitude).
    """
    xmdf = c.mo + c.mdot * t
    argpdf = c.argpo + c.argpdot * t
    nodedf = c.nodeo + c.nodedot * t
    argpm = argpdf
    mm = xmdf
    t2 = t * t
    nodem = nodedf + c.nodecf * t2
    tempa = 1.0 - c.cc1 * t
    tempe = c.bstar * c.cc4 * t
    templ = c.t2cof * t2

    if not simplified:
        delomg = c.omgcof * t
        delmtemp = 1.0 + c.eta * jnp.cos(xmdf)
        delm = c.xmcof * (delmtemp * delmtemp * delmtemp - c.delmo)
        temp = delomg + delm
        mm = xmdf + temp
        argpm = argpdf - temp
        t3 = t2 * t
        t4 = t3 * t
        tempa = tempa - c.d2 * t2 - c.d3 * t3 - c.d4 * t4
        tempe = tempe + c.bstar * c.cc5 * (jnp.sin(mm) - c.sinmao)
        templ = templ + c.t3cof * t3 + t4 * (c.t4cof + t * c.t5cof)

    return SecularDrift(mm, argpm, nodem, tempa, tempe, templ)


def apply_drag(
    c: SecularCoefficients,
    drift: SecularDrift,
    xke: float,
    *,
    em: ArrayLike,
    inclm: ArrayLike,
    nodem: ArrayLike,
    argpm: ArrayLike,
    mm: ArrayLike,
    nm: ArrayLike,
) -> tuple[MeanElements, Array, Array, Array]:
    """Apply drag decay to the mean elements and wrap the angles.

    The keyword arguments are the mean elements after the secular drift and,
    for deep-space orbits, after the resonance corrections.

    Args:
        c: Secular coefficients of the object.
        drift: Output of :func:`secular_drift`.
        xke: Gravity model constant ``sqrt(GM)`` in SGP4 units.

    Returns:
        Tuple ``(mean, nm_ok, em_ok, em_raw)``: the decayed mean elements
        (eccentricity clamped to ``[1e-6, 1 - 1e-6]``), whether the mean
        motion entering the decay was positive, whether the decayed
        eccentricity was in range, and the eccentricity before clamping.
    """
    nm_ok = jnp.asarray(nm) > 0.0

    am = (xke / nm) ** _X2O3 * drift.tempa * drift.tempa
    nm = xke / am**1.5
    em = em - drift.tempe

    em_ok = (em < 1.0) & (em >= ECC_FLOOR)
    em_raw = em
    em = jnp.clip(em, ECC_MIN, ECC_MAX)

    mm = mm + c.no_unkozai * drift.templ
    xlm = mm + argpm + nodem

    # node keeps the sign of C fmod, the other angles wrap into [0, 2pi)
    nodem = jnp.fmod(nodem, TWOPI)
    argpm = argpm % TWOPI
    xlm = xlm % TWOPI
    mm = (xlm - argpm - nodem) % TWOPI

    return MeanElements(am, em, inclm, nodem, argpm, mm, nm), nm_ok, em_ok, em_raw
