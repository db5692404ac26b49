"""
SGP4/SDP4 propagation kernels and entry points.

A kernel composes the per-time stages of one model branch into a pure JAX
function of the coefficients and the time since epoch:

* near-Earth: secular drift, drag decay, long-period periodics, Kepler,
  short-period periodics, TEME rotation;
* deep-space: as near-Earth, with the lunar-solar secular rates and the
  resonance integration inserted before the drag decay and the lunar-solar
  periodics after it.

Kernels are compiled with ``jax.jit`` once per branch, gravity model,
operation mode and resonance condition. They cannot raise, so every failure
is reported as an :class:`~sgp4jax.errors.ErrorCode` with NaN state.
:func:`propagate` turns a non-zero code into a
:class:`~sgp4jax.errors.DecayedOrbitError`; :func:`propagate_batch` returns
the codes as an array.
"""

from __future__ import annotations

import logging
import math
import warnings
from math import pi
from typing import TYPE_CHECKING

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from sgp4jax._deep_space import lunar_solar_periodics, resonance_update
from sgp4jax._kepler import solve_kepler, teme_state
from sgp4jax._periodic import (
    InclinationTerms,
    inclination_terms,
    long_period_periodics,
    short_period_periodics,
)
from sgp4jax._secular import apply_drag, secular_drift
from sgp4jax._types import (
    KernelOutput,
    LunarSolarTerms,
    PropagationBatch,
    PropagationResult,
    PropagationStatus,
    Resonance,
    ResonanceTerms,
    SecularCoefficients,
)
from sgp4jax.config import get_dtype
from sgp4jax.constants import EarthGravity
from sgp4jax.errors import ConvergenceWarning, DecayedOrbitError, ErrorCode

if TYPE_CHECKING:
    from sgp4jax._bundle import CoefficientBundle

logger = logging.getLogger(__name__)


def _finish(
    gravity: EarthGravity,
    *,
    am: Array,
    nm: Array,
    ep: Array,
    xincp: Array,
    nodep: Array,
    argpp: Array,
    mp: Array,
    terms: InclinationTerms,
    em_raw: Array,
    failures: list[tuple[Array, ErrorCode]],
) -> KernelOutput:
    """Periodics, Kepler solve and TEME rotation shared by both branches.

    ``failures`` lists ``(condition, code)`` pairs detected by the earlier
    stages, highest priority first.
    """
    sinip = jnp.sin(xincp)
    cosip = jnp.cos(xincp)

    axnl, aynl, xl = long_period_periodics(am, ep, argpp, nodep, mp, terms.aycof, terms.xlcof)
    _, sineo1, coseo1, converged = solve_kepler(xl, nodep, axnl, aynl)
    sp = short_period_periodics(
        am=am,
        nm=nm,
        axnl=axnl,
        aynl=aynl,
        sineo1=sineo1,
        coseo1=coseo1,
        nodep=nodep,
        xincp=xincp,
        sinip=sinip,
        cosip=cosip,
        terms=terms,
        j2=gravity.j2,
        xke=gravity.xke,
    )
    vkmpersec = gravity.radiusearthkm * gravity.xke / 60.0
    r, v = teme_state(sp, gravity.radiusearthkm, vkmpersec)

    failures = failures + [
        (sp.pl < 0.0, ErrorCode.SEMI_LATUS_RECTUM),
        (sp.mrt < 1.0, ErrorCode.DECAYED),
    ]
    error_code = jnp.select(
        [cond for cond, _ in failures],
        [jnp.int32(int(code)) for _, code in failures],
        default=jnp.int32(int(ErrorCode.NONE)),
    )

    failed = error_code != int(ErrorCode.NONE)
    nan3 = jnp.full(3, jnp.nan, dtype=r.dtype)
    r = jnp.where(failed, nan3, r)
    v = jnp.where(failed, nan3, v)

    return KernelOutput(
        position=r,
        velocity=v,
        error_code=error_code,
        converged=converged,
        radius=sp.mrt * gravity.radiusearthkm,
        eccentricity=em_raw,
        mean_motion=nm,
    )


def _near_earth_kernel(
    c: SecularCoefficients,
    t: ArrayLike,
    gravity: EarthGravity,
    simplified: bool,
) -> KernelOutput:
    drift = secular_drift(c, t, simplified)
    mean, nm_ok, em_ok, em_raw = apply_drag(
        c,
        drift,
        gravity.xke,
        em=c.ecco,
        inclm=c.inclo,
        nodem=drift.nodem,
        argpm=drift.argpm,
        mm=drift.mm,
        nm=c.no_unkozai,
    )
    terms = InclinationTerms(c.aycof, c.xlcof, c.con41, c.x1mth2, c.x7thm1)
    return _finish(
        gravity,
        am=mean.am,
        nm=mean.nm,
        ep=mean.em,
        xincp=mean.inclm,
        nodep=mean.nodem,
        argpp=mean.argpm,
        mp=mean.mm,
        terms=terms,
        em_raw=em_raw,
        failures=[
            (~nm_ok, ErrorCode.MEAN_MOTION),
            (~em_ok, ErrorCode.MEAN_ECCENTRICITY),
        ],
    )


def _deep_space_kernel(
    c: SecularCoefficients,
    ls: LunarSolarTerms,
    res: ResonanceTerms,
    t: ArrayLike,
    gravity: EarthGravity,
    opsmode: str,
    kind: Resonance,
) -> KernelOutput:
    drift = secular_drift(c, t, True)
    em, argpm, inclm, mm, nodem, nm = resonance_update(
        c,
        ls,
        res,
        kind,
        t,
        em=c.ecco,
        argpm=drift.argpm,
        inclm=c.inclo,
        mm=drift.mm,
        nodem=drift.nodem,
        nm=c.no_unkozai,
    )
    mean, nm_ok, em_ok, em_raw = apply_drag(
        c,
        drift,
        gravity.xke,
        em=em,
        inclm=inclm,
        nodem=nodem,
        argpm=argpm,
        mm=mm,
        nm=nm,
    )
    ep, xincp, nodep, argpp, mp = lunar_solar_periodics(
        ls,
        t,
        opsmode,
        ep=mean.em,
        inclp=mean.inclm,
        nodep=mean.nodem,
        argpp=mean.argpm,
        mp=mean.mm,
    )

    # Fold negative inclinations back into [0, pi]
    flip = xincp < 0.0
    xincp = jnp.where(flip, -xincp, xincp)
    nodep = jnp.where(flip, nodep + pi, nodep)
    argpp = jnp.where(flip, argpp - pi, argpp)
    ep_ok = (ep >= 0.0) & (ep <= 1.0)

    terms = inclination_terms(gravity.j3oj2, jnp.sin(xincp), jnp.cos(xincp))
    return _finish(
        gravity,
        am=mean.am,
        nm=mean.nm,
        ep=ep,
        xincp=xincp,
        nodep=nodep,
        argpp=argpp,
        mp=mp,
        terms=terms,
        em_raw=em_raw,
        failures=[
            (~nm_ok, ErrorCode.MEAN_MOTION),
            (~em_ok, ErrorCode.MEAN_ECCENTRICITY),
            (~ep_ok, ErrorCode.PERTURBED_ECCENTRICITY),
        ],
    )


def _near_earth_batch(
    c: SecularCoefficients,
    t: ArrayLike,
    gravity: EarthGravity,
    simplified: bool,
) -> KernelOutput:
    return jax.vmap(lambda ti: _near_earth_kernel(c, ti, gravity, simplified))(t)


def _deep_space_batch(
    c: SecularCoefficients,
    ls: LunarSolarTerms,
    res: ResonanceTerms,
    t: ArrayLike,
    gravity: EarthGravity,
    opsmode: str,
    kind: Resonance,
) -> KernelOutput:
    return jax.vmap(lambda ti: _deep_space_kernel(c, ls, res, ti, gravity, opsmode, kind))(t)


near_earth_kernel = jax.jit(_near_earth_kernel, static_argnames=("gravity", "simplified"))
"""Compiled SGP4 kernel: ``near_earth_kernel(c, t, gravity, simplified)``."""

deep_space_kernel = jax.jit(_deep_space_kernel, static_argnames=("gravity", "opsmode", "kind"))
"""Compiled SDP4 kernel: ``deep_space_kernel(c, ls, res, t, gravity, opsmode, kind)``."""

near_earth_batch_kernel = jax.jit(_near_earth_batch, static_argnames=("gravity", "simplified"))
deep_space_batch_kernel = jax.jit(_deep_space_batch, static_argnames=("gravity", "opsmode", "kind"))


def propagate(bundle: CoefficientBundle, tsince: float) -> PropagationResult:
    """Propagate an initialized object to one time.

    Args:
        bundle: Bundle returned by :func:`~sgp4jax.initialize`.
        tsince: Time since the element epoch [min]. Negative values
            propagate backwards.

    Returns:
        TEME position [km] and velocity [km/s]. ``status`` is
        ``LOW_PRECISION`` if Kepler's equation did not converge, in which
        case a :class:`~sgp4jax.errors.ConvergenceWarning` is also issued.

    Raises:
        ValueError: If *tsince* is not finite.
        DecayedOrbitError: If the orbit has decayed or become degenerate at
            *tsince*. ``code`` gives the failing condition. The bundle stays
            usable for other times.
    """
    tsince = float(tsince)
    if not math.isfinite(tsince):
        raise ValueError(f"tsince must be finite, got {tsince!r}")

    satnum = bundle.elements.satnum
    out = bundle.evaluate(jnp.asarray(tsince, dtype=get_dtype()))

    code = ErrorCode(int(out.error_code))
    if code is not ErrorCode.NONE:
        context = dict(
            radius_km=float(out.radius),
            eccentricity=float(out.eccentricity),
            mean_motion=float(out.mean_motion),
        )
        logger.warning("Propagation of %s failed at %r min: %s %s", satnum, tsince, code.message, context)
        raise DecayedOrbitError(code.message, code=code, satnum=satnum, tsince=tsince, **context)

    status = PropagationStatus.NOMINAL
    if not bool(out.converged):
        status = PropagationStatus.LOW_PRECISION
        logger.warning("Kepler iteration for %s did not converge at %r min", satnum, tsince)
        warnings.warn(
            f"Kepler's equation did not converge for {satnum} at {tsince} min; "
            "result is low precision",
            ConvergenceWarning,
            stacklevel=2,
        )

    return PropagationResult(out.position, out.velocity, status, tsince, satnum)


def propagate_batch(bundle: CoefficientBundle, tsince: ArrayLike) -> PropagationBatch:
    """Propagate an initialized object to many times at once.

    Failures do not raise: each row carries its own error code, and failed
    rows hold NaN.

    Args:
        bundle: Bundle returned by :func:`~sgp4jax.initialize`.
        tsince: Times since the element epoch [min], shape ``(N,)``.

    Returns:
        Positions ``(N, 3)`` [km], velocities ``(N, 3)`` [km/s], error codes
        ``(N,)`` and Kepler convergence flags ``(N,)``.

    Raises:
        ValueError: If *tsince* is not one-dimensional or holds non-finite
            values.
    """
    times = np.asarray(tsince, dtype=float)
    if times.ndim != 1:
        raise ValueError(f"tsince must be one-dimensional, got shape {times.shape}")
    if not np.all(np.isfinite(times)):
        raise ValueError("tsince must hold only finite values")

    out = bundle.evaluate_batch(jnp.asarray(times, dtype=get_dtype()))
    failed = int(jnp.count_nonzero(out.error_code))
    if failed:
        logger.warning("Propagation of %s failed at %d of %d times", bundle.elements.satnum, failed, times.size)
    return PropagationBatch(out.position, out.velocity, out.error_code, out.converged)
