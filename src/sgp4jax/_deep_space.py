"""
Deep-space (SDP4) lunar-solar perturbations and geopotential resonance.

Initialization (``deep_space_init``) runs at Python time on plain floats and
fixes the solar and lunar perturbation amplitudes at the element epoch,
detects synchronous and half-day resonance, and computes the resonance
coefficients. The propagation helpers (``resonance_update`` and
``lunar_solar_periodics``) are pure JAX functions compiled into the
deep-space kernel.
"""

from __future__ import annotations

import logging
from math import atan2, cos, fmod, pi, sin, sqrt
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from sgp4jax._types import LunarSolarTerms, Resonance, ResonanceTerms, SecularCoefficients
from sgp4jax.constants import LYDDANE_INCLINATION, RESONANCE_STEP, TWOPI

logger = logging.getLogger(__name__)

# Solar and lunar orbit constants
_ZES = 0.01675
_ZEL = 0.05490
_ZNS = 1.19459e-5
_ZNL = 1.5835218e-4
_C1SS = 2.9864797e-6
_C1L = 4.7968065e-7
_ZSINIS = 0.39785416
_ZCOSIS = 0.91744867
_ZCOSGS = 0.1945905
_ZSINGS = -0.98088458

# Resonance constants
_Q22 = 1.7891679e-6
_Q31 = 2.1460748e-6
_Q33 = 2.2123015e-7
_ROOT22 = 1.7891679e-6
_ROOT32 = 3.7393792e-7
_ROOT44 = 7.3636953e-9
_ROOT52 = 1.1428639e-7
_ROOT54 = 2.1765803e-9
_RPTIM = 4.37526908801129966e-3  # Earth rotation rate [rad/min]
_FASX2 = 0.13130908
_FASX4 = 2.8843198
_FASX6 = 0.37448087
_G22 = 5.7686396
_G32 = 0.95240898
_G44 = 1.8014998
_G52 = 1.0508330
_G54 = 4.4108898
_STEP2 = 0.5 * RESONANCE_STEP * RESONANCE_STEP

# Inclination (3 deg) below which the lunar-solar node rate is suppressed
_SMALL_INCLINATION = 5.2359877e-2


# ---------------------------------------------------------------------------
# Python-time initialization
# ---------------------------------------------------------------------------


class _BodyTerms(NamedTuple):
    """Geometry of one perturbing body (Sun or Moon) relative to the orbit."""

    s1: float
    s2: float
    s3: float
    s4: float
    s5: float
    s6: float
    s7: float
    z1: float
    z2: float
    z3: float
    z11: float
    z12: float
    z13: float
    z21: float
    z22: float
    z23: float
    z31: float
    z32: float
    z33: float


def _body_terms(
    zcosg: float,
    zsing: float,
    zcosi: float,
    zsini: float,
    zcosh: float,
    zsinh: float,
    cc: float,
    *,
    nm: float,
    em: float,
    sinim: float,
    cosim: float,
    sinomm: float,
    cosomm: float,
) -> _BodyTerms:
    emsq = em * em
    betasq = 1.0 - emsq
    rtemsq = sqrt(betasq)

    a1 = zcosg * zcosh + zsing * zcosi * zsinh
    a3 = -zsing * zcosh + zcosg * zcosi * zsinh
    a7 = -zcosg * zsinh + zsing * zcosi * zcosh
    a8 = zsing * zsini
    a9 = zsing * zsinh + zcosg * zcosi * zcosh
    a10 = zcosg * zsini
    a2 = cosim * a7 + sinim * a8
    a4 = cosim * a9 + sinim * a10
    a5 = -sinim * a7 + cosim * a8
    a6 = -sinim * a9 + cosim * a10

    x1 = a1 * cosomm + a2 * sinomm
    x2 = a3 * cosomm + a4 * sinomm
    x3 = -a1 * sinomm + a2 * cosomm
    x4 = -a3 * sinomm + a4 * cosomm
    x5 = a5 * sinomm
    x6 = a6 * sinomm
    x7 = a5 * cosomm
    x8 = a6 * cosomm

    z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
    z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
    z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
    z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * emsq
    z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * emsq
    z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * emsq
    z11 = -6.0 * a1 * a5 + emsq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
    z12 = -6.0 * (a1 * a6 + a3 * a5) + emsq * (
        -24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5)
    )
    z13 = -6.0 * a3 * a6 + emsq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
    z21 = 6.0 * a2 * a5 + emsq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
    z22 = 6.0 * (a4 * a5 + a2 * a6) + emsq * (
        24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8)
    )
    z23 = 6.0 * a4 * a6 + emsq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
    z1 = z1 + z1 + betasq * z31
    z2 = z2 + z2 + betasq * z32
    z3 = z3 + z3 + betasq * z33
    s3 = cc * (1.0 / nm)
    s2 = -0.5 * s3 / rtemsq
    s4 = s3 * rtemsq
    s1 = -15.0 * em * s4
    s5 = x1 * x3 + x2 * x4
    s6 = x2 * x3 + x1 * x4
    s7 = x2 * x4 - x1 * x3

    return _BodyTerms(
        s1, s2, s3, s4, s5, s6, s7,
        z1, z2, z3, z11, z12, z13, z21, z22, z23, z31, z32, z33,
    )  # fmt: skip


def _lunar_solar_geometry(
    epoch: float,
    em: float,
    argpp: float,
    inclp: float,
    nodep: float,
    nm: float,
) -> tuple[_BodyTerms, _BodyTerms, float, float]:
    """Solar and lunar geometry at epoch.

    Args:
        epoch: Days since 1949 December 31 00:00 UT.
        em: Eccentricity.
        argpp: Argument of perigee [rad].
        inclp: Inclination [rad].
        nodep: RAAN [rad].
        nm: Brouwer mean motion [rad/min].

    Returns:
        Tuple ``(solar, lunar, zmos, zmol)`` of body terms and the solar and
        lunar mean anomalies at epoch [rad].
    """
    snodm = sin(nodep)
    cnodm = cos(nodep)
    common = dict(
        nm=nm,
        em=em,
        sinim=sin(inclp),
        cosim=cos(inclp),
        sinomm=sin(argpp),
        cosomm=cos(argpp),
    )

    day = epoch + 18261.5
    xnodce = fmod(4.5236020 - 9.2422029e-4 * day, TWOPI)
    stem = sin(xnodce)
    ctem = cos(xnodce)
    zcosil = 0.91375164 - 0.03568096 * ctem
    zsinil = sqrt(1.0 - zcosil * zcosil)
    zsinhl = 0.089683511 * stem / zsinil
    zcoshl = sqrt(1.0 - zsinhl * zsinhl)
    gam = 5.8351514 + 0.0019443680 * day
    zx = 0.39785416 * stem / zsinil
    zy = zcoshl * ctem + 0.91744867 * zsinhl * stem
    zx = atan2(zx, zy)
    zx = gam + zx - xnodce
    zcosgl = cos(zx)
    zsingl = sin(zx)

    solar = _body_terms(_ZCOSGS, _ZSINGS, _ZCOSIS, _ZSINIS, cnodm, snodm, _C1SS, **common)
    lunar = _body_terms(
        zcosgl,
        zsingl,
        zcosil,
        zsinil,
        zcoshl * cnodm + zsinhl * snodm,
        snodm * zcoshl - cnodm * zsinhl,
        _C1L,
        **common,
    )

    zmol = fmod(4.7199672 + 0.22997150 * day - gam, TWOPI)
    zmos = fmod(6.2565837 + 0.017201977 * day, TWOPI)
    return solar, lunar, zmos, zmol


def _detect_resonance(nm: float, em: float) -> Resonance:
    if 0.0034906585 < nm < 0.0052359877:
        return Resonance.SYNCHRONOUS
    if 8.26e-3 <= nm <= 9.24e-3 and em >= 0.5:
        return Resonance.HALF_DAY
    return Resonance.NONE


def _half_day_terms(
    c: SecularCoefficients,
    ls: LunarSolarTerms,
    theta: float,
    aonv: float,
    sinim: float,
    cosim: float,
) -> ResonanceTerms:
    em = c.ecco
    emsq = em * em
    eoc = em * emsq
    cosisq = cosim * cosim
    g201 = -0.306 - (em - 0.64) * 0.440

    if em <= 0.65:
        g211 = 3.616 - 13.2470 * em + 16.2900 * emsq
        g310 = -19.302 + 117.3900 * em - 228.4190 * emsq + 156.5910 * eoc
        g322 = -18.9068 + 109.7927 * em - 214.6334 * emsq + 146.5816 * eoc
        g410 = -41.122 + 242.6940 * em - 471.0940 * emsq + 313.9530 * eoc
        g422 = -146.407 + 841.8800 * em - 1629.014 * emsq + 1083.4350 * eoc
        g520 = -532.114 + 3017.977 * em - 5740.032 * emsq + 3708.2760 * eoc
    else:
        g211 = -72.099 + 331.819 * em - 508.738 * emsq + 266.724 * eoc
        g310 = -346.844 + 1582.851 * em - 2415.925 * emsq + 1246.113 * eoc
        g322 = -342.585 + 1554.908 * em - 2366.899 * emsq + 1215.972 * eoc
        g410 = -1052.797 + 4758.686 * em - 7193.992 * emsq + 3651.957 * eoc
        g422 = -3581.690 + 16178.110 * em - 24462.770 * emsq + 12422.520 * eoc
        if em > 0.715:
            g520 = -5149.66 + 29936.92 * em - 54087.36 * emsq + 31324.56 * eoc
        else:
            g520 = 1464.74 - 4664.75 * em + 3763.64 * emsq

    if em < 0.7:
        g533 = -919.22770 + 4988.6100 * em - 9064.7700 * emsq + 5542.21 * eoc
        g521 = -822.71072 + 4568.6173 * em - 8491.4146 * emsq + 5337.524 * eoc
        g532 = -853.66600 + 4690.2500 * em - 8624.7700 * emsq + 5341.4 * eoc
    else:
        g533 = -37995.780 + 161616.52 * em - 229838.20 * emsq + 109377.94 * eoc
        g521 = -51752.104 + 218913.95 * em - 309468.16 * emsq + 146349.42 * eoc
        g532 = -40023.880 + 170470.89 * em - 242699.48 * emsq + 115605.82 * eoc

    sini2 = sinim * sinim
    f220 = 0.75 * (1.0 + 2.0 * cosim + cosisq)
    f221 = 1.5 * sini2
    f321 = 1.875 * sinim * (1.0 - 2.0 * cosim - 3.0 * cosisq)
    f322 = -1.875 * sinim * (1.0 + 2.0 * cosim - 3.0 * cosisq)
    f441 = 35.0 * sini2 * f220
    f442 = 39.3750 * sini2 * sini2
    f522 = (
        9.84375
        * sinim
        * (
            sini2 * (1.0 - 2.0 * cosim - 5.0 * cosisq)
            + 0.33333333 * (-2.0 + 4.0 * cosim + 6.0 * cosisq)
        )
    )
    f523 = sinim * (
        4.92187512 * sini2 * (-2.0 - 4.0 * cosim + 10.0 * cosisq)
        + 6.56250012 * (1.0 + 2.0 * cosim - 3.0 * cosisq)
    )
    f542 = 29.53125 * sinim * (2.0 - 8.0 * cosim + cosisq * (-12.0 + 8.0 * cosim + 10.0 * cosisq))
    f543 = 29.53125 * sinim * (-2.0 - 8.0 * cosim + cosisq * (12.0 + 8.0 * cosim - 10.0 * cosisq))

    nm = c.no_unkozai
    xno2 = nm * nm
    ainv2 = aonv * aonv
    temp1 = 3.0 * xno2 * ainv2
    temp = temp1 * _ROOT22
    d2201 = temp * f220 * g201
    d2211 = temp * f221 * g211
    temp1 = temp1 * aonv
    temp = temp1 * _ROOT32
    d3210 = temp * f321 * g310
    d3222 = temp * f322 * g322
    temp1 = temp1 * aonv
    temp = 2.0 * temp1 * _ROOT44
    d4410 = temp * f441 * g410
    d4422 = temp * f442 * g422
    temp1 = temp1 * aonv
    temp = temp1 * _ROOT52
    d5220 = temp * f522 * g520
    d5232 = temp * f523 * g532
    temp = 2.0 * temp1 * _ROOT54
    d5421 = temp * f542 * g521
    d5433 = temp * f543 * g533

    xlamo = fmod(c.mo + c.nodeo + c.nodeo - theta - theta, TWOPI)
    xfact = c.mdot + ls.dmdt + 2.0 * (c.nodedot + ls.dnodt - _RPTIM) - c.no_unkozai

    return ResonanceTerms(
        d2201=d2201,
        d2211=d2211,
        d3210=d3210,
        d3222=d3222,
        d4410=d4410,
        d4422=d4422,
        d5220=d5220,
        d5232=d5232,
        d5421=d5421,
        d5433=d5433,
        xfact=xfact,
        xlamo=xlamo,
    )


def _synchronous_terms(
    c: SecularCoefficients,
    ls: LunarSolarTerms,
    theta: float,
    aonv: float,
    sinim: float,
    cosim: float,
) -> ResonanceTerms:
    emsq = c.ecco * c.ecco
    g200 = 1.0 + emsq * (-2.5 + 0.8125 * emsq)
    g310 = 1.0 + 2.0 * emsq
    g300 = 1.0 + emsq * (-6.0 + 6.60937 * emsq)
    f220 = 0.75 * (1.0 + cosim) * (1.0 + cosim)
    f311 = 0.9375 * sinim * sinim * (1.0 + 3.0 * cosim) - 0.75 * (1.0 + cosim)
    f330 = 1.0 + cosim
    f330 = 1.875 * f330 * f330 * f330

    nm = c.no_unkozai
    del1 = 3.0 * nm * nm * aonv * aonv
    del2 = 2.0 * del1 * f220 * g200 * _Q22
    del3 = 3.0 * del1 * f330 * g300 * _Q33 * aonv
    del1 = del1 * f311 * g310 * _Q31 * aonv

    xpidot = c.argpdot + c.nodedot
    xlamo = fmod(c.mo + c.nodeo + c.argpo - theta, TWOPI)
    xfact = c.mdot + xpidot - _RPTIM + ls.dmdt + ls.domdt + ls.dnodt - c.no_unkozai

    return ResonanceTerms(del1=del1, del2=del2, del3=del3, xfact=xfact, xlamo=xlamo)


def deep_space_init(
    c: SecularCoefficients,
    epoch: float,
    xke: float,
) -> tuple[LunarSolarTerms, ResonanceTerms, Resonance]:
    """Compute the deep-space terms of an object at its epoch.

    Args:
        c: Secular coefficients from the common initialization.
        epoch: Days since 1949 December 31 00:00 UT.
        xke: Gravity model constant ``sqrt(GM)`` in SGP4 units.

    Returns:
        Tuple ``(lunar_solar, resonance, kind)``.
    """
    solar, lunar, zmos, zmol = _lunar_solar_geometry(
        epoch, c.ecco, c.argpo, c.inclo, c.nodeo, c.no_unkozai
    )
    emsq = c.ecco * c.ecco
    sinim = sin(c.inclo)
    cosim = cos(c.inclo)

    # Secular lunar-solar rates
    ses = solar.s1 * _ZNS * solar.s5
    sis = solar.s2 * _ZNS * (solar.z11 + solar.z13)
    sls = -_ZNS * solar.s3 * (solar.z1 + solar.z3 - 14.0 - 6.0 * emsq)
    sghs = solar.s4 * _ZNS * (solar.z31 + solar.z33 - 6.0)
    shs = -_ZNS * solar.s2 * (solar.z21 + solar.z23)
    if c.inclo < _SMALL_INCLINATION or c.inclo > pi - _SMALL_INCLINATION:
        shs = 0.0
    if sinim != 0.0:
        shs = shs / sinim
    sgs = sghs - cosim * shs

    dedt = ses + lunar.s1 * _ZNL * lunar.s5
    didt = sis + lunar.s2 * _ZNL * (lunar.z11 + lunar.z13)
    dmdt = sls - _ZNL * lunar.s3 * (lunar.z1 + lunar.z3 - 14.0 - 6.0 * emsq)
    sghl = lunar.s4 * _ZNL * (lunar.z31 + lunar.z33 - 6.0)
    shll = -_ZNL * lunar.s2 * (lunar.z21 + lunar.z23)
    if c.inclo < _SMALL_INCLINATION or c.inclo > pi - _SMALL_INCLINATION:
        shll = 0.0
    domdt = sgs + sghl
    dnodt = shs
    if sinim != 0.0:
        domdt = domdt - cosim / sinim * shll
        dnodt = dnodt + shll / sinim

    lunar_solar = LunarSolarTerms(
        # Lunar periodic amplitudes
        ee2=2.0 * lunar.s1 * lunar.s6,
        e3=2.0 * lunar.s1 * lunar.s7,
        xi2=2.0 * lunar.s2 * lunar.z12,
        xi3=2.0 * lunar.s2 * (lunar.z13 - lunar.z11),
        xl2=-2.0 * lunar.s3 * lunar.z2,
        xl3=-2.0 * lunar.s3 * (lunar.z3 - lunar.z1),
        xl4=-2.0 * lunar.s3 * (-21.0 - 9.0 * emsq) * _ZEL,
        xgh2=2.0 * lunar.s4 * lunar.z32,
        xgh3=2.0 * lunar.s4 * (lunar.z33 - lunar.z31),
        xgh4=-18.0 * lunar.s4 * _ZEL,
        xh2=-2.0 * lunar.s2 * lunar.z22,
        xh3=-2.0 * lunar.s2 * (lunar.z23 - lunar.z21),
        # Solar periodic amplitudes
        se2=2.0 * solar.s1 * solar.s6,
        se3=2.0 * solar.s1 * solar.s7,
        si2=2.0 * solar.s2 * solar.z12,
        si3=2.0 * solar.s2 * (solar.z13 - solar.z11),
        sl2=-2.0 * solar.s3 * solar.z2,
        sl3=-2.0 * solar.s3 * (solar.z3 - solar.z1),
        sl4=-2.0 * solar.s3 * (-21.0 - 9.0 * emsq) * _ZES,
        sgh2=2.0 * solar.s4 * solar.z32,
        sgh3=2.0 * solar.s4 * (solar.z33 - solar.z31),
        sgh4=-18.0 * solar.s4 * _ZES,
        sh2=-2.0 * solar.s2 * solar.z22,
        sh3=-2.0 * solar.s2 * (solar.z23 - solar.z21),
        zmol=zmol,
        zmos=zmos,
        dedt=dedt,
        didt=didt,
        dmdt=dmdt,
        dnodt=dnodt,
        domdt=domdt,
    )

    kind = _detect_resonance(c.no_unkozai, c.ecco)
    if kind is Resonance.NONE:
        return lunar_solar, ResonanceTerms(), kind

    theta = fmod(c.gsto, TWOPI)
    aonv = (c.no_unkozai / xke) ** (2.0 / 3.0)
    if kind is Resonance.HALF_DAY:
        resonance = _half_day_terms(c, lunar_solar, theta, aonv, sinim, cosim)
    else:
        resonance = _synchronous_terms(c, lunar_solar, theta, aonv, sinim, cosim)

    logger.debug("Detected %s resonance (n=%.10f rad/min, e=%.7f)", kind.name.lower(), c.no_unkozai, c.ecco)
    return lunar_solar, resonance, kind


# ---------------------------------------------------------------------------
# JAX propagation helpers
# ---------------------------------------------------------------------------


def _synchronous_rates(res: ResonanceTerms, xli: Array, xni: Array) -> tuple[Array, Array, Array]:
    xndt = (
        res.del1 * jnp.sin(xli - _FASX2)
        + res.del2 * jnp.sin(2.0 * (xli - _FASX4))
        + res.del3 * jnp.sin(3.0 * (xli - _FASX6))
    )
    xldot = xni + res.xfact
    xnddt = (
        res.del1 * jnp.cos(xli - _FASX2)
        + 2.0 * res.del2 * jnp.cos(2.0 * (xli - _FASX4))
        + 3.0 * res.del3 * jnp.cos(3.0 * (xli - _FASX6))
    )
    return xndt, xldot, xnddt * xldot


def _half_day_rates(res: ResonanceTerms, xli: Array, xni: Array, xomi: Array) -> tuple[Array, Array, Array]:
    x2omi = xomi + xomi
    x2li = xli + xli
    xndt = (
        res.d2201 * jnp.sin(x2omi + xli - _G22)
        + res.d2211 * jnp.sin(xli - _G22)
        + res.d3210 * jnp.sin(xomi + xli - _G32)
        + res.d3222 * jnp.sin(-xomi + xli - _G32)
        + res.d4410 * jnp.sin(x2omi + x2li - _G44)
        + res.d4422 * jnp.sin(x2li - _G44)
        + res.d5220 * jnp.sin(xomi + xli - _G52)
        + res.d5232 * jnp.sin(-xomi + xli - _G52)
        + res.d5421 * jnp.sin(xomi + x2li - _G54)
        + res.d5433 * jnp.sin(-xomi + x2li - _G54)
    )
    xldot = xni + res.xfact
    xnddt = (
        res.d2201 * jnp.cos(x2omi + xli - _G22)
        + res.d2211 * jnp.cos(xli - _G22)
        + res.d3210 * jnp.cos(xomi + xli - _G32)
        + res.d3222 * jnp.cos(-xomi + xli - _G32)
        + res.d5220 * jnp.cos(xomi + xli - _G52)
        + res.d5232 * jnp.cos(-xomi + xli - _G52)
        + 2.0
        * (
            res.d4410 * jnp.cos(x2omi + x2li - _G44)
            + res.d4422 * jnp.cos(x2li - _G44)
            + res.d5421 * jnp.cos(xomi + x2li - _G54)
            + res.d5433 * jnp.cos(-xomi + x2li - _G54)
        )
    )
    return xndt, xldot, xnddt * xldot


def resonance_update(
    c: SecularCoefficients,
    ls: LunarSolarTerms,
    res: ResonanceTerms,
    kind: Resonance,
    t: ArrayLike,
    *,
    em: ArrayLike,
    argpm: ArrayLike,
    inclm: ArrayLike,
    mm: ArrayLike,
    nodem: ArrayLike,
    nm: ArrayLike,
) -> tuple[Array, Array, Array, Array, Array, Array]:
    """Apply lunar-solar secular rates and integrate resonance effects.

    Resonant orbits are integrated from epoch with a fixed 720 minute step
    (negative for back-propagation) and a second-order interpolation to the
    exact time. The integrator state is the loop carry of a
    ``jax.lax.while_loop``; nothing is kept between calls.

    Args:
        c: Secular coefficients of the object.
        ls: Lunar-solar terms of the object.
        res: Resonance coefficients of the object.
        kind: Resonance condition. Static under JIT.
        t: Time since epoch [min].

    Returns:
        Tuple ``(em, argpm, inclm, mm, nodem, nm)`` of corrected mean elements.
    """
    em = em + ls.dedt * t
    inclm = inclm + ls.didt * t
    argpm = argpm + ls.domdt * t
    nodem = nodem + ls.dnodt * t
    mm = mm + ls.dmdt * t

    if kind is Resonance.NONE:
        return em, argpm, inclm, mm, nodem, nm

    theta = jnp.fmod(c.gsto + t * _RPTIM, TWOPI)
    delt = jnp.where(t > 0.0, RESONANCE_STEP, -RESONANCE_STEP)

    def rates(xli, xni, atime):
        if kind is Resonance.SYNCHRONOUS:
            return _synchronous_rates(res, xli, xni)
        return _half_day_rates(res, xli, xni, c.argpo + c.argpdot * atime)

    def cond(state):
        atime, _, _ = state
        return jnp.abs(t - atime) >= RESONANCE_STEP

    def step(state):
        atime, xni, xli = state
        xndt, xldot, xnddt = rates(xli, xni, atime)
        xli = xli + xldot * delt + xndt * _STEP2
        xni = xni + xndt * delt + xnddt * _STEP2
        return atime + delt, xni, xli

    zero = jnp.zeros_like(t)
    delt = delt.astype(zero.dtype)
    atime, xni, xli = jax.lax.while_loop(cond, step, (zero, zero + c.no_unkozai, zero + res.xlamo))

    ft = t - atime
    xndt, xldot, xnddt = rates(xli, xni, atime)
    nm = xni + xndt * ft + xnddt * ft * ft * 0.5
    xl = xli + xldot * ft + xndt * ft * ft * 0.5

    if kind is Resonance.SYNCHRONOUS:
        mm = xl - nodem - argpm + theta
    else:
        mm = xl - 2.0 * nodem + 2.0 * theta

    dndt = nm - c.no_unkozai
    nm = c.no_unkozai + dndt
    return em, argpm, inclm, mm, nodem, nm


def lunar_solar_periodics(
    ls: LunarSolarTerms,
    t: ArrayLike,
    opsmode: str,
    *,
    ep: ArrayLike,
    inclp: ArrayLike,
    nodep: ArrayLike,
    argpp: ArrayLike,
    mp: ArrayLike,
) -> tuple[Array, Array, Array, Array, Array]:
    """Apply solar and lunar periodic perturbations to the mean elements.

    Periodics are applied directly for inclinations of at least 0.2 rad and
    with the Lyddane modification below that, which avoids dividing by
    ``sin(i)`` near the equator.

    Args:
        ls: Lunar-solar terms of the object.
        t: Time since epoch [min].
        opsmode: ``'a'`` (AFSPC) keeps the node in ``[0, 2pi)`` during the
            Lyddane step; ``'i'`` (improved) does not. Static under JIT.

    Returns:
        Tuple ``(ep, inclp, nodep, argpp, mp)`` of perturbed elements.
    """
    zm = ls.zmos + _ZNS * t
    zf = zm + 2.0 * _ZES * jnp.sin(zm)
    sinzf = jnp.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * jnp.cos(zf)
    ses = ls.se2 * f2 + ls.se3 * f3
    sis = ls.si2 * f2 + ls.si3 * f3
    sls = ls.sl2 * f2 + ls.sl3 * f3 + ls.sl4 * sinzf
    sghs = ls.sgh2 * f2 + ls.sgh3 * f3 + ls.sgh4 * sinzf
    shs = ls.sh2 * f2 + ls.sh3 * f3

    zm = ls.zmol + _ZNL * t
    zf = zm + 2.0 * _ZEL * jnp.sin(zm)
    sinzf = jnp.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * jnp.cos(zf)
    sel = ls.ee2 * f2 + ls.e3 * f3
    sil = ls.xi2 * f2 + ls.xi3 * f3
    sll = ls.xl2 * f2 + ls.xl3 * f3 + ls.xl4 * sinzf
    sghl = ls.xgh2 * f2 + ls.xgh3 * f3 + ls.xgh4 * sinzf
    shll = ls.xh2 * f2 + ls.xh3 * f3

    pe = ses + sel
    pinc = sis + sil
    pl = sls + sll
    pgh = sghs + sghl
    ph = shs + shll

    inclp = inclp + pinc
    ep = ep + pe
    sinip = jnp.sin(inclp)
    cosip = jnp.cos(inclp)

    # Direct application
    ph_direct = ph / sinip
    argpp_direct = argpp + (pgh - cosip * ph_direct)
    nodep_direct = nodep + ph_direct

    # Lyddane modification
    sinop = jnp.sin(nodep)
    cosop = jnp.cos(nodep)
    alfdp = sinip * sinop + (ph * cosop + pinc * cosip * sinop)
    betdp = sinip * cosop + (-ph * sinop + pinc * cosip * cosop)
    xnoh = jnp.fmod(nodep, TWOPI)
    if opsmode == "a":
        xnoh = jnp.where(xnoh < 0.0, xnoh + TWOPI, xnoh)
    xls = mp + argpp + cosip * xnoh
    xls = xls + (pl + pgh - pinc * xnoh * sinip)
    nodep_lyd = jnp.arctan2(alfdp, betdp)
    if opsmode == "a":
        nodep_lyd = jnp.where(nodep_lyd < 0.0, nodep_lyd + TWOPI, nodep_lyd)
    nodep_lyd = jnp.where(
        jnp.abs(xnoh - nodep_lyd) > pi,
        jnp.where(nodep_lyd < xnoh, nodep_lyd + TWOPI, nodep_lyd - TWOPI),
        nodep_lyd,
    )
    argpp_lyd = xls - (mp + pl) - cosip * nodep_lyd

    direct = inclp >= LYDDANE_INCLINATION
    argpp = jnp.where(direct, argpp_direct, argpp_lyd)
    nodep = jnp.where(direct, nodep_direct, nodep_lyd)
    mp = mp + pl

    return ep, inclp, nodep, argpp, mp
