"""
SGP4/SDP4 initialization.

Runs once per element set at Python time, on plain floats. It recovers the
Brouwer mean motion from the published (Kozai) value, classifies the orbit
as near-Earth or deep-space, computes the secular rates and drag
coefficients, and for deep-space orbits the lunar-solar and resonance terms.
The result is an immutable coefficient bundle that owns the compiled
propagation kernel of its branch.
"""

from __future__ import annotations

import logging
from math import cos, fabs, isfinite, pi, sin, sqrt

from sgp4jax._bundle import DeepSpaceBundle, NearEarthBundle
from sgp4jax._deep_space import deep_space_init
from sgp4jax._types import SecularCoefficients
from sgp4jax.constants import (
    COSIO_SINGULAR_DIVISOR,
    DEEP_SPACE_PERIOD,
    DENSITY_Q0_ALTITUDE,
    DENSITY_S_ALTITUDE,
    ECC_DRAG_THRESHOLD,
    JD_SGP4_EPOCH,
    LOW_PERIGEE_ALTITUDE,
    SIMPLIFIED_DRAG_PERIGEE,
    TWOPI,
    VERY_LOW_PERIGEE_ALTITUDE,
    VERY_LOW_PERIGEE_S,
    WGS72,
    EarthGravity,
    resolve_gravity,
)
from sgp4jax.elements import ElementRecord
from sgp4jax.errors import DegenerateOrbitError, SubOrbitalEpochError

logger = logging.getLogger(__name__)

_X2O3 = 2.0 / 3.0
_OPSMODES = ("i", "a")


def _gstime(jdut1: float) -> float:
    """Greenwich mean sidereal time [rad] at a UT1 Julian date (IAU 1982)."""
    tut1 = (jdut1 - 2451545.0) / 36525.0
    temp = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600 + 8640184.812866) * tut1
        + 67310.54841
    )
    temp = (temp * (pi / 180.0) / 240.0) % TWOPI
    if temp < 0.0:
        temp += TWOPI
    return temp


def sidereal_time_at_epoch(epoch: float, opsmode: str) -> float:
    """Greenwich sidereal time at the element epoch.

    Args:
        epoch: Days since 1949 December 31 00:00 UT.
        opsmode: ``'a'`` uses the AFSPC 1970-based series, ``'i'`` the
            IAU 1982 expression.

    Returns:
        Sidereal time [rad] in ``[0, 2pi)``.
    """
    if opsmode == "a":
        ts70 = epoch - 7305.0
        ds70 = (ts70 + 1.0e-8) // 1.0
        tfrac = ts70 - ds70
        c1 = 1.72027916940703639e-2
        thgr70 = 1.7321343856509374
        fk5r = 5.07551419432269442e-15
        c1p2p = c1 + TWOPI
        gsto = (thgr70 + c1 * ds70 + c1p2p * tfrac + ts70 * ts70 * fk5r) % TWOPI
        if gsto < 0.0:
            gsto += TWOPI
        return gsto
    return _gstime(epoch + JD_SGP4_EPOCH)


def _recover_brouwer(no_kozai: float, ecco: float, inclo: float, xke: float, j2: float) -> tuple[float, float]:
    """Remove the Kozai J2 correction from the published mean motion.

    Returns:
        Tuple ``(no_unkozai, ao)``: Brouwer mean motion [rad/min] and the
        corresponding semi-major axis [earth_radii].
    """
    omeosq = 1.0 - ecco * ecco
    rteosq = sqrt(omeosq)
    cosio = cos(inclo)
    cosio2 = cosio * cosio

    ak = (xke / no_kozai) ** _X2O3
    d1 = 0.75 * j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    del_ = d1 / (ak * ak)
    adel = ak * (1.0 - del_ * del_ - del_ * (1.0 / 3.0 + 134.0 * del_ * del_ / 81.0))
    del_ = d1 / (adel * adel)
    no_unkozai = no_kozai / (1.0 + del_)
    return no_unkozai, (xke / no_unkozai) ** _X2O3


def initialize(
    elements: ElementRecord,
    gravity: EarthGravity | str = WGS72,
    opsmode: str = "i",
) -> NearEarthBundle | DeepSpaceBundle:
    """Initialize SGP4/SDP4 for one element set.

    Args:
        elements: Mean elements of the object at its epoch.
        gravity: Earth gravity model, or its name (``'wgs72'``,
            ``'wgs72old'``, ``'wgs84'``). Defaults to WGS-72.
        opsmode: ``'i'`` (improved, default) or ``'a'`` (AFSPC compatible).

    Returns:
        A :class:`NearEarthBundle` if the Brouwer period is below 225
        minutes, else a :class:`DeepSpaceBundle`.

    Raises:
        ValueError: If *opsmode* is not ``'i'`` or ``'a'``.
        KeyError: If *gravity* names an unknown model.
        DegenerateOrbitError: If the recovered mean motion or semi-major
            axis is not positive and finite.
        SubOrbitalEpochError: If the perigee at epoch lies below the
            Earth's surface.
    """
    if opsmode not in _OPSMODES:
        raise ValueError(f"Unknown opsmode {opsmode!r}. Must be one of: 'i', 'a'")
    gravity = resolve_gravity(gravity)

    satnum = elements.satnum
    radius = gravity.radiusearthkm
    j2 = gravity.j2
    j3oj2 = gravity.j3oj2
    ecco = elements.eccentricity
    inclo = elements.inclination
    argpo = elements.argp
    mo = elements.mean_anomaly
    bstar = elements.bstar
    epoch = elements.epoch

    omeosq = 1.0 - ecco * ecco
    if not omeosq > 0.0:
        raise DegenerateOrbitError("1 - e^2 is not positive", satnum=satnum, eccentricity=ecco)

    no_unkozai, ao = _recover_brouwer(elements.no_kozai, ecco, inclo, gravity.xke, j2)
    if not (isfinite(no_unkozai) and no_unkozai > 0.0 and isfinite(ao) and ao > 0.0):
        logger.warning("Rejected elements of %s: mean motion %r, semi-major axis %r", satnum, no_unkozai, ao)
        raise DegenerateOrbitError(
            "recovered mean motion or semi-major axis is not positive",
            satnum=satnum,
            no_unkozai=no_unkozai,
            semi_major_axis=ao,
        )

    rp = ao * (1.0 - ecco)
    perigee = (rp - 1.0) * radius
    if rp < 1.0:
        logger.warning("Rejected elements of %s: perigee %.3f km below the surface at epoch", satnum, perigee)
        raise SubOrbitalEpochError(
            "perigee at epoch lies below the Earth's surface",
            satnum=satnum,
            perigee_km=perigee,
        )

    rteosq = sqrt(omeosq)
    cosio = cos(inclo)
    sinio = sin(inclo)
    cosio2 = cosio * cosio
    cosio4 = cosio2 * cosio2
    po = ao * omeosq
    posq = po * po
    con42 = 1.0 - 5.0 * cosio2
    con41 = -con42 - cosio2 - cosio2
    x1mth2 = 1.0 - cosio2
    x7thm1 = 7.0 * cosio2 - 1.0
    gsto = sidereal_time_at_epoch(epoch, opsmode)

    deep_space = TWOPI / no_unkozai >= DEEP_SPACE_PERIOD
    simplified = deep_space or rp < SIMPLIFIED_DRAG_PERIGEE / radius + 1.0

    # Atmospheric density parameters, lowered for perigees under 156 km
    sfour = DENSITY_S_ALTITUDE / radius + 1.0
    qzms24 = ((DENSITY_Q0_ALTITUDE - DENSITY_S_ALTITUDE) / radius) ** 4
    if perigee < LOW_PERIGEE_ALTITUDE:
        sfour = perigee - DENSITY_S_ALTITUDE
        if perigee < VERY_LOW_PERIGEE_ALTITUDE:
            sfour = VERY_LOW_PERIGEE_S
        qzms24 = ((DENSITY_Q0_ALTITUDE - sfour) / radius) ** 4
        sfour = sfour / radius + 1.0

    # Drag coefficients
    pinvsq = 1.0 / posq
    tsi = 1.0 / (ao - sfour)
    eta = ao * ecco * tsi
    etasq = eta * eta
    eeta = ecco * eta
    psisq = fabs(1.0 - etasq)
    coef = qzms24 * tsi**4
    coef1 = coef / psisq**3.5
    cc2 = (
        coef1
        * no_unkozai
        * (
            ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
            + 0.375 * j2 * tsi / psisq * con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
        )
    )
    cc1 = bstar * cc2
    cc3 = 0.0
    if ecco > ECC_DRAG_THRESHOLD:
        cc3 = -2.0 * coef * tsi * j3oj2 * no_unkozai * sinio / ecco
    cc4 = (
        2.0
        * no_unkozai
        * coef1
        * ao
        * omeosq
        * (
            eta * (2.0 + 0.5 * etasq)
            + ecco * (0.5 + 2.0 * etasq)
            - j2
            * tsi
            / (ao * psisq)
            * (
                -3.0 * con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
                + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * cos(2.0 * argpo)
            )
        )
    )
    cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    # Secular J2/J4 rates
    temp1 = 1.5 * j2 * pinvsq * no_unkozai
    temp2 = 0.5 * temp1 * j2 * pinvsq
    temp3 = -0.46875 * gravity.j4 * pinvsq * pinvsq * no_unkozai
    mdot = (
        no_unkozai
        + 0.5 * temp1 * rteosq * con41
        + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4)
    )
    argpdot = (
        -0.5 * temp1 * con42
        + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
        + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4)
    )
    xhdot1 = -temp1 * cosio
    nodedot = xhdot1 + (0.5 * temp2 * (4.0 - 19.0 * cosio2) + 2.0 * temp3 * (3.0 - 7.0 * cosio2)) * cosio

    omgcof = bstar * cc3 * cos(argpo)
    xmcof = 0.0
    if ecco > ECC_DRAG_THRESHOLD:
        xmcof = -_X2O3 * coef * bstar / eeta
    nodecf = 3.5 * omeosq * xhdot1 * cc1
    t2cof = 1.5 * cc1

    # 1 + cos(i) vanishes for retrograde equatorial orbits
    denom = 1.0 + cosio
    if fabs(denom) <= COSIO_SINGULAR_DIVISOR:
        denom = COSIO_SINGULAR_DIVISOR
    xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / denom
    aycof = -0.5 * j3oj2 * sinio
    delmotemp = 1.0 + eta * cos(mo)
    delmo = delmotemp * delmotemp * delmotemp

    d2 = d3 = d4 = t3cof = t4cof = t5cof = 0.0
    if not simplified:
        cc1sq = cc1 * cc1
        d2 = 4.0 * ao * tsi * cc1sq
        temp = d2 * tsi * cc1 / 3.0
        d3 = (17.0 * ao + sfour) * temp
        d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * cc1
        t3cof = d2 + 2.0 * cc1sq
        t4cof = 0.25 * (3.0 * d3 + cc1 * (12.0 * d2 + 10.0 * cc1sq))
        t5cof = 0.2 * (3.0 * d4 + 12.0 * cc1 * d3 + 6.0 * d2 * d2 + 15.0 * cc1sq * (2.0 * d2 + cc1sq))

    coefficients = SecularCoefficients(
        ecco=ecco,
        inclo=inclo,
        nodeo=elements.raan,
        argpo=argpo,
        mo=mo,
        bstar=bstar,
        no_unkozai=no_unkozai,
        gsto=gsto,
        con41=con41,
        x1mth2=x1mth2,
        x7thm1=x7thm1,
        mdot=mdot,
        argpdot=argpdot,
        nodedot=nodedot,
        nodecf=nodecf,
        cc1=cc1,
        cc4=cc4,
        cc5=cc5,
        d2=d2,
        d3=d3,
        d4=d4,
        t2cof=t2cof,
        t3cof=t3cof,
        t4cof=t4cof,
        t5cof=t5cof,
        delmo=delmo,
        eta=eta,
        omgcof=omgcof,
        sinmao=sin(mo),
        xmcof=xmcof,
        xlcof=xlcof,
        aycof=aycof,
    )

    if not deep_space:
        logger.debug(
            "Initialized %s as near-Earth (period %.3f min, perigee %.3f km, simplified=%s)",
            satnum,
            TWOPI / no_unkozai,
            perigee,
            simplified,
        )
        return NearEarthBundle(
            elements=elements,
            gravity=gravity,
            opsmode=opsmode,
            coefficients=coefficients,
            simplified=simplified,
        )

    lunar_solar, resonance, kind = deep_space_init(coefficients, epoch, gravity.xke)
    logger.debug(
        "Initialized %s as deep-space (period %.3f min, resonance %s)",
        satnum,
        TWOPI / no_unkozai,
        kind.name,
    )
    return DeepSpaceBundle(
        elements=elements,
        gravity=gravity,
        opsmode=opsmode,
        coefficients=coefficients,
        lunar_solar=lunar_solar,
        resonance=resonance,
        resonance_kind=kind,
    )
